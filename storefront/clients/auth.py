from typing import Any, Dict

from storefront.clients.base import ServiceClient
from storefront.models.user import Profile, Session


class AuthClient(ServiceClient):
    """
    Auth service. Protected endpoints take the raw session token in the
    Authorization header (no "Bearer" prefix).
    """
    service = "auth"

    @staticmethod
    def _auth(token: str) -> Dict[str, str]:
        return {"Authorization": token}

    def login(self, username: str, password: str, remember_me: bool = False) -> Session:
        data = self._request(
            "POST",
            "/api/auth/login",
            json={"username": username, "password": password, "remember_me": bool(remember_me)},
        )
        return Session.from_login(data or {})

    def signup(self, username: str, email: str, password: str) -> Dict[str, Any]:
        data = self._request(
            "POST",
            "/api/auth/signup",
            json={"username": username, "email": email, "password": password},
        )
        return data if isinstance(data, dict) else {}

    def logout(self, token: str) -> None:
        self._request("POST", "/api/auth/logout", headers=self._auth(token))

    def forgot_password(self, email: str) -> str:
        data = self._request("POST", "/api/auth/forgot-password", json={"email": email}) or {}
        return str(data.get("message") or "") if isinstance(data, dict) else ""

    def reset_password(self, token: str, password: str) -> str:
        data = self._request("POST", "/api/auth/reset-password", json={"token": token, "password": password}) or {}
        return str(data.get("message") or "") if isinstance(data, dict) else ""

    def get_profile(self, token: str) -> Profile:
        data = self._request("GET", "/api/auth/profile", headers=self._auth(token))
        return Profile.from_dict(data or {})

    def update_profile(self, token: str, email: str = "", first_name: str = "", last_name: str = "") -> str:
        data = self._request(
            "PUT",
            "/api/auth/profile",
            json={"email": email, "first_name": first_name, "last_name": last_name},
            headers=self._auth(token),
        ) or {}
        return str(data.get("message") or "") if isinstance(data, dict) else ""
