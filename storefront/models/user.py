# storefront/models/user.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class Session:
    """
    Client-held proof of authentication plus identity fields cached at sign-in.
    """
    token: str
    user_id: Optional[str] = None
    username: Optional[str] = None

    @classmethod
    def from_login(cls, d: Dict[str, Any]) -> "Session":
        if not d or not d.get("token"):
            raise ValueError("Login response carries no token")
        return cls(
            token=str(d["token"]),
            user_id=str(d.get("user_id") or "") or None,
            username=d.get("username") or None,
        )


@dataclass
class Profile:
    id: Optional[str] = None
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Profile":
        if d is None:
            raise ValueError("Cannot construct Profile from None")
        return cls(
            id=str(d.get("id") or "") or None,
            username=str(d.get("username") or ""),
            email=str(d.get("email") or ""),
            first_name=str(d.get("first_name") or ""),
            last_name=str(d.get("last_name") or ""),
            created_at=d.get("created_at") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
