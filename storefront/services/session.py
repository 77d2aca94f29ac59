"""
Session lifecycle: sign-in creates the session, sign-out or any 401 from a
protected endpoint destroys it.

The session lives in persisted storage shared by every view. Protected calls
go through `SessionGuard.call`, which supplies the token and turns a 401 into
"clear the session, redirect to sign-in" no matter which view made the call.
"""
import logging
from typing import Callable, Optional, TypeVar

from storefront.clients.auth import AuthClient
from storefront.core.errors import AuthenticationRequired, StorefrontError, Unauthorized
from storefront.models.user import Session
from storefront.storage import LocalStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOKEN_KEY = "authToken"
USER_ID_KEY = "userId"
USERNAME_KEY = "username"
SESSION_KEYS = (TOKEN_KEY, USER_ID_KEY, USERNAME_KEY)


class SessionStore:
    """Reads and writes the session fields in persisted storage."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def load(self) -> Optional[Session]:
        values = self.storage.items()
        token = values.get(TOKEN_KEY)
        if not token:
            return None
        return Session(
            token=token,
            user_id=values.get(USER_ID_KEY) or None,
            username=values.get(USERNAME_KEY) or None,
        )

    def save(self, session: Session) -> None:
        self.storage.set_items({
            TOKEN_KEY: session.token,
            USER_ID_KEY: session.user_id or "",
            USERNAME_KEY: session.username or "",
        })

    def clear(self) -> None:
        self.storage.remove_items(SESSION_KEYS)


class SessionGuard:
    def __init__(self, store: SessionStore, auth: AuthClient, signin_path: str = "/auth/signin"):
        self.store = store
        self.auth = auth
        self.signin_path = signin_path

    def current(self) -> Optional[Session]:
        return self.store.load()

    @property
    def username(self) -> Optional[str]:
        session = self.current()
        return session.username if session else None

    def require(self) -> Session:
        session = self.current()
        if session is None:
            raise AuthenticationRequired(self.signin_path, "Not signed in")
        return session

    def sign_in(self, username: str, password: str, remember_me: bool = False) -> Session:
        session = self.auth.login(username, password, remember_me=remember_me)
        self.store.save(session)
        logger.info("Signed in as %s", session.username or session.user_id)
        return session

    def sign_out(self) -> None:
        session = self.current()
        if session is not None:
            try:
                self.auth.logout(session.token)
            except StorefrontError as exc:
                # the local session goes away regardless of what the server says
                logger.info("Server-side logout failed: %s", exc)
        self.store.clear()

    def expire(self) -> AuthenticationRequired:
        """Drop the stored session and return the redirect to raise."""
        self.store.clear()
        return AuthenticationRequired(self.signin_path, "Session expired")

    def call(self, fn: Callable[[str], T]) -> T:
        """
        Run a protected call with the current token. Missing session or a 401
        answer raises AuthenticationRequired after clearing the session.
        """
        session = self.require()
        try:
            return fn(session.token)
        except Unauthorized:
            logger.info("Session for %s rejected by auth service; signing out", session.username or session.user_id)
            raise self.expire()
