import logging

from storefront.clients.auth import AuthClient
from storefront.core.errors import AuthenticationRequired, Conflict, ServiceUnavailable, StorefrontError
from storefront.models.user import Profile
from storefront.services.results import ActionResult
from storefront.services.session import SessionGuard

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load profile"
UPDATE_FAILED_MESSAGE = "Failed to update profile"
EMAIL_IN_USE_MESSAGE = "Email already in use"
UPDATED_MESSAGE = "Profile updated successfully"


class ProfileService:
    """
    Profile view and edit. Both calls are protected: a 401 is handled by the
    session guard (session cleared, redirect raised) before anything here runs.
    """

    def __init__(self, guard: SessionGuard, auth: AuthClient):
        self.guard = guard
        self.auth = auth

    def load(self) -> ActionResult:
        try:
            profile = self.guard.call(self.auth.get_profile)
        except AuthenticationRequired:
            raise
        except ServiceUnavailable as exc:
            return ActionResult.failure(exc.message)
        except StorefrontError as exc:
            logger.error("Error loading profile: %s", exc)
            return ActionResult.failure(LOAD_FAILED_MESSAGE)
        return ActionResult.success(data=profile)

    def update(self, email: str = "", first_name: str = "", last_name: str = "") -> ActionResult:
        try:
            self.guard.call(
                lambda token: self.auth.update_profile(token, email=email, first_name=first_name, last_name=last_name)
            )
        except AuthenticationRequired:
            raise
        except Conflict:
            return ActionResult.failure(EMAIL_IN_USE_MESSAGE, errors={"email": EMAIL_IN_USE_MESSAGE})
        except ServiceUnavailable as exc:
            return ActionResult.failure(exc.message)
        except StorefrontError as exc:
            logger.error("Error updating profile: %s", exc)
            return ActionResult.failure(UPDATE_FAILED_MESSAGE)

        # show what the server now holds
        reloaded = self.load()
        profile = reloaded.data if reloaded.ok else Profile(email=email, first_name=first_name, last_name=last_name)
        return ActionResult.success(UPDATED_MESSAGE, data=profile)
