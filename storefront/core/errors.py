from __future__ import annotations
from typing import Dict, Optional


GENERIC_RETRY_MESSAGE = "Unable to reach the store right now. Please check your connection and try again."


class StorefrontError(Exception):
    pass


class ValidationFailed(StorefrontError):
    """
    Client-side validation error raised before any network call.
    `errors` maps a form field (or "general") to a user-facing message.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class ServiceUnavailable(StorefrontError):
    """A backend could not be reached (no HTTP response at all)."""

    def __init__(self, service: str, reason: str = ""):
        self.service = service
        self.reason = reason
        super().__init__(f"{service} service unavailable: {reason}" if reason else f"{service} service unavailable")

    @property
    def message(self) -> str:
        return GENERIC_RETRY_MESSAGE


class ServiceError(StorefrontError):
    """A backend answered with a non-2xx status."""

    def __init__(self, service: str, status_code: int, detail: str = ""):
        self.service = service
        self.status_code = int(status_code)
        self.detail = detail or ""
        super().__init__(f"{service} service returned {self.status_code}: {self.detail}")


class BadRequest(ServiceError):
    pass


class Unauthorized(ServiceError):
    pass


class NotFound(ServiceError):
    pass


class Conflict(ServiceError):
    pass


_STATUS_ERRORS = {
    400: BadRequest,
    401: Unauthorized,
    404: NotFound,
    409: Conflict,
}


def error_for_status(service: str, status_code: int, detail: str = "") -> ServiceError:
    cls = _STATUS_ERRORS.get(int(status_code), ServiceError)
    return cls(service, status_code, detail)


class AuthenticationRequired(StorefrontError):
    """
    The current view needs a signed-in user. Handled application-wide by
    redirecting to the sign-in entry point.
    """

    def __init__(self, redirect_to: str, reason: Optional[str] = None):
        self.redirect_to = redirect_to
        self.reason = reason
        super().__init__(reason or "Authentication required")
