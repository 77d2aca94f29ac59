"""
Account flows that do not need a session: sign-up, forgot-password and the
token-bearing password reset.

Form validation happens here before any network call; a form that fails
validation never reaches the auth service.
"""
import logging
import re
from typing import Dict, Optional

from storefront.clients.auth import AuthClient
from storefront.core.errors import (
    GENERIC_RETRY_MESSAGE,
    BadRequest,
    Conflict,
    ServiceUnavailable,
    StorefrontError,
    ValidationFailed,
)
from storefront.services.results import ActionResult

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

MISSING_TOKEN_MESSAGE = "Invalid or missing reset token"
INVALID_TOKEN_MESSAGE = "Invalid or expired reset token"
RESET_FAILED_MESSAGE = "An error occurred. Please try again."
RESET_SUCCESS_MESSAGE = (
    "Your password has been reset successfully. "
    "You will be redirected to the sign in page in a few seconds."
)
FORGOT_PASSWORD_MESSAGE = "If the email exists, a password reset link has been sent"
ACCOUNT_EXISTS_MESSAGE = "Username or email already exists"
SIGNUP_SUCCESS_MESSAGE = "Account created. Please sign in."


def validate_password(password: str, confirm_password: Optional[str] = None) -> Dict[str, str]:
    """
    Return field-keyed errors for a new password; empty when it is acceptable.
    Rules: at least 8 characters with upper case, lower case, a digit and a
    special character; the confirmation (when given) must match.
    """
    errors: Dict[str, str] = {}
    password = password or ""

    if len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"

    has_upper = re.search(r"[A-Z]", password) is not None
    has_lower = re.search(r"[a-z]", password) is not None
    has_number = re.search(r"[0-9]", password) is not None
    has_special = SPECIAL_CHARACTERS.search(password) is not None
    if not (has_upper and has_lower and has_number and has_special):
        errors["password"] = "Password must contain uppercase, lowercase, number, and special character"

    if confirm_password is not None and password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    return errors


class AccountService:
    def __init__(self, auth: AuthClient, signin_path: str = "/auth/signin", redirect_delay: int = 3):
        self.auth = auth
        self.signin_path = signin_path
        self.redirect_delay = int(redirect_delay)

    def reset_password(self, token: Optional[str], password: str, confirm_password: str) -> ActionResult:
        if not token:
            return ActionResult.failure(MISSING_TOKEN_MESSAGE, errors={"general": MISSING_TOKEN_MESSAGE})

        errors = validate_password(password, confirm_password)
        if errors:
            return ActionResult.failure(next(iter(errors.values())), errors=errors)

        try:
            self.auth.reset_password(token, password)
        except BadRequest as exc:
            message = exc.detail or INVALID_TOKEN_MESSAGE
            return ActionResult.failure(message, errors={"general": message})
        except StorefrontError as exc:
            logger.error("Error resetting password: %s", exc)
            return ActionResult.failure(RESET_FAILED_MESSAGE, errors={"general": RESET_FAILED_MESSAGE})

        # confirmation state, then a fixed-delay hop to sign-in
        return ActionResult.success(
            RESET_SUCCESS_MESSAGE,
            redirect_to=self.signin_path,
            redirect_after=self.redirect_delay,
        )

    def request_password_reset(self, email: str) -> ActionResult:
        email = (email or "").strip()
        if not email:
            raise ValidationFailed({"email": "Email is required"})
        try:
            message = self.auth.forgot_password(email)
        except ServiceUnavailable:
            return ActionResult.failure(GENERIC_RETRY_MESSAGE, errors={"general": GENERIC_RETRY_MESSAGE})
        except StorefrontError as exc:
            logger.error("Error requesting password reset: %s", exc)
            return ActionResult.failure(RESET_FAILED_MESSAGE, errors={"general": RESET_FAILED_MESSAGE})
        return ActionResult.success(message or FORGOT_PASSWORD_MESSAGE)

    def sign_up(self, username: str, email: str, password: str, confirm_password: Optional[str] = None) -> ActionResult:
        errors = validate_password(password, confirm_password)
        if not (username or "").strip():
            errors["username"] = "Username is required"
        if "@" not in (email or ""):
            errors["email"] = "Please enter a valid email address"
        if errors:
            raise ValidationFailed(errors)

        try:
            self.auth.signup(username.strip(), email.strip(), password)
        except Conflict as exc:
            message = exc.detail or ACCOUNT_EXISTS_MESSAGE
            field = "email" if "email" in message.lower() else "username"
            return ActionResult.failure(message, errors={field: message})
        except BadRequest as exc:
            message = exc.detail or RESET_FAILED_MESSAGE
            return ActionResult.failure(message, errors={"general": message})
        except ServiceUnavailable:
            return ActionResult.failure(GENERIC_RETRY_MESSAGE, errors={"general": GENERIC_RETRY_MESSAGE})
        except StorefrontError as exc:
            logger.error("Error signing up %s: %s", username, exc)
            return ActionResult.failure(RESET_FAILED_MESSAGE, errors={"general": RESET_FAILED_MESSAGE})
        return ActionResult.success(SIGNUP_SUCCESS_MESSAGE, redirect_to=self.signin_path)
