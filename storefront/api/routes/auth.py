# storefront/api/routes/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse

from storefront.api.deps import get_account_service, get_session_guard
from storefront.api.schemas.common import ActionOut
from storefront.api.schemas.user import (
    ForgotPasswordRequest,
    ResetPasswordForm,
    SessionOut,
    SignInRequest,
    SignUpRequest,
)
from storefront.core.errors import BadRequest, ServiceError, Unauthorized
from storefront.services.accounts import MISSING_TOKEN_MESSAGE, AccountService
from storefront.services.results import ActionResult
from storefront.services.session import SessionGuard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _failure(result: ActionResult, code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(status_code=code, content=ActionOut.from_result(result).model_dump())


@router.get("/signin", response_model=SessionOut)
def signin_page(guard: SessionGuard = Depends(get_session_guard)):
    """Sign-in entry point; every forced logout lands here."""
    session = guard.current()
    if session is None:
        return SessionOut()
    return SessionOut(user_id=session.user_id, username=session.username)


@router.get("/session", response_model=SessionOut)
def current_session(guard: SessionGuard = Depends(get_session_guard)):
    return signin_page(guard)


@router.post("/signin", response_model=SessionOut)
def signin(payload: SignInRequest, guard: SessionGuard = Depends(get_session_guard)):
    try:
        session = guard.sign_in(payload.username, payload.password, remember_me=payload.remember_me)
    except Unauthorized:
        logger.info("Sign-in rejected for %s", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    except BadRequest as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.detail or "Invalid request")
    except ServiceError as exc:
        if exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
            raise HTTPException(status_code=exc.status_code, detail=exc.detail or "Too many login attempts")
        raise
    except ValueError as exc:
        # the auth service answered 2xx without a usable session
        logger.error("Sign-in for %s returned no session: %s", payload.username, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Sign-in failed. Please try again.")
    return SessionOut(user_id=session.user_id, username=session.username)


@router.post("/signup", response_model=ActionOut, status_code=status.HTTP_201_CREATED)
def signup(payload: SignUpRequest, accounts: AccountService = Depends(get_account_service)):
    """Create an account. Form errors are rejected with 422 before the auth service is called."""
    result = accounts.sign_up(payload.username, payload.email, payload.password, payload.confirm_password)
    if not result.ok:
        code = status.HTTP_409_CONFLICT if "already exists" in result.message else status.HTTP_400_BAD_REQUEST
        return _failure(result, code)
    return ActionOut.from_result(result)


@router.post("/signout")
def signout(guard: SessionGuard = Depends(get_session_guard)):
    guard.sign_out()
    return RedirectResponse(guard.signin_path, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/forgot-password", response_model=ActionOut)
def forgot_password(payload: ForgotPasswordRequest, accounts: AccountService = Depends(get_account_service)):
    result = accounts.request_password_reset(payload.email)
    if not result.ok:
        return _failure(result)
    return ActionOut.from_result(result)


@router.get("/reset-password", response_model=ActionOut)
def reset_password_form(token: Optional[str] = Query(None)):
    """Reset form state for a link; a link without a token cannot be used."""
    if not token:
        return ActionOut(ok=False, message=MISSING_TOKEN_MESSAGE, errors={"general": MISSING_TOKEN_MESSAGE})
    return ActionOut(ok=True)


@router.post("/reset-password", response_model=ActionOut)
def reset_password(payload: ResetPasswordForm, accounts: AccountService = Depends(get_account_service)):
    """
    Submit token and new password. On success the confirmation is returned
    with a Refresh header that sends the browser to sign-in after a fixed delay.
    """
    result = accounts.reset_password(payload.token, payload.password, payload.confirm_password)
    if not result.ok:
        return _failure(result)
    return JSONResponse(
        content=ActionOut.from_result(result).model_dump(),
        headers={"Refresh": f"{result.redirect_after}; url={result.redirect_to}"},
    )
