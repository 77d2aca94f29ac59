from typing import Dict, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront.api.deps import get_profile_service, require_session
from storefront.api.schemas.user import ProfileUpdate
from storefront.services.profile import ProfileService
from storefront.services.results import ActionResult

router = APIRouter(prefix="/profile", tags=["profile"], dependencies=[Depends(require_session)])


class ProfileOut(BaseModel):
    ok: bool
    message: str = ""
    errors: Dict[str, str] = {}
    profile: Optional[Dict[str, Optional[str]]] = None


def _profile_response(result: ActionResult, failure_code: int = status.HTTP_502_BAD_GATEWAY):
    body = ProfileOut(
        ok=result.ok,
        message=result.message,
        errors=dict(result.errors),
        profile=result.data.to_dict() if result.data is not None else None,
    )
    if result.ok:
        return body
    return JSONResponse(status_code=failure_code, content=body.model_dump())


@router.get("", response_model=ProfileOut)
def view_profile(profiles: ProfileService = Depends(get_profile_service)):
    """Protected: no session, or a 401 from the auth service, redirects to sign-in."""
    return _profile_response(profiles.load())


@router.put("", response_model=ProfileOut)
def update_profile(payload: ProfileUpdate, profiles: ProfileService = Depends(get_profile_service)):
    result = profiles.update(email=payload.email, first_name=payload.first_name, last_name=payload.last_name)
    code = status.HTTP_409_CONFLICT if "email" in result.errors else status.HTTP_502_BAD_GATEWAY
    return _profile_response(result, failure_code=code)
