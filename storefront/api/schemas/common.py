from typing import Dict, Optional
from pydantic import BaseModel

from storefront.services.results import ActionResult


class ActionOut(BaseModel):
    ok: bool
    message: str = ""
    errors: Dict[str, str] = {}
    redirect_to: Optional[str] = None

    @classmethod
    def from_result(cls, result: ActionResult) -> "ActionOut":
        return cls(ok=result.ok, message=result.message, errors=dict(result.errors), redirect_to=result.redirect_to)
