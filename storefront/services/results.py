from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ActionResult:
    """
    Outcome of a user action, always renderable: a flag, a user-facing
    message, optional field-keyed errors and an optional navigation target.
    """
    ok: bool
    message: str = ""
    errors: Dict[str, str] = field(default_factory=dict)
    redirect_to: Optional[str] = None
    redirect_after: Optional[int] = None  # seconds; None means immediately
    data: Any = None

    @classmethod
    def success(cls, message: str = "", **kwargs) -> "ActionResult":
        return cls(ok=True, message=message, **kwargs)

    @classmethod
    def failure(cls, message: str = "", **kwargs) -> "ActionResult":
        return cls(ok=False, message=message, **kwargs)
