# storefront/models/order.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from datetime import datetime
import itertools

from storefront.models.cart import CartItem

ORDER_STATUSES = ("pending", "processing", "completed", "cancelled")


@dataclass
class Order:
    """
    Order record as returned by the order service. Immutable from the
    storefront's point of view; `total` is the server's figure and is shown
    as-is rather than recomputed.
    """
    id: Optional[str] = None
    user_id: Optional[str] = None
    items: List[CartItem] = field(default_factory=list)
    total: float = 0.0
    status: str = "pending"
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Order":
        if d is None:
            raise ValueError("Cannot construct Order from None")
        items = [CartItem.from_dict(it) for it in (d.get("items") or []) if isinstance(it, dict)]

        try:
            total = float(d.get("total") or d.get("total_amount") or 0.0)
        except (TypeError, ValueError):
            total = 0.0

        created_at_raw = d.get("created_at") or d.get("created")
        created_at = None
        if created_at_raw:
            if isinstance(created_at_raw, datetime):
                created_at = created_at_raw
            else:
                # Go encodes time.Time as RFC 3339, possibly with a trailing Z
                # and nanosecond precision
                raw = str(created_at_raw).replace("Z", "+00:00")
                if "." in raw:
                    head, _, tail = raw.partition(".")
                    # only the leading run of digits; the rest is the offset
                    digits = "".join(itertools.takewhile(str.isdigit, tail))
                    raw = f"{head}.{digits[:6].ljust(6, '0')}{tail[len(digits):]}"
                try:
                    created_at = datetime.fromisoformat(raw)
                except ValueError:
                    created_at = None

        return cls(
            id=str(d.get("id") or d.get("order_id") or "") or None,
            user_id=d.get("user_id") or None,
            items=items,
            total=total,
            # unknown statuses are kept verbatim
            status=str(d.get("status") or "pending"),
            created_at=created_at,
        )

    @property
    def is_known_status(self) -> bool:
        return self.status.lower() in ORDER_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "items": [it.to_dict() for it in self.items],
            "total": float(self.total),
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
