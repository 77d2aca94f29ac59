# storefront/models/cart.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional


@dataclass
class CartItem:
    product_id: str
    name: str = ""
    unit_price: float = 0.0
    quantity: int = 1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartItem":
        if d is None:
            raise ValueError("Cannot construct CartItem from None")
        product_id = str(d.get("product_id") or d.get("id") or "")
        name = d.get("name") or d.get("title") or ""
        try:
            unit_price = float(d.get("unit_price") or d.get("price") or 0.0)
        except (TypeError, ValueError):
            unit_price = 0.0
        try:
            quantity = int(float(d.get("quantity") or d.get("qty") or 1))
        except (TypeError, ValueError):
            quantity = 1
        return cls(product_id=product_id, name=str(name), unit_price=unit_price, quantity=quantity)

    def to_dict(self) -> Dict[str, Any]:
        # wire format used by the cart and order services
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": float(self.unit_price),
            "quantity": int(self.quantity),
        }

    def line_total(self) -> float:
        return round(float(self.unit_price) * int(self.quantity), 2)


def items_total(items: List[CartItem]) -> float:
    """Sum of unit_price x quantity, rounded to cents."""
    return round(sum(float(it.unit_price) * int(it.quantity) for it in items), 2)


@dataclass
class Cart:
    """
    Client-side projection of the server cart. Items are keyed by product_id;
    iteration follows insertion order (the order the service returned them).
    The storefront never edits this object; it is replaced on every reload.
    """
    user_id: Optional[str] = None
    items: Dict[str, CartItem] = field(default_factory=dict)
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "Cart":
        # the cart service may answer null for a user with no cart yet
        d = d or {}
        items: Dict[str, CartItem] = {}
        for raw in d.get("items") or []:
            if isinstance(raw, dict):
                item = CartItem.from_dict(raw)
                items[item.product_id] = item
        return cls(
            user_id=d.get("user_id") or None,
            items=items,
            updated_at=d.get("updated_at") or None,
        )

    @classmethod
    def empty(cls, user_id: Optional[str] = None) -> "Cart":
        return cls(user_id=user_id)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def lines(self) -> List[CartItem]:
        return list(self.items.values())

    def get(self, product_id: str) -> Optional[CartItem]:
        return self.items.get(str(product_id))

    def total(self) -> float:
        return items_total(self.lines())

    def count_items(self) -> int:
        return int(sum(it.quantity for it in self.items.values()))
