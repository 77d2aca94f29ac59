from typing import List, Optional
from pydantic import BaseModel, Field


class CartItemIn(BaseModel):
    """Line item as posted to the cart service (add-or-increment)."""
    product_id: str
    name: Optional[str] = ""
    price: float = Field(0.0, ge=0.0)
    quantity: int = Field(1, ge=1)


class QuantityUpdate(BaseModel):
    # zero or negative means "remove the line"
    quantity: int


class CartLineOut(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    line_total: float
    display_price: str
    display_line_total: str


class CartOut(BaseModel):
    items: List[CartLineOut] = []
    count: int = 0
    total: float = 0.0
    display_total: str = "$0.00"
    is_empty: bool = True
    message: Optional[str] = None
