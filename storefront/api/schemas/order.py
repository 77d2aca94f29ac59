from typing import List, Optional
from pydantic import BaseModel, Field


class OrderLine(BaseModel):
    product_id: str = Field(..., description="Product identifier")
    name: Optional[str] = Field("", description="Product name snapshot")
    price: float = Field(..., ge=0.0, description="Unit price at time of ordering")
    quantity: int = Field(..., ge=1, description="Quantity ordered")


class OrderCreate(BaseModel):
    """Body of POST /api/orders on the order service."""
    user_id: str
    items: List[OrderLine]
    total: float = Field(..., ge=0.0)


class CheckoutOut(BaseModel):
    ok: bool
    message: str
    order_id: Optional[str] = None
    cart_cleared: bool = False
    redirect_to: Optional[str] = None
