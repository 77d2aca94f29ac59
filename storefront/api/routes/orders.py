import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from storefront.api.deps import get_cart_controller, get_services
from storefront.clients.registry import ServiceRegistry
from storefront.core.errors import BadRequest, NotFound, StorefrontError
from storefront.models.order import Order
from storefront.services.cart_controller import CartController
from storefront.utils.formatters import money, order_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


class OrderLineOut(BaseModel):
    product_id: str
    name: str
    price: float
    quantity: int
    display_line_total: str


class OrderOut(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    status: str
    total: float
    display_total: str
    created_at: Optional[str] = None
    display_date: str = ""
    items: List[OrderLineOut] = []


def _order_out(order: Order) -> OrderOut:
    # the server total is authoritative for orders; it is not recomputed
    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        status=order.status,
        total=order.total,
        display_total=money(order.total),
        created_at=order.created_at.isoformat() if order.created_at else None,
        display_date=order_date(order.created_at),
        items=[
            OrderLineOut(
                product_id=it.product_id,
                name=it.name,
                price=it.unit_price,
                quantity=it.quantity,
                display_line_total=money(it.line_total()),
            )
            for it in order.items
        ],
    )


@router.get("", response_model=List[OrderOut])
def list_orders(
    services: ServiceRegistry = Depends(get_services),
    controller: CartController = Depends(get_cart_controller),
):
    """Order history of the cart owner. A failed fetch shows no orders."""
    try:
        orders = services.orders.list_orders(controller.owner)
    except StorefrontError as exc:
        logger.error("Error loading orders: %s", exc)
        orders = []
    return [_order_out(o) for o in orders]


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, services: ServiceRegistry = Depends(get_services)):
    try:
        order = services.orders.get_order(order_id)
    except (NotFound, BadRequest):
        raise HTTPException(status_code=404, detail="Order not found")
    return _order_out(order)
