from typing import List
from urllib.parse import quote

from storefront.api.schemas.order import OrderCreate, OrderLine
from storefront.clients.base import ServiceClient
from storefront.models.cart import CartItem
from storefront.models.order import Order


class OrderClient(ServiceClient):
    service = "order"

    def list_orders(self, user_id: str) -> List[Order]:
        rows = self._get_list(f"/api/orders/{quote(user_id, safe='')}")
        return [Order.from_dict(r) for r in rows if isinstance(r, dict)]

    def get_order(self, order_id: str) -> Order:
        data = self._request("GET", f"/api/orders/details/{quote(str(order_id), safe='')}")
        return Order.from_dict(data or {})

    def create_order(self, user_id: str, items: List[CartItem], total: float) -> Order:
        payload = OrderCreate(
            user_id=user_id,
            items=[OrderLine(**it.to_dict()) for it in items],
            total=total,
        )
        data = self._request("POST", "/api/orders", json=payload.model_dump())
        if isinstance(data, dict):
            return Order.from_dict(data)
        # created but the service sent no body back; keep what we submitted
        return Order(user_id=user_id, items=list(items), total=total)
