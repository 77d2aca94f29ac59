from urllib.parse import quote

from storefront.api.schemas.cart import CartItemIn, QuantityUpdate
from storefront.clients.base import ServiceClient
from storefront.models.cart import Cart


class CartClient(ServiceClient):
    """
    Cart service, scoped to a single cart owner. Mutations return nothing
    useful; callers reload the cart to see the server's state.
    """
    service = "cart"

    def __init__(self, base_url: str, owner: str, http=None):
        super().__init__(base_url, http=http)
        self.owner = owner

    @property
    def _cart_path(self) -> str:
        return f"/api/cart/{quote(self.owner, safe='')}"

    def _item_path(self, product_id: str) -> str:
        return f"{self._cart_path}/items/{quote(str(product_id), safe='')}"

    def get_cart(self) -> Cart:
        data = self._request("GET", self._cart_path)
        return Cart.from_dict(data if isinstance(data, dict) else {})

    def add_item(self, item: CartItemIn) -> None:
        # the service adds the line or increments an existing one
        self._request("POST", f"{self._cart_path}/items", json=item.model_dump())

    def update_quantity(self, product_id: str, quantity: int) -> None:
        self._request("PUT", self._item_path(product_id), json=QuantityUpdate(quantity=quantity).model_dump())

    def remove_item(self, product_id: str) -> None:
        self._request("DELETE", self._item_path(product_id))

    def clear(self) -> None:
        self._request("DELETE", self._cart_path)
