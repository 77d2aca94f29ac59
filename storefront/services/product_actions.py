"""
Add-to-cart from a product card.

Two independent calls with different guarantees:
  * the cart mutation must succeed, or the action fails;
  * the search re-index is fire-and-forget. It is handed to a scheduler (a
    FastAPI BackgroundTasks.add_task, typically) and its failures are only logged.
"""
import logging
from typing import Callable, Optional

from storefront.api.schemas.cart import CartItemIn
from storefront.clients.cart import CartClient
from storefront.clients.search import SearchClient
from storefront.core.errors import ServiceUnavailable, StorefrontError
from storefront.models.product import Product
from storefront.services.results import ActionResult

logger = logging.getLogger(__name__)

ADDED_MESSAGE = "Added to cart!"
ADD_FAILED_MESSAGE = "Failed to add to cart"

Scheduler = Callable[..., None]


class ProductActions:
    def __init__(self, cart: CartClient, search: SearchClient):
        self.cart_client = cart
        self.search_client = search

    def add_to_cart(self, product: Product, schedule: Optional[Scheduler] = None) -> ActionResult:
        item = CartItemIn(product_id=product.id, name=product.name, price=product.price, quantity=1)
        try:
            self.cart_client.add_item(item)
        except StorefrontError as exc:
            logger.error("Error adding %s to cart: %s", product.id, exc)
            message = exc.message if isinstance(exc, ServiceUnavailable) else ADD_FAILED_MESSAGE
            return ActionResult.failure(message)

        if schedule is not None:
            schedule(self.index_quietly, product)
        else:
            self.index_quietly(product)
        return ActionResult.success(ADDED_MESSAGE)

    def index_quietly(self, product: Product) -> bool:
        """Re-index a product into search; never raises."""
        try:
            self.search_client.index(product)
        except Exception as exc:
            logger.info("Search indexing error for %s: %s", product.id, exc)
            return False
        return True
