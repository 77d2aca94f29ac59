"""
Cart controller: the in-memory cart view and the checkout sequence.

No service owns the whole checkout. The controller sequences it itself:

    1. refuse an empty cart without touching the network
    2. compute the total from the local items
    3. create the order with the full item snapshot
    4. clear the server cart, only after step 3 succeeded
    5. send the user to the order list

The cart view is never edited locally. Every mutation is followed by a reload
so the view only ever shows server-confirmed state.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from storefront.clients.cart import CartClient
from storefront.clients.orders import OrderClient
from storefront.core.errors import ServiceUnavailable, StorefrontError
from storefront.models.cart import Cart
from storefront.models.order import Order
from storefront.services.results import ActionResult

logger = logging.getLogger(__name__)

CART_EMPTY_MESSAGE = "Cart is empty"
ORDER_PLACED_MESSAGE = "Order placed successfully! Redirecting to orders page..."
ORDER_FAILED_MESSAGE = "Failed to place order"
CART_LOAD_FAILED_MESSAGE = "Failed to load cart"
CART_NOT_CLEARED_MESSAGE = (
    "Your order was placed, but the cart could not be emptied. "
    "Please remove the items from your cart manually."
)


@dataclass
class CheckoutResult(ActionResult):
    order: Optional[Order] = None
    cart_cleared: bool = False


class CartController:
    def __init__(self, cart: CartClient, orders: OrderClient, orders_path: str = "/orders"):
        self.cart_client = cart
        self.order_client = orders
        self.orders_path = orders_path
        self._cart = Cart.empty(cart.owner)
        self.load_error: Optional[StorefrontError] = None

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def owner(self) -> str:
        return self.cart_client.owner

    def load_cart(self) -> Cart:
        """
        Fetch the current cart. Any failure degrades to an empty cart so
        browsing stays usable; nothing is raised.
        """
        try:
            cart = self.cart_client.get_cart()
        except StorefrontError as exc:
            logger.warning("Error loading cart for %s: %s", self.owner, exc)
            cart = Cart.empty(self.owner)
            self.load_error = exc
        else:
            self.load_error = None
        # single assignment: concurrent reloads are last-response-wins
        self._cart = cart
        return cart

    def update_quantity(self, product_id: str, new_quantity: int) -> ActionResult:
        if int(new_quantity) <= 0:
            return self.remove_item(product_id)
        try:
            self.cart_client.update_quantity(product_id, int(new_quantity))
        except StorefrontError as exc:
            logger.error("Error updating quantity of %s: %s", product_id, exc)
            return ActionResult.failure(_mutation_message(exc, "Failed to update quantity"), data=self.load_cart())
        return ActionResult.success(data=self.load_cart())

    def remove_item(self, product_id: str) -> ActionResult:
        try:
            self.cart_client.remove_item(product_id)
        except StorefrontError as exc:
            logger.error("Error removing item %s: %s", product_id, exc)
            return ActionResult.failure(_mutation_message(exc, "Failed to remove item"), data=self.load_cart())
        return ActionResult.success(data=self.load_cart())

    def checkout(self) -> CheckoutResult:
        """
        Reload the cart, then place the order from it. A cart that could not
        be loaded is not treated as empty.
        """
        self.load_cart()
        if self.load_error is not None:
            message = _mutation_message(self.load_error, CART_LOAD_FAILED_MESSAGE)
            return CheckoutResult(ok=False, message=message)
        return self.place_order()

    def place_order(self) -> CheckoutResult:
        items = self._cart.lines()
        if not items:
            return CheckoutResult(ok=False, message=CART_EMPTY_MESSAGE, errors={"cart": CART_EMPTY_MESSAGE})

        total = self._cart.total()

        try:
            order = self.order_client.create_order(self.owner, items, total)
        except (StorefrontError, ValueError) as exc:
            # the cart must survive a failed order creation
            logger.error("Error placing order for %s: %s", self.owner, exc)
            message = exc.message if isinstance(exc, ServiceUnavailable) else ORDER_FAILED_MESSAGE
            return CheckoutResult(ok=False, message=message)

        logger.info("Order %s created for %s (total %.2f)", order.id, self.owner, total)

        try:
            self.cart_client.clear()
        except StorefrontError as exc:
            # the order already exists; report the leftover cart instead of hiding it
            logger.warning("Order %s created but cart for %s was not cleared: %s", order.id, self.owner, exc)
            self.load_cart()
            return CheckoutResult(
                ok=True,
                message=CART_NOT_CLEARED_MESSAGE,
                order=order,
                cart_cleared=False,
                redirect_to=self.orders_path,
                data=order,
            )

        self.load_cart()
        return CheckoutResult(
            ok=True,
            message=ORDER_PLACED_MESSAGE,
            order=order,
            cart_cleared=True,
            redirect_to=self.orders_path,
            data=order,
        )


def _mutation_message(exc: StorefrontError, fallback: str) -> str:
    if isinstance(exc, ServiceUnavailable):
        return exc.message
    return fallback
