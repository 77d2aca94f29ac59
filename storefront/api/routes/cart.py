from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse, RedirectResponse

from storefront.api.deps import get_cart_controller, get_product_actions
from storefront.api.schemas.cart import CartLineOut, CartOut, QuantityUpdate
from storefront.api.schemas.common import ActionOut
from storefront.api.schemas.order import CheckoutOut
from storefront.api.schemas.product import ProductIn
from storefront.core.errors import GENERIC_RETRY_MESSAGE
from storefront.models.cart import Cart
from storefront.models.product import Product
from storefront.services.cart_controller import CART_EMPTY_MESSAGE, CartController
from storefront.services.product_actions import ProductActions
from storefront.services.results import ActionResult
from storefront.utils.formatters import money

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_out(cart: Cart, message=None) -> CartOut:
    lines = [
        CartLineOut(
            product_id=it.product_id,
            name=it.name,
            unit_price=it.unit_price,
            quantity=it.quantity,
            line_total=it.line_total(),
            display_price=money(it.unit_price),
            display_line_total=money(it.line_total()),
        )
        for it in cart.lines()
    ]
    total = cart.total()
    return CartOut(
        items=lines,
        count=cart.count_items(),
        total=total,
        display_total=money(total),
        is_empty=cart.is_empty,
        message=message,
    )


def _mutation_response(result: ActionResult) -> JSONResponse:
    body = _cart_out(result.data, message=result.message or None)
    code = status.HTTP_200_OK if result.ok else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(status_code=code, content=body.model_dump())


@router.get("", response_model=CartOut)
def view_cart(controller: CartController = Depends(get_cart_controller)):
    """Cart panel. Always re-fetches; a failed fetch shows an empty cart."""
    return _cart_out(controller.load_cart())


@router.post("/items", response_model=ActionOut)
def add_to_cart(
    payload: ProductIn,
    background_tasks: BackgroundTasks,
    actions: ProductActions = Depends(get_product_actions),
):
    """
    Add one unit of a product to the cart. Re-indexing the product into search
    runs after the response is sent and can never fail this request.
    """
    product = Product.from_dict(payload.model_dump())
    result = actions.add_to_cart(product, schedule=background_tasks.add_task)
    if not result.ok:
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=ActionOut.from_result(result).model_dump())
    return ActionOut.from_result(result)


@router.put("/items/{product_id}", response_model=CartOut)
def update_quantity(
    product_id: str,
    payload: QuantityUpdate,
    controller: CartController = Depends(get_cart_controller),
):
    """Set a line's quantity; zero or less removes the line."""
    return _mutation_response(controller.update_quantity(product_id, payload.quantity))


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(product_id: str, controller: CartController = Depends(get_cart_controller)):
    return _mutation_response(controller.remove_item(product_id))


@router.post("/checkout", response_model=CheckoutOut)
def checkout(controller: CartController = Depends(get_cart_controller)):
    """
    Place an order from the current cart, then clear the cart.

    - cart could not be loaded: 503 when unreachable, else 502; no order is placed
    - empty cart: 400, nothing is sent to the order service
    - order creation failed: 502, cart untouched
    - order created and cart cleared: 303 to the order list
    - order created but cart not cleared: 200 with a warning and the order id
    """
    result = controller.checkout()

    body = CheckoutOut(
        ok=result.ok,
        message=result.message,
        order_id=result.order.id if result.order else None,
        cart_cleared=result.cart_cleared,
        redirect_to=result.redirect_to,
    )
    if not result.ok:
        if result.message == CART_EMPTY_MESSAGE:
            code = status.HTTP_400_BAD_REQUEST
        elif result.message == GENERIC_RETRY_MESSAGE:
            code = status.HTTP_503_SERVICE_UNAVAILABLE
        else:
            code = status.HTTP_502_BAD_GATEWAY
        return JSONResponse(status_code=code, content=body.model_dump())
    if result.cart_cleared:
        return RedirectResponse(result.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    return body
