# storefront/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from storefront.api.routes import auth as auth_routes
from storefront.api.routes import cart as cart_routes
from storefront.api.routes import orders as order_routes
from storefront.api.routes import profile as profile_routes
from storefront.api.routes import shop as shop_routes
from storefront.clients.registry import ServiceRegistry
from storefront.config import Settings, get_settings
from storefront.core.errors import (
    AuthenticationRequired,
    NotFound,
    ServiceError,
    ServiceUnavailable,
    ValidationFailed,
)
from storefront.middleware.cors_config import configure_cors
from storefront.services.accounts import AccountService
from storefront.services.browser import CatalogBrowser
from storefront.services.cart_controller import CartController
from storefront.services.product_actions import ProductActions
from storefront.services.profile import ProfileService
from storefront.services.session import SessionGuard, SessionStore
from storefront.storage import LocalStorage

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: report where the backends and session storage are,
    and close the service connections on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "Storefront starting (env=%s, cart owner=%s, session storage=%s)",
        settings.ENV,
        settings.CART_OWNER,
        app.state.storage.path,
    )
    for name in ("AUTH_API", "CATALOG_API", "SEARCH_API", "CART_API", "ORDER_API"):
        logger.debug("%s = %s", name, getattr(settings, name))

    yield

    app.state.services.close()
    logger.info("Shutting down Mizon Storefront")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationRequired)
    async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
        # every view lands on sign-in the same way
        return RedirectResponse(exc.redirect_to, status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(ValidationFailed)
    async def validation_failed_handler(request: Request, exc: ValidationFailed):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"ok": False, "message": next(iter(exc.errors.values()), ""), "errors": exc.errors},
        )

    @app.exception_handler(ServiceUnavailable)
    async def service_unavailable_handler(request: Request, exc: ServiceUnavailable):
        logger.warning("%s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "message": exc.message},
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if isinstance(exc, NotFound):
            return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.detail or "Not found"})
        logger.error("%s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"ok": False, "message": exc.detail or "The store could not complete the request"},
        )


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceRegistry] = None,
    storage: Optional[LocalStorage] = None,
) -> FastAPI:
    """
    Build the storefront app. Every component is created here once and shared
    by all requests through `app.state`; tests pass their own registry and
    storage.
    """
    settings = settings or get_settings()
    services = services or ServiceRegistry.from_settings(settings)
    storage = storage or LocalStorage(settings.storage_path)

    app = FastAPI(title="Mizon Storefront", version="0.1.0", lifespan=lifespan)
    configure_cors(app, settings.CORS_ORIGINS)

    guard = SessionGuard(SessionStore(storage), services.auth, signin_path=settings.SIGNIN_PATH)

    app.state.settings = settings
    app.state.services = services
    app.state.storage = storage
    app.state.session_guard = guard
    app.state.cart_controller = CartController(services.cart, services.orders, orders_path=settings.ORDERS_PATH)
    app.state.browser = CatalogBrowser(services.catalog, services.search)
    app.state.product_actions = ProductActions(services.cart, services.search)
    app.state.profiles = ProfileService(guard, services.auth)
    app.state.accounts = AccountService(
        services.auth,
        signin_path=settings.SIGNIN_PATH,
        redirect_delay=settings.RESET_REDIRECT_DELAY,
    )

    _register_exception_handlers(app)

    app.include_router(shop_routes.router)
    app.include_router(cart_routes.router)
    app.include_router(order_routes.router)
    app.include_router(auth_routes.router)
    app.include_router(profile_routes.router)

    @app.get("/health", tags=["root"])
    def health():
        return {"status": "ok", "service": "Mizon Storefront"}

    return app


app = create_app()


def run():
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
