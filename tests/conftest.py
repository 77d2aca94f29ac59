# tests/conftest.py
import os
import sys
import itertools
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi import Body, FastAPI, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.testclient import TestClient

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from storefront.clients.registry import ServiceRegistry  # noqa: E402
from storefront.config import Settings  # noqa: E402
from storefront.main import create_app  # noqa: E402
from storefront.storage import LocalStorage  # noqa: E402

DEFAULT_PASSWORD = "Passw0rd!"

SAMPLE_PRODUCTS = [
    {"id": "123", "name": "Desk Lamp", "description": "Warm light for late work", "price": 29.99,
     "category": "Lighting", "stock": 10, "image_url": "https://img.test/lamp.jpg"},
    {"id": "200", "name": "Wool Rug", "description": "Hand woven", "price": 10.00,
     "category": "Textiles", "stock": 4, "image_url": ""},
    {"id": "300", "name": "Floor Lamp", "description": "Tall brass lamp", "price": 89.50,
     "category": "Lighting", "stock": 2, "image_url": ""},
]


class FakeBackend:
    """
    One in-memory FastAPI app standing in for the auth, catalog, search, cart
    and order services. Error bodies are plain text, like the Go services.

    Every request is recorded as (method, path). `fail(method, path, ...)`
    makes that endpoint answer with the given status until `heal` is called.
    """

    def __init__(self):
        self.calls: List[Tuple[str, str]] = []
        self.failures: Dict[Tuple[str, str], Tuple[int, str]] = {}
        self.products: Dict[str, dict] = {p["id"]: dict(p) for p in SAMPLE_PRODUCTS}
        self.indexed: List[dict] = []
        self.carts: Dict[str, dict] = {}
        self.orders: Dict[int, dict] = {}
        self.users: Dict[str, dict] = {}
        self.tokens: Dict[str, str] = {}
        self.reset_tokens: Dict[str, str] = {}
        self._order_ids = itertools.count(1)
        self._user_ids = itertools.count(1)
        self._token_ids = itertools.count(1)
        self.app = self._build_app()

    # -- test helpers --

    def fail(self, method: str, path: str, status: int = 500, body: str = "Internal server error"):
        self.failures[(method.upper(), path)] = (status, body)

    def heal(self, method: str, path: str):
        self.failures.pop((method.upper(), path), None)

    def count(self, method: str, path: str) -> int:
        return self.calls.count((method.upper(), path))

    def calls_to(self, prefix: str) -> List[Tuple[str, str]]:
        return [c for c in self.calls if c[1].startswith(prefix)]

    def add_user(self, username: str, email: str, password: str = DEFAULT_PASSWORD) -> dict:
        user = {
            "id": str(next(self._user_ids)),
            "username": username,
            "email": email,
            "password": password,
            "first_name": "",
            "last_name": "",
            "created_at": "2025-03-04T09:15:00Z",
        }
        self.users[username] = user
        return user

    def issue_token(self, username: str) -> str:
        token = f"tok-{next(self._token_ids)}"
        self.tokens[token] = username
        return token

    def revoke_all(self):
        self.tokens.clear()

    def cart_items(self, user_id: str) -> List[dict]:
        return list(self.carts.get(user_id, {}).get("items", []))

    # -- the fake services --

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        backend = self

        @app.middleware("http")
        async def record_and_inject(request: Request, call_next):
            key = (request.method, request.url.path)
            backend.calls.append(key)
            if key in backend.failures:
                status, body = backend.failures[key]
                return PlainTextResponse(body, status_code=status)
            return await call_next(request)

        def _user_for(token: Optional[str]) -> Optional[dict]:
            username = backend.tokens.get(token or "")
            return backend.users.get(username) if username else None

        def _cart(user_id: str) -> dict:
            return backend.carts.setdefault(user_id, {
                "id": f"cart-{user_id}",
                "user_id": user_id,
                "items": [],
                "updated_at": datetime.now(timezone.utc).isoformat(),
            })

        # catalog

        @app.get("/api/catalog/products")
        def list_products():
            return list(backend.products.values())

        @app.get("/api/catalog/products/{product_id}")
        def get_product(product_id: str):
            if product_id not in backend.products:
                return PlainTextResponse("Product not found", status_code=404)
            return backend.products[product_id]

        @app.get("/api/catalog/categories")
        def list_categories():
            return sorted({p["category"] for p in backend.products.values()})

        @app.get("/api/catalog/categories/{category}/products")
        def products_in_category(category: str):
            return [p for p in backend.products.values() if p["category"] == category]

        # search

        @app.get("/api/search")
        def search(q: str = ""):
            needle = q.lower()
            hits = [
                p for p in backend.products.values()
                if needle in p["name"].lower() or needle in p["description"].lower()
            ]
            return {"products": hits, "total": len(hits)}

        @app.post("/api/search/index")
        def index(product: dict = Body(...)):
            backend.indexed.append(product)
            return {"status": "indexed"}

        # cart

        @app.get("/api/cart/{user_id}")
        def get_cart(user_id: str):
            if user_id not in backend.carts:
                return {"user_id": user_id, "items": []}
            return backend.carts[user_id]

        @app.delete("/api/cart/{user_id}")
        def clear_cart(user_id: str):
            backend.carts.pop(user_id, None)
            return {"message": "Cart cleared"}

        @app.post("/api/cart/{user_id}/items")
        def add_item(user_id: str, item: dict = Body(...)):
            cart = _cart(user_id)
            for line in cart["items"]:
                if line["product_id"] == item["product_id"]:
                    line["quantity"] += int(item.get("quantity") or 1)
                    break
            else:
                cart["items"].append({
                    "product_id": item["product_id"],
                    "name": item.get("name", ""),
                    "price": float(item.get("price") or 0),
                    "quantity": int(item.get("quantity") or 1),
                })
            return cart

        @app.put("/api/cart/{user_id}/items/{product_id}")
        def update_item(user_id: str, product_id: str, body: dict = Body(...)):
            cart = _cart(user_id)
            quantity = int(body.get("quantity", 0))
            for line in cart["items"]:
                if line["product_id"] == product_id:
                    if quantity <= 0:
                        cart["items"].remove(line)
                    else:
                        line["quantity"] = quantity
                    return cart
            return PlainTextResponse("Item not found in cart", status_code=404)

        @app.delete("/api/cart/{user_id}/items/{product_id}")
        def remove_item(user_id: str, product_id: str):
            cart = _cart(user_id)
            cart["items"] = [line for line in cart["items"] if line["product_id"] != product_id]
            return cart

        # orders

        @app.post("/api/orders", status_code=201)
        def create_order(body: dict = Body(...)):
            order_id = next(backend._order_ids)
            order = {
                "id": str(order_id),
                "user_id": body["user_id"],
                "items": body.get("items") or [],
                "total": body.get("total", 0),
                "status": "pending",
                "created_at": "2025-03-04T09:15:00.123456789Z",
            }
            backend.orders[order_id] = order
            return order

        @app.get("/api/orders/details/{order_id}")
        def order_details(order_id: str):
            try:
                key = int(order_id)
            except ValueError:
                return PlainTextResponse("Invalid order ID", status_code=400)
            if key not in backend.orders:
                return PlainTextResponse("Order not found", status_code=404)
            return backend.orders[key]

        @app.get("/api/orders/{user_id}")
        def list_orders(user_id: str):
            return [o for o in backend.orders.values() if o["user_id"] == user_id]

        # auth

        @app.post("/api/auth/signup", status_code=201)
        def signup(body: dict = Body(...)):
            if body["username"] in backend.users:
                return PlainTextResponse("Username already exists", status_code=409)
            if any(u["email"] == body["email"] for u in backend.users.values()):
                return PlainTextResponse("Email already exists", status_code=409)
            user = backend.add_user(body["username"], body["email"], body["password"])
            return {"id": user["id"], "username": user["username"], "email": user["email"]}

        @app.post("/api/auth/login")
        def login(body: dict = Body(...)):
            user = backend.users.get(body.get("username", ""))
            if user is None or user["password"] != body.get("password"):
                return PlainTextResponse("Invalid credentials", status_code=401)
            token = backend.issue_token(user["username"])
            return {"token": token, "user_id": user["id"], "username": user["username"]}

        @app.post("/api/auth/logout")
        def logout(authorization: Optional[str] = Header(None)):
            backend.tokens.pop(authorization or "", None)
            return {"message": "Logged out successfully"}

        @app.post("/api/auth/forgot-password")
        def forgot_password(body: dict = Body(...)):
            for user in backend.users.values():
                if user["email"] == body.get("email"):
                    backend.reset_tokens[f"reset-{user['id']}"] = user["username"]
            return {"message": "If the email exists, a password reset link has been sent"}

        @app.post("/api/auth/reset-password")
        def reset_password(body: dict = Body(...)):
            username = backend.reset_tokens.pop(body.get("token", ""), None)
            if username is None:
                return PlainTextResponse("Invalid or expired token", status_code=400)
            backend.users[username]["password"] = body["password"]
            return {"message": "Password reset successfully"}

        @app.get("/api/auth/profile")
        def get_profile(authorization: Optional[str] = Header(None)):
            user = _user_for(authorization)
            if user is None:
                return PlainTextResponse("Unauthorized", status_code=401)
            return {k: v for k, v in user.items() if k != "password"}

        @app.put("/api/auth/profile")
        def update_profile(body: dict = Body(...), authorization: Optional[str] = Header(None)):
            user = _user_for(authorization)
            if user is None:
                return PlainTextResponse("Unauthorized", status_code=401)
            email = body.get("email") or user["email"]
            if any(u["email"] == email and u is not user for u in backend.users.values()):
                return PlainTextResponse("Email already in use", status_code=409)
            user.update(email=email, first_name=body.get("first_name", ""), last_name=body.get("last_name", ""))
            return JSONResponse({"message": "Profile updated successfully"})

        return app


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture
def backend():
    fake = FakeBackend()
    fake.add_user("alice", "alice@example.com")
    fake.add_user("bob", "bob@example.com")
    return fake


@pytest.fixture
def settings(tmp_path):
    return Settings(DATA_DIR=tmp_path, CART_OWNER="admin")


@pytest.fixture
def storage(settings):
    return LocalStorage(settings.storage_path)


@pytest.fixture
def services(backend, settings):
    """Service clients wired to the fake backend."""
    registry = ServiceRegistry.from_settings(
        settings, http_factory=lambda base_url: TestClient(backend.app, base_url=base_url)
    )
    yield registry
    registry.close()


@pytest.fixture
def unreachable(settings):
    """
    Build a registry whose listed services refuse connections; the rest talk
    to `backend` if given.
    Usage: services = unreachable("cart", "order", backend=backend)
    """
    def _fn(*names, backend: Optional[FakeBackend] = None):
        urls = {
            "auth": settings.AUTH_API,
            "catalog": settings.CATALOG_API,
            "search": settings.SEARCH_API,
            "cart": settings.CART_API,
            "order": settings.ORDER_API,
        }
        down = {urls[n] for n in names}

        def factory(base_url: str) -> httpx.Client:
            if base_url in down or backend is None:
                return httpx.Client(base_url=base_url, transport=httpx.MockTransport(_refuse))
            return TestClient(backend.app, base_url=base_url)

        return ServiceRegistry.from_settings(settings, http_factory=factory)
    return _fn


@pytest.fixture
def app(settings, services, storage):
    return create_app(settings=settings, services=services, storage=storage)


@pytest.fixture
def client(app):
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def signed_in(client):
    """Sign in through the storefront and return the session payload."""
    def _fn(username="alice", password=DEFAULT_PASSWORD):
        r = client.post("/auth/signin", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return r.json()
    return _fn
