# storefront/api/deps.py
"""
Dependency providers for the view routes. Every component is built once in
`storefront.main.create_app` and kept on `app.state`; routes receive them
through these functions rather than reading module globals.
"""
from typing import Optional

from fastapi import Depends, Request

from storefront.clients.registry import ServiceRegistry
from storefront.models.user import Session
from storefront.services.accounts import AccountService
from storefront.services.browser import CatalogBrowser
from storefront.services.cart_controller import CartController
from storefront.services.product_actions import ProductActions
from storefront.services.profile import ProfileService
from storefront.services.session import SessionGuard


def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services


def get_session_guard(request: Request) -> SessionGuard:
    return request.app.state.session_guard


def get_cart_controller(request: Request) -> CartController:
    return request.app.state.cart_controller


def get_browser(request: Request) -> CatalogBrowser:
    return request.app.state.browser


def get_product_actions(request: Request) -> ProductActions:
    return request.app.state.product_actions


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profiles


def get_account_service(request: Request) -> AccountService:
    return request.app.state.accounts


def get_current_username(guard: SessionGuard = Depends(get_session_guard)) -> Optional[str]:
    """Username for the navigation bar; None when signed out."""
    return guard.username


def require_session(guard: SessionGuard = Depends(get_session_guard)) -> Session:
    """
    Gate for protected views. Raises AuthenticationRequired (handled as a
    redirect to sign-in) when there is no stored session.
    """
    return guard.require()
