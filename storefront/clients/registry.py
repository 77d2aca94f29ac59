from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from storefront.clients.auth import AuthClient
from storefront.clients.cart import CartClient
from storefront.clients.catalog import CatalogClient
from storefront.clients.orders import OrderClient
from storefront.clients.search import SearchClient
from storefront.config import Settings

# builds the httpx client for a base URL; tests swap in TestClient instances
HttpFactory = Callable[[str], httpx.Client]


@dataclass
class ServiceRegistry:
    auth: AuthClient
    catalog: CatalogClient
    search: SearchClient
    cart: CartClient
    orders: OrderClient

    @classmethod
    def from_settings(cls, settings: Settings, http_factory: Optional[HttpFactory] = None) -> "ServiceRegistry":
        def _http(base_url: str) -> Optional[httpx.Client]:
            return http_factory(base_url) if http_factory else None

        return cls(
            auth=AuthClient(settings.AUTH_API, http=_http(settings.AUTH_API)),
            catalog=CatalogClient(settings.CATALOG_API, http=_http(settings.CATALOG_API)),
            search=SearchClient(settings.SEARCH_API, http=_http(settings.SEARCH_API)),
            cart=CartClient(settings.CART_API, owner=settings.CART_OWNER, http=_http(settings.CART_API)),
            orders=OrderClient(settings.ORDER_API, http=_http(settings.ORDER_API)),
        )

    def close(self) -> None:
        for client in (self.auth, self.catalog, self.search, self.cart, self.orders):
            client.close()
