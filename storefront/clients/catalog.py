from typing import List
from urllib.parse import quote

from storefront.clients.base import ServiceClient
from storefront.models.product import Product


class CatalogClient(ServiceClient):
    service = "catalog"

    def list_products(self) -> List[Product]:
        return [Product.from_dict(p) for p in self._get_list("/api/catalog/products") if isinstance(p, dict)]

    def get_product(self, product_id: str) -> Product:
        data = self._request("GET", f"/api/catalog/products/{quote(str(product_id), safe='')}")
        return Product.from_dict(data or {})

    def list_categories(self) -> List[str]:
        return [str(c) for c in self._get_list("/api/catalog/categories") if c]

    def products_in_category(self, category: str) -> List[Product]:
        path = f"/api/catalog/categories/{quote(category, safe='')}/products"
        return [Product.from_dict(p) for p in self._get_list(path) if isinstance(p, dict)]
