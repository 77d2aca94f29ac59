from storefront.clients.base import ServiceClient
from storefront.models.product import Product, SearchResults


class SearchClient(ServiceClient):
    service = "search"

    def search(self, query: str) -> SearchResults:
        data = self._request("GET", "/api/search", params={"q": query})
        return SearchResults.from_dict(data if isinstance(data, dict) else {})

    def index(self, product: Product) -> None:
        self._request("POST", "/api/search/index", json=product.index_payload())
