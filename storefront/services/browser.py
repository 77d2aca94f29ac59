"""
Product listing state for the storefront home and search pages.

The listing has one data source at a time:

    All               -> catalog service, full product list
    Category(c)       -> catalog service, products in category c
    SearchQuery(q)    -> search service, free-text results

Every transition replaces the whole listing. Each fetch is tagged with a
monotonic request id and only the response to the most recently issued request
is applied, so a slow earlier response can never overwrite a newer one.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import List

from storefront.clients.catalog import CatalogClient
from storefront.clients.search import SearchClient
from storefront.core.errors import StorefrontError
from storefront.models.product import Product

logger = logging.getLogger(__name__)

ALL = "all"
CATEGORY = "category"
SEARCH = "search"


@dataclass(frozen=True)
class DataSource:
    kind: str = ALL
    value: str = ""

    @classmethod
    def all(cls) -> "DataSource":
        return cls(ALL, "")

    @classmethod
    def category(cls, name: str) -> "DataSource":
        return cls(CATEGORY, name)

    @classmethod
    def search(cls, query: str) -> "DataSource":
        return cls(SEARCH, query)


@dataclass
class Listing:
    source: DataSource = field(default_factory=DataSource.all)
    products: List[Product] = field(default_factory=list)
    total: int = 0
    request_id: int = 0


class CatalogBrowser:
    def __init__(self, catalog: CatalogClient, search: SearchClient):
        self.catalog = catalog
        self.search = search
        self._request_ids = itertools.count(1)
        self._latest = 0
        self.listing = Listing()
        self.categories: List[str] = []
        self.search_text = ""

    @property
    def latest_request_id(self) -> int:
        return self._latest

    def _issue(self) -> int:
        request_id = next(self._request_ids)
        self._latest = request_id
        return request_id

    def _apply(self, request_id: int, source: DataSource, products: List[Product], total: int) -> bool:
        if request_id != self._latest:
            logger.debug(
                "Discarding stale %s listing (request %d, latest %d)", source.kind, request_id, self._latest
            )
            return False
        self.listing = Listing(source=source, products=list(products), total=int(total), request_id=request_id)
        return True

    def show_all(self) -> Listing:
        request_id = self._issue()
        try:
            products = self.catalog.list_products()
        except StorefrontError as exc:
            logger.error("Error loading products: %s", exc)
            products = []
        self._apply(request_id, DataSource.all(), products, len(products))
        return self.listing

    def select_category(self, category: str) -> Listing:
        # choosing a category (or "All") drops any active search text
        self.search_text = ""
        category = (category or "").strip()
        if not category:
            return self.show_all()

        request_id = self._issue()
        try:
            products = self.catalog.products_in_category(category)
        except StorefrontError as exc:
            logger.error("Error filtering by category %r: %s", category, exc)
            products = []
        self._apply(request_id, DataSource.category(category), products, len(products))
        return self.listing

    def submit_search(self, query: str) -> Listing:
        self.search_text = query or ""
        if not self.search_text.strip():
            # blank query means "show everything", not a no-op
            return self.show_all()

        query = self.search_text.strip()
        request_id = self._issue()
        try:
            results = self.search.search(query)
            products, total = results.products, results.total
        except StorefrontError as exc:
            logger.error("Error searching products for %r: %s", query, exc)
            products, total = [], 0
        self._apply(request_id, DataSource.search(query), products, total)
        return self.listing

    def load_categories(self) -> List[str]:
        try:
            self.categories = self.catalog.list_categories()
        except StorefrontError as exc:
            logger.error("Error loading categories: %s", exc)
        return self.categories
