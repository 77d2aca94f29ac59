# storefront/models/product.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class Product:
    """
    Product as served by the catalog and search services. The storefront never
    mutates products; it only forwards them to the search index on add-to-cart.
    """
    id: str = ""
    name: str = ""
    description: str = ""
    price: float = 0.0
    category: str = ""
    stock: int = 0
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        if d is None:
            raise ValueError("Cannot construct Product from None")
        id_val = d.get("id") or d.get("product_id") or ""
        name = d.get("name") or d.get("title") or ""
        price_raw = d.get("price", 0)
        stock_raw = d.get("stock", 0)

        # cast numeric fields safely
        try:
            price = float(price_raw) if price_raw not in (None, "") else 0.0
        except (TypeError, ValueError):
            price = 0.0
        try:
            stock = int(float(stock_raw)) if stock_raw not in (None, "") else 0
        except (TypeError, ValueError):
            stock = 0

        return cls(
            id=str(id_val),
            name=str(name),
            description=str(d.get("description") or ""),
            price=max(price, 0.0),
            category=str(d.get("category") or ""),
            stock=max(stock, 0),
            image_url=d.get("image_url") or d.get("image") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["price"] = float(self.price)
        out["stock"] = int(self.stock)
        out["image_url"] = self.image_url or ""
        return out

    def index_payload(self) -> Dict[str, Any]:
        """Body for the search service's index endpoint."""
        return self.to_dict()


@dataclass
class SearchResults:
    products: list
    total: int = 0

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "SearchResults":
        d = d or {}
        products = [Product.from_dict(p) for p in (d.get("products") or []) if isinstance(p, dict)]
        try:
            total = int(d.get("total") or 0)
        except (TypeError, ValueError):
            total = len(products)
        return cls(products=products, total=total)
