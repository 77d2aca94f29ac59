# storefront/api/schemas/product.py
from pydantic import BaseModel, Field
from typing import List, Optional


class ProductIn(BaseModel):
    """Product as shown on a product card; posted back on add-to-cart."""
    id: str = Field(..., min_length=1)
    name: str = ""
    description: Optional[str] = ""
    price: float = Field(0.0, ge=0)
    category: Optional[str] = ""
    stock: int = Field(0, ge=0)
    image_url: Optional[str] = None


class ProductOut(BaseModel):
    id: str
    name: str
    description: str
    price: float
    display_price: str
    category: str
    stock: int
    image_url: Optional[str]


class ListingOut(BaseModel):
    source: str
    category: Optional[str] = None
    search_query: str = ""
    products: List[ProductOut] = []
    total: int = 0
    categories: List[str] = []
    user: Optional[str] = None
