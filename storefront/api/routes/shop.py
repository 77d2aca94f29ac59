# storefront/api/routes/shop.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_browser, get_current_username
from storefront.api.schemas.product import ListingOut, ProductOut
from storefront.models.product import Product
from storefront.services.browser import CATEGORY, CatalogBrowser, Listing
from storefront.utils.formatters import money

router = APIRouter(tags=["shop"])


def _product_out(p: Product) -> ProductOut:
    return ProductOut(
        id=p.id,
        name=p.name,
        description=p.description,
        price=p.price,
        display_price=money(p.price),
        category=p.category,
        stock=p.stock,
        image_url=p.image_url,
    )


def _listing_out(browser: CatalogBrowser, listing: Listing, username: Optional[str]) -> ListingOut:
    return ListingOut(
        source=listing.source.kind,
        category=listing.source.value if listing.source.kind == CATEGORY else None,
        search_query=browser.search_text,
        products=[_product_out(p) for p in listing.products],
        total=listing.total,
        categories=list(browser.categories),
        user=username,
    )


@router.get("/", response_model=ListingOut)
def home(
    category: Optional[str] = Query(None, description="category filter; empty means all products"),
    q: Optional[str] = Query(None, description="free-text search; blank means all products"),
    browser: CatalogBrowser = Depends(get_browser),
    username: Optional[str] = Depends(get_current_username),
):
    """
    Product listing. Exactly one transition is applied per request:
    a search when `q` is given, else a category filter when `category` is
    given, else the full catalog.
    """
    if q is not None:
        listing = browser.submit_search(q)
    elif category is not None:
        listing = browser.select_category(category)
    else:
        listing = browser.show_all()
    browser.load_categories()
    return _listing_out(browser, listing, username)


@router.get("/categories", response_model=List[str])
def categories(browser: CatalogBrowser = Depends(get_browser)):
    return browser.load_categories()


@router.get("/search", response_model=ListingOut)
def search_page(
    q: str = Query("", description="search text"),
    browser: CatalogBrowser = Depends(get_browser),
    username: Optional[str] = Depends(get_current_username),
):
    """Search results page; `total` is the count reported by the search service."""
    listing = browser.submit_search(q)
    return _listing_out(browser, listing, username)


@router.get("/products/{product_id}", response_model=ProductOut)
def product_detail(product_id: str, browser: CatalogBrowser = Depends(get_browser)):
    # an unknown id surfaces as the catalog's 404
    return _product_out(browser.catalog.get_product(product_id))
