import math

from fastapi import APIRouter, Depends, Query

from smart_shopper.core.errors import NotFound
from smart_shopper.schemas.base import Envelope, Pagination
from smart_shopper.schemas.product import CategoryList, CategoryPage, Product, ProductPage, ProductSummary
from smart_shopper.services.product_store import ProductStore, get_product_store

router = APIRouter(prefix="/products", tags=["Products"])


def pagination(total: int, page: int, limit: int) -> Pagination:
    return Pagination(total=total, page=page, limit=limit, pages=math.ceil(total / limit))


@router.get("", response_model=Envelope[ProductPage])
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: ProductStore = Depends(get_product_store),
):
    """Newest products first"""
    products, total = await store.list_products(page, limit)
    return Envelope(
        data=ProductPage(
            products=[ProductSummary.from_product(p) for p in products],
            pagination=pagination(total, page, limit),
        )
    )


# ============================================================================
# Category endpoints (must be defined BEFORE /{product_id})
# ============================================================================


@router.get("/category/{name}", response_model=Envelope[CategoryPage])
async def products_by_category(
    name: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    store: ProductStore = Depends(get_product_store),
):
    """
    Products for a browse slug (`tech-electronics`, `office-supplies`,
    `furniture`) or any category name, in-stock items first.
    """
    products, total = await store.products_by_category(name, page, limit)
    return Envelope(
        data=CategoryPage(
            products=[ProductSummary.from_product(p) for p in products],
            pagination=pagination(total, page, limit),
            category=name,
        )
    )


@router.get("/categories/list", response_model=Envelope[CategoryList])
async def list_categories(store: ProductStore = Depends(get_product_store)):
    return Envelope(
        data=CategoryList(
            predefined=await store.predefined_counts(),
            database=await store.category_counts(),
        )
    )


@router.get("/{product_id}", response_model=Envelope[Product])
async def get_product(product_id: str, store: ProductStore = Depends(get_product_store)):
    product = await store.get_product(product_id)
    if product is None:
        raise NotFound(f"Product not found: {product_id}")
    return Envelope(data=product)
