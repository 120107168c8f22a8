import re
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection

from smart_shopper.core.config import settings
from smart_shopper.core.mongo import get_mongo_db
from smart_shopper.core.vocabulary import BROWSE_CATEGORIES
from smart_shopper.schemas.product import CategoryCount, PredefinedCategory, Product

PRICED: dict[str, Any] = {"price": {"$ne": None}}
UNPRICED: dict[str, Any] = {"price": None}


def contains(field: str, text: str) -> dict[str, Any]:
    """Case-insensitive substring match on a field"""
    return {field: {"$regex": re.escape(text.strip()), "$options": "i"}}


def equals(field: str, text: str) -> dict[str, Any]:
    """Case-insensitive exact match on a field"""
    return {field: {"$regex": f"^{re.escape(text.strip())}$", "$options": "i"}}


def browse_filter(name: str) -> dict[str, Any]:
    """Filter for a browse slug, or a plain category substring for anything else"""
    mapping = BROWSE_CATEGORIES.get(name.lower())
    if mapping is None:
        return contains("category", name)
    conditions = [contains("category", c) for c in mapping["categories"]]
    conditions += [contains("title", w) for w in mapping["title_words"]]
    return {"$or": conditions}


class ProductStore:
    """Catalog queries over the products collection"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def _find(
        self,
        query: dict[str, Any],
        limit: int,
        sort: list[tuple[str, int]] | None = None,
        skip: int = 0,
    ) -> list[Product]:
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        cursor = cursor.skip(skip).limit(limit)
        return [Product.from_document(doc) async for doc in cursor]

    # ============================================================================
    # Listing
    # ============================================================================

    async def count(self, query: dict[str, Any] | None = None) -> int:
        return await self.collection.count_documents(query or {})

    async def list_products(self, page: int = 1, limit: int = 10) -> tuple[list[Product], int]:
        """Newest products first with the total catalog size"""
        products = await self._find({}, limit, sort=[("created_at", -1)], skip=(page - 1) * limit)
        return products, await self.count()

    async def all_products(self, skip: int = 0, limit: int = 100) -> list[Product]:
        return await self._find({}, limit, sort=[("_id", 1)], skip=skip)

    async def get_product(self, product_id: str) -> Product | None:
        doc = await self.collection.find_one({"_id": product_id})
        return Product.from_document(doc) if doc else None

    async def products_by_category(self, name: str, page: int = 1, limit: int = 20) -> tuple[list[Product], int]:
        """Products for a browse slug or category name, in-stock first then by title"""
        query = browse_filter(name)
        total = await self.count(query)
        products = await self._find(query, limit, sort=[("in_stock", -1), ("title", 1)], skip=(page - 1) * limit)
        return products, total

    async def category_counts(self, limit: int = 20) -> list[CategoryCount]:
        pipeline = [
            {"$match": {"category": {"$ne": None}}},
            {"$group": {"_id": "$category", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
            {"$limit": limit},
        ]
        cursor = self.collection.aggregate(pipeline)
        return [CategoryCount(name=row["_id"], count=row["count"]) async for row in cursor]

    async def predefined_counts(self) -> list[PredefinedCategory]:
        results = []
        for slug, mapping in BROWSE_CATEGORIES.items():
            query = {"$or": [contains("title", w) for w in mapping["title_words"]]}
            results.append(PredefinedCategory(name=mapping["name"], slug=slug, count=await self.count(query)))
        return results

    # ============================================================================
    # Search primitives
    # ============================================================================

    async def search_text(self, query: str, limit: int = 10) -> list[Product]:
        """Substring match on title, description or vendor"""
        return await self._find(
            {"$or": [contains("title", query), contains("body_html", query), contains("vendor", query)]},
            limit,
        )

    async def search_by_type(self, label: str, limit: int = 6) -> list[Product]:
        """Product type label against title, category or tags"""
        return await self._find(
            {"$or": [contains("title", label), contains("category", label), {"tags": label.strip().lower()}]},
            limit,
        )

    async def search_by_term(self, term: str, limit: int = 6) -> list[Product]:
        return await self._find({"$or": [contains("title", term), contains("vendor", term)]}, limit)

    async def search_title_cheapest(self, word: str, limit: int = 6) -> list[Product]:
        """Title matches by price ascending; unpriced matches come last"""
        title = contains("title", word)
        products = await self._find({"$and": [title, PRICED]}, limit, sort=[("price", 1)])
        if len(products) < limit:
            products += await self._find({"$and": [title, UNPRICED]}, limit - len(products), sort=[("title", 1)])
        return products

    async def keyword_search(self, keyword: str, limit: int = 10) -> list[Product]:
        """Substring match on title, category or description"""
        return await self._find(
            {"$or": [contains("title", keyword), contains("category", keyword), contains("body_html", keyword)]},
            limit,
        )

    async def cheapest_by_vendor(self, vendor: str, category: str | None = None) -> Product | None:
        conditions = [contains("vendor", vendor), PRICED]
        if category:
            conditions.append(equals("category", category))
        products = await self._find({"$and": conditions}, 1, sort=[("price", 1)])
        return products[0] if products else None

    async def cheapest_in_category(
        self, category: str, limit: int = 3, url_contains: str | None = None
    ) -> list[Product]:
        conditions = [equals("category", category), PRICED]
        if url_contains:
            conditions.append(contains("url", url_contains))
        return await self._find({"$and": conditions}, limit, sort=[("price", 1)])


def get_product_store() -> ProductStore:
    db = get_mongo_db()
    return ProductStore(db[settings.PRODUCTS_COLLECTION])
