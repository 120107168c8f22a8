"""Vector product search with graceful degradation to catalog substring search"""

import asyncio
import logging
from typing import Any

from smart_shopper.schemas.product import Product, SearchResult
from smart_shopper.services.embedding_service import EmbeddingService, strip_html
from smart_shopper.services.product_store import ProductStore
from smart_shopper.services.qdrant_service import QdrantService

logger = logging.getLogger(__name__)

# Similarity reported for catalog substring matches, which have no real score
CATALOG_MATCH_SCORE = 0.8


def to_search_result(product: Product, score: float) -> SearchResult:
    return SearchResult(
        id=product.id,
        title=product.title,
        vendor=product.vendor,
        price=product.price,
        score=score,
        url=product.url or None,
        description=strip_html(product.body_html, 200),
        image=product.images[0] if product.images else "",
    )


def hit_to_search_result(hit: dict[str, Any]) -> SearchResult:
    price = hit.get("price")
    return SearchResult(
        id=str(hit.get("product_id", "")),
        title=hit.get("title", ""),
        vendor=hit.get("vendor", ""),
        price=float(price) if price is not None else None,
        score=min(max(float(hit.get("score", 0.0)), 0.0), 1.0),
        url=hit.get("url") or None,
        description=hit.get("description", "")[:200],
        image=hit.get("image", ""),
    )


def prepare_product_metadata(product: Product) -> dict[str, Any]:
    """Payload stored next to each product vector"""
    return {
        "title": product.title,
        "vendor": product.vendor,
        "price": product.price,
        "category": product.category or "",
        "url": product.url,
        "image": product.images[0] if product.images else "",
        "description": strip_html(product.body_html, 500),
    }


class ProductSearchService:
    """
    Semantic product search.

    Embeds the query and asks Qdrant for nearest neighbours. When the vector
    store is unavailable or the lookup fails, the same query runs as a
    substring search over title, description and vendor in the catalog.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        qdrant_service: QdrantService,
        product_store: ProductStore,
    ):
        self.embedding_service = embedding_service
        self.qdrant_service = qdrant_service
        self.product_store = product_store

    async def search_products(self, query: str, limit: int = 10) -> list[SearchResult]:
        if self.qdrant_service.available:
            try:
                query_embedding = await asyncio.to_thread(self.embedding_service.create_embedding, query)
                hits = await asyncio.to_thread(self.qdrant_service.query, query_embedding, limit)
                results = [hit_to_search_result(hit) for hit in hits]
                logger.info(f"Vector search for '{query}' returned {len(results)} results")
                return results
            except Exception as e:
                logger.error(f"Vector search failed, falling back to catalog search: {e}")

        products = await self.product_store.search_text(query, limit)
        logger.info(f"Catalog search for '{query}' returned {len(products)} results")
        return [to_search_result(p, CATALOG_MATCH_SCORE) for p in products]

    async def index_catalog(self, skip: int = 0, limit: int = 100) -> dict[str, Any]:
        """Embed a page of catalog products and upsert them into Qdrant"""
        products = await self.product_store.all_products(skip=skip, limit=limit)

        ids: list[str] = []
        embeddings: list[list[float]] = []
        documents: list[str] = []
        metadatas: list[dict[str, Any]] = []
        errors: list[dict[str, str]] = []

        for product in products:
            try:
                text, embedding = await asyncio.to_thread(self.embedding_service.create_product_embedding, product)
            except Exception as e:
                errors.append({"product_id": product.id, "error": str(e)})
                continue
            ids.append(product.id)
            embeddings.append(embedding)
            documents.append(text)
            metadatas.append(prepare_product_metadata(product))

        successful = 0
        if ids:
            try:
                logger.info(f"📦 BATCH INSERT: Storing {len(ids)} embeddings in Qdrant...")
                successful = await asyncio.to_thread(
                    self.qdrant_service.add_embeddings, ids, embeddings, metadatas, documents
                )
            except Exception as e:
                logger.error(f"❌ Batch insert failed: {e}")
                errors.append({"batch_insert": str(e)})

        return {
            "processed": len(products),
            "successful": successful,
            "failed": len(products) - successful,
            "errors": errors,
        }
