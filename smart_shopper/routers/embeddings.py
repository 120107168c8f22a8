import asyncio
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from smart_shopper.core.dependencies import get_product_search_service
from smart_shopper.core.errors import UpstreamUnavailable
from smart_shopper.services.product_search import ProductSearchService
from smart_shopper.services.product_store import ProductStore, get_product_store
from smart_shopper.services.qdrant_service import QdrantService, get_qdrant_service

router = APIRouter(prefix="/embeddings", tags=["Embeddings"])
logger = logging.getLogger(__name__)


class EmbeddingRequest(BaseModel):
    """Page of catalog products to index"""

    limit: int = Field(default=10, ge=1, le=10000, description="Number of products to process")
    skip: int = Field(default=0, ge=0, description="Number of products to skip")


class EmbeddingStats(BaseModel):
    """Indexing progress of the catalog"""

    total_products: int
    products_with_embeddings: int
    products_without_embeddings: int
    progress_percentage: float
    vector_store_available: bool


class EmbeddingResponse(BaseModel):
    """Outcome of one indexing run"""

    processed: int
    successful: int
    failed: int
    errors: list[dict[str, str]]
    stats: EmbeddingStats


async def embedding_statistics(store: ProductStore, qdrant_service: QdrantService) -> EmbeddingStats:
    total = await store.count()
    with_embeddings = await asyncio.to_thread(qdrant_service.get_count)
    progress = (with_embeddings / total * 100) if total > 0 else 0.0

    return EmbeddingStats(
        total_products=total,
        products_with_embeddings=with_embeddings,
        products_without_embeddings=max(0, total - with_embeddings),
        progress_percentage=round(progress, 2),
        vector_store_available=qdrant_service.available,
    )


@router.post("/create", response_model=EmbeddingResponse)
async def create_embeddings(
    request: EmbeddingRequest,
    service: ProductSearchService = Depends(get_product_search_service),
    store: ProductStore = Depends(get_product_store),
    qdrant_service: QdrantService = Depends(get_qdrant_service),
):
    """
    Embed a page of catalog products and store them in Qdrant

    Example:
        ```json
        {"limit": 10, "skip": 0}
        ```
    """
    if not qdrant_service.available:
        raise UpstreamUnavailable("Vector store is not available")

    result = await service.index_catalog(skip=request.skip, limit=request.limit)
    logger.info(f"✅ Embedded {result['successful']} of {result['processed']} products")

    return EmbeddingResponse(**result, stats=await embedding_statistics(store, qdrant_service))


@router.get("/stats", response_model=EmbeddingStats)
async def get_embedding_stats(
    store: ProductStore = Depends(get_product_store),
    qdrant_service: QdrantService = Depends(get_qdrant_service),
):
    """How many catalog products have a vector in Qdrant"""
    return await embedding_statistics(store, qdrant_service)


@router.delete("/clear")
async def clear_embeddings(qdrant_service: QdrantService = Depends(get_qdrant_service)):
    """
    Clear all embeddings from Qdrant

    ⚠️ WARNING: This will remove all product vectors. Use with caution!
    """
    if not qdrant_service.available:
        raise UpstreamUnavailable("Vector store is not available")

    count_before = await asyncio.to_thread(qdrant_service.get_count)
    try:
        await asyncio.to_thread(qdrant_service.clear)
    except RuntimeError as e:
        raise UpstreamUnavailable(str(e)) from e

    return {
        "success": True,
        "cleared_count": count_before,
        "message": f"Cleared {count_before} embeddings from Qdrant",
    }
