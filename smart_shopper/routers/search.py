from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from smart_shopper.core.dependencies import get_product_search_service
from smart_shopper.schemas.base import Envelope
from smart_shopper.schemas.product import SearchResult
from smart_shopper.services.product_search import ProductSearchService

router = APIRouter(prefix="/search", tags=["Search"])


class SemanticSearchRequest(BaseModel):
    q: str = Field(..., description="Search query text", min_length=1)
    limit: int = Field(default=10, ge=1, le=50)


class SemanticSearchData(BaseModel):
    query: str
    results: list[SearchResult]
    total: int


@router.post("/semantic", response_model=Envelope[SemanticSearchData])
async def semantic_search(
    request: SemanticSearchRequest,
    service: ProductSearchService = Depends(get_product_search_service),
):
    """
    Nearest-neighbour product search.

    Uses the vector store when it is available; otherwise the query runs as
    a substring match over title, description and vendor and every result
    carries the fixed catalog-match score.
    """
    results = await service.search_products(request.q, request.limit)
    return Envelope(data=SemanticSearchData(query=request.q, results=results, total=len(results)))
