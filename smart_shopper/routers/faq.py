from fastapi import APIRouter, Depends, Query

from smart_shopper.core.errors import NotFound
from smart_shopper.schemas.base import Envelope
from smart_shopper.schemas.faq import FAQ, FAQCategoriesData, FAQCategoryData, FAQSearchData
from smart_shopper.services.faq_service import FAQService, get_faq_service

router = APIRouter(prefix="/faq", tags=["FAQ"])


@router.get("/search", response_model=Envelope[FAQSearchData])
async def search_faq(
    q: str | None = Query(None, description="Text to look for in questions, answers and keywords"),
    limit: int = Query(10, ge=1, le=50),
    service: FAQService = Depends(get_faq_service),
):
    results = service.search(q, limit)
    if results:
        message = f"Found {len(results)} FAQ{'s' if len(results) > 1 else ''} matching your query"
    else:
        message = "No FAQs found matching your query"
    return Envelope(data=FAQSearchData(results=results, query=q or "", total=len(results), message=message))


@router.get("/categories", response_model=Envelope[FAQCategoriesData])
async def faq_categories(service: FAQService = Depends(get_faq_service)):
    categories = service.categories()
    return Envelope(
        data=FAQCategoriesData(categories=categories, total=len(categories), total_faqs=service.count())
    )


@router.get("/category/{category}", response_model=Envelope[FAQCategoryData])
async def faq_by_category(
    category: str,
    limit: int = Query(10, ge=1, le=50),
    service: FAQService = Depends(get_faq_service),
):
    results = service.by_category(category, limit)
    return Envelope(data=FAQCategoryData(category=category, results=results, total=len(results)))


@router.get("/{faq_id}", response_model=Envelope[FAQ])
async def get_faq(faq_id: str, service: FAQService = Depends(get_faq_service)):
    faq = service.get(faq_id)
    if faq is None:
        raise NotFound(f"FAQ not found: {faq_id}")
    return Envelope(data=faq)
