"""Widget-facing endpoints returning tagged response blocks"""

import logging

from fastapi import APIRouter, Depends

from smart_shopper.core.dependencies import get_orchestrator
from smart_shopper.schemas.chat import ApiResponse, MessageRequest, ProductClickedRequest
from smart_shopper.services.orchestrator import ResponseOrchestrator
from smart_shopper.services.plan_store import ShoppingPlanService, get_plan_service

router = APIRouter(prefix="/frontend", tags=["Frontend"])
logger = logging.getLogger(__name__)


@router.post("/message", response_model=ApiResponse, response_model_exclude_none=True)
async def frontend_message(
    request: MessageRequest,
    orchestrator: ResponseOrchestrator = Depends(get_orchestrator),
):
    """
    Answer a widget message with one block or a list of blocks
    (`message`, `suggested_prompts`, `options`, `products`, `comparison`).
    """
    return await orchestrator.handle_message(request.message, request.session_id)


@router.post("/product-clicked", response_model=ApiResponse, response_model_exclude_none=True)
async def product_clicked(
    request: ProductClickedRequest,
    plan_service: ShoppingPlanService = Depends(get_plan_service),
):
    """Tick off the matching shopping-plan item and remind about the rest"""
    logger.info(f"Product clicked in session {request.session_id}: {request.product_name} ({request.product_category})")
    return plan_service.record_click(request.session_id, request.product_category, request.product_name)
