from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse

from smart_shopper.core.dependencies import get_image_chat_service
from smart_shopper.core.errors import NotFound
from smart_shopper.schemas.base import Envelope
from smart_shopper.schemas.chat import ImageChatData
from smart_shopper.services.image_chat import ImageChatService, resolve_image

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post("/image-chat", response_model=Envelope[ImageChatData])
async def image_chat(
    image: UploadFile = File(..., description="Product photo (image/*, max 10MB)"),
    message: str | None = Form(None),
    session_id: str | None = Form(None, alias="sessionId"),
    service: ImageChatService = Depends(get_image_chat_service),
):
    """
    Identify the product in an uploaded photo and find similar catalog items.

    The response carries the analysis, the matched products and which search
    strategy produced them (`searchMethod` is null when nothing matched).
    """
    data = await service.handle_upload(image, message, session_id)
    return Envelope(data=data)


@router.get("/images/{filename}")
async def serve_image(filename: str):
    path = resolve_image(filename)
    if path is None:
        raise NotFound("Image not found")
    return FileResponse(path)
