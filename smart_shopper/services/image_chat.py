"""Image upload handling: store the file, identify the product, find matches"""

import asyncio
import logging
import secrets
import time
from pathlib import Path

from fastapi import UploadFile

from smart_shopper.core.config import settings
from smart_shopper.core.errors import ValidationFailed
from smart_shopper.schemas.chat import ImageAnalysisSummary, ImageChatData
from smart_shopper.services.llm_service import LLMService
from smart_shopper.services.response_builder import image_reply_text
from smart_shopper.services.search_chain import SearchChain, SearchSignal

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def images_dir() -> Path:
    return Path(settings.UPLOAD_DIR) / "images"


def unique_filename(original: str | None) -> str:
    suffix = Path(original or "").suffix.lower()
    return f"image-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


def resolve_image(filename: str) -> Path | None:
    """Path of a stored upload, or None for missing files and traversal attempts"""
    directory = images_dir().resolve()
    path = (directory / filename).resolve()
    if path.parent != directory or not path.is_file():
        return None
    return path


async def save_upload(upload: UploadFile) -> Path:
    """Write an uploaded image to disk, enforcing type and size limits"""
    if not (upload.content_type or "").startswith("image/"):
        raise ValidationFailed("Only image files are allowed!")

    directory = images_dir()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / unique_filename(upload.filename)

    written = 0
    try:
        with path.open("wb") as out:
            while chunk := await upload.read(CHUNK_SIZE):
                written += len(chunk)
                if written > settings.MAX_UPLOAD_BYTES:
                    raise ValidationFailed(f"Image exceeds the {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit")
                out.write(chunk)
    except Exception:
        path.unlink(missing_ok=True)
        raise

    logger.info(f"Saved upload {upload.filename} as {path.name} ({written} bytes)")
    return path


class ImageChatService:
    def __init__(self, llm_service: LLMService, search_chain: SearchChain):
        self.llm_service = llm_service
        self.search_chain = search_chain

    async def handle_upload(
        self,
        upload: UploadFile,
        message: str | None = None,
        session_id: str | None = None,
    ) -> ImageChatData:
        path = await save_upload(upload)
        try:
            return await self.analyze_and_search(path, message, session_id)
        except Exception:
            logger.exception(f"Image chat failed, removing {path.name}")
            path.unlink(missing_ok=True)
            raise

    async def analyze_and_search(
        self,
        path: Path,
        message: str | None = None,
        session_id: str | None = None,
    ) -> ImageChatData:
        logger.info("Analyzing uploaded image with the vision model...")
        analysis = await asyncio.to_thread(self.llm_service.analyze_image, path, message)

        outcome = await self.search_chain.run(SearchSignal.from_analysis(analysis))
        logger.info(f"Final search result: {len(outcome.products)} products via {outcome.method or 'none'}")

        return ImageChatData(
            session_id=session_id or "new-session",
            user_message=message or "Image uploaded",
            image_url=f"/api/upload/images/{path.name}",
            ai_response=image_reply_text(analysis, outcome.products),
            image_analysis=ImageAnalysisSummary(
                product_type=analysis.product_type,
                features=analysis.features,
                search_terms=analysis.search_terms,
            ),
            products=outcome.products,
            search_query=outcome.query,
            search_method=outcome.method,
        )
