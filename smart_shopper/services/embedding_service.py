import re
from functools import lru_cache

from openai import OpenAI

from smart_shopper.core.config import settings
from smart_shopper.schemas.product import Product

TAG_RE = re.compile(r"<[^>]*>")


def strip_html(html: str, limit: int | None = None) -> str:
    text = TAG_RE.sub("", html or "").strip()
    return text[:limit] if limit else text


class EmbeddingService:
    """Service for creating embeddings from product data using OpenAI"""

    def __init__(self, client: OpenAI | None = None):
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT)
        self.model = settings.EMBEDDING_MODEL

    def extract_product_text(self, product: Product) -> str:
        """
        Searchable text for a product: title, vendor, category, price,
        plain-text description and tags.
        """
        text_parts = [f"Title: {product.title}"]

        if product.vendor:
            text_parts.append(f"Vendor: {product.vendor}")

        if product.category:
            text_parts.append(f"Category: {product.category}")

        if product.price is not None:
            text_parts.append(f"Price: ${product.price}")

        if description := strip_html(product.body_html, 500):
            text_parts.append(f"Description: {description}")

        if product.tags:
            text_parts.append(f"Tags: {', '.join(product.tags)}")

        return " | ".join(text_parts)

    def create_embedding(self, text: str) -> list[float]:
        """Create embedding vector from text using OpenAI API"""
        response = self.client.embeddings.create(
            model=self.model,
            input=text,
            encoding_format="float",
        )
        return response.data[0].embedding

    def create_product_embedding(self, product: Product) -> tuple[str, list[float]]:
        """
        Extract text and create embedding for a product

        Returns:
            tuple of (text_representation, embedding_vector)
        """
        text = self.extract_product_text(product)
        embedding = self.create_embedding(text)
        return text, embedding


@lru_cache
def get_embedding_service() -> EmbeddingService:
    """Get cached embedding service instance"""
    return EmbeddingService()
