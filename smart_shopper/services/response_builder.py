"""Conversions from catalog products to widget response blocks"""

from collections.abc import Sequence

from smart_shopper.core.config import settings
from smart_shopper.schemas.chat import (
    ComparisonProduct,
    ImageAnalysis,
    ProductCard,
    ProductSpecification,
)
from smart_shopper.schemas.product import Product, SearchResult


def absolute_image_url(image: str | None) -> str:
    """Absolute URL for a product image, or the default image"""
    if not image:
        image = settings.DEFAULT_PRODUCT_IMAGE
    if image.startswith(("http://", "https://")):
        return image
    return f"{settings.IMAGE_BASE_URL.rstrip('/')}{image}"


def card_from_product(product: Product) -> ProductCard:
    return ProductCard(
        id=product.id,
        name=product.title,
        price=product.price or 0.0,
        compare_at_price=product.original_price or None,
        image=absolute_image_url(product.images[0] if product.images else None),
        rating=product.rating,
        review_count=product.review_count,
        url=product.url,
        availability="In Stock" if product.in_stock else "Out of Stock",
        sku=product.id,
        brand=product.vendor or None,
        category=product.category,
    )


def card_from_search_result(result: SearchResult) -> ProductCard:
    return ProductCard(
        id=result.id,
        name=result.title,
        price=result.price or 0.0,
        image=absolute_image_url(result.image),
        url=result.url or "",
        availability="In Stock",
        sku=result.id,
        brand=result.vendor or None,
    )


def specifications(product: Product) -> list[ProductSpecification]:
    """Non-empty specifications as display pairs, without the internal `type` key"""
    return [
        ProductSpecification(name=name[:1].upper() + name[1:], value=str(value))
        for name, value in product.specifications.items()
        if value and name != "type"
    ]


def comparison_from_product(product: Product) -> ComparisonProduct:
    return ComparisonProduct(
        id=product.id,
        name=product.title,
        price=product.price or 0.0,
        compare_at_price=product.original_price or None,
        image=absolute_image_url(product.images[0] if product.images else None),
        url=product.url,
        brand=product.vendor or "Unknown",
        category=product.category or "Product",
        specifications=specifications(product),
    )


def image_reply_text(analysis: ImageAnalysis, products: Sequence[SearchResult]) -> str:
    """Markdown summary of an image analysis and its product matches"""
    text = "📸 **Image Analysis**\n\n"
    text += f"I can see: **{analysis.analysis}**\n\n"
    text += f"Product Type: **{analysis.product_type}**\n"

    if analysis.features:
        text += "\nKey features identified:\n"
        text += "".join(f"• {feature}\n" for feature in analysis.features)

    if products:
        text += f"\n\n🛒 **Here are {len(products)} {analysis.product_type or 'similar'} products from our store:**"
    else:
        suggestions = ", ".join(analysis.search_terms) or analysis.product_type
        text += f"\n\nI couldn't find exact matches in our inventory. Try searching for: {suggestions}"

    return text
