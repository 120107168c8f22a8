from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from smart_shopper.schemas.base import CamelModel, Pagination


class Product(CamelModel):
    """Catalog product as stored in the products collection"""

    id: str
    title: str
    vendor: str = ""
    category: str | None = None
    price: float | None = None
    original_price: float | None = None
    in_stock: bool = True
    url: str = ""
    images: list[str] = Field(default_factory=list)
    specifications: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    body_html: str = ""
    rating: float | None = None
    review_count: int | None = None
    created_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Product":
        data = {k: v for k, v in doc.items() if k != "_id"}
        data["id"] = str(doc.get("_id", doc.get("id", "")))
        if data.get("price") is not None:
            data["price"] = float(data["price"])
        if data.get("original_price") is not None:
            data["original_price"] = float(data["original_price"])
        return cls.model_validate(data)

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(exclude={"id"})
        doc["_id"] = self.id
        return doc


class ProductSummary(CamelModel):
    """Listing projection of a product"""

    id: str
    title: str
    vendor: str = ""
    category: str | None = None
    price: float | None = None
    in_stock: bool = True
    url: str = ""
    images: list[str] = Field(default_factory=list)

    @classmethod
    def from_product(cls, product: Product) -> "ProductSummary":
        return cls.model_validate(product.model_dump(include=set(cls.model_fields)))


class SearchResult(CamelModel):
    """Transient projection returned by product search"""

    id: str
    title: str
    vendor: str = ""
    price: float | None = None
    score: float = Field(..., ge=0.0, le=1.0)
    url: str | None = None
    description: str = ""
    image: str = ""


class ProductPage(BaseModel):
    products: list[ProductSummary]
    pagination: Pagination


class CategoryPage(ProductPage):
    category: str


class CategoryCount(BaseModel):
    name: str
    count: int


class PredefinedCategory(BaseModel):
    name: str
    slug: str
    count: int


class CategoryList(BaseModel):
    predefined: list[PredefinedCategory]
    database: list[CategoryCount]
