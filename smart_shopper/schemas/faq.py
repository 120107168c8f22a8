from pydantic import BaseModel, Field

from smart_shopper.schemas.base import CamelModel


class FAQ(CamelModel):
    id: str
    question: str
    answer: str
    category: str
    keywords: list[str] = Field(default_factory=list)
    last_updated: str
    url: str | None = None
    context: str | None = None
    related_topics: list[str] = Field(default_factory=list)
    priority: int = 0


class FAQSearchData(BaseModel):
    results: list[FAQ]
    query: str
    total: int
    message: str


class FAQCategoriesData(CamelModel):
    categories: list[str]
    total: int
    total_faqs: int


class FAQCategoryData(BaseModel):
    category: str
    results: list[FAQ]
    total: int
