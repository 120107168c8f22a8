from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator

from smart_shopper.schemas.base import CamelModel, Timestamped, utc_now
from smart_shopper.schemas.product import SearchResult

ChatRole = Literal["user", "assistant"]
Availability = Literal["In Stock", "Low Stock", "Out of Stock", "Pre-Order"]


class ChatMessage(BaseModel):
    session_id: str
    role: ChatRole
    content: str
    created_at: datetime = Field(default_factory=utc_now)


# ============================================================================
# Response blocks (tagged union on `type`)
# ============================================================================


class SuggestedPrompt(CamelModel):
    id: str
    text: str
    icon: str | None = None


class OptionItem(CamelModel):
    label: str
    value: str
    icon: str | None = None
    disabled: bool | None = None


class ProductCard(CamelModel):
    id: str
    name: str
    price: float
    compare_at_price: float | None = None
    image: str
    rating: float | None = None
    review_count: int | None = None
    url: str
    availability: Availability
    badge: str | None = None
    sku: str | None = None
    brand: str | None = None
    category: str | None = None


class ProductSpecification(CamelModel):
    name: str
    value: str


class ComparisonProduct(CamelModel):
    id: str
    name: str
    price: float
    compare_at_price: float | None = None
    image: str
    url: str
    brand: str | None = None
    category: str | None = None
    specifications: list[ProductSpecification] = Field(default_factory=list)


class MessageData(CamelModel):
    text: str
    format: Literal["plain", "markdown", "html"] = "plain"


class SuggestedPromptsData(CamelModel):
    prompts: list[SuggestedPrompt]


class OptionsData(CamelModel):
    message: str
    options: list[OptionItem]
    allow_skip: bool | None = None


class ProductsData(CamelModel):
    message: str | None = None
    products: list[ProductCard]
    total_count: int | None = None
    has_more: bool | None = None


class ComparisonData(CamelModel):
    message: str | None = None
    products: list[ComparisonProduct]
    highlight_differences: bool | None = None


class MessageBlock(BaseModel):
    type: Literal["message"] = "message"
    data: MessageData


class SuggestedPromptsBlock(BaseModel):
    type: Literal["suggested_prompts"] = "suggested_prompts"
    data: SuggestedPromptsData


class OptionsBlock(BaseModel):
    type: Literal["options"] = "options"
    data: OptionsData


class ProductsBlock(BaseModel):
    type: Literal["products"] = "products"
    data: ProductsData


class ComparisonBlock(BaseModel):
    type: Literal["comparison"] = "comparison"
    data: ComparisonData


ChatResponse = Annotated[
    Union[MessageBlock, SuggestedPromptsBlock, OptionsBlock, ProductsBlock, ComparisonBlock],
    Field(discriminator="type"),
]


class ApiError(BaseModel):
    code: str
    message: str


class ApiResponse(Timestamped):
    """Envelope returned by the widget-facing endpoints"""

    success: bool = True
    session_id: str | None = None
    has_reminder: bool | None = None
    response: ChatResponse | list[ChatResponse] | None = None
    error: ApiError | None = None


# ============================================================================
# Shopping plan and structured LLM output
# ============================================================================


class ShoppingPlan(CamelModel):
    items: list[str] = Field(default_factory=list)
    selected_items: list[str] = Field(default_factory=list)

    def remaining(self) -> list[str]:
        return [item for item in self.items if item not in self.selected_items]

    def normalized(self) -> "ShoppingPlan":
        """Strip blanks and duplicates and keep selected items within items"""
        items: list[str] = []
        for item in self.items:
            item = item.strip()
            if item and item not in items:
                items.append(item)
        selected: list[str] = []
        for item in self.selected_items:
            item = item.strip()
            if item in items and item not in selected:
                selected.append(item)
        return ShoppingPlan(items=items, selected_items=selected)


class StructuredReply(CamelModel):
    message: str
    choices: list[OptionItem] | None = None
    shopping_plan: ShoppingPlan | None = None
    continue_with_plan: bool | None = None

    def as_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ImageAnalysis(CamelModel):
    analysis: str
    product_type: str = "Unknown"
    search_terms: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)

    @field_validator("search_terms", "features", mode="before")
    @classmethod
    def _only_strings(cls, value):
        if not isinstance(value, list):
            return []
        return [str(v) for v in value if v]


# ============================================================================
# Requests
# ============================================================================


class MessageRequest(CamelModel):
    message: str = Field(..., min_length=1, description="User message text")
    session_id: str | None = None

    @field_validator("message")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message is required")
        return value


class ProductClickedRequest(CamelModel):
    session_id: str | None = None
    product_id: str | None = None
    product_name: str | None = None
    product_category: str | None = None


# ============================================================================
# `{success, data}` payloads of the chat / upload endpoints
# ============================================================================


class SimpleChatData(Timestamped):
    user_message: str
    ai_response: str


class ConversationData(Timestamped):
    session_id: str
    user_message: str
    ai_response: str


class HistoryMessage(CamelModel):
    role: ChatRole
    content: str
    timestamp: datetime


class HistoryData(CamelModel):
    session_id: str
    messages: list[HistoryMessage]


class ClearedData(CamelModel):
    message: str = "Conversation cleared"
    session_id: str
    deleted_count: int


class ConnectionData(CamelModel):
    connected: bool
    message: str


class ImageAnalysisSummary(CamelModel):
    product_type: str
    features: list[str]
    search_terms: list[str]


class ImageChatData(Timestamped):
    session_id: str
    user_message: str
    image_url: str
    ai_response: str
    image_analysis: ImageAnalysisSummary
    products: list[SearchResult]
    search_query: str
    search_method: str | None = None
