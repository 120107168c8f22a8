"""
Widget message routing.

A message is answered by the first matching flow:

1. greeting:   "hello" / "hi"         -> welcome text + suggested prompts
2. comparison: "compare" / "vs" ...   -> comparison block (or a hint)
3. search:     a known product word   -> cheapest products in that category
4. browse:     "category" / "browse"  -> browse options
5. AI:         everything else        -> structured LLM reply, options, products

Nothing in this flow is written to the chat log.
"""

import asyncio
import logging
import re

from smart_shopper.core.config import settings
from smart_shopper.core.errors import ShopperError
from smart_shopper.core.vocabulary import BRAND_TERMS, BROWSE_OPTIONS, GREETING_PROMPTS, SEARCH_TERMS
from smart_shopper.schemas.chat import (
    ApiResponse,
    ChatResponse,
    ComparisonBlock,
    ComparisonData,
    MessageBlock,
    MessageData,
    OptionItem,
    OptionsBlock,
    OptionsData,
    ProductsBlock,
    ProductsData,
    SuggestedPrompt,
    SuggestedPromptsBlock,
    SuggestedPromptsData,
)
from smart_shopper.schemas.product import Product
from smart_shopper.services.llm_service import LLMService
from smart_shopper.services.plan_store import ShoppingPlanService
from smart_shopper.services.product_store import ProductStore
from smart_shopper.services.response_builder import card_from_product, comparison_from_product

logger = logging.getLogger(__name__)

GREETING_WORDS = {"hello", "hi"}
COMPARISON_WORDS = {"compare", "comparison", "vs"}
BROWSE_WORDS = {"category", "categories", "browse"}

WELCOME_TEXT = "Hello! I'm your shopping assistant. How can I help you today?"
COMPARISON_HINT = 'I can compare products for you! Try asking "compare laptops" or "compare dell and lenovo".'
FALLBACK_TEXT = (
    "I'm having trouble processing your request right now. "
    'Try asking about specific products like "show me laptops" or say "browse categories".'
)

MAX_COMPARED_BRANDS = 3
QUICK_SEARCH_LIMIT = 4
AI_PRODUCT_LOOKUP = 10
AI_PRODUCT_CARDS = 6

WORD_RE = re.compile(r"[a-z0-9']+")


def words(text: str) -> set[str]:
    return set(WORD_RE.findall(text.lower()))


def find_terms(text: str, vocabulary: tuple[str, ...]) -> list[str]:
    """Vocabulary words that start a word in the text ("laptops" finds "laptop")"""
    return [term for term in vocabulary if re.search(rf"\b{re.escape(term)}", text)]


def reply(session_id: str | None, response: ChatResponse | list[ChatResponse]) -> ApiResponse:
    return ApiResponse(session_id=session_id, response=response)


class ResponseOrchestrator:
    def __init__(self, product_store: ProductStore, llm_service: LLMService, plan_service: ShoppingPlanService):
        self.product_store = product_store
        self.llm_service = llm_service
        self.plan_service = plan_service

    async def handle_message(self, message: str, session_id: str | None = None) -> ApiResponse:
        text = message.lower().strip()
        message_words = words(text)

        if message_words & GREETING_WORDS:
            return self.greeting(session_id)

        if message_words & COMPARISON_WORDS:
            return await self.comparison(text, session_id)

        if found := find_terms(text, SEARCH_TERMS):
            response = await self.quick_search(found[0], session_id)
            if response is not None:
                return response

        if message_words & BROWSE_WORDS:
            return self.browse(session_id)

        try:
            return await self.ai_reply(message, session_id)
        except ShopperError as e:
            logger.error(f"AI reply failed, sending fallback: {e.message}")
        except Exception as e:
            logger.exception(f"AI reply failed, sending fallback: {e}")
        return reply(session_id, MessageBlock(data=MessageData(text=FALLBACK_TEXT)))

    def greeting(self, session_id: str | None) -> ApiResponse:
        return reply(
            session_id,
            [
                MessageBlock(data=MessageData(text=WELCOME_TEXT)),
                SuggestedPromptsBlock(
                    data=SuggestedPromptsData(prompts=[SuggestedPrompt(**p) for p in GREETING_PROMPTS])
                ),
            ],
        )

    async def comparison(self, text: str, session_id: str | None) -> ApiResponse:
        category = next(iter(find_terms(text, SEARCH_TERMS)), None)
        brands = find_terms(text, BRAND_TERMS)

        products: list[Product] = []
        if len(brands) >= 2:
            for brand in brands[:MAX_COMPARED_BRANDS]:
                product = None
                if category:
                    product = await self.product_store.cheapest_by_vendor(brand, category)
                if product is None:
                    product = await self.product_store.cheapest_by_vendor(brand)
                if product is not None:
                    products.append(product)
            subject = " vs ".join(brands)
        elif category:
            products = await self.product_store.cheapest_in_category(category, limit=3)
            subject = category
        else:
            subject = ""

        if len(products) < 2:
            return reply(session_id, MessageBlock(data=MessageData(text=COMPARISON_HINT)))

        logger.info(f"Comparing {len(products)} products for '{subject}'")
        return reply(
            session_id,
            ComparisonBlock(
                data=ComparisonData(
                    message=f"Here's a comparison of {subject} products:",
                    products=[comparison_from_product(p) for p in products],
                    highlight_differences=True,
                )
            ),
        )

    async def quick_search(self, term: str, session_id: str | None) -> ApiResponse | None:
        products = await self.product_store.cheapest_in_category(
            term, limit=QUICK_SEARCH_LIMIT, url_contains=settings.CATALOG_URL_FILTER
        )
        if not products:
            return None
        return reply(
            session_id,
            ProductsBlock(
                data=ProductsData(
                    message=f"I found {len(products)} {term} products for you:",
                    products=[card_from_product(p) for p in products],
                    total_count=len(products),
                    has_more=False,
                )
            ),
        )

    def browse(self, session_id: str | None) -> ApiResponse:
        return reply(
            session_id,
            OptionsBlock(
                data=OptionsData(
                    message="What type of products are you looking for?",
                    options=[OptionItem(**option) for option in BROWSE_OPTIONS],
                    allow_skip=True,
                )
            ),
        )

    async def ai_reply(self, message: str, session_id: str | None) -> ApiResponse:
        logger.info(f"AI request: '{message}'")
        plan = self.plan_service.get(session_id) if session_id else None

        keyword = next((w for w in message.lower().split() if len(w) > 3), None)
        products = await self.product_store.keyword_search(keyword, AI_PRODUCT_LOOKUP) if keyword else []

        result = await asyncio.to_thread(
            self.llm_service.structured_reply, message, products=products or None, plan=plan
        )

        if result.shopping_plan and session_id:
            self.plan_service.adopt(session_id, result.shopping_plan)

        blocks: list[ChatResponse] = [MessageBlock(data=MessageData(text=result.message, format="markdown"))]

        if result.choices:
            blocks.append(
                OptionsBlock(
                    data=OptionsData(message="Select an option to continue:", options=result.choices, allow_skip=True)
                )
            )

        if products:
            blocks.append(
                ProductsBlock(
                    data=ProductsData(
                        message="",
                        products=[card_from_product(p) for p in products[:AI_PRODUCT_CARDS]],
                        total_count=len(products),
                        has_more=len(products) > AI_PRODUCT_CARDS,
                    )
                )
            )

        return reply(session_id, blocks[0] if len(blocks) == 1 else blocks)
