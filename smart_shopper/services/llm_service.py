"""LLM adapter: free-text replies, structured JSON replies and image analysis"""

import base64
import json
import logging
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from openai import OpenAI
from pydantic import ValidationError

from smart_shopper.core.config import settings
from smart_shopper.core.errors import UpstreamUnavailable
from smart_shopper.schemas.chat import (
    ChatMessage,
    ImageAnalysis,
    OptionItem,
    ShoppingPlan,
    StructuredReply,
)
from smart_shopper.schemas.faq import FAQ
from smart_shopper.schemas.product import Product
from smart_shopper.services.faq_service import FAQService, get_faq_service

logger = logging.getLogger(__name__)

PERSONA_PROMPT = """You are a helpful AI shopping assistant for an office supplies and technology retailer. You help customers find office supplies, furniture, technology, and other products.

Key guidelines:
- Be friendly, professional, and helpful
- Focus on our products and services
- Provide accurate information based on available context
- Ask clarifying questions when needed
- Provide specific product recommendations when possible
- If you don't know something, say so honestly
- Keep responses concise but informative
- Always provide natural, conversational responses rather than just reading raw data"""

STRUCTURED_PROMPT = """You are a helpful AI shopping assistant for an office supplies and technology retailer.

IMPORTANT: You MUST respond with a valid JSON object in this exact format:
{
  "message": "Your full response message here with markdown formatting",
  "choices": [
    {"label": "Choice 1", "value": "choice_1", "icon": "emoji"},
    {"label": "Choice 2", "value": "choice_2", "icon": "emoji"}
  ],
  "shoppingPlan": {
    "items": ["item1", "item2", "item3"],
    "selectedItems": []
  }
}

Rules:
1. "message" is REQUIRED - always include your full helpful response
2. "choices" is OPTIONAL - include ONLY when you're offering categories/options to explore
3. "shoppingPlan" is OPTIONAL - include when helping user plan a multi-item purchase (like setting up a home office)
4. Use appropriate emojis for icons: 💻 laptop, 🪑 chair, 🖥️ monitor, ⌨️ keyboard, 🖨️ printer, 📄 paper, 💾 storage, 🎧 headphones, 📎 supplies, 🖱️ mouse, 📦 other
5. Keep choices to 3-6 options max
6. Be conversational and helpful in your message
7. Use markdown formatting in message (bold, lists, etc.)"""

VISION_PROMPT = """You are a product identification expert for an office supplies and technology retailer. Analyze images to identify products and suggest search terms.

Respond in JSON format:
{
  "analysis": "Brief description of what you see in the image",
  "productType": "The general category (e.g., Office Chair, Printer, Laptop, Pen, Notebook)",
  "searchTerms": ["array of 3-5 search terms to find this or similar products"],
  "features": ["key features or attributes you can identify"]
}"""

DEFAULT_IMAGE_PROMPT = "What product is this? Help me find similar items."

UNANALYZED_IMAGE = "I couldn't fully analyze this image. Please describe what you're looking for."

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def product_line(product: Product) -> str:
    price = product.price if product.price is not None else "Price available in store"
    return f"- {product.title} by {product.vendor} (${price})"


def faq_block(faqs: Sequence[FAQ]) -> str:
    return "\n\n".join(f"Q: {faq.question}\nA: {faq.answer}" for faq in faqs)


def as_openai_messages(history: Sequence[ChatMessage]) -> list[dict[str, str]]:
    return [{"role": m.role, "content": m.content} for m in history]


def parse_structured_reply(text: str) -> StructuredReply:
    """
    Parse a JSON-mode completion.

    Anything that is not a JSON object with a usable "message" degrades to
    the raw text as the message with no choices and no plan.
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Failed to parse AI JSON response, using raw text")
        return StructuredReply(message=text)

    if not isinstance(parsed, dict):
        logger.warning("AI JSON response is not an object, using raw text")
        return StructuredReply(message=text)

    message = parsed.get("message")
    reply = StructuredReply(message=message if isinstance(message, str) and message else text)

    if isinstance(parsed.get("choices"), list) and parsed["choices"]:
        try:
            reply.choices = [OptionItem.model_validate(choice) for choice in parsed["choices"]]
        except ValidationError as e:
            logger.warning(f"Ignoring malformed choices in AI response: {e.error_count()} errors")

    plan = parsed.get("shoppingPlan")
    if isinstance(plan, dict) and isinstance(plan.get("items"), list):
        try:
            reply.shopping_plan = ShoppingPlan.model_validate(plan).normalized()
        except ValidationError as e:
            logger.warning(f"Ignoring malformed shopping plan in AI response: {e.error_count()} errors")

    if isinstance(parsed.get("continueWithPlan"), bool):
        reply.continue_with_plan = parsed["continueWithPlan"]

    return reply


class LLMService:
    """Wraps OpenAI chat, JSON-mode and vision completions"""

    def __init__(self, client: OpenAI | None = None, faq_service: FAQService | None = None):
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT)
        self.faq_service = faq_service or get_faq_service()
        self.model = settings.OPENAI_MODEL

    def faq_context(self, message: str, limit: int = 2) -> list[FAQ]:
        try:
            return self.faq_service.search_for_rag(message, limit)
        except Exception as e:
            logger.warning(f"Could not fetch FAQ context: {e}")
            return []

    def build_system_prompt(self, products: Sequence[Product] | None = None, faqs: Sequence[FAQ] | None = None) -> str:
        sections = []

        if faqs:
            sections.append(f"Relevant FAQ Information:\n{faq_block(faqs[:3])}")

        if products:
            lines = "\n".join(product_line(p) for p in products[:5])
            sections.append(f"Current relevant products in our inventory:\n{lines}")

        if not sections:
            return PERSONA_PROMPT

        context = "\n\n".join(sections)
        return (
            f"{PERSONA_PROMPT}\n\n{context}\n\n"
            "Use this context to provide helpful, natural responses. "
            "Don't just read the information - interpret it and respond conversationally."
        )

    def build_structured_prompt(
        self,
        products: Sequence[Product] | None = None,
        faqs: Sequence[FAQ] | None = None,
        plan: ShoppingPlan | None = None,
    ) -> str:
        parts = [STRUCTURED_PROMPT]

        if plan and plan.items:
            parts.append(
                "CURRENT SHOPPING PLAN:\n"
                f"- Total items planned: {', '.join(plan.items)}\n"
                f"- Already selected: {', '.join(plan.selected_items) or 'none'}\n"
                f"- Remaining: {', '.join(plan.remaining())}\n"
                "Reference this plan in your response and offer to continue with remaining items."
            )

        if products:
            lines = "\n".join(product_line(p) for p in products[:5])
            parts.append(f"AVAILABLE PRODUCTS:\n{lines}")

        if faqs:
            parts.append(f"RELEVANT FAQ:\n{faq_block(faqs[:2])}")

        parts.append("RESPOND ONLY WITH VALID JSON, NO OTHER TEXT.")
        return "\n\n".join(parts)

    def chat_reply(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        products: Sequence[Product] | None = None,
    ) -> str:
        """Free-text assistant reply grounded in FAQ and product context"""
        messages = [
            {"role": "system", "content": self.build_system_prompt(products, self.faq_context(message))},
            *as_openai_messages(history),
            {"role": "user", "content": message},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=settings.OPENAI_MAX_TOKENS,
                temperature=settings.OPENAI_TEMPERATURE,
            )
        except Exception as e:
            logger.error(f"OpenAI chat error: {e}")
            raise UpstreamUnavailable("Failed to generate AI response") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamUnavailable("No response generated from OpenAI")
        return content

    def structured_reply(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        products: Sequence[Product] | None = None,
        plan: ShoppingPlan | None = None,
    ) -> StructuredReply:
        """
        JSON-mode reply with optional choices and shopping plan.

        Malformed JSON never raises (see parse_structured_reply); a provider
        failure raises UpstreamUnavailable so the caller can degrade.
        """
        messages = [
            {"role": "system", "content": self.build_structured_prompt(products, self.faq_context(message), plan)},
            *as_openai_messages(history),
            {"role": "user", "content": message},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=800,
                temperature=settings.OPENAI_TEMPERATURE,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            logger.error(f"OpenAI structured response error: {e}")
            raise UpstreamUnavailable("Failed to generate AI response") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamUnavailable("No response generated from OpenAI")
        return parse_structured_reply(content)

    def analyze_image(self, image_path: Path, prompt: str | None = None) -> ImageAnalysis:
        """
        Identify the product in an uploaded image.

        Any failure (unreadable file, provider error, bad JSON) returns the
        canned "could not analyze" result.
        """
        try:
            image_b64 = base64.b64encode(image_path.read_bytes()).decode("ascii")
            mime_type = MIME_TYPES.get(image_path.suffix.lower(), "image/jpeg")

            response = self.client.chat.completions.create(
                model=settings.OPENAI_VISION_MODEL,
                messages=[
                    {"role": "system", "content": VISION_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:{mime_type};base64,{image_b64}", "detail": "high"},
                            },
                            {"type": "text", "text": prompt or DEFAULT_IMAGE_PROMPT},
                        ],
                    },
                ],
                response_format={"type": "json_object"},
                max_tokens=500,
            )

            result = json.loads(response.choices[0].message.content or "{}")
            analysis = ImageAnalysis(
                analysis=result.get("analysis") or "Unable to analyze image",
                product_type=result.get("productType") or "Unknown",
                search_terms=result.get("searchTerms") or [],
                features=result.get("features") or [],
            )
            logger.info(f"Image analysis completed: {analysis.product_type} {analysis.search_terms}")
            return analysis

        except Exception as e:
            logger.error(f"Image analysis error: {e}")
            return ImageAnalysis(analysis=UNANALYZED_IMAGE)

    def test_connection(self) -> bool:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": "Hello, this is a connection test."}],
                max_tokens=10,
            )
            return bool(response.choices and response.choices[0].message.content)
        except Exception as e:
            logger.error(f"OpenAI connection test failed: {e}")
            return False


@lru_cache
def get_llm_service() -> LLMService:
    """Get cached LLM service instance"""
    return LLMService()
