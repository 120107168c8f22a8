"""Store FAQ lookup used for answering policy questions and grounding LLM prompts"""

from functools import lru_cache

from smart_shopper.schemas.faq import FAQ

FAQ_ENTRIES: list[dict] = [
    {
        "id": "shipping-policy",
        "question": "What is your shipping policy?",
        "answer": "We offer free shipping on orders over $45. Standard shipping takes 3-7 business days. "
        "Express shipping is available for faster delivery. We ship to most locations across Canada.",
        "category": "Shipping",
        "keywords": ["shipping", "delivery", "free shipping", "express", "standard", "canada", "orders", "cost"],
        "last_updated": "2024-01-23",
        "context": "Customer inquiring about shipping costs, delivery times, and availability across Canada",
        "related_topics": ["orders", "delivery", "cost", "timeline"],
        "priority": 9,
    },
    {
        "id": "return-policy",
        "question": "What is your return policy?",
        "answer": "You can return most items within 30 days of purchase with your receipt. Items must be in "
        "original condition. Some restrictions apply to software, ink, and personalized items. Returns can be "
        "made in-store or by mail.",
        "category": "Returns",
        "keywords": ["return", "refund", "exchange", "policy", "30 days", "receipt", "original condition", "software", "ink"],
        "last_updated": "2024-01-23",
        "context": "Customer wants to return or exchange products, needs to know timeframe and conditions",
        "related_topics": ["refunds", "exchanges", "receipt", "conditions"],
        "priority": 10,
    },
    {
        "id": "contact-support",
        "question": "How can I contact customer support?",
        "answer": "You can reach customer support by phone at 1-800-263-6696, through live chat on our website, "
        "or by visiting any store location. Our team is available Monday-Friday 8AM-8PM EST.",
        "category": "Contact",
        "keywords": ["customer support", "phone", "live chat", "contact", "help", "1-800-263-6696", "hours", "EST"],
        "last_updated": "2024-01-23",
        "context": "Customer needs direct assistance and wants to speak with a human representative",
        "related_topics": ["phone support", "live chat", "store locations", "business hours"],
        "priority": 8,
    },
    {
        "id": "price-match",
        "question": "Do you offer price matching?",
        "answer": "Yes, we match prices on identical items from major Canadian competitors. The item must be "
        "currently in stock at both stores. Some exclusions apply.",
        "category": "Pricing",
        "keywords": ["price match", "competitors", "lowest price", "match policy", "identical items", "stock", "exclusions"],
        "last_updated": "2024-01-23",
        "context": "Customer found a lower price elsewhere and wants us to match it",
        "related_topics": ["competitive pricing", "savings", "identical products", "competitor comparison"],
        "priority": 7,
    },
    {
        "id": "rewards-program",
        "question": "How does the rewards program work?",
        "answer": "Rewards members earn points on every purchase: 5% back on ink and toner, 1% on everything "
        "else. Members also receive exclusive offers, free shipping perks, and special member pricing.",
        "category": "Rewards",
        "keywords": ["rewards", "points", "membership", "5%", "ink", "toner", "1%", "exclusive offers", "free shipping", "member pricing"],
        "last_updated": "2024-01-23",
        "context": "Customer wants to understand loyalty program benefits and how to earn/redeem rewards",
        "related_topics": ["loyalty program", "points system", "member benefits", "savings"],
        "priority": 6,
    },
    {
        "id": "store-hours",
        "question": "What are your store hours?",
        "answer": "Store hours vary by location. Most stores are open Monday-Friday 8AM-9PM, Saturday 9AM-6PM, "
        "and Sunday 10AM-6PM. Holiday hours may differ. Use the store locator for your local hours.",
        "category": "Store Information",
        "keywords": ["hours", "open", "closed", "schedule", "store locator", "monday", "friday", "saturday", "sunday", "holiday"],
        "last_updated": "2024-01-23",
        "context": "Customer planning a store visit and needs to know when the store is open",
        "related_topics": ["store visits", "location finder", "holiday hours", "weekend hours"],
        "priority": 5,
    },
    {
        "id": "gift-cards",
        "question": "Do you sell gift cards?",
        "answer": "Yes, gift cards are available in-store and online in denominations from $10 to $500. They "
        "never expire and can be used for any purchase in store or online.",
        "category": "Gift Cards",
        "keywords": ["gift cards", "denominations", "$10", "$500", "never expire", "purchase", "online", "in-store"],
        "last_updated": "2024-01-23",
        "context": "Customer wants to purchase gift cards for others or received a gift card",
        "related_topics": ["gifts", "corporate gifting", "employee rewards", "no expiry"],
        "priority": 4,
    },
    {
        "id": "print-services",
        "question": "What printing services do you offer?",
        "answer": "We offer copies, business cards, flyers, posters, presentations, and binding. Same-day "
        "printing and online ordering with in-store pickup are also available.",
        "category": "Services",
        "keywords": ["printing", "copies", "business cards", "flyers", "posters", "presentations", "binding", "same-day", "online ordering", "pickup"],
        "last_updated": "2024-01-23",
        "context": "Customer needs professional printing services for business or personal use",
        "related_topics": ["business printing", "marketing materials", "same-day service", "professional printing"],
        "priority": 6,
    },
    {
        "id": "ink-recycling",
        "question": "Can I recycle ink cartridges?",
        "answer": "Yes, we accept empty ink and toner cartridges for recycling at no charge, with rewards for "
        "eligible cartridges. Drop off your empties at any store.",
        "category": "Services",
        "keywords": ["ink", "toner", "recycle", "cartridge", "rewards", "environment", "no charge", "drop off", "empty"],
        "last_updated": "2024-01-23",
        "context": "Customer wants to dispose of used cartridges responsibly and potentially earn rewards",
        "related_topics": ["environmental responsibility", "cartridge disposal", "recycling rewards", "sustainability"],
        "priority": 3,
    },
    {
        "id": "business-account",
        "question": "How do I create a business account?",
        "answer": "Click Create Account on our website and select Business Account. You will need your "
        "business information and GST/HST number. Business accounts receive special pricing and exclusive offers.",
        "category": "Account",
        "keywords": ["business", "account", "register", "commercial", "B2B", "GST", "HST", "special pricing", "exclusive offers"],
        "last_updated": "2024-01-23",
        "context": "Business customer wants to access commercial pricing and business-specific benefits",
        "related_topics": ["B2B", "commercial pricing", "bulk orders", "business benefits"],
        "priority": 7,
    },
]


class FAQService:
    """Keyword-scored FAQ search over the static FAQ list"""

    # Score weights for search_for_rag
    QUESTION_WEIGHT = 10
    ANSWER_WEIGHT = 5
    CONTEXT_WEIGHT = 7
    KEYWORD_WEIGHT = 3
    PRIORITY_WEIGHT = 0.5

    def __init__(self, entries: list[dict] | None = None):
        self.faqs = [FAQ.model_validate(entry) for entry in (entries if entries is not None else FAQ_ENTRIES)]

    def score(self, faq: FAQ, query: str) -> float:
        term = query.lower()
        score = 0.0
        if term in faq.question.lower():
            score += self.QUESTION_WEIGHT
        if term in faq.answer.lower():
            score += self.ANSWER_WEIGHT
        if faq.context and term in faq.context.lower():
            score += self.CONTEXT_WEIGHT
        score += sum(1 for keyword in faq.keywords if term in keyword.lower()) * self.KEYWORD_WEIGHT
        score += faq.priority * self.PRIORITY_WEIGHT
        return score

    def search_for_rag(self, query: str, limit: int = 5) -> list[FAQ]:
        """
        Rank FAQs for prompt grounding.

        Question match +10, answer +5, context +7, +3 per matching keyword
        and +0.5 x priority. Zero scores are dropped; ties keep list order.
        """
        scored = [(faq, self.score(faq, query)) for faq in self.faqs]
        scored = [item for item in scored if item[1] > 0]
        scored.sort(key=lambda item: item[1], reverse=True)
        return [faq for faq, _ in scored[:limit]]

    def search(self, query: str | None, limit: int = 10) -> list[FAQ]:
        term = (query or "").lower()
        results = [
            faq
            for faq in self.faqs
            if term in faq.question.lower()
            or term in faq.answer.lower()
            or any(term in keyword.lower() for keyword in faq.keywords)
        ]
        return results[:limit]

    def categories(self) -> list[str]:
        return sorted({faq.category for faq in self.faqs})

    def by_category(self, category: str, limit: int = 10) -> list[FAQ]:
        wanted = category.lower()
        return [faq for faq in self.faqs if faq.category.lower() == wanted][:limit]

    def get(self, faq_id: str) -> FAQ | None:
        return next((faq for faq in self.faqs if faq.id == faq_id), None)

    def count(self) -> int:
        return len(self.faqs)


@lru_cache
def get_faq_service() -> FAQService:
    """Get cached FAQ service instance"""
    return FAQService()
