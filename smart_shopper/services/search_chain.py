"""
Multi-strategy product search used for image-derived (and free-text) signals.

Strategies run in order and the first one that yields products wins:

1. combined_terms:    up to three search terms joined into one phrase, vector search
2. product_type:      product type label against title, category and tags
3. individual_term:   each search term on its own against title and vendor
4. category_fallback: a known category word found in the type or terms,
                      cheapest title matches first

Every strategy is isolated: a failure is logged and the next one runs. The
chain itself never raises; "no products" is a normal outcome.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from smart_shopper.core.config import settings
from smart_shopper.core.vocabulary import CATEGORY_FALLBACK_WORDS, FILLER_WORDS
from smart_shopper.schemas.chat import ImageAnalysis
from smart_shopper.schemas.product import SearchResult
from smart_shopper.services.product_search import ProductSearchService, to_search_result
from smart_shopper.services.product_store import ProductStore

logger = logging.getLogger(__name__)

PRODUCT_TYPE_SCORE = 0.85
INDIVIDUAL_TERM_SCORE = 0.75
CATEGORY_FALLBACK_SCORE = 0.7

KEYWORD_RE = re.compile(r"[a-z0-9][a-z0-9'-]*")
MAX_TEXT_KEYWORDS = 3


@dataclass
class SearchSignal:
    """What we know about the wanted product"""

    product_type: str = ""
    search_terms: list[str] = field(default_factory=list)
    query: str = ""

    @classmethod
    def from_analysis(cls, analysis: ImageAnalysis) -> "SearchSignal":
        return cls(product_type=analysis.product_type, search_terms=list(analysis.search_terms))

    @classmethod
    def from_text(cls, message: str) -> "SearchSignal":
        """Keywords of a chat message: words longer than three letters, fillers dropped, at most three"""
        keywords: list[str] = []
        for word in KEYWORD_RE.findall(message.lower()):
            if len(word) > 3 and word not in FILLER_WORDS and word not in keywords:
                keywords.append(word)
        return cls(search_terms=keywords[:MAX_TEXT_KEYWORDS], query=message.strip())

    @property
    def has_product_type(self) -> bool:
        return bool(self.product_type.strip()) and self.product_type.strip().lower() != "unknown"


@dataclass
class SearchOutcome:
    products: list[SearchResult] = field(default_factory=list)
    method: str | None = None
    query: str = ""


Attempt = Callable[[SearchSignal], Awaitable[SearchOutcome | None]]


class SearchChain:
    def __init__(
        self,
        product_search: ProductSearchService,
        product_store: ProductStore,
        limit: int | None = None,
        max_combined_terms: int | None = None,
        fallback_words: tuple[str, ...] = CATEGORY_FALLBACK_WORDS,
    ):
        self.product_search = product_search
        self.product_store = product_store
        self.limit = limit or settings.SEARCH_RESULT_LIMIT
        self.max_combined_terms = max_combined_terms or settings.SEARCH_MAX_COMBINED_TERMS
        self.fallback_words = fallback_words
        self.strategies: list[tuple[str, Attempt]] = [
            ("combined_terms", self.combined_terms),
            ("product_type", self.product_type),
            ("individual_term", self.individual_term),
            ("category_fallback", self.category_fallback),
        ]

    async def run(self, signal: SearchSignal) -> SearchOutcome:
        for name, attempt in self.strategies:
            try:
                outcome = await attempt(signal)
            except Exception as e:
                logger.warning(f"Search strategy {name} failed: {e}")
                continue
            if outcome and outcome.products:
                logger.info(f"Search strategy {name} found {len(outcome.products)} products for '{outcome.query}'")
                return outcome

        logger.info("No search strategy produced products")
        return SearchOutcome()

    async def combined_terms(self, signal: SearchSignal) -> SearchOutcome | None:
        terms = [t.strip() for t in signal.search_terms if t.strip()][: self.max_combined_terms]
        query = " ".join(terms) or signal.query.strip()
        if not query:
            return None
        products = await self.product_search.search_products(query, self.limit)
        return SearchOutcome(products=products[: self.limit], method="combined_terms", query=query)

    async def product_type(self, signal: SearchSignal) -> SearchOutcome | None:
        if not signal.has_product_type:
            return None
        query = signal.product_type.strip()
        products = await self.product_store.search_by_type(query, self.limit)
        return SearchOutcome(
            products=[to_search_result(p, PRODUCT_TYPE_SCORE) for p in products],
            method="product_type",
            query=query,
        )

    async def individual_term(self, signal: SearchSignal) -> SearchOutcome | None:
        for term in signal.search_terms:
            term = term.strip()
            if not term:
                continue
            try:
                products = await self.product_store.search_by_term(term, self.limit)
            except Exception as e:
                logger.warning(f"Individual term search failed for '{term}': {e}")
                continue
            if products:
                return SearchOutcome(
                    products=[to_search_result(p, INDIVIDUAL_TERM_SCORE) for p in products],
                    method="individual_term",
                    query=term,
                )
        return None

    async def category_fallback(self, signal: SearchSignal) -> SearchOutcome | None:
        word = self.find_category_word(signal)
        if word is None:
            return None
        products = await self.product_store.search_title_cheapest(word, self.limit)
        return SearchOutcome(
            products=[to_search_result(p, CATEGORY_FALLBACK_SCORE) for p in products],
            method="category_fallback",
            query=word,
        )

    def find_category_word(self, signal: SearchSignal) -> str | None:
        product_type = signal.product_type.lower()
        terms = [t.lower() for t in signal.search_terms]
        for word in self.fallback_words:
            if word in product_type or any(word in term for term in terms):
                return word
        return None
