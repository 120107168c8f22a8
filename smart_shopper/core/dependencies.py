"""
FastAPI dependency providers for the composed services.

The leaf providers (stores, LLM, vector store) live next to their services;
the ones here only wire them together, so overriding a leaf in
`app.dependency_overrides` reaches every service built on it.
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends

from smart_shopper.core.mongo import ping
from smart_shopper.services.chat_store import ChatStore, get_chat_store
from smart_shopper.services.conversation import ConversationService
from smart_shopper.services.embedding_service import EmbeddingService, get_embedding_service
from smart_shopper.services.image_chat import ImageChatService
from smart_shopper.services.llm_service import LLMService, get_llm_service
from smart_shopper.services.orchestrator import ResponseOrchestrator
from smart_shopper.services.plan_store import ShoppingPlanService, get_plan_service
from smart_shopper.services.product_search import ProductSearchService
from smart_shopper.services.product_store import ProductStore, get_product_store
from smart_shopper.services.qdrant_service import QdrantService, get_qdrant_service
from smart_shopper.services.search_chain import SearchChain


def get_db_ping() -> Callable[[], Awaitable[None]]:
    return ping


def get_product_search_service(
    embedding_service: EmbeddingService = Depends(get_embedding_service),
    qdrant_service: QdrantService = Depends(get_qdrant_service),
    product_store: ProductStore = Depends(get_product_store),
) -> ProductSearchService:
    return ProductSearchService(embedding_service, qdrant_service, product_store)


def get_search_chain(
    product_search: ProductSearchService = Depends(get_product_search_service),
    product_store: ProductStore = Depends(get_product_store),
) -> SearchChain:
    return SearchChain(product_search, product_store)


def get_orchestrator(
    product_store: ProductStore = Depends(get_product_store),
    llm_service: LLMService = Depends(get_llm_service),
    plan_service: ShoppingPlanService = Depends(get_plan_service),
) -> ResponseOrchestrator:
    return ResponseOrchestrator(product_store, llm_service, plan_service)


def get_conversation_service(
    chat_store: ChatStore = Depends(get_chat_store),
    llm_service: LLMService = Depends(get_llm_service),
) -> ConversationService:
    return ConversationService(chat_store, llm_service)


def get_image_chat_service(
    llm_service: LLMService = Depends(get_llm_service),
    search_chain: SearchChain = Depends(get_search_chain),
) -> ImageChatService:
    return ImageChatService(llm_service, search_chain)
