import os
import tempfile
from types import SimpleNamespace

# Settings are read at import time, so the environment goes first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("VECTOR_SEARCH_ENABLED", "false")
os.environ.setdefault("QDRANT_PATH", ":memory:")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="smart-shopper-uploads-"))

import pytest
from fastapi.testclient import TestClient

from smart_shopper.core.dependencies import get_db_ping
from smart_shopper.main import app
from smart_shopper.schemas.product import Product
from smart_shopper.services.chat_store import get_chat_store
from smart_shopper.services.embedding_service import EmbeddingService, get_embedding_service
from smart_shopper.services.faq_service import FAQService
from smart_shopper.services.llm_service import LLMService, get_llm_service
from smart_shopper.services.plan_store import InMemoryPlanStore, ShoppingPlanService, get_plan_service
from smart_shopper.services.product_store import get_product_store
from smart_shopper.services.qdrant_service import QdrantService, get_qdrant_service

from tests.fakes import CATALOG, FakeChatStore, FakeOpenAI, FakeProductStore


@pytest.fixture
def catalog() -> list[Product]:
    return [p.model_copy(deep=True) for p in CATALOG]


@pytest.fixture
def product_store(catalog) -> FakeProductStore:
    return FakeProductStore(catalog)


@pytest.fixture
def chat_store() -> FakeChatStore:
    return FakeChatStore()


@pytest.fixture
def openai_client() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def llm_service(openai_client) -> LLMService:
    return LLMService(client=openai_client, faq_service=FAQService())


@pytest.fixture
def plan_service() -> ShoppingPlanService:
    return ShoppingPlanService(InMemoryPlanStore())


@pytest.fixture
def db_ping():
    state = SimpleNamespace(error=None)

    async def ping():
        if state.error:
            raise state.error

    ping.state = state
    return ping


@pytest.fixture
def api(product_store, chat_store, llm_service, openai_client, plan_service, db_ping):
    """TestClient with every external dependency replaced by an in-memory fake"""
    app.dependency_overrides.update(
        {
            get_product_store: lambda: product_store,
            get_chat_store: lambda: chat_store,
            get_llm_service: lambda: llm_service,
            get_plan_service: lambda: plan_service,
            get_embedding_service: lambda: EmbeddingService(client=openai_client),
            get_qdrant_service: lambda: QdrantService(),
            get_db_ping: lambda: db_ping,
        }
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
