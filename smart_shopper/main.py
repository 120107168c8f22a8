import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smart_shopper.core.config import settings
from smart_shopper.core.errors import install_error_handlers
from smart_shopper.core.logging_config import setup_logging
from smart_shopper.core.middleware import RequestLoggingMiddleware
from smart_shopper.core.mongo import close_mongo, connect_mongo, ensure_indexes
from smart_shopper.routers.chat import router as chat_router
from smart_shopper.routers.embeddings import router as embeddings_router
from smart_shopper.routers.faq import router as faq_router
from smart_shopper.routers.frontend import router as frontend_router
from smart_shopper.routers.health import router as health_router
from smart_shopper.routers.products import router as products_router
from smart_shopper.routers.search import router as search_router
from smart_shopper.routers.upload import router as upload_router

# Setup logging (must be done before any other imports that use logging)
setup_logging(log_level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await connect_mongo()
    try:
        await ensure_indexes()
    except Exception as e:
        # The API still starts; /api/health reports the database as down
        logger.error(f"❌ Could not ensure MongoDB indexes: {e}")
    yield
    # Shutdown
    await close_mongo()


app = FastAPI(
    title=settings.APP_NAME,
    description="Shopping assistant API: chat, image search, catalog browsing and FAQ",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
install_error_handlers(app)

for router in (
    health_router,
    chat_router,
    upload_router,
    products_router,
    frontend_router,
    faq_router,
    search_router,
    embeddings_router,
):
    app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.APP_NAME}"}
