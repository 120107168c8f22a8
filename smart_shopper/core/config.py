from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Smart Shopper API"
    ENVIRONMENT: str = "development"  # development | production | test
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # MongoDB settings
    MONGO_URL: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "smart_shopper"
    MONGO_TIMEOUT_MS: int = 5000

    # Collection names
    PRODUCTS_COLLECTION: str = "products"
    CHAT_MESSAGES_COLLECTION: str = "chat_messages"

    # OpenAI settings
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_VISION_MODEL: str = "gpt-4o"
    OPENAI_MAX_TOKENS: int = 500
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_TIMEOUT: float = 30.0
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_DIMENSION: int = 1536  # Dimension for text-embedding-3-small

    # Qdrant settings
    VECTOR_SEARCH_ENABLED: bool = True
    QDRANT_URL: str | None = None  # Remote server; takes precedence over QDRANT_PATH
    QDRANT_PATH: str = "./qdrant_db"  # Local storage path, ":memory:" for an ephemeral store
    QDRANT_COLLECTION_NAME: str = "smart_shopper_products"

    # Search settings
    SEARCH_RESULT_LIMIT: int = 6
    SEARCH_MAX_COMBINED_TERMS: int = 3
    CONVERSATION_HISTORY_LIMIT: int = 10
    # Restrict quick catalog lookups to product URLs containing this text
    CATALOG_URL_FILTER: str | None = None

    # Uploads
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Public URL prefix for relative product images
    IMAGE_BASE_URL: str = "http://localhost:3000"
    DEFAULT_PRODUCT_IMAGE: str = "/uploads/images/categories/default.jpg"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3001",
        "http://localhost:3002",
        "http://localhost:3003",
        "https://localhost:3001",
        "https://localhost:3002",
        "https://localhost:3003",
    ]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
