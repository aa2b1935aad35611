# printwrap/core/config.py
import re
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from printwrap.schemas import pagination


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Env vars (.env), all optional:
      - MONGODB_URI (default: local mongod)
      - MONGODB_DB (database holding the products collection)
      - LOG_LEVEL

    Pagination defaults come from schemas/pagination.py, which the client
    shares; MAX_PAGE_SIZE can only narrow the schema bound.
    """

    PROJECT_NAME: str = "PrintWrap Catalog API"
    API_PREFIX: str = "/api"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "printwrap-pro"
    PRODUCTS_COLLECTION: str = "products"
    INIT_INDEXES_ON_STARTUP: bool = True

    # Pagination
    DEFAULT_PAGE_SIZE: int = pagination.DEFAULT_PAGE_SIZE
    MAX_PAGE_SIZE: int = pagination.MAX_PAGE_SIZE

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def masked_mongodb_uri(self) -> str:
        """
        MONGODB_URI with the user:password part replaced, safe to log.
        """
        return re.sub(r"//[^:/@]+:[^@]+@", "//***:***@", self.MONGODB_URI)


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
