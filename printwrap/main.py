# printwrap/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from printwrap.core.config import get_settings
from printwrap.core.errors import register_exception_handlers
from printwrap.database import close_client, ensure_indexes, get_products_collection

# Routers
from printwrap.routers.products import router as products_router
from printwrap.routers.health import router as health_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create product indexes (existing ones are skipped).

    Shutdown:
      - Close the shared MongoClient.
    """
    if settings.INIT_INDEXES_ON_STARTUP:
        logger.info("🔧 Startup: initializing product indexes...")
        try:
            ensure_indexes(get_products_collection())
        except Exception as e:
            # the API still serves without indexes (search falls back to regex)
            logger.error(f"❌ Startup: index initialization FAILED: {e}")
    yield
    close_client()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# API prefix, e.g. /api
app.include_router(products_router, prefix=settings.API_PREFIX)
app.include_router(health_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    """Liveness endpoint (does not touch the store)."""
    return {"status": "ok", "service": "printwrap-catalog"}
