# printwrap/routers/health.py
from collections.abc import Callable

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pymongo.database import Database

from printwrap.core.config import get_settings
from printwrap.database import get_database
from printwrap.repositories.product_repo import ProductRepository
from printwrap.schemas.health import HealthReport
from printwrap.services.health_service import HealthService

settings = get_settings()

router = APIRouter(prefix="/health", tags=["Health"])

service = HealthService(ProductRepository())


def get_database_factory() -> Callable[[], Database]:
    """
    The health check opens the database itself so that connection
    errors end up in the report rather than in a 500.
    """
    return get_database


@router.get("", response_model=HealthReport)
def health_check(
    database_factory: Callable[[], Database] = Depends(get_database_factory),
):
    """
    Store connectivity, visible collections and product count.

    Unhealthy reports are returned with 503 instead of raising.
    """
    report = service.check(database_factory, settings.PRODUCTS_COLLECTION)
    if report.status == "unhealthy":
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=report.model_dump(mode="json", by_alias=True),
        )
    return report
