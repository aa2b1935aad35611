# printwrap/services/health_service.py
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from pymongo.database import Database

from printwrap.repositories.product_repo import ProductRepository
from printwrap.schemas.health import HealthReport

logger = logging.getLogger(__name__)


class HealthService:
    """
    Store connectivity check used by the health endpoint.
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def check(
        self,
        database_factory: Callable[[], Database],
        products_collection: str,
    ) -> HealthReport:
        """
        Report collections and product count.

        Never raises: any failure becomes an 'unhealthy' report.
        """
        try:
            database = database_factory()
            collections = database.list_collection_names()
            count = self.repo.count(database[products_collection])
        except Exception as e:
            logger.error("❌ Health check failed: %s", e)
            return HealthReport(
                status="unhealthy",
                database="disconnected",
                error=str(e),
                timestamp=datetime.now(timezone.utc),
            )

        return HealthReport(
            status="healthy",
            database="connected",
            collections=collections,
            products_count=count,
            timestamp=datetime.now(timezone.utc),
        )
