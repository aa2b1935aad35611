# printwrap/schemas/health.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class HealthReport(BaseModel):
    """
    Store connectivity report for /health.

    `error` is only set when status is 'unhealthy'.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: Literal["healthy", "unhealthy"]
    database: Literal["connected", "disconnected"]
    collections: list[str] = []
    products_count: int | None = None
    error: str | None = None
    timestamp: datetime
