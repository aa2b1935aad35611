# printwrap/schemas/pagination.py
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 1000


class PaginationParams(BaseModel):
    """
    One page request: page P of products matching search/category.

    Shared by the API (query parsing) and the client (request building).
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    search: str | None = None
    category_id: str | None = None

    @field_validator("page")
    @classmethod
    def check_page(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page must be >= 1")
        return v

    @field_validator("limit")
    @classmethod
    def check_limit(cls, v: int) -> int:
        if not 1 <= v <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        return v

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool
