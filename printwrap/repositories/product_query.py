# printwrap/repositories/product_query.py
"""
Read path for the product catalog.

Composes category filtering, free-text search and offset pagination
into aggregation pipelines over the products collection:

    $match -> $sort(createdAt desc) -> $skip -> $limit -> $project

Search uses the weighted text index when it exists and falls back to a
case-insensitive substring match otherwise.
"""

import logging
import math
import re

from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from pymongo.collection import Collection

from printwrap.core.config import get_settings
from printwrap.core.errors import InvalidPaginationError
from printwrap.database import TEXT_INDEX_NAME
from printwrap.models.product import ALL_CATEGORIES
from printwrap.schemas.pagination import PaginationMeta, PaginationParams
from printwrap.schemas.product import PaginatedProducts, ProductRead

logger = logging.getLogger(__name__)

settings = get_settings()

# Stored keys returned by the page query; everything ProductRead knows.
PROJECTED_FIELDS: tuple[str, ...] = tuple(
    to_camel(name) for name in ProductRead.model_fields if name != "id"
)


def validate_pagination(
    page: int,
    limit: int,
    search: str | None = None,
    category_id: str | None = None,
) -> PaginationParams:
    """
    Build PaginationParams or raise InvalidPaginationError.

    MAX_PAGE_SIZE from settings may narrow the schema bound further.
    """
    if limit > settings.MAX_PAGE_SIZE:
        raise InvalidPaginationError(page, limit, settings.MAX_PAGE_SIZE)
    try:
        return PaginationParams(
            page=page,
            limit=limit,
            search=search,
            category_id=category_id,
        )
    except ValidationError:
        raise InvalidPaginationError(page, limit, settings.MAX_PAGE_SIZE)


def build_match(
    category_id: str | None,
    search: str | None,
    use_text_index: bool,
) -> dict:
    match: dict = {}

    if category_id and category_id != ALL_CATEGORIES:
        match["categoryId"] = category_id

    term = (search or "").strip()
    if term:
        if use_text_index:
            match["$text"] = {"$search": term}
        else:
            pattern = re.escape(term)
            match["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}},
            ]

    return match


def build_page_pipeline(match: dict, skip: int, limit: int) -> list[dict]:
    projection = {key: 1 for key in PROJECTED_FIELDS}
    return [
        {"$match": match},
        {"$sort": {"createdAt": -1}},
        {"$skip": skip},
        {"$limit": limit},
        {"$project": projection},
    ]


def build_pagination_meta(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit)
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


class ProductQuery:
    """
    Executes paginated catalog queries against one collection.
    """

    def __init__(self, collection: Collection):
        self.collection = collection

    def has_text_index(self) -> bool:
        """
        Whether the weighted search index exists.

        Any error while probing counts as "no index"; search then
        degrades to substring matching instead of failing.
        """
        try:
            return TEXT_INDEX_NAME in self.collection.index_information()
        except Exception as e:
            logger.warning("Text index probe failed, using substring search: %s", e)
            return False

    def count(self, match: dict) -> int:
        return self.collection.count_documents(match)

    def paginate(self, params: PaginationParams) -> PaginatedProducts:
        use_text_index = bool(params.search and params.search.strip()) and self.has_text_index()
        match = build_match(params.category_id, params.search, use_text_index)

        logger.debug(
            "Pagination query page=%s limit=%s skip=%s match=%s",
            params.page, params.limit, params.skip, match,
        )

        total = self.count(match)
        documents = self.collection.aggregate(
            build_page_pipeline(match, params.skip, params.limit)
        )
        data = [ProductRead.from_document(doc) for doc in documents]

        return PaginatedProducts(
            data=data,
            pagination=build_pagination_meta(params.page, params.limit, total),
        )
