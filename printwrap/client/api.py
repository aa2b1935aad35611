# printwrap/client/api.py
"""
Async HTTP client for the catalog API.

Used by the client-side products store; one request per call,
no retries and no timeout handling beyond httpx defaults.
"""

import logging
from typing import Any

import httpx

from printwrap.core.errors import CatalogError
from printwrap.schemas.pagination import PaginationParams
from printwrap.schemas.product import (
    PaginatedProducts,
    ProductCreate,
    ProductRead,
)

logger = logging.getLogger(__name__)

# "Everything" for callers that predate pagination.
FETCH_ALL_LIMIT = 1000

# Server-managed fields that are never sent back on update.
READ_ONLY_FIELDS = {"id", "created_at", "updated_at"}


class CatalogApiError(CatalogError):
    """Non-2xx response from the catalog API."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class CatalogApiClient:
    """
    Thin async wrapper over the /products and /health endpoints.
    """

    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/api",
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            base_url: Server base URL (e.g., http://localhost:8000)
            api_prefix: Prefix the routers are mounted under
            client: Optional preconfigured AsyncClient (tests pass one
                built on httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/")
        self.client = client or httpx.AsyncClient()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{self.api_prefix}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        failure: str,
        params: dict | None = None,
        json_data: dict | None = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            CatalogApiError: On any non-2xx status, carrying the server's
                `error` text when the body has one.
        """
        response = await self.client.request(
            method,
            self._url(path),
            params=params,
            json=json_data,
        )
        if response.is_success:
            return response.json()

        message = failure
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            message = f"{failure}: {body['error']}"
        logger.warning("%s %s -> HTTP %s", method, path, response.status_code)
        raise CatalogApiError(message, response.status_code)

    async def fetch_products_page(self, params: PaginationParams) -> PaginatedProducts:
        query: dict[str, Any] = {"page": params.page, "limit": params.limit}
        if params.search:
            query["search"] = params.search
        if params.category_id:
            query["categoryId"] = params.category_id

        body = await self._request("GET", "products", "Failed to fetch products", params=query)
        return PaginatedProducts.model_validate(body)

    async def fetch_all_products(self) -> list[ProductRead]:
        """
        Fetch one large page and return just its products.

        A response whose `data` is not a list yields an empty list.
        """
        body = await self._request(
            "GET",
            "products",
            "Failed to fetch products",
            params={"page": 1, "limit": FETCH_ALL_LIMIT},
        )
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            logger.warning("Unexpected products response shape, treating as empty")
            return []
        return [ProductRead.model_validate(item) for item in data]

    async def create_product(self, payload: ProductCreate) -> ProductRead:
        body = await self._request(
            "POST",
            "products",
            "Failed to create product",
            json_data=payload.model_dump(mode="json", by_alias=True, exclude_unset=True),
        )
        return ProductRead.model_validate(body)

    async def update_product(self, product: ProductRead) -> ProductRead:
        """
        Send the product (minus id and timestamps) as a PUT.
        """
        update = product.model_dump(
            mode="json",
            by_alias=True,
            exclude=READ_ONLY_FIELDS,
            exclude_none=True,
        )
        body = await self._request(
            "PUT",
            f"products/{product.id}",
            "Failed to update product",
            json_data=update,
        )
        return ProductRead.model_validate(body)

    async def delete_product(self, product_id: str) -> str:
        await self._request("DELETE", f"products/{product_id}", "Failed to delete product")
        return product_id

    async def health(self) -> dict[str, Any]:
        response = await self.client.get(self._url("health"))
        return response.json()
