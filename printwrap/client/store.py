# printwrap/client/store.py
"""
Client-side products state.

Holds the current page of products, pagination metadata, the active
search/category filters and a bounded cache of fetched pages. All reads
and writes against the API go through the async operations below; each
one moves through idle -> pending -> fulfilled | rejected.

Fetches that replace `items` are fenced: every fetch takes a sequence
number and only the most recently issued one may commit. A superseded
response, success or failure, is dropped on arrival.
"""

import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import NamedTuple

from printwrap.client.api import CatalogApiClient
from printwrap.models.product import ALL_CATEGORIES
from printwrap.schemas.pagination import DEFAULT_PAGE_SIZE, PaginationMeta, PaginationParams
from printwrap.schemas.product import ProductCreate, ProductRead

logger = logging.getLogger(__name__)

IDLE = "idle"
PENDING = "pending"
FULFILLED = "fulfilled"
REJECTED = "rejected"


class PageKey(NamedTuple):
    """Cache key: one page under one filter combination."""

    page: int
    limit: int
    search: str
    category_id: str

    @classmethod
    def from_params(cls, params: PaginationParams) -> "PageKey":
        return cls(
            page=params.page,
            limit=params.limit,
            search=params.search or "",
            category_id=params.category_id or ALL_CATEGORIES,
        )


class PageCache:
    """
    LRU cache of fetched pages keyed by PageKey.

    Write-through only from the store; nothing reads it back into
    the visible items automatically.
    """

    def __init__(self, max_entries: int = 50):
        self.max_entries = max_entries
        self._entries: "OrderedDict[PageKey, list[ProductRead]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: PageKey) -> bool:
        return key in self._entries

    def get(self, key: PageKey) -> list[ProductRead] | None:
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def put(self, key: PageKey, products: list[ProductRead]) -> None:
        self._entries[key] = list(products)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cached page %s", evicted)

    def clear(self) -> None:
        self._entries.clear()


def _initial_pagination() -> PaginationMeta:
    return PaginationMeta(
        page=1,
        limit=DEFAULT_PAGE_SIZE,
        total=0,
        total_pages=0,
        has_next=False,
        has_prev=False,
    )


@dataclass
class ProductsState:
    items: list[ProductRead] = field(default_factory=list)
    loading: bool = False
    error: str | None = None
    pagination: PaginationMeta = field(default_factory=_initial_pagination)
    search_term: str = ""
    selected_category: str = ALL_CATEGORIES
    page_cache: PageCache = field(default_factory=PageCache)
    status: dict[str, str] = field(default_factory=dict)


Listener = Callable[[ProductsState], None]


class ProductsStore:
    """
    State container for the products UI.

    Synchronous setters mirror UI events; async operations talk to the
    API and commit their results. Listeners registered with subscribe()
    are called after every committed change.
    """

    def __init__(self, api: CatalogApiClient, page_cache_size: int = 50):
        self.api = api
        self.state = ProductsState(page_cache=PageCache(page_cache_size))
        self._listeners: list[Listener] = []
        self._fetch_seq = 0

    # ----- subscriptions -----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener; returns a function that removes it.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)

    # ----- synchronous transitions -----

    def set_products(self, products: list[ProductRead]) -> None:
        self.state.items = list(products)
        self._notify()

    def add_product(self, product: ProductRead) -> None:
        self.state.items.append(product)
        self._notify()

    def set_loading(self, loading: bool) -> None:
        self.state.loading = loading
        self._notify()

    def set_error(self, error: str | None) -> None:
        self.state.error = error
        self._notify()

    def clear_error(self) -> None:
        self.set_error(None)

    def set_page(self, page: int) -> None:
        """Select a page; the caller dispatches the fetch."""
        self.state.pagination.page = page
        self._notify()

    def set_search_term(self, term: str) -> None:
        self.state.search_term = term
        self.state.pagination.page = 1
        self._notify()

    def set_selected_category(self, category_id: str) -> None:
        self.state.selected_category = category_id
        self.state.pagination.page = 1
        self._notify()

    def cache_page(self, params: PaginationParams, products: list[ProductRead]) -> None:
        self.state.page_cache.put(PageKey.from_params(params), products)
        self._notify()

    def clear_page_cache(self) -> None:
        self.state.page_cache.clear()
        self._notify()

    # ----- selectors -----

    def current_params(self, limit: int | None = None) -> PaginationParams:
        """
        Fetch parameters for the current page, search term and category.
        """
        return PaginationParams(
            page=self.state.pagination.page,
            limit=limit or self.state.pagination.limit,
            search=self.state.search_term or None,
            category_id=self.state.selected_category,
        )

    def cached_page(self, params: PaginationParams | None = None) -> list[ProductRead] | None:
        return self.state.page_cache.get(PageKey.from_params(params or self.current_params()))

    # ----- async operations -----

    def _pending(self, operation: str) -> None:
        self.state.loading = True
        self.state.error = None
        self.state.status[operation] = PENDING
        self._notify()

    def _rejected(self, operation: str, exc: Exception, fallback: str) -> None:
        self.state.loading = False
        self.state.error = str(exc) or fallback
        self.state.status[operation] = REJECTED
        logger.warning("%s rejected: %s", operation, self.state.error)
        self._notify()

    def _fulfilled(self, operation: str) -> None:
        self.state.loading = False
        self.state.status[operation] = FULFILLED

    def _next_fetch(self) -> int:
        self._fetch_seq += 1
        return self._fetch_seq

    def _is_stale(self, seq: int, operation: str) -> bool:
        if seq != self._fetch_seq:
            logger.debug("%s #%s superseded by #%s, dropping result", operation, seq, self._fetch_seq)
            return True
        return False

    async def fetch_products_paginated(
        self,
        params: PaginationParams | None = None,
    ) -> list[ProductRead] | None:
        """
        Fetch one page and make it the visible page.

        On failure the error is stored and the previous items and
        pagination stay as they were.
        """
        operation = "fetch_products_paginated"
        params = params or self.current_params()
        seq = self._next_fetch()
        self._pending(operation)
        try:
            result = await self.api.fetch_products_page(params)
        except Exception as e:
            if not self._is_stale(seq, operation):
                self._rejected(operation, e, "Failed to fetch products")
            return None

        if self._is_stale(seq, operation):
            return None

        self._fulfilled(operation)
        self.state.items = result.data
        self.state.pagination = result.pagination
        key_params = params.model_copy(update={"page": result.pagination.page})
        self.state.page_cache.put(PageKey.from_params(key_params), result.data)
        self._notify()
        return result.data

    async def fetch_products(self) -> list[ProductRead] | None:
        """
        Fetch every product into items (for views without pagination).
        """
        operation = "fetch_products"
        seq = self._next_fetch()
        self._pending(operation)
        try:
            products = await self.api.fetch_all_products()
        except Exception as e:
            if not self._is_stale(seq, operation):
                self._rejected(operation, e, "Failed to fetch products")
            return None

        if self._is_stale(seq, operation):
            return None

        self._fulfilled(operation)
        self.state.items = list(products) if isinstance(products, list) else []
        self._notify()
        return self.state.items

    async def create_product(self, payload: ProductCreate) -> ProductRead | None:
        operation = "create_product"
        self._pending(operation)
        try:
            product = await self.api.create_product(payload)
        except Exception as e:
            self._rejected(operation, e, "Failed to create product")
            return None

        self._fulfilled(operation)
        self.state.items.append(product)
        self._notify()
        return product

    async def update_product(self, product: ProductRead) -> ProductRead | None:
        operation = "update_product"
        self._pending(operation)
        try:
            updated = await self.api.update_product(product)
        except Exception as e:
            self._rejected(operation, e, "Failed to update product")
            return None

        self._fulfilled(operation)
        for i, item in enumerate(self.state.items):
            if item.id == updated.id:
                self.state.items[i] = updated
                break
        self._notify()
        return updated

    async def delete_product(self, product_id: str) -> str | None:
        operation = "delete_product"
        self._pending(operation)
        try:
            deleted_id = await self.api.delete_product(product_id)
        except Exception as e:
            self._rejected(operation, e, "Failed to delete product")
            return None

        self._fulfilled(operation)
        self.state.items = [p for p in self.state.items if p.id != deleted_id]
        self._notify()
        return deleted_id
