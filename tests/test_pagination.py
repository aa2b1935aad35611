"""
Tests for the pagination schema shared by the API and the client.
"""

import pytest
from pydantic import ValidationError

from printwrap.client import api, store
from printwrap.core.config import Settings
from printwrap.core.errors import InvalidPaginationError
from printwrap.repositories import product_query
from printwrap.schemas.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PaginationMeta,
    PaginationParams,
)


class TestPaginationParams:

    def test_defaults(self):
        params = PaginationParams()
        assert (params.page, params.limit, params.search, params.category_id) == (1, 10, None, None)

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, MAX_PAGE_SIZE + 1)])
    def test_bounds(self, page, limit):
        with pytest.raises(ValidationError):
            PaginationParams(page=page, limit=limit)

    def test_settings_default_to_schema_bounds(self):
        settings = Settings()
        assert settings.DEFAULT_PAGE_SIZE == DEFAULT_PAGE_SIZE
        assert settings.MAX_PAGE_SIZE == MAX_PAGE_SIZE

    def test_narrower_setting_is_enforced(self, monkeypatch):
        monkeypatch.setattr(product_query.settings, "MAX_PAGE_SIZE", 50)
        assert product_query.validate_pagination(1, 50).limit == 50
        with pytest.raises(InvalidPaginationError) as exc:
            product_query.validate_pagination(1, 51)
        assert exc.value.max_limit == 50


class TestClientUsesSharedSchema:

    def test_client_modules_import_the_schema(self):
        assert api.PaginationParams.__module__ == "printwrap.schemas.pagination"
        assert store.PaginationParams is PaginationParams
        assert store.PaginationMeta is PaginationMeta

    def test_client_modules_do_not_reach_into_the_query_layer(self):
        for module in (api, store):
            assert not hasattr(module, "product_query")
            assert all(
                getattr(value, "__module__", "") != "printwrap.repositories.product_query"
                for value in vars(module).values()
            )

    def test_store_starts_with_shared_page_size(self):
        assert store.ProductsState().pagination.limit == DEFAULT_PAGE_SIZE
