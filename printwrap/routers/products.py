# printwrap/routers/products.py
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from printwrap.core.config import get_settings
from printwrap.core.errors import error_body
from printwrap.database import get_products_collection
from printwrap.repositories.product_query import validate_pagination
from printwrap.repositories.product_repo import ProductRepository
from printwrap.schemas.product import (
    DeleteResult,
    PaginatedProducts,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from printwrap.services.product_service import ProductService

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


def _not_found() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_body("Product not found"),
    )


def _store_failure(message: str, exc: PyMongoError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(message, str(exc)),
    )


@router.get("", response_model=PaginatedProducts)
def list_products(
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    search: str = "",
    categoryId: str = "",
    collection: Collection = Depends(get_products_collection),
):
    """
    Paginated product listing.

    Query params:
      - page (>= 1), limit (1..MAX_PAGE_SIZE)
      - search: free text over name/description
      - categoryId: category filter, "all" = no filter

    Invalid page/limit is rejected (400) before the store is queried.
    """
    params = validate_pagination(page, limit, search or None, categoryId or None)
    try:
        return service.get_products_paginated(collection, params)
    except PyMongoError as e:
        logger.exception("❌ Error fetching products")
        return _store_failure("Failed to fetch products", e)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    collection: Collection = Depends(get_products_collection),
):
    """
    Create a new product.
    """
    try:
        return service.create_product(collection, payload)
    except PyMongoError as e:
        logger.exception("❌ Error creating product")
        return _store_failure("Failed to create product", e)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: str,
    collection: Collection = Depends(get_products_collection),
):
    """
    Get a single product by id; 404 for unknown or malformed ids.
    """
    product = service.get_product(collection, product_id)
    if product is None:
        return _not_found()
    return product


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    collection: Collection = Depends(get_products_collection),
):
    """
    Merge the given fields into an existing product.
    """
    try:
        product = service.update_product(collection, product_id, payload)
    except PyMongoError as e:
        logger.exception("❌ Error updating product %s", product_id)
        return _store_failure("Failed to update product", e)
    if product is None:
        return _not_found()
    return product


@router.delete("/{product_id}", response_model=DeleteResult)
def delete_product(
    product_id: str,
    collection: Collection = Depends(get_products_collection),
):
    """
    Hard delete a product.
    """
    try:
        deleted = service.delete_product(collection, product_id)
    except PyMongoError as e:
        logger.exception("❌ Error deleting product %s", product_id)
        return _store_failure("Failed to delete product", e)
    if not deleted:
        return _not_found()
    return DeleteResult(success=True)
