"""
Service catalogue endpoints for API v1.

These routes expose CRUD operations over the catalogue together with
read-only browse helpers (search, categories and dashboard
statistics).  Errors raised by the service layer are translated here:
validation failures become 400, unknown ids 404 and store failures a
generic 500 that does not reveal the data file location.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from service_catalog_api.app.core.config import settings
from service_catalog_api.app.core.errors import NotFoundError, StoreIOError, ValidationError
from service_catalog_api.app.core.storage import RecordStore, get_store
from service_catalog_api.app.schemas.service import (
    CatalogStats,
    DeleteResult,
    ServiceRead,
    ServiceWrite,
)
from service_catalog_api.app.services.catalog_service import (
    CatalogService,
    catalog_stats,
    list_categories,
    search_services,
    sort_services,
)


logger = logging.getLogger(__name__)

router = APIRouter()


def _store_failure(action: str, exc: StoreIOError) -> HTTPException:
    logger.exception("Error %s: %s", action, exc.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.get("/", response_model=List[ServiceRead])
async def list_services(
    q: Optional[str] = Query(None, description="Case-insensitive match on name or category"),
    category: Optional[str] = Query(None, description="Exact category; 'all' disables the filter"),
    sort_by: Optional[str] = Query(None, description="service_name, category, createAt or updateAt"),
    order: str = Query("asc"),
    store: RecordStore = Depends(get_store),
) -> List[ServiceRead]:
    """Return the catalogue.

    Without query parameters the full set is returned in file order.
    """
    try:
        services = await CatalogService.list_services(store)
    except StoreIOError as exc:
        raise _store_failure("fetch services", exc) from exc
    services = search_services(services, term=q, category=category)
    return sort_services(services, sort_by=sort_by, order=order)


@router.get("/categories", response_model=List[str])
async def get_categories(store: RecordStore = Depends(get_store)) -> List[str]:
    """Return distinct categories in order of first appearance."""
    try:
        services = await CatalogService.list_services(store)
    except StoreIOError as exc:
        raise _store_failure("fetch categories", exc) from exc
    return list_categories(services)


@router.get("/stats", response_model=CatalogStats)
async def get_stats(store: RecordStore = Depends(get_store)) -> CatalogStats:
    """Return totals for the admin dashboard."""
    try:
        services = await CatalogService.list_services(store)
    except StoreIOError as exc:
        raise _store_failure("fetch statistics", exc) from exc
    return catalog_stats(services, recent_days=settings.recent_days)


@router.get("/{service_id}", response_model=ServiceRead)
async def get_service(service_id: str, store: RecordStore = Depends(get_store)) -> ServiceRead:
    """Retrieve a single service by its id."""
    try:
        return await CatalogService.get_service(store, service_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except StoreIOError as exc:
        raise _store_failure("fetch service", exc) from exc


@router.post("/", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
async def create_service(
    service_in: ServiceWrite,
    store: RecordStore = Depends(get_store),
) -> ServiceRead:
    """Create a new service."""
    try:
        return await CatalogService.create_service(store, service_in)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except StoreIOError as exc:
        raise _store_failure("create service", exc) from exc


@router.put("/{service_id}", response_model=ServiceRead)
async def update_service(
    service_id: str,
    service_in: ServiceWrite,
    store: RecordStore = Depends(get_store),
) -> ServiceRead:
    """Replace name, URL and category of an existing service."""
    try:
        return await CatalogService.update_service(store, service_id, service_in)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except StoreIOError as exc:
        raise _store_failure("update service", exc) from exc


@router.delete("/{service_id}", response_model=DeleteResult)
async def delete_service(service_id: str, store: RecordStore = Depends(get_store)) -> DeleteResult:
    """Delete a service."""
    try:
        await CatalogService.delete_service(store, service_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except StoreIOError as exc:
        raise _store_failure("delete service", exc) from exc
    return DeleteResult(message="Service deleted successfully")
