"""
Service layer for the service catalogue.

``CatalogService`` implements list/create/update/delete on top of the
``RecordStore``.  Every call loads the full set from disk, changes it
in memory and, for writes, saves the full set back.  Nothing is kept
between calls, and concurrent writers are not coordinated (last write
wins), which is acceptable for a single-administrator catalogue.

The browse helpers at the bottom of the module (search, sort,
categories and statistics) operate on an already loaded list and never
touch the store.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from service_catalog_api.app.core.errors import NotFoundError, ValidationError
from service_catalog_api.app.core.storage import (
    DELIMITER,
    RecordStore,
    format_timestamp,
    parse_timestamp,
)
from service_catalog_api.app.schemas.service import CatalogStats, ServiceRead, ServiceWrite


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("service_name", "url_services", "category")
SORT_FIELDS = {"service_name", "category", "createAt", "updateAt"}


def utc_now() -> datetime:
    """Current time in UTC.  Patched in tests to pin the clock."""
    return datetime.now(timezone.utc)


def _clean_fields(data: ServiceWrite) -> Tuple[str, str, str]:
    """Validate and strip the three writable fields.

    Raises ``ValidationError`` listing every missing field, or every
    field whose value cannot be stored in the delimited file.
    """
    values: Dict[str, str] = {}
    missing: List[str] = []
    for name in REQUIRED_FIELDS:
        raw = getattr(data, name)
        value = raw.strip() if isinstance(raw, str) else ""
        if not value:
            missing.append(name)
        values[name] = value
    if missing:
        raise ValidationError("Missing required fields", missing)

    unstorable = [
        name
        for name, value in values.items()
        if DELIMITER in value or "\n" in value or "\r" in value
    ]
    if unstorable:
        raise ValidationError(
            "Fields must not contain commas or line breaks", unstorable
        )
    return values["service_name"], values["url_services"], values["category"]


def _find_index(services: Sequence[ServiceRead], service_id: str) -> int:
    for index, service in enumerate(services):
        if service.id == service_id:
            return index
    raise NotFoundError(service_id)


class CatalogService:
    """Service class for managing catalogue entries."""

    @classmethod
    async def list_services(cls, store: RecordStore) -> List[ServiceRead]:
        """Return the full catalogue in file order."""
        return store.load_all()

    @classmethod
    async def get_service(cls, store: RecordStore, service_id: str) -> ServiceRead:
        """Return a single service or raise ``NotFoundError``."""
        services = store.load_all()
        return services[_find_index(services, service_id)]

    @classmethod
    async def create_service(cls, store: RecordStore, data: ServiceWrite) -> ServiceRead:
        """Validate ``data``, append a new service and persist the set.

        The id is a random UUID4; ``createAt`` and ``updateAt`` are both
        set to the current time.  Validation happens before the store
        is touched, so a rejected request leaves the file unchanged.
        """
        name, url, category = _clean_fields(data)
        services = store.load_all()
        now = format_timestamp(utc_now())
        service = ServiceRead(
            id=str(uuid.uuid4()),
            service_name=name,
            url_services=url,
            updateAt=now,
            createAt=now,
            category=category,
        )
        services.append(service)
        store.save_all(services)
        logger.info("Created service %s (%s)", service.id, service.service_name)
        return service

    @classmethod
    async def update_service(
        cls, store: RecordStore, service_id: str, data: ServiceWrite
    ) -> ServiceRead:
        """Replace name, URL and category of an existing service.

        ``id`` and ``createAt`` are preserved and ``updateAt`` is reset
        to the current time.  Raises ``ValidationError`` before looking
        the id up, then ``NotFoundError`` if the id is unknown.
        """
        name, url, category = _clean_fields(data)
        services = store.load_all()
        index = _find_index(services, service_id)
        current = services[index]
        now = utc_now()
        updated_at = format_timestamp(now)
        # Keep createAt <= updateAt even if the clock stepped backwards.
        created = parse_timestamp(current.createAt)
        if created is not None and now < created:
            updated_at = current.createAt
        services[index] = current.model_copy(
            update={
                "service_name": name,
                "url_services": url,
                "category": category,
                "updateAt": updated_at,
            }
        )
        store.save_all(services)
        logger.info("Updated service %s", service_id)
        return services[index]

    @classmethod
    async def delete_service(cls, store: RecordStore, service_id: str) -> None:
        """Remove a service permanently and persist the reduced set."""
        services = store.load_all()
        remaining = [service for service in services if service.id != service_id]
        if len(remaining) == len(services):
            raise NotFoundError(service_id)
        store.save_all(remaining)
        logger.info("Deleted service %s", service_id)


def search_services(
    services: Sequence[ServiceRead],
    term: Optional[str] = None,
    category: Optional[str] = None,
) -> List[ServiceRead]:
    """Filter services by free-text term and exact category.

    ``term`` matches case-insensitively against the name or the
    category.  A ``category`` of ``None``, ``""`` or ``"all"`` disables
    the category filter.  File order is preserved.
    """
    needle = (term or "").strip().lower()
    wanted = category if category and category != "all" else None
    result = []
    for service in services:
        if needle and needle not in service.service_name.lower() and needle not in service.category.lower():
            continue
        if wanted is not None and service.category != wanted:
            continue
        result.append(service)
    return result


def sort_services(
    services: Sequence[ServiceRead],
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
) -> List[ServiceRead]:
    """Sort services by one of ``SORT_FIELDS``.

    Unknown ``sort_by`` values keep the file order; ``order`` is
    ``asc`` unless it is ``desc`` (case-insensitive).
    """
    if sort_by not in SORT_FIELDS:
        return list(services)
    reverse = (order or "asc").lower() == "desc"
    return sorted(services, key=lambda s: getattr(s, sort_by).lower(), reverse=reverse)


def list_categories(services: Sequence[ServiceRead]) -> List[str]:
    """Unique categories in order of first appearance."""
    return list(dict.fromkeys(service.category for service in services))


def catalog_stats(
    services: Sequence[ServiceRead],
    now: Optional[datetime] = None,
    recent_days: int = 7,
) -> CatalogStats:
    """Count services, distinct categories and recent updates."""
    if now is None:
        now = utc_now()
    cutoff = now - timedelta(days=recent_days)
    recent = 0
    for service in services:
        updated = parse_timestamp(service.updateAt)
        if updated is not None and updated > cutoff:
            recent += 1
    return CatalogStats(
        total=len(services),
        categories=len(list_categories(services)),
        recently_updated=recent,
    )
