"""Tests for the catalogue service layer."""

import asyncio
from datetime import datetime, timezone

import pytest

from service_catalog_api.app.core.errors import NotFoundError, ValidationError
from service_catalog_api.app.schemas.service import ServiceRead, ServiceWrite
from service_catalog_api.app.services.catalog_service import (
    CatalogService,
    catalog_stats,
    list_categories,
    search_services,
    sort_services,
)


def run(coro):
    return asyncio.run(coro)


def write(name="Grafana", url="https://grafana.example", category="Monitoring") -> ServiceWrite:
    return ServiceWrite(service_name=name, url_services=url, category=category)


def read_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def service(name, category, created="2024-05-01T00:00:00.000Z", updated=None) -> ServiceRead:
    return ServiceRead(
        id=name.lower(),
        service_name=name,
        url_services=f"https://{name.lower()}.example",
        updateAt=updated or created,
        createAt=created,
        category=category,
    )


def test_list_on_fresh_environment_returns_seed(store):
    services = run(CatalogService.list_services(store))
    assert len(services) == 5
    assert run(CatalogService.list_services(store)) == services


def test_create_update_delete_scenario(empty_store, clock):
    created = run(CatalogService.create_service(empty_store, write()))
    assert created.id
    assert created.createAt == created.updateAt == "2024-05-01T10:00:00.000Z"

    updated = run(
        CatalogService.update_service(
            empty_store, created.id, write(name="Grafana Cloud")
        )
    )
    assert updated.id == created.id
    assert updated.createAt == created.createAt
    assert updated.updateAt > created.updateAt
    assert updated.service_name == "Grafana Cloud"

    run(CatalogService.delete_service(empty_store, created.id))
    remaining = run(CatalogService.list_services(empty_store))
    assert created.id not in [s.id for s in remaining]


def test_created_ids_are_unique(empty_store):
    for n in range(20):
        run(CatalogService.create_service(empty_store, write(name=f"Service {n}")))
    ids = [s.id for s in empty_store.load_all()]
    assert len(ids) == 20
    assert len(set(ids)) == 20


def test_create_appends_to_existing_set(store):
    seeded = run(CatalogService.list_services(store))
    created = run(CatalogService.create_service(store, write()))
    services = run(CatalogService.list_services(store))
    assert services[:-1] == seeded
    assert services[-1] == created


@pytest.mark.parametrize(
    "payload, missing",
    [
        (write(name=""), ["service_name"]),
        (write(url="   "), ["url_services"]),
        (ServiceWrite(service_name="A"), ["url_services", "category"]),
    ],
)
def test_create_validation_leaves_file_unchanged(empty_store, data_path, payload, missing):
    before = read_file(data_path)
    with pytest.raises(ValidationError) as excinfo:
        run(CatalogService.create_service(empty_store, payload))
    assert excinfo.value.fields == missing
    assert read_file(data_path) == before


def test_values_with_delimiter_are_rejected(empty_store):
    with pytest.raises(ValidationError) as excinfo:
        run(CatalogService.create_service(empty_store, write(name="Acme, Inc")))
    assert excinfo.value.fields == ["service_name"]
    with pytest.raises(ValidationError):
        run(CatalogService.create_service(empty_store, write(category="Line\nBreak")))


def test_values_are_stripped(empty_store):
    created = run(CatalogService.create_service(empty_store, write(name="  Sentry  ")))
    assert created.service_name == "Sentry"


def test_update_unknown_id_raises_not_found(empty_store, data_path):
    before = read_file(data_path)
    with pytest.raises(NotFoundError) as excinfo:
        run(CatalogService.update_service(empty_store, "missing", write()))
    assert excinfo.value.service_id == "missing"
    assert read_file(data_path) == before


def test_update_validates_before_lookup(empty_store):
    with pytest.raises(ValidationError):
        run(CatalogService.update_service(empty_store, "missing", write(category="")))


def test_delete_unknown_id_raises_not_found(empty_store):
    with pytest.raises(NotFoundError):
        run(CatalogService.delete_service(empty_store, "missing"))


def test_get_service(empty_store):
    created = run(CatalogService.create_service(empty_store, write()))
    assert run(CatalogService.get_service(empty_store, created.id)) == created
    with pytest.raises(NotFoundError):
        run(CatalogService.get_service(empty_store, "missing"))


def test_update_never_moves_update_before_create(empty_store, monkeypatch):
    from service_catalog_api.app.services import catalog_service

    monkeypatch.setattr(
        catalog_service, "utc_now", lambda: datetime(2024, 5, 2, tzinfo=timezone.utc)
    )
    created = run(CatalogService.create_service(empty_store, write()))
    monkeypatch.setattr(
        catalog_service, "utc_now", lambda: datetime(2024, 5, 1, tzinfo=timezone.utc)
    )
    updated = run(CatalogService.update_service(empty_store, created.id, write()))
    assert updated.createAt <= updated.updateAt


def test_search_matches_name_or_category_case_insensitively():
    services = [service("Figma", "Design"), service("Grafana", "Monitoring"), service("Sketch", "Design")]
    assert [s.service_name for s in search_services(services, term="design")] == ["Figma", "Sketch"]
    assert [s.service_name for s in search_services(services, term="GRAF")] == ["Grafana"]
    assert search_services(services) == services


def test_search_category_filter():
    services = [service("Figma", "Design"), service("Grafana", "Monitoring")]
    assert [s.service_name for s in search_services(services, category="Monitoring")] == ["Grafana"]
    assert search_services(services, category="all") == services
    assert search_services(services, term="fig", category="Monitoring") == []


def test_sort_services():
    services = [service("grafana", "Monitoring"), service("Figma", "Design"), service("Vercel", "Web")]
    names = [s.service_name for s in sort_services(services, "service_name")]
    assert names == ["Figma", "grafana", "Vercel"]
    names = [s.service_name for s in sort_services(services, "category", "DESC")]
    assert names == ["Vercel", "grafana", "Figma"]
    assert sort_services(services, "bogus") == services


def test_list_categories_keeps_first_appearance_order():
    services = [service("A", "Web"), service("B", "Design"), service("C", "Web")]
    assert list_categories(services) == ["Web", "Design"]


def test_catalog_stats_counts_recent_updates():
    now = datetime(2024, 5, 10, tzinfo=timezone.utc)
    services = [
        service("A", "Web", updated="2024-05-09T00:00:00.000Z"),
        service("B", "Design", updated="2024-04-01T00:00:00.000Z"),
        service("C", "Web", updated="garbage"),
    ]
    stats = catalog_stats(services, now=now, recent_days=7)
    assert stats.total == 3
    assert stats.categories == 2
    assert stats.recently_updated == 1


def test_update_compares_offset_timestamps_by_instant(empty_store, monkeypatch):
    from service_catalog_api.app.services import catalog_service

    empty_store.save_all(
        [service("Grafana", "Monitoring", created="2024-05-01T12:00:00.000+02:00")]
    )
    monkeypatch.setattr(
        catalog_service, "utc_now", lambda: datetime(2024, 5, 1, 11, 0, tzinfo=timezone.utc)
    )
    updated = run(CatalogService.update_service(empty_store, "grafana", write()))
    assert updated.updateAt == "2024-05-01T11:00:00.000Z"
    assert updated.createAt == "2024-05-01T12:00:00.000+02:00"
