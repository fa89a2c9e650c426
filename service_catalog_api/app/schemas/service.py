"""
Pydantic schemas for catalogue entries.

A service is a named link (``service_name`` and ``url_services``)
filed under a free-text ``category``.  ``ServiceRead`` mirrors one
row of the backing file and is also the shape returned by the API;
its field order is the file's column order.  ``ServiceWrite`` is the
request body for both create and update.  Its fields are optional at
the schema level so that missing values reach the service layer and
are reported as a validation failure (HTTP 400) rather than a schema
error.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ServiceRead(BaseModel):
    """Schema for a stored service."""

    id: str
    service_name: str = Field(..., examples=["Grafana"])
    url_services: str = Field(..., examples=["https://grafana.example"])
    updateAt: str = Field(..., examples=["2024-05-01T10:00:00.000Z"])
    createAt: str = Field(..., examples=["2024-05-01T10:00:00.000Z"])
    category: str = Field(..., examples=["Monitoring"])

    model_config = {
        "from_attributes": True,
    }


class ServiceWrite(BaseModel):
    """Schema for creating or replacing a service."""

    service_name: Optional[str] = Field(None, examples=["Grafana"])
    url_services: Optional[str] = Field(None, examples=["https://grafana.example"])
    category: Optional[str] = Field(None, examples=["Monitoring"])


class CatalogStats(BaseModel):
    """Summary figures for the admin dashboard."""

    total: int
    categories: int
    recently_updated: int


class DeleteResult(BaseModel):
    message: str
