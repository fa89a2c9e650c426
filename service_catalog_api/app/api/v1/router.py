"""
Top-level router for version 1 of the API.

Aggregates resource routers under a unified prefix.  When new
resources are introduced, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import services

router = APIRouter()

router.include_router(services.router, prefix="/services", tags=["services"])
