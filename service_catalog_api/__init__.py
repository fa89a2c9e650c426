"""
Top-level package for the Service Catalog API.

All functionality lives in submodules under ``app``.
"""

__all__ = []
