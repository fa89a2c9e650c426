"""
Application package initializer.

The application is organised into ``core`` (settings, logging, errors
and the flat-file record store), ``schemas`` (request and response
models), ``services`` (catalogue rules) and ``api`` (versioned HTTP
routes).
"""

from .main import app  # noqa: F401
