"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with no configuration at all; in a deployment you
should override them via environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Service Catalog API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file.  Empty means console only.
    log_file: str = os.getenv("LOG_FILE", "")

    # Directory and file name of the delimited services file.  A
    # relative directory is resolved against the project root by
    # ``get_data_path``.
    data_dir: str = os.getenv("DATA_DIR", "data")
    data_file: str = os.getenv("DATA_FILE", "services.csv")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # Window used by the catalogue statistics for "recently updated".
    recent_days: int = int(os.getenv("RECENT_DAYS", "7"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()


def get_data_path() -> str:
    """Compute the path to the services file.

    If ``settings.data_dir`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    data_dir = settings.data_dir
    if not os.path.isabs(data_dir):
        base_dir = Path(__file__).resolve().parent.parent.parent.parent
        data_dir = str((base_dir / data_dir).resolve())
    return os.path.join(data_dir, settings.data_file)
