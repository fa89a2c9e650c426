"""
Flat-file record store for the service catalogue.

The whole catalogue lives in one UTF-8 text file: a header row
followed by one comma-delimited line per service.  ``RecordStore``
reads and rewrites that file wholesale; nothing is cached between
calls, so every operation sees the file as it is on disk.

Format notes:

* The column order is fixed by ``FIELDNAMES``.  On load, values are
  mapped by the header actually found in the file.
* There is no quoting or escaping.  A row whose field count differs
  from the header's is skipped and counted in ``dropped_rows``.
* A missing file is seeded with ``SEED_SERVICES`` and written back
  immediately, so the first request always sees a populated catalogue.

Writes go to a temporary file in the same directory which is then
renamed over the target, so readers never observe a half-written file.
Concurrent writers are not coordinated: the last rename wins.
"""

from __future__ import annotations

import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .config import get_data_path
from .errors import MalformedRowError, StoreIOError
from ..schemas.service import ServiceRead


logger = logging.getLogger(__name__)

DELIMITER = ","
FIELDNAMES = ["id", "service_name", "url_services", "updateAt", "createAt", "category"]

# (service_name, url_services, category) written on first run.
SEED_SERVICES = [
    ("Google Analytics", "https://analytics.google.com", "Analytics"),
    ("Figma", "https://figma.com", "Design"),
    ("Vercel", "https://vercel.com", "Web Development"),
    ("Shopify", "https://shopify.com", "E-commerce"),
    ("Mailchimp", "https://mailchimp.com", "Marketing"),
]


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Render a datetime as UTC ISO 8601 with milliseconds and ``Z``.

    >>> format_timestamp(datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))
    '2024-05-01T10:00:00.000Z'
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse a stored timestamp, returning ``None`` if it is unreadable."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_row(line: str, header: Sequence[str], line_no: int) -> ServiceRead:
    """Convert one data line into a service.

    Raises ``MalformedRowError`` when the field count does not match
    the header or a canonical column is missing from the header.
    """
    values = [value.strip() for value in line.split(DELIMITER)]
    if len(values) != len(header):
        raise MalformedRowError(line_no, len(header), len(values))
    row = dict(zip(header, values))
    missing = [name for name in FIELDNAMES if name not in row]
    if missing:
        raise MalformedRowError(
            line_no, len(FIELDNAMES), len(values),
            message=f"Line {line_no}: header has no {missing[0]!r} column",
        )
    return ServiceRead(**{name: row[name] for name in FIELDNAMES})


def parse_records(content: str) -> tuple[List[ServiceRead], int]:
    """Parse the whole file content.

    Returns the well-formed services in file order and the number of
    rows that were dropped.
    """
    lines = content.strip().split("\n")
    if len(lines) <= 1:
        return [], 0
    header = [name.strip() for name in lines[0].split(DELIMITER)]
    services: List[ServiceRead] = []
    dropped = 0
    for line_no, line in enumerate(lines[1:], start=2):
        try:
            services.append(parse_row(line, header, line_no))
        except MalformedRowError as exc:
            dropped += 1
            logger.warning("Skipping malformed row: %s", exc.message)
    return services, dropped


def serialize_records(services: Sequence[ServiceRead]) -> str:
    """Render services as file content in the canonical column order."""
    header = DELIMITER.join(FIELDNAMES)
    if not services:
        return header + "\n"
    lines = [header]
    for service in services:
        lines.append(DELIMITER.join(getattr(service, name) for name in FIELDNAMES))
    return "\n".join(lines)


def build_seed_services() -> List[ServiceRead]:
    """Return the sample catalogue, all sharing one fresh timestamp."""
    now = format_timestamp()
    return [
        ServiceRead(
            id=str(uuid.uuid4()),
            service_name=name,
            url_services=url,
            updateAt=now,
            createAt=now,
            category=category,
        )
        for name, url, category in SEED_SERVICES
    ]


class RecordStore:
    """Load and save the full service set from a delimited text file."""

    def __init__(self, path: str) -> None:
        self.path = path
        # Number of malformed rows skipped by the most recent load.
        self.dropped_rows = 0

    def _ensure_directory(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise StoreIOError("Failed to prepare data directory") from exc

    def load_all(self) -> List[ServiceRead]:
        """Read every service from disk, seeding the file on first use."""
        self._ensure_directory()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            logger.info("No services file at %s; writing sample catalogue", self.path)
            services = build_seed_services()
            self.save_all(services)
            self.dropped_rows = 0
            return services
        except (OSError, UnicodeDecodeError) as exc:
            raise StoreIOError("Failed to read services") from exc

        services, dropped = parse_records(content)
        self.dropped_rows = dropped
        if dropped:
            logger.warning("Dropped %d malformed row(s) from %s", dropped, self.path)
        return services

    def save_all(self, services: Sequence[ServiceRead]) -> None:
        """Replace the file content with ``services``.

        The new content is written to a sibling temporary file and
        renamed over the target.  On failure the previous file is left
        untouched and ``StoreIOError`` is raised.
        """
        self._ensure_directory()
        content = serialize_records(services)
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=".services-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as exc:
            raise StoreIOError("Failed to write services") from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        logger.debug("Saved %d service(s) to %s", len(services), self.path)


def get_store() -> RecordStore:
    """Return a store bound to the configured services file.

    Used as a FastAPI dependency so that tests can substitute a store
    pointing at a temporary directory.
    """
    return RecordStore(get_data_path())
