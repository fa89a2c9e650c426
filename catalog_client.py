"""Service catalogue API client.

A thin wrapper around the catalogue's REST API for scripts and other
services that need to read or administer the catalogue.  The client
uses the ``requests`` library internally:

* :meth:`ServiceCatalogClient.list_services` – the catalogue, optionally
  searched, filtered and sorted by the server.
* :meth:`ServiceCatalogClient.get_service` – a single entry.
* :meth:`ServiceCatalogClient.create_service`,
  :meth:`ServiceCatalogClient.update_service` and
  :meth:`ServiceCatalogClient.delete_service` – administration.
* :meth:`ServiceCatalogClient.list_categories` and
  :meth:`ServiceCatalogClient.stats` – browse helpers.

Any non-2xx response or transport failure raises
:class:`CatalogAPIError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests


logger = logging.getLogger(__name__)

SERVICES_PATH = "/api/v1/services/"


class CatalogAPIError(Exception):
    """Raised when the catalogue API cannot fulfil a request.

    Attributes:
        status_code: HTTP status of the response, or ``None`` when the
            request never produced one (connection error, timeout).
        message: The server's ``detail`` text or a transport message.
    """

    def __init__(self, status_code: Optional[int], message: str) -> None:
        super().__init__(f"{status_code}: {message}" if status_code else message)
        self.status_code = status_code
        self.message = message


class ServiceCatalogClient:
    """Client for the service catalogue API."""

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: Base URL of the API, e.g. ``http://localhost:8000``.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        """Perform an HTTP request and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    message = exc.response.json().get("detail") or ""
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            raise CatalogAPIError(status, message) from exc
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            raise CatalogAPIError(None, str(exc)) from exc
        if response.content:
            return response.json()
        return None

    @staticmethod
    def _payload(service_name: str, url_services: str, category: str) -> Dict[str, str]:
        return {
            "service_name": service_name,
            "url_services": url_services,
            "category": category,
        }

    # ------------------------------------------------------------------
    # Catalogue operations
    # ------------------------------------------------------------------
    def list_services(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Return services, optionally filtered and sorted server-side."""
        params = {
            key: value
            for key, value in {"q": q, "category": category, "sort_by": sort_by, "order": order}.items()
            if value is not None
        }
        return self._request("GET", SERVICES_PATH, params=params or None)

    def get_service(self, service_id: str) -> Dict[str, Any]:
        return self._request("GET", f"{SERVICES_PATH}{service_id}")

    def create_service(self, service_name: str, url_services: str, category: str) -> Dict[str, Any]:
        return self._request(
            "POST", SERVICES_PATH, json_body=self._payload(service_name, url_services, category)
        )

    def update_service(
        self, service_id: str, service_name: str, url_services: str, category: str
    ) -> Dict[str, Any]:
        return self._request(
            "PUT",
            f"{SERVICES_PATH}{service_id}",
            json_body=self._payload(service_name, url_services, category),
        )

    def delete_service(self, service_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"{SERVICES_PATH}{service_id}")

    def list_categories(self) -> List[str]:
        return self._request("GET", f"{SERVICES_PATH}categories")

    def stats(self) -> Dict[str, int]:
        return self._request("GET", f"{SERVICES_PATH}stats")
