"""
Client for the component catalog REST API.

Every failure (transport error or non-2xx response) is raised as
CatalogAPIError; callers decide how to surface it.
"""

from typing import Any, Dict, Optional

import httpx

from catalog_admin.config import settings
from catalog_admin.exceptions import CatalogAPIError
from catalog_admin.logging_config import get_logger
from catalog_admin.schemas import ComponentPage, ScrapedSpecs

logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull the server's error text out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "detail", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Request failed with status {response.status_code}"


class CatalogClient:
    """
    Async client for the catalog service.

    Configure via settings: CATALOG_API_URL, REQUEST_TIMEOUT.
    A custom ``transport`` can be injected (e.g. ``httpx.ASGITransport``).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.CATALOG_API_URL).rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=timeout or settings.REQUEST_TIMEOUT,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("[Client] Timeout on %s %s", method, url)
            raise CatalogAPIError(f"Timeout calling {path}") from e
        except httpx.HTTPError as e:
            logger.error("[Client] %s %s failed: %s", method, url, e)
            raise CatalogAPIError(f"Could not reach catalog service: {e}") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error("[Client] %s %s -> HTTP %s: %s", method, url, response.status_code, message)
            raise CatalogAPIError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise CatalogAPIError(f"Invalid JSON from {path}", status_code=response.status_code) from e

    async def list_components(
        self,
        component_type: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
        sort_key: str = "updatedAt",
        sort_dir: str = "desc",
    ) -> ComponentPage:
        """One page of components. ``component_type`` "All" means no filter."""
        params: Dict[str, Any] = {
            "page": page,
            "limit": limit,
            "sortKey": sort_key,
            "sortDir": sort_dir,
        }
        if component_type and component_type != "All":
            params["type"] = component_type
        if search:
            params["search"] = search

        data = await self._request("GET", "/components", params=params)
        return ComponentPage.model_validate(data or {})

    async def get_component(self, component_id: str) -> Dict[str, Any]:
        """Full record, including the type-specific sub-record."""
        return await self._request("GET", f"/components/{component_id}")

    async def create_component(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a component from a recomposed payload."""
        return await self._request("POST", "/components", json=payload)

    async def update_component(self, component_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Update a component (PATCH, same payload shape as create)."""
        return await self._request("PATCH", f"/components/{component_id}", json=payload)

    async def delete_component(self, component_id: str) -> Any:
        """Delete a component."""
        return await self._request("DELETE", f"/components/{component_id}")

    async def fetch_specs(self, url: str) -> ScrapedSpecs:
        """Scraped attribute hints for a product page URL."""
        data = await self._request("POST", "/components/fetch-specs", json={"url": url})
        return ScrapedSpecs.model_validate(data or {})

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()
