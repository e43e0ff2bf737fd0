"""
Exceptions raised by the catalog client and spec scraper.
"""
from typing import Optional


class CatalogError(Exception):
    """Base class for catalog admin errors."""


class CatalogAPIError(CatalogError):
    """A call to the catalog service failed (transport error or non-2xx)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class ScrapeError(CatalogError):
    """A product page could not be fetched or parsed."""


class ComponentNotFoundError(CatalogError):
    """No component with the requested id."""


class InvalidComponentError(CatalogError):
    """A create/update payload is missing required data or breaks an invariant."""
