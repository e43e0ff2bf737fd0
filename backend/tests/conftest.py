"""
Shared fixtures.

The database URL must point at a throwaway SQLite file before
``catalog_admin.config`` is imported, so it is set at module import time.
"""
import asyncio
import json
import os
import tempfile
from typing import Any, Callable, Dict, List

_DB_DIR = tempfile.mkdtemp(prefix="catalog_admin_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest

from catalog_admin.client import CatalogClient
from catalog_admin.database import create_tables, drop_tables


@pytest.fixture
def database():
    """Fresh tables for one test."""
    asyncio.run(drop_tables())
    asyncio.run(create_tables())
    yield
    asyncio.run(drop_tables())


@pytest.fixture
def api(database):
    """TestClient for the reference catalog service."""
    from fastapi.testclient import TestClient
    from catalog_admin.main import app

    with TestClient(app) as client:
        yield client


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[tuple, Callable[[httpx.Request], httpx.Response]] = {}

    def on(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json=body)

        self.routes[(method, path)] = respond

    def on_call(self, method: str, path: str, func: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method, path)] = func

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        return route(request)

    def bodies(self, method: str) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.method == method and r.content]


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def mock_client(handler) -> CatalogClient:
    """CatalogClient whose HTTP calls go to ``handler``."""
    return CatalogClient(base_url="http://catalog.test/api", transport=httpx.MockTransport(handler))


def processor_record(**overrides: Any) -> Dict[str, Any]:
    """A stored PROCESSOR record in the pre-separated shape."""
    record = {
        "id": "cmp-1",
        "type": "PROCESSOR",
        "manufacturer": "AMD",
        "vendor": "Amazon",
        "model_name": "Ryzen 5 7600",
        "model_number": "100-100001015BOX",
        "product_page_url": "https://example.com/ryzen",
        "image_url": None,
        "price": 21999.0,
        "discounted_price": 19999.0,
        "tracked_price": None,
        "specs": {"extra_specs": [{"review": "Runs cool", "source": "https://example.com/review"}]},
        "processor": {
            "componentId": "cmp-1",
            "socket": "AM5",
            "cores": 6,
            "core_custom_data": {"series": "Ryzen 7000", "launch_year": 2023},
            "data": {"socket": "AM5", "l3_cache_mb": 32, "ecc_support": "false", "pcie_lanes": ["x16", "x4"]},
        },
    }
    record.update(overrides)
    return record


@pytest.fixture
def stored_processor() -> Dict[str, Any]:
    return processor_record()
