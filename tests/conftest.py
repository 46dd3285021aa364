from __future__ import annotations

from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import aiohttp
import pytest

from amenity_locator.config import get_settings


class FakeResponse:
    def __init__(self, payload: Any = None, *, status: int = 200, body_error: Optional[Exception] = None) -> None:
        self.payload = payload
        self.status = status
        self.body_error = body_error

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientResponseError(request_info=MagicMock(), history=(), status=self.status)

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if self.body_error is not None:
            raise self.body_error
        return self.payload


class FakeSession:
    """Stands in for aiohttp.ClientSession; records every POST."""

    def __init__(self, response: Optional[FakeResponse] = None, *, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse({"elements": []})
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def bilbao():
    from amenity_locator.models import GeoPoint

    return GeoPoint(latitude=43.264331, longitude=-2.9207012)
