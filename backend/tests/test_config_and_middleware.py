"""
Coffee Catalog Backend: Configuration & Middleware Tests
==========================================================

What:  Settings validation and the request timeout middleware.
How:   TimeoutMiddleware.dispatch is called directly with a slow downstream
       handler, so no real request has to hang.
"""

import asyncio
import json

import pytest
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from catalog.config import Settings, settings
from catalog.middleware.request_id import request_id_var
from catalog.middleware.timeout import TimeoutMiddleware


def _request(path="/coffees"):
    return Request({
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [],
    })


class TestSettings:

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="verbose")

    def test_cors_origins_list(self):
        s = Settings(cors_origins="http://a.test, http://b.test")

        assert s.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_production_requires_api_key_override(self):
        s = Settings(environment="production", api_key="abc123")

        with pytest.raises(ValueError, match="API_KEY"):
            s.validate_required_for_production()

    def test_production_with_custom_api_key_passes(self):
        Settings(environment="production", api_key="s3cret").validate_required_for_production()

    def test_page_limits_must_be_consistent(self):
        s = Settings(default_page_limit=50, max_page_limit=10)

        with pytest.raises(ValueError, match="MAX_PAGE_LIMIT"):
            s.validate_required_for_production()


class TestTimeoutMiddleware:

    @pytest.mark.asyncio
    async def test_fast_request_passes_through(self):
        middleware = TimeoutMiddleware(app=None)

        async def call_next(request):
            return PlainTextResponse("ok")

        response = await middleware.dispatch(_request(), call_next)

        assert response.status_code == 200
        assert response.body == b"ok"

    @pytest.mark.asyncio
    async def test_slow_request_returns_408(self, monkeypatch):
        monkeypatch.setattr(settings, "request_timeout_seconds", 0.05)
        request_id_var.set("slow-1")
        middleware = TimeoutMiddleware(app=None)

        async def call_next(request):
            await asyncio.sleep(1)
            return PlainTextResponse("too late")

        response = await middleware.dispatch(_request(), call_next)

        assert response.status_code == 408
        body = json.loads(response.body)
        assert body["error"] == "request_timeout"
        assert body["request_id"] == "slow-1"
        assert body["details"] == {"timeout_seconds": 0.05}
