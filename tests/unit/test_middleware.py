"""Tests for API middleware."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert len(response.headers["X-Request-ID"]) == 36


@pytest.mark.asyncio
async def test_security_headers_on_api_paths(client: AsyncClient) -> None:
    response = await client.get("/v1/")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "frame-ancestors 'none'" in response.headers["Content-Security-Policy"]


@pytest.mark.asyncio
async def test_no_csp_outside_api(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert "Content-Security-Policy" not in response.headers
