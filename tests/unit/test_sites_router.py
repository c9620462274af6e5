"""Tests for site registration and analytics endpoints."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

from api.exceptions import ConflictError
from api.schemas.analytics import AnalyticsResponse, CompanyStats
from api.services.site_service import SiteContext
from worker.tasks.exposure import ExposureReport


class TestRegisterSite:
    """Tests for POST /v1/sites/register."""

    @pytest.mark.asyncio
    async def test_register(self, client: AsyncClient, site_service, site) -> None:
        site_service.register_site.return_value = site

        response = await client.post(
            "/v1/sites/register",
            json={
                "site_url": "https://example.com/",
                "site_name": "Example",
                "admin_email": "owner@example.com",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["data"]["api_key"] == site.api_key
        assert body["data"]["subscription_tier"] == "free"
        site_service.register_site.assert_awaited_once_with(
            site_url="https://example.com",
            site_name="Example",
            admin_email="owner@example.com",
        )

    @pytest.mark.asyncio
    async def test_duplicate_site(self, client: AsyncClient, site_service) -> None:
        site_service.register_site.side_effect = ConflictError("already registered")

        response = await client.post("/v1/sites/register", json={"site_url": "https://a.com"})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "conflict"

    @pytest.mark.asyncio
    async def test_rejects_non_http_url(self, client: AsyncClient) -> None:
        response = await client.post("/v1/sites/register", json={"site_url": "ftp://a.com"})

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "site_url"

    @pytest.mark.asyncio
    async def test_rejects_bad_email(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/sites/register",
            json={"site_url": "https://a.com", "admin_email": "not-an-email"},
        )

        assert response.status_code == 422


class TestAnalytics:
    """Tests for GET /v1/analytics."""

    @pytest.mark.asyncio
    async def test_unknown_key(self, client: AsyncClient) -> None:
        response = await client.get("/v1/analytics", params={"api_key": "cg_missing"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_summary(self, client: AsyncClient, site_service, site) -> None:
        site_service.get_site_by_api_key.return_value = SiteContext(
            site=site, hourly_request_count=0
        )
        site_service.analytics_summary.return_value = AnalyticsResponse(
            days=7,
            total_requests=120,
            ai_bot_requests=40,
            paywalls_issued=30,
            monetized_requests=5,
            revenue=0.01,
            lost_revenue=0.0,
            top_companies=[CompanyStats(company="OpenAI", requests=25, revenue=0.01)],
        )

        response = await client.get("/v1/analytics", params={"api_key": site.api_key, "days": 7})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["ai_bot_requests"] == 40
        assert data["top_companies"][0]["company"] == "OpenAI"
        site_service.analytics_summary.assert_awaited_once_with(site.id, days=7)

    @pytest.mark.asyncio
    async def test_days_bounds(self, client: AsyncClient) -> None:
        response = await client.get("/v1/analytics", params={"api_key": "cg_x", "days": 0})
        assert response.status_code == 422


class TestAnalyzer:
    """Tests for POST /v1/analyzer/analyze."""

    @pytest.mark.asyncio
    async def test_blank_url(self, client: AsyncClient) -> None:
        response = await client.post("/v1/analyzer/analyze", json={"url": "  "})

        assert response.status_code == 422
        assert response.json()["error"]["message"].endswith("URL is required")

    @pytest.mark.asyncio
    async def test_unparseable_url(self, client: AsyncClient) -> None:
        response = await client.post("/v1/analyzer/analyze", json={"url": "ftp://example.com"})

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "url"

    @pytest.mark.asyncio
    async def test_report_is_flat(self, client: AsyncClient) -> None:
        from worker.crawler.robots import RobotsAnalysis
        from worker.crawler.sitemap import SitemapAnalysis
        from worker.crawler.techstack import TechStackInfo
        from worker.scoring.exposure import RiskScore, estimate_exposure

        report = ExposureReport(
            domain="example.com",
            risk_score=RiskScore.HIGH,
            robots_txt=RobotsAnalysis.permissive(),
            sitemap=SitemapAnalysis.not_found(),
            tech_stack=TechStackInfo(),
            estimates=estimate_exposure(100, True),
        )

        with patch("api.routers.analyzer.run_exposure_analysis", return_value=report):
            response = await client.post("/v1/analyzer/analyze", json={"url": "example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["domain"] == "example.com"
        assert data["risk_score"] == "high"
        assert data["robots_txt"]["allows_ai_bots"] is True
        assert data["estimates"]["monthly_bot_requests"] == 100
        assert "data" not in data
