from __future__ import annotations

import pytest

from insights import main as insights_main


@pytest.mark.asyncio
async def test_insights_root_and_health() -> None:
    root = await insights_main.root()
    assert root["service"] == "insights"
    assert root["status"] == "running"
    assert root["endpoints"]["forecast"] == "/api/v1/insights/forecast"

    health = await insights_main.health_check()
    assert health["status"] == "success"
    assert health["data"]["status"] == "healthy"


@pytest.mark.asyncio
async def test_insights_lifespan_configures_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    levels = []
    monkeypatch.setattr(insights_main, "configure_logging", levels.append)

    async with insights_main.lifespan(insights_main.app):
        assert insights_main.app.state.settings.service.insights_port > 0

    assert levels == [insights_main.get_settings().service.log_level]


def test_router_is_mounted_under_api_prefix() -> None:
    paths = set(insights_main.app.openapi()["paths"])
    assert "/api/v1/insights/table/infer" in paths
    assert "/api/v1/insights/workbook/analyze" in paths
    assert "/health" in paths
