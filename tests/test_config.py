"""
Tests for environment settings and session wiring.
"""

import asyncio

import pytest

from feed.config import DEFAULT_REFRESH_INTERVAL, Settings, get_settings
from feed.errors import NetworkError
from feed.fetcher import HttpIncidentSource, StaticIncidentSource
from feed.models import Error, Success
from feed.session import FeedSession, build_source

from helpers import ScriptedSource

ENV_VARS = (
    "FEED_SOURCE_URL", "FEED_REFRESH_INTERVAL", "FEED_REQUEST_TIMEOUT",
    "FEED_REFETCH_ON_FILTER_CHANGE", "FEED_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:

    def test_defaults(self):
        settings = get_settings()

        assert settings == Settings()
        assert settings.refresh_interval == DEFAULT_REFRESH_INTERVAL == 300.0
        assert settings.refetch_on_filter_change is True

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("FEED_SOURCE_URL", " https://example.test/incidents ")
        monkeypatch.setenv("FEED_REFRESH_INTERVAL", "60")
        monkeypatch.setenv("FEED_REQUEST_TIMEOUT", "2.5")
        monkeypatch.setenv("FEED_REFETCH_ON_FILTER_CHANGE", "false")
        monkeypatch.setenv("FEED_LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.source_url == "https://example.test/incidents"
        assert settings.refresh_interval == 60.0
        assert settings.request_timeout == 2.5
        assert settings.refetch_on_filter_change is False
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["soon", "0", "-5"])
    def test_rejects_bad_interval(self, monkeypatch, value):
        monkeypatch.setenv("FEED_REFRESH_INTERVAL", value)

        with pytest.raises(ValueError, match="FEED_REFRESH_INTERVAL"):
            get_settings()


class TestSession:

    def test_demo_source_without_url(self):
        assert isinstance(build_source(Settings()), StaticIncidentSource)

    def test_http_source_with_url(self):
        source = build_source(Settings(source_url="https://example.test/incidents"))
        try:
            assert isinstance(source, HttpIncidentSource)
            assert source.url == "https://example.test/incidents"
        finally:
            asyncio.run(source.aclose())

    def test_start_refresh_toggle_stop(self):
        async def run():
            session = FeedSession.from_settings(Settings(refresh_interval=3600))
            started = await session.start()
            toggled = await session.toggle("Assault")
            refreshed = await session.refresh()
            await session.stop()
            return started, toggled, refreshed, session

        started, toggled, refreshed, session = asyncio.run(run())

        assert isinstance(started, Success)
        assert started.snapshot.total == 3
        assert [r.category for r in toggled.snapshot.visible_records] == ["Theft", "Burglary"]
        assert refreshed.snapshot.total == 2
        assert not session.scheduler.active

    def test_counts_failed_refreshes_until_success(self, three_records):
        async def run():
            source = ScriptedSource(
                three_records, NetworkError("offline"), NetworkError("offline"), three_records,
            )
            session = FeedSession(source, interval=3600, refetch_on_filter_change=False)
            await session.start()
            seen = [session.consecutive_failures]
            await session.refresh()
            seen.append(session.consecutive_failures)
            state = await session.toggle("Theft")
            seen.append(session.consecutive_failures)
            await session.refresh()
            seen.append(session.consecutive_failures)
            await session.refresh()
            seen.append(session.consecutive_failures)
            await session.stop()
            return state, seen

        state, seen = asyncio.run(run())

        assert isinstance(state, Error)
        assert seen == [0, 1, 1, 2, 0]
