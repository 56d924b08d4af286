"""MCP server for the live incident feed."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastmcp import FastMCP

from api import queries
from feed.config import configure_logging, get_settings
from feed.session import FeedSession

_session: FeedSession | None = None


@asynccontextmanager
async def lifespan(server: FastMCP):
    global _session
    session = FeedSession.from_settings(get_settings())
    await session.start()
    _session = session
    try:
        yield
    finally:
        _session = None
        await session.stop()


mcp = FastMCP(
    "Incident Feed",
    instructions=(
        "Recent crime incidents, refreshed every few minutes. Categories are "
        "Theft, Assault and Burglary; each can be shown or hidden with "
        "toggle_category. Counts reflect the visible incidents only."
    ),
    lifespan=lifespan,
)


def _current() -> FeedSession:
    if _session is None:
        raise RuntimeError("incident feed is not running")
    return _session


@mcp.tool()
def get_feed() -> dict:
    """Current feed: status, error, last update time, counts and visible incidents."""
    return queries.get_feed(_current())


@mcp.tool()
def get_filter_options() -> dict:
    """Crime categories and whether each is currently shown."""
    return queries.get_filter_options(_current())


@mcp.tool()
def get_incidents() -> list[dict]:
    """Visible incidents in source order."""
    return queries.get_incidents(_current())


@mcp.tool()
async def toggle_category(category: str) -> dict:
    """Show or hide one category (Theft, Assault, Burglary) and return the updated feed."""
    return await queries.toggle_category(_current(), category)


@mcp.tool()
async def refresh_feed() -> dict:
    """Fetch incidents now instead of waiting for the next scheduled refresh."""
    return await queries.refresh(_current())


def main():
    configure_logging(get_settings().log_level)
    mcp.run()


if __name__ == "__main__":
    main()
