"""Beacon MCP server entrypoint using FastMCP.

Exposes the hybrid searcher over a JSON record file as MCP tools.
Run with:
  - beacon-mcp
  - or: python -m beacon.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP

from beacon.config import Settings, load_settings
from beacon.mcp.tools import register_search_tools
from beacon.records import Record, load_records
from beacon.search.engine import HybridSearcher

logger = logging.getLogger(__name__)


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.searcher: Optional[HybridSearcher[Record]] = None

    def init_searcher(self) -> None:
        """Load the configured dataset and index it."""
        path = self.settings.dataset.path
        if path:
            self.searcher = HybridSearcher.from_settings(load_records(path), self.settings)
        else:
            logger.warning("No dataset configured; search tools will be unavailable")
            self.searcher = None


# Global state and server instance
_state: Optional[AppState] = None
mcp = FastMCP("Beacon MCP Server")


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    logging.basicConfig(level=settings.app.log_level.upper())
    _state = AppState(settings)
    _state.init_searcher()
    register_search_tools(mcp, get_state=lambda: _state)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
