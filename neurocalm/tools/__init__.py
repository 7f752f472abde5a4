"""Tool definitions for MCP exposure."""

from .monitor_mcp import (
    build_mcp_server,
    current_state_payload,
    next_alert_payload,
    recent_alerts_payload,
    run as run_monitor_mcp_server,
)

__all__ = [
    "build_mcp_server",
    "current_state_payload",
    "next_alert_payload",
    "recent_alerts_payload",
    "run_monitor_mcp_server",
]
