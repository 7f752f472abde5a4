"""Expose the live stress monitor as MCP tools via fastmcp."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from fastmcp import FastMCP

from neurocalm.app.container import build_container
from neurocalm.app.monitor import StressMonitor
from neurocalm.config import Settings
from neurocalm.logging_setup import configure_logging


def current_state_payload(monitor: StressMonitor) -> Dict[str, Any]:
    if not monitor.connected:
        return {
            "available": False,
            "message": "No heart-rate sensor connected",
        }
    snapshot = monitor.snapshot()
    return {
        "available": True,
        "data": {
            "bpm": snapshot.bpm,
            "state": snapshot.state.value,
            "status": snapshot.status,
            "history_points": len(snapshot.history),
        },
    }


def recent_alerts_payload(monitor: StressMonitor) -> Dict[str, Any]:
    alerts = monitor.alert_log.entries()
    return {
        "count": len(alerts),
        "alerts": [alert.model_dump(mode="json") for alert in alerts],
    }


async def next_alert_payload(monitor: StressMonitor, timeout_sec: float = 10.0) -> Dict[str, Any]:
    event = await monitor.bus.next(max(0.0, min(timeout_sec, 60.0)))
    if event is None:
        return {"alert": None, "message": "No new stress alert"}
    return {"alert": event.model_dump(mode="json"), "message": event.message}


def build_mcp_server(monitor: StressMonitor) -> FastMCP:
    server = FastMCP(
        name="neurocalm",
        instructions="Provides the current heart rate, stress state and recent stress alerts.",
    )

    @server.tool(
        name="get_current_stress_state",
        description="Return latest heart rate, stress state and status label.",
    )
    async def tool_get_current_stress_state() -> Dict[str, Any]:
        return current_state_payload(monitor)

    @server.tool(
        name="get_recent_alerts",
        description="Return the most recent stress alerts (newest first) with their recommendations.",
    )
    async def tool_get_recent_alerts() -> Dict[str, Any]:
        return recent_alerts_payload(monitor)

    @server.tool(
        name="wait_for_next_alert",
        description="Wait up to timeout_sec seconds for the next stress alert and consume it.",
    )
    async def tool_wait_for_next_alert(timeout_sec: float = 10.0) -> Dict[str, Any]:
        return await next_alert_payload(monitor, timeout_sec)

    return server


async def _serve(source_name: str) -> None:
    settings = Settings.from_env()
    container = build_container(settings)
    container.monitor.connect(container.make_source(source_name))
    try:
        await build_mcp_server(container.monitor).run_async(transport="stdio")
    finally:
        container.close()


def run() -> None:
    """Run the MCP server over stdio, fed by the synthetic source."""

    configure_logging(Settings.from_env().log_level)
    asyncio.run(_serve("synthetic"))


__all__ = ["build_mcp_server", "run", "current_state_payload", "next_alert_payload", "recent_alerts_payload"]


if __name__ == "__main__":
    run()
