"""Tests for the MCP tool payloads."""

import pytest

from neurocalm.app.sources import PushSource
from neurocalm.tools import build_mcp_server, current_state_payload, next_alert_payload, recent_alerts_payload


def test_state_payload_when_disconnected(monitor):
    assert current_state_payload(monitor) == {
        "available": False,
        "message": "No heart-rate sensor connected",
    }


def test_state_and_alert_payloads(monitor, clock):
    monitor.connect(PushSource(clock))
    monitor.push_sample(90)
    monitor.push_sample(130)

    state = current_state_payload(monitor)
    assert state["available"] is True
    assert state["data"] == {"bpm": 130, "state": "High", "status": "High Stress", "history_points": 2}

    alerts = recent_alerts_payload(monitor)
    assert alerts["count"] == 2
    assert [a["state"] for a in alerts["alerts"]] == ["High", "Mild"]
    assert alerts["alerts"][0]["recommendation"]["kind"] in ("pose", "track")


def test_build_mcp_server(monitor):
    server = build_mcp_server(monitor)
    assert server.name == "neurocalm"


@pytest.mark.asyncio
async def test_next_alert_payload_consumes_the_alert_stream(monitor, clock):
    monitor.connect(PushSource(clock))
    monitor.push_sample(125)

    payload = await next_alert_payload(monitor, timeout_sec=0)
    assert payload["alert"]["state"] == "High"
    assert payload["message"] == "ALERT: High Stress Detected (125 BPM)."

    empty = await next_alert_payload(monitor, timeout_sec=0.01)
    assert empty == {"alert": None, "message": "No new stress alert"}
