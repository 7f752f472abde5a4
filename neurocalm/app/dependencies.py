"""FastAPI dependencies resolving collaborators from ``app.state``."""

from fastapi import Request

from neurocalm.app.container import AppContainer
from neurocalm.app.monitor import StressMonitor


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_monitor(request: Request) -> StressMonitor:
    return get_container(request).monitor


__all__ = ["get_container", "get_monitor"]
