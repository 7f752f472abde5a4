"""Playback router: start/toggle/stop the simulated track player."""

from fastapi import APIRouter, Depends, HTTPException

from neurocalm.app.dependencies import get_monitor
from neurocalm.app.monitor import StressMonitor
from neurocalm.app.playback import PlaybackSessionDTO
from neurocalm.errors import UnknownTrackError


router = APIRouter(prefix="/playback", tags=["playback"])


def _require_track(monitor: StressMonitor, track_id: str) -> None:
    try:
        monitor.selector.catalog.track(track_id)
    except UnknownTrackError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown track '{track_id}'") from exc


@router.get("")
async def sessions(monitor: StressMonitor = Depends(get_monitor)) -> list[PlaybackSessionDTO]:
    return [s.to_dto() for s in monitor.playback.sessions()]


@router.post("/stop")
async def stop(monitor: StressMonitor = Depends(get_monitor)) -> list[PlaybackSessionDTO]:
    monitor.playback.stop()
    return [s.to_dto() for s in monitor.playback.sessions()]


@router.post("/{track_id}/start")
async def start(track_id: str, monitor: StressMonitor = Depends(get_monitor)) -> PlaybackSessionDTO:
    _require_track(monitor, track_id)
    return monitor.playback.start(track_id).to_dto()


@router.post("/{track_id}/toggle")
async def toggle(track_id: str, monitor: StressMonitor = Depends(get_monitor)) -> PlaybackSessionDTO:
    _require_track(monitor, track_id)
    return monitor.playback.toggle(track_id).to_dto()


__all__ = ["router"]
