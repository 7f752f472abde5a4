"""Heart-facing API router: connect sources, ingest samples, read state/history/alerts."""

import csv
import io

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from neurocalm.app.alerts import AlertEvent
from neurocalm.app.container import AppContainer
from neurocalm.app.dependencies import get_container, get_monitor
from neurocalm.app.heart_core import ConnectRequest, HeartIngestRequest, SampleDTO, TextChunkRequest, classify
from neurocalm.app.monitor import MonitorSnapshot, StressMonitor
from neurocalm.errors import NotConnectedError, SourceError, UnknownSourceError


router = APIRouter(tags=["heart"])


class HeartIngestResponse(BaseModel):
    status: str = Field(default="ok")
    state: MonitorSnapshot
    alert: AlertEvent | None = Field(default=None)


@router.post("/connect")
async def connect(body: ConnectRequest, container: AppContainer = Depends(get_container)) -> MonitorSnapshot:
    """Start a sample source; any existing connection is torn down first."""

    try:
        source = container.make_source(body.source, port=body.port, baudrate=body.baudrate)
        container.monitor.connect(source)
    except (UnknownSourceError, SourceError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return container.monitor.snapshot()


@router.post("/disconnect")
async def disconnect(monitor: StressMonitor = Depends(get_monitor)) -> MonitorSnapshot:
    monitor.disconnect()
    return monitor.snapshot()


@router.post("/ingest")
async def ingest(body: HeartIngestRequest, monitor: StressMonitor = Depends(get_monitor)) -> HeartIngestResponse:
    """Push one heart-rate sample into a connected push source."""

    previous = monitor.last_alert
    try:
        monitor.push_sample(body.bpm)
    except NotConnectedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    alert = monitor.last_alert if monitor.last_alert is not previous else None
    return HeartIngestResponse(status="ok", state=monitor.snapshot(), alert=alert)


@router.post("/ingest/text")
async def ingest_text(body: TextChunkRequest, monitor: StressMonitor = Depends(get_monitor)):
    """Queue raw serial text for a connected text source; lines are parsed asynchronously."""

    try:
        monitor.feed_text(body.chunk)
    except NotConnectedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"status": "queued", "chars": len(body.chunk)}


@router.get("/health")
async def health(monitor: StressMonitor = Depends(get_monitor)):
    return {"status": "ok", "connected": monitor.connected}


@router.get("/state")
async def state(monitor: StressMonitor = Depends(get_monitor)) -> MonitorSnapshot:
    return monitor.snapshot()


@router.get("/history")
async def history(monitor: StressMonitor = Depends(get_monitor)) -> list[SampleDTO]:
    return [sample.to_dto() for sample in monitor.history]


@router.get("/history.csv", response_class=PlainTextResponse)
async def history_csv(monitor: StressMonitor = Depends(get_monitor)) -> PlainTextResponse:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["timestamp", "bpm", "state"])
    for sample in monitor.history:
        writer.writerow([sample.timestamp.isoformat(), sample.bpm, classify(sample.bpm).value])
    return PlainTextResponse(
        buf.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=heart_history.csv"},
    )


@router.delete("/history")
async def clear_history(monitor: StressMonitor = Depends(get_monitor)):
    monitor.clear_history()
    return {"status": "ok", "history": []}


@router.get("/alerts")
async def alerts(monitor: StressMonitor = Depends(get_monitor)) -> list[AlertEvent]:
    return monitor.alert_log.entries()


@router.get("/alerts/next", responses={204: {"description": "No alert arrived before the timeout."}})
async def next_alert(
    timeout: float = Query(10.0, ge=0, le=60, description="Seconds to wait for the next alert."),
    monitor: StressMonitor = Depends(get_monitor),
):
    """Long-poll the alert stream; each alert is delivered to one waiting consumer."""

    event = await monitor.bus.next(timeout)
    if event is None:
        return Response(status_code=204)
    return event


__all__ = ["router"]
