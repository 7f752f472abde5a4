"""Coach chat router: canned, state-aware replies."""

from fastapi import APIRouter, Depends

from neurocalm.app.container import AppContainer
from neurocalm.app.dependencies import get_container
from neurocalm.coach import CoachMessageRequest, CoachReply


router = APIRouter(prefix="/coach", tags=["coach"])


@router.get("/greeting")
async def greeting(container: AppContainer = Depends(get_container)):
    return {"text": container.coach.greeting}


@router.post("/messages")
async def send_message(body: CoachMessageRequest, container: AppContainer = Depends(get_container)) -> CoachReply:
    """Reply to a chat message, taking the live stress state into account when connected."""

    monitor = container.monitor
    state = monitor.current_state if monitor.connected else None
    return container.coach.reply(body.message, state=state)


__all__ = ["router"]
