"""Rules-based coach: keyword matching into catalog cards, then state-aware text."""

from __future__ import annotations

import time

from loguru import logger
from pydantic import BaseModel, Field

from neurocalm.app.heart_core import StressState
from neurocalm.app.recommendations import Recommendation, RecommendationCatalog
from neurocalm.coach.prompt_loader import CoachScript
from neurocalm.errors import UnknownTrackError


class CoachMessageRequest(BaseModel):
    message: str = Field(..., min_length=1, description="What the student typed into the chat.")


class CoachReply(BaseModel):
    text: str
    card: Recommendation | None = Field(None, description="Pose or track card to render, if the reply has one.")
    generated_at: float = Field(default_factory=time.time)


class CoachResponder:
    def __init__(self, script: CoachScript, catalog: RecommendationCatalog) -> None:
        self._script = script
        self._catalog = catalog
        # Fail at startup rather than mid-chat when a rule points nowhere.
        for rule in script.rules:
            if rule.card:
                catalog.find(rule.card)

    @property
    def greeting(self) -> str:
        return self._script.greeting

    def reply(self, message: str, state: StressState | None = None) -> CoachReply:
        text = message.strip().lower()

        for rule in self._script.rules:
            if not any(keyword in text for keyword in rule.keywords):
                continue
            if rule.card:
                try:
                    card = self._catalog.find(rule.card)
                except UnknownTrackError:
                    logger.warning("Coach rule points at missing catalog entry {}", rule.card)
                    continue
                return CoachReply(text=card.description, card=card)
            if rule.text:
                return CoachReply(text=rule.text)

        if state is not None and state is not StressState.NORMAL:
            canned = self._script.by_state.get(state.value)
            if canned:
                return CoachReply(text=canned)

        return CoachReply(text=self._script.fallback)


__all__ = ["CoachMessageRequest", "CoachReply", "CoachResponder"]
