"""
Wellness recommendation catalog (poses + tracks) and the per-state selector.

The catalog is plain YAML validated into frozen pydantic models at startup,
so content can change without touching the selection logic.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Annotated, Literal, Mapping, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from neurocalm.app.heart_core import StressState
from neurocalm.errors import CatalogError, UnknownTrackError


class PoseRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["pose"] = "pose"
    id: str
    title: str
    description: str
    instruction: str = ""
    duration: str = ""


class TrackRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["track"] = "track"
    id: str
    title: str
    description: str
    artist: str = ""
    album: str = ""
    duration_str: str = ""
    duration_sec: int = Field(0, ge=0)


Recommendation = Annotated[Union[PoseRecommendation, TrackRecommendation], Field(discriminator="kind")]

_ENTRIES = TypeAdapter(list[Recommendation])

# States that must always have something to offer when an alert fires.
_REQUIRED_STATES = (StressState.MILD, StressState.HIGH)


class RecommendationCatalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    entries: dict[StressState, tuple[Recommendation, ...]] = Field(default_factory=dict)

    def for_state(self, state: StressState) -> tuple[Recommendation, ...]:
        return self.entries.get(state, ())

    def find(self, recommendation_id: str) -> Recommendation:
        for items in self.entries.values():
            for item in items:
                if item.id == recommendation_id:
                    return item
        raise UnknownTrackError(recommendation_id)

    def track(self, track_id: str) -> TrackRecommendation:
        item = self.find(track_id)
        if not isinstance(item, TrackRecommendation):
            raise UnknownTrackError(track_id)
        return item


def _parse_state(key: str) -> StressState:
    normalized = str(key).strip().lower()
    for state in StressState:
        if state.value.lower() == normalized:
            return state
    raise CatalogError(f"Unknown stress state '{key}' in catalog. Expected one of {[s.value for s in StressState]}")


def build_catalog(data: Mapping[str, object]) -> RecommendationCatalog:
    if not isinstance(data, Mapping):
        raise CatalogError("Catalog must be a mapping of stress state -> list of entries.")

    entries: dict[StressState, tuple] = {}
    for key, raw_items in data.items():
        state = _parse_state(key)
        try:
            items = _ENTRIES.validate_python(raw_items or [])
        except ValidationError as exc:
            raise CatalogError(f"Invalid catalog entries for '{key}': {exc}") from exc
        entries[state] = tuple(items)

    for state in _REQUIRED_STATES:
        if not entries.get(state):
            raise CatalogError(f"Catalog needs at least one entry for '{state.value}'.")

    seen: set[str] = set()
    for items in entries.values():
        for item in items:
            if item.id in seen:
                raise CatalogError(f"Duplicate catalog id '{item.id}'.")
            seen.add(item.id)

    return RecommendationCatalog(entries=entries)


def load_catalog(path: str | Path) -> RecommendationCatalog:
    path = Path(path)
    if not path.exists():
        raise CatalogError(f"Catalog not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return build_catalog(data)


class RecommendationSelector:
    """Picks one wellness action for a stress state, uniformly at random."""

    def __init__(
        self,
        catalog: RecommendationCatalog,
        rng: random.Random | None = None,
        calm_recommendations: bool = False,
    ) -> None:
        self.catalog = catalog
        self._rng = rng or random.Random()
        self.calm_recommendations = calm_recommendations

    def select(self, state: StressState) -> Recommendation | None:
        if state is StressState.NORMAL and not self.calm_recommendations:
            return None
        options = self.catalog.for_state(state)
        if not options:
            return None
        return self._rng.choice(options)

    def find(self, recommendation_id: str) -> Recommendation:
        return self.catalog.find(recommendation_id)


__all__ = [
    "PoseRecommendation",
    "Recommendation",
    "RecommendationCatalog",
    "RecommendationSelector",
    "TrackRecommendation",
    "build_catalog",
    "load_catalog",
]
