"""Helpers for loading the coach's canned response rules."""

from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, Field, ValidationError

DEFAULT_RESPONSES_FILE = Path(__file__).parent / "responses.yaml"


class CoachRule(BaseModel):
    keywords: list[str]
    card: str | None = None
    text: str | None = None


class CoachScript(BaseModel):
    greeting: str = ""
    rules: list[CoachRule] = Field(default_factory=list)
    by_state: dict[str, str] = Field(default_factory=dict)
    fallback: str


def load_script(responses_file: Union[str, Path] = DEFAULT_RESPONSES_FILE) -> CoachScript:
    path = Path(responses_file)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Coach responses must be a mapping in {path}")
    try:
        return CoachScript.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid coach responses in {path}: {exc}") from exc
