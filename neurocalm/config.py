"""Runtime settings sourced from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_CATALOG_PATH = PACKAGE_DIR / "app" / "catalog.yaml"
DEFAULT_RESPONSES_PATH = PACKAGE_DIR / "coach" / "responses.yaml"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 8765
    log_level: str = "INFO"

    sample_interval_sec: float = 1.0
    history_size: int = 30
    alert_log_size: int = 5

    playback_tick_sec: float = 0.1
    playback_increment: float = 1.0

    # Open policies: calm-state recommendations and "back to calm" alerts.
    calm_recommendations: bool = False
    alert_on_calm: bool = False
    auto_play_tracks: bool = False

    catalog_path: Path = DEFAULT_CATALOG_PATH
    responses_path: Path = DEFAULT_RESPONSES_PATH
    rng_seed: int | None = None

    db_backend: str = "sqlite"
    db_path: Path = Path("data") / "neurocalm.db"
    serial_baudrate: int = 9600

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        defaults = cls()
        return cls(
            host=os.getenv("NEUROCALM_HOST", defaults.host),
            port=int(os.getenv("NEUROCALM_PORT", str(defaults.port))),
            log_level=os.getenv("NEUROCALM_LOG_LEVEL", defaults.log_level).upper(),
            sample_interval_sec=_env_float("NEUROCALM_SAMPLE_INTERVAL", defaults.sample_interval_sec),
            history_size=_env_int("NEUROCALM_HISTORY_SIZE", defaults.history_size),
            alert_log_size=_env_int("NEUROCALM_ALERT_LOG_SIZE", defaults.alert_log_size),
            playback_tick_sec=_env_float("NEUROCALM_PLAYBACK_TICK", defaults.playback_tick_sec),
            playback_increment=_env_float("NEUROCALM_PLAYBACK_INCREMENT", defaults.playback_increment),
            calm_recommendations=_env_bool("NEUROCALM_CALM_RECOMMENDATIONS", defaults.calm_recommendations),
            alert_on_calm=_env_bool("NEUROCALM_ALERT_ON_CALM", defaults.alert_on_calm),
            auto_play_tracks=_env_bool("NEUROCALM_AUTO_PLAY", defaults.auto_play_tracks),
            catalog_path=Path(os.getenv("NEUROCALM_CATALOG", str(defaults.catalog_path))),
            responses_path=Path(os.getenv("NEUROCALM_COACH_RESPONSES", str(defaults.responses_path))),
            rng_seed=_env_int("NEUROCALM_SEED", defaults.rng_seed),
            db_backend=os.getenv("NEUROCALM_DB_BACKEND", defaults.db_backend).lower(),
            db_path=Path(os.getenv("NEUROCALM_DB", str(defaults.db_path))),
            serial_baudrate=_env_int("NEUROCALM_SERIAL_BAUDRATE", defaults.serial_baudrate),
        )


__all__ = ["DEFAULT_CATALOG_PATH", "DEFAULT_RESPONSES_PATH", "Settings"]
