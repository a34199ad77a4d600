"""
Settings for the player view.

Read from BATTLE_VIEW_* environment variables; a .env file is loaded by the
command line entry point before these are read.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    api_timeout: float
    poll_interval: float
    battle_id: int | None


@lru_cache()
def get_settings() -> Settings:
    battle_id = _env("BATTLE_VIEW_BATTLE_ID", "")
    return Settings(
        api_base_url=_env("BATTLE_VIEW_API_URL", "http://localhost:8000"),
        api_timeout=float(_env("BATTLE_VIEW_TIMEOUT", "10.0")),
        poll_interval=float(_env("BATTLE_VIEW_POLL_INTERVAL", "0.5")),
        battle_id=int(battle_id) if battle_id.isdigit() else None,
    )
