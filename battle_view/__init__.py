"""Read-only player view that polls the tracker's public battle endpoint."""

from .client import BattleViewClient, ViewerError, BattleNotFoundError
from .models import ViewBattle, ViewCharacter, ViewSnapshot
from .render import render_snapshot

__all__ = [
    "BattleViewClient",
    "ViewerError",
    "BattleNotFoundError",
    "ViewBattle",
    "ViewCharacter",
    "ViewSnapshot",
    "render_snapshot",
]
