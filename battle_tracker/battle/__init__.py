from .router import router, public_router
from .models import Battle
from .schemas import (
    BattleCharacter,
    BattleCreate,
    BattleUpdate,
    BattleResponse,
    BattleSummary,
    CharacterAdd,
    InitiativeUpdate,
    MoveRequest,
    PublicCharacter,
    PublicBattle,
    PublicBattleResponse,
)

__all__ = [
    "router",
    "public_router",
    "Battle",
    "BattleCharacter",
    "BattleCreate",
    "BattleUpdate",
    "BattleResponse",
    "BattleSummary",
    "CharacterAdd",
    "InitiativeUpdate",
    "MoveRequest",
    "PublicCharacter",
    "PublicBattle",
    "PublicBattleResponse",
]
