from datetime import datetime
from pydantic import BaseModel, Field

from ..core.enums import MoveDirection


class BattleCharacter(BaseModel):
    """One entry in a battle's turn order."""

    id: str
    name: str
    is_npc: bool = False
    is_revealed: bool = True
    initiative: int = 0
    sort_order: int = 0  # tie-break among equal initiatives, lower acts first
    image_url: str = ""
    is_lair: bool = False

    class Config:
        frozen = True


# Battles
class BattleCreate(BaseModel):
    name: str = ""
    group_id: int | None = None


class BattleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    characters: list[BattleCharacter] | None = None
    current_turn_index: int | None = Field(default=None, ge=0)
    current_round: int | None = Field(default=None, ge=1)
    is_active: bool | None = None
    refresh_expiration: bool = False


class BattleResponse(BaseModel):
    id: int
    name: str
    characters: list[BattleCharacter]  # sorted turn order
    current_turn_index: int
    current_round: int
    current_character_id: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    expires_at: datetime


class BattleSummary(BaseModel):
    id: int
    name: str
    is_active: bool
    character_count: int
    current_round: int
    created_at: datetime
    expires_at: datetime


# Turn order commands
class CharacterAdd(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    initiative: int | str = 0  # non-numeric input counts as 0
    is_npc: bool = True
    image_url: str = ""


class InitiativeUpdate(BaseModel):
    initiative: int | str


class MoveRequest(BaseModel):
    direction: MoveDirection


# Public projection
class PublicCharacter(BaseModel):
    id: str
    name: str
    is_npc: bool
    initiative: int
    image_url: str
    is_lair: bool


class PublicBattleRef(BaseModel):
    id: int
    name: str


class PublicBattle(BaseModel):
    id: int
    name: str
    characters: list[PublicCharacter]
    current_turn_index: int
    current_round: int
    updated_at: datetime


class PublicBattleResponse(BaseModel):
    battle: PublicBattle | None = None
    available_battles: list[PublicBattleRef] = Field(default_factory=list)
