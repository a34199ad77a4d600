"""
Pydantic models for the public battle endpoint.

Mirror the redacted projection served at /public/battle.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class ViewCharacter(BaseModel):
    id: str
    name: str
    is_npc: bool = False
    initiative: int = 0
    image_url: str = ""
    is_lair: bool = False


class ViewBattleRef(BaseModel):
    id: int
    name: str


class ViewBattle(BaseModel):
    id: int
    name: str
    characters: list[ViewCharacter] = Field(default_factory=list)
    current_turn_index: int = 0
    current_round: int = 1
    updated_at: datetime

    @property
    def current_character(self) -> ViewCharacter | None:
        if 0 <= self.current_turn_index < len(self.characters):
            return self.characters[self.current_turn_index]
        return None


class ViewSnapshot(BaseModel):
    battle: ViewBattle | None = None
    available_battles: list[ViewBattleRef] = Field(default_factory=list)
