from datetime import datetime
from pydantic import BaseModel, Field

from ..statblock.schemas import AbilityScores, Creature, LimitedAbility, RechargeAbility


# Tracker state (per combatant, runtime)
class SlotState(BaseModel):
    max: int = Field(..., ge=0)
    current: int = Field(..., ge=0)


class RechargeState(BaseModel):
    name: str
    recharge_on: int
    available: bool = True


class LimitedState(BaseModel):
    name: str
    max_uses: int
    current_uses: int


class TrackerState(BaseModel):
    spell_slots: dict[int, SlotState] = Field(default_factory=dict)  # spell level -> slots
    recharge: list[RechargeState] = Field(default_factory=list)
    limited: list[LimitedState] = Field(default_factory=list)
    legendary_actions_remaining: int = 0
    legendary_resistance_remaining: int = 0


# Encounters
class EncounterCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)


class EncounterUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class CombatantResponse(BaseModel):
    id: int
    encounter_id: int
    position: int
    base_name: str
    display_name: str
    current_hp: int
    max_hp: int
    temp_hp: int
    template: Creature
    trackers: TrackerState

    class Config:
        from_attributes = True


class EncounterSummary(BaseModel):
    id: int
    name: str
    description: str
    created_at: datetime
    combatant_count: int


class EncounterResponse(BaseModel):
    id: int
    name: str
    description: str
    created_at: datetime
    combatants: list[CombatantResponse]

    class Config:
        from_attributes = True


# Manual NPC entry. Required fields are checked by the service so the message
# matches the one the editor shows.
class NpcEntry(BaseModel):
    name: str = ""
    copies: int = Field(default=1, ge=1, le=50)
    hp: str = ""
    ac: str = ""
    size: str = "Medium"
    type: str = ""
    challenge_rating: str = ""
    speed: str = ""
    stats: AbilityScores = Field(default_factory=AbilityScores)
    senses: str = ""
    saving_throws: str = ""
    skills: str = ""
    damage_resistances: str = ""
    damage_immunities: str = ""
    condition_immunities: str = ""
    traits: str = ""
    actions: str = ""
    bonus_actions: str = ""
    reactions: str = ""
    is_spellcaster: bool = False
    spell_dc: int = 13
    spell_attack: int = 5
    spell_slots: dict[int, int] = Field(default_factory=dict)
    spells: str = ""
    has_legendary: bool = False
    legendary_actions_count: int = Field(default=3, ge=0)
    legendary_actions: str = ""
    has_legendary_resistance: bool = False
    legendary_resistance_count: int = Field(default=3, ge=0)
    lair_actions: str = ""
    recharge_abilities: list[RechargeAbility] = Field(default_factory=list)
    limited_abilities: list[LimitedAbility] = Field(default_factory=list)


# Combatant commands
class HpAdjust(BaseModel):
    amount: int  # negative = damage, positive = healing


class HpInput(BaseModel):
    value: str  # "+N" heals, "-N" damages, "N" sets


class TempHpSet(BaseModel):
    value: int


class PipToggle(BaseModel):
    index: int = Field(..., ge=0)


class RenameRequest(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)


class SendToBattleRequest(BaseModel):
    initiative: int = 10
