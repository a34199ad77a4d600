from pydantic import BaseModel, Field


class RechargeAbility(BaseModel):
    name: str = Field(..., min_length=1)
    recharge_on: int = Field(default=5, ge=2, le=6)  # recharges on a d6 roll of recharge_on-6


class LimitedAbility(BaseModel):
    name: str = Field(..., min_length=1)
    max_uses: int = Field(default=1, ge=1)


class AbilityScores(BaseModel):
    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10


class Creature(BaseModel):
    """A reusable stat block. Combatants are stamped out of it and never write back."""

    name: str = Field(..., min_length=1)
    max_hp: int = Field(..., gt=0)
    hp_formula: str = ""
    ac: int = 10
    ac_text: str = ""
    size: str = ""
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
    legendary_actions: str = ""
    lair_actions: str = ""

    is_spellcaster: bool = False
    spell_dc: int = 13
    spell_attack: int = 5
    spell_slots: dict[int, int] = Field(default_factory=dict)  # spell level (1-9) -> max slots
    spells: str = ""

    has_legendary: bool = False
    legendary_actions_count: int = Field(default=3, ge=0)
    has_legendary_resistance: bool = False
    legendary_resistance_count: int = Field(default=3, ge=0)

    recharge_abilities: list[RechargeAbility] = Field(default_factory=list)
    limited_abilities: list[LimitedAbility] = Field(default_factory=list)

    class Config:
        frozen = True
        from_attributes = True


class ImportTextRequest(BaseModel):
    text: str


class ParsedCreaturesResponse(BaseModel):
    count: int
    creatures: list[Creature]


class ImportToEncounterRequest(BaseModel):
    creatures: list[Creature] = Field(..., min_length=1)
    copies: list[int] = Field(default_factory=list)  # copy count per creature, by index; missing entries mean 1
    encounter_id: int | None = None
    new_encounter_name: str | None = None


class ImportToEncounterResponse(BaseModel):
    encounter_id: int
    encounter_name: str
    combatants_added: int
