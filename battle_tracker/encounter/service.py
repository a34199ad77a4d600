import logging
from sqlalchemy.orm import Session

from . import trackers
from .models import Encounter, EncounterCombatant
from .schemas import EncounterCreate, EncounterUpdate, EncounterSummary, NpcEntry, TrackerState
from .trackers import HitPoints
from ..battle import service as battle_service
from ..battle.models import Battle
from ..core.exceptions import NotFoundError, ValidationError
from ..statblock.parser import extract_leading_int
from ..statblock.schemas import Creature

logger = logging.getLogger(__name__)

SPELL_LEVELS = range(1, 10)


# Encounters
def get_encounter(db: Session, owner_id: int, encounter_id: int) -> Encounter:
    encounter = (
        db.query(Encounter)
        .filter(Encounter.id == encounter_id, Encounter.owner_id == owner_id)
        .first()
    )
    if not encounter:
        raise NotFoundError("Encounter", encounter_id)
    return encounter


def get_encounters(db: Session, owner_id: int) -> list[Encounter]:
    return (
        db.query(Encounter)
        .filter(Encounter.owner_id == owner_id)
        .order_by(Encounter.created_at.desc(), Encounter.id.desc())
        .all()
    )


def to_summary(encounter: Encounter) -> EncounterSummary:
    return EncounterSummary(
        id=encounter.id,
        name=encounter.name,
        description=encounter.description or "",
        created_at=encounter.created_at,
        combatant_count=len(encounter.combatants),
    )


def create_encounter(db: Session, owner_id: int, encounter_data: EncounterCreate) -> Encounter:
    name = encounter_data.name.strip()
    if not name:
        raise ValidationError("Encounter name is required")

    encounter = Encounter(owner_id=owner_id, name=name, description=encounter_data.description.strip())
    db.add(encounter)
    db.commit()
    db.refresh(encounter)
    return encounter


def update_encounter(
    db: Session, owner_id: int, encounter_id: int, encounter_data: EncounterUpdate
) -> Encounter:
    encounter = get_encounter(db, owner_id, encounter_id)

    if encounter_data.name is not None:
        name = encounter_data.name.strip()
        if not name:
            raise ValidationError("Encounter name is required")
        encounter.name = name
    if encounter_data.description is not None:
        encounter.description = encounter_data.description.strip()

    db.commit()
    db.refresh(encounter)
    return encounter


def delete_encounter(db: Session, owner_id: int, encounter_id: int) -> None:
    encounter = get_encounter(db, owner_id, encounter_id)
    db.delete(encounter)
    db.commit()


# Instancing
def creature_from_entry(entry: NpcEntry) -> Creature:
    """Build a template from the manual entry form.

    Name, HP and AC are required; HP must start with a positive number.
    """
    name = entry.name.strip()
    hp_text = entry.hp.strip()
    ac_text = entry.ac.strip()
    if not name or not hp_text or not ac_text:
        raise ValidationError("Please fill in required fields (Name, HP, AC)")

    max_hp = extract_leading_int(hp_text, 0)
    if max_hp <= 0:
        raise ValidationError("Invalid HP value")

    fields = entry.model_dump(exclude={"name", "copies", "hp", "ac", "spell_slots"})
    return Creature(
        **fields,
        name=name,
        max_hp=max_hp,
        hp_formula=hp_text,
        ac=extract_leading_int(ac_text, 10),
        ac_text=ac_text,
        spell_slots={
            level: count for level, count in entry.spell_slots.items()
            if level in SPELL_LEVELS and count > 0
        },
    )


def _next_position(encounter: Encounter) -> int:
    return max([-1, *(c.position for c in encounter.combatants)]) + 1


def add_creature(encounter: Encounter, creature: Creature, copies: int = 1) -> list[EncounterCombatant]:
    """Stamp ``copies`` combatants from a template onto the end of an encounter. Does not commit."""
    position = _next_position(encounter)
    template = creature.model_dump(mode="json")

    added = []
    for offset, draft in enumerate(trackers.instantiate(creature, copies)):
        combatant = EncounterCombatant(
            position=position + offset,
            base_name=draft.base_name,
            display_name=draft.display_name,
            template=template,
            current_hp=draft.current_hp,
            max_hp=draft.max_hp,
            temp_hp=draft.temp_hp,
            trackers=draft.trackers.model_dump(mode="json"),
        )
        encounter.combatants.append(combatant)
        added.append(combatant)
    return added


def add_manual_npc(db: Session, owner_id: int, encounter_id: int, entry: NpcEntry) -> Encounter:
    encounter = get_encounter(db, owner_id, encounter_id)
    creature = creature_from_entry(entry)

    add_creature(encounter, creature, entry.copies)
    db.commit()
    db.refresh(encounter)
    logger.info("Added %d x %s to encounter %s", entry.copies, creature.name, encounter.id)
    return encounter


# Combatants
def get_combatant(db: Session, owner_id: int, combatant_id: int) -> EncounterCombatant:
    combatant = (
        db.query(EncounterCombatant)
        .join(Encounter)
        .filter(EncounterCombatant.id == combatant_id, Encounter.owner_id == owner_id)
        .first()
    )
    if not combatant:
        raise NotFoundError("Combatant", combatant_id)
    return combatant


def template_of(combatant: EncounterCombatant) -> Creature:
    return Creature.model_validate(combatant.template)


def trackers_of(combatant: EncounterCombatant) -> TrackerState:
    return TrackerState.model_validate(combatant.trackers or {})


def _hit_points(combatant: EncounterCombatant) -> HitPoints:
    return HitPoints(current=combatant.current_hp, maximum=combatant.max_hp, temp=combatant.temp_hp or 0)


def _save_hp(db: Session, combatant: EncounterCombatant, hp: HitPoints) -> EncounterCombatant:
    combatant.current_hp = hp.current
    combatant.temp_hp = hp.temp
    db.commit()
    db.refresh(combatant)
    return combatant


def _save_trackers(db: Session, combatant: EncounterCombatant, state: TrackerState) -> EncounterCombatant:
    combatant.trackers = state.model_dump(mode="json")
    db.commit()
    db.refresh(combatant)
    return combatant


def adjust_hp(db: Session, owner_id: int, combatant_id: int, amount: int) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    return _save_hp(db, combatant, trackers.apply_hp_change(_hit_points(combatant), amount))


def apply_hp_input(db: Session, owner_id: int, combatant_id: int, value: str) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    return _save_hp(db, combatant, trackers.apply_hp_input(_hit_points(combatant), value))


def set_temp_hp(db: Session, owner_id: int, combatant_id: int, value: int) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    return _save_hp(db, combatant, trackers.set_temp_hp(_hit_points(combatant), value))


def toggle_spell_slot(db: Session, owner_id: int, combatant_id: int, level: int, index: int) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    state = trackers.toggle_spell_slot(trackers_of(combatant), level, index)
    return _save_trackers(db, combatant, state)


def toggle_legendary_action(db: Session, owner_id: int, combatant_id: int, index: int) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    state = trackers.toggle_legendary_action(trackers_of(combatant), template_of(combatant), index)
    return _save_trackers(db, combatant, state)


def refill_legendary_actions(db: Session, owner_id: int, combatant_id: int) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    state = trackers.refill_legendary_actions(trackers_of(combatant), template_of(combatant))
    return _save_trackers(db, combatant, state)


def toggle_legendary_resistance(db: Session, owner_id: int, combatant_id: int, index: int) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    state = trackers.toggle_legendary_resistance(trackers_of(combatant), template_of(combatant), index)
    return _save_trackers(db, combatant, state)


def toggle_recharge(db: Session, owner_id: int, combatant_id: int, ability_index: int) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    state = trackers.toggle_recharge(trackers_of(combatant), ability_index)
    return _save_trackers(db, combatant, state)


def toggle_limited(
    db: Session, owner_id: int, combatant_id: int, ability_index: int, index: int
) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    state = trackers.toggle_limited_ability(trackers_of(combatant), ability_index, index)
    return _save_trackers(db, combatant, state)


def rename_combatant(db: Session, owner_id: int, combatant_id: int, display_name: str) -> EncounterCombatant:
    combatant = get_combatant(db, owner_id, combatant_id)
    name = display_name.strip()
    if not name:
        raise ValidationError("Please enter a name")

    combatant.display_name = name
    db.commit()
    db.refresh(combatant)
    return combatant


def duplicate_combatant(db: Session, owner_id: int, combatant_id: int) -> EncounterCombatant:
    """Add a fresh copy right after the last combatant sharing the same base name.

    The copy starts at full HP with every tracker refilled.
    """
    source = get_combatant(db, owner_id, combatant_id)
    encounter = source.encounter
    siblings = [c for c in encounter.combatants if c.base_name == source.base_name]
    insert_at = max(c.position for c in siblings) + 1

    for combatant in encounter.combatants:
        if combatant.position >= insert_at:
            combatant.position += 1

    creature = template_of(source)
    copy = EncounterCombatant(
        position=insert_at,
        base_name=source.base_name,
        display_name=trackers.duplicate_name(source.base_name, len(siblings)),
        template=source.template,
        current_hp=source.max_hp,
        max_hp=source.max_hp,
        temp_hp=0,
        trackers=trackers.initial_trackers(creature).model_dump(mode="json"),
    )
    encounter.combatants.append(copy)
    db.commit()
    db.refresh(copy)
    logger.info("Duplicated combatant %s as '%s'", source.id, copy.display_name)
    return copy


def delete_combatant(db: Session, owner_id: int, combatant_id: int) -> None:
    combatant = get_combatant(db, owner_id, combatant_id)
    db.delete(combatant)
    db.commit()


def send_to_battle(db: Session, owner_id: int, combatant_id: int, initiative: int) -> Battle:
    """Put a combatant into the active battle as a hidden NPC."""
    combatant = get_combatant(db, owner_id, combatant_id)
    return battle_service.send_npc_to_active_battle(db, owner_id, combatant.display_name, initiative)
