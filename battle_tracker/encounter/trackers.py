"""Runtime resource tracking for combatants.

Every limited resource (spell slot level, legendary action, legendary
resistance, limited-use ability) is a pip row: ``maximum`` discrete uses of
which ``current`` remain. Clicking a pip snaps the remaining count to that
position, so one rule covers spending and restoring.

All functions here are pure. Tracker toggles return a new ``TrackerState``;
hit point changes return a new ``HitPoints``.
"""
import re
from dataclasses import dataclass, replace

from .schemas import LimitedState, RechargeState, SlotState, TrackerState
from ..core.exceptions import ValidationError
from ..statblock.schemas import Creature


def toggle_pip(current: int, maximum: int, index: int) -> int:
    """Return the new remaining count after clicking pip ``index``.

    An available pip (``index < current``) is spent along with every pip
    after it; a used pip is restored along with every pip before it.
    """
    if index < 0 or index >= maximum:
        raise ValidationError(f"Pip index {index} is out of range (0-{maximum - 1})")
    if index < current:
        return index
    return index + 1


def initial_trackers(creature: Creature) -> TrackerState:
    """Fresh tracker state with every resource at max."""
    return TrackerState(
        spell_slots={
            level: SlotState(max=count, current=count)
            for level, count in creature.spell_slots.items()
        },
        recharge=[
            RechargeState(name=ability.name, recharge_on=ability.recharge_on, available=True)
            for ability in creature.recharge_abilities
        ],
        limited=[
            LimitedState(name=ability.name, max_uses=ability.max_uses, current_uses=ability.max_uses)
            for ability in creature.limited_abilities
        ],
        legendary_actions_remaining=creature.legendary_actions_count if creature.has_legendary else 0,
        legendary_resistance_remaining=(
            creature.legendary_resistance_count if creature.has_legendary_resistance else 0
        ),
    )


def toggle_spell_slot(state: TrackerState, level: int, index: int) -> TrackerState:
    slots = state.spell_slots.get(level)
    if slots is None:
        raise ValidationError(f"No level {level} spell slots to toggle")

    updated = state.model_copy(deep=True)
    updated.spell_slots[level].current = toggle_pip(slots.current, slots.max, index)
    return updated


def toggle_legendary_action(state: TrackerState, creature: Creature, index: int) -> TrackerState:
    if not creature.has_legendary:
        raise ValidationError(f"{creature.name} has no legendary actions")

    remaining = toggle_pip(state.legendary_actions_remaining, creature.legendary_actions_count, index)
    return state.model_copy(update={"legendary_actions_remaining": remaining})


def refill_legendary_actions(state: TrackerState, creature: Creature) -> TrackerState:
    if not creature.has_legendary:
        raise ValidationError(f"{creature.name} has no legendary actions")
    return state.model_copy(update={"legendary_actions_remaining": creature.legendary_actions_count})


def toggle_legendary_resistance(state: TrackerState, creature: Creature, index: int) -> TrackerState:
    if not creature.has_legendary_resistance:
        raise ValidationError(f"{creature.name} has no legendary resistance")

    remaining = toggle_pip(
        state.legendary_resistance_remaining, creature.legendary_resistance_count, index
    )
    return state.model_copy(update={"legendary_resistance_remaining": remaining})


def toggle_recharge(state: TrackerState, ability_index: int) -> TrackerState:
    """Flip a recharge ability between available and spent."""
    if ability_index < 0 or ability_index >= len(state.recharge):
        raise ValidationError(f"Recharge ability index {ability_index} is out of range")

    updated = state.model_copy(deep=True)
    ability = updated.recharge[ability_index]
    ability.available = not ability.available
    return updated


def toggle_limited_ability(state: TrackerState, ability_index: int, index: int) -> TrackerState:
    if ability_index < 0 or ability_index >= len(state.limited):
        raise ValidationError(f"Limited ability index {ability_index} is out of range")

    updated = state.model_copy(deep=True)
    ability = updated.limited[ability_index]
    ability.current_uses = toggle_pip(ability.current_uses, ability.max_uses, index)
    return updated


# Hit points
@dataclass(frozen=True)
class HitPoints:
    current: int
    maximum: int
    temp: int = 0


def apply_hp_change(hp: HitPoints, amount: int) -> HitPoints:
    """Negative amounts are damage, positive amounts are healing.

    Temp HP soaks damage before current HP does. Healing is capped at
    max HP and never touches temp HP.
    """
    if amount < 0:
        damage = -amount
        if hp.temp >= damage:
            return replace(hp, temp=hp.temp - damage)
        remaining = damage - hp.temp
        return replace(hp, temp=0, current=max(0, hp.current - remaining))
    if amount > 0:
        return replace(hp, current=min(hp.maximum, hp.current + amount))
    return hp


def set_temp_hp(hp: HitPoints, value: int) -> HitPoints:
    # Temp HP replaces, it does not stack
    return replace(hp, temp=max(0, value))


HP_INPUT_RE = re.compile(r"^([+-]?)\s*(\d+)$")


def apply_hp_input(hp: HitPoints, raw: str) -> HitPoints:
    """Apply a typed HP entry: "+N" heals, "-N" damages, a bare number sets current HP."""
    match = HP_INPUT_RE.match(raw.strip())
    if not match:
        raise ValidationError(f"Invalid HP input '{raw}': use +N, -N or a number")

    sign, digits = match.groups()
    amount = int(digits)
    if sign == "+":
        return apply_hp_change(hp, amount)
    if sign == "-":
        return apply_hp_change(hp, -amount)
    return replace(hp, current=max(0, min(hp.maximum, amount)))


# Naming and instancing
def display_name(base_name: str, copy_number: int, total_copies: int) -> str:
    if total_copies > 1:
        return f"{base_name} #{copy_number}"
    return base_name


def duplicate_name(base_name: str, existing_count: int) -> str:
    return f"{base_name} #{existing_count + 1}"


@dataclass(frozen=True)
class CombatantDraft:
    """An unsaved combatant stamped out of a creature template."""
    base_name: str
    display_name: str
    current_hp: int
    max_hp: int
    temp_hp: int
    trackers: TrackerState


def instantiate(creature: Creature, copies: int = 1) -> list[CombatantDraft]:
    """Stamp ``copies`` fresh combatants out of a template, numbered from 1."""
    return [
        CombatantDraft(
            base_name=creature.name,
            display_name=display_name(creature.name, number, copies),
            current_hp=creature.max_hp,
            max_hp=creature.max_hp,
            temp_hp=0,
            trackers=initial_trackers(creature),
        )
        for number in range(1, copies + 1)
    ]


def ability_modifier(score: int) -> int:
    return (score - 10) // 2


def format_modifier(score: int) -> str:
    modifier = ability_modifier(score)
    return f"+{modifier}" if modifier >= 0 else str(modifier)
