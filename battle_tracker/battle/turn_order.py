"""Turn order for a battle.

Characters are stored in creation order and the turn order is derived on
demand: highest initiative first, ties broken by ``sort_order``. The current
turn is an index into that derived order, so every operation that can
reshuffle it remembers who was acting beforehand and finds them again
afterwards.
"""
import re
import uuid
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from .schemas import BattleCharacter
from ..core.enums import CharacterKind, MoveDirection
from ..core.exceptions import NotFoundError

LAIR_NAME = "Lair Action"

LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class TurnState:
    characters: tuple[BattleCharacter, ...] = ()  # creation order
    current_turn_index: int = 0
    current_round: int = 1

    @property
    def order(self) -> list[BattleCharacter]:
        return sorted_order(self.characters)


def sort_key(character: BattleCharacter) -> tuple[int, int]:
    return (-character.initiative, character.sort_order)


def sorted_order(characters: Iterable[BattleCharacter]) -> list[BattleCharacter]:
    return sorted(characters, key=sort_key)


def next_sort_order(characters: Iterable[BattleCharacter]) -> int:
    return max([0, *(c.sort_order for c in characters)]) + 1


def coerce_initiative(value) -> int:
    """Read an initiative entry the way a form field would; anything unreadable is 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else 0


def make_character(
    name: str,
    kind: CharacterKind,
    initiative=0,
    image_url: str = "",
    lair_initiative: int = 20,
) -> BattleCharacter:
    """Build a new character. NPCs start hidden from players; PCs and the lair start revealed.

    ``sort_order`` is left at 0; ``add_characters`` assigns the real value.
    """
    if kind == CharacterKind.LAIR:
        return BattleCharacter(
            id=f"lair-{uuid.uuid4().hex}",
            name=LAIR_NAME,
            is_npc=True,
            is_revealed=True,
            initiative=lair_initiative,
            is_lair=True,
        )

    is_npc = kind == CharacterKind.NPC
    return BattleCharacter(
        id=f"{kind.value}-{uuid.uuid4().hex}",
        name=name.strip(),
        is_npc=is_npc,
        is_revealed=not is_npc,
        initiative=coerce_initiative(initiative),
        image_url=image_url,
    )


def current_character(state: TurnState) -> BattleCharacter | None:
    order = state.order
    if 0 <= state.current_turn_index < len(order):
        return order[state.current_turn_index]
    return None


def _index_of(order: Sequence[BattleCharacter], character_id: str | None) -> int:
    for index, character in enumerate(order):
        if character.id == character_id:
            return index
    return 0


def _find(state: TurnState, character_id: str) -> BattleCharacter:
    for character in state.characters:
        if character.id == character_id:
            return character
    raise NotFoundError("Character", character_id)


def _remap(state: TurnState, characters: Sequence[BattleCharacter], removed_id: str | None = None) -> TurnState:
    """Swap in a new character list and keep the current turn on the same character."""
    acting = current_character(state)
    acting_id = acting.id if acting else None
    new_order = sorted_order(characters)

    if not new_order:
        index = 0
    elif removed_id is not None and removed_id == acting_id:
        # The acting character left: whoever slides into their slot acts next
        index = state.current_turn_index if state.current_turn_index < len(new_order) else 0
    else:
        index = _index_of(new_order, acting_id)

    return replace(state, characters=tuple(characters), current_turn_index=index)


# Mutations
def add_characters(state: TurnState, new_characters: Sequence[BattleCharacter]) -> TurnState:
    """Append characters, numbering their sort orders after the current maximum."""
    base = next_sort_order(state.characters)
    added = [
        character.model_copy(update={"sort_order": base + offset})
        for offset, character in enumerate(new_characters)
    ]
    return _remap(state, [*state.characters, *added])


def remove_character(state: TurnState, character_id: str) -> TurnState:
    _find(state, character_id)
    remaining = [c for c in state.characters if c.id != character_id]
    return _remap(state, remaining, removed_id=character_id)


def update_initiative(state: TurnState, character_id: str, initiative) -> TurnState:
    _find(state, character_id)
    value = coerce_initiative(initiative)
    characters = [
        c.model_copy(update={"initiative": value}) if c.id == character_id else c
        for c in state.characters
    ]
    return _remap(state, characters)


def toggle_reveal(state: TurnState, character_id: str) -> TurnState:
    _find(state, character_id)
    characters = [
        c.model_copy(update={"is_revealed": not c.is_revealed}) if c.id == character_id else c
        for c in state.characters
    ]
    return replace(state, characters=tuple(characters))


def move_character(state: TurnState, character_id: str, direction: MoveDirection) -> TurnState:
    """Swap sort orders with the neighbour in ``direction`` if both share an initiative.

    Anything else (no neighbour, different initiative) leaves the state as it was.
    The current turn index is not remapped, so it stays on the same slot.
    """
    order = state.order
    position = next((i for i, c in enumerate(order) if c.id == character_id), None)
    if position is None:
        raise NotFoundError("Character", character_id)

    target = position - 1 if direction == MoveDirection.UP else position + 1
    if target < 0 or target >= len(order):
        return state

    mover, neighbour = order[position], order[target]
    if mover.initiative != neighbour.initiative:
        return state

    swapped = {mover.id: neighbour.sort_order, neighbour.id: mover.sort_order}
    characters = [
        c.model_copy(update={"sort_order": swapped[c.id]}) if c.id in swapped else c
        for c in state.characters
    ]
    return replace(state, characters=tuple(characters))


# Turn control
def next_turn(state: TurnState) -> TurnState:
    count = len(state.characters)
    if count == 0:
        return state

    index = (state.current_turn_index + 1) % count
    round_number = state.current_round + 1 if index == 0 else state.current_round
    return replace(state, current_turn_index=index, current_round=round_number)


def previous_turn(state: TurnState) -> TurnState:
    count = len(state.characters)
    if count == 0:
        return state

    if state.current_turn_index == 0:
        return replace(state, current_turn_index=count - 1, current_round=max(state.current_round - 1, 1))
    return replace(state, current_turn_index=state.current_turn_index - 1)


def reset_turns(state: TurnState) -> TurnState:
    return replace(state, current_turn_index=0, current_round=1)
