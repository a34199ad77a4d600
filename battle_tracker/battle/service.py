import logging
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from . import turn_order
from .models import Battle
from .schemas import (
    BattleCharacter,
    BattleCreate,
    BattleUpdate,
    BattleResponse,
    BattleSummary,
    CharacterAdd,
    PublicBattle,
    PublicBattleRef,
    PublicBattleResponse,
    PublicCharacter,
)
from .turn_order import TurnState
from ..config import settings
from ..core.enums import CharacterKind, MoveDirection
from ..core.exceptions import NotFoundError, ValidationError
from ..group import service as group_service

logger = logging.getLogger(__name__)

RECENT_BATTLE_LIMIT = 20


def _expiry_from(now: datetime) -> datetime:
    return now + timedelta(hours=settings.battle_expiry_hours)


def load_state(battle: Battle) -> TurnState:
    return TurnState(
        characters=tuple(BattleCharacter.model_validate(c) for c in battle.characters or []),
        current_turn_index=battle.current_turn_index or 0,
        current_round=battle.current_round or 1,
    )


def _save_state(db: Session, battle: Battle, state: TurnState) -> Battle:
    battle.characters = [c.model_dump() for c in state.characters]
    battle.current_turn_index = state.current_turn_index
    battle.current_round = state.current_round
    battle.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(battle)
    return battle


def to_response(battle: Battle) -> BattleResponse:
    state = load_state(battle)
    acting = turn_order.current_character(state)
    return BattleResponse(
        id=battle.id,
        name=battle.name,
        characters=state.order,
        current_turn_index=state.current_turn_index,
        current_round=state.current_round,
        current_character_id=acting.id if acting else None,
        is_active=battle.is_active,
        created_at=battle.created_at,
        updated_at=battle.updated_at,
        expires_at=battle.expires_at,
    )


def to_summary(battle: Battle) -> BattleSummary:
    return BattleSummary(
        id=battle.id,
        name=battle.name,
        is_active=battle.is_active,
        character_count=len(battle.characters or []),
        current_round=battle.current_round,
        created_at=battle.created_at,
        expires_at=battle.expires_at,
    )


# Lookups
def get_battle(db: Session, owner_id: int, battle_id: int) -> Battle:
    battle = db.query(Battle).filter(Battle.id == battle_id, Battle.owner_id == owner_id).first()
    if not battle:
        raise NotFoundError("Battle", battle_id)
    return battle


def get_battles(db: Session, owner_id: int, limit: int = RECENT_BATTLE_LIMIT) -> list[Battle]:
    return (
        db.query(Battle)
        .filter(Battle.owner_id == owner_id)
        .order_by(Battle.created_at.desc(), Battle.id.desc())
        .limit(limit)
        .all()
    )


def get_active_battle(db: Session, owner_id: int) -> Battle:
    battle = (
        db.query(Battle)
        .filter(Battle.owner_id == owner_id, Battle.is_active == True)  # noqa: E712
        .order_by(Battle.updated_at.desc(), Battle.id.desc())
        .first()
    )
    if not battle:
        raise NotFoundError("Active battle", "current")
    return battle


# Lifecycle
def _deactivate_others(db: Session, owner_id: int, keep_id: int | None = None) -> None:
    query = db.query(Battle).filter(Battle.owner_id == owner_id, Battle.is_active == True)  # noqa: E712
    if keep_id is not None:
        query = query.filter(Battle.id != keep_id)
    for battle in query.all():
        battle.is_active = False


def create_battle(db: Session, owner_id: int, battle_data: BattleCreate) -> Battle:
    """Start a new battle, optionally seeded with a player group. Ends any other active battle."""
    name = battle_data.name.strip()
    if not name:
        raise ValidationError("Battle name is required")

    characters: list[BattleCharacter] = []
    if battle_data.group_id is not None:
        group = group_service.get_group(db, owner_id, battle_data.group_id)
        characters = [
            turn_order.make_character(
                member["name"], CharacterKind.PC, image_url=member.get("image_url", "")
            ).model_copy(update={"sort_order": idx})
            for idx, member in enumerate(group.characters or [])
        ]

    _deactivate_others(db, owner_id)

    now = datetime.utcnow()
    battle = Battle(
        owner_id=owner_id,
        name=name,
        characters=[c.model_dump() for c in characters],
        current_turn_index=0,
        current_round=1,
        is_active=True,
        created_at=now,
        updated_at=now,
        expires_at=_expiry_from(now),
    )
    db.add(battle)
    db.commit()
    db.refresh(battle)
    logger.info("Battle %s '%s' started with %d characters", battle.id, battle.name, len(characters))
    return battle


def update_battle(db: Session, owner_id: int, battle_id: int, battle_data: BattleUpdate) -> Battle:
    """Partial overwrite. Last write wins.

    The turn index must point into the resulting character list. An explicit
    out-of-range index is rejected; a carried-over one falls back to 0.
    """
    battle = get_battle(db, owner_id, battle_id)

    if battle_data.characters is not None:
        characters = [c.model_dump() for c in battle_data.characters]
    else:
        characters = list(battle.characters or [])

    if battle_data.current_turn_index is not None:
        if characters and battle_data.current_turn_index >= len(characters):
            raise ValidationError(
                f"Turn index {battle_data.current_turn_index} is out of range for {len(characters)} characters"
            )
        turn_index = battle_data.current_turn_index if characters else 0
    else:
        current = battle.current_turn_index or 0
        turn_index = current if current < len(characters) else 0

    if battle_data.name is not None:
        battle.name = battle_data.name.strip()
    if battle_data.characters is not None:
        battle.characters = characters
    battle.current_turn_index = turn_index
    if battle_data.current_round is not None:
        battle.current_round = battle_data.current_round
    if battle_data.is_active is not None:
        if battle_data.is_active:
            _deactivate_others(db, owner_id, keep_id=battle.id)
        battle.is_active = battle_data.is_active
    if battle_data.refresh_expiration:
        battle.expires_at = _expiry_from(datetime.utcnow())

    battle.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(battle)
    return battle


def delete_battle(db: Session, owner_id: int, battle_id: int) -> None:
    battle = get_battle(db, owner_id, battle_id)
    db.delete(battle)
    db.commit()
    logger.info("Battle %s deleted", battle_id)


def end_battle(db: Session, owner_id: int, battle_id: int) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    battle.is_active = False
    battle.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(battle)
    logger.info("Battle %s ended in round %s", battle.id, battle.current_round)
    return battle


def refresh_expiration(db: Session, owner_id: int, battle_id: int) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    battle.expires_at = _expiry_from(datetime.utcnow())
    battle.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(battle)
    return battle


# Turn order commands
def add_character(db: Session, owner_id: int, battle_id: int, character_data: CharacterAdd) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    kind = CharacterKind.NPC if character_data.is_npc else CharacterKind.PC
    character = turn_order.make_character(
        character_data.name, kind, character_data.initiative, character_data.image_url
    )
    if not character.name:
        raise ValidationError("Character name is required")

    state = turn_order.add_characters(load_state(battle), [character])
    return _save_state(db, battle, state)


def add_group(db: Session, owner_id: int, battle_id: int, group_id: int) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    group = group_service.get_group(db, owner_id, group_id)
    members = [
        turn_order.make_character(member["name"], CharacterKind.PC, image_url=member.get("image_url", ""))
        for member in group.characters or []
    ]

    state = turn_order.add_characters(load_state(battle), members)
    return _save_state(db, battle, state)


def add_lair(db: Session, owner_id: int, battle_id: int) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    lair = turn_order.make_character(
        turn_order.LAIR_NAME, CharacterKind.LAIR, lair_initiative=settings.lair_initiative
    )

    state = turn_order.add_characters(load_state(battle), [lair])
    return _save_state(db, battle, state)


def send_npc_to_active_battle(db: Session, owner_id: int, name: str, initiative: int) -> Battle:
    """Add a hidden NPC to the owner's active battle."""
    battle = get_active_battle(db, owner_id)
    npc = turn_order.make_character(name, CharacterKind.NPC, initiative)

    state = turn_order.add_characters(load_state(battle), [npc])
    logger.info("Sent '%s' to battle %s at initiative %s", npc.name, battle.id, npc.initiative)
    return _save_state(db, battle, state)


def remove_character(db: Session, owner_id: int, battle_id: int, character_id: str) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    state = turn_order.remove_character(load_state(battle), character_id)
    return _save_state(db, battle, state)


def set_initiative(db: Session, owner_id: int, battle_id: int, character_id: str, initiative) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    state = turn_order.update_initiative(load_state(battle), character_id, initiative)
    return _save_state(db, battle, state)


def toggle_reveal(db: Session, owner_id: int, battle_id: int, character_id: str) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    state = turn_order.toggle_reveal(load_state(battle), character_id)
    return _save_state(db, battle, state)


def move_character(
    db: Session, owner_id: int, battle_id: int, character_id: str, direction: MoveDirection
) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    state = load_state(battle)
    moved = turn_order.move_character(state, character_id, direction)
    if moved is state:
        logger.debug("Move %s for %s rejected in battle %s", direction.value, character_id, battle_id)
        return battle
    return _save_state(db, battle, moved)


def next_turn(db: Session, owner_id: int, battle_id: int) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    state = turn_order.next_turn(load_state(battle))
    if state.current_round != battle.current_round:
        logger.info("Battle %s entering round %s", battle.id, state.current_round)
    return _save_state(db, battle, state)


def previous_turn(db: Session, owner_id: int, battle_id: int) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    state = turn_order.previous_turn(load_state(battle))
    return _save_state(db, battle, state)


def reset_turns(db: Session, owner_id: int, battle_id: int) -> Battle:
    battle = get_battle(db, owner_id, battle_id)
    state = turn_order.reset_turns(load_state(battle))
    return _save_state(db, battle, state)


# Public projection
def redact(character: BattleCharacter, placeholder: str) -> PublicCharacter:
    """Hide the name and image of an NPC the players haven't seen yet."""
    hidden = character.is_npc and not character.is_revealed
    return PublicCharacter(
        id=character.id,
        name=placeholder if hidden else character.name,
        is_npc=character.is_npc,
        initiative=character.initiative,
        image_url="" if hidden else character.image_url,
        is_lair=character.is_lair,
    )


def public_projection(db: Session, battle_id: int | None = None) -> PublicBattleResponse:
    """Read-only view of an active, unexpired battle for the player screen.

    Without ``battle_id`` the most recently updated battle is shown.
    """
    live = (
        db.query(Battle)
        .filter(Battle.is_active == True, Battle.expires_at > datetime.utcnow())  # noqa: E712
        .order_by(Battle.updated_at.desc(), Battle.id.desc())
        .all()
    )
    available = [PublicBattleRef(id=b.id, name=b.name) for b in live]

    if battle_id is None:
        selected = live[0] if live else None
    else:
        selected = next((b for b in live if b.id == battle_id), None)

    if selected is None:
        return PublicBattleResponse(battle=None, available_battles=available)

    state = load_state(selected)
    return PublicBattleResponse(
        battle=PublicBattle(
            id=selected.id,
            name=selected.name,
            characters=[redact(c, settings.redaction_placeholder) for c in state.order],
            current_turn_index=state.current_turn_index,
            current_round=state.current_round,
            updated_at=selected.updated_at,
        ),
        available_battles=available,
    )
