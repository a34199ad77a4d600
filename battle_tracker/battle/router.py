from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_current_user
from ..auth.models import User
from . import service
from .schemas import (
    BattleCreate,
    BattleUpdate,
    BattleResponse,
    BattleSummary,
    CharacterAdd,
    InitiativeUpdate,
    MoveRequest,
    PublicBattleResponse,
)

router = APIRouter(prefix="/battles", tags=["battles"])
public_router = APIRouter(prefix="/public", tags=["public"])


@router.post("/", response_model=BattleResponse, status_code=201)
def create_battle(
    battle: BattleCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start a new battle, optionally seeded with a player group."""
    return service.to_response(service.create_battle(db, user.id, battle))


@router.get("/", response_model=list[BattleSummary])
def list_battles(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """List the most recent battles."""
    return [service.to_summary(b) for b in service.get_battles(db, user.id)]


@router.get("/current", response_model=BattleResponse)
def get_current_battle(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get the active battle."""
    return service.to_response(service.get_active_battle(db, user.id))


@router.get("/{battle_id}", response_model=BattleResponse)
def get_battle(battle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get a specific battle by ID."""
    return service.to_response(service.get_battle(db, user.id, battle_id))


@router.put("/{battle_id}", response_model=BattleResponse)
def update_battle(
    battle_id: int,
    battle: BattleUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Overwrite any subset of a battle's fields."""
    return service.to_response(service.update_battle(db, user.id, battle_id, battle))


@router.delete("/{battle_id}", status_code=204)
def delete_battle(battle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete a battle."""
    service.delete_battle(db, user.id, battle_id)


# Characters
@router.post("/{battle_id}/characters", response_model=BattleResponse)
def add_character(
    battle_id: int,
    character: CharacterAdd,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add an NPC (hidden) or PC (revealed) to the turn order."""
    return service.to_response(service.add_character(db, user.id, battle_id, character))


@router.post("/{battle_id}/groups/{group_id}", response_model=BattleResponse)
def add_group(
    battle_id: int,
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add every member of a player group at initiative 0."""
    return service.to_response(service.add_group(db, user.id, battle_id, group_id))


@router.post("/{battle_id}/lair", response_model=BattleResponse)
def add_lair(battle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Add a lair action entry at the conventional lair initiative."""
    return service.to_response(service.add_lair(db, user.id, battle_id))


@router.delete("/{battle_id}/characters/{character_id}", response_model=BattleResponse)
def remove_character(
    battle_id: int,
    character_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove a character from the turn order."""
    return service.to_response(service.remove_character(db, user.id, battle_id, character_id))


@router.put("/{battle_id}/characters/{character_id}/initiative", response_model=BattleResponse)
def set_initiative(
    battle_id: int,
    character_id: str,
    update: InitiativeUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change a character's initiative. The current turn stays with whoever was acting."""
    return service.to_response(
        service.set_initiative(db, user.id, battle_id, character_id, update.initiative)
    )


@router.post("/{battle_id}/characters/{character_id}/reveal", response_model=BattleResponse)
def toggle_reveal(
    battle_id: int,
    character_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Show or hide an NPC on the player view."""
    return service.to_response(service.toggle_reveal(db, user.id, battle_id, character_id))


@router.post("/{battle_id}/characters/{character_id}/move", response_model=BattleResponse)
def move_character(
    battle_id: int,
    character_id: str,
    move: MoveRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Swap places with a neighbour that rolled the same initiative."""
    return service.to_response(
        service.move_character(db, user.id, battle_id, character_id, move.direction)
    )


# Turn control
@router.post("/{battle_id}/next", response_model=BattleResponse)
def next_turn(battle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Advance to the next turn, starting a new round after the last character."""
    return service.to_response(service.next_turn(db, user.id, battle_id))


@router.post("/{battle_id}/previous", response_model=BattleResponse)
def previous_turn(battle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Step back one turn."""
    return service.to_response(service.previous_turn(db, user.id, battle_id))


@router.post("/{battle_id}/reset", response_model=BattleResponse)
def reset_turns(battle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Back to round 1, first in order."""
    return service.to_response(service.reset_turns(db, user.id, battle_id))


@router.post("/{battle_id}/end", response_model=BattleResponse)
def end_battle(battle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """End the battle. It disappears from the player view."""
    return service.to_response(service.end_battle(db, user.id, battle_id))


@router.post("/{battle_id}/refresh-expiration", response_model=BattleResponse)
def refresh_expiration(battle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Push the expiry time back out."""
    return service.to_response(service.refresh_expiration(db, user.id, battle_id))


# Player view
@public_router.get("/battle", response_model=PublicBattleResponse)
def get_public_battle(
    battle_id: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    """Redacted turn order of a live battle. No authentication."""
    return service.public_projection(db, battle_id)
