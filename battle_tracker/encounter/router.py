from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_current_user
from ..auth.models import User
from ..battle import service as battle_service
from ..battle.schemas import BattleResponse
from . import service
from .schemas import (
    EncounterCreate,
    EncounterUpdate,
    EncounterResponse,
    EncounterSummary,
    CombatantResponse,
    NpcEntry,
    HpAdjust,
    HpInput,
    TempHpSet,
    PipToggle,
    RenameRequest,
    SendToBattleRequest,
)

router = APIRouter(prefix="/encounters", tags=["encounters"])


@router.post("/", response_model=EncounterResponse, status_code=201)
def create_encounter(
    encounter: EncounterCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an empty encounter."""
    return service.create_encounter(db, user.id, encounter)


@router.get("/", response_model=list[EncounterSummary])
def list_encounters(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """List encounters, newest first."""
    return [service.to_summary(e) for e in service.get_encounters(db, user.id)]


@router.get("/{encounter_id}", response_model=EncounterResponse)
def get_encounter(encounter_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get an encounter with its combatants in display order."""
    return service.get_encounter(db, user.id, encounter_id)


@router.put("/{encounter_id}", response_model=EncounterResponse)
def update_encounter(
    encounter_id: int,
    encounter: EncounterUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Rename an encounter or change its description."""
    return service.update_encounter(db, user.id, encounter_id, encounter)


@router.delete("/{encounter_id}", status_code=204)
def delete_encounter(encounter_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete an encounter and all of its combatants."""
    service.delete_encounter(db, user.id, encounter_id)


@router.post("/{encounter_id}/combatants", response_model=EncounterResponse, status_code=201)
def add_combatants(
    encounter_id: int,
    entry: NpcEntry,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add one or more copies of a hand-entered NPC."""
    return service.add_manual_npc(db, user.id, encounter_id, entry)


# Hit points
@router.post("/combatants/{combatant_id}/hp", response_model=CombatantResponse)
def adjust_hp(
    combatant_id: int,
    adjust: HpAdjust,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Damage (negative) or heal (positive). Temp HP absorbs damage first."""
    return service.adjust_hp(db, user.id, combatant_id, adjust.amount)


@router.post("/combatants/{combatant_id}/hp-input", response_model=CombatantResponse)
def hp_input(
    combatant_id: int,
    hp: HpInput,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Apply a typed entry: +N heals, -N damages, N sets current HP."""
    return service.apply_hp_input(db, user.id, combatant_id, hp.value)


@router.put("/combatants/{combatant_id}/temp-hp", response_model=CombatantResponse)
def set_temp_hp(
    combatant_id: int,
    temp: TempHpSet,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace temp HP."""
    return service.set_temp_hp(db, user.id, combatant_id, temp.value)


# Trackers
@router.post("/combatants/{combatant_id}/spell-slots/{level}/toggle", response_model=CombatantResponse)
def toggle_spell_slot(
    combatant_id: int,
    level: int,
    pip: PipToggle,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Click a spell slot pip."""
    return service.toggle_spell_slot(db, user.id, combatant_id, level, pip.index)


@router.post("/combatants/{combatant_id}/legendary-actions/toggle", response_model=CombatantResponse)
def toggle_legendary_action(
    combatant_id: int,
    pip: PipToggle,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Click a legendary action pip."""
    return service.toggle_legendary_action(db, user.id, combatant_id, pip.index)


@router.post("/combatants/{combatant_id}/legendary-actions/refill", response_model=CombatantResponse)
def refill_legendary_actions(
    combatant_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Restore every legendary action."""
    return service.refill_legendary_actions(db, user.id, combatant_id)


@router.post("/combatants/{combatant_id}/legendary-resistance/toggle", response_model=CombatantResponse)
def toggle_legendary_resistance(
    combatant_id: int,
    pip: PipToggle,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Click a legendary resistance pip."""
    return service.toggle_legendary_resistance(db, user.id, combatant_id, pip.index)


@router.post("/combatants/{combatant_id}/recharge/{ability_index}/toggle", response_model=CombatantResponse)
def toggle_recharge(
    combatant_id: int,
    ability_index: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Mark a recharge ability spent or recharged."""
    return service.toggle_recharge(db, user.id, combatant_id, ability_index)


@router.post("/combatants/{combatant_id}/limited/{ability_index}/toggle", response_model=CombatantResponse)
def toggle_limited(
    combatant_id: int,
    ability_index: int,
    pip: PipToggle,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Click a use pip of a limited-use ability."""
    return service.toggle_limited(db, user.id, combatant_id, ability_index, pip.index)


# Combatant management
@router.post("/combatants/{combatant_id}/duplicate", response_model=CombatantResponse, status_code=201)
def duplicate_combatant(
    combatant_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add a fresh copy of a combatant next to its siblings."""
    return service.duplicate_combatant(db, user.id, combatant_id)


@router.put("/combatants/{combatant_id}/rename", response_model=CombatantResponse)
def rename_combatant(
    combatant_id: int,
    rename: RenameRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change a combatant's display name."""
    return service.rename_combatant(db, user.id, combatant_id, rename.display_name)


@router.post("/combatants/{combatant_id}/send-to-battle", response_model=BattleResponse)
def send_to_battle(
    combatant_id: int,
    request: SendToBattleRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add a combatant to the active battle as a hidden NPC."""
    battle = service.send_to_battle(db, user.id, combatant_id, request.initiative)
    return battle_service.to_response(battle)


@router.delete("/combatants/{combatant_id}", status_code=204)
def delete_combatant(combatant_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Remove a combatant from its encounter."""
    service.delete_combatant(db, user.id, combatant_id)
