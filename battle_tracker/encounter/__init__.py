from .router import router
from .models import Encounter, EncounterCombatant
from .schemas import (
    SlotState,
    RechargeState,
    LimitedState,
    TrackerState,
    EncounterCreate,
    EncounterUpdate,
    EncounterResponse,
    EncounterSummary,
    CombatantResponse,
    NpcEntry,
)

__all__ = [
    "router",
    "Encounter",
    "EncounterCombatant",
    "SlotState",
    "RechargeState",
    "LimitedState",
    "TrackerState",
    "EncounterCreate",
    "EncounterUpdate",
    "EncounterResponse",
    "EncounterSummary",
    "CombatantResponse",
    "NpcEntry",
]
