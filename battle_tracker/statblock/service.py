import logging
from sqlalchemy.orm import Session

from .parser import parse_creatures
from .schemas import Creature, ImportToEncounterRequest, ImportToEncounterResponse
from ..config import settings
from ..core.exceptions import ParseError, ValidationError
from ..encounter import service as encounter_service
from ..encounter.models import Encounter

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".csv", ".txt")


def parse_import_text(text: str) -> list[Creature]:
    if not text or not text.strip():
        raise ParseError("Please paste CSV data first")

    creatures = parse_creatures(text)
    logger.info("Parsed %d creature(s) from import text", len(creatures))
    return creatures


def decode_upload(filename: str | None, content: bytes) -> str:
    """Read an uploaded export. Only .csv and .txt files are accepted."""
    if not filename or not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise ParseError("Please upload a CSV or TXT file")
    # Undecodable bytes become U+FFFD; the parser repairs the common mojibake itself
    return content.decode("utf-8-sig", errors="replace")


def clamp_copies(copies: list[int], count: int) -> list[int]:
    """One copy count per creature, each within 1..max_import_copies. Missing entries mean 1."""
    padded = list(copies[:count]) + [1] * max(0, count - len(copies))
    return [min(max(c, 1), settings.max_import_copies) for c in padded]


def import_into_encounter(db: Session, owner_id: int, request: ImportToEncounterRequest) -> ImportToEncounterResponse:
    if request.encounter_id is not None:
        encounter = encounter_service.get_encounter(db, owner_id, request.encounter_id)
    else:
        name = (request.new_encounter_name or "").strip()
        if len(name) > 100:
            raise ValidationError("Encounter name must be at most 100 characters")
        encounter = Encounter(
            owner_id=owner_id,
            name=name or f"Imported Encounter ({len(request.creatures)} types)",
            description="",
        )
        db.add(encounter)

    added = 0
    for creature, copies in zip(request.creatures, clamp_copies(request.copies, len(request.creatures))):
        added += len(encounter_service.add_creature(encounter, creature, copies))

    db.commit()
    db.refresh(encounter)
    logger.info("Imported %d combatant(s) into encounter %s", added, encounter.id)
    return ImportToEncounterResponse(
        encounter_id=encounter.id,
        encounter_name=encounter.name,
        combatants_added=added,
    )
