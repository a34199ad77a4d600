from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_current_user
from ..auth.models import User
from . import service
from .schemas import (
    ImportTextRequest,
    ParsedCreaturesResponse,
    ImportToEncounterRequest,
    ImportToEncounterResponse,
)

router = APIRouter(prefix="/import", tags=["import"])


@router.post("/parse", response_model=ParsedCreaturesResponse)
def parse_text(request: ImportTextRequest, user: User = Depends(get_current_user)):
    """Parse pasted stat block CSV into creature templates."""
    creatures = service.parse_import_text(request.text)
    return ParsedCreaturesResponse(count=len(creatures), creatures=creatures)


@router.post("/upload", response_model=ParsedCreaturesResponse)
async def parse_upload(file: UploadFile = File(...), user: User = Depends(get_current_user)):
    """Parse an uploaded .csv or .txt export."""
    text = service.decode_upload(file.filename, await file.read())
    creatures = service.parse_import_text(text)
    return ParsedCreaturesResponse(count=len(creatures), creatures=creatures)


@router.post("/encounter", response_model=ImportToEncounterResponse, status_code=201)
def import_to_encounter(
    request: ImportToEncounterRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Instance parsed creatures into a new or existing encounter."""
    return service.import_into_encounter(db, user.id, request)
