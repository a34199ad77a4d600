from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_current_user
from ..auth.models import User
from . import service
from .schemas import GroupCreate, GroupUpdate, GroupResponse

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("/", response_model=GroupResponse, status_code=201)
def create_group(
    group: GroupCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a reusable roster of player characters."""
    return service.create_group(db, user.id, group)


@router.get("/", response_model=list[GroupResponse])
def list_groups(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """List the current user's groups, newest first."""
    return service.get_groups(db, user.id)


@router.get("/{group_id}", response_model=GroupResponse)
def get_group(group_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get a specific group by ID."""
    return service.get_group(db, user.id, group_id)


@router.put("/{group_id}", response_model=GroupResponse)
def update_group(
    group_id: int,
    group: GroupUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Rename a group or replace its roster."""
    return service.update_group(db, user.id, group_id, group)


@router.delete("/{group_id}", status_code=204)
def delete_group(group_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete a group."""
    service.delete_group(db, user.id, group_id)
