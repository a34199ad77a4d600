from sqlalchemy.orm import Session

from .models import PlayerGroup
from .schemas import GroupCreate, GroupUpdate
from ..core.exceptions import NotFoundError


def get_group(db: Session, owner_id: int, group_id: int) -> PlayerGroup:
    group = (
        db.query(PlayerGroup)
        .filter(PlayerGroup.id == group_id, PlayerGroup.owner_id == owner_id)
        .first()
    )
    if not group:
        raise NotFoundError("Group", group_id)
    return group


def get_groups(db: Session, owner_id: int) -> list[PlayerGroup]:
    return (
        db.query(PlayerGroup)
        .filter(PlayerGroup.owner_id == owner_id)
        .order_by(PlayerGroup.created_at.desc(), PlayerGroup.id.desc())
        .all()
    )


def create_group(db: Session, owner_id: int, group_data: GroupCreate) -> PlayerGroup:
    group = PlayerGroup(
        owner_id=owner_id,
        name=group_data.name.strip(),
        characters=[member.model_dump() for member in group_data.characters],
    )
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def update_group(db: Session, owner_id: int, group_id: int, group_data: GroupUpdate) -> PlayerGroup:
    group = get_group(db, owner_id, group_id)

    if group_data.name is not None:
        group.name = group_data.name.strip()
    if group_data.characters is not None:
        group.characters = [member.model_dump() for member in group_data.characters]

    db.commit()
    db.refresh(group)
    return group


def delete_group(db: Session, owner_id: int, group_id: int) -> None:
    group = get_group(db, owner_id, group_id)
    db.delete(group)
    db.commit()
