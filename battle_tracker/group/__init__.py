from .router import router
from .models import PlayerGroup
from .schemas import (
    GroupMember,
    GroupCreate,
    GroupUpdate,
    GroupResponse,
)

__all__ = [
    "router",
    "PlayerGroup",
    "GroupMember",
    "GroupCreate",
    "GroupUpdate",
    "GroupResponse",
]
