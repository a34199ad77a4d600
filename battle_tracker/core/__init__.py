from .enums import (
    MoveDirection,
    CharacterKind,
)
from .exceptions import (
    TrackerException,
    NotFoundError,
    ValidationError,
    ParseError,
    AuthenticationError,
    ConflictError,
)

__all__ = [
    "MoveDirection",
    "CharacterKind",
    "TrackerException",
    "NotFoundError",
    "ValidationError",
    "ParseError",
    "AuthenticationError",
    "ConflictError",
]
