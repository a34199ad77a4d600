from .parser import parse_creatures, tokenize_csv, normalize_text
from .schemas import (
    RechargeAbility,
    LimitedAbility,
    AbilityScores,
    Creature,
)

__all__ = [
    "parse_creatures",
    "tokenize_csv",
    "normalize_text",
    "RechargeAbility",
    "LimitedAbility",
    "AbilityScores",
    "Creature",
]
