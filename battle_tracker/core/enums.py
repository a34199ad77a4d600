from enum import Enum


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class CharacterKind(str, Enum):
    PC = "pc"
    NPC = "npc"
    LAIR = "lair"
