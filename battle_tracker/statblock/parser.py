"""
Stat block parser for delimited monster exports.

Turns raw CSV text (as exported by 5eTools and similar tools) into Creature
templates. Parsing happens in three stages:

1. normalize_text: line endings and known double-encoding artifacts.
2. tokenize_csv: a quote-aware state machine that keeps multi-line cells intact.
3. extract_creature: header-keyed cell lookup followed by a pipeline of
   independent extractors, each a pure function from text to a value.

The parser is permissive. Malformed rows are dropped, and every numeric field
falls back to a default instead of failing the import.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from ..core.exceptions import ParseError
from .schemas import AbilityScores, Creature, LimitedAbility, RechargeAbility

logger = logging.getLogger(__name__)

# Mis-decoded UTF-8 read back as cp1252. Longer sequences must come first.
ENCODING_FIXES: tuple[tuple[str, str], ...] = (
    ("â€”", "—"),  # em-dash
    ("â€“", "–"),  # en-dash
    ("â€™", "'"),  # right single quote
    ("â€˜", "'"),  # left single quote
    ("â€œ", '"'),  # left double quote
    ("â€\u009d", '"'),  # right double quote
    ("â€", '"'),  # right double quote with the last byte lost
    ("\u00c2\u00a0", " "),  # non-breaking space
    ("\u00c2 ", " "),  # non-breaking space whose second byte was lost
)

DEFAULT_HP = 10
DEFAULT_AC = 10
DEFAULT_ABILITY_SCORE = 10
DEFAULT_SPELL_DC = 13
DEFAULT_SPELL_ATTACK = 5
DEFAULT_LEGENDARY_COUNT = 3
MIN_FIELDS_PER_ROW = 3

SPELLCASTING_MARKERS = ("spellcasting", "spell save dc", "spell attack", "slots)")

LEADING_INT_RE = re.compile(r"^\s*(\d+)")
SIGNED_INT_RE = re.compile(r"^\s*([+-]?\d+)")
CR_XP_RE = re.compile(r"\s*\([^)]*\bXP\b[^)]*\)\s*$", re.IGNORECASE)
LEGENDARY_RESISTANCE_RE = re.compile(r"Legendary Resistance\s*\(\s*(\d+)?\s*/\s*Day", re.IGNORECASE)
LEGENDARY_ACTIONS_RE = re.compile(r"can take (\d+) legendary action", re.IGNORECASE)
RECHARGE_RE = re.compile(r"([A-Za-z][^.\n]*?)\s*\((?i:recharge)\s*(\d+)\s*[-–—]\s*6\)")
PER_DAY_LIST_RE = re.compile(r"(\d+)/[Dd]ay(?:\s+each)?[:\s]+([^.\n]+?)(?:\.|\n|\Z)")
PER_DAY_NAMED_RE = re.compile(r"([A-Za-z][^.\n]*?)\s*\((\d+)/[Dd]ay\)")
PARENTHETICAL_RE = re.compile(r"\([^)]*\)")
SPELL_DC_RE = re.compile(r"spell save DC\s*(\d+)", re.IGNORECASE)
SPELL_ATTACK_RE = re.compile(r"\+(\d+)\s*to hit with spell", re.IGNORECASE)
SPELL_SLOT_RE = re.compile(r"(\d+)(?:st|nd|rd|th)[-\s]*level\s*\((\d+)\s*slots?\)", re.IGNORECASE)
SPELLCASTING_BLOCK_RE = re.compile(r"spellcasting.*?(?=\n\n|\Z)", re.IGNORECASE | re.DOTALL)


# Stage 1: normalization

def normalize_text(text: str) -> str:
    """Unify line endings and repair common double-encoding artifacts."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    for broken, fixed in ENCODING_FIXES:
        normalized = normalized.replace(broken, fixed)
    return normalized


# Stage 2: tokenizing

def _finish_row(rows: list[list[str]], row: list[str]) -> None:
    # Rows of only empty fields come from trailing blank lines.
    if any(field != "" for field in row):
        rows.append(row)


def tokenize_csv(text: str) -> list[list[str]]:
    """
    Split CSV text into rows of trimmed fields.

    A two-state machine (inside or outside quotes). Doubled quotes inside a
    quoted field produce a literal quote; commas and newlines inside quotes are
    kept as field content, which is how multi-paragraph cells survive.
    """
    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        if in_quotes:
            if char == '"':
                if i + 1 < length and text[i + 1] == '"':
                    field.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(char)
        elif char == '"':
            in_quotes = True
        elif char == ",":
            row.append("".join(field).strip())
            field = []
        elif char == "\n":
            row.append("".join(field).strip())
            _finish_row(rows, row)
            row = []
            field = []
        else:
            field.append(char)
        i += 1

    row.append("".join(field).strip())
    _finish_row(rows, row)
    return rows


def header_key(header: str) -> str:
    """'Saving Throws' -> 'savingthrows'."""
    return re.sub(r"[^a-z]", "", header.lower())


def build_header_map(headers: list[str]) -> dict[str, int]:
    return {header_key(header): index for index, header in enumerate(headers)}


# Stage 3: extraction

@dataclass(frozen=True)
class StatBlockCells:
    """One data row, addressed by canonical header key instead of position."""

    values: list[str]
    header_map: dict[str, int]

    def get(self, key: str) -> str:
        index = self.header_map.get(key)
        if index is None or index >= len(self.values):
            return ""
        # Exports use tabs as line breaks inside cells.
        return self.values[index].replace("\t\t", "\n\n").replace("\t", "\n")

    @property
    def traits(self) -> str:
        return self.get("traits")

    @property
    def actions(self) -> str:
        return self.get("actions")

    @property
    def bonus_actions(self) -> str:
        return self.get("bonusactions")

    @property
    def legendary_actions(self) -> str:
        return self.get("legendaryactions")

    @property
    def attack_text(self) -> str:
        return f"{self.actions} {self.bonus_actions}"

    @property
    def spell_text(self) -> str:
        return f"{self.actions} {self.traits}"


def extract_leading_int(text: str, default: int) -> int:
    match = LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else default


def extract_hp(text: str) -> int:
    hp = extract_leading_int(text, DEFAULT_HP)
    return hp if hp > 0 else DEFAULT_HP


def extract_ability_score(text: str) -> int:
    match = SIGNED_INT_RE.match(text)
    value = int(match.group(1)) if match else 0
    return value or DEFAULT_ABILITY_SCORE


def clean_challenge_rating(text: str) -> str:
    """'14 (11,500 XP)' -> '14'."""
    return CR_XP_RE.sub("", text).strip()


def extract_legendary_resistance(traits: str) -> int | None:
    """Uses per day, or None when the creature has no Legendary Resistance."""
    match = LEGENDARY_RESISTANCE_RE.search(traits)
    if not match:
        return None
    return int(match.group(1)) if match.group(1) else DEFAULT_LEGENDARY_COUNT


def extract_legendary_actions(legendary_text: str) -> int | None:
    """Actions per round, or None when there is no legendary actions text."""
    if not legendary_text.strip():
        return None
    match = LEGENDARY_ACTIONS_RE.search(legendary_text)
    return int(match.group(1)) if match else DEFAULT_LEGENDARY_COUNT


def extract_recharge_abilities(text: str) -> list[RechargeAbility]:
    abilities: list[RechargeAbility] = []
    seen: set[str] = set()
    for match in RECHARGE_RE.finditer(text):
        name = match.group(1).strip()
        threshold = int(match.group(2))
        if name in seen or not 2 <= threshold <= 6:
            continue
        seen.add(name)
        abilities.append(RechargeAbility(name=name, recharge_on=threshold))
    return abilities


def extract_per_day_lists(text: str) -> list[LimitedAbility]:
    """'1/day each: blight, hold monster' -> one entry per listed item."""
    abilities: list[LimitedAbility] = []
    for match in PER_DAY_LIST_RE.finditer(text):
        uses = int(match.group(1))
        if uses < 1:
            continue
        for item in re.split(r"[,;]", match.group(2)):
            name = PARENTHETICAL_RE.sub("", item.strip()).strip()
            if len(name) <= 1:
                continue
            if any(name in existing.name for existing in abilities):
                continue
            abilities.append(LimitedAbility(name=name, max_uses=uses))
    return abilities


def extract_named_per_day(traits: str) -> list[LimitedAbility]:
    """'Frightful Presence (3/Day)' in traits. Legendary Resistance is tracked separately."""
    abilities: list[LimitedAbility] = []
    seen: set[str] = set()
    for match in PER_DAY_NAMED_RE.finditer(traits):
        name = match.group(1).strip()
        uses = int(match.group(2))
        if uses < 1 or name in seen or "legendary resistance" in name.lower():
            continue
        seen.add(name)
        abilities.append(LimitedAbility(name=name, max_uses=uses))
    return abilities


def extract_limited_abilities(cells: StatBlockCells) -> list[LimitedAbility]:
    # The two patterns are deduplicated independently and never reconciled.
    return extract_per_day_lists(cells.spell_text) + extract_named_per_day(cells.traits)


def detect_spellcaster(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in SPELLCASTING_MARKERS)


def extract_spell_dc(text: str) -> int:
    match = SPELL_DC_RE.search(text)
    return int(match.group(1)) if match else DEFAULT_SPELL_DC


def extract_spell_attack(text: str) -> int:
    match = SPELL_ATTACK_RE.search(text)
    return int(match.group(1)) if match else DEFAULT_SPELL_ATTACK


def extract_spell_slots(text: str) -> dict[int, int]:
    slots: dict[int, int] = {}
    for match in SPELL_SLOT_RE.finditer(text):
        level = int(match.group(1))
        if 1 <= level <= 9:
            slots[level] = int(match.group(2))
    return slots


def extract_spellcasting_block(text: str) -> str:
    match = SPELLCASTING_BLOCK_RE.search(text)
    return match.group(0) if match else ""


def extract_ability_scores(cells: StatBlockCells) -> AbilityScores:
    return AbilityScores(
        strength=extract_ability_score(cells.get("strength")),
        dexterity=extract_ability_score(cells.get("dexterity")),
        constitution=extract_ability_score(cells.get("constitution")),
        intelligence=extract_ability_score(cells.get("intelligence")),
        wisdom=extract_ability_score(cells.get("wisdom")),
        charisma=extract_ability_score(cells.get("charisma")),
    )


def _or_default(count: int | None) -> int:
    return DEFAULT_LEGENDARY_COUNT if count is None else count


FieldExtractor = Callable[[StatBlockCells], object]

# Creature field -> extractor. Order is irrelevant; every extractor reads only the row.
CREATURE_PIPELINE: tuple[tuple[str, FieldExtractor], ...] = (
    ("name", lambda c: c.get("name")),
    ("max_hp", lambda c: extract_hp(c.get("hp"))),
    ("hp_formula", lambda c: c.get("hp")),
    ("ac", lambda c: extract_leading_int(c.get("ac"), DEFAULT_AC)),
    ("ac_text", lambda c: c.get("ac")),
    ("size", lambda c: c.get("size")),
    ("type", lambda c: c.get("type")),
    ("challenge_rating", lambda c: clean_challenge_rating(c.get("cr"))),
    ("speed", lambda c: c.get("speed")),
    ("stats", extract_ability_scores),
    ("senses", lambda c: c.get("senses")),
    ("saving_throws", lambda c: c.get("savingthrows")),
    ("skills", lambda c: c.get("skills")),
    ("damage_resistances", lambda c: c.get("damageresistances")),
    ("damage_immunities", lambda c: c.get("damageimmunities")),
    ("condition_immunities", lambda c: c.get("conditionimmunities")),
    ("traits", lambda c: c.traits),
    ("actions", lambda c: c.actions),
    ("bonus_actions", lambda c: c.bonus_actions),
    ("reactions", lambda c: c.get("reactions")),
    ("legendary_actions", lambda c: c.legendary_actions),
    ("lair_actions", lambda c: c.get("lairactions")),
    ("is_spellcaster", lambda c: detect_spellcaster(c.spell_text)),
    ("spell_dc", lambda c: extract_spell_dc(c.spell_text)),
    ("spell_attack", lambda c: extract_spell_attack(c.spell_text)),
    ("spell_slots", lambda c: extract_spell_slots(c.spell_text)),
    ("spells", lambda c: extract_spellcasting_block(f"{c.traits} {c.actions}")),
    ("has_legendary", lambda c: extract_legendary_actions(c.legendary_actions) is not None),
    ("legendary_actions_count", lambda c: _or_default(extract_legendary_actions(c.legendary_actions))),
    ("has_legendary_resistance", lambda c: extract_legendary_resistance(c.traits) is not None),
    ("legendary_resistance_count", lambda c: _or_default(extract_legendary_resistance(c.traits))),
    ("recharge_abilities", lambda c: extract_recharge_abilities(c.attack_text)),
    ("limited_abilities", extract_limited_abilities),
)


def extract_creature(values: list[str], header_map: dict[str, int]) -> Creature | None:
    """Build a Creature from one data row, or None when the row has no name."""
    cells = StatBlockCells(values=values, header_map=header_map)
    if not cells.get("name"):
        return None
    return Creature(**{field: extractor(cells) for field, extractor in CREATURE_PIPELINE})


def parse_creatures(text: str) -> list[Creature]:
    """
    Parse export text into Creature templates.

    Raises ParseError when there is no header plus at least one data row.
    Rows with fewer than three fields or without a name are skipped.
    """
    rows = tokenize_csv(normalize_text(text))
    if len(rows) < 2:
        logger.warning("Rejected import with %d row(s)", len(rows))
        raise ParseError("CSV must have a header and at least one data row")

    header_map = build_header_map(rows[0])
    logger.debug("Parsed headers: %s", sorted(header_map))

    creatures: list[Creature] = []
    for line_number, values in enumerate(rows[1:], start=2):
        if len(values) < MIN_FIELDS_PER_ROW:
            logger.debug("Skipping row %d: only %d field(s)", line_number, len(values))
            continue
        creature = extract_creature(values, header_map)
        if creature is None:
            logger.debug("Skipping row %d: no name", line_number)
            continue
        logger.debug("Parsed creature: %s", creature.name)
        creatures.append(creature)

    return creatures
