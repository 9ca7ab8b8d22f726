"""Static catalog of caregiver quests."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class DayPart(str, Enum):
    MORNING = "morning"
    MIDDAY = "midday"
    AFTERNOON = "afternoon"
    EVENING = "evening"


ANYTIME = "anytime"
VALID_TAGS: FrozenSet[str] = frozenset({part.value for part in DayPart} | {ANYTIME})
DIFFICULTIES: FrozenSet[str] = frozenset({"Low", "Medium", "High"})


@dataclass(frozen=True)
class Quest:
    """A single guided activity the subject can be invited to do."""

    quest_id: str
    title: str
    description: str
    tags: FrozenSet[str]
    cooldown_minutes: int
    difficulty: str
    category: str
    icf_codes: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.cooldown_minutes < 0:
            raise ValueError(f"cooldown_minutes must be >= 0 for quest {self.quest_id}")
        unknown = set(self.tags) - VALID_TAGS
        if unknown:
            raise ValueError(f"Unknown tags {sorted(unknown)} for quest {self.quest_id}")
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty {self.difficulty!r} for quest {self.quest_id}")

    @property
    def is_custom(self) -> bool:
        return self.quest_id.startswith(CUSTOM_QUEST_PREFIX)


CUSTOM_QUEST_PREFIX = "custom-"


def _quest(
    quest_id: str,
    title: str,
    description: str,
    tags: Tuple[str, ...],
    cooldown_minutes: int,
    difficulty: str,
    category: str,
    icf_codes: Tuple[str, ...] = (),
) -> Quest:
    return Quest(
        quest_id=quest_id,
        title=title,
        description=description,
        tags=frozenset(tags),
        cooldown_minutes=cooldown_minutes,
        difficulty=difficulty,
        category=category,
        icf_codes=icf_codes,
    )


# Catalog order matters: the scheduler's relaxed fallback picks the first
# quest off cooldown.
QUEST_CATALOG: Tuple[Quest, ...] = (
    _quest(
        "morning-wash-face",
        "Freshen up",
        "Wash your face with warm water and dry it with a soft towel",
        ("morning",),
        720,
        "Low",
        "Self-care",
        ("d510",),
    ),
    _quest(
        "morning-brush-teeth",
        "Brush teeth",
        "Put toothpaste on the toothbrush and brush your teeth",
        ("morning", "evening"),
        480,
        "Low",
        "Self-care",
        ("d520",),
    ),
    _quest(
        "morning-get-dressed",
        "Get dressed",
        "Choose a shirt and trousers from the wardrobe and put them on",
        ("morning",),
        720,
        "Medium",
        "Self-care",
        ("d540",),
    ),
    _quest(
        "morning-make-bed",
        "Make the bed",
        "Pull the duvet straight and plump up the pillow",
        ("morning",),
        720,
        "Low",
        "Useful",
        ("d640",),
    ),
    _quest(
        "morning-breakfast",
        "Butter a sandwich",
        "Take a slice of bread, spread butter on it and add cheese",
        ("morning",),
        600,
        "Medium",
        "Useful",
        ("d630", "d550"),
    ),
    _quest(
        "midday-water-plants",
        "Water the plants",
        "Fill the watering can with water and water the plants on the windowsill",
        ("midday", "afternoon"),
        1440,
        "Low",
        "Useful",
        ("d650",),
    ),
    _quest(
        "midday-fold-towels",
        "Fold the towels",
        "Fold the clean towels in half twice and stack them neatly",
        ("midday",),
        1440,
        "Low",
        "Useful",
        ("d640",),
    ),
    _quest(
        "midday-set-table",
        "Set the table",
        "Put a plate, a knife, a fork and a glass on the table for lunch",
        ("midday",),
        600,
        "Low",
        "Useful",
        ("d630",),
    ),
    _quest(
        "midday-short-walk",
        "Short walk",
        "Put on your coat and shoes and take a short walk around the block",
        ("midday", "afternoon"),
        240,
        "Medium",
        "Movement",
        ("d450", "d460"),
    ),
    _quest(
        "afternoon-make-tea",
        "Make a cup of tea",
        "Boil water in the kettle, put a tea bag in a cup and pour the water over it",
        ("afternoon",),
        180,
        "Medium",
        "Useful",
        ("d630", "d560"),
    ),
    _quest(
        "afternoon-sort-photos",
        "Look at photos",
        "Take the photo album from the cupboard and look at the pictures together",
        ("afternoon",),
        1440,
        "Low",
        "Social",
        ("d710", "d920"),
    ),
    _quest(
        "afternoon-peel-apple",
        "Peel an apple",
        "Peel an apple with a peeler and cut it into pieces on a plate",
        ("afternoon",),
        600,
        "High",
        "Useful",
        ("d630",),
    ),
    _quest(
        "afternoon-call-family",
        "Call a relative",
        "Pick up the phone and call a family member for a short chat",
        ("afternoon", "midday"),
        1440,
        "Medium",
        "Social",
        ("d360", "d760"),
    ),
    _quest(
        "evening-close-curtains",
        "Close the curtains",
        "Walk to the window and close the curtains in the living room",
        ("evening",),
        720,
        "Low",
        "Useful",
        ("d640",),
    ),
    _quest(
        "evening-pyjamas",
        "Put on pyjamas",
        "Take off your clothes and put on your pyjamas for the night",
        ("evening",),
        720,
        "Medium",
        "Self-care",
        ("d540",),
    ),
    _quest(
        "evening-listen-music",
        "Listen to music",
        "Put on a favourite record and sit down in a comfortable chair to listen",
        ("evening", "afternoon"),
        360,
        "Low",
        "Relaxation",
        ("d920",),
    ),
    _quest(
        "anytime-drink-water",
        "Drink a glass of water",
        "Fill a glass with water from the tap and drink it slowly",
        ("anytime",),
        90,
        "Low",
        "Self-care",
        ("d560",),
    ),
    _quest(
        "anytime-stretch",
        "Gentle stretching",
        "Stand up, raise both arms above your head and stretch slowly",
        ("anytime",),
        120,
        "Low",
        "Movement",
        ("b710", "d410"),
    ),
    _quest(
        "anytime-wash-hands",
        "Wash hands",
        "Wash your hands with soap and water and dry them with a towel",
        ("anytime",),
        60,
        "Low",
        "Self-care",
        ("d510",),
    ),
)

_CATALOG_INDEX: Dict[str, Quest] = {quest.quest_id: quest for quest in QUEST_CATALOG}


def get_catalog() -> Tuple[Quest, ...]:
    """Return the ordered catalog."""
    return QUEST_CATALOG


def get_quest(quest_id: str) -> Optional[Quest]:
    return _CATALOG_INDEX.get(quest_id)


def build_custom_quest(description: str, now: datetime) -> Quest:
    """Synthesize a caregiver-authored quest; it never enters the catalog."""
    text = (description or "").strip()
    if not text:
        raise ValueError("Custom activity description must not be empty")
    return _quest(
        f"{CUSTOM_QUEST_PREFIX}{int(now.timestamp() * 1000)}",
        "Custom activity",
        text,
        (ANYTIME,),
        0,
        "Low",
        "Useful",
    )
