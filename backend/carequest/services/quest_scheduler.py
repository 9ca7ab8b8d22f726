"""Pick the next quest from the catalog for the current moment."""
from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Mapping, Optional, Sequence

from carequest.services.quest_catalog import ANYTIME, DayPart, Quest

logger = logging.getLogger(__name__)


def day_part_for(now: datetime) -> DayPart:
    """Map the local wall-clock hour of ``now`` to a day part."""
    hour = now.hour
    if 5 <= hour < 12:
        return DayPart.MORNING
    if 12 <= hour < 17:
        return DayPart.MIDDAY
    if 17 <= hour < 21:
        return DayPart.AFTERNOON
    # night folds into evening
    return DayPart.EVENING


def is_on_cooldown(quest: Quest, ledger: Mapping[str, datetime], now: datetime) -> bool:
    if quest.cooldown_minutes == 0:
        return False
    last_completed = ledger.get(quest.quest_id)
    if last_completed is None:
        return False
    return last_completed + timedelta(minutes=quest.cooldown_minutes) > now


def fits_day_part(quest: Quest, day_part: DayPart) -> bool:
    return day_part.value in quest.tags or ANYTIME in quest.tags


def select_next(
    catalog: Sequence[Quest],
    ledger: Mapping[str, datetime],
    now: datetime,
    rng: Optional[random.Random] = None,
) -> Optional[Quest]:
    """
    Return the next quest to offer, or None when everything is cooling down.

    Quests that fit the current day part and are off cooldown are drawn at
    random. When none fit, the day part is ignored and the first quest in
    catalog order that is off cooldown wins. Cooldown is never relaxed.
    """
    day_part = day_part_for(now)
    off_cooldown = [quest for quest in catalog if not is_on_cooldown(quest, ledger, now)]
    candidates = [quest for quest in off_cooldown if fits_day_part(quest, day_part)]

    if candidates:
        chosen = (rng or random).choice(candidates)
        logger.debug(
            "Selected %s from %s candidates for %s",
            chosen.quest_id,
            len(candidates),
            day_part.value,
        )
        return chosen

    if off_cooldown:
        chosen = off_cooldown[0]
        logger.info("No quest fits %s; falling back to %s", day_part.value, chosen.quest_id)
        return chosen

    logger.info("No quest available at %s: every quest is on cooldown", now.isoformat())
    return None
