"""Per-session record of when each quest was last completed."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)


class CompletionLedger(Mapping[str, datetime]):
    """Read-only mapping of quest id to last completion time.

    Entries are only added through ``record_completion`` and only removed all
    at once through ``reset``.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, datetime] = {}

    def __getitem__(self, quest_id: str) -> datetime:
        return self._entries[quest_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def last_completed(self, quest_id: str) -> Optional[datetime]:
        return self._entries.get(quest_id)

    def record_completion(self, quest_id: str, at: datetime, *, now: Optional[datetime] = None) -> None:
        """Store ``at`` as the latest completion of ``quest_id``."""
        if at.tzinfo is None:
            raise ValueError("Completion timestamps must be timezone-aware")
        reference = now or datetime.now(timezone.utc)
        if at > reference:
            raise ValueError(f"Completion time {at.isoformat()} is in the future")
        self._entries[quest_id] = at
        logger.debug("Recorded completion of %s at %s", quest_id, at.isoformat())

    def reset(self) -> None:
        cleared = len(self._entries)
        self._entries.clear()
        logger.info("Completion ledger reset (%s entries cleared)", cleared)

    def snapshot(self) -> Dict[str, datetime]:
        return dict(self._entries)
