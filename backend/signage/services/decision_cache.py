"""
Per-schedule decision cache for device polling.

Holds at most one (time bucket, Decision) pair per schedule. A lookup in a
later bucket is a miss and replaces the slot; schedule edits pop the slot
synchronously, so a stale decision never outlives an edit.
"""
import logging
from datetime import datetime, timezone

from signage.config import settings
from signage.services.content_resolver import Decision

logger = logging.getLogger(__name__)


class DecisionCache:
    def __init__(self, bucket_seconds: int = 60):
        self.bucket_seconds = bucket_seconds
        self._slots: dict[str, tuple[int, Decision]] = {}
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self.bucket_seconds > 0

    def bucket_of(self, instant: datetime) -> int:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return int(instant.timestamp()) // self.bucket_seconds

    def get(self, schedule_id, instant: datetime) -> Decision | None:
        if not self.enabled:
            return None
        slot = self._slots.get(str(schedule_id))
        if slot is not None and slot[0] == self.bucket_of(instant):
            self.hits += 1
            return slot[1]
        self.misses += 1
        return None

    def put(self, schedule_id, instant: datetime, decision: Decision) -> None:
        if self.enabled:
            self._slots[str(schedule_id)] = (self.bucket_of(instant), decision)

    def invalidate(self, schedule_id) -> None:
        if self._slots.pop(str(schedule_id), None) is not None:
            logger.debug("Decision cache invalidated for schedule %s", schedule_id)

    def clear(self) -> None:
        self._slots.clear()
        self.hits = self.misses = 0

    def __len__(self) -> int:
        return len(self._slots)


decision_cache = DecisionCache(settings.DECISION_CACHE_BUCKET_SECONDS)


def get_decision_cache() -> DecisionCache:
    return decision_cache
