"""
Daily story usage per user.

One record per (user, UTC calendar day); a new day starts a new record.
Counts only go up. ``increment_today`` is select-then-write, so two
concurrent generations for the same user can lose an increment. That race
is accepted and not corrected here.

Every method returns a StoreResult and never raises.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from storyquest.services.store_result import StoreResult

logger = logging.getLogger("storyquest.usage")

USAGE_TABLE = "user_sessions"


def _today() -> date:
    return datetime.now(timezone.utc).date()


class UsageStore:
    def get_today_count(self, user_id: str) -> StoreResult:
        raise NotImplementedError

    def increment_today(self, user_id: str) -> StoreResult:
        raise NotImplementedError


class InMemoryUsageStore(UsageStore):
    def __init__(self):
        self._data: dict[tuple[str, date], int] = {}

    def get_today_count(self, user_id):
        return StoreResult.success(self._data.get((user_id, _today()), 0))

    def increment_today(self, user_id):
        key = (user_id, _today())
        current = self._data.get(key, 0)
        self._data[key] = current + 1
        return StoreResult.success(current + 1)


class SupabaseUsageStore(UsageStore):
    def __init__(self, supabase_client):
        self.sb = supabase_client

    def _select_today(self, user_id: str):
        return (
            self.sb.table(USAGE_TABLE)
            .select("questions_asked")
            .eq("user_id", user_id)
            .gte("created_at", _today().isoformat())
            .limit(1)
            .execute()
        )

    def get_today_count(self, user_id):
        try:
            result = self._select_today(user_id)
            if not result.data:
                return StoreResult.success(0)
            return StoreResult.success(result.data[0].get("questions_asked") or 0)
        except Exception as exc:
            return StoreResult.failure(f"usage read failed: {exc}")

    def increment_today(self, user_id):
        today = _today().isoformat()
        now = datetime.now(timezone.utc).isoformat()
        try:
            existing = self._select_today(user_id)
            if existing.data:
                new_count = (existing.data[0].get("questions_asked") or 0) + 1
                self.sb.table(USAGE_TABLE) \
                    .update({"questions_asked": new_count, "last_activity": now}) \
                    .eq("user_id", user_id) \
                    .gte("created_at", today) \
                    .execute()
            else:
                new_count = 1
                self.sb.table(USAGE_TABLE) \
                    .insert({
                        "user_id": user_id,
                        "questions_asked": 1,
                        "last_activity": now,
                        "created_at": today,
                    }) \
                    .execute()
            return StoreResult.success(new_count)
        except Exception as exc:
            return StoreResult.failure(f"usage update failed: {exc}")


def get_daily_story_count(store: UsageStore, user_id: str) -> int:
    """Stories generated today; unreadable usage counts as zero."""
    result = store.get_today_count(user_id)
    if not result.ok:
        logger.warning("Daily count unavailable for user %s: %s", user_id, result.error)
        return 0
    return result.value_or(0)
