"""
Story cache collaborator.

Keyed by (user_id, theme, normalized topic) where normalization is
lowercase + trim. Entries are written once after a fully validated
generation and only served inside the expiry window; once expired, the
next successful generation for the key writes a fresh entry.

Every method returns a StoreResult and never raises.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from storyquest.models.story import StoryDocument
from storyquest.services.store_result import StoreResult

logger = logging.getLogger("storyquest.cache")

CACHE_TABLE = "cached_stories"
DEFAULT_EXPIRY_DAYS = 30


def normalize_topic(topic: str) -> str:
    return topic.lower().strip()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoryCache:
    def get(self, user_id: str, theme: str, topic: str) -> StoreResult:
        raise NotImplementedError

    def put(self, user_id: str, theme: str, topic: str, story: StoryDocument) -> StoreResult:
        raise NotImplementedError

    def delete_older_than(self, cutoff: datetime) -> StoreResult:
        raise NotImplementedError


@dataclass
class _CachedRow:
    story: StoryDocument
    created_at: datetime


class InMemoryStoryCache(StoryCache):
    def __init__(self, expiry_days: int = DEFAULT_EXPIRY_DAYS):
        self.expiry_days = expiry_days
        self._data: dict[tuple[str, str, str], _CachedRow] = {}

    def _key(self, user_id: str, theme: str, topic: str):
        return (user_id, theme, normalize_topic(topic))

    def _expired(self, row: _CachedRow) -> bool:
        return row.created_at < _utcnow() - timedelta(days=self.expiry_days)

    def get(self, user_id, theme, topic):
        row = self._data.get(self._key(user_id, theme, topic))
        if row is None or self._expired(row):
            return StoreResult.success(None)
        return StoreResult.success(row.story)

    def put(self, user_id, theme, topic, story):
        key = self._key(user_id, theme, topic)
        row = self._data.get(key)
        # a live entry is never updated in place; an expired one is replaced
        if row is None or self._expired(row):
            self._data[key] = _CachedRow(story=story, created_at=_utcnow())
        return StoreResult.success()

    def delete_older_than(self, cutoff):
        expired = [k for k, row in self._data.items() if row.created_at < cutoff]
        for k in expired:
            del self._data[k]
        return StoreResult.success(len(expired))


class SupabaseStoryCache(StoryCache):
    def __init__(self, supabase_client, expiry_days: int = DEFAULT_EXPIRY_DAYS):
        self.sb = supabase_client
        self.expiry_days = expiry_days

    def get(self, user_id, theme, topic):
        cutoff = _utcnow() - timedelta(days=self.expiry_days)
        try:
            result = (
                self.sb.table(CACHE_TABLE)
                .select("response_json")
                .eq("user_id", user_id)
                .eq("theme", theme)
                .eq("topic", normalize_topic(topic))
                .gte("created_at", cutoff.isoformat())
                .limit(1)
                .execute()
            )
            if not result.data:
                return StoreResult.success(None)
            story = StoryDocument.model_validate(result.data[0]["response_json"])
            return StoreResult.success(story)
        except Exception as exc:
            return StoreResult.failure(f"cache read failed: {exc}")

    def put(self, user_id, theme, topic, story):
        try:
            self.sb.table(CACHE_TABLE).insert({
                "user_id": user_id,
                "theme": theme,
                "topic": normalize_topic(topic),
                "response_json": story.model_dump(mode="json"),
            }).execute()
            return StoreResult.success()
        except Exception as exc:
            return StoreResult.failure(f"cache write failed: {exc}")

    def delete_older_than(self, cutoff):
        try:
            result = (
                self.sb.table(CACHE_TABLE)
                .delete()
                .lt("created_at", cutoff.isoformat())
                .execute()
            )
            return StoreResult.success(len(result.data or []))
        except Exception as exc:
            return StoreResult.failure(f"cache purge failed: {exc}")


def purge_expired_stories(cache: StoryCache, expiry_days: int = DEFAULT_EXPIRY_DAYS) -> StoreResult:
    """Drop cache entries older than the expiry window. Run by a scheduler."""
    cutoff = _utcnow() - timedelta(days=expiry_days)
    result = cache.delete_older_than(cutoff)
    if result.ok:
        logger.info("Purged %s cached stories older than %s", result.value, cutoff.date())
    else:
        logger.error("Failed to purge cached stories: %s", result.error)
    return result
