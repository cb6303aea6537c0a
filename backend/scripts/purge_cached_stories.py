#!/usr/bin/env python3
"""
Purge cached stories older than the expiry window.

Meant to be run by an external scheduler (cron, Railway cron, etc.):

    cd backend
    python scripts/purge_cached_stories.py            # uses CACHE_EXPIRY_DAYS
    python scripts/purge_cached_stories.py --days 7
"""
import argparse
import logging
import sys

from storyquest.core.config import get_settings
from storyquest.core.deps import get_supabase_client
from storyquest.services.story_cache import SupabaseStoryCache, purge_expired_stories


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Delete cached stories older than the expiry window"
    )
    parser.add_argument(
        "--days", type=int, default=settings.cache_expiry_days,
        help=f"Expiry window in days (default: {settings.cache_expiry_days})",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    sb = get_supabase_client()
    if sb is None:
        print("ERROR: SUPABASE_URL / SUPABASE_SERVICE_KEY not set", file=sys.stderr)
        sys.exit(1)

    result = purge_expired_stories(SupabaseStoryCache(sb, expiry_days=args.days), args.days)
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        sys.exit(1)
    print(f"Deleted {result.value} cached stories older than {args.days} days")


if __name__ == "__main__":
    main()
