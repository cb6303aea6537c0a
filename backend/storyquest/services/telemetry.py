import time
import json
import asyncio
import logging
from typing import Optional
from functools import wraps
from inspect import iscoroutinefunction

from storyquest.core.config import get_settings

logger = logging.getLogger("storyquest.telemetry")


def emit_event(event: str, *, route: str, version: str = "v1", user_id: Optional[str] = None,
               theme: Optional[str] = None, topic: Optional[str] = None,
               error_type: Optional[str] = None, latency_ms: Optional[int] = None,
               attempts: Optional[int] = None, cached: Optional[bool] = None,
               ok: Optional[bool] = None):
    payload = {
        "event": event,
        "route": route,
        "version": version,
        "user_id": user_id,
        "theme": theme,
        "topic": topic,
        "error_type": error_type,
        "latency_ms": latency_ms,
        "attempts": attempts,
        "cached": cached,
        "ok": ok,
        "ts": time.time(),
    }
    # log as single-line JSON for easy parsing in prod
    logger.info("telemetry=%s", json.dumps(payload, separators=(",", ":")))

    # persist to Supabase (best-effort, never block the request)
    if not get_settings().enable_telemetry_db:
        return

    try:
        from storyquest.core.deps import get_supabase_client
        sb = get_supabase_client()
        if sb is None:
            return
        sb.table("telemetry_events").insert({
            k: v for k, v in payload.items() if k != "ts"
        }).execute()
    except Exception as e:
        logger.error(f"[telemetry.emit_event] {e}", exc_info=True)


async def aemit_event(event: str, **fields):
    """emit_event for coroutines; the optional Supabase insert runs in a worker thread."""
    await asyncio.to_thread(emit_event, event, **fields)


def instrument(route: str, version: str):
    def deco(fn):
        if iscoroutinefunction(fn):
            @wraps(fn)
            async def wrapped_async(*args, **kwargs):
                t0 = time.time()
                ok = True
                err = None
                try:
                    out = await fn(*args, **kwargs)
                    return out
                except Exception as e:
                    ok = False
                    err = str(e.__class__.__name__)
                    raise
                finally:
                    dt = int((time.time() - t0) * 1000)
                    await aemit_event("api_call", route=route, version=version, latency_ms=dt, ok=ok,
                                      error_type=err)
            return wrapped_async
        else:
            @wraps(fn)
            def wrapped(*args, **kwargs):
                t0 = time.time()
                ok = True
                err = None
                try:
                    out = fn(*args, **kwargs)
                    return out
                except Exception as e:
                    ok = False
                    err = str(e.__class__.__name__)
                    raise
                finally:
                    dt = int((time.time() - t0) * 1000)
                    emit_event("api_call", route=route, version=version, latency_ms=dt, ok=ok,
                               error_type=err)
            return wrapped
    return deco
