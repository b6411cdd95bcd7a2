import time
import json
import logging
import asyncio
from contextlib import contextmanager
from typing import Optional
from functools import wraps

from app.core.config import get_settings

logger = logging.getLogger("programador.telemetry")


def emit_event(event: str, *, route: Optional[str] = None, target: Optional[str] = None,
               error_type: Optional[str] = None, latency_ms: Optional[int] = None,
               ok: Optional[bool] = None):
    if not get_settings().enable_telemetry_log:
        return
    payload = {
        "event": event,
        "route": route,
        "target": target,
        "error_type": error_type,
        "latency_ms": latency_ms,
        "ok": ok,
        "ts": time.time(),
    }
    # single-line JSON so log shippers can parse it
    logger.info("telemetry=%s", json.dumps(payload, separators=(",", ":")))


@contextmanager
def timed_call(route: str, target: Optional[str] = None):
    """Emit one api_call event for the wrapped block, failed or not."""
    started = time.perf_counter()
    outcome = {"ok": True, "error_type": None}
    try:
        yield
    except Exception as e:
        outcome = {"ok": False, "error_type": type(e).__name__}
        raise
    finally:
        emit_event("api_call", route=route, target=target,
                   latency_ms=int((time.perf_counter() - started) * 1000), **outcome)


def instrument(route: str, target: Optional[str] = None):
    def deco(fn):
        if asyncio.iscoroutinefunction(fn):
            @wraps(fn)
            async def wrapped_async(*args, **kwargs):
                with timed_call(route, target):
                    return await fn(*args, **kwargs)
            return wrapped_async

        @wraps(fn)
        def wrapped(*args, **kwargs):
            with timed_call(route, target):
                return fn(*args, **kwargs)
        return wrapped
    return deco
