"""Observability helpers for instrumenting outbound vendor calls."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from closet_app.logging_config import ensure_correlation_id, get_logger, log_event, redact_for_log

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _preview_args(args: tuple, kwargs: dict, max_keys: int = 6) -> dict:
    preview: dict = {}
    # Positional args after ``self`` are the interesting ones for bound methods.
    positional = [arg for arg in args if isinstance(arg, (str, int, float, bool))]
    if positional:
        preview["args"] = [value[:40] if isinstance(value, str) else value for value in positional]
    for idx, (key, value) in enumerate(kwargs.items()):
        if idx >= max_keys:
            preview["truncated"] = True
            break
        preview[key] = value
    return redact_for_log(preview)


def _result_size(result: object) -> int | None:
    if isinstance(result, (list, tuple)):
        return len(result)
    if result is None:
        return 0
    return None


def instrument_call(call_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap a callable to emit structured start/complete/fail logs with timings."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()

            log_event(
                LOGGER,
                logging.INFO,
                "vendor_call_started",
                call=call_name,
                correlation_id=correlation_id,
                params=_preview_args(args, kwargs),
            )
            try:
                result = func(*args, **kwargs)
            except Exception:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "vendor_call_failed",
                    call=call_name,
                    correlation_id=correlation_id,
                    duration_ms=duration_ms,
                    exc_info=True,
                )
                raise
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            log_event(
                LOGGER,
                logging.INFO,
                "vendor_call_completed",
                call=call_name,
                correlation_id=correlation_id,
                duration_ms=duration_ms,
                result_count=_result_size(result),
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_call"]
