"""
``@traced_engine``: one AR_ENGINE_TRACE log record per engine call.

The record names the engine and its version, the call's duration, and a
16-hex-char SHA-256 fingerprint of selected keyword arguments.  Two calls
over the same snapshot and parameters share a fingerprint, which is how a
dashboard number is matched to the exact inputs that produced it.

Only keyword arguments are fingerprinted; engines are called with keywords
by the services.  A field passed positionally or omitted hashes as "null".
Snapshots, records and config objects are frozen dataclasses whose repr is
stable, so they hash by value.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import time
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

# Under the kernel root so configure_logging() covers it
_logger = logging.getLogger("ar_kernel.engines.tracer")

FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, Mapping):
        inner = ",".join(f"{k}:{_canonical(v)}" for k, v in sorted(value.items()))
        return "{" + inner + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    return repr(value)


def compute_input_fingerprint(fields: tuple[str, ...], kwargs: Mapping[str, Any]) -> str:
    """Hash ``kwargs[f]`` for each ``f`` in ``fields``, in order."""
    canonical = "|".join(f"{name}={_canonical(kwargs.get(name))}" for name in fields)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Wrap a pure engine function with trace logging.

        @traced_engine("metrics", "1.0", fingerprint_fields=("snapshot", "as_of"))
        def compute_metrics(snapshot, as_of=None): ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, kwargs) if fingerprint_fields else ""
            )
            started = time.monotonic()
            result = func(*args, **kwargs)
            _logger.info(
                "AR_ENGINE_TRACE",
                extra={
                    "trace_type": "AR_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round((time.monotonic() - started) * 1000, 2),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
