"""
plant_engines.tracer -- PLANT_ENGINE_TRACE records for engine calls.

``@traced_engine`` logs one record per call of a pure calculation with the
engine's name and version, how long it took, and a short fingerprint of the
named inputs.  Two calls with equal inputs share a fingerprint, so a pallet
or landed-cost result can be matched to the call that produced it.

Arguments are bound to the function signature before fingerprinting, so
``calculate(Decimal("3"))`` and ``calculate(amount=Decimal("3"))`` trace
alike.  Fields the call leaves out fingerprint as their defaults.
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import json
import time
from collections.abc import Callable
from typing import Any

from plant_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")

FINGERPRINT_LENGTH = 16


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    values: dict[str, Any],
) -> str:
    """Hex digest prefix over ``fingerprint_fields``; absent fields count as null."""
    selected = {name: values.get(name) for name in fingerprint_fields}
    canonical = json.dumps(selected, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                bound.apply_defaults()
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed = time.perf_counter() - started

            logger.info(
                "PLANT_ENGINE_TRACE",
                extra={
                    "trace_type": "PLANT_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round(elapsed * 1000, 2),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
