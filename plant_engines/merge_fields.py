"""
Module: plant_engines.merge_fields
Responsibility:
    ``{{FIELD_KEY}}`` placeholder substitution for document and email
    templates, plus the small validations the template editor applies
    (BCC address shape).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Placeholders whose key has no value are left untouched and reported.
    - Field keys are accepted with or without the surrounding braces.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from plant_engines.tracer import traced_engine

_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z0-9_.]+)\s*\}\}")


@dataclass(frozen=True)
class MergeResult:
    text: str
    used_keys: tuple[str, ...]
    unknown_keys: tuple[str, ...]


def bare_key(field_key: str) -> str:
    """``{{PO_NUMBER}}`` -> ``PO_NUMBER``."""
    match = _PLACEHOLDER.fullmatch(field_key.strip())
    return match.group(1) if match else field_key.strip()


def placeholder(field_key: str) -> str:
    return "{{" + bare_key(field_key) + "}}"


def find_placeholders(text: str | None) -> tuple[str, ...]:
    """Distinct keys referenced by ``text``, in first-seen order."""
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER.finditer(text or ""):
        seen.setdefault(match.group(1), None)
    return tuple(seen)


@traced_engine("merge_fields", "1.0")
def render_merge_fields(text: str | None, values: Mapping[str, object]) -> MergeResult:
    """Replace every known placeholder in ``text`` with its value."""
    normalized = {bare_key(k): v for k, v in values.items()}
    used: dict[str, None] = {}
    unknown: dict[str, None] = {}

    def _substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in normalized:
            unknown.setdefault(key, None)
            return match.group(0)
        used.setdefault(key, None)
        value = normalized[key]
        return "" if value is None else str(value)

    rendered = _PLACEHOLDER.sub(_substitute, text or "")
    return MergeResult(text=rendered, used_keys=tuple(used), unknown_keys=tuple(unknown))


def is_valid_bcc_address(address: str) -> bool:
    return bool(address.strip()) and "@" in address


def add_bcc_address(addresses: list[str], address: str) -> list[str]:
    """Append a trimmed address when it looks like an email; otherwise no-op."""
    candidate = address.strip()
    if not is_valid_bcc_address(candidate) or candidate in addresses:
        return list(addresses)
    return [*addresses, candidate]
