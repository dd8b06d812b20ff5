"""
Configuration Loader (``plant_config.loader``).

Responsibility
--------------
Loads the plant YAML file and parses each section into the typed
``plant_config.schema`` dataclasses.  Callers should go through
``plant_config.get_active_config()``.

Invariants enforced
-------------------
* Absent sections and keys take the schema defaults.
* Decimal settings are parsed from their string form, never via float.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  document for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad values  -> ``ValueError`` from the schema ``__post_init__``.
* Unknown keys in a section  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from plant_config.schema import (
    DatabaseConfig,
    LabelsConfig,
    PackagingConfig,
    PayrollConfig,
    PlantConfig,
    ProductionConfig,
    StorageConfig,
)

_SECTIONS: dict[str, type] = {
    "database": DatabaseConfig,
    "storage": StorageConfig,
    "production": ProductionConfig,
    "payroll": PayrollConfig,
    "labels": LabelsConfig,
    "packaging": PackagingConfig,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _coerce(value: Any, default: Any) -> Any:
    if isinstance(default, Decimal) and not isinstance(value, Decimal):
        return Decimal(str(value))
    return value


def parse_section(section_cls: type, data: dict[str, Any] | None) -> Any:
    """Build one section dataclass, defaulting missing keys."""
    data = data or {}
    known = {f.name: f for f in fields(section_cls)}
    unknown = set(data) - set(known)
    if unknown:
        raise ValueError(
            f"Unknown {section_cls.__name__} keys: {', '.join(sorted(unknown))}"
        )
    defaults = section_cls()
    kwargs = {
        name: _coerce(value, getattr(defaults, name))
        for name, value in data.items()
    }
    return section_cls(**kwargs)


def parse_config(data: dict[str, Any]) -> PlantConfig:
    sections = {
        name: parse_section(cls, data.get(name))
        for name, cls in _SECTIONS.items()
    }
    return PlantConfig(
        plant_name=data.get("plant_name", PlantConfig.plant_name),
        checksum=compute_checksum(data),
        **sections,
    )


def load_config(path: Path | str) -> PlantConfig:
    return parse_config(load_yaml_file(Path(path)))
