"""
plant_config -- single public entrypoint for plant configuration.

Responsibility:
    Provides ``get_active_config()``, the one way services, scripts and the
    CLI obtain settings.  The file is chosen by, in order: the explicit
    ``config_path`` argument, the ``PLANT_OPS_CONFIG`` environment
    variable, then the bundled ``sets/default.yaml``.

Failure modes:
    - ``FileNotFoundError`` -- the chosen YAML file does not exist.
    - ``ValueError`` -- a section holds an unknown key or an invalid value.

Audit relevance:
    Every successful call emits a ``PLANT_CONFIG_TRACE`` log entry with the
    source path and the document checksum.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from plant_config.loader import load_config
from plant_config.schema import PlantConfig

_logger = logging.getLogger("plant_kernel.config")

CONFIG_ENV_VAR = "PLANT_OPS_CONFIG"
_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"


def resolve_config_path(config_path: Path | str | None = None) -> Path:
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return _DEFAULT_CONFIG_FILE


def get_active_config(config_path: Path | str | None = None) -> PlantConfig:
    """Load and validate the active plant configuration."""
    path = resolve_config_path(config_path)
    config = load_config(path)

    _logger.info(
        "PLANT_CONFIG_TRACE",
        extra={
            "trace_type": "PLANT_CONFIG_TRACE",
            "config_path": str(path),
            "plant_name": config.plant_name,
            "checksum": config.checksum,
        },
    )
    return config


__all__ = [
    "CONFIG_ENV_VAR",
    "PlantConfig",
    "get_active_config",
    "load_config",
    "resolve_config_path",
]
