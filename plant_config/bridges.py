"""
Config -> service bridges.

Builders that turn the ``storage`` section of a ``PlantConfig`` into the
objects services take.  They live here because the kernel never imports
plant_config.

Usage:
    from plant_config.bridges import build_quality_service

    config = get_active_config()
    with session_scope() as session:
        build_quality_service(session, config).upload_photo(test_id, name, data)
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.orm import Session

from plant_config.schema import PlantConfig
from plant_kernel.domain.clock import Clock
from plant_kernel.storage import LocalFileStorage
from plant_modules.quality.service import QualityService
from plant_modules.templates.service import TemplateService


def build_file_storage(config: PlantConfig) -> LocalFileStorage:
    """Storage rooted at ``storage.root_path``; ``~`` is expanded."""
    return LocalFileStorage(
        Path(config.storage.root_path).expanduser(),
        base_url=config.storage.public_base_url,
    )


def build_quality_service(
    session: Session,
    config: PlantConfig,
    clock: Clock | None = None,
) -> QualityService:
    return QualityService(
        session,
        clock=clock,
        storage=build_file_storage(config),
        evidence_bucket=config.storage.qa_evidence_bucket,
    )


def build_template_service(
    session: Session,
    config: PlantConfig,
    clock: Clock | None = None,
) -> TemplateService:
    return TemplateService(
        session,
        clock=clock,
        storage=build_file_storage(config),
        bucket=config.storage.templates_bucket,
    )
