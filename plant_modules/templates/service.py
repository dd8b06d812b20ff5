"""
Templates Module Service (``plant_modules.templates.service``).

Responsibility
--------------
Document and email templates per category: listing and search, the merge
field catalogue, CRUD, choosing the category default, uploading template
files and rendering a template with merge values.

Invariants enforced
-------------------
* ``set_default`` leaves exactly one default in the template's category.
* Template files live at ``{template_id}/{type}-{timestamp_ms}.{ext}`` in the
  templates bucket and are never overwritten.
* BCC addresses are trimmed, de-duplicated and must contain ``@``.

Failure modes
-------------
* ``RequiredFieldError`` -- blank template name.
* ``RecordNotFoundError`` -- unknown template.
* ``FileUploadError`` from storage.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from uuid import UUID

from sqlalchemy.orm import Session

from plant_engines.merge_fields import add_bcc_address, render_merge_fields
from plant_kernel.domain.clock import Clock, SystemClock
from plant_kernel.exceptions import RecordNotFoundError, RequiredFieldError
from plant_kernel.logging_config import get_logger
from plant_kernel.storage import FileStorage
from plant_modules.templates.models import (
    DocumentTemplate,
    MergeField,
    RenderedTemplate,
    TemplateCategory,
    TemplateType,
    UploadedTemplateFile,
)
from plant_modules.templates.orm import DocumentTemplateModel, MergeFieldModel

logger = get_logger("modules.templates.service")

TEMPLATES_BUCKET = "templates"


class TemplateService:
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        storage: FileStorage | None = None,
        bucket: str = TEMPLATES_BUCKET,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._storage = storage
        self._bucket = bucket

    # =========================================================================
    # Queries
    # =========================================================================

    def list_templates(
        self,
        category: TemplateCategory | str | None = None,
        search: str | None = None,
    ) -> list[DocumentTemplate]:
        query = self._session.query(DocumentTemplateModel)
        if category is not None:
            query = query.filter(DocumentTemplateModel.category == TemplateCategory(category).value)
        templates = [
            row.to_dto()
            for row in query.order_by(DocumentTemplateModel.sort_order, DocumentTemplateModel.name).all()
        ]
        if search:
            templates = [t for t in templates if t.matches(search)]
        return templates

    def merge_fields(self, category: TemplateCategory | str | None = None) -> list[MergeField]:
        """Active merge fields, optionally for one category."""
        query = self._session.query(MergeFieldModel).filter(MergeFieldModel.is_active.is_(True))
        if category is not None:
            query = query.filter(MergeFieldModel.category == TemplateCategory(category).value)
        return [row.to_dto() for row in query.order_by(MergeFieldModel.sort_order).all()]

    def sample_values(self, category: TemplateCategory | str) -> dict[str, str]:
        return {
            field.field_key: field.sample_value
            for field in self.merge_fields(category)
            if field.sample_value is not None
        }

    # =========================================================================
    # Mutations
    # =========================================================================

    def create_template(self, template: DocumentTemplate, actor_id: UUID) -> DocumentTemplate:
        template = self._normalized(template)
        try:
            self._session.add(DocumentTemplateModel.from_dto(template, created_by_id=actor_id))
            self._session.flush()
            if template.is_default:
                self._unset_other_defaults(template.id, template.category, actor_id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("document_template_created", extra={
            "template_id": str(template.id),
            "category": template.category.value,
            "template_type": template.template_type.value,
        })
        return template

    def update_template(self, template: DocumentTemplate, actor_id: UUID) -> DocumentTemplate:
        template = self._normalized(template)
        try:
            row = self._get(template.id)
            row.apply(template)
            row.updated_by_id = actor_id
            if template.is_default:
                self._unset_other_defaults(template.id, template.category, actor_id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("document_template_updated", extra={"template_id": str(template.id)})
        return row.to_dto()

    def delete_template(self, template_id: UUID) -> None:
        try:
            self._session.delete(self._get(template_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("document_template_deleted", extra={"template_id": str(template_id)})

    def set_default(self, template_id: UUID, actor_id: UUID) -> DocumentTemplate:
        """Make this the only default template in its category."""
        try:
            row = self._get(template_id)
            self._unset_other_defaults(row.id, TemplateCategory(row.category), actor_id)
            row.is_default = True
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("document_template_default_set", extra={
            "template_id": str(template_id),
            "category": row.category,
        })
        return row.to_dto()

    def upload_file(
        self,
        template_id: UUID,
        file_name: str,
        content: bytes,
        file_type: TemplateType | str,
        actor_id: UUID,
    ) -> UploadedTemplateFile:
        if self._storage is None:
            raise RuntimeError("TemplateService was created without file storage")
        file_type = TemplateType(file_type)
        row = self._get(template_id)

        extension = file_name.rsplit(".", 1)[-1]
        timestamp_ms = int(self._clock.now().timestamp() * 1000)
        path = f"{template_id}/{file_type.value}-{timestamp_ms}.{extension}"
        self._storage.upload(self._bucket, path, content)
        url = self._storage.public_url(self._bucket, path)

        try:
            if file_type is TemplateType.DOCUMENT:
                row.document_file_path, row.document_file_url = path, url
            else:
                row.email_file_path, row.email_file_url = path, url
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("document_template_file_uploaded", extra={
            "template_id": str(template_id),
            "file_type": file_type.value,
            "path": path,
        })
        return UploadedTemplateFile(template_id=template_id, file_type=file_type, path=path, url=url)

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, template_id: UUID, values: Mapping[str, object]) -> RenderedTemplate:
        """Fill merge placeholders in the template's body (and subject for email)."""
        template = self._get(template_id).to_dto()
        if template.template_type is TemplateType.EMAIL:
            body = render_merge_fields(template.email_html, values)
            subject = render_merge_fields(template.email_subject, values)
            unknown = dict.fromkeys(subject.unknown_keys + body.unknown_keys)
            rendered_subject = subject.text
        else:
            body = render_merge_fields(template.document_html, values)
            unknown = dict.fromkeys(body.unknown_keys)
            rendered_subject = None

        if unknown:
            logger.warning("document_template_unknown_merge_fields", extra={
                "template_id": str(template_id),
                "unknown_keys": list(unknown),
            })
        return RenderedTemplate(
            template_id=template_id,
            subject=rendered_subject,
            body=body.text,
            bcc_addresses=template.bcc_addresses,
            unknown_keys=tuple(unknown),
        )

    # -------------------------------------------------------------------------

    def _get(self, template_id: UUID) -> DocumentTemplateModel:
        row = self._session.get(DocumentTemplateModel, template_id)
        if row is None:
            raise RecordNotFoundError("document_templates", str(template_id))
        return row

    def _unset_other_defaults(self, template_id: UUID, category: TemplateCategory, actor_id: UUID) -> None:
        others = (
            self._session.query(DocumentTemplateModel)
            .filter(
                DocumentTemplateModel.category == category.value,
                DocumentTemplateModel.is_default.is_(True),
                DocumentTemplateModel.id != template_id,
            )
            .all()
        )
        for other in others:
            other.is_default = False
            other.updated_by_id = actor_id

    @staticmethod
    def _normalized(template: DocumentTemplate) -> DocumentTemplate:
        if not template.name or not template.name.strip():
            raise RequiredFieldError("name")
        bcc: list[str] = []
        for address in template.bcc_addresses:
            bcc = add_bcc_address(bcc, address)
        return replace(
            template,
            name=template.name.strip(),
            category=TemplateCategory(template.category),
            template_type=TemplateType(template.template_type),
            bcc_addresses=tuple(bcc),
        )
