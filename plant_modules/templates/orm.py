"""
Templates ORM Persistence Models (``plant_modules.templates.orm``).

Invariants enforced:
    - At most one ``is_default`` template per category is maintained by the
      service, not by a constraint.
    - ``bcc_addresses`` is a JSON list, never NULL.
    - ``field_key`` is unique within a category.
"""

from uuid import UUID

from sqlalchemy import JSON, Boolean, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from plant_kernel.db.base import TrackedBase


def _value(enum_or_str):
    return enum_or_str.value if hasattr(enum_or_str, "value") else enum_or_str


# ---------------------------------------------------------------------------
# DocumentTemplateModel
# ---------------------------------------------------------------------------

class DocumentTemplateModel(TrackedBase):
    __tablename__ = "document_templates"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    template_type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_file_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    document_file_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    email_subject: Mapped[str | None] = mapped_column(String(500), nullable=True)
    email_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    email_file_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    email_file_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    send_to_primary_contact: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    send_to_all_contacts: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    bcc_addresses: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("idx_document_template_category", "category", "sort_order"),
    )

    def to_dto(self):
        from plant_modules.templates.models import (
            DocumentTemplate,
            TemplateCategory,
            TemplateType,
        )
        return DocumentTemplate(
            id=self.id,
            name=self.name,
            category=TemplateCategory(self.category),
            template_type=TemplateType(self.template_type),
            description=self.description,
            document_html=self.document_html,
            document_file_path=self.document_file_path,
            document_file_url=self.document_file_url,
            email_subject=self.email_subject,
            email_html=self.email_html,
            email_file_path=self.email_file_path,
            email_file_url=self.email_file_url,
            send_to_primary_contact=self.send_to_primary_contact,
            send_to_all_contacts=self.send_to_all_contacts,
            bcc_addresses=tuple(self.bcc_addresses or ()),
            is_default=self.is_default,
            is_active=self.is_active,
            sort_order=self.sort_order,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "DocumentTemplateModel":
        model = cls(id=dto.id, created_by_id=created_by_id)
        model.apply(dto)
        return model

    def apply(self, dto) -> None:
        """Copy editable fields; uploaded file columns are left alone."""
        self.name = dto.name
        self.category = _value(dto.category)
        self.template_type = _value(dto.template_type)
        self.description = dto.description
        self.document_html = dto.document_html
        self.email_subject = dto.email_subject
        self.email_html = dto.email_html
        self.send_to_primary_contact = dto.send_to_primary_contact
        self.send_to_all_contacts = dto.send_to_all_contacts
        self.bcc_addresses = list(dto.bcc_addresses)
        self.is_default = dto.is_default
        self.is_active = dto.is_active
        self.sort_order = dto.sort_order

    def __repr__(self) -> str:
        return f"<DocumentTemplateModel {self.category}/{self.name}>"


# ---------------------------------------------------------------------------
# MergeFieldModel
# ---------------------------------------------------------------------------

class MergeFieldModel(TrackedBase):
    __tablename__ = "template_merge_fields"

    category: Mapped[str] = mapped_column(String(50), nullable=False)
    field_key: Mapped[str] = mapped_column(String(100), nullable=False)
    field_label: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sample_value: Mapped[str | None] = mapped_column(String(200), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("category", "field_key", name="uq_merge_field_category_key"),
    )

    def to_dto(self):
        from plant_modules.templates.models import MergeField, TemplateCategory
        return MergeField(
            id=self.id,
            category=TemplateCategory(self.category),
            field_key=self.field_key,
            field_label=self.field_label,
            description=self.description,
            sample_value=self.sample_value,
            sort_order=self.sort_order,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "MergeFieldModel":
        return cls(
            id=dto.id,
            category=_value(dto.category),
            field_key=dto.field_key,
            field_label=dto.field_label,
            description=dto.description,
            sample_value=dto.sample_value,
            sort_order=dto.sort_order,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<MergeFieldModel {self.category}:{self.field_key}>"
