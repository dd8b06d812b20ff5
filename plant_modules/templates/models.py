"""
Templates Domain Models (``plant_modules.templates.models``).

Document and email templates with ``{{FIELD}}`` merge placeholders, and the
merge field catalogue per category.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class TemplateCategory(str, Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    INVENTORY = "inventory"
    PRODUCTION = "production"
    CRM = "crm"
    FINANCIAL = "financial"


class TemplateType(str, Enum):
    DOCUMENT = "document"
    EMAIL = "email"


@dataclass(frozen=True)
class DocumentTemplate:
    id: UUID
    name: str
    category: TemplateCategory
    template_type: TemplateType
    description: str | None = None
    document_html: str | None = None
    document_file_path: str | None = None
    document_file_url: str | None = None
    email_subject: str | None = None
    email_html: str | None = None
    email_file_path: str | None = None
    email_file_url: str | None = None
    send_to_primary_contact: bool = True
    send_to_all_contacts: bool = False
    bcc_addresses: tuple[str, ...] = ()
    is_default: bool = False
    is_active: bool = True
    sort_order: int = 0

    def matches(self, query: str) -> bool:
        """Case-insensitive match on name or description."""
        needle = query.lower()
        return needle in self.name.lower() or needle in (self.description or "").lower()


@dataclass(frozen=True)
class MergeField:
    id: UUID
    category: TemplateCategory
    field_key: str
    field_label: str
    description: str | None = None
    sample_value: str | None = None
    sort_order: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class UploadedTemplateFile:
    template_id: UUID
    file_type: TemplateType
    path: str
    url: str


@dataclass(frozen=True)
class RenderedTemplate:
    template_id: UUID
    subject: str | None
    body: str
    bcc_addresses: tuple[str, ...]
    unknown_keys: tuple[str, ...]
