"""Document and email templates with merge fields."""

from plant_modules.templates.models import (
    DocumentTemplate,
    MergeField,
    RenderedTemplate,
    TemplateCategory,
    TemplateType,
    UploadedTemplateFile,
)

__all__ = [
    "DocumentTemplate",
    "MergeField",
    "RenderedTemplate",
    "TemplateCategory",
    "TemplateType",
    "UploadedTemplateFile",
]
