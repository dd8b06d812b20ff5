"""
Tests for the document template service.
"""

from dataclasses import replace
from uuid import uuid4

import pytest

from plant_kernel.exceptions import RecordNotFoundError, RequiredFieldError
from plant_modules.templates.models import (
    DocumentTemplate,
    MergeField,
    TemplateCategory,
    TemplateType,
)
from plant_modules.templates.orm import MergeFieldModel
from plant_modules.templates.service import TEMPLATES_BUCKET, TemplateService

TIMESTAMP_MS = 1705309200000


@pytest.fixture
def template_service(session, deterministic_clock, storage):
    return TemplateService(session, clock=deterministic_clock, storage=storage)


@pytest.fixture
def purchase_fields(session, test_actor_id):
    fields = [
        MergeField(uuid4(), TemplateCategory.PURCHASE, "{{PO_NUMBER}}", "PO number", sample_value="PO-1001", sort_order=1),
        MergeField(uuid4(), TemplateCategory.PURCHASE, "{{SUPPLIER_NAME}}", "Supplier", sample_value="Sweet Co", sort_order=2),
        MergeField(uuid4(), TemplateCategory.PURCHASE, "{{NOTES}}", "Notes", sort_order=3),
        MergeField(uuid4(), TemplateCategory.PURCHASE, "{{OLD_FIELD}}", "Retired", sort_order=4, is_active=False),
        MergeField(uuid4(), TemplateCategory.SALE, "{{ORDER_NUMBER}}", "Order number", sample_value="SO-1"),
    ]
    for field in fields:
        session.add(MergeFieldModel.from_dto(field, created_by_id=test_actor_id))
    session.commit()
    return fields


def _template(name="Purchase order", category=TemplateCategory.PURCHASE, **kwargs):
    return DocumentTemplate(
        id=uuid4(),
        name=name,
        category=category,
        template_type=kwargs.pop("template_type", TemplateType.DOCUMENT),
        **kwargs,
    )


# =============================================================================
# Listing and merge fields
# =============================================================================


class TestQueries:

    def test_list_by_category_and_search(self, template_service, test_actor_id):
        template_service.create_template(
            _template("Purchase order", description="Standard PO"), actor_id=test_actor_id,
        )
        template_service.create_template(_template("Blanket order"), actor_id=test_actor_id)
        template_service.create_template(
            _template("Invoice", category=TemplateCategory.SALE), actor_id=test_actor_id,
        )

        assert [t.name for t in template_service.list_templates("purchase")] == ["Blanket order", "Purchase order"]
        assert [t.name for t in template_service.list_templates(search="standard")] == ["Purchase order"]
        assert len(template_service.list_templates()) == 3

    def test_merge_fields_active_only(self, template_service, purchase_fields):
        keys = [f.field_key for f in template_service.merge_fields(TemplateCategory.PURCHASE)]

        assert keys == ["{{PO_NUMBER}}", "{{SUPPLIER_NAME}}", "{{NOTES}}"]
        assert len(template_service.merge_fields()) == 4

    def test_sample_values(self, template_service, purchase_fields):
        assert template_service.sample_values("purchase") == {
            "{{PO_NUMBER}}": "PO-1001",
            "{{SUPPLIER_NAME}}": "Sweet Co",
        }


# =============================================================================
# Mutations
# =============================================================================


class TestMutations:

    def test_create_normalizes(self, template_service, test_actor_id):
        created = template_service.create_template(
            _template(
                "  PO email  ", template_type="email",
                bcc_addresses=(" buyer@plant.test ", "not-an-email", "buyer@plant.test", "ap@plant.test"),
            ),
            actor_id=test_actor_id,
        )

        assert created.name == "PO email"
        assert created.template_type is TemplateType.EMAIL
        assert created.bcc_addresses == ("buyer@plant.test", "ap@plant.test")

    def test_name_required(self, template_service, test_actor_id):
        with pytest.raises(RequiredFieldError):
            template_service.create_template(_template("   "), actor_id=test_actor_id)

    def test_one_default_per_category(self, template_service, test_actor_id):
        first = template_service.create_template(_template("A", is_default=True), actor_id=test_actor_id)
        second = template_service.create_template(_template("B", is_default=True), actor_id=test_actor_id)
        sale = template_service.create_template(
            _template("C", category=TemplateCategory.SALE, is_default=True), actor_id=test_actor_id,
        )

        defaults = {t.name for t in template_service.list_templates() if t.is_default}
        assert defaults == {"B", "C"}

        template_service.set_default(first.id, actor_id=test_actor_id)

        defaults = {t.id for t in template_service.list_templates() if t.is_default}
        assert defaults == {first.id, sale.id}
        assert second.id not in defaults

    def test_update(self, template_service, test_actor_id):
        template = template_service.create_template(_template(), actor_id=test_actor_id)

        updated = template_service.update_template(
            replace(template, document_html="<p>{{PO_NUMBER}}</p>"), actor_id=test_actor_id,
        )

        assert updated.document_html == "<p>{{PO_NUMBER}}</p>"

    def test_delete(self, template_service, test_actor_id):
        template = template_service.create_template(_template(), actor_id=test_actor_id)

        template_service.delete_template(template.id)

        assert template_service.list_templates() == []
        with pytest.raises(RecordNotFoundError):
            template_service.delete_template(template.id)


# =============================================================================
# Files
# =============================================================================


class TestUpload:

    def test_document_file(self, template_service, storage, test_actor_id):
        template = template_service.create_template(_template(), actor_id=test_actor_id)

        uploaded = template_service.upload_file(
            template.id, "po.docx", b"docx", TemplateType.DOCUMENT, actor_id=test_actor_id,
        )

        assert uploaded.path == f"{template.id}/document-{TIMESTAMP_MS}.docx"
        assert storage.exists(TEMPLATES_BUCKET, uploaded.path)
        stored = template_service.list_templates()[0]
        assert stored.document_file_url == uploaded.url
        assert stored.email_file_url is None

    def test_email_file(self, template_service, test_actor_id):
        template = template_service.create_template(_template(), actor_id=test_actor_id)

        uploaded = template_service.upload_file(
            template.id, "po.html", b"<html>", "email", actor_id=test_actor_id,
        )

        assert template_service.list_templates()[0].email_file_path == uploaded.path

    def test_requires_storage(self, session, test_actor_id):
        service = TemplateService(session)

        with pytest.raises(RuntimeError):
            service.upload_file(uuid4(), "a.pdf", b"x", "document", actor_id=test_actor_id)


# =============================================================================
# Rendering
# =============================================================================


class TestRender:

    def test_document(self, template_service, test_actor_id):
        template = template_service.create_template(
            _template(document_html="<h1>{{PO_NUMBER}}</h1><p>{{ SUPPLIER_NAME }}</p>"),
            actor_id=test_actor_id,
        )

        rendered = template_service.render(
            template.id, {"{{PO_NUMBER}}": "PO-1001", "SUPPLIER_NAME": "Sweet Co"},
        )

        assert rendered.subject is None
        assert rendered.body == "<h1>PO-1001</h1><p>Sweet Co</p>"
        assert rendered.unknown_keys == ()

    def test_email_with_unknown_keys(self, template_service, test_actor_id, captured_logs):
        template = template_service.create_template(
            _template(
                template_type=TemplateType.EMAIL,
                email_subject="PO {{PO_NUMBER}} for {{SUPPLIER_NAME}}",
                email_html="<p>Ship to {{SHIP_TO}} by {{DUE_DATE}}. {{SUPPLIER_NAME}}</p>",
                bcc_addresses=("ap@plant.test",),
            ),
            actor_id=test_actor_id,
        )

        rendered = template_service.render(template.id, {"PO_NUMBER": "PO-1001", "DUE_DATE": None})

        assert rendered.subject == "PO PO-1001 for {{SUPPLIER_NAME}}"
        assert rendered.body == "<p>Ship to {{SHIP_TO}} by . {{SUPPLIER_NAME}}</p>"
        assert rendered.unknown_keys == ("SUPPLIER_NAME", "SHIP_TO")
        assert rendered.bcc_addresses == ("ap@plant.test",)
        warnings = [r for r in captured_logs() if r["message"] == "document_template_unknown_merge_fields"]
        assert warnings[0]["unknown_keys"] == ["SUPPLIER_NAME", "SHIP_TO"]

    def test_missing_template(self, template_service):
        with pytest.raises(RecordNotFoundError):
            template_service.render(uuid4(), {})
