"""
Quality Module Service (``plant_modules.quality.service``).

Responsibility
--------------
The QA test catalogue (templates with sequential codes per category) and the
lot QA workflow: the pending-lot queue, recording and updating results,
verification and evidence files.

Architecture position
---------------------
**Modules layer** -- pass/fail evaluation, test code sequencing and evidence
paths come from ``plant_engines.qa``; files go through the kernel
``FileStorage`` protocol.

Invariants enforced
-------------------
* Numeric and range results are evaluated against their limits; the stored
  ``passed`` / ``out_of_spec`` never come from the tester for those types.
* A pass/fail result must state passed or failed.
* A failed or out-of-spec result must carry a corrective action.
* Evidence URLs are removed from the test only after the file is deleted.

Failure modes
-------------
* ``RequiredFieldError`` -- pass/fail result without a verdict, or blank
  test name / code.
* ``CorrectiveActionRequiredError`` -- failed result with no action.
* ``DuplicateRecordError`` -- test code already in use.
* ``RecordNotFoundError`` -- unknown template, test or lot.
* ``FileUploadError`` / ``FileDeleteError`` / ``InvalidFileUrlError`` from
  storage.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from plant_engines.qa import (
    QA_EVIDENCE_BUCKET,
    ParameterType,
    ProductionStage,
    QATestCategory,
    code_prefix,
    document_path,
    evaluate_result,
    next_test_code,
    photo_path,
    requires_corrective_action,
)
from plant_kernel.domain.clock import Clock, SystemClock
from plant_kernel.exceptions import (
    CorrectiveActionRequiredError,
    DuplicateRecordError,
    RecordNotFoundError,
    RequiredFieldError,
)
from plant_kernel.logging_config import get_logger
from plant_kernel.storage import FileStorage, path_from_url
from plant_modules.manufacturing.orm import ProductionLotModel
from plant_modules.quality.models import (
    LotQATest,
    PendingQALot,
    ProductQARequirement,
    QATestInput,
    QATestTemplate,
    QATestTemplateFilter,
)
from plant_modules.quality.orm import (
    LotQATestModel,
    ProductQARequirementModel,
    QATestTemplateModel,
)

logger = get_logger("modules.quality.service")


class QualityService:
    """
    QA templates, lot tests and evidence.

    ``storage`` is only needed for evidence upload and delete.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        storage: FileStorage | None = None,
        evidence_bucket: str = QA_EVIDENCE_BUCKET,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._storage = storage
        self._bucket = evidence_bucket

    # =========================================================================
    # Test templates
    # =========================================================================

    def list_templates(self, filters: QATestTemplateFilter | None = None) -> list[QATestTemplate]:
        filters = filters or QATestTemplateFilter()
        query = self._session.query(QATestTemplateModel)
        if filters.category is not None:
            query = query.filter(QATestTemplateModel.category == QATestCategory(filters.category).value)
        if filters.is_active is not None:
            query = query.filter(QATestTemplateModel.is_active == filters.is_active)
        if filters.is_critical is not None:
            query = query.filter(QATestTemplateModel.is_critical == filters.is_critical)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.filter(or_(
                QATestTemplateModel.test_name.ilike(pattern),
                QATestTemplateModel.test_code.ilike(pattern),
            ))
        rows = query.order_by(QATestTemplateModel.sort_order, QATestTemplateModel.test_name).all()

        templates = [row.to_dto() for row in rows]
        # JSON containment is not portable across backends; filter stage here.
        if filters.stage is not None:
            templates = [t for t in templates if t.applies_to(filters.stage)]
        return templates

    def get_template(self, template_id: UUID) -> QATestTemplate:
        return self._get_template(template_id).to_dto()

    def create_template(self, template: QATestTemplate, actor_id: UUID) -> QATestTemplate:
        self._check_template(template)
        logger.info("qa_template_create_started", extra={"test_code": template.test_code})
        try:
            self._ensure_code_free(template.test_code)
            self._session.add(QATestTemplateModel.from_dto(template, created_by_id=actor_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_template_created", extra={
            "template_id": str(template.id),
            "test_code": template.test_code,
        })
        return template

    def update_template(self, template: QATestTemplate, actor_id: UUID) -> QATestTemplate:
        self._check_template(template)
        try:
            row = self._get_template(template.id)
            if row.test_code != template.test_code:
                self._ensure_code_free(template.test_code)
            row.apply(template)
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_template_updated", extra={"template_id": str(template.id)})
        return template

    def delete_template(self, template_id: UUID) -> None:
        try:
            self._session.delete(self._get_template(template_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_template_deleted", extra={"template_id": str(template_id)})

    def generate_test_code(self, category: QATestCategory | str) -> str:
        """Next ``XXX-NNNN`` code for a category."""
        last = (
            self._session.query(QATestTemplateModel.test_code)
            .filter(QATestTemplateModel.test_code.ilike(f"{code_prefix(category)}-%"))
            .order_by(QATestTemplateModel.test_code.desc())
            .limit(1)
            .scalar()
        )
        return next_test_code(category, last)

    def _get_template(self, template_id: UUID) -> QATestTemplateModel:
        row = self._session.get(QATestTemplateModel, template_id)
        if row is None:
            raise RecordNotFoundError("quality_test_templates", str(template_id))
        return row

    def _ensure_code_free(self, test_code: str) -> None:
        taken = (
            self._session.query(QATestTemplateModel.id)
            .filter(QATestTemplateModel.test_code == test_code)
            .first()
        )
        if taken is not None:
            raise DuplicateRecordError("quality_test_templates", test_code)

    @staticmethod
    def _check_template(template: QATestTemplate) -> None:
        if not template.test_name or not template.test_name.strip():
            raise RequiredFieldError("test_name")
        if not template.test_code or not template.test_code.strip():
            raise RequiredFieldError("test_code")

    # =========================================================================
    # Requirements and the pending queue
    # =========================================================================

    def required_tests(self, product_id: UUID | None) -> list[ProductQARequirement]:
        if product_id is None:
            return []
        rows = (
            self._session.query(ProductQARequirementModel)
            .filter(ProductQARequirementModel.product_id == product_id)
            .all()
        )
        return [row.to_dto() for row in rows]

    def add_requirement(self, requirement: ProductQARequirement, actor_id: UUID) -> ProductQARequirement:
        if not requirement.parameter_name:
            raise RequiredFieldError("parameter_name")
        try:
            self._session.add(ProductQARequirementModel.from_dto(requirement, created_by_id=actor_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_requirement_added", extra={
            "requirement_id": str(requirement.id),
            "product_id": str(requirement.product_id),
        })
        return requirement

    def pending_lots(
        self,
        production_date: date | None = None,
        stage: ProductionStage | str | None = None,
        approval_status: str | None = None,
    ) -> list[PendingQALot]:
        """Production lots for the QA queue, newest first, with test counts."""
        query = self._session.query(ProductionLotModel)
        if production_date is not None:
            query = query.filter(ProductionLotModel.production_date == production_date)
        if stage is not None:
            query = query.filter(ProductionLotModel.production_stage == ProductionStage(stage).value)
        if approval_status is not None:
            query = query.filter(ProductionLotModel.approval_status == approval_status)
        lots = query.order_by(
            ProductionLotModel.production_date.desc(),
            ProductionLotModel.created_at.desc(),
        ).all()
        if not lots:
            return []

        test_counts = dict(
            self._session.query(LotQATestModel.production_lot_id, func.count(LotQATestModel.id))
            .filter(LotQATestModel.production_lot_id.in_([lot.id for lot in lots]))
            .group_by(LotQATestModel.production_lot_id)
            .all()
        )
        required_counts = dict(
            self._session.query(ProductQARequirementModel.product_id, func.count(ProductQARequirementModel.id))
            .filter(ProductQARequirementModel.product_id.in_(list({lot.product_id for lot in lots})))
            .group_by(ProductQARequirementModel.product_id)
            .all()
        )

        return [
            PendingQALot(
                id=lot.id,
                lot_number=lot.lot_number,
                production_date=lot.production_date,
                production_stage=lot.production_stage,
                approval_status=lot.approval_status,
                quantity_produced=lot.quantity_produced,
                product_id=lot.product_id,
                product_name=lot.product.name if lot.product else None,
                product_sku=lot.product.sku if lot.product else None,
                machine_name=lot.machine.name if lot.machine else None,
                qa_tests_count=test_counts.get(lot.id, 0),
                required_tests_count=required_counts.get(lot.product_id, 0),
            )
            for lot in lots
        ]

    # =========================================================================
    # Lot tests
    # =========================================================================

    def list_lot_tests(self, production_lot_id: UUID | None) -> list[LotQATest]:
        if production_lot_id is None:
            return []
        rows = (
            self._session.query(LotQATestModel)
            .filter(LotQATestModel.production_lot_id == production_lot_id)
            .order_by(LotQATestModel.tested_at.desc())
            .all()
        )
        return [row.to_dto() for row in rows]

    def record_test(self, production_lot_id: UUID, data: QATestInput, actor_id: UUID) -> LotQATest:
        """Evaluate and store a new result against a production lot."""
        evaluation = self._evaluate(data)
        logger.info("qa_test_record_started", extra={
            "production_lot_id": str(production_lot_id),
            "test_name": data.test_name,
        })
        try:
            if self._session.get(ProductionLotModel, production_lot_id) is None:
                raise RecordNotFoundError("production_lots", str(production_lot_id))
            row = LotQATestModel(
                id=uuid4(),
                production_lot_id=production_lot_id,
                tested_at=self._clock.now(),
                tested_by=actor_id,
                photo_urls=[],
                document_urls=[],
                created_by_id=actor_id,
            )
            row.apply_input(data, evaluation.passed, evaluation.out_of_spec)
            self._session.add(row)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_test_recorded", extra={
            "test_id": str(row.id),
            "production_lot_id": str(production_lot_id),
            "passed": evaluation.passed,
            "out_of_spec": evaluation.out_of_spec,
        })
        return row.to_dto()

    def update_test(self, test_id: UUID, data: QATestInput, actor_id: UUID) -> LotQATest:
        evaluation = self._evaluate(data)
        try:
            row = self._get_test(test_id)
            row.apply_input(data, evaluation.passed, evaluation.out_of_spec)
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_test_updated", extra={
            "test_id": str(test_id),
            "passed": evaluation.passed,
            "out_of_spec": evaluation.out_of_spec,
        })
        return row.to_dto()

    def delete_test(self, test_id: UUID) -> None:
        try:
            self._session.delete(self._get_test(test_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_test_deleted", extra={"test_id": str(test_id)})

    def verify_test(self, test_id: UUID, actor_id: UUID) -> LotQATest:
        return self.bulk_verify([test_id], actor_id)[0]

    def bulk_verify(self, test_ids: list[UUID], actor_id: UUID) -> list[LotQATest]:
        """Mark tests verified by ``actor_id``; all or nothing."""
        verified_at = self._clock.now()
        try:
            rows = [self._get_test(test_id) for test_id in test_ids]
            for row in rows:
                row.verified_by = actor_id
                row.verified_at = verified_at
                row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_tests_verified", extra={
            "test_count": len(rows),
            "verified_by": str(actor_id),
        })
        return [row.to_dto() for row in rows]

    def _evaluate(self, data: QATestInput):
        if not data.test_name:
            raise RequiredFieldError("test_name")
        parameter_type = ParameterType(data.parameter_type)
        if parameter_type is ParameterType.PASS_FAIL and data.passed is None:
            raise RequiredFieldError("passed")

        evaluation = evaluate_result(
            parameter_type,
            data.test_value_numeric,
            min_value=data.min_value,
            max_value=data.max_value,
            passed=data.passed,
            out_of_spec=data.out_of_spec,
        )
        if requires_corrective_action(evaluation) and not (data.corrective_action or "").strip():
            raise CorrectiveActionRequiredError(data.test_name)
        return evaluation

    def _get_test(self, test_id: UUID) -> LotQATestModel:
        row = self._session.get(LotQATestModel, test_id)
        if row is None:
            raise RecordNotFoundError("production_lot_qa_tests", str(test_id))
        return row

    # =========================================================================
    # Evidence
    # =========================================================================

    def upload_photo(self, test_id: UUID, file_name: str, content: bytes) -> str:
        row = self._get_test(test_id)
        path = photo_path(
            str(row.production_lot_id), str(test_id), file_name,
            self._timestamp_ms(), uuid4().hex[:6],
        )
        url = self._upload(path, content)
        return self._attach(row, "photo_urls", url)

    def upload_document(self, test_id: UUID, file_name: str, content: bytes) -> str:
        row = self._get_test(test_id)
        path = document_path(str(row.production_lot_id), str(test_id), file_name, self._timestamp_ms())
        url = self._upload(path, content)
        return self._attach(row, "document_urls", url)

    def delete_evidence(self, test_id: UUID, url: str) -> None:
        """Remove an evidence file and drop its URL from the test."""
        row = self._get_test(test_id)
        self._require_storage().remove(self._bucket, [path_from_url(self._bucket, url)])
        try:
            row.photo_urls = [u for u in row.photo_urls or [] if u != url]
            row.document_urls = [u for u in row.document_urls or [] if u != url]
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_evidence_deleted", extra={"test_id": str(test_id), "url": url})

    def _upload(self, path: str, content: bytes) -> str:
        storage = self._require_storage()
        storage.upload(self._bucket, path, content)
        return storage.public_url(self._bucket, path)

    def _attach(self, row: LotQATestModel, column: str, url: str) -> str:
        try:
            setattr(row, column, [*(getattr(row, column) or []), url])
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("qa_evidence_uploaded", extra={
            "test_id": str(row.id),
            "kind": column,
            "url": url,
        })
        return url

    def _require_storage(self) -> FileStorage:
        if self._storage is None:
            raise RuntimeError("QualityService was created without file storage")
        return self._storage

    def _timestamp_ms(self) -> int:
        return int(self._clock.now().timestamp() * 1000)
