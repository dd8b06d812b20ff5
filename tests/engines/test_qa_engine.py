"""
Tests for QA result evaluation, test codes and evidence paths.

Covers:
- Automatic pass/fail against min, max or both (inclusive)
- Manual verdicts kept for pass/fail, text and unbounded values
- Corrective action rule
- Sequential test codes per category
- Evidence path and URL helpers
"""

from decimal import Decimal

import pytest

from plant_engines.qa import (
    ParameterType,
    QAEvaluation,
    QATestCategory,
    document_path,
    evaluate_result,
    file_name_from_url,
    is_image_url,
    is_pdf_url,
    next_test_code,
    photo_path,
    requires_corrective_action,
)


class TestEvaluateResult:
    """Tests for automatic judgement of measured values."""

    @pytest.mark.parametrize(
        "value,passed",
        [
            (Decimal("4.0"), True),
            (Decimal("4.6"), True),
            (Decimal("5.2"), True),
            (Decimal("3.99"), False),
            (Decimal("5.21"), False),
        ],
    )
    def test_range_inclusive(self, value, passed):
        result = evaluate_result(
            ParameterType.RANGE, value,
            min_value=Decimal("4.0"), max_value=Decimal("5.2"),
        )

        assert result.passed is passed
        assert result.out_of_spec is (not passed)

    def test_minimum_only(self):
        assert evaluate_result("numeric", Decimal("10"), min_value=Decimal("12")).passed is False
        assert evaluate_result("numeric", Decimal("12"), min_value=Decimal("12")).passed is True

    def test_maximum_only(self):
        result = evaluate_result("numeric", Decimal("11"), max_value=Decimal("10"))

        assert result == QAEvaluation(passed=False, out_of_spec=True)

    def test_no_bounds_keeps_manual_verdict(self):
        result = evaluate_result("numeric", Decimal("11"), passed=True)

        assert result == QAEvaluation(passed=True, out_of_spec=False)

    def test_no_value_keeps_manual_verdict(self):
        result = evaluate_result(
            "range", None, min_value=Decimal("1"), max_value=Decimal("2"), passed=None,
        )

        assert result.passed is None

    def test_pass_fail_not_judged(self):
        result = evaluate_result(
            ParameterType.PASS_FAIL, Decimal("100"),
            max_value=Decimal("1"), passed=True,
        )

        assert result.passed is True
        assert result.out_of_spec is False


class TestCorrectiveAction:

    @pytest.mark.parametrize(
        "evaluation,required",
        [
            (QAEvaluation(passed=True, out_of_spec=False), False),
            (QAEvaluation(passed=None, out_of_spec=False), False),
            (QAEvaluation(passed=False, out_of_spec=False), True),
            (QAEvaluation(passed=True, out_of_spec=True), True),
        ],
    )
    def test_required_on_failure(self, evaluation, required):
        assert requires_corrective_action(evaluation) is required


class TestTestCodes:

    def test_first_code(self):
        assert next_test_code(QATestCategory.MICROBIOLOGICAL, None) == "MIC-0001"

    def test_increments_last(self):
        assert next_test_code("physical", "PHY-0041") == "PHY-0042"

    def test_unparseable_last_restarts(self):
        assert next_test_code("sensory", "SEN-legacy") == "SEN-0001"

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            next_test_code("visual", None)


class TestEvidencePaths:

    def test_photo_path(self):
        path = photo_path("lot-1", "test-1", "IMG_001.JPG", 1705309200000, "a1b2c3")

        assert path == "lot-1/test-1/photos/1705309200000-a1b2c3.JPG"

    def test_document_path_sanitizes_name(self):
        path = document_path("lot-1", "test-1", "COA report (v2).pdf", 1705309200000)

        assert path == "lot-1/test-1/documents/1705309200000-COA_report__v2_.pdf"

    def test_file_name_strips_upload_prefix(self):
        url = "https://files.test/qa-test-evidence/lot-1/test-1/documents/1705309200000-COA.pdf"

        assert file_name_from_url(url) == "COA.pdf"
        assert file_name_from_url("https://files.test/plain.pdf") == "plain.pdf"

    def test_url_kinds(self):
        assert is_image_url("https://x/a/123-abc.PNG")
        assert not is_image_url("https://x/a/123-coa.pdf")
        assert is_pdf_url("https://x/a/123-coa.PDF")
