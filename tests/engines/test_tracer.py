"""
Tests for the engine tracer.

Covers:
- Deterministic input fingerprints over selected kwargs
- PLANT_ENGINE_TRACE log record fields
- Positional and keyword calls fingerprint alike
- The decorated function's result passes through unchanged
"""

from decimal import Decimal

from plant_engines.tracer import compute_input_fingerprint, traced_engine


@traced_engine("sample", "2.1", fingerprint_fields=("amount",))
def _double(amount=Decimal("0")):
    return amount * 2


class TestFingerprint:

    def test_deterministic(self):
        first = compute_input_fingerprint(("a", "b"), {"a": Decimal("1.5"), "b": [1, 2]})
        second = compute_input_fingerprint(("a", "b"), {"b": [1, 2], "a": Decimal("1.5")})

        assert first == second
        assert len(first) == 16

    def test_differs_on_value(self):
        assert compute_input_fingerprint(("a",), {"a": 1}) != compute_input_fingerprint(("a",), {"a": 2})

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(("a",), {"a": None})

    def test_dict_order_irrelevant(self):
        assert compute_input_fingerprint(("d",), {"d": {"x": 1, "y": 2}}) == (
            compute_input_fingerprint(("d",), {"d": {"y": 2, "x": 1}})
        )


class TestTracedEngine:

    def test_result_passthrough(self):
        assert _double(amount=Decimal("2.5")) == Decimal("5.0")

    def test_emits_trace(self, captured_logs):
        _double(amount=Decimal("3"))

        traces = [r for r in captured_logs() if r["message"] == "PLANT_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["input_fingerprint"] == compute_input_fingerprint(
            ("amount",), {"amount": Decimal("3")},
        )
        assert trace["duration_ms"] >= 0

    def test_positional_and_keyword_calls_match(self, captured_logs):
        _double(Decimal("3"))
        _double(amount=Decimal("3"))

        traces = [r for r in captured_logs() if r["message"] == "PLANT_ENGINE_TRACE"]
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]

    def test_omitted_argument_uses_default(self, captured_logs):
        _double()

        trace = [r for r in captured_logs() if r["message"] == "PLANT_ENGINE_TRACE"][0]
        assert trace["input_fingerprint"] == compute_input_fingerprint(
            ("amount",), {"amount": Decimal("0")},
        )

    def test_wraps_preserves_name(self):
        assert _double.__name__ == "_double"
