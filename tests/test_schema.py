"""Unit tests for structural payload checks.

Tests cover:
- Valid payloads producing no errors
- Type mismatches at form, question and option level
- Unknown question kinds
- Invalid custom schemas
"""

import jsonschema
import pytest

from formguard.schema import FORM_SCHEMA, PayloadSchema
from formguard.types import FieldErrorCode


@pytest.fixture
def schema():
    return PayloadSchema()


class TestValidPayloads:
    """Test that well-shaped payloads pass."""

    def test_empty_object(self, schema):
        """Should accept an empty object; absence is a rule concern."""
        assert schema.check({}) == []

    def test_full_payload(self, schema):
        """Should accept a complete payload with nulls where allowed."""
        payload = {
            "title": "Survey",
            "description": None,
            "category": "Course Evaluation",
            "targetAudience": "Students - BSIT 1A",
            "startDate": "2026-03-02T08:00:00Z",
            "endDate": None,
            "isTemplate": False,
            "questions": [
                {"id": "q_1", "kind": "checkbox", "prompt": "Pick", "options": ["A", "B"]},
                {"id": 2, "kind": "linear-scale", "prompt": "Rate", "scale": {"min": 1, "max": 5}},
                {"kind": "linear-scale", "prompt": "Rate", "min": 0, "max": 10},
            ],
        }
        assert schema.check(payload) == []

    def test_fractional_scale_passes_structure(self, schema):
        """Should leave integer checks to the rule layer."""
        assert schema.check_question({"kind": "linear-scale", "min": 1.5, "max": 3}) == []


class TestStructuralErrors:
    """Test translation of jsonschema errors."""

    def test_wrong_title_type(self, schema):
        """Should report INVALID_TYPE with the received type name."""
        errors = schema.check({"title": ["Survey"]})
        assert len(errors) == 1
        assert errors[0].field == "title"
        assert errors[0].code == FieldErrorCode.INVALID_TYPE
        assert errors[0].received == "list"

    def test_nested_option_path(self, schema):
        """Should use bracket paths for list items."""
        payload = {"questions": [{"kind": "rating"}, {"kind": "dropdown", "options": ["A", 7]}]}
        errors = schema.check(payload)
        assert [e.field for e in errors] == ["questions[1].options[1]"]

    def test_unknown_kind(self, schema):
        """Should report an unknown kind as INVALID_VALUE listing valid kinds."""
        errors = schema.check_question({"kind": "matrix"})
        assert errors[0].field == "kind"
        assert errors[0].code == FieldErrorCode.INVALID_VALUE
        assert errors[0].received == "matrix"
        assert None not in errors[0].expected
        assert "linear-scale" in errors[0].expected

    def test_boolean_is_not_a_number(self, schema):
        """Should reject booleans as scale bounds."""
        errors = schema.check_question({"kind": "linear-scale", "min": True, "max": 5})
        assert [e.field for e in errors] == ["scale"]

    def test_scale_bounds_reported_at_scale(self, schema):
        """Should report flat and nested bound type errors at the scale control."""
        flat = schema.check({"questions": [{"kind": "linear-scale", "max": "10"}]})
        nested = schema.check_question({"kind": "linear-scale", "scale": {"min": "0", "max": 10}})
        assert [e.field for e in flat] == ["questions[0].scale"]
        assert "questions[0].max" in flat[0].message
        assert [e.field for e in nested] == ["scale"]

    def test_root_not_object(self, schema):
        """Should report a non-object payload at the root path."""
        errors = schema.check("survey")
        assert [e.field for e in errors] == [""]
        assert "payload" in errors[0].message

    def test_multiple_errors_reported(self, schema):
        """Should report every structural problem at once."""
        errors = schema.check({"title": 1, "category": 2, "questions": {}})
        assert {e.field for e in errors} == {"title", "category", "questions"}


class TestCustomSchemas:
    """Test schema construction."""

    def test_invalid_schema_raises(self):
        """Should raise SchemaError for an invalid schema."""
        with pytest.raises(jsonschema.SchemaError):
            PayloadSchema(form_schema={"type": "not-a-type"})

    def test_custom_schema_applied(self):
        """Should validate against a caller-provided schema."""
        strict = dict(FORM_SCHEMA, additionalProperties=False)
        errors = PayloadSchema(form_schema=strict).check({"title": "T", "colour": "red"})
        assert len(errors) == 1
        assert errors[0].code == FieldErrorCode.INVALID_VALUE

    def test_default_schema_not_shared(self):
        """Should copy the default schema so instances cannot alter it."""
        schema = PayloadSchema()
        schema.form_schema["properties"]["title"] = {"type": "integer"}
        assert FORM_SCHEMA["properties"]["title"] == {"type": ["string", "null"]}
