"""JSON Schema structural checks for raw form payloads.

Payloads arrive from the authoring UI or the AI question generator as
JSON-decoded dicts. Before they are parsed into Form/Question objects, this
module checks their *shape* (types and the closed set of question kinds)
against a Draft 7 JSON Schema and translates each jsonschema error into a
FieldError with the same field path grammar the rule validators use.

The schema deliberately has no ``required`` keywords: absence and blankness
are business rules owned by formguard.validation, which words them the way the
authoring UI expects ("Form title is required" rather than a schema message).
"""

import copy
import logging
from typing import Any, Dict, List, Optional

import jsonschema
from jsonschema import Draft7Validator

from formguard.errors import FieldError, join_path
from formguard.types import FieldErrorCode, QuestionKind

logger = logging.getLogger(__name__)

_NULLABLE_STRING = {"type": ["string", "null"]}
_NULLABLE_NUMBER = {"type": ["number", "null"]}
_KIND = {"enum": [k.value for k in QuestionKind] + [None]}

QUESTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": ["string", "integer", "null"]},
        "kind": _KIND,
        "prompt": _NULLABLE_STRING,
        "description": _NULLABLE_STRING,
        "required": {"type": ["boolean", "null"]},
        "options": {
            "type": ["array", "null"],
            "items": _NULLABLE_STRING,
        },
        "min": _NULLABLE_NUMBER,
        "max": _NULLABLE_NUMBER,
        "scale": {
            "type": ["object", "null"],
            "properties": {
                "min": _NULLABLE_NUMBER,
                "max": _NULLABLE_NUMBER,
            },
        },
    },
}

FORM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": _NULLABLE_STRING,
        "description": _NULLABLE_STRING,
        "category": _NULLABLE_STRING,
        "targetAudience": _NULLABLE_STRING,
        "startDate": _NULLABLE_STRING,
        "endDate": _NULLABLE_STRING,
        "imageUrl": _NULLABLE_STRING,
        "isTemplate": {"type": ["boolean", "null"]},
        "questions": {
            "type": ["array", "null"],
            "items": QUESTION_SCHEMA,
        },
    },
}


def _control_path(parts: List[Any]) -> str:
    """Field path of the UI control a schema error belongs to.

    Scale bounds, whether sent flat (``min``) or nested (``scale.min``), are
    edited through one control and reported at ``scale`` like the rule errors.
    """
    if parts and parts[-1] in ("min", "max"):
        parts = parts[:-1]
        if not parts or parts[-1] != "scale":
            parts.append("scale")
    return join_path(*parts)


class PayloadSchema:
    """Structural checker for form and question payloads.

    Wraps jsonschema and translates its errors into FieldError objects.

    Attributes:
        form_schema: JSON Schema applied to whole-form payloads
        question_schema: JSON Schema applied to standalone question payloads

    Examples:
        >>> schema = PayloadSchema()
        >>> schema.check({"title": "Survey", "questions": []})
        []
        >>> [e.field for e in schema.check({"title": 5})]
        ['title']
    """

    def __init__(
        self,
        form_schema: Optional[Dict[str, Any]] = None,
        question_schema: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize with the default or custom schemas.

        Raises:
            jsonschema.SchemaError: If a provided schema is invalid
        """
        self.form_schema = copy.deepcopy(form_schema or FORM_SCHEMA)
        self.question_schema = copy.deepcopy(question_schema or QUESTION_SCHEMA)
        Draft7Validator.check_schema(self.form_schema)
        Draft7Validator.check_schema(self.question_schema)
        self._form_validator = Draft7Validator(self.form_schema)
        self._question_validator = Draft7Validator(self.question_schema)

    def check(self, payload: Any) -> List[FieldError]:
        """Check a whole-form payload and return its structural errors."""
        return self._run(self._form_validator, payload)

    def check_question(self, payload: Any) -> List[FieldError]:
        """Check a single question payload."""
        return self._run(self._question_validator, payload)

    def _run(self, validator: Draft7Validator, payload: Any) -> List[FieldError]:
        field_errors = [self._translate_error(error) for error in validator.iter_errors(payload)]
        if field_errors:
            logger.debug("Payload failed structural check with %d error(s)", len(field_errors))
        return field_errors

    def _translate_error(self, error: jsonschema.ValidationError) -> FieldError:
        """Translate a jsonschema ValidationError to a FieldError.

        Error mapping:
            - 'type' errors -> INVALID_TYPE
            - 'enum' or 'const' errors -> INVALID_VALUE
            - Other errors -> INVALID_VALUE with the jsonschema message
        """
        label = join_path(*error.absolute_path) or "payload"
        path = _control_path(list(error.absolute_path))

        if error.validator == "type":
            expected_type = error.validator_value
            received_type = type(error.instance).__name__
            return FieldError(
                field=path,
                code=FieldErrorCode.INVALID_TYPE,
                message=f"Field '{label}' has invalid type. Expected {expected_type}, got {received_type}",
                expected=expected_type,
                received=received_type,
            )

        if error.validator in ("enum", "const"):
            expected_values = error.validator_value
            if error.validator == "enum":
                expected_values = [v for v in expected_values if v is not None]
            return FieldError(
                field=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{label}' has invalid value. Must be one of: {expected_values}",
                expected=expected_values,
                received=error.instance,
            )

        return FieldError(
            field=path,
            code=FieldErrorCode.INVALID_VALUE,
            message=f"Field '{label}' validation failed: {error.message}",
            expected=error.validator_value,
            received=error.instance,
        )


__all__ = [
    "QUESTION_SCHEMA",
    "FORM_SCHEMA",
    "PayloadSchema",
]
