"""Structured error types for form validation.

Validation never raises: every rule appends a FieldError to a list and the
caller inspects the list. A FieldError names the exact sub-field it applies to
with a field path such as ``questions[2].options[0]``, so an authoring UI can
attach the message to the matching control.

Field path grammar:
    path    := segment ( "." name | "[" index "]" )*
    segment := name | "[" index "]"

The helpers in this module are the only place paths are built, which keeps the
grammar identical for rule errors and structural (JSON Schema) errors.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Union

from formguard.types import FieldErrorCode, SaveMode

PathPart = Union[str, int]


def join_path(*parts: PathPart) -> str:
    """Build a field path from names and list indexes.

    Examples:
        >>> join_path("questions", 2, "options", 0)
        'questions[2].options[0]'
        >>> join_path()
        ''
    """
    path = ""
    for part in parts:
        if isinstance(part, int) and not isinstance(part, bool):
            path += f"[{part}]"
        elif part == "":
            continue
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path


def is_within(field_path: str, ancestor: str) -> bool:
    """Whether ``field_path`` is ``ancestor`` or nested below it.

    The empty path is the root and contains everything.
    """
    if not ancestor or field_path == ancestor:
        return True
    return field_path.startswith(ancestor + ".") or field_path.startswith(ancestor + "[")


@dataclass(frozen=True)
class FieldError:
    """A single field validation failure.

    Attributes:
        field: Field path the error applies to (e.g., "questions[0].prompt")
        code: Specific validation error code
        message: Human-readable error description
        expected: Optional - what was expected (limit, type, format)
        received: Optional - what was actually received

    Examples:
        >>> err = FieldError(
        ...     field="title",
        ...     code=FieldErrorCode.REQUIRED,
        ...     message="Form title is required",
        ... )
        >>> err.to_dict()
        {'field': 'title', 'code': 'required', 'message': 'Form title is required'}
    """
    field: str
    code: FieldErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    def with_prefix(self, *parts: PathPart) -> "FieldError":
        """Return a copy whose field path is nested under ``parts``."""
        return replace(self, field=join_path(*parts, self.field))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "field": self.field,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = FieldErrorCode(code)
        return cls(
            field=data["field"],
            code=code,
            message=data["message"],
            expected=data.get("expected"),
            received=data.get("received"),
        )


def prefix_errors(errors: Iterable[FieldError], *parts: PathPart) -> List[FieldError]:
    """Nest every error's field path under ``parts``."""
    return [error.with_prefix(*parts) for error in errors]


@dataclass(frozen=True)
class RejectedForm:
    """Envelope returned when a form fails validation for the requested mode.

    Attributes:
        mode: Whether the form was being saved as a draft or published
        errors: Every problem found, in validation order
        message: Summary suitable for a toast or log line
    """
    mode: SaveMode
    errors: List[FieldError]
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Always returns False - this is an error response."""
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "ok": False,
            "mode": self.mode.value if isinstance(self.mode, SaveMode) else self.mode,
            "errors": [e.to_dict() for e in self.errors],
        }
        if self.message is not None:
            result["message"] = self.message
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RejectedForm":
        """Create RejectedForm from dict."""
        mode = data["mode"]
        if isinstance(mode, str):
            mode = SaveMode(mode)
        return cls(
            mode=mode,
            errors=[FieldError.from_dict(e) for e in data.get("errors", [])],
            message=data.get("message"),
        )


__all__ = [
    "PathPart",
    "join_path",
    "is_within",
    "FieldError",
    "prefix_errors",
    "RejectedForm",
]
