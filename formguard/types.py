"""Core type definitions for form schemas.

This module defines the fundamental types used throughout formguard:
- QuestionKind: Closed set of question input types
- FieldErrorCode: Error codes attached to each field-level error
- SaveMode: Whether a form is being saved as a draft or published
- ScaleRange, Question, Form: The form schema itself

Data classes serialize to and from the camelCase wire format used by the
form-authoring UI. Parsing is lenient: values of the wrong type are carried
through untouched so the validators can report them instead of crashing.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from typing_extensions import NotRequired, TypedDict


class QuestionKind(str, Enum):
    """Closed set of question kinds.

    Values are the wire strings stored by the feedback system.
    """
    SINGLE_LINE_TEXT = "text"
    MULTI_LINE_TEXT = "textarea"
    SINGLE_CHOICE = "multiple-choice"
    MULTI_CHOICE = "checkbox"
    DROPDOWN_CHOICE = "dropdown"
    STAR_RATING = "rating"
    LINEAR_SCALE = "linear-scale"

    @property
    def is_choice(self) -> bool:
        """Whether this kind presents a list of options."""
        return self in CHOICE_KINDS

    @classmethod
    def parse(cls, value: Any) -> Optional["QuestionKind"]:
        """Return the matching kind, or None for anything unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


CHOICE_KINDS = frozenset({
    QuestionKind.SINGLE_CHOICE,
    QuestionKind.MULTI_CHOICE,
    QuestionKind.DROPDOWN_CHOICE,
})


class FieldErrorCode(str, Enum):
    """Validation error codes for individual field failures."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_VALUE = "invalid_value"
    INVALID_FORMAT = "invalid_format"
    TOO_LONG = "too_long"
    TOO_SHORT = "too_short"
    DUPLICATE = "duplicate"
    OUT_OF_RANGE = "out_of_range"
    INVALID_ORDER = "invalid_order"
    IN_PAST = "in_past"


class SaveMode(str, Enum):
    """How a form is being persisted.

    Drafts relax the completeness requirements (category, audience,
    at least one question) so forms can be authored incrementally.
    """
    DRAFT = "draft"
    PUBLISH = "publish"


class ScalePayload(TypedDict):
    min: NotRequired[Any]
    max: NotRequired[Any]


class QuestionPayload(TypedDict):
    """Wire shape of a question as sent by the authoring UI."""
    id: NotRequired[str]
    kind: NotRequired[str]
    prompt: NotRequired[str]
    description: NotRequired[Optional[str]]
    required: NotRequired[bool]
    options: NotRequired[List[str]]
    scale: NotRequired[ScalePayload]


class FormPayload(TypedDict):
    """Wire shape of a form as sent by the authoring UI."""
    title: NotRequired[str]
    description: NotRequired[Optional[str]]
    category: NotRequired[str]
    targetAudience: NotRequired[str]
    startDate: NotRequired[Optional[str]]
    endDate: NotRequired[Optional[str]]
    imageUrl: NotRequired[Optional[str]]
    isTemplate: NotRequired[bool]
    questions: NotRequired[List[QuestionPayload]]


# Aliases accepted for the prompt text, in lookup order. "question" is what the
# database layer and AI generator emit.
_PROMPT_KEYS = ("prompt", "question", "text")
_KIND_KEYS = ("kind", "type")


def _first_present(data: Dict[str, Any], keys: tuple) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class ScaleRange:
    """Lower and upper bound of a linear-scale question.

    Bounds are left untyped: a payload may carry floats or strings, and
    the validator reports them rather than this class rejecting them.
    """
    min: Any = None
    max: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"min": self.min, "max": self.max}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScaleRange":
        """Create ScaleRange from dict."""
        return cls(min=data.get("min"), max=data.get("max"))


@dataclass(frozen=True)
class Question:
    """A single question of a form.

    Attributes:
        id: Opaque identifier, unique within a form
        kind: Question kind, None when the payload carried no usable kind
        prompt: The question text shown to respondents
        description: Optional helper text
        required: Whether respondents must answer
        options: Choices, only meaningful for choice kinds
        scale: Bounds, only meaningful for linear-scale questions

    Examples:
        >>> q = Question.from_dict({"kind": "rating", "prompt": "How was it?"})
        >>> q.kind
        <QuestionKind.STAR_RATING: 'rating'>
    """
    id: Optional[str] = None
    kind: Optional[QuestionKind] = None
    prompt: Any = ""
    description: Any = None
    required: bool = False
    options: Optional[List[Any]] = None
    scale: Optional[ScaleRange] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "kind": self.kind.value if isinstance(self.kind, QuestionKind) else self.kind,
            "prompt": self.prompt,
            "required": self.required,
        }
        if self.id is not None:
            result["id"] = self.id
        if self.description is not None:
            result["description"] = self.description
        if self.options is not None:
            result["options"] = list(self.options)
        if self.scale is not None:
            result["scale"] = self.scale.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Any, index: Optional[int] = None) -> "Question":
        """Create Question from a wire dict.

        Args:
            data: Question payload; anything other than a dict parses as an
                empty question
            index: Position within the form, used to derive a missing id
        """
        if not isinstance(data, dict):
            data = {}

        question_id = data.get("id")
        if question_id is not None:
            question_id = str(question_id)
        elif index is not None:
            question_id = f"q_{index + 1}"

        scale = None
        raw_scale = data.get("scale")
        if isinstance(raw_scale, dict):
            scale = ScaleRange.from_dict(raw_scale)
        elif "min" in data or "max" in data:
            scale = ScaleRange(min=data.get("min"), max=data.get("max"))

        options = data.get("options")
        if options is not None and not isinstance(options, list):
            options = None

        prompt = _first_present(data, _PROMPT_KEYS)

        return cls(
            id=question_id,
            kind=QuestionKind.parse(_first_present(data, _KIND_KEYS)),
            prompt="" if prompt is None else prompt,
            description=data.get("description"),
            required=bool(data.get("required", False)),
            options=list(options) if options is not None else None,
            scale=scale,
        )


@dataclass(frozen=True)
class Form:
    """A feedback form: metadata plus an ordered list of questions.

    Dates may be ISO-8601 strings (as received from the UI) or datetime
    objects; the validator parses strings on demand.
    """
    title: Any = ""
    description: Any = None
    category: Any = ""
    target_audience: Any = ""
    start_date: Optional[Union[str, datetime]] = None
    end_date: Optional[Union[str, datetime]] = None
    questions: List[Question] = field(default_factory=list)
    image_url: Optional[str] = None
    is_template: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "title": self.title,
            "category": self.category,
            "targetAudience": self.target_audience,
            "questions": [q.to_dict() for q in self.questions],
            "isTemplate": self.is_template,
        }
        if self.description is not None:
            result["description"] = self.description
        for key, value in (("startDate", self.start_date), ("endDate", self.end_date)):
            if value is not None:
                result[key] = value.isoformat() if isinstance(value, datetime) else value
        if self.image_url is not None:
            result["imageUrl"] = self.image_url
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "Form":
        """Create Form from a wire dict.

        Questions missing an id get one derived from their position.
        """
        if not isinstance(data, dict):
            data = {}

        raw_questions = data.get("questions")
        if not isinstance(raw_questions, list):
            raw_questions = []

        return cls(
            title="" if data.get("title") is None else data["title"],
            description=data.get("description"),
            category="" if data.get("category") is None else data["category"],
            target_audience="" if data.get("targetAudience") is None else data["targetAudience"],
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            questions=[Question.from_dict(q, index=i) for i, q in enumerate(raw_questions)],
            image_url=data.get("imageUrl"),
            is_template=bool(data.get("isTemplate", False)),
        )


__all__ = [
    "QuestionKind",
    "CHOICE_KINDS",
    "FieldErrorCode",
    "SaveMode",
    "ScalePayload",
    "QuestionPayload",
    "FormPayload",
    "ScaleRange",
    "Question",
    "Form",
]
