"""Rule-based validation of forms and questions.

This module provides the question validator, the form validator, and a
FormValidator that binds a clock and validation limits for repeated use.

Every rule runs independently and appends to an error list; nothing
short-circuits, so a caller sees every problem in one round-trip. The returned
list is empty exactly when the input is valid for the requested mode.
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from dateutil import parser as date_parser
from dateutil import tz

from formguard.config import DEFAULT_LIMITS, ValidationLimits
from formguard.errors import FieldError, is_within, join_path, prefix_errors
from formguard.schema import PayloadSchema
from formguard.types import (
    FieldErrorCode,
    Form,
    FormPayload,
    Question,
    QuestionKind,
    QuestionPayload,
    SaveMode,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
"""Callable returning the current time; naive results are read as UTC."""


def utc_now() -> datetime:
    """Default clock: the current time in UTC."""
    return datetime.now(tz.UTC)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_unset(value: Any) -> bool:
    # The authoring UI sends "" for an unscheduled date.
    return value is None or (isinstance(value, str) and not value.strip())


def _too_long(value: Any, limit: int) -> bool:
    return isinstance(value, str) and len(value) > limit


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    # JSON has a single number type, so 5.0 counts as an integer
    return isinstance(value, float) and value.is_integer()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz.UTC)
    return value


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or pass a datetime through, normalized to UTC.

    Returns None when the value cannot be read as a timestamp.
    """
    if isinstance(value, datetime):
        return _as_utc(value)
    if not isinstance(value, str):
        return None
    try:
        return _as_utc(date_parser.isoparse(value.strip()))
    except (ValueError, OverflowError):
        return None


def _validate_options(question: Question, limits: ValidationLimits) -> List[FieldError]:
    errors: List[FieldError] = []
    options = question.options

    if not options or len(options) < limits.min_options:
        errors.append(FieldError(
            field="options",
            code=FieldErrorCode.TOO_SHORT,
            message=f"Must have at least {limits.min_options} options",
            expected=f"at least {limits.min_options} options",
            received=len(options) if options else 0,
        ))
        return errors

    for index, option in enumerate(options):
        if _is_blank(option):
            errors.append(FieldError(
                field=join_path("options", index),
                code=FieldErrorCode.REQUIRED,
                message=f"Option {index + 1} cannot be empty",
            ))
        elif _too_long(option, limits.option_max_length):
            errors.append(FieldError(
                field=join_path("options", index),
                code=FieldErrorCode.TOO_LONG,
                message=(
                    f"Option {index + 1} must be at most "
                    f"{limits.option_max_length} characters"
                ),
                expected=f"maximum {limits.option_max_length} characters",
                received=f"{len(option)} characters",
            ))

    normalized = [o.strip().lower() if isinstance(o, str) else "" for o in options]
    if len(set(normalized)) != len(normalized):
        errors.append(FieldError(
            field="options",
            code=FieldErrorCode.DUPLICATE,
            message="Options must be unique (case-insensitive)",
        ))

    return errors


def _validate_scale(question: Question, limits: ValidationLimits) -> List[FieldError]:
    errors: List[FieldError] = []
    scale = question.scale
    low = scale.min if scale is not None else None
    high = scale.max if scale is not None else None

    if low is None or high is None:
        errors.append(FieldError(
            field="scale",
            code=FieldErrorCode.REQUIRED,
            message="Must have min and max values",
        ))

    present = [v for v in (low, high) if v is not None]
    if any(not _is_integer(v) for v in present):
        errors.append(FieldError(
            field="scale",
            code=FieldErrorCode.INVALID_TYPE,
            message="Min and max values must be integers",
            expected="integer",
            received={"min": low, "max": high},
        ))

    if _is_number(low) and _is_number(high) and low >= high:
        errors.append(FieldError(
            field="scale",
            code=FieldErrorCode.INVALID_ORDER,
            message="Min value must be less than max value",
            received={"min": low, "max": high},
        ))

    if (_is_number(low) and low < limits.scale_floor) or (
        _is_number(high) and high > limits.scale_ceiling
    ):
        errors.append(FieldError(
            field="scale",
            code=FieldErrorCode.OUT_OF_RANGE,
            message=(
                f"Linear scale values must be between "
                f"{limits.scale_floor} and {limits.scale_ceiling}"
            ),
            expected=f"{limits.scale_floor}..{limits.scale_ceiling}",
            received={"min": low, "max": high},
        ))

    return errors


def validate_question(
    question: Question,
    limits: ValidationLimits = DEFAULT_LIMITS,
) -> List[FieldError]:
    """Validate one question.

    Field paths are relative to the question ("prompt", "options[1]",
    "scale"); the form validator nests them under the question's position.

    Args:
        question: The question to check
        limits: Length and range limits to apply

    Returns:
        Ordered list of errors, empty when the question is valid

    Examples:
        >>> q = Question(kind=QuestionKind.SINGLE_CHOICE, prompt="Pick one", options=["A", "a"])
        >>> [e.code.value for e in validate_question(q)]
        ['duplicate']
    """
    errors: List[FieldError] = []

    if question.kind is None:
        errors.append(FieldError(
            field="kind",
            code=FieldErrorCode.REQUIRED,
            message="Question type is required",
            expected=[k.value for k in QuestionKind],
        ))

    if _is_blank(question.prompt):
        errors.append(FieldError(
            field="prompt",
            code=FieldErrorCode.REQUIRED,
            message="Question text is required",
        ))
    elif _too_long(question.prompt, limits.prompt_max_length):
        errors.append(FieldError(
            field="prompt",
            code=FieldErrorCode.TOO_LONG,
            message=f"Question text must be at most {limits.prompt_max_length} characters",
            expected=f"maximum {limits.prompt_max_length} characters",
            received=f"{len(question.prompt)} characters",
        ))

    if _too_long(question.description, limits.question_description_max_length):
        errors.append(FieldError(
            field="description",
            code=FieldErrorCode.TOO_LONG,
            message=(
                f"Question description must be at most "
                f"{limits.question_description_max_length} characters"
            ),
            expected=f"maximum {limits.question_description_max_length} characters",
            received=f"{len(question.description)} characters",
        ))

    if question.kind is not None and question.kind.is_choice:
        errors.extend(_validate_options(question, limits))
    elif question.kind is QuestionKind.LINEAR_SCALE:
        errors.extend(_validate_scale(question, limits))

    return errors


def _validate_dates(form: Form, now: datetime) -> List[FieldError]:
    errors: List[FieldError] = []

    start = _parse_timestamp(form.start_date)
    end = _parse_timestamp(form.end_date)
    for name, raw, parsed in (("startDate", form.start_date, start), ("endDate", form.end_date, end)):
        if parsed is None:
            errors.append(FieldError(
                field=name,
                code=FieldErrorCode.INVALID_FORMAT,
                message=f"{name} is not a valid ISO-8601 timestamp",
                expected="ISO-8601 timestamp",
                received=raw,
            ))
    if start is None or end is None:
        return errors

    if start >= end:
        errors.append(FieldError(
            field="dates",
            code=FieldErrorCode.INVALID_ORDER,
            message="End date must be after start date",
        ))
    if start < _as_utc(now):
        errors.append(FieldError(
            field="startDate",
            code=FieldErrorCode.IN_PAST,
            message="Start date cannot be in the past",
        ))

    return errors


def validate_form(
    form: Form,
    is_draft: bool = False,
    clock: Optional[Clock] = None,
    limits: ValidationLimits = DEFAULT_LIMITS,
) -> List[FieldError]:
    """Validate a whole form for draft save or publish.

    Checks run in this order: title, description, category and target
    audience (publish only), question presence, each question, and finally
    the schedule dates (publish only, when both are set).

    Args:
        form: The form to check
        is_draft: Relax completeness requirements for a draft save
        clock: Source of "now" for the past-start-date check
        limits: Length and range limits to apply

    Returns:
        Ordered list of errors, empty when the form is valid for the mode
    """
    errors: List[FieldError] = []

    if _is_blank(form.title):
        errors.append(FieldError(
            field="title",
            code=FieldErrorCode.REQUIRED,
            message="Form title is required",
        ))
    elif _too_long(form.title, limits.title_max_length):
        errors.append(FieldError(
            field="title",
            code=FieldErrorCode.TOO_LONG,
            message=f"Form title must be at most {limits.title_max_length} characters",
            expected=f"maximum {limits.title_max_length} characters",
            received=f"{len(form.title)} characters",
        ))

    if _too_long(form.description, limits.form_description_max_length):
        errors.append(FieldError(
            field="description",
            code=FieldErrorCode.TOO_LONG,
            message=(
                f"Description must be at most "
                f"{limits.form_description_max_length} characters"
            ),
            expected=f"maximum {limits.form_description_max_length} characters",
            received=f"{len(form.description)} characters",
        ))

    if not is_draft:
        if _is_blank(form.category):
            errors.append(FieldError(
                field="category",
                code=FieldErrorCode.REQUIRED,
                message="Category is required",
            ))
        if _is_blank(form.target_audience):
            errors.append(FieldError(
                field="targetAudience",
                code=FieldErrorCode.REQUIRED,
                message="Target audience is required",
            ))

    questions = form.questions or []
    if not questions:
        if not is_draft:
            errors.append(FieldError(
                field="questions",
                code=FieldErrorCode.REQUIRED,
                message="Form must have at least one question",
            ))
    else:
        for index, question in enumerate(questions):
            errors.extend(prefix_errors(validate_question(question, limits), "questions", index))

    if not is_draft and not _is_unset(form.start_date) and not _is_unset(form.end_date):
        now = (clock or utc_now)()
        errors.extend(_validate_dates(form, now))

    logger.debug(
        "Validated form %r (draft=%s): %d error(s)",
        form.title, is_draft, len(errors),
    )
    return errors


class FormValidator:
    """Validator bound to a clock, limits and payload schema.

    Examples:
        >>> from datetime import datetime, timezone
        >>> validator = FormValidator(clock=lambda: datetime(2026, 1, 1, tzinfo=timezone.utc))
        >>> errors = validator.validate(Form(title="", questions=[]))
        >>> sorted(e.field for e in errors)
        ['category', 'questions', 'targetAudience', 'title']
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        limits: ValidationLimits = DEFAULT_LIMITS,
        schema: Optional[PayloadSchema] = None,
    ) -> None:
        self.clock = clock or utc_now
        self.limits = limits
        self.schema = schema or PayloadSchema()

    def validate(self, form: Form, is_draft: bool = False) -> List[FieldError]:
        """Validate a parsed form; see validate_form."""
        return validate_form(form, is_draft=is_draft, clock=self.clock, limits=self.limits)

    def validate_for(self, form: Form, mode: SaveMode) -> List[FieldError]:
        """Validate a parsed form for the given save mode."""
        return self.validate(form, is_draft=mode is SaveMode.DRAFT)

    def validate_question(self, question: Question) -> List[FieldError]:
        """Validate a single parsed question; see validate_question."""
        return validate_question(question, self.limits)

    def validate_payload(self, payload: FormPayload, is_draft: bool = False) -> List[FieldError]:
        """Validate a raw JSON-decoded form payload.

        Structural (type) errors come first. Rule errors on a path that
        already has a structural error, or nested below one, are dropped so
        each problem is reported once.
        """
        structural = self.schema.check(payload)
        rules = self.validate(Form.from_dict(payload), is_draft=is_draft)
        return merge_errors(structural, rules)

    def validate_question_payload(self, payload: QuestionPayload) -> List[FieldError]:
        """Validate a raw JSON-decoded question payload."""
        structural = self.schema.check_question(payload)
        rules = self.validate_question(Question.from_dict(payload))
        return merge_errors(structural, rules)


def merge_errors(structural: List[FieldError], rules: List[FieldError]) -> List[FieldError]:
    """Combine structural and rule errors, structural errors taking precedence."""
    if not structural:
        return list(rules)
    shadowing = [e.field for e in structural]
    kept = [e for e in rules if not any(is_within(e.field, path) for path in shadowing)]
    return list(structural) + kept


__all__ = [
    "Clock",
    "utc_now",
    "validate_question",
    "validate_form",
    "merge_errors",
    "FormValidator",
]
