"""formguard: form schema validation and sanitization for feedback surveys.

formguard checks feedback/survey forms before they are saved or published:
- Closed set of question kinds (text, choice, rating, scale)
- Field-level errors with stable paths such as ``questions[2].options[0]``
- Draft mode that relaxes completeness rules for incremental authoring
- Whitespace sanitization that never mutates its input
- Structural checks of raw JSON payloads via JSON Schema

Basic usage:
    >>> from formguard import Form, validate_form
    >>> errors = validate_form(Form(title="Survey"), is_draft=True)
    >>> errors
    []
"""

__version__ = "0.1.0"
__author__ = "formguard maintainers"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formguard.config import DEFAULT_LIMITS, ValidationLimits
from formguard.convert import TargetAudience, parse_target_audience, question_from_row, question_to_row
from formguard.errors import FieldError, RejectedForm
from formguard.pipeline import FormPipeline
from formguard.sanitize import sanitize_form, sanitize_question
from formguard.types import FieldErrorCode, Form, Question, QuestionKind, SaveMode, ScaleRange
from formguard.validation import FormValidator, validate_form, validate_question

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "DEFAULT_LIMITS",
    "ValidationLimits",
    "TargetAudience",
    "parse_target_audience",
    "question_from_row",
    "question_to_row",
    "FieldError",
    "RejectedForm",
    "FormPipeline",
    "sanitize_form",
    "sanitize_question",
    "FieldErrorCode",
    "Form",
    "Question",
    "QuestionKind",
    "SaveMode",
    "ScaleRange",
    "FormValidator",
    "validate_form",
    "validate_question",
]
