"""Form intake pipeline: check, parse, sanitize, validate, hand off.

The pipeline is what a request handler calls with a JSON-decoded payload. It
runs the structural check, parses the payload, sanitizes it and validates the
sanitized form for the requested mode. Validation happens after sanitizing so
that a choice question which loses blank options is measured against the
option minimum with the options that will actually be stored.

Forms that pass are handed to a sink (the persistence collaborator); forms
that fail come back as a RejectedForm envelope listing every error.

Usage:
    >>> saved = []
    >>> pipeline = FormPipeline(sink=lambda form, mode: saved.append(form) or "form_1")
    >>> result = pipeline.save_draft({"title": " Course survey "})
    >>> result["ok"], result["formId"], saved[0].title
    (True, 'form_1', 'Course survey')
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from formguard.errors import FieldError, RejectedForm
from formguard.sanitize import sanitize_form, sanitize_question
from formguard.types import Form, FormPayload, Question, QuestionPayload, SaveMode
from formguard.validation import FormValidator, merge_errors

logger = logging.getLogger(__name__)

FormSink = Callable[[Form, SaveMode], Any]
"""Persistence callback; receives the sanitized form and returns its id."""


@dataclass(frozen=True)
class RejectedQuestion:
    """A generated question that failed validation.

    Attributes:
        index: Position in the generated batch
        payload: The payload as received
        errors: Problems found, with paths relative to the question
    """
    index: int
    payload: Any
    errors: List[FieldError]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "index": self.index,
            "payload": self.payload,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True)
class GeneratedQuestionReview:
    """Outcome of reviewing a batch of AI-generated questions."""
    accepted: List[Question] = field(default_factory=list)
    rejected: List[RejectedQuestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "accepted": [q.to_dict() for q in self.accepted],
            "rejected": [r.to_dict() for r in self.rejected],
        }


class FormPipeline:
    """Orchestrates validation and persistence of form payloads.

    Attributes:
        sink: Optional persistence callback invoked for accepted forms
        validator: FormValidator supplying clock, limits and payload schema
    """

    def __init__(
        self,
        sink: Optional[FormSink] = None,
        validator: Optional[FormValidator] = None,
    ) -> None:
        self.sink = sink
        self.validator = validator or FormValidator()

    def save_draft(self, payload: FormPayload) -> Dict[str, Any]:
        """Save a form as a draft; only title and length limits are enforced."""
        return self.process(payload, SaveMode.DRAFT)

    def publish(self, payload: FormPayload) -> Dict[str, Any]:
        """Publish a form; every completeness and schedule rule applies."""
        return self.process(payload, SaveMode.PUBLISH)

    def process(self, payload: FormPayload, mode: Union[SaveMode, str]) -> Dict[str, Any]:
        """Run the full pipeline for ``mode``.

        Returns:
            ``{"ok": True, "mode", "formId", "form"}`` when accepted, otherwise
            the serialized RejectedForm envelope

        Raises:
            Whatever the sink raises; persistence failures are not validation
            errors and are left to the caller.
        """
        mode = SaveMode(mode)
        structural = self.validator.schema.check(payload)
        form = sanitize_form(Form.from_dict(payload))
        errors = merge_errors(structural, self.validator.validate_for(form, mode))

        if errors:
            logger.info(
                "Rejected %s of form %r: %d error(s)",
                mode.value, form.title, len(errors),
            )
            return RejectedForm(
                mode=mode,
                errors=errors,
                message=f"Form has {len(errors)} validation error(s)",
            ).to_dict()

        form_id = self.sink(form, mode) if self.sink is not None else None
        logger.info("Accepted %s of form %r (id=%s)", mode.value, form.title, form_id)
        return {
            "ok": True,
            "mode": mode.value,
            "formId": form_id,
            "form": form.to_dict(),
        }

    def review_generated_questions(self, payloads: List[QuestionPayload]) -> GeneratedQuestionReview:
        """Validate questions produced by the AI question generator.

        Each payload is checked on its own; invalid ones are reported with
        their batch position and never reach the accepted list.
        """
        accepted: List[Question] = []
        rejected: List[RejectedQuestion] = []

        for index, payload in enumerate(payloads):
            structural = self.validator.schema.check_question(payload)
            question = sanitize_question(Question.from_dict(payload, index=index))
            errors = merge_errors(structural, self.validator.validate_question(question))
            if errors:
                rejected.append(RejectedQuestion(index=index, payload=payload, errors=errors))
            else:
                accepted.append(question)

        logger.info(
            "Reviewed %d generated question(s): %d accepted, %d rejected",
            len(payloads), len(accepted), len(rejected),
        )
        return GeneratedQuestionReview(accepted=accepted, rejected=rejected)


__all__ = [
    "FormSink",
    "RejectedQuestion",
    "GeneratedQuestionReview",
    "FormPipeline",
]
