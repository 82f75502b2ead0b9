"""Integration tests for the form intake pipeline.

Tests cover end-to-end scenarios combining:
- Structural payload checks
- Sanitization before validation
- Draft and publish modes
- Hand-off to the persistence sink
- Review of AI-generated questions
"""

from datetime import datetime, timezone

import pytest

from formguard.pipeline import FormPipeline, GeneratedQuestionReview
from formguard.types import Form, QuestionKind, SaveMode
from formguard.validation import FormValidator

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class RecordingSink:
    """Persistence double that records what it was asked to store."""

    def __init__(self):
        self.saved = []

    def __call__(self, form, mode):
        self.saved.append((form, mode))
        return f"form_{len(self.saved)}"


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def pipeline(sink):
    return FormPipeline(sink=sink, validator=FormValidator(clock=lambda: FIXED_NOW))


def publishable_payload():
    return {
        "title": "  Instructor evaluation ",
        "description": "Second semester",
        "category": "Instructor Evaluation",
        "targetAudience": "Students - BSCS 2B",
        "startDate": "2026-03-05T00:00:00Z",
        "endDate": "2026-03-20T00:00:00Z",
        "questions": [
            {"kind": "rating", "prompt": "Overall teaching quality", "required": True},
            {"kind": "multiple-choice", "prompt": "Pace of lectures", "options": ["Too slow", "Right", "Too fast "]},
            {"kind": "linear-scale", "prompt": "Likelihood to recommend", "min": 0, "max": 10},
            {"kind": "textarea", "prompt": "Other comments"},
        ],
    }


class TestPublish:
    """Test the publish path."""

    def test_publish_happy_path(self, pipeline, sink):
        """Should sanitize, validate and store a complete form."""
        result = pipeline.publish(publishable_payload())

        assert result["ok"] is True
        assert result["mode"] == "publish"
        assert result["formId"] == "form_1"
        assert result["form"]["title"] == "Instructor evaluation"

        form, mode = sink.saved[0]
        assert isinstance(form, Form)
        assert mode is SaveMode.PUBLISH
        assert form.questions[1].options == ["Too slow", "Right", "Too fast"]
        assert [q.id for q in form.questions] == ["q_1", "q_2", "q_3", "q_4"]

    def test_publish_rejects_incomplete_form(self, pipeline, sink):
        """Should return every error and never call the sink."""
        result = pipeline.publish({"title": "", "questions": []})

        assert result["ok"] is False
        assert result["mode"] == "publish"
        fields = [e["field"] for e in result["errors"]]
        assert fields == ["title", "category", "targetAudience", "questions"]
        assert result["message"] == "Form has 4 validation error(s)"
        assert sink.saved == []

    def test_validation_runs_after_sanitizing(self, pipeline, sink):
        """Should reject a question whose blank option is dropped."""
        payload = publishable_payload()
        payload["questions"][1]["options"] = ["Right", "   "]
        result = pipeline.publish(payload)

        assert result["ok"] is False
        assert [(e["field"], e["code"]) for e in result["errors"]] == [
            ("questions[1].options", "too_short"),
        ]
        assert sink.saved == []

    @pytest.mark.parametrize("start,end", [("", ""), ("", "2026-03-20T00:00:00Z")])
    def test_unscheduled_form_published(self, pipeline, sink, start, end):
        """Should publish a form whose schedule fields are left blank."""
        payload = publishable_payload()
        payload["startDate"] = start
        payload["endDate"] = end
        result = pipeline.publish(payload)
        assert result["ok"] is True
        assert len(sink.saved) == 1

    def test_past_schedule_rejected(self, pipeline):
        """Should check the start date against the injected clock."""
        payload = publishable_payload()
        payload["startDate"] = "2026-02-01T00:00:00Z"
        result = pipeline.publish(payload)
        assert [e["field"] for e in result["errors"]] == ["startDate"]

    def test_structural_errors_reported_once(self, pipeline):
        """Should report a mistyped field once, as a type error."""
        payload = publishable_payload()
        payload["category"] = 12
        result = pipeline.publish(payload)
        assert [(e["field"], e["code"]) for e in result["errors"]] == [
            ("category", "invalid_type"),
        ]

    def test_without_sink(self):
        """Should still return the accepted form when no sink is set."""
        result = FormPipeline(validator=FormValidator(clock=lambda: FIXED_NOW)).publish(publishable_payload())
        assert result["ok"] is True
        assert result["formId"] is None

    def test_sink_errors_propagate(self):
        """Should not swallow persistence failures."""
        def failing_sink(form, mode):
            raise RuntimeError("database unavailable")

        pipeline = FormPipeline(sink=failing_sink, validator=FormValidator(clock=lambda: FIXED_NOW))
        with pytest.raises(RuntimeError, match="database unavailable"):
            pipeline.publish(publishable_payload())


class TestSaveDraft:
    """Test the draft path."""

    def test_incomplete_draft_saved(self, pipeline, sink):
        """Should store a draft with only a title."""
        result = pipeline.save_draft({"title": "Survey", "category": "", "targetAudience": "", "questions": []})
        assert result["ok"] is True
        assert result["mode"] == "draft"
        assert sink.saved[0][1] is SaveMode.DRAFT

    def test_draft_still_needs_title(self, pipeline, sink):
        """Should reject a draft without a title."""
        result = pipeline.save_draft({"title": "   "})
        assert [e["field"] for e in result["errors"]] == ["title"]
        assert sink.saved == []

    def test_process_accepts_mode_string(self, pipeline):
        """Should accept the mode as its wire string."""
        assert pipeline.process({"title": "Survey"}, "draft")["ok"] is True


class TestGeneratedQuestions:
    """Test review of AI-generated questions."""

    def test_review_splits_batch(self, pipeline):
        """Should accept valid questions and report invalid ones by index."""
        review = pipeline.review_generated_questions([
            {"question": "How satisfied are you?", "type": "rating", "required": True},
            {"question": "Preferred format", "type": "checkbox", "options": ["Online", "online"]},
            {"question": "  Suggestions  ", "type": "textarea"},
            {"question": "Pick", "type": "dropdown", "options": ["Only one", " "]},
            "not a question",
        ])

        assert isinstance(review, GeneratedQuestionReview)
        assert [q.prompt for q in review.accepted] == ["How satisfied are you?", "Suggestions"]
        assert [q.id for q in review.accepted] == ["q_1", "q_3"]
        assert review.accepted[0].kind is QuestionKind.STAR_RATING

        assert [r.index for r in review.rejected] == [1, 3, 4]
        assert [e.code.value for e in review.rejected[0].errors] == ["duplicate"]
        assert [e.code.value for e in review.rejected[1].errors] == ["too_short"]
        assert [e.field for e in review.rejected[2].errors] == [""]

    def test_review_serializes(self, pipeline):
        """Should serialize accepted and rejected questions."""
        data = pipeline.review_generated_questions([{"kind": "linear-scale", "prompt": "Rate", "min": 5, "max": 3}]).to_dict()
        assert data["accepted"] == []
        assert data["rejected"][0]["errors"][0]["code"] == "invalid_order"

    def test_empty_batch(self, pipeline):
        """Should handle an empty batch."""
        review = pipeline.review_generated_questions([])
        assert review.accepted == []
        assert review.rejected == []
