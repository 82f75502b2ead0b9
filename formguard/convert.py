"""Conversion between database rows and form schema objects.

The feedback database stores questions with snake_case columns
(``question_text``, ``question_type``, ``min_value``, ``max_value``) and keeps
choice options in a separate table, returned as ``[{"option_text": ...}]``.
These helpers map such rows onto Question objects and back so stored forms can
be re-validated with the same rules as freshly authored ones.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from formguard.types import Question, QuestionKind, ScaleRange

ALL_USERS = "All Users"


def _option_text(option: Any) -> Any:
    if isinstance(option, dict):
        return option.get("option_text")
    return option


def question_from_row(row: Dict[str, Any], index: int) -> Question:
    """Build a Question from a stored question row.

    Missing ids default to ``q_<index+1>``, an unknown type falls back to
    single-line text, and blank options are dropped.

    Args:
        row: Row dict as returned by the questions query
        index: Position of the question within its form

    Examples:
        >>> q = question_from_row({"question_text": "Rate us", "question_type": "rating"}, 0)
        >>> q.id, q.kind.value, q.prompt
        ('q_1', 'rating', 'Rate us')
    """
    raw_id = row.get("id")
    kind = QuestionKind.parse(row.get("question_type") or row.get("type"))

    options: Optional[List[Any]] = None
    if row.get("options"):
        options = [
            text for text in (_option_text(o) for o in row["options"])
            if isinstance(text, str) and text.strip()
        ]

    scale = None
    if row.get("min_value") is not None or row.get("max_value") is not None:
        scale = ScaleRange(min=row.get("min_value"), max=row.get("max_value"))

    return Question(
        id=str(raw_id) if raw_id is not None else f"q_{index + 1}",
        kind=kind or QuestionKind.SINGLE_LINE_TEXT,
        prompt=row.get("question_text") or row.get("question") or "",
        description=row.get("description") or "",
        required=bool(row.get("required")),
        options=options,
        scale=scale,
    )


def question_to_row(question: Question, order_index: int) -> Dict[str, Any]:
    """Map a Question onto the stored row layout.

    Options are only written for choice kinds and bounds only for linear
    scales, so a question that changed kind does not leave stale data behind.
    """
    kind = question.kind
    row: Dict[str, Any] = {
        "question_text": question.prompt,
        "question_type": kind.value if kind is not None else None,
        "description": question.description or None,
        "required": 1 if question.required else 0,
        "order_index": order_index,
        "min_value": None,
        "max_value": None,
        "options": [],
    }
    if kind is QuestionKind.LINEAR_SCALE and question.scale is not None:
        row["min_value"] = question.scale.min
        row["max_value"] = question.scale.max
    if kind is not None and kind.is_choice and question.options:
        row["options"] = [
            {"option_text": text, "order_index": i}
            for i, text in enumerate(question.options)
        ]
    return row


@dataclass(frozen=True)
class TargetAudience:
    """A target audience string split into its parts.

    Attributes:
        audience_type: Role group, e.g. "Students" or "All Users"
        section: Course/year/section qualifier, "" when absent
    """
    audience_type: str
    section: str = ""


def parse_target_audience(target: str) -> TargetAudience:
    """Split a target audience such as ``"Students - BSIT 1A"``.

    Examples:
        >>> parse_target_audience("Students - BSIT 1A")
        TargetAudience(audience_type='Students', section='BSIT 1A')
        >>> parse_target_audience("All Users")
        TargetAudience(audience_type='All Users', section='')
    """
    if target == ALL_USERS:
        return TargetAudience(audience_type=ALL_USERS)
    if " - " in target:
        parts = target.split(" - ")
        return TargetAudience(audience_type=parts[0], section=parts[-1])
    return TargetAudience(audience_type=target)


__all__ = [
    "ALL_USERS",
    "question_from_row",
    "question_to_row",
    "TargetAudience",
    "parse_target_audience",
]
