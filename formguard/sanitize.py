"""Whitespace normalization of forms before persistence.

sanitize_form trims every free-text field and drops choice options that are
empty once trimmed. Dropping options changes the option count, so a question
with options ``["A", " "]`` passes the two-option minimum before sanitizing
and fails it afterwards: always validate the sanitized form, as
formguard.pipeline does.

Both functions are pure; the input is never mutated.
"""

from dataclasses import replace
from typing import Any, List, Optional

from formguard.types import Form, Question


def _trim(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _trim_required(value: Any) -> Any:
    # Missing required text becomes "" so validators see a blank string.
    if value is None:
        return ""
    return _trim(value)


def _clean_options(options: Optional[List[Any]]) -> Optional[List[Any]]:
    if options is None:
        return None
    cleaned = []
    for option in options:
        option = _trim(option)
        if option is None or option == "":
            continue
        cleaned.append(option)
    return cleaned


def sanitize_question(question: Question) -> Question:
    """Return a copy of ``question`` with trimmed text and non-empty options.

    Examples:
        >>> q = sanitize_question(Question(prompt=" Q ", options=[" ", "B "]))
        >>> q.prompt, q.options
        ('Q', ['B'])
    """
    return replace(
        question,
        prompt=_trim_required(question.prompt),
        description=_trim(question.description),
        options=_clean_options(question.options),
    )


def sanitize_form(form: Form) -> Form:
    """Return a copy of ``form`` with every text field trimmed.

    ``description`` is trimmed when present but never removed, even if it
    becomes empty.
    """
    return replace(
        form,
        title=_trim_required(form.title),
        description=_trim(form.description),
        category=_trim_required(form.category),
        target_audience=_trim_required(form.target_audience),
        questions=[sanitize_question(q) for q in form.questions or []],
    )


__all__ = [
    "sanitize_question",
    "sanitize_form",
]
