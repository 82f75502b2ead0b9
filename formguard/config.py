"""Validation limits for form schemas.

All numeric constraints applied by the validators live in a single frozen
ValidationLimits instance. DEFAULT_LIMITS matches the column sizes of the
feedback database; pass a custom instance to FormValidator to change them.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationLimits:
    """Numeric limits applied during validation.

    Lengths are inclusive maximums counted in characters.

    Attributes:
        title_max_length: Maximum form title length
        form_description_max_length: Maximum form description length
        prompt_max_length: Maximum question text length
        question_description_max_length: Maximum question description length
        option_max_length: Maximum length of a single choice option
        min_options: Minimum number of options for choice questions
        scale_floor: Lowest permitted linear-scale bound
        scale_ceiling: Highest permitted linear-scale bound
    """
    title_max_length: int = 255
    form_description_max_length: int = 1000
    prompt_max_length: int = 500
    question_description_max_length: int = 300
    option_max_length: int = 200
    min_options: int = 2
    scale_floor: int = 0
    scale_ceiling: int = 10


DEFAULT_LIMITS = ValidationLimits()


__all__ = [
    "ValidationLimits",
    "DEFAULT_LIMITS",
]
