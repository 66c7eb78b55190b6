"""Field-level validation for recipe payloads.

Every field is described by a :class:`FieldRule`. :func:`validate_recipe`
applies all rules and collects every failure instead of stopping at the first
one, so a client learns about all invalid fields from a single response.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .models import LEVELS, parse_created

Check = Callable[[Any], Optional[str]]


@dataclass(frozen=True)
class FieldRule:
    """Constraint for a single payload field.

    ``check`` returns an error message or ``None`` when the value is
    acceptable. Missing required fields report ``required_message``.
    ``nullable`` fields treat an explicit ``null`` as absent.
    """

    name: str
    check: Check
    required: bool = False
    required_message: str = ""
    nullable: bool = False


def _non_blank_string(message: str) -> Check:
    def check(value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return message
        return None

    return check


def _one_of(label: str, choices: Tuple[str, ...]) -> Check:
    def check(value: Any) -> Optional[str]:
        if value not in choices:
            return f"{label} must be one of: {', '.join(choices)}"
        return None

    return check


def _check_ingredients(value: Any) -> Optional[str]:
    if not isinstance(value, list):
        return "Ingredients must be an array of strings"
    if not all(isinstance(item, str) for item in value):
        return "Each ingredient must be a string"
    return None


def _check_image(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return "Image must be a string URL"
    return None


def _check_duration(value: Any) -> Optional[str]:
    # bool is an int subclass but never a duration
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "Duration must be a number"
    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        return "Duration must be a number"
    if value < 0:
        return "Duration must be >= 0"
    return None


def _check_is_archived(value: Any) -> Optional[str]:
    if not isinstance(value, bool):
        return "isArchived must be a boolean"
    return None


def _check_created(value: Any) -> Optional[str]:
    try:
        parse_created(value)
    except ValueError:
        return "created must be a valid date"
    return None


RECIPE_RULES: Tuple[FieldRule, ...] = (
    FieldRule(
        "title",
        _non_blank_string("Title is required"),
        required=True,
        required_message="Title is required",
    ),
    FieldRule(
        "instructions",
        _non_blank_string("Instructions are required"),
        required=True,
        required_message="Instructions are required",
    ),
    FieldRule("level", _one_of("Level", LEVELS), nullable=True),
    FieldRule("ingredients", _check_ingredients),
    FieldRule("image", _check_image),
    FieldRule("duration", _check_duration),
    FieldRule("isArchived", _check_is_archived),
    FieldRule("created", _check_created, nullable=True),
)


def validate_recipe(
    payload: Mapping[str, Any],
    *,
    partial: bool = False,
    rules: Tuple[FieldRule, ...] = RECIPE_RULES,
) -> Dict[str, str]:
    """Return a mapping of field name to error message.

    An empty mapping means the payload is acceptable. With ``partial`` set,
    only the fields present in ``payload`` are checked, which is how partial
    updates are validated.
    """

    errors: Dict[str, str] = {}
    for rule in rules:
        if rule.name not in payload:
            if rule.required and not partial:
                errors[rule.name] = rule.required_message
            continue

        value = payload[rule.name]
        if value is None and rule.nullable:
            continue

        message = rule.check(value)
        if message:
            errors[rule.name] = message
    return errors


__all__ = ["FieldRule", "RECIPE_RULES", "validate_recipe"]
