"""Field-level rule evaluation.

Rules for a field are checked in declared order and the first failing
constraint's message is the field's error. Length and pattern checks only
run on present values, so an empty optional field is valid by absence and a
missing required value is reported by ``Required`` alone.
"""

from collections.abc import Sized
from typing import Any, Sequence

from salonbook.validation.types import MaxLength, MinLength, Pattern, Required, Rule


def is_blank(value: Any) -> bool:
    """Check if a value fails a Required constraint."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    if isinstance(value, (list, tuple, set, dict)) and len(value) == 0:
        return True
    return False


def is_present(value: Any) -> bool:
    """Check if length and pattern constraints apply to a value.

    Whitespace-only strings are present: they fail ``Required`` but are
    still measured by ``MinLength``.
    """
    return value is not None and value != ""


def check_rule(rule: Rule, value: Any) -> str | None:
    """Check one constraint. Returns its message on failure, else None."""
    if isinstance(rule, Required):
        return rule.message if is_blank(value) else None

    if not is_present(value):
        return None

    if isinstance(rule, MinLength):
        # Values without a length (numbers, enums) leave the rule inert
        if isinstance(value, Sized) and len(value) < rule.length:
            return rule.message
    elif isinstance(rule, MaxLength):
        if isinstance(value, Sized) and len(value) > rule.length:
            return rule.message
    elif isinstance(rule, Pattern):
        if not rule.compiled.search(value if isinstance(value, str) else str(value)):
            return rule.message
    return None


def evaluate_field(rules: Sequence[Rule] | None, value: Any) -> str:
    """Evaluate a field's rules against a value.

    Args:
        rules: The field's constraints in declared order, or None
        value: The candidate value

    Returns:
        The first failing constraint's message, or "" when every
        constraint passes (including when the field has no rules).
    """
    for rule in rules or ():
        message = check_rule(rule, value)
        if message is not None:
            return message
    return ""
