"""Core types for the SalonBook validation engine.

This module defines the declarative rule variants attached to form fields and
the immutable state snapshot the engine replaces on every operation:
- Required: value must be present and not blank
- MinLength / MaxLength: length bounds, only checked on present values
- Pattern: regex search on the text of a present value
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

from salonbook.errors import FormDefinitionError


# =============================================================================
# Rule Variants
# =============================================================================


@dataclass(frozen=True)
class Required:
    """Field must hold a non-empty, non-whitespace value."""

    message: str


@dataclass(frozen=True)
class MinLength:
    """Present value must be at least ``length`` long."""

    length: int
    message: str


@dataclass(frozen=True)
class MaxLength:
    """Present value must be at most ``length`` long."""

    length: int
    message: str


@dataclass(frozen=True)
class Pattern:
    """Present value, as text, must match ``expr`` (search semantics).

    ``expr`` may be a regex source string or an already compiled pattern.
    """

    expr: str | re.Pattern[str]
    message: str
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.expr, re.Pattern):
            compiled = self.expr
        else:
            try:
                compiled = re.compile(self.expr)
                if not compiled.flags & re.MULTILINE:
                    compiled = re.compile(_pin_end_anchors(self.expr))
            except re.error as e:
                raise FormDefinitionError(f"Invalid pattern {self.expr!r}: {e}") from e
        object.__setattr__(self, "compiled", compiled)


def _pin_end_anchors(source: str) -> str:
    """Rewrite each ``$`` anchor in a regex source as ``\\Z``.

    Python's ``$`` also matches before a trailing newline, which would let
    "a@b.com\\n" through an anchored email pattern. Escaped dollars and
    dollars inside character classes are literals and stay as they are.
    """
    out = []
    in_class = False
    i = 0
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            out.append(source[i : i + 2])
            i += 2
            continue
        i += 1
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
            out.append(ch)
            # A "]" straight after "[" or "[^" is a literal member
            if source.startswith("^", i):
                out.append("^")
                i += 1
            if source.startswith("]", i):
                out.append("]")
                i += 1
            continue
        elif ch == "$":
            ch = r"\Z"
        out.append(ch)
    return "".join(out)


Rule = Union[Required, MinLength, MaxLength, Pattern]

RuleMap = Mapping[str, Sequence[Rule]]

# YAML key -> rule variant
RULE_KINDS = ("required", "minLength", "maxLength", "pattern")


def rule_from_dict(data: Mapping[str, Any]) -> Rule:
    """Create a rule variant from a YAML/JSON dict.

    Each entry carries exactly one constraint key plus ``message``::

        {"required": True, "message": "Email is required"}
        {"minLength": 8, "message": "Password must be at least 8 characters long"}
    """
    kinds = [k for k in RULE_KINDS if k in data]
    if len(kinds) != 1:
        raise FormDefinitionError(
            f"Rule must declare exactly one of {', '.join(RULE_KINDS)}; got {dict(data)!r}"
        )
    message = data.get("message")
    if not isinstance(message, str) or not message:
        raise FormDefinitionError(f"Rule {dict(data)!r} has no message")

    kind = kinds[0]
    if kind == "required":
        if data["required"] is not True:
            raise FormDefinitionError("'required' rules must be declared as 'required: true'")
        return Required(message=message)
    if kind == "minLength":
        return MinLength(length=_as_length(data["minLength"], kind), message=message)
    if kind == "maxLength":
        return MaxLength(length=_as_length(data["maxLength"], kind), message=message)
    return Pattern(expr=str(data["pattern"]), message=message)


def _as_length(raw: Any, kind: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise FormDefinitionError(f"'{kind}' must be a non-negative integer, got {raw!r}")
    return raw


def is_required(rules: Sequence[Rule] | None) -> bool:
    """True if the rule sequence contains a Required constraint."""
    return any(isinstance(rule, Required) for rule in rules or ())


# =============================================================================
# Validation State
# =============================================================================


@dataclass(frozen=True)
class ValidationState:
    """Snapshot of a form's values, errors and touched flags.

    Attributes:
        values: Field name -> current value (fixed key set)
        errors: Field name -> error message; only fields with an error appear
        touched: Field name -> True once the field has been blurred

    The engine never mutates a state it has handed out. Each operation
    builds a new snapshot, so callers can detect changes with ``is``.
    """

    values: Mapping[str, Any]
    errors: Mapping[str, str] = field(default_factory=dict)
    touched: Mapping[str, bool] = field(default_factory=dict)

    def replace(
        self,
        *,
        values: Mapping[str, Any] | None = None,
        errors: Mapping[str, str] | None = None,
        touched: Mapping[str, bool] | None = None,
    ) -> "ValidationState":
        """Return a new state with the given mappings swapped in."""
        return ValidationState(
            values=self.values if values is None else values,
            errors=self.errors if errors is None else errors,
            touched=self.touched if touched is None else touched,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "values": dict(self.values),
            "errors": dict(self.errors),
            "touched": dict(self.touched),
        }
