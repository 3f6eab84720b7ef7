"""Form validation engine.

``FormValidation`` owns one form's values, rules, errors and touched flags.
Every mutation runs to completion synchronously and replaces the current
``ValidationState`` with a new one; callers that keep the previous state can
compare snapshots by identity to decide whether to re-render.

Usage:
    form = FormValidation(
        {"email": "", "password": ""},
        {
            "email": [
                Required("Email is required"),
                Pattern(r"^[^\\s@]+@[^\\s@]+\\.[^\\s@]+$", "Please enter a valid email address"),
            ],
            "password": [Required("Password is required")],
        },
    )
    form.handle_change("email", "bad")
    form.errors["email"]        # "Please enter a valid email address"
    if not form.validate_all():
        ...                     # abort the submit
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from salonbook.errors import FormDefinitionError, UnknownFieldError
from salonbook.validation.rules import evaluate_field, is_blank
from salonbook.validation.types import Rule, RuleMap, ValidationState, is_required

logger = logging.getLogger(__name__)


class FormValidation:
    """Tracks field values and derives per-field errors for one form.

    The field set is fixed by ``initial_values`` at construction. Rules may
    be declared for any subset of it.
    """

    def __init__(
        self,
        initial_values: Mapping[str, Any],
        rules: RuleMap | None = None,
        *,
        name: str | None = None,
    ):
        self.name = name
        self._initial_values = MappingProxyType(dict(initial_values))
        rules = rules or {}

        unknown = [field for field in rules if field not in self._initial_values]
        if unknown:
            raise FormDefinitionError(
                f"Rules declared for unknown field(s): {', '.join(sorted(unknown))}"
            )

        self._rules: Mapping[str, tuple[Rule, ...]] = MappingProxyType(
            {field: tuple(field_rules) for field, field_rules in rules.items() if field_rules}
        )
        self._required = frozenset(
            field for field, field_rules in self._rules.items() if is_required(field_rules)
        )
        self._state = ValidationState(values=dict(self._initial_values))

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ValidationState:
        return self._state

    @property
    def values(self) -> Mapping[str, Any]:
        return self._state.values

    @property
    def errors(self) -> Mapping[str, str]:
        return self._state.errors

    @property
    def touched(self) -> Mapping[str, bool]:
        return self._state.touched

    @property
    def initial_values(self) -> Mapping[str, Any]:
        return self._initial_values

    @property
    def rules(self) -> Mapping[str, tuple[Rule, ...]]:
        return self._rules

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self._initial_values)

    @property
    def is_valid(self) -> bool:
        """True if no errors are recorded and every required field is filled.

        Required fields are re-checked against their values because a field
        that was never changed or blurred has no entry in ``errors``.
        """
        if any(self._state.errors.values()):
            return False
        return not any(is_blank(self._state.values.get(field)) for field in self._required)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def evaluate_field(self, name: str, value: Any) -> str:
        """Run ``name``'s rules against ``value``. Returns "" when valid."""
        self._check_field(name)
        return evaluate_field(self._rules.get(name), value)

    def rules_for(self, name: str) -> Sequence[Rule]:
        self._check_field(name)
        return self._rules.get(name, ())

    def is_field_required(self, name: str) -> bool:
        self._check_field(name)
        return name in self._required

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def handle_change(self, name: str, value: Any) -> ValidationState:
        """Record a new value and revalidate when appropriate.

        Required fields are always revalidated. Optional fields are
        revalidated when the new value is non-empty or an error is already
        shown; an optional field cleared back to "" just drops its error.
        """
        self._check_field(name)
        state = self._state
        values = {**state.values, name: value}

        if name in self._required or value != "" or state.errors.get(name):
            errors = self._with_error(state.errors, name, self.evaluate_field(name, value))
        else:
            errors = self._with_error(state.errors, name, "")

        self._state = state.replace(values=values, errors=errors)
        logger.debug("%s: change %s -> error=%r", self._label, name, errors.get(name, ""))
        return self._state

    def handle_blur(self, name: str) -> ValidationState:
        """Mark a field touched and validate its current value unconditionally."""
        self._check_field(name)
        state = self._state
        error = self.evaluate_field(name, state.values.get(name))
        self._state = state.replace(
            errors=self._with_error(state.errors, name, error),
            touched={**state.touched, name: True},
        )
        logger.debug("%s: blur %s -> error=%r", self._label, name, error)
        return self._state

    def validate_all(self) -> bool:
        """Validate every field with rules, replacing the error map.

        Touched flags and change history are ignored. Returns True when no
        field has an error.
        """
        values = self._state.values
        errors: dict[str, str] = {}
        for field, field_rules in self._rules.items():
            error = evaluate_field(field_rules, values.get(field))
            if error:
                errors[field] = error

        self._state = self._state.replace(errors=errors)
        if errors:
            logger.debug(
                "%s: validate_all found %d error(s): %s",
                self._label,
                len(errors),
                ", ".join(errors),
            )
        return not errors

    def reset(self) -> ValidationState:
        """Restore the initial values and clear errors and touched flags."""
        self._state = ValidationState(values=dict(self._initial_values))
        logger.debug("%s: reset", self._label)
        return self._state

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_field_valid(self, name: str) -> bool:
        """True if the field has no error and its value is defined."""
        self._check_field(name)
        return not self._state.errors.get(name) and self._state.values.get(name) is not None

    def is_field_filled(self, name: str) -> bool:
        self._check_field(name)
        value = self._state.values.get(name)
        return value is not None and value != ""

    def is_field_touched(self, name: str) -> bool:
        self._check_field(name)
        return bool(self._state.touched.get(name))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @property
    def _label(self) -> str:
        return self.name or "form"

    def _check_field(self, name: str) -> None:
        if name not in self._initial_values:
            raise UnknownFieldError(name, self.name)

    @staticmethod
    def _with_error(errors: Mapping[str, str], name: str, error: str) -> dict[str, str]:
        """Copy ``errors`` with ``name`` set to ``error``, or removed if empty."""
        updated = dict(errors)
        if error:
            updated[name] = error
        else:
            updated.pop(name, None)
        return updated

    def __repr__(self) -> str:
        return (
            f"FormValidation(name={self.name!r}, fields={list(self.fields)!r}, "
            f"errors={dict(self._state.errors)!r})"
        )
