"""Cross-field composition on top of the single-field engine.

``CrossFieldForm`` wraps a ``FormValidation``: every ``handle_change`` is
delegated to the engine first, then each cross-field constraint that reads
the changed field is recomputed. Results live in ``cross_errors``, keyed by
the constraint's target field, and never enter the engine's error map.
"""

import logging
from typing import Any, Mapping, Sequence

from salonbook.errors import FormDefinitionError
from salonbook.validation.constraints import CrossFieldConstraint
from salonbook.validation.engine import FormValidation
from salonbook.validation.types import ValidationState

logger = logging.getLogger(__name__)


class CrossFieldForm:
    """A form engine plus constraints spanning several fields.

    Submit-time validity is ``engine.is_valid and not cross_errors``.
    """

    def __init__(
        self,
        engine: FormValidation,
        constraints: Sequence[CrossFieldConstraint],
    ):
        for constraint in constraints:
            unknown = [name for name in constraint.fields if name not in engine.initial_values]
            if unknown:
                raise FormDefinitionError(
                    f"Constraint {type(constraint).__name__} references unknown "
                    f"field(s): {', '.join(unknown)}"
                )
        self.engine = engine
        self.constraints = tuple(constraints)
        self._cross_errors: dict[str, str] = {}

    @property
    def name(self) -> str | None:
        return self.engine.name

    @property
    def state(self) -> ValidationState:
        return self.engine.state

    @property
    def values(self) -> Mapping[str, Any]:
        return self.engine.values

    @property
    def errors(self) -> Mapping[str, str]:
        return self.engine.errors

    @property
    def touched(self) -> Mapping[str, bool]:
        return self.engine.touched

    @property
    def cross_errors(self) -> Mapping[str, str]:
        return self._cross_errors

    @property
    def is_valid(self) -> bool:
        return self.engine.is_valid and not self._cross_errors

    def handle_change(self, name: str, value: Any) -> ValidationState:
        state = self.engine.handle_change(name, value)
        affected = [c for c in self.constraints if name in c.fields]
        if affected:
            self._recompute(affected)
        return state

    def handle_blur(self, name: str) -> ValidationState:
        return self.engine.handle_blur(name)

    def validate_all(self) -> bool:
        """Validate every field and every constraint.

        Both checks always run so the error maps are complete afterwards.
        """
        fields_ok = self.engine.validate_all()
        self._cross_errors = {}
        self._recompute(self.constraints)
        return fields_ok and not self._cross_errors

    def reset(self) -> ValidationState:
        self._cross_errors = {}
        return self.engine.reset()

    def field_error(self, name: str) -> str:
        """The message to display for a field.

        The field's own error wins. Otherwise the cross-field error of a
        constraint displayed on it is shown once every field the constraint
        reads is filled.
        """
        own = self.engine.errors.get(name)
        if own:
            return own
        for constraint in self.constraints:
            if name not in constraint.display_fields:
                continue
            message = self._cross_errors.get(constraint.target)
            if message and all(self.engine.is_field_filled(f) for f in constraint.fields):
                return message
        return ""

    def is_field_valid(self, name: str) -> bool:
        return self.engine.is_field_valid(name) and not self.field_error(name)

    def is_field_filled(self, name: str) -> bool:
        return self.engine.is_field_filled(name)

    def is_field_touched(self, name: str) -> bool:
        return self.engine.is_field_touched(name)

    def _recompute(self, constraints: Sequence[CrossFieldConstraint]) -> None:
        """Re-check every target touched by ``constraints``.

        Constraints sharing a target are evaluated together in declared
        order; the first failing one owns the target's message.
        """
        targets = {constraint.target for constraint in constraints}
        updated = dict(self._cross_errors)
        values = self.engine.values
        for target in targets:
            message = ""
            for constraint in self.constraints:
                if constraint.target == target:
                    message = constraint.check(values)
                    if message:
                        break
            if message:
                updated[target] = message
            else:
                updated.pop(target, None)
        self._cross_errors = updated
        if updated:
            logger.debug("%s: cross-field errors %s", self.name or "form", updated)

    def __repr__(self) -> str:
        return (
            f"CrossFieldForm(engine={self.engine!r}, "
            f"cross_errors={self._cross_errors!r})"
        )
