"""Cross-field constraints for SalonBook forms.

Single-field rules cannot express relationships such as "end time must be
after start time". These constraints are evaluated outside the engine's own
error map by ``CrossFieldForm``; the engine itself never couples fields.

Available constraints:
- timeRange: start time must be before end time
- fieldsMatch: a confirmation field must repeat another field
"""

from dataclasses import dataclass, field
from datetime import time
from typing import Any, Callable, Mapping, Protocol


# =============================================================================
# Types
# =============================================================================


@dataclass
class ConstraintDefinition:
    """Declarative form of a cross-field constraint (from YAML).

    Attributes:
        type: Constraint type ("timeRange", "fieldsMatch")
        params: Type-specific parameters
        message: Error message; each type supplies a default when empty
    """

    type: str
    params: dict[str, Any] = field(default_factory=dict)
    message: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConstraintDefinition":
        """Create ConstraintDefinition from YAML/JSON dict."""
        return cls(
            type=data["type"],
            params=dict(data.get("params") or {}),
            message=data.get("message", ""),
        )


class CrossFieldConstraint(Protocol):
    """Protocol that all cross-field constraints implement.

    ``fields`` lists every field the check reads; ``target`` is the field
    the message is reported against; ``display_fields`` are the fields that
    show the message next to their input.
    """

    fields: tuple[str, ...]
    target: str
    display_fields: tuple[str, ...]
    message: str

    def check(self, values: Mapping[str, Any]) -> str:
        """Return the error message, or "" if the values satisfy the constraint."""
        ...


def _is_filled(value: Any) -> bool:
    return value is not None and value != ""


# =============================================================================
# Time Range Constraint
# =============================================================================


def parse_time(value: Any) -> time | None:
    """Parse an ``HH:MM`` or ``HH:MM:SS`` string. Returns None if unparseable."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        return None


@dataclass
class TimeRangeConstraint:
    """Validates that a start time is before an end time.

    Params:
        startField: Name of the start time field
        endField: Name of the end time field
        allowEqual: If true, start == end is valid (default: false)

    Only checked when both fields are filled. Values that do not parse as
    times never produce an error.
    The message is shown on both the start and the end field.
    """

    start_field: str
    end_field: str
    message: str = "End time must be after start time"
    allow_equal: bool = False

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.start_field, self.end_field)

    @property
    def target(self) -> str:
        return self.end_field

    @property
    def display_fields(self) -> tuple[str, ...]:
        return self.fields

    def check(self, values: Mapping[str, Any]) -> str:
        start_raw = values.get(self.start_field)
        end_raw = values.get(self.end_field)
        if not (_is_filled(start_raw) and _is_filled(end_raw)):
            return ""

        start = parse_time(start_raw)
        end = parse_time(end_raw)
        if start is None or end is None:
            return ""

        if self.allow_equal:
            return self.message if end < start else ""
        return self.message if end <= start else ""


def _time_range_factory(definition: ConstraintDefinition) -> TimeRangeConstraint:
    """Factory for creating TimeRangeConstraint from definition."""
    constraint = TimeRangeConstraint(
        start_field=definition.params.get("startField", ""),
        end_field=definition.params.get("endField", ""),
        allow_equal=definition.params.get("allowEqual", False),
    )
    if definition.message:
        constraint.message = definition.message
    return constraint


# =============================================================================
# Fields Match Constraint
# =============================================================================


@dataclass
class FieldsMatchConstraint:
    """Validates that a confirmation field repeats another field.

    Params:
        field: The field being confirmed (e.g. "password")
        otherField: The confirmation field (e.g. "confirmPassword")

    Silent until the confirmation field is filled. The message is shown on
    the confirmation field only.
    """

    field_name: str
    confirm_field: str
    message: str = "Values do not match"

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field_name, self.confirm_field)

    @property
    def target(self) -> str:
        return self.confirm_field

    @property
    def display_fields(self) -> tuple[str, ...]:
        return (self.confirm_field,)

    def check(self, values: Mapping[str, Any]) -> str:
        confirmation = values.get(self.confirm_field)
        if not _is_filled(confirmation):
            return ""
        return self.message if values.get(self.field_name) != confirmation else ""


def _fields_match_factory(definition: ConstraintDefinition) -> FieldsMatchConstraint:
    """Factory for creating FieldsMatchConstraint from definition."""
    constraint = FieldsMatchConstraint(
        field_name=definition.params.get("field", ""),
        confirm_field=definition.params.get("otherField", ""),
    )
    if definition.message:
        constraint.message = definition.message
    return constraint


# =============================================================================
# Registry
# =============================================================================


class ConstraintRegistry:
    """Registry for cross-field constraint factories.

    Constraint types must be registered before definitions naming them can
    be resolved.

    Example:
        ConstraintRegistry.register_factory("timeRange", _time_range_factory)
        constraint = ConstraintRegistry.create(ConstraintDefinition(type="timeRange", ...))
    """

    _factories: dict[str, Callable[[ConstraintDefinition], CrossFieldConstraint]] = {}

    @classmethod
    def register_factory(
        cls,
        name: str,
        factory: Callable[[ConstraintDefinition], CrossFieldConstraint],
    ) -> None:
        """Register a factory by constraint type name.

        Idempotent - re-registering the same name is a no-op.
        """
        if name in cls._factories:
            return
        cls._factories[name] = factory

    @classmethod
    def create(cls, definition: ConstraintDefinition) -> CrossFieldConstraint:
        """Create a constraint from its definition.

        Raises:
            ValueError: If the constraint type is not registered
        """
        factory = cls._factories.get(definition.type)
        if factory is None:
            raise ValueError(
                f"Constraint type '{definition.type}' is not registered. "
                f"Available: {', '.join(sorted(cls._factories)) or 'none'}"
            )
        return factory(definition)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._factories

    @classmethod
    def list_types(cls) -> list[str]:
        return sorted(cls._factories)

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations (for testing)."""
        cls._factories.clear()


def register_builtin_constraints() -> None:
    """Register all built-in cross-field constraints."""
    ConstraintRegistry.register_factory("timeRange", _time_range_factory)
    ConstraintRegistry.register_factory("fieldsMatch", _fields_match_factory)
