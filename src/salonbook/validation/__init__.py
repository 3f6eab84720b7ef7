"""SalonBook validation system.

This package provides the form validation engine and its extensions:
- Rule variants (Required, MinLength, MaxLength, Pattern) evaluated in order
- FormValidation: per-form state machine for values, errors and touched flags
- Cross-field constraints (timeRange, fieldsMatch) composed via CrossFieldForm

Usage:
    from salonbook.validation import FormValidation, Pattern, Required

    form = FormValidation(
        {"email": ""},
        {"email": [Required("Email is required"), Pattern(r"@", "Invalid email")]},
    )
    form.handle_change("email", "stylist@salon.example")
    form.validate_all()
"""

from salonbook.validation.composite import CrossFieldForm
from salonbook.validation.constraints import (
    ConstraintDefinition,
    ConstraintRegistry,
    CrossFieldConstraint,
    FieldsMatchConstraint,
    TimeRangeConstraint,
    register_builtin_constraints,
)
from salonbook.validation.engine import FormValidation
from salonbook.validation.rules import evaluate_field, is_blank, is_present
from salonbook.validation.types import (
    MaxLength,
    MinLength,
    Pattern,
    Required,
    Rule,
    RuleMap,
    ValidationState,
    rule_from_dict,
)

__all__ = [
    # Types
    "MaxLength",
    "MinLength",
    "Pattern",
    "Required",
    "Rule",
    "RuleMap",
    "ValidationState",
    "rule_from_dict",
    # Evaluation
    "evaluate_field",
    "is_blank",
    "is_present",
    # Engine
    "FormValidation",
    # Cross-field
    "ConstraintDefinition",
    "ConstraintRegistry",
    "CrossFieldConstraint",
    "CrossFieldForm",
    "FieldsMatchConstraint",
    "TimeRangeConstraint",
    "register_builtin_constraints",
]
