"""Tests for cross-field constraints and CrossFieldForm."""

from datetime import time

import pytest

from salonbook.errors import FormDefinitionError
from salonbook.validation.composite import CrossFieldForm
from salonbook.validation.constraints import (
    ConstraintDefinition,
    ConstraintRegistry,
    FieldsMatchConstraint,
    TimeRangeConstraint,
    parse_time,
    register_builtin_constraints,
)
from salonbook.validation.engine import FormValidation
from salonbook.validation.types import Required


@pytest.fixture(autouse=True)
def setup_registry():
    """Register constraints before each test."""
    ConstraintRegistry.clear()
    register_builtin_constraints()
    yield
    ConstraintRegistry.clear()
    register_builtin_constraints()


def make_appointment_form() -> CrossFieldForm:
    engine = FormValidation(
        {
            "service_id": 1,
            "date": "2026-10-19",
            "start_time": "10:00",
            "end_time": "11:00",
            "notes": "",
        },
        {
            "date": [Required("Date is required")],
            "start_time": [Required("Start time is required")],
            "end_time": [Required("End time is required")],
        },
        name="appointment",
    )
    return CrossFieldForm(engine, [TimeRangeConstraint("start_time", "end_time")])


# =============================================================================
# Time Range
# =============================================================================


class TestParseTime:
    def test_hours_minutes(self):
        assert parse_time("10:30") == time(10, 30)

    def test_with_seconds(self):
        assert parse_time("10:30:15") == time(10, 30, 15)

    def test_time_instance(self):
        assert parse_time(time(9)) == time(9)

    def test_unparseable(self):
        assert parse_time("ten") is None
        assert parse_time(1030) is None


class TestTimeRangeConstraint:
    def test_end_after_start(self):
        c = TimeRangeConstraint("start", "end")
        assert c.check({"start": "10:00", "end": "11:00"}) == ""

    def test_end_before_start(self):
        c = TimeRangeConstraint("start", "end")
        assert c.check({"start": "11:00", "end": "10:00"}) == "End time must be after start time"

    def test_equal_times_rejected_by_default(self):
        c = TimeRangeConstraint("start", "end")
        assert c.check({"start": "10:00", "end": "10:00"}) != ""

    def test_equal_times_allowed(self):
        c = TimeRangeConstraint("start", "end", allow_equal=True)
        assert c.check({"start": "10:00", "end": "10:00"}) == ""

    def test_skipped_when_either_empty(self):
        c = TimeRangeConstraint("start", "end")
        assert c.check({"start": "", "end": "09:00"}) == ""
        assert c.check({"start": "11:00", "end": None}) == ""

    def test_unparseable_ignored(self):
        c = TimeRangeConstraint("start", "end")
        assert c.check({"start": "soon", "end": "09:00"}) == ""

    def test_target_is_end_field(self):
        assert TimeRangeConstraint("start", "end").target == "end"

    def test_displayed_on_both_fields(self):
        assert TimeRangeConstraint("start", "end").display_fields == ("start", "end")


# =============================================================================
# Fields Match
# =============================================================================


class TestFieldsMatchConstraint:
    def test_silent_until_confirmation_filled(self):
        c = FieldsMatchConstraint("password", "confirm")
        assert c.check({"password": "Secret1!", "confirm": ""}) == ""

    def test_mismatch(self):
        c = FieldsMatchConstraint("password", "confirm", message="Passwords do not match")
        assert c.check({"password": "Secret1!", "confirm": "Secret2!"}) == "Passwords do not match"

    def test_match(self):
        c = FieldsMatchConstraint("password", "confirm")
        assert c.check({"password": "Secret1!", "confirm": "Secret1!"}) == ""

    def test_displayed_on_confirmation_field(self):
        c = FieldsMatchConstraint("password", "confirm")
        assert c.target == "confirm"
        assert c.display_fields == ("confirm",)


# =============================================================================
# Registry
# =============================================================================


class TestConstraintRegistry:
    def test_builtin_types(self):
        assert ConstraintRegistry.list_types() == ["fieldsMatch", "timeRange"]

    def test_create_time_range(self):
        constraint = ConstraintRegistry.create(ConstraintDefinition(
            type="timeRange",
            params={"startField": "open", "endField": "close", "allowEqual": True},
            message="Open time must be before close time",
        ))
        assert isinstance(constraint, TimeRangeConstraint)
        assert constraint.fields == ("open", "close")
        assert constraint.allow_equal is True
        assert constraint.message == "Open time must be before close time"

    def test_create_uses_default_message(self):
        constraint = ConstraintRegistry.create(ConstraintDefinition(
            type="fieldsMatch",
            params={"field": "password", "otherField": "confirm"},
        ))
        assert constraint.message == "Values do not match"

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="not registered"):
            ConstraintRegistry.create(ConstraintDefinition(type="unique"))

    def test_register_is_idempotent(self):
        register_builtin_constraints()
        assert ConstraintRegistry.list_types() == ["fieldsMatch", "timeRange"]

    def test_definition_from_dict(self):
        definition = ConstraintDefinition.from_dict({
            "type": "timeRange",
            "params": {"startField": "a", "endField": "b"},
        })
        assert definition.type == "timeRange"
        assert definition.params == {"startField": "a", "endField": "b"}
        assert definition.message == ""


# =============================================================================
# CrossFieldForm
# =============================================================================


class TestCrossFieldForm:
    def test_initial_defaults_are_valid(self):
        form = make_appointment_form()
        assert form.is_valid
        assert form.cross_errors == {}

    def test_end_before_start(self):
        form = make_appointment_form()
        form.handle_change("end_time", "09:00")
        assert form.cross_errors == {"end_time": "End time must be after start time"}
        assert "end_time" not in form.errors
        assert form.engine.is_valid
        assert form.is_valid is False

    def test_fixing_start_clears_error(self):
        form = make_appointment_form()
        form.handle_change("end_time", "09:00")
        form.handle_change("start_time", "08:00")
        assert form.cross_errors == {}
        assert form.is_valid

    def test_unrelated_change_keeps_cross_error(self):
        form = make_appointment_form()
        form.handle_change("end_time", "09:00")
        form.handle_change("notes", "Beard trim")
        assert "end_time" in form.cross_errors

    def test_field_error_prefers_own_error(self):
        form = make_appointment_form()
        form.handle_change("end_time", "")
        assert form.field_error("end_time") == "End time is required"

    def test_field_error_shows_cross_error_on_both_times(self):
        form = make_appointment_form()
        form.handle_change("end_time", "09:00")
        assert form.field_error("end_time") == "End time must be after start time"
        assert form.field_error("start_time") == "End time must be after start time"
        assert not form.is_field_valid("end_time")
        assert not form.is_field_valid("start_time")
        assert form.is_field_valid("notes")

    def test_start_time_own_error_wins(self):
        form = make_appointment_form()
        form.handle_change("end_time", "09:00")
        form.handle_change("start_time", "")
        assert form.field_error("start_time") == "Start time is required"

    def test_mismatch_shown_on_confirmation_only(self):
        engine = FormValidation({"password": "", "confirmPassword": ""})
        form = CrossFieldForm(engine, [
            FieldsMatchConstraint("password", "confirmPassword", "Passwords do not match"),
        ])
        form.handle_change("password", "Secret1!")
        form.handle_change("confirmPassword", "Secret2!")
        assert form.field_error("confirmPassword") == "Passwords do not match"
        assert form.field_error("password") == ""
        assert form.is_field_valid("password")

    def test_validate_all(self):
        form = make_appointment_form()
        form.handle_change("date", "")
        form.handle_change("end_time", "09:00")
        assert form.validate_all() is False
        assert form.errors == {"date": "Date is required"}
        assert form.cross_errors == {"end_time": "End time must be after start time"}

    def test_validate_all_passes(self):
        form = make_appointment_form()
        assert form.validate_all() is True

    def test_reset_clears_cross_errors(self):
        form = make_appointment_form()
        form.handle_change("end_time", "09:00")
        form.handle_blur("end_time")
        form.reset()
        assert form.cross_errors == {}
        assert form.values["end_time"] == "11:00"
        assert form.touched == {}

    def test_blur_delegates(self):
        form = make_appointment_form()
        form.handle_blur("notes")
        assert form.is_field_touched("notes")

    def test_unknown_constraint_field(self):
        engine = FormValidation({"start": "", "end": ""})
        with pytest.raises(FormDefinitionError):
            CrossFieldForm(engine, [TimeRangeConstraint("start", "finish")])

    def test_shared_target_keeps_first_failure(self):
        engine = FormValidation({"open": "", "close": "", "break_end": ""})
        form = CrossFieldForm(engine, [
            TimeRangeConstraint("open", "close", message="close before open"),
            TimeRangeConstraint("break_end", "close", message="close before break"),
        ])
        form.handle_change("open", "12:00")
        form.handle_change("close", "11:00")
        form.handle_change("break_end", "10:00")
        assert form.cross_errors == {"close": "close before open"}
