"""Load and resolve form definitions from YAML files."""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from salonbook.errors import FormDefinitionError
from salonbook.validation.composite import CrossFieldForm
from salonbook.validation.constraints import (
    ConstraintDefinition,
    ConstraintRegistry,
    CrossFieldConstraint,
    register_builtin_constraints,
)
from salonbook.validation.engine import FormValidation
from salonbook.validation.types import Rule, rule_from_dict

logger = logging.getLogger(__name__)

# Supported values for a field's ``auto`` key
AUTO_DEFAULTS = ("today",)


@dataclass
class FieldDefinition:
    name: str
    display_name: str
    default: Any = ""
    auto: str | None = None  # "today"
    rules: list[Rule] = field(default_factory=list)

    def initial_value(self) -> Any:
        """Resolve the construction-time value for this field."""
        if self.auto == "today":
            return date.today().isoformat()
        return self.default


@dataclass
class FormDefinition:
    name: str
    display_name: str
    fields: list[FieldDefinition]
    constraints: list[ConstraintDefinition] = field(default_factory=list)
    source: Path | None = None

    def initial_values(self) -> dict[str, Any]:
        return {f.name: f.initial_value() for f in self.fields}

    def rule_map(self) -> dict[str, list[Rule]]:
        return {f.name: list(f.rules) for f in self.fields if f.rules}

    def get_field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def build_constraints(self) -> list[CrossFieldConstraint]:
        register_builtin_constraints()
        constraints = []
        for definition in self.constraints:
            try:
                constraints.append(ConstraintRegistry.create(definition))
            except ValueError as e:
                raise FormDefinitionError(f"Form '{self.name}': {e}") from e
        return constraints

    def build(self) -> FormValidation | CrossFieldForm:
        """Create a fresh engine for this form.

        Returns a ``CrossFieldForm`` when cross-field constraints are
        declared, otherwise a plain ``FormValidation``.
        """
        engine = FormValidation(self.initial_values(), self.rule_map(), name=self.name)
        if not self.constraints:
            return engine
        return CrossFieldForm(engine, self.build_constraints())


class FormLoader:
    """Loads form definitions from YAML files."""

    def __init__(self, forms_path: Path):
        self.forms_path = forms_path
        self.forms: dict[str, FormDefinition] = {}

    def load_all(self) -> None:
        """Load every ``*.yaml`` form definition under ``forms_path``."""
        self.forms = {}
        if not self.forms_path.exists():
            logger.warning("Forms directory not found: %s", self.forms_path)
            return

        for yaml_file in sorted(self.forms_path.glob("*.yaml")):
            with open(yaml_file) as f:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise FormDefinitionError(f"{yaml_file}: YAML parse error: {e}") from e

            if not data or "form" not in data:
                logger.warning("Skipping %s: no 'form' key", yaml_file)
                continue

            form = self._resolve_form(data, source=yaml_file)
            if form.name in self.forms:
                raise FormDefinitionError(
                    f"Duplicate form '{form.name}' in {yaml_file} "
                    f"(already defined in {self.forms[form.name].source})"
                )
            self.forms[form.name] = form
            logger.debug("Loaded form '%s' (%d fields)", form.name, len(form.fields))

    def _resolve_form(self, data: dict, source: Path | None = None) -> FormDefinition:
        """Convert a form dict to a FormDefinition, checking field references."""
        name = data["form"]
        fields = [self._resolve_field(f, name) for f in data.get("fields", [])]

        seen: set[str] = set()
        for f in fields:
            if f.name in seen:
                raise FormDefinitionError(f"Form '{name}' declares field '{f.name}' twice")
            seen.add(f.name)

        try:
            constraints = [
                ConstraintDefinition.from_dict(c) for c in data.get("constraints", [])
            ]
        except KeyError as e:
            raise FormDefinitionError(f"Form '{name}': constraint is missing {e}") from e
        form = FormDefinition(
            name=name,
            display_name=data.get("displayName", self._to_display_name(name)),
            fields=fields,
            constraints=constraints,
            source=source,
        )

        # Resolve constraints eagerly so bad references fail at load time
        field_names = {f.name for f in fields}
        for constraint in form.build_constraints():
            unknown = [f for f in constraint.fields if f not in field_names]
            if unknown:
                raise FormDefinitionError(
                    f"Form '{name}': constraint references unknown field(s): "
                    f"{', '.join(unknown)}"
                )
        return form

    def _resolve_field(self, data: dict, form_name: str) -> FieldDefinition:
        """Convert field dict to FieldDefinition."""
        if "name" not in data:
            raise FormDefinitionError(f"Form '{form_name}' has a field without a name")
        name = data["name"]

        auto = data.get("auto")
        if auto is not None and auto not in AUTO_DEFAULTS:
            raise FormDefinitionError(
                f"Field '{form_name}.{name}': unsupported auto default '{auto}'"
            )

        try:
            rules = [rule_from_dict(r) for r in data.get("rules", [])]
        except FormDefinitionError as e:
            raise FormDefinitionError(f"Field '{form_name}.{name}': {e}") from e

        return FieldDefinition(
            name=name,
            display_name=data.get("displayName", self._to_display_name(name)),
            default=data.get("default", ""),
            auto=auto,
            rules=rules,
        )

    def _to_display_name(self, name: str) -> str:
        """Convert snake_case or camelCase to Title Case."""
        result = []
        for i, char in enumerate(name):
            if char == "_":
                result.append(" ")
                continue
            if char.isupper() and i > 0:
                result.append(" ")
            result.append(char)
        return "".join(result).title()

    def get_form(self, name: str) -> FormDefinition | None:
        """Get a resolved form by name."""
        return self.forms.get(name)

    def list_forms(self) -> list[str]:
        """List all form names."""
        return list(self.forms.keys())


def load_forms(forms_path: Path) -> FormLoader:
    """Create a loader for ``forms_path`` and load everything in it."""
    loader = FormLoader(forms_path)
    loader.load_all()
    return loader
