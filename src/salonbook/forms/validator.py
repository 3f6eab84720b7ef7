"""
forms/validator.py — JSON Schema validation for SalonBook form definition files.

Validates form YAML files against the bundled JSON Schemas before they are
loaded, so authoring mistakes are reported per file and per location instead
of failing on the first bad rule.

Usage:
    from salonbook.forms.validator import validate_forms_dir, validate_yaml_file

    issues = validate_forms_dir(Path("forms"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Public data types
# ---------------------------------------------------------------------------

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

FORM_SCHEMA = "form.schema.json"

_SCHEMA_NAMES = ("_defs.schema.json", FORM_SCHEMA)


@dataclass
class ValidationIssue:
    """A single validation finding for a form YAML file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "fields[0]/rules[1]"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema(name: str) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open() as fh:
        return json.load(fh)


def _load_registry() -> Registry:
    """Build a jsonschema Registry containing all SalonBook schemas."""
    resources = []
    for name in _SCHEMA_NAMES:
        schema = _load_schema(name)
        resources.append(
            (schema["$id"], Resource(contents=schema, specification=DRAFT202012))
        )
    return Registry().with_resources(resources)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _duplicate_field_issues(yaml_path: Path, doc: dict[str, Any]) -> list[ValidationIssue]:
    """Flag field names declared more than once (not expressible in the schema)."""
    issues = []
    seen: set[str] = set()
    for i, field in enumerate(doc.get("fields") or []):
        name = field.get("name") if isinstance(field, dict) else None
        if not isinstance(name, str):
            continue
        if name in seen:
            issues.append(
                ValidationIssue(
                    file=yaml_path,
                    message=f"Duplicate field name '{name}'",
                    path=f"fields[{i}]/name",
                )
            )
        seen.add(name)
    return issues


def _rule_order_issues(yaml_path: Path, doc: dict[str, Any]) -> list[ValidationIssue]:
    """Warn when ``required`` is not the first rule of a field.

    Rules short-circuit in declared order, but length and pattern checks skip
    empty values, so a late ``required`` still fires. Listing it first keeps
    the declaration readable.
    """
    issues = []
    for i, field in enumerate(doc.get("fields") or []):
        if not isinstance(field, dict):
            continue
        rules = field.get("rules") or []
        for j, rule in enumerate(rules):
            if isinstance(rule, dict) and "required" in rule and j > 0:
                issues.append(
                    ValidationIssue(
                        file=yaml_path,
                        message="'required' should be the first rule of a field",
                        path=f"fields[{i}]/rules[{j}]",
                        severity="warning",
                    )
                )
    return issues


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_yaml_file(
    yaml_path: Path,
    schema_name: str = FORM_SCHEMA,
    *,
    registry: Registry | None = None,
) -> list[ValidationIssue]:
    """
    Validate a single YAML file against the named schema.

    Args:
        yaml_path:   Path to the YAML file to validate.
        schema_name: Filename of the schema (default ``"form.schema.json"``).
        registry:    Pre-built schema registry.  Built automatically if omitted.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    # 1. Parse YAML
    try:
        with yaml_path.open() as fh:
            doc = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if doc is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    # 2. Load schema + registry
    if registry is None:
        registry = _load_registry()

    schema = _load_schema(schema_name)
    validator = Draft202012Validator(
        schema,
        registry=registry,
        format_checker=Draft202012Validator.FORMAT_CHECKER,
    )

    # 3. Collect validation errors
    issues: list[ValidationIssue] = []
    for error in sorted(validator.iter_errors(doc), key=lambda e: list(e.path)):
        issues.append(
            ValidationIssue(
                file=yaml_path,
                message=error.message,
                path=_json_path(error),
            )
        )

    # 4. Checks the schema cannot express
    if isinstance(doc, dict):
        issues.extend(_duplicate_field_issues(yaml_path, doc))
        issues.extend(_rule_order_issues(yaml_path, doc))

    return issues


def validate_forms_dir(
    forms_dir: Path,
    *,
    strict: bool = False,
) -> list[ValidationIssue]:
    """
    Validate all ``*.yaml`` form definitions directly under *forms_dir*.

    Args:
        forms_dir: Directory holding form definition files.
        strict:    If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of :class:`ValidationIssue` objects across all files.
        Empty list means all files are valid.
    """
    if not forms_dir.is_dir():
        return [
            ValidationIssue(
                file=forms_dir,
                message=f"Forms directory does not exist: {forms_dir}",
            )
        ]

    # Build registry once — shared across all file validations
    try:
        registry = _load_registry()
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        return [
            ValidationIssue(
                file=_SCHEMAS_DIR,
                message=f"Failed to load JSON Schema files: {exc}",
            )
        ]

    all_issues: list[ValidationIssue] = []
    for yaml_file in sorted(forms_dir.glob("*.yaml")):
        file_issues = validate_yaml_file(yaml_file, registry=registry)
        if strict:
            for issue in file_issues:
                if issue.severity == "warning":
                    issue.severity = "error"
        all_issues.extend(file_issues)

    logger.debug("Validated %s: %d issue(s)", forms_dir, len(all_issues))
    return all_issues
