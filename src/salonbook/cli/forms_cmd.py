"""Form CLI commands — validate, list and check."""

import json
from pathlib import Path
from typing import Any

import click

from salonbook.config import FormsConfig
from salonbook.errors import FormDefinitionError, UnknownFieldError
from salonbook.forms.loader import FormDefinition, FormLoader
from salonbook.forms.validator import validate_forms_dir, validate_yaml_file
from salonbook.validation.composite import CrossFieldForm
from salonbook.validation.types import is_required


def _resolve_forms_path(ctx: click.Context, override: Path | None) -> Path:
    """Forms directory from --forms-path, else from the environment config."""
    if override is not None:
        return override
    config = ctx.obj if isinstance(ctx.obj, FormsConfig) else FormsConfig.from_env()
    return config.forms_path


def _load(forms_path: Path) -> FormLoader:
    if not forms_path.exists():
        click.echo(f"Error: Forms directory not found at {forms_path}", err=True)
        raise SystemExit(1)
    loader = FormLoader(forms_path)
    try:
        loader.load_all()
    except FormDefinitionError as e:
        click.echo(click.style(f"Failed to load forms: {e}", fg="red"), err=True)
        raise SystemExit(1)
    return loader


def _coerce(definition: FormDefinition, name: str, raw: str) -> Any:
    """Convert a command-line string to the type of the field's default."""
    field = definition.get_field(name)
    default = field.default if field else None
    if isinstance(default, bool):
        return raw.lower() in ("1", "true", "yes", "on")
    try:
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError:
        raise click.BadParameter(
            f"'{raw}' is not a valid {type(default).__name__} for field '{name}'",
            param_hint="--value",
        )
    return raw


def _parse_assignments(values: tuple[str, ...]) -> list[tuple[str, str]]:
    assignments = []
    for item in values:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got '{item}'", param_hint="--value")
        assignments.append((name.strip(), raw))
    return assignments


forms_path_option = click.option(
    "--forms-path",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory of form definitions (default: $SALONBOOK_FORMS_PATH or bundled forms).",
)


@click.group()
def forms():
    """Form definition commands."""
    pass


@forms.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Validate a single YAML file instead of the whole forms directory.",
)
@forms_path_option
@click.pass_context
def validate(ctx: click.Context, strict: bool, target_path: Path | None, forms_path: Path | None):
    """Validate form YAML files against JSON Schemas."""
    forms_path = _resolve_forms_path(ctx, forms_path)

    # ── Schema (JSON Schema) validation ─────────────────────────────────────
    if target_path is not None:
        schema_issues = validate_yaml_file(target_path)
        if strict:
            for issue in schema_issues:
                issue.severity = "error"
    else:
        if not forms_path.exists():
            click.echo(f"Error: Forms directory not found at {forms_path}", err=True)
            raise SystemExit(1)
        schema_issues = validate_forms_dir(forms_path, strict=strict)

    errors = [i for i in schema_issues if i.severity == "error"]
    warnings = [i for i in schema_issues if i.severity == "warning"]

    for issue in schema_issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # ── Semantic (loader) validation ─────────────────────────────────────────
    # Only runs when validating the full directory (target_path is None)
    if target_path is None:
        loader = _load(forms_path)
        names = loader.list_forms()
        click.echo(f"\nLoaded {len(names)} forms:")
        for name in sorted(names):
            definition = loader.get_form(name)
            field_count = len(definition.fields) if definition else 0
            constraint_count = len(definition.constraints) if definition else 0
            click.echo(
                f"  ✓ {name} ({field_count} fields, {constraint_count} cross-field constraints)"
            )

    click.echo(click.style("\nAll form definitions are valid.", fg="green", bold=True))


@forms.command("list")
@forms_path_option
@click.pass_context
def list_cmd(ctx: click.Context, forms_path: Path | None):
    """List form definitions and their fields."""
    loader = _load(_resolve_forms_path(ctx, forms_path))
    names = loader.list_forms()
    if not names:
        click.echo("No forms found.")
        return

    for name in sorted(names):
        definition = loader.get_form(name)
        click.echo(click.style(f"{name}", bold=True) + f" — {definition.display_name}")
        for field in definition.fields:
            marker = "*" if is_required(field.rules) else " "
            click.echo(f"  {marker} {field.name} ({len(field.rules)} rule(s))")


@forms.command()
@click.argument("form_name")
@click.option(
    "--value",
    "-v",
    "values",
    multiple=True,
    help="Field value as NAME=VALUE. Repeatable.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@forms_path_option
@click.pass_context
def check(
    ctx: click.Context,
    form_name: str,
    values: tuple[str, ...],
    as_json: bool,
    forms_path: Path | None,
):
    """Apply field values to FORM_NAME and run a full submit-time validation."""
    loader = _load(_resolve_forms_path(ctx, forms_path))
    definition = loader.get_form(form_name)
    if definition is None:
        available = ", ".join(sorted(loader.list_forms())) or "none"
        raise click.BadParameter(
            f"Unknown form '{form_name}'. Available: {available}",
            param_hint="FORM_NAME",
        )

    form = definition.build()
    for name, raw in _parse_assignments(values):
        try:
            form.handle_change(name, _coerce(definition, name, raw))
        except UnknownFieldError as e:
            raise click.BadParameter(str(e), param_hint="--value")

    valid = form.validate_all()
    errors = dict(form.errors)
    cross_errors = dict(form.cross_errors) if isinstance(form, CrossFieldForm) else {}

    if as_json:
        click.echo(json.dumps(
            {
                "form": definition.name,
                "valid": valid,
                "values": dict(form.values),
                "errors": errors,
                "crossFieldErrors": cross_errors,
            },
            indent=2,
            default=str,
        ))
    else:
        for name, message in errors.items():
            click.echo(click.style(f"  ✗ {name}: {message}", fg="red"))
        for name, message in cross_errors.items():
            click.echo(click.style(f"  ✗ {name}: {message}", fg="red"))
        if valid:
            click.echo(click.style(f"{definition.name}: valid", fg="green", bold=True))
        else:
            total = len(errors) + len(cross_errors)
            click.echo(click.style(f"{definition.name}: {total} error(s)", fg="red", bold=True))

    if not valid:
        raise SystemExit(1)
