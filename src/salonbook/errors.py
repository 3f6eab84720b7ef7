"""Exception types for SalonBook.

Field-level constraint violations are never raised; they are returned as
messages and stored in the validation state. The exceptions here cover
programming and configuration mistakes only.
"""


class SalonBookError(Exception):
    """Base class for all SalonBook errors."""


class FormDefinitionError(SalonBookError, ValueError):
    """A form declaration is malformed (unknown rule kind, bad regex, etc.)."""


class UnknownFieldError(SalonBookError, KeyError):
    """An operation named a field outside the form's fixed field set."""

    def __init__(self, name: str, form: str | None = None):
        self.name = name
        self.form = form
        where = f" in form '{form}'" if form else ""
        super().__init__(f"Unknown field '{name}'{where}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return self.args[0]
