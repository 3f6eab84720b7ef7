"""Declarative form definitions.

Forms are declared in YAML (one file per form) and resolved into
``FormDefinition`` objects, which build fresh validation engines::

    from salonbook.forms import load_forms

    loader = load_forms(FormsConfig.from_env().forms_path)
    form = loader.get_form("login").build()
"""

from salonbook.forms.loader import (
    FieldDefinition,
    FormDefinition,
    FormLoader,
    load_forms,
)

__all__ = [
    "FieldDefinition",
    "FormDefinition",
    "FormLoader",
    "load_forms",
]
