"""In-memory form control tree — the interface the error aggregator reads.

Usage::

    from formwatch.forms import FormArray, FormControl, FormGroup
    from formwatch.forms.validators import email, min_length, required

    form = FormGroup({
        "first_name": FormControl("", [required, min_length(5)]),
        "email": FormControl("", [email]),
        "items": FormArray([
            FormGroup({"name": FormControl("", [required])}),
        ]),
    })
    form.get("email").set_value("x")   # emits on form.value_changes

Schemas are built once and immutable for the session; only values,
interaction flags and the items of a ``FormArray`` change.
"""

from formwatch.forms.controls import (
    AbstractControl,
    ControlKind,
    FormArray,
    FormControl,
    FormGroup,
    ValueChanges,
)

__all__ = [
    "AbstractControl",
    "ControlKind",
    "FormArray",
    "FormControl",
    "FormGroup",
    "ValueChanges",
]
