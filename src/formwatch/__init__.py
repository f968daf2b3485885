"""Formwatch — change-diffing validation error aggregation for live forms.

Watches a form's value stream, settles bursts of edits, works out which
top-level fields changed, and writes display-ready messages for the
changed fields that fail validation into an aggregate the caller owns.

Basic usage::

    import anyio
    from formwatch import ErrorAggregate, watch
    from formwatch.forms import FormControl, FormGroup
    from formwatch.forms.validators import email, required

    form = FormGroup({
        "name": FormControl("", [required]),
        "email": FormControl("", [email]),
    })
    errors = ErrorAggregate()

    async def main():
        async with watch(form, errors):
            form.get("email").set_value("not-an-address")
            await anyio.sleep(0.6)
        print(errors.to_dict())  # {'email': 'email required'}

    anyio.run(main)
"""

__version__ = "0.1.0"
__all__ = [
    "ChangeStream",
    "ConfigurationError",
    "ErrorAggregate",
    "ErrorAggregator",
    "FormSnapshot",
    "FormwatchError",
    "MalformedSnapshotError",
    "MessageMapper",
    "SchemaError",
    "Subscription",
    "WatchConfig",
    "capture",
    "diff",
    "extract_array",
    "extract_control",
    "find_errors",
    "handle_error",
    "has_error",
    "message_for",
    "watch",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "ChangeStream": "formwatch.stream",
    "Subscription": "formwatch.stream",
    "ConfigurationError": "formwatch.errors",
    "FormwatchError": "formwatch.errors",
    "MalformedSnapshotError": "formwatch.errors",
    "SchemaError": "formwatch.errors",
    "ErrorAggregate": "formwatch.aggregate",
    "ErrorAggregator": "formwatch.aggregator",
    "find_errors": "formwatch.aggregator",
    "handle_error": "formwatch.aggregator",
    "watch": "formwatch.aggregator",
    "FormSnapshot": "formwatch.snapshot",
    "capture": "formwatch.snapshot",
    "MessageMapper": "formwatch.messages",
    "message_for": "formwatch.messages",
    "WatchConfig": "formwatch.config",
    "diff": "formwatch.differ",
    "extract_array": "formwatch.extraction",
    "extract_control": "formwatch.extraction",
    "has_error": "formwatch.extraction",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import formwatch`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
