"""Formwatch exception hierarchy.

Raised at construction and capture boundaries. Nothing in this module is
raised out of a running subscription; the aggregator logs and continues.
"""


class FormwatchError(Exception):
    """Base for all formwatch-specific errors."""


class ConfigurationError(FormwatchError):
    """Raised when a ``WatchConfig`` value is invalid.

    Typically raised from ``WatchConfig.__post_init__``.
    """


class SchemaError(FormwatchError):
    """Raised when a control tree is built with an invalid shape.

    Examples: a ``FormArray`` item that is not a ``FormGroup``, or
    ``patch_value`` naming a child the group does not have.
    """


class MalformedSnapshotError(FormwatchError):
    """Raised when a form value cannot be captured as a ``FormSnapshot``.

    A repeated group's value must be an ordered sequence of mappings.
    Anything else is a programmer error in the producer and fails at
    capture time, never deep inside array extraction.
    """

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__(f"Malformed value for {field!r}: {detail}")
