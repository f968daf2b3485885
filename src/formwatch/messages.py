"""Message selection — one display string per failure set.

Only the highest-priority failure is reported::

    email       -> "email required"
    required    -> "this field is required"
    min_length  -> "please input a value longer than N, you only input M"
    (anything else) -> fallback

Selection never raises. Missing ``min_length`` metadata renders as ``?``.
"""

from collections.abc import Mapping
from typing import Any

DEFAULT_FALLBACK = "this field is invalid"


def _min_length_message(meta: Any) -> str:
    if not isinstance(meta, Mapping):
        meta = {}
    required_length = meta.get("required_length", "?")
    actual_length = meta.get("actual_length", "?")
    return (
        f"please input a value longer than {required_length}, "
        f"you only input {actual_length}"
    )


def message_for(failures: Mapping[str, Any], *, fallback: str = DEFAULT_FALLBACK) -> str:
    """Return the display string for the highest-priority failure."""
    if "email" in failures:
        return "email required"
    if "required" in failures:
        return "this field is required"
    if "min_length" in failures:
        return _min_length_message(failures["min_length"])
    return fallback


class MessageMapper:
    """``message_for`` bound to a fallback string.

    Callable, so extractors can take either this or a plain function::

        mapper = MessageMapper(fallback="invalid value")
        mapper({"pattern": {...}})  # -> "invalid value"
    """

    __slots__ = ("fallback",)

    def __init__(self, fallback: str = DEFAULT_FALLBACK) -> None:
        self.fallback = fallback

    def __call__(self, failures: Mapping[str, Any]) -> str:
        return message_for(failures, fallback=self.fallback)

    def __repr__(self) -> str:
        return f"MessageMapper(fallback={self.fallback!r})"
