"""Per-field and per-array error extraction.

Both extractors read the *live* control tree, not the snapshot: the
snapshot says which fields changed, the controls say whether they fail.
"""

from collections.abc import Callable, Mapping
from typing import Any, Protocol, TypeAlias

from formwatch.messages import message_for


class ControlState(Protocol):
    """What the extractors read from a control."""

    @property
    def failures(self) -> Mapping[str, Any]: ...

    touched: bool
    dirty: bool


Mapper: TypeAlias = Callable[[Mapping[str, Any]], str]


def has_error(control: ControlState) -> bool:
    """True when the control fails validation and the user has interacted."""
    return bool(control.failures) and (control.touched or control.dirty)


def extract_control(name: str, control: ControlState, mapper: Mapper = message_for) -> str | None:
    """Return the message for a scalar control, or ``None`` if none is due.

    *name* is only used by callers for bookkeeping; the decision depends
    on the control alone.
    """
    if not has_error(control):
        return None
    return mapper(control.failures)


def extract_array(name: str, array: Any, mapper: Mapper = message_for) -> list[dict[str, str]]:
    """Return one ``{child: message}`` dict per item of a repeated group.

    Items are visited in their current order. Valid items contribute an
    empty dict so the result stays index-aligned with the group.
    """
    errors: list[dict[str, str]] = []
    for item in array.controls:
        item_errors: dict[str, str] = {}
        for child_name, child in item.controls.items():
            if has_error(child):
                item_errors[child_name] = mapper(child.failures)
        errors.append(item_errors)
    return errors
