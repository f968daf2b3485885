"""Immutable form snapshots.

``capture()`` turns the plain value dict a form emits into a
``FormSnapshot``: nested mappings become snapshots, sequences become
tuples. Snapshots compare structurally, so two captures of the same
values are equal even though they are distinct objects.

Shape checks happen here, at the capture boundary. A repeated group whose
value is not a sequence of mappings raises ``MalformedSnapshotError``
before anything downstream sees it.
"""

from collections.abc import Iterator, Mapping
from typing import Any

from formwatch.errors import MalformedSnapshotError
from formwatch.forms.controls import ControlKind


class FormSnapshot(Mapping[str, Any]):
    """Immutable, ordered field name -> value mapping.

    Implements ``Mapping[str, Any]``; equality is inherited from
    ``Mapping`` and is structural.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        object.__setattr__(self, "_data", dict(data))

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "FormSnapshot is immutable"
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __hash__(self) -> int:
        return hash(tuple(self._data.items()))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self._data.items())
        return f"FormSnapshot({{{items}}})"


def freeze(value: Any) -> Any:
    """Recursively convert mappings to snapshots and sequences to tuples."""
    if isinstance(value, FormSnapshot):
        return value
    if isinstance(value, Mapping):
        return FormSnapshot({k: freeze(v) for k, v in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze(v) for v in value)
    return value


def capture(value: Mapping[str, Any], controls: Mapping[str, Any] | None = None) -> FormSnapshot:
    """Capture a form's value as an immutable ``FormSnapshot``.

    Args:
        value: The plain value dict emitted by the form root.
        controls: The root's live controls. When given, every field whose
            control is a repeated group is checked to hold a sequence of
            mappings.

    Raises:
        MalformedSnapshotError: If a repeated group's value has the wrong
            shape.
    """
    if not isinstance(value, Mapping):
        msg = f"expected a mapping of field values, got {type(value).__name__}"
        raise MalformedSnapshotError("<root>", msg)

    if controls is not None:
        for name, control in controls.items():
            if control.kind is ControlKind.REPEATED_GROUP and name in value:
                _check_repeated(name, value[name])

    return freeze(value)


def _check_repeated(name: str, items: Any) -> None:
    if not isinstance(items, list | tuple):
        raise MalformedSnapshotError(name, f"expected a list of items, got {type(items).__name__}")
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            detail = f"item {index} is {type(item).__name__}, expected a mapping"
            raise MalformedSnapshotError(name, detail)
