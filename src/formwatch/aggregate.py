"""Caller-owned error aggregate.

An ``ErrorAggregate`` is created empty by whoever renders errors, handed
to the aggregator, and read back on each render pass. The aggregator
only ever mutates it in place through ``set``, ``set_array`` and
``clear``; it never replaces the object.

Usage::

    errors = ErrorAggregate()
    async with watch(form, errors):
        ...
        errors.get("email")          # "email required" or None
        errors.get("line_items")     # [{"qty": "..."}, {}, ...] or None
"""

from collections.abc import Iterator, Mapping

from formwatch._internal.types import ErrorEntry


class ErrorAggregate(Mapping[str, ErrorEntry]):
    """Field name -> display message (scalar) or per-item message dicts.

    Implements ``Mapping`` for reading. Entries for scalar fields are
    strings; entries for repeated groups are lists with one dict per item,
    empty for items without errors.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[str, ErrorEntry] = {}

    def set(self, field: str, message: str) -> None:
        """Store *message* for a scalar field, replacing any prior entry."""
        self._entries[field] = message

    def set_array(self, field: str, items: list[dict[str, str]]) -> None:
        """Store per-item errors for a repeated group, discarding the old list."""
        self._entries[field] = items

    def clear(self, field: str) -> None:
        """Remove the entry for *field*, if any."""
        self._entries.pop(field, None)

    def __getitem__(self, field: str) -> ErrorEntry:
        return self._entries[field]

    def __contains__(self, field: object) -> bool:
        return field in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def to_dict(self) -> dict[str, ErrorEntry]:
        """Return a detached copy, suitable for templates or JSON."""
        return {
            field: [dict(item) for item in entry] if isinstance(entry, list) else entry
            for field, entry in self._entries.items()
        }

    def __repr__(self) -> str:
        return f"ErrorAggregate({self._entries!r})"
