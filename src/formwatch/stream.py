"""Change stream — debounce, dedupe and pair form snapshots.

The pipeline is three explicit stages over a last-seen-value cell::

    form.value_changes ──> _QuiescenceCell ──> distinct() ──> pairwise()
        (sync, capture)     (settles bursts)    (drops repeats)  (prev, curr)

The form pushes synchronously into the cell; the consumer task is the
only thing that awaits. A burst of changes inside the quiescence window
collapses to its last snapshot. Closing the stream discards any pending
window.

Example::

    stream = ChangeStream(form, WatchConfig(debounce=0.3))
    async for prev, curr in stream.pairs():
        print(diff(prev, curr))
"""

import logging
import operator
from collections.abc import AsyncIterator, Callable
from typing import Any

import anyio

from formwatch.config import WatchConfig
from formwatch.snapshot import FormSnapshot, capture

logger = logging.getLogger("formwatch.stream")

_UNSET: Any = object()

_EQUALITY: dict[str, Callable[[Any, Any], bool]] = {
    "structural": operator.eq,
    "identity": operator.is_,
}


# ---------------------------------------------------------------------------
# Quiescence cell
# ---------------------------------------------------------------------------


class _QuiescenceCell:
    """Holds the latest pushed value and the time it becomes settled.

    Every ``put()`` replaces the value and pushes the deadline out by one
    window. ``settled()`` yields a value only once the deadline passes
    with no further ``put()``.
    """

    __slots__ = ("_closed", "_deadline", "_value", "_wake", "window")

    def __init__(self, window: float) -> None:
        self.window = window
        self._value: Any = _UNSET
        self._deadline = 0.0
        self._closed = False
        self._wake = anyio.Event()

    def put(self, value: Any) -> None:
        if self._closed:
            return
        self._value = value
        self._deadline = anyio.current_time() + self.window
        self._wake.set()

    def close(self) -> None:
        self._closed = True
        self._value = _UNSET
        self._wake.set()

    @property
    def closed(self) -> bool:
        return self._closed

    async def settled(self) -> AsyncIterator[Any]:
        while True:
            await self._wake.wait()
            if self._closed:
                return
            while (delay := self._deadline - anyio.current_time()) > 0:
                await anyio.sleep(delay)
                if self._closed:
                    return
            value, self._value = self._value, _UNSET
            self._wake = anyio.Event()
            yield value


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


async def _prepend(first: Any, source: AsyncIterator[Any]) -> AsyncIterator[Any]:
    yield first
    async for value in source:
        yield value


async def distinct(
    source: AsyncIterator[Any],
    equal: Callable[[Any, Any], bool] = operator.eq,
) -> AsyncIterator[Any]:
    """Drop values equal to the immediately preceding accepted value."""
    last = _UNSET
    async for value in source:
        if last is not _UNSET and equal(last, value):
            logger.debug("Dropping snapshot identical to the previous one")
            continue
        last = value
        yield value


async def pairwise(source: AsyncIterator[Any]) -> AsyncIterator[tuple[Any, Any]]:
    """Yield ``(previous, current)`` for every value after the first."""
    prev = _UNSET
    async for value in source:
        if prev is not _UNSET:
            yield prev, value
        prev = value


# ---------------------------------------------------------------------------
# ChangeStream
# ---------------------------------------------------------------------------


class ChangeStream:
    """Subscription to a form's value changes, settled and paired.

    Connects to ``form.value_changes`` on construction so no change made
    after this point is missed, even before iteration starts. Each
    emitted value is captured as a ``FormSnapshot`` synchronously, so a
    malformed value raises ``MalformedSnapshotError`` to the code that
    changed the form.

    Must be constructed inside a running event loop.
    """

    __slots__ = ("_cell", "_config", "_controls", "_disconnect", "_seed")

    def __init__(self, form: Any, config: WatchConfig | None = None) -> None:
        self._config = config or WatchConfig()
        self._controls = form.controls
        self._cell = _QuiescenceCell(self._config.debounce)
        self._seed: Any = capture(form.value, self._controls) if self._config.seed else _UNSET
        self._disconnect = form.value_changes.connect(self._on_change)

    @property
    def config(self) -> WatchConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._cell.closed

    def _on_change(self, value: dict[str, Any]) -> None:
        self._cell.put(capture(value, self._controls))

    def pairs(self) -> AsyncIterator[tuple[FormSnapshot, FormSnapshot]]:
        """Return the paired stream of settled, distinct snapshots.

        Runs until ``close()`` is called.
        """
        settled = self._cell.settled()
        if self._seed is not _UNSET:
            settled = _prepend(self._seed, settled)
        return pairwise(distinct(settled, _EQUALITY[self._config.equality]))

    def close(self) -> None:
        """Stop listening to the form and discard any pending window."""
        if self._cell.closed:
            return
        self._disconnect()
        self._cell.close()
        logger.debug("Change stream closed")


class Subscription:
    """Handle returned to callers; the only cancellation mechanism.

    ``unsubscribe()`` disconnects the stream from the form and cancels the
    consumer task. It takes effect before the next scheduled emission.
    """

    __slots__ = ("scope", "stream")

    def __init__(self, stream: ChangeStream, scope: anyio.CancelScope) -> None:
        self.stream = stream
        self.scope = scope

    @property
    def active(self) -> bool:
        return not self.stream.closed

    def unsubscribe(self) -> None:
        self.stream.close()
        self.scope.cancel()

    def __repr__(self) -> str:
        state = "active" if self.active else "closed"
        return f"Subscription({state})"
