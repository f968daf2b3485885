"""Error aggregator — change stream in, display messages out.

For every settled ``(prev, curr)`` snapshot pair the aggregator diffs the
snapshots, then looks up each changed field in the *live* control tree and
writes its message into the caller's ``ErrorAggregate``:

- scalar field with an error → ``errors.set(name, message)``
- repeated group → ``errors.set_array(name, [per-item dicts])``
- scalar field without an error → nothing (or ``clear`` with
  ``WatchConfig.clear_stale``)

Errors raised while handling one pair are logged and the subscription
keeps running.

Example::

    errors = ErrorAggregate()
    async with anyio.create_task_group() as tg:
        subscription = handle_error(form, errors, tg)
        ...
        subscription.unsubscribe()
"""

import logging
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from typing import Any

import anyio
from anyio.abc import TaskGroup

from formwatch.aggregate import ErrorAggregate
from formwatch.config import WatchConfig
from formwatch.differ import diff
from formwatch.extraction import extract_array, extract_control
from formwatch.forms.controls import ControlKind
from formwatch.messages import MessageMapper
from formwatch.snapshot import FormSnapshot
from formwatch.stream import ChangeStream, Subscription

logger = logging.getLogger("formwatch.aggregator")


class ErrorAggregator:
    """Writes messages for changed, failing fields into one aggregate.

    Holds a reference to the caller-owned ``ErrorAggregate``; never
    replaces it.
    """

    __slots__ = ("_config", "_errors", "_mapper", "_subscriptions")

    def __init__(self, errors: ErrorAggregate, config: WatchConfig | None = None) -> None:
        self._errors = errors
        self._config = config or WatchConfig()
        self._mapper = MessageMapper(self._config.fallback_message)
        # id(form) -> live subscription
        self._subscriptions: dict[int, Subscription] = {}

    @property
    def errors(self) -> ErrorAggregate:
        return self._errors

    @property
    def config(self) -> WatchConfig:
        return self._config

    def handle_error(self, form: Any, task_group: TaskGroup) -> Subscription:
        """Subscribe to *form* and start aggregating in *task_group*.

        Calling this again for a form that already has a live
        subscription returns that subscription.
        """
        existing = self._subscriptions.get(id(form))
        if existing is not None and existing.active:
            logger.debug("Form %r is already being watched; reusing subscription", form)
            return existing

        stream = ChangeStream(form, self._config)
        subscription = Subscription(stream, anyio.CancelScope())
        self._subscriptions[id(form)] = subscription
        task_group.start_soon(self._consume, form, subscription, name="formwatch-aggregator")
        return subscription

    async def _consume(self, form: Any, subscription: Subscription) -> None:
        try:
            with subscription.scope:
                async for prev, curr in subscription.stream.pairs():
                    self._on_pair(form.controls, prev, curr)
        finally:
            subscription.stream.close()
            if self._subscriptions.get(id(form)) is subscription:
                del self._subscriptions[id(form)]

    def _on_pair(self, controls: Mapping[str, Any], prev: FormSnapshot, curr: FormSnapshot) -> None:
        try:
            changed = diff(prev, curr)
            logger.debug("Settled change: %s", sorted(changed))
            self.find_errors(controls, changed)
        except Exception:
            logger.exception("Error aggregation failed for one change; subscription continues")

    def find_errors(self, controls: Mapping[str, Any], diffs: Iterable[str]) -> None:
        """Update the aggregate for every name in *diffs*.

        Usable directly, without a stream, for deterministic updates.
        Names missing from *controls* are logged and skipped.
        """
        wanted = set(diffs)
        for name in sorted(wanted - set(controls)):
            logger.warning("Changed field %r has no control; skipping", name)

        for name, control in controls.items():
            if name not in wanted:
                continue
            logger.debug("Checking %r", name)
            match control.kind:
                case ControlKind.REPEATED_GROUP:
                    self._errors.set_array(name, extract_array(name, control, self._mapper))
                case ControlKind.SCALAR:
                    message = extract_control(name, control, self._mapper)
                    if message is not None:
                        self._errors.set(name, message)
                    elif self._config.clear_stale:
                        self._errors.clear(name)
                case _:
                    logger.debug("Skipping %r: %s fields are not aggregated", name, control.kind.value)


# ---------------------------------------------------------------------------
# Functional API
# ---------------------------------------------------------------------------


def handle_error(
    form: Any,
    errors: ErrorAggregate,
    task_group: TaskGroup,
    config: WatchConfig | None = None,
) -> Subscription:
    """Watch *form* and keep *errors* up to date until unsubscribed."""
    return ErrorAggregator(errors, config).handle_error(form, task_group)


def find_errors(
    controls: Mapping[str, Any],
    diffs: Iterable[str],
    errors: ErrorAggregate,
    config: WatchConfig | None = None,
) -> None:
    """Update *errors* for the changed field names in *diffs*."""
    ErrorAggregator(errors, config).find_errors(controls, diffs)


@asynccontextmanager
async def watch(
    form: Any,
    errors: ErrorAggregate,
    config: WatchConfig | None = None,
) -> AsyncIterator[Subscription]:
    """Watch *form* for the duration of an ``async with`` block.

    Owns its own task group and unsubscribes on exit::

        async with watch(form, errors) as subscription:
            form.get("email").set_value("x")
            await anyio.sleep(1)
        # errors["email"] == "email required"
    """
    async with anyio.create_task_group() as tg:
        subscription = handle_error(form, errors, tg, config)
        try:
            yield subscription
        finally:
            subscription.unsubscribe()
