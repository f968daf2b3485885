"""Form control tree — scalar controls, groups, and repeated groups.

Every node carries an explicit ``ControlKind`` tag set on its class, so
consumers dispatch on ``control.kind`` instead of inspecting types at
runtime.

Value changes propagate upward: setting a child's value re-runs validators
on the child and every ancestor, then each of them emits its new value on
its own ``value_changes`` broadcast. Emission is synchronous; listeners run
on the caller's stack before ``set_value`` returns.
"""

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar

from formwatch._internal.types import FailureSet, Listener, Validator
from formwatch.errors import SchemaError

_NO_FAILURES: FailureSet = MappingProxyType({})


class ControlKind(Enum):
    """Tag resolved once per control class at schema-build time."""

    SCALAR = "scalar"
    GROUP = "group"
    REPEATED_GROUP = "repeated_group"


# ---------------------------------------------------------------------------
# Value-change broadcast
# ---------------------------------------------------------------------------


class ValueChanges:
    """Synchronous broadcast of a control's value.

    ``connect()`` returns a disconnect callable. Listeners are called in
    connection order; a listener that disconnects during emission does not
    affect the current round.
    """

    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def connect(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* and return a callable that removes it."""
        self._listeners.append(listener)

        def disconnect() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return disconnect

    def emit(self, value: Any) -> None:
        for listener in tuple(self._listeners):
            listener(value)

    def __len__(self) -> int:
        return len(self._listeners)


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------


class AbstractControl:
    """State shared by every node: failures, interaction flags, parent link."""

    kind: ClassVar[ControlKind]

    __slots__ = ("_failures", "_parent", "_validators", "dirty", "touched", "value_changes")

    def __init__(self, validators: Iterable[Validator] = ()) -> None:
        self._validators: tuple[Validator, ...] = tuple(validators)
        self._failures: FailureSet = _NO_FAILURES
        self._parent: AbstractControl | None = None
        self.touched = False
        self.dirty = False
        self.value_changes = ValueChanges()

    @property
    def value(self) -> Any:
        raise NotImplementedError

    @property
    def failures(self) -> FailureSet:
        """Failure kind -> metadata from this node's own validators."""
        return self._failures

    @property
    def valid(self) -> bool:
        return not self._failures

    @property
    def parent(self) -> "AbstractControl | None":
        return self._parent

    @property
    def root(self) -> "AbstractControl":
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    def mark_as_touched(self) -> None:
        """Record that the control received and lost focus. Does not emit."""
        self.touched = True

    def mark_as_dirty(self) -> None:
        """Flag this control and its ancestors as changed by the user."""
        node: AbstractControl | None = self
        while node is not None:
            node.dirty = True
            node = node._parent

    def mark_as_pristine(self) -> None:
        self.dirty = False

    def update_value_and_validity(self, *, emit: bool = True) -> None:
        """Re-run validators here and on every ancestor, emitting bottom-up."""
        node: AbstractControl | None = self
        while node is not None:
            node._run_validators()
            if emit:
                node.value_changes.emit(node.value)
            node = node._parent

    def _run_validators(self) -> None:
        merged: dict[str, Any] = {}
        value = self.value
        for validator in self._validators:
            merged.update(validator(value))
        self._failures = MappingProxyType(merged) if merged else _NO_FAILURES

    def _attach(self, parent: "AbstractControl") -> None:
        if self._parent is not None and self._parent is not parent:
            msg = f"{type(self).__name__} already belongs to another container"
            raise SchemaError(msg)
        self._parent = parent


class FormControl(AbstractControl):
    """A single-value input (text, number, checkbox)."""

    kind = ControlKind.SCALAR

    __slots__ = ("_value",)

    def __init__(self, value: Any = None, validators: Iterable[Validator] = ()) -> None:
        super().__init__(validators)
        self._value = value
        self._run_validators()

    @property
    def value(self) -> Any:
        return self._value

    def set_value(self, value: Any, *, mark_dirty: bool = True, emit: bool = True) -> None:
        """Replace the value, re-validate up the tree and emit.

        ``mark_dirty=False`` models a programmatic reset that should not
        count as a user edit.
        """
        self._value = value
        if mark_dirty:
            self.mark_as_dirty()
        self.update_value_and_validity(emit=emit)

    def __repr__(self) -> str:
        return f"FormControl({self._value!r}, failures={dict(self._failures)!r})"


class FormGroup(AbstractControl):
    """A fixed set of named child controls."""

    kind = ControlKind.GROUP

    __slots__ = ("_controls",)

    def __init__(
        self,
        controls: Mapping[str, AbstractControl],
        validators: Iterable[Validator] = (),
    ) -> None:
        super().__init__(validators)
        self._controls: dict[str, AbstractControl] = dict(controls)
        for child in self._controls.values():
            child._attach(self)
        self._run_validators()

    @property
    def controls(self) -> Mapping[str, AbstractControl]:
        return MappingProxyType(self._controls)

    @property
    def value(self) -> dict[str, Any]:
        return {name: child.value for name, child in self._controls.items()}

    def get(self, name: str) -> AbstractControl | None:
        return self._controls.get(name)

    def __getitem__(self, name: str) -> AbstractControl:
        return self._controls[name]

    def __contains__(self, name: object) -> bool:
        return name in self._controls

    def __iter__(self) -> Iterator[str]:
        return iter(self._controls)

    def patch_value(
        self,
        values: Mapping[str, Any],
        *,
        mark_dirty: bool = True,
        emit: bool = True,
    ) -> None:
        """Set several children at once and emit a single change.

        Nested groups accept mappings and repeated groups accept sequences
        of mappings. An empty *values* still re-validates and emits, which
        is a convenient way to prime a freshly wired stream.
        """
        for name, value in values.items():
            child = self._controls.get(name)
            if child is None:
                msg = f"FormGroup has no control named {name!r}"
                raise SchemaError(msg)
            _patch_silently(child, value, mark_dirty=mark_dirty)
        self.update_value_and_validity(emit=emit)

    def __repr__(self) -> str:
        return f"FormGroup({list(self._controls)!r})"


class FormArray(AbstractControl):
    """An ordered list of sub-forms sharing one schema (e.g. line items)."""

    kind = ControlKind.REPEATED_GROUP

    __slots__ = ("_controls",)

    def __init__(
        self,
        controls: Iterable[FormGroup] = (),
        validators: Iterable[Validator] = (),
    ) -> None:
        super().__init__(validators)
        self._controls: list[FormGroup] = []
        for item in controls:
            self._adopt(item)
            self._controls.append(item)
        self._run_validators()

    @property
    def controls(self) -> Sequence[FormGroup]:
        return tuple(self._controls)

    @property
    def value(self) -> list[dict[str, Any]]:
        return [item.value for item in self._controls]

    def at(self, index: int) -> FormGroup:
        return self._controls[index]

    def __len__(self) -> int:
        return len(self._controls)

    def __iter__(self) -> Iterator[FormGroup]:
        return iter(self._controls)

    def append(self, item: FormGroup, *, emit: bool = True) -> None:
        self._adopt(item)
        self._controls.append(item)
        self.update_value_and_validity(emit=emit)

    def insert(self, index: int, item: FormGroup, *, emit: bool = True) -> None:
        self._adopt(item)
        self._controls.insert(index, item)
        self.update_value_and_validity(emit=emit)

    def remove_at(self, index: int, *, emit: bool = True) -> None:
        item = self._controls.pop(index)
        item._parent = None
        self.update_value_and_validity(emit=emit)

    def _adopt(self, item: AbstractControl) -> None:
        if item.kind is not ControlKind.GROUP:
            msg = f"FormArray items must be FormGroup, got {type(item).__name__}"
            raise SchemaError(msg)
        item._attach(self)

    def __repr__(self) -> str:
        return f"FormArray(len={len(self._controls)})"


def _patch_silently(control: AbstractControl, value: Any, *, mark_dirty: bool) -> None:
    """Assign *value* into *control* and its children without emitting."""
    match control.kind:
        case ControlKind.SCALAR:
            control._value = value  # type: ignore[attr-defined]
            if mark_dirty:
                control.mark_as_dirty()
        case ControlKind.GROUP:
            assert isinstance(control, FormGroup)
            for name, child_value in value.items():
                child = control.get(name)
                if child is None:
                    msg = f"FormGroup has no control named {name!r}"
                    raise SchemaError(msg)
                _patch_silently(child, child_value, mark_dirty=mark_dirty)
        case ControlKind.REPEATED_GROUP:
            assert isinstance(control, FormArray)
            for item, item_value in zip(control.controls, value, strict=False):
                _patch_silently(item, item_value, mark_dirty=mark_dirty)
    control._run_validators()
