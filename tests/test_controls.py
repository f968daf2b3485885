"""Tests for formwatch.forms — control tree, broadcast, and validators."""

import pytest

from formwatch.errors import SchemaError
from formwatch.forms import ControlKind, FormArray, FormControl, FormGroup, ValueChanges
from formwatch.forms.validators import email, min_length, required

# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


class TestRequired:
    def test_empty_string(self) -> None:
        assert required("") == {"required": True}

    def test_none(self) -> None:
        assert required(None) == {"required": True}

    def test_empty_list(self) -> None:
        assert required([]) == {"required": True}

    def test_valid(self) -> None:
        assert required("hello") == {}

    def test_zero_is_present(self) -> None:
        assert required(0) == {}


class TestMinLength:
    def test_below_minimum(self) -> None:
        assert min_length(3)("Do") == {
            "min_length": {"required_length": 3, "actual_length": 2},
        }

    def test_at_minimum(self) -> None:
        assert min_length(3)("Doe") == {}

    def test_empty_skipped(self) -> None:
        assert min_length(3)("") == {}

    def test_no_length(self) -> None:
        assert min_length(3)(42) == {}


class TestEmail:
    def test_valid(self) -> None:
        assert email("user@example.com") == {}

    def test_invalid(self) -> None:
        assert email("x") == {"email": True}

    def test_empty_skipped(self) -> None:
        assert email("") == {}


# ---------------------------------------------------------------------------
# Broadcast
# ---------------------------------------------------------------------------


class TestValueChanges:
    def test_connect_and_emit(self) -> None:
        changes = ValueChanges()
        seen: list[object] = []
        changes.connect(seen.append)
        changes.emit({"a": 1})
        assert seen == [{"a": 1}]

    def test_disconnect(self) -> None:
        changes = ValueChanges()
        seen: list[object] = []
        disconnect = changes.connect(seen.append)
        disconnect()
        disconnect()
        changes.emit({"a": 1})
        assert seen == []
        assert len(changes) == 0


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------


class TestKinds:
    def test_tags(self) -> None:
        assert FormControl().kind is ControlKind.SCALAR
        assert FormGroup({}).kind is ControlKind.GROUP
        assert FormArray().kind is ControlKind.REPEATED_GROUP


class TestFormControl:
    def test_initial_validation(self) -> None:
        control = FormControl("", [required, min_length(5)])
        assert control.failures == {"required": True}
        assert control.valid is False
        assert control.touched is False
        assert control.dirty is False

    def test_set_value_revalidates_and_marks_dirty(self) -> None:
        control = FormControl("", [required, min_length(5)])
        control.set_value("abc")
        assert control.failures == {"min_length": {"required_length": 5, "actual_length": 3}}
        assert control.dirty is True

    def test_set_value_without_dirty(self) -> None:
        control = FormControl("", [required])
        control.set_value("x", mark_dirty=False)
        assert control.dirty is False
        assert control.valid is True

    def test_failures_read_only(self) -> None:
        control = FormControl("", [required])
        with pytest.raises(TypeError):
            control.failures["other"] = True  # type: ignore[index]

    def test_mark_as_touched(self) -> None:
        control = FormControl()
        control.mark_as_touched()
        assert control.touched is True

    def test_mark_as_pristine(self) -> None:
        control = FormControl("")
        control.set_value("x")
        control.mark_as_pristine()
        assert control.dirty is False


class TestFormGroup:
    def _form(self) -> FormGroup:
        return FormGroup({
            "name": FormControl("a"),
            "items": FormArray([FormGroup({"qty": FormControl("1")})]),
        })

    def test_value(self) -> None:
        assert self._form().value == {"name": "a", "items": [{"qty": "1"}]}

    def test_child_change_emits_on_root(self) -> None:
        form = self._form()
        seen: list[dict] = []
        form.value_changes.connect(seen.append)
        form["name"].set_value("b")  # type: ignore[attr-defined]
        assert seen == [{"name": "b", "items": [{"qty": "1"}]}]

    def test_nested_change_emits_on_root(self) -> None:
        form = self._form()
        seen: list[dict] = []
        form.value_changes.connect(seen.append)
        form["items"].at(0)["qty"].set_value("2")  # type: ignore[attr-defined]
        assert seen == [{"name": "a", "items": [{"qty": "2"}]}]

    def test_dirty_propagates_to_ancestors(self) -> None:
        form = self._form()
        form["items"].at(0)["qty"].set_value("2")  # type: ignore[attr-defined]
        assert form.dirty is True
        assert form["items"].dirty is True
        assert form["name"].dirty is False

    def test_patch_value_emits_once(self) -> None:
        form = self._form()
        seen: list[dict] = []
        form.value_changes.connect(seen.append)
        form.patch_value({"name": "z", "items": [{"qty": "9"}]})
        assert seen == [{"name": "z", "items": [{"qty": "9"}]}]

    def test_empty_patch_still_emits(self) -> None:
        form = self._form()
        seen: list[dict] = []
        form.value_changes.connect(seen.append)
        form.patch_value({})
        assert len(seen) == 1

    def test_patch_unknown_field(self) -> None:
        with pytest.raises(SchemaError, match="'nope'"):
            self._form().patch_value({"nope": 1})

    def test_root(self) -> None:
        form = self._form()
        qty = form["items"].at(0)["qty"]  # type: ignore[attr-defined]
        assert qty.root is form
        assert form.parent is None

    def test_child_cannot_have_two_parents(self) -> None:
        shared = FormControl()
        FormGroup({"a": shared})
        with pytest.raises(SchemaError):
            FormGroup({"b": shared})


class TestFormArray:
    def test_items_must_be_groups(self) -> None:
        with pytest.raises(SchemaError, match="FormGroup"):
            FormArray([FormControl("x")])  # type: ignore[list-item]

    def test_append_and_remove(self) -> None:
        array = FormArray()
        seen: list[list] = []
        array.value_changes.connect(seen.append)
        array.append(FormGroup({"qty": FormControl("1")}))
        array.insert(0, FormGroup({"qty": FormControl("0")}))
        array.remove_at(1)
        assert array.value == [{"qty": "0"}]
        assert seen == [[{"qty": "1"}], [{"qty": "0"}, {"qty": "1"}], [{"qty": "0"}]]
        assert len(array) == 1

    def test_group_validators(self) -> None:
        def at_least_one(value: list) -> dict:
            return {} if value else {"required": True}

        array = FormArray(validators=[at_least_one])
        assert array.failures == {"required": True}
        array.append(FormGroup({"qty": FormControl("1")}))
        assert array.valid is True
