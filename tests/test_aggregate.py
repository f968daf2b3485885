"""Tests for formwatch.aggregate — the caller-owned error map."""

from formwatch.aggregate import ErrorAggregate


class TestErrorAggregate:
    def test_starts_empty(self) -> None:
        errors = ErrorAggregate()
        assert len(errors) == 0
        assert errors.get("email") is None

    def test_set_and_overwrite(self) -> None:
        errors = ErrorAggregate()
        errors.set("email", "email required")
        errors.set("email", "this field is required")
        assert errors["email"] == "this field is required"
        assert list(errors) == ["email"]

    def test_set_array_replaces(self) -> None:
        errors = ErrorAggregate()
        errors.set_array("items", [{"qty": "this field is required"}, {}])
        errors.set_array("items", [{}])
        assert errors["items"] == [{}]

    def test_clear(self) -> None:
        errors = ErrorAggregate()
        errors.set("ssn", "this field is required")
        errors.clear("ssn")
        errors.clear("never-set")
        assert "ssn" not in errors

    def test_to_dict_is_detached(self) -> None:
        errors = ErrorAggregate()
        errors.set_array("items", [{"qty": "x"}])
        snapshot = errors.to_dict()
        snapshot["items"][0]["qty"] = "changed"
        assert errors["items"] == [{"qty": "x"}]

    def test_mapping_equality(self) -> None:
        errors = ErrorAggregate()
        errors.set("a", "b")
        assert errors == {"a": "b"}
