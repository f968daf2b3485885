"""Shared type aliases used across formwatch modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Failure kind name -> metadata (e.g. {"min_length": {"required_length": 5, ...}})
FailureSet: TypeAlias = Mapping[str, Any]

# Validator: receives a control value, returns a failure set (empty when valid)
Validator: TypeAlias = Callable[[Any], FailureSet]

# Value-change listener: receives the root form's plain value dict
Listener: TypeAlias = Callable[[dict[str, Any]], None]

# Entry stored in an ErrorAggregate: a message, or one dict per array item
ErrorEntry: TypeAlias = str | list[dict[str, str]]
