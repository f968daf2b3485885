"""Outcome-producing validators for the reference control tree.

Each validator is a callable with the signature::

    def rule(value: Any) -> Mapping[str, Any]:
        '''Return failure kind -> metadata, or an empty mapping if valid.'''

Only the failure kinds the message policy knows are provided. Any callable
matching the protocol works with ``FormControl``; unknown kinds fall back
to a generic message.

Length and format checks skip empty values so that ``required`` is the
only failure reported for a blank field.
"""

import re
from collections.abc import Mapping
from typing import Any

from formwatch._internal.types import Validator

_VALID: Mapping[str, Any] = {}


def _is_empty(value: Any) -> bool:
    return value is None or (hasattr(value, "__len__") and len(value) == 0)


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(value: Any) -> Mapping[str, Any]:
    """Value must be present and non-empty."""
    if _is_empty(value):
        return {"required": True}
    return _VALID


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def min_length(n: int) -> Validator:
    """Value must have at least *n* items or characters."""

    def check(value: Any) -> Mapping[str, Any]:
        if _is_empty(value) or not hasattr(value, "__len__"):
            return _VALID
        if len(value) < n:
            return {"min_length": {"required_length": n, "actual_length": len(value)}}
        return _VALID

    return check


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

# Structure only, not deliverability
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


def email(value: Any) -> Mapping[str, Any]:
    """Value must look like an email address (basic format check)."""
    if _is_empty(value):
        return _VALID
    if not isinstance(value, str) or not _EMAIL_RE.match(value):
        return {"email": True}
    return _VALID
