"""Watch configuration.

WatchConfig is a frozen dataclass — immutable after creation, validated
once at construction, no string-key dict lookups.
"""

from dataclasses import dataclass

from formwatch.errors import ConfigurationError

EQUALITY_POLICIES = ("structural", "identity")


@dataclass(frozen=True, slots=True)
class WatchConfig:
    """Configuration for a change stream and its error aggregator.

    All fields have sensible defaults. Override what you need::

        config = WatchConfig(debounce=0.2, clear_stale=True)
    """

    # Quiescence window in seconds; a burst settles once it stays quiet this long
    debounce: float = 0.5

    # "structural" compares snapshots with ==, "identity" with `is`
    equality: str = "structural"

    # Use the form's value at subscribe time as the first accepted snapshot
    seed: bool = True

    # Remove a changed scalar field's entry once it no longer has an error
    clear_stale: bool = False

    # Message for failure kinds the mapper does not recognize
    fallback_message: str = "this field is invalid"

    def __post_init__(self) -> None:
        if self.debounce < 0:
            msg = f"debounce must be >= 0, got {self.debounce!r}"
            raise ConfigurationError(msg)
        if self.equality not in EQUALITY_POLICIES:
            allowed = ", ".join(EQUALITY_POLICIES)
            msg = f"equality must be one of: {allowed}; got {self.equality!r}"
            raise ConfigurationError(msg)
        if not self.fallback_message:
            msg = "fallback_message must be a non-empty string"
            raise ConfigurationError(msg)
