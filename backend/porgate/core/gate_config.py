"""Gate Config: per-gate feed and freshness settings with bounds enforcement.

Invariants:
    - heartbeat_seconds <= max_age_seconds after construction and after every mutation
    - max_age_seconds is fixed at construction and never mutated
    - A new config starts with heartbeat_seconds == max_age_seconds (widest window)
    - feed None means the gate is bypassed entirely
    - Every mutation returns a ConfigChange with old and new effective values
    - A rejected mutation leaves the config untouched

Design Decisions:
    - Dataclass with mutator methods: pure, deterministic, testable without mocks
      (same shape as the other in-memory state objects)
    - Zero heartbeat stores max_age_seconds: "0" is the unset value, so it means
      "use the widest permitted window", not "always stale"
    - Authorization is NOT checked here: services call require_admin first
"""

from dataclasses import dataclass

from porgate.core.domain_types import (
    ConfigChange, ConfigField, FeedRef, MAX_AGE_SECONDS,
)
from porgate.core.errors import HeartbeatTooLargeError


@dataclass
class GateConfig:
    """Feed reference and heartbeat for one gate."""

    max_age_seconds: int = MAX_AGE_SECONDS
    feed: FeedRef | None = None
    heartbeat_seconds: int | None = None

    def __post_init__(self) -> None:
        if self.max_age_seconds <= 0:
            raise ValueError(
                f"max_age_seconds must be positive: {self.max_age_seconds}",
            )
        if self.heartbeat_seconds is None:
            self.heartbeat_seconds = self.max_age_seconds
        if not 0 < self.heartbeat_seconds <= self.max_age_seconds:
            raise ValueError(
                f"heartbeat_seconds must be in (0, {self.max_age_seconds}]: "
                f"{self.heartbeat_seconds}",
            )

    @property
    def is_bypassed(self) -> bool:
        return self.feed is None

    def effective_heartbeat(self, requested: int) -> int:
        """Map a requested heartbeat onto the value that would be stored."""
        if requested < 0:
            raise ValueError(f"heartbeat must be non-negative: {requested}")
        if requested > self.max_age_seconds:
            raise HeartbeatTooLargeError(requested, self.max_age_seconds)
        return requested or self.max_age_seconds

    def set_feed(self, new_feed: FeedRef | None) -> ConfigChange:
        """Replace (or clear) the feed reference."""
        old = self.feed
        self.feed = new_feed or None
        return ConfigChange(ConfigField.FEED, old, self.feed)

    def set_heartbeat(self, requested: int) -> ConfigChange:
        """Set the freshness window. Raises HeartbeatTooLargeError above max age."""
        new = self.effective_heartbeat(requested)
        old = self.heartbeat_seconds
        self.heartbeat_seconds = new
        return ConfigChange(ConfigField.HEARTBEAT, old, new)
