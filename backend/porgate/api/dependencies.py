"""Request Dependencies: caller identity, feed factory, and clock for routes.

Invariants:
    - Caller identity comes only from the X-Caller-Address header
    - The feed factory is the process-wide one built in the lifespan
    - Asset path segments match the gate symbol pattern (1-32 chars), else 400

Design Decisions:
    - Feed factory and clock exposed as dependencies so tests override them
      through app.dependency_overrides instead of monkeypatching
"""

from typing import Annotated

from fastapi import Header, Path, Request

from porgate.core.domain_types import Address
from porgate.core.repository_protocols import FeedAdapterFactory
from porgate.schemas.gate import SYMBOL_PATTERN
from porgate.services.issuance_guard import Clock, unix_now

# Path parameters are validated before any gate lookup or lock
AssetPath = Annotated[str, Path(pattern=SYMBOL_PATTERN)]
HolderPath = Annotated[str, Path(min_length=1, max_length=64)]


def get_caller(
    x_caller_address: str | None = Header(None, max_length=64),
) -> Address | None:
    return Address(x_caller_address) if x_caller_address else None


def get_feed_factory(request: Request) -> FeedAdapterFactory:
    factory = getattr(request.app.state, "feed_factory", None)
    if factory is None:
        raise RuntimeError("Feed client not initialized")
    return factory


def get_clock() -> Clock:
    return unix_now
