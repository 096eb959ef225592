"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell: dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Feed and underlying reads are call-only (non-mutating)

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy (ADR: ExMA anti-pattern)
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves;
      the shell orchestrates the async calls around the pure logic
    - IssuancePrimitive is a capability handed to the guard (composition), so the
      base ledger's mint is never overridden by subclassing
"""

from typing import Protocol

from porgate.core.domain_types import (
    Address, AssetSymbol, ConfigChange, DenyReason, FeedReading, FeedRef,
)
from porgate.core.gate_config import GateConfig


class FeedAdapter(Protocol):
    """Read-only proof-of-reserves feed."""
    async def latest_reading(self) -> FeedReading: ...


class FeedAdapterFactory(Protocol):
    """Resolves a configured feed reference into a readable adapter."""
    def __call__(self, feed: FeedRef) -> FeedAdapter: ...


class UnderlyingAsset(Protocol):
    """Supply view of the asset backing the issued token."""
    async def total_supply(self) -> int: ...
    async def decimals(self) -> int: ...


class IssuancePrimitive(Protocol):
    """Base ledger mint capability."""
    async def mint(self, recipient: Address, amount: int) -> None: ...


class GateRepository(Protocol):
    """Contract for gate configuration persistence: implemented by shell."""
    async def load_config(
        self, asset: AssetSymbol, for_update: bool = False,
    ) -> GateConfig: ...
    async def save_config(self, asset: AssetSymbol, config: GateConfig) -> None: ...
    async def record_change(
        self, asset: AssetSymbol, change: ConfigChange, caller: Address,
    ) -> None: ...
    async def record_attempt(
        self,
        asset: AssetSymbol,
        recipient: Address,
        amount: int,
        reason: DenyReason | None,
    ) -> None: ...
