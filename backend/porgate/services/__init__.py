"""Services Layer: imperative shell around the pure gate logic.

Invariants:
    - Services own transaction boundaries (commit/rollback) and per-gate locking
    - Decisions are delegated to core/; services only read, call, and persist

Design Decisions:
    - Impureim sandwich: read (feed, supply, config) -> pure decision -> write (ADR: ExMA)
"""
