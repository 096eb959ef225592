"""Gate Locks: per-gate critical section inside one worker process.

Invariants:
    - One asyncio.Lock per existing gate, created on first use; callers resolve
      the gate before asking for its lock, so unknown assets never add entries
    - Every read-decide-write sequence on a gate runs under its lock, so a feed
      read and the decision it drives never interleave with set_feed/set_heartbeat
      from the same process
    - Across processes the same sequence is serialized by the gates row, read
      FOR UPDATE (infrastructure/gate_store.py) for the whole transaction

Design Decisions:
    - _gate_locks as module-level dict: deliberate exception to no-global-state rule
      (bounded by the number of gates, which only the admin can create)
    - The asyncio.Lock keeps coroutines queuing in memory instead of each holding
      a pooled connection while it waits on the row lock
"""

import asyncio

_gate_locks: dict[str, asyncio.Lock] = {}


def gate_lock(asset: str) -> asyncio.Lock:
    """Return the lock guarding one gate."""
    lock = _gate_locks.get(asset)
    if lock is None:
        lock = _gate_locks[asset] = asyncio.Lock()
    return lock
