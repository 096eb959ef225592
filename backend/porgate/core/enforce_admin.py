"""Admin Enforcement: the single authorization check for gate administration.

Invariants:
    - Called first in every admin operation, before any state is read for mutation
    - Comparison is case-insensitive (hex addresses arrive in mixed checksum case)
    - A missing caller is never the admin
"""

from porgate.core.errors import ErrorContext, UnauthorizedError


def is_admin(caller: str | None, admin: str) -> bool:
    return bool(caller) and caller.lower() == admin.lower()


def require_admin(
    caller: str | None, admin: str, context: ErrorContext | None = None,
) -> None:
    """Raise UnauthorizedError unless caller is the designated administrator."""
    if not is_admin(caller, admin):
        ctx = context or ErrorContext()
        ctx.caller = caller
        raise UnauthorizedError(caller, ctx)
