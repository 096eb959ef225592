"""Admin Enforcement: tests for the single authorization check."""

import pytest

from porgate.core.enforce_admin import is_admin, require_admin
from porgate.core.errors import ErrorContext, UnauthorizedError

ADMIN = "0xAbCdEf0000000000000000000000000000000001"


def test_admin_passes():
    require_admin(ADMIN, ADMIN)


def test_admin_match_is_case_insensitive():
    assert is_admin(ADMIN.lower(), ADMIN)
    assert is_admin(ADMIN.upper(), ADMIN)


def test_other_caller_rejected():
    with pytest.raises(UnauthorizedError) as exc_info:
        require_admin("0x0000000000000000000000000000000000000002", ADMIN)
    assert exc_info.value.code == "CALLER_NOT_ADMIN"
    assert exc_info.value.http_status == 403


@pytest.mark.parametrize("caller", [None, ""])
def test_missing_caller_rejected(caller):
    with pytest.raises(UnauthorizedError):
        require_admin(caller, ADMIN)


def test_rejection_records_caller_in_context():
    ctx = ErrorContext(asset="aWBTC")
    with pytest.raises(UnauthorizedError) as exc_info:
        require_admin("0xbad", ADMIN, ctx)
    assert exc_info.value.context.caller == "0xbad"
    assert exc_info.value.context.asset == "aWBTC"
