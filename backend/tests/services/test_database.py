"""Database Session Manager: error mapping and rollback on failure."""

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from porgate.core.errors import DatabaseError, ResourceNotFoundError
from porgate.infrastructure.database import DatabaseSessionManager, to_database_error
from porgate.models.gate import Gate
from porgate.models.gate_config_change import GateConfigChange
from porgate.models.issuance_attempt import IssuanceAttempt
from porgate.models.token import Token


@pytest.mark.parametrize(
    "exc, operation",
    [
        (IntegrityError("INSERT", {}, Exception("dup")), "commit"),
        (OperationalError("SELECT", {}, Exception("locked")), "execute"),
        (SQLAlchemyError("boom"), "unknown"),
    ],
)
def test_sqlalchemy_errors_map_to_database_error(exc, operation):
    error = to_database_error(exc)
    assert isinstance(error, DatabaseError)
    assert error.operation == operation
    assert error.http_status == 503


@pytest.fixture
async def manager(test_engine, test_session_factory):
    mgr = DatabaseSessionManager.__new__(DatabaseSessionManager)
    mgr.engine = test_engine
    mgr._session_factory = test_session_factory
    return mgr


async def test_duplicate_token_rolls_back_as_database_error(manager):
    with pytest.raises(DatabaseError) as exc_info:
        async with manager.session() as db:
            db.add(Token(symbol="WBTC", decimals=8, total_supply=0))
            await db.flush()
            db.add(Token(symbol="WBTC", decimals=8, total_supply=0))
            await db.flush()
    assert exc_info.value.code == "DATABASE_ERROR"
    async with manager.session() as db:
        assert await db.get(Token, "WBTC") is None


async def test_gate_errors_propagate_unchanged(manager):
    with pytest.raises(ResourceNotFoundError):
        async with manager.session():
            raise ResourceNotFoundError("Gate", "aWBTC")


async def test_health_check(manager):
    assert await manager.health_check() is True


def test_audit_models_have_no_orm_relationships():
    for model in (Gate, GateConfigChange, IssuanceAttempt):
        assert not inspect(model).relationships
