"""Tests for the transaction boundary"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from tableside.config import settings
from tableside.errors import (
    CommitOutcomeUnknown,
    ConcurrentModification,
    InvalidTransition,
    StorageUnavailable,
)
from tableside.services import run_in_transaction


class FakeSession:
    """Records the calls a unit of work makes on its session"""

    def __init__(self, commit_error=None, flush_error=None):
        self.commit_error = commit_error
        self.flush_error = flush_error
        self.commits = 0
        self.rollbacks = 0

    async def flush(self):
        if self.flush_error:
            raise self.flush_error

    async def commit(self):
        if self.commit_error:
            raise self.commit_error
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


def operational_error():
    return OperationalError("UPDATE tables", {}, Exception("database is locked"))


@pytest.mark.asyncio
async def test_commits_result():
    db = FakeSession()

    async def operation():
        return "done"

    assert await run_in_transaction(db, operation) == "done"
    assert db.commits == 1
    assert db.rollbacks == 0


@pytest.mark.asyncio
async def test_domain_error_rolls_back():
    db = FakeSession()

    async def operation():
        raise InvalidTransition()

    with pytest.raises(InvalidTransition):
        await run_in_transaction(db, operation)
    assert db.rollbacks == 1
    assert db.commits == 0


@pytest.mark.asyncio
async def test_transient_failure_is_retried():
    db = FakeSession()
    calls = []

    async def operation():
        calls.append(1)
        if len(calls) < 3:
            raise operational_error()
        return "ok"

    assert await run_in_transaction(db, operation, max_attempts=3) == "ok"
    assert len(calls) == 3
    assert db.rollbacks == 2
    assert db.commits == 1


@pytest.mark.asyncio
async def test_persistent_failure_is_not_applied():
    db = FakeSession()

    async def operation():
        raise operational_error()

    with pytest.raises(StorageUnavailable) as exc_info:
        await run_in_transaction(db, operation, max_attempts=2)
    assert exc_info.value.extra["applied"] is False
    assert db.commits == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    StaleDataError("version mismatch"),
    IntegrityError("INSERT", {}, Exception("unique")),
])
async def test_write_conflicts_map_to_concurrent_modification(error):
    db = FakeSession(flush_error=error)

    async def operation():
        return None

    with pytest.raises(ConcurrentModification):
        await run_in_transaction(db, operation)
    assert db.rollbacks == 1


@pytest.mark.asyncio
async def test_commit_failure_outcome_unknown():
    db = FakeSession(commit_error=operational_error())

    async def operation():
        return None

    with pytest.raises(CommitOutcomeUnknown) as exc_info:
        await run_in_transaction(db, operation)
    assert exc_info.value.extra["applied"] == "unknown"


@pytest.mark.asyncio
async def test_zero_retries_still_runs_once(monkeypatch):
    """With retries disabled the operation gets exactly one attempt"""
    monkeypatch.setattr(settings, "transaction_max_retries", 0)
    db = FakeSession()
    calls = []

    async def operation():
        calls.append(1)
        return "ok"

    assert await run_in_transaction(db, operation) == "ok"
    assert len(calls) == 1
    assert db.commits == 1


@pytest.mark.asyncio
async def test_zero_retries_fails_after_one_attempt(monkeypatch):
    monkeypatch.setattr(settings, "transaction_max_retries", 0)
    db = FakeSession()
    calls = []

    async def operation():
        calls.append(1)
        raise operational_error()

    with pytest.raises(StorageUnavailable):
        await run_in_transaction(db, operation)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_retries_count_after_first_attempt(monkeypatch):
    """Two retries means three attempts in total"""
    monkeypatch.setattr(settings, "transaction_max_retries", 2)
    db = FakeSession()
    calls = []

    async def operation():
        calls.append(1)
        if len(calls) < 3:
            raise operational_error()
        return "ok"

    assert await run_in_transaction(db, operation) == "ok"
    assert len(calls) == 3
    assert db.rollbacks == 2
