"""Unit tests for the in-memory unit of work."""

from __future__ import annotations

from dataclasses import replace

import pytest

from tests.helpers.memory import committed_user, seed_user
from vending.services._shared.errors import NameTakenError, StaleEntityError
from vending.services._shared.ports import Role, UserRecord


def test_staged_writes_are_invisible_until_commit(memory_db):
    with memory_db.writer() as uow:
        saved = uow.users.save(UserRecord(id=None, username="a", password_hash="h", role=Role.BUYER))
        assert uow.users.find_by_id(saved.id) == saved
        assert committed_user(memory_db, saved.id) is None

    assert committed_user(memory_db, saved.id) == saved


def test_error_discards_staged_writes(memory_db):
    user = seed_user(memory_db, "a")
    with pytest.raises(RuntimeError), memory_db.writer() as uow:
        uow.users.save(replace(user, deposit=50))
        raise RuntimeError("boom")

    assert committed_user(memory_db, user.id).deposit == 0


def test_commit_detects_concurrent_write(memory_db):
    user = seed_user(memory_db, "a")
    first = memory_db.writer()
    second = memory_db.writer()

    first.users.save(replace(first.users.find_by_id(user.id), deposit=5))
    second.users.save(replace(second.users.find_by_id(user.id), deposit=10))
    first.commit()

    with pytest.raises(StaleEntityError):
        second.commit()
    assert committed_user(memory_db, user.id).deposit == 5


def test_commit_is_all_or_nothing(memory_db):
    buyer = seed_user(memory_db, "buyer")
    other = seed_user(memory_db, "other")
    uow = memory_db.writer()
    uow.users.save(replace(uow.users.find_by_id(buyer.id), deposit=100))
    uow.users.save(replace(uow.users.find_by_id(other.id), deposit=100))

    with memory_db.writer() as rival:
        rival.users.save(replace(rival.users.find_by_id(other.id), deposit=1))

    with pytest.raises(StaleEntityError):
        uow.commit()
    assert committed_user(memory_db, buyer.id).deposit == 0


def test_unique_names_checked_at_commit(memory_db):
    first = memory_db.writer()
    second = memory_db.writer()
    first.users.save(UserRecord(id=None, username="same", password_hash="h", role=Role.BUYER))
    second.users.save(UserRecord(id=None, username="same", password_hash="h", role=Role.SELLER))
    first.commit()

    with pytest.raises(NameTakenError):
        second.commit()


def test_reader_refuses_writes(memory_db):
    with memory_db.reader() as uow, pytest.raises(RuntimeError, match="Read-only"):
        uow.users.save(UserRecord(id=None, username="x", password_hash="h", role=Role.BUYER))
