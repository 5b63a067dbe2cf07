import pytest
from sqlalchemy import text

from tests.factories.user import UserFactory
from vending.models.user import User
from vending.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from vending.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork as RWuow


@pytest.fixture()
def _skip_if_sqlite(db):
    """
    Skip tests on SQLite since database-level READ ONLY transactional flags are
    not supported there and guards would be partially ineffective.
    """
    if db.engine.url.get_backend_name() == "sqlite":
        pytest.skip("Read-only write guards not supported on SQLite")


@pytest.mark.usefixtures("_skip_if_sqlite")
class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, db):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            user = UserFactory.build()  # not persisted
            uow.session.add(user)
            uow.session.flush()

    def test_blocks_core_dml(self, app, db):
        """
        Ensure that raw SQL DML/DDL is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("UPDATE users SET deposit = deposit + 100 WHERE id = :id"), {"id": 1}
            )

    def test_always_rolls_back_changes(self, app, db):
        """
        Any attempted modifications must not persist after RO UoW exits.
        """
        with RWuow() as uow:
            user = UserFactory.build(deposit=10)
            uow.session.add(user)
            uow.session.flush()
            user_id = user.id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.session.get(User, user_id)
            u.deposit = 1_000_000
            uow.session.flush()

        with RWuow() as uow:
            assert uow.users.find_by_id(user_id).deposit == 10


class TestReadOnlyOnAnyBackend:
    def test_reads_records(self, app, db, session):
        u = UserFactory(username="reader")
        with ROuow() as uow:
            assert uow.users.find_by_username("reader").id == u.id

    def test_disallows_commit(self, app, db, session):
        """
        RO UoW must reject commit() by design.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()
