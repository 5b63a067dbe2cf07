"""
PurchaseService over the SQLAlchemy unit of work.

Two buyers use separate sessions on a file-backed SQLite database. The second
buyer's purchase commits between the first buyer's read and its write, so the
first save hits the versioned UPDATE with a stale version and has to retry.
"""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from vending.core.extensions import db
from vending.models import Product, User
from vending.services._shared.errors import InsufficientInventoryError
from vending.services.purchases.dto import BuyIn
from vending.services.purchases.service import PurchaseService
from vending.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


class SessionUnitOfWorkFactory:
    """Hand out units of work, each on a fresh session from ``make_session``."""

    def __init__(self, make_session) -> None:
        self.make_session = make_session

    def writer(self):
        return SQLAlchemyUnitOfWork(session=self.make_session())

    def reader(self):
        return SQLAlchemyReadOnlyUnitOfWork(session=self.make_session(), isolation_level=None)


class RacedFactory(SessionUnitOfWorkFactory):
    """Runs ``rival`` right after the first product read of the first writer."""

    def __init__(self, make_session, rival) -> None:
        super().__init__(make_session)
        self.rival = rival
        self.writers = 0

    def writer(self):
        uow = super().writer()
        self.writers += 1
        if self.rival is not None:
            read = uow.products.find_by_id

            def read_then_lose_the_race(product_id):
                product = read(product_id)
                rival, self.rival = self.rival, None
                rival()
                return product

            uow.products.find_by_id = read_then_lose_the_race
        return uow


@pytest.fixture()
def make_session(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'vending.db'}")
    db.metadata.create_all(engine)
    try:
        yield sessionmaker(bind=engine, expire_on_commit=False)
    finally:
        engine.dispose()


def _seed(make_session, *, stock: int) -> dict[str, int]:
    with make_session() as s:
        seller = User(username="shop", password_hash="!", role="seller")
        first = User(username="first", password_hash="!", role="buyer", deposit=100)
        second = User(username="second", password_hash="!", role="buyer", deposit=100)
        s.add_all([seller, first, second])
        s.flush()
        product = Product(product_name="Cola", cost=25, amount_available=stock, seller_id=seller.id)
        s.add(product)
        s.commit()
        return {"product": product.id, "first": first.id, "second": second.id}


def _state(make_session, ids) -> tuple[Product, User, User]:
    with make_session() as s:
        return (
            s.get(Product, ids["product"]),
            s.get(User, ids["first"]),
            s.get(User, ids["second"]),
        )


def test_stale_write_is_retried_with_fresh_reads(make_session):
    ids = _seed(make_session, stock=2)
    rival_service = PurchaseService(uow=SessionUnitOfWorkFactory(make_session))

    def rival():
        rival_service.buy_product(ids["second"], BuyIn(product_id=ids["product"], amount=1))

    factory = RacedFactory(make_session, rival)
    out = PurchaseService(uow=factory, max_retries=3).buy_product(
        ids["first"], BuyIn(product_id=ids["product"], amount=1)
    )

    assert factory.writers == 2
    assert out.product.amount_available == 0
    product, first, second = _state(make_session, ids)
    assert product.amount_available == 0
    assert product.version == 3
    assert first.deposit == 75
    assert second.deposit == 75


def test_lost_race_for_the_last_item_does_not_oversell(make_session):
    ids = _seed(make_session, stock=1)
    rival_service = PurchaseService(uow=SessionUnitOfWorkFactory(make_session))

    def rival():
        rival_service.buy_product(ids["second"], BuyIn(product_id=ids["product"], amount=1))

    factory = RacedFactory(make_session, rival)
    with pytest.raises(InsufficientInventoryError):
        PurchaseService(uow=factory, max_retries=3).buy_product(
            ids["first"], BuyIn(product_id=ids["product"], amount=1)
        )

    assert factory.writers == 2
    product, first, second = _state(make_session, ids)
    assert product.amount_available == 0
    assert first.deposit == 100
    assert second.deposit == 75
