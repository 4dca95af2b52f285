from __future__ import annotations

import pytest
from sqlalchemy.orm import sessionmaker

from shoplist.database import Base, build_engine
from shoplist.models import Item, User


@pytest.fixture
def engine(tmp_path):
    db_engine = build_engine(f"sqlite:///{tmp_path / 'shoplist.db'}")
    Base.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _add_user(db, *, email: str, role: str) -> User:
    user = User(email=email, role=role)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def orderer(db) -> User:
    return _add_user(db, email="orderer@haptiq.com", role="orderer")


@pytest.fixture
def second_orderer(db) -> User:
    return _add_user(db, email="office.manager@haptiq.com", role="orderer")


@pytest.fixture
def colleague(db) -> User:
    return _add_user(db, email="colleague@haptiq.com", role="colleague")


@pytest.fixture
def make_item(db):
    def _make(name: str, *, category: str = "General", is_evergreen: bool = False) -> Item:
        item = Item(name=name, category=category, is_evergreen=is_evergreen)
        db.add(item)
        db.commit()
        return item

    return _make
