"""
Shared fixtures: an in-memory SQLite database with the friendship tables,
the SQLAlchemy repository on top of it and a FriendshipService.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from friendships.crud.friendships import FriendshipCRUD
from friendships.database import Base
from friendships.models.friendship import Friendship  # noqa: F401 registers the table
from friendships.services.friendship_service import FriendshipService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repository(db):
    return FriendshipCRUD(db)


@pytest.fixture
def service(repository):
    return FriendshipService(repository)
