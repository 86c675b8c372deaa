# Shared fixtures for chatstore tests.
# Created: 2026-10-17

import os
import tempfile

_LOG_DIR = tempfile.mkdtemp(prefix="chatstore-logs-")
os.environ.setdefault("CHATSTORE_LOG_FILE", os.path.join(_LOG_DIR, "server.log"))
os.environ.setdefault("CHATSTORE_DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from chatstore.server.database import Base  # noqa: E402
from chatstore.server.models import User  # noqa: E402
from chatstore.server.store import ChatStore  # noqa: E402
from chatstore.shared.dto import Image  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return ChatStore(db, default_image=Image("https://img.test/thumb.png", "https://img.test/full.png"))


def _create_user(db, name: str) -> User:
    user = User(
        name=name,
        image_thumbnail=f"https://img.test/{name.lower()}-t.png",
        image_original=f"https://img.test/{name.lower()}.png",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def alice(db):
    return _create_user(db, "Alice")


@pytest.fixture
def bob(db):
    return _create_user(db, "Bob")


@pytest.fixture
def carol(db):
    return _create_user(db, "Carol")


@pytest.fixture
def user_factory(db):
    """Create extra users by name."""

    def factory(name: str) -> User:
        return _create_user(db, name)

    return factory
