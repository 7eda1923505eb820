import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker

from wanderai.core.database import Base
from wanderai.core.storage import KeyValueStore
from wanderai.models import sql  # noqa: F401  registers kv_entries on Base


@pytest.fixture
def engine():
    # In-memory SQLite shared across connections
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def store(engine):
    return KeyValueStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def offline_store():
    """A store with no storage context at all."""
    return KeyValueStore()
