import sys
import uuid
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from config import Settings  # noqa: E402
from api.lunch import db as app_db  # noqa: E402
from api.lunch.domain import Meal  # noqa: E402
from api.lunch.repos_sqlalchemy import SqlOrderStore  # noqa: E402
from api.lunch.schemas import LunchOrderRequest  # noqa: E402
from tests._clock import MONDAY, FixedClock  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> FixedClock:
    """Clock at Monday 08:00."""
    return FixedClock(MONDAY.replace(hour=8))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path}/lunch.db",
        timezone="UTC",
        sweeper_enabled=False,
    )


@pytest.fixture
async def store(settings):
    engine = app_db.create_engine(settings.database_url, "test")
    await app_db.init_db(engine)
    yield SqlOrderStore(app_db.create_sessionmaker(engine))
    await engine.dispose()


@pytest.fixture
def make_request():
    def _make(child_id=None, day="MONDAY", quantity=1, parent_id=None):
        return LunchOrderRequest(
            parent_id=parent_id or uuid.uuid4(),
            wallet_id=uuid.uuid4(),
            child_id=child_id or uuid.uuid4(),
            meal=Meal.BEANS_WITH_SALAD,
            quantity=quantity,
            day_of_week=day,
        )

    return _make
