from datetime import date, datetime, timedelta

import pytest

import auth
from db import GymStore
from ethiopian import ethiopian_to_gregorian
from membership import FixedClock


@pytest.fixture
def store(tmp_path):
    s = GymStore(tmp_path / "gym.db")
    s.init_db(auth.hash_password("admin123", rounds=4))
    return s


@pytest.fixture
def clock_at():
    """clock_at("2016-01-01", days=30) -> clock pinned 30 days after that Ethiopian date."""

    def make(ethiopian_date: str, days: int = 0, hour: int = 0) -> FixedClock:
        d: date = ethiopian_to_gregorian(ethiopian_date) + timedelta(days=days)
        return FixedClock(datetime(d.year, d.month, d.day, hour))

    return make
