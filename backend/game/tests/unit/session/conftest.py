import itertools

import pytest

from game.logic.settings import GameSettings
from game.session.manager import SessionManager
from game.tests.unit.session.helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def manager(clock):
    counter = itertools.count(1)
    manager = SessionManager(
        GameSettings(grid_size=6),
        clock=clock,
        room_id_factory=lambda: f"room{next(counter)}",
    )
    yield manager
    manager.cancel_all_timers()
