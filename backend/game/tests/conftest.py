import pytest

from game.logic.settings import GameSettings
from game.messaging.router import MessageRouter
from game.server.app import create_app
from game.server.settings import GameServerSettings
from game.session.manager import SessionManager
from game.tests.mocks import MockConnection


@pytest.fixture
def session_manager():
    manager = SessionManager(GameSettings(grid_size=6))
    yield manager
    manager.cancel_all_timers()


@pytest.fixture
def message_router(session_manager):
    return MessageRouter(session_manager)


@pytest.fixture
def mock_connection():
    return MockConnection()


@pytest.fixture
def app(session_manager, message_router):
    return create_app(
        settings=GameServerSettings(),
        session_manager=session_manager,
        message_router=message_router,
    )
