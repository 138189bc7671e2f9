import random

import pytest

from ballsort.messaging.router import MessageRouter
from ballsort.server.app import create_app
from ballsort.server.settings import GameServerSettings
from ballsort.session.manager import SessionManager
from ballsort.tests.mocks import MockConnection

SESSION_ID = "session0001"
OTHER_SESSION_ID = "session0002"


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def session_manager(rng):
    return SessionManager(rng=rng)


@pytest.fixture
def message_router(session_manager):
    return MessageRouter(session_manager)


@pytest.fixture
def mock_connection():
    return MockConnection()


@pytest.fixture
def settings():
    return GameServerSettings()


@pytest.fixture
def app(settings, session_manager, message_router):
    return create_app(
        settings=settings,
        session_manager=session_manager,
        message_router=message_router,
    )
