import os
import sys
import pytest

# Ensure the backend root (containing the `uno_server` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from uno_server import create_app, socketio
from uno_server.commands import CommandDispatcher
from uno_server.services.games import RoomRegistry, ScheduledTask


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    ROOM_CODE_LENGTH = 6
    MIN_PLAYERS = 2
    MAX_PLAYERS = 10
    HAND_SIZE = 7
    UNO_PENALTY_CARDS = 2
    EMPTY_ROOM_GRACE_SEC = 30
    PLAY_AGAIN_RESET_DELAY_SEC = 2


class ManualScheduler:
    """Collects scheduled tasks so tests decide when timers fire."""

    def __init__(self):
        self.tasks = []

    def schedule(self, delay, callback, *args, name='task'):
        task = ScheduledTask(name, delay, callback, args)
        self.tasks.append(task)
        return task

    @property
    def pending(self):
        return [t for t in self.tasks if t.pending]

    def run_pending(self):
        return sum(1 for task in list(self.pending) if task.fire())


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def registry(scheduler):
    return RoomRegistry(scheduler)


@pytest.fixture()
def dispatcher(registry):
    published = []
    registry.publisher = published.extend
    d = CommandDispatcher(registry)
    d.published = published
    return d


@pytest.fixture()
def flask_app(scheduler):
    application = create_app(TestConfig, scheduler=scheduler)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
