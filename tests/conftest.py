import os
import sys
import pytest

# Ensure the repo root (containing the `werewolf` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from werewolf import create_app, socketio
from werewolf.services.games import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['http://localhost:3000']
    SOCKETIO_NAMESPACE = '/ws'
    ROOM_CODE_LENGTH = 6
    PHASE_TICK_SEC = 0
    # Tests drive PhaseTimer.tick() by hand
    PHASE_TIMER_AUTOSTART = False
    ROLE_SHUFFLE_SEED = 1234
    LOG_LEVEL = 'DEBUG'


class Recorder:
    """Collects broadcasts as (room_code, event, payload) tuples."""

    def __init__(self):
        self.events = []

    def __call__(self, room_code, event, payload):
        self.events.append((room_code, event, payload))

    def named(self, event):
        return [payload for _, name, payload in self.events if name == event]


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application
    application.extensions['werewolf'].close()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, namespace='/ws')
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def registry(recorder):
    reg = RoomRegistry(notify=recorder, timer_autostart=False, seed=42)
    yield reg
    reg.close()
