import os
import sys
import pytest

# Ensure the backend root (containing the `voicelink` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from voicelink import create_app, socketio
from voicelink.services.matching import MatchmakingService


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SESSION_DURATION_SEC = 300
    EXTENSION_DURATION_SEC = 300
    MAX_INTERESTS = 5
    STATS_WINDOW_SIZE = 10
    TIMER_HEARTBEAT_SEC = 0
    ALLOWED_ORIGINS = ['http://localhost:3000']


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class Outbox:
    """Records notify(participant_id, event, payload) calls."""

    def __init__(self):
        self.messages = []

    def __call__(self, participant_id, event, payload):
        self.messages.append((participant_id, event, payload))

    def for_(self, participant_id, event=None):
        return [
            (ev, payload) for pid, ev, payload in self.messages
            if pid == participant_id and (event is None or ev == event)
        ]

    def clear(self):
        self.messages.clear()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def outbox():
    return Outbox()


@pytest.fixture()
def deadlines():
    return []


@pytest.fixture()
def matchmaker(outbox, clock, deadlines):
    return MatchmakingService(
        notify=outbox,
        clock=clock,
        on_deadline=lambda room_id, deadline: deadlines.append((room_id, deadline)),
    )


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    """Factory for Socket.IO test clients connected to /ws."""
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except RuntimeError:
            pass
