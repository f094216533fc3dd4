import os
import random
import sys
import pytest

# Ensure the repository root (containing `config.py` and `puzzlesync`) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from puzzlesync import NAMESPACE, create_app, socketio
from puzzlesync.fanout import SocketFanout
from puzzlesync.services.games.session import GameSession


class RecordingFanout(SocketFanout):
    """Fanout that records emits instead of talking to Socket.IO."""

    def __init__(self):
        super().__init__(socketio=None, namespace=NAMESPACE)
        self.sent = []

    def _emit(self, event, payload, to=None):
        self.sent.append((event, payload, to))

    def events(self):
        return [event for event, _, _ in self.sent]

    def broadcasts(self, event=None):
        return [(e, p) for e, p, to in self.sent if to is None and (event is None or e == event)]

    def clear(self):
        self.sent.clear()


class FakeClock:
    def __init__(self, start=1_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture()
def fanout():
    return RecordingFanout()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def game(fanout, clock):
    return GameSession(fanout=fanout, clock=clock, rng=random.Random(1234))


def solve(game_session, player_id):
    """Rotate every tile of a player's puzzle back to 0."""
    player = game_session.get_player(player_id)
    for index in range(len(player.puzzle)):
        while player.puzzle[index] != 0:
            game_session.rotate(player_id, index)


@pytest.fixture()
def make_config(tmp_path):
    class TestConfig:
        TESTING = True
        SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
        UPLOAD_FOLDER = str(tmp_path / 'uploads')
        UPLOAD_URL_PREFIX = '/uploads'
        MAX_CONTENT_LENGTH = 1024 * 1024
        ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg'}
        CORS_ORIGINS = ['*']
    return TestConfig


@pytest.fixture()
def flask_app(make_config):
    application = create_app(make_config)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients; role='player' joins as a player."""
    clients = []

    def _connect(role=None):
        query_string = f'role={role}' if role else None
        test_client = socketio.test_client(flask_app, namespace=NAMESPACE, query_string=query_string)
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


def received(test_client, name=None):
    """Drain a client's queue, optionally filtering on event name; returns payloads or packets."""
    packets = test_client.get_received(NAMESPACE)
    if name is None:
        return packets
    return [pkt['args'][0] if pkt['args'] else None for pkt in packets if pkt['name'] == name]
