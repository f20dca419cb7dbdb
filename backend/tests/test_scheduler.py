import time

import pytest

from voicelink import create_app, socketio
from voicelink.services.matching.scheduler import scheduled_rooms


class TimedConfig:
    TESTING = True
    ENABLE_SCHEDULER_IN_TESTS = True
    SECRET_KEY = 'test-secret'
    SESSION_DURATION_SEC = 1
    EXTENSION_DURATION_SEC = 2
    TIMER_POLL_SEC = 0.05
    TIMER_HEARTBEAT_SEC = 0
    ALLOWED_ORIGINS = ['http://localhost:3000']


@pytest.fixture()
def timed_app():
    application = create_app(TimedConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def pair(timed_app):
    """Two matched /ws clients: (waiter, seeker, room_id, deadline, inboxes)."""
    waiter = socketio.test_client(timed_app, namespace='/ws')
    seeker = socketio.test_client(timed_app, namespace='/ws')
    inboxes = {'waiter': [], 'seeker': []}
    waiter.emit('start_matching', {}, namespace='/ws')
    seeker.emit('start_matching', {}, namespace='/ws')
    _drain(waiter, inboxes['waiter'])
    _drain(seeker, inboxes['seeker'])
    matched = [args for name, args in inboxes['seeker'] if name == 'matched']
    assert matched
    yield waiter, seeker, matched[0]['room_id'], matched[0]['deadline'], inboxes
    for test_client in (waiter, seeker):
        if test_client.is_connected('/ws'):
            test_client.disconnect(namespace='/ws')


def _drain(sio, inbox):
    for pkt in sio.get_received('/ws'):
        inbox.append((pkt['name'], pkt['args'][0] if pkt['args'] else None))
    return inbox


def _wait_for(predicate, timeout=4.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


def test_server_closes_overdue_room(timed_app, pair):
    waiter, seeker, room_id, _deadline, inboxes = pair
    matchmaker = timed_app.extensions['matchmaker']

    assert _wait_for(lambda: matchmaker.deadline_of(room_id) is None)
    assert _wait_for(lambda: ('partner_left', {'reason': 'skipped'}) in _drain(waiter, inboxes['waiter']))
    _drain(seeker, inboxes['seeker'])
    assert ('session_expired', {'room_id': room_id}) in inboxes['seeker']
    assert ('waiting', {}) in inboxes['seeker']

    snap = matchmaker.snapshot()
    assert snap['active_rooms'] == 0
    assert snap['expirations_total'] == 1
    assert snap['queue_depth'] == 1


def test_extension_outlives_first_timer(timed_app, pair):
    waiter, seeker, room_id, deadline, inboxes = pair
    matchmaker = timed_app.extensions['matchmaker']

    waiter.emit('request_extend', namespace='/ws')
    seeker.emit('request_extend', namespace='/ws')
    assert matchmaker.deadline_of(room_id) == deadline + 2

    # past the original deadline the room is still open
    while time.time() < deadline + 0.5:
        time.sleep(0.05)
    assert matchmaker.deadline_of(room_id) == deadline + 2
    assert matchmaker.snapshot()['expirations_total'] == 0

    assert _wait_for(lambda: matchmaker.deadline_of(room_id) is None)
    assert matchmaker.snapshot()['expirations_total'] == 1


def test_timer_stops_when_room_closes_early(timed_app):
    matchmaker = timed_app.extensions['matchmaker']
    matchmaker.rooms.session_sec = 30

    waiter = socketio.test_client(timed_app, namespace='/ws')
    seeker = socketio.test_client(timed_app, namespace='/ws')
    waiter.emit('start_matching', {}, namespace='/ws')
    seeker.emit('start_matching', {}, namespace='/ws')
    room_id = [pkt['args'][0] for pkt in seeker.get_received('/ws') if pkt['name'] == 'matched'][0]['room_id']
    assert room_id in scheduled_rooms()

    seeker.emit('skip', namespace='/ws')
    assert matchmaker.deadline_of(room_id) is None
    assert _wait_for(lambda: room_id not in scheduled_rooms(), timeout=1.0)

    waiter.disconnect(namespace='/ws')
    seeker.disconnect(namespace='/ws')
