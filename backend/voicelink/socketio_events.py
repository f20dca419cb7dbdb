from flask_socketio import emit
from flask import current_app, request
from voicelink.services.matching import InterestCapacityError, MatchmakingService


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _matchmaker() -> MatchmakingService:
    return current_app.extensions['matchmaker']


def handle_connect(auth=None):
    participant = _matchmaker().connect(_get_sid())
    emit('connected', {'participant_id': participant.id})


def handle_disconnect(*_args):
    # Disconnect is a full teardown: room, pool and registry entry
    _matchmaker().disconnect(_get_sid())


def handle_start_matching(data=None):
    interests = data.get('interests') if isinstance(data, dict) else None
    if interests is None:
        interests = []
    if not isinstance(interests, (list, tuple)):
        emit('error', {'message': 'interests must be a list', 'code': 'invalid_payload'})
        return
    try:
        _matchmaker().start_matching(_get_sid(), interests)
    except InterestCapacityError as exc:
        emit('error', {'message': str(exc), 'code': exc.code})


def handle_stop_matching(*_args):
    _matchmaker().stop_matching(_get_sid())


def handle_skip(*_args):
    _matchmaker().skip(_get_sid())


def handle_request_extend(*_args):
    _matchmaker().request_extend(_get_sid())


def handle_report(*_args):
    _matchmaker().report(_get_sid())


def _relay(kind: str, data) -> None:
    # Malformed or stale signaling is dropped without a reply
    if not isinstance(data, dict) or not isinstance(data.get('room_id'), str):
        return
    _matchmaker().relay(_get_sid(), data['room_id'], kind, data.get(kind))


def handle_offer(data=None):
    _relay('offer', data)


def handle_answer(data=None):
    _relay('answer', data)


def handle_candidate(data=None):
    if isinstance(data, dict) and 'candidate' not in data and 'ice_candidate' in data:
        data = dict(data, candidate=data['ice_candidate'])
    _relay('candidate', data)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the matchmaking namespace."""
    from voicelink import socketio

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('start_matching', handle_start_matching, namespace=namespace)
    socketio.on_event('stop_matching', handle_stop_matching, namespace=namespace)
    socketio.on_event('skip', handle_skip, namespace=namespace)
    socketio.on_event('request_extend', handle_request_extend, namespace=namespace)
    socketio.on_event('report', handle_report, namespace=namespace)
    socketio.on_event('offer', handle_offer, namespace=namespace)
    socketio.on_event('answer', handle_answer, namespace=namespace)
    socketio.on_event('candidate', handle_candidate, namespace=namespace)
    socketio.on_event('ice_candidate', handle_candidate, namespace=namespace)
