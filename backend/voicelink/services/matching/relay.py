from typing import Any, Callable

from .rooms import RoomCoordinator


SIGNAL_KINDS = ('offer', 'answer', 'candidate')


class SignalingRelay:
    """Forwards WebRTC negotiation payloads to the other room occupant.

    Payloads are passed through untouched. Messages for a room the sender
    is not in (usually one that just closed) are dropped.
    """

    def __init__(self, rooms: RoomCoordinator, notify: Callable[[str, str, dict], None]):
        self.rooms = rooms
        self.notify = notify

    def relay(self, sender_id: str, room_id: str, kind: str, payload: Any) -> bool:
        if kind not in SIGNAL_KINDS or not isinstance(room_id, str):
            return False
        room = self.rooms.get(room_id)
        if room is None or not room.has(sender_id):
            return False
        sender = self.rooms.registry.get(sender_id)
        if sender is None or sender.room_id != room_id:
            return False
        self.notify(room.other(sender_id), kind, {kind: payload})
        return True
