import secrets
from typing import List, Optional, Set


class LeaveReason:
    SKIPPED = 'skipped'
    DISCONNECTED = 'disconnected'
    STOPPED = 'stopped'
    REPORTED = 'reported'

    ALL = (SKIPPED, DISCONNECTED, STOPPED, REPORTED)


class Participant:
    """One live connection. Identified by the Socket.IO session id."""

    def __init__(self, participant_id: str):
        self.id = participant_id
        self.interests: List[str] = []
        self.room_id: Optional[str] = None
        self.blocked: Set[str] = set()
        self.report_count = 0

    def blocks(self, other_id: str) -> bool:
        return other_id in self.blocked


def generate_room_id(length=10):
    """Generate a short, url-safe room id."""
    return 'room_' + secrets.token_hex(length // 2 + 1)[:length]


class Room:
    __slots__ = ('id', 'initiator_id', 'partner_id', 'deadline', 'started_at', 'extend_requests')

    def __init__(self, room_id: str, initiator_id: str, partner_id: str, started_at: float, deadline: float):
        self.id = room_id
        self.initiator_id = initiator_id
        self.partner_id = partner_id
        self.started_at = started_at
        self.deadline = deadline
        self.extend_requests: Set[str] = set()

    @property
    def occupants(self):
        return (self.initiator_id, self.partner_id)

    @property
    def state(self) -> str:
        # active -> pending_extension -> active; closed rooms are dropped from tracking
        return 'pending_extension' if self.extend_requests else 'active'

    def has(self, participant_id: str) -> bool:
        return participant_id in (self.initiator_id, self.partner_id)

    def other(self, participant_id: str) -> Optional[str]:
        if participant_id == self.initiator_id:
            return self.partner_id
        if participant_id == self.partner_id:
            return self.initiator_id
        return None
