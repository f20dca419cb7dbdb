import logging
from typing import Callable, Dict, List, Optional

from voicelink.models import LeaveReason, Room, generate_room_id
from .pool import WaitingPool
from .registry import SessionRegistry
from .stats import MatchStats


logger = logging.getLogger(__name__)

DEFAULT_SESSION_SEC = 5 * 60
DEFAULT_EXTENSION_SEC = 5 * 60


class RoomCoordinator:
    """Creates, extends and tears down two-party rooms.

    Not thread safe on its own; callers serialize access (see
    MatchmakingService).
    """

    def __init__(
        self,
        registry: SessionRegistry,
        pool: WaitingPool,
        notify: Callable[[str, str, dict], None],
        stats: MatchStats,
        clock: Callable[[], float],
        session_sec: float = DEFAULT_SESSION_SEC,
        extension_sec: float = DEFAULT_EXTENSION_SEC,
        on_deadline: Optional[Callable[[str, float], None]] = None,
    ):
        self.registry = registry
        self.pool = pool
        self.notify = notify
        self.stats = stats
        self.clock = clock
        self.session_sec = session_sec
        self.extension_sec = extension_sec
        self.on_deadline = on_deadline
        self._rooms: Dict[str, Room] = {}

    def __len__(self):
        return len(self._rooms)

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def room_of(self, participant_id: str) -> Optional[Room]:
        participant = self.registry.get(participant_id)
        if participant is None or participant.room_id is None:
            return None
        return self._rooms.get(participant.room_id)

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def create_room(self, initiator_id: str, partner_id: str) -> Room:
        """Pair two waiting participants.

        ``initiator_id`` triggered the match and starts negotiation;
        ``partner_id`` is the side that was already waiting.
        """
        initiator = self.registry.get(initiator_id)
        partner = self.registry.get(partner_id)
        if initiator_id == partner_id:
            raise ValueError('cannot pair a participant with itself')
        if initiator is None or partner is None:
            raise ValueError('both participants must be connected')
        if initiator.room_id is not None or partner.room_id is not None:
            raise ValueError('participant is already in a room')

        self.pool.remove(initiator_id)
        self.pool.remove(partner_id)

        room_id = generate_room_id()
        while room_id in self._rooms:
            room_id = generate_room_id()
        now = self.clock()
        room = Room(room_id, initiator_id, partner_id, started_at=now, deadline=now + self.session_sec)
        self._rooms[room_id] = room
        initiator.room_id = room_id
        partner.room_id = room_id
        self.stats.record_match()

        self.notify(initiator_id, 'matched', {'room_id': room_id, 'is_initiator': True, 'deadline': room.deadline})
        self.notify(partner_id, 'matched', {'room_id': room_id, 'is_initiator': False, 'deadline': room.deadline})
        logger.info(f"[room-created] room={room_id} initiator={initiator_id} partner={partner_id} deadline={room.deadline}")

        if self.on_deadline:
            self.on_deadline(room_id, room.deadline)
        return room

    def request_extension(self, participant_id: str) -> Optional[str]:
        """Record an extension vote.

        Returns 'granted' when both sides have now asked, 'pending' when
        waiting on the other side, None when there is no room.
        """
        room = self.room_of(participant_id)
        if room is None:
            return None

        room.extend_requests.add(participant_id)
        if len(room.extend_requests) < 2:
            self.notify(room.other(participant_id), 'partner_requested_extend', {})
            logger.info(f"[extend-requested] room={room.id} by={participant_id}")
            return 'pending'

        room.deadline += self.extension_sec
        room.extend_requests.clear()
        self.stats.record_extension()
        for occupant_id in room.occupants:
            self.notify(occupant_id, 'timer_extended', {'deadline': room.deadline})
        logger.info(f"[extend-granted] room={room.id} deadline={room.deadline}")

        if self.on_deadline:
            self.on_deadline(room.id, room.deadline)
        return 'granted'

    def leave_room(self, participant_id: str, reason: str) -> Optional[Room]:
        """Close the participant's room, telling the other side why.

        Every exit path goes through here. No-op without a room.
        """
        if reason not in LeaveReason.ALL:
            raise ValueError(f'unknown leave reason: {reason}')
        participant = self.registry.get(participant_id)
        if participant is None or participant.room_id is None:
            return None

        room = self._rooms.pop(participant.room_id, None)
        participant.room_id = None
        if room is None:
            return None

        other_id = room.other(participant_id)
        other = self.registry.get(other_id)
        if other is not None and other.room_id == room.id:
            other.room_id = None
        self.notify(other_id, 'partner_left', {'reason': reason})

        self.stats.record_close(room.started_at, self.clock(), reason)
        logger.info(f"[room-closed] room={room.id} by={participant_id} reason={reason}")
        return room

    def due_rooms(self, now: Optional[float] = None) -> List[str]:
        now = self.clock() if now is None else now
        return [room.id for room in self._rooms.values() if room.deadline <= now]

    def expire_room(self, room_id: str, expected_deadline: Optional[float] = None, now: Optional[float] = None) -> Optional[str]:
        """Close a room whose deadline has passed.

        The initiator is treated as the side letting the timer lapse: the
        partner sees a skip, the initiator gets ``session_expired``. Returns
        the initiator id so the caller can put them back into matchmaking,
        or None if the room is gone, was extended, or is not yet due.
        """
        room = self._rooms.get(room_id)
        if room is None:
            return None
        if expected_deadline is not None and room.deadline != expected_deadline:
            return None
        now = self.clock() if now is None else now
        if room.deadline > now:
            return None

        initiator_id = room.initiator_id
        self.stats.record_expiry()
        self.notify(initiator_id, 'session_expired', {'room_id': room_id})
        self.leave_room(initiator_id, LeaveReason.SKIPPED)
        return initiator_id
