import logging
import threading
import time
from typing import Any, Callable, Iterable, List, Optional

from voicelink.models import LeaveReason, Participant, Room
from .engine import find_match
from .moderation import ModerationLedger
from .pool import WaitingPool
from .registry import DEFAULT_MAX_INTERESTS, SessionRegistry
from .relay import SignalingRelay
from .rooms import DEFAULT_EXTENSION_SEC, DEFAULT_SESSION_SEC, RoomCoordinator
from .stats import MatchStats


logger = logging.getLogger(__name__)


class MatchmakingService:
    """Single entry point for every participant event.

    All state (registry, pool, rooms) sits behind one re-entrant lock, so
    matching plus room creation, extension votes and teardown are each
    atomic with respect to one another. Nothing here blocks beyond that
    lock. Outbound messages go through ``notify(participant_id, event,
    payload)``, always addressed to a single participant.
    """

    def __init__(
        self,
        notify: Callable[[str, str, dict], None],
        clock: Callable[[], float] = time.time,
        session_sec: float = DEFAULT_SESSION_SEC,
        extension_sec: float = DEFAULT_EXTENSION_SEC,
        max_interests: int = DEFAULT_MAX_INTERESTS,
        stats_window: int = 100,
        on_deadline: Optional[Callable[[str, float], None]] = None,
    ):
        self._lock = threading.RLock()
        self.notify = notify
        self.clock = clock
        self.registry = SessionRegistry(max_interests=max_interests)
        self.pool = WaitingPool()
        self.stats = MatchStats(window_size=stats_window, clock=clock)
        self.rooms = RoomCoordinator(
            self.registry,
            self.pool,
            notify,
            self.stats,
            clock,
            session_sec=session_sec,
            extension_sec=extension_sec,
            on_deadline=on_deadline,
        )
        self.signaling = SignalingRelay(self.rooms, notify)
        self.moderation = ModerationLedger(self.rooms)

    # ---- connection lifecycle ----

    def connect(self, participant_id: str) -> Participant:
        with self._lock:
            participant = self.registry.register(participant_id)
        logger.info(f"[connect] participant={participant_id} online={len(self.registry)}")
        return participant

    def disconnect(self, participant_id: str) -> bool:
        """Tear down everything the participant was part of. Idempotent."""
        with self._lock:
            if participant_id not in self.registry:
                return False
            self.rooms.leave_room(participant_id, LeaveReason.DISCONNECTED)
            self.pool.remove(participant_id)
            self.registry.unregister(participant_id)
        logger.info(f"[disconnect] participant={participant_id} online={len(self.registry)}")
        return True

    # ---- matchmaking ----

    def start_matching(self, participant_id: str, interests: Iterable = ()) -> Optional[Room]:
        """Declare interests, join the pool and try to pair.

        Raises InterestCapacityError without touching any state. Returns the
        new room, or None when the caller was left waiting.
        """
        with self._lock:
            if participant_id not in self.registry:
                return None
            self.registry.set_interests(participant_id, interests)
            self.rooms.leave_room(participant_id, LeaveReason.SKIPPED)
            return self._enter_matchmaking(participant_id)

    def stop_matching(self, participant_id: str) -> bool:
        with self._lock:
            if participant_id not in self.registry:
                return False
            self.rooms.leave_room(participant_id, LeaveReason.STOPPED)
            self.pool.remove(participant_id)
            self.notify(participant_id, 'stopped', {})
            return True

    def skip(self, participant_id: str) -> Optional[Room]:
        with self._lock:
            if participant_id not in self.registry:
                return None
            self.rooms.leave_room(participant_id, LeaveReason.SKIPPED)
            return self._enter_matchmaking(participant_id)

    def _enter_matchmaking(self, participant_id: str) -> Optional[Room]:
        self.pool.enqueue(participant_id)
        match_id = find_match(participant_id, self.registry, self.pool)
        if match_id is None:
            self.notify(participant_id, 'waiting', {})
            logger.info(f"[waiting] participant={participant_id} queue={len(self.pool)}")
            return None
        return self.rooms.create_room(participant_id, match_id)

    # ---- in-room actions ----

    def request_extend(self, participant_id: str) -> Optional[str]:
        with self._lock:
            return self.rooms.request_extension(participant_id)

    def report(self, participant_id: str) -> Optional[str]:
        with self._lock:
            reported_id = self.moderation.report(participant_id)
            if reported_id is not None:
                self.notify(participant_id, 'report_confirmed', {})
            return reported_id

    def relay(self, participant_id: str, room_id: str, kind: str, payload: Any) -> bool:
        with self._lock:
            return self.signaling.relay(participant_id, room_id, kind, payload)

    # ---- timers ----

    def expire_room(self, room_id: str, expected_deadline: Optional[float] = None, now: Optional[float] = None) -> Optional[str]:
        """Close an overdue room and put its initiator back into matchmaking."""
        with self._lock:
            initiator_id = self.rooms.expire_room(room_id, expected_deadline=expected_deadline, now=now)
            if initiator_id is None:
                return None
            if initiator_id in self.registry:
                self._enter_matchmaking(initiator_id)
            return initiator_id

    def expire_due(self, now: Optional[float] = None) -> List[str]:
        with self._lock:
            expired = []
            for room_id in self.rooms.due_rooms(now):
                if self.expire_room(room_id, now=now) is not None:
                    expired.append(room_id)
            return expired

    # ---- read-only views ----

    def deadline_of(self, room_id: str) -> Optional[float]:
        with self._lock:
            room = self.rooms.get(room_id)
            return room.deadline if room else None

    def report_count(self, participant_id: str) -> Optional[int]:
        with self._lock:
            return self.moderation.report_count(participant_id)

    def snapshot(self) -> dict:
        with self._lock:
            data = {
                'online': len(self.registry),
                'queue_depth': len(self.pool),
                'active_rooms': len(self.rooms),
            }
            data.update(self.stats.to_dict())
            return data
