import logging
from typing import Optional

from voicelink.models import LeaveReason
from .rooms import RoomCoordinator


logger = logging.getLogger(__name__)


class ModerationLedger:
    """Report counts and personal blocklists.

    Reporting is one-way: the reporter never gets matched with the reported
    party again, but the reported party can still be matched with anyone
    else. Counts are only exposed, nothing acts on them automatically.
    """

    def __init__(self, rooms: RoomCoordinator):
        self.rooms = rooms

    def report(self, reporter_id: str) -> Optional[str]:
        """Report the reporter's current partner and close the room.

        Returns the reported participant's id, or None if the reporter had
        no room. The reporter is not re-queued.
        """
        room = self.rooms.room_of(reporter_id)
        if room is None:
            return None
        registry = self.rooms.registry
        reporter = registry.get(reporter_id)
        reported_id = room.other(reporter_id)
        reported = registry.get(reported_id)
        if reported is not None:
            reported.report_count += 1
        reporter.blocked.add(reported_id)
        self.rooms.stats.record_report()
        logger.info(
            f"[report] room={room.id} reporter={reporter_id} reported={reported_id} "
            f"total={reported.report_count if reported else 0}"
        )

        self.rooms.leave_room(reporter_id, LeaveReason.REPORTED)
        return reported_id

    def report_count(self, participant_id: str) -> Optional[int]:
        participant = self.rooms.registry.get(participant_id)
        return participant.report_count if participant else None

