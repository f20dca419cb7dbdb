from collections import OrderedDict
from typing import List

from .registry import SessionRegistry


class WaitingPool:
    """Participants seeking a partner, in arrival order."""

    def __init__(self):
        # participant id -> enqueue sequence number
        self._entries: 'OrderedDict[str, int]' = OrderedDict()
        self._seq = 0

    def __len__(self):
        return len(self._entries)

    def __contains__(self, participant_id):
        return participant_id in self._entries

    def enqueue(self, participant_id: str) -> bool:
        if participant_id in self._entries:
            return False
        self._seq += 1
        self._entries[participant_id] = self._seq
        return True

    def remove(self, participant_id: str) -> bool:
        return self._entries.pop(participant_id, None) is not None

    def members(self) -> List[str]:
        return list(self._entries)

    def candidates_for(self, participant_id: str, registry: SessionRegistry) -> List[str]:
        """Pool members that may be paired with ``participant_id``, oldest first.

        Excludes the participant itself, ids no longer registered, and any
        pair where either side has blocked the other.
        """
        me = registry.get(participant_id)
        if me is None:
            return []
        candidates = []
        for other_id in self._entries:
            if other_id == participant_id:
                continue
            other = registry.get(other_id)
            if other is None:
                continue
            if me.blocks(other_id) or other.blocks(participant_id):
                continue
            candidates.append(other_id)
        return candidates
