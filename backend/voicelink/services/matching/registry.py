from typing import Dict, Iterable, List, Optional

from voicelink.models import Participant


DEFAULT_MAX_INTERESTS = 5


class InterestCapacityError(ValueError):
    """Raised when a participant declares more interests than allowed."""

    code = 'interest_capacity'

    def __init__(self, limit: int):
        super().__init__(f'You can add at most {limit} interests')
        self.limit = limit


def normalize_interests(raw: Iterable, limit: int = DEFAULT_MAX_INTERESTS) -> List[str]:
    """Trim, lowercase and dedupe interests, keeping declaration order.

    Empty and non-string entries are dropped. Raises InterestCapacityError if more than
    ``limit`` distinct interests remain.
    """
    cleaned: List[str] = []
    for item in raw or []:
        if not isinstance(item, str):
            continue
        tag = item.strip().lower()
        if not tag or tag in cleaned:
            continue
        cleaned.append(tag)
    if len(cleaned) > limit:
        raise InterestCapacityError(limit)
    return cleaned


class SessionRegistry:
    """Connected participants keyed by connection id."""

    def __init__(self, max_interests: int = DEFAULT_MAX_INTERESTS):
        self.max_interests = max_interests
        self._participants: Dict[str, Participant] = {}

    def __len__(self):
        return len(self._participants)

    def __contains__(self, participant_id):
        return participant_id in self._participants

    def __iter__(self):
        return iter(list(self._participants.values()))

    def register(self, participant_id: str) -> Participant:
        participant = self._participants.get(participant_id)
        if participant is None:
            participant = Participant(participant_id)
            self._participants[participant_id] = participant
        return participant

    def unregister(self, participant_id: str) -> Optional[Participant]:
        # Room and pool cleanup is done by the caller before the entry goes away
        return self._participants.pop(participant_id, None)

    def get(self, participant_id: str) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def set_interests(self, participant_id: str, raw: Iterable) -> Optional[List[str]]:
        participant = self._participants.get(participant_id)
        if participant is None:
            return None
        # Validate first so a capacity error leaves the previous interests in place
        interests = normalize_interests(raw, self.max_interests)
        participant.interests = interests
        return interests
