from typing import Iterable, Optional

from .pool import WaitingPool
from .registry import SessionRegistry


def interest_score(mine: Iterable[str], theirs: Iterable[str]) -> int:
    """Number of interests the two lists share, case-insensitively."""
    mine_set = {i.lower() for i in mine}
    if not mine_set:
        return 0
    return len(mine_set & {i.lower() for i in theirs})


def find_match(participant_id: str, registry: SessionRegistry, pool: WaitingPool) -> Optional[str]:
    """Pick a partner for ``participant_id`` from the waiting pool.

    With no declared interests the oldest eligible candidate wins.
    Otherwise the candidate sharing the most interests wins, ties going to
    the oldest. A best score of zero still pairs.
    """
    candidates = pool.candidates_for(participant_id, registry)
    if not candidates:
        return None

    me = registry.get(participant_id)
    if not me.interests:
        return candidates[0]

    best_id, best_score = None, -1
    for candidate_id in candidates:
        score = interest_score(me.interests, registry.get(candidate_id).interests)
        if score > best_score:
            best_id, best_score = candidate_id, score
    return best_id
