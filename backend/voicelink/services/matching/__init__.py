"""Matchmaking core: registry, waiting pool, pairing, rooms and moderation.

Transport-agnostic. Socket handlers and HTTP routes talk to
``MatchmakingService``; everything it sends out goes through the
``notify`` callable it was built with.
"""

from .registry import InterestCapacityError, SessionRegistry, normalize_interests
from .pool import WaitingPool
from .engine import find_match, interest_score
from .rooms import RoomCoordinator
from .relay import SignalingRelay
from .moderation import ModerationLedger
from .stats import MatchStats
from .service import MatchmakingService
