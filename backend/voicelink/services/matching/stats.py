from collections import deque
import time

from voicelink.models import LeaveReason


class MatchStats:
    """Process-lifetime counters for the admin dashboard."""

    def __init__(self, window_size: int = 100, clock=time.time):
        self._clock = clock
        self.started_at = clock()
        self.matches_total = 0
        self.skips_total = 0
        self.reports_total = 0
        self.extensions_total = 0
        self.expirations_total = 0
        self._durations = deque(maxlen=max(1, int(window_size)))

    def record_match(self) -> None:
        self.matches_total += 1

    def record_extension(self) -> None:
        self.extensions_total += 1

    def record_report(self) -> None:
        self.reports_total += 1

    def record_expiry(self) -> None:
        self.expirations_total += 1

    def record_close(self, started_at: float, ended_at: float, reason: str) -> None:
        if reason == LeaveReason.SKIPPED:
            self.skips_total += 1
        self._durations.append(max(0.0, ended_at - started_at))

    @property
    def average_session_sec(self) -> float:
        if not self._durations:
            return 0.0
        return sum(self._durations) / len(self._durations)

    def to_dict(self):
        return {
            'matches_total': self.matches_total,
            'skips_total': self.skips_total,
            'reports_total': self.reports_total,
            'extensions_total': self.extensions_total,
            'expirations_total': self.expirations_total,
            'average_session_sec': round(self.average_session_sec, 3),
            'uptime_sec': round(max(0.0, self._clock() - self.started_at), 3),
        }
