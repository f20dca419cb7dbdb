import time
from typing import Set, Tuple

from voicelink import socketio


_scheduled_room_keys: Set[Tuple[str, float]] = set()


def scheduled_rooms() -> Set[str]:
    """Room ids with a timer worker still running."""
    return {room_id for room_id, _ in _scheduled_room_keys}


def schedule_room_timer(app, room_id: str, deadline: float) -> None:
    """Close the room server-side once ``deadline`` passes.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single timer per (room_id, deadline)
    - The worker wakes every TIMER_POLL_SEC (or TIMER_HEARTBEAT_SEC) and stops
      early once the room is closed or its deadline has moved
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    key = (room_id, deadline)
    if key in _scheduled_room_keys:
        app.logger.info(f"[timer-skip] room={room_id} deadline={deadline} already scheduled")
        return
    _scheduled_room_keys.add(key)
    app.logger.info(f"[timer-set] room={room_id} deadline={deadline}")

    def _worker(rid: str, expected_deadline: float):
        matchmaker = app.extensions['matchmaker']
        try:
            hb = float(app.config.get('TIMER_HEARTBEAT_SEC', 0))
        except (TypeError, ValueError):
            hb = 0
        try:
            poll = float(app.config.get('TIMER_POLL_SEC', 5))
        except (TypeError, ValueError):
            poll = 5.0
        step = hb if hb > 0 else max(poll, 0.01)

        try:
            remaining = max(0.0, expected_deadline - time.time())
            while remaining > 0:
                socketio.sleep(min(step, remaining))
                if matchmaker.deadline_of(rid) != expected_deadline:
                    app.logger.info(f"[timer-abort] room={rid} closed or extended")
                    return
                remaining = max(0.0, expected_deadline - time.time())
                if hb > 0:
                    app.logger.info(f"[timer-heartbeat] room={rid} remaining={remaining:.1f}s")

            app.logger.info(f"[timer-fire] room={rid} expected_deadline={expected_deadline}")
            if matchmaker.expire_room(rid, expected_deadline=expected_deadline) is None:
                app.logger.info(f"[timer-abort] room={rid} closed or extended")
        finally:
            _scheduled_room_keys.discard((rid, expected_deadline))

    socketio.start_background_task(_worker, room_id, deadline)
