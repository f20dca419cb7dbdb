import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Room lifetime and mutual-extension increment (seconds)
    SESSION_DURATION_SEC = int(os.environ.get('SESSION_DURATION_SEC', '300'))
    EXTENSION_DURATION_SEC = int(os.environ.get('EXTENSION_DURATION_SEC', '300'))
    # Interest tags a participant may declare
    MAX_INTERESTS = int(os.environ.get('MAX_INTERESTS', '5'))
    # Closed sessions kept for the rolling average duration
    STATS_WINDOW_SIZE = int(os.environ.get('STATS_WINDOW_SIZE', '100'))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
    # How often a room timer wakes to check whether its room is still open (sec)
    TIMER_POLL_SEC = float(os.environ.get('TIMER_POLL_SEC', '5'))
    ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'ALLOWED_ORIGINS',
            'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
        ).split(',')
        if origin.strip()
    ]
