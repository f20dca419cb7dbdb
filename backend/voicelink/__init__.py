from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('ALLOWED_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One matchmaker per app; every outbound message targets a single sid
    from voicelink.services.matching import MatchmakingService
    from voicelink.services.matching.scheduler import schedule_room_timer

    def _emit_to(participant_id, event, payload):
        socketio.emit(event, payload, to=participant_id, namespace='/ws')

    cfg = flask_app.config
    flask_app.extensions['matchmaker'] = MatchmakingService(
        notify=_emit_to,
        session_sec=int(cfg.get('SESSION_DURATION_SEC', 300)),
        extension_sec=int(cfg.get('EXTENSION_DURATION_SEC', 300)),
        max_interests=int(cfg.get('MAX_INTERESTS', 5)),
        stats_window=int(cfg.get('STATS_WINDOW_SIZE', 100)),
        on_deadline=lambda room_id, deadline: schedule_room_timer(flask_app, room_id, deadline),
    )

    # Import and register blueprints here
    from voicelink.main import main
    flask_app.register_blueprint(main)

    from voicelink.api.stats import stats
    # Read-only counters for the admin dashboard
    flask_app.register_blueprint(stats, url_prefix='/api/stats')

    # Register Socket.IO event handlers
    from voicelink.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app
