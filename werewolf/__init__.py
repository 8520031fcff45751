import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    level = flask_app.config.get('LOG_LEVEL', 'INFO')
    logging.getLogger('werewolf').setLevel(level)
    flask_app.logger.setLevel(level)

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from werewolf.main import main
    flask_app.register_blueprint(main)

    # One registry per app; handlers reach it through app.extensions
    from werewolf.services.games import RoomRegistry
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    def _broadcast(room_code, event, payload):
        socketio.emit(event, payload, to=room_code, namespace=namespace)

    flask_app.extensions['werewolf'] = RoomRegistry.from_config(
        flask_app.config,
        notify=_broadcast,
        start_background_task=socketio.start_background_task,
        sleep=socketio.sleep,
    )

    from werewolf.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    return flask_app
