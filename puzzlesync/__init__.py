from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

NAMESPACE = '/ws'

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    if '*' in allowed_origins:
        # engineio only treats the bare string as a wildcard
        allowed_origins = '*'
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One in-memory session per app; handlers reach it through app.extensions
    from puzzlesync.fanout import SocketFanout
    from puzzlesync.services.assets import AssetStore
    from puzzlesync.services.games.session import GameSession

    assets = AssetStore(
        flask_app.config['UPLOAD_FOLDER'],
        url_prefix=flask_app.config.get('UPLOAD_URL_PREFIX', '/uploads'),
        allowed_extensions=flask_app.config.get('ALLOWED_IMAGE_EXTENSIONS'),
    )
    fanout = SocketFanout(socketio, namespace=NAMESPACE)
    flask_app.extensions['puzzlesync'] = GameSession(fanout=fanout, assets=assets)
    flask_app.extensions['puzzlesync.assets'] = assets

    from puzzlesync.routes import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers against the shared socketio instance
    from puzzlesync.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('clear-uploads')
    def clear_uploads_command():
        """Deletes every stored puzzle image."""
        failures = assets.delete_all()
        if failures:
            click.echo(f'Could not remove {len(failures)} file(s): {", ".join(failures)}')
        else:
            click.echo('Upload folder cleared!')

    flask_app.cli.add_command(clear_uploads_command)

    flask_app.logger.info(f"[startup] uploads={flask_app.config['UPLOAD_FOLDER']} namespace={NAMESPACE}")
    return flask_app
