from flask import Blueprint, abort, current_app, jsonify, request, send_from_directory
from werkzeug.exceptions import RequestEntityTooLarge

from puzzlesync.errors import AssetStorageError

main = Blueprint('main', __name__)


def _game():
    return current_app.extensions['puzzlesync']


def _assets():
    return current_app.extensions['puzzlesync.assets']


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the puzzle sync server!', 'socket_namespace': '/ws'})


@main.route('/game-state', methods=['GET'])
def game_state():
    return jsonify(_game().snapshot())


@main.route('/upload', methods=['POST'])
def upload():
    """Stores a puzzle image and returns its URL.

    Publishing it to the session is a separate ``asset_published`` socket
    message sent by the admin page once the upload finishes.
    """
    image = request.files.get('image')
    if image is None or not image.filename:
        return jsonify({'error': 'No file uploaded'}), 400
    try:
        filename, url = _assets().save(image)
    except AssetStorageError as exc:
        return jsonify({'error': str(exc)}), 400
    current_app.logger.info(f"[upload] file={filename}")
    return jsonify({'filename': filename, 'url': url}), 201


@main.route('/uploads/<path:filename>', methods=['GET'])
def uploaded_file(filename):
    if _assets().path_for(filename) is None:
        abort(404)
    return send_from_directory(_assets().folder, filename)


@main.app_errorhandler(RequestEntityTooLarge)
def upload_too_large(exc):
    return jsonify({'error': 'File too large'}), 413
