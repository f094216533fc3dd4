from flask import current_app, request
from flask_socketio import emit

from puzzlesync import NAMESPACE, socketio
from puzzlesync.errors import MalformedMessage
from puzzlesync.messages import (
    ASSET_PUBLISHED, ERROR, INBOUND_ALIASES, RESET, ROTATE, START_ROUND,
    error_payload, parse_inbound,
)

PLAYER_ROLE = 'player'


def _get_sid() -> str:
    # Flask-SocketIO sets request.sid for the duration of each handler
    return request.sid


def _game():
    return current_app.extensions['puzzlesync']


def _requested_role(auth=None) -> str:
    """Role is read once from the handshake: ?role=player, auth={'role': ...} or a /player path."""
    role = request.args.get('role')
    if not role and isinstance(auth, dict):
        role = auth.get('role')
    if not role and PLAYER_ROLE in (request.path or ''):
        role = PLAYER_ROLE
    return (role or 'observer').lower()


def handle_connect(auth=None):
    game = _game()
    sid = _get_sid()
    if _requested_role(auth) == PLAYER_ROLE:
        game.join(sid)
        return
    game.observe(sid)
    emit('connected', {'role': 'observer', 'state': game.snapshot(), 'players': game.leaderboard()})


def handle_disconnect(reason=None):
    player = _game().disconnect(_get_sid())
    if player is not None:
        current_app.logger.info(f"[disconnect] player={player.id} reason={reason}")


def handle_inbound(event, data=None):
    game = _game()
    sid = _get_sid()
    try:
        message = parse_inbound(
            event, data,
            default_player_id=game.fanout.player_for(sid),
            url_prefix=current_app.config.get('UPLOAD_URL_PREFIX', '/uploads'),
        )
    except MalformedMessage as exc:
        current_app.logger.warning(f"[malformed] sid={sid} event={exc.event} reason={exc.reason}")
        emit(ERROR, error_payload(exc))
        return
    game.dispatch(message)


def _inbound_handler(event):
    def handler(data=None):
        handle_inbound(event, data)
    handler.__name__ = f"handle_{event}"
    return handler


def handle_ping(data=None):
    emit('pong', data or {})


def handle_socket_error(exc):
    # Keep one misbehaving connection from affecting anyone else
    current_app.logger.error(f"[socket-error] sid={_get_sid()} error={exc!r}", exc_info=exc)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    for event in (ASSET_PUBLISHED, START_ROUND, ROTATE, RESET, *INBOUND_ALIASES):
        socketio.on_event(event, _inbound_handler(event), namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
    socketio.on_error(NAMESPACE)(handle_socket_error)
