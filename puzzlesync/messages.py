"""Socket message kinds exchanged on the /ws namespace.

Inbound messages are parsed into a closed set of frozen dataclasses so the
session can route them exhaustively; anything that cannot be parsed raises
``MalformedMessage`` and is dropped by the transport. Outbound event names
and payload builders live here too so the wire format is defined in one
place.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from puzzlesync.errors import MalformedMessage


# ---- Inbound ----

@dataclass(frozen=True)
class AssetPublished:
    image_url: str


@dataclass(frozen=True)
class StartRound:
    pass


@dataclass(frozen=True)
class Rotate:
    player_id: Optional[str]
    tile_index: Any


@dataclass(frozen=True)
class Reset:
    pass


InboundMessage = Union[AssetPublished, StartRound, Rotate, Reset]

ASSET_PUBLISHED = 'asset_published'
START_ROUND = 'start_round'
ROTATE = 'rotate'
RESET = 'reset'

# Older admin pages use the original event names
INBOUND_ALIASES = {
    'upload_image': ASSET_PUBLISHED,
    'start_game': START_ROUND,
    'reset_game': RESET,
}


def _as_dict(event, data) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedMessage(event, 'payload must be a JSON object')
    return data


def parse_asset_published(data, url_prefix: str = '/uploads') -> AssetPublished:
    payload = _as_dict(ASSET_PUBLISHED, data)
    image_url = payload.get('image_url')
    if image_url is None and payload.get('filename'):
        filename = payload['filename']
        if not isinstance(filename, str) or '/' in filename or '\\' in filename:
            raise MalformedMessage(ASSET_PUBLISHED, 'filename must be a bare file name')
        image_url = f"{url_prefix.rstrip('/')}/{filename}"
    if not isinstance(image_url, str) or not image_url.strip():
        raise MalformedMessage(ASSET_PUBLISHED, 'image_url is required')
    return AssetPublished(image_url=image_url.strip())


def parse_rotate(data, default_player_id: Optional[str] = None) -> Rotate:
    payload = _as_dict(ROTATE, data)
    player_id = payload.get('player_id')
    if player_id is None:
        player_id = default_player_id
    if player_id is not None and not isinstance(player_id, str):
        raise MalformedMessage(ROTATE, 'player_id must be a string')
    # The move rules reject anything that is not a tile 0..8 as a silent no-op
    tile_index = payload.get('tile_index')
    return Rotate(player_id=player_id, tile_index=tile_index)


def parse_inbound(event: str, data=None, default_player_id: Optional[str] = None,
                  url_prefix: str = '/uploads') -> InboundMessage:
    kind = INBOUND_ALIASES.get(event, event)
    if kind == ASSET_PUBLISHED:
        return parse_asset_published(data, url_prefix=url_prefix)
    if kind == START_ROUND:
        return StartRound()
    if kind == ROTATE:
        return parse_rotate(data, default_player_id=default_player_id)
    if kind == RESET:
        return Reset()
    raise MalformedMessage(event, 'unknown event')


# ---- Outbound ----

INIT = 'init'
ASSET_UPDATE = 'asset_update'
ROUND_START = 'round_start'
PUZZLE_UPDATE = 'puzzle_update'
PLAYER_FINISHED = 'player_finished'
SESSION_FINISHED = 'session_finished'
SESSION_RESET = 'session_reset'
LEADERBOARD = 'leaderboard'
ERROR = 'error'


def init_payload(player, image_url, session_status) -> Dict[str, Any]:
    return {
        'player_id': player.id,
        'player_name': player.name,
        'image_url': image_url,
        'puzzle': list(player.puzzle),
        'game_status': session_status.value,
    }


def player_finished_payload(player) -> Dict[str, Any]:
    return {
        'player_id': player.id,
        'player_name': player.name,
        'elapsed_time': player.elapsed_time,
        'step_count': player.step_count,
    }


def leaderboard_payload(rows: List[dict]) -> Dict[str, Any]:
    return {'players': rows}


def error_payload(exc: MalformedMessage) -> Dict[str, Any]:
    return {'event': exc.event, 'message': exc.reason}
