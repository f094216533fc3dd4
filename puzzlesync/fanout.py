import logging
import threading
from typing import Dict, Optional, Set

logger = logging.getLogger(__name__)


class SocketFanout:
    """Delivers session events to Socket.IO connections.

    Each connection (socket id) is bound once, on connect, either to a player
    id or to nothing (admin screens and other observers). The binding is never
    changed afterwards; a reverse index makes targeted sends O(1).
    Delivery is best-effort: a failed emit is logged and skipped.
    """

    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace
        self._sid_to_player: Dict[str, Optional[str]] = {}
        self._player_to_sids: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def attach(self, sid: str, player_id: Optional[str] = None) -> bool:
        with self._lock:
            if sid in self._sid_to_player:
                return False
            self._sid_to_player[sid] = player_id
            if player_id is not None:
                self._player_to_sids.setdefault(player_id, set()).add(sid)
            return True

    def detach(self, sid: str) -> Optional[str]:
        """Forget a connection and return the player it was bound to."""
        with self._lock:
            player_id = self._sid_to_player.pop(sid, None)
            if player_id is not None:
                sids = self._player_to_sids.get(player_id)
                if sids is not None:
                    sids.discard(sid)
                    if not sids:
                        self._player_to_sids.pop(player_id, None)
            return player_id

    def player_for(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._sid_to_player.get(sid)

    def is_attached(self, sid: str) -> bool:
        with self._lock:
            return sid in self._sid_to_player

    def connection_count(self) -> int:
        with self._lock:
            return len(self._sid_to_player)

    def broadcast(self, event: str, payload=None) -> None:
        self._emit(event, payload, to=None)

    def send_to_player(self, player_id: str, event: str, payload=None) -> None:
        with self._lock:
            sids = list(self._player_to_sids.get(player_id, ()))
        for sid in sids:
            self._emit(event, payload, to=sid)

    def send_to_connection(self, sid: str, event: str, payload=None) -> None:
        if not self.is_attached(sid):
            return
        self._emit(event, payload, to=sid)

    def _emit(self, event, payload, to=None):
        try:
            if to is None:
                self.socketio.emit(event, payload, namespace=self.namespace)
            else:
                self.socketio.emit(event, payload, to=to, namespace=self.namespace)
        except Exception as exc:
            logger.warning(f"[emit-failed] event={event} to={to or '*'} error={exc}")
