import logging
import random
import threading
import time
from typing import Callable, Optional

from puzzlesync import messages
from puzzlesync.messages import AssetPublished, InboundMessage, Reset, Rotate, StartRound
from puzzlesync.models import Player, PlayerStatus, Session, SessionStatus
from .leaderboard import rank_players
from .moves import apply_rotation
from .puzzle import generate_puzzle
from .registry import PlayerRegistry

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class GameSession:
    """The single authoritative game for this process.

    Every public method runs to completion under one re-entrant lock, so a
    leaderboard built for one event never sees a half-applied move or reset
    from another socket thread. Outbound events go through ``fanout``, whose
    emits only enqueue and never wait on a slow client.

    States: waiting -> playing -> finished, and back to waiting on reset.
    """

    def __init__(self, fanout, assets=None, clock: Callable[[], int] = now_ms,
                 rng: Optional[random.Random] = None):
        self.fanout = fanout
        self.assets = assets
        self.clock = clock
        self.rng = rng or random.Random()
        self.session = Session()
        self.registry = PlayerRegistry(rng=self.rng)
        self._lock = threading.RLock()

    # ---- read side ----

    @property
    def status(self) -> SessionStatus:
        return self.session.status

    @property
    def image_url(self) -> Optional[str]:
        return self.session.image_url

    def snapshot(self):
        with self._lock:
            return {
                'status': self.session.status.value,
                'image_url': self.session.image_url,
                'player_count': len(self.registry),
            }

    def leaderboard(self):
        with self._lock:
            return rank_players(self.registry.players())

    def get_player(self, player_id) -> Optional[Player]:
        return self.registry.get(player_id)

    # ---- connection lifecycle ----

    def join(self, sid: str) -> Player:
        """Register a player for a new connection and greet it."""
        with self._lock:
            player = self.registry.register()
            self.fanout.attach(sid, player.id)
            self.fanout.send_to_connection(
                sid, messages.INIT,
                messages.init_payload(player, self.session.image_url, self.session.status),
            )
            logger.info(f"[join] player={player.id} name={player.name} players={len(self.registry)}")
            self._broadcast_leaderboard()
            return player

    def observe(self, sid: str) -> None:
        """Attach an admin/observer connection; it only receives broadcasts."""
        self.fanout.attach(sid, None)

    def disconnect(self, sid: str) -> Optional[Player]:
        with self._lock:
            player_id = self.fanout.detach(sid)
            if player_id is None:
                return None
            return self.leave(player_id)

    def leave(self, player_id: str) -> Optional[Player]:
        with self._lock:
            player = self.registry.unregister(player_id)
            if player is None:
                return None
            logger.info(f"[leave] player={player.id} players={len(self.registry)}")
            self._broadcast_leaderboard()
            return player

    # ---- transitions ----

    def dispatch(self, message: InboundMessage):
        if isinstance(message, AssetPublished):
            return self.publish_asset(message.image_url)
        if isinstance(message, StartRound):
            return self.start_round()
        if isinstance(message, Rotate):
            return self.rotate(message.player_id, message.tile_index)
        if isinstance(message, Reset):
            return self.reset()
        raise TypeError(f"unhandled inbound message: {message!r}")

    def publish_asset(self, image_url: str) -> None:
        with self._lock:
            self.session.image_url = image_url
            logger.info(f"[asset] url={image_url} status={self.session.status.value}")
            self.fanout.broadcast(messages.ASSET_UPDATE, {'image_url': image_url})

    def start_round(self) -> bool:
        with self._lock:
            if not self.session.image_url:
                logger.debug("[round-start-ignored] no image published")
                return False

            now = self.clock()
            self.session.status = SessionStatus.PLAYING
            self.session.round_started_at = now
            self.registry.for_each(lambda player: player.begin_round(generate_puzzle(self.rng), now))
            players = self.registry.players()

            logger.info(f"[round-start] players={len(players)} asset={self.session.image_url}")
            self.fanout.broadcast(messages.ROUND_START, {'started_at': now})
            # Puzzles differ per player, so each one is sent only to its owner
            for player in players:
                self.fanout.send_to_player(player.id, messages.PUZZLE_UPDATE, {'puzzle': list(player.puzzle)})
            self._broadcast_leaderboard()
            return True

    def rotate(self, player_id, tile_index) -> bool:
        with self._lock:
            player = self.registry.get(player_id)
            result = apply_rotation(player, tile_index, self.session.target_configuration, self.clock())
            if not result.accepted:
                return False

            logger.debug(f"[rotate] player={player.id} tile={tile_index} steps={player.step_count}")
            if result.completed:
                logger.info(f"[player-finished] player={player.id} time={player.elapsed_time}ms steps={player.step_count}")
                self.fanout.broadcast(messages.PLAYER_FINISHED, messages.player_finished_payload(player))
                self._finish_if_everyone_done()
            self._broadcast_leaderboard()
            return True

    def reset(self) -> None:
        with self._lock:
            self.session.clear()
            self.registry.clear()
            logger.info("[reset] session cleared")
            self._delete_assets()
            self.fanout.broadcast(messages.SESSION_RESET, {})
            self._broadcast_leaderboard()

    # ---- helpers ----

    def _finish_if_everyone_done(self) -> None:
        if self.session.status != SessionStatus.PLAYING:
            return
        players = self.registry.players()
        if players and all(p.status == PlayerStatus.FINISHED for p in players):
            self.session.status = SessionStatus.FINISHED
            logger.info(f"[session-finished] players={len(players)}")
            self.fanout.broadcast(messages.SESSION_FINISHED, {})

    def _delete_assets(self) -> None:
        if self.assets is None:
            return
        try:
            self.assets.delete_all()
        except Exception as exc:
            # Storage trouble must not keep the reset from reaching clients
            logger.warning(f"[reset] asset cleanup failed: {exc}")

    def _broadcast_leaderboard(self) -> None:
        self.fanout.broadcast(messages.LEADERBOARD, messages.leaderboard_payload(rank_players(self.registry.players())))
