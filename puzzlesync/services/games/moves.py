from typing import NamedTuple, Optional, Sequence

from puzzlesync.models import ROTATION_STEPS, TILE_COUNT, Player, PlayerStatus
from .puzzle import is_solved


class RotationResult(NamedTuple):
    accepted: bool
    completed: bool = False


REJECTED = RotationResult(accepted=False)


def valid_tile_index(tile_index) -> bool:
    # bool is an int subclass; True must not address tile 1
    return isinstance(tile_index, int) and not isinstance(tile_index, bool) and 0 <= tile_index < TILE_COUNT


def apply_rotation(player: Optional[Player], tile_index, target: Sequence[int], now: int) -> RotationResult:
    """Turn one tile a quarter clockwise for a playing player.

    Anything that does not apply (unknown player, player not in a round,
    bad tile index) is rejected without touching state. On the move that
    brings every tile back to the target the player is marked finished and
    their elapsed time is frozen.
    """
    if player is None or player.status != PlayerStatus.PLAYING:
        return REJECTED
    if not valid_tile_index(tile_index):
        return REJECTED

    player.puzzle[tile_index] = (player.puzzle[tile_index] + 1) % ROTATION_STEPS
    player.step_count += 1

    if not is_solved(player.puzzle, target):
        return RotationResult(accepted=True)

    player.status = PlayerStatus.FINISHED
    player.finished_at = now
    player.elapsed_time = max(0, now - (player.started_at if player.started_at is not None else now))
    return RotationResult(accepted=True, completed=True)
