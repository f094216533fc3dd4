from typing import Iterable, List

from puzzlesync.models import Player


def _rank_key(player: Player):
    if player.is_finished:
        return (0, player.elapsed_time or 0)
    return (1, player.step_count)


def rank_players(players: Iterable[Player]) -> List[dict]:
    """Order players for the leaderboard.

    Finished players come first, fastest first; everyone still solving
    follows, fewest moves first. sorted() is stable, so ties keep the
    registry's order.
    """
    return [p.summary() for p in sorted(players, key=_rank_key)]
