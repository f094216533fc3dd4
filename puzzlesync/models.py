from enum import Enum
from typing import List, Optional

TILE_COUNT = 9
ROTATION_STEPS = 4  # 0, 90, 180, 270 degrees clockwise


class SessionStatus(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    FINISHED = 'finished'


class PlayerStatus(str, Enum):
    JOINED = 'joined'
    PLAYING = 'playing'
    FINISHED = 'finished'


def target_configuration() -> List[int]:
    """The solved puzzle: every tile back at rotation 0."""
    return [0] * TILE_COUNT


class Player:
    def __init__(self, id: str, name: str, puzzle: List[int]):
        self.id = id
        self.name = name
        self.status = PlayerStatus.JOINED
        self.puzzle = list(puzzle)
        self.step_count = 0
        self.started_at: Optional[int] = None
        self.finished_at: Optional[int] = None
        self.elapsed_time: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        return self.status == PlayerStatus.FINISHED

    def begin_round(self, puzzle: List[int], now: int) -> None:
        self.puzzle = list(puzzle)
        self.status = PlayerStatus.PLAYING
        self.started_at = now
        self.step_count = 0
        self.finished_at = None
        self.elapsed_time = None

    def summary(self):
        """Leaderboard row; elapsed_time stays None until the player finishes."""
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status.value,
            'elapsed_time': self.elapsed_time if self.is_finished else None,
            'step_count': self.step_count,
        }

    def __repr__(self):
        return f"<Player {self.id} {self.name} {self.status.value}>"


class Session:
    """Process-wide round state. Players live in the registry, not here."""

    def __init__(self):
        self.status = SessionStatus.WAITING
        self.image_url: Optional[str] = None
        self.target_configuration = target_configuration()
        self.round_started_at: Optional[int] = None

    def clear(self) -> None:
        self.status = SessionStatus.WAITING
        self.image_url = None
        self.round_started_at = None
