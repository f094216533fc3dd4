import random
from typing import List, Optional, Sequence

from puzzlesync.models import ROTATION_STEPS, TILE_COUNT


def generate_puzzle(rng: Optional[random.Random] = None) -> List[int]:
    """Scramble a fresh puzzle.

    Each tile gets an independent uniform rotation in 0..3. A draw that comes
    out already solved has one random tile forced to 1, so nobody starts a
    round on a finished board.
    """
    rng = rng or random
    rotations = [rng.randrange(ROTATION_STEPS) for _ in range(TILE_COUNT)]
    if not any(rotations):
        rotations[rng.randrange(TILE_COUNT)] = 1
    return rotations


def is_solved(puzzle: Sequence[int], target: Sequence[int]) -> bool:
    return len(puzzle) == len(target) and all(a == b for a, b in zip(puzzle, target))
