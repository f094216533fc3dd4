import random

from puzzlesync.models import TILE_COUNT, target_configuration
from puzzlesync.services.games.puzzle import generate_puzzle, is_solved


class AllZeroRandom(random.Random):
    """Random source whose tile draws all come out 0."""

    def __init__(self, forced_index):
        super().__init__(0)
        self.forced_index = forced_index
        self.calls = 0

    def randrange(self, *args, **kwargs):
        self.calls += 1
        if self.calls <= TILE_COUNT:
            return 0
        return self.forced_index


def test_generated_puzzle_shape():
    puzzle = generate_puzzle(random.Random(7))
    assert len(puzzle) == TILE_COUNT
    assert all(v in (0, 1, 2, 3) for v in puzzle)


def test_generator_never_returns_solved_board():
    rng = random.Random(2024)
    target = target_configuration()
    for _ in range(10_000):
        assert not is_solved(generate_puzzle(rng), target)


def test_all_zero_draw_forces_one_tile_to_one():
    puzzle = generate_puzzle(AllZeroRandom(forced_index=4))
    assert puzzle == [0, 0, 0, 0, 1, 0, 0, 0, 0]


def test_generator_uses_every_rotation_value():
    rng = random.Random(99)
    seen = set()
    for _ in range(200):
        seen.update(generate_puzzle(rng))
    assert seen == {0, 1, 2, 3}


def test_is_solved():
    assert is_solved([0] * 9, target_configuration())
    assert not is_solved([0] * 8 + [3], target_configuration())
    assert not is_solved([0] * 8, target_configuration())
