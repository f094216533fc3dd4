import itertools
import random

from puzzlesync.models import PlayerStatus
from puzzlesync.services.games.registry import ADJECTIVES, ANIMALS, PlayerRegistry, generate_display_name


def test_register_creates_joined_player_with_puzzle():
    registry = PlayerRegistry(rng=random.Random(3))
    player = registry.register()
    assert player.status == PlayerStatus.JOINED
    assert len(player.puzzle) == 9
    assert any(player.puzzle)
    assert player.step_count == 0
    assert player.elapsed_time is None
    assert registry.get(player.id) is player
    assert len(registry) == 1


def test_ids_are_unique_even_if_factory_repeats():
    ids = itertools.chain(['dup', 'dup'], (f'id-{n}' for n in itertools.count()))
    registry = PlayerRegistry(id_factory=lambda: next(ids))
    first = registry.register()
    second = registry.register()
    assert first.id == 'dup'
    assert second.id != 'dup'


def test_unregister_is_idempotent():
    registry = PlayerRegistry()
    player = registry.register()
    assert registry.unregister(player.id) is player
    assert registry.unregister(player.id) is None
    assert registry.get(player.id) is None
    assert len(registry) == 0


def test_get_unknown_or_bad_id_returns_none():
    registry = PlayerRegistry()
    assert registry.get('missing') is None
    assert registry.get(None) is None
    assert registry.get(['not', 'hashable']) is None


def test_iteration_keeps_registration_order_and_clear():
    registry = PlayerRegistry()
    players = [registry.register() for _ in range(4)]
    assert [p.id for p in registry] == [p.id for p in players]
    seen = []
    registry.for_each(lambda p: seen.append(p.id))
    assert seen == [p.id for p in players]
    registry.clear()
    assert registry.players() == []


def test_display_name_format():
    name = generate_display_name(random.Random(11))
    assert any(name.startswith(adj) for adj in ADJECTIVES)
    assert any(animal in name for animal in ANIMALS)
    assert name[-1].isdigit()
