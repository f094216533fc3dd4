import random
import threading
import uuid
from typing import Callable, Dict, Iterator, List, Optional

from puzzlesync.models import Player
from .puzzle import generate_puzzle

ADJECTIVES = ['Happy', 'Brave', 'Clever', 'Lightning', 'Rainbow', 'Starry', 'Lunar', 'Sunny', 'Lucky', 'Mystic']
ANIMALS = ['Panda', 'Tiger', 'Lion', 'Rabbit', 'Kitten', 'Puppy', 'Fox', 'Otter', 'Dragon', 'Phoenix']


def generate_display_name(rng: Optional[random.Random] = None) -> str:
    """Random label like 'BraveOtter417'. Not guaranteed unique; ids are."""
    rng = rng or random
    return f"{rng.choice(ADJECTIVES)}{rng.choice(ANIMALS)}{rng.randrange(1000)}"


class PlayerRegistry:
    """Owns every connected player, keyed by an opaque id.

    Each method runs under the registry lock so a reader never sees a player
    half way through being added, removed or re-armed.
    """

    def __init__(self, rng: Optional[random.Random] = None,
                 id_factory: Callable[[], str] = lambda: str(uuid.uuid4())):
        self._rng = rng or random.Random()
        self._id_factory = id_factory
        self._players: Dict[str, Player] = {}
        self._lock = threading.RLock()

    def register(self) -> Player:
        with self._lock:
            player_id = self._id_factory()
            while player_id in self._players:
                player_id = self._id_factory()
            player = Player(
                id=player_id,
                name=generate_display_name(self._rng),
                puzzle=generate_puzzle(self._rng),
            )
            self._players[player_id] = player
            return player

    def unregister(self, player_id: str) -> Optional[Player]:
        with self._lock:
            return self._players.pop(player_id, None)

    def get(self, player_id) -> Optional[Player]:
        if not isinstance(player_id, str):
            return None
        with self._lock:
            return self._players.get(player_id)

    def players(self) -> List[Player]:
        """Snapshot in registration order."""
        with self._lock:
            return list(self._players.values())

    def for_each(self, fn: Callable[[Player], None]) -> None:
        with self._lock:
            for player in list(self._players.values()):
                fn(player)

    def clear(self) -> None:
        with self._lock:
            self._players.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(self.players())
