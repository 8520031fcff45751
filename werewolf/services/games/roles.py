import random
from typing import Dict, Iterable, Mapping, Optional

from werewolf.models import Player, Role

FALLBACK_ROLE = Role.VILLAGER


def assign_roles(players: Iterable[Player], role_counts: Mapping[Role, int],
                 rng: Optional[random.Random] = None) -> Dict[str, Role]:
    """Deal roles to ``players`` in the order given.

    The configured counts are expanded into a pool (``WAITING`` is never
    dealt), cut down to the number of players or padded with villagers,
    then shuffled. Pass a seeded ``random.Random`` for a reproducible deal.
    """
    rng = rng or random
    players = list(players)

    pool = []
    for role, count in role_counts.items():
        role = Role(role)
        if role == Role.WAITING or count <= 0:
            continue
        pool.extend([role] * int(count))

    del pool[len(players):]
    pool.extend([FALLBACK_ROLE] * (len(players) - len(pool)))

    # random.shuffle is an unbiased Fisher-Yates
    rng.shuffle(pool)

    return {player.id: role for player, role in zip(players, pool)}
