from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import string
import random


class Role(str, Enum):
    WAITING = 'waiting'
    VILLAGER = 'villager'
    WEREWOLF = 'werewolf'
    DOCTOR = 'doctor'


class GameState(str, Enum):
    WAITING = 'waiting'
    IN_PROGRESS = 'in_progress'
    FINISHED = 'finished'


class GamePhase(str, Enum):
    LOBBY = 'lobby'
    NIGHT = 'night'
    DAY = 'day'
    GAME_OVER = 'game_over'


class Winner(str, Enum):
    VILLAGERS = 'villagers'
    WEREWOLVES = 'werewolves'


# Night roles: the first kills, the second protects
KILL_ROLE = Role.WEREWOLF
PROTECT_ROLE = Role.DOCTOR


@dataclass
class Player:
    id: str
    name: str
    role: Role = Role.WAITING
    is_alive: bool = True
    connected: bool = True
    is_host: bool = False

    def to_dict(self, include_role: bool = False):
        data = {
            'id': self.id,
            'name': self.name,
            'connected': self.connected,
            'isAlive': self.is_alive,
            'isHost': self.is_host,
        }
        if include_role:
            data['role'] = self.role.value
        return data


@dataclass(frozen=True)
class GameSettings:
    roles: Dict[Role, int] = field(default_factory=dict)
    day_time: int = 60
    night_time: int = 30

    def to_dict(self):
        return {
            'roles': {role.value: count for role, count in self.roles.items()},
            'dayTime': self.day_time,
            'nightTime': self.night_time,
        }


@dataclass(frozen=True)
class Vote:
    """A submitted action: who acted, as which role, against whom.

    The role is captured at submission time so later role changes cannot
    alter how the vote is resolved.
    """
    actor_id: str
    actor_role: Role
    target_id: str


@dataclass
class Room:
    code: str
    host_id: str
    settings: GameSettings
    players: Dict[str, Player] = field(default_factory=dict)  # join order
    game_state: GameState = GameState.WAITING
    phase: GamePhase = GamePhase.LOBBY
    day_count: int = 0
    votes: List[Vote] = field(default_factory=list)

    def alive_players(self) -> List[Player]:
        return [p for p in self.players.values() if p.is_alive]

    def connected_players(self) -> List[Player]:
        return [p for p in self.players.values() if p.connected]

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)


def generate_room_code(length=6, taken=()):
    """Generate a short room code not present in ``taken``."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code
