import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional

from werewolf.errors import AlreadyStarted, NotHost, PlayerNotFound, RoomNotActive
from werewolf.models import GamePhase, GameSettings, GameState, Player, Role, Room, Vote
from .resolution import resolve_day, resolve_night
from .roles import assign_roles
from .scheduler import PhaseTimer
from .win import check_game_over

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str, Dict[str, Any]], None]


def _discard(room_code, event, payload):
    pass


class GameSession:
    """Owns one room: roster, phase state, vote ledger and phase timer.

    Every mutating method holds ``self.lock``; the timer takes the same lock
    on each tick, so a vote lands either wholly before or wholly after a
    phase transition.
    """

    def __init__(self, code: str, host_id: str, settings: GameSettings,
                 notify: Optional[Notifier] = None,
                 rng: Optional[random.Random] = None,
                 timer_factory: Optional[Callable[['GameSession'], PhaseTimer]] = None):
        self.room = Room(code=code, host_id=host_id, settings=settings)
        self.room.players[host_id] = Player(id=host_id, name=host_id, is_host=True)
        self.lock = threading.RLock()
        self.timer: Optional[PhaseTimer] = None
        self.closed = False
        self._notify = notify or _discard
        self._rng = rng
        self._timer_factory = timer_factory or PhaseTimer

    @property
    def code(self) -> str:
        return self.room.code

    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        self._notify(self.room.code, event, payload)

    def phase_duration(self) -> int:
        settings = self.room.settings
        return settings.day_time if self.room.phase == GamePhase.DAY else settings.night_time

    # ---- roster ----

    def add_player(self, player_id: str) -> Player:
        with self.lock:
            player = Player(id=player_id, name=player_id, is_host=(player_id == self.room.host_id))
            self.room.players[player_id] = player
            logger.info(f"[join] room={self.code} player={player_id}")
            return player

    def reconnect(self, player_id: str) -> Player:
        with self.lock:
            player = self.room.get_player(player_id)
            if not player:
                raise PlayerNotFound()
            player.connected = True
            logger.info(f"[reconnect] room={self.code} player={player_id}")
            return player

    def disconnect(self, player_id: str) -> bool:
        """Mark a player disconnected; returns True while anyone is still connected."""
        with self.lock:
            player = self.room.get_player(player_id)
            if player:
                player.connected = False
                if self.room.host_id == player_id:
                    self._transfer_host(player)
            logger.info(f"[disconnect] room={self.code} player={player_id}")
            return bool(self.room.connected_players())

    def _transfer_host(self, old_host: Player) -> None:
        successor = next((p for p in self.room.connected_players() if p.id != old_host.id), None)
        if not successor:
            return
        old_host.is_host = False
        successor.is_host = True
        self.room.host_id = successor.id
        logger.info(f"[host-transfer] room={self.code} {old_host.id} -> {successor.id}")

    def teardown(self) -> None:
        with self.lock:
            self.closed = True
            if self.timer:
                self.timer.cancel()
            logger.info(f"[teardown] room={self.code}")

    # ---- game flow ----

    def start_game(self, requester_id: Optional[str]) -> None:
        with self.lock:
            if self.room.game_state != GameState.WAITING:
                raise AlreadyStarted()
            if not requester_id or requester_id != self.room.host_id:
                raise NotHost()

            assignments = assign_roles(self.room.players.values(), self.room.settings.roles, rng=self._rng)
            for player in self.room.players.values():
                player.role = assignments.get(player.id, Role.VILLAGER)

            self.room.game_state = GameState.IN_PROGRESS
            self.room.phase = GamePhase.NIGHT
            self.room.day_count = 1
            self.room.votes.clear()

            self.timer = self._timer_factory(self)
            self.timer.start()
            self.notify('game-timer-started', {
                'currentPhase': self.room.phase.value,
                'timeLeft': self.timer.time_left,
                'dayCount': self.room.day_count,
            })
            logger.info(f"[start] room={self.code} players={len(self.room.players)}")

    def submit_vote(self, actor_id: str, actor_role: Role, target_id: str) -> None:
        with self.lock:
            if self.closed or self.room.game_state == GameState.FINISHED:
                raise RoomNotActive()
            self.room.votes.append(Vote(actor_id=actor_id, actor_role=Role(actor_role), target_id=target_id))
            logger.info(f"[vote] room={self.code} {actor_id} ({Role(actor_role).value}) -> {target_id}")

    def advance_phase(self) -> None:
        with self.lock:
            room = self.room
            if room.game_state != GameState.IN_PROGRESS or room.phase not in (GamePhase.NIGHT, GamePhase.DAY):
                return

            if room.phase == GamePhase.NIGHT:
                resolve_night(room)
            else:
                resolve_day(room)

            result = check_game_over(room)
            if result.winner:
                room.game_state = GameState.FINISHED
                room.phase = GamePhase.GAME_OVER
                if self.timer:
                    self.timer.cancel()
                self.notify('game-over', {
                    'winner': result.winner.value,
                    'dayCount': result.day_count,
                    'players': self.roster(reveal_roles=True),
                })
                logger.info(f"[game-over] room={self.code} winner={result.winner.value} day={result.day_count}")
                return

            if room.phase == GamePhase.NIGHT:
                room.phase = GamePhase.DAY
                room.day_count += 1
            else:
                room.phase = GamePhase.NIGHT

            if self.timer:
                self.timer.reset(self.phase_duration())
            self.notify('phase-changed', {
                'newPhase': room.phase.value,
                'timeLeft': self.phase_duration(),
                'dayCount': room.day_count,
                'players': self.roster(),
            })
            logger.info(f"[phase] room={self.code} phase={room.phase.value} day={room.day_count}")

    # ---- views ----

    def roster(self, reveal_roles: bool = False) -> List[Dict[str, Any]]:
        return [p.to_dict(include_role=reveal_roles) for p in self.room.players.values()]

    def public_state(self) -> Dict[str, Any]:
        with self.lock:
            return {
                'players': self.roster(),
                'hostId': self.room.host_id,
                'gameState': self.room.game_state.value,
                'currentPhase': self.room.phase.value,
            }

    def private_state(self, player_id: str) -> Dict[str, Any]:
        """Full state for a reconnecting player; only their own role is included."""
        with self.lock:
            player = self.room.get_player(player_id)
            if not player:
                raise PlayerNotFound()
            players = []
            for p in self.room.players.values():
                entry = p.to_dict()
                if p.id == player_id:
                    entry['role'] = p.role.value
                players.append(entry)
            return {
                'roomCode': self.code,
                'player': player.to_dict(include_role=True),
                'gameState': self.room.game_state.value,
                'currentPhase': self.room.phase.value,
                'dayCount': self.room.day_count,
                'players': players,
                'isHost': self.room.host_id == player_id,
                'hostId': self.room.host_id,
                'settings': self.room.settings.to_dict(),
                'timeLeft': self.timer.time_left if self.timer and self.timer.running else None,
            }

    def room_info(self, player_id: str) -> Dict[str, Any]:
        with self.lock:
            player = self.room.get_player(player_id)
            if not player:
                raise PlayerNotFound()
            info = self.public_state()
            info['currentPlayer'] = player.to_dict(include_role=True)
            info['settings'] = self.room.settings.to_dict()
            return info
