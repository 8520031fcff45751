import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from werewolf.errors import PlayerNotFound, RoomGone, RoomNotActive, RoomNotFound
from werewolf.models import GameSettings, GameState, Role, generate_room_code
from .scheduler import PhaseTimer
from .session import GameSession, Notifier

logger = logging.getLogger(__name__)

LeaveCallback = Callable[[str, Optional[GameSession]], None]


class RoomRegistry:
    """All live rooms of one server process.

    Keeps three indices: room code -> session, player id -> room code, and
    connection sid -> player id. The registry lock only guards these dicts;
    room state is guarded by each session's own lock, always taken after
    the registry lock and never the other way round.
    """

    def __init__(self, notify: Optional[Notifier] = None, code_length: int = 6,
                 timer_interval: float = 1.0, timer_autostart: bool = False,
                 start_background_task: Optional[Callable] = None,
                 sleep: Optional[Callable[[float], None]] = None,
                 seed: Optional[int] = None):
        self._notify = notify
        self._code_length = code_length
        self._timer_interval = timer_interval
        self._timer_autostart = timer_autostart
        self._start_background_task = start_background_task
        self._sleep = sleep
        self._rng = random.Random(seed) if seed is not None else None
        self._lock = threading.Lock()
        self._rooms: Dict[str, GameSession] = {}
        self._player_rooms: Dict[str, str] = {}
        self._sid_players: Dict[str, str] = {}

    @classmethod
    def from_config(cls, config, notify: Optional[Notifier] = None, **kwargs) -> 'RoomRegistry':
        return cls(
            notify=notify,
            code_length=int(config.get('ROOM_CODE_LENGTH', 6)),
            timer_interval=float(config.get('PHASE_TICK_SEC', 1.0)),
            timer_autostart=bool(config.get('PHASE_TIMER_AUTOSTART', False)),
            seed=config.get('ROLE_SHUFFLE_SEED'),
            **kwargs,
        )

    def _make_timer(self, session: GameSession) -> PhaseTimer:
        return PhaseTimer(
            session,
            interval=self._timer_interval,
            autostart=self._timer_autostart,
            start_background_task=self._start_background_task,
            sleep=self._sleep,
        )

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        return code in self._rooms

    def codes(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def get(self, code: str) -> GameSession:
        session = self._rooms.get(code)
        if not session:
            raise RoomNotFound()
        return session

    def player_for(self, sid: Optional[str]) -> Optional[str]:
        return self._sid_players.get(sid) if sid else None

    def room_of(self, player_id: str) -> Optional[str]:
        return self._player_rooms.get(player_id)

    # ---- lifecycle ----

    # Lifecycle calls take an optional ``on_leave(old_code, old_session)``
    # callback, run when the player is pulled out of a previous room;
    # ``old_session`` is None if that room was torn down.

    def create_room(self, player_id: str, settings: GameSettings, sid: Optional[str] = None,
                    on_leave: Optional[LeaveCallback] = None) -> str:
        self._detach(player_id, on_leave=on_leave)
        with self._lock:
            code = generate_room_code(self._code_length, taken=self._rooms)
            session = GameSession(code, player_id, settings, notify=self._notify,
                                  rng=self._rng, timer_factory=self._make_timer)
            self._rooms[code] = session
            self._index(player_id, code, sid)
        logger.info(f"[room-created] room={code} host={player_id}")
        return code

    def join_room(self, player_id: str, code: str, sid: Optional[str] = None,
                  on_leave: Optional[LeaveCallback] = None) -> GameSession:
        self.get(code)
        self._detach(player_id, keep=code, on_leave=on_leave)
        with self._lock:
            session = self.get(code)
            session.add_player(player_id)
            self._index(player_id, code, sid)
        return session

    def reconnect(self, player_id: str, code: str, sid: Optional[str] = None,
                  on_leave: Optional[LeaveCallback] = None) -> Tuple[GameSession, Dict[str, Any]]:
        self._live_member(player_id, code)
        self._detach(player_id, keep=code, on_leave=on_leave)
        with self._lock:
            session = self._live_member(player_id, code)
            session.reconnect(player_id)
            self._index(player_id, code, sid)
        return session, session.private_state(player_id)

    def disconnect(self, sid: str) -> Tuple[Optional[str], Optional[GameSession]]:
        """Handle a dropped connection.

        Returns ``(room_code, session)``; ``session`` is None when the room
        was torn down (or the sid was unknown).
        """
        with self._lock:
            player_id = self._sid_players.pop(sid, None)
            # Already back on a newer connection
            still_connected = player_id in self._sid_players.values()
        if not player_id or still_connected:
            return None, None
        return self.disconnect_player(player_id)

    def disconnect_player(self, player_id: str) -> Tuple[Optional[str], Optional[GameSession]]:
        with self._lock:
            code = self._player_rooms.pop(player_id, None)
            for sid in [s for s, pid in self._sid_players.items() if pid == player_id]:
                del self._sid_players[sid]
            session = self._rooms.get(code) if code else None
            if not session:
                return code, None
            if session.disconnect(player_id):
                return code, session
            session.teardown()
            del self._rooms[code]
        logger.info(f"[room-deleted] room={code} no players remaining")
        return code, None

    def close(self) -> None:
        with self._lock:
            sessions = list(self._rooms.values())
            self._rooms.clear()
            self._player_rooms.clear()
            self._sid_players.clear()
        for session in sessions:
            session.teardown()

    # ---- intents ----

    def room_info(self, code: str, sid: Optional[str]) -> Dict[str, Any]:
        session = self.get(code)
        player_id = self.player_for(sid)
        if not player_id:
            raise PlayerNotFound('Player not found')
        return session.room_info(player_id)

    def start_game(self, code: str, sid: Optional[str]) -> GameSession:
        session = self.get(code)
        session.start_game(self.player_for(sid))
        return session

    def submit_vote(self, code: str, actor_id: str, actor_role: Role, target_id: str) -> None:
        session = self._rooms.get(code)
        if not session:
            raise RoomNotActive()
        session.submit_vote(actor_id, actor_role, target_id)

    # ---- helpers ----

    def _index(self, player_id: str, code: str, sid: Optional[str]) -> None:
        self._player_rooms[player_id] = code
        if sid:
            self._sid_players[sid] = player_id

    def _live_member(self, player_id: str, code: str) -> GameSession:
        session = self._rooms.get(code)
        if not session or session.room.game_state == GameState.FINISHED:
            raise RoomGone()
        if player_id not in session.room.players:
            raise PlayerNotFound()
        return session

    def _detach(self, player_id: str, keep: Optional[str] = None,
                on_leave: Optional[LeaveCallback] = None) -> Tuple[Optional[str], Optional[GameSession]]:
        """Drop the player from any room other than ``keep``."""
        current = self._player_rooms.get(player_id)
        if current is None or current == keep:
            return None, None
        old_code, old_session = self.disconnect_player(player_id)
        if on_leave and old_code:
            on_leave(old_code, old_session)
        return old_code, old_session
