import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Broadcast the countdown every UPDATE_EVERY ticks, and on every tick once
# no more than UPDATE_EVERY remain.
UPDATE_EVERY = 10


class PhaseTimer:
    """Per-room countdown that drives phase transitions.

    - ``start()`` loads the current phase duration and spawns the tick loop
    - ``tick()`` counts down one unit under the session lock and calls
      ``session.advance_phase()`` when the countdown hits zero
    - ``cancel()`` stops the loop; calling it twice is harmless

    The loop is scheduled through ``start_background_task`` (the app passes
    ``socketio.start_background_task``). With ``autostart=False`` no loop is
    spawned and the caller drives ``tick()`` itself.
    """

    def __init__(self, session, interval: float = 1.0, autostart: bool = False,
                 start_background_task: Optional[Callable] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.session = session
        self.interval = interval
        self.autostart = autostart
        if autostart and start_background_task is None:
            raise ValueError("autostart needs a start_background_task callable")
        self._start_background_task = start_background_task
        self._sleep = sleep or time.sleep
        self._generation = 0
        self.running = False
        self.time_left = 0

    def start(self) -> None:
        with self.session.lock:
            self._generation += 1
            self.running = True
            self.time_left = self.session.phase_duration()
            generation = self._generation
            logger.info(
                f"[timer-set] room={self.session.code} phase={self.session.room.phase.value} "
                f"duration={self.time_left} interval={self.interval}s"
            )
        if self.autostart:
            self._start_background_task(self._worker, generation)

    def reset(self, seconds: int) -> None:
        with self.session.lock:
            self.time_left = seconds

    def cancel(self) -> None:
        with self.session.lock:
            if not self.running:
                return
            self.running = False
            self._generation += 1
            logger.info(f"[timer-cancel] room={self.session.code}")

    def tick(self, generation: Optional[int] = None) -> bool:
        """Count down one unit. Returns False once the timer has stopped."""
        with self.session.lock:
            if not self.running or (generation is not None and generation != self._generation):
                return False

            self.time_left -= 1
            if self.time_left % UPDATE_EVERY == 0 or self.time_left <= UPDATE_EVERY:
                self.session.notify('timer-update', {
                    'timeLeft': max(0, self.time_left),
                    'currentPhase': self.session.room.phase.value,
                })

            if self.time_left <= 0:
                logger.info(f"[timer-fire] room={self.session.code} phase={self.session.room.phase.value}")
                self.session.advance_phase()
            return self.running

    def _worker(self, generation: int) -> None:
        while True:
            self._sleep(self.interval)
            if not self.tick(generation):
                logger.debug(f"[timer-exit] room={self.session.code} generation={generation}")
                return
