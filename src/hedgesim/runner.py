from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from hedgesim.session import HedgingSession, SessionView

logger = logging.getLogger(__name__)


class SessionRunner:
    """
    Drives an ACTIVE session on a background thread.

    The delay is recomputed before every tick, so the cadence speeds up as
    expiry approaches. stop() is deterministic: once it returns no further
    tick fires, because the session refuses ticks after close and the thread
    is joined. Closing the session directly also wakes the thread, so it exits
    without waiting out the current delay.
    """

    def __init__(
        self,
        session: HedgingSession,
        on_tick: Callable[[SessionView], None] | None = None,
        name: str = "hedgesim-ticker",
    ):
        self.session = session
        self.on_tick = on_tick
        self.name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("runner already started")
        if not self.session.is_active:
            raise RuntimeError("session must be ACTIVE before the runner starts")
        self._stop.clear()
        self.session.add_close_listener(self._stop.set)
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info("Runner started")

    def _run(self) -> None:
        while True:
            delay = self.session.tick_interval_ms() / 1000.0
            if self._stop.wait(delay):
                break
            if not self.session.tick():
                break
            if self.on_tick is not None:
                self.on_tick(self.session.view())
        logger.info("Runner stopped at day %d", self.session.market.elapsed_days)

    def stop(self, close: bool = True, timeout: float | None = None) -> None:
        """Stop ticking. With close=True the session is also closed."""
        self._stop.set()
        if close:
            self.session.close_session()
        self.join(timeout)

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)


@dataclass
class VirtualClock:
    """Simulated wall clock in milliseconds, for stepping sessions without sleeping."""

    now_ms: float = 0.0

    def advance(self, ms: float) -> None:
        self.now_ms += ms


def run_virtual(
    session: HedgingSession,
    clock: VirtualClock | None = None,
    max_ticks: int | None = None,
    on_tick: Callable[[SessionView], None] | None = None,
) -> int:
    """
    Step an ACTIVE session in virtual time until it stops accepting ticks or
    max_ticks is reached. Returns the number of ticks that fired.
    """
    clock = clock if clock is not None else VirtualClock()
    fired = 0
    while session.is_active and (max_ticks is None or fired < max_ticks):
        clock.advance(session.tick_interval_ms())
        session.tick()
        fired += 1
        if on_tick is not None:
            on_tick(session.view())
    return fired
