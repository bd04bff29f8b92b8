"""
Session loop and scorer for the delta-hedging game.

A HedgingSession is the single owner of the market state (rolling price path,
elapsed days) and the player's portfolio (shares, cash). Everything else reads
immutable views of it. Mutation happens in exactly three places, all under one
lock so a trade arriving from a UI thread can never interleave with a tick:

  - tick(): advance one simulated day, draw a price, pay the hedge reward
  - trade(): buy/sell shares at the current price
  - reset()/close_session(): lifecycle

Lifecycle: INTRO -> ACTIVE -> GAME_OVER, with reset() re-entering INTRO.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Callable

import numpy as np
import pandas as pd

from hedgesim.config import BASE_TICK_MS, MIN_TICK_MS, REWARD_TIERS, UNHEDGED_PENALTY, SessionConfig
from hedgesim.paths import gbm_step, standard_normal
from hedgesim.position import Portfolio, PositionSnapshot, evaluate
from hedgesim.scenarios import Scenario, ScenarioKind, build_scenario, choose_scenario
from hedgesim.scores import BestScoreStore, MemoryScoreStore

logger = logging.getLogger(__name__)

INTRO_STEPS = ("SYSTEM_INIT", "OBJECTIVE: DELTA_NEUTRAL", "WARNING: GAMMA_RISK")


class Phase(str, Enum):
    INTRO = "intro"
    ACTIVE = "active"
    GAME_OVER = "gameover"


class SessionStateError(RuntimeError):
    """Raised when a player action is not allowed in the current phase."""


def hedge_reward(
    net_delta: float,
    tiers: tuple[tuple[float, float], ...] = REWARD_TIERS,
    penalty: float = UNHEDGED_PENALTY,
) -> float:
    """
    Cash credited per tick for hedge quality.

    Default schedule: |delta| < 50 -> +150, |delta| < 150 -> +50, else -50.
    A value sitting exactly on a bound falls into the looser band.
    """
    exposure = abs(net_delta)
    for bound, reward in tiers:
        if exposure < bound:
            return reward
    return penalty


def tick_interval_ms(
    elapsed_days: int, total_days: int, base_ms: float = BASE_TICK_MS, min_ms: float = MIN_TICK_MS
) -> float:
    """Delay before the next tick: shrinks linearly from base_ms to min_ms over the session."""
    progress = elapsed_days / total_days
    return max(min_ms, base_ms - progress * (base_ms - min_ms))


@dataclass
class MarketState:
    price_path: deque
    elapsed_days: int = 0

    @property
    def current_price(self) -> float:
        return self.price_path[-1]


@dataclass(frozen=True)
class SessionView:
    """Read-only snapshot handed to the presentation layer after each change."""

    phase: str
    scenario_name: str
    scenario_description: str
    difficulty: str
    intro_step: int
    price_path: list[float]
    elapsed_days: int
    days_remaining: int
    net_delta: float
    liquidation_value: float
    shares_held: float
    cash: float
    gamma: float
    is_hedged: bool
    best_score: float
    tick_interval_ms: float
    pnl_history: list[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class HedgingSession:
    def __init__(
        self,
        config: SessionConfig | None = None,
        store: BestScoreStore | None = None,
        rng: np.random.Generator | None = None,
        scenario: ScenarioKind | None = None,
    ):
        self.config = config or SessionConfig()
        self.store = store if store is not None else MemoryScoreStore()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._pinned_scenario = scenario
        self._lock = threading.RLock()
        self.closed = False
        self._close_listeners: list[Callable[[], None]] = []
        self.reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Start a fresh session in INTRO with a new scenario and clean books."""
        with self._lock:
            if self.closed:
                raise SessionStateError("session is closed")
            cfg = self.config
            if self._pinned_scenario is None:
                self.scenario: Scenario = choose_scenario(self.rng, cfg.start_price)
            else:
                self.scenario = build_scenario(self._pinned_scenario, cfg.start_price)

            self.phase = Phase.INTRO
            self.intro_step = 0
            self.market = MarketState(price_path=deque([float(cfg.start_price)], maxlen=cfg.price_window))
            self.portfolio = Portfolio()
            self.best_score = self.store.load()

            snap = self.snapshot()
            self.pnl_history = deque([snap.liquidation_value], maxlen=cfg.price_window)
            self._records = [self._record(snap, reward=0.0)]
            logger.info("Session started: scenario=%s best_score=%.2f", self.scenario.key, self.best_score)

    def next_intro_step(self) -> bool:
        """Move to the next intro page. Returns False when already on the last one."""
        with self._lock:
            self._require(Phase.INTRO)
            if self.intro_step >= len(INTRO_STEPS) - 1:
                return False
            self.intro_step += 1
            return True

    def advance_to_active(self) -> None:
        with self._lock:
            self._require(Phase.INTRO)
            self.phase = Phase.ACTIVE
            logger.info("Market open: %d days to expiry", self.config.total_days)

    def close_session(self) -> None:
        """Abort from any phase. Idempotent; no tick or trade is accepted afterwards."""
        with self._lock:
            if self.closed:
                return
            self.closed = True
            logger.info("Session closed in phase %s at day %d", self.phase.value, self.market.elapsed_days)
            for listener in self._close_listeners:
                listener()

    def add_close_listener(self, listener: Callable[[], None]) -> None:
        """Call listener once the session is closed (immediately if it already is)."""
        with self._lock:
            if self.closed:
                listener()
                return
            self._close_listeners.append(listener)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return self.phase is Phase.ACTIVE and not self.closed

    @property
    def current_price(self) -> float:
        return self.market.current_price

    @property
    def days_remaining(self) -> int:
        return self.config.total_days - self.market.elapsed_days

    @property
    def time_to_expiry(self) -> float:
        return max(0.0, self.days_remaining * self.config.dt)

    def snapshot(self) -> PositionSnapshot:
        return evaluate(
            self.scenario,
            self.current_price,
            self.time_to_expiry,
            self.portfolio,
            r=self.config.r,
            sigma=self.config.sigma,
        )

    def tick_interval_ms(self) -> float:
        cfg = self.config
        return tick_interval_ms(self.market.elapsed_days, cfg.total_days, cfg.base_tick_ms, cfg.min_tick_ms)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def tick(self) -> bool:
        """
        Advance one simulated day. Returns False without touching state when the
        session is not ACTIVE (before the market opens, after expiry, or closed).
        """
        with self._lock:
            if not self.is_active:
                logger.debug("Tick ignored in phase %s (closed=%s)", self.phase.value, self.closed)
                return False

            cfg = self.config
            # reward is graded on the exposure carried into this tick
            prev_delta = self.snapshot().net_delta

            self.market.elapsed_days += 1
            z = standard_normal(self.rng, method=cfg.sampler)
            new_price = float(gbm_step(self.current_price, cfg.dt, cfg.r, cfg.sigma, z))
            self.market.price_path.append(new_price)

            reward = hedge_reward(prev_delta, cfg.reward_tiers, cfg.unhedged_penalty)
            self.portfolio.cash += reward

            snap = self.snapshot()
            self.pnl_history.append(snap.liquidation_value)
            self._records.append(self._record(snap, reward))
            logger.debug(
                "Day %d: price=%.4f prev_delta=%.2f reward=%+.0f value=%.2f",
                self.market.elapsed_days,
                new_price,
                prev_delta,
                reward,
                snap.liquidation_value,
            )

            if self.market.elapsed_days >= cfg.total_days:
                self._finish(snap)
            return True

    def trade(self, shares_delta: float) -> float:
        """Buy (positive) or sell (negative) shares at the current price. Returns the fill price."""
        with self._lock:
            self._require(Phase.ACTIVE)
            price = self.current_price
            self.portfolio.trade(shares_delta, price)
            logger.debug(
                "Trade %+g @ %.4f -> shares=%g cash=%.2f",
                shares_delta,
                price,
                self.portfolio.shares_held,
                self.portfolio.cash,
            )
            return price

    def _finish(self, snap: PositionSnapshot) -> None:
        self.phase = Phase.GAME_OVER
        final = snap.liquidation_value
        logger.info("Expiry reached: final liquidation value %.2f", final)
        if final > self.best_score:
            self.best_score = final
            self.store.save(final)
            logger.info("New best score %.2f", final)

    def _require(self, phase: Phase) -> None:
        if self.closed:
            raise SessionStateError("session is closed")
        if self.phase is not phase:
            raise SessionStateError(f"expected phase {phase.value}, session is in {self.phase.value}")

    # ------------------------------------------------------------------
    # Outbound views
    # ------------------------------------------------------------------
    def _record(self, snap: PositionSnapshot, reward: float) -> dict:
        return {
            "day": self.market.elapsed_days,
            "price": self.current_price,
            "net_delta": snap.net_delta,
            "liquidation_value": snap.liquidation_value,
            "cash": self.portfolio.cash,
            "shares_held": self.portfolio.shares_held,
            "reward": reward,
        }

    def view(self) -> SessionView:
        with self._lock:
            snap = self.snapshot()
            return SessionView(
                phase=self.phase.value,
                scenario_name=self.scenario.name,
                scenario_description=self.scenario.description,
                difficulty=self.scenario.difficulty,
                intro_step=self.intro_step,
                price_path=list(self.market.price_path),
                elapsed_days=self.market.elapsed_days,
                days_remaining=self.days_remaining,
                net_delta=snap.net_delta,
                liquidation_value=snap.liquidation_value,
                shares_held=self.portfolio.shares_held,
                cash=self.portfolio.cash,
                gamma=snap.gamma,
                is_hedged=abs(snap.net_delta) < self.config.reward_tiers[-1][0],
                best_score=max(self.best_score, snap.liquidation_value),
                tick_interval_ms=self.tick_interval_ms(),
                pnl_history=list(self.pnl_history),
            )

    def history_frame(self) -> pd.DataFrame:
        """One row per simulated day (day 0 = market open), full session length."""
        with self._lock:
            return pd.DataFrame(self._records).set_index("day")


def start_session(
    config: SessionConfig | None = None,
    store: BestScoreStore | None = None,
    seed: int | None = None,
    scenario: ScenarioKind | None = None,
) -> HedgingSession:
    """Create a session in INTRO with a randomly chosen scenario (unless pinned)."""
    return HedgingSession(config=config, store=store, rng=np.random.default_rng(seed), scenario=scenario)
