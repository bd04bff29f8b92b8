from __future__ import annotations

from dataclasses import dataclass

# Session constants (one simulated trading day per tick)
START_PRICE = 100.0
TOTAL_DAYS = 60
RISK_FREE_RATE = 0.05
VOLATILITY = 0.30
DAYS_PER_YEAR = 365

CONTRACT_MULTIPLIER = 100
PRICE_WINDOW = 60

# Tick cadence: 1000ms at the open, linearly down to 500ms at expiry
BASE_TICK_MS = 1000.0
MIN_TICK_MS = 500.0

TRADE_LOT = 50

# Hedge reward schedule: (exclusive upper bound on |net delta|, cash reward)
REWARD_TIERS = ((50.0, 150.0), (150.0, 50.0))
UNHEDGED_PENALTY = -50.0

SAMPLERS = ("gaussian", "irwin_hall")

BEST_SCORE_KEY = "quant_high_score"


@dataclass(frozen=True)
class SessionConfig:
    """
    Session-constant parameters.

    Rate and volatility never change once a session is created. Invalid values
    are programming errors and raise ValueError here rather than being clamped.
    """

    start_price: float = START_PRICE
    total_days: int = TOTAL_DAYS
    r: float = RISK_FREE_RATE
    sigma: float = VOLATILITY
    price_window: int = PRICE_WINDOW
    base_tick_ms: float = BASE_TICK_MS
    min_tick_ms: float = MIN_TICK_MS
    reward_tiers: tuple[tuple[float, float], ...] = REWARD_TIERS
    unhedged_penalty: float = UNHEDGED_PENALTY
    sampler: str = "gaussian"

    def __post_init__(self) -> None:
        if self.sigma <= 0:
            raise ValueError(f"sigma must be > 0, got {self.sigma}")
        if self.r <= 0:
            raise ValueError(f"r must be > 0, got {self.r}")
        if self.total_days <= 0:
            raise ValueError(f"total_days must be > 0, got {self.total_days}")
        if self.start_price <= 0:
            raise ValueError(f"start_price must be > 0, got {self.start_price}")
        if self.price_window < 1:
            raise ValueError("price_window must be >= 1")
        if not 0 < self.min_tick_ms <= self.base_tick_ms:
            raise ValueError("tick bounds must satisfy 0 < min_tick_ms <= base_tick_ms")
        if not self.reward_tiers:
            raise ValueError("reward_tiers must not be empty")
        bounds = [b for b, _ in self.reward_tiers]
        if bounds != sorted(bounds):
            raise ValueError("reward_tiers must be ordered by increasing bound")
        if self.sampler not in SAMPLERS:
            raise ValueError(f"sampler must be one of {SAMPLERS}, got {self.sampler!r}")

    @property
    def dt(self) -> float:
        return 1.0 / DAYS_PER_YEAR
