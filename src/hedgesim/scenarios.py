from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from hedgesim.bs import OptionKind


@dataclass(frozen=True)
class OptionLeg:
    kind: OptionKind
    strike: float
    quantity: int  # contracts, negative = short

    def __post_init__(self) -> None:
        if self.strike <= 0:
            raise ValueError(f"strike must be > 0, got {self.strike}")


@dataclass(frozen=True)
class Scenario:
    key: str
    name: str
    description: str
    difficulty: str
    legs: tuple[OptionLeg, ...]


class ScenarioKind(str, Enum):
    STRADDLE = "straddle"
    STRANGLE = "strangle"
    NAKED_CALL = "naked_call"


# (name, difficulty, description, [(kind, strike offset from base price, quantity)])
_CATALOG = {
    ScenarioKind.STRADDLE: (
        "THE WIDOWMAKER (Short Straddle)",
        "HARD",
        "You sold both ATM Calls and Puts. You are Short Volatility. "
        "If the price moves in ANY direction, you bleed.",
        [(OptionKind.CALL, 0.0, -10), (OptionKind.PUT, 0.0, -10)],
    ),
    ScenarioKind.STRANGLE: (
        "THE STRANGLE (Short Strangle)",
        "MEDIUM",
        "You sold OTM Calls and OTM Puts. You have a wider safety net, "
        "but Gamma spikes harder if boundaries are breached.",
        [(OptionKind.CALL, 10.0, -10), (OptionKind.PUT, -10.0, -10)],
    ),
    ScenarioKind.NAKED_CALL: (
        "NAKED CALL (Short Call)",
        "NORMAL",
        "You sold unhedged Calls. If the market rips higher, your losses are "
        "theoretically infinite. Don't let it rip.",
        [(OptionKind.CALL, 0.0, -10)],
    ),
}


def build_scenario(kind: ScenarioKind, base_price: float) -> Scenario:
    """Resolve a catalog entry into concrete legs with strikes around base_price."""
    kind = ScenarioKind(kind)
    name, difficulty, description, legs = _CATALOG[kind]
    return Scenario(
        key=kind.value,
        name=name,
        description=description,
        difficulty=difficulty,
        legs=tuple(OptionLeg(k, base_price + offset, qty) for k, offset, qty in legs),
    )


def choose_scenario(rng: np.random.Generator, base_price: float) -> Scenario:
    """Pick a scenario uniformly at random from the catalog."""
    kinds = list(ScenarioKind)
    return build_scenario(kinds[int(rng.integers(len(kinds)))], base_price)
