from __future__ import annotations

from dataclasses import dataclass

from hedgesim.bs import bs_delta, bs_gamma, bs_price
from hedgesim.config import CONTRACT_MULTIPLIER, RISK_FREE_RATE, VOLATILITY
from hedgesim.scenarios import Scenario


@dataclass
class Portfolio:
    """Raw underlying holding plus cash. Only trades and hedge rewards touch it."""

    shares_held: float = 0.0
    cash: float = 0.0

    def trade(self, shares_delta: float, price: float) -> None:
        # settle immediately at the current price: no slippage, no partial fills
        self.shares_held += shares_delta
        self.cash -= shares_delta * price


@dataclass(frozen=True)
class PositionSnapshot:
    net_delta: float
    liquidation_value: float
    option_delta: float
    option_value: float
    gamma: float


def evaluate(
    scenario: Scenario,
    market_price: float,
    time_to_expiry_years: float,
    portfolio: Portfolio,
    r: float = RISK_FREE_RATE,
    sigma: float = VOLATILITY,
) -> PositionSnapshot:
    """
    Mark the whole position to market.

    Each leg contributes unit delta/price * 100 * quantity, so short legs enter
    with negative delta and negative value (a liability). Pure function: the
    snapshot is always rebuilt from primitive state, never patched.
    """
    S, T = market_price, time_to_expiry_years

    option_delta = 0.0
    option_value = 0.0
    gamma = 0.0
    for leg in scenario.legs:
        scale = CONTRACT_MULTIPLIER * leg.quantity
        option_delta += scale * bs_delta(leg.kind, S, leg.strike, T, r, sigma)
        option_value += scale * bs_price(leg.kind, S, leg.strike, T, r, sigma)
        gamma += scale * bs_gamma(S, leg.strike, T, r, sigma)

    return PositionSnapshot(
        net_delta=portfolio.shares_held + option_delta,
        liquidation_value=portfolio.cash + portfolio.shares_held * S + option_value,
        option_delta=option_delta,
        option_value=option_value,
        gamma=gamma,
    )
