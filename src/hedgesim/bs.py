from __future__ import annotations

from enum import Enum

import numpy as np
from scipy.stats import norm


class OptionKind(str, Enum):
    CALL = "call"
    PUT = "put"


def _d1_d2(S: float, K: float, T: float, r: float, sigma: float) -> tuple[float, float]:
    vsqrt = sigma * np.sqrt(T)
    d1 = (np.log(S / K) + (r + 0.5 * sigma**2) * T) / vsqrt
    d2 = d1 - vsqrt
    return d1, d2


def bs_call_price(S: float, K: float, T: float, r: float, sigma: float) -> float:
    if T <= 0:
        return float(max(S - K, 0.0))

    d1, d2 = _d1_d2(S, K, T, r, sigma)
    return float(S * norm.cdf(d1) - K * np.exp(-r * T) * norm.cdf(d2))


def bs_put_price(S: float, K: float, T: float, r: float, sigma: float) -> float:
    if T <= 0:
        return float(max(K - S, 0.0))

    d1, d2 = _d1_d2(S, K, T, r, sigma)
    return float(K * np.exp(-r * T) * norm.cdf(-d2) - S * norm.cdf(-d1))


def bs_call_delta(S: float, K: float, T: float, r: float, sigma: float) -> float:
    # at expiry the delta is a step on the strike
    if T <= 0:
        return 1.0 if S > K else 0.0
    d1, _ = _d1_d2(S, K, T, r, sigma)
    return float(norm.cdf(d1))


def bs_put_delta(S: float, K: float, T: float, r: float, sigma: float) -> float:
    if T <= 0:
        return -1.0 if S < K else 0.0
    d1, _ = _d1_d2(S, K, T, r, sigma)
    return float(norm.cdf(d1) - 1.0)


def bs_gamma(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """Gamma = dDelta/dS, identical for calls and puts. Zero at expiry."""
    if T <= 0:
        return 0.0
    d1, _ = _d1_d2(S, K, T, r, sigma)
    return float(norm.pdf(d1) / (S * sigma * np.sqrt(T)))


def bs_price(kind: OptionKind, S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Black-Scholes price of one European option (no dividends).

    Preconditions (not checked): S > 0, K > 0, sigma > 0, T >= 0 in years.
    At T == 0 the price is the intrinsic value.
    """
    if OptionKind(kind) is OptionKind.CALL:
        return bs_call_price(S, K, T, r, sigma)
    return bs_put_price(S, K, T, r, sigma)


def bs_delta(kind: OptionKind, S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Black-Scholes delta of one European option, per unit of underlying.

    Same preconditions as bs_price. At T == 0 the delta collapses to a step:
    calls 1 or 0 (S > K), puts -1 or 0 (S < K).
    """
    if OptionKind(kind) is OptionKind.CALL:
        return bs_call_delta(S, K, T, r, sigma)
    return bs_put_delta(S, K, T, r, sigma)
