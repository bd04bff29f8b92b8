from __future__ import annotations

from typing import Iterator

import numpy as np

from hedgesim.config import DAYS_PER_YEAR, RISK_FREE_RATE, SAMPLERS, VOLATILITY

DT_YEARS = 1.0 / DAYS_PER_YEAR


def standard_normal(
    rng: np.random.Generator,
    size: int | tuple[int, ...] | None = None,
    method: str = "gaussian",
):
    """
    Draw approximately N(0, 1) noise.

    method:
      - "gaussian": true normal draws from the generator
      - "irwin_hall": U1 + U2 + U3 + U4 - 2, the cheap sum-of-uniforms shortcut.
        Mean 0 but variance 1/3 and bounded to [-2, 2], so paths built from it
        are calmer than a real GBM with the same sigma.
    """
    if method == "gaussian":
        return rng.standard_normal(size)
    if method == "irwin_hall":
        if size is None:
            return float(rng.random(4).sum() - 2.0)
        shape = (size,) if isinstance(size, int) else tuple(size)
        return rng.random((4, *shape)).sum(axis=0) - 2.0
    raise ValueError(f"method must be one of {SAMPLERS}, got {method!r}")


def gbm_step(current_price, dt_years: float, r: float, sigma: float, z):
    """
    One exact GBM step under the risk-neutral drift:
      S' = S * exp((r - sigma^2/2) dt + sigma sqrt(dt) Z)

    Works elementwise on numpy arrays as well as on scalars.
    """
    drift = (r - 0.5 * sigma**2) * dt_years
    vol = sigma * np.sqrt(dt_years)
    return current_price * np.exp(drift + vol * z)


def price_path(
    start_price: float,
    rng: np.random.Generator,
    r: float = RISK_FREE_RATE,
    sigma: float = VOLATILITY,
    dt_years: float = DT_YEARS,
    method: str = "gaussian",
) -> Iterator[float]:
    """Lazy, unbounded stream of daily prices following start_price (not included)."""
    S = float(start_price)
    while True:
        S = float(gbm_step(S, dt_years, r, sigma, standard_normal(rng, method=method)))
        yield S


def simulate_paths(
    start_price: float,
    n_days: int,
    n_paths: int,
    r: float = RISK_FREE_RATE,
    sigma: float = VOLATILITY,
    dt_years: float = DT_YEARS,
    method: str = "gaussian",
    seed: int | None = 42,
) -> np.ndarray:
    """
    Batch version of price_path for analysis.

    Returns an array of shape (n_paths, n_days + 1) whose first column is
    start_price.
    """
    if n_days < 1 or n_paths < 1:
        raise ValueError("n_days and n_paths must be >= 1")

    rng = np.random.default_rng(seed)
    Z = standard_normal(rng, (n_paths, n_days), method=method)

    drift = (r - 0.5 * sigma**2) * dt_years
    vol = sigma * np.sqrt(dt_years)

    # simulate log-returns and accumulate
    log_paths = np.cumsum(drift + vol * Z, axis=1)
    paths = start_price * np.exp(log_paths)
    return np.column_stack([np.full(n_paths, float(start_price)), paths])
