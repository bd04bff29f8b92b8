from itertools import islice

import numpy as np
import pytest

from hedgesim.paths import DT_YEARS, gbm_step, price_path, simulate_paths, standard_normal

R, SIGMA = 0.05, 0.30


def test_one_step_log_returns_match_gbm_moments():
    rng = np.random.default_rng(2024)
    n = 10_000
    P0 = np.full(n, 100.0)
    P1 = gbm_step(P0, DT_YEARS, R, SIGMA, standard_normal(rng, n))
    x = np.log(P1 / P0)

    se_mean = SIGMA * np.sqrt(DT_YEARS) / np.sqrt(n)
    assert abs(x.mean() - (R - 0.5 * SIGMA**2) * DT_YEARS) < 4 * se_mean
    assert np.isclose(x.var(ddof=1), SIGMA**2 * DT_YEARS, rtol=0.05)


def test_irwin_hall_noise_is_narrower():
    rng = np.random.default_rng(1)
    z = standard_normal(rng, 20_000, method="irwin_hall")
    assert z.min() >= -2.0 and z.max() <= 2.0
    assert abs(z.mean()) < 0.02
    # sum of four U(0,1) has variance 4/12
    assert np.isclose(z.var(), 1 / 3, rtol=0.05)
    assert isinstance(standard_normal(rng, method="irwin_hall"), float)


def test_unknown_sampler_rejected():
    with pytest.raises(ValueError):
        standard_normal(np.random.default_rng(0), method="box")


def test_zero_noise_step_is_pure_drift():
    S1 = gbm_step(100.0, DT_YEARS, R, SIGMA, 0.0)
    assert np.isclose(S1, 100.0 * np.exp((R - 0.5 * SIGMA**2) * DT_YEARS))


def test_price_path_is_lazy_and_reproducible():
    a = list(islice(price_path(100.0, np.random.default_rng(5)), 60))
    b = list(islice(price_path(100.0, np.random.default_rng(5)), 60))
    assert a == b
    assert len(a) == 60
    assert all(p > 0 for p in a)


def test_simulate_paths_shape_and_seed():
    paths = simulate_paths(100.0, n_days=60, n_paths=500, seed=3)
    assert paths.shape == (500, 61)
    assert np.all(paths[:, 0] == 100.0)
    assert np.all(paths > 0)
    assert np.array_equal(paths, simulate_paths(100.0, n_days=60, n_paths=500, seed=3))


def test_simulate_paths_rejects_empty_grid():
    with pytest.raises(ValueError):
        simulate_paths(100.0, n_days=0, n_paths=10)
