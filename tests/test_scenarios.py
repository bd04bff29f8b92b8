from collections import Counter

import numpy as np
import pytest

from hedgesim.bs import OptionKind
from hedgesim.config import SessionConfig
from hedgesim.scenarios import OptionLeg, ScenarioKind, build_scenario, choose_scenario


def test_catalog_legs():
    straddle = build_scenario(ScenarioKind.STRADDLE, 100.0)
    assert [(l.kind, l.strike, l.quantity) for l in straddle.legs] == [
        (OptionKind.CALL, 100.0, -10),
        (OptionKind.PUT, 100.0, -10),
    ]
    strangle = build_scenario(ScenarioKind.STRANGLE, 100.0)
    assert [(l.kind, l.strike) for l in strangle.legs] == [(OptionKind.CALL, 110.0), (OptionKind.PUT, 90.0)]
    naked = build_scenario("naked_call", 100.0)
    assert naked.difficulty == "NORMAL"
    assert len(naked.legs) == 1


def test_choose_scenario_covers_catalog():
    rng = np.random.default_rng(11)
    seen = Counter(choose_scenario(rng, 100.0).key for _ in range(300))
    assert set(seen) == {k.value for k in ScenarioKind}


def test_leg_rejects_non_positive_strike():
    with pytest.raises(ValueError):
        OptionLeg(OptionKind.PUT, 0.0, -10)
    with pytest.raises(ValueError):
        build_scenario(ScenarioKind.STRANGLE, 5.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"sigma": 0.0},
        {"sigma": -0.3},
        {"r": 0.0},
        {"total_days": 0},
        {"start_price": -1.0},
        {"min_tick_ms": 1500.0},
        {"sampler": "sobol"},
        {"reward_tiers": ()},
    ],
)
def test_config_preconditions(kwargs):
    with pytest.raises(ValueError):
        SessionConfig(**kwargs)
