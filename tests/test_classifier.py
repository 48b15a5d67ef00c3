import pytest

from conftest import single_cell_with_vents
from reactorsim.classifier import RunResult, classify, cycles_until_failure
from reactorsim.config import SimulationConfig
from reactorsim.errors import SimulationInvariantError
from reactorsim.gridio import build_reactor
from reactorsim.simulation import Reactor, StopReason

BLANK = ["XX XX XX"] * 5


# ── cycles_until_failure ────────────────────────────────────────

@pytest.mark.parametrize("first,second,cap", [
    (0, 100, 1000),
    (0, 1, 1000),
    (990, 1000, 1000),
    (2000, 2100, 1000),
    (37, 53, 20000),
    (0, 999, 1000),
])
def test_cycles_until_failure_is_first_crossing(first, second, cap):
    n = cycles_until_failure(first, second, cap)
    diff = second - first
    assert n >= 1
    assert first + n * diff > cap - 1
    assert n == 1 or first + (n - 1) * diff <= cap - 1


def test_cycles_until_failure_known_value():
    assert cycles_until_failure(0, 100, 1000) == 10


@pytest.mark.parametrize("first,second,cap", [
    (100, 100, 1000),
    (100, 50, 1000),
    (0, 10, 0),
    (0, 10, -5),
])
def test_cycles_until_failure_without_growth(first, second, cap):
    assert cycles_until_failure(first, second, cap) == -1


# ── classify ────────────────────────────────────────────────────

def test_no_fuel_is_cost_only(make_reactor):
    result = classify(make_reactor(["VA XX XX"] + BLANK))
    assert result == RunResult(total_cost=2)
    assert result.mark == 0


def test_vented_single_cell_is_mark_one():
    result = classify(build_reactor(single_cell_with_vents()))
    assert result.mark == 1
    assert result.eu_per_tick == 5
    assert result.efficiency == pytest.approx(1.0)
    assert result.total_eu_per_cycle == 50000
    assert result.overall_eu_per_tick == 5
    assert result.cycle_ticks == 10000
    assert result.cooldown_ticks == 0
    assert not result.timed_out
    assert result.total_cost == 10
    assert result.iterations_before_failure == -1


def test_condensator_design_is_mark_one_with_single_use_coolant(make_reactor):
    result = classify(make_reactor(["U1 CL XX"] + BLANK))
    assert result.mark == 1
    assert result.uses_single_use_coolant
    assert result.cycle_ticks == 10000


def test_full_quad_grid_melts_down(make_reactor):
    result = classify(make_reactor(["U4 U4 U4"] * 6))
    assert result.mark == 5
    assert result.ticks_until_meltdown == 1
    assert result.iterations_before_failure == 0
    assert result.total_eu_per_cycle == 2160
    assert result.eu_per_tick == 2160
    assert result.efficiency == pytest.approx(6.0)
    assert result.timed_out
    assert result.cycle_ticks == -1
    assert result.total_cost == 36


def test_slow_meltdown_is_mark_three(make_reactor):
    result = classify(make_reactor(["U1 XX XX"] + BLANK))
    assert result.mark == 3
    assert result.ticks_until_meltdown == 2499
    assert result.timed_out


def test_early_component_failure_then_meltdown_is_mark_five(make_reactor):
    result = classify(make_reactor(["U4 VV XX"] + BLANK))
    assert result.mark == 5
    assert result.ticks_until_component_failure == 11
    assert result.ticks_until_meltdown == 115
    assert result.iterations_before_failure == 0
    assert result.eu_per_tick == 60
    assert result.cycle_ticks == 176
    assert result.cooldown_ticks == 164
    assert result.overall_eu_per_tick == 3


def test_early_failure_with_plated_core_is_mark_four(make_reactor):
    result = classify(make_reactor([
        "PH PH PH",
        "PH PH PH",
        "PH PH PH",
        "XX XX XX",
        "XX XX XX",
        "XX VV U2",
    ]))
    assert result.mark == 4
    assert result.ticks_until_component_failure == 55
    assert result.ticks_until_meltdown == 1109


def test_heat_accumulating_design_is_mark_two(make_reactor):
    result = classify(make_reactor(["U1 C6 XX"] + BLANK))
    assert result.mark == 2
    assert result.iterations_before_failure == 1
    assert result.timed_out
    assert result.cycle_ticks == -1


def test_projected_coolant_failure_sets_iterations(make_reactor):
    # The coolant cell gains 10000 per cycle and holds 60000.
    result = classify(make_reactor([
        "XX VV XX",
        "VV U1 C6",
        "XX VV XX",
        "XX XX XX",
        "XX XX XX",
        "XX XX XX",
    ]))
    assert result.mark == 2
    assert result.iterations_before_failure == 5
    assert result.timed_out
    assert result.cycle_ticks == -1


def test_residual_heat_without_growth_is_mark_one():
    config = SimulationConfig(fuel_ticks=200)
    check = build_reactor(single_cell_with_vents(), config=config)
    check.initialize_simulation()
    assert check.run_until(StopReason.MELTDOWN, StopReason.FUEL_USED,
                           StopReason.COMPONENT_FAILED) is StopReason.FUEL_USED
    check.commit()
    assert check.state.total_heat == 2

    result = classify(build_reactor(single_cell_with_vents(), config=config))
    assert result.mark == 1
    assert result.iterations_before_failure == -1
    assert result.cycle_ticks == 200
    assert result.cooldown_ticks == 0
    assert not result.timed_out


def test_drained_condensator_is_mark_one(make_reactor):
    result = classify(make_reactor(["U1 CR VC"] + BLANK, config=SimulationConfig(fuel_ticks=200)))
    assert result.mark == 1
    assert result.uses_single_use_coolant
    assert result.eu_per_tick == 5
    assert result.cycle_ticks == 200


def test_classify_leaves_argument_untouched():
    reactor = build_reactor(single_cell_with_vents())
    classify(reactor)
    assert reactor.state.tick == 0
    assert reactor.pending.energy_generated == 0
    assert all(comp.pending_heat == 0 for comp in reactor.components())
    assert len(list(reactor.components())) == 5


def test_unexpected_stop_reason_is_an_invariant_error(monkeypatch):
    monkeypatch.setattr(Reactor, "run_until", lambda self, *reasons: StopReason.COOLED_DOWN)
    with pytest.raises(SimulationInvariantError, match="cooled_down") as excinfo:
        classify(build_reactor(single_cell_with_vents()))
    assert excinfo.value.branch == "operating"
