import pytest

from reactorsim.config import SimulationConfig
from reactorsim.simulation import Reactor, StopReason
from reactorsim.types import ComponentKind

OPERATING = (StopReason.MELTDOWN, StopReason.FUEL_USED, StopReason.COMPONENT_FAILED)


def settled(reactor, core_heat=0, total_heat=None):
    """Commit a starting state as if a previous run had ended there."""
    reactor.initialize_simulation()
    reactor.set_heat(core_heat)
    reactor.pending.total_heat = core_heat if total_heat is None else total_heat
    reactor.commit()
    return reactor


def test_stop_tick_is_left_pending(make_reactor):
    reactor = make_reactor(["U1 XX XX"] + ["XX XX XX"] * 5)
    reactor.initialize_simulation()
    assert reactor.run_until(*OPERATING) is StopReason.MELTDOWN
    assert reactor.pending.tick == 2500
    assert reactor.state.tick == 2499
    assert reactor.pending.meltdown
    assert not reactor.state.meltdown
    reactor.rollback()
    assert reactor.heat == 9996


def test_fuel_used_after_configured_cycle(make_reactor):
    reactor = make_reactor(
        ["XX VV XX", "VV U1 VV", "XX VV XX"] + ["XX XX XX"] * 3,
        config=SimulationConfig(fuel_ticks=100),
    )
    reactor.initialize_simulation()
    assert reactor.run_until(*OPERATING) is StopReason.FUEL_USED
    assert reactor.pending.tick == 100
    assert reactor.pending.energy_generated == 500


def test_meltdown_outranks_component_failure():
    reactor = Reactor()
    reactor.pending.meltdown = True
    reactor.pending.component_failed = True
    assert reactor.run_until(*OPERATING) is StopReason.MELTDOWN
    assert reactor.run_until(StopReason.COMPONENT_FAILED) is StopReason.COMPONENT_FAILED


def test_unmonitored_conditions_run_to_timeout(make_reactor):
    reactor = make_reactor(
        ["U4 U4 U4"] + ["XX XX XX"] * 5,
        config=SimulationConfig(timeout_ticks=50),
    )
    reactor.initialize_simulation()
    assert reactor.run_until(StopReason.FUEL_USED) is StopReason.MAX_TICKS
    assert reactor.pending.tick == 50


def test_cools_down_when_heat_is_gone(make_reactor):
    reactor = make_reactor(["VV XX XX"] + ["XX XX XX"] * 5)
    reactor.grid.get(0, 0).pending_heat = 500
    settled(reactor, total_heat=500)
    assert reactor.run_until(StopReason.COOLED_DOWN) is StopReason.COOLED_DOWN
    assert reactor.pending.total_heat == 0
    assert reactor.pending.tick == 84


def test_stagnant_residual_heat_counts_as_cooled():
    reactor = settled(Reactor(), core_heat=50)
    assert reactor.run_until(StopReason.COOLED_DOWN) is StopReason.COOLED_DOWN
    assert reactor.pending.tick == 0


def test_no_heat_loss_between_checkpoints_times_out():
    reactor = settled(Reactor(), core_heat=5000)
    assert reactor.run_until(StopReason.COOLED_DOWN) is StopReason.MAX_TICKS
    assert reactor.state.tick == 8
    assert reactor.heat == 5000


@pytest.mark.parametrize("core_heat", [0, -5])
def test_cold_reactor_is_cooled_immediately(core_heat):
    reactor = settled(Reactor(), core_heat=core_heat)
    assert reactor.run_until(StopReason.COOLED_DOWN) is StopReason.COOLED_DOWN


def test_suppressed_failures_keep_running(make_reactor):
    reactor = make_reactor(
        ["U4 VV XX"] + ["XX XX XX"] * 5,
        config=SimulationConfig(timeout_ticks=40),
    )
    reactor.initialize_simulation()
    reactor.ignore_component_destroyed = True
    assert reactor.run_until(StopReason.COMPONENT_FAILED) is StopReason.MAX_TICKS
    assert reactor.get(1, 0) is not None
    assert ComponentKind.HEAT_VENT in reactor.component_kinds()
