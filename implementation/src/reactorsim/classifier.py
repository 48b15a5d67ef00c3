"""Reactor classification.

``classify`` runs a reactor design through one fuel cycle and then a few
speculative follow-up runs on independent copies to decide its mark:

- Mark I: runs forever, ending every cycle cold or never overheating anything
- Mark II: survives at least one full cycle, but accumulates heat
- Mark III: fails, but only after at least 10% of a cycle
- Mark IV: a component fails early, but the core survives 10% of a cycle
- Mark V: melts down (or fails and then melts) within 10% of a cycle

A design without fuel is not simulated at all and gets mark 0.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict

from reactorsim.errors import SimulationInvariantError
from reactorsim.simulation import Reactor, StopReason

logger = logging.getLogger(__name__)

# Stop conditions of a normal operating run.
_OPERATING = (StopReason.MELTDOWN, StopReason.FUEL_USED, StopReason.COMPONENT_FAILED)


@dataclass(frozen=True)
class RunResult:
    efficiency: float = 0.0               # EU/t during operation / 5 / fuel units
    total_eu_per_cycle: int = 0           # EU produced before meltdown, failure or fuel exhaustion
    eu_per_tick: int = 0                  # EU/t during operation
    overall_eu_per_tick: int = 0          # EU/t averaged over the cycle including cooldown
    uses_single_use_coolant: bool = False
    timed_out: bool = False               # cooldown never finished
    cooldown_ticks: int = 0
    cycle_ticks: int = 0                  # -1 when the cooldown timed out
    mark: int = 0
    iterations_before_failure: int = -1   # full cycles before failure, without cooldown
    ticks_until_meltdown: int = -1
    ticks_until_component_failure: int = -1
    total_cost: int = 0


def cycles_until_failure(first_heat: int, second_heat: int, max_heat: int) -> int:
    """Number of cycles until heat, growing by the same delta each cycle, exceeds ``max_heat - 1``.

    Returns -1 when the heat does not grow or there is no capacity to exceed.
    """
    if max_heat <= 0:
        return -1
    heat_diff = second_heat - first_heat
    if heat_diff <= 0:
        return -1
    return max(1, (max_heat - first_heat - 1) // heat_diff + 1)


def classify(reactor: Reactor) -> RunResult:
    """Simulate ``reactor`` and summarize its behavior.  The argument is not modified."""
    initial = reactor.copy()
    initial.initialize_simulation()
    total_cost = initial.total_cost()

    if not initial.fuel_units:
        logger.debug("No fuel in reactor, skipping simulation")
        return RunResult(total_cost=total_cost)

    first_stop = initial.run_until(*_OPERATING)
    if first_stop is StopReason.FUEL_USED:
        initial.commit()

    committed = initial.state
    total_eu = committed.energy_generated
    eu_per_tick = total_eu // committed.tick if committed.tick else 0
    fields: Dict[str, Any] = {
        "total_cost": total_cost,
        "total_eu_per_cycle": total_eu,
        "eu_per_tick": eu_per_tick,
        "efficiency": eu_per_tick / float(initial.config.eu_per_pulse) / initial.fuel_units,
        "uses_single_use_coolant": initial.uses_single_use_coolant,
    }

    if first_stop is StopReason.COMPONENT_FAILED:
        fields.update(_after_component_failure(initial, total_eu))
    elif first_stop is StopReason.MELTDOWN:
        fields.update(_after_meltdown(initial, total_eu))
    elif first_stop is StopReason.FUEL_USED:
        fields.update(_after_fuel_used(initial, total_eu, eu_per_tick))
    else:
        raise SimulationInvariantError("operating", first_stop)

    result = RunResult(**fields)
    logger.debug("Classified reactor as mark %d (%d EU/t)", result.mark, result.eu_per_tick)
    return result


def _cooldown(source: Reactor, total_eu: int, rollback: bool) -> Dict[str, Any]:
    """Strip the fuel from a copy of ``source`` and let it cool down.

    Components of the copy cannot break, so the run only ends once the heat
    is gone or clearly is not going anywhere.
    """
    cooling = source.copy()
    if rollback:
        cooling.rollback()
    cooling.remove_fuel()
    cooling.ignore_component_destroyed = True
    stop = cooling.run_until(StopReason.COOLED_DOWN)

    if stop is StopReason.COOLED_DOWN:
        # Committed in every branch, so cycle and cooldown counts include the
        # tick that cooled off: one more than reading the uncommitted tick.
        cooling.commit()
        cycle_ticks = cooling.state.tick
        return {
            "cooldown_ticks": cycle_ticks - source.pending.tick,
            "cycle_ticks": cycle_ticks,
            "overall_eu_per_tick": int(total_eu / cycle_ticks) if cycle_ticks else 0,
        }
    if stop is StopReason.MAX_TICKS:
        return {"timed_out": True, "cycle_ticks": -1}
    raise SimulationInvariantError("cooldown", stop)


def _after_component_failure(initial: Reactor, total_eu: int) -> Dict[str, Any]:
    cfg = initial.config
    failed_at = initial.state.tick
    fields: Dict[str, Any] = {
        "iterations_before_failure": 0,
        "ticks_until_component_failure": failed_at,
    }
    fields.update(_cooldown(initial, total_eu, rollback=True))

    # Keep running with the broken component gone and see how far the core gets.
    finish = initial.copy()
    finish.commit()
    stop = finish.run_until(StopReason.MELTDOWN, StopReason.FUEL_USED)
    if stop not in (StopReason.MELTDOWN, StopReason.FUEL_USED):
        raise SimulationInvariantError("component failure", stop)

    if cfg.reached_min_cycle(failed_at):
        fields["mark"] = 3
    elif cfg.reached_min_cycle(finish.state.tick):
        fields["mark"] = 4
    else:
        fields["mark"] = 5

    if stop is StopReason.MELTDOWN:
        fields["ticks_until_meltdown"] = finish.state.tick
    return fields


def _after_meltdown(initial: Reactor, total_eu: int) -> Dict[str, Any]:
    melted_at = initial.state.tick
    fields: Dict[str, Any] = {
        "iterations_before_failure": 0,
        "ticks_until_meltdown": melted_at,
        "mark": 3 if initial.config.reached_min_cycle(melted_at) else 5,
    }
    fields.update(_cooldown(initial, total_eu, rollback=True))
    return fields


def _after_fuel_used(initial: Reactor, total_eu: int, eu_per_tick: int) -> Dict[str, Any]:
    cfg = initial.config
    sustainable = {
        "mark": 1,
        "overall_eu_per_tick": eu_per_tick,
        "cycle_ticks": cfg.fuel_ticks,
    }
    if initial.state.total_heat <= 0:
        return sustainable

    fields = _cooldown(initial, total_eu, rollback=False)

    # Refuel without cooling down and run a second cycle on top of the leftover heat.
    rerun = initial.copy()
    rerun.reset_usage()
    stop = rerun.run_until(*_OPERATING)
    if stop in (StopReason.MELTDOWN, StopReason.COMPONENT_FAILED):
        fields.update(mark=2, iterations_before_failure=1)
    elif stop is StopReason.FUEL_USED:
        rerun.commit()
        cycles = _min_cycles_until_failure(initial, rerun)
        if cycles == -1:
            fields.update(sustainable)
        else:
            fields.update(mark=2, iterations_before_failure=cycles)
    else:
        raise SimulationInvariantError("fuel used", stop)
    return fields


def _min_cycles_until_failure(first: Reactor, second: Reactor) -> int:
    """Earliest projected failure across the core and every component, or -1."""
    best = cycles_until_failure(first.heat, second.heat, first.max_heat)
    for x, y, comp in first.grid.iter_cells():
        if comp is None:
            continue
        other = second.grid.get(x, y)
        if other is None:
            continue
        cycles = cycles_until_failure(comp.current_heat(), other.current_heat(), comp.max_heat())
        if cycles != -1 and (best == -1 or cycles < best):
            best = cycles
    return best
