"""Reactor simulation: component state, tick engine and the run-until loop.

Every tick runs two phases over the grid in row-major order:

1. HEAT:  vents draw from the core and dissipate, spreading vents cool
   their neighbors, fuel cells burn and push heat outwards, reflectors wear,
   plating raises the core capacity.
2. POWER: fuel cells pulse again and accepted pulses become energy.

Exchangers run in both phases.  All mutation goes to *pending* state;
``commit`` promotes it and ``rollback`` discards it, so a run can always
step back over the tick that made it stop.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from reactorsim.catalog import fuel_units, get_component_stats
from reactorsim.config import DEFAULT_CONFIG, SimulationConfig
from reactorsim.errors import ConfigurationError
from reactorsim.grid import Grid
from reactorsim.store import RunState
from reactorsim.types import ComponentFamily, ComponentKind, ComponentTypeStats

logger = logging.getLogger(__name__)

_HEAT_FAMILIES = (ComponentFamily.VENT, ComponentFamily.EXCHANGER, ComponentFamily.COOLANT)


class SimPhase(IntEnum):
    HEAT = 0
    POWER = 1


class StopReason(Enum):
    MELTDOWN = "meltdown"
    FUEL_USED = "fuel_used"
    COOLED_DOWN = "cooled_down"
    COMPONENT_FAILED = "component_failed"
    MAX_TICKS = "max_ticks"


def triangular(n: int) -> int:
    return n * (n + 1) // 2


@dataclass
class ReactorComponent:
    """One occupied grid cell.

    ``heat`` / ``usage`` / ``destroyed`` hold the last committed values,
    the ``pending_*`` fields the candidate values of the tick in progress.
    Condensators keep their fill level in the heat fields but always report
    zero current heat.
    """
    stats: ComponentTypeStats
    grid_x: int = 0
    grid_y: int = 0
    heat: int = 0
    pending_heat: int = 0
    usage: int = 0
    pending_usage: int = 0
    destroyed: bool = False
    pending_destroyed: bool = False

    @property
    def kind(self) -> ComponentKind:
        return self.stats.kind

    @property
    def family(self) -> ComponentFamily:
        return self.stats.family

    @property
    def cost(self) -> int:
        return self.stats.cost

    @property
    def is_destroyed(self) -> bool:
        return self.pending_destroyed

    def can_store_heat(self) -> bool:
        if self.family == ComponentFamily.CONDENSATOR:
            return self.pending_heat < self.stats.heat_capacity
        return self.family in _HEAT_FAMILIES

    def max_heat(self) -> int:
        if self.family in _HEAT_FAMILIES or self.family == ComponentFamily.CONDENSATOR:
            return self.stats.heat_capacity
        return 0

    def current_heat(self) -> int:
        if self.family in _HEAT_FAMILIES:
            return self.pending_heat
        return 0

    def reset_usage(self) -> None:
        """Refuel cells, restore reflectors and empty condensators.  Heat is kept."""
        if self.family in (ComponentFamily.FUEL, ComponentFamily.REFLECTOR):
            self.usage = self.pending_usage = 0
        elif self.family == ComponentFamily.CONDENSATOR:
            self.heat = self.pending_heat = 0

    def commit(self) -> None:
        self.heat = self.pending_heat
        self.usage = self.pending_usage
        self.destroyed = self.pending_destroyed

    def rollback(self) -> None:
        self.pending_heat = self.heat
        self.pending_usage = self.usage
        self.pending_destroyed = self.destroyed

    def clone(self) -> ReactorComponent:
        return replace(self)


class Reactor:
    """A 6-row reactor grid, 3 columns wide plus one per extra chamber.

    Components never hold a reference back to the reactor; every operation
    that touches core heat, energy or failure flags goes through a method
    here that receives the component.
    """

    HEIGHT = 6
    BASE_WIDTH = 3
    MAX_EXTRA_CHAMBERS = 6

    def __init__(self, extra_chambers: int = 0, config: SimulationConfig = DEFAULT_CONFIG) -> None:
        if not 0 <= extra_chambers <= self.MAX_EXTRA_CHAMBERS:
            raise ConfigurationError(
                f"extra chambers must be between 0 and {self.MAX_EXTRA_CHAMBERS}, got {extra_chambers}"
            )
        self.extra_chambers = extra_chambers
        self.config = config
        self.grid: Grid[ReactorComponent] = Grid(width=self.BASE_WIDTH + extra_chambers, height=self.HEIGHT)
        self.max_heat = config.base_max_heat
        self.ignore_component_destroyed = False
        self.state = RunState()      # committed
        self.pending = RunState()
        self.fuel_units = 0
        self.uses_single_use_coolant = False

    @classmethod
    def from_kinds(
        cls,
        kinds: Sequence[ComponentKind],
        extra_chambers: int = 0,
        config: SimulationConfig = DEFAULT_CONFIG,
    ) -> Reactor:
        reactor = cls(extra_chambers, config)
        reactor.set_component_kinds(kinds)
        return reactor

    # ── Layout ──────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def component_kinds(self) -> List[ComponentKind]:
        return [ComponentKind.NONE if comp is None else comp.kind for _, _, comp in self.grid.iter_cells()]

    def set_component_kinds(self, kinds: Sequence[ComponentKind]) -> None:
        expected = self.width * self.height
        if len(kinds) != expected:
            raise ConfigurationError(f"expected {expected} components for a {self.width}x{self.height} grid, got {len(kinds)}")
        for index, kind in enumerate(kinds):
            x, y = self.grid.coords(index)
            self.place_component(x, y, kind)

    def place_component(self, x: int, y: int, kind: ComponentKind) -> Optional[ReactorComponent]:
        """Put a fresh component of ``kind`` at (x, y); unknown kinds leave the cell empty."""
        stats = get_component_stats(kind)
        component = None if stats is None else ReactorComponent(stats, grid_x=x, grid_y=y)
        self.grid.set(x, y, component)
        return component

    def components(self) -> Iterable[ReactorComponent]:
        """Every present component, including ones destroyed in the pending tick."""
        for _, _, comp in self.grid.iter_cells():
            if comp is not None:
                yield comp

    def get(self, x: int, y: int) -> Optional[ReactorComponent]:
        """Live component at (x, y); empty, destroyed and out-of-bounds cells give None."""
        comp = self.grid.get(x, y)
        if comp is None or comp.pending_destroyed:
            return None
        return comp

    def neighbors(self, comp: ReactorComponent) -> List[ReactorComponent]:
        found = []
        for nx, ny in self.grid.neighbors(comp.grid_x, comp.grid_y):
            neighbor = self.get(nx, ny)
            if neighbor is not None:
                found.append(neighbor)
        return found

    def total_cost(self) -> int:
        return sum(comp.cost for comp in self.components())

    def copy(self) -> Reactor:
        """Independent deep copy sharing no mutable state with this reactor."""
        other = Reactor(self.extra_chambers, self.config)
        other.grid.cells = [None if comp is None else comp.clone() for comp in self.grid.cells]
        other.max_heat = self.max_heat
        other.ignore_component_destroyed = self.ignore_component_destroyed
        other.state = self.state.copy()
        other.pending = self.pending.copy()
        other.fuel_units = self.fuel_units
        other.uses_single_use_coolant = self.uses_single_use_coolant
        return other

    # ── Core heat, energy and failure accounting ────────────────

    @property
    def heat(self) -> int:
        return self.pending.reactor_heat

    def set_heat(self, heat: int) -> None:
        self.pending.reactor_heat = heat
        if heat >= self.max_heat:
            self.pending.meltdown = True

    def add_heat(self, heat: int) -> int:
        self.set_heat(self.pending.reactor_heat + heat)
        return self.pending.reactor_heat

    def generate_energy(self, eu: int) -> None:
        self.pending.add_energy(eu)

    def mark_destroyed(self, comp: ReactorComponent) -> None:
        if self.ignore_component_destroyed or comp.pending_destroyed:
            return
        comp.pending_destroyed = True
        self.pending.component_failed = True

    def alter_heat(self, comp: ReactorComponent, delta: int) -> int:
        """Add ``delta`` to the component's stored heat; return what it could not take.

        Overflowing a heat store destroys the component and leaves the store
        untouched, so the whole delta comes back.  Draining below zero clamps
        the store and returns the unmet (negative) part.
        """
        family = comp.family
        if family == ComponentFamily.CONDENSATOR:
            # fills up to capacity, never breaks; drained no lower than empty
            absorbed = max(-comp.pending_heat, min(comp.stats.heat_capacity - comp.pending_heat, delta))
            comp.pending_heat += absorbed
            return delta - absorbed
        if family not in _HEAT_FAMILIES:
            return delta

        new_heat = comp.pending_heat + delta
        if new_heat > comp.stats.heat_capacity:
            self.mark_destroyed(comp)
            return delta
        if new_heat < 0:
            comp.pending_heat = 0
            return new_heat
        comp.pending_heat = new_heat
        return 0

    def accept_pulse(self, comp: ReactorComponent, source: ReactorComponent, phase: SimPhase) -> bool:
        family = comp.family
        if family == ComponentFamily.FUEL:
            if comp.pending_usage > self.config.fuel_cell_max_usage:
                return False
            if phase == SimPhase.POWER:
                self.generate_energy(self.config.eu_per_pulse)
            return True
        if family == ComponentFamily.REFLECTOR:
            if phase == SimPhase.POWER:
                self.generate_energy(self.config.eu_per_pulse)
            else:
                comp.pending_usage += 1
                if comp.pending_usage > comp.stats.max_durability:
                    self.mark_destroyed(comp)
            return True
        return False

    # ── Per-family tick behavior ────────────────────────────────

    def _tick_vent(self, comp: ReactorComponent, phase: SimPhase) -> None:
        if phase != SimPhase.HEAT:
            return
        stats = comp.stats
        if stats.reactor_vent_rate > 0:
            core = self.heat
            drained = min(core, stats.reactor_vent_rate)
            residual = self.alter_heat(comp, drained)
            if residual > 0:
                # vent is full: the drained heat stays in the core, nothing is vented
                return
            self.set_heat(core - drained)
        self.alter_heat(comp, -stats.self_vent_rate)

    def _tick_spread_vent(self, comp: ReactorComponent, phase: SimPhase) -> None:
        if phase != SimPhase.HEAT:
            return
        for neighbor in self.neighbors(comp):
            if neighbor.can_store_heat():
                self.alter_heat(neighbor, -comp.stats.neighbor_vent_rate)

    def _tick_exchanger(self, comp: ReactorComponent, phase: SimPhase) -> None:
        stats = comp.stats
        acceptors: List[ReactorComponent] = []
        ratio_sum = comp.current_heat() / comp.max_heat()
        participants = 1

        if stats.reactor_transfer_rate > 0:
            participants += 1
            if self.max_heat > 0:
                ratio_sum += self.heat / self.max_heat

        if stats.adjacent_transfer_rate > 0:
            for neighbor in self.neighbors(comp):
                if not neighbor.can_store_heat():
                    continue
                acceptors.append(neighbor)
                max_heat = neighbor.max_heat()
                if max_heat > 0:
                    ratio_sum += neighbor.current_heat() / max_heat

        target = ratio_sum / (participants + len(acceptors))
        own_delta = 0

        rate = stats.adjacent_transfer_rate
        for neighbor in acceptors:
            add = int(target * neighbor.max_heat()) - neighbor.current_heat()
            add = max(-rate, min(rate, add))
            own_delta -= add
            own_delta += self.alter_heat(neighbor, add)

        rate = stats.reactor_transfer_rate
        if rate > 0:
            add = int(target * self.max_heat) - self.heat
            add = max(-rate, min(rate, add))
            own_delta -= add
            self.set_heat(self.heat + add)

        self.alter_heat(comp, own_delta)

    def _tick_fuel(self, comp: ReactorComponent, phase: SimPhase) -> None:
        if comp.pending_usage > self.config.fuel_cell_max_usage:
            return
        cells = comp.stats.number_of_cells
        for _ in range(cells):
            pulses = 1 + cells // 2
            if phase == SimPhase.POWER:
                for _ in range(pulses):
                    self.accept_pulse(comp, comp, phase)
                self._pulse_neighbors(comp, phase)
                continue

            pulses += self._pulse_neighbors(comp, phase)
            heat = 4 * triangular(pulses)
            acceptors = [n for n in self.neighbors(comp) if n.can_store_heat()]
            for i, neighbor in enumerate(acceptors):
                share = heat // (len(acceptors) - i)
                heat -= share
                heat += self.alter_heat(neighbor, share)
            if heat > 0:
                self.add_heat(heat)

        if phase == SimPhase.HEAT:
            comp.pending_usage += 1

    def _pulse_neighbors(self, comp: ReactorComponent, phase: SimPhase) -> int:
        accepted = 0
        for neighbor in self.neighbors(comp):
            if self.accept_pulse(neighbor, comp, phase):
                accepted += 1
        return accepted

    def _tick_plating(self, comp: ReactorComponent, phase: SimPhase) -> None:
        if phase == SimPhase.HEAT:
            self.max_heat += comp.stats.reactor_heat_capacity_increase

    def _tick_passive(self, comp: ReactorComponent, phase: SimPhase) -> None:
        pass

    _TICK_HANDLERS: Dict[ComponentFamily, Callable[["Reactor", ReactorComponent, SimPhase], None]] = {
        ComponentFamily.VENT: _tick_vent,
        ComponentFamily.SPREAD_VENT: _tick_spread_vent,
        ComponentFamily.EXCHANGER: _tick_exchanger,
        ComponentFamily.COOLANT: _tick_passive,
        ComponentFamily.CONDENSATOR: _tick_passive,
        ComponentFamily.FUEL: _tick_fuel,
        ComponentFamily.REFLECTOR: _tick_passive,
        ComponentFamily.PLATING: _tick_plating,
    }

    # ── Tick engine ─────────────────────────────────────────────

    def run_tick_phase(self, phase: SimPhase) -> None:
        for _, _, comp in self.grid.iter_cells():
            if comp is None or comp.pending_destroyed:
                continue
            self._TICK_HANDLERS[comp.family](self, comp, phase)

    def run_tick(self) -> None:
        # Capacity restarts from base every tick; plating re-adds during HEAT.
        self.max_heat = self.config.base_max_heat
        self.run_tick_phase(SimPhase.HEAT)
        self.run_tick_phase(SimPhase.POWER)
        total_heat = self.heat
        for comp in self.components():
            total_heat += comp.current_heat()
        self.pending.total_heat = total_heat

    def commit(self) -> None:
        self.state = self.pending.copy()
        for x, y, comp in self.grid.iter_cells():
            if comp is None:
                continue
            comp.commit()
            if comp.destroyed:
                self.grid.clear(x, y)

    def rollback(self) -> None:
        self.pending = self.state.copy()
        for comp in self.components():
            comp.rollback()

    # ── Simulation lifecycle ────────────────────────────────────

    def initialize_simulation(self) -> None:
        """Zero both run states and recount fuel units and single-use coolant."""
        self.state = RunState()
        self.pending = RunState()
        self.max_heat = self.config.base_max_heat
        self.fuel_units = 0
        self.uses_single_use_coolant = False
        for comp in self.components():
            self.fuel_units += fuel_units(comp.kind)
            if comp.stats.is_single_use_coolant:
                self.uses_single_use_coolant = True

    def remove_fuel(self) -> None:
        for x, y, comp in self.grid.iter_cells():
            if comp is not None and comp.stats.is_fuel:
                self.grid.clear(x, y)

    def reset_usage(self) -> None:
        """Start a fresh fuel cycle from the committed heat state."""
        for comp in self.components():
            comp.reset_usage()
        self.state.tick = 0
        self.state.energy_generated = 0
        self.pending = self.state.copy()

    def run_until(self, *monitored: StopReason) -> StopReason:
        """Tick until one of the ``monitored`` conditions (or the timeout) holds.

        Returns with the tick that triggered the stop still pending, so the
        caller may either commit it or roll it back.
        """
        watch = frozenset(monitored)
        cfg = self.config
        cooling = StopReason.COOLED_DOWN in watch
        first_iteration = True
        checkpoint_tick = -1
        checkpoint_heat = None
        while True:
            pending, committed = self.pending, self.state
            reason = None
            if pending.meltdown and StopReason.MELTDOWN in watch:
                reason = StopReason.MELTDOWN
            elif pending.component_failed and StopReason.COMPONENT_FAILED in watch:
                reason = StopReason.COMPONENT_FAILED
            elif pending.tick >= cfg.fuel_ticks and StopReason.FUEL_USED in watch:
                reason = StopReason.FUEL_USED
            elif cooling and pending.total_heat <= 0:
                reason = StopReason.COOLED_DOWN
            elif (cooling and pending.total_heat < cfg.residual_heat_threshold
                    and pending.total_heat == committed.total_heat):
                # stagnant residual heat counts as cooled
                reason = StopReason.COOLED_DOWN
            elif pending.tick >= cfg.timeout_ticks:
                reason = StopReason.MAX_TICKS
            elif (cooling and committed.tick % cfg.cooldown_check_interval == 0
                    and committed.tick != checkpoint_tick):
                checkpoint_tick = committed.tick
                if checkpoint_heat is not None and checkpoint_heat <= committed.total_heat:
                    # heat is not going down; this reactor will never cool off
                    reason = StopReason.MAX_TICKS
                checkpoint_heat = committed.total_heat

            if reason is not None:
                logger.debug("run_until stopped on %s at tick %d", reason.value, pending.tick)
                return reason

            if first_iteration:
                first_iteration = False
            else:
                self.commit()
            self.run_tick()
            self.pending.tick += 1
