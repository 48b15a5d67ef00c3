from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ComponentKind(IntEnum):
    NONE = 0

    HEAT_VENT = 1
    REACTOR_HEAT_VENT = 2
    ADVANCED_HEAT_VENT = 3
    COMPONENT_HEAT_VENT = 4
    OVERCLOCKED_HEAT_VENT = 5

    HEAT_EXCHANGER = 6
    ADVANCED_HEAT_EXCHANGER = 7
    CORE_HEAT_EXCHANGER = 8
    COMPONENT_HEAT_EXCHANGER = 9

    COOLANT_CELL_10 = 10
    COOLANT_CELL_30 = 11
    COOLANT_CELL_60 = 12

    CONDENSATOR_RSH = 13
    CONDENSATOR_LZH = 14

    URANIUM_CELL = 15
    DUAL_URANIUM_CELL = 16
    QUAD_URANIUM_CELL = 17

    NEUTRON_REFLECTOR = 18
    THICK_NEUTRON_REFLECTOR = 19

    REACTOR_PLATING = 20
    CONTAINMENT_REACTOR_PLATING = 21
    HEAT_CAPACITY_REACTOR_PLATING = 22


class ComponentFamily(IntEnum):
    """Behavior family; every kind of the same family ticks the same way."""
    VENT = 1
    SPREAD_VENT = 2
    EXCHANGER = 3
    COOLANT = 4
    CONDENSATOR = 5
    FUEL = 6
    REFLECTOR = 7
    PLATING = 8


@dataclass(frozen=True)
class ComponentTypeStats:
    kind: ComponentKind
    family: ComponentFamily
    code: str
    cost: int = 2
    heat_capacity: int = 0
    self_vent_rate: int = 0          # heat dissipated to air per tick (vents)
    reactor_vent_rate: int = 0       # heat drawn from the core per tick (vents)
    adjacent_transfer_rate: int = 0  # exchanger link rate to each neighbor
    reactor_transfer_rate: int = 0   # exchanger link rate to the core
    neighbor_vent_rate: int = 0      # heat removed from each neighbor (spreading vent)
    number_of_cells: int = 0         # fuel sub-cells; 0 for non-fuel
    max_durability: int = 0          # reflector pulse budget
    reactor_heat_capacity_increase: int = 0  # plating bonus to core max heat

    @property
    def is_fuel(self) -> bool:
        return self.family == ComponentFamily.FUEL

    @property
    def is_single_use_coolant(self) -> bool:
        return self.family == ComponentFamily.CONDENSATOR
