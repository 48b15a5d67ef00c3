"""Component catalog: per-kind stats and the two-letter code tables.

Codes follow the planner grid format, e.g. ``U1`` for a single uranium cell
and ``XX`` for an empty cell.  Both lookup tables are built once at import
and never mutated.
"""
from __future__ import annotations

from typing import Dict, Optional

from reactorsim.types import ComponentFamily, ComponentKind, ComponentTypeStats


EMPTY_CODE = "XX"


_F = ComponentFamily
_K = ComponentKind

COMPONENT_CATALOG: Dict[ComponentKind, ComponentTypeStats] = {
    stats.kind: stats
    for stats in (
        # Vents: dissipate to air, optionally drawing from the core first
        ComponentTypeStats(_K.HEAT_VENT, _F.VENT, "VV",
                           heat_capacity=1000, self_vent_rate=6),
        ComponentTypeStats(_K.REACTOR_HEAT_VENT, _F.VENT, "VR",
                           heat_capacity=1000, self_vent_rate=5, reactor_vent_rate=5),
        ComponentTypeStats(_K.ADVANCED_HEAT_VENT, _F.VENT, "VA",
                           heat_capacity=1000, self_vent_rate=12),
        ComponentTypeStats(_K.COMPONENT_HEAT_VENT, _F.SPREAD_VENT, "VC",
                           neighbor_vent_rate=4),
        ComponentTypeStats(_K.OVERCLOCKED_HEAT_VENT, _F.VENT, "VO",
                           heat_capacity=1000, self_vent_rate=20, reactor_vent_rate=36),
        # Exchangers
        ComponentTypeStats(_K.HEAT_EXCHANGER, _F.EXCHANGER, "EE",
                           heat_capacity=2500, adjacent_transfer_rate=12, reactor_transfer_rate=4),
        ComponentTypeStats(_K.ADVANCED_HEAT_EXCHANGER, _F.EXCHANGER, "EA",
                           heat_capacity=5000, adjacent_transfer_rate=24, reactor_transfer_rate=8),
        ComponentTypeStats(_K.CORE_HEAT_EXCHANGER, _F.EXCHANGER, "ER",
                           heat_capacity=2500, reactor_transfer_rate=72),
        ComponentTypeStats(_K.COMPONENT_HEAT_EXCHANGER, _F.EXCHANGER, "EC",
                           heat_capacity=5000, adjacent_transfer_rate=36),
        # Coolant
        ComponentTypeStats(_K.COOLANT_CELL_10, _F.COOLANT, "C1",
                           heat_capacity=10000),
        ComponentTypeStats(_K.COOLANT_CELL_30, _F.COOLANT, "C3",
                           heat_capacity=30000),
        ComponentTypeStats(_K.COOLANT_CELL_60, _F.COOLANT, "C6",
                           heat_capacity=60000),
        ComponentTypeStats(_K.CONDENSATOR_RSH, _F.CONDENSATOR, "CR",
                           heat_capacity=20000),
        ComponentTypeStats(_K.CONDENSATOR_LZH, _F.CONDENSATOR, "CL",
                           heat_capacity=100000),
        # Fuel
        ComponentTypeStats(_K.URANIUM_CELL, _F.FUEL, "U1",
                           number_of_cells=1),
        ComponentTypeStats(_K.DUAL_URANIUM_CELL, _F.FUEL, "U2",
                           number_of_cells=2),
        ComponentTypeStats(_K.QUAD_URANIUM_CELL, _F.FUEL, "U4",
                           number_of_cells=4),
        # Reflectors
        ComponentTypeStats(_K.NEUTRON_REFLECTOR, _F.REFLECTOR, "NN",
                           max_durability=10000),
        ComponentTypeStats(_K.THICK_NEUTRON_REFLECTOR, _F.REFLECTOR, "NT",
                           max_durability=40000),
        # Plating
        ComponentTypeStats(_K.REACTOR_PLATING, _F.PLATING, "PP",
                           reactor_heat_capacity_increase=1000),
        ComponentTypeStats(_K.CONTAINMENT_REACTOR_PLATING, _F.PLATING, "PC",
                           reactor_heat_capacity_increase=500),
        ComponentTypeStats(_K.HEAT_CAPACITY_REACTOR_PLATING, _F.PLATING, "PH",
                           reactor_heat_capacity_increase=1700),
    )
}

CODE_BY_KIND: Dict[ComponentKind, str] = {ComponentKind.NONE: EMPTY_CODE}
CODE_BY_KIND.update({kind: stats.code for kind, stats in COMPONENT_CATALOG.items()})
KIND_BY_CODE: Dict[str, ComponentKind] = {code: kind for kind, code in CODE_BY_KIND.items()}

# Every code in kind order, matching the planner's component palette.
ALL_CODES = tuple(CODE_BY_KIND[kind] for kind in ComponentKind)


def get_component_stats(kind: object) -> Optional[ComponentTypeStats]:
    """Return stats for ``kind``, or None for the empty cell and anything unrecognized."""
    try:
        return COMPONENT_CATALOG.get(ComponentKind(kind))
    except (TypeError, ValueError):
        return None


def is_valid_code(code: str) -> bool:
    return code in KIND_BY_CODE


def kind_for_code(code: str) -> ComponentKind:
    """Map a two-letter code to its kind.  Raises KeyError for unknown codes."""
    return KIND_BY_CODE[code]


def code_for_kind(kind: ComponentKind) -> str:
    """Map a kind to its code; unknown values render as their integer value."""
    code = CODE_BY_KIND.get(kind)
    if code is None:
        return str(int(kind))
    return code


def fuel_units(kind: ComponentKind) -> int:
    stats = COMPONENT_CATALOG.get(kind)
    if stats is None or not stats.is_fuel:
        return 0
    return stats.number_of_cells
