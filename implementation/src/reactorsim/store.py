from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RunState:
    """Reactor-level simulation state; one committed and one pending copy per reactor."""
    tick: int = 0
    meltdown: bool = False
    component_failed: bool = False
    energy_generated: int = 0
    total_heat: int = 0   # core heat plus every component's stored heat
    reactor_heat: int = 0

    def copy(self) -> "RunState":
        return RunState(
            tick=self.tick,
            meltdown=self.meltdown,
            component_failed=self.component_failed,
            energy_generated=self.energy_generated,
            total_heat=self.total_heat,
            reactor_heat=self.reactor_heat,
        )

    def add_energy(self, amount: int) -> None:
        self.energy_generated += amount
