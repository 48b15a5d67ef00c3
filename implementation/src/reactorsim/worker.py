"""Running classifications off the caller's thread or process.

A classification is CPU bound and can take tens of thousands of ticks, so
async callers hand it to a worker thread and batch callers fan it out over
a process pool.  Input is validated before anything is scheduled.
"""
from __future__ import annotations

import asyncio
from concurrent.futures import ProcessPoolExecutor
import logging
from typing import List, Optional, Sequence

from reactorsim.classifier import RunResult, classify
from reactorsim.config import DEFAULT_CONFIG, SimulationConfig
from reactorsim.gridio import build_reactor
from reactorsim.simulation import Reactor

logger = logging.getLogger(__name__)


def run_simulation(codes: Sequence[object], config: SimulationConfig = DEFAULT_CONFIG) -> RunResult:
    """Classify the reactor described by a flat list of two-letter codes."""
    reactor = build_reactor(codes, config)
    result = classify(reactor)
    logger.info(
        "Classified %d-chamber reactor: mark %d, %d EU/t",
        reactor.extra_chambers, result.mark, result.eu_per_tick,
    )
    return result


async def classify_async(reactor: Reactor) -> RunResult:
    return await asyncio.to_thread(classify, reactor)


async def run_simulation_async(codes: Sequence[object], config: SimulationConfig = DEFAULT_CONFIG) -> RunResult:
    # Build here so a malformed list fails in the caller, not in the worker.
    reactor = build_reactor(codes, config)
    return await classify_async(reactor)


def classify_many(
    designs: Sequence[Sequence[object]],
    max_workers: Optional[int] = None,
    config: SimulationConfig = DEFAULT_CONFIG,
) -> List[RunResult]:
    """Classify independent designs in parallel; results keep the input order."""
    reactors = [build_reactor(codes, config) for codes in designs]
    if not reactors:
        return []
    with ProcessPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(classify, reactors))
