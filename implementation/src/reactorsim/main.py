from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import List, Optional

from reactorsim.classifier import classify
from reactorsim.config import load_config
from reactorsim.errors import ConfigurationError, SimulationInvariantError
from reactorsim.gridio import build_reactor, dump_reactor, format_grid, format_results, load_reactor
from reactorsim.simulation import StopReason

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="reactorsim", description="Classify a reactor design.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("grid", nargs="?", type=Path, help="grid file, one row of codes per line")
    source.add_argument("--codes", nargs="+", metavar="CODE", help="flat row-major list of codes")
    parser.add_argument("--config", type=Path, help="JSON simulation config")
    parser.add_argument("--lenient", action="store_true", help="treat unknown codes as empty cells")
    parser.add_argument("--dump", action="store_true", help="print the grid heat after the first run")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.config)

    try:
        if args.codes:
            reactor = build_reactor(args.codes, config, lenient=args.lenient)
        else:
            reactor = load_reactor(args.grid, config, lenient=args.lenient)
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(format_grid(reactor.component_kinds(), reactor.width))
    try:
        result = classify(reactor)
    except SimulationInvariantError as exc:
        logger.error("Classification aborted: %s", exc)
        return 1

    if args.dump:
        first = reactor.copy()
        first.initialize_simulation()
        if first.fuel_units:
            first.run_until(StopReason.MELTDOWN, StopReason.FUEL_USED, StopReason.COMPONENT_FAILED)
        print(dump_reactor(first))
    print(format_results(result), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
