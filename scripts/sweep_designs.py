#!/usr/bin/env python3
"""Classify every reactor grid file in a directory.

Reads:
  <designs dir>/*.txt     one grid per file, rows of two-letter codes

Outputs one summary line per design, sorted by file name:
  name  mark  EU/t  efficiency  cycle ticks

Usage:
  python sweep_designs.py [designs_dir] [workers]
"""

import sys
from pathlib import Path

from reactorsim.catalog import code_for_kind
from reactorsim.errors import ConfigurationError
from reactorsim.gridio import parse_grid_text
from reactorsim.worker import classify_many

SCRIPT_DIR = Path(__file__).resolve().parent
DEFAULT_DIR = SCRIPT_DIR / "designs"


def main():
    designs_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DIR
    workers = int(sys.argv[2]) if len(sys.argv) > 2 else None

    if not designs_dir.is_dir():
        print(f"ERROR: designs directory not found: {designs_dir}")
        sys.exit(1)

    names = []
    designs = []
    for path in sorted(designs_dir.glob("*.txt")):
        try:
            kinds, _ = parse_grid_text(path.read_text(encoding="utf-8"))
        except ConfigurationError as exc:
            print(f"  skip {path.name}: {exc}")
            continue
        names.append(path.stem)
        designs.append([code_for_kind(kind) for kind in kinds])

    if not designs:
        print(f"No grid files in {designs_dir}")
        return

    print(f"Classifying {len(designs)} designs...")
    width = max(len(name) for name in names)
    for name, result in zip(names, classify_many(designs, max_workers=workers)):
        print(
            f"  {name:<{width}}  mark {result.mark}  {result.eu_per_tick:4d} EU/t"
            f"  eff {result.efficiency:.2f}  cycle {result.cycle_ticks}"
        )


if __name__ == "__main__":
    main()
