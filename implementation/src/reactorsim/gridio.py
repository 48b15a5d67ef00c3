"""Text grid files and two-letter code lists.

A grid file holds one reactor row per line, codes separated by spaces or
tabs::

    VV U1 VV
    XX VV XX
    ...

Blank lines are skipped.  Everything here validates its input and raises
``ConfigurationError`` before a ``Reactor`` is ever built.
"""
from __future__ import annotations

from dataclasses import fields
import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from reactorsim.catalog import EMPTY_CODE, code_for_kind, is_valid_code, kind_for_code
from reactorsim.classifier import RunResult
from reactorsim.config import DEFAULT_CONFIG, SimulationConfig
from reactorsim.errors import ConfigurationError
from reactorsim.simulation import Reactor
from reactorsim.types import ComponentKind

logger = logging.getLogger(__name__)

_MIN_WIDTH = Reactor.BASE_WIDTH
_MAX_WIDTH = Reactor.BASE_WIDTH + Reactor.MAX_EXTRA_CHAMBERS


def dimensions(extra_chambers: int) -> Tuple[int, int]:
    return Reactor.BASE_WIDTH + extra_chambers, Reactor.HEIGHT


def extra_chambers_for(count: int) -> int:
    """Chamber count implied by a flat list of ``count`` cells."""
    if count % Reactor.HEIGHT != 0 or not _MIN_WIDTH * Reactor.HEIGHT <= count <= _MAX_WIDTH * Reactor.HEIGHT:
        raise ConfigurationError(f"Invalid number of components: {count}")
    return count // Reactor.HEIGHT - Reactor.BASE_WIDTH


def parse_codes(codes: Sequence[object], lenient: bool = False) -> List[ComponentKind]:
    """Translate codes to kinds.  With ``lenient`` unknown codes become empty cells."""
    kinds = []
    for index, code in enumerate(codes):
        if not isinstance(code, str):
            raise ConfigurationError(f"Components must be string codes, got {code!r} at index {index}")
        if is_valid_code(code):
            kinds.append(kind_for_code(code))
        elif lenient:
            logger.warning("Unknown component code %r at index %d, treating as empty", code, index)
            kinds.append(ComponentKind.NONE)
        else:
            raise ConfigurationError(f"Invalid component code: {code}")
    return kinds


def parse_grid_text(text: str, lenient: bool = False) -> Tuple[List[ComponentKind], int]:
    """Parse grid text into a flat row-major kind list and its extra chamber count."""
    codes: List[str] = []
    width = None
    for line_no, line in enumerate(text.splitlines(), start=1):
        row = line.split()
        if not row:
            continue
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise ConfigurationError(f"line {line_no}: expected {width} codes, got {len(row)}")
        codes.extend(row)
    extra = extra_chambers_for(len(codes))
    if width is not None and width != Reactor.BASE_WIDTH + extra:
        raise ConfigurationError(f"grid must have {Reactor.HEIGHT} rows, got {len(codes) // width}")
    return parse_codes(codes, lenient), extra


def build_reactor(
    codes: Sequence[object],
    config: SimulationConfig = DEFAULT_CONFIG,
    lenient: bool = False,
) -> Reactor:
    """Validate a flat code list and build the reactor it describes."""
    extra = extra_chambers_for(len(codes))
    return Reactor.from_kinds(parse_codes(codes, lenient), extra, config)


def load_reactor(path: Path, config: SimulationConfig = DEFAULT_CONFIG, lenient: bool = False) -> Reactor:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Could not read grid file {path}: {exc}") from exc
    kinds, extra = parse_grid_text(text, lenient)
    return Reactor.from_kinds(kinds, extra, config)


def format_grid(kinds: Sequence[ComponentKind], width: int) -> str:
    rows = []
    for start in range(0, len(kinds), width):
        rows.append(" ".join(code_for_kind(kind) for kind in kinds[start:start + width]))
    return "\n".join(rows) + "\n"


def dump_reactor(reactor: Reactor) -> str:
    """Grid with each cell's current heat, e.g. ``VV:00042``."""
    lines = []
    for y in range(reactor.height):
        cells = []
        for x in range(reactor.width):
            comp = reactor.grid.get(x, y)
            if comp is None:
                cells.append(f"{EMPTY_CODE}:00000")
            else:
                cells.append(f"{comp.stats.code}:{comp.current_heat():05d}")
        lines.append(" ".join(cells))
    return "\n".join(lines) + "\n"


def format_results(result: RunResult) -> str:
    lines = []
    for field in fields(RunResult):
        value = getattr(result, field.name)
        if isinstance(value, bool):
            value = int(value)
        lines.append(f"{field.name}: {value}")
    return "\n".join(lines) + "\n"
