from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class Grid(Generic[T]):
    """Row-major width x height array of optional cells."""
    width: int
    height: int
    cells: List[Optional[T]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.cells = [None] * (self.width * self.height)

    def index(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(f"Grid index out of bounds: ({x}, {y})")
        return y * self.width + x

    def coords(self, index: int) -> Tuple[int, int]:
        return index % self.width, index // self.width

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Optional[T]:
        if not self.in_bounds(x, y):
            return None
        return self.cells[self.index(x, y)]

    def set(self, x: int, y: int, value: Optional[T]) -> None:
        self.cells[self.index(x, y)] = value

    def clear(self, x: int, y: int) -> None:
        self.set(x, y, None)

    def iter_cells(self) -> Iterable[Tuple[int, int, Optional[T]]]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, self.cells[y * self.width + x]

    def neighbors(self, x: int, y: int) -> list[tuple[int, int]]:
        """Orthogonal in-bounds neighbors, ordered left, right, above, below."""
        coords: list[tuple[int, int]] = []
        if x > 0:
            coords.append((x - 1, y))
        if x < self.width - 1:
            coords.append((x + 1, y))
        if y > 0:
            coords.append((x, y - 1))
        if y < self.height - 1:
            coords.append((x, y + 1))
        return coords
