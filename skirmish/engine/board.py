from typing import Dict, List, Optional
import numpy as np
from .errors import InvariantViolation
from .model import OPEN, WALL, InitialState, Position
from .registry import UnitRegistry

# up, left, right, down
OFFSETS = ((-1, 0), (0, -1), (0, 1), (1, 0))

class Board:
    """Static wall grid plus an index of which unit stands where.

    The board never owns units: an occupied cell only stores the unit id,
    which is a key into the registry.
    """

    def __init__(self, walls: np.ndarray):
        self.walls = walls
        self.height, self.width = walls.shape
        self._occupancy: Dict[Position, str] = {}

    @classmethod
    def from_state(cls, state: InitialState) -> "Board":
        walls = np.array([[c == WALL for c in row] for row in state.rows], dtype=bool)
        return cls(walls)

    def in_bounds(self, position: Position) -> bool:
        row, col = position
        return 0 <= row < self.height and 0 <= col < self.width

    def neighbors(self, position: Position) -> List[Position]:
        """In-bounds orthogonal neighbors (up, left, right, down)."""
        row, col = position
        out = []
        for dr, dc in OFFSETS:
            p = (row + dr, col + dc)
            if self.in_bounds(p):
                out.append(p)
        return out

    def is_wall(self, position: Position) -> bool:
        return bool(self.walls[position])

    def is_open(self, position: Position) -> bool:
        return not self.walls[position] and position not in self._occupancy

    def occupant(self, position: Position) -> Optional[str]:
        return self._occupancy.get(position)

    def place(self, position: Position, unit_id: str) -> None:
        if self.is_wall(position):
            raise InvariantViolation(f"unit {unit_id} placed on wall at {position}")
        holder = self._occupancy.get(position)
        if holder is not None:
            raise InvariantViolation(f"unit {unit_id} placed on {position} held by {holder}")
        self._occupancy[position] = unit_id

    def vacate(self, position: Position, unit_id: str) -> None:
        holder = self._occupancy.get(position)
        if holder != unit_id:
            raise InvariantViolation(f"unit {unit_id} vacating {position} held by {holder}")
        del self._occupancy[position]

    def render(self, registry: UnitRegistry) -> str:
        """Text snapshot with each row's units and hit points on the right."""
        lines = []
        for row in range(self.height):
            cells = []
            units = []
            for col in range(self.width):
                unit_id = self._occupancy.get((row, col))
                if unit_id is not None:
                    unit = registry.get(unit_id)
                    cells.append(unit.faction.value)
                    units.append(f"{unit.faction.value}({unit.hp})")
                elif self.walls[row, col]:
                    cells.append(WALL)
                else:
                    cells.append(OPEN)
            line = "".join(cells)
            if units:
                line += "   " + ", ".join(units)
            lines.append(line)
        return "\n".join(lines)
