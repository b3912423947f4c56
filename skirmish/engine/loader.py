from typing import List, Sequence, Tuple, Union
from .errors import MalformedMap
from .model import OPEN, WALL, Faction, InitialState, Position

SYMBOLS = {WALL, OPEN} | {f.value for f in Faction}

def load(grid: Union[str, Sequence[str]]) -> InitialState:
    """
    Parse a map into an InitialState.

    Args:
        grid: The whole map as one string, or one string per row

    Returns:
        Immutable starting state with unit starts in reading order

    Raises:
        MalformedMap: empty map, ragged rows, unknown symbols, or a faction
            with no units
    """
    rows = grid.splitlines() if isinstance(grid, str) else list(grid)
    while rows and not rows[-1].strip():
        rows.pop()
    if not rows:
        raise MalformedMap("map is empty")

    width = len(rows[0])
    units: List[Tuple[Faction, Position]] = []
    for r, line in enumerate(rows):
        if len(line) != width:
            raise MalformedMap(f"row {r} has width {len(line)}, expected {width}")
        for c, ch in enumerate(line):
            if ch not in SYMBOLS:
                raise MalformedMap(f"unknown symbol {ch!r} at row {r}, column {c}")
            if ch not in (WALL, OPEN):
                units.append((Faction(ch), (r, c)))

    for faction in Faction:
        if not any(f is faction for f, _ in units):
            raise MalformedMap(f"no {faction.name.lower()} units on the map")

    # Unit cells become open terrain; the engine tracks who stands there.
    terrain = tuple("".join(WALL if ch == WALL else OPEN for ch in line) for line in rows)
    return InitialState(rows=terrain, width=width, height=len(rows), units=tuple(units))
