from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

Position = Tuple[int, int]  # (row, col); tuple order is reading order

STARTING_HP = 200
BASE_ATTACK_POWER = 3

class Faction(Enum):
    """One of the two opposing sides, keyed by its map symbol"""
    ELF = "E"
    GOBLIN = "G"

    @property
    def opponent(self) -> "Faction":
        return Faction.GOBLIN if self is Faction.ELF else Faction.ELF

# The faction whose attack power the outcome search tunes
CALIBRATED_FACTION = Faction.ELF

WALL = "#"
OPEN = "."

@dataclass
class Unit:
    id: str
    faction: Faction
    position: Position
    attack_power: int
    hp: int = STARTING_HP

@dataclass
class Event:
    kind: str
    round: int
    data: Dict

@dataclass(frozen=True)
class InitialState:
    """Parsed starting map. Every simulation builds its own board from it."""
    rows: Tuple[str, ...]
    width: int
    height: int
    units: Tuple[Tuple[Faction, Position], ...] = field(default_factory=tuple)

@dataclass(frozen=True)
class Outcome:
    power: int
    rounds_completed: int
    surviving_hp_sum: int
    calibrated_faction_losses: int
    winner: Optional[Faction] = None

    @property
    def value(self) -> int:
        return self.rounds_completed * self.surviving_hp_sum

    @property
    def won_cleanly(self) -> bool:
        return self.winner is CALIBRATED_FACTION and self.calibrated_faction_losses == 0
