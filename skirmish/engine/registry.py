from typing import Dict, Iterator, List, Optional, Set, Tuple
from .errors import UnknownUnit
from .model import STARTING_HP, Faction, Position, Unit

class UnitRegistry:
    """Owns every unit record. Removed ids are tombstoned, never reissued."""

    def __init__(self):
        self._units: Dict[str, Unit] = {}
        self._removed: Set[str] = set()
        self._serial = 0

    def insert(self, faction: Faction, position: Position, attack_power: int,
               hp: int = STARTING_HP) -> str:
        """Create a unit and return its new id."""
        self._serial += 1
        unit_id = f"{faction.value}{self._serial}"
        self._units[unit_id] = Unit(id=unit_id, faction=faction, position=position,
                                    attack_power=attack_power, hp=hp)
        return unit_id

    def remove(self, unit_id: str) -> Unit:
        """Drop a unit permanently and return its last record."""
        unit = self._units.pop(unit_id, None)
        if unit is None:
            raise UnknownUnit(unit_id)
        self._removed.add(unit_id)
        return unit

    def get(self, unit_id: str) -> Optional[Unit]:
        """Return the live unit, or None once it has been removed."""
        return self._units.get(unit_id)

    def is_removed(self, unit_id: str) -> bool:
        return unit_id in self._removed

    def all_ids_by_position_order(self) -> Tuple[str, ...]:
        """Snapshot of live ids in reading order of their current position."""
        return tuple(u.id for u in sorted(self._units.values(), key=lambda u: u.position))

    def living(self, faction: Optional[Faction] = None) -> List[Unit]:
        """Live units, optionally of one faction, in reading order."""
        units = [u for u in self._units.values() if faction is None or u.faction is faction]
        units.sort(key=lambda u: u.position)
        return units

    def count(self, faction: Faction) -> int:
        return sum(1 for u in self._units.values() if u.faction is faction)

    def hp_sum(self) -> int:
        return sum(u.hp for u in self._units.values())

    def __iter__(self) -> Iterator[Unit]:
        return iter(self._units.values())
