from typing import Dict, List
from .board import Board
from .errors import InvariantViolation
from .model import Event, Faction
from .registry import UnitRegistry

class CombatResolver:
    """Applies hits, removes the dead and counts losses per faction."""

    def __init__(self, board: Board, registry: UnitRegistry):
        self.board = board
        self.registry = registry
        self.losses: Dict[Faction, int] = {f: 0 for f in Faction}

    def attack(self, attacker_id: str, defender_id: str, round_no: int = 0) -> List[Event]:
        """Resolve one hit. A kill vacates the defender's cell in the same call."""
        a = self.registry.get(attacker_id)
        d = self.registry.get(defender_id)
        if a is None or d is None:
            raise InvariantViolation(f"attack {attacker_id} -> {defender_id} with missing unit")

        evts: List[Event] = []
        d.hp -= a.attack_power
        evts.append(Event("Attack", round_no,
                          {"unit_id": a.id, "target": d.id, "dmg": a.attack_power,
                           "hp": max(0, d.hp)}))
        if d.hp <= 0:
            self.registry.remove(d.id)
            self.board.vacate(d.position, d.id)
            self.losses[d.faction] += 1
            evts.append(Event("Destroyed", round_no,
                              {"unit_id": d.id, "killer": a.id, "pos": list(d.position)}))
        return evts
