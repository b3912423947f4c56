from typing import List, Optional, Tuple
from .board import Board
from .combat import CombatResolver
from .errors import InvariantViolation, Stalemate
from .model import (BASE_ATTACK_POWER, CALIBRATED_FACTION, Event, Faction, InitialState,
                    Outcome, Position, Unit)
from .pathfinding import best_step, distances_from, manhattan
from .registry import UnitRegistry

class Engine:
    """Pure, deterministic round-by-round combat simulation."""

    def __init__(self, state: InitialState, calibrated_power: int = BASE_ATTACK_POWER):
        self.state = state
        self.calibrated_power = calibrated_power
        self.board = Board.from_state(state)
        self.registry = UnitRegistry()
        for faction, pos in state.units:
            power = calibrated_power if faction is CALIBRATED_FACTION else BASE_ATTACK_POWER
            unit_id = self.registry.insert(faction, pos, power)
            self.board.place(pos, unit_id)
        self.combat = CombatResolver(self.board, self.registry)
        self.rounds_completed = 0
        self.finished = False
        self.events: List[Event] = []

    @property
    def round_no(self) -> int:
        return self.rounds_completed + 1

    def _adjacent_target(self, unit: Unit) -> Optional[Unit]:
        """Weakest adjacent enemy; equal hit points fall back to reading order."""
        candidates = []
        for p in self.board.neighbors(unit.position):
            other_id = self.board.occupant(p)
            if other_id is None:
                continue
            other = self.registry.get(other_id)
            if other.faction is not unit.faction:
                candidates.append(other)
        if not candidates:
            return None
        return min(candidates, key=lambda u: (u.hp, u.position))

    def _try_attack(self, unit: Unit) -> Tuple[bool, List[Event]]:
        target = self._adjacent_target(unit)
        if target is None:
            return False, []
        return True, self.combat.attack(unit.id, target.id, self.round_no)

    def _try_move(self, unit: Unit, enemies: List[Unit]) -> Tuple[bool, List[Event]]:
        """Take one step toward the nearest reachable engagement cell."""
        engagement = {p for e in enemies for p in self.board.neighbors(e.position)
                      if self.board.is_open(p)}
        dist = distances_from(self.board, unit.position)
        reachable = [(dist[p], p) for p in engagement if p in dist]
        if not reachable:
            return False, []
        _, dest = min(reachable)
        step = best_step(self.board, unit.position, dest)
        if step is None:
            raise InvariantViolation(f"{unit.id} has no step toward reachable {dest}")
        return True, self._move_unit(unit, step)

    def _move_unit(self, unit: Unit, to: Position) -> List[Event]:
        src = unit.position
        if manhattan(src, to) != 1:
            raise InvariantViolation(f"{unit.id} cannot move from {src} to {to}")
        self.board.vacate(src, unit.id)
        self.board.place(to, unit.id)
        unit.position = to
        return [Event("UnitMoved", self.round_no,
                      {"unit_id": unit.id, "from": list(src), "to": list(to)})]

    def _take_turn(self, unit: Unit, enemies: List[Unit]) -> Tuple[bool, List[Event]]:
        attacked, evts = self._try_attack(unit)
        if attacked:
            return True, evts
        moved, evts = self._try_move(unit, enemies)
        if moved:
            _, hit = self._try_attack(unit)
            evts += hit
        return moved, evts

    def step(self) -> List[Event]:
        """Play one round and return its events.

        Turn order is frozen at the start of the round. Units killed earlier in
        the round are skipped. A unit that finds no enemies left ends combat and
        the round is not counted.
        """
        if self.finished:
            raise InvariantViolation("step() called after combat ended")
        evts: List[Event] = []
        acted = False
        for unit_id in self.registry.all_ids_by_position_order():
            unit = self.registry.get(unit_id)
            if unit is None:
                continue
            enemies = self.registry.living(unit.faction.opponent)
            if not enemies:
                self.finished = True
                evts.append(Event("CombatOver", self.round_no,
                                  {"winner": unit.faction.value,
                                   "rounds_completed": self.rounds_completed,
                                   "hp_sum": self.registry.hp_sum()}))
                return evts
            did, turn_evts = self._take_turn(unit, enemies)
            acted = acted or did
            evts += turn_evts
        if not acted:
            raise Stalemate(f"no unit could act in round {self.round_no}")
        self.rounds_completed += 1
        return evts

    def run(self, abort_on_loss: bool = False, record: bool = False) -> Outcome:
        """Play rounds until one faction is wiped out.

        With abort_on_loss, stop after the first round that costs the
        calibrated faction a unit.
        """
        while not self.finished:
            evts = self.step()
            if record:
                self.events += evts
            if abort_on_loss and self.combat.losses[CALIBRATED_FACTION] > 0:
                break
        return self.outcome()

    def winner(self) -> Optional[Faction]:
        if not self.finished:
            return None
        return next(iter(self.registry)).faction

    def outcome(self) -> Outcome:
        return Outcome(power=self.calibrated_power,
                       rounds_completed=self.rounds_completed,
                       surviving_hp_sum=self.registry.hp_sum(),
                       calibrated_faction_losses=self.combat.losses[CALIBRATED_FACTION],
                       winner=self.winner())

    def snapshot(self) -> str:
        """Return the current board as text."""
        return self.board.render(self.registry)
