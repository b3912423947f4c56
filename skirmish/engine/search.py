from typing import Tuple
from .engine import Engine
from .errors import SearchExhausted
from .model import BASE_ATTACK_POWER, STARTING_HP, InitialState, Outcome

def battle(state: InitialState, calibrated_power: int, abort_on_loss: bool = False,
           record: bool = False) -> Engine:
    """Run a fresh simulation and return the finished engine."""
    eng = Engine(state, calibrated_power)
    eng.run(abort_on_loss=abort_on_loss, record=record)
    return eng

def simulate(state: InitialState, calibrated_power: int = BASE_ATTACK_POWER,
             abort_on_loss: bool = False) -> Outcome:
    """Outcome of one independent simulation. Same inputs, same result."""
    return battle(state, calibrated_power, abort_on_loss=abort_on_loss).outcome()

def find_minimal_power(state: InitialState, start: int = BASE_ATTACK_POWER,
                       max_power: int = STARTING_HP,
                       abort_on_loss: bool = True) -> Tuple[int, Outcome]:
    """
    Smallest calibrated attack power that wins without a single loss.

    Powers are tried in ascending order, each on its own board. Once the
    power reaches STARTING_HP every hit kills, so larger values change
    nothing and the default bound is exhaustive.

    Raises:
        SearchExhausted: no power in [start, max_power] gives a clean win
    """
    for power in range(start, max_power + 1):
        outcome = simulate(state, power, abort_on_loss=abort_on_loss)
        if outcome.won_cleanly:
            return power, outcome
    raise SearchExhausted(f"no clean win for attack power {start}..{max_power}")
