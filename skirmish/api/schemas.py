from typing import Optional
from pydantic import BaseModel, Field
from skirmish.engine.model import BASE_ATTACK_POWER, STARTING_HP, Outcome

class LoadRequest(BaseModel):
    """Battle load request schema."""
    grid: list[str]
    workers: int = Field(default=1, ge=1, le=32)
    batch_size: int = Field(default=4, ge=1, le=64)

class SimulateRequest(BaseModel):
    """Single simulation request schema."""
    power: int = Field(default=BASE_ATTACK_POWER, ge=1)
    abort_on_loss: bool = False

class SearchRequest(BaseModel):
    """Minimal power search request schema."""
    start: int = Field(default=BASE_ATTACK_POWER, ge=1)
    max_power: int = Field(default=STARTING_HP, ge=1)

class OutcomeOut(BaseModel):
    """Outcome of one simulation."""
    power: int
    rounds_completed: int
    surviving_hp_sum: int
    calibrated_faction_losses: int
    winner: Optional[str] = None
    value: int

    @classmethod
    def from_outcome(cls, o: Outcome) -> "OutcomeOut":
        return cls(power=o.power, rounds_completed=o.rounds_completed,
                   surviving_hp_sum=o.surviving_hp_sum,
                   calibrated_faction_losses=o.calibrated_faction_losses,
                   winner=o.winner.value if o.winner else None, value=o.value)

class SearchResponse(BaseModel):
    """Minimal power search response schema."""
    power: int
    outcome: OutcomeOut

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: list[dict]
