from fastapi import FastAPI, HTTPException
from skirmish.engine.engine import Engine
from skirmish.engine.errors import MalformedMap, SearchExhausted
from skirmish.engine.loader import load
from skirmish.runtime.runner import SearchRunner
from .schemas import (EventsResponse, LoadRequest, OutcomeOut, SearchRequest, SearchResponse,
                      SimulateRequest)

app = FastAPI(title="Grid Skirmish API")
runner: SearchRunner | None = None

def _require_runner() -> SearchRunner:
    if not runner:
        raise HTTPException(400, "Battle not loaded")
    return runner

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Grid Skirmish API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.on_event("shutdown")
async def shutdown():
    """Stop the worker pool on app shutdown."""
    global runner
    if runner:
        await runner.stop()

@app.post("/battle/load")
async def load_battle(req: LoadRequest):
    """Parse a map and set up a fresh runner for it."""
    try:
        state = load(req.grid)
    except MalformedMap as e:
        raise HTTPException(400, str(e))
    await shutdown()
    global runner
    runner = SearchRunner(state, batch_size=req.batch_size, workers=req.workers)
    await runner.start()
    print(f"[API] Loaded {state.width}x{state.height} map with {len(state.units)} units")
    return {"battle_id": "local", "width": state.width, "height": state.height,
            "units": len(state.units)}

@app.get("/battle/local/state")
async def get_state():
    """Get the starting board of the loaded battle."""
    r = _require_runner()
    s = r.state
    eng = Engine(s)
    return {
        "width": s.width,
        "height": s.height,
        "units": [
            {"id": u.id, "faction": u.faction.value, "pos": list(u.position), "hp": u.hp}
            for u in eng.registry.living()
        ],
        "board": eng.snapshot().splitlines(),
    }

@app.post("/battle/local/simulate")
async def post_simulate(req: SimulateRequest) -> OutcomeOut:
    """Run one simulation at the given power and log its events."""
    r = _require_runner()
    outcome = await r.simulate(req.power, abort_on_loss=req.abort_on_loss)
    return OutcomeOut.from_outcome(outcome)

@app.post("/battle/local/search")
async def post_search(req: SearchRequest) -> SearchResponse:
    """Find the smallest attack power that wins without losses."""
    r = _require_runner()
    try:
        power, outcome = await r.search(start=req.start, max_power=req.max_power)
    except SearchExhausted as e:
        raise HTTPException(409, str(e))
    return SearchResponse(power=power, outcome=OutcomeOut.from_outcome(outcome))

@app.get("/battle/local/runs")
async def get_runs():
    """List recorded simulations and their event offsets."""
    r = _require_runner()
    return {"runs": [{"power": p, "start": lo, "end": hi} for p, (lo, hi) in r.events.runs().items()]}

@app.get("/battle/local/events")
async def get_events(since: int = 0, limit: int = 500, power: int | None = None):
    """Get events since offset, optionally only from one power's run."""
    r = _require_runner()
    try:
        evts, next_offset = r.events.since(since, limit, power=power)
    except KeyError:
        raise HTTPException(404, f"No recorded run for power {power}")
    return EventsResponse(
        next_offset=next_offset,
        events=[{"kind": e.kind, "round": e.round, "data": e.data} for e in evts]
    )
