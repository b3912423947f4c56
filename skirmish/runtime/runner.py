import asyncio
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from functools import partial
from typing import List, Optional, Tuple
from skirmish.engine.errors import SearchExhausted
from skirmish.engine.model import BASE_ATTACK_POWER, STARTING_HP, InitialState, Outcome
from skirmish.engine.search import battle, simulate
from .eventlog import EventLog

class SearchRunner:
    """Async driver that evaluates attack-power trials in parallel batches."""

    def __init__(self, state: InitialState, batch_size: int = 4, workers: int = 1,
                 executor: Optional[Executor] = None):
        self.state = state
        self.batch_size = max(1, batch_size)
        self.workers = max(1, workers)
        self.events = EventLog()
        self._executor = executor
        self._owns_executor = executor is None
        self._lock = asyncio.Lock()

    async def start(self):
        """Create the worker pool."""
        if self._executor:
            return
        if self.workers > 1:
            self._executor = ProcessPoolExecutor(max_workers=self.workers)
        else:
            self._executor = ThreadPoolExecutor(max_workers=1)
        self._owns_executor = True

    async def stop(self):
        """Shut down the worker pool if this runner created it."""
        if not self._executor:
            return
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        self._executor = None

    async def _run(self, fn, *args):
        if not self._executor:
            await self.start()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn, *args)

    async def simulate(self, power: int = BASE_ATTACK_POWER,
                       abort_on_loss: bool = False) -> Outcome:
        """Run one recorded simulation and log its events."""
        async with self._lock:
            eng = await self._run(partial(battle, abort_on_loss=abort_on_loss, record=True),
                                  self.state, power)
            start, end = self.events.record(power, eng.events)
            print(f"[SearchRunner] power {power}: {eng.rounds_completed} rounds, "
                  f"events {start}..{end}")
            return eng.outcome()

    async def search(self, start: int = BASE_ATTACK_POWER,
                     max_power: int = STARTING_HP) -> Tuple[int, Outcome]:
        """Minimal clean-win power, testing batch_size powers at a time.

        Every power in a batch runs to completion. The smallest clean win in the
        first batch that has one is the answer, since all lower powers have been
        tested and failed.
        """
        async with self._lock:
            for lo in range(start, max_power + 1, self.batch_size):
                powers = list(range(lo, min(lo + self.batch_size, max_power + 1)))
                print(f"[SearchRunner] Trying powers {powers[0]}..{powers[-1]}")
                outcomes: List[Outcome] = await asyncio.gather(
                    *(self._run(partial(simulate, abort_on_loss=True), self.state, p)
                      for p in powers))
                wins = [o for o in outcomes if o.won_cleanly]
                if wins:
                    best = min(wins, key=lambda o: o.power)
                    print(f"[SearchRunner] Minimal power {best.power}, outcome {best.value}")
                    return best.power, best
            raise SearchExhausted(f"no clean win for attack power {start}..{max_power}")

