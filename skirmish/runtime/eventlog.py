from typing import Dict, List, Optional, Tuple
from skirmish.engine.model import Event

class EventLog:
    """Events of recorded simulations, kept as one run per attack power.

    Offsets are global across the log. Re-recording a power appends a new run
    and points the power at it; older runs stay readable by offset.
    """

    def __init__(self):
        self._log: List[Event] = []
        self._runs: Dict[int, Tuple[int, int]] = {}  # power -> [start, end)

    def record(self, power: int, evts: List[Event]) -> Tuple[int, int]:
        """Append one simulation's events and return its [start, end) offsets."""
        start = len(self._log)
        self._log.extend(evts)
        self._runs[power] = (start, len(self._log))
        return self._runs[power]

    def runs(self) -> Dict[int, Tuple[int, int]]:
        """Latest run offsets per power, in power order."""
        return dict(sorted(self._runs.items()))

    def since(self, offset: int, limit: int = 1000,
              power: Optional[int] = None) -> Tuple[List[Event], int]:
        """Return events from offset, up to limit, optionally within one power's run.

        Raises:
            KeyError: no run has been recorded for power
        """
        lo, hi = (0, len(self._log)) if power is None else self._runs[power]
        offset = max(lo, offset)
        chunk = self._log[offset: max(offset, min(hi, offset + limit))]
        return chunk, offset + len(chunk)

    def __len__(self) -> int:
        return len(self._log)
