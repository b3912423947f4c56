"""Breadth-first search over open cells, with reading-order tie breaks."""

from collections import deque
from typing import Dict, Optional
import numpy as np
from .board import Board
from .model import Position

UNREACHABLE = -1

def manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])

def _flood(board: Board, seed: Position) -> np.ndarray:
    """
    Step counts from seed to every open cell it can reach.

    The seed is expanded even when a unit stands on it, so a search can start
    from a unit's own cell or from the cell next to an enemy.
    """
    dist = np.full((board.height, board.width), UNREACHABLE, dtype=np.int64)
    dist[seed] = 0
    frontier = deque([seed])
    while frontier:
        current = frontier.popleft()
        step = int(dist[current]) + 1
        for nxt in board.neighbors(current):
            if dist[nxt] == UNREACHABLE and board.is_open(nxt):
                dist[nxt] = step
                frontier.append(nxt)
    return dist

def distances_from(board: Board, source: Position) -> Dict[Position, int]:
    """Shortest-path distance to every reachable cell. Unreachable cells are absent."""
    dist = _flood(board, source)
    return {(int(r), int(c)): int(dist[r, c]) for r, c in np.argwhere(dist != UNREACHABLE)}

def best_step(board: Board, start: Position, goal: Position) -> Optional[Position]:
    """
    The open neighbor of start that is closest to goal.

    Distances are measured from the goal, so ties between equally short
    routes fall to the neighbor that comes first in reading order. Returns
    None if goal cannot be reached.
    """
    costs = _flood(board, goal)
    candidates = [p for p in board.neighbors(start)
                  if board.is_open(p) and costs[p] != UNREACHABLE]
    if not candidates:
        return None
    return min(candidates, key=lambda p: (int(costs[p]), p))
