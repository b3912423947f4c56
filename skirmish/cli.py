#!/usr/bin/env python3
"""
Grid Skirmish command line runner

Usage:
    skirmish map.txt                      # one battle at baseline power
    skirmish map.txt --power 15           # one battle with stronger elves
    skirmish map.txt --search             # smallest power with no elf losses
    skirmish map.txt --search --workers 4 --batch-size 8
"""

import argparse
import asyncio
from skirmish.engine.errors import MalformedMap
from skirmish.engine.loader import load
from skirmish.engine.model import BASE_ATTACK_POWER, STARTING_HP
from skirmish.engine.search import battle
from skirmish.runtime.runner import SearchRunner

def _report(outcome):
    print(f"Outcome is {outcome.rounds_completed} * {outcome.surviving_hp_sum} = {outcome.value}")

async def _search(state, args):
    runner = SearchRunner(state, batch_size=args.batch_size, workers=args.workers)
    await runner.start()
    try:
        return await runner.search(max_power=args.max_power)
    finally:
        await runner.stop()

def main(argv=None):
    parser = argparse.ArgumentParser(description="Grid Skirmish combat simulator")
    parser.add_argument("map", type=argparse.FileType("r"), help="Map file")
    parser.add_argument("--power", type=int, default=BASE_ATTACK_POWER,
                        help=f"Elf attack power (default: {BASE_ATTACK_POWER})")
    parser.add_argument("--search", action="store_true",
                        help="Find the smallest elf power that wins with no losses")
    parser.add_argument("--max-power", type=int, default=STARTING_HP,
                        help=f"Search bound (default: {STARTING_HP})")
    parser.add_argument("--workers", type=int, default=1, help="Search processes (default: 1)")
    parser.add_argument("--batch-size", type=int, default=4,
                        help="Powers tested per batch (default: 4)")
    parser.add_argument("--verbose", action="store_true", help="Print the final board")
    args = parser.parse_args(argv)

    with args.map as fh:
        text = fh.read()
    try:
        state = load(text)
    except MalformedMap as e:
        parser.error(str(e))

    if args.search:
        power, outcome = asyncio.run(_search(state, args))
        print(f"Elves needed {power} attack power.")
        if args.verbose:
            # same board the winning trial ended on
            print(battle(state, power).snapshot())
    else:
        eng = battle(state, args.power)
        if args.verbose:
            print(eng.snapshot())
        outcome = eng.outcome()
    _report(outcome)
    return 0

if __name__ == "__main__":
    main()
