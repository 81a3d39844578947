#!/usr/bin/env python3
"""
Behavior Engine Demo Script

Registers three decisions under an ALWAYS event and runs a few selection
rounds:
1. "First decision"   - MostUseful, random signal
2. "Another decision" - VeryUseful, random signal
3. "Ignored decision" - Ignore tier, never selected

Run with:
    python demo.py [--rounds 5] [--seed 42] [--verbose]
"""
import argparse
import logging
import random
from enum import IntEnum

from behavior_engine import (
    Consideration,
    DecisionEngine,
    EngineConfig,
    UtilityScore,
    binary,
    identity,
)
from behavior_engine.logging_config import EngineLogAdapter, configure_logging


class Event(IntEnum):
    ALWAYS = 0
    PENALIZED = 1


def print_header(text: str):
    """Print a styled header."""
    print(f"\n{'='*60}")
    print(f"  {text}")
    print(f"{'='*60}\n")


def build_engine(rng: random.Random, config: EngineConfig) -> DecisionEngine:
    """Create the demo engine with its three decisions."""
    engine = DecisionEngine(config=config)

    def report(decision):
        print(f"  -> running '{decision.name}'")

    engine.add_decision(
        "First decision",
        "Some long text",
        UtilityScore.MOST_USEFUL,
        [Event.ALWAYS],
        [Consideration("random", rng.random, identity(), (0.0, 1.0))],
        report,
    )
    engine.add_decision(
        "Another decision",
        "Look, a story",
        UtilityScore.VERY_USEFUL,
        [Event.ALWAYS],
        [Consideration("random", rng.random, identity(), (0.0, 1.0))],
        report,
    )
    engine.add_decision(
        "Ignored decision",
        "Some more text",
        UtilityScore.IGNORE,
        [Event.ALWAYS],
        [Consideration("always true", lambda: 1.0, binary(1.0))],
        lambda d: print("  This is never executed."),
    )

    engine.raise_event(Event.ALWAYS)
    return engine


def main():
    ap = argparse.ArgumentParser(description="Behavior Engine demo")
    ap.add_argument("--rounds", type=int, default=5, help="Selection rounds")
    ap.add_argument("--seed", type=int, default=None, help="Random seed")
    ap.add_argument("--verbose", action="store_true", help="Trace every scored decision")
    args = ap.parse_args()

    config = EngineConfig(
        engine_id="demo",
        trace_scores=args.verbose,
        record_activation=True,
        log_level="DEBUG" if args.verbose else "INFO",
    )
    configure_logging(level=config.log_level)
    engine = build_engine(random.Random(args.seed), config)
    log = EngineLogAdapter(logging.getLogger("demo"), config.engine_id,
                           lambda: engine.tick, subsystem="demo")
    log.event("startup", f"{len(engine.get_active_decisions())} decisions loaded",
              level=logging.INFO)

    for round_no in range(args.rounds):
        print_header(f"Round {round_no}")
        for decision in engine.get_active_decisions():
            print(f"- '{decision.name}' ({int(decision.utility)})")
        chosen = engine.execute_best_decision()
        print(f"Choice: '{chosen.name}'")

        for entry in engine.observer.entries:
            print(f"    {entry.name:<20} {entry.score:+.3f}")


if __name__ == "__main__":
    main()
