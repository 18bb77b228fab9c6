#!/usr/bin/env python
"""
Monitor Runner — Real-Time Sampling From the Command Line

Runs the sampling loop for a fixed duration: every interval the telemetry is
perturbed, scored (remote service first, local fallback) and logged.

Usage:
    python scripts/run_monitor.py --duration 30
    python scripts/run_monitor.py --local --duration 60 --interval 1 --seed 42
    python scripts/run_monitor.py --scenario 2 --export predictions.csv
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import asyncio
import logging
import random

from windsight.config import settings
from windsight.dispatch import PredictionDispatcher, RemoteScoringClient
from windsight.history import HistoryStore
from windsight.realtime import SamplingLoop
from windsight.rules import FaultScorer, Verdict
from windsight.telemetry import SCENARIOS, scenario_records


def print_verdict(verdict: Verdict) -> None:
    components = ", ".join(verdict.affected_components) or "-"
    print(f"[{verdict.label.value.upper():7}] "
          f"p={verdict.probability:.3f} "
          f"conf={verdict.confidence:.3f} | "
          f"components: {components}")


async def run_monitor(url: str, duration: float, interval: float, seed, scenario, export):
    """Run the sampling loop for the given duration."""
    client = RemoteScoringClient(url, timeout=settings.REMOTE_TIMEOUT_S) if url else None
    dispatcher = PredictionDispatcher(
        client=client,
        scorer=FaultScorer(rng=random.Random(seed)),
        fallback_delay=settings.FALLBACK_DELAY_S if client else 0.0,
        remote_timeout=settings.REMOTE_TIMEOUT_S,
    )
    history = HistoryStore(capacity=settings.HISTORY_CAPACITY)
    record = scenario_records(seed=seed)[scenario] if scenario is not None else None
    loop = SamplingLoop(
        dispatcher,
        history,
        record=record,
        interval=interval,
        seed=seed,
        on_verdict=print_verdict,
    )

    print("=" * 60)
    print("WINDSIGHT - REAL-TIME MONITOR")
    print("=" * 60)
    print(f"Scoring:    {url or 'local only'}")
    print(f"Duration:   {duration} seconds")
    print(f"Interval:   {interval} seconds")
    print(f"Scenario:   {SCENARIOS[scenario].name if scenario is not None else 'default'}")
    print("=" * 60)
    print()

    loop.start()
    try:
        await asyncio.sleep(duration)
    finally:
        await loop.shutdown()
        if client is not None:
            client.close()

    summary = history.summary()
    print()
    print("=" * 60)
    print(f"[COMPLETE] {loop.cycles_completed} cycles, "
          f"{loop.cycles_failed} failed, {loop.cycles_skipped} skipped")
    print("           " + ", ".join(f"{label}={count}" for label, count in summary.items()))
    print("=" * 60)

    if export:
        with open(export, "w", encoding="utf-8", newline="") as f:
            f.write(history.export())
        print(f"History written to {export}")


def main():
    parser = argparse.ArgumentParser(
        description="Run the WindSight real-time sampling loop"
    )
    parser.add_argument(
        "--url", "-u",
        type=str,
        default=settings.REMOTE_SCORING_URL,
        help=f"Remote scoring service (default: {settings.REMOTE_SCORING_URL or 'none'})"
    )
    parser.add_argument(
        "--local",
        action="store_true",
        help="Skip the remote service and score locally"
    )
    parser.add_argument(
        "--duration", "-d",
        type=float,
        default=30.0,
        help="Duration in seconds (default: 30)"
    )
    parser.add_argument(
        "--interval", "-i",
        type=float,
        default=settings.SAMPLING_INTERVAL_S,
        help=f"Seconds between cycles (default: {settings.SAMPLING_INTERVAL_S})"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=settings.RANDOM_SEED,
        help="Random seed for a reproducible feed"
    )
    parser.add_argument(
        "--scenario",
        type=int,
        choices=range(len(SCENARIOS)),
        help="Start from a preset scenario (index)"
    )
    parser.add_argument(
        "--export", "-o",
        type=str,
        help="Write the prediction history to this CSV file"
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING)

    try:
        asyncio.run(run_monitor(
            url=None if args.local else args.url,
            duration=args.duration,
            interval=args.interval,
            seed=args.seed,
            scenario=args.scenario,
            export=args.export,
        ))
    except KeyboardInterrupt:
        print("\n[STOPPED] Monitor interrupted by user")


if __name__ == "__main__":
    main()
