#!/usr/bin/env python3
"""Feed a simulated walk through the sampler and print the stored history.

Useful to see merge and eviction behaviour without a real positioning
source.  By default everything runs against the in-memory store; pass
``--remote`` to write to the database configured via ``GEOTRAIL_*``
environment variables.

Usage
-----
::

    python scripts/simulate_walk.py --steps 40 --capacity 10
    python scripts/simulate_walk.py --remote --steps 5

Options::

    --steps N          Number of fixes to generate (default 30)
    --step-meters M    Distance moved per fix (default 25)
    --pause-every K    Stand still for K fixes after every K moves (default 5)
    --capacity C       Retention ceiling for the in-memory run
    --remote           Use the REST store from the environment
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import math
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from geotrail import (  # noqa: E402
    InMemoryRemoteStore,
    PositionFix,
    PositionSampler,
    RetentionStore,
    TrailClient,
    TrailConfig,
    XorCodec,
    route_summary,
)

_METERS_PER_DEG_LAT = 111_195.0


class _WalkSource:
    """Walks north-east, pausing in place every few steps."""

    def __init__(self, steps: int, step_meters: float, pause_every: int) -> None:
        self._steps = steps
        self._step_deg = step_meters / _METERS_PER_DEG_LAT / math.sqrt(2)
        self._pause_every = max(pause_every, 1)
        self._tick = 0
        self._lat = 52.3676
        self._lon = 4.9041
        self._clock_ms = 1_700_000_000_000
        self.done = asyncio.Event()

    async def current_fix(self) -> PositionFix | None:
        self._tick += 1
        if self._tick >= self._steps:
            self.done.set()
        self._clock_ms += 30_000
        # Every other block of ``pause_every`` ticks is spent standing still.
        if (self._tick // self._pause_every) % 2 == 0:
            self._lat += self._step_deg
            self._lon += self._step_deg
        if self._tick % 11 == 0:
            return None
        return PositionFix(latitude=self._lat, longitude=self._lon, sampled_at=self._clock_ms)


async def _simulate(retention: RetentionStore, args: argparse.Namespace) -> None:
    source = _WalkSource(args.steps, args.step_meters, args.pause_every)
    sampler = PositionSampler(source, retention, interval=0.001)
    await sampler.run(source.done)

    records = await retention.load_all()
    for record in records:
        print(f"{record.timestamp}  {record.latitude:.6f}, {record.longitude:.6f}  {record.id}")
    summary = route_summary(records)
    print(f"\n{summary.points} stored point(s) from {args.steps} fixes, {summary.total_distance_meters:.0f} m route")


async def _main(args: argparse.Namespace) -> int:
    if args.remote:
        async with TrailClient(TrailConfig.from_env()) as client:
            await _simulate(client.retention, args)
        return 0

    retention = RetentionStore(InMemoryRemoteStore(), XorCodec("simulation"), capacity=args.capacity)
    await _simulate(retention, args)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate a walk through the geotrail sampler")
    parser.add_argument("--steps", type=int, default=30)
    parser.add_argument("--step-meters", type=float, default=25.0)
    parser.add_argument("--pause-every", type=int, default=5)
    parser.add_argument("--capacity", type=int, default=1000)
    parser.add_argument("--remote", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    return asyncio.run(_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
