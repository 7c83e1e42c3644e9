#!/usr/bin/env python3
"""
Replay a series of observed ratios through one pool and print the fee/target trajectory.

Each observation is applied one ``min_period`` after the previous one, so
every step passes the cooldown.

Example:
    python tools/fee_sim.py --pool-type STANDARD --initial-fee 500 --ratios 1.0,1.5,1.5,1.2,1.0
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from adaptive_fee.core.engine import FeeEngine
from adaptive_fee.core.errors import FeeEngineError
from adaptive_fee.core.math import WAD
from adaptive_fee.integration.config import DEFAULT_CONFIG_PATH, ConfigError, load_engine_config, parse_wad
from adaptive_fee.integration.cycle import InMemoryFeeLedger, run_adjustment
from adaptive_fee.state.pools import PoolType


class _SimClock:
    def __init__(self, start: int) -> None:
        self.t = start

    def __call__(self) -> int:
        return self.t


def _fmt_wad(x: int) -> str:
    return f"{x / WAD:.6f}"


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    ap.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="engine config YAML")
    ap.add_argument("--pool-type", default="STANDARD", choices=[pt.value for pt in PoolType])
    ap.add_argument("--pool-id", default="sim-pool")
    ap.add_argument("--initial-fee", type=int, required=True, help="initial fee in pips")
    ap.add_argument("--target", default="1", help="initial target ratio (decimal)")
    ap.add_argument("--ratios", required=True, help="comma-separated observed ratios (decimal)")
    ap.add_argument("--start", type=int, default=1_700_000_000, help="simulated start timestamp")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_engine_config(args.config)
        target = parse_wad(args.target, name="--target")
        ratios = [parse_wad(r, name="--ratios") for r in args.ratios.split(",") if r.strip()]
    except ConfigError as exc:
        print(f"[fee-sim] config error: {exc}", file=sys.stderr)
        return 2

    pool_type = PoolType(args.pool_type)
    clock = _SimClock(args.start)
    try:
        engine = FeeEngine.from_config(config, clock=clock)
        engine.configure_pool(args.pool_id, args.initial_fee, target, pool_type)
    except FeeEngineError as exc:
        print(f"[fee-sim] rejected: {exc}", file=sys.stderr)
        return 2
    ledger = InMemoryFeeLedger({args.pool_id: args.initial_fee})
    period = engine.get_pool_type_params(pool_type).min_period

    print(f"{'step':>4} {'observed':>12} {'fee':>8} {'target':>12} {'oob':>8}")
    for i, ratio in enumerate(ratios, start=1):
        clock.t += period
        try:
            out = run_adjustment(engine, args.pool_id, ratio, ledger, ledger)
        except FeeEngineError as exc:
            print(f"[fee-sim] step {i} rejected: {exc}", file=sys.stderr)
            return 2
        oob = f"{out.proposal.oob.streak}/{out.proposal.oob.side.value}"
        print(f"{i:>4} {_fmt_wad(ratio):>12} {out.proposal.proposed_fee:>8} {_fmt_wad(out.state.target_ratio):>12} {oob:>8}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
