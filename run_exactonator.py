#!/usr/bin/env python3
"""
EXACTONATOR: closed-form expressions approximating a dimensioned value

Searches expressions built from named constants, small integers and
+ - * / ^ whose value is closest to the target, in the target's dimension.

Usage:
    python3 run_exactonator.py --target 6.2832 --max-int 2
    python3 run_exactonator.py --target "9.1093837e-31 kg" --constants physics.conf
    python3 run_exactonator.py --target 1.618 --max-expr-size 2 --max-int 5 -j 4
    python3 run_exactonator.py --target 2.718 --verify --no-save
"""

import argparse
import sys
from pathlib import Path

from config import SearchConfig
from dimreal import DimensionedValue
from errors import ExactonatorError
from search_engine import SearchEngine


VERSION = "0.3.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find closed-form expressions of constants approximating a value"
    )
    parser.add_argument(
        "--target", type=str, required=True,
        help="Value to approximate, with an optional unit (e.g. '9.8 m/s^2')"
    )
    parser.add_argument(
        "--digits", type=int, default=15,
        help="Significant digits of displayed values (default: 15)"
    )
    parser.add_argument(
        "--max-expr-size", type=int, default=1,
        help="Number of operators wrapped around a seed (default: 1)"
    )
    parser.add_argument(
        "--max-int", type=int, default=0,
        help="Integer literals 1..N take part in the search (default: 0)"
    )
    parser.add_argument(
        "-j", "--threads", type=int, default=1,
        help="Worker threads over the top-level seeds (default: 1)"
    )
    parser.add_argument(
        "--constants", type=Path, default=Path("constants.conf"),
        help="Constants file (default: constants.conf, builtins if missing)"
    )
    parser.add_argument(
        "--save-dir", type=Path, default=Path("save"),
        help="Directory of saved runs and logs (default: save)"
    )
    parser.add_argument(
        "--no-save", action="store_true",
        help="Neither read nor write saved runs"
    )
    parser.add_argument(
        "--top", type=int, default=30,
        help="Number of results shown (default: 30)"
    )
    parser.add_argument(
        "--verify", action="store_true",
        help="Recompute the results independently with sympy"
    )
    parser.add_argument(
        "--prune-trivial", action="store_true",
        help="Skip candidates such as (x * 1) during the search"
    )
    parser.add_argument(
        "--no-simplify", action="store_true",
        help="Display results as generated, without simplification"
    )
    parser.add_argument(
        "-v", "--version", action="version",
        version=f"exactonator version {VERSION}",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = SearchConfig(
            digits=args.digits,
            max_expr_size=args.max_expr_size,
            max_int_constants=args.max_int,
            top_k=args.top,
            thread_count=args.threads,
            simplify_output=not args.no_simplify,
            prune_trivial=args.prune_trivial,
            verify=args.verify,
            constants_file=args.constants,
            save_dir=None if args.no_save else args.save_dir,
        )
        ctx = config.make_context()
        target = DimensionedValue.parse(args.target, ctx)
        print(f"{args.target} : {target.format(5)}")

        engine = SearchEngine(config, ctx=ctx)
        engine.load_constants()
        report = engine.run(target)
    except ExactonatorError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    for display, error in report.ranked:
        print(f"{display} | err: {error}")

    if report.validations:
        failed = [v for v in report.validations if not v.agrees]
        print(f"\nIndependent check: {len(report.validations) - len(failed)}/{len(report.validations)} confirmed")

    return 0


if __name__ == "__main__":
    sys.exit(main())
