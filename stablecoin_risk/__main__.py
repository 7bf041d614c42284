"""
Command line entry point.

Usage:
    python -m stablecoin_risk USDC
    python -m stablecoin_risk DAI --no-cache --pretty
"""

import argparse
import json
import sys

from .core.service import analyze_stablecoin, error_response


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stablecoin_risk",
        description="Score the risk profile of a stablecoin",
    )
    parser.add_argument("ticker", help="Stablecoin ticker, e.g. USDC")
    parser.add_argument("--no-cache", action="store_true", help="Ignore cached results")
    parser.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    indent = 2 if args.pretty else None

    try:
        report = analyze_stablecoin(args.ticker, use_cache=not args.no_cache)
    except Exception as e:
        status, body = error_response(e)
        print(json.dumps({"status": status, **body}, indent=indent), file=sys.stderr)
        return 1

    print(json.dumps(report.to_dict(), indent=indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
