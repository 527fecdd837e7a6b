from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from payopt.allocation import PaymentOptimizer
from payopt.loader import LoaderError, load_orders, load_payment_methods
from payopt.report import format_failures, print_report


def _is_json(path: str) -> bool:
    return path.lower().endswith(".json")


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Allocate order payments across payment methods and print the spend per method.")
    p.add_argument("orders", help="JSON file with orders")
    p.add_argument("methods", help="JSON file with payment methods")
    p.add_argument("--log-level", type=str, default="WARNING", help="Logging level, e.g. INFO to see every allocation step")
    args = p.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(message)s")

    if not _is_json(args.orders) or not _is_json(args.methods):
        print("Error: The given files must have the extension: .json.", file=sys.stderr)
        return 2

    try:
        orders = load_orders(args.orders)
        methods = load_payment_methods(args.methods)
        optimizer = PaymentOptimizer(methods)
    except (OSError, LoaderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: invalid payment methods: {e}", file=sys.stderr)
        return 1

    result = optimizer.optimize(orders)

    print_report(result.spendings)
    for line in format_failures(result.failures):
        print(line, file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
