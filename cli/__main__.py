#!/usr/bin/env python3
"""
Budgetbook CLI - track income and expenses against categories.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Manage categories
    transactions Add, edit, list and export transactions
    summary      Monthly and yearly summaries
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli categories seed
    python -m cli transactions add --category-id 1 --amount 1000 --type income \\
        --description "March salary" --date 2024-03-05
    python -m cli summary show --month 2024/03
"""

import sys
import argparse
from cli import categories, migrate, summary, transactions
from config import load_config
from errors import BudgetError
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def build_parser():
    """Build the top-level argument parser with every command registered."""
    parser = argparse.ArgumentParser(
        prog="budgetbook",
        description="Budgetbook - Personal income and expense tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug output on the console as well as in the log file",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    transactions.setup_parser(subparsers)
    summary.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    return parser


def main(argv=None):
    """Main CLI entry point with subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config()
        setup_logging(config, verbose=args.verbose)

        # migrate works on the raw database, everything else via services
        if args.command == "migrate":
            args.func(args, DatabaseManager(config))
        else:
            args.func(args, Services(config))
    except BudgetError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
