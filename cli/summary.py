#!/usr/bin/env python3

import sys
from errors import BudgetError
from logger import get_logger
from cli.transactions import parse_month
from tools.transactions import get_year_overview

logger = get_logger()


def cmd_show(args, services):
    """Show income, expenses and the category breakdown for a month."""
    try:
        period = parse_month(args.month)
        summary = services.summary.summarize(period)
    except BudgetError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"\nBudget summary for {period.key}")
    logger.info("=" * 80)
    logger.info(f"Income:   {summary.total_income:>12.2f}")
    logger.info(f"Expenses: {summary.total_expenses:>12.2f}")
    logger.info(f"Balance:  {summary.balance:>12.2f}")

    if not summary.category_breakdown:
        logger.info("\nNo transactions in this period.")
        return

    logger.info("\nBy category:")
    logger.info("-" * 80)
    for item in summary.category_breakdown:
        logger.info(
            f"{item.category.name:<24} {item.category.category_type.value:<8} "
            f"{item.total:>12.2f} {item.percentage:>6.2f}%  "
            f"({item.transaction_count} transaction(s))"
        )


def cmd_year(args, services):
    """Show month-by-month totals for a year."""
    try:
        overview = get_year_overview(services, args.year)
    except BudgetError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"\nYearly overview for {args.year}")
    logger.info("=" * 80)
    logger.info(f"{'Month':<10} {'Income':>12} {'Expenses':>12} {'Balance':>12}")
    for month_key, summary in overview["months"].items():
        logger.info(
            f"{month_key:<10} {summary.total_income:>12.2f} "
            f"{summary.total_expenses:>12.2f} {summary.balance:>12.2f}"
        )
    logger.info("-" * 80)
    logger.info(
        f"{'Total':<10} {overview['total_income']:>12.2f} "
        f"{overview['total_expenses']:>12.2f} {overview['balance']:>12.2f}"
    )


def setup_parser(subparsers):
    """Setup summary subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "summary",
        help="Budget summaries",
        description="Show monthly and yearly budget summaries",
    )

    summary_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available summary commands",
        dest="subcommand",
        required=True,
    )

    # summary show
    show_parser = summary_subparsers.add_parser(
        "show", help="Show the summary for a month"
    )
    show_parser.add_argument(
        "--month", required=True, help="Month in YYYY/MM format (e.g., 2024/03)"
    )
    show_parser.set_defaults(func=cmd_show)

    # summary year
    year_parser = summary_subparsers.add_parser(
        "year", help="Show monthly totals for a whole year"
    )
    year_parser.add_argument("--year", type=int, required=True)
    year_parser.set_defaults(func=cmd_year)
