#!/usr/bin/env python3

import sys
from pathlib import Path
from errors import BudgetError, InvalidArgument
from logger import get_logger
from models.period import resolve_period
from services.updates import TransactionUpdate
from tools.transactions import write_transactions_csv

logger = get_logger()


def parse_month(value: str):
    """Parse a "YYYY/MM" string into a Period.

    Raises:
        InvalidArgument: If the string is malformed or the month is out of range.
    """
    try:
        year, month = value.split("/")
        year = int(year)
        month = int(month)
    except ValueError:
        raise InvalidArgument(
            f"Invalid month {value!r}; use YYYY/MM (e.g., 2024/03)"
        ) from None
    return resolve_period(month, year)


def cmd_list(args, services):
    """List transactions for a month."""
    try:
        period = parse_month(args.month)
        transactions = services.transactions.list_in_period(
            period,
            category_ids=args.category_id,
            transaction_type=args.type,
            search=args.search,
            min_amount=args.min_amount,
            max_amount=args.max_amount,
        )
    except BudgetError as e:
        logger.error(str(e))
        sys.exit(1)

    if not transactions:
        logger.info(f"No transactions found for {period.key}.")
        return

    categories = {c.id: c.name for c in services.categories.find_all()}

    logger.info(f"\nTransactions for {period.key}:")
    logger.info("=" * 80)
    for t in transactions:
        sign = "+" if t.type.value == "income" else "-"
        category_name = categories.get(t.category_id, "Unknown")
        logger.info(
            f"[{t.id}] {t.date.isoformat()}  {sign}{t.amount:>10.2f}  "
            f"{category_name:<20} {t.description}"
        )
        if t.notes:
            logger.info(f"      Notes: {t.notes}")

    logger.info("-" * 80)
    logger.info(f"Total transactions: {len(transactions)}")


def cmd_add(args, services):
    """Add a transaction."""
    try:
        transaction = services.transactions.create(
            category_id=args.category_id,
            amount=args.amount,
            transaction_type=args.type,
            description=args.description,
            date=args.date,
            notes=args.notes,
        )
    except BudgetError as e:
        logger.error(f"Error creating transaction: {e}")
        sys.exit(1)

    logger.info(f"✓ Transaction created successfully with ID: {transaction.id}")


def cmd_edit(args, services):
    """Change only the fields given on the command line."""
    changes = TransactionUpdate()
    if args.category_id is not None:
        changes.category_id = args.category_id
    if args.amount is not None:
        changes.amount = args.amount
    if args.type is not None:
        changes.transaction_type = args.type
    if args.description is not None:
        changes.description = args.description
    if args.date is not None:
        changes.date = args.date
    if args.clear_notes:
        changes.notes = None
    elif args.notes is not None:
        changes.notes = args.notes

    if not changes.supplied():
        logger.info("Nothing to update.")
        return

    try:
        transaction = services.transactions.update_partial(
            args.transaction_id, changes
        )
    except BudgetError as e:
        logger.error(f"Error updating transaction: {e}")
        sys.exit(1)

    logger.info(f"✓ Transaction {transaction.id} updated")
    logger.info(f"  Date: {transaction.date.isoformat()}")
    logger.info(f"  Amount: {transaction.amount:.2f} ({transaction.type.value})")
    logger.info(f"  Description: {transaction.description}")


def cmd_delete(args, services):
    """Delete a transaction by ID."""
    try:
        deleted = services.transactions.delete(args.transaction_id)
    except BudgetError as e:
        logger.error(f"Error deleting transaction: {e}")
        sys.exit(1)

    if deleted:
        logger.info(f"✓ Transaction {args.transaction_id} deleted")
    else:
        logger.info(f"Transaction {args.transaction_id} does not exist; nothing deleted")


def cmd_export(args, services):
    """Export a month of transactions to CSV."""
    try:
        period = parse_month(args.month)
        transactions = services.transactions.list_in_period(period)
    except BudgetError as e:
        logger.error(str(e))
        sys.exit(1)

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = services.config.export_dir / (
            f"transactions-{period.start.year:04d}-{period.start.month:02d}.csv"
        )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    categories = services.categories.find_all()

    with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
        count = write_transactions_csv(transactions, categories, csvfile)

    logger.info(f"✓ Exported {count} transaction(s) to: {output_path}")


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Manage transactions",
        description="Add, edit, delete, list and export transactions",
    )

    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    # transactions list
    list_parser = transactions_subparsers.add_parser(
        "list",
        help="List transactions for a month",
        epilog="""
Examples:
  python -m cli transactions list --month 2024/03
  python -m cli transactions list --month 2024/03 --type expense --search coffee
        """,
    )
    list_parser.add_argument(
        "--month", required=True, help="Month in YYYY/MM format (e.g., 2024/03)"
    )
    list_parser.add_argument(
        "--category-id",
        type=int,
        action="append",
        help="Only show this category (repeatable)",
    )
    list_parser.add_argument("--type", choices=["income", "expense"])
    list_parser.add_argument("--search", help="Text to find in description or notes")
    list_parser.add_argument("--min-amount", type=float)
    list_parser.add_argument("--max-amount", type=float)
    list_parser.set_defaults(func=cmd_list)

    # transactions add
    add_parser = transactions_subparsers.add_parser(
        "add",
        help="Add a transaction",
        epilog="""
Examples:
  python -m cli transactions add --category-id 3 --amount 12.50 --type expense \\
      --description "Lunch" --date 2024-03-05
        """,
    )
    add_parser.add_argument("--category-id", type=int, required=True)
    add_parser.add_argument("--amount", type=float, required=True)
    add_parser.add_argument("--type", choices=["income", "expense"], required=True)
    add_parser.add_argument("--description", required=True)
    add_parser.add_argument("--date", required=True, help="Date in YYYY-MM-DD format")
    add_parser.add_argument("--notes")
    add_parser.set_defaults(func=cmd_add)

    # transactions edit
    edit_parser = transactions_subparsers.add_parser(
        "edit",
        help="Update selected fields of a transaction",
        description="Only the options given are changed; everything else is kept",
    )
    edit_parser.add_argument("transaction_id", type=int, help="Transaction ID")
    edit_parser.add_argument("--category-id", type=int)
    edit_parser.add_argument("--amount", type=float)
    edit_parser.add_argument("--type", choices=["income", "expense"])
    edit_parser.add_argument("--description")
    edit_parser.add_argument("--date", help="Date in YYYY-MM-DD format")
    notes_group = edit_parser.add_mutually_exclusive_group()
    notes_group.add_argument("--notes")
    notes_group.add_argument(
        "--clear-notes", action="store_true", help="Remove the notes"
    )
    edit_parser.set_defaults(func=cmd_edit)

    # transactions delete
    delete_parser = transactions_subparsers.add_parser(
        "delete", help="Delete a transaction by ID"
    )
    delete_parser.add_argument("transaction_id", type=int, help="Transaction ID")
    delete_parser.set_defaults(func=cmd_delete)

    # transactions export
    export_parser = transactions_subparsers.add_parser(
        "export",
        help="Export a month of transactions to CSV",
        epilog="""
Examples:
  python -m cli transactions export --month 2024/03 --output march.csv
        """,
    )
    export_parser.add_argument(
        "--month", required=True, help="Month in YYYY/MM format (e.g., 2024/03)"
    )
    export_parser.add_argument(
        "--output",
        help="Output CSV file path (defaults to the configured export directory)",
    )
    export_parser.set_defaults(func=cmd_export)
