#!/usr/bin/env python3

import sys
from errors import BudgetError
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List all active categories in the database."""
    categories = services.categories.list_active()

    if not categories:
        logger.info("No categories found.")
        return

    names = {c.id: c.name for c in categories}

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for category in categories:
        icon = f"{category.icon} " if category.icon else ""
        logger.info(f"ID: {category.id}")
        logger.info(f"Name: {icon}{category.name}")
        logger.info(f"Type: {category.category_type.value}")
        logger.info(f"Color: {category.color}")
        if category.parent_id:
            parent_name = names.get(category.parent_id, "Unknown")
            logger.info(f"Parent: {parent_name} (ID: {category.parent_id})")
        logger.info("-" * 80)

    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_create(args, services):
    """Create a new category."""
    try:
        category = services.categories.create(
            args.name, args.type, args.color, args.icon, args.parent_id
        )
    except BudgetError as e:
        logger.error(f"Error creating category: {e}")
        sys.exit(1)

    logger.info(f"\n✓ Category created successfully with ID: {category.id}")
    logger.info(f"  Name: {category.name}")
    logger.info(f"  Type: {category.category_type.value}")
    if category.parent_id:
        logger.info(f"  Parent ID: {category.parent_id}")


def cmd_update(args, services):
    """Update a category; options not given keep their current value."""
    existing = services.categories.find(args.category_id)
    if not existing:
        logger.error(f"Category with ID {args.category_id} not found.")
        sys.exit(1)

    parent_id = existing.parent_id
    if args.no_parent:
        parent_id = None
    elif args.parent_id is not None:
        parent_id = args.parent_id

    try:
        category = services.categories.update(
            existing.id,
            args.name if args.name is not None else existing.name,
            args.type if args.type is not None else existing.category_type,
            args.color if args.color is not None else existing.color,
            args.icon if args.icon is not None else existing.icon,
            parent_id,
        )
    except BudgetError as e:
        logger.error(f"Error updating category: {e}")
        sys.exit(1)

    logger.info(f"✓ Category '{category.name}' updated")


def cmd_delete(args, services):
    """Deactivate a category by ID."""
    category_id = args.category_id

    category = services.categories.find(category_id)
    if not category:
        logger.error(f"Category with ID {category_id} not found.")
        sys.exit(1)

    logger.info("\nCategory to delete:")
    logger.info(f"  ID: {category.id}")
    logger.info(f"  Name: {category.name}")

    if not args.yes:
        confirm = (
            input("\nAre you sure you want to delete this category? (yes/no): ")
            .strip()
            .lower()
        )
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    try:
        services.categories.soft_delete(category_id)
    except BudgetError as e:
        logger.error(f"Error deleting category: {e}")
        sys.exit(1)

    logger.info(f"✓ Category '{category.name}' deleted successfully.")
    logger.info("  Existing transactions keep referring to it.")


def cmd_seed(args, services):
    """Create the default categories in an empty database."""
    try:
        created = services.categories.seed_defaults()
    except BudgetError as e:
        logger.error(f"Error seeding categories: {e}")
        sys.exit(1)

    if created:
        logger.info(f"✓ Created {created} default categories")
    else:
        logger.info("Categories already exist; nothing seeded.")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="Create, list, update and delete transaction categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    # categories list
    list_parser = categories_subparsers.add_parser(
        "list", help="List all active categories"
    )
    list_parser.set_defaults(func=cmd_list)

    # categories create
    create_parser = categories_subparsers.add_parser(
        "create",
        help="Create a new category",
        epilog="""
Examples:
  python -m cli categories create --name Groceries --type expense --color "#FF6B6B"
        """,
    )
    create_parser.add_argument("--name", required=True)
    create_parser.add_argument("--type", choices=["income", "expense"], required=True)
    create_parser.add_argument("--color", default="#95A5A6")
    create_parser.add_argument("--icon")
    create_parser.add_argument("--parent-id", type=int)
    create_parser.set_defaults(func=cmd_create)

    # categories update
    update_parser = categories_subparsers.add_parser(
        "update", help="Update a category by ID"
    )
    update_parser.add_argument("category_id", type=int, help="ID of the category")
    update_parser.add_argument("--name")
    update_parser.add_argument("--type", choices=["income", "expense"])
    update_parser.add_argument("--color")
    update_parser.add_argument("--icon")
    parent_group = update_parser.add_mutually_exclusive_group()
    parent_group.add_argument("--parent-id", type=int)
    parent_group.add_argument(
        "--no-parent", action="store_true", help="Make this a top-level category"
    )
    update_parser.set_defaults(func=cmd_update)

    # categories delete
    delete_parser = categories_subparsers.add_parser(
        "delete", help="Delete (deactivate) a category by ID"
    )
    delete_parser.add_argument(
        "category_id",
        type=int,
        help="ID of the category to delete",
    )
    delete_parser.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt"
    )
    delete_parser.set_defaults(func=cmd_delete)

    # categories seed
    seed_parser = categories_subparsers.add_parser(
        "seed", help="Create the default categories in an empty database"
    )
    seed_parser.set_defaults(func=cmd_seed)
