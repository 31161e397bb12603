"""Category service for database operations."""

import json
from typing import List, Optional

from config import get_seed_dir
from errors import InvalidArgument, NotFound, storage_errors
from logger import get_logger
from models.category import Category
from models.types import CategoryType
from services import clock

logger = get_logger()

_CATEGORY_SELECT_FIELDS = (
    "id, name, type, color, icon, parent_id, is_active, created_at, updated_at"
)


class CategoryService:
    """Service for managing categories.

    Categories are never physically removed; ``soft_delete`` hides them
    from listings while transactions that reference them stay readable.
    """

    def __init__(self, db_manager):
        """Initialize the category service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def list_active(self) -> List[Category]:
        """Get all active categories.

        Returns:
            List of Category objects, ordered by name.
        """
        with storage_errors("list categories"), self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_CATEGORY_SELECT_FIELDS}
                FROM categories
                WHERE is_active = 1
                ORDER BY name, id
                """
            )
            return [self._row_to_category(row) for row in cursor.fetchall()]

    def find_all(self) -> List[Category]:
        """Get every category, including soft-deleted ones.

        Returns:
            List of Category objects, ordered by name.
        """
        with storage_errors("list categories"), self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories ORDER BY name, id"
            )
            return [self._row_to_category(row) for row in cursor.fetchall()]

    def find(self, category_id: int) -> Optional[Category]:
        """Get a single category by ID, including inactive ones.

        Args:
            category_id: The category ID to find.

        Returns:
            Category object if found, None otherwise.
        """
        with storage_errors("find category"), self.db_manager.connect() as conn:
            return self._find(conn, category_id)

    def find_by_name(self, name: str) -> Optional[Category]:
        """Get a single active category by name (case-sensitive).

        Args:
            name: The category name to find.

        Returns:
            Category object if found, None otherwise.
        """
        with storage_errors("find category"), self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_CATEGORY_SELECT_FIELDS}
                FROM categories
                WHERE name = ? AND is_active = 1
                ORDER BY id
                """,
                (name,),
            )
            row = cursor.fetchone()
            return self._row_to_category(row) if row else None

    def create(
        self,
        name: str,
        category_type,
        color: str,
        icon: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Category:
        """Create a new category.

        Args:
            name: Category name, must not be blank.
            category_type: CategoryType or its string value.
            color: Display color.
            icon: Optional display glyph.
            parent_id: Optional parent category ID.

        Returns:
            The created Category object with id and timestamps populated.

        Raises:
            InvalidArgument: If the name is blank or the type is unknown.
            NotFound: If parent_id does not reference a category.
            StorageError: If the insert fails.
        """
        name = self._validate_name(name)
        category_type = CategoryType.parse(category_type)
        now = clock.now_iso()

        with storage_errors("create category"), self.db_manager.connect() as conn:
            if parent_id is not None:
                self._require_exists(conn, parent_id)

            cursor = conn.execute(
                """
                INSERT INTO categories
                    (name, type, color, icon, parent_id, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 1, ?, ?)
                """,
                (name, category_type.value, color, icon, parent_id, now, now),
            )
            conn.commit()
            category_id = cursor.lastrowid

        logger.debug(f"Created category {category_id} ({name})")
        return Category(
            id=category_id,
            name=name,
            category_type=category_type,
            color=color,
            icon=icon,
            parent_id=parent_id,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def update(
        self,
        category_id: int,
        name: str,
        category_type,
        color: str,
        icon: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Category:
        """Replace the editable fields of an existing category.

        Args:
            category_id: The category ID to update.
            name: New category name.
            category_type: New category type.
            color: New color.
            icon: New icon (can be None).
            parent_id: New parent category ID (can be None).

        Returns:
            The updated Category object.

        Raises:
            InvalidArgument: If the name is blank, the type is unknown or
                the category would become its own parent.
            NotFound: If the category or the new parent does not exist.
            StorageError: If the update fails.
        """
        name = self._validate_name(name)
        category_type = CategoryType.parse(category_type)
        if parent_id is not None and parent_id == category_id:
            raise InvalidArgument("A category cannot be its own parent")
        now = clock.now_iso()

        with storage_errors("update category"), self.db_manager.connect() as conn:
            if parent_id is not None:
                self._require_exists(conn, parent_id)

            cursor = conn.execute(
                """
                UPDATE categories
                SET name = ?, type = ?, color = ?, icon = ?, parent_id = ?, updated_at = ?
                WHERE id = ?
                """,
                (name, category_type.value, color, icon, parent_id, now, category_id),
            )
            conn.commit()

            if cursor.rowcount == 0:
                raise NotFound(f"Category with ID {category_id} not found")

            logger.debug(f"Updated category {category_id}")
            return self._find(conn, category_id)

    def soft_delete(self, category_id: int) -> None:
        """Mark a category inactive.

        Does not cascade to transactions or child categories. Deleting an
        already inactive category is allowed and leaves it inactive.

        Args:
            category_id: The category ID to deactivate.

        Raises:
            NotFound: If no category has this ID.
            StorageError: If the update fails.
        """
        with storage_errors("delete category"), self.db_manager.connect() as conn:
            cursor = conn.execute(
                "UPDATE categories SET is_active = 0, updated_at = ? WHERE id = ?",
                (clock.now_iso(), category_id),
            )
            conn.commit()

            if cursor.rowcount == 0:
                raise NotFound(f"Category with ID {category_id} not found")

        logger.debug(f"Soft-deleted category {category_id}")

    def seed_defaults(self) -> int:
        """Insert the bundled default categories into an empty table.

        Returns:
            Number of categories created; 0 if any category already exists
            (active or not).
        """
        seed_file = get_seed_dir() / "categories.json"
        with open(seed_file, "r", encoding="utf-8") as f:
            defaults = json.load(f)

        now = clock.now_iso()
        with storage_errors("seed categories"), self.db_manager.connect() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM categories").fetchone()
            if count > 0:
                logger.info("Categories already present, skipping defaults")
                return 0

            conn.executemany(
                """
                INSERT INTO categories
                    (name, type, color, icon, parent_id, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, NULL, 1, ?, ?)
                """,
                [
                    (
                        item["name"],
                        CategoryType.parse(item["type"]).value,
                        item["color"],
                        item.get("icon"),
                        now,
                        now,
                    )
                    for item in defaults
                ],
            )
            conn.commit()

        logger.info(f"Seeded {len(defaults)} default categories")
        return len(defaults)

    def _find(self, conn, category_id: int) -> Optional[Category]:
        cursor = conn.execute(
            f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE id = ?",
            (category_id,),
        )
        row = cursor.fetchone()
        return self._row_to_category(row) if row else None

    def _require_exists(self, conn, category_id: int) -> None:
        row = conn.execute(
            "SELECT 1 FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        if row is None:
            raise NotFound(f"Category with ID {category_id} not found")

    @staticmethod
    def _validate_name(name: str) -> str:
        if name is None or not str(name).strip():
            raise InvalidArgument("Category name cannot be empty")
        return str(name).strip()

    @staticmethod
    def _row_to_category(row: tuple) -> Category:
        """Convert a database row to a Category object."""
        return Category(
            id=row[0],
            name=row[1],
            category_type=CategoryType(row[2]),
            color=row[3],
            icon=row[4],
            parent_id=row[5],
            is_active=bool(row[6]),
            created_at=row[7],
            updated_at=row[8],
        )
