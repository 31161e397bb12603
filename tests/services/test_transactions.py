from datetime import date

import pytest

from errors import InvalidArgument, NotFound
from models.period import resolve_period
from models.types import TransactionType
from services import clock
from services.updates import TransactionUpdate
from tests.helpers import insert_raw_transaction


class TestTransactionCreate:
    """Tests for TransactionService.create."""

    def test_create_transaction(self, services, salary_and_food):
        """Test creating a transaction and reading it back."""
        _, food = salary_and_food

        created = services.transactions.create(
            food.id, 12.5, "expense", "Lunch", "2024-03-05", notes="with team"
        )

        assert created.id > 0
        assert created.category_id == food.id
        assert created.amount == 12.5
        assert created.type is TransactionType.EXPENSE
        assert created.description == "Lunch"
        assert created.date == date(2024, 3, 5)
        assert created.notes == "with team"

        found = services.transactions.find(created.id)
        assert found == created

    def test_create_accepts_date_object(self, services, salary_and_food):
        """Test creating a transaction from a date object and an enum type."""
        salary, _ = salary_and_food

        created = services.transactions.create(
            salary.id, 1000, TransactionType.INCOME, "Pay", date(2024, 3, 1)
        )

        assert created.date == date(2024, 3, 1)
        assert created.amount == 1000.0

    def test_create_normalizes_date_string(self, services, salary_and_food, test_db):
        """Test that dates are stored zero-padded."""
        _, food = salary_and_food

        created = services.transactions.create(food.id, 1, "expense", "x", "2024-3-5")

        (stored,) = test_db.execute(
            "SELECT date FROM transactions WHERE id = ?", (created.id,)
        ).fetchone()
        assert stored == "2024-03-05"

    def test_create_assigns_increasing_ids(self, services, salary_and_food):
        """Test that each new transaction gets a larger ID."""
        _, food = salary_and_food

        first = services.transactions.create(food.id, 1, "expense", "a", "2024-03-01")
        second = services.transactions.create(food.id, 2, "expense", "b", "2024-03-01")

        assert second.id > first.id

    def test_create_converts_category_id(self, services, salary_and_food):
        """Test that a numeric string category ID is stored and returned as int."""
        _, food = salary_and_food

        created = services.transactions.create(
            str(food.id), 3, "expense", "Snack", "2024-03-05"
        )

        assert created.category_id == food.id
        assert isinstance(created.category_id, int)
        assert services.transactions.find(created.id).category_id == food.id

    @pytest.mark.parametrize("category_id", ["abc", None])
    def test_create_with_invalid_category_id_raises(
        self, services, salary_and_food, category_id
    ):
        """Test that a category ID that is not an integer is rejected."""
        with pytest.raises(InvalidArgument):
            services.transactions.create(category_id, 3, "expense", "x", "2024-03-05")

    def test_create_with_missing_category_raises(self, services):
        """Test creating a transaction for a category that does not exist."""
        with pytest.raises(NotFound):
            services.transactions.create(999, 10, "expense", "Lunch", "2024-03-05")

    def test_create_with_inactive_category_raises(self, services, salary_and_food):
        """Test that soft-deleted categories accept no new transactions."""
        _, food = salary_and_food
        services.categories.soft_delete(food.id)

        with pytest.raises(NotFound):
            services.transactions.create(food.id, 10, "expense", "Lunch", "2024-03-05")

    def test_create_with_mismatched_type_raises(self, services, salary_and_food):
        """Test that the transaction type must match the category type."""
        salary, _ = salary_and_food

        with pytest.raises(InvalidArgument):
            services.transactions.create(
                salary.id, 10, "expense", "Not income", "2024-03-05"
            )

    @pytest.mark.parametrize("amount", [-1, "abc", None, float("nan"), float("inf")])
    def test_create_with_invalid_amount_raises(self, services, salary_and_food, amount):
        """Test that negative and non-numeric amounts are rejected."""
        _, food = salary_and_food

        with pytest.raises(InvalidArgument):
            services.transactions.create(food.id, amount, "expense", "x", "2024-03-05")

    @pytest.mark.parametrize("value", ["05/03/2024", "2024-13-01", "yesterday", ""])
    def test_create_with_invalid_date_raises(self, services, salary_and_food, value):
        """Test that malformed dates are rejected."""
        _, food = salary_and_food

        with pytest.raises(InvalidArgument):
            services.transactions.create(food.id, 1, "expense", "x", value)

    def test_create_with_unknown_type_raises(self, services, salary_and_food):
        """Test that an unknown transaction type is rejected."""
        _, food = salary_and_food

        with pytest.raises(InvalidArgument):
            services.transactions.create(food.id, 1, "transfer", "x", "2024-03-05")

    def test_injection_text_is_stored_verbatim(self, services, salary_and_food, test_db):
        """Test that SQL in text fields is stored as plain text."""
        salary, food = salary_and_food
        other = services.transactions.create(
            salary.id, 1000, "income", "Pay", "2024-03-01"
        )
        payload = '"); DROP TABLE transactions; --'

        created = services.transactions.create(
            food.id, 5, "expense", payload, "2024-03-02", notes="'; DELETE FROM categories; --"
        )

        found = services.transactions.find(created.id)
        assert found.description == payload
        assert found.notes == "'; DELETE FROM categories; --"
        assert services.transactions.find(other.id).description == "Pay"
        assert len(services.categories.find_all()) == 2
        tables = {
            row[0]
            for row in test_db.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        assert {"transactions", "categories"} <= tables


class TestListInPeriod:
    """Tests for TransactionService.list_in_period."""

    def test_empty_period(self, services):
        """Test listing a month without transactions."""
        assert services.transactions.list_in_period(resolve_period(3, 2024)) == []

    def test_half_open_boundaries(self, services, salary_and_food):
        """Test that the first day is included and the next month's first day is not."""
        _, food = salary_and_food
        for day in ["2024-02-29", "2024-03-01", "2024-03-31", "2024-04-01"]:
            services.transactions.create(food.id, 1, "expense", day, day)

        found = services.transactions.list_in_period(resolve_period(3, 2024))

        assert [t.description for t in found] == ["2024-03-31", "2024-03-01"]

    def test_december_includes_new_years_eve_only(self, services, salary_and_food):
        """Test the December boundary of the listing."""
        _, food = salary_and_food
        services.transactions.create(food.id, 1, "expense", "eve", "2024-12-31")
        services.transactions.create(food.id, 1, "expense", "new year", "2025-01-01")

        found = services.transactions.list_in_period(resolve_period(12, 2024))

        assert [t.description for t in found] == ["eve"]

    def test_ordered_by_date_desc_then_id(self, services, salary_and_food):
        """Test newest-first ordering with ties broken by ID."""
        _, food = salary_and_food
        a = services.transactions.create(food.id, 1, "expense", "a", "2024-03-10")
        b = services.transactions.create(food.id, 1, "expense", "b", "2024-03-20")
        c = services.transactions.create(food.id, 1, "expense", "c", "2024-03-10")

        found = services.transactions.list_in_period(resolve_period(3, 2024))

        assert [t.id for t in found] == [b.id, a.id, c.id]

    def test_filter_by_category_and_type(self, services, salary_and_food):
        """Test filtering by category IDs and by transaction type."""
        salary, food = salary_and_food
        services.transactions.create(salary.id, 1000, "income", "Pay", "2024-03-01")
        services.transactions.create(food.id, 20, "expense", "Lunch", "2024-03-02")

        period = resolve_period(3, 2024)

        by_category = services.transactions.list_in_period(
            period, category_ids=[food.id]
        )
        by_type = services.transactions.list_in_period(
            period, transaction_type="income"
        )

        assert [t.description for t in by_category] == ["Lunch"]
        assert [t.description for t in by_type] == ["Pay"]

    def test_filter_by_search_and_amount(self, services, salary_and_food):
        """Test filtering by search text and by amount range."""
        _, food = salary_and_food
        services.transactions.create(food.id, 4, "expense", "Coffee", "2024-03-01")
        services.transactions.create(
            food.id, 40, "expense", "Dinner", "2024-03-02", notes="coffee after"
        )
        services.transactions.create(food.id, 400, "expense", "Party", "2024-03-03")

        period = resolve_period(3, 2024)

        searched = services.transactions.list_in_period(period, search="COFFEE")
        ranged = services.transactions.list_in_period(
            period, min_amount=10, max_amount=100
        )

        assert {t.description for t in searched} == {"Coffee", "Dinner"}
        assert [t.description for t in ranged] == ["Dinner"]

    def test_search_wildcards_are_literal(self, services, salary_and_food):
        """Test that % and _ in the search text match literally."""
        _, food = salary_and_food
        services.transactions.create(food.id, 1, "expense", "100% beef", "2024-03-01")
        services.transactions.create(food.id, 1, "expense", "Lunch", "2024-03-02")

        found = services.transactions.list_in_period(
            resolve_period(3, 2024), search="%"
        )

        assert [t.description for t in found] == ["100% beef"]

    def test_skips_rows_with_unknown_type(self, services, salary_and_food, test_db):
        """Test that rows with an unknown type are left out of the listing."""
        _, food = salary_and_food
        insert_raw_transaction(test_db, food.id, 5, "transfer", "2024-03-05")
        services.transactions.create(food.id, 5, "expense", "Known", "2024-03-06")

        found = services.transactions.list_in_period(resolve_period(3, 2024))

        assert [t.description for t in found] == ["Known"]


class TestUnknownStoredType:
    """Tests for rows whose stored type is neither income nor expense."""

    def test_find_raises_invalid_argument(self, services, salary_and_food, test_db):
        """Test that finding a row with an unknown type raises InvalidArgument."""
        _, food = salary_and_food
        txn_id = insert_raw_transaction(test_db, food.id, 5, "transfer", "2024-03-20")

        with pytest.raises(InvalidArgument, match="transfer"):
            services.transactions.find(txn_id)

    def test_update_type_repairs_row(self, services, salary_and_food, test_db):
        """Test that supplying a transaction type repairs an unknown stored type."""
        _, food = salary_and_food
        txn_id = insert_raw_transaction(test_db, food.id, 5, "transfer", "2024-03-20")

        repaired = services.transactions.update_partial(
            txn_id, TransactionUpdate(transaction_type="expense")
        )

        assert repaired.id == txn_id
        assert repaired.type is TransactionType.EXPENSE
        assert repaired.amount == 5.0
        assert services.transactions.find(txn_id) == repaired

        period = resolve_period(3, 2024)
        assert [t.id for t in services.transactions.list_in_period(period)] == [txn_id]
        assert services.summary.summarize(period).total_expenses == 5.0

    def test_repair_checks_category_type(self, services, salary_and_food, test_db):
        """Test that repairing to a type that mismatches the category is rejected."""
        _, food = salary_and_food
        txn_id = insert_raw_transaction(test_db, food.id, 5, "transfer", "2024-03-20")

        with pytest.raises(InvalidArgument):
            services.transactions.update_partial(
                txn_id, TransactionUpdate(transaction_type="income")
            )

        (stored,) = test_db.execute(
            "SELECT type FROM transactions WHERE id = ?", (txn_id,)
        ).fetchone()
        assert stored == "transfer"

    @pytest.mark.parametrize(
        "changes", [TransactionUpdate(), TransactionUpdate(amount=7)]
    )
    def test_update_without_type_raises(
        self, services, salary_and_food, test_db, changes
    ):
        """Test that updates which leave the unknown type in place are rejected."""
        _, food = salary_and_food
        txn_id = insert_raw_transaction(test_db, food.id, 5, "transfer", "2024-03-20")

        with pytest.raises(InvalidArgument):
            services.transactions.update_partial(txn_id, changes)

        (amount,) = test_db.execute(
            "SELECT amount FROM transactions WHERE id = ?", (txn_id,)
        ).fetchone()
        assert amount == 5


class TestUpdatePartial:
    """Tests for TransactionService.update_partial."""

    def test_update_amount_only(self, services, salary_and_food, monkeypatch):
        """Test changing only the amount of a transaction."""
        _, food = salary_and_food
        monkeypatch.setattr(clock, "now_iso", lambda: "2024-03-05T08:00:00+00:00")
        original = services.transactions.create(
            food.id, 12.5, "expense", "Lunch", "2024-03-05", notes="team"
        )

        monkeypatch.setattr(clock, "now_iso", lambda: "2024-03-06T09:00:00+00:00")
        updated = services.transactions.update_partial(
            original.id, TransactionUpdate(amount=15)
        )

        assert updated.amount == 15.0
        assert updated.description == original.description
        assert updated.date == original.date
        assert updated.notes == original.notes
        assert updated.category_id == original.category_id
        assert updated.type == original.type
        assert updated.created_at == original.created_at
        assert updated.updated_at > original.updated_at

    def test_clear_notes_with_explicit_none(self, services, salary_and_food):
        """Test that an explicit None clears the notes."""
        _, food = salary_and_food
        txn = services.transactions.create(
            food.id, 1, "expense", "x", "2024-03-05", notes="remove me"
        )

        updated = services.transactions.update_partial(
            txn.id, TransactionUpdate(notes=None)
        )

        assert updated.notes is None
        assert updated.description == "x"

    def test_required_field_cannot_be_cleared(self, services, salary_and_food):
        """Test that required fields cannot be set to None."""
        _, food = salary_and_food
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-05")

        with pytest.raises(InvalidArgument):
            services.transactions.update_partial(
                txn.id, TransactionUpdate(description=None)
            )

    def test_no_fields_is_a_noop(self, services, salary_and_food, monkeypatch, test_db):
        """Test that an empty update writes nothing."""
        _, food = salary_and_food
        monkeypatch.setattr(clock, "now_iso", lambda: "2024-03-05T08:00:00+00:00")
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-05")

        monkeypatch.setattr(clock, "now_iso", lambda: "2030-01-01T00:00:00+00:00")
        changes_before = test_db.total_changes
        result = services.transactions.update_partial(txn.id, TransactionUpdate())

        assert result == txn
        assert test_db.total_changes == changes_before
        assert services.transactions.find(txn.id).updated_at == (
            "2024-03-05T08:00:00+00:00"
        )

    def test_update_missing_transaction_raises(self, services):
        """Test updating a transaction that does not exist."""
        with pytest.raises(NotFound):
            services.transactions.update_partial(999, TransactionUpdate(amount=1))

    def test_update_missing_transaction_with_no_fields_raises(self, services):
        """Test that an empty update of an unknown ID still raises NotFound."""
        with pytest.raises(NotFound):
            services.transactions.update_partial(999, TransactionUpdate())

    def test_move_to_category_of_other_type_raises(self, services, salary_and_food):
        """Test that moving to a category of the other type is rejected."""
        salary, food = salary_and_food
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-05")

        with pytest.raises(InvalidArgument):
            services.transactions.update_partial(
                txn.id, TransactionUpdate(category_id=salary.id)
            )

        assert services.transactions.find(txn.id).category_id == food.id

    def test_change_category_and_type_together(self, services, salary_and_food):
        """Test switching category and type in one update."""
        salary, food = salary_and_food
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-05")

        updated = services.transactions.update_partial(
            txn.id,
            TransactionUpdate(category_id=salary.id, transaction_type="income"),
        )

        assert updated.category_id == salary.id
        assert updated.type is TransactionType.INCOME

    def test_move_to_missing_category_raises(self, services, salary_and_food):
        """Test moving a transaction to a category that does not exist."""
        _, food = salary_and_food
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-05")

        with pytest.raises(NotFound):
            services.transactions.update_partial(
                txn.id, TransactionUpdate(category_id=999)
            )

    def test_update_date_moves_between_periods(self, services, salary_and_food):
        """Test that changing the date moves the row to another month."""
        _, food = salary_and_food
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-31")

        services.transactions.update_partial(txn.id, TransactionUpdate(date="2024-04-01"))

        assert services.transactions.list_in_period(resolve_period(3, 2024)) == []
        assert len(services.transactions.list_in_period(resolve_period(4, 2024))) == 1

    def test_injection_through_update_is_stored_verbatim(
        self, services, salary_and_food
    ):
        """Test that SQL passed through an update is stored as plain text."""
        salary, food = salary_and_food
        other = services.transactions.create(salary.id, 1, "income", "Pay", "2024-03-01")
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-05")
        payload = "x', amount = 0 WHERE 1=1; --"

        services.transactions.update_partial(txn.id, TransactionUpdate(description=payload))

        assert services.transactions.find(txn.id).description == payload
        assert services.transactions.find(other.id).amount == 1.0
        assert services.transactions.find(other.id).description == "Pay"


class TestDelete:
    """Tests for TransactionService.delete."""

    def test_delete_existing(self, services, salary_and_food):
        """Test deleting a transaction."""
        _, food = salary_and_food
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-05")

        assert services.transactions.delete(txn.id) is True
        assert services.transactions.find(txn.id) is None

    def test_delete_missing_returns_false(self, services):
        """Test deleting a transaction that does not exist."""
        assert services.transactions.delete(999) is False

    def test_delete_twice(self, services, salary_and_food):
        """Test that the second delete of the same ID reports False."""
        _, food = salary_and_food
        txn = services.transactions.create(food.id, 1, "expense", "x", "2024-03-05")

        assert services.transactions.delete(txn.id) is True
        assert services.transactions.delete(txn.id) is False

    def test_delete_leaves_other_rows(self, services, salary_and_food):
        """Test that delete removes only the given transaction."""
        _, food = salary_and_food
        keep = services.transactions.create(food.id, 1, "expense", "keep", "2024-03-05")
        drop = services.transactions.create(food.id, 1, "expense", "drop", "2024-03-05")

        services.transactions.delete(drop.id)

        assert services.transactions.find(keep.id) is not None
