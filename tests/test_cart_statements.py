"""
The row lock and the upsert are what make cart commands safe under
concurrency. SQLite cannot exercise them, so the statements are compiled for
PostgreSQL and checked for the right shape.
"""
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from storefront.repos.cart_repo import CartRepo, locked_line_statement, upsert_increment_statement


def _pg_sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestUpsertStatement:
    def test_single_insert_on_conflict_increment(self):
        sql = _pg_sql(upsert_increment_statement(postgresql.insert, user_id=1, product_id=5))

        assert sql.startswith("INSERT INTO cart_items")
        assert "ON CONFLICT (user_id, product_id) DO UPDATE" in sql
        assert "cart_items.quantity +" in sql
        assert "RETURNING cart_items.quantity" in sql


class TestLockedLine:
    def test_select_for_update(self):
        sql = _pg_sql(locked_line_statement(user_id=1, product_id=5))

        assert sql.startswith("SELECT cart_items.quantity")
        assert sql.endswith("FOR UPDATE")


class TestDialectSupport:
    def test_unsupported_dialect(self):
        db = MagicMock()
        db.get_bind.return_value.dialect.name = "mysql"

        with pytest.raises(NotImplementedError):
            CartRepo(db).upsert_increment(1, 5)
