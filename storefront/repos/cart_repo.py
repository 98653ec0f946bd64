# storefront/repos/cart_repo.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel

_cart = CartItemModel.__table__

_DIALECT_INSERT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_increment_statement(insert_fn, user_id: int, product_id: int):
    """
    INSERT ... ON CONFLICT (user_id, product_id) DO UPDATE SET quantity = quantity + 1
    RETURNING quantity

    Jedno atomowe polecenie, bez read-modify-write.
    """
    stmt = insert_fn(_cart).values(
        user_id=user_id,
        product_id=product_id,
        quantity=1,
        added_at=datetime.now(timezone.utc),
    )
    return stmt.on_conflict_do_update(
        index_elements=[_cart.c.user_id, _cart.c.product_id],
        set_={"quantity": _cart.c.quantity + 1},
    ).returning(_cart.c.quantity)


def locked_line_statement(user_id: int, product_id: int):
    #SELECT quantity ... FOR UPDATE, blokada wiersza do konca transakcji
    return (
        select(_cart.c.quantity)
        .where(_cart.c.user_id == user_id, _cart.c.product_id == product_id)
        .with_for_update()
    )


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def _insert_fn(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _DIALECT_INSERT[dialect]
        except KeyError:
            raise NotImplementedError(f"Cart upsert not supported on {dialect}")

    def upsert_increment(self, user_id: int, product_id: int) -> int:
        stmt = upsert_increment_statement(self._insert_fn(), user_id, product_id)
        return self.db.execute(stmt).scalar_one()

    def lock_line_quantity(self, user_id: int, product_id: int) -> int | None:
        return self.db.execute(locked_line_statement(user_id, product_id)).scalar_one_or_none()

    def decrement_line(self, user_id: int, product_id: int) -> int:
        stmt = (
            update(_cart)
            .where(_cart.c.user_id == user_id, _cart.c.product_id == product_id)
            .values(quantity=_cart.c.quantity - 1)
            .returning(_cart.c.quantity)
        )
        return self.db.execute(stmt).scalar_one()

    def delete_line(self, user_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(_cart).where(_cart.c.user_id == user_id, _cart.c.product_id == product_id)
        )
        return result.rowcount

    def delete_all(self, user_id: int) -> int:
        result = self.db.execute(delete(_cart).where(_cart.c.user_id == user_id))
        return result.rowcount

    def get_lines(self, user_id: int) -> List[dict]:
        """Koszyk zlaczony z katalogiem: tytul/cena/obrazek zawsze aktualne."""
        rows = self.db.execute(
            select(
                ProductModel.id.label("product_id"),
                ProductModel.title,
                ProductModel.price,
                ProductModel.image_url,
                CartItemModel.quantity,
            )
            .select_from(CartItemModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.added_at, CartItemModel.product_id)
        ).mappings().all()
        return [dict(r) for r in rows]

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
