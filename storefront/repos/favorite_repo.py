# storefront/repos/favorite_repo.py
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.favorite import FavoriteModel


class FavoriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_product_ids(self, user_id: int) -> List[int]:
        return list(
            self.db.execute(
                select(FavoriteModel.product_id)
                .where(FavoriteModel.user_id == user_id)
                .order_by(FavoriteModel.product_id)
            ).scalars()
        )

    def delete(self, user_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(FavoriteModel).where(
                FavoriteModel.user_id == user_id,
                FavoriteModel.product_id == product_id,
            )
        )
        return result.rowcount

    def add(self, user_id: int, product_id: int):
        self.db.add(FavoriteModel(user_id=user_id, product_id=product_id))
        self.db.flush()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
