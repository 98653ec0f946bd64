# storefront/repos/order_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel, OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        #flush bez commita, commit robi serwis razem z czyszczeniem koszyka
        self.db.add(order)
        self.db.flush()
        return order

    def add_items(self, order_id: int, items: List[dict]):
        self.db.add_all(
            OrderItemModel(order_id=order_id, product_id=i["product_id"], quantity=i["quantity"])
            for i in items
        )
        self.db.flush()

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(selectinload(OrderModel.items).selectinload(OrderItemModel.product))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_recent(self, user_id: int, since: datetime) -> List[OrderModel]:
        """Zamowienia uzytkownika utworzone po `since`, od najstarszego."""
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id, OrderModel.created_at > since)
                .options(selectinload(OrderModel.items).selectinload(OrderItemModel.product))
                .order_by(OrderModel.created_at, OrderModel.id)
            ).scalars()
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
