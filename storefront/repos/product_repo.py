# storefront/repos/product_repo.py
from typing import Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_products(self) -> List[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars())

    def exists(self, product_id: int) -> bool:
        return self.db.get(ProductModel, product_id) is not None

    def get_prices(self, product_ids: Iterable[int]) -> Dict[int, object]:
        ids = list(product_ids)
        if not ids:
            return {}
        rows = self.db.execute(
            select(ProductModel.id, ProductModel.price).where(ProductModel.id.in_(ids))
        ).all()
        return {r.id: r.price for r in rows}
