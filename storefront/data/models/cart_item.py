#storefront/data/models/cart_item.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartItemModel(Base):
    """Jedna linia koszyka, klucz (user_id, product_id)."""

    __tablename__ = "cart_items"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)

    # zero nigdy nie jest zapisywane, decrement do 0 usuwa linie
    quantity = Column(Integer, nullable=False, default=1)
    added_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    product = relationship("ProductModel")

    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),)
