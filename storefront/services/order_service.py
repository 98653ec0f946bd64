# storefront/services/order_service.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import InternalError, StorefrontError, Unauthorized, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger
from storefront.utils.settings import (
    DELIVERY_WINDOW_HOURS,
    ORDER_TOTAL_TOLERANCE,
    ORDER_VISIBILITY_HOURS,
)

logger = get_logger(__name__)

CENT = Decimal("0.01")


def order_to_dict(order: OrderModel, user_order_number: Optional[int] = None) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "user_order_number": user_order_number,
        "address": order.address,
        "name": order.name,
        "total": order.total,
        "created_at": order.created_at,
        "delivery_date": order.delivery_date,
        "items": [
            {
                "id": item.product.id,
                "title": item.product.title,
                "price": item.product.price,
                "image_url": item.product.image_url,
                "quantity": item.quantity,
            }
            for item in order.items
        ],
    }


class OrderService:
    """
    Składanie zamówienia: ceny liczone na serwerze, zamówienie + pozycje + czyszczenie
    koszyka w jednej transakcji.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.notification_service = NotificationService()

    def _validated_total(self, items: List[Dict[str, int]], client_total: Decimal) -> Decimal:
        ids = [i["product_id"] for i in items]
        if len(set(ids)) != len(ids):
            raise ValidationError("Duplicate items in order")

        prices = self.products.get_prices(ids)
        # usuniete albo nieistniejace produkty
        if len(prices) != len(ids):
            raise ValidationError("Some items not found")

        calculated = sum((prices[i["product_id"]] * i["quantity"] for i in items), Decimal("0.00"))
        if abs(calculated - Decimal(client_total)) > ORDER_TOTAL_TOLERANCE:
            logger.info(f"Order total mismatch: client {client_total}, server {calculated}")
            raise ValidationError("Order total mismatch")

        return calculated.quantize(CENT, rounding=ROUND_HALF_UP)

    def create_order(
        self,
        user_id: Optional[int],
        items: List[Dict[str, int]],
        address: str,
        name: str,
        total: Decimal,
    ) -> Dict[str, Any]:
        if not user_id:
            raise Unauthorized("User is not authorized")
        if not items:
            raise ValidationError("No items in order")

        try:
            server_total = self._validated_total(items, total)

            now = datetime.now(timezone.utc)
            order = self.repo.add_order(
                OrderModel(
                    user_id=user_id,
                    address=address,
                    name=name,
                    total=server_total,
                    created_at=now,
                    delivery_date=now + timedelta(hours=DELIVERY_WINDOW_HOURS),
                )
            )
            self.repo.add_items(order.id, items)
            self.cart_repo.delete_all(user_id)

            result = order_to_dict(self.repo.get_order(order.id))
            self.repo.commit()
        except StorefrontError:
            self.repo.rollback()
            raise
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"Order creation for user {user_id} failed")
            raise InternalError("Order creation failed")

        logger.info(f"Order {result['id']} created for user {user_id}, total {server_total}")

        # Wyślij powiadomienie asynchronicznie
        self.notification_service.send_order_notification(user_id, result["id"])

        return result

    def list_recent_orders(self, user_id: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Tylko zamówienia z ostatnich ORDER_VISIBILITY_HOURS godzin (filtr przy zapytaniu,
        nic nie jest kasowane). Numeracja od najstarszego, zwracane od najnowszego.
        """
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(hours=ORDER_VISIBILITY_HOURS)
        try:
            orders = self.repo.list_recent(user_id, since)
        except SQLAlchemyError:
            logger.exception(f"Reading orders of user {user_id} failed")
            raise InternalError("Failed to load orders")

        numbered = [order_to_dict(o, n) for n, o in enumerate(orders, start=1)]
        numbered.reverse()
        return numbered
