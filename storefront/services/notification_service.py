# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int) -> bool:
        """
        Kolejkuje powiadomienie o przyjęciu zamówienia.
        Zamówienie jest już zatwierdzone, więc błąd brokera tylko logujemy.
        """
        try:
            send_order_notification_task.delay(user_id, order_id)
            return True
        except Exception as e:
            logger.warning(f"Failed to queue notification for order {order_id}: {e}")
            return False


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int):
    """
    Celery task - w prawdziwym systemie wysłałby SMS na numer klienta.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} accepted")

    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
