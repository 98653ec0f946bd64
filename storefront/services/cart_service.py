# storefront/services/cart_service.py
from typing import Dict, Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.domain.errors import InternalError, NotFound, StorefrontError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Koszyk serwerowy: kazda komenda (add, decrement, remove, clear) to jedna transakcja.
    query (get) tylko odczyt, zawsze z aktualnymi danymi katalogu
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    def _run(self, action: str, fn):
        """Commit po sukcesie, rollback po kazdym bledzie."""
        try:
            result = fn()
            self.repo.commit()
            return result
        except StorefrontError:
            self.repo.rollback()
            raise
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"Cart {action} failed")
            raise InternalError(f"Cart {action} failed")

    #query - odczyt
    def get_cart(self, user_id: int) -> List[Dict[str, Any]]:
        try:
            return self.repo.get_lines(user_id)
        except SQLAlchemyError:
            logger.exception(f"Reading cart of user {user_id} failed")
            raise InternalError("Failed to load cart")

    #commands
    def add(self, user_id: int, product_id: int) -> Dict[str, Any]:
        def work():
            if not self.products.exists(product_id):
                raise NotFound("Product not found")
            return self.repo.upsert_increment(user_id, product_id)

        new_quantity = self._run("add", work)
        logger.info(f"User {user_id}: product {product_id} quantity -> {new_quantity}")
        return {"success": True, "new_quantity": new_quantity}

    def decrement(self, user_id: int, product_id: int) -> Dict[str, Any]:
        def work():
            # blokada wiersza serializuje rownolegle decrementy tej samej linii
            quantity = self.repo.lock_line_quantity(user_id, product_id)
            if quantity is None:
                raise NotFound("Product not found in cart")

            if quantity <= 1:
                self.repo.delete_line(user_id, product_id)
                return True, 0
            return False, self.repo.decrement_line(user_id, product_id)

        removed, new_quantity = self._run("decrement", work)
        logger.info(
            f"User {user_id}: product {product_id} "
            + ("removed" if removed else f"quantity -> {new_quantity}")
        )
        return {
            "success": True,
            "product_id": product_id,
            "removed": removed,
            "new_quantity": new_quantity,
        }

    def remove(self, user_id: int, product_id: int) -> Dict[str, Any]:
        #idempotentne, brak linii to nie blad
        self._run("remove", lambda: self.repo.delete_line(user_id, product_id))
        logger.info(f"User {user_id}: product {product_id} removed from cart")
        return {"success": True}

    def clear(self, user_id: int) -> Dict[str, Any]:
        deleted = self._run("clear", lambda: self.repo.delete_all(user_id))
        logger.info(f"User {user_id}: cart cleared ({deleted} lines)")
        return {"success": True}
