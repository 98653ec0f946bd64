# storefront/services/favorite_service.py
from typing import Dict, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.domain.errors import InternalError, NotFound
from storefront.repos.favorite_repo import FavoriteRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class FavoriteService:
    def __init__(self, db: Session):
        self.repo = FavoriteRepo(db)
        self.products = ProductRepo(db)

    def list_favorites(self, user_id: int) -> List[int]:
        try:
            return self.repo.list_product_ids(user_id)
        except SQLAlchemyError:
            logger.exception(f"Reading favorites of user {user_id} failed")
            raise InternalError("Failed to load favorites")

    def toggle(self, user_id: int, product_id: int) -> Dict[str, str]:
        """Usuwa jesli jest, dodaje jesli nie ma."""
        if not self.products.exists(product_id):
            raise NotFound("Product not found")

        try:
            if self.repo.delete(user_id, product_id):
                action = "removed"
            else:
                self.repo.add(user_id, product_id)
                action = "added"
            self.repo.commit()
        except IntegrityError:
            # rownolegly toggle juz dodal ten produkt
            self.repo.rollback()
            action = "added"
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"Toggling favorite {product_id} for user {user_id} failed")
            raise InternalError("Failed to update favorites")

        logger.info(f"User {user_id}: favorite {product_id} {action}")
        return {"action": action}
