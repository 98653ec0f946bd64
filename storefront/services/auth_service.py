# storefront/services/auth_service.py
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import InternalError, Unauthorized, ValidationError
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger
from storefront.utils.phone import normalize_phone
from storefront.utils.security import create_access_token, hash_password, verify_password
from storefront.utils.settings import (
    LOGIN_TOKEN_TTL_MINUTES,
    PASSWORD_MIN_LENGTH,
    REGISTER_TOKEN_TTL_MINUTES,
)

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Rejestracja i logowanie po numerze telefonu."""

    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    @staticmethod
    def _auth_payload(user: UserModel, ttl_minutes: int) -> Dict[str, Any]:
        return {
            "token": create_access_token(user.id, ttl_minutes),
            "user": {"id": user.id, "phone": user.phone_number},
        }

    def register(self, phone: str, password: str, confirm_password: str) -> Dict[str, Any]:
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

        phone = normalize_phone(phone)

        if self.repo.get_by_phone(phone):
            raise ValidationError("User already exists")

        try:
            user = self.repo.create_user(
                UserModel(phone_number=phone, password_hash=hash_password(password))
            )
        except IntegrityError:
            # ktos zarejestrowal ten numer rownolegle
            self.repo.rollback()
            raise ValidationError("User already exists")
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception("Register failed")
            raise InternalError("Registration failed")

        logger.info(f"Registered user {user.id}")
        return self._auth_payload(user, REGISTER_TOKEN_TTL_MINUTES)

    def login(self, phone: str, password: str) -> Dict[str, Any]:
        phone = normalize_phone(phone)

        user = self.repo.get_by_phone(phone)
        if not user or not verify_password(password, user.password_hash):
            logger.info("Login rejected")
            raise Unauthorized(INVALID_CREDENTIALS)

        logger.info(f"User {user.id} logged in")
        return self._auth_payload(user, LOGIN_TOKEN_TTL_MINUTES)
