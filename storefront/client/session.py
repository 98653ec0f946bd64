# storefront/client/session.py
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt
from pydantic import BaseModel

from storefront.client.storage import TOKEN_KEY, USER_KEY, LocalStorage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AuthSession(BaseModel):
    user_id: int
    phone: Optional[str] = None
    token: str
    expiry: Optional[datetime] = None

    @classmethod
    def from_auth_response(cls, payload: Dict[str, Any]) -> "AuthSession":
        """{token, user: {id, phone}} z /auth/login albo /auth/register."""
        user = payload["user"]
        return cls(
            user_id=user["id"],
            phone=user.get("phone"),
            token=payload["token"],
            expiry=token_expiry(payload["token"]),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expiry is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expiry

    def save(self, storage: LocalStorage):
        storage.set_item(TOKEN_KEY, self.token)
        storage.set_item(USER_KEY, json.dumps({"id": self.user_id, "phone": self.phone}))

    @classmethod
    def load(cls, storage: LocalStorage) -> Optional["AuthSession"]:
        token = storage.get_item(TOKEN_KEY)
        raw_user = storage.get_item(USER_KEY)
        if not token or not raw_user:
            return None
        try:
            user = json.loads(raw_user)
            return cls(user_id=user["id"], phone=user.get("phone"), token=token, expiry=token_expiry(token))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable stored session: {e}")
            return None

    @staticmethod
    def clear(storage: LocalStorage):
        storage.remove_item(TOKEN_KEY)
        storage.remove_item(USER_KEY)


def token_expiry(token: str) -> Optional[datetime]:
    """
    Czas wygasniecia z claimu exp. Klient nie zna sekretu, wiec podpis nie jest
    sprawdzany; serwer i tak odrzuci zly token (401).
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.PyJWTError:
        # nieczytelny token traktujemy jak wygasly
        return datetime.fromtimestamp(0, tz=timezone.utc)
    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)
