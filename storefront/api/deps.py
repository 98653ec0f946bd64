# storefront/api/deps.py
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.repos.user_repo import UserRepo
from storefront.utils.security import decode_access_token

# auto_error=False: brak naglowka ma dawac 401, nie 403
security = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> int:
    """Bearer token -> id uzytkownika; brak, zly, wygasly token albo usuniety user -> 401."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    if UserRepo(db).get_user(user_id) is None:
        raise credentials_exception

    return user_id
