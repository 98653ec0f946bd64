from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import FavoriteToggleIn, FavoriteToggleOut
from storefront.services.favorite_service import FavoriteService

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=List[int])
def get_favorites(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return FavoriteService(db).list_favorites(user_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/toggle", response_model=FavoriteToggleOut)
def toggle_favorite(
    payload: FavoriteToggleIn,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return FavoriteService(db).toggle(user_id, payload.product_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
