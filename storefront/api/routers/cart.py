#storefront/api/routers/cart.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    CartAddIn,
    CartAddOut,
    CartLineOut,
    DecrementOut,
    SuccessOut,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=List[CartLineOut])
def get_cart(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.get_cart(user_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/add", response_model=CartAddOut)
def add_to_cart(
    payload: CartAddIn,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.add(user_id, payload.product_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


# /clear musi byc przed /{product_id}, inaczej "clear" trafi do remove
@router.delete("/clear", response_model=SuccessOut)
def clear_cart(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.clear(user_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{product_id}/decrement", response_model=DecrementOut)
def decrement(
    product_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.decrement(user_id, product_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{product_id}", response_model=SuccessOut)
def remove_from_cart(
    product_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.remove(user_id, product_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
