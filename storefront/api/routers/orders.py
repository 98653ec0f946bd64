# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import OrderCreate, OrderOut
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.get("", response_model=List[OrderOut])
def list_orders(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Zamówienia z ostatnich 6 godzin, od najnowszego.
    """
    svc = get_service(db)
    try:
        return svc.list_recent_orders(user_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Tworzy zamówienie, cena liczona na serwerze, koszyk czyszczony w tej samej transakcji.
    Wysyła powiadomienie asynchronicznie.
    """
    svc = get_service(db)
    try:
        return svc.create_order(
            user_id=user_id,
            items=[{"product_id": i.product_id, "quantity": i.quantity} for i in payload.items],
            address=payload.address,
            name=payload.name,
            total=payload.total,
        )
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
