# storefront/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import AuthOut, LoginIn, RegisterIn
from storefront.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut, status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    service = AuthService(db)
    try:
        return service.register(payload.phone, payload.password, payload.confirm_password)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    service = AuthService(db)
    try:
        return service.login(payload.phone, payload.password)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
