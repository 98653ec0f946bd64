# storefront/domain/schemas.py
from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from typing import List, Literal, Optional
from decimal import Decimal
from datetime import datetime


# ---------- auth ----------

class RegisterIn(BaseModel):
    """Schema dla rejestracji."""

    phone: str = Field(..., min_length=1, description="Numer telefonu, dowolny format")
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., alias="confirmPassword")

    model_config = ConfigDict(populate_by_name=True)


class LoginIn(BaseModel):
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    id: int
    phone: str


class AuthOut(BaseModel):
    token: str
    user: UserOut


# ---------- catalog ----------

class ProductOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ---------- cart ----------

class CartAddIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., alias="productId", gt=0, description="ID produktu (musi być > 0)")

    model_config = ConfigDict(populate_by_name=True)


class CartLineOut(BaseModel):
    """Linia koszyka z aktualnymi danymi katalogu."""

    product_id: int
    title: str
    price: Decimal
    image_url: Optional[str] = None
    quantity: int


class CartAddOut(BaseModel):
    success: bool = True
    new_quantity: int = Field(..., alias="newQuantity")

    model_config = ConfigDict(populate_by_name=True)


class DecrementOut(BaseModel):
    success: bool = True
    product_id: int = Field(..., alias="productId")
    removed: bool
    new_quantity: int = Field(..., alias="newQuantity")

    model_config = ConfigDict(populate_by_name=True)


class SuccessOut(BaseModel):
    success: bool = True


# ---------- favorites ----------

class FavoriteToggleIn(BaseModel):
    product_id: int = Field(..., alias="productId", gt=0)

    model_config = ConfigDict(populate_by_name=True)


class FavoriteToggleOut(BaseModel):
    action: Literal["added", "removed"]


# ---------- orders ----------

class OrderItemIn(BaseModel):
    """Pozycja zamówienia; klient wysyła `id` albo `productId`."""

    product_id: int = Field(..., validation_alias=AliasChoices("productId", "id", "product_id"), gt=0)
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class OrderCreate(BaseModel):
    """
    Schema dla tworzenia zamówienia.
    Pusta lista items jest przepuszczana, serwis odpowiada wtedy 400.
    """

    items: List[OrderItemIn] = Field(default_factory=list)
    address: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    total: Decimal


class OrderItemOut(BaseModel):
    id: int
    title: str
    price: Decimal
    image_url: Optional[str] = None
    quantity: int


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    user_id: int
    user_order_number: Optional[int] = None
    address: str
    name: str
    total: Decimal
    created_at: datetime
    delivery_date: datetime
    items: List[OrderItemOut]
