# storefront/client/local_cart.py
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from storefront.client.storage import CART_KEY, LocalStorage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CartLine(BaseModel):
    """Linia koszyka po stronie klienta; z serwera przychodzi jako product_id."""

    id: int = Field(..., validation_alias=AliasChoices("id", "product_id"), gt=0)
    title: str = ""
    price: Decimal = Decimal("0.00")
    image_url: Optional[str] = None
    quantity: int = Field(1, ge=1)


class CartSnapshot(BaseModel):
    """
    Zapisany koszyk. owner_id/baseline sa ustawiane gdy koszyk odzwierciedla
    koszyk serwerowy danego uzytkownika (zapis po wylogowaniu albo awaryjny).
    """

    items: List[CartLine] = Field(default_factory=list)
    status: CartStatus = CartStatus.IDLE
    owner_id: Optional[int] = None
    baseline: Dict[int, int] = Field(default_factory=dict)

    def replay_plan(self, user_id: int) -> List[Tuple[CartLine, int]]:
        """
        Ile razy wywolac Add dla kazdej linii przy scalaniu.
        Obcy/gosciowy koszyk: cala ilosc. Koszyk tego samego uzytkownika: tylko
        przyrost ponad baseline, bo baseline juz jest na serwerze.
        """
        plan = []
        for line in self.items:
            count = line.quantity
            if self.owner_id is not None and self.owner_id == user_id:
                count -= self.baseline.get(line.id, 0)
            if count > 0:
                plan.append((line, count))
        return plan


class LocalCart(BaseModel):
    items: List[CartLine] = Field(default_factory=list)
    status: CartStatus = CartStatus.IDLE
    error: Optional[str] = None

    def find(self, product_id: int) -> Optional[CartLine]:
        return next((i for i in self.items if i.id == product_id), None)

    def add(self, product: CartLine) -> CartLine:
        line = self.find(product.id)
        if line:
            line.quantity += 1
            return line
        line = product.model_copy(update={"quantity": 1})
        self.items.append(line)
        return line

    def set_quantity(self, product: CartLine, quantity: int):
        """Ustawia ilosc zwrocona przez serwer; 0 usuwa linie."""
        if quantity <= 0:
            self.remove(product.id)
            return
        line = self.find(product.id)
        if line:
            line.quantity = quantity
        else:
            self.items.append(product.model_copy(update={"quantity": quantity}))

    def decrement(self, product_id: int) -> Optional[int]:
        """Zwraca nowa ilosc (0 = usunieta) albo None gdy linii nie ma."""
        line = self.find(product_id)
        if line is None:
            return None
        if line.quantity <= 1:
            self.remove(product_id)
            return 0
        line.quantity -= 1
        return line.quantity

    def apply_decrement(self, product_id: int, removed: bool, new_quantity: int):
        if removed:
            self.remove(product_id)
            return
        line = self.find(product_id)
        if line:
            line.quantity = new_quantity

    def remove(self, product_id: int):
        self.items = [i for i in self.items if i.id != product_id]

    def clear(self):
        self.items = []

    def replace(self, lines: List[CartLine]):
        self.items = [line.model_copy() for line in lines]

    def quantities(self) -> Dict[int, int]:
        return {i.id: i.quantity for i in self.items}

    def total(self) -> Decimal:
        return sum((i.price * i.quantity for i in self.items), Decimal("0.00"))

    # ---------- persistence ----------

    def to_snapshot(self, owner_id: Optional[int] = None, baseline: Optional[Dict[int, int]] = None) -> CartSnapshot:
        return CartSnapshot(
            items=[i.model_copy() for i in self.items],
            status=self.status,
            owner_id=owner_id,
            baseline=dict(baseline or {}),
        )

    def save(self, storage: LocalStorage, owner_id: Optional[int] = None, baseline: Optional[Dict[int, int]] = None):
        snapshot = self.to_snapshot(owner_id, baseline)
        storage.set_item(CART_KEY, snapshot.model_dump_json(exclude_none=True))

    @staticmethod
    def load_snapshot(storage: LocalStorage) -> Optional[CartSnapshot]:
        raw = storage.get_item(CART_KEY)
        if not raw:
            return None
        try:
            return CartSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring corrupt cart snapshot: {e}")
            return None

    @classmethod
    def from_snapshot(cls, snapshot: CartSnapshot) -> "LocalCart":
        return cls(items=[i.model_copy() for i in snapshot.items], status=snapshot.status)
