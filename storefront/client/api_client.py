# storefront/client/api_client.py
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from storefront.client.local_cart import CartLine
from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry

logger = get_logger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class AuthError(ApiError):
    """401 - token brakujacy, zly albo wygasly. Nie naprawi sie sam."""


class NotFoundError(ApiError):
    pass


def _raise_for_status(resp: requests.Response):
    if resp.status_code < 400:
        return
    try:
        message = resp.json().get("detail", resp.text)
    except ValueError:
        message = resp.text
    if resp.status_code == 401:
        raise AuthError(401, str(message))
    if resp.status_code == 404:
        raise NotFoundError(404, str(message))
    raise ApiError(resp.status_code, str(message))


class StorefrontClient:
    """
    Klient HTTP API sklepu. GET-y sa powtarzane przy bledach transportu,
    mutacje nie (powtorzony add dodalby produkt drugi raz).
    """

    def __init__(self, base_url: str, timeout: float = 5, token: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self.http = requests.Session()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.info(f"StorefrontClient {method} {url}")

        resp = self.http.request(method, url, json=json, headers=self._headers(), timeout=self.timeout)
        _raise_for_status(resp)
        return resp.json() if resp.content else None

    @http_retry()
    def _get(self, path: str) -> Any:
        return self._request("GET", path)

    # ---------- auth ----------

    def register(self, phone: str, password: str, confirm_password: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/auth/register",
            {"phone": phone, "password": password, "confirmPassword": confirm_password},
        )

    def login(self, phone: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/login", {"phone": phone, "password": password})

    # ---------- catalog ----------

    def get_products(self) -> List[Dict[str, Any]]:
        return self._get("/products")

    # ---------- cart ----------

    def get_cart(self) -> List[CartLine]:
        return [CartLine.model_validate(row) for row in self._get("/cart")]

    def add_to_cart(self, product_id: int) -> int:
        data = self._request("POST", "/cart/add", {"productId": product_id})
        return data["newQuantity"]

    def decrement(self, product_id: int) -> Dict[str, Any]:
        return self._request("PATCH", f"/cart/{product_id}/decrement")

    def remove_from_cart(self, product_id: int):
        self._request("DELETE", f"/cart/{product_id}")

    def clear_cart(self):
        self._request("DELETE", "/cart/clear")

    # ---------- favorites ----------

    def get_favorites(self) -> List[int]:
        return self._get("/favorites")

    def toggle_favorite(self, product_id: int) -> str:
        return self._request("POST", "/favorites/toggle", {"productId": product_id})["action"]

    # ---------- orders ----------

    def get_orders(self) -> List[Dict[str, Any]]:
        return self._get("/orders")

    def place_order(self, items: List[CartLine], address: str, name: str, total: Decimal) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/orders",
            {
                "items": [{"id": i.id, "quantity": i.quantity} for i in items],
                "address": address,
                "name": name,
                "total": str(total),
            },
        )
