# storefront/client/storage.py
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CART_KEY = "cart"
TOKEN_KEY = "token"
USER_KEY = "user"


class LocalStorage:
    """
    Odpowiednik localStorage przegladarki: klucz -> string, trzymane w jednym pliku JSON.
    Zapis przez plik tymczasowy + os.replace, wiec plik nigdy nie jest w polowie zapisany.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Local storage {self.path} unreadable, starting empty: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str):
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str):
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
