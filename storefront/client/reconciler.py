# storefront/client/reconciler.py
"""
Cart reconciliation between the guest cart (client-local storage) and the
server cart.

Exactly one of them is authoritative at any moment, chosen by the auth state:
no session -> the in-memory LocalCart mirrored to storage; session -> the
server cart, the in-memory LocalCart being only its last known copy.

Every trigger (mount, login/logout, cart mutation, debounce fire, flush) is a
command on one FIFO queue drained by one worker thread, so two triggers can
never interleave. Public methods return concurrent.futures.Future.
"""
import queue
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from storefront.client.api_client import ApiError, AuthError, NotFoundError, StorefrontClient
from storefront.client.local_cart import CartLine, CartSnapshot, CartStatus, LocalCart
from storefront.client.session import AuthSession
from storefront.client.storage import CART_KEY, LocalStorage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_STOP = object()

# bledy po ktorych dane ladujemy w storage zamiast je gubic
TRANSIENT_ERRORS = (ApiError, requests.RequestException)


class CartReconciler:
    def __init__(
        self,
        client: StorefrontClient,
        storage: LocalStorage,
        debounce_seconds: float = 1.0,
        flush_timeout: float = 2.0,
    ):
        self.client = client
        self.storage = storage
        self.debounce_seconds = debounce_seconds
        self.flush_timeout = flush_timeout

        # stan sesji, zmieniany tylko z watku workera
        self.cart = LocalCart()
        self.session: Optional[AuthSession] = None
        self._synced = False
        self._needs_merge = False
        self._origin_owner: Optional[int] = None
        self._origin_baseline: Dict[int, int] = {}

        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._closed = False
        self._submit_lock = threading.Lock()

        self._timer: Optional[threading.Timer] = None
        self._timer_lock = threading.Lock()

        self._state_lock = threading.Lock()
        self._published: Tuple[LocalCart, Optional[AuthSession]] = (LocalCart(), None)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def start(self) -> Future:
        """Starts the worker and queues the mount command."""
        if self._worker is None:
            self._worker = threading.Thread(target=self._run, name="cart-reconciler", daemon=True)
            self._worker.start()
        return self._submit(self._mount)

    def close(self, timeout: Optional[float] = None) -> bool:
        """
        Tab-close flush: final sync when logged in, persist when not.
        Waits at most `timeout` seconds and never retries; False means the
        flush did not complete and its effect may be lost.
        """
        timeout = self.flush_timeout if timeout is None else timeout
        self._cancel_timer()

        with self._submit_lock:
            if self._closed:
                return True
            future = self._enqueue(self._flush)
            self._closed = True
            self._queue.put(_STOP)

        try:
            future.result(timeout=timeout)
            return True
        except FutureTimeout:
            logger.warning(f"Cart flush did not finish within {timeout}s, giving up")
        except Exception as e:
            logger.warning(f"Cart flush failed: {e}")
        return False

    def wait_idle(self, timeout: Optional[float] = None):
        """Blocks until every command queued so far has run."""
        self._submit(lambda: None).result(timeout=timeout)

    # ------------------------------------------------------------------
    # triggers
    # ------------------------------------------------------------------

    def login(self, phone: str, password: str) -> Future:
        return self._submit(lambda: self._authenticate(self.client.login(phone, password)))

    def register(self, phone: str, password: str, confirm_password: str) -> Future:
        return self._submit(
            lambda: self._authenticate(self.client.register(phone, password, confirm_password))
        )

    def set_session(self, session: AuthSession) -> Future:
        return self._submit(lambda: self._begin_session(session))

    def logout(self) -> Future:
        return self._submit(self._logout)

    def add_item(self, product: CartLine) -> Future:
        return self._submit(lambda: self._add(product))

    def decrement_item(self, product_id: int) -> Future:
        return self._submit(lambda: self._decrement(product_id))

    def remove_item(self, product_id: int) -> Future:
        return self._submit(lambda: self._remove(product_id))

    def clear_cart(self) -> Future:
        return self._submit(self._clear)

    def sync(self) -> Future:
        return self._submit(self._sync)

    def place_order(self, address: str, name: str) -> Future:
        return self._submit(lambda: self._place_order(address, name))

    # ------------------------------------------------------------------
    # published state
    # ------------------------------------------------------------------

    @property
    def cart_state(self) -> LocalCart:
        with self._state_lock:
            return self._published[0].model_copy(deep=True)

    @property
    def session_state(self) -> Optional[AuthSession]:
        with self._state_lock:
            return self._published[1]

    @property
    def authenticated(self) -> bool:
        return self.session_state is not None

    # ------------------------------------------------------------------
    # queue machinery
    # ------------------------------------------------------------------

    def _enqueue(self, fn: Callable[[], Any]) -> Future:
        future: Future = Future()
        self._queue.put((fn, future))
        return future

    def _submit(self, fn: Callable[[], Any]) -> Future:
        with self._submit_lock:
            if self._closed:
                raise RuntimeError("Cart reconciler is closed")
            return self._enqueue(fn)

    def _run(self):
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            fn, future = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = fn()
            except TRANSIENT_ERRORS as e:
                future.set_exception(e)
            except Exception as e:
                logger.exception("Cart command failed")
                future.set_exception(e)
            else:
                future.set_result(result)
            finally:
                self._publish()

    def _publish(self):
        with self._state_lock:
            self._published = (self.cart.model_copy(deep=True), self.session)

    # ------------------------------------------------------------------
    # debounce
    # ------------------------------------------------------------------

    def _schedule_sync(self):
        """Restartuje licznik; kolejne zmiany w oknie daja jeden sync."""
        if self.session is None:
            return
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._debounce_fired)
            self._timer.daemon = True
            self._timer.start()

    def _debounce_fired(self):
        with self._timer_lock:
            self._timer = None
        try:
            self._submit(self._sync)
        except RuntimeError:
            # zamkniety w miedzyczasie, flush juz zrobil sync
            logger.debug("Debounce fired after close, sync skipped")

    def _cancel_timer(self):
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    # ------------------------------------------------------------------
    # commands (worker thread only)
    # ------------------------------------------------------------------

    def _mount(self):
        snapshot = LocalCart.load_snapshot(self.storage)
        if snapshot is not None:
            self._adopt_guest_snapshot(snapshot)

        session = AuthSession.load(self.storage)
        if session is not None and session.is_expired():
            logger.info("Stored session expired, continuing as guest")
            AuthSession.clear(self.storage)
            session = None

        if session is not None:
            self._begin_session(session)
        return self.cart.model_copy(deep=True)

    def _authenticate(self, payload: Dict[str, Any]) -> AuthSession:
        session = AuthSession.from_auth_response(payload)
        self._begin_session(session)
        return session

    def _begin_session(self, session: AuthSession) -> AuthSession:
        if self.session is not None:
            self._logout()

        # przekazanie: koszyk goscia musi byc w storage zanim serwer przejmie role
        self._persist()

        self.session = session
        self.client.token = session.token
        session.save(self.storage)
        self._origin_owner, self._origin_baseline = None, {}

        self.cart = LocalCart()
        self._synced = False
        self._needs_merge = True
        logger.info(f"User {session.user_id} authenticated, reconciling cart")
        self._sync()
        return session

    def _logout(self, forced: bool = False):
        self._cancel_timer()
        if self.session is None:
            return
        user_id = self.session.user_id
        if forced:
            logger.warning(f"Forcing logout of user {user_id}: server rejected the token")

        # koszyk serwerowy zostaje nietkniety, kopia idzie do storage
        self._persist()

        AuthSession.clear(self.storage)
        self.session = None
        self.client.token = None
        self._synced = False
        self._needs_merge = False

        snapshot = LocalCart.load_snapshot(self.storage) or CartSnapshot()
        self._adopt_guest_snapshot(snapshot)
        logger.info(f"User {user_id} logged out, cart kept locally ({len(self.cart.items)} lines)")

    def _sync(self) -> bool:
        """Pobiera koszyk serwera i przyjmuje go jako stan. False = nie udalo sie."""
        if self.session is None:
            return False

        self.cart.status = CartStatus.LOADING
        try:
            lines = self.client.get_cart()
        except AuthError:
            self._mark_failed("Unauthorized")
            self._logout(forced=True)
            return False
        except TRANSIENT_ERRORS as e:
            self._mark_failed(str(e))
            logger.warning(f"Cart sync failed, saving cart locally: {e}")
            self._persist()
            return False

        self.cart.replace(lines)
        self.cart.status = CartStatus.SUCCEEDED
        self.cart.error = None
        self._synced = True

        if self._needs_merge:
            return self._merge_local()
        return True

    def _merge_local(self) -> bool:
        """
        Replay-add: kazda lokalna sztuka to jedno Add na serwerze, ilosci sie sumuja.
        Snapshot znika ze storage PRZED wysylaniem, wiec drugi merge niczego nie
        powtorzy; nieudane reszty wracaja do storage.
        """
        self._needs_merge = False
        user_id = self.session.user_id

        snapshot = LocalCart.load_snapshot(self.storage)
        if snapshot is None:
            return True
        plan = snapshot.replay_plan(user_id)
        self.storage.remove_item(CART_KEY)
        if not plan:
            return True

        logger.info(f"Merging {len(plan)} local lines into cart of user {user_id}")
        leftovers: List[Tuple[CartLine, int]] = []
        for index, (line, count) in enumerate(plan):
            applied = 0
            try:
                for _ in range(count):
                    new_quantity = self.client.add_to_cart(line.id)
                    applied += 1
                    self.cart.set_quantity(line, new_quantity)
            except AuthError:
                leftovers.append((line, count - applied))
                leftovers.extend(plan[index + 1:])
                self._save_with_pending(leftovers)
                self._logout(forced=True)
                return False
            except NotFoundError:
                logger.warning(f"Dropping product {line.id} from local cart: not in catalog")
            except TRANSIENT_ERRORS as e:
                logger.warning(f"Failed to merge product {line.id}, keeping it locally: {e}")
                leftovers.append((line, count - applied))

        if leftovers:
            self._save_with_pending(leftovers)
        self._schedule_sync()
        return not leftovers

    def _add(self, product: CartLine) -> int:
        if self.session is None:
            line = self.cart.add(product)
            self._persist()
            return line.quantity

        try:
            new_quantity = self.client.add_to_cart(product.id)
        except AuthError:
            self._logout(forced=True)
            # po wylogowaniu jestesmy gosciem, zmiana laduje w lokalnym koszyku
            return self._add(product)
        except TRANSIENT_ERRORS as e:
            self.cart.error = str(e)
            raise

        self.cart.set_quantity(product, new_quantity)
        self.cart.error = None
        self._schedule_sync()
        return new_quantity

    def _decrement(self, product_id: int) -> int:
        if self.session is None:
            new_quantity = self.cart.decrement(product_id)
            self._persist()
            return new_quantity or 0

        try:
            result = self.client.decrement(product_id)
        except NotFoundError:
            # serwer nie ma tej linii, lokalna kopia byla nieaktualna
            self.cart.remove(product_id)
            self._schedule_sync()
            return 0
        except AuthError:
            self._logout(forced=True)
            return self._decrement(product_id)
        except TRANSIENT_ERRORS as e:
            self.cart.status = CartStatus.FAILED
            self.cart.error = str(e)
            raise

        self.cart.apply_decrement(product_id, result["removed"], result["newQuantity"])
        self.cart.error = None
        self._schedule_sync()
        return result["newQuantity"]

    def _remove(self, product_id: int):
        if self.session is None:
            self.cart.remove(product_id)
            self._persist()
            return

        try:
            self.client.remove_from_cart(product_id)
        except AuthError:
            self._logout(forced=True)
            return self._remove(product_id)
        except TRANSIENT_ERRORS as e:
            self.cart.error = str(e)
            raise
        self.cart.remove(product_id)
        self._schedule_sync()

    def _clear(self):
        if self.session is None:
            self.cart.clear()
            self._persist()
            return

        try:
            self.client.clear_cart()
        except AuthError:
            self._logout(forced=True)
            return self._clear()
        except TRANSIENT_ERRORS as e:
            self.cart.error = str(e)
            raise
        self.cart.clear()
        self._schedule_sync()

    def _place_order(self, address: str, name: str) -> Dict[str, Any]:
        if self.session is None:
            raise AuthError(401, "Log in to place an order")
        if not self.cart.items:
            raise ValueError("Cart is empty")

        try:
            order = self.client.place_order(self.cart.items, address, name, self.cart.total())
        except AuthError:
            self._logout(forced=True)
            raise

        # serwer wyczyscil koszyk w tej samej transakcji
        self.cart.clear()
        self.cart.status = CartStatus.SUCCEEDED
        logger.info(f"Order {order.get('id')} placed by user {self.session.user_id}")
        return order

    def _flush(self):
        self._cancel_timer()
        if self.session is not None:
            self._sync()
        else:
            self._persist()

    # ------------------------------------------------------------------
    # persistence helpers
    # ------------------------------------------------------------------

    def _mark_failed(self, error: str):
        self.cart.status = CartStatus.FAILED
        self.cart.error = error

    def _adopt_guest_snapshot(self, snapshot: CartSnapshot):
        self.cart = LocalCart.from_snapshot(snapshot)
        self._origin_owner = snapshot.owner_id
        self._origin_baseline = dict(snapshot.baseline)

    def _persist(self):
        """
        Zapis koszyka do storage.
        Gosc: lokalny koszyk z zachowanym pochodzeniem (owner/baseline).
        Zalogowany: kopia koszyka serwera + linie jeszcze nie scalone, baseline = to
        co juz jest na serwerze.
        """
        if self.session is None:
            self.cart.save(self.storage, owner_id=self._origin_owner, baseline=self._origin_baseline)
            return

        if not self._synced:
            # nie znamy stanu serwera; storage dalej trzyma koszyk goscia
            return

        snapshot = LocalCart.load_snapshot(self.storage)
        pending = snapshot.replay_plan(self.session.user_id) if snapshot else []
        self._save_with_pending(pending)

    def _save_with_pending(self, pending: List[Tuple[CartLine, int]]):
        user_id = self.session.user_id
        baseline = self.cart.quantities()
        combined = self.cart.model_copy(deep=True)
        for line, count in pending:
            if count <= 0:
                continue
            existing = combined.find(line.id)
            combined.set_quantity(line, (existing.quantity if existing else 0) + count)
        combined.save(self.storage, owner_id=user_id, baseline=baseline)
