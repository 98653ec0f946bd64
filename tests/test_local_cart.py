"""
Tests for the in-memory cart and its persisted snapshot.
"""
from decimal import Decimal

from storefront.client.local_cart import CartLine, CartSnapshot, CartStatus, LocalCart
from storefront.client.storage import CART_KEY, LocalStorage

PIZZA = CartLine(id=1, title="Margherita", price=Decimal("450.00"))
DRINK = CartLine(id=3, title="Lemonade", price=Decimal("150.00"))


class TestMutations:
    def test_add_appends_then_increments(self):
        cart = LocalCart()

        cart.add(PIZZA)
        cart.add(PIZZA)
        cart.add(DRINK)

        assert cart.quantities() == {1: 2, 3: 1}
        assert PIZZA.quantity == 1

    def test_decrement(self):
        cart = LocalCart()
        cart.add(PIZZA)
        cart.add(PIZZA)

        assert cart.decrement(1) == 1
        assert cart.decrement(1) == 0
        assert cart.items == []
        assert cart.decrement(1) is None

    def test_apply_server_decrement(self):
        cart = LocalCart(items=[PIZZA.model_copy(update={"quantity": 3})])

        cart.apply_decrement(1, removed=False, new_quantity=2)
        assert cart.quantities() == {1: 2}

        cart.apply_decrement(1, removed=True, new_quantity=0)
        assert cart.items == []

    def test_set_quantity_zero_removes(self):
        cart = LocalCart()
        cart.set_quantity(PIZZA, 4)
        assert cart.quantities() == {1: 4}

        cart.set_quantity(PIZZA, 0)
        assert cart.items == []

    def test_total(self):
        cart = LocalCart()
        cart.add(PIZZA)
        cart.add(PIZZA)
        cart.add(DRINK)

        assert cart.total() == Decimal("1050.00")

    def test_server_payload_uses_product_id(self):
        line = CartLine.model_validate({"product_id": 5, "title": "X", "price": "10.50", "quantity": 2})
        assert line.id == 5
        assert line.price == Decimal("10.50")


class TestSnapshot:
    def test_save_and_restore(self, tmp_path):
        storage = LocalStorage(tmp_path / "s.json")
        cart = LocalCart(items=[PIZZA.model_copy(update={"quantity": 2})], status=CartStatus.SUCCEEDED)

        cart.save(storage)
        snapshot = LocalCart.load_snapshot(storage)
        restored = LocalCart.from_snapshot(snapshot)

        assert restored.quantities() == {1: 2}
        assert restored.status == CartStatus.SUCCEEDED
        assert snapshot.owner_id is None

    def test_owner_and_baseline_survive(self, tmp_path):
        storage = LocalStorage(tmp_path / "s.json")
        LocalCart(items=[PIZZA.model_copy(update={"quantity": 3})]).save(storage, owner_id=7, baseline={1: 2})

        snapshot = LocalCart.load_snapshot(storage)

        assert snapshot.owner_id == 7
        assert snapshot.baseline == {1: 2}

    def test_corrupt_snapshot_ignored(self, tmp_path):
        storage = LocalStorage(tmp_path / "s.json")
        storage.set_item(CART_KEY, '{"items": [{"id": -1}]}')

        assert LocalCart.load_snapshot(storage) is None


class TestReplayPlan:
    def test_guest_cart_replays_everything(self):
        snapshot = CartSnapshot(items=[PIZZA.model_copy(update={"quantity": 2}), DRINK])
        plan = [(line.id, count) for line, count in snapshot.replay_plan(user_id=7)]
        assert plan == [(1, 2), (3, 1)]

    def test_same_owner_replays_only_increase(self):
        snapshot = CartSnapshot(
            items=[PIZZA.model_copy(update={"quantity": 3}), DRINK],
            owner_id=7,
            baseline={1: 2, 3: 1},
        )
        plan = [(line.id, count) for line, count in snapshot.replay_plan(user_id=7)]
        assert plan == [(1, 1)]

    def test_other_user_replays_everything(self):
        snapshot = CartSnapshot(items=[PIZZA.model_copy(update={"quantity": 3})], owner_id=7, baseline={1: 3})
        plan = [(line.id, count) for line, count in snapshot.replay_plan(user_id=8)]
        assert plan == [(1, 3)]
