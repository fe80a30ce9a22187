from concurrent.futures import ThreadPoolExecutor

import pytest

import orders
from errors import NotFound, PaymentFailed, ValidationFailed
from schemas import CartLine

CUSTOMER = {"customer_email": "grace@example.com", "customer_name": "Grace Hopper"}


@pytest.fixture
def cart_items(store):
    latte = store.insert("menu_items", {"name": "Latte", "price": 3.20, "category": "drinks"})
    cake = store.insert("menu_items", {"name": "Slice of Cake", "price": 3.00, "category": "cakes"})
    return [
        CartLine(id=latte["id"], name="Latte", price=3.20, quantity=2),
        CartLine(id=cake["id"], name="Slice of Cake", price=3.00, quantity=1, special_requests="warm"),
    ]


def paid_intent(gateway, cart_items, amount, **kwargs):
    intent = orders.create_order_payment_intent(gateway, amount, cart_items, **CUSTOMER, **kwargs)
    gateway.mark_succeeded(intent["payment_intent_id"])
    return intent


def test_intent_for_collection(gateway, cart_items):
    intent = orders.create_order_payment_intent(gateway, 9.40, cart_items, **CUSTOMER)
    assert intent["currency"] == "gbp"
    stored = gateway.retrieve_intent(intent["payment_intent_id"])
    assert stored.amount == 940
    assert stored.metadata["total_items"] == "3"
    assert stored.metadata["order_type"] == "collection"


def test_intent_adds_delivery_fee(gateway, cart_items):
    intent = orders.create_order_payment_intent(gateway, 11.90, cart_items, order_type="delivery", **CUSTOMER)
    assert gateway.retrieve_intent(intent["payment_intent_id"]).amount == 1190


def test_intent_rejects_amount_mismatch(gateway, cart_items):
    with pytest.raises(ValidationFailed, match="Amount mismatch"):
        orders.create_order_payment_intent(gateway, 5.00, cart_items, **CUSTOMER)


def test_intent_requires_items(gateway):
    with pytest.raises(ValidationFailed, match="Cart items are required"):
        orders.create_order_payment_intent(gateway, 5.00, [], **CUSTOMER)


def test_confirm_requires_succeeded_payment(store, gateway, cart_items):
    intent = orders.create_order_payment_intent(gateway, 9.40, cart_items, **CUSTOMER)
    with pytest.raises(PaymentFailed):
        orders.confirm_order(store, gateway, intent["payment_intent_id"], cart_items,
                             total_amount=9.40, **CUSTOMER)
    assert store.find("orders") == []


def test_confirm_writes_order_and_items(store, gateway, cart_items):
    intent = paid_intent(gateway, cart_items, 9.40)
    result = orders.confirm_order(store, gateway, intent["payment_intent_id"], cart_items,
                                  total_amount=9.40, **CUSTOMER)

    assert result["status"] == "confirmed"
    details = orders.get_order_details(store, result["order_id"])
    assert details["order"]["stripe_payment_intent_id"] == intent["payment_intent_id"]
    assert [it["item_name"] for it in details["items"]] == ["Latte", "Slice of Cake"]
    assert details["items"][0]["subtotal"] == 6.40
    assert details["items"][1]["special_requests"] == "warm"
    assert details["summary"] == {"subtotal": 9.40, "total": 9.40, "item_count": 2, "total_quantity": 3}


def test_confirm_twice_returns_the_same_order(store, gateway, cart_items):
    intent = paid_intent(gateway, cart_items, 9.40)
    first = orders.confirm_order(store, gateway, intent["payment_intent_id"], cart_items,
                                 total_amount=9.40, **CUSTOMER)
    second = orders.confirm_order(store, gateway, intent["payment_intent_id"], cart_items,
                                  total_amount=9.40, **CUSTOMER)
    assert first["order_id"] == second["order_id"]
    assert store.count("orders") == 1
    assert store.count("order_items") == 2


def test_create_order_starts_pending(store):
    order = orders.create_order(store, {
        **CUSTOMER,
        "order_type": "collection",
        "total_amount": 3.0,
        "items": [{"menu_item_id": 99, "quantity": 1, "price_at_time": 3.0}],
    })
    assert order["status"] == "pending"
    assert store.find("order_items", {"order_id": order["id"]})[0]["subtotal"] == 3.0


def test_list_orders_newest_first_and_filtered(store):
    from datetime import datetime

    store.insert("orders", {"status": "pending", "created_at": datetime(2030, 1, 1)})
    store.insert("orders", {"status": "completed", "created_at": datetime(2030, 1, 3)})
    store.insert("orders", {"status": "pending", "created_at": datetime(2030, 1, 2)})

    assert [o["id"] for o in orders.list_orders(store)] == [2, 3, 1]
    assert [o["id"] for o in orders.list_orders(store, "pending")] == [3, 1]


def test_status_moves_forward_only(store):
    order = store.insert("orders", {"status": "pending", "total_amount": 1})
    assert orders.update_order_status(store, order["id"], "confirmed")["status"] == "confirmed"
    assert orders.update_order_status(store, order["id"], "in_progress")["status"] == "in_progress"
    with pytest.raises(ValidationFailed, match="from in_progress to pending"):
        orders.update_order_status(store, order["id"], "pending")
    with pytest.raises(ValidationFailed, match="already in_progress"):
        orders.update_order_status(store, order["id"], "in_progress")
    assert orders.update_order_status(store, order["id"], "cancelled")["status"] == "cancelled"


def test_unknown_order(store):
    with pytest.raises(NotFound):
        orders.get_order_details(store, 404)
    with pytest.raises(NotFound):
        orders.update_order_status(store, 404, "confirmed")


def test_confirm_rejects_total_that_differs_from_payment(store, gateway, cart_items):
    intent = paid_intent(gateway, cart_items, 9.40)
    with pytest.raises(ValidationFailed, match="does not match the amount paid"):
        orders.confirm_order(store, gateway, intent["payment_intent_id"], cart_items,
                             total_amount=179.80, **CUSTOMER)
    assert store.find("orders") == []


def test_confirm_rejects_cart_that_differs_from_payment(store, gateway, cart_items):
    intent = paid_intent(gateway, cart_items, 9.40)
    bigger_cart = cart_items + [CartLine(id=1, name="Latte", price=3.20, quantity=20)]
    with pytest.raises(ValidationFailed, match="Amount mismatch"):
        orders.confirm_order(store, gateway, intent["payment_intent_id"], bigger_cart,
                             total_amount=9.40, **CUSTOMER)
    assert store.find("orders") == []


def test_concurrent_confirmations_record_one_order(store, lockstep_gateway, cart_items):
    intent = paid_intent(lockstep_gateway, cart_items, 9.40)

    def confirm(_):
        return orders.confirm_order(store, lockstep_gateway, intent["payment_intent_id"], cart_items,
                                    total_amount=9.40, **CUSTOMER)

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(confirm, range(2)))

    assert results[0]["order_id"] == results[1]["order_id"]
    assert store.count("orders") == 1
    assert store.count("order_items") == 2
