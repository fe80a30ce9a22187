from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

import tickets
from errors import NotFound, PaymentFailed, ValidationFailed


def buy(store, gateway, event, quantity, **kwargs):
    return tickets.create_payment_intent(
        store, gateway, event["id"], quantity, "Ada Lovelace", "ada@example.com", **kwargs
    )


def pay(store, gateway, event, quantity):
    intent = buy(store, gateway, event, quantity)
    gateway.mark_succeeded(intent["payment_intent_id"])
    return tickets.confirm_ticket_purchase(store, gateway, intent["payment_intent_id"])


@pytest.mark.parametrize("quantity", [0, -1, 11])
def test_quantity_out_of_range_is_rejected(store, gateway, make_event, quantity):
    event = make_event()
    with pytest.raises(ValidationFailed, match="Invalid quantity"):
        buy(store, gateway, event, quantity)


def test_missing_customer_fields(store, gateway, make_event):
    event = make_event()
    with pytest.raises(ValidationFailed, match="Missing required fields"):
        tickets.create_payment_intent(store, gateway, event["id"], 1, "", "ada@example.com")


def test_unknown_event(store, gateway):
    with pytest.raises(NotFound, match="Event not found"):
        tickets.create_payment_intent(store, gateway, 999, 1, "Ada", "ada@example.com")


def test_unpublished_event_is_rejected(store, gateway, make_event):
    event = make_event(is_published=False)
    with pytest.raises(ValidationFailed, match="not available for booking"):
        buy(store, gateway, event, 1)


def test_free_event_does_not_sell_tickets(store, gateway, make_event):
    event = make_event(ticket_price=0)
    with pytest.raises(ValidationFailed, match="does not sell tickets"):
        buy(store, gateway, event, 1)


def test_capacity_overflow_reports_remaining(store, gateway, make_event):
    event = make_event(max_attendees=10, current_attendees=8)
    with pytest.raises(ValidationFailed, match="Only 2 tickets remaining"):
        buy(store, gateway, event, 3)


def test_exact_remaining_capacity_is_allowed(store, gateway, make_event):
    event = make_event(max_attendees=10, current_attendees=8)
    assert buy(store, gateway, event, 2)["quantity"] == 2


def test_unlimited_event_has_no_capacity_check(store, gateway, make_event):
    event = make_event(max_attendees=None, current_attendees=500)
    assert buy(store, gateway, event, 10)["quantity"] == 10


def test_intent_amount_in_minor_units(store, gateway, make_event):
    event = make_event(ticket_price=5.00)
    result = buy(store, gateway, event, 2, customer_phone="07700 900123")

    assert result["amount"] == 1000
    assert result["currency"] == "gbp"
    assert result["total_amount"] == 10.0
    intent = gateway.retrieve_intent(result["payment_intent_id"])
    assert intent.amount == 1000
    assert intent.metadata["event_id"] == str(event["id"])
    assert intent.metadata["quantity"] == "2"
    assert intent.metadata["customer_phone"] == "07700 900123"
    assert intent.metadata["ticket_price"] == "5.0"


def test_intent_creation_writes_nothing(store, gateway, make_event):
    event = make_event()
    buy(store, gateway, event, 2)
    assert store.find("event_ticket_sales") == []
    assert store.get("events", event["id"])["current_attendees"] == 0


def test_confirm_requires_succeeded_payment(store, gateway, make_event):
    event = make_event()
    intent = buy(store, gateway, event, 1)
    with pytest.raises(PaymentFailed, match="Payment not completed"):
        tickets.confirm_ticket_purchase(store, gateway, intent["payment_intent_id"])
    assert store.find("event_ticket_sales") == []


def test_confirm_requires_intent_id(store, gateway):
    with pytest.raises(ValidationFailed):
        tickets.confirm_ticket_purchase(store, gateway, "")


def test_confirm_records_sale_from_metadata(store, gateway, make_event):
    event = make_event(title="Latte Art Workshop", ticket_price=15.0)
    result = pay(store, gateway, event, 2)

    sale = store.get("event_ticket_sales", result["ticket_sale_id"])
    assert sale["status"] == "confirmed"
    assert sale["quantity"] == 2
    assert sale["total_amount"] == 30.0
    assert sale["customer_email"] == "ada@example.com"
    assert sale["event_title"] == "Latte Art Workshop"
    assert result["confirmation_number"] == f"TKT-{sale['id']:06d}"
    assert result["event_date"] == "2030-06-07"


def test_attendees_are_incremented_across_purchases(store, gateway, make_event):
    event = make_event(max_attendees=40, current_attendees=5)
    pay(store, gateway, event, 3)
    pay(store, gateway, event, 4)
    assert store.get("events", event["id"])["current_attendees"] == 5 + 3 + 4


def test_reconfirming_same_intent_does_not_double_count(store, gateway, make_event):
    event = make_event(current_attendees=1)
    intent = buy(store, gateway, event, 2)
    gateway.mark_succeeded(intent["payment_intent_id"])

    first = tickets.confirm_ticket_purchase(store, gateway, intent["payment_intent_id"])
    second = tickets.confirm_ticket_purchase(store, gateway, intent["payment_intent_id"])

    assert first["confirmation_number"] == second["confirmation_number"]
    assert len(store.find("event_ticket_sales")) == 1
    assert store.get("events", event["id"])["current_attendees"] == 3


def test_sales_listed_newest_first(store):
    store.insert("event_ticket_sales", {"purchase_date": datetime(2030, 1, 1), "quantity": 1})
    store.insert("event_ticket_sales", {"purchase_date": datetime(2030, 3, 1), "quantity": 2})
    store.insert("event_ticket_sales", {"purchase_date": datetime(2030, 2, 1), "quantity": 3})
    assert [s["quantity"] for s in tickets.get_ticket_sales(store)] == [2, 3, 1]


def test_csv_export_has_header_and_one_line_per_sale():
    sales = [
        {"id": 7, "event_id": 1, "event_title": "Acoustic Friday", "customer_name": "Ada",
         "customer_email": "ada@example.com", "customer_phone": None, "quantity": 2,
         "total_amount": 10, "status": "confirmed", "purchase_date": datetime(2030, 6, 1, 18, 5)},
        {"id": 12, "event_id": 2, "event_title": None, "customer_name": "Grace",
         "customer_email": "grace@example.com", "customer_phone": "0117 496 0000", "quantity": 1,
         "total_amount": 15.5, "status": "confirmed", "purchase_date": datetime(2030, 6, 2, 9, 30)},
    ]
    lines = tickets.export_ticket_sales_csv(sales).splitlines()

    assert len(lines) == 3
    assert lines[0] == ",".join(tickets.CSV_COLUMNS)
    assert lines[1].startswith("TKT-000007,Acoustic Friday,Ada,ada@example.com,N/A,2,£10.00,confirmed,")
    assert '"01 Jun 2030, 18:05"' in lines[1]
    assert "Event #2" in lines[2]
    assert "£15.50" in lines[2]


def test_csv_export_of_no_sales_is_header_only():
    assert tickets.export_ticket_sales_csv([]).splitlines() == [",".join(tickets.CSV_COLUMNS)]


def test_concurrent_confirmations_record_one_sale(store, lockstep_gateway, make_event):
    event = make_event(current_attendees=0)
    intent = buy(store, lockstep_gateway, event, 2)
    lockstep_gateway.mark_succeeded(intent["payment_intent_id"])

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(
            lambda _: tickets.confirm_ticket_purchase(store, lockstep_gateway, intent["payment_intent_id"]),
            range(2),
        ))

    assert results[0]["ticket_sale_id"] == results[1]["ticket_sale_id"]
    assert len(store.find("event_ticket_sales")) == 1
    assert store.get("events", event["id"])["current_attendees"] == 2
