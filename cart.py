"""Cart mutations as pure functions over an immutable ``Cart``.

Each reducer returns a new cart and never touches its argument.
"""
from __future__ import annotations

from schemas import Cart, CartLine, OrderType

DELIVERY_FEE = 2.50


def add_item(cart: Cart, line: CartLine) -> Cart:
    items = list(cart.items)
    for idx, existing in enumerate(items):
        if existing.id == line.id:
            items[idx] = existing.model_copy(update={"quantity": existing.quantity + line.quantity})
            return Cart(items=tuple(items))
    return Cart(items=tuple(items) + (line,))


def remove_item(cart: Cart, item_id: int) -> Cart:
    return Cart(items=tuple(line for line in cart.items if line.id != item_id))


def update_quantity(cart: Cart, item_id: int, quantity: int) -> Cart:
    if quantity <= 0:
        return remove_item(cart, item_id)
    return Cart(items=tuple(
        line.model_copy(update={"quantity": quantity}) if line.id == item_id else line
        for line in cart.items
    ))


def clear_cart(cart: Cart) -> Cart:
    return Cart()


def cart_total(cart: Cart) -> float:
    return round(sum(line.price * line.quantity for line in cart.items), 2)


def item_count(cart: Cart) -> int:
    return sum(line.quantity for line in cart.items)


def delivery_fee(order_type: OrderType) -> float:
    return DELIVERY_FEE if order_type == "delivery" else 0.0


def order_total(cart: Cart, order_type: OrderType) -> float:
    return round(cart_total(cart) + delivery_fee(order_type), 2)
