# catalyst/services/cart_service.py
"""Cart commands. A cart holds at most one line per product."""
from typing import List

from catalyst.domain.schemas import CartItem

Cart = List[CartItem]


def add_item(cart: Cart, product_id: int, quantity: int = 1) -> Cart:
    if quantity <= 0:
        raise ValueError("Quantity must be greater than 0")

    if any(i.product_id == product_id for i in cart):
        return [
            i.model_copy(update={"quantity": i.quantity + quantity}) if i.product_id == product_id else i
            for i in cart
        ]
    return cart + [CartItem(product_id=product_id, quantity=quantity)]


def set_quantity(cart: Cart, product_id: int, quantity: int) -> Cart:
    # zero or less drops the line
    if quantity <= 0:
        return remove_item(cart, product_id)
    return [i.model_copy(update={"quantity": quantity}) if i.product_id == product_id else i for i in cart]


def remove_item(cart: Cart, product_id: int) -> Cart:
    return [i for i in cart if i.product_id != product_id]
