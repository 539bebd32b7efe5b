# catalyst/services/order_factory.py
"""
Order construction.

`commit` prices the lines again from the catalog it is given, so a price
shown earlier in the flow is never trusted. Nothing is applied until every
step has succeeded: the caller gets back the order together with the new
purchased-id list and the redeemed coupon, and swaps them in at once.
"""
from typing import Callable, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from catalyst.domain.errors import EmptyCartError
from catalyst.domain.schemas import CartItem, Coupon, Order, OrderItem, Product, StoreState
from catalyst.services import coupon_engine
from catalyst.services.pricing import price_lines, quote
from catalyst.utils.ids import next_time_id, now_ms
from catalyst.utils.logging import get_logger
from catalyst.utils.money import format_amount

logger = get_logger(__name__)

BILLING_ADDRESS = "123 E-commerce St, Web City, WC 54321"


class CommitResult(BaseModel):
    order: Order
    purchased_ids: List[int]
    coupon: Optional[Coupon] = None


def order_id_for(ms: int) -> str:
    return f"DC-{ms}"


def merge_purchased(purchased_ids: Iterable[int], new_ids: Iterable[int]) -> List[int]:
    merged = list(dict.fromkeys(purchased_ids))
    seen = set(merged)
    for pid in new_ids:
        if pid not in seen:
            merged.append(pid)
            seen.add(pid)
    return merged


def commit(
    items: List[CartItem],
    products: List[Product],
    coupon: Optional[Coupon],
    purchased_ids: List[int],
    taken_order_ids: Iterable[str] = (),
    today=None,
    clock: Callable[[], int] = now_ms,
    customer_name: Optional[str] = None,
    customer_email: Optional[str] = None,
) -> CommitResult:
    lines = price_lines(items, products)
    if not lines:
        raise EmptyCartError("Cart is empty")

    if coupon is not None:
        coupon_engine.validate(coupon, today)

    totals = quote(lines, coupon)

    order = Order(
        id=next_time_id(taken_order_ids, clock, fmt=order_id_for),
        customer_name=customer_name or "Valued Customer",
        customer_email=customer_email or "customer@example.com",
        date=coupon_engine.calendar_day(today),
        total=format_amount(totals.total),
        status="Completed",
        items=[
            OrderItem(
                product_id=line.product.id,
                name=line.product.title,
                quantity=line.quantity,
                price=format_amount(line.unit_price),
            )
            for line in lines
        ],
        billing_address=BILLING_ADDRESS,
    )

    return CommitResult(
        order=order,
        purchased_ids=merge_purchased(purchased_ids, (line.product.id for line in lines)),
        coupon=coupon_engine.redeem(coupon) if coupon is not None else None,
    )


def checkout(
    state: StoreState,
    items: List[CartItem],
    coupon_code: Optional[str] = None,
    clear_cart: bool = False,
    today=None,
    clock: Callable[[], int] = now_ms,
    customer_name: Optional[str] = None,
    customer_email: Optional[str] = None,
) -> Tuple[StoreState, CommitResult]:
    coupon = None
    if coupon_code:
        coupon = coupon_engine.lookup(state.coupons, coupon_code, today)

    result = commit(
        items,
        state.products,
        coupon,
        state.purchased_ids,
        taken_order_ids=(o.id for o in state.orders),
        today=today,
        clock=clock,
        customer_name=customer_name,
        customer_email=customer_email,
    )

    update = {
        # newest order first
        "orders": [result.order] + list(state.orders),
        "purchased_ids": result.purchased_ids,
    }
    if result.coupon is not None:
        update["coupons"] = [result.coupon if c.id == result.coupon.id else c for c in state.coupons]
    if clear_cart:
        update["cart"] = []

    logger.info(
        f"Order {result.order.id} committed: {len(result.order.items)} item(s), "
        f"total {result.order.total}, coupon {coupon.code if coupon else None}"
    )
    return state.model_copy(update=update), result
