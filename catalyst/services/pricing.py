# catalyst/services/pricing.py
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from catalyst.domain.schemas import CartItem, Coupon, PriceQuote, Product
from catalyst.services import coupon_engine
from catalyst.utils.money import parse_amount


class PricedLine(BaseModel):
    product: Product
    quantity: int
    unit_price: int
    line_total: int


def effective_price(product: Product) -> int:
    """Sale price wins over the list price when one is set."""
    return parse_amount(product.sale_price or product.price)


def subtotal(items: Iterable[Tuple[int, int]]) -> int:
    return sum(unit_price * quantity for unit_price, quantity in items)


def final_price(subtotal_minor: int, discount_minor: int) -> int:
    return max(0, subtotal_minor - discount_minor)


def price_lines(items: Iterable[CartItem], products: Iterable[Product]) -> List[PricedLine]:
    """Price cart items against the current catalog; items for unknown products are skipped."""
    by_id: Dict[int, Product] = {p.id: p for p in products}
    lines = []
    for item in items:
        product = by_id.get(item.product_id)
        if product is None:
            continue
        unit = effective_price(product)
        lines.append(
            PricedLine(product=product, quantity=item.quantity, unit_price=unit, line_total=unit * item.quantity)
        )
    return lines


def quote(lines: List[PricedLine], coupon: Optional[Coupon] = None) -> PriceQuote:
    sub = subtotal((line.unit_price, line.quantity) for line in lines)
    disc = coupon_engine.discount(coupon, sub) if coupon else 0
    return PriceQuote(subtotal=sub, discount=disc, total=final_price(sub, disc))
