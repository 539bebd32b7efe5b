# catalyst/services/coupon_engine.py
"""
Coupon validation and discounting.

Checks run in a fixed order and the first failure wins: activity, expiry
(valid through the whole expiry day, local calendar), then usage limit.
Nothing here touches `times_used`; `redeem` is only called when an order
is committed.
"""
from datetime import date, datetime
from typing import Iterable, Optional

from catalyst.domain.errors import CouponError, CouponErrorCode
from catalyst.domain.schemas import Coupon
from catalyst.utils.money import percent_of, to_minor

EXPIRY_FORMAT = "%Y-%m-%d"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def find_coupon(coupons: Iterable[Coupon], code: str) -> Optional[Coupon]:
    wanted = normalize_code(code)
    if not wanted:
        return None
    return next((c for c in coupons if normalize_code(c.code) == wanted), None)


def calendar_day(today) -> date:
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        # aware timestamps are moved to the local zone first
        return (today.astimezone() if today.tzinfo else today).date()
    return today


def parse_expiry(text: str) -> date:
    try:
        return datetime.strptime((text or "").strip(), EXPIRY_FORMAT).date()
    except ValueError:
        raise CouponError(CouponErrorCode.MALFORMED_DATE)


def validate(coupon: Optional[Coupon], today=None) -> Coupon:
    if coupon is None or not coupon.is_active:
        raise CouponError(CouponErrorCode.INVALID_OR_INACTIVE)

    if parse_expiry(coupon.expiry_date) < calendar_day(today):
        raise CouponError(CouponErrorCode.EXPIRED)

    if coupon.times_used >= coupon.usage_limit:
        raise CouponError(CouponErrorCode.LIMIT_REACHED)

    return coupon


def lookup(coupons: Iterable[Coupon], code: str, today=None) -> Coupon:
    return validate(find_coupon(coupons, code), today)


def discount(coupon: Coupon, subtotal: int) -> int:
    """Discount in minor units, always within [0, subtotal]."""
    if subtotal <= 0:
        return 0
    if coupon.type == "fixed":
        amount = to_minor(coupon.value)
    elif coupon.type == "percentage":
        amount = percent_of(subtotal, coupon.value)
    else:
        return 0
    return max(0, min(amount, subtotal))


def redeem(coupon: Coupon) -> Coupon:
    return coupon.model_copy(update={"times_used": coupon.times_used + 1})
