# catalyst/domain/errors.py
from enum import Enum


class CouponErrorCode(str, Enum):
    INVALID_OR_INACTIVE = "InvalidOrInactive"
    EXPIRED = "Expired"
    LIMIT_REACHED = "LimitReached"
    MALFORMED_DATE = "MalformedDate"


_COUPON_MESSAGES = {
    CouponErrorCode.INVALID_OR_INACTIVE: "Invalid or inactive coupon.",
    CouponErrorCode.EXPIRED: "This coupon has expired.",
    CouponErrorCode.LIMIT_REACHED: "Coupon usage limit reached.",
    CouponErrorCode.MALFORMED_DATE: "Invalid coupon date format.",
}


class CouponError(Exception):
    def __init__(self, code: CouponErrorCode):
        self.code = code
        super().__init__(_COUPON_MESSAGES[code])

    @property
    def message(self) -> str:
        return str(self)


class StorageErrorKind(str, Enum):
    QUOTA_EXCEEDED = "QuotaExceeded"
    UNAVAILABLE = "Unavailable"
    SERIALIZATION_FAILURE = "SerializationFailure"


class StorageError(Exception):
    """`keys` lists every key of the failed write; none of them were stored."""

    def __init__(self, kind: StorageErrorKind, keys, detail: str = ""):
        self.kind = kind
        self.keys = (keys,) if isinstance(keys, str) else tuple(keys)
        super().__init__(f"{kind.value} for {self.key!r}" + (f": {detail}" if detail else ""))

    @property
    def key(self) -> str:
        return ", ".join(self.keys)


class NotFoundError(ValueError):
    pass


class EmptyCartError(ValueError):
    pass


class InvalidAmountError(ValueError):
    pass
