# catalyst/services/persistence.py
"""
Write-behind persistence for the store state.

`save` and `commit` never raise: a failed write is logged, handed to the
optional `on_error` callback and returned, while the in-memory state that
triggered it stays as it is. `commit` writes all of its keys together, so
storage never holds half of a command. `load` falls back to the supplied
default when a record is missing, unreadable or the backend is down.
"""
import json
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from catalyst.data import seed
from catalyst.domain.errors import StorageError, StorageErrorKind
from catalyst.domain.schemas import CartItem, Coupon, Order, Product, Review, StoreState
from catalyst.utils.logging import get_logger

logger = get_logger(__name__)


class StorageKey:
    PRODUCTS = "siteProducts"
    REVIEWS = "productReviews"
    COUPONS = "siteCoupons"
    ORDERS = "siteOrders"
    PURCHASED = "purchasedProducts"
    CART = "shoppingCart"


# state field -> (storage key, stored type)
STATE_KEYS: Dict[str, tuple] = {
    "products": (StorageKey.PRODUCTS, List[Product]),
    "reviews": (StorageKey.REVIEWS, Dict[int, List[Review]]),
    "coupons": (StorageKey.COUPONS, List[Coupon]),
    "orders": (StorageKey.ORDERS, List[Order]),
    "purchased_ids": (StorageKey.PURCHASED, List[int]),
    "cart": (StorageKey.CART, List[CartItem]),
}


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class PersistenceSync:
    def __init__(self, repo, on_error: Optional[Callable[[StorageError], None]] = None):
        self.repo = repo
        self.on_error = on_error

    def _report(self, error: StorageError) -> StorageError:
        if error.kind == StorageErrorKind.QUOTA_EXCEEDED:
            logger.warning(f"Storage full, {error.key!r} kept in memory only: {error}")
        else:
            logger.warning(f"Could not persist {error.key!r}: {error}")
        if self.on_error:
            self.on_error(error)
        return error

    def save(self, key: str, value: Any) -> Optional[StorageError]:
        return self.save_many({key: value})

    def save_many(self, values: Dict[str, Any]) -> Optional[StorageError]:
        """Serialize every value, then write them as one unit. Nothing is written on failure."""
        payloads = {}
        for key, value in values.items():
            try:
                payloads[key] = json.dumps(to_jsonable(value), ensure_ascii=False)
            except (TypeError, ValueError) as e:
                return self._report(StorageError(StorageErrorKind.SERIALIZATION_FAILURE, key, str(e)))

        try:
            self.repo.set_many(payloads)
        except StorageError as e:
            return self._report(e)

        logger.debug(f"Saved {list(payloads)} ({sum(len(p) for p in payloads.values())} chars)")
        return None

    def load(self, key: str, type_, default):
        try:
            raw = self.repo.get(key)
        except StorageError as e:
            logger.warning(f"Store unavailable while loading {key!r}, using defaults: {e}")
            return default

        if raw is None:
            logger.debug(f"No record for {key!r}, using defaults")
            return default

        try:
            return TypeAdapter(type_).validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Unparsable record for {key!r}, using defaults: {e.error_count()} error(s)")
            return default

    def exists(self, key: str) -> bool:
        try:
            return self.repo.get(key) is not None
        except StorageError:
            return False

    # =====================================================
    # whole-state helpers
    # =====================================================
    def load_state(self) -> StoreState:
        defaults = {
            "products": seed.initial_products(),
            "reviews": seed.initial_reviews(),
            "coupons": seed.initial_coupons(),
            "orders": seed.initial_orders(),
            "purchased_ids": [],
            "cart": [],
        }
        return StoreState(
            **{field: self.load(key, type_, defaults[field]) for field, (key, type_) in STATE_KEYS.items()}
        )

    def commit(self, state: StoreState, *fields: str) -> List[StorageError]:
        """Persist the named state fields atomically; returns the failure, if any."""
        if not fields:
            return []
        error = self.save_many({STATE_KEYS[field][0]: getattr(state, field) for field in fields})
        return [error] if error is not None else []
