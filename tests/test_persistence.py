# tests/test_persistence.py
from typing import List

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from catalyst.data import seed
from catalyst.domain.errors import StorageErrorKind
from catalyst.domain.schemas import Coupon
from catalyst.repos.kv_repo import KeyValueRepo
from catalyst.repos.redis_repo import RedisKeyValueRepo
from catalyst.services.persistence import PersistenceSync, StorageKey


class Pipeline:
    """Buffers SETs and applies them on execute, or raises `error` and applies none."""

    def __init__(self, client, error=None):
        self.client = client
        self.error = error
        self.queued = {}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.queued = {}
        return False

    def set(self, key, value):
        self.queued[key] = value

    def execute(self):
        self.client.calls += 1
        if self.error:
            raise self.error
        self.client.data.update(self.queued)


class DictRedis:
    def __init__(self):
        self.data = {}
        self.calls = 0

    def get(self, key):
        return self.data.get(key)

    def pipeline(self, transaction=True):
        return Pipeline(self)


class FailingRedis(DictRedis):
    def __init__(self, error):
        super().__init__()
        self.error = error

    def get(self, key):
        self.calls += 1
        raise self.error

    def pipeline(self, transaction=True):
        return Pipeline(self, self.error)


def test_round_trip(sync):
    coupons = seed.initial_coupons()

    assert sync.save(StorageKey.COUPONS, coupons) is None
    assert sync.load(StorageKey.COUPONS, List[Coupon], []) == coupons


def test_records_are_camel_case_json(sync, repo):
    sync.save(StorageKey.COUPONS, seed.initial_coupons()[:1])

    raw = repo.get(StorageKey.COUPONS)

    assert '"expiryDate": "2025-12-31"' in raw
    assert '"timesUsed": 42' in raw


def test_missing_record_uses_default(sync):
    assert sync.load(StorageKey.COUPONS, List[Coupon], ["default"]) == ["default"]
    assert sync.exists(StorageKey.COUPONS) is False


def test_unparsable_record_uses_default(sync, repo):
    repo.set(StorageKey.COUPONS, "{not json")

    assert sync.load(StorageKey.COUPONS, List[Coupon], []) == []


def test_quota_exceeded_is_reported_not_raised(db):
    seen = []
    sync = PersistenceSync(KeyValueRepo(db, quota_bytes=64), on_error=seen.append)

    error = sync.save(StorageKey.PRODUCTS, seed.initial_products())

    assert error is not None
    assert error.kind == StorageErrorKind.QUOTA_EXCEEDED
    assert error.key == StorageKey.PRODUCTS
    assert seen == [error]
    assert sync.exists(StorageKey.PRODUCTS) is False


def test_quota_counts_other_keys_but_not_the_overwritten_one(db):
    repo = KeyValueRepo(db, quota_bytes=10)

    repo.set("a", "12345")
    repo.set("a", "1234567890")
    assert repo.used_bytes() == 10

    sync = PersistenceSync(repo)
    assert sync.save("b", 1).kind == StorageErrorKind.QUOTA_EXCEEDED
    assert repo.get("a") == "1234567890"


def test_unserializable_value(sync):
    error = sync.save(StorageKey.CART, {1, 2})

    assert error.kind == StorageErrorKind.SERIALIZATION_FAILURE
    assert sync.exists(StorageKey.CART) is False


def test_state_falls_back_to_seed_data(sync):
    state = sync.load_state()

    assert [p.id for p in state.products] == [p.id for p in seed.initial_products()]
    assert state.cart == []
    assert state.purchased_ids == []


def test_commit_writes_only_named_fields(sync):
    state = sync.load_state()

    assert sync.commit(state, "coupons", "cart") == []

    assert sync.exists(StorageKey.COUPONS)
    assert sync.exists(StorageKey.CART)
    assert not sync.exists(StorageKey.PRODUCTS)


def test_commit_is_all_or_nothing(db, sync, repo):
    state = sync.load_state()
    sync.commit(state, "coupons", "cart")
    baseline = {key: repo.get(key) for key in (StorageKey.COUPONS, StorageKey.CART)}

    tight = PersistenceSync(KeyValueRepo(db, quota_bytes=repo.used_bytes() + 40))
    changed = state.model_copy(update={"cart": [], "coupons": [], "orders": state.orders * 5})
    errors = tight.commit(changed, "coupons", "cart", "orders")

    assert [e.kind for e in errors] == [StorageErrorKind.QUOTA_EXCEEDED]
    assert set(errors[0].keys) == {StorageKey.COUPONS, StorageKey.CART, StorageKey.ORDERS}
    assert {key: repo.get(key) for key in baseline} == baseline
    assert not sync.exists(StorageKey.ORDERS)


def test_unserializable_field_blocks_the_whole_commit(sync):
    error = sync.save_many({StorageKey.ORDERS: [], StorageKey.PURCHASED: {1}})

    assert error.kind == StorageErrorKind.SERIALIZATION_FAILURE
    assert error.keys == (StorageKey.PURCHASED,)
    assert not sync.exists(StorageKey.ORDERS)


def test_seed_does_not_overwrite(sync):
    sync.save(StorageKey.COUPONS, [])

    written = seed.seed(sync)

    assert StorageKey.COUPONS not in written
    assert StorageKey.PRODUCTS in written
    assert sync.load(StorageKey.COUPONS, List[Coupon], None) == []


def test_reviews_keep_integer_keys(sync):
    reviews = seed.initial_reviews()
    sync.commit(sync.load_state(), "reviews")

    assert sync.load_state().reviews == reviews


# =====================================================
# redis backend
# =====================================================
def test_redis_round_trip_is_namespaced():
    client = DictRedis()
    sync = PersistenceSync(RedisKeyValueRepo(client=client, namespace="test"))

    sync.save(StorageKey.PURCHASED, [1, 2])

    assert client.data == {"test:purchasedProducts": "[1, 2]"}
    assert sync.load(StorageKey.PURCHASED, List[int], []) == [1, 2]


def test_redis_out_of_memory_is_quota_exceeded():
    client = FailingRedis(ResponseError("OOM command not allowed when used memory > 'maxmemory'."))
    sync = PersistenceSync(RedisKeyValueRepo(client=client))

    error = sync.save(StorageKey.ORDERS, [])

    assert error.kind == StorageErrorKind.QUOTA_EXCEEDED


def test_redis_commit_is_one_transaction():
    client = DictRedis()
    sync = PersistenceSync(RedisKeyValueRepo(client=client, namespace="test"))

    assert sync.save_many({StorageKey.CART: [], StorageKey.PURCHASED: [3]}) is None

    assert client.calls == 1
    assert client.data == {"test:shoppingCart": "[]", "test:purchasedProducts": "[3]"}


def test_redis_out_of_memory_inside_pipeline():
    error = ResponseError("Command # 2 (SET catalyst:siteOrders ...) of pipeline caused error: OOM command not allowed")
    client = FailingRedis(error)
    sync = PersistenceSync(RedisKeyValueRepo(client=client))

    failure = sync.save_many({StorageKey.CART: [], StorageKey.ORDERS: []})

    assert failure.kind == StorageErrorKind.QUOTA_EXCEEDED
    assert failure.keys == (StorageKey.CART, StorageKey.ORDERS)
    assert client.data == {}


def test_redis_down_on_write_is_unavailable():
    client = FailingRedis(RedisConnectionError("refused"))
    sync = PersistenceSync(RedisKeyValueRepo(client=client))

    error = sync.save(StorageKey.ORDERS, [])

    assert error.kind == StorageErrorKind.UNAVAILABLE
    assert client.calls == 1


def test_redis_reads_are_retried_then_fall_back():
    client = FailingRedis(RedisConnectionError("refused"))
    sync = PersistenceSync(RedisKeyValueRepo(client=client))

    assert sync.load(StorageKey.PURCHASED, List[int], [7]) == [7]
    assert client.calls == 3


@pytest.mark.parametrize("error", [ResponseError("WRONGTYPE"), RedisConnectionError("refused")])
def test_redis_state_load_survives_backend_errors(error):
    sync = PersistenceSync(RedisKeyValueRepo(client=FailingRedis(error)))

    state = sync.load_state()

    assert state.coupons == seed.initial_coupons()
