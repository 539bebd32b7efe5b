# tests/test_store_service.py
import pytest
from kombu.exceptions import OperationalError as BrokerError

from catalyst.domain.errors import CouponError, EmptyCartError, NotFoundError, StorageErrorKind
from catalyst.domain.schemas import AddFile, AddModule, CouponBase, ProductBase, ReviewIn
from catalyst.repos.kv_repo import KeyValueRepo
from catalyst.services.persistence import STATE_KEYS, PersistenceSync, StorageKey
from catalyst.services.store_service import StoreService


def _coupon(service, code):
    return next(c for c in service.list_coupons() if c.code == code)


def test_apply_coupon_previews_without_counting_a_use(service, make_service, sync):
    service.add_to_cart(2)

    applied = service.apply_coupon("summer25")

    assert applied.subtotal == "₹1999.00"
    assert applied.discount == "₹499.75"
    assert applied.total == "₹1499.25"
    assert _coupon(service, "SUMMER25").times_used == 42
    assert _coupon(make_service(sync), "SUMMER25").times_used == 42


def test_apply_invalid_coupon_raises_with_code(service):
    with pytest.raises(CouponError) as exc:
        service.apply_coupon("WELCOME500")
    assert exc.value.code.value == "Expired"


def test_checkout_persists_order_and_counts_coupon_once(service, make_service, sync, notifier):
    service.add_to_cart(1, 2)

    order = service.checkout(coupon_code="SUMMER25", customer_name="Asha")

    assert order.total == "₹448.50"
    assert order.customer_name == "Asha"
    assert notifier.orders == [order]
    assert service.storage_errors == []

    reloaded = make_service(sync)
    assert reloaded.list_orders()[0] == order
    assert reloaded.state.cart == []
    assert reloaded.state.purchased_ids == [1]
    assert _coupon(reloaded, "SUMMER25").times_used == 43
    assert [p.id for p in reloaded.purchased_products()] == [1]


def test_checkout_with_empty_cart(service):
    with pytest.raises(EmptyCartError):
        service.checkout()


def test_failed_coupon_at_checkout_leaves_cart_alone(service):
    service.add_to_cart(1)

    with pytest.raises(CouponError):
        service.checkout(coupon_code="FLAT150")

    assert len(service.state.cart) == 1
    assert len(service.list_orders()) == 2


def test_buy_now_ignores_cart_contents_but_clears_it(service):
    service.add_to_cart(2)

    order = service.buy_now(4, quantity=1)

    assert [(i.product_id, i.quantity) for i in order.items] == [(4, 1)]
    assert order.total == "₹599.00"
    assert service.state.cart == []


def test_buy_now_unknown_product(service):
    with pytest.raises(NotFoundError):
        service.buy_now(404)


def test_storage_failure_keeps_memory_state(db, make_service, sync):
    sync.commit(sync.load_state(), "products", "coupons")
    full = PersistenceSync(KeyValueRepo(db, quota_bytes=1))
    service = make_service(full)
    service.add_to_cart(1)

    order = service.checkout()

    assert service.list_orders()[0] == order
    assert service.state.cart == []
    assert {e.kind for e in service.storage_errors} == {StorageErrorKind.QUOTA_EXCEEDED}
    assert set(service.storage_errors[-1].keys) == {StorageKey.ORDERS, StorageKey.PURCHASED, StorageKey.CART}


def test_checkout_that_does_not_fit_leaves_storage_untouched(db, repo, make_service, sync):
    service = make_service(sync)
    service.add_to_cart(1)
    sync.commit(service.state, *STATE_KEYS)

    tight = PersistenceSync(KeyValueRepo(db, quota_bytes=repo.used_bytes() + 40))
    order = make_service(tight).checkout(coupon_code="SUMMER25")

    reloaded = make_service(sync)
    assert order.id not in [o.id for o in reloaded.list_orders()]
    assert reloaded.state.purchased_ids == []
    assert [(i.product_id, i.quantity) for i in reloaded.state.cart] == [(1, 1)]
    assert _coupon(reloaded, "SUMMER25").times_used == 42


class BrokenNotifier:
    def __init__(self, error):
        self.error = error

    def send_order_confirmation(self, order):
        raise self.error

    def announce_new_product(self, product):
        raise self.error


@pytest.mark.parametrize("error", [BrokerError("Error 111 connecting to 127.0.0.1:1"), RuntimeError("broker down")])
def test_unreachable_broker_does_not_fail_checkout(sync, error):
    service = StoreService(sync, notifier=BrokenNotifier(error))
    service.add_to_cart(1)

    order = service.checkout()

    reloaded = StoreService(sync)
    assert reloaded.list_orders()[0] == order
    assert reloaded.state.cart == []


def test_unreachable_broker_does_not_fail_product_creation(sync):
    service = StoreService(sync, notifier=BrokenNotifier(BrokerError("refused")))

    product = service.create_product(ProductBase(title="Kit", price="₹10"))

    assert service.get_product(product.id).title == "Kit"


def test_edit_tree_persists_and_returns_new_node(service, make_service, sync):
    product, module_id = service.edit_tree(2, AddModule(title="Bonus"))
    product, file_id = service.edit_tree(2, AddFile(module_id=module_id, name="Checklist", type="pdf", url="u"))

    assert service.get_file(2, file_id).name == "Checklist"
    assert make_service(sync).get_file(2, file_id).name == "Checklist"
    assert product.course_content[-1].id == module_id


def test_edit_tree_on_unknown_product(service):
    with pytest.raises(NotFoundError):
        service.edit_tree(404, AddModule())


def test_missing_file_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.get_file(2, "nope")


def test_free_product_gets_nominal_fee(service, notifier):
    product = service.create_product(ProductBase(title="Starter Kit", price="₹0", is_free=True))

    assert product.price == "₹3.00"
    assert notifier.products == [product]
    assert service.get_product(product.id).title == "Starter Kit"


def test_create_product_rejects_bad_price(service):
    with pytest.raises(ValueError):
        service.create_product(ProductBase(title="Bad", price="free"))


def test_hidden_products_are_filtered(service):
    first = service.state.products[0]
    service.update_product(first.id, ProductBase(**first.model_dump(exclude={"id"}) | {"is_visible": False}))

    assert first.id not in [p.id for p in service.list_products()]
    assert first.id in [p.id for p in service.list_products(include_hidden=True)]


def test_delete_product_drops_its_reviews(service):
    service.delete_product(1)

    assert 1 not in service.state.reviews
    with pytest.raises(NotFoundError):
        service.get_product(1)


def test_new_review_comes_first_and_moves_the_rating(service):
    service.add_review(2, ReviewIn(rating=1, comment="Too long"))

    reviews = service.list_reviews(2)
    assert reviews[0].comment == "Too long"
    assert reviews[0].name == "Customer"
    assert service.get_product(2).review_count == len(reviews)


def test_top_rated_uses_display_rating(service):
    top = service.top_rated(3)

    assert [p.id for p in top] == [1, 2, 4]


def test_coupon_codes_are_unique_ignoring_case(service):
    base = dict(type="fixed", value=50, expiry_date="2030-01-01", usage_limit=10)

    created = service.create_coupon(CouponBase(code="NEW50", **base))
    assert created.id == 5

    with pytest.raises(ValueError):
        service.create_coupon(CouponBase(code="new50", **base))


def test_update_coupon_keeps_usage_counter(service):
    current = _coupon(service, "SUMMER25")

    updated = service.update_coupon(
        current.id,
        CouponBase(**current.model_dump(exclude={"id", "times_used"}) | {"value": 30}),
    )

    assert updated.value == 30
    assert updated.times_used == 42


def test_delete_coupon(service, make_service, sync):
    service.delete_coupon(4)

    assert "FLAT150" not in [c.code for c in make_service(sync).list_coupons()]
    with pytest.raises(NotFoundError):
        service.delete_coupon(4)


def test_cart_view_prices_lines(service):
    service.add_to_cart(1, 2)
    service.add_to_cart(4)

    cart = service.get_cart("summer25")

    assert [(line.product_id, line.line_total) for line in cart.items] == [(1, "₹598.00"), (4, "₹599.00")]
    assert cart.subtotal == "₹1197.00"
    assert cart.coupon_code == "SUMMER25"

    cart = service.update_cart_quantity(1, 0)
    assert [line.product_id for line in cart.items] == [4]
