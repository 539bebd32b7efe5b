# catalyst/services/store_service.py
from datetime import date
from typing import Callable, List, Optional, Tuple

from catalyst.domain.errors import NotFoundError, StorageError
from catalyst.domain.schemas import (
    AppliedCouponOut,
    CartItem,
    CartLineOut,
    CartOut,
    ContentFile,
    Coupon,
    CouponBase,
    Order,
    Product,
    ProductBase,
    ProductWithRating,
    Review,
    ReviewIn,
    StoreState,
)
from catalyst.services import cart_service, coupon_engine, order_factory
from catalyst.services.content_tree import apply_edit, find_file, first_file
from catalyst.services.notification_service import DISPATCH_ERRORS, NotificationService
from catalyst.services.persistence import PersistenceSync
from catalyst.services.pricing import price_lines, quote
from catalyst.services.ratings import with_rating
from catalyst.utils.ids import next_time_id, now_ms
from catalyst.utils.logging import get_logger
from catalyst.utils.money import format_amount, parse_amount, to_minor
from catalyst.utils.settings import FREE_PRODUCT_FEE

logger = get_logger(__name__)


class StoreService:
    """
    Use cases for the storefront and its admin panel.

    Queries read `self.state`. Commands build a new StoreState with the pure
    services, swap it in, then hand the touched collections to PersistenceSync.
    A failed write ends up in `storage_errors`; it never undoes the command.
    Notifications are best effort and never fail the command that sent them.
    """

    def __init__(
        self,
        sync: PersistenceSync,
        notifier: NotificationService | None = None,
        today: Callable[[], date] = date.today,
        clock: Callable[[], int] = now_ms,
    ):
        self.sync = sync
        self.notifier = notifier or NotificationService()
        self.today = today
        self.clock = clock
        self.storage_errors: List[StorageError] = []
        self.state: StoreState = sync.load_state()

    def _commit(self, state: StoreState, *fields: str):
        self.state = state
        self.storage_errors.extend(self.sync.commit(state, *fields))

    def _notify(self, send, payload):
        try:
            send(payload)
        except DISPATCH_ERRORS as e:
            logger.warning(f"{send.__name__} not dispatched: {e!r}")

    def _product(self, product_id: int) -> Product:
        product = next((p for p in self.state.products if p.id == product_id), None)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def _replace_product(self, product: Product) -> StoreState:
        products = [product if p.id == product.id else p for p in self.state.products]
        return self.state.model_copy(update={"products": products})

    # =====================================================
    # CATALOG QUERIES
    # =====================================================
    def list_products(self, include_hidden: bool = False) -> List[ProductWithRating]:
        return [
            with_rating(p, self.state.reviews)
            for p in self.state.products
            if include_hidden or p.is_visible
        ]

    def top_rated(self, limit: int = 3) -> List[ProductWithRating]:
        return sorted(self.list_products(), key=lambda p: p.rating, reverse=True)[:limit]

    def purchased_products(self) -> List[ProductWithRating]:
        owned = set(self.state.purchased_ids)
        return [with_rating(p, self.state.reviews) for p in self.state.products if p.id in owned]

    def get_product(self, product_id: int) -> ProductWithRating:
        return with_rating(self._product(product_id), self.state.reviews)

    def get_file(self, product_id: int, file_id: str) -> ContentFile:
        found = find_file(self._product(product_id).course_content, file_id)
        if not found:
            raise NotFoundError(f"File {file_id} not found in product {product_id}")
        return found

    def first_file(self, product_id: int) -> Optional[ContentFile]:
        return first_file(self._product(product_id).course_content)

    def list_reviews(self, product_id: int) -> List[Review]:
        self._product(product_id)
        return list(self.state.reviews.get(product_id, []))

    # =====================================================
    # CATALOG COMMANDS
    # =====================================================
    def _with_nominal_fee(self, payload: ProductBase) -> dict:
        data = payload.model_dump()
        if payload.sale_price:
            parse_amount(payload.sale_price)
        # a free product still carries a processing fee
        if parse_amount(payload.price) == 0 and payload.is_free:
            data["price"] = format_amount(to_minor(FREE_PRODUCT_FEE))
        return data

    def create_product(self, payload: ProductBase) -> Product:
        product_id = next_time_id((p.id for p in self.state.products), self.clock)
        product = Product(id=product_id, **self._with_nominal_fee(payload))

        self._commit(
            self.state.model_copy(update={"products": self.state.products + [product]}),
            "products",
        )
        logger.info(f"Product {product.id} created: {product.title!r}")
        self._notify(self.notifier.announce_new_product, product)
        return product

    def update_product(self, product_id: int, payload: ProductBase) -> Product:
        self._product(product_id)
        product = Product(id=product_id, **self._with_nominal_fee(payload))
        self._commit(self._replace_product(product), "products")
        logger.info(f"Product {product_id} updated")
        return product

    def delete_product(self, product_id: int) -> None:
        self._product(product_id)
        reviews = {pid: r for pid, r in self.state.reviews.items() if pid != product_id}
        self._commit(
            self.state.model_copy(
                update={
                    "products": [p for p in self.state.products if p.id != product_id],
                    "reviews": reviews,
                }
            ),
            "products",
            "reviews",
        )
        logger.info(f"Product {product_id} deleted")

    def edit_tree(self, product_id: int, edit) -> Tuple[ProductWithRating, Optional[str]]:
        product = self._product(product_id)
        tree, node_id = apply_edit(product.course_content, edit)
        updated = product.model_copy(update={"course_content": tree})

        self._commit(self._replace_product(updated), "products")
        logger.info(f"Product {product_id}: {edit.op} applied (new node: {node_id})")
        return with_rating(updated, self.state.reviews), node_id

    def add_review(self, product_id: int, payload: ReviewIn) -> Review:
        self._product(product_id)
        review = Review(name=payload.name or "Customer", rating=payload.rating, comment=payload.comment)
        reviews = dict(self.state.reviews)
        reviews[product_id] = [review] + list(reviews.get(product_id, []))

        self._commit(self.state.model_copy(update={"reviews": reviews}), "reviews")
        return review

    # =====================================================
    # COUPONS
    # =====================================================
    def list_coupons(self) -> List[Coupon]:
        return list(self.state.coupons)

    def _coupon(self, coupon_id: int) -> Coupon:
        coupon = next((c for c in self.state.coupons if c.id == coupon_id), None)
        if not coupon:
            raise NotFoundError(f"Coupon {coupon_id} not found")
        return coupon

    def create_coupon(self, payload: CouponBase) -> Coupon:
        if coupon_engine.find_coupon(self.state.coupons, payload.code):
            raise ValueError("Coupon code already exists")

        coupon_id = max((c.id for c in self.state.coupons), default=0) + 1
        coupon = Coupon(id=coupon_id, **payload.model_dump())
        self._commit(self.state.model_copy(update={"coupons": self.state.coupons + [coupon]}), "coupons")
        logger.info(f"Coupon {coupon.code} created")
        return coupon

    def update_coupon(self, coupon_id: int, payload: CouponBase) -> Coupon:
        current = self._coupon(coupon_id)
        clash = coupon_engine.find_coupon(self.state.coupons, payload.code)
        if clash and clash.id != coupon_id:
            raise ValueError("Coupon code already exists")

        # usage counter only moves forward, through checkout
        coupon = Coupon(id=coupon_id, **payload.model_dump(exclude={"times_used"}), times_used=current.times_used)
        coupons = [coupon if c.id == coupon_id else c for c in self.state.coupons]
        self._commit(self.state.model_copy(update={"coupons": coupons}), "coupons")
        return coupon

    def delete_coupon(self, coupon_id: int) -> None:
        self._coupon(coupon_id)
        coupons = [c for c in self.state.coupons if c.id != coupon_id]
        self._commit(self.state.model_copy(update={"coupons": coupons}), "coupons")

    def apply_coupon(self, code: str) -> AppliedCouponOut:
        """Validate a code and preview it on the current cart. Does not count as a use."""
        coupon = coupon_engine.lookup(self.state.coupons, code, self.today())
        totals = quote(price_lines(self.state.cart, self.state.products), coupon)
        logger.info(f"Coupon {coupon.code} applied to cart, discount {format_amount(totals.discount)}")
        return AppliedCouponOut(
            applied=coupon,
            subtotal=format_amount(totals.subtotal),
            discount=format_amount(totals.discount),
            total=format_amount(totals.total),
        )

    # =====================================================
    # CART
    # =====================================================
    def get_cart(self, coupon_code: Optional[str] = None) -> CartOut:
        coupon = coupon_engine.lookup(self.state.coupons, coupon_code, self.today()) if coupon_code else None
        lines = price_lines(self.state.cart, self.state.products)
        totals = quote(lines, coupon)
        return CartOut(
            items=[
                CartLineOut(
                    product_id=line.product.id,
                    title=line.product.title,
                    quantity=line.quantity,
                    unit_price=format_amount(line.unit_price),
                    line_total=format_amount(line.line_total),
                )
                for line in lines
            ],
            subtotal=format_amount(totals.subtotal),
            discount=format_amount(totals.discount),
            total=format_amount(totals.total),
            coupon_code=coupon.code if coupon else None,
        )

    def _set_cart(self, cart) -> CartOut:
        self._commit(self.state.model_copy(update={"cart": cart}), "cart")
        return self.get_cart()

    def add_to_cart(self, product_id: int, quantity: int = 1) -> CartOut:
        self._product(product_id)
        return self._set_cart(cart_service.add_item(self.state.cart, product_id, quantity))

    def update_cart_quantity(self, product_id: int, quantity: int) -> CartOut:
        return self._set_cart(cart_service.set_quantity(self.state.cart, product_id, quantity))

    def remove_from_cart(self, product_id: int) -> CartOut:
        return self._set_cart(cart_service.remove_item(self.state.cart, product_id))

    # =====================================================
    # CHECKOUT & ORDERS
    # =====================================================
    def _checkout(self, items, coupon_code, customer_name, customer_email) -> Order:
        state, result = order_factory.checkout(
            self.state,
            items,
            coupon_code=coupon_code,
            clear_cart=True,
            today=self.today(),
            clock=self.clock,
            customer_name=customer_name,
            customer_email=customer_email,
        )
        fields = ["orders", "purchased_ids", "cart"]
        if result.coupon is not None:
            fields.append("coupons")
        self._commit(state, *fields)

        self._notify(self.notifier.send_order_confirmation, result.order)
        return result.order

    def checkout(
        self,
        coupon_code: Optional[str] = None,
        customer_name: Optional[str] = None,
        customer_email: Optional[str] = None,
    ) -> Order:
        return self._checkout(self.state.cart, coupon_code, customer_name, customer_email)

    def buy_now(
        self,
        product_id: int,
        quantity: int = 1,
        coupon_code: Optional[str] = None,
        customer_name: Optional[str] = None,
        customer_email: Optional[str] = None,
    ) -> Order:
        self._product(product_id)
        item = CartItem(product_id=product_id, quantity=quantity)
        return self._checkout([item], coupon_code, customer_name, customer_email)

    def list_orders(self) -> List[Order]:
        return list(self.state.orders)

    def get_order(self, order_id: str) -> Order:
        order = next((o for o in self.state.orders if o.id == order_id), None)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return order
