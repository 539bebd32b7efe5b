# catalyst/api/routers/cart.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from catalyst.api.dependencies import get_service, report_storage
from catalyst.api.routers.coupons import coupon_http_error
from catalyst.domain.errors import CouponError, NotFoundError
from catalyst.domain.schemas import CartOut, CheckoutIn, ItemIn, Order, QuantityIn
from catalyst.services.store_service import StoreService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/", response_model=CartOut)
def get_cart(
    coupon_code: Optional[str] = Query(None),
    svc: StoreService = Depends(get_service),
):
    try:
        return svc.get_cart(coupon_code)
    except CouponError as e:
        raise coupon_http_error(e)


@router.post("/items", response_model=CartOut)
def add_item(payload: ItemIn, response: Response, svc: StoreService = Depends(get_service)):
    try:
        cart = svc.add_to_cart(payload.product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    report_storage(response, svc)
    return cart


@router.put("/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: int,
    payload: QuantityIn,
    response: Response,
    svc: StoreService = Depends(get_service),
):
    cart = svc.update_cart_quantity(product_id, payload.quantity)
    report_storage(response, svc)
    return cart


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(product_id: int, response: Response, svc: StoreService = Depends(get_service)):
    cart = svc.remove_from_cart(product_id)
    report_storage(response, svc)
    return cart


@router.post("/checkout", response_model=Order, status_code=201)
def checkout(payload: CheckoutIn, response: Response, svc: StoreService = Depends(get_service)):
    """
    Turn the cart into a Completed order. Prices are taken from the catalog
    at this moment, the coupon (if any) is validated again and counted once.
    """
    try:
        order = svc.checkout(
            coupon_code=payload.coupon_code,
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
        )
    except CouponError as e:
        raise coupon_http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report_storage(response, svc)
    response.headers["X-Order-Id"] = order.id
    return order
