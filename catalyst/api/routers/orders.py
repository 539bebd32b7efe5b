# catalyst/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from catalyst.api.dependencies import get_service, report_storage
from catalyst.api.routers.coupons import coupon_http_error
from catalyst.domain.errors import CouponError, NotFoundError
from catalyst.domain.schemas import BuyNowIn, Order
from catalyst.services.store_service import StoreService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/", response_model=List[Order])
def list_orders(svc: StoreService = Depends(get_service)):
    """Newest order first."""
    return svc.list_orders()


@router.post("/buy-now", response_model=Order, status_code=201)
def buy_now(payload: BuyNowIn, response: Response, svc: StoreService = Depends(get_service)):
    try:
        order = svc.buy_now(
            payload.product_id,
            quantity=payload.quantity,
            coupon_code=payload.coupon_code,
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CouponError as e:
        raise coupon_http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report_storage(response, svc)
    response.headers["X-Order-Id"] = order.id
    return order


@router.get("/{order_id}", response_model=Order)
def get_order(order_id: str, svc: StoreService = Depends(get_service)):
    try:
        return svc.get_order(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
