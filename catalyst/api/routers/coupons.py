# catalyst/api/routers/coupons.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from catalyst.api.dependencies import get_service, report_storage
from catalyst.domain.errors import CouponError, NotFoundError
from catalyst.domain.schemas import AppliedCouponOut, ApplyCouponIn, Coupon, CouponBase, CouponErrorOut
from catalyst.services.store_service import StoreService

router = APIRouter(prefix="/coupons", tags=["coupons"])


def coupon_http_error(e: CouponError) -> HTTPException:
    body = CouponErrorOut(error=e.code.value, message=e.message)
    return HTTPException(status_code=400, detail=body.model_dump(by_alias=True))


@router.get("/", response_model=List[Coupon])
def list_coupons(svc: StoreService = Depends(get_service)):
    return svc.list_coupons()


@router.post("/apply", response_model=AppliedCouponOut)
def apply_coupon(payload: ApplyCouponIn, svc: StoreService = Depends(get_service)):
    """
    Validate a code against the current cart and preview the discount.
    The coupon's usage counter is left alone.
    """
    try:
        return svc.apply_coupon(payload.code)
    except CouponError as e:
        raise coupon_http_error(e)


@router.post("/", response_model=Coupon, status_code=201)
def create_coupon(payload: CouponBase, response: Response, svc: StoreService = Depends(get_service)):
    try:
        coupon = svc.create_coupon(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    report_storage(response, svc)
    return coupon


@router.put("/{coupon_id}", response_model=Coupon)
def update_coupon(
    coupon_id: int,
    payload: CouponBase,
    response: Response,
    svc: StoreService = Depends(get_service),
):
    try:
        coupon = svc.update_coupon(coupon_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    report_storage(response, svc)
    return coupon


@router.delete("/{coupon_id}", status_code=204)
def delete_coupon(coupon_id: int, response: Response, svc: StoreService = Depends(get_service)):
    try:
        svc.delete_coupon(coupon_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    report_storage(response, svc)
