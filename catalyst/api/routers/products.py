# catalyst/api/routers/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from catalyst.api.dependencies import get_service, report_storage
from catalyst.domain.errors import NotFoundError
from catalyst.domain.schemas import (
    ContentFile,
    Product,
    ProductBase,
    ProductWithRating,
    Review,
    ReviewIn,
    TreeEditIn,
    TreeEditOut,
)
from catalyst.services.store_service import StoreService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[ProductWithRating])
def list_products(
    include_hidden: bool = Query(False),
    svc: StoreService = Depends(get_service),
):
    return svc.list_products(include_hidden=include_hidden)


@router.get("/top-rated", response_model=List[ProductWithRating])
def top_rated(limit: int = Query(3, gt=0), svc: StoreService = Depends(get_service)):
    return svc.top_rated(limit)


@router.get("/purchased", response_model=List[ProductWithRating])
def purchased(svc: StoreService = Depends(get_service)):
    return svc.purchased_products()


@router.get("/{product_id}", response_model=ProductWithRating)
def get_product(product_id: int, svc: StoreService = Depends(get_service)):
    try:
        return svc.get_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/", response_model=Product, status_code=201)
def create_product(payload: ProductBase, response: Response, svc: StoreService = Depends(get_service)):
    try:
        product = svc.create_product(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    report_storage(response, svc)
    return product


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    payload: ProductBase,
    response: Response,
    svc: StoreService = Depends(get_service),
):
    try:
        product = svc.update_product(product_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    report_storage(response, svc)
    return product


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, response: Response, svc: StoreService = Depends(get_service)):
    try:
        svc.delete_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    report_storage(response, svc)


# =====================================================
# CONTENT TREE
# =====================================================
@router.get("/{product_id}/content/first", response_model=Optional[ContentFile])
def first_file(product_id: int, svc: StoreService = Depends(get_service)):
    try:
        return svc.first_file(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{product_id}/content/files/{file_id}", response_model=ContentFile)
def get_file(product_id: int, file_id: str, svc: StoreService = Depends(get_service)):
    try:
        return svc.get_file(product_id, file_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{product_id}/content", response_model=TreeEditOut)
def edit_tree(
    product_id: int,
    payload: TreeEditIn,
    response: Response,
    svc: StoreService = Depends(get_service),
):
    """Apply one edit (AddModule, AddFile, RenameModule, DeleteModule, DeleteFile) to the content tree."""
    try:
        product, node_id = svc.edit_tree(product_id, payload.edit)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    report_storage(response, svc)
    return TreeEditOut(product=product, node_id=node_id)


# =====================================================
# REVIEWS
# =====================================================
@router.get("/{product_id}/reviews", response_model=List[Review])
def list_reviews(product_id: int, svc: StoreService = Depends(get_service)):
    try:
        return svc.list_reviews(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{product_id}/reviews", response_model=Review, status_code=201)
def add_review(
    product_id: int,
    payload: ReviewIn,
    response: Response,
    svc: StoreService = Depends(get_service),
):
    try:
        review = svc.add_review(product_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    report_storage(response, svc)
    return review
