# catalyst/domain/schemas.py
import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

FileType = Literal["youtube", "video", "audio", "pdf", "doc", "sheet", "link", "ebook"]
CouponType = Literal["percentage", "fixed"]
OrderStatus = Literal["Pending", "Shipped", "Completed", "Cancelled"]


class StoreModel(BaseModel):
    """Base for everything that is persisted: camelCase on the wire, immutable in memory."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# =====================================================
# CATALOG
# =====================================================
class ContentFile(StoreModel):
    id: str
    name: str = ""
    type: FileType
    url: str = ""
    content: Optional[str] = None


class ContentModule(StoreModel):
    id: str
    title: str
    files: List[ContentFile] = Field(default_factory=list)
    modules: List["ContentModule"] = Field(default_factory=list)

    @model_validator(mode="after")
    def _file_ids_unique(self):
        ids = [f.id for f in self.files]
        if len(ids) != len(set(ids)):
            raise ValueError(f"duplicate file id in module {self.id!r}")
        return self


ContentModule.model_rebuild()


def _walk_module_ids(modules: List[ContentModule]):
    for m in modules:
        yield m.id
        yield from _walk_module_ids(m.modules)


class ProductBase(StoreModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    long_description: str = ""
    price: str
    sale_price: Optional[str] = None
    category: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    image_seed: str = ""
    features: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    sku: Optional[str] = None
    file_format: Optional[str] = None
    in_stock: bool = True
    is_visible: bool = True
    is_free: bool = False
    manual_rating: Optional[float] = None
    coupon_code: Optional[str] = None
    payment_link: Optional[str] = None
    course_content: List[ContentModule] = Field(default_factory=list)

    @model_validator(mode="after")
    def _module_ids_unique(self):
        ids = list(_walk_module_ids(self.course_content))
        if len(ids) != len(set(ids)):
            raise ValueError("module ids must be unique across the whole content tree")
        return self


class Product(ProductBase):
    id: int


class ProductWithRating(Product):
    rating: float
    review_count: int
    calculated_rating: float


class Review(StoreModel):
    name: str = "Customer"
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    date: str = "Just now"


class RatingSummary(BaseModel):
    rating: float
    count: int


# =====================================================
# COMMERCE
# =====================================================
class CouponBase(StoreModel):
    code: str = Field(..., min_length=1)
    type: CouponType
    value: float = Field(..., gt=0)
    expiry_date: str
    is_active: bool = True
    usage_limit: int = Field(..., ge=0)
    times_used: int = Field(0, ge=0)


class Coupon(CouponBase):
    id: int


class CartItem(StoreModel):
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderItem(StoreModel):
    product_id: int = Field(..., alias="id")
    name: str
    quantity: int
    price: str


class Order(StoreModel):
    id: str
    customer_name: str = "Valued Customer"
    customer_email: str = "customer@example.com"
    date: datetime.date
    total: str
    status: OrderStatus
    items: List[OrderItem]
    shipping_address: str = "N/A (Digital Product)"
    billing_address: str = ""


class StoreState(StoreModel):
    """Everything the engine works on; operations return an updated copy."""

    products: List[Product] = Field(default_factory=list)
    reviews: Dict[int, List[Review]] = Field(default_factory=dict)
    coupons: List[Coupon] = Field(default_factory=list)
    orders: List[Order] = Field(default_factory=list)
    purchased_ids: List[int] = Field(default_factory=list)
    cart: List[CartItem] = Field(default_factory=list)


class PriceQuote(BaseModel):
    subtotal: int
    discount: int
    total: int


# =====================================================
# CONTENT TREE EDITS
# =====================================================
class AddModule(StoreModel):
    op: Literal["AddModule"] = "AddModule"
    parent_id: Optional[str] = None
    title: str = "New Module"


class AddFile(StoreModel):
    op: Literal["AddFile"] = "AddFile"
    module_id: str
    name: str
    type: FileType
    url: str = ""
    content: Optional[str] = None


class RenameModule(StoreModel):
    op: Literal["RenameModule"] = "RenameModule"
    module_id: str
    title: str


class DeleteModule(StoreModel):
    op: Literal["DeleteModule"] = "DeleteModule"
    module_id: str


class DeleteFile(StoreModel):
    op: Literal["DeleteFile"] = "DeleteFile"
    module_id: str
    file_id: str


TreeOp = Annotated[
    Union[AddModule, AddFile, RenameModule, DeleteModule, DeleteFile],
    Field(discriminator="op"),
]


# =====================================================
# API IN / OUT
# =====================================================
class TreeEditIn(StoreModel):
    edit: TreeOp


class TreeEditOut(StoreModel):
    product: ProductWithRating
    node_id: Optional[str] = None


class ReviewIn(StoreModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    name: Optional[str] = None


class ItemIn(StoreModel):
    """Schema for putting a product into the cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class QuantityIn(StoreModel):
    quantity: int


class ApplyCouponIn(StoreModel):
    code: str


class CustomerIn(StoreModel):
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None


class CheckoutIn(CustomerIn):
    coupon_code: Optional[str] = None


class BuyNowIn(CheckoutIn):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class CartLineOut(StoreModel):
    product_id: int
    title: str
    quantity: int
    unit_price: str
    line_total: str


class CartOut(StoreModel):
    items: List[CartLineOut]
    subtotal: str
    discount: str
    total: str
    coupon_code: Optional[str] = None


class AppliedCouponOut(StoreModel):
    applied: Coupon
    subtotal: str
    discount: str
    total: str


class CouponErrorOut(StoreModel):
    error: str
    message: str
