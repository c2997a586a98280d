"""
Request and response bodies. Field names are snake_case in Python and
camelCase on the wire.
"""

from dataclasses import asdict
from typing import Annotated, Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from db import models


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ---------------------------
# Requests
# ---------------------------

# larger values cannot be bound to an SQLite INTEGER
MAX_QUANTITY = 1_000_000
RowId = Annotated[int, Field(ge=1, le=2**63 - 1)]


class RegisterIn(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    confirm_password: Optional[str] = None
    role: str = "buyer"


class LoginIn(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileIn(CamelModel):
    name: Optional[str] = None
    address: Optional[str] = None
    bank_account_name: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_ifsc_code: Optional[str] = None
    bank_name: Optional[str] = None


class RoleIn(CamelModel):
    role: str


class ProductIn(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    images: List[str] = Field(default_factory=list)
    category: str = Field(..., min_length=1)
    quantity_available: int = Field(..., ge=0, le=MAX_QUANTITY)


class ProductUpdateIn(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    images: Optional[List[str]] = None
    category: Optional[str] = Field(None, min_length=1)
    quantity_available: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)


class CartAddIn(CamelModel):
    product_id: RowId
    quantity: int = Field(1, ge=1, le=MAX_QUANTITY)


class CartUpdateIn(CamelModel):
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)


class OrderLineIn(CamelModel):
    product_id: RowId
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)
    unit_price: Optional[float] = None


class OrderIn(CamelModel):
    items: List[OrderLineIn] = Field(..., min_length=1)
    total_amount: Optional[float] = Field(None, ge=0)
    shipping_address: Optional[str] = None
    payment_intent_id: Optional[str] = None


class StatusIn(CamelModel):
    status: str


class ReviewIn(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1)


class MessageIn(CamelModel):
    receiver_id: RowId
    content: str = Field(..., min_length=1)


class PaymentIntentIn(CamelModel):
    amount: float = Field(..., gt=0)


class ModificationRequestIn(CamelModel):
    product_id: RowId
    request_details: str = Field(..., min_length=10)


class ModificationResponseIn(CamelModel):
    status: str
    seller_response: Optional[str] = None


# ---------------------------
# Responses
# ---------------------------


class MessageOut(CamelModel):
    message: str


class CountOut(CamelModel):
    message: str
    count: int


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    username: str
    role: str
    address: Optional[str] = None
    bank_account_name: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_ifsc_code: Optional[str] = None
    bank_name: Optional[str] = None
    created_at: str


class UserSummaryOut(CamelModel):
    id: int
    name: str
    username: str
    role: str


class ProductOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    price: float
    images: List[str]
    category: str
    quantity_available: int
    seller_id: int
    created_at: str
    updated_at: str
    average_rating: float = 0.0
    review_count: int = 0


class CartItemOut(CamelModel):
    id: int
    product_id: int
    quantity: int
    product: ProductOut


class OrderItemOut(CamelModel):
    id: int
    product_id: Optional[int] = None
    product_title: str
    quantity: int
    unit_price: float


class OrderOut(CamelModel):
    id: int
    buyer_id: int
    status: str
    total_amount: float
    shipping_address: Optional[str] = None
    payment_intent_id: Optional[str] = None
    created_at: str
    updated_at: str
    items: List[OrderItemOut] = Field(default_factory=list)


class ReviewOut(CamelModel):
    id: int
    product_id: int
    buyer_id: int
    rating: int
    comment: str
    created_at: str
    buyer: Optional[UserSummaryOut] = None


class ChatMessageOut(CamelModel):
    id: int
    sender_id: int
    receiver_id: int
    content: str
    is_read: bool
    created_at: str


class NotificationOut(CamelModel):
    id: int
    title: str
    message: str
    type: str
    is_read: bool
    data: Optional[Dict[str, Any]] = None
    created_at: str


class ModificationRequestOut(CamelModel):
    id: int
    product_id: int
    buyer_id: int
    seller_id: int
    request_details: str
    status: str
    seller_response: Optional[str] = None
    created_at: str
    updated_at: str


class PaymentIntentOut(CamelModel):
    client_secret: str
    payment_intent_id: str


def product_out(
    product: models.Product, rating: Tuple[float, int] = (0.0, 0)
) -> ProductOut:
    average, count = rating
    return ProductOut(**asdict(product), average_rating=average, review_count=count)


def order_out(order: models.Order, items: List[models.OrderItem]) -> OrderOut:
    return OrderOut(
        **asdict(order), items=[OrderItemOut.model_validate(i) for i in items]
    )
