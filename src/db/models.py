# provide dataclass models

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    username: str
    password: str  # bcrypt hash
    role: str  # "buyer", "seller" or "admin"
    address: Optional[str]
    bank_account_name: Optional[str]
    bank_account_number: Optional[str]
    bank_ifsc_code: Optional[str]
    bank_name: Optional[str]
    payment_customer_id: Optional[str]
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class Session:
    sid: str
    user_id: int
    created_at: str
    expires_at: str


@dataclass(frozen=True)
class Product:
    id: int
    title: str
    description: Optional[str]
    price: float
    images: List[str]
    category: str
    quantity_available: int
    seller_id: int
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class CartItem:
    id: int
    user_id: int
    product_id: int
    quantity: int


@dataclass(frozen=True)
class Order:
    id: int
    buyer_id: int
    status: str
    total_amount: float
    shipping_address: Optional[str]
    payment_intent_id: Optional[str]
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class OrderItem:
    id: int
    order_id: int
    product_id: Optional[int]  # None once the product is deleted
    product_title: str
    seller_id: int  # product owner at time of order
    quantity: int
    unit_price: float  # unit price at time of order


@dataclass(frozen=True)
class Review:
    id: int
    product_id: int
    buyer_id: int
    rating: int
    comment: str
    created_at: str


@dataclass(frozen=True)
class Message:
    id: int
    sender_id: int
    receiver_id: int
    content: str
    is_read: bool
    created_at: str


@dataclass(frozen=True)
class Notification:
    id: int
    user_id: int
    title: str
    message: str
    type: str  # order_update | system | message | modification_request
    is_read: bool
    data: Optional[Dict[str, Any]]
    created_at: str


@dataclass(frozen=True)
class ModificationRequest:
    id: int
    product_id: int
    buyer_id: int
    seller_id: int
    request_details: str
    status: str  # pending | approved | denied
    seller_response: Optional[str]
    created_at: str
    updated_at: str
