"""
Async HTTP client for the marketplace API, used by the terminal app.

Responses are returned as the decoded camelCase JSON. Any non-2xx answer
raises ApiError carrying the status code and the server's message.
"""

from typing import Any, Dict, List, Optional

import httpx

from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class MarketplaceClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url or config.API_BASE_URL,
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = await self._http.request(method, url, json=json, params=params)
        except httpx.HTTPError as e:
            _logger.warning(f"{method} {url} failed: {e}")
            raise ApiError(0, f"Cannot reach the marketplace server ({e.__class__.__name__})") from e

        if response.is_error:
            try:
                message = response.json().get("message") or response.reason_phrase
            except ValueError:
                message = response.text or response.reason_phrase
            _logger.debug(f"{method} {url} -> {response.status_code}: {message}")
            raise ApiError(response.status_code, message)
        if not response.content:
            return None
        return response.json()

    # ---------------------------
    # Auth & users
    # ---------------------------

    async def register(
        self,
        name: str,
        email: str,
        username: str,
        password: str,
        confirm_password: Optional[str] = None,
        role: str = "buyer",
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/auth/register",
            json={
                "name": name,
                "email": email,
                "username": username,
                "password": password,
                "confirmPassword": confirm_password if confirm_password is not None else password,
                "role": role,
            },
        )

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )

    async def logout(self) -> None:
        await self._request("POST", "/api/auth/logout")
        self._http.cookies.clear()

    async def me(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/auth/me")

    async def update_profile(self, **fields) -> Dict[str, Any]:
        return await self._request("PATCH", "/api/users/profile", json=fields)

    async def get_user(self, user_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/users/{user_id}")

    async def list_users(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/admin/users")

    async def change_role(self, user_id: int, role: str) -> Dict[str, Any]:
        return await self._request("PATCH", f"/api/admin/users/{user_id}", json={"role": role})

    # ---------------------------
    # Products & reviews
    # ---------------------------

    async def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        seller_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = {"category": category, "search": search, "sellerId": seller_id}
        params = {k: v for k, v in params.items() if v not in (None, "")}
        return await self._request("GET", "/api/products", params=params)

    async def get_product(self, product_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/products/{product_id}")

    async def create_product(self, **fields) -> Dict[str, Any]:
        return await self._request("POST", "/api/products", json=fields)

    async def update_product(self, product_id: int, **fields) -> Dict[str, Any]:
        return await self._request("PUT", f"/api/products/{product_id}", json=fields)

    async def delete_product(self, product_id: int) -> None:
        await self._request("DELETE", f"/api/products/{product_id}")

    async def list_reviews(self, product_id: int) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/api/products/{product_id}/reviews")

    async def create_review(self, product_id: int, rating: int, comment: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/api/products/{product_id}/reviews",
            json={"rating": rating, "comment": comment},
        )

    # ---------------------------
    # Cart
    # ---------------------------

    async def get_cart(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/cart")

    async def add_to_cart(self, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        return await self._request(
            "POST", "/api/cart", json={"productId": product_id, "quantity": quantity}
        )

    async def update_cart_item(self, item_id: int, quantity: int) -> Dict[str, Any]:
        return await self._request("PUT", f"/api/cart/{item_id}", json={"quantity": quantity})

    async def remove_cart_item(self, item_id: int) -> None:
        await self._request("DELETE", f"/api/cart/{item_id}")

    async def clear_cart(self) -> None:
        await self._request("DELETE", "/api/cart")

    # ---------------------------
    # Orders & payments
    # ---------------------------

    async def place_order(
        self,
        items: List[Dict[str, Any]],
        total_amount: Optional[float] = None,
        shipping_address: Optional[str] = None,
        payment_intent_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """`items` are {"productId", "quantity", "unitPrice"?} dicts."""
        body: Dict[str, Any] = {"items": items}
        if total_amount is not None:
            body["totalAmount"] = total_amount
        if shipping_address:
            body["shippingAddress"] = shipping_address
        if payment_intent_id:
            body["paymentIntentId"] = payment_intent_id
        return await self._request("POST", "/api/orders", json=body)

    async def list_orders(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/orders")

    async def list_buyer_orders(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/orders/buyer")

    async def get_order(self, order_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/orders/{order_id}")

    async def update_order_status(self, order_id: int, status: str) -> Dict[str, Any]:
        return await self._request(
            "PATCH", f"/api/orders/{order_id}/status", json={"status": status}
        )

    async def create_payment_intent(self, amount: float) -> Dict[str, Any]:
        return await self._request("POST", "/api/create-payment-intent", json={"amount": amount})

    # ---------------------------
    # Messages & notifications
    # ---------------------------

    async def inbox(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/messages")

    async def conversation(self, other_id: int) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/api/messages/{other_id}")

    async def send_message(self, receiver_id: int, content: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/api/messages", json={"receiverId": receiver_id, "content": content}
        )

    async def list_notifications(self, unread_only: bool = False) -> List[Dict[str, Any]]:
        params = {"unreadOnly": "true"} if unread_only else None
        return await self._request("GET", "/api/notifications", params=params)

    async def unread_notification_count(self) -> int:
        return (await self._request("GET", "/api/notifications/unread-count"))["count"]

    async def mark_notification_read(self, notification_id: int) -> Dict[str, Any]:
        return await self._request("PUT", f"/api/notifications/{notification_id}/read")

    async def mark_all_notifications_read(self) -> int:
        return (await self._request("PUT", "/api/notifications/read-all"))["count"]

    # ---------------------------
    # Product modification requests
    # ---------------------------

    async def request_modification(self, product_id: int, details: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/product-modification-requests",
            json={"productId": product_id, "requestDetails": details},
        )

    async def buyer_modification_requests(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/product-modification-requests/buyer")

    async def seller_modification_requests(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/product-modification-requests/seller")

    async def respond_modification_request(
        self, request_id: int, status: str, response: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self._request(
            "PATCH",
            f"/api/product-modification-requests/{request_id}",
            json={"status": status, "sellerResponse": response},
        )
