# src/db/crud.py
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlite3 import Row

from db import models
from db.database import connect, transaction
from utils.errors import InsufficientStockError, NotFoundError, ValidationError


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _user(row: Row) -> models.User:
    return models.User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        username=row["username"],
        password=row["password"],
        role=row["role"],
        address=row["address"],
        bank_account_name=row["bank_account_name"],
        bank_account_number=row["bank_account_number"],
        bank_ifsc_code=row["bank_ifsc_code"],
        bank_name=row["bank_name"],
        payment_customer_id=row["payment_customer_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _product(row: Row) -> models.Product:
    return models.Product(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        price=float(row["price"]),
        images=json.loads(row["images"] or "[]"),
        category=row["category"],
        quantity_available=int(row["quantity_available"]),
        seller_id=row["seller_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _order(row: Row) -> models.Order:
    return models.Order(
        id=row["id"],
        buyer_id=row["buyer_id"],
        status=row["status"],
        total_amount=float(row["total_amount"]),
        shipping_address=row["shipping_address"],
        payment_intent_id=row["payment_intent_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _order_item(row: Row) -> models.OrderItem:
    return models.OrderItem(
        id=row["id"],
        order_id=row["order_id"],
        product_id=row["product_id"],
        product_title=row["product_title"],
        seller_id=row["seller_id"],
        quantity=int(row["quantity"]),
        unit_price=float(row["unit_price"]),
    )


def _notification(row: Row) -> models.Notification:
    return models.Notification(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        message=row["message"],
        type=row["type"],
        is_read=bool(row["is_read"]),
        data=json.loads(row["data"]) if row["data"] else None,
        created_at=row["created_at"],
    )


def _message(row: Row) -> models.Message:
    return models.Message(
        id=row["id"],
        sender_id=row["sender_id"],
        receiver_id=row["receiver_id"],
        content=row["content"],
        is_read=bool(row["is_read"]),
        created_at=row["created_at"],
    )


def _mod_request(row: Row) -> models.ModificationRequest:
    return models.ModificationRequest(
        id=row["id"],
        product_id=row["product_id"],
        buyer_id=row["buyer_id"],
        seller_id=row["seller_id"],
        request_details=row["request_details"],
        status=row["status"],
        seller_response=row["seller_response"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def _fetch_one(sql: str, params: Iterable[Any] = ()) -> Optional[Row]:
    async with connect() as conn:
        cur = await conn.execute(sql, tuple(params))
        row = await cur.fetchone()
        await cur.close()
    return row


async def _fetch_all(sql: str, params: Iterable[Any] = ()) -> List[Row]:
    async with connect() as conn:
        cur = await conn.execute(sql, tuple(params))
        rows = await cur.fetchall()
        await cur.close()
    return list(rows)


# ---------------------------
# Users & Registration
# ---------------------------


async def email_available(email: str) -> bool:
    """True if no user already registered with the given email (case-insensitive)."""
    row = await _fetch_one("SELECT 1 FROM users WHERE email = ? LIMIT 1;", (email,))
    return row is None


async def username_available(username: str) -> bool:
    row = await _fetch_one(
        "SELECT 1 FROM users WHERE username = ? LIMIT 1;", (username,)
    )
    return row is None


async def create_user(
    name: str, email: str, username: str, password_hash: str, role: str
) -> models.User:
    """Insert a user row and return it. Password must already be hashed."""
    now = _now()
    async with connect() as conn:
        cur = await conn.execute(
            """
            INSERT INTO users(name, email, username, password, role, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            (name, email, username, password_hash, role, now, now),
        )
        user_id = cur.lastrowid
        await cur.close()
        await conn.commit()
    return await get_user(user_id)


async def get_user(user_id: int) -> Optional[models.User]:
    """Return a User for the given id, or None if not found."""
    row = await _fetch_one("SELECT * FROM users WHERE id = ?;", (user_id,))
    return _user(row) if row else None


async def get_user_by_email(email: str) -> Optional[models.User]:
    row = await _fetch_one("SELECT * FROM users WHERE email = ?;", (email,))
    return _user(row) if row else None


async def list_users() -> List[models.User]:
    rows = await _fetch_all("SELECT * FROM users ORDER BY id;")
    return [_user(r) for r in rows]


_PROFILE_COLUMNS = {
    "name",
    "address",
    "bank_account_name",
    "bank_account_number",
    "bank_ifsc_code",
    "bank_name",
    "payment_customer_id",
}


async def update_user(user_id: int, fields: Dict[str, Any]) -> Optional[models.User]:
    """
    Update profile columns (only the provided, whitelisted ones).
    Return the updated user, or None if the user does not exist.
    """
    updates = {k: v for k, v in fields.items() if k in _PROFILE_COLUMNS}
    if updates:
        assignments = ", ".join(f"{col} = ?" for col in updates)
        async with connect() as conn:
            await conn.execute(
                f"UPDATE users SET {assignments}, updated_at = ? WHERE id = ?;",
                (*updates.values(), _now(), user_id),
            )
            await conn.commit()
    return await get_user(user_id)


async def set_user_role(user_id: int, role: str) -> Optional[models.User]:
    async with connect() as conn:
        res = await conn.execute(
            "UPDATE users SET role = ?, updated_at = ? WHERE id = ?;",
            (role, _now(), user_id),
        )
        await conn.commit()
        if res.rowcount == 0:
            return None
    return await get_user(user_id)


# ---------------------------
# Sessions
# ---------------------------


async def create_session(
    sid: str, user_id: int, created_at: datetime, expires_at: datetime
) -> models.Session:
    async with connect() as conn:
        await conn.execute(
            "INSERT INTO sessions(sid, user_id, created_at, expires_at) VALUES (?, ?, ?, ?);",
            (sid, user_id, created_at.isoformat(), expires_at.isoformat()),
        )
        await conn.commit()
    return models.Session(
        sid=sid,
        user_id=user_id,
        created_at=created_at.isoformat(),
        expires_at=expires_at.isoformat(),
    )


async def get_session(sid: str) -> Optional[models.Session]:
    row = await _fetch_one(
        "SELECT sid, user_id, created_at, expires_at FROM sessions WHERE sid = ?;",
        (sid,),
    )
    if not row:
        return None
    return models.Session(
        sid=row["sid"],
        user_id=row["user_id"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
    )


async def delete_session(sid: str) -> bool:
    async with connect() as conn:
        res = await conn.execute("DELETE FROM sessions WHERE sid = ?;", (sid,))
        await conn.commit()
        return res.rowcount > 0


async def purge_expired_sessions(now: datetime) -> int:
    """Delete every session whose expiry is before `now`; return how many went."""
    async with connect() as conn:
        res = await conn.execute(
            "DELETE FROM sessions WHERE expires_at < ?;", (now.isoformat(),)
        )
        await conn.commit()
        return res.rowcount


# ---------------------------
# Products
# ---------------------------


async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    seller_id: Optional[int] = None,
) -> List[models.Product]:
    """
    List products, newest first, narrowed by any combination of:
    - category: case-insensitive exact match
    - search: case-insensitive substring of title or description
    - seller_id: products owned by that seller
    """
    conds: List[str] = []
    params: List[Any] = []
    if category:
        conds.append("LOWER(category) = ?")
        params.append(category.strip().lower())
    if search and search.strip():
        like = f"%{search.strip().lower()}%"
        conds.append("(LOWER(title) LIKE ? OR LOWER(COALESCE(description, '')) LIKE ?)")
        params.extend([like, like])
    if seller_id is not None:
        conds.append("seller_id = ?")
        params.append(seller_id)
    where_clause = " AND ".join(conds) if conds else "1 = 1"

    rows = await _fetch_all(
        f"""
        SELECT *
        FROM products
        WHERE {where_clause}
        ORDER BY created_at DESC, id DESC;
        """,
        params,
    )
    return [_product(r) for r in rows]


async def get_product(product_id: int) -> Optional[models.Product]:
    """Fetch a product by id."""
    row = await _fetch_one("SELECT * FROM products WHERE id = ?;", (product_id,))
    return _product(row) if row else None


async def create_product(
    seller_id: int,
    title: str,
    description: Optional[str],
    price: float,
    images: List[str],
    category: str,
    quantity_available: int,
) -> models.Product:
    now = _now()
    async with connect() as conn:
        cur = await conn.execute(
            """
            INSERT INTO products(title, description, price, images, category,
                                 quantity_available, seller_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                title,
                description,
                price,
                json.dumps(list(images)),
                category,
                quantity_available,
                seller_id,
                now,
                now,
            ),
        )
        product_id = cur.lastrowid
        await cur.close()
        await conn.commit()
    return await get_product(product_id)


_PRODUCT_COLUMNS = {
    "title",
    "description",
    "price",
    "images",
    "category",
    "quantity_available",
}


async def update_product(
    product_id: int, fields: Dict[str, Any]
) -> Optional[models.Product]:
    """
    Update only the provided product columns. Return the updated product,
    or None if it does not exist.
    """
    updates = {k: v for k, v in fields.items() if k in _PRODUCT_COLUMNS}
    if "images" in updates:
        updates["images"] = json.dumps(list(updates["images"]))
    if updates:
        assignments = ", ".join(f"{col} = ?" for col in updates)
        async with connect() as conn:
            await conn.execute(
                f"UPDATE products SET {assignments}, updated_at = ? WHERE id = ?;",
                (*updates.values(), _now(), product_id),
            )
            await conn.commit()
    return await get_product(product_id)


async def delete_product(product_id: int) -> bool:
    """Delete a product; order items keep their frozen title and seller with a null product."""
    async with connect() as conn:
        res = await conn.execute("DELETE FROM products WHERE id = ?;", (product_id,))
        await conn.commit()
        return res.rowcount > 0


async def product_ratings(product_ids: List[int]) -> Dict[int, Tuple[float, int]]:
    """Return {product_id: (average rating, review count)} for reviewed products."""
    if not product_ids:
        return {}
    marks = ", ".join("?" for _ in product_ids)
    rows = await _fetch_all(
        f"""
        SELECT product_id, AVG(rating), COUNT(*)
        FROM reviews
        WHERE product_id IN ({marks})
        GROUP BY product_id;
        """,
        product_ids,
    )
    return {int(r[0]): (round(float(r[1]), 2), int(r[2])) for r in rows}


# ---------------------------
# Cart Management
# ---------------------------


def _cart_item(row: Row) -> models.CartItem:
    return models.CartItem(
        id=row["id"],
        user_id=row["user_id"],
        product_id=row["product_id"],
        quantity=int(row["quantity"]),
    )


async def list_cart(user_id: int) -> List[models.CartItem]:
    """Return the user's cart rows in insertion order."""
    rows = await _fetch_all(
        "SELECT id, user_id, product_id, quantity FROM cart_items WHERE user_id = ? ORDER BY id;",
        (user_id,),
    )
    return [_cart_item(r) for r in rows]


async def get_cart_item(item_id: int) -> Optional[models.CartItem]:
    row = await _fetch_one(
        "SELECT id, user_id, product_id, quantity FROM cart_items WHERE id = ?;",
        (item_id,),
    )
    return _cart_item(row) if row else None


async def add_cart_item(user_id: int, product_id: int, qty: int) -> models.CartItem:
    """
    Add qty of a product to the user's cart. If the product is already there,
    the row's quantity becomes the sum of the existing and requested quantity;
    there is never more than one row per (user, product).
    """
    if qty < 1:
        raise ValidationError("Quantity must be at least 1")
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO cart_items(user_id, product_id, quantity)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id, product_id)
            DO UPDATE SET quantity = quantity + excluded.quantity;
            """,
            (user_id, product_id, qty),
        )
        await conn.commit()
        cur = await conn.execute(
            "SELECT id, user_id, product_id, quantity FROM cart_items WHERE user_id = ? AND product_id = ?;",
            (user_id, product_id),
        )
        row = await cur.fetchone()
        await cur.close()
    return _cart_item(row)


async def update_cart_item_quantity(
    item_id: int, qty: int
) -> Optional[models.CartItem]:
    """Set the quantity of a cart row. Return None if the row does not exist."""
    if qty < 1:
        raise ValidationError("Quantity must be at least 1")
    async with connect() as conn:
        res = await conn.execute(
            "UPDATE cart_items SET quantity = ? WHERE id = ?;", (qty, item_id)
        )
        await conn.commit()
        if res.rowcount == 0:
            return None
    return await get_cart_item(item_id)


async def remove_cart_item(item_id: int) -> bool:
    async with connect() as conn:
        res = await conn.execute("DELETE FROM cart_items WHERE id = ?;", (item_id,))
        await conn.commit()
        return res.rowcount > 0


async def clear_cart(user_id: int) -> int:
    """Remove all items from the user's cart; return the number of rows removed."""
    async with connect() as conn:
        res = await conn.execute("DELETE FROM cart_items WHERE user_id = ?;", (user_id,))
        await conn.commit()
        return res.rowcount


# ---------------------------
# Checkout & Orders
# ---------------------------


async def create_order(
    buyer_id: int,
    lines: List[Tuple[int, int]],
    shipping_address: Optional[str] = None,
    payment_intent_id: Optional[str] = None,
    expected_total: Optional[float] = None,
) -> Tuple[models.Order, List[models.OrderItem]]:
    """
    Create an order from (product_id, qty) lines and return (order, items).

    Runs as one transaction: stock is checked for every line before anything
    is written, each item freezes the product's current price, title and seller, stock
    is decremented and the buyer's cart is emptied. Lines for the same product
    are combined. Raises NotFoundError / InsufficientStockError /
    ValidationError with nothing written.
    """
    qty_by_product: Dict[int, int] = {}
    for product_id, qty in lines:
        if qty < 1:
            raise ValidationError("Quantity must be at least 1")
        qty_by_product[product_id] = qty_by_product.get(product_id, 0) + qty
    if not qty_by_product:
        raise ValidationError("Order must include items")

    now = _now()
    async with transaction() as conn:
        priced: List[Tuple[int, str, int, int, float]] = []
        for product_id, qty in qty_by_product.items():
            cur = await conn.execute(
                "SELECT title, price, quantity_available, seller_id FROM products WHERE id = ?;",
                (product_id,),
            )
            row = await cur.fetchone()
            await cur.close()
            if not row:
                raise NotFoundError("Product", product_id)
            title, price, stock, seller_id = row[0], float(row[1]), int(row[2]), int(row[3])
            if stock < qty:
                raise InsufficientStockError(product_id, title, stock)
            priced.append((product_id, title, seller_id, qty, price))

        total = round(sum(qty * price for _, _, _, qty, price in priced), 2)
        if expected_total is not None and round(abs(expected_total - total), 2) > 0.01:
            raise ValidationError(
                f"Order total {expected_total:.2f} does not match current prices ({total:.2f})"
            )

        cur = await conn.execute(
            """
            INSERT INTO orders(buyer_id, status, total_amount, shipping_address,
                               payment_intent_id, created_at, updated_at)
            VALUES (?, 'pending', ?, ?, ?, ?, ?);
            """,
            (buyer_id, total, shipping_address, payment_intent_id, now, now),
        )
        order_id = cur.lastrowid
        await cur.close()

        for product_id, title, seller_id, qty, price in priced:
            await conn.execute(
                """
                INSERT INTO order_items(order_id, product_id, product_title, seller_id,
                                        quantity, unit_price)
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                (order_id, product_id, title, seller_id, qty, price),
            )
            res = await conn.execute(
                """
                UPDATE products
                SET quantity_available = MAX(quantity_available - ?, 0), updated_at = ?
                WHERE id = ? AND quantity_available >= ?;
                """,
                (qty, now, product_id, qty),
            )
            if res.rowcount != 1:
                stock = await _stock_in(conn, product_id)
                raise InsufficientStockError(product_id, title, stock)

        await conn.execute("DELETE FROM cart_items WHERE user_id = ?;", (buyer_id,))

    order, items = await get_order_detail(order_id)
    return order, items


async def _stock_in(conn, product_id: int) -> int:
    cur = await conn.execute(
        "SELECT quantity_available FROM products WHERE id = ?;", (product_id,)
    )
    row = await cur.fetchone()
    await cur.close()
    return int(row[0]) if row else 0


async def get_order(order_id: int) -> Optional[models.Order]:
    row = await _fetch_one("SELECT * FROM orders WHERE id = ?;", (order_id,))
    return _order(row) if row else None


async def list_order_items(order_id: int) -> List[models.OrderItem]:
    rows = await _fetch_all(
        "SELECT * FROM order_items WHERE order_id = ? ORDER BY id;", (order_id,)
    )
    return [_order_item(r) for r in rows]


async def get_order_detail(
    order_id: int,
) -> Tuple[Optional[models.Order], List[models.OrderItem]]:
    """
    Return (order, items) for a specific order, or (None, []) if missing.
    """
    order = await get_order(order_id)
    if not order:
        return None, []
    return order, await list_order_items(order_id)


async def list_orders_by_buyer(buyer_id: int) -> List[models.Order]:
    """List a buyer's orders in reverse chronological order."""
    rows = await _fetch_all(
        "SELECT * FROM orders WHERE buyer_id = ? ORDER BY created_at DESC, id DESC;",
        (buyer_id,),
    )
    return [_order(r) for r in rows]


async def list_orders_for_seller(seller_id: int) -> List[models.Order]:
    """Orders with at least one item sold by the seller, newest first."""
    rows = await _fetch_all(
        """
        SELECT DISTINCT o.*
        FROM orders o
        JOIN order_items oi ON oi.order_id = o.id
        WHERE oi.seller_id = ?
        ORDER BY o.created_at DESC, o.id DESC;
        """,
        (seller_id,),
    )
    return [_order(r) for r in rows]


async def list_all_orders() -> List[models.Order]:
    rows = await _fetch_all("SELECT * FROM orders ORDER BY created_at DESC, id DESC;")
    return [_order(r) for r in rows]


async def order_seller_ids(order_id: int) -> List[int]:
    """Distinct sellers of the order's items, as recorded at checkout."""
    rows = await _fetch_all(
        """
        SELECT DISTINCT seller_id
        FROM order_items
        WHERE order_id = ?
        ORDER BY seller_id;
        """,
        (order_id,),
    )
    return [int(r[0]) for r in rows]


async def update_order_status(
    order_id: int, expected_status: str, new_status: str
) -> Optional[models.Order]:
    """
    Compare-and-set the order status. Return the updated order, or None when
    the order is missing or its status is no longer `expected_status`.
    """
    async with connect() as conn:
        res = await conn.execute(
            "UPDATE orders SET status = ?, updated_at = ? WHERE id = ? AND status = ?;",
            (new_status, _now(), order_id, expected_status),
        )
        await conn.commit()
        if res.rowcount == 0:
            return None
    return await get_order(order_id)


async def buyer_has_purchased(buyer_id: int, product_id: int) -> bool:
    """True if some order by the buyer contains the product."""
    row = await _fetch_one(
        """
        SELECT 1
        FROM orders o
        JOIN order_items oi ON oi.order_id = o.id
        WHERE o.buyer_id = ? AND oi.product_id = ?
        LIMIT 1;
        """,
        (buyer_id, product_id),
    )
    return row is not None


# ---------------------------
# Reviews
# ---------------------------


async def list_reviews_for_product(product_id: int) -> List[models.Review]:
    rows = await _fetch_all(
        "SELECT * FROM reviews WHERE product_id = ? ORDER BY created_at DESC, id DESC;",
        (product_id,),
    )
    return [
        models.Review(
            id=r["id"],
            product_id=r["product_id"],
            buyer_id=r["buyer_id"],
            rating=r["rating"],
            comment=r["comment"],
            created_at=r["created_at"],
        )
        for r in rows
    ]


async def create_review(
    product_id: int, buyer_id: int, rating: int, comment: str
) -> models.Review:
    now = _now()
    async with connect() as conn:
        cur = await conn.execute(
            """
            INSERT INTO reviews(product_id, buyer_id, rating, comment, created_at)
            VALUES (?, ?, ?, ?, ?);
            """,
            (product_id, buyer_id, rating, comment, now),
        )
        review_id = cur.lastrowid
        await cur.close()
        await conn.commit()
    return models.Review(
        id=review_id,
        product_id=product_id,
        buyer_id=buyer_id,
        rating=rating,
        comment=comment,
        created_at=now,
    )


# ---------------------------
# Messages
# ---------------------------


async def create_message(sender_id: int, receiver_id: int, content: str) -> models.Message:
    now = _now()
    async with connect() as conn:
        cur = await conn.execute(
            """
            INSERT INTO messages(sender_id, receiver_id, content, is_read, created_at)
            VALUES (?, ?, ?, 0, ?);
            """,
            (sender_id, receiver_id, content, now),
        )
        message_id = cur.lastrowid
        await cur.close()
        await conn.commit()
    return models.Message(
        id=message_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        is_read=False,
        created_at=now,
    )


async def list_messages_between(user_a: int, user_b: int) -> List[models.Message]:
    """Both directions of a conversation, oldest first."""
    rows = await _fetch_all(
        """
        SELECT *
        FROM messages
        WHERE (sender_id = ? AND receiver_id = ?)
           OR (sender_id = ? AND receiver_id = ?)
        ORDER BY created_at, id;
        """,
        (user_a, user_b, user_b, user_a),
    )
    return [_message(r) for r in rows]


async def list_messages_for_user(user_id: int) -> List[models.Message]:
    """Every message the user sent or received, newest first."""
    rows = await _fetch_all(
        """
        SELECT *
        FROM messages
        WHERE sender_id = ? OR receiver_id = ?
        ORDER BY created_at DESC, id DESC;
        """,
        (user_id, user_id),
    )
    return [_message(r) for r in rows]


async def mark_messages_read(receiver_id: int, sender_id: int) -> int:
    async with connect() as conn:
        res = await conn.execute(
            "UPDATE messages SET is_read = 1 WHERE receiver_id = ? AND sender_id = ? AND is_read = 0;",
            (receiver_id, sender_id),
        )
        await conn.commit()
        return res.rowcount


# ---------------------------
# Notifications
# ---------------------------


async def create_notification(
    user_id: int,
    type_: str,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> models.Notification:
    now = _now()
    async with connect() as conn:
        cur = await conn.execute(
            """
            INSERT INTO notifications(user_id, title, message, type, is_read, data, created_at)
            VALUES (?, ?, ?, ?, 0, ?, ?);
            """,
            (user_id, title, message, type_, json.dumps(data) if data else None, now),
        )
        notification_id = cur.lastrowid
        await cur.close()
        await conn.commit()
    return models.Notification(
        id=notification_id,
        user_id=user_id,
        title=title,
        message=message,
        type=type_,
        is_read=False,
        data=data,
        created_at=now,
    )


async def list_notifications(
    user_id: int, unread_only: bool = False
) -> List[models.Notification]:
    """The user's notifications, newest first."""
    sql = "SELECT * FROM notifications WHERE user_id = ?"
    if unread_only:
        sql += " AND is_read = 0"
    rows = await _fetch_all(sql + " ORDER BY created_at DESC, id DESC;", (user_id,))
    return [_notification(r) for r in rows]


async def get_notification(notification_id: int) -> Optional[models.Notification]:
    row = await _fetch_one(
        "SELECT * FROM notifications WHERE id = ?;", (notification_id,)
    )
    return _notification(row) if row else None


async def mark_notification_read(notification_id: int) -> bool:
    async with connect() as conn:
        res = await conn.execute(
            "UPDATE notifications SET is_read = 1 WHERE id = ?;", (notification_id,)
        )
        await conn.commit()
        return res.rowcount > 0


async def mark_all_notifications_read(user_id: int) -> int:
    async with connect() as conn:
        res = await conn.execute(
            "UPDATE notifications SET is_read = 1 WHERE user_id = ? AND is_read = 0;",
            (user_id,),
        )
        await conn.commit()
        return res.rowcount


async def count_unread_notifications(user_id: int) -> int:
    row = await _fetch_one(
        "SELECT COUNT(*) FROM notifications WHERE user_id = ? AND is_read = 0;",
        (user_id,),
    )
    return int(row[0])


# ---------------------------
# Product Modification Requests
# ---------------------------


async def create_modification_request(
    product_id: int, buyer_id: int, seller_id: int, request_details: str
) -> models.ModificationRequest:
    now = _now()
    async with connect() as conn:
        cur = await conn.execute(
            """
            INSERT INTO modification_requests(product_id, buyer_id, seller_id, request_details,
                                              status, created_at, updated_at)
            VALUES (?, ?, ?, ?, 'pending', ?, ?);
            """,
            (product_id, buyer_id, seller_id, request_details, now, now),
        )
        request_id = cur.lastrowid
        await cur.close()
        await conn.commit()
    return await get_modification_request(request_id)


async def get_modification_request(
    request_id: int,
) -> Optional[models.ModificationRequest]:
    row = await _fetch_one(
        "SELECT * FROM modification_requests WHERE id = ?;", (request_id,)
    )
    return _mod_request(row) if row else None


async def list_modification_requests(
    buyer_id: Optional[int] = None, seller_id: Optional[int] = None
) -> List[models.ModificationRequest]:
    """Requests made by a buyer or addressed to a seller, newest first."""
    if buyer_id is not None:
        where, param = "buyer_id = ?", buyer_id
    elif seller_id is not None:
        where, param = "seller_id = ?", seller_id
    else:
        raise ValueError("Either buyer_id or seller_id is required.")
    rows = await _fetch_all(
        f"SELECT * FROM modification_requests WHERE {where} ORDER BY created_at DESC, id DESC;",
        (param,),
    )
    return [_mod_request(r) for r in rows]


async def respond_modification_request(
    request_id: int, status: str, seller_response: Optional[str]
) -> Optional[models.ModificationRequest]:
    async with connect() as conn:
        res = await conn.execute(
            """
            UPDATE modification_requests
            SET status = ?, seller_response = ?, updated_at = ?
            WHERE id = ?;
            """,
            (status, seller_response, _now(), request_id),
        )
        await conn.commit()
        if res.rowcount == 0:
            return None
    return await get_modification_request(request_id)
