"""
Demo data loaded into a fresh database.

Every demo account uses the password ``password123``.

- users: 1 admin, 2-3 sellers (alice, bob), 4-5 buyers (carol, dave)
- products 1-6, product 5 is out of stock
- order 1: carol bought one product 1 and it was delivered (carol reviewed it)
- dave has two product 2 in his cart
"""

import json
from datetime import datetime, timezone

import aiosqlite

from utils.security import hash_password

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    (1, "Admin User", "admin@example.com", "admin", "admin"),
    (2, "Alice Maker", "alice@example.com", "alice", "seller"),
    (3, "Bob Crafts", "bob@example.com", "bob", "seller"),
    (4, "Carol Buyer", "carol@example.com", "carol", "buyer"),
    (5, "Dave Shopper", "dave@example.com", "dave", "buyer"),
]

DEMO_PRODUCTS = [
    (1, "Handwoven Basket", "Seagrass basket woven by hand.", 45.00, "Home", 10, 2),
    (2, "Ceramic Mug", "Stoneware mug with a speckled glaze.", 18.50, "Kitchen", 25, 2),
    (3, "Leather Wallet", "Vegetable tanned bifold wallet.", 60.00, "Accessories", 3, 3),
    (4, "Silver Ring", "Hammered sterling silver band.", 120.00, "Jewelry", 5, 3),
    (5, "Wooden Spoon Set", "Three cherry wood spoons.", 22.00, "Kitchen", 0, 2),
    (6, "Linen Tote Bag", "Natural linen tote with inner pocket.", 30.00, "Accessories", 40, 3),
]

_password_hash = None


def _demo_hash() -> str:
    # bcrypt is slow on purpose; hash the shared demo password once per process
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(DEMO_PASSWORD)
    return _password_hash


async def seed_demo_data(conn: aiosqlite.Connection) -> None:
    now = datetime.now(timezone.utc).isoformat()
    pwd = _demo_hash()

    await conn.executemany(
        """
        INSERT INTO users(id, name, email, username, password, role, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?);
        """,
        [(uid, name, email, uname, pwd, role, now, now) for uid, name, email, uname, role in DEMO_USERS],
    )
    await conn.execute(
        "UPDATE users SET address = ? WHERE id IN (4, 5);", ("12 Market Street, Springfield",)
    )
    await conn.executemany(
        """
        INSERT INTO products(id, title, description, price, images, category,
                             quantity_available, seller_id, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
        """,
        [
            (pid, title, descr, price, json.dumps([f"/images/products/{pid}.jpg"]), cat, qty, seller, now, now)
            for pid, title, descr, price, cat, qty, seller in DEMO_PRODUCTS
        ],
    )
    await conn.execute(
        """
        INSERT INTO orders(id, buyer_id, status, total_amount, shipping_address, created_at, updated_at)
        VALUES (1, 4, 'delivered', 45.0, '12 Market Street, Springfield', ?, ?);
        """,
        (now, now),
    )
    await conn.execute(
        """
        INSERT INTO order_items(order_id, product_id, product_title, seller_id, quantity, unit_price)
        VALUES (1, 1, 'Handwoven Basket', 2, 1, 45.0);
        """
    )
    await conn.execute(
        """
        INSERT INTO reviews(product_id, buyer_id, rating, comment, created_at)
        VALUES (1, 4, 5, 'Sturdy and beautiful.', ?);
        """,
        (now,),
    )
    await conn.execute(
        "INSERT INTO cart_items(user_id, product_id, quantity) VALUES (5, 2, 2);"
    )
