from math import ceil
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

ORDER_STATUSES = ["pending", "processing", "shipped", "delivered", "cancelled"]


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    # no headers: first row becomes the header
    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [[str(cell).replace("|", "\\|") for cell in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def paginate(items: Sequence[Any], page: int, page_size: int = 5) -> Tuple[List[Any], int]:
    """
    Slice `items` for a 1-based page. Returns (page items, page count);
    out-of-range pages are clamped and the page count is at least 1.
    """
    page_cnt = max(ceil(len(items) / page_size), 1)
    page = max(1, min(page, page_cnt))
    start = (page - 1) * page_size
    return list(items[start : start + page_size]), page_cnt


def next_statuses(current: str) -> List[str]:
    """Statuses the order picker offers for an order in `current`."""
    if current in ("delivered", "cancelled"):
        return []
    forward = ORDER_STATUSES[: ORDER_STATUSES.index("cancelled")]
    return forward[forward.index(current) + 1 :] + ["cancelled"]


def format_money(amount: float) -> str:
    return f"${amount:,.2f}"


def cart_total(cart_items: List[Dict[str, Any]]) -> float:
    """Sum of price * quantity over cart items as returned by GET /api/cart."""
    return round(
        sum(item["product"]["price"] * item["quantity"] for item in cart_items), 2
    )


def order_status_counts(orders: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {s: 0 for s in ORDER_STATUSES}
    for order in orders:
        counts[order["status"]] = counts.get(order["status"], 0) + 1
    return counts


def order_revenue(
    orders: List[Dict[str, Any]], seller_product_ids: Optional[set] = None
) -> float:
    """
    Revenue over non-cancelled orders.

    With `seller_product_ids`, only the lines for those products count, so a
    seller sees their share of mixed orders rather than the order totals.
    """
    total = 0.0
    for order in orders:
        if order["status"] == "cancelled":
            continue
        if seller_product_ids is None:
            total += order["totalAmount"]
        else:
            total += sum(
                item["unitPrice"] * item["quantity"]
                for item in order.get("items", [])
                if item["productId"] in seller_product_ids
            )
    return round(total, 2)


def low_stock_products(
    products: List[Dict[str, Any]], threshold: int
) -> List[Dict[str, Any]]:
    """Products at or below the threshold, emptiest first."""
    low = [p for p in products if p["quantityAvailable"] <= threshold]
    return sorted(low, key=lambda p: (p["quantityAvailable"], p["title"]))


def dashboard_summary(
    orders: List[Dict[str, Any]],
    products: List[Dict[str, Any]],
    low_stock_threshold: int,
    seller_product_ids: Optional[set] = None,
) -> Dict[str, Any]:
    counts = order_status_counts(orders)
    return {
        "order_count": len(orders),
        "open_orders": counts["pending"] + counts["processing"] + counts["shipped"],
        "status_counts": counts,
        "revenue": order_revenue(orders, seller_product_ids),
        "product_count": len(products),
        "low_stock": low_stock_products(products, low_stock_threshold),
    }
