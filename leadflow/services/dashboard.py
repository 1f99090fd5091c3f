"""
Dashboard listing and analytics.

Sellers are selected by creation time through the `sellers:by_created` index,
then sorted and paginated in process. Stats count sellers and products
created inside the same window.
"""
import math
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from leadflow.api.schemas import DashboardQuery
from leadflow.store import records
from leadflow.store.models import SellerRecord
from leadflow.utils.time import date_window, day_from_ms

TOP_USERS = 5

# Direction used when sortOrder is omitted
DEFAULT_ORDER = {"date": "desc", "products": "desc", "name": "asc"}


def _sort_sellers(sellers: List[SellerRecord], counts: Dict[str, int], sort_by: str, order: str) -> List[SellerRecord]:
    reverse = order == "desc"
    if sort_by == "products":
        key = lambda s: (counts.get(s.id, 0), s.createdAt)
    elif sort_by == "name":
        key = lambda s: (s.name.lower(), s.createdAt)
    else:
        key = lambda s: s.createdAt
    return sorted(sellers, key=key, reverse=reverse)


def _seller_view(seller: SellerRecord, users: Dict[str, Any]) -> Dict[str, Any]:
    out = seller.public()
    out["products"] = [
        {k: v for k, v in p.public().items() if k != "sellerId"}
        for p in records.list_products(seller.id)
    ]
    user = users.get(seller.userId)
    out["user"] = {"id": user.id, "name": user.name, "phone": user.phone} if user else None
    return out


def get_dashboard(query: DashboardQuery, now: Optional[datetime] = None) -> Dict[str, Any]:
    start_ms, end_ms = date_window(query.dateRange, now)

    sellers = records.get_sellers(records.seller_ids_between(start_ms, end_ms))
    counts = {s.id: records.product_count(s.id) for s in sellers}

    sort_by = query.sortBy or "date"
    order = query.sortOrder or DEFAULT_ORDER[sort_by]
    ordered = _sort_sellers(sellers, counts, sort_by, order)

    total_sellers = len(ordered)
    total_products = records.count_products_between(start_ms, end_ms)

    skip = (query.page - 1) * query.limit
    page_items = ordered[skip:skip + query.limit]

    users: Dict[str, Any] = {}
    for s in page_items:
        if s.userId not in users:
            users[s.userId] = records.get_user(s.userId)

    total_pages = math.ceil(total_sellers / query.limit)
    return {
        "stats": {
            "totalSellers": total_sellers,
            "totalProducts": total_products,
            "averageProductsPerSeller": (total_products / total_sellers) if total_sellers > 0 else 0,
        },
        "sellers": [_seller_view(s, users) for s in page_items],
        "pagination": {
            "currentPage": query.page,
            "totalPages": total_pages,
            "totalItems": total_sellers,
            "hasNextPage": query.page < total_pages,
            "hasPreviousPage": query.page > 1,
            "limit": query.limit,
        },
    }


def get_analytics(date_range: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    start_ms, end_ms = date_window(date_range, now)

    per_day = Counter(day_from_ms(ts) for ts in records.product_timestamps_between(start_ms, end_ms))

    top = sorted(
        ({"id": u.id, "name": u.name, "sellerCount": records.seller_count_for_user(u.id)} for u in records.all_users()),
        key=lambda u: u["sellerCount"],
        reverse=True,
    )[:TOP_USERS]

    seller_ids = records.seller_ids_between(start_ms, end_ms)
    product_total = sum(records.product_count(sid) for sid in seller_ids)

    return {
        "productsPerDay": [{"date": day, "count": per_day[day]} for day in sorted(per_day)],
        "topUsers": top,
        "averageProductsPerSeller": (product_total / len(seller_ids)) if seller_ids else 0,
    }
