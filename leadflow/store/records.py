"""
Users, sellers and products as JSON documents in Redis.

Layout:
  user:{id}                 JSON UserRecord
  user:phone:{phone}        -> user id (unique lookup)
  users:by_created          ZSET user id   (score: createdAt ms)
  user:{id}:sellers         ZSET seller id (score: createdAt ms)
  seller:{id}               JSON SellerRecord
  sellers:by_created        ZSET seller id (score: createdAt ms)
  seller:{id}:products      ZSET product id (score: createdAt ms)
  product:{id}              JSON ProductRecord
  products:by_created       ZSET product id (score: createdAt ms)
"""
import json
import uuid
from dataclasses import asdict, fields as dc_fields
from typing import List, Optional, Tuple

from leadflow.store.models import ProductRecord, SellerRecord, UserRecord
from leadflow.store.redis_conn import get_redis

K_USERS = "users:by_created"
K_SELLERS = "sellers:by_created"
K_PRODUCTS = "products:by_created"


def new_id() -> str:
    return uuid.uuid4().hex


def _user_key(user_id: str) -> str:
    return f"user:{user_id}"


def _phone_key(phone: str) -> str:
    return f"user:phone:{phone}"


def _user_sellers_key(user_id: str) -> str:
    return f"user:{user_id}:sellers"


def _seller_key(seller_id: str) -> str:
    return f"seller:{seller_id}"


def _seller_products_key(seller_id: str) -> str:
    return f"seller:{seller_id}:products"


def _product_key(product_id: str) -> str:
    return f"product:{product_id}"


def _bounds(start_ms: Optional[int], end_ms: Optional[int]) -> Tuple[object, object]:
    return ("-inf" if start_ms is None else start_ms, "+inf" if end_ms is None else end_ms)


def _load(raw: Optional[str], cls):
    if not raw:
        return None
    data = json.loads(raw)
    # Drop unknown fields so cls(**kwargs) never explodes on older documents
    allowed = {f.name for f in dc_fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in allowed})


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def get_user(user_id: str) -> Optional[UserRecord]:
    return _load(get_redis().get(_user_key(user_id)), UserRecord)


def get_user_by_phone(phone: str) -> Optional[UserRecord]:
    r = get_redis()
    user_id = r.get(_phone_key(phone))
    if not user_id:
        return None
    return _load(r.get(_user_key(user_id)), UserRecord)


def save_user(user: UserRecord) -> None:
    r = get_redis()
    pipe = r.pipeline(transaction=True)
    pipe.set(_user_key(user.id), json.dumps(asdict(user)))
    pipe.set(_phone_key(user.phone), user.id)
    pipe.zadd(K_USERS, {user.id: user.createdAt})
    pipe.execute()


def all_users() -> List[UserRecord]:
    r = get_redis()
    ids = r.zrange(K_USERS, 0, -1)
    if not ids:
        return []
    return [u for u in (_load(raw, UserRecord) for raw in r.mget([_user_key(i) for i in ids])) if u]


def seller_count_for_user(user_id: str) -> int:
    return int(get_redis().zcard(_user_sellers_key(user_id)) or 0)


def seller_ids_for_user(user_id: str) -> List[str]:
    return list(get_redis().zrange(_user_sellers_key(user_id), 0, -1))


# ---------------------------------------------------------------------------
# Sellers
# ---------------------------------------------------------------------------
def get_seller(seller_id: str) -> Optional[SellerRecord]:
    return _load(get_redis().get(_seller_key(seller_id)), SellerRecord)


def get_sellers(seller_ids: List[str]) -> List[SellerRecord]:
    if not seller_ids:
        return []
    raws = get_redis().mget([_seller_key(i) for i in seller_ids])
    return [s for s in (_load(raw, SellerRecord) for raw in raws) if s]


def save_seller(seller: SellerRecord) -> None:
    r = get_redis()
    pipe = r.pipeline(transaction=True)
    pipe.set(_seller_key(seller.id), json.dumps(asdict(seller)))
    pipe.zadd(K_SELLERS, {seller.id: seller.createdAt})
    pipe.zadd(_user_sellers_key(seller.userId), {seller.id: seller.createdAt})
    pipe.execute()


def seller_ids_between(start_ms: Optional[int] = None, end_ms: Optional[int] = None) -> List[str]:
    lo, hi = _bounds(start_ms, end_ms)
    return list(get_redis().zrangebyscore(K_SELLERS, lo, hi))


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
def get_product(product_id: str) -> Optional[ProductRecord]:
    return _load(get_redis().get(_product_key(product_id)), ProductRecord)


def create_products(seller: SellerRecord, products: List[ProductRecord]) -> List[ProductRecord]:
    """Write a batch and bump the seller's updatedAt in one MULTI/EXEC."""
    r = get_redis()
    pipe = r.pipeline(transaction=True)
    pipe.set(_seller_key(seller.id), json.dumps(asdict(seller)))
    for p in products:
        pipe.set(_product_key(p.id), json.dumps(asdict(p)))
        pipe.zadd(_seller_products_key(seller.id), {p.id: p.createdAt})
        pipe.zadd(K_PRODUCTS, {p.id: p.createdAt})
    pipe.execute()
    return products


def list_products(seller_id: str) -> List[ProductRecord]:
    """Newest first."""
    r = get_redis()
    ids = r.zrevrange(_seller_products_key(seller_id), 0, -1)
    if not ids:
        return []
    return [p for p in (_load(raw, ProductRecord) for raw in r.mget([_product_key(i) for i in ids])) if p]


def product_count(seller_id: str) -> int:
    return int(get_redis().zcard(_seller_products_key(seller_id)) or 0)


def delete_product(product_id: str) -> bool:
    product = get_product(product_id)
    if product is None:
        return False
    r = get_redis()
    pipe = r.pipeline(transaction=True)
    pipe.delete(_product_key(product_id))
    pipe.zrem(_seller_products_key(product.sellerId), product_id)
    pipe.zrem(K_PRODUCTS, product_id)
    pipe.execute()
    return True


def count_products_between(start_ms: Optional[int] = None, end_ms: Optional[int] = None) -> int:
    lo, hi = _bounds(start_ms, end_ms)
    return int(get_redis().zcount(K_PRODUCTS, lo, hi) or 0)


def product_timestamps_between(start_ms: Optional[int] = None, end_ms: Optional[int] = None) -> List[int]:
    lo, hi = _bounds(start_ms, end_ms)
    return [int(score) for _, score in get_redis().zrangebyscore(K_PRODUCTS, lo, hi, withscores=True)]
