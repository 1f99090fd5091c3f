from leadflow.store import records
from leadflow.store.models import ProductRecord, SellerRecord, UserRecord


def _seller(sid="s1", created=1000, user_id="u1"):
    return SellerRecord(id=sid, name="Shop", phone="9123456780", gstNumber="22AAAAA0000A1Z5",
                        shopImage="https://img.test/s.jpg", userId=user_id, createdAt=created, updatedAt=created)


def _product(pid, seller_id="s1", created=2000):
    return ProductRecord(id=pid, name=pid, mrp=10, msp=9, frontImage="https://img.test/f.jpg",
                         sideImage="https://img.test/s.jpg", backImage="https://img.test/b.jpg",
                         sellerId=seller_id, createdAt=created, updatedAt=created)


def test_user_phone_lookup(fake_redis):
    records.save_user(UserRecord(id="u1", name="Alice", phone="9876543210", createdAt=5, updatedAt=5))
    assert records.get_user_by_phone("9876543210").id == "u1"
    assert records.get_user_by_phone("0000000000") is None
    assert [u.id for u in records.all_users()] == ["u1"]


def test_seller_indexes(fake_redis):
    records.save_seller(_seller("s1", 1000))
    records.save_seller(_seller("s2", 3000))
    assert records.seller_ids_between() == ["s1", "s2"]
    assert records.seller_ids_between(2000, None) == ["s2"]
    assert records.seller_count_for_user("u1") == 2
    assert [s.id for s in records.get_sellers(["s2", "missing"])] == ["s2"]


def test_products_newest_first_and_delete(fake_redis):
    seller = _seller()
    records.save_seller(seller)
    seller.updatedAt = 9999
    records.create_products(seller, [_product("old", created=2000), _product("new", created=4000)])

    assert [p.id for p in records.list_products("s1")] == ["new", "old"]
    assert records.get_seller("s1").updatedAt == 9999
    assert records.product_count("s1") == 2
    assert records.count_products_between(3000, None) == 1
    assert records.product_timestamps_between() == [2000, 4000]

    assert records.delete_product("old") is True
    assert records.delete_product("old") is False
    assert records.product_count("s1") == 1
    assert records.count_products_between() == 1


def test_load_ignores_unknown_fields(fake_redis):
    fake_redis.set("user:u9", '{"id": "u9", "name": "N", "phone": "1", "legacy": true}')
    assert records.get_user("u9") == UserRecord(id="u9", name="N", phone="1")
