from unittest.mock import patch

import pytest

from leadflow.services import sellers as seller_service
from leadflow.services import users as user_service
from leadflow.services.errors import NotFound
from leadflow.storage.s3 import ImageUpload
from leadflow.store import records

GST = "22AAAAA0000A1Z5"


def _image():
    return ImageUpload(filename="shop.jpg", content_type="image/jpeg", data=b"\xff\xd8jpeg")


def test_authenticate_creates_user_on_first_sign_in(fake_redis):
    user = user_service.authenticate("Alice", "9876543210")
    assert user["id"]
    assert user["name"] == "Alice"
    assert user["stats"] == {"totalSellers": 0, "totalProducts": 0, "lastActive": user["stats"]["lastActive"]}
    assert records.get_user_by_phone("9876543210").id == user["id"]


def test_authenticate_reuses_user_and_updates_name(fake_redis):
    first = user_service.authenticate("Alice", "9876543210")
    second = user_service.authenticate("Alicia", "9876543210")
    assert second["id"] == first["id"]
    assert second["name"] == "Alicia"
    assert len(records.all_users()) == 1


@patch("leadflow.services.sellers.upload_image", return_value="https://bucket.s3/shops/x.jpg")
def test_create_seller_uploads_and_indexes(mock_upload, fake_redis):
    user = user_service.authenticate("Alice", "9876543210")
    seller = seller_service.create_seller("Shop", "9123456780", GST, user["id"], _image())

    assert seller["shopImage"] == "https://bucket.s3/shops/x.jpg"
    assert seller["userId"] == user["id"]
    mock_upload.assert_called_once()
    assert mock_upload.call_args.kwargs["folder"] == "shops"
    assert records.seller_ids_for_user(user["id"]) == [seller["id"]]

    stats = user_service.authenticate("Alice", "9876543210")["stats"]
    assert stats["totalSellers"] == 1


@patch("leadflow.services.sellers.upload_image")
def test_create_seller_requires_existing_user(mock_upload, fake_redis):
    with pytest.raises(NotFound):
        seller_service.create_seller("Shop", "9123456780", GST, "missing", _image())
    mock_upload.assert_not_called()


@patch("leadflow.services.users.now_ms", side_effect=[1000, 2000, 3000])
def test_repeat_sign_in_only_writes_on_name_change(mock_now, fake_redis):
    first = user_service.authenticate("Alice", "9876543210")
    assert first["stats"]["lastActive"] == 1000

    same = user_service.authenticate("Alice", "9876543210")
    assert same["stats"]["lastActive"] == 1000
    assert records.get_user(first["id"]).updatedAt == 1000

    renamed = user_service.authenticate("Alicia", "9876543210")
    assert renamed["stats"]["lastActive"] == 3000
    assert records.get_user(first["id"]).name == "Alicia"
