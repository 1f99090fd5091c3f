from typing import Any, Dict

from leadflow.observability.logging import log
from leadflow.services.errors import NotFound
from leadflow.storage.s3 import ImageUpload, upload_image
from leadflow.store import records
from leadflow.store.models import SellerRecord
from leadflow.utils.time import now_ms


def create_seller(name: str, phone: str, gst_number: str, user_id: str, shop_image: ImageUpload) -> Dict[str, Any]:
    """Register a shop for an existing user. Fields are assumed schema-valid."""
    if not user_id or records.get_user(user_id) is None:
        raise NotFound("User not found", userId=user_id)

    image_url = upload_image(shop_image, folder="shops")

    ts = now_ms()
    seller = SellerRecord(
        id=records.new_id(),
        name=name,
        phone=phone,
        gstNumber=gst_number,
        shopImage=image_url,
        userId=user_id,
        createdAt=ts,
        updatedAt=ts,
    )
    records.save_seller(seller)
    log(event="seller_created", sellerId=seller.id, userId=user_id, gstNumber=gst_number)
    return seller.public()
