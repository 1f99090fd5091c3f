from unittest.mock import MagicMock, patch

import pytest

from leadflow.services.errors import UploadRejected
from leadflow.settings import settings
from leadflow.storage.s3 import ImageUpload, upload_image, validate_image


@pytest.fixture
def bucket(monkeypatch):
    monkeypatch.setattr(settings, "AWS_BUCKET_NAME", "leads")
    monkeypatch.setattr(settings, "AWS_REGION", "ap-south-1")
    monkeypatch.setattr(settings, "ALLOWED_FILE_TYPES", "image/jpeg,image/png,image/webp")
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 1024)


@patch("leadflow.storage.s3.get_s3_client")
def test_upload_puts_object_under_folder(mock_client, bucket):
    s3 = MagicMock()
    mock_client.return_value = s3

    url = upload_image(ImageUpload("shop.JPG", "image/jpeg", b"\xff\xd8\xff"), folder="shops")

    kwargs = s3.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "leads"
    assert kwargs["Key"].startswith("shops/")
    assert kwargs["Key"].endswith(".jpg")
    assert kwargs["Body"] == b"\xff\xd8\xff"
    assert url == f"https://leads.s3.ap-south-1.amazonaws.com/{kwargs['Key']}"


@patch("leadflow.storage.s3.get_s3_client")
def test_extension_guessed_from_content_type(mock_client, bucket):
    s3 = MagicMock()
    mock_client.return_value = s3
    upload_image(ImageUpload("blob", "image/png", b"\x89PNG"), folder="products")
    assert s3.put_object.call_args.kwargs["Key"].endswith(".png")


@pytest.mark.parametrize(
    "upload, error",
    [
        (ImageUpload("a.gif", "image/gif", b"GIF8"), "Unsupported file type"),
        (ImageUpload("a.jpg", "image/jpeg", b""), "Empty file"),
        (ImageUpload("a.jpg", "image/jpeg", b"x" * 2048), "File too large"),
    ],
)
def test_validate_image_rejects(upload, error, bucket):
    with pytest.raises(UploadRejected) as exc:
        validate_image(upload)
    assert exc.value.error == error


@patch("leadflow.storage.s3.get_s3_client")
def test_unknown_folder_never_reaches_s3(mock_client, bucket):
    with pytest.raises(UploadRejected):
        upload_image(ImageUpload("a.jpg", "image/jpeg", b"x"), folder="../etc")
    mock_client.assert_not_called()
