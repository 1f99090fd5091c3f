"""
Image hosting on S3.

Uploads are validated (content type, size) before anything leaves the
process. Objects are public-read via bucket policy, so the returned URL is
the plain virtual-hosted-style address.
"""
import mimetypes
import uuid
from dataclasses import dataclass

import boto3
from botocore.client import Config

from leadflow.observability.logging import log
from leadflow.services.errors import UploadRejected
from leadflow.settings import settings

FOLDERS = ("shops", "products")

_s3_client = None


@dataclass
class ImageUpload:
    filename: str
    content_type: str
    data: bytes


def get_s3_client():
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client(
            "s3",
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
            region_name=settings.AWS_REGION,
            config=Config(signature_version="s3v4"),
        )
    return _s3_client


def validate_image(upload: ImageUpload) -> None:
    allowed = settings.allowed_file_types()
    if upload.content_type not in allowed:
        raise UploadRejected(
            "Unsupported file type",
            details=f"Only {', '.join(allowed)} files are allowed",
        )
    if not upload.data:
        raise UploadRejected("Empty file")
    if len(upload.data) > settings.MAX_FILE_SIZE:
        raise UploadRejected(
            "File too large",
            details=f"File size should be less than {settings.MAX_FILE_SIZE / (1024 * 1024):g}MB",
        )


def _extension(upload: ImageUpload) -> str:
    name = upload.filename or ""
    if "." in name:
        return name.rsplit(".", 1)[-1].lower()
    guessed = mimetypes.guess_extension(upload.content_type or "") or ""
    return guessed.lstrip(".") or "bin"


def public_url(key: str) -> str:
    return f"https://{settings.AWS_BUCKET_NAME}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


def upload_image(upload: ImageUpload, folder: str = "shops") -> str:
    """Validate, upload under `{folder}/{random}.{ext}` and return the hosted URL."""
    if folder not in FOLDERS:
        raise UploadRejected("Unknown upload folder", folder=folder)
    validate_image(upload)

    key = f"{folder}/{uuid.uuid4().hex}.{_extension(upload)}"
    get_s3_client().put_object(
        Bucket=settings.AWS_BUCKET_NAME,
        Key=key,
        Body=upload.data,
        ContentType=upload.content_type,
    )
    log(event="image_uploaded", folder=folder, key=key, sizeBytes=len(upload.data))
    return public_url(key)
