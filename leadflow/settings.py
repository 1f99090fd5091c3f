import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    API_KEY: str = os.getenv("API_KEY", "")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Form session persistence (one JSON document per wizard session)
    FORM_STATE_PREFIX: str = os.getenv("FORM_STATE_PREFIX", "formState:")
    FORM_STATE_TTL_SEC: int = int(os.getenv("FORM_STATE_TTL_SEC", str(7 * 24 * 3600)))
    SESSION_LOCK_TTL_MS: int = int(os.getenv("SESSION_LOCK_TTL_MS", "5000"))

    # Capacity per submission batch
    MINIMUM_PRODUCTS: int = int(os.getenv("MINIMUM_PRODUCTS", "3"))
    MAXIMUM_PRODUCTS: int = int(os.getenv("MAXIMUM_PRODUCTS", "10"))

    # Uploads
    MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", str(5 * 1024 * 1024)))
    ALLOWED_FILE_TYPES: str = os.getenv("ALLOWED_FILE_TYPES", "image/jpeg,image/png,image/webp")

    AWS_ACCESS_KEY_ID: str = os.getenv("AWS_ACCESS_KEY_ID", "")
    AWS_SECRET_ACCESS_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")
    AWS_REGION: str = os.getenv("AWS_REGION", "ap-south-1")
    AWS_BUCKET_NAME: str = os.getenv("AWS_BUCKET_NAME", "")

    # Optional HEAD check of hosted product images before a batch is accepted
    VALIDATE_IMAGE_URLS: bool = os.getenv("VALIDATE_IMAGE_URLS", "false").lower() == "true"
    IMAGE_CHECK_TIMEOUT_SEC: float = float(os.getenv("IMAGE_CHECK_TIMEOUT_SEC", "5"))

    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"

    def allowed_file_types(self) -> list:
        return [t.strip() for t in self.ALLOWED_FILE_TYPES.split(",") if t.strip()]

    def validate_capacity(self) -> None:
        if self.MINIMUM_PRODUCTS <= 0 or self.MAXIMUM_PRODUCTS <= 0:
            raise ValueError("MINIMUM_PRODUCTS and MAXIMUM_PRODUCTS must be positive")
        if self.MINIMUM_PRODUCTS > self.MAXIMUM_PRODUCTS:
            raise ValueError(
                f"MINIMUM_PRODUCTS ({self.MINIMUM_PRODUCTS}) exceeds MAXIMUM_PRODUCTS ({self.MAXIMUM_PRODUCTS})"
            )

settings = Settings()
