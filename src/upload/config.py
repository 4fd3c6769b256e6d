# src/upload/config.py
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UploadSettings(BaseSettings):
    AZURE_STORAGE_ACCOUNT: str = "demo-account"
    AZURE_STORAGE_KEY: str = "demo-key"
    # Takes precedence over account/key when set (e.g. Azurite in development)
    AZURE_STORAGE_CONNECTION_STRING: str | None = None

    UPLOAD_CONTAINER: str = "uploads"
    DEFAULT_FOLDER: str = "shikshaguru"

    # Common settings
    MAX_FILE_SIZE: int = 5 * 1024 * 1024  # 5MB
    REQUEST_MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB, hard limit per file in a request
    IMAGE_QUALITY: int = 80
    TARGET_IMAGE_SIZE: int = 512 * 1024  # 512KB

    STORAGE_TIMEOUT_SECONDS: float | None = 60.0
    CACHE_CONTROL: str = "public, max-age=31536000, immutable"

    @field_validator("IMAGE_QUALITY")
    def validate_image_quality(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError("IMAGE_QUALITY must be between 0 and 100")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


upload_settings = UploadSettings()
