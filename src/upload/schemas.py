# src/upload/schemas.py
from enum import Enum

from pydantic import BaseModel, Field

from src.upload.constants import (
    DEFAULT_ALLOWED_TYPES,
    DEFAULT_FOLDER,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_QUALITY,
)


class UploadKind(str, Enum):
    FILE = "file"
    IMAGE = "image"
    AVATAR = "avatar"
    MULTIPLE = "multiple"


class ResizeOptions(BaseModel):
    width: int | None = Field(None, gt=0)
    height: int | None = Field(None, gt=0)

    @property
    def is_empty(self) -> bool:
        return self.width is None and self.height is None


class UploadOptions(BaseModel):
    folder: str = DEFAULT_FOLDER
    max_size: int = Field(DEFAULT_MAX_FILE_SIZE, gt=0)
    allowed_types: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_TYPES))
    quality: int = Field(DEFAULT_QUALITY, ge=0, le=100)
    resize: ResizeOptions | None = None


class UploadResult(BaseModel):
    success: bool
    url: str | None = None
    public_id: str | None = None
    size: int | None = None
    format: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, url: str, public_id: str, size: int, format: str | None) -> "UploadResult":
        return cls(success=True, url=url, public_id=public_id, size=size, format=format)

    @classmethod
    def fail(cls, error: str) -> "UploadResult":
        return cls(success=False, error=error)


class DeleteResult(BaseModel):
    success: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> "DeleteResult":
        return cls(success=True)

    @classmethod
    def fail(cls, error: str) -> "DeleteResult":
        return cls(success=False, error=error)


class UploadedFile(BaseModel):
    url: str
    public_id: str
    size: int
    format: str | None = None
    original_name: str | None = None


class FailedFile(BaseModel):
    original_name: str | None = None
    error: str


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    data: UploadedFile


class MultipleUploadData(BaseModel):
    successful: list[UploadedFile]
    failed: list[FailedFile] | None = None


class MultipleUploadResponse(BaseModel):
    success: bool = True
    message: str
    data: MultipleUploadData


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
