# src/upload/service.py
import asyncio
import logging
from functools import lru_cache
from typing import Iterable, Optional, Protocol

from starlette.concurrency import run_in_threadpool

from src.upload.compression import compress_image
from src.upload.config import UploadSettings, upload_settings
from src.upload.constants import DOCX, GIF, JPEG, MB, MSWORD, PDF, PNG, TEXT, WEBP
from src.upload.schemas import DeleteResult, ResizeOptions, UploadKind, UploadOptions, UploadResult
from src.upload.storage import BlobStorage
from src.upload.utils import detect_mime_type, format_megabytes

logger = logging.getLogger(__name__)


class Storage(Protocol):
    async def store(
            self, content: bytes, filename: str, folder: str, declared_type: Optional[str] = None
    ) -> UploadResult: ...

    async def delete(self, public_id: str) -> DeleteResult: ...

    async def close(self) -> None: ...


class FileUploadService:
    def __init__(self, storage: Storage, settings: UploadSettings = upload_settings):
        self.storage = storage
        self.settings = settings

        root = settings.DEFAULT_FOLDER
        self.presets = {
            UploadKind.FILE: UploadOptions(
                folder=f"{root}/documents",
                max_size=5 * MB,
                allowed_types=[PDF, TEXT, MSWORD, DOCX, JPEG, PNG],
                quality=settings.IMAGE_QUALITY,
            ),
            UploadKind.IMAGE: UploadOptions(
                folder=f"{root}/images",
                max_size=10 * MB,  # compressed before storing
                allowed_types=[JPEG, PNG, GIF, WEBP],
                quality=settings.IMAGE_QUALITY,
            ),
            UploadKind.AVATAR: UploadOptions(
                folder=f"{root}/avatars",
                max_size=5 * MB,
                allowed_types=[JPEG, PNG, WEBP],
                quality=90,
                resize=ResizeOptions(width=400, height=400),
            ),
            UploadKind.MULTIPLE: UploadOptions(
                folder=f"{root}/multiple",
                max_size=5 * MB,
                quality=settings.IMAGE_QUALITY,
            ),
        }

    def options_for(
            self,
            kind: UploadKind,
            folder: Optional[str] = None,
            quality: Optional[int] = None,
            resize: Optional[ResizeOptions] = None,
    ) -> UploadOptions:
        """Preset options for an upload kind, with request overrides applied."""
        overrides = {}
        if folder:
            overrides["folder"] = folder
        if quality is not None:
            overrides["quality"] = quality
        if resize is not None and not resize.is_empty:
            overrides["resize"] = resize
        return self.presets[kind].model_copy(update=overrides, deep=True)

    async def upload(
            self,
            content: bytes,
            filename: str,
            options: Optional[UploadOptions] = None,
            declared_type: Optional[str] = None,
    ) -> UploadResult:
        options = self._with_defaults(options)

        rejection, file_type = self._validate(content, options)
        if rejection is not None:
            logger.info("Rejected upload %r: %s", filename, rejection.error)
            return rejection

        processed = content

        if file_type.startswith("image/"):
            try:
                processed = await run_in_threadpool(
                    compress_image,
                    content,
                    options.quality,
                    options.resize,
                    self.settings.TARGET_IMAGE_SIZE,
                )
            except Exception as e:
                logger.warning("Image compression failed for %r, using original: %s", filename, e)
                processed = content

        return await self.storage.store(processed, filename, options.folder, declared_type=declared_type)

    async def upload_many(
            self,
            files: Iterable[tuple],
            options: Optional[UploadOptions] = None,
    ) -> list[UploadResult]:
        """Upload (content, filename[, declared_type]) tuples concurrently."""
        return list(
            await asyncio.gather(
                *(
                    self.upload(content, filename, options, declared[0] if declared else None)
                    for content, filename, *declared in files
                )
            )
        )

    async def delete(self, public_id: str) -> DeleteResult:
        return await self.storage.delete(public_id)

    def default_options(self) -> UploadOptions:
        return UploadOptions(
            folder=self.settings.DEFAULT_FOLDER,
            max_size=self.settings.MAX_FILE_SIZE,
            quality=self.settings.IMAGE_QUALITY,
        )

    def _with_defaults(self, options: Optional[UploadOptions]) -> UploadOptions:
        # Fields the caller left unset come from settings, not from the schema defaults
        defaults = self.default_options()
        if options is None:
            return defaults
        explicit = {name: getattr(options, name) for name in options.model_fields_set}
        return defaults.model_copy(update=explicit, deep=True)

    def _validate(self, content: bytes, options: UploadOptions) -> tuple[Optional[UploadResult], str]:
        file_type = detect_mime_type(content)

        if len(content) > options.max_size:
            return UploadResult.fail(
                f"File size too large. Maximum size is {format_megabytes(options.max_size)}MB"
            ), file_type

        if file_type not in options.allowed_types:
            return UploadResult.fail(
                f"File type not allowed. Allowed types: {', '.join(options.allowed_types)}"
            ), file_type

        return None, file_type


@lru_cache
def get_upload_service() -> FileUploadService:
    return FileUploadService(BlobStorage(upload_settings), upload_settings)
