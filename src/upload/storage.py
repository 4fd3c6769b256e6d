# src/upload/storage.py
import asyncio
import logging
from typing import Optional

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient

from src.upload.config import UploadSettings
from src.upload.constants import MIME_FORMATS
from src.upload.schemas import DeleteResult, UploadResult
from src.upload.utils import generate_public_id, resolve_content_type

logger = logging.getLogger(__name__)


class BlobStorage:
    """Azure Blob Storage adapter. The only part of the pipeline that does network I/O."""

    def __init__(self, settings: UploadSettings):
        self.settings = settings
        self._client: Optional[BlobServiceClient] = None

    @property
    def blob_service_client(self) -> BlobServiceClient:
        if self._client is None:
            if self.settings.AZURE_STORAGE_CONNECTION_STRING:
                self._client = BlobServiceClient.from_connection_string(
                    self.settings.AZURE_STORAGE_CONNECTION_STRING
                )
            else:
                self._client = BlobServiceClient(
                    account_url=f"https://{self.settings.AZURE_STORAGE_ACCOUNT}.blob.core.windows.net",
                    credential=self.settings.AZURE_STORAGE_KEY,
                )
        return self._client

    async def store(
            self,
            content: bytes,
            filename: str,
            folder: str,
            declared_type: Optional[str] = None,
    ) -> UploadResult:
        """
        Upload content under "{folder}/{name}_{millis}_{token}".

        The returned public_id is that full, folder-qualified blob name, so it
        is all delete() needs. Its last path segment starts with the sanitized
        filename.
        """
        public_id = generate_public_id(filename)
        blob_name = f"{folder.strip('/')}/{public_id}" if folder.strip("/") else public_id
        content_type = resolve_content_type(content, declared_type)

        try:
            blob_client = self.blob_service_client.get_blob_client(
                container=self.settings.UPLOAD_CONTAINER,
                blob=blob_name,
            )

            await self._with_timeout(
                blob_client.upload_blob(
                    content,
                    overwrite=False,
                    content_settings=ContentSettings(
                        content_type=content_type,
                        cache_control=self.settings.CACHE_CONTROL,
                    ),
                )
            )

        except asyncio.TimeoutError:
            logger.error("Upload of %s timed out", blob_name)
            return UploadResult.fail("Upload timed out")
        except Exception as e:
            logger.error("Blob upload error for %s: %s", blob_name, e)
            return UploadResult.fail(str(e) or "Upload failed")

        # The blob is written at this point, so a failed lookup must not turn into a Failure
        try:
            properties = await self._with_timeout(blob_client.get_blob_properties())
            size = properties.size
        except Exception as e:
            logger.warning("Could not read properties of %s, using local size: %r", blob_name, e)
            size = len(content)

        logger.info("Stored %s (%d bytes)", blob_name, size)
        return UploadResult.ok(
            url=blob_client.url,
            public_id=blob_name,
            size=size,
            format=MIME_FORMATS.get(content_type),
        )

    async def delete(self, public_id: str) -> DeleteResult:
        try:
            blob_client = self.blob_service_client.get_blob_client(
                container=self.settings.UPLOAD_CONTAINER,
                blob=public_id,
            )
            await self._with_timeout(blob_client.delete_blob(delete_snapshots="include"))

        except ResourceNotFoundError:
            # The store cannot tell "already gone" apart from "not deleted"
            return DeleteResult.fail("Failed to delete file")
        except asyncio.TimeoutError:
            logger.error("Delete of %s timed out", public_id)
            return DeleteResult.fail("Delete timed out")
        except Exception as e:
            logger.error("Blob delete error for %s: %s", public_id, e)
            return DeleteResult.fail(str(e) or "Delete failed")

        logger.info("Deleted %s", public_id)
        return DeleteResult.ok()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def _with_timeout(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self.settings.STORAGE_TIMEOUT_SECONDS)
