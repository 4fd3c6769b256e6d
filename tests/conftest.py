# tests/conftest.py
import io
import os
import sys
from typing import AsyncGenerator

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from PIL import Image

from src.main import app as fastapi_app
from src.upload.config import UploadSettings
from src.upload.schemas import DeleteResult, UploadResult
from src.upload.service import FileUploadService, get_upload_service


class FakeStorage:
    """In-memory stand-in for the blob store that records every call."""

    def __init__(self):
        self.stored = {}
        self.store_calls = []
        self.delete_calls = []
        self.declared_types = []

    async def store(self, content: bytes, filename: str, folder: str, declared_type=None) -> UploadResult:
        self.store_calls.append((content, filename, folder))
        self.declared_types.append(declared_type)
        public_id = f"{folder}/{filename.rsplit('.', 1)[0]}_{len(self.store_calls)}"
        self.stored[public_id] = content
        return UploadResult.ok(
            url=f"https://fake.blob.core.windows.net/uploads/{public_id}",
            public_id=public_id,
            size=len(content),
            format="png",
        )

    async def delete(self, public_id: str) -> DeleteResult:
        self.delete_calls.append(public_id)
        if self.stored.pop(public_id, None) is None:
            return DeleteResult.fail("Failed to delete file")
        return DeleteResult.ok()

    async def close(self) -> None:
        pass


def make_image(fmt: str = "PNG", size=(64, 64), mode: str = "RGB", noise: bool = False) -> bytes:
    """Generates an in-memory image of the given format."""
    if noise:
        image = Image.frombytes(mode, size, os.urandom(size[0] * size[1] * len(mode)))
    else:
        colors = {"RGB": (200, 120, 40), "RGBA": (200, 120, 40, 128)}
        image = Image.new(mode, size, color=colors.get(mode, 128))
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def upload_settings() -> UploadSettings:
    """Test-specific settings"""
    return UploadSettings(
        AZURE_STORAGE_ACCOUNT="testaccount",
        AZURE_STORAGE_KEY="dGVzdGtleQ==",
        UPLOAD_CONTAINER="test-uploads",
        STORAGE_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def upload_service(fake_storage: FakeStorage, upload_settings: UploadSettings) -> FileUploadService:
    return FileUploadService(fake_storage, upload_settings)


@pytest_asyncio.fixture
async def app(upload_service: FileUploadService) -> FastAPI:
    """FastAPI app with the upload service wired to the fake store"""
    fastapi_app.dependency_overrides[get_upload_service] = lambda: upload_service

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
