# src/upload/router.py
import time

from fastapi import APIRouter, Depends, File, Form, UploadFile

from src.exception import BadRequestException, PayloadTooLargeException
from src.upload.constants import MAX_FILES_PER_REQUEST, REQUEST_ALLOWED_TYPES
from src.upload.schemas import (
    DeleteResponse,
    FailedFile,
    MultipleUploadData,
    MultipleUploadResponse,
    ResizeOptions,
    UploadedFile,
    UploadKind,
    UploadResponse,
    UploadResult,
)
from src.upload.service import FileUploadService, get_upload_service
from src.upload.utils import format_megabytes

router = APIRouter()


async def _read_upload(file: UploadFile, service: FileUploadService) -> bytes:
    # Request-level guard only; the pipeline sniffs the bytes itself
    if file.content_type not in REQUEST_ALLOWED_TYPES:
        raise BadRequestException(f"File type {file.content_type} not allowed")

    content = await file.read()
    limit = service.settings.REQUEST_MAX_FILE_SIZE
    if len(content) > limit:
        raise PayloadTooLargeException(f"File too large. Max: {format_megabytes(limit)}MB")
    return content


def _uploaded(result: UploadResult, original_name: str | None = None) -> UploadedFile:
    return UploadedFile(
        url=result.url,
        public_id=result.public_id,
        size=result.size,
        format=result.format,
        original_name=original_name,
    )


@router.post("/file", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    folder: str | None = Form(None),
    service: FileUploadService = Depends(get_upload_service),
):
    content = await _read_upload(file, service)
    options = service.options_for(UploadKind.FILE, folder=folder)

    result = await service.upload(content, file.filename or "file", options, file.content_type)
    if not result.success:
        raise BadRequestException(result.error or "Upload failed")

    return UploadResponse(message="File uploaded successfully", data=_uploaded(result, file.filename))


@router.post("/image", response_model=UploadResponse)
async def upload_image(
    image: UploadFile = File(...),
    folder: str | None = Form(None),
    quality: int | None = Form(None, ge=0, le=100),
    width: int | None = Form(None, gt=0),
    height: int | None = Form(None, gt=0),
    service: FileUploadService = Depends(get_upload_service),
):
    content = await _read_upload(image, service)
    options = service.options_for(
        UploadKind.IMAGE,
        folder=folder,
        # 0 or missing falls back to the preset quality
        quality=quality or None,
        resize=ResizeOptions(width=width, height=height),
    )

    result = await service.upload(content, image.filename or "image", options, image.content_type)
    if not result.success:
        raise BadRequestException(result.error or "Image upload failed")

    return UploadResponse(message="Image uploaded successfully", data=_uploaded(result, image.filename))


@router.post("/avatar", response_model=UploadResponse)
async def upload_avatar(
    avatar: UploadFile = File(...),
    service: FileUploadService = Depends(get_upload_service),
):
    content = await _read_upload(avatar, service)
    options = service.options_for(UploadKind.AVATAR)

    result = await service.upload(
        content, f"avatar_{int(time.time() * 1000)}", options, avatar.content_type
    )
    if not result.success:
        raise BadRequestException(result.error or "Avatar upload failed")

    return UploadResponse(message="Avatar uploaded successfully", data=_uploaded(result))


@router.post("/multiple", response_model=MultipleUploadResponse)
async def upload_multiple(
    files: list[UploadFile] = File(...),
    folder: str | None = Form(None),
    service: FileUploadService = Depends(get_upload_service),
):
    if len(files) > MAX_FILES_PER_REQUEST:
        raise BadRequestException(f"Too many files. Max: {MAX_FILES_PER_REQUEST}")

    contents = [await _read_upload(file, service) for file in files]
    names = [file.filename or "file" for file in files]
    types = [file.content_type for file in files]
    options = service.options_for(UploadKind.MULTIPLE, folder=folder)

    results = await service.upload_many(zip(contents, names, types), options)

    successful = [_uploaded(r, name) for r, name in zip(results, names) if r.success]
    failed = [
        FailedFile(original_name=name, error=r.error or "Upload failed")
        for r, name in zip(results, names)
        if not r.success
    ]

    message = f"{len(successful)} files uploaded successfully"
    if failed:
        message += f", {len(failed)} failed"

    return MultipleUploadResponse(
        message=message,
        data=MultipleUploadData(successful=successful, failed=failed or None),
    )


@router.delete("/{public_id:path}", response_model=DeleteResponse)
async def delete_file(
    public_id: str,
    service: FileUploadService = Depends(get_upload_service),
):
    result = await service.delete(public_id)
    if not result.success:
        raise BadRequestException(result.error or "Delete failed")

    return DeleteResponse(message="File deleted successfully")
