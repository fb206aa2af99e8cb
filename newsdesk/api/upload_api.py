from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status

from newsdesk.api.dependencies.clients import get_storage_backends
from newsdesk.api.dependencies.unit_of_work import UnitOfWork, get_uow
from newsdesk.api.openapi_responses import (
    ErrorExample,
    error_responses,
    merge_responses,
    rate_limited_response,
)
from newsdesk.api.schemas.upload import UploadResponse
from newsdesk.core.rate_limit import UPLOAD_RATE_LIMIT, limit, rate_limit_ip_key
from newsdesk.services.image_upload_service import (
    MAX_IMAGE_SIZE,
    ImageUploadService,
    validate_upload,
)
from newsdesk.services.storage import StorageBackend

router = APIRouter()


@router.post(
    "",
    summary="Upload an article image",
    response_model=UploadResponse,
    responses=merge_responses(
        rate_limited_response(),
        error_responses(
            ErrorExample(
                status_code=status.HTTP_400_BAD_REQUEST,
                error="bad_request",
                message="Unsupported file type: application/pdf",
                code="UNSUPPORTED_FILE_TYPE",
                description="File rejected",
            ),
            ErrorExample(
                status_code=status.HTTP_400_BAD_REQUEST,
                error="bad_request",
                message="File too large, maximum size is 5MB",
                code="FILE_TOO_LARGE",
                description="File rejected",
            ),
            ErrorExample(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error="internal_error",
                message="Upload failed with status 403",
                code="STORAGE_ERROR",
                description="Storage failure",
            ),
        ),
    ),
)
@limit(UPLOAD_RATE_LIMIT, key_func=rate_limit_ip_key)
async def upload_image(
    request: Request,
    file: UploadFile = File(...),
    article_id: str | None = Form(None),
    uow: UnitOfWork = Depends(get_uow, scope="function"),
    backends: tuple[StorageBackend, StorageBackend | None] = Depends(get_storage_backends),
) -> UploadResponse:
    """Accept a JPEG, PNG, GIF or WebP image of at most 5 MB."""
    storage, fallback = backends
    validate_upload(file.content_type, file.size or 0)
    data = await file.read(MAX_IMAGE_SIZE + 1)
    result = await ImageUploadService(uow.images, storage, fallback).upload(
        original_name=file.filename or "upload",
        content_type=file.content_type,
        data=data,
        article_id=article_id,
    )
    image = result.image
    return UploadResponse(
        id=image.id,
        url=image.url,
        file_name=image.file_name,
        size=image.size,
        storage_path=image.storage_path,
        article_id=image.article_id,
        status="warning" if result.warning else "success",
        warning=result.warning,
    )
