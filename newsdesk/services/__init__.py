from newsdesk.services.content_generation_service import (
    ContentGenerationError,
    ContentGenerationService,
    InvalidGenerationRequestError,
    render_template,
)
from newsdesk.services.dify_ingest_service import DifyIngestService, extract_title_keywords
from newsdesk.services.image_upload_service import ImageUploadService, UploadValidationError
from newsdesk.services.storage import LocalStorage, StorageBackend, StorageError, SupabaseStorage

__all__ = [
    "ContentGenerationError",
    "ContentGenerationService",
    "DifyIngestService",
    "ImageUploadService",
    "InvalidGenerationRequestError",
    "LocalStorage",
    "StorageBackend",
    "StorageError",
    "SupabaseStorage",
    "UploadValidationError",
    "extract_title_keywords",
    "render_template",
]
