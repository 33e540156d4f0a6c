"""
API routes for the bulk-upload service.
"""
from typing import Any, List, Tuple

from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import UploadFile

from content_ingest.core.config import settings
from content_ingest.core.logging_config import logger
from content_ingest.models.results import UploadOptions
from content_ingest.models.schemas import (
    ChapterOut,
    ErrorResponse,
    HealthCheckResponse,
    UploadResponse,
    UploadType,
)
from content_ingest.services.content_store import ContentStore, ContentTable
from content_ingest.services.ingestion_pipeline import ingest
from content_ingest.services.store_provider import get_content_store
from content_ingest.services.upload_decoder import (
    decode_upload_file,
    extract_records,
    parse_flag,
    parse_upload_type,
)
from content_ingest.utils.exceptions import IngestException, InvalidUploadError
from content_ingest.utils.response_formatter import build_upload_response, to_response_body


router = APIRouter()


async def _read_json_upload(request: Request) -> Tuple[UploadType, List[Any], UploadOptions]:
    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidUploadError(f"Invalid JSON body: {e}") from e

    # A bare array cannot carry the flags, so they come from the query string
    fields = body if isinstance(body, dict) else request.query_params
    upload_type = parse_upload_type(fields.get("type"))
    options = UploadOptions(
        reset_ids=parse_flag(fields.get("resetIds")),
        enhance_content=parse_flag(fields.get("enhanceContent"))
    )
    records = extract_records(body)

    logger.info(f"[API] JSON upload: type={upload_type.value}, items={len(records)}")
    return upload_type, records, options


async def _read_file_upload(request: Request) -> Tuple[UploadType, List[Any], UploadOptions]:
    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise InvalidUploadError("No file uploaded")

    upload_type = parse_upload_type(form.get("type"))
    options = UploadOptions(
        reset_ids=parse_flag(form.get("resetIds")),
        enhance_content=parse_flag(form.get("enhanceContent"))
    )

    content = await upload.read()
    if len(content) > settings.max_upload_bytes:
        raise InvalidUploadError(
            f"File too large. Maximum size: {settings.max_upload_bytes // (1024 * 1024)}MB"
        )

    logger.info(f"[API] File upload: type={upload_type.value}, file={upload.filename}, bytes={len(content)}")
    records = decode_upload_file(upload_type, upload.filename, content)
    return upload_type, records, options


@router.get("/", response_model=dict)
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "description": settings.api_description,
        "endpoints": {
            "bulk_upload": "/admin/bulk-upload",
            "chapters": "/admin/chapters",
            "health": "/health",
            "docs": "/docs"
        }
    }


@router.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """
    Health check endpoint to verify service status.
    """
    return HealthCheckResponse(
        status="healthy",
        version=settings.api_version,
        storage_backend=settings.storage_backend
    )


@router.get("/admin/chapters", response_model=List[dict])
async def list_chapters(store: ContentStore = Depends(get_content_store)):
    """
    List stored chapters, the rows the upload chapter index is built from.
    """
    rows = store.find_all(ContentTable.CHAPTER)
    return [ChapterOut(**row).model_dump(by_alias=True) for row in rows]


@router.post(
    "/admin/bulk-upload",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    responses={
        200: {"model": UploadResponse, "description": "Upload summary"},
        400: {"model": ErrorResponse, "description": "Malformed upload"},
        500: {"model": ErrorResponse, "description": "Upload failed"}
    }
)
async def bulk_upload(request: Request, store: ContentStore = Depends(get_content_store)):
    """
    Bulk-upload chapters, MCQ questions or revision notes.

    Accepts either a JSON body ``{type, data, resetIds, enhanceContent}`` or a
    multipart form with ``file``, ``type``, ``resetIds`` and ``enhanceContent``.
    Bad rows are skipped and reported; the rest of the batch is still saved.

    Raises:
        InvalidUploadError: For malformed requests (400)
        StorageError: If the reset or chapter lookup fails (500)
    """
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        upload_type, records, options = await _read_json_upload(request)
    elif "multipart/form-data" in content_type:
        upload_type, records, options = await _read_file_upload(request)
    else:
        raise InvalidUploadError("Content-Type must be 'application/json' or 'multipart/form-data'")

    try:
        summary = ingest(upload_type, records, store, options)
    except IngestException:
        raise
    except Exception as e:
        logger.error(f"[API] Bulk upload failed: {e}", exc_info=True)
        raise IngestException(str(e) or "Bulk upload failed") from e

    return to_response_body(build_upload_response(summary))
