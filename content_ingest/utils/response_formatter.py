"""
Response formatting utilities to turn an IngestSummary into the upload response.
"""
from typing import Any, Dict, Optional

from content_ingest.core.config import settings
from content_ingest.models.results import IngestSummary
from content_ingest.models.schemas import UploadDetails, UploadResponse, UploadType


def build_message(summary: IngestSummary) -> str:
    """
    Human summary with the literal counts.

    Args:
        summary: Result of one upload

    Returns:
        str: Multi-line message shown to the admin
    """
    if summary.upload_type == UploadType.MCQ:
        lines = [f"Inserted: {summary.inserted} questions"]
        if summary.converted > 0:
            lines.append(f"Auto-converted: {summary.converted} questions")
        lines.append(f"Skipped: {summary.skipped} questions")
        return "MCQ upload completed!\n\n" + "\n".join(lines)

    if summary.upload_type == UploadType.REVISION:
        return (
            "Revision upload completed!\n\n"
            f"Inserted: {summary.inserted} items\n"
            f"Auto-converted: {summary.converted} items\n"
            f"Enhanced: {summary.enhanced} items\n"
            f"Skipped: {summary.skipped} items"
        )

    message = f"Chapters upload complete. Inserted/Updated {summary.inserted} chapters."
    if summary.errors:
        message += f" Failed: {len(summary.errors)} chapters."
    return message


def build_upload_response(summary: IngestSummary, limit: Optional[int] = None) -> UploadResponse:
    """Build the response model; item lists are cut to the first ``limit``."""
    limit = limit if limit is not None else settings.report_items_limit

    if summary.upload_type == UploadType.CHAPTERS:
        details = UploadDetails(
            inserted_or_updated=summary.inserted,
            errors=summary.errors[:limit] or None,
            reset_performed=summary.reset_performed
        )
    else:
        details = UploadDetails(
            inserted=summary.inserted,
            converted=summary.converted,
            skipped=summary.skipped,
            available_chapters=summary.available_chapters,
            skipped_items=summary.skipped_details[:limit] or None,
            reset_performed=summary.reset_performed
        )
        if summary.upload_type == UploadType.MCQ:
            details.difficulty_coerced = summary.difficulty_coerced
        else:
            details.enhanced = summary.enhanced
            details.conversion_log = summary.conversion_log[:limit] or None

    return UploadResponse(message=build_message(summary), details=details)


def to_response_body(response: UploadResponse) -> Dict[str, Any]:
    """JSON body with camelCase keys and unset fields left out."""
    return response.model_dump(by_alias=True, exclude_none=True)
