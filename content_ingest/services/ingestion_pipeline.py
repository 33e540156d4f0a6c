"""
Bulk-upload orchestrator: optional reset -> chapter index -> per-row handler.
"""
import time
from typing import Any, Dict, List, Optional, Type

from content_ingest.core.logging_config import logger
from content_ingest.models.results import Accepted, IngestSummary, UploadOptions
from content_ingest.models.schemas import UploadType
from content_ingest.services.chapter_index import ChapterIndex
from content_ingest.services.content_store import ContentStore
from content_ingest.services.handlers.base_handler import BaseContentHandler
from content_ingest.services.handlers.chapter_handler import ChapterHandler
from content_ingest.services.handlers.mcq_handler import McqHandler
from content_ingest.services.handlers.revision_handler import RevisionHandler
from content_ingest.services.reset_controller import reset_content


HANDLERS: Dict[UploadType, Type[BaseContentHandler]] = {
    UploadType.MCQ: McqHandler,
    UploadType.REVISION: RevisionHandler,
    UploadType.CHAPTERS: ChapterHandler,
}


def ingest(
    upload_type: UploadType,
    raw_records: List[Any],
    store: ContentStore,
    options: Optional[UploadOptions] = None
) -> IngestSummary:
    """
    Ingest one upload batch.

    Rows are processed strictly in order, one at a time, so a row's
    duplicate check sees every row written before it in the same batch.
    A rejected row never stops the batch.

    Args:
        upload_type: Content type of every row in the batch
        raw_records: Rows as decoded from the request
        store: Persistence collaborator
        options: Reset / enhancement flags

    Returns:
        IngestSummary with counts over the whole batch

    Raises:
        ResetError: If the reset step fails (nothing is inserted)
        ChapterIndexError: If chapters cannot be loaded
    """
    options = options or UploadOptions()
    start_time = time.time()
    summary = IngestSummary(upload_type=upload_type)

    logger.info(
        f"[BulkUpload] Starting {upload_type.value} upload: {len(raw_records)} rows, "
        f"resetIds={options.reset_ids}, enhanceContent={options.enhance_content}"
    )

    if options.reset_ids:
        reset_content(upload_type, store)
        summary.reset_performed = True

    index = ChapterIndex.build(store)
    summary.available_chapters = index.chapter_numbers()

    handler = HANDLERS[upload_type](store, index, options)
    for row_number, raw in enumerate(raw_records, start=1):
        result = handler.handle(raw, summary)
        if isinstance(result, Accepted):
            summary.inserted += 1
        else:
            handler.reject(row_number, result, summary)

    processing_time = (time.time() - start_time) * 1000
    logger.info(
        f"[BulkUpload] {upload_type.value} upload complete in {processing_time:.2f}ms: "
        f"inserted={summary.inserted}, converted={summary.converted}, "
        f"skipped={summary.skipped}, errors={len(summary.errors)}"
    )
    return summary
