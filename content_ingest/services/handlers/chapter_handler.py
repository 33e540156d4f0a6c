"""
Handler for chapter uploads.
Chapters are upserted by chapter number, so re-uploading a chapter updates it.
"""
from typing import Any

from content_ingest.core.logging_config import logger
from content_ingest.models.results import IngestSummary, Rejected, RowResult
from content_ingest.models.schemas import NormalizedChapter, SkipDetail
from content_ingest.services.content_store import ContentTable
from content_ingest.services.field_normalizer import normalize_chapter, reported_number
from content_ingest.services.handlers.base_handler import BaseContentHandler
from content_ingest.services.record_guard import guard_chapter


class ChapterHandler(BaseContentHandler):
    """Normalizes and upserts chapter rows."""

    tag = "ChapterHandler"

    def handle(self, raw: Any, summary: IngestSummary) -> RowResult:
        record = normalize_chapter(raw)

        result = guard_chapter(record)
        if isinstance(result, Rejected):
            result.record = record
            return result

        key = {"chapter_number": int(record.chapter_number)}
        data = record.model_dump(exclude={"chapter_number"})

        def upsert():
            row, created = self.store.upsert(ContentTable.CHAPTER, key, create=data, update=data)
            logger.info(
                f"[ChapterHandler] {'Created' if created else 'Updated'} chapter {key['chapter_number']}"
            )
            return row

        return self.write(result, record, upsert)

    def describe_skip(self, row_number: int, rejected: Rejected) -> SkipDetail:
        record: NormalizedChapter = rejected.record
        return SkipDetail(
            row=row_number,
            title=record.title_en or None,
            chapter_number=reported_number(record.chapter_number),
            reason=rejected.reason
        )

    def reject(self, row_number: int, rejected: Rejected, summary: IngestSummary) -> None:
        """Chapter rows are never "skipped"; failures are reported as errors."""
        logger.error(f"[ChapterHandler] Row {row_number} not saved: {rejected.reason}")
        detail = self.describe_skip(row_number, rejected)
        summary.errors.append(
            f"Row {row_number} (chapterNumber {detail.chapter_number}): {rejected.reason}"
        )
