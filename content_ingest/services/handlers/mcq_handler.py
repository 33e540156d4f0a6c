"""
Handler for MCQ question uploads.
Rows are inserted once per chapter and question text; repeats are skipped.
"""
from typing import Any

from content_ingest.core.logging_config import logger
from content_ingest.models.results import Accepted, IngestSummary, Rejected, RowResult
from content_ingest.models.schemas import NormalizedMcq, SkipDetail
from content_ingest.services.content_store import ContentTable
from content_ingest.services.field_normalizer import normalize_mcq, reported_number
from content_ingest.services.handlers.base_handler import BaseContentHandler
from content_ingest.services.record_guard import guard_mcq


QUESTION_PREVIEW_LENGTH = 50


def question_preview(text: str) -> str:
    if not text:
        return "Unknown"
    return f"{text[:QUESTION_PREVIEW_LENGTH]}..."


class McqHandler(BaseContentHandler):
    """Normalizes, checks and inserts MCQ rows."""

    tag = "McqHandler"

    def handle(self, raw: Any, summary: IngestSummary) -> RowResult:
        conversion = normalize_mcq(raw)
        record = conversion.record

        if conversion.was_converted:
            summary.converted += 1
            logger.info(f"[McqHandler] Converted MCQ: {record.question_en[:QUESTION_PREVIEW_LENGTH]}...")

        result = guard_mcq(record, self.index, self.store)
        if isinstance(result, Rejected):
            result.record = record
            return result

        chapter_id = result.chapter_id
        result = self.write(result, record, lambda: self.store.create(
            ContentTable.QUESTION,
            self.to_row(record, chapter_id)
        ))
        if isinstance(result, Accepted) and record.difficulty_coerced:
            summary.difficulty_coerced += 1
        return result

    @staticmethod
    def to_row(record: NormalizedMcq, chapter_id: int) -> dict:
        row = record.model_dump(exclude={"chapter_number", "difficulty_coerced"})
        row["difficulty"] = record.difficulty.value
        row["chapter_id"] = chapter_id
        return row

    def describe_skip(self, row_number: int, rejected: Rejected) -> SkipDetail:
        record: NormalizedMcq = rejected.record
        return SkipDetail(
            row=row_number,
            question=question_preview(record.question_en),
            chapter_number=reported_number(record.chapter_number),
            reason=rejected.reason
        )
