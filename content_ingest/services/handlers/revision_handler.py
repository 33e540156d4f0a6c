"""
Handler for revision-note uploads, with optional content enhancement.
"""
from typing import Any

from content_ingest.core.logging_config import logger
from content_ingest.models.results import IngestSummary, Rejected, RowResult
from content_ingest.models.schemas import NormalizedRevision, SkipDetail
from content_ingest.services.content_enhancer import enhance_content, generate_additional_qa
from content_ingest.services.content_store import ContentTable
from content_ingest.services.field_normalizer import normalize_revision, reported_number
from content_ingest.services.handlers.base_handler import BaseContentHandler
from content_ingest.services.record_guard import guard_revision


class RevisionHandler(BaseContentHandler):
    """Normalizes, checks, optionally enhances and inserts revision notes."""

    tag = "RevisionHandler"

    def handle(self, raw: Any, summary: IngestSummary) -> RowResult:
        record = normalize_revision(raw)

        if record.was_converted:
            summary.converted += 1
            summary.conversion_log.append(f"Converted: {record.title_en}")

        result = guard_revision(record, self.index, self.store)
        if isinstance(result, Rejected):
            result.record = record
            return result

        if self.options.enhance_content:
            record = self._enhance(record, summary)

        chapter_id = result.chapter_id
        logger.info(f"[RevisionHandler] Creating revision: {record.title_en} (chapter id {chapter_id})")
        return self.write(result, record, lambda: self.store.create(
            ContentTable.REVISION,
            self.to_row(record, chapter_id)
        ))

    def _enhance(self, record: NormalizedRevision, summary: IngestSummary) -> NormalizedRevision:
        updates = {}

        enhanced_en = enhance_content(record.content_en)
        if enhanced_en != record.content_en:
            updates["content_en"] = enhanced_en
            summary.enhanced += 1

        additional_qa = generate_additional_qa(record.content_en, record.qa_json)
        if additional_qa:
            updates["qa_json"] = record.qa_json + additional_qa
            summary.enhanced += 1
            summary.conversion_log.append(
                f"Added {len(additional_qa)} auto-generated Q&As for: {record.title_en}"
            )

        return record.model_copy(update=updates) if updates else record

    @staticmethod
    def to_row(record: NormalizedRevision, chapter_id: int) -> dict:
        return {
            "chapter_id": chapter_id,
            "title_en": record.title_en,
            "title_mr": record.title_mr,
            "content_en": record.content_en,
            "content_mr": record.content_mr,
            "image_url": record.image_url,
            "video_url": None,
            "qa_json": [pair.model_dump(by_alias=True) for pair in record.qa_json],
            "order": record.order,
        }

    def describe_skip(self, row_number: int, rejected: Rejected) -> SkipDetail:
        record: NormalizedRevision = rejected.record
        return SkipDetail(
            row=row_number,
            title=record.title_en or "Unknown",
            chapter_number=reported_number(record.chapter_number),
            reason=rejected.reason
        )
