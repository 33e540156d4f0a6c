"""
Per-row outcomes and the per-upload summary.

Every row flows through normalize -> guard -> write and ends as either an
``Accepted`` or a ``Rejected`` value; rejection never aborts the batch.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from content_ingest.models.schemas import SkipDetail, UploadType


@dataclass
class Accepted:
    """Row passed the guard (and, after a write, holds the stored row)."""
    record: Any
    chapter_id: Optional[int] = None
    row: Optional[Dict[str, Any]] = None


@dataclass
class Rejected:
    """Row was skipped; ``reason`` is shown to the uploader."""
    reason: str
    record: Any = None


RowResult = Union[Accepted, Rejected]


@dataclass
class UploadOptions:
    """Request flags that change how a batch is processed."""
    reset_ids: bool = False
    enhance_content: bool = False


@dataclass
class IngestSummary:
    """Aggregate result of one upload request."""
    upload_type: UploadType
    inserted: int = 0
    skipped: int = 0
    converted: int = 0
    enhanced: int = 0
    difficulty_coerced: int = 0
    skipped_details: List[SkipDetail] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    conversion_log: List[str] = field(default_factory=list)
    available_chapters: List[int] = field(default_factory=list)
    reset_performed: bool = False

    def skip(self, detail: SkipDetail) -> None:
        self.skipped += 1
        self.skipped_details.append(detail)
