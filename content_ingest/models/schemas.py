"""
Pydantic models for canonical records and API payloads.
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import datetime
from enum import Enum


class UploadType(str, Enum):
    """Content types accepted by the bulk-upload endpoint."""
    MCQ = "mcq"
    REVISION = "revision"
    CHAPTERS = "chapters"


class Difficulty(str, Enum):
    """MCQ difficulty levels."""
    EASY = "EASY"
    MODERATE = "MODERATE"
    HARD = "HARD"


class NormalizedMcq(BaseModel):
    """Canonical MCQ record produced from any accepted input shape."""
    chapter_number: float = Field(..., description="Curriculum chapter number (NaN when unparseable)")
    question_en: str = ""
    question_mr: Optional[str] = None
    option_a_en: str = ""
    option_a_mr: Optional[str] = None
    option_b_en: str = ""
    option_b_mr: Optional[str] = None
    option_c_en: str = ""
    option_c_mr: Optional[str] = None
    option_d_en: str = ""
    option_d_mr: Optional[str] = None
    correct_answer: str = "A"
    difficulty: Difficulty = Difficulty.MODERATE
    difficulty_coerced: bool = Field(
        default=False,
        description="True when a supplied difficulty was unrecognised and defaulted to MODERATE"
    )
    explanation_en: Optional[str] = None
    explanation_mr: Optional[str] = None


class McqConversion(BaseModel):
    """Result of MCQ normalization."""
    record: NormalizedMcq
    was_converted: bool = False


class QaPair(BaseModel):
    """One revision question/answer pair, stored under its camelCase keys."""
    question_en: str = Field(default="", alias="questionEn")
    question_mr: str = Field(default="", alias="questionMr")
    answer_en: str = Field(default="", alias="answerEn")
    answer_mr: str = Field(default="", alias="answerMr")

    class Config:
        populate_by_name = True


class NormalizedRevision(BaseModel):
    """Canonical revision-note record."""
    chapter_number: float = Field(..., description="Curriculum chapter number (NaN when missing)")
    title_en: str
    title_mr: str
    content_en: Optional[str] = None
    content_mr: Optional[str] = None
    image_url: Optional[str] = None
    qa_json: List[QaPair] = Field(default_factory=list)
    order: int = 0
    was_converted: bool = True


class NormalizedChapter(BaseModel):
    """Canonical chapter record used for upsert by chapter number."""
    chapter_number: float
    title_en: str = ""
    title_mr: Optional[str] = None
    act_chapter_name_en: Optional[str] = None
    act_chapter_name_mr: Optional[str] = None
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    maharera_equivalent_en: Optional[str] = None
    maharera_equivalent_mr: Optional[str] = None
    sections: Optional[str] = None
    order_index: Optional[int] = None
    is_active: bool = True
    display_in_app: bool = True


class SkipDetail(BaseModel):
    """Why one input row was not persisted."""
    row: int = Field(..., description="1-based position of the row in the upload")
    question: Optional[str] = None
    title: Optional[str] = None
    chapter_number: Optional[Union[int, float, str]] = Field(default=None, alias="chapterNumber")
    reason: str

    class Config:
        populate_by_name = True


class UploadDetails(BaseModel):
    """Counters and bounded samples reported for one upload."""
    inserted: Optional[int] = None
    inserted_or_updated: Optional[int] = Field(default=None, alias="insertedOrUpdated")
    converted: Optional[int] = None
    enhanced: Optional[int] = None
    skipped: Optional[int] = None
    difficulty_coerced: Optional[int] = Field(default=None, alias="difficultyCoerced")
    available_chapters: Optional[List[int]] = Field(default=None, alias="availableChapters")
    skipped_items: Optional[List[SkipDetail]] = Field(default=None, alias="skippedItems")
    errors: Optional[List[str]] = None
    conversion_log: Optional[List[str]] = Field(default=None, alias="conversionLog")
    reset_performed: bool = Field(default=False, alias="resetPerformed")

    class Config:
        populate_by_name = True


class UploadResponse(BaseModel):
    """Response model for the bulk-upload endpoint."""
    message: str = Field(..., description="Human summary with literal counts")
    details: UploadDetails

    class Config:
        json_schema_extra = {
            "example": {
                "message": "MCQ upload completed!\n\nInserted: 48 questions\nSkipped: 2 questions",
                "details": {
                    "inserted": 48,
                    "converted": 0,
                    "skipped": 2,
                    "availableChapters": [1, 2, 3],
                    "skippedItems": [
                        {"row": 7, "question": "Who appoints the Authority...", "reason": "Duplicate question (already exists in database)"}
                    ],
                    "resetPerformed": False
                }
            }
        }


class ChapterOut(BaseModel):
    """Persisted chapter as listed by the admin endpoint."""
    id: int
    chapter_number: int = Field(..., alias="chapterNumber")
    title_en: str = Field(..., alias="titleEn")
    title_mr: Optional[str] = Field(default=None, alias="titleMr")
    order_index: Optional[int] = Field(default=None, alias="orderIndex")
    is_active: bool = Field(default=True, alias="isActive")
    display_in_app: bool = Field(default=True, alias="displayInApp")

    class Config:
        populate_by_name = True


class HealthCheckResponse(BaseModel):
    """Response model for health check endpoint."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    storage_backend: str = Field(..., description="Configured content store")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Health check timestamp")


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str = Field(..., description="Error message")
