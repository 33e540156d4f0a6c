"""
Field normalizers for bulk-uploaded curriculum content.

Uploaded rows arrive in many shapes: nested bilingual objects
(``{"question": {"en": ..., "mr": ...}}``), flat suffixed fields
(``questionEn`` / ``questionMr``), positional option arrays and assorted
alternate key names. Each normalizer maps one loosely-shaped row onto the
canonical record for its content type.

Normalizers are pure and total: they never raise, and anything absent or
malformed degrades to a safe default. Whether the result is acceptable is
decided later by the record guard.
"""
import json
import math
from typing import Any, Dict, Iterable, List, Optional, Union

from content_ingest.models.schemas import (
    Difficulty,
    McqConversion,
    NormalizedChapter,
    NormalizedMcq,
    NormalizedRevision,
    QaPair,
)


# Alias lists, first match wins
MCQ_CHAPTER_KEYS = ("chapterNumber", "chapter", "chapterNo", "chapterId", "ch")
REVISION_CHAPTER_KEYS = ("chapterNumber", "chapter", "chapterNo", "courseChapter", "chapterId")
CHAPTER_NUMBER_KEYS = ("chapterNumber", "courseChapter")

EN_KEYS = ("en", "english", "eng")
MR_KEYS = ("mr", "marathi", "mar")

QUESTION_EN_KEYS = ("questionEn", "question", "q", "questionText", "text")
QUESTION_MR_KEYS = ("questionMr", "questionMarathi", "qMr")

FLAT_OPTION_KEYS = {
    "A": (("optionAEn", "optionA", "a", "option1"), ("optionAMr", "optionAMarathi")),
    "B": (("optionBEn", "optionB", "b", "option2"), ("optionBMr", "optionBMarathi")),
    "C": (("optionCEn", "optionC", "c", "option3"), ("optionCMr", "optionCMarathi")),
    "D": (("optionDEn", "optionD", "d", "option4"), ("optionDMr", "optionDMarathi")),
}
OPTION_LETTERS = ("A", "B", "C", "D")

ANSWER_KEYS = ("correctAnswer", "correct", "answer", "ans", "key")
ANSWER_MAP = {
    "1": "A", "A": "A",
    "2": "B", "B": "B",
    "3": "C", "C": "C",
    "4": "D", "D": "D",
}

DIFFICULTY_KEYS = ("difficulty", "level", "difficultyLevel")
EASY_VALUES = {"EASY", "1"}
HARD_VALUES = {"HARD", "DIFFICULT", "3"}
MODERATE_VALUES = {"MODERATE", "MEDIUM", "2"}

EXPLANATION_EN_KEYS = ("explanationEn", "explanation", "explain")
EXPLANATION_MR_KEYS = ("explanationMr", "explanationMarathi")

TITLE_EN_KEYS = ("titleEn", "title.en", "title", "heading", "name", "topicEn")
TITLE_MR_KEYS = ("titleMr", "title.mr", "titleMarathi", "topicMr")
CONTENT_EN_KEYS = ("contentEn", "content.en", "content", "notes", "description", "text")
CONTENT_MR_KEYS = ("contentMr", "content.mr", "notesMarathi")
QA_KEYS = ("qaJson", "questions", "qna", "qa", "questionsAndAnswers")
QA_QUESTION_EN_KEYS = ("questionEn", "question.en", "question", "q")
QA_QUESTION_MR_KEYS = ("questionMr", "question.mr", "questionMarathi")
QA_ANSWER_EN_KEYS = ("answerEn", "answer.en", "answer", "a")
QA_ANSWER_MR_KEYS = ("answerMr", "answer.mr", "answerMarathi")
IMAGE_KEYS = ("imageUrl", "image", "img")
ORDER_KEYS = ("order", "orderIndex", "sequence")


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _lookup(raw: Dict[str, Any], key: str) -> Any:
    """Resolve ``key``; dotted keys walk into nested objects."""
    value: Any = raw
    for part in key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def first_present(raw: Dict[str, Any], keys: Iterable[str], default: Any = None) -> Any:
    """Return the first value under ``keys`` that is not None."""
    for key in keys:
        value = _lookup(raw, key)
        if value is not None:
            return value
    return default


def _first_scalar(raw: Dict[str, Any], keys: Iterable[str]) -> Any:
    """Like ``first_present`` but skips nested objects, so ``title`` only
    matches when it is a plain value."""
    for key in keys:
        value = _lookup(raw, key)
        if value is not None and not isinstance(value, dict):
            return value
    return None


def to_number(value: Any) -> float:
    """Loose numeric coercion; anything unparseable becomes NaN."""
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    if isinstance(value, list):
        if not value:
            return 0.0
        if len(value) == 1:
            return to_number(value[0])
    return math.nan


def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return str(value)


def reported_number(value: float) -> Union[int, str]:
    """Chapter number as shown in reports; NaN cannot go out as JSON."""
    if math.isfinite(value) and value == int(value):
        return int(value)
    return format_number(value)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def optional_text(value: Any) -> Optional[str]:
    """Text or None; empty values collapse to None."""
    if value is None:
        return None
    text = to_text(value)
    return text or None


def to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _bilingual(value: Dict[str, Any]) -> tuple:
    return (
        to_text(first_present(value, EN_KEYS, default="")),
        optional_text(first_present(value, MR_KEYS)),
    )


# ---------------------------------------------------------------------------
# MCQ
# ---------------------------------------------------------------------------

def _normalize_options(raw: Dict[str, Any]) -> tuple:
    """Return ({letter: (en, mr)}, converted) for any supported options shape."""
    options = raw.get("options")
    pairs = {}
    converted = False

    if isinstance(options, dict):
        for letter in OPTION_LETTERS:
            value = first_present(options, (letter, letter.lower()))
            if isinstance(value, dict):
                pairs[letter] = _bilingual(value)
                converted = True
            else:
                pairs[letter] = (to_text(value), None)
    elif isinstance(options, list):
        for position, letter in enumerate(OPTION_LETTERS):
            value = options[position] if position < len(options) else None
            pairs[letter] = (to_text(value), None)
        converted = True
    else:
        for letter in OPTION_LETTERS:
            en_keys, mr_keys = FLAT_OPTION_KEYS[letter]
            pairs[letter] = (
                to_text(first_present(raw, en_keys, default="")),
                optional_text(first_present(raw, mr_keys)),
            )

    return pairs, converted


def _normalize_answer(raw: Dict[str, Any]) -> str:
    answer = to_text(first_present(raw, ANSWER_KEYS, default="A")).upper()
    # Unknown values pass through; the guard and the store constrain them
    return ANSWER_MAP.get(answer, answer)


def _normalize_difficulty(raw: Dict[str, Any]) -> tuple:
    supplied = first_present(raw, DIFFICULTY_KEYS)
    value = to_text(supplied).upper() if supplied is not None else "MODERATE"
    if value in EASY_VALUES:
        return Difficulty.EASY, False
    if value in HARD_VALUES:
        return Difficulty.HARD, False
    return Difficulty.MODERATE, value not in MODERATE_VALUES


def normalize_mcq(raw: Any) -> McqConversion:
    """
    Normalize one uploaded MCQ row.

    Args:
        raw: Untrusted row (dict from JSON, or a spreadsheet row)

    Returns:
        McqConversion with the canonical record and whether any nested
        bilingual object or positional option array had to be flattened
    """
    if not isinstance(raw, dict):
        raw = {}
    was_converted = False

    chapter_number = to_number(first_present(raw, MCQ_CHAPTER_KEYS, default=1))

    question = raw.get("question")
    if isinstance(question, dict):
        question_en, question_mr = _bilingual(question)
        was_converted = True
    else:
        question_en = to_text(first_present(raw, QUESTION_EN_KEYS, default=""))
        question_mr = optional_text(first_present(raw, QUESTION_MR_KEYS))

    options, options_converted = _normalize_options(raw)
    was_converted = was_converted or options_converted

    difficulty, difficulty_coerced = _normalize_difficulty(raw)

    explanation = raw.get("explanation")
    if isinstance(explanation, dict):
        explanation_en = optional_text(first_present(explanation, EN_KEYS))
        explanation_mr = optional_text(first_present(explanation, MR_KEYS))
        was_converted = True
    else:
        explanation_en = optional_text(first_present(raw, EXPLANATION_EN_KEYS))
        explanation_mr = optional_text(first_present(raw, EXPLANATION_MR_KEYS))

    record = NormalizedMcq(
        chapter_number=chapter_number,
        question_en=question_en,
        question_mr=question_mr,
        option_a_en=options["A"][0],
        option_a_mr=options["A"][1],
        option_b_en=options["B"][0],
        option_b_mr=options["B"][1],
        option_c_en=options["C"][0],
        option_c_mr=options["C"][1],
        option_d_en=options["D"][0],
        option_d_mr=options["D"][1],
        correct_answer=_normalize_answer(raw),
        difficulty=difficulty,
        difficulty_coerced=difficulty_coerced,
        explanation_en=explanation_en,
        explanation_mr=explanation_mr,
    )
    return McqConversion(record=record, was_converted=was_converted)


# ---------------------------------------------------------------------------
# Revision
# ---------------------------------------------------------------------------

def _normalize_qa(value: Any) -> List[QaPair]:
    if not isinstance(value, list):
        return []

    pairs = []
    for item in value:
        if not isinstance(item, dict):
            item = {}
        question_en = to_text(_first_scalar(item, QA_QUESTION_EN_KEYS))
        answer_en = to_text(_first_scalar(item, QA_ANSWER_EN_KEYS))
        pairs.append(QaPair(
            question_en=question_en,
            question_mr=to_text(_first_scalar(item, QA_QUESTION_MR_KEYS)) or question_en,
            answer_en=answer_en,
            answer_mr=to_text(_first_scalar(item, QA_ANSWER_MR_KEYS)) or answer_en,
        ))
    return pairs


def normalize_revision(raw: Any) -> NormalizedRevision:
    """
    Normalize one uploaded revision-note row.

    The chapter number is the one field with no fallback: when it is missing
    or non-numeric the record carries NaN and the guard rejects it. Titles do
    fall back (English to a synthesized heading, Marathi to English).
    """
    if not isinstance(raw, dict):
        raw = {}

    chapter_number = to_number(first_present(raw, REVISION_CHAPTER_KEYS))

    title_en = _first_scalar(raw, TITLE_EN_KEYS)
    if title_en is None:
        title_en = f"Chapter {format_number(chapter_number)} Revision"
    title_en = to_text(title_en)

    title_mr = _first_scalar(raw, TITLE_MR_KEYS)
    title_mr = to_text(title_mr) if title_mr is not None else title_en

    content_en = _first_scalar(raw, CONTENT_EN_KEYS)
    content_mr = _first_scalar(raw, CONTENT_MR_KEYS)

    order = to_number(first_present(raw, ORDER_KEYS, default=0))

    return NormalizedRevision(
        chapter_number=chapter_number,
        title_en=title_en,
        title_mr=title_mr,
        content_en=to_text(content_en) if content_en is not None else None,
        content_mr=to_text(content_mr) if content_mr is not None else None,
        image_url=optional_text(first_present(raw, IMAGE_KEYS)),
        qa_json=_normalize_qa(first_present(raw, QA_KEYS, default=[])),
        order=int(order) if math.isfinite(order) else 0,
    )


# ---------------------------------------------------------------------------
# Chapter
# ---------------------------------------------------------------------------

def _first_truthy(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def normalize_chapter(raw: Any) -> NormalizedChapter:
    """Normalize one chapter row, accepting the legacy ``course*`` aliases."""
    if not isinstance(raw, dict):
        raw = {}

    sections = raw.get("sections") or None
    if sections is not None and not isinstance(sections, str):
        sections = json.dumps(sections, ensure_ascii=False)

    order_index = to_number(raw.get("orderIndex"))

    return NormalizedChapter(
        chapter_number=to_number(first_present(raw, CHAPTER_NUMBER_KEYS)),
        title_en=to_text(_first_truthy(raw, "titleEn", "courseTitleEn")),
        title_mr=optional_text(_first_truthy(raw, "titleMr", "courseTitleMr")),
        act_chapter_name_en=optional_text(_first_truthy(raw, "actChapterNameEn", "actTitleEn")),
        act_chapter_name_mr=optional_text(_first_truthy(raw, "actChapterNameMr", "actTitleMr")),
        description_en=optional_text(_first_truthy(raw, "descriptionEn")),
        description_mr=optional_text(_first_truthy(raw, "descriptionMr")),
        maharera_equivalent_en=optional_text(_first_truthy(raw, "mahareraEquivalentEn")),
        maharera_equivalent_mr=optional_text(_first_truthy(raw, "mahareraEquivalentMr")),
        sections=sections,
        order_index=int(order_index) if math.isfinite(order_index) else None,
        is_active=to_bool(raw.get("isActive"), True),
        display_in_app=to_bool(raw.get("displayInApp"), True),
    )
