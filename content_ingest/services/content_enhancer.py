"""
Optional enrichment of revision notes before they are stored.

Used when an upload sets ``enhanceContent``: a "Key Points" section is
appended to the English notes and short Q&A stubs are generated from the most
frequent keywords so every note has something to quiz on.
"""
import re
from collections import Counter
from typing import List, Optional

from content_ingest.models.schemas import QaPair


MAX_KEY_POINTS = 10
MAX_KEYWORDS = 5
GENERATED_QA_COUNT = 3
MIN_EXISTING_QA = 5

KEY_POINTS_HEADINGS = ("Key Points", "मुख्य मुद्दे")

# Real newlines and the literal two-character "\n" left by some exports
LINE_SPLIT = re.compile(r"\n|\\n")
BULLET_MARKER = re.compile(r"^[-•*●○▪▫]\s+")
NUMBER_MARKER = re.compile(r"^\d+\.\s+")
NON_LETTERS = re.compile(r"[^a-z\s]")

STOP_WORDS = {
    "the", "a", "an", "is", "are", "was", "were", "in", "on",
    "at", "to", "for", "of", "and", "or", "but",
}


def extract_key_points(content: Optional[str]) -> List[str]:
    """Collect bulleted/numbered lines and short declarative sentences."""
    if not content:
        return []

    points = []
    for line in LINE_SPLIT.split(content):
        text = line.strip()
        if BULLET_MARKER.match(text) or NUMBER_MARKER.match(text):
            points.append(NUMBER_MARKER.sub("", BULLET_MARKER.sub("", text, count=1), count=1))
        elif 10 < len(text) < 150 and text.endswith("."):
            points.append(text)

    return points[:MAX_KEY_POINTS]


def extract_keywords(content: Optional[str]) -> List[str]:
    """Most frequent words longer than four letters, capitalised."""
    if not content:
        return []

    words = [
        word for word in NON_LETTERS.sub(" ", content.lower()).split()
        if len(word) > 4 and word not in STOP_WORDS
    ]
    return [word.capitalize() for word, _ in Counter(words).most_common(MAX_KEYWORDS)]


def enhance_content(content: Optional[str]) -> Optional[str]:
    """
    Append a Key Points section built from ``content``.

    Content is returned unchanged when no key points are found or when it
    already has a Key Points section in either language.
    """
    if not content:
        return content

    points = extract_key_points(content)
    if not points:
        return content

    if any(heading in content for heading in KEY_POINTS_HEADINGS):
        return content

    return content + "\n\n# Key Points\n" + "\n".join(f"• {point}" for point in points)


def generate_additional_qa(content: Optional[str], existing_qa: List[QaPair]) -> List[QaPair]:
    """Q&A stubs for notes with fewer than five pairs."""
    if not content or len(existing_qa) >= MIN_EXISTING_QA:
        return []

    return [
        QaPair(
            question_en=f"What is {keyword}?",
            question_mr=f"{keyword} म्हणजे काय?",
            answer_en=f"{keyword} is explained in the content above.",
            answer_mr=f"{keyword} वरील सामग्रीमध्ये स्पष्ट केले आहे.",
        )
        for keyword in extract_keywords(content)[:GENERATED_QA_COUNT]
    ]
