"""
Tests for revision-note enhancement.
"""
from content_ingest.models.schemas import QaPair
from content_ingest.services.content_enhancer import (
    enhance_content,
    extract_key_points,
    extract_keywords,
    generate_additional_qa,
)


NOTES = (
    "- Promoter must register the project\n"
    "2. Agents need a licence\n"
    "short line\n"
    "The Authority hears complaints from buyers."
)


class TestKeyPoints:
    """Key point extraction and the appended section."""

    def test_extracts_bullets_numbers_and_sentences(self):
        assert extract_key_points(NOTES) == [
            "Promoter must register the project",
            "Agents need a licence",
            "The Authority hears complaints from buyers.",
        ]

    def test_literal_backslash_n_splits_lines(self):
        assert extract_key_points("• First point\\n• Second point") == ["First point", "Second point"]

    def test_at_most_ten_points(self):
        content = "\n".join(f"- point {i}" for i in range(15))
        assert len(extract_key_points(content)) == 10

    def test_enhance_appends_section(self):
        enhanced = enhance_content(NOTES)
        assert enhanced.startswith(NOTES)
        assert enhanced.endswith(
            "\n\n# Key Points\n"
            "• Promoter must register the project\n"
            "• Agents need a licence\n"
            "• The Authority hears complaints from buyers."
        )

    def test_existing_section_left_alone(self):
        content = "# मुख्य मुद्दे\n- one point here"
        assert enhance_content(content) == content

    def test_no_points_or_no_content(self):
        assert enhance_content("tiny") == "tiny"
        assert enhance_content(None) is None


class TestGeneratedQa:
    """Keyword-based Q&A stubs."""

    def test_keywords_ranked_by_frequency(self):
        content = "Carpet area, carpet area! Promoter carpet. Promoter escrow."
        assert extract_keywords(content)[:3] == ["Carpet", "Promoter", "Escrow"]

    def test_generates_three_pairs(self):
        content = "Carpet area carpet promoter promoter escrow account account account"
        pairs = generate_additional_qa(content, [])
        assert [pair.question_en for pair in pairs] == [
            "What is Account?", "What is Carpet?", "What is Promoter?"
        ]
        assert pairs[0].question_mr == "Account म्हणजे काय?"
        assert pairs[0].answer_en == "Account is explained in the content above."

    def test_skipped_when_enough_pairs(self):
        existing = [QaPair(question_en=f"Q{i}", answer_en="A") for i in range(5)]
        assert generate_additional_qa("Plenty of meaningful words", existing) == []

    def test_skipped_without_content(self):
        assert generate_additional_qa(None, []) == []
