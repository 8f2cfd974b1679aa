"""
Tests for text and skill normalization helpers.
"""

import pytest

from freelancematch.normalize import (
    description_terms,
    extract_freelancer_name,
    normalize_skills,
    normalize_text,
    skills_match,
)


class TestNormalizeText:
    """Test whitespace and case normalization."""

    def test_collapses_whitespace(self):
        assert normalize_text("  Web   Developer\n") == "web developer"

    def test_empty(self):
        assert normalize_text("   ") == ""


class TestNormalizeSkills:
    """Test skill list cleanup."""

    def test_lowercases_and_dedupes(self):
        assert normalize_skills(["React", "react ", "Node.js"]) == ["react", "node.js"]

    def test_drops_blanks_and_non_strings(self):
        assert normalize_skills(["", "  ", None, 42, "SEO"]) == ["seo"]

    @pytest.mark.parametrize("value", [None, []])
    def test_empty_input(self, value):
        assert normalize_skills(value) == []


class TestDescriptionTerms:
    """Test extraction of meaningful description terms."""

    def test_short_words_and_stopwords_removed(self):
        terms = description_terms("I need a designer with logo experience for this shop")
        assert terms == ["need", "designer", "logo", "experience", "shop"]

    def test_none_description(self):
        assert description_terms(None) == []


class TestSkillsMatch:
    """Test substring skill matching."""

    @pytest.mark.parametrize("a,b,expected", [
        ("React", "react", True),
        ("React Native", "react", True),
        ("seo", "SEO Writing", True),
        ("Swift", "Kotlin", False),
    ])
    def test_skills_match(self, a, b, expected):
        assert skills_match(a, b) is expected


class TestExtractFreelancerName:
    """Test display name resolution."""

    def test_display_name_wins(self):
        assert extract_freelancer_name("Karwan Ali is a designer.", "Sara Ahmed", 3) == "Sara Ahmed"

    def test_name_from_bio(self):
        assert extract_freelancer_name("Karwan Ali is a creative graphic designer.", None, 3) == "Karwan Ali"

    def test_bio_without_name_pattern(self):
        assert extract_freelancer_name("Writes long-form articles.", None, 7) == "Freelancer 7"

    def test_nothing_available(self):
        assert extract_freelancer_name(None, None, 12) == "Freelancer 12"
