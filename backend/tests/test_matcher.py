"""
Unit tests for single-pattern matching.

Tests cover:
- Tag hard gate
- Per-dimension checks and partial scores
- Half-up rounding
- Patterns without dimensions
"""

from __future__ import annotations

import pytest

from pagelens.dom import parse_fragment
from pagelens.recognizer.matcher import ElementData, match_pattern
from pagelens.recognizer.models import ComponentType, ElementContext
from pagelens.recognizer.patterns.base import RecognitionPattern, pattern


def _data(html: str, styles: dict[str, str] | None = None, **context: object) -> ElementData:
    return ElementData(
        node=parse_fragment(html),
        styles=styles or {},
        context=ElementContext(**context),
    )


class TestTagGate:
    """Tests for the tag dimension."""

    def test_listed_tag_counts_as_satisfied_check(self) -> None:
        """Test a listed tag scores the full base confidence on its own."""
        p = pattern(ComponentType.BUTTON, 95, 95, tags=["button"])

        assert match_pattern(p, _data("<button>Go</button>")) == 95

    def test_other_tag_scores_zero_despite_other_signals(self) -> None:
        """Test a tag outside the list vetoes every other matching signal."""
        p = pattern(ComponentType.BUTTON, 90, 50, tags=["button"], classes=["primary"], role="button")

        assert match_pattern(p, _data('<a class="primary" role="button">Go</a>')) == 0

    def test_tag_comparison_is_lowercase(self) -> None:
        """Test tag names in patterns are normalized."""
        p = pattern(ComponentType.BUTTON, 80, 50, tags=["BUTTON"])

        assert match_pattern(p, _data("<BUTTON>Go</BUTTON>")) == 80


class TestDimensions:
    """Tests for the non-gating dimensions."""

    def test_partial_match_scales_base_confidence(self) -> None:
        """Test one of two checks passing yields half the base confidence."""
        p = pattern(ComponentType.BUTTON, 90, 50, tags=["button"], classes=["primary"])

        assert match_pattern(p, _data('<button class="btn-primary">Go</button>')) == 90
        assert match_pattern(p, _data("<button>Go</button>")) == 45

    def test_class_keywords_are_case_insensitive_substrings(self) -> None:
        """Test class keywords match inside longer class names."""
        p = pattern(ComponentType.CARD, 90, 90, classes=["MuiCard"])

        assert match_pattern(p, _data('<div class="muicard-root">x</div>')) == 90

    def test_declarative_css(self) -> None:
        """Test declarative style maps accept any listed value."""
        p = pattern(ComponentType.GRID, 90, 85, css={"display": ("grid", "inline-grid")})

        assert match_pattern(p, _data("<div></div>", {"display": "inline-grid"})) == 90
        assert match_pattern(p, _data("<div></div>", {"display": "flex"})) == 0
        assert match_pattern(p, _data("<div></div>")) == 0

    def test_custom_css_predicate_sees_element(self) -> None:
        """Test custom predicates receive styles and the element."""
        p = pattern(
            ComponentType.LIST, 80, 50,
            css=lambda s, el: len(el.children) >= 2 and s.get("color") == "red",
        )

        assert match_pattern(p, _data("<ul><li>a</li><li>b</li></ul>", {"color": "red"})) == 80
        assert match_pattern(p, _data("<ul><li>a</li></ul>", {"color": "red"})) == 0

    def test_content_regex_searches_trimmed_text(self) -> None:
        """Test the content regex is searched against the element text."""
        p = pattern(ComponentType.HEADING, 60, 50, content=r"^Hello")

        assert match_pattern(p, _data("<p>   Hello world  </p>")) == 60
        assert match_pattern(p, _data("<p>Well, Hello</p>")) == 0

    def test_aria_role_is_trimmed_and_case_insensitive(self) -> None:
        """Test ARIA roles compare after trimming and lowercasing."""
        p = pattern(ComponentType.BUTTON, 90, 90, role="button")

        assert match_pattern(p, _data('<div role=" Button ">Go</div>')) == 90
        assert match_pattern(p, _data('<div role="link">Go</div>')) == 0

    def test_context_requirements_form_one_check(self) -> None:
        """Test every required context key must match for the single check."""
        p = pattern(
            ComponentType.FOOTER, 80, 50,
            classes=["legal"],
            context={"inside_footer": True, "inside_nav": False},
        )
        html = '<p class="legal">Terms</p>'

        assert match_pattern(p, _data(html, inside_footer=True)) == 80
        assert match_pattern(p, _data(html, inside_footer=True, inside_nav=True)) == 40
        assert match_pattern(p, _data(html)) == 40


class TestScoring:
    """Tests for score arithmetic."""

    @pytest.mark.parametrize(
        ("base", "expected"),
        [(85, 43), (75, 38), (95, 48), (90, 45)],
    )
    def test_half_of_odd_base_rounds_up(self, base: int, expected: int) -> None:
        """Test half scores round half up rather than to even."""
        p = pattern(ComponentType.CARD, base, 50, classes=["card"], css=lambda s, el: False)

        assert match_pattern(p, _data('<div class="card">x</div>')) == expected

    def test_one_of_three_checks(self) -> None:
        """Test thirds round to the nearest integer."""
        p = pattern(
            ComponentType.BUTTON, 80, 50,
            tags=["button"], classes=["nope"], role="menuitem",
        )

        assert match_pattern(p, _data("<button>Go</button>")) == 27

    def test_pattern_without_dimensions_scores_zero(self) -> None:
        """Test an empty pattern never matches."""
        p = RecognitionPattern(component_type=ComponentType.BUTTON, base_confidence=90, priority=50)

        assert match_pattern(p, _data("<button>Go</button>")) == 0

    def test_score_never_exceeds_base_confidence(self) -> None:
        """Test a fully matching pattern scores exactly its base confidence."""
        p = pattern(
            ComponentType.BUTTON, 77, 50,
            tags=["button"], classes=["btn"], content=r"\w", role="button",
        )

        assert match_pattern(p, _data('<button class="btn" role="button">Go</button>')) == 77
