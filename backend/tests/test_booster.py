"""
Unit tests for the confidence booster.

Tests cover:
- Type-specific, structural and universal rules
- Clamping and review recomputation
- Idempotence
"""

from __future__ import annotations

from pagelens.dom import parse_fragment
from pagelens.recognizer.booster import (
    BoostRule,
    ConfidenceBooster,
    Signals,
    boost_confidence,
    button_signals,
    explicit_styles,
    markup_quality,
    nested_controls,
    repeated_children,
    sparse_text,
    text_signals,
)
from pagelens.recognizer.models import ComponentType, ElementContext, RecognitionResult, Stage


def _signals(html: str, styles: dict[str, str] | None = None, **context: object) -> Signals:
    return Signals(node=parse_fragment(html), styles=styles or {}, context=ElementContext(**context))


def _labels(boosts: list[tuple[str, int]]) -> dict[str, int]:
    return dict(boosts)


class TestTypeRules:
    """Tests for type-specific boost rules."""

    def test_button_signals(self) -> None:
        """Test semantic, visual and textual button signals."""
        signals = _signals(
            '<button type="submit" class="btn btn-primary" onclick="go()">Subscribe</button>',
            {
                "background_color": "#0066ff",
                "padding_top": "10px",
                "padding_left": "20px",
                "border_top_left_radius": "4px",
                "cursor": "pointer",
            },
            inside_form=True,
        )

        boosts = _labels(list(button_signals(signals)))

        assert boosts["semantic <button> tag"] == 5
        assert boosts["strong visual button characteristics"] == 8
        assert boosts["btn class"] == 3
        assert boosts["primary variant"] == 1
        assert boosts["action-oriented text"] == 3
        assert boosts["button in form context"] == 3
        assert boosts["has onclick handler"] == 2
        assert boosts['type="submit"'] == 3

    def test_plain_link_gets_little(self) -> None:
        """Test a bare link shows almost no button signals."""
        boosts = _labels(list(button_signals(_signals('<a href="/x">Read the documentation</a>'))))

        assert boosts == {"interactive link": 1}

    def test_text_signals(self) -> None:
        """Test paragraph signals."""
        signals = _signals(
            "<p>This paragraph has more than ten words so it reads like real copy.</p>",
            {"line_height": "1.6", "font_size": "16px"},
        )

        boosts = _labels(list(text_signals(signals)))

        assert boosts["semantic <p> tag"] == 5
        assert boosts["paragraph-length text"] == 3
        assert boosts["readable line height"] == 2
        assert boosts["body text size"] == 1


class TestStructuralRules:
    """Tests for structure-based boost rules."""

    def test_repeated_children(self) -> None:
        """Test repeated sibling structure is rewarded."""
        boosts = list(repeated_children(_signals("<ul><li>a</li><li>b</li><li>c</li></ul>")))

        assert boosts == [("repeated child structure", 5)]

    def test_paired_children(self) -> None:
        """Test two matching children earn the smaller boost."""
        boosts = list(repeated_children(_signals('<div><a class="x">1</a><a class="x">2</a><p>3</p></div>')))

        assert boosts == [("paired child structure", 2)]

    def test_mixed_children_get_nothing(self) -> None:
        """Test unrelated children earn no structure boost."""
        assert list(repeated_children(_signals("<div><h2>a</h2><p>b</p><img></div>"))) == []

    def test_nested_controls(self) -> None:
        """Test interactive descendants are counted."""
        many = _signals('<form><input name="a"><select><option>x</option></select></form>')
        one = _signals('<div><input name="a"></div>')

        assert list(nested_controls(many)) == [("nested interactive controls", 4)]
        assert list(nested_controls(one)) == [("nested interactive control", 2)]

    def test_sparse_text(self) -> None:
        """Test empty and short text is penalized."""
        assert list(sparse_text(_signals("<blockquote></blockquote>"))) == [("no text content", -10)]
        assert list(sparse_text(_signals("<p>Two words</p>"))) == [("sparse text content", -5)]
        assert list(sparse_text(_signals("<p>Three whole words</p>"))) == []


class TestUniversalRules:
    """Tests for rules applied to every type."""

    def test_markup_quality(self) -> None:
        """Test id, data attributes and shallow nesting."""
        boosts = _labels(list(markup_quality(_signals('<div id="x" data-role="y">z</div>', depth=1))))

        assert boosts == {"has id": 1, "has data attributes": 1, "shallow nesting": 1}

    def test_deep_nesting_gets_nothing(self) -> None:
        """Test deep elements without ids earn nothing."""
        assert list(markup_quality(_signals("<div>z</div>", depth=9))) == []

    def test_explicit_styles(self) -> None:
        """Test three or more declared style groups are rewarded."""
        styled = _signals("<div>x</div>", {"background_color": "#fff", "font_size": "14px", "padding_top": "4px"})

        assert list(explicit_styles(styled)) == [("explicit styling", 1)]
        assert list(explicit_styles(_signals("<div>x</div>", {"font_size": "14px"}))) == []


class TestConfidenceBooster:
    """Tests for applying boost rules to results."""

    def test_clamps_to_maximum(self) -> None:
        """Test boosts cannot push confidence above 100."""
        booster = ConfidenceBooster(rules=[BoostRule("huge", lambda s: [("huge", 45)])])
        result = RecognitionResult.matched(ComponentType.BUTTON, 90)

        boosted = booster.boost(result, parse_fragment("<button>Go</button>"), {}, ElementContext())

        assert boosted.confidence == 100
        assert boosted.base_confidence == 90
        assert boosted.stage_delta(Stage.BOOST) == 45

    def test_clamps_to_minimum_and_recomputes_review(self) -> None:
        """Test boosts cannot push confidence below 0."""
        booster = ConfidenceBooster(rules=[BoostRule("penalty", lambda s: [("penalty", -150)])])
        result = RecognitionResult.matched(ComponentType.BUTTON, 90)

        boosted = booster.boost(result, parse_fragment("<button>Go</button>"), {}, ElementContext())

        assert boosted.confidence == 0
        assert boosted.manual_review_needed is True
        assert boosted.component_type is ComponentType.BUTTON

    def test_rules_limited_to_types(self) -> None:
        """Test rules only run for their listed types."""
        rule = BoostRule("list-only", lambda s: [("list", 5)], frozenset({ComponentType.LIST}))
        booster = ConfidenceBooster(rules=[rule])
        node = parse_fragment("<p>x</p>")

        boosted = booster.boost(RecognitionResult.matched(ComponentType.PARAGRAPH, 80), node, {}, ElementContext())

        assert boosted.adjustments == ()
        assert boosted.confidence == 80

    def test_zero_deltas_are_not_recorded(self) -> None:
        """Test rules yielding zero leave no adjustment."""
        booster = ConfidenceBooster(rules=[BoostRule("noop", lambda s: [("nothing", 0)])])
        node = parse_fragment("<p>x</p>")

        boosted = booster.boost(RecognitionResult.matched(ComponentType.PARAGRAPH, 80), node, {}, ElementContext())

        assert boosted.adjustments == ()

    def test_unknown_results_pass_through(self) -> None:
        """Test unknown results are never boosted."""
        unknown = RecognitionResult.unknown()

        assert boost_confidence(unknown, parse_fragment("<div></div>"), {}, ElementContext()) is unknown

    def test_idempotent(self) -> None:
        """Test boosting twice equals boosting once."""
        node = parse_fragment('<button id="cta" class="btn">Buy</button>')
        context = ElementContext(inside_hero=True, depth=1)
        result = RecognitionResult.matched(ComponentType.BUTTON, 95)

        once = boost_confidence(result, node, {}, context)
        twice = boost_confidence(once, node, {}, context)

        assert once == twice
        assert once.confidence == 100
        assert "Boosted: semantic <button> tag" in once.reason

    def test_drop_below_threshold_needs_review(self) -> None:
        """Test review is recomputed after boosting."""
        booster = ConfidenceBooster(rules=[BoostRule("weak", lambda s: [("weak", -5)])])
        node = parse_fragment("<p>x</p>")

        boosted = booster.boost(RecognitionResult.matched(ComponentType.PARAGRAPH, 72), node, {}, ElementContext())

        assert boosted.confidence == 67
        assert boosted.manual_review_needed is True
