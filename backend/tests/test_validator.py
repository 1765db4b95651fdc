"""
Unit tests for the cross validator.

Tests cover:
- Button, heading, text and section rules
- Retagging and review flags
- Adjustment bound
- Idempotence
"""

from __future__ import annotations

import pytest

from pagelens.dom import DOMNode, parse_fragment
from pagelens.recognizer.models import (
    Adjustment,
    ComponentType,
    ElementContext,
    RecognitionResult,
    Stage,
)
from pagelens.recognizer.validator import (
    CrossValidator,
    Finding,
    ValidationContext,
    ValidationRule,
    build_validation_context,
    validate_button,
    validate_card_pattern,
    validate_card_nesting,
    validate_heading,
    validate_section,
    validate_text,
    validate_with_context,
)


def _matched(kind: ComponentType, confidence: int = 80) -> RecognitionResult:
    return RecognitionResult.matched(kind, confidence)


def _rules(findings: list[Finding]) -> dict[str, int]:
    return {f.rule: f.delta for f in findings}


class TestButtonRules:
    """Tests for button validation."""

    def test_submit_in_form(self) -> None:
        """Test a submit button directly in a form is rewarded and retagged."""
        form = parse_fragment('<form><input name="q"><button type="submit">Go</button></form>')
        vc = build_validation_context(form.children[1], {}, ElementContext(inside_form=True, depth=1))

        findings = list(validate_button(vc))

        assert _rules(findings)["submit button in form"] == 5
        assert [f.retag for f in findings if f.retag] == [ComponentType.SUBMIT_BUTTON]

    def test_hero_ancestor_retags_to_cta(self) -> None:
        """Test a hero ancestor turns a button into a CTA button."""
        section = parse_fragment('<section class="hero"><button>Start</button></section>')
        vc = build_validation_context(
            section.children[0],
            {},
            ElementContext(inside_hero=True, depth=1),
            ancestor_types=(ComponentType.HERO,),
        )

        findings = list(validate_button(vc))

        assert ComponentType.CTA_BUTTON in [f.retag for f in findings]
        assert _rules(findings)["hero section CTA button"] == 3

    def test_prior_heading_and_text(self) -> None:
        """Test a button after a heading and text is a CTA pattern."""
        parent = parse_fragment("<div><h2>Plans</h2><p>Pick one.</p><button>Buy</button></div>")
        heading, text, button = parent.children
        vc = build_validation_context(
            button,
            {},
            ElementContext(depth=1),
            prior_siblings=(
                (heading, _matched(ComponentType.HEADING)),
                (text, _matched(ComponentType.PARAGRAPH)),
            ),
        )

        assert _rules(list(validate_button(vc)))["CTA pattern (heading + text + button)"] == 4

    def test_following_siblings_are_ignored(self) -> None:
        """Test siblings after the button never influence it."""
        parent = parse_fragment("<div><button>Buy</button><h2>Plans</h2><p>Pick one.</p></div>")
        vc = build_validation_context(parent.children[0], {}, ElementContext(depth=1))

        assert list(validate_button(vc)) == []

    def test_link_in_nav_is_penalized(self) -> None:
        """Test button-like links in navigation lose confidence."""
        nav = parse_fragment('<nav><a class="btn" href="/">Home</a></nav>')
        vc = build_validation_context(nav.children[0], {}, ElementContext(inside_nav=True, depth=1))

        assert _rules(list(validate_button(vc)))["likely nav link, not button"] == -3

    def test_form_button_applies_alongside_in_form_reward(self) -> None:
        """Test a button directly in a form also counts as a form button."""
        form = parse_fragment('<form><button type="submit">Go</button></form>')
        vc = build_validation_context(form.children[0], {}, ElementContext(inside_form=True, depth=1))

        rules = _rules(list(validate_button(vc)))

        assert rules["submit button in form"] == 5
        assert rules["form button"] == 3

    def test_form_group_parent(self) -> None:
        """Test a form-group wrapper makes a form button."""
        group = parse_fragment('<div class="form-group"><button>Save</button></div>')
        vc = build_validation_context(group.children[0], {}, ElementContext(depth=1))

        rules = _rules(list(validate_button(vc)))

        assert rules == {"form button": 3}


class TestContentRules:
    """Tests for heading, text and section validation."""

    def test_heading_hierarchy(self) -> None:
        """Test a heading one level below the previous one is rewarded."""
        parent = parse_fragment("<section><h2>A</h2><h3>B</h3></section>")
        h2, h3 = parent.children
        vc = build_validation_context(
            h3, {}, ElementContext(depth=1), prior_siblings=((h2, _matched(ComponentType.HEADING)),)
        )

        assert _rules(list(validate_heading(vc)))["correct heading hierarchy"] == 3

    def test_skipped_heading_level(self) -> None:
        """Test skipping heading levels is suspicious."""
        parent = parse_fragment("<div><h1>A</h1><h4>B</h4></div>")
        h1, h4 = parent.children
        vc = build_validation_context(
            h4, {}, ElementContext(depth=1), prior_siblings=((h1, _matched(ComponentType.HEADING)),)
        )

        assert _rules(list(validate_heading(vc)))["skipped heading level (suspicious)"] == -1

    def test_primary_heading_and_section_title(self) -> None:
        """Test the first h1 of a section is a primary heading and section title."""
        section = parse_fragment("<section><h1>Welcome</h1></section>")
        vc = build_validation_context(section.children[0], {}, ElementContext(inside_section=True, depth=1))

        rules = _rules(list(validate_heading(vc)))

        assert rules["primary page heading"] == 4
        assert rules["section title (first child)"] == 3

    def test_text_in_card(self) -> None:
        """Test text inside a card body is a card description."""
        card = parse_fragment('<div class="card-body"><p>Short description of the product.</p></div>')
        vc = build_validation_context(card.children[0], {}, ElementContext(inside_card=True, depth=1))

        assert _rules(list(validate_text(vc)))["card description"] == 2

    def test_complete_section(self) -> None:
        """Test a section with heading, copy and a button is complete."""
        section = parse_fragment(
            "<section><h2>Pricing</h2>"
            "<p>Simple plans for teams of every size, billed monthly.</p>"
            "<button>Compare</button></section>"
        )
        vc = build_validation_context(section, {"display": "flex"}, ElementContext())

        rules = _rules(list(validate_section(vc)))

        assert rules["complete section pattern (heading + content + CTA)"] == 5
        assert rules["layout container (flex/grid)"] == 3


class TestCardPattern:
    """Tests for card content detection."""

    CARD = (
        '<div class="card"><img src="shoe.png" alt="Shoe"><h3>Trail shoe</h3>'
        "<p>Lightweight trail shoe with a grippy sole for wet rocks.</p>"
        "<button>Buy</button></div>"
    )

    @staticmethod
    def _context_for(node: DOMNode, kind: ComponentType = ComponentType.BUTTON) -> ValidationContext:
        parent = node.parent
        assert parent is not None
        index = parent.children.index(node)
        prior = tuple((n, _matched(kind)) for n in parent.children[:index])
        return build_validation_context(node, {}, ElementContext(inside_card=True, depth=1), prior_siblings=prior)

    def test_complete_card(self) -> None:
        """Test image, heading, copy and button before or at the element."""
        button = parse_fragment(self.CARD).children[3]

        assert _rules(list(validate_card_pattern(self._context_for(button)))) == {"complete card pattern": 5}

    def test_following_siblings_are_ignored(self) -> None:
        """Test content after the element does not complete the card."""
        image = parse_fragment(self.CARD).children[0]

        assert list(validate_card_pattern(self._context_for(image))) == []

    def test_heading_and_description(self) -> None:
        """Test a card with heading and copy but no image."""
        card = parse_fragment(
            '<div class="panel"><h4>Support</h4>'
            "<p>Our team answers every ticket within one business day.</p></div>"
        )
        text = card.children[1]

        rules = _rules(list(validate_card_pattern(self._context_for(text))))

        assert rules == {"card with heading and description": 3}

    def test_card_element_reads_own_subtree(self) -> None:
        """Test a card element is judged by its own content."""
        card = parse_fragment('<div class="box"><img src="a.png"><h3>Title</h3></div>')
        vc = build_validation_context(card, {}, ElementContext())

        assert _rules(list(validate_card_pattern(vc))) == {"card with image and heading": 2}

    def test_outside_card(self) -> None:
        """Test elements outside cards are left alone."""
        plain = parse_fragment(self.CARD.replace('class="card"', 'class="content"')).children[3]

        assert list(validate_card_pattern(self._context_for(plain))) == []

    def test_applies_to_every_matched_type(self) -> None:
        """Test the card rule runs whatever the matched type."""
        text = parse_fragment(self.CARD).children[2]
        vc = self._context_for(text)

        result = validate_with_context(_matched(ComponentType.PARAGRAPH, 70), vc)

        assert "complete card pattern" not in result.reason
        assert "card with heading and description" in result.reason


class TestRelationshipRules:
    """Tests for nesting rules."""

    def test_identical_nested_card_is_flagged(self) -> None:
        """Test a card inside a structurally identical card needs review."""
        outer = parse_fragment('<div class="card"><div class="card"><p>x</p></div></div>')
        vc = build_validation_context(
            outer.children[0], {}, ElementContext(inside_card=True, depth=1), ancestor_types=(ComponentType.CARD,)
        )

        findings = list(validate_card_nesting(vc))

        assert len(findings) == 1
        assert findings[0].review_flag is not None
        assert findings[0].delta == 0

    def test_different_nested_card_is_fine(self) -> None:
        """Test differently structured nested cards are not flagged."""
        outer = parse_fragment('<div class="card"><div class="card compact"><p>x</p></div></div>')
        vc = build_validation_context(
            outer.children[0], {}, ElementContext(inside_card=True, depth=1), ancestor_types=(ComponentType.CARD,)
        )

        assert list(validate_card_nesting(vc)) == []

    def test_hero_in_hero_needs_review(self) -> None:
        """Test self-nested heroes are flagged for manual review."""
        inner = parse_fragment('<div class="hero"><div class="banner">x</div></div>').children[0]
        vc = build_validation_context(
            inner, {}, ElementContext(inside_hero=True, depth=1), ancestor_types=(ComponentType.HERO,)
        )

        result = validate_with_context(_matched(ComponentType.HERO, 90), vc)

        assert result.confidence == 90
        assert result.manual_review_needed is True
        assert result.review_flags == ("hero nested directly inside another hero",)


class TestCrossValidator:
    """Tests for applying validation rules to results."""

    @staticmethod
    def _vc(node: DOMNode | None = None) -> ValidationContext:
        node = node or parse_fragment("<button>Go</button>")
        return build_validation_context(node, {}, ElementContext())

    @pytest.mark.parametrize(("deltas", "expected"), [([8, 8], 10), ([-7, -9], -10), ([4, 3], 7)])
    def test_net_change_is_bounded(self, deltas: list[int], expected: int) -> None:
        """Test the net validation change stays within the maximum."""
        rule = ValidationRule(
            "many",
            lambda vc: [Finding(f"rule {i}", d) for i, d in enumerate(deltas)],
            frozenset({ComponentType.BUTTON}),
        )
        validator = CrossValidator(rules=[rule], max_adjustment=10)

        result = validator.validate(_matched(ComponentType.BUTTON, 50), self._vc())

        assert result.stage_delta(Stage.VALIDATION) == expected
        assert result.confidence == 50 + expected
        bound = [a for a in result.adjustments if a.rule == "validation bound"]
        assert bool(bound) == (expected != sum(deltas))

    def test_first_retag_wins(self) -> None:
        """Test only the first retag is applied."""
        rule = ValidationRule(
            "retags",
            lambda vc: [
                Finding("first", retag=ComponentType.SUBMIT_BUTTON),
                Finding("second", retag=ComponentType.CTA_BUTTON),
            ],
            frozenset({ComponentType.BUTTON}),
        )

        result = CrossValidator(rules=[rule]).validate(_matched(ComponentType.BUTTON), self._vc())

        assert result.component_type is ComponentType.SUBMIT_BUTTON
        assert result.matched_patterns == (ComponentType.BUTTON,)

    def test_idempotent_after_retag(self) -> None:
        """Test validating twice equals validating once, even after a retag."""
        form = parse_fragment('<form><button type="submit">Send</button></form>')
        vc = build_validation_context(form.children[0], {}, ElementContext(inside_form=True, depth=1))
        validator = CrossValidator()

        once = validator.validate(_matched(ComponentType.BUTTON, 85), vc)
        twice = validator.validate(once, vc)

        assert once.component_type is ComponentType.SUBMIT_BUTTON
        assert once == twice

    def test_unknown_passes_through(self) -> None:
        """Test unknown results are never validated."""
        unknown = RecognitionResult.unknown()

        assert CrossValidator().validate(unknown, self._vc()) is unknown

    def test_preserves_boost_adjustments(self) -> None:
        """Test validation only replaces its own stage."""
        rule = ValidationRule("plus", lambda vc: [Finding("plus", 2)], frozenset({ComponentType.BUTTON}))
        boosted = _matched(ComponentType.BUTTON, 80).with_stage(
            Stage.BOOST, [Adjustment(Stage.BOOST, "semantic", 5)]
        )

        result = CrossValidator(rules=[rule]).validate(boosted, self._vc())

        assert result.confidence == 87
        assert result.stage_delta(Stage.BOOST) == 5
        assert result.stage_delta(Stage.VALIDATION) == 2
