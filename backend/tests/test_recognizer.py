"""
Unit tests for the component recognizer.

Tests cover:
- Best-match selection and tie-breaking
- Unknown results
- Booster and validator wiring
- Configuration switches
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from pagelens.analyzer.context import determine_context
from pagelens.config import RecognizerConfig
from pagelens.dom import DOMNode
from pagelens.recognizer import recognize_component
from pagelens.recognizer.booster import BoostRule, ConfidenceBooster
from pagelens.recognizer.matcher import ElementData
from pagelens.recognizer.models import NO_MATCH_REASON, ComponentType, ElementContext, Stage
from pagelens.recognizer.patterns.base import pattern
from pagelens.recognizer.recognizer import ComponentRecognizer, get_recognizer
from pagelens.recognizer.registry import PatternRegistry
from pagelens.styles import parse_declarations

Parse = Callable[[str], DOMNode]


class TestRecognizeScenarios:
    """Tests for classifying common markup."""

    def test_email_input(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test an email input is a confident input."""
        result = recognizer.recognize_component(parse('<input type="email" name="email">'))

        assert result.component_type is ComponentType.INPUT
        assert result.confidence >= 90
        assert result.manual_review_needed is False
        assert result.reason.startswith("Matched input pattern with 95% confidence")

    def test_empty_div_is_unknown(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test an element matching no pattern is unknown with zero confidence."""
        result = recognizer.recognize_component(parse("<div></div>"))

        assert result.component_type is ComponentType.UNKNOWN
        assert result.confidence == 0
        assert result.manual_review_needed is True
        assert result.reason == NO_MATCH_REASON
        assert result.matched_patterns == ()

    def test_price_list(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test a list of priced items is a price list, not a plain list."""
        node = parse(
            '<ul class="price-list">'
            "<li>Espresso $3.00</li><li>Latte $4.50</li><li>Scone $2.75</li>"
            "</ul>"
        )

        result = recognizer.recognize_component(node)

        assert result.component_type is ComponentType.PRICE_LIST
        assert result.confidence >= 90

    def test_radio_group(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test a radiogroup role with radios is a radio group."""
        node = parse(
            '<div role="radiogroup">'
            '<input type="radio" name="size" value="s">'
            '<input type="radio" name="size" value="m">'
            "</div>"
        )

        group = recognizer.recognize_component(node)
        radio = recognizer.recognize_component(
            node.children[0],
            context=ElementContext(depth=1, parent_type=group.component_type),
            ancestor_types=(group.component_type,),
        )

        assert group.component_type is ComponentType.RADIO_GROUP
        assert group.confidence >= 85
        assert radio.component_type is ComponentType.RADIO
        assert radio.confidence >= 90
        assert "radio within radio group" in radio.reason

    @pytest.mark.parametrize(
        ("html", "expected"),
        [
            ("<header><a href='/'>Home</a></header>", ComponentType.HEADER),
            ("<footer><p>Bye</p></footer>", ComponentType.FOOTER),
            ("<nav><a href='/'>Home</a></nav>", ComponentType.MENU),
            ("<aside><p>Related</p></aside>", ComponentType.SIDEBAR),
            ('<div class="hero">Welcome</div>', ComponentType.HERO),
            ('<div class="card">Plain</div>', ComponentType.CARD),
            ("<h2>Title</h2>", ComponentType.HEADING),
            ('<img src="cat.png" alt="A cat">', ComponentType.IMAGE),
            ("<p>Some body copy for the page.</p>", ComponentType.PARAGRAPH),
            ("<a href='/about'>About us</a>", ComponentType.LINK),
            ("<hr>", ComponentType.DIVIDER),
            ("<textarea></textarea>", ComponentType.TEXTAREA),
            ("<select><option>A</option></select>", ComponentType.SELECT),
            ('<input type="checkbox">', ComponentType.CHECKBOX),
            ('<input type="file">', ComponentType.FILE_UPLOAD),
            ("<table><tr><td>1</td></tr></table>", ComponentType.TABLE),
            ("<blockquote>Quoted</blockquote>", ComponentType.BLOCKQUOTE),
            ("<pre><code>x = 1</code></pre>", ComponentType.CODE_BLOCK),
            ('<div role="dialog">Hi</div>', ComponentType.MODAL),
            ("<progress value='3' max='10'></progress>", ComponentType.PROGRESS_BAR),
        ],
    )
    def test_common_elements(
        self,
        recognizer: ComponentRecognizer,
        parse: Parse,
        html: str,
        expected: ComponentType,
    ) -> None:
        """Test unambiguous markup is classified as expected."""
        assert recognizer.recognize_component(parse(html)).component_type is expected


class TestBasicElements:
    """Tests for wrapper, icon and rule elements."""

    @pytest.mark.parametrize(
        "html",
        ["<span></span>", "<span>   </span>", '<span class="caret"></span>', "<div></div>"],
    )
    def test_bare_wrappers_are_unknown(self, recognizer: ComponentRecognizer, parse: Parse, html: str) -> None:
        """Test wrappers without content or signal classes match nothing."""
        result = recognizer.recognize_component(parse(html))

        assert result.is_unknown
        assert result.confidence == 0

    def test_icon_span(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test a span with an icon class is an icon."""
        result = recognizer.recognize_component(parse('<span class="material-icons"></span>'))

        assert result.component_type is ComponentType.ICON

    def test_text_span(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test a span with text is text."""
        result = recognizer.recognize_component(parse("<span>Free shipping on all orders</span>"))

        assert result.component_type is ComponentType.TEXT

    @pytest.mark.parametrize(
        "style",
        ["border-width:0px", "border-style: none", "opacity: 0"],
    )
    def test_invisible_rule_is_spacer(self, recognizer: ComponentRecognizer, parse: Parse, style: str) -> None:
        """Test an hr that draws no line is spacing, not a divider."""
        result = recognizer.recognize_component(parse(f'<hr style="{style}">'), styles=parse_declarations(style))

        assert result.component_type is ComponentType.SPACER


class TestBestMatch:
    """Tests for best-match selection."""

    def test_equal_scores_keep_registry_order(self, parse: Parse) -> None:
        """Test a later pattern needs a strictly higher score to win."""
        registry = PatternRegistry.build(
            [
                pattern(ComponentType.TEXT, 80, 50, tags=["span"]),
                pattern(ComponentType.ICON, 80, 50, tags=["span"]),
            ]
        )
        recognizer = ComponentRecognizer(registry=registry)

        winner, score = recognizer.best_match(ElementData(parse("<span>x</span>")))

        assert winner is registry[0]
        assert score == 80

    def test_higher_score_beats_higher_priority(self, parse: Parse) -> None:
        """Test priority only orders evaluation; the score decides."""
        registry = PatternRegistry.build(
            [
                pattern(ComponentType.ICON, 90, 99, tags=["span"], classes=["icon"]),
                pattern(ComponentType.TEXT, 80, 10, tags=["span"]),
            ]
        )
        recognizer = ComponentRecognizer(registry=registry)

        winner, score = recognizer.best_match(ElementData(parse("<span>x</span>")))

        assert winner.component_type is ComponentType.TEXT
        assert score == 80

    def test_no_match_returns_none(self, parse: Parse) -> None:
        """Test zero scores never win."""
        registry = PatternRegistry.build([pattern(ComponentType.TEXT, 80, 50, tags=["span"])])

        assert ComponentRecognizer(registry=registry).best_match(ElementData(parse("<div></div>"))) == (None, 0)


class TestPostProcessing:
    """Tests for booster and validator wiring."""

    def test_deterministic(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test the same input always produces the same result."""
        node = parse('<button class="btn btn-primary" type="submit">Subscribe</button>')

        assert recognizer.recognize_component(node) == recognizer.recognize_component(node)

    def test_confidence_bounds(self, recognizer: ComponentRecognizer, landing_page: str) -> None:
        """Test every result stays in range and unknown means zero."""
        from pagelens.dom import parse_document

        for root in parse_document(landing_page):
            for node in (root, *root.find_descendants(lambda n: True)):
                result = recognizer.recognize_component(node, context=determine_context(node))
                assert 0 <= result.confidence <= 100
                assert result.is_unknown == (result.confidence == 0)

    def test_submit_button_in_form_is_retagged(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test submit buttons inside forms become submit buttons."""
        form = parse('<form><input type="text" name="q"><button type="submit">Send</button></form>')
        button = form.children[1]

        result = recognizer.recognize_component(button, context=determine_context(button))

        assert result.component_type is ComponentType.SUBMIT_BUTTON
        assert result.matched_type is ComponentType.BUTTON
        assert "submit button in form" in result.reason

    def test_button_under_hero_is_cta(self, recognizer: ComponentRecognizer, parse: Parse) -> None:
        """Test buttons with a hero ancestor become CTA buttons."""
        result = recognizer.recognize_component(
            parse("<button>Start</button>"),
            context=ElementContext(inside_hero=True, depth=2),
            ancestor_types=(ComponentType.SECTION, ComponentType.HERO, ComponentType.CONTAINER),
        )

        assert result.component_type is ComponentType.CTA_BUTTON

    def test_post_processing_can_be_disabled(self, parse: Parse) -> None:
        """Test disabled passes leave no adjustments."""
        config = RecognizerConfig(enable_boosting=False, enable_cross_validation=False)
        recognizer = ComponentRecognizer(config=config)

        result = recognizer.recognize_component(parse('<input type="email">'))

        assert result.confidence == result.base_confidence == 95
        assert result.adjustments == ()

    def test_boost_to_zero_degrades_to_unknown(self, parse: Parse) -> None:
        """Test a match driven to zero is reported as unknown."""
        penalty = BoostRule("penalty", lambda s: [("broken markup", -200)])
        recognizer = ComponentRecognizer(booster=ConfidenceBooster(rules=[penalty]))

        result = recognizer.recognize_component(parse("<button>Go</button>"))

        assert result.is_unknown
        assert result.confidence == 0
        assert result.fallback_type is ComponentType.BUTTON
        assert result.reason.startswith(NO_MATCH_REASON)
        assert "button" in result.reason

    def test_review_threshold_from_config(self, parse: Parse) -> None:
        """Test the manual review threshold is configurable."""
        config = RecognizerConfig(manual_review_threshold=100, enable_boosting=False)
        recognizer = ComponentRecognizer(config=config)

        result = recognizer.recognize_component(parse('<input type="email">'))

        assert result.manual_review_needed is True
        assert result.stage_delta(Stage.BOOST) == 0


class TestModuleHelpers:
    """Tests for module-level convenience functions."""

    def test_shared_recognizer(self) -> None:
        """Test the shared recognizer is created once."""
        assert get_recognizer() is get_recognizer()

    def test_recognize_component_function(self, parse: Parse) -> None:
        """Test the module-level function uses the shared recognizer."""
        result = recognize_component(parse("<h1>Hello</h1>"))

        assert result.component_type is ComponentType.HEADING
