"""
Confidence booster.

Adjusts a matched result's confidence with structural heuristics the
matcher cannot express:
- type-specific semantic, visual and textual signals
- repeated child structure for list-like types
- nested controls for form-adjacent types
- sparse text for text-heavy types
- universal markup quality signals

Every change is recorded as a named ``Adjustment``. Boosting replaces any
previous boost adjustments, so applying it twice has the effect of once.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass

import structlog

from pagelens.dom import DOMNode, any_of, tag_in
from pagelens.recognizer.models import (
    DEFAULT_REVIEW_THRESHOLD,
    Adjustment,
    ComponentType,
    ElementContext,
    RecognitionResult,
    Stage,
)
from pagelens.recognizer.patterns.base import class_text, is_form_control
from pagelens.styles import ExtractedStyles, parse_pixels

logger = structlog.get_logger(__name__)

Boost = tuple[str, int]

_ACTION_TEXT_RE = re.compile(
    r"^(click|buy|download|submit|send|get started|learn more|sign up|subscribe|purchase|"
    r"add to cart|checkout|register|join|contact|book|shop now|view|read|try|start|demo|"
    r"order|apply|donate|continue|next|back|cancel|close|save|edit|delete|update|confirm|"
    r"yes|no|ok)$",
    re.IGNORECASE,
)
_IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg|bmp|ico)(\?.*)?$", re.IGNORECASE)
_LEADING_NUMBER_RE = re.compile(r"^\s*(-?\d*\.?\d+)")
_SECTION_TAG_BOOSTS = {
    "section": 5,
    "header": 5,
    "footer": 5,
    "main": 5,
    "article": 5,
    "nav": 5,
    "aside": 4,
}
_SECTION_CLASS_WORDS = (("section", 3), ("container", 2), ("wrapper", 2), ("hero", 3), ("banner", 2))


@dataclass(frozen=True)
class Signals:
    """Inputs available to a boost rule."""

    node: DOMNode
    styles: ExtractedStyles
    context: ElementContext

    @property
    def tag(self) -> str:
        return self.node.tag_name

    @property
    def classes(self) -> str:
        return class_text(self.node)

    @property
    def words(self) -> list[str]:
        return self.node.text.split()


@dataclass(frozen=True)
class BoostRule:
    """
    Named heuristic producing confidence adjustments.

    ``applies_to`` limits the rule to results of the listed types; ``None``
    applies it to every matched result.
    """

    name: str
    fn: Callable[[Signals], Iterable[Boost]]
    applies_to: frozenset[ComponentType] | None = None

    def applies(self, component_type: ComponentType) -> bool:
        return self.applies_to is None or component_type in self.applies_to

    def __call__(self, signals: Signals) -> list[Boost]:
        return list(self.fn(signals))


def _number(value: str | None) -> float | None:
    match = _LEADING_NUMBER_RE.match(value or "")
    return float(match.group(1)) if match else None


def _font_weight(value: str | None) -> int:
    if not value:
        return 400
    keyword = {"normal": 400, "bold": 700, "bolder": 700, "lighter": 300}.get(value.strip().lower())
    if keyword is not None:
        return keyword
    number = _number(value)
    return int(number) if number is not None else 400


def _word_class(classes: str, word: str) -> bool:
    return re.search(rf"\b{word}\b", classes) is not None


# ============================================================================
# TYPE-SPECIFIC RULES
# ============================================================================


def button_signals(s: Signals) -> Iterator[Boost]:
    if s.tag == "button":
        yield "semantic <button> tag", 5
    if s.node.get("role") == "button":
        yield 'ARIA role="button"', 5

    visual = 0
    background = s.styles.get("background_color")
    if background and background != "transparent":
        visual += 2
    if parse_pixels(s.styles.get("padding_top")) >= 8 and parse_pixels(s.styles.get("padding_left")) >= 15:
        visual += 2
    if parse_pixels(s.styles.get("border_top_left_radius")) > 0:
        visual += 2
    if s.styles.get("cursor") == "pointer":
        visual += 2
    if s.styles.get("display") in ("inline-block", "inline-flex", "flex"):
        visual += 1
    if s.styles.get("text_align") == "center":
        visual += 1
    if visual:
        yield ("strong visual button characteristics" if visual >= 6 else "button styling"), visual

    for word, weight, label in (
        ("btn", 3, "btn class"),
        ("button", 3, "button class"),
        ("cta", 2, "cta class"),
        ("primary", 1, "primary variant"),
        ("secondary", 1, "secondary variant"),
        ("(submit|send|contact|signup|subscribe)", 2, "action class"),
    ):
        if _word_class(s.classes, word):
            yield label, weight

    if _ACTION_TEXT_RE.match(s.node.text):
        yield "action-oriented text", 3
    if s.context.inside_form and s.tag == "button":
        yield "button in form context", 3
    if s.context.inside_hero or s.context.inside_card:
        yield "in prominent context (hero/card)", 2
    if "onclick" in s.node.attributes:
        yield "has onclick handler", 2

    button_type = s.node.get("type").lower()
    if button_type in ("submit", "button"):
        yield f'type="{button_type}"', 3
    if s.tag == "a" and s.node.get("href"):
        yield "interactive link", 1


def heading_signals(s: Signals) -> Iterator[Boost]:
    if re.fullmatch(r"h[1-6]", s.tag):
        yield f"semantic {s.tag} tag", 5
        if s.tag == "h1" and s.context.depth == 0:
            yield "proper H1 hierarchy", 2
    if s.node.get("role") == "heading":
        yield 'ARIA role="heading"', 4

    typography = 0
    font_size = parse_pixels(s.styles.get("font_size") or "16px")
    if font_size > 24:
        typography += 3
    elif font_size > 20:
        typography += 2
    elif font_size > 18:
        typography += 1
    weight = _font_weight(s.styles.get("font_weight"))
    if weight >= 700:
        typography += 2
    elif weight >= 600:
        typography += 1
    line_height = _number(s.styles.get("line_height"))
    if line_height is not None and 1 <= line_height <= 1.5:
        typography += 1
    if s.styles.get("display") == "block":
        typography += 1
    if typography:
        yield ("strong heading typography" if typography >= 4 else "heading typography"), typography

    for word, weight, label in (
        ("(title|heading|headline|header)", 3, "heading class"),
        ("h[1-6]", 2, "h-tag class"),
        ("(hero|banner|featured)", 2, "prominent heading"),
    ):
        if _word_class(s.classes, word):
            yield label, weight

    if 1 <= len(s.words) <= 10:
        yield "concise heading length", 2
    if s.node.text[:1].isupper():
        yield "title case", 1
    if s.context.depth <= 2:
        yield "top-level element", 1


def image_signals(s: Signals) -> Iterator[Boost]:
    alt = s.node.get("alt")
    src = s.node.get("src")

    if s.tag == "img":
        yield "semantic <img> tag", 5
        if alt:
            yield "has alt text", 2
        if len(alt) > 5 and "." not in alt:
            yield "descriptive alt text", 1
    elif s.tag == "picture":
        yield "semantic <picture> tag", 5
    elif s.tag == "svg":
        yield "SVG image", 4

    if src and _IMAGE_EXTENSION_RE.search(src):
        yield "valid image extension", 3
    if src.startswith("data:image/"):
        yield "inline base64 image", 2

    if s.styles.get("background_image"):
        yield "has background image", 2
        if s.styles.get("background_size") or s.styles.get("background_position"):
            yield "styled background", 1
    if s.node.get("role") == "img":
        yield 'ARIA role="img"', 3
    if s.styles.get("width") and s.styles.get("height"):
        yield "explicit dimensions", 1
    if s.styles.get("object_fit"):
        yield "uses object-fit", 1


def text_signals(s: Signals) -> Iterator[Boost]:
    if s.tag == "p":
        yield "semantic <p> tag", 5
    elif s.tag == "blockquote":
        yield "semantic <blockquote>", 5

    word_count = len(s.words)
    if word_count > 10:
        yield "paragraph-length text", 3
    elif word_count > 5:
        yield "sentence-length text", 1

    if s.styles.get("display") == "block":
        yield "block display", 1
    line_height = _number(s.styles.get("line_height"))
    if line_height is not None and 1.4 <= line_height <= 2:
        yield "readable line height", 2
    if 14 <= parse_pixels(s.styles.get("font_size") or "16px") <= 20:
        yield "body text size", 1


def section_signals(s: Signals) -> Iterator[Boost]:
    tag_boost = _SECTION_TAG_BOOSTS.get(s.tag)
    if tag_boost:
        yield f"semantic <{s.tag}>", tag_boost

    for word, weight in _SECTION_CLASS_WORDS:
        if _word_class(s.classes, word):
            yield "section-like class", weight
            break

    if s.styles.get("width") in ("100%", "100vw"):
        yield "full-width section", 2
    if s.styles.get("background_color") or s.styles.get("background_image"):
        yield "has background", 1
    if parse_pixels(s.styles.get("padding_top")) >= 20 or parse_pixels(s.styles.get("padding_bottom")) >= 20:
        yield "section-like padding", 2
    if s.styles.get("display") == "block":
        yield "block display", 1


# ============================================================================
# STRUCTURAL RULES
# ============================================================================

LIST_LIKE_TYPES = frozenset(
    {
        ComponentType.LIST,
        ComponentType.PRICE_LIST,
        ComponentType.GRID,
        ComponentType.GALLERY,
        ComponentType.IMAGE_GALLERY,
        ComponentType.POSTS_GRID,
        ComponentType.CAROUSEL,
        ComponentType.MENU,
        ComponentType.SOCIAL_ICONS,
        ComponentType.PAGINATION,
    }
)

FORM_ADJACENT_TYPES = frozenset(
    {
        ComponentType.FORM,
        ComponentType.SEARCH_BAR,
        ComponentType.RADIO_GROUP,
        ComponentType.FILE_UPLOAD,
        ComponentType.SELECT,
        ComponentType.CHECKBOX,
    }
)

TEXT_HEAVY_TYPES = frozenset(
    {
        ComponentType.TEXT,
        ComponentType.PARAGRAPH,
        ComponentType.BLOCKQUOTE,
        ComponentType.TESTIMONIAL,
        ComponentType.BLOG_CARD,
    }
)

_is_control = any_of(is_form_control, tag_in("button", "option"))


def child_signature(node: DOMNode) -> tuple[str, tuple[str, ...]]:
    """Tag and sorted classes, used to compare sibling structure."""
    return node.tag_name, tuple(sorted(c.lower() for c in node.class_names))


def repeated_children(s: Signals) -> Iterator[Boost]:
    children = s.node.children
    if len(children) < 2:
        return
    _, repeats = Counter(child_signature(c) for c in children).most_common(1)[0]
    if repeats >= 3 and repeats * 2 >= len(children):
        yield "repeated child structure", 5
    elif repeats >= 2:
        yield "paired child structure", 2


def nested_controls(s: Signals) -> Iterator[Boost]:
    controls = len(s.node.find_descendants(_is_control))
    if controls >= 2:
        yield "nested interactive controls", 4
    elif controls == 1:
        yield "nested interactive control", 2


def sparse_text(s: Signals) -> Iterator[Boost]:
    word_count = len(s.words)
    if word_count == 0:
        yield "no text content", -10
    elif word_count < 3:
        yield "sparse text content", -5


# ============================================================================
# UNIVERSAL RULES
# ============================================================================


def markup_quality(s: Signals) -> Iterator[Boost]:
    if s.node.element_id:
        yield "has id", 1
    if any(name.startswith("data-") for name in s.node.attributes):
        yield "has data attributes", 1
    if s.context.depth <= 5:
        yield "shallow nesting", 1


def explicit_styles(s: Signals) -> Iterator[Boost]:
    styles = s.styles
    declared = [
        styles.get("background_color") not in (None, "", "transparent"),
        styles.get("color") not in (None, "", "#000000"),
        bool(styles.get("font_size")),
        styles.get("font_weight") not in (None, "", "400"),
        any(key.startswith("padding") for key in styles),
        any(key.startswith("margin") for key in styles),
    ]
    if sum(declared) >= 3:
        yield "explicit styling", 1


DEFAULT_RULES: tuple[BoostRule, ...] = (
    BoostRule("button", button_signals, frozenset({ComponentType.BUTTON})),
    BoostRule("heading", heading_signals, frozenset({ComponentType.HEADING})),
    BoostRule("image", image_signals, frozenset({ComponentType.IMAGE})),
    BoostRule("text", text_signals, frozenset({ComponentType.TEXT, ComponentType.PARAGRAPH})),
    BoostRule("section", section_signals, frozenset({ComponentType.SECTION, ComponentType.CONTAINER})),
    BoostRule("repeated-children", repeated_children, LIST_LIKE_TYPES),
    BoostRule("nested-controls", nested_controls, FORM_ADJACENT_TYPES),
    BoostRule("sparse-text", sparse_text, TEXT_HEAVY_TYPES),
    BoostRule("markup-quality", markup_quality),
    BoostRule("explicit-styles", explicit_styles),
)


class ConfidenceBooster:
    """Applies boost rules to matched results."""

    def __init__(
        self,
        rules: Sequence[BoostRule] | None = None,
        review_threshold: int = DEFAULT_REVIEW_THRESHOLD,
    ) -> None:
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)
        self.review_threshold = review_threshold
        self._log = logger.bind(component="confidence_booster")

    def boost(
        self,
        result: RecognitionResult,
        node: DOMNode,
        styles: ExtractedStyles,
        context: ElementContext,
    ) -> RecognitionResult:
        """
        Re-score a matched result.

        Unknown results are returned unchanged. The component type is never
        changed and the confidence is clamped to [0, 100].

        Args:
            result: Result to adjust
            node: Classified element
            styles: Element styles
            context: Element context

        Returns:
            Result carrying this pass's adjustments
        """
        if result.is_unknown:
            return result

        kind = result.matched_type
        signals = Signals(node=node, styles=styles, context=context)
        adjustments = [
            Adjustment(Stage.BOOST, label, delta)
            for rule in self.rules
            if rule.applies(kind)
            for label, delta in rule(signals)
            if delta
        ]

        boosted = result.with_stage(Stage.BOOST, adjustments, self.review_threshold)
        if adjustments:
            self._log.debug(
                "Boosted confidence",
                component_type=kind.value,
                before=result.confidence,
                after=boosted.confidence,
                rules=len(adjustments),
            )
        return boosted


_default_booster = ConfidenceBooster()


def boost_confidence(
    result: RecognitionResult,
    node: DOMNode,
    styles: ExtractedStyles,
    context: ElementContext,
) -> RecognitionResult:
    """Boost a result with the default rule set."""
    return _default_booster.boost(result, node, styles, context)
