"""
Cross validator.

Reconciles a node's classification with its structural neighborhood:
its parent element, the finalized classifications of its ancestors and of
the siblings that precede it. Descendant results and following siblings are
never consulted, since a pre-order walk has not produced them yet.

Rules yield ``Finding`` values. A finding may adjust confidence, retag the
result to a more specific type, or raise a manual review flag. The net
confidence change of one pass is bounded by ``max_adjustment``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field

import structlog

from pagelens.dom import DOMNode, input_type
from pagelens.recognizer.models import (
    DEFAULT_REVIEW_THRESHOLD,
    Adjustment,
    ComponentType,
    ElementContext,
    RecognitionResult,
    Stage,
)
from pagelens.recognizer.patterns.base import class_text
from pagelens.styles import ExtractedStyles

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ADJUSTMENT = 10

_HEADING_TAG_RE = re.compile(r"^h([1-6])$")
_BUTTON_TYPES = frozenset({ComponentType.BUTTON, ComponentType.CTA_BUTTON, ComponentType.SUBMIT_BUTTON})
_TEXT_TYPES = frozenset({ComponentType.TEXT, ComponentType.PARAGRAPH})
_SELF_NESTING_TYPES = (ComponentType.HERO, ComponentType.FORM, ComponentType.PRICING_TABLE)
_MATCHABLE_TYPES = frozenset(ComponentType) - {ComponentType.UNKNOWN}


@dataclass(frozen=True)
class ValidationContext:
    """Neighborhood of one element as seen by the cross validator."""

    element: DOMNode
    styles: ExtractedStyles
    context: ElementContext
    parent: DOMNode | None = None
    ancestor_types: tuple[ComponentType, ...] = ()
    prior_siblings: tuple[tuple[DOMNode, RecognitionResult], ...] = ()

    @property
    def parent_type(self) -> ComponentType | None:
        if self.ancestor_types:
            return self.ancestor_types[-1]
        return self.context.parent_type

    def prior_types(self) -> list[ComponentType]:
        return [result.component_type for _, result in self.prior_siblings]


@dataclass(frozen=True)
class Finding:
    """Outcome of one validation rule."""

    rule: str
    delta: int = 0
    retag: ComponentType | None = None
    review_flag: str | None = None


def build_validation_context(
    element: DOMNode,
    styles: ExtractedStyles,
    context: ElementContext,
    ancestor_types: Sequence[ComponentType] = (),
    prior_siblings: Sequence[tuple[DOMNode, RecognitionResult]] = (),
) -> ValidationContext:
    """
    Assemble the validation input for an element.

    Args:
        element: Element being classified
        styles: Its extracted styles
        context: Its structural context
        ancestor_types: Finalized types of its ancestors, nearest last
        prior_siblings: Preceding siblings with their finalized results

    Returns:
        Validation context
    """
    return ValidationContext(
        element=element,
        styles=styles,
        context=context,
        parent=element.parent,
        ancestor_types=tuple(ancestor_types),
        prior_siblings=tuple(prior_siblings),
    )


def _parent_has_class(vc: ValidationContext, *keywords: str) -> bool:
    if vc.parent is None:
        return False
    classes = class_text(vc.parent)
    return any(k in classes for k in keywords)


def _parent_tag(vc: ValidationContext) -> str:
    return vc.parent.tag_name if vc.parent is not None else ""


def _heading_level(node: DOMNode) -> int | None:
    match = _HEADING_TAG_RE.match(node.tag_name)
    return int(match.group(1)) if match else None


# ============================================================================
# BUTTON
# ============================================================================


def validate_button(vc: ValidationContext) -> Iterator[Finding]:
    el = vc.element
    button_type = el.get("type").strip().lower()

    if _parent_tag(vc) == "form":
        if button_type == "submit":
            yield Finding("submit button in form", 5)
        elif button_type == "reset":
            yield Finding("reset button in form", 3)
        else:
            yield Finding("button in form", 2)
    if _parent_tag(vc) == "form" or _parent_has_class(vc, "form-group", "form-row", "form"):
        yield Finding("form button", 3)

    is_submit = button_type == "submit" or (el.tag_name == "input" and input_type(el) == "submit")
    if vc.context.inside_form and is_submit:
        yield Finding("submit button inside form", retag=ComponentType.SUBMIT_BUTTON)
    if ComponentType.HERO in vc.ancestor_types:
        yield Finding("button inside hero", retag=ComponentType.CTA_BUTTON)

    prior = vc.prior_types()
    has_heading = ComponentType.HEADING in prior
    has_text = any(t in _TEXT_TYPES for t in prior)
    if has_heading and has_text:
        yield Finding("CTA pattern (heading + text + button)", 4)
    elif has_heading or has_text:
        yield Finding("button with contextual content", 2)

    if _parent_has_class(vc, "hero", "banner", "jumbotron"):
        yield Finding("hero section CTA button", 3)
    if _parent_has_class(vc, "card-footer", "footer", "actions"):
        yield Finding("card action button", 2)
    if el.tag_name == "a" and (_parent_tag(vc) == "nav" or _parent_has_class(vc, "nav", "navbar", "menu")):
        yield Finding("likely nav link, not button", -3)
    if any(t in _BUTTON_TYPES for t in prior):
        yield Finding("button group pattern", 2)


# ============================================================================
# HEADING
# ============================================================================


def validate_heading(vc: ValidationContext) -> Iterator[Finding]:
    level = _heading_level(vc.element)

    if level is not None:
        previous = next(
            (n for n, _ in reversed(vc.prior_siblings) if _heading_level(n) is not None),
            None,
        )
        if previous is not None:
            prev_level = _heading_level(previous)
            if level in (prev_level, prev_level + 1):
                yield Finding("correct heading hierarchy", 3)
            elif level > prev_level + 1:
                yield Finding("skipped heading level (suspicious)", -1)

        if level == 1 and vc.context.depth <= 2:
            if not any(n.tag_name == "h1" for n, _ in vc.prior_siblings):
                yield Finding("primary page heading", 4)

    if _parent_has_class(vc, "hero", "banner", "jumbotron", "masthead"):
        yield Finding("hero section heading", 3)
    if _parent_has_class(vc, "card", "block", "box", "panel"):
        yield Finding("card heading", 2)
    if _parent_tag(vc) == "section" and not vc.prior_siblings:
        yield Finding("section title (first child)", 3)
    if any(child.tag_name in ("button", "a") for child in vc.element.children):
        yield Finding("contains interactive elements (suspicious)", -2)


# ============================================================================
# IMAGE
# ============================================================================


def validate_image(vc: ValidationContext) -> Iterator[Finding]:
    el = vc.element
    alt = el.get("alt").lower()
    src = el.get("src").lower()

    if _parent_tag(vc) == "figure":
        yield Finding("semantic figure/image pattern", 4)
        if any(child.tag_name == "figcaption" for child in vc.parent.children):
            yield Finding("has figcaption", 2)

    images_before = sum(1 for t in vc.prior_types() if t is ComponentType.IMAGE)
    if images_before >= 2:
        yield Finding("gallery pattern", 3)

    if _parent_has_class(vc, "hero", "banner", "jumbotron"):
        yield Finding("hero background/image", 3)
    if "logo" in alt or "logo" in src:
        if _parent_tag(vc) == "header" or vc.context.inside_header:
            yield Finding("header logo", 4)
        else:
            yield Finding("logo image", 2)
    if "avatar" in alt or "profile" in alt or "avatar" in src:
        yield Finding("avatar/profile image", 2)
    if _parent_has_class(vc, "card", "card-image", "card-img"):
        yield Finding("card image", 3)

    width = int(el.get("width")) if el.get("width").isdigit() else 0
    height = int(el.get("height")) if el.get("height").isdigit() else 0
    tiny = 0 < width < 50 or 0 < height < 50
    if tiny and ("icon" in alt or "icon" in src):
        yield Finding("likely icon, not image", -2)


# ============================================================================
# TEXT
# ============================================================================


def validate_text(vc: ValidationContext) -> Iterator[Finding]:
    el = vc.element
    text_length = len(el.text)

    article_run = [
        n for n, r in vc.prior_siblings if r.component_type in _TEXT_TYPES and len(n.text) > 50
    ]
    if len(article_run) >= 2:
        yield Finding("article/blog content pattern", 4)

    recent = [r.component_type for _, r in vc.prior_siblings[-3:]]
    if ComponentType.HEADING in recent and text_length > 50:
        yield Finding("content following heading", 3)

    if _parent_has_class(vc, "card", "card-body", "card-content"):
        yield Finding("card description", 2)
    if _parent_tag(vc) == "blockquote":
        yield Finding("semantic blockquote", 4)
    if _parent_tag(vc) == "li":
        yield Finding("list item text", 2)
    if text_length < 20 and el.tag_name == "div":
        yield Finding("very short text (might be label)", -2)

    in_form = _parent_tag(vc) == "form" or _parent_has_class(vc, "form", "form-group", "form-row")
    is_label = el.tag_name == "label" or "label" in class_text(el)
    if in_form and is_label:
        yield Finding("form label, not text", -2)


# ============================================================================
# SECTION / CONTAINER
# ============================================================================


def validate_section(vc: ValidationContext) -> Iterator[Finding]:
    el = vc.element
    children = el.children

    if el.tag_name in ("header", "footer", "main", "article", "aside", "nav"):
        yield Finding(f"semantic {el.tag_name} element", 5)

    has_heading = any(_heading_level(c) is not None for c in children)
    has_text = any(c.tag_name in ("p", "div") and len(c.text) > 30 for c in children)
    has_button = any(c.tag_name == "button" or "btn" in class_text(c) or "button" in class_text(c) for c in children)
    if has_heading and has_text and has_button:
        yield Finding("complete section pattern (heading + content + CTA)", 5)
    elif has_heading and has_text:
        yield Finding("section pattern (heading + content)", 3)
    elif has_heading or has_text:
        yield Finding("partial section content", 1)

    nested_sections = [
        c for c in children
        if c.tag_name == "section" or any(k in class_text(c) for k in ("section", "block", "panel"))
    ]
    if len(nested_sections) >= 2:
        yield Finding("contains multiple sections (container)", 3)
    if vc.styles.get("display") in ("flex", "grid"):
        yield Finding("layout container (flex/grid)", 3)
    if vc.styles.get("width") in ("100%", "100vw"):
        yield Finding("full-width section", 2)


# ============================================================================
# RELATIONSHIP RULES
# ============================================================================


def validate_radio(vc: ValidationContext) -> Iterator[Finding]:
    if vc.parent_type is ComponentType.RADIO_GROUP:
        yield Finding("radio within radio group", 3)


def _same_structure(a: DOMNode, b: DOMNode) -> bool:
    return a.tag_name == b.tag_name and set(a.class_names) == set(b.class_names)


def validate_card_nesting(vc: ValidationContext) -> Iterator[Finding]:
    if vc.parent is None or vc.parent_type is not ComponentType.CARD:
        return
    if _same_structure(vc.element, vc.parent):
        yield Finding(
            "card nested in identical card",
            review_flag="card nested directly inside a structurally identical card",
        )


def _card_scope(vc: ValidationContext) -> Iterator[DOMNode]:
    for node in (*(n for n, _ in vc.prior_siblings), vc.element):
        yield node
        yield from node.find_descendants(lambda n: True)


def validate_card_pattern(vc: ValidationContext) -> Iterator[Finding]:
    """
    Reward elements that sit in a card with the usual card content.

    The card is recognized from the element's own classes or its parent's.
    Its content is read from the element's subtree and the subtrees of the
    siblings before it.
    """
    in_card = any(k in class_text(vc.element) for k in ("card", "card-body", "panel", "box")) or (
        _parent_has_class(vc, "card", "panel", "box")
    )
    if not in_card:
        return

    nodes = list(_card_scope(vc))
    has_image = any(n.tag_name == "img" for n in nodes)
    has_heading = any(_heading_level(n) is not None for n in nodes)
    has_text = any(n.tag_name == "p" and len(n.text) > 30 for n in nodes)
    has_button = any(
        n.tag_name == "button" or "btn" in class_text(n) or "button" in class_text(n) for n in nodes
    )

    if has_image and has_heading and has_text and has_button:
        yield Finding("complete card pattern", 5)
    elif has_heading and has_text:
        yield Finding("card with heading and description", 3)
    elif has_image and has_heading:
        yield Finding("card with image and heading", 2)


def validate_self_nesting(vc: ValidationContext, kind: ComponentType) -> Iterator[Finding]:
    if vc.parent_type is kind:
        yield Finding(
            f"{kind.value} nested in {kind.value}",
            review_flag=f"{kind.value} nested directly inside another {kind.value}",
        )


@dataclass(frozen=True)
class ValidationRule:
    """Named validation rule limited to some matched types."""

    name: str
    fn: Callable[[ValidationContext], Iterable[Finding]]
    applies_to: frozenset[ComponentType] = field(default_factory=frozenset)

    def applies(self, component_type: ComponentType) -> bool:
        return component_type in self.applies_to

    def __call__(self, vc: ValidationContext) -> list[Finding]:
        return list(self.fn(vc))


def _self_nesting_rule(kind: ComponentType) -> ValidationRule:
    return ValidationRule(
        f"{kind.value}-nesting",
        lambda vc: validate_self_nesting(vc, kind),
        frozenset({kind}),
    )


DEFAULT_RULES: tuple[ValidationRule, ...] = (
    ValidationRule("button", validate_button, frozenset({ComponentType.BUTTON})),
    ValidationRule("heading", validate_heading, frozenset({ComponentType.HEADING})),
    ValidationRule("image", validate_image, frozenset({ComponentType.IMAGE})),
    ValidationRule("text", validate_text, _TEXT_TYPES),
    ValidationRule(
        "section", validate_section, frozenset({ComponentType.SECTION, ComponentType.CONTAINER})
    ),
    ValidationRule("radio", validate_radio, frozenset({ComponentType.RADIO})),
    ValidationRule("card-nesting", validate_card_nesting, frozenset({ComponentType.CARD})),
    ValidationRule("card-pattern", validate_card_pattern, _MATCHABLE_TYPES),
    *(_self_nesting_rule(kind) for kind in _SELF_NESTING_TYPES),
)


class CrossValidator:
    """Applies validation rules to matched results."""

    def __init__(
        self,
        rules: Sequence[ValidationRule] | None = None,
        max_adjustment: int = DEFAULT_MAX_ADJUSTMENT,
        review_threshold: int = DEFAULT_REVIEW_THRESHOLD,
    ) -> None:
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)
        self.max_adjustment = max_adjustment
        self.review_threshold = review_threshold
        self._log = logger.bind(component="cross_validator")

    def validate(self, result: RecognitionResult, vc: ValidationContext) -> RecognitionResult:
        """
        Reconcile a result with its neighborhood.

        Rules are chosen by the type the matcher picked, so a retagged result
        is validated the same way on every application. The first retag
        wins. Unknown results are returned unchanged.

        Args:
            result: Result after boosting
            vc: Validation context

        Returns:
            Result carrying this pass's adjustments, type and review flags
        """
        if result.is_unknown:
            return result

        kind = result.matched_type
        findings = [f for rule in self.rules if rule.applies(kind) for f in rule(vc)]

        adjustments = [Adjustment(Stage.VALIDATION, f.rule, f.delta) for f in findings]
        net = sum(f.delta for f in findings)
        bounded = max(-self.max_adjustment, min(self.max_adjustment, net))
        if bounded != net:
            adjustments.append(Adjustment(Stage.VALIDATION, "validation bound", bounded - net))

        retag = next((f.retag for f in findings if f.retag is not None), None)
        flags = tuple(f.review_flag for f in findings if f.review_flag)

        validated = result.with_stage(
            Stage.VALIDATION,
            adjustments,
            self.review_threshold,
            component_type=retag or kind,
            review_flags=flags,
        )
        if retag is not None:
            self._log.debug("Retagged component", matched=kind.value, retagged=retag.value)
        if flags:
            self._log.debug("Flagged for manual review", component_type=kind.value, flags=list(flags))
        return validated


_default_validator = CrossValidator()


def validate_with_context(result: RecognitionResult, vc: ValidationContext) -> RecognitionResult:
    """Validate a result with the default rule set."""
    return _default_validator.validate(result, vc)
