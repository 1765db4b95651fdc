"""
Recognition pattern model and shared structural helpers.

A pattern bundles up to six signal dimensions (tag, class keywords, CSS
predicate, content regex, ARIA role, context requirements) with a base
confidence and a priority. The CSS predicate is a tagged variant: either a
declarative map of expected style values or a custom function.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pagelens.dom import (
    DOMNode,
    any_of,
    attr_equals,
    class_contains,
    role_is,
    tag_in,
)
from pagelens.recognizer.models import ComponentType
from pagelens.styles import ExtractedStyles

StylePredicate = Callable[[ExtractedStyles, DOMNode], bool]

CURRENCY_RE = re.compile(r"[$€£¥₹]\s?\d|\d+[.,]\d{2}\s?(?:usd|eur|gbp)?\b|/\s?(?:mo|month|yr|year)\b", re.IGNORECASE)
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


@dataclass(frozen=True)
class Declarative:
    """Every listed style property must equal (or be one of) its expected value."""

    expected: Mapping[str, str | tuple[str, ...]]

    def evaluate(self, styles: ExtractedStyles, element: DOMNode) -> bool:
        for prop, allowed in self.expected.items():
            value = styles.get(prop)
            if isinstance(allowed, tuple):
                if value not in allowed:
                    return False
            elif value != allowed:
                return False
        return True


@dataclass(frozen=True)
class Custom:
    """Arbitrary boolean function of the element's styles and the element."""

    fn: StylePredicate

    def evaluate(self, styles: ExtractedStyles, element: DOMNode) -> bool:
        return bool(self.fn(styles, element))


CSSPredicate = Declarative | Custom


@dataclass(frozen=True)
class RecognitionPattern:
    """One rule bundle tied to a single component type."""

    component_type: ComponentType
    base_confidence: int
    priority: int
    tag_names: frozenset[str] | None = None
    class_keywords: tuple[str, ...] | None = None
    css: CSSPredicate | None = None
    content: re.Pattern[str] | None = None
    aria_role: str | None = None
    context_requirements: Mapping[str, Any] | None = None

    def dimensions(self) -> list[str]:
        """Names of the signal dimensions this pattern checks."""
        names = []
        if self.tag_names is not None:
            names.append("tag")
        if self.class_keywords is not None:
            names.append("class")
        if self.css is not None:
            names.append("css")
        if self.content is not None:
            names.append("content")
        if self.aria_role is not None:
            names.append("aria_role")
        if self.context_requirements is not None:
            names.append("context")
        return names

    def describe(self) -> str:
        return f"{self.component_type.value}[{'+'.join(self.dimensions())}]"


def pattern(
    component_type: ComponentType,
    confidence: int,
    priority: int,
    *,
    tags: Iterable[str] | None = None,
    classes: Iterable[str] | None = None,
    css: Mapping[str, str | tuple[str, ...]] | StylePredicate | None = None,
    content: str | re.Pattern[str] | None = None,
    role: str | None = None,
    context: Mapping[str, Any] | None = None,
) -> RecognitionPattern:
    """Build a pattern from loosely typed arguments."""
    predicate: CSSPredicate | None
    if css is None:
        predicate = None
    elif callable(css):
        predicate = Custom(css)
    else:
        predicate = Declarative(dict(css))

    regex = re.compile(content) if isinstance(content, str) else content

    return RecognitionPattern(
        component_type=component_type,
        base_confidence=confidence,
        priority=priority,
        tag_names=frozenset(t.lower() for t in tags) if tags is not None else None,
        class_keywords=tuple(classes) if classes is not None else None,
        css=predicate,
        content=regex,
        aria_role=role,
        context_requirements=dict(context) if context is not None else None,
    )


# ----------------------------------------------------------------------------
# Structural helpers shared by pattern families
# ----------------------------------------------------------------------------


def count(element: DOMNode, predicate: Callable[[DOMNode], bool]) -> int:
    return len(element.find_descendants(predicate))


def has(element: DOMNode, predicate: Callable[[DOMNode], bool]) -> bool:
    return element.has_descendant(predicate)


def class_text(element: DOMNode) -> str:
    return " ".join(element.class_names).lower()


is_heading = tag_in(*HEADING_TAGS)
is_image = tag_in("img", "picture")
is_link = tag_in("a")
is_button_like = any_of(
    tag_in("button"),
    role_is("button"),
    lambda n: n.tag_name == "a" and any(k in class_text(n) for k in ("btn", "button", "cta")),
    lambda n: n.tag_name == "input" and n.get("type").lower() in ("submit", "button"),
)
is_form_control = any_of(
    lambda n: n.tag_name == "input" and n.get("type").lower() != "hidden",
    tag_in("textarea", "select"),
)


def is_radio(node: DOMNode) -> bool:
    return node.tag_name == "input" and node.get("type").lower() == "radio"


def is_checkbox(node: DOMNode) -> bool:
    return node.tag_name == "input" and node.get("type").lower() == "checkbox"


is_price = any_of(class_contains("price", "cost", "amount"), attr_equals("itemprop", "price"))


def is_long_paragraph(node: DOMNode, min_length: int = 20) -> bool:
    return node.tag_name == "p" and len(node.text) > min_length


def has_background_image(styles: ExtractedStyles) -> bool:
    value = styles.get("background_image") or styles.get("background") or ""
    return "url(" in value or "gradient(" in value


def has_box_styling(styles: ExtractedStyles) -> bool:
    return bool(
        styles.get("border")
        or styles.get("box_shadow")
        or styles.get("background_color")
        or styles.get("border_radius")
    )


def direct_children(element: DOMNode, predicate: Callable[[DOMNode], bool]) -> list[DOMNode]:
    return [c for c in element.children if predicate(c)]
