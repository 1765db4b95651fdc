"""
Basic element patterns.

Buttons, links, headings, images, icons, dividers, spacers and text. These
are checked after specialized components and mostly carry low priorities.
"""

from __future__ import annotations

from pagelens.dom import DOMNode, input_type
from pagelens.recognizer.models import ComponentType as T
from pagelens.recognizer.patterns.base import (
    HEADING_TAGS,
    RecognitionPattern,
    has,
    is_image,
    pattern,
)
from pagelens.styles import ExtractedStyles, parse_pixels

INLINE_TEXT_TAGS = ("strong", "em", "b", "i", "small", "label", "mark", "cite", "sub", "sup")
BLOCK_TAGS = frozenset(
    {
        "div", "p", "section", "article", "ul", "ol", "table", "form", "header",
        "footer", "nav", "aside", "h1", "h2", "h3", "h4", "h5", "h6", "img",
        "figure", "video", "iframe", "button", "input", "select", "textarea",
    }
)


def _dimension(el: DOMNode, styles: ExtractedStyles, name: str) -> float:
    return parse_pixels(styles.get(name) or el.get(name))


def _text_block(styles: ExtractedStyles, el: DOMNode) -> bool:
    if el.tag_name not in ("div", "td", "li", "dd", "dt", "figcaption"):
        return False
    if any(child.tag_name in BLOCK_TAGS for child in el.children):
        return False
    return len(el.text) >= 20


def _text_span(styles: ExtractedStyles, el: DOMNode) -> bool:
    if el.tag_name != "span" or not el.text:
        return False
    return not any(child.tag_name in BLOCK_TAGS for child in el.children)


def _icon_span(styles: ExtractedStyles, el: DOMNode) -> bool:
    if el.tag_name != "span":
        return False
    classes = " ".join(el.class_names).lower()
    return any(k in classes for k in ("icon", "fa-", "material-icons", "glyphicon"))


def _invisible_rule(styles: ExtractedStyles, el: DOMNode) -> bool:
    return (
        styles.get("border_width") in ("0", "0px")
        or styles.get("border_style") in ("none", "hidden")
        or styles.get("opacity") == "0"
    )


def _small_svg(styles: ExtractedStyles, el: DOMNode) -> bool:
    width = _dimension(el, styles, "width")
    height = _dimension(el, styles, "height")
    return 0 < width <= 100 and 0 < height <= 100


def _icon_image(styles: ExtractedStyles, el: DOMNode) -> bool:
    width = _dimension(el, styles, "width")
    height = _dimension(el, styles, "height")
    small = 0 < width <= 64 and 0 < height <= 64
    hint = f"{el.get('src')} {el.get('alt')}".lower()
    return small and any(word in hint for word in ("icon", "logo", "symbol"))


def _blank_space(styles: ExtractedStyles, el: DOMNode) -> bool:
    height = _dimension(el, styles, "height")
    return 0 < height <= 200 and not styles.get("background_color") and not el.text


def _thin_rule(styles: ExtractedStyles, el: DOMNode) -> bool:
    has_border = any(
        styles.get(prop) for prop in ("border", "border_top", "border_bottom")
    )
    height = _dimension(el, styles, "height")
    return has_border and height <= 10 and not el.children


# ============================================================================
# BUTTON / LINK
# ============================================================================

BUTTON_PATTERNS: list[RecognitionPattern] = [
    pattern(T.BUTTON, 95, 95, tags=["button"]),
    pattern(
        T.BUTTON, 95, 95,
        tags=["input"],
        css=lambda s, el: input_type(el) in ("submit", "button", "reset", "image"),
    ),
    pattern(T.BUTTON, 90, 90, role="button"),
    pattern(T.BUTTON, 90, 90, tags=["a"], classes=["btn", "button", "cta"]),
    pattern(T.BUTTON, 80, 75, classes=["btn", "button"]),
]

LINK_PATTERNS: list[RecognitionPattern] = [
    pattern(T.LINK, 80, 50, tags=["a"], css=lambda s, el: "href" in el.attributes),
]

# ============================================================================
# HEADING
# ============================================================================

HEADING_PATTERNS: list[RecognitionPattern] = [
    pattern(T.HEADING, 95, 95, tags=HEADING_TAGS),
    pattern(T.HEADING, 90, 90, role="heading"),
    pattern(
        T.HEADING, 75, 60,
        classes=["heading", "title", "headline"],
        content=r"^[^\n]{1,80}$",
    ),
]

# ============================================================================
# IMAGE / ICON
# ============================================================================

IMAGE_PATTERNS: list[RecognitionPattern] = [
    pattern(T.IMAGE, 95, 95, tags=["img", "picture"]),
    pattern(T.IMAGE, 85, 85, role="img"),
    pattern(T.IMAGE, 85, 85, tags=["figure"], css=lambda s, el: has(el, is_image)),
]

ICON_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.ICON, 95, 90,
        tags=["i"],
        classes=["fa-", "fas", "far", "fab", "fal", "icon", "material-icons", "bi-"],
    ),
    pattern(T.ICON, 90, 85, css=_icon_span),
    pattern(T.ICON, 85, 80, tags=["svg"], css=_small_svg),
    pattern(T.ICON, 75, 70, tags=["img"], css=_icon_image),
]

# ============================================================================
# DIVIDER / SPACER
# ============================================================================

DIVIDER_PATTERNS: list[RecognitionPattern] = [
    pattern(T.DIVIDER, 95, 90, tags=["hr"], css=lambda s, el: not _invisible_rule(s, el)),
    pattern(T.DIVIDER, 85, 80, classes=["divider", "separator", "line", "border"], css=_thin_rule),
]

SPACER_PATTERNS: list[RecognitionPattern] = [
    pattern(T.SPACER, 80, 75, classes=["spacer", "space", "gap"], css=_blank_space),
    pattern(
        T.SPACER, 85, 80,
        tags=["hr"],
        css=_invisible_rule,
    ),
]

# ============================================================================
# TEXT
# ============================================================================

TEXT_PATTERNS: list[RecognitionPattern] = [
    pattern(T.PARAGRAPH, 90, 60, tags=["p"]),
    pattern(T.TEXT, 80, 40, tags=INLINE_TEXT_TAGS, content=r"\S"),
    pattern(T.TEXT, 80, 40, css=_text_span),
    pattern(T.TEXT, 75, 35, css=_text_block),
    pattern(T.TEXT, 85, 45, tags=["address", "time", "abbr", "dd", "dt", "figcaption"]),
]

BASIC_PATTERNS: list[RecognitionPattern] = [
    *BUTTON_PATTERNS,
    *LINK_PATTERNS,
    *HEADING_PATTERNS,
    *IMAGE_PATTERNS,
    *ICON_PATTERNS,
    *DIVIDER_PATTERNS,
    *SPACER_PATTERNS,
    *TEXT_PATTERNS,
]
