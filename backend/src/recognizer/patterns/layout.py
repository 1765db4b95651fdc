"""
Layout component patterns.

Detects page structure:
- Header, footer and navigation menus
- Hero sections
- Sidebars
- Cards
- Grids, rows, columns, containers and sections
"""

from __future__ import annotations

from dataclasses import dataclass

from pagelens.dom import DOMNode, any_of, tag_in
from pagelens.recognizer.models import ComponentType as T
from pagelens.recognizer.patterns.base import (
    RecognitionPattern,
    class_text,
    count,
    has,
    has_background_image,
    has_box_styling,
    is_heading,
    is_image,
    is_link,
    is_long_paragraph,
    pattern,
)
from pagelens.styles import ExtractedStyles, parse_pixels


@dataclass(frozen=True)
class CardStructure:
    """Content signals typical of a card."""

    has_image: bool
    has_heading: bool
    has_text: bool
    has_button: bool

    @property
    def score(self) -> int:
        return (
            25 * self.has_image
            + 30 * self.has_heading
            + 25 * self.has_text
            + 20 * self.has_button
        )


@dataclass(frozen=True)
class HeroStructure:
    """Content and sizing signals typical of a hero section."""

    has_large_background: bool
    has_heading: bool
    has_text: bool
    has_button: bool
    is_full_width: bool
    is_tall: bool

    @property
    def score(self) -> int:
        return (
            30 * self.has_large_background
            + 25 * self.has_heading
            + 15 * self.has_text
            + 15 * self.has_button
            + 10 * self.is_full_width
            + 5 * self.is_tall
        )


def _inline_background(node: DOMNode) -> bool:
    style = node.get("style").lower()
    return "background-image" in style or "url(" in style


def _is_action(node: DOMNode) -> bool:
    if node.tag_name == "button":
        return True
    return node.tag_name == "a" and any(k in class_text(node) for k in ("btn", "button", "cta"))


def card_structure(element: DOMNode) -> CardStructure:
    return CardStructure(
        has_image=has(element, any_of(is_image, _inline_background)),
        has_heading=has(element, is_heading),
        has_text=has(element, is_long_paragraph),
        has_button=has(element, _is_action),
    )


def _is_full_width(styles: ExtractedStyles) -> bool:
    return styles.get("width") in ("100%", "100vw")


def _is_tall(styles: ExtractedStyles) -> bool:
    for prop in ("min_height", "height"):
        value = styles.get(prop, "")
        if value.endswith("vh"):
            return parse_pixels(value[:-2]) >= 40
        if parse_pixels(value) >= 400:
            return True
    return False


def hero_structure(element: DOMNode, styles: ExtractedStyles) -> HeroStructure:
    return HeroStructure(
        has_large_background=has_background_image(styles) or has(element, tag_in("video")),
        has_heading=has(element, tag_in("h1", "h2")),
        has_text=has(element, is_long_paragraph),
        has_button=has(element, _is_action),
        is_full_width=_is_full_width(styles),
        is_tall=_is_tall(styles),
    )


# ============================================================================
# HEADER
# ============================================================================

HEADER_PATTERNS: list[RecognitionPattern] = [
    pattern(T.HEADER, 95, 100, tags=["header"]),
    pattern(T.HEADER, 90, 90, classes=["header", "site-header", "page-header", "top-bar", "navbar"]),
    pattern(T.HEADER, 95, 95, role="banner"),
    pattern(
        T.HEADER, 90, 90,
        classes=["header", "nav", "top"],
        css=lambda s, el: s.get("position") in ("fixed", "sticky"),
    ),
    pattern(T.HEADER, 95, 95, classes=["navbar-expand", "navbar-light", "navbar-dark"]),
]

# ============================================================================
# FOOTER
# ============================================================================

FOOTER_PATTERNS: list[RecognitionPattern] = [
    pattern(T.FOOTER, 95, 100, tags=["footer"]),
    pattern(T.FOOTER, 95, 95, role="contentinfo"),
    pattern(T.FOOTER, 90, 90, classes=["footer", "site-footer", "page-footer", "bottom-bar"]),
    pattern(
        T.FOOTER, 85, 85,
        classes=["copyright", "colophon"],
        content=r"(?i)©|copyright|all rights reserved",
        context={"inside_footer": True},
    ),
]

# ============================================================================
# HERO
# ============================================================================


def _hero_background_heading(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = hero_structure(el, styles)
    return s.has_large_background and s.has_heading


def _hero_complete(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = hero_structure(el, styles)
    return s.has_large_background and s.has_heading and s.has_text and s.has_button


def _hero_full_width(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = hero_structure(el, styles)
    return s.has_large_background and s.is_full_width and s.has_heading


def _hero_video(styles: ExtractedStyles, el: DOMNode) -> bool:
    return has(el, tag_in("video")) and has(el, tag_in("h1", "h2"))


def _hero_tall(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = hero_structure(el, styles)
    return s.is_tall and s.is_full_width and s.score >= 60


HERO_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.HERO, 95, 100,
        tags=["header", "section"],
        classes=["hero", "banner", "jumbotron", "masthead"],
        css=_hero_background_heading,
    ),
    pattern(T.HERO, 95, 100, css=_hero_complete),
    pattern(T.HERO, 90, 90, classes=["hero", "banner", "jumbotron", "masthead", "splash"]),
    pattern(T.HERO, 85, 85, css=_hero_full_width),
    pattern(T.HERO, 90, 90, css=_hero_video),
    pattern(T.HERO, 80, 80, css=_hero_tall),
    pattern(T.HERO, 95, 95, classes=["jumbotron", "jumbotron-fluid"]),
    pattern(
        T.HERO, 85, 85,
        classes=["bg-cover", "bg-center", "h-screen", "min-h-screen"],
        css=lambda s, el: has(el, tag_in("h1", "h2")),
    ),
]

# ============================================================================
# NAVIGATION
# ============================================================================


def _short_link_list(styles: ExtractedStyles, el: DOMNode) -> bool:
    if el.tag_name != "ul":
        return False
    links = el.find_descendants(is_link)
    return len(links) >= 3 and all(len(link.text) < 30 for link in links)


def _horizontal_links(styles: ExtractedStyles, el: DOMNode) -> bool:
    horizontal = styles.get("display") == "flex" and styles.get("flex_direction") != "column"
    return horizontal and count(el, is_link) >= 3


def _nested_lists(styles: ExtractedStyles, el: DOMNode) -> bool:
    return any(item.has_descendant(tag_in("ul")) for item in el.find_descendants(tag_in("ul")))


NAVIGATION_PATTERNS: list[RecognitionPattern] = [
    pattern(T.MENU, 95, 100, tags=["nav"]),
    pattern(T.MENU, 95, 95, role="navigation"),
    pattern(T.MENU, 90, 90, classes=["nav", "navigation", "menu", "navbar", "nav-menu"]),
    pattern(T.MENU, 85, 85, css=_short_link_list),
    pattern(
        T.MENU, 90, 85,
        tags=["ul"],
        css=lambda s, el: count(el, is_link) >= 2,
        context={"inside_nav": True},
    ),
    pattern(T.MENU, 80, 80, css=_horizontal_links),
    pattern(T.MENU, 90, 90, classes=["hamburger", "mobile-menu", "toggle-nav", "menu-toggle"]),
    pattern(T.MENU, 85, 85, classes=["mega-menu", "submenu"], css=_nested_lists),
]

# ============================================================================
# SIDEBAR
# ============================================================================

SIDEBAR_PATTERNS: list[RecognitionPattern] = [
    pattern(T.SIDEBAR, 90, 90, tags=["aside"]),
    pattern(T.SIDEBAR, 90, 90, role="complementary"),
    pattern(T.SIDEBAR, 90, 90, classes=["sidebar", "side-bar", "widget-area", "off-canvas"]),
]

# ============================================================================
# CARD
# ============================================================================


def _card_complete(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = card_structure(el)
    return s.has_image and s.has_heading and s.has_text and s.has_button


def _card_image_heading_text(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = card_structure(el)
    return s.has_image and s.has_heading and s.has_text


def _card_styled_content(styles: ExtractedStyles, el: DOMNode) -> bool:
    return card_structure(el).score >= 55 and has_box_styling(styles)


def _card_image_and_copy(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = card_structure(el)
    return s.has_image and (s.has_heading or s.has_text)


def _card_article(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = card_structure(el)
    return (s.has_image or s.has_heading) and s.has_text


def _card_heading_text_styled(styles: ExtractedStyles, el: DOMNode) -> bool:
    s = card_structure(el)
    return s.has_heading and s.has_text and has_box_styling(styles)


CARD_PATTERNS: list[RecognitionPattern] = [
    pattern(T.CARD, 95, 100, css=_card_complete),
    pattern(T.CARD, 90, 95, css=_card_image_heading_text),
    pattern(
        T.CARD, 85, 85,
        classes=["card", "tile", "box", "item", "panel"],
        css=lambda s, el: has_box_styling(s),
    ),
    pattern(T.CARD, 80, 80, css=_card_styled_content),
    pattern(T.CARD, 85, 85, classes=["product", "item", "listing", "card"], css=_card_image_and_copy),
    pattern(T.CARD, 85, 85, classes=["post", "article", "blog", "entry"], css=_card_article),
    pattern(T.CARD, 90, 90, classes=["card", "card-body", "MuiCard"]),
    pattern(T.CARD, 75, 75, classes=["card", "box", "panel"], css=_card_heading_text_styled),
]

# ============================================================================
# GRID / ROW / COLUMN
# ============================================================================


def _grid_with_columns(styles: ExtractedStyles, el: DOMNode) -> bool:
    return styles.get("display") in ("grid", "inline-grid") and bool(
        styles.get("grid_template_columns")
    )


def _flex_row(styles: ExtractedStyles, el: DOMNode) -> bool:
    return (
        styles.get("display") in ("flex", "inline-flex")
        and styles.get("flex_direction", "row") in ("row", "row-reverse")
        and len(el.children) >= 2
    )


GRID_PATTERNS: list[RecognitionPattern] = [
    pattern(T.GRID, 95, 90, css=_grid_with_columns),
    pattern(T.GRID, 90, 85, css={"display": ("grid", "inline-grid")}),
    pattern(
        T.GRID, 80, 75,
        classes=["grid", "row-cols", "masonry", "columns"],
        css=lambda s, el: len(el.children) >= 3,
    ),
]

ROW_PATTERNS: list[RecognitionPattern] = [
    pattern(T.ROW, 80, 70, css=_flex_row),
    pattern(T.ROW, 80, 70, classes=["row", "flex-row", "d-flex"]),
]

COLUMN_PATTERNS: list[RecognitionPattern] = [
    pattern(T.COLUMN, 80, 65, classes=["col-", "column"]),
    pattern(
        T.COLUMN, 70, 60,
        css={"display": ("flex", "inline-flex"), "flex_direction": "column"},
    ),
]

# ============================================================================
# CONTAINER / SECTION
# ============================================================================

CONTAINER_PATTERNS: list[RecognitionPattern] = [
    pattern(T.CONTAINER, 80, 60, tags=["main"]),
    pattern(T.CONTAINER, 75, 55, classes=["container", "wrapper", "inner", "content-wrap"]),
    pattern(T.CONTAINER, 80, 55, role="main"),
]

SECTION_PATTERNS: list[RecognitionPattern] = [
    pattern(T.SECTION, 85, 60, tags=["section"]),
    pattern(T.SECTION, 80, 55, role="region"),
    pattern(
        T.SECTION, 80, 55,
        classes=["section"],
        css=lambda s, el: any(map(is_heading, el.children)) or len(el.children) >= 2,
    ),
]

LAYOUT_PATTERNS: list[RecognitionPattern] = [
    *HEADER_PATTERNS,
    *FOOTER_PATTERNS,
    *HERO_PATTERNS,
    *NAVIGATION_PATTERNS,
    *SIDEBAR_PATTERNS,
    *CARD_PATTERNS,
    *GRID_PATTERNS,
    *ROW_PATTERNS,
    *COLUMN_PATTERNS,
    *CONTAINER_PATTERNS,
    *SECTION_PATTERNS,
]
