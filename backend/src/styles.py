"""
Style extraction for recognized elements.

A style extractor turns the outer markup of one element into a flat map of
normalized CSS declarations keyed by snake_case property name. Extractors may
be synchronous or return an awaitable; the tree walker handles both.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable
from typing import Protocol

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)

ExtractedStyles = dict[str, str]

_DECLARATION_RE = re.compile(r"\s*([-a-zA-Z]+)\s*:\s*([^;]+?)\s*(?:;|$)")
_PIXEL_RE = re.compile(r"^\s*(-?\d*\.?\d+)\s*(px|em|rem|pt|%)?\s*$", re.IGNORECASE)

BASE_FONT_SIZE_PX = 16.0

_BOX_SIDES = ("top", "right", "bottom", "left")

# Presentational attributes used when no inline declaration covers them.
_LEGACY_ATTRIBUTES = {
    "width": "width",
    "height": "height",
    "bgcolor": "background_color",
    "align": "text_align",
    "color": "color",
}


class StyleExtractionError(Exception):
    """Raised when styles cannot be read from an element's markup."""

    def __init__(self, message: str, markup: str | None = None) -> None:
        self.markup = markup
        super().__init__(message)


class StyleExtractor(Protocol):
    """Anything that can turn element markup into extracted styles."""

    def extract(self, markup: str) -> ExtractedStyles | Awaitable[ExtractedStyles]: ...


def normalize_property(name: str) -> str:
    """Convert ``background-color`` or ``backgroundColor`` to ``background_color``."""
    name = name.strip()
    name = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name)
    return name.replace("-", "_").lower()


def parse_pixels(value: str | None) -> float:
    """
    Read a CSS length as pixels.

    Unitless and ``px`` values are taken as-is, ``em``/``rem`` scale by a 16px
    base and ``pt`` converts at 4/3. Percentages and anything unparseable
    return 0.0.
    """
    if not value:
        return 0.0
    first = value.strip().split()[0] if value.strip() else ""
    match = _PIXEL_RE.match(first)
    if not match:
        return 0.0
    number = float(match.group(1))
    unit = (match.group(2) or "px").lower()
    if unit in ("em", "rem"):
        return number * BASE_FONT_SIZE_PX
    if unit == "pt":
        return number * 4 / 3
    if unit == "%":
        return 0.0
    return number


def parse_declarations(style: str) -> ExtractedStyles:
    """Parse a ``style`` attribute body into normalized declarations."""
    styles: ExtractedStyles = {}
    for match in _DECLARATION_RE.finditer(style):
        prop = normalize_property(match.group(1))
        value = re.sub(r"\s*!important\s*$", "", match.group(2), flags=re.IGNORECASE)
        if value:
            styles[prop] = value
    _expand_box_shorthand(styles, "padding")
    _expand_box_shorthand(styles, "margin")
    if "border_radius" in styles and "border_top_left_radius" not in styles:
        styles["border_top_left_radius"] = styles["border_radius"].split()[0]
    return styles


def _expand_box_shorthand(styles: ExtractedStyles, prop: str) -> None:
    value = styles.get(prop)
    if not value:
        return
    parts = value.split()
    if len(parts) == 1:
        sides = parts * 4
    elif len(parts) == 2:
        sides = [parts[0], parts[1], parts[0], parts[1]]
    elif len(parts) == 3:
        sides = [parts[0], parts[1], parts[2], parts[1]]
    else:
        sides = parts[:4]
    for side, side_value in zip(_BOX_SIDES, sides):
        styles.setdefault(f"{prop}_{side}", side_value)


class InlineStyleExtractor:
    """
    Default extractor reading inline ``style`` attributes.

    Only the root element of the markup is inspected. Inline declarations take
    precedence over legacy presentational attributes.
    """

    def __init__(self, parser: str = "html.parser") -> None:
        self._parser = parser
        self._log = logger.bind(component="inline_style_extractor")

    def extract(self, markup: str) -> ExtractedStyles:
        """
        Extract styles from the first element in ``markup``.

        Args:
            markup: Outer HTML of one element

        Returns:
            Normalized declarations

        Raises:
            StyleExtractionError: If the markup holds no element
        """
        soup = BeautifulSoup(markup, self._parser)
        root = next((c for c in soup.children if isinstance(c, Tag)), None)
        if root is None:
            raise StyleExtractionError("Markup contains no element", markup=markup[:200])

        style_attr = root.get("style") or ""
        if isinstance(style_attr, list):
            style_attr = " ".join(style_attr)
        styles = parse_declarations(style_attr)

        for attr, prop in _LEGACY_ATTRIBUTES.items():
            value = root.get(attr)
            if isinstance(value, str) and value.strip() and prop not in styles:
                styles[prop] = value.strip() + ("px" if value.strip().isdigit() else "")

        return styles
