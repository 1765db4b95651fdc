"""
Interactive widget patterns.

Modals, accordions, tabs, toggles, carousels, galleries, video playlists,
alerts and flip boxes.
"""

from __future__ import annotations

from pagelens.dom import (
    DOMNode,
    any_of,
    attr_contains,
    class_contains,
    has_attr,
    role_is,
    tag_in,
)
from pagelens.recognizer.models import ComponentType as T
from pagelens.recognizer.patterns.base import (
    RecognitionPattern,
    count,
    has,
    is_image,
    pattern,
)
from pagelens.styles import ExtractedStyles

_VIDEO_SOURCES = ("youtube", "vimeo", "dailymotion", "wistia")


def _is_video(node: DOMNode) -> bool:
    if node.tag_name == "video":
        return True
    src = node.get("src").lower()
    return node.tag_name == "iframe" and any(host in src for host in _VIDEO_SOURCES)


# ============================================================================
# MODAL
# ============================================================================

MODAL_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.MODAL, 85, 85,
        classes=["modal", "popup", "dialog", "overlay", "lightbox"],
        css=lambda s, el: s.get("position") in ("fixed", "absolute"),
    ),
    pattern(T.MODAL, 95, 95, role="dialog"),
    pattern(T.MODAL, 95, 95, role="alertdialog"),
    pattern(T.MODAL, 95, 90, tags=["dialog"]),
    pattern(T.MODAL, 95, 90, classes=["MuiModal", "modal-", "fancybox", "magnific-popup"]),
]

# ============================================================================
# ACCORDION
# ============================================================================


def _accordion_sections(styles: ExtractedStyles, el: DOMNode) -> bool:
    sections = count(el, class_contains("item", "panel", "section"))
    headers = count(el, class_contains("header", "title", "trigger"))
    return sections >= 2 and headers >= 2


ACCORDION_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.ACCORDION, 90, 85,
        classes=["accordion", "collapse", "expandable", "faq"],
        css=_accordion_sections,
    ),
    pattern(
        T.ACCORDION, 95, 90,
        role="tablist",
        css=lambda s, el: count(el, has_attr("aria-expanded")) >= 2,
    ),
    pattern(T.ACCORDION, 95, 90, classes=["MuiAccordion", "accordion-", "collapse-", "panel-group"]),
    pattern(T.ACCORDION, 85, 80, css=lambda s, el: count(el, tag_in("details")) >= 2),
]

# ============================================================================
# TABS
# ============================================================================


def _tab_structure(styles: ExtractedStyles, el: DOMNode) -> bool:
    tab_list = has(el, any_of(role_is("tablist"), class_contains("tab-list")))
    panels = count(el, any_of(role_is("tabpanel"), class_contains("tab-panel", "tab-pane")))
    return tab_list and panels >= 2


TABS_PATTERNS: list[RecognitionPattern] = [
    pattern(T.TABS, 90, 85, classes=["tabs", "tab-", "tabbed"], css=_tab_structure),
    pattern(T.TABS, 95, 90, role="tablist"),
    pattern(T.TABS, 95, 90, classes=["nav-tabs", "tab-container", "MuiTabs"]),
]

# ============================================================================
# TOGGLE
# ============================================================================

TOGGLE_PATTERNS: list[RecognitionPattern] = [
    pattern(T.TOGGLE, 90, 85, tags=["details"]),
    pattern(
        T.TOGGLE, 85, 80,
        classes=["toggle", "collapsible", "expander", "read-more"],
        css=lambda s, el: has(el, any_of(has_attr("aria-expanded"), tag_in("summary"))),
    ),
]

# ============================================================================
# CAROUSEL
# ============================================================================


def _slides_with_controls(styles: ExtractedStyles, el: DOMNode) -> bool:
    slides = count(el, class_contains("slide", "item"))
    controls = count(el, class_contains("prev", "next"))
    return slides >= 2 and controls >= 2


CAROUSEL_PATTERNS: list[RecognitionPattern] = [
    pattern(T.CAROUSEL, 90, 85, classes=["carousel", "slider", "slideshow", "swiper", "slick"]),
    pattern(T.CAROUSEL, 85, 80, css=_slides_with_controls),
    pattern(T.CAROUSEL, 95, 90, classes=["owl-carousel", "flickity", "glide", "splide"]),
    pattern(T.CAROUSEL, 85, 80, css=lambda s, el: attr_contains("aria-roledescription", "carousel")(el)),
]

# ============================================================================
# GALLERY
# ============================================================================


def _image_grid(styles: ExtractedStyles, el: DOMNode) -> bool:
    is_grid = styles.get("display") in ("grid", "inline-grid") or (
        styles.get("display") == "flex" and styles.get("flex_wrap") == "wrap"
    )
    return count(el, is_image) >= 4 and is_grid


GALLERY_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.GALLERY, 85, 80,
        classes=["gallery", "photo-grid", "image-grid", "masonry", "portfolio"],
        css=lambda s, el: count(el, is_image) >= 4,
    ),
    pattern(T.GALLERY, 80, 75, css=_image_grid),
    pattern(T.GALLERY, 95, 90, classes=["lightgallery", "photoswipe", "justified-gallery"]),
]

IMAGE_GALLERY_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.IMAGE_GALLERY, 90, 85,
        classes=["image-gallery", "photo-gallery", "img-gallery", "gallery-images"],
        css=lambda s, el: count(el, is_image) >= 3,
    ),
    pattern(
        T.IMAGE_GALLERY, 85, 80,
        css=lambda s, el: count(el, tag_in("figure")) >= 3
        and count(el, is_image) >= 3
        and has(el, any_of(has_attr("data-lightbox"), has_attr("data-fancybox"))),
    ),
]

# ============================================================================
# VIDEO PLAYLIST
# ============================================================================

VIDEO_PLAYLIST_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.VIDEO_PLAYLIST, 90, 85,
        classes=["playlist", "video-list", "video-playlist", "video-gallery"],
        css=lambda s, el: count(el, _is_video) >= 2,
    ),
    pattern(T.VIDEO_PLAYLIST, 80, 75, css=lambda s, el: count(el, _is_video) >= 3),
]

# ============================================================================
# ALERT
# ============================================================================

ALERT_PATTERNS: list[RecognitionPattern] = [
    pattern(T.ALERT, 95, 90, role="alert"),
    pattern(T.ALERT, 85, 80, classes=["alert", "notice", "notification", "toast", "callout"]),
]

# ============================================================================
# FLIP BOX
# ============================================================================

FLIP_BOX_PATTERNS: list[RecognitionPattern] = [
    pattern(T.FLIP_BOX, 90, 85, classes=["flip-box", "flipbox", "flip-card"]),
    pattern(
        T.FLIP_BOX, 85, 80,
        classes=["flip"],
        css=lambda s, el: has(el, class_contains("front")) and has(el, class_contains("back")),
    ),
]

INTERACTIVE_PATTERNS: list[RecognitionPattern] = [
    *MODAL_PATTERNS,
    *ACCORDION_PATTERNS,
    *TABS_PATTERNS,
    *TOGGLE_PATTERNS,
    *CAROUSEL_PATTERNS,
    *GALLERY_PATTERNS,
    *IMAGE_GALLERY_PATTERNS,
    *VIDEO_PLAYLIST_PATTERNS,
    *ALERT_PATTERNS,
    *FLIP_BOX_PATTERNS,
]
