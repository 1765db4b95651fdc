"""
Content, commerce, media and data-display patterns.
"""

from __future__ import annotations

import re

from pagelens.dom import (
    DOMNode,
    any_of,
    attr_contains,
    class_contains,
    role_is,
    tag_in,
)
from pagelens.recognizer.models import ComponentType as T
from pagelens.recognizer.patterns.base import (
    CURRENCY_RE,
    RecognitionPattern,
    count,
    direct_children,
    has,
    is_button_like,
    is_heading,
    is_link,
    is_price,
    pattern,
)
from pagelens.styles import ExtractedStyles

SOCIAL_HOSTS = re.compile(
    r"facebook|twitter|x\.com|linkedin|instagram|pinterest|youtube|tiktok|whatsapp|telegram",
    re.IGNORECASE,
)
_STARS_RE = re.compile(r"[★☆✩✭]")
_PAGE_NUMBER_RE = re.compile(r"^\d+$")
_PREV_NEXT_RE = re.compile(r"prev|next|«|»|‹|›", re.IGNORECASE)


def _social_links(el: DOMNode) -> list[DOMNode]:
    return [a for a in el.find_descendants(is_link) if SOCIAL_HOSTS.search(a.get("href"))]


def _priced_items(el: DOMNode) -> int:
    items = direct_children(el, tag_in("li", "dt", "dd", "div", "tr"))
    return sum(1 for item in items if CURRENCY_RE.search(item.text))


def _has_icon(el: DOMNode) -> bool:
    return has(
        el,
        any_of(
            lambda n: n.tag_name == "i" and class_contains("fa-", "icon")(n),
            tag_in("svg"),
            class_contains("icon"),
            lambda n: n.tag_name == "img" and "icon" in n.get("src").lower(),
        ),
    )


# ============================================================================
# ICON BOX / FEATURE BOX
# ============================================================================

ICON_BOX_PATTERNS: list[RecognitionPattern] = [
    pattern(T.ICON_BOX, 90, 85, classes=["icon-box", "iconbox", "feature-box"]),
]

FEATURE_BOX_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.FEATURE_BOX, 85, 80,
        classes=["feature", "service", "benefit"],
        css=lambda s, el: _has_icon(el) and has(el, any_of(tag_in("h3", "h4"), class_contains("title"))),
    ),
]

# ============================================================================
# STAR RATING
# ============================================================================


def _star_marks(styles: ExtractedStyles, el: DOMNode) -> bool:
    return count(el, class_contains("star")) >= 3 or len(_STARS_RE.findall(el.text)) >= 3


STAR_RATING_PATTERNS: list[RecognitionPattern] = [
    pattern(T.STAR_RATING, 90, 85, classes=["star-rating", "rating", "stars"], css=_star_marks),
    pattern(T.STAR_RATING, 85, 80, content=r"^[★☆✩✭\s]{3,}$"),
    pattern(
        T.STAR_RATING, 85, 80,
        role="img",
        css=lambda s, el: bool(re.search(r"rat(ed|ing)|out of 5|stars", el.get("aria-label"), re.I)),
    ),
]

# ============================================================================
# PRICING
# ============================================================================


def _plans_with_prices(styles: ExtractedStyles, el: DOMNode) -> bool:
    has_prices = has(el, is_price) or bool(CURRENCY_RE.search(el.text))
    return has_prices and count(el, class_contains("plan", "tier")) >= 2


PRICING_TABLE_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.PRICING_TABLE, 90, 85,
        classes=["pricing", "price-table", "plan", "package"],
        css=lambda s, el: has(el, is_price) and has(el, any_of(tag_in("ul"), class_contains("feature"))),
    ),
    pattern(T.PRICING_TABLE, 80, 75, css=_plans_with_prices),
]

PRICE_LIST_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.PRICE_LIST, 95, 90,
        tags=["ul", "ol", "dl"],
        classes=["price-list", "price-menu", "menu-list", "pricing-list"],
        css=lambda s, el: _priced_items(el) >= 2,
        content=CURRENCY_RE,
    ),
    pattern(
        T.PRICE_LIST, 90, 85,
        classes=["price-list", "price-menu", "menu-list", "pricing-list"],
        css=lambda s, el: _priced_items(el) >= 2,
    ),
]

# ============================================================================
# TESTIMONIAL / BLOCKQUOTE
# ============================================================================

TESTIMONIAL_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.TESTIMONIAL, 85, 80,
        classes=["testimonial", "review", "quote", "feedback"],
        css=lambda s, el: has(el, any_of(tag_in("blockquote"), class_contains("quote", "author", "name"))),
    ),
    pattern(
        T.TESTIMONIAL, 80, 75,
        tags=["blockquote"],
        css=lambda s, el: has(el, tag_in("cite")) and has(el, class_contains("rating", "star")),
    ),
]

BLOCKQUOTE_PATTERNS: list[RecognitionPattern] = [
    pattern(T.BLOCKQUOTE, 95, 90, tags=["blockquote"]),
    pattern(
        T.BLOCKQUOTE, 80, 75,
        classes=["quote", "pullquote", "blockquote"],
        css=lambda s, el: has(el, any_of(tag_in("cite", "footer"), class_contains("author")))
        or bool(re.match(r"^[\"“«]", el.text)),
    ),
]

CODE_BLOCK_PATTERNS: list[RecognitionPattern] = [
    pattern(T.CODE_BLOCK, 95, 90, tags=["pre"], css=lambda s, el: has(el, tag_in("code"))),
    pattern(
        T.CODE_BLOCK, 80, 75,
        tags=["code"],
        css=lambda s, el: s.get("display") == "block" or "\n" in el.text,
    ),
    pattern(T.CODE_BLOCK, 90, 85, classes=["highlight", "prism", "hljs", "syntax", "code-block"]),
]

# ============================================================================
# CALL TO ACTION
# ============================================================================


def _cta_copy(styles: ExtractedStyles, el: DOMNode) -> bool:
    hints = re.search(r"get started|sign up|subscribe|free trial|join|buy now|contact us", el.text, re.I)
    return bool(hints) and has(el, is_button_like) and len(el.text) < 400


CTA_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.CTA, 90, 85,
        classes=["cta", "call-to-action", "banner"],
        css=lambda s, el: has(el, tag_in("h1", "h2", "h3")) and has(el, is_button_like),
    ),
    pattern(T.CTA, 80, 75, css=_cta_copy),
]

# ============================================================================
# PEOPLE / POSTS / PRODUCTS
# ============================================================================


def _team_member(styles: ExtractedStyles, el: DOMNode) -> bool:
    has_name = has(el, any_of(class_contains("name"), tag_in("h3", "h4")))
    has_role = has(el, class_contains("role", "title", "position", "job"))
    return has(el, tag_in("img")) and has_name and has_role


def _blog_card(styles: ExtractedStyles, el: DOMNode) -> bool:
    has_title = has(el, any_of(tag_in("h2", "h3"), class_contains("title")))
    has_date = has(el, any_of(tag_in("time"), class_contains("date")))
    has_excerpt = has(el, any_of(class_contains("excerpt", "summary"), tag_in("p")))
    return has_title and (has_date or has_excerpt)


def _product_card(styles: ExtractedStyles, el: DOMNode) -> bool:
    has_title = has(el, any_of(tag_in("h3", "h4"), class_contains("title", "name")))
    return has(el, tag_in("img")) and has(el, is_price) and has_title


def _priced_with_cart(styles: ExtractedStyles, el: DOMNode) -> bool:
    add_to_cart = has(el, any_of(class_contains("add-to-cart", "add_to_cart"), tag_in("button")))
    return has(el, is_price) and add_to_cart and has(el, tag_in("img"))


def _is_post(node: DOMNode) -> bool:
    return node.tag_name == "article" or class_contains("post", "entry")(node)


TEAM_MEMBER_PATTERNS: list[RecognitionPattern] = [
    pattern(T.TEAM_MEMBER, 85, 80, classes=["team", "member", "staff", "profile"], css=_team_member),
]

BLOG_CARD_PATTERNS: list[RecognitionPattern] = [
    pattern(T.BLOG_CARD, 85, 80, classes=["post", "article", "blog", "entry"], css=_blog_card),
    pattern(
        T.BLOG_CARD, 80, 75,
        tags=["article"],
        css=lambda s, el: has(el, is_heading) and has(el, tag_in("time")),
    ),
]

PRODUCT_CARD_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.PRODUCT_CARD, 90, 85,
        classes=["product", "woocommerce", "shop-item"],
        css=_product_card,
    ),
    pattern(T.PRODUCT_CARD, 85, 80, css=_priced_with_cart),
]

POSTS_GRID_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.POSTS_GRID, 90, 85,
        classes=["posts-grid", "post-grid", "blog-grid", "posts-list", "articles"],
        css=lambda s, el: len(direct_children(el, _is_post)) >= 2,
    ),
    pattern(T.POSTS_GRID, 80, 75, css=lambda s, el: len(direct_children(el, tag_in("article"))) >= 3),
]

# ============================================================================
# MEDIA AND EMBEDS
# ============================================================================


def _embedded_video(styles: ExtractedStyles, el: DOMNode) -> bool:
    if el.tag_name == "video":
        return True
    return bool(re.search(r"youtube|vimeo|dailymotion|wistia", el.get("src"), re.I))


VIDEO_PATTERNS: list[RecognitionPattern] = [
    pattern(T.VIDEO, 95, 90, tags=["video", "iframe"], css=_embedded_video),
    pattern(T.VIDEO, 85, 80, classes=["video", "youtube", "vimeo", "video-wrapper", "embed-responsive"]),
]

MAPS_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.GOOGLE_MAPS, 95, 95,
        tags=["iframe"],
        css=lambda s, el: bool(re.search(r"maps\.google|google\.com/maps", el.get("src"), re.I)),
    ),
    pattern(T.GOOGLE_MAPS, 80, 75, classes=["google-map", "gmap", "map-container", "map-embed"]),
]

SOCIAL_FEED_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.SOCIAL_FEED, 90, 85,
        classes=["twitter-feed", "instagram-feed", "facebook-feed", "social-feed"],
    ),
    pattern(
        T.SOCIAL_FEED, 85, 80,
        tags=["iframe"],
        css=lambda s, el: bool(re.search(r"twitter|instagram|facebook", el.get("src"), re.I)),
    ),
]

# ============================================================================
# NAVIGATION AIDS
# ============================================================================


def _separated_links(styles: ExtractedStyles, el: DOMNode) -> bool:
    separators = bool(re.search(r"[/>›»]", el.text)) or has(el, class_contains("separator"))
    return count(el, is_link) >= 2 and separators


def _numbered_pages(styles: ExtractedStyles, el: DOMNode) -> bool:
    controls = el.find_descendants(any_of(is_link, tag_in("button")))
    numbers = sum(1 for c in controls if _PAGE_NUMBER_RE.match(c.text))
    prev_next = any(
        _PREV_NEXT_RE.search(c.text + " " + " ".join(c.class_names) + " " + c.get("rel"))
        for c in controls
    )
    return numbers >= 2 and prev_next


BREADCRUMBS_PATTERNS: list[RecognitionPattern] = [
    pattern(T.BREADCRUMBS, 95, 90, role="navigation", classes=["breadcrumb"]),
    pattern(T.BREADCRUMBS, 90, 85, classes=["breadcrumb", "breadcrumbs", "crumbs"]),
    pattern(
        T.BREADCRUMBS, 90, 85,
        css=lambda s, el: "breadcrumb" in el.get("aria-label").lower(),
    ),
    pattern(T.BREADCRUMBS, 80, 75, tags=["ol", "ul", "nav", "p"], css=_separated_links),
]

PAGINATION_PATTERNS: list[RecognitionPattern] = [
    pattern(T.PAGINATION, 95, 90, role="navigation", classes=["pagination"]),
    pattern(T.PAGINATION, 90, 85, classes=["pagination", "pager", "page-numbers"]),
    pattern(T.PAGINATION, 85, 80, css=_numbered_pages),
]

# ============================================================================
# DATA DISPLAY
# ============================================================================

TABLE_PATTERNS: list[RecognitionPattern] = [
    pattern(T.TABLE, 95, 90, tags=["table"]),
    pattern(T.TABLE, 90, 85, role="table"),
    pattern(T.TABLE, 90, 85, role="grid"),
    pattern(
        T.TABLE, 80, 75,
        classes=["table", "data-table", "datagrid"],
        css=lambda s, el: count(el, any_of(role_is("row"), tag_in("tr"), class_contains("row"))) >= 2,
    ),
]

LIST_PATTERNS: list[RecognitionPattern] = [
    pattern(T.LIST, 90, 80, tags=["ul", "ol"], css=lambda s, el: len(direct_children(el, tag_in("li"))) >= 2),
    pattern(T.LIST, 90, 80, role="list"),
    pattern(
        T.LIST, 75, 70,
        classes=["list", "checklist", "feature-list"],
        css=lambda s, el: count(el, any_of(role_is("listitem"), class_contains("item"))) >= 2,
    ),
    pattern(T.LIST, 85, 75, tags=["dl"], css=lambda s, el: len(direct_children(el, tag_in("dt"))) >= 2),
]


def _bar_width(styles: ExtractedStyles, el: DOMNode) -> bool:
    return has(el, lambda n: "width" in n.get("style") and "%" in n.get("style"))


PROGRESS_BAR_PATTERNS: list[RecognitionPattern] = [
    pattern(T.PROGRESS_BAR, 95, 95, tags=["progress", "meter"]),
    pattern(T.PROGRESS_BAR, 95, 95, role="progressbar"),
    pattern(
        T.PROGRESS_BAR, 85, 80,
        classes=["progress", "progress-bar", "skill-bar", "loading"],
        css=_bar_width,
    ),
]

COUNTER_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.COUNTER, 85, 80,
        classes=["counter", "count-up", "odometer", "stat-number", "number-box"],
        content=r"^\s*[\d.,]+\s*[+%kKmM]?\s*",
    ),
    pattern(
        T.COUNTER, 85, 80,
        css=lambda s, el: any(name in el.attributes for name in ("data-count", "data-to", "data-target"))
        and bool(re.match(r"^\s*[\d.,]+", el.text)),
    ),
]


def _time_units(styles: ExtractedStyles, el: DOMNode) -> bool:
    present = [u for u in ("days", "hours", "minutes", "seconds") if has(el, class_contains(u))]
    return len(present) >= 2


COUNTDOWN_PATTERNS: list[RecognitionPattern] = [
    pattern(T.COUNTDOWN, 90, 85, classes=["countdown", "timer", "count-down"]),
    pattern(T.COUNTDOWN, 85, 80, css=_time_units),
]

# ============================================================================
# SOCIAL
# ============================================================================


def _share_links(styles: ExtractedStyles, el: DOMNode) -> bool:
    return sum(1 for a in _social_links(el) if "share" in a.get("href").lower()) >= 1


SOCIAL_ICONS_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.SOCIAL_ICONS, 90, 85,
        classes=["social-icons", "social-links", "social-media", "socials"],
        css=lambda s, el: len(_social_links(el)) >= 2,
    ),
    pattern(
        T.SOCIAL_ICONS, 80, 75,
        css=lambda s, el: len(_social_links(el)) >= 3 and not _share_links(s, el),
    ),
]

SOCIAL_SHARE_PATTERNS: list[RecognitionPattern] = [
    pattern(
        T.SOCIAL_SHARE, 90, 85,
        classes=["share", "social-share", "share-buttons"],
        css=lambda s, el: len(_social_links(el)) >= 2,
    ),
    pattern(T.SOCIAL_SHARE, 85, 80, classes=["addthis", "sharethis"], css=_share_links),
    pattern(T.SOCIAL_SHARE, 85, 80, css=lambda s, el: count(el, attr_contains("href", "/share")) >= 2),
]

CONTENT_PATTERNS: list[RecognitionPattern] = [
    *ICON_BOX_PATTERNS,
    *STAR_RATING_PATTERNS,
    *PRICING_TABLE_PATTERNS,
    *PRICE_LIST_PATTERNS,
    *TESTIMONIAL_PATTERNS,
    *CTA_PATTERNS,
    *FEATURE_BOX_PATTERNS,
    *TEAM_MEMBER_PATTERNS,
    *BLOG_CARD_PATTERNS,
    *PRODUCT_CARD_PATTERNS,
    *POSTS_GRID_PATTERNS,
    *VIDEO_PATTERNS,
    *MAPS_PATTERNS,
    *SOCIAL_FEED_PATTERNS,
    *BREADCRUMBS_PATTERNS,
    *PAGINATION_PATTERNS,
    *TABLE_PATTERNS,
    *LIST_PATTERNS,
    *PROGRESS_BAR_PATTERNS,
    *COUNTER_PATTERNS,
    *COUNTDOWN_PATTERNS,
    *BLOCKQUOTE_PATTERNS,
    *CODE_BLOCK_PATTERNS,
    *SOCIAL_ICONS_PATTERNS,
    *SOCIAL_SHARE_PATTERNS,
]
