"""
Core data model for component recognition.

Defines the closed set of component types, the structural context computed
for every element, and the auditable recognition result produced by the
matcher and refined by the booster and cross validator.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import StrEnum
from typing import Any

DEFAULT_REVIEW_THRESHOLD = 70
"""Confidence below which a result needs manual review."""

NO_MATCH_REASON = "No matching pattern found"

MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100


class ComponentType(StrEnum):
    """Semantic UI component labels."""

    # Basic
    BUTTON = "button"
    CTA_BUTTON = "cta-button"
    SUBMIT_BUTTON = "submit-button"
    LINK = "link"
    HEADING = "heading"
    TEXT = "text"
    PARAGRAPH = "paragraph"
    IMAGE = "image"
    VIDEO = "video"
    ICON = "icon"
    SPACER = "spacer"
    DIVIDER = "divider"

    # Layout
    CONTAINER = "container"
    SECTION = "section"
    COLUMN = "column"
    ROW = "row"
    GRID = "grid"
    CARD = "card"
    HERO = "hero"
    SIDEBAR = "sidebar"
    HEADER = "header"
    FOOTER = "footer"
    MENU = "menu"

    # Forms
    FORM = "form"
    INPUT = "input"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    RADIO_GROUP = "radio-group"
    FILE_UPLOAD = "file-upload"
    SEARCH_BAR = "search-bar"

    # Interactive
    ACCORDION = "accordion"
    TOGGLE = "toggle"
    TABS = "tabs"
    MODAL = "modal"
    CAROUSEL = "carousel"
    GALLERY = "gallery"
    IMAGE_GALLERY = "image-gallery"
    VIDEO_PLAYLIST = "video-playlist"
    ALERT = "alert"
    FLIP_BOX = "flip-box"

    # Content
    TESTIMONIAL = "testimonial"
    PRICING_TABLE = "pricing-table"
    PRICE_LIST = "price-list"
    PROGRESS_BAR = "progress-bar"
    COUNTER = "counter"
    COUNTDOWN = "countdown"
    STAR_RATING = "star-rating"
    SOCIAL_SHARE = "social-share"
    SOCIAL_ICONS = "social-icons"
    BREADCRUMBS = "breadcrumbs"
    PAGINATION = "pagination"
    TABLE = "table"
    LIST = "list"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "code-block"
    CTA = "cta"
    FEATURE_BOX = "feature-box"
    ICON_BOX = "icon-box"
    TEAM_MEMBER = "team-member"
    BLOG_CARD = "blog-card"
    PRODUCT_CARD = "product-card"
    POSTS_GRID = "posts-grid"
    GOOGLE_MAPS = "google-maps"
    SOCIAL_FEED = "social-feed"

    UNKNOWN = "unknown"


class Stage(StrEnum):
    """Post-processing pass that produced an adjustment."""

    BOOST = "boost"
    VALIDATION = "validation"


def clamp_confidence(value: float) -> int:
    """Clamp a raw score into the valid confidence range."""
    return int(max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, round(value))))


@dataclass(frozen=True)
class ElementContext:
    """Structural ancestry of an element, including its own contribution."""

    inside_hero: bool = False
    inside_form: bool = False
    inside_card: bool = False
    inside_nav: bool = False
    inside_header: bool = False
    inside_footer: bool = False
    inside_section: bool = False
    depth: int = 0
    sibling_types: tuple[ComponentType, ...] = ()
    parent_type: ComponentType | None = None

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "inside_hero": self.inside_hero,
            "inside_form": self.inside_form,
            "inside_card": self.inside_card,
            "inside_nav": self.inside_nav,
            "inside_header": self.inside_header,
            "inside_footer": self.inside_footer,
            "inside_section": self.inside_section,
            "depth": self.depth,
            "sibling_types": [t.value for t in self.sibling_types],
            "parent_type": self.parent_type.value if self.parent_type else None,
        }


@dataclass(frozen=True)
class Adjustment:
    """One named confidence change applied by a post-processing pass."""

    stage: Stage
    rule: str
    delta: int = 0


@dataclass(frozen=True)
class RecognitionResult:
    """
    Classification of one element.

    ``confidence`` is always ``base_confidence`` plus the deltas of every
    adjustment, clamped to [0, 100]. A pass replaces its own stage's
    adjustments when re-applied, so results never drift on repetition.
    """

    component_type: ComponentType
    confidence: int
    matched_patterns: tuple[ComponentType, ...] = ()
    manual_review_needed: bool = True
    base_confidence: int = 0
    base_reason: str = NO_MATCH_REASON
    adjustments: tuple[Adjustment, ...] = ()
    review_flags: tuple[str, ...] = ()
    fallback_type: ComponentType | None = None

    @classmethod
    def unknown(cls, fallback_type: ComponentType | None = None, note: str | None = None) -> RecognitionResult:
        reason = NO_MATCH_REASON if note is None else f"{NO_MATCH_REASON} ({note})"
        return cls(
            component_type=ComponentType.UNKNOWN,
            confidence=0,
            manual_review_needed=True,
            base_reason=reason,
            fallback_type=fallback_type,
        )

    @classmethod
    def matched(
        cls,
        component_type: ComponentType,
        confidence: int,
        review_threshold: int = DEFAULT_REVIEW_THRESHOLD,
    ) -> RecognitionResult:
        return cls(
            component_type=component_type,
            confidence=confidence,
            matched_patterns=(component_type,),
            manual_review_needed=confidence < review_threshold,
            base_confidence=confidence,
            base_reason=f"Matched {component_type.value} pattern with {confidence}% confidence",
        )

    @property
    def is_unknown(self) -> bool:
        return self.component_type is ComponentType.UNKNOWN

    @property
    def matched_type(self) -> ComponentType:
        """Type chosen by the matcher, before any validator retagging."""
        return self.matched_patterns[0] if self.matched_patterns else self.component_type

    @property
    def reason(self) -> str:
        parts = [self.base_reason]
        boosted = [a.rule for a in self.adjustments if a.stage is Stage.BOOST]
        validated = [a.rule for a in self.adjustments if a.stage is Stage.VALIDATION]
        if boosted:
            parts.append("Boosted: " + ", ".join(boosted))
        if validated:
            parts.append("Cross-validated: " + ", ".join(validated))
        return " + ".join(parts)

    def with_stage(
        self,
        stage: Stage,
        adjustments: tuple[Adjustment, ...] | list[Adjustment],
        review_threshold: int = DEFAULT_REVIEW_THRESHOLD,
        component_type: ComponentType | None = None,
        review_flags: tuple[str, ...] | None = None,
    ) -> RecognitionResult:
        """
        Replace one stage's adjustments and recompute derived fields.

        Args:
            stage: Pass whose previous adjustments are discarded
            adjustments: New adjustments for that pass
            review_threshold: Manual review threshold
            component_type: Optional replacement type
            review_flags: Optional replacement review flags

        Returns:
            New result; ``self`` is unchanged
        """
        merged = tuple(a for a in self.adjustments if a.stage is not stage) + tuple(adjustments)
        confidence = clamp_confidence(self.base_confidence + sum(a.delta for a in merged))
        flags = self.review_flags if review_flags is None else tuple(review_flags)
        return replace(
            self,
            component_type=component_type or self.component_type,
            confidence=confidence,
            adjustments=merged,
            review_flags=flags,
            manual_review_needed=confidence < review_threshold or bool(flags),
        )

    def stage_delta(self, stage: Stage) -> int:
        return sum(a.delta for a in self.adjustments if a.stage is stage)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "component_type": self.component_type.value,
            "confidence": self.confidence,
            "matched_patterns": [t.value for t in self.matched_patterns],
            "manual_review_needed": self.manual_review_needed,
            "reason": self.reason,
            "base_confidence": self.base_confidence,
            "adjustments": [
                {"stage": a.stage.value, "rule": a.rule, "delta": a.delta}
                for a in self.adjustments
            ],
            "review_flags": list(self.review_flags),
            "fallback_type": self.fallback_type.value if self.fallback_type else None,
        }
