"""
Scores a single pattern against a single element.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from pagelens.dom import DOMNode
from pagelens.recognizer.models import ElementContext
from pagelens.recognizer.patterns.base import RecognitionPattern
from pagelens.styles import ExtractedStyles


@dataclass(frozen=True)
class ElementData:
    """Everything the matcher may look at for one element."""

    node: DOMNode
    styles: ExtractedStyles = field(default_factory=dict)
    context: ElementContext = field(default_factory=ElementContext)

    @property
    def tag_name(self) -> str:
        return self.node.tag_name

    @property
    def text(self) -> str:
        return self.node.text


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _classes_match(pattern: RecognitionPattern, node: DOMNode) -> bool:
    keywords = [k.lower() for k in pattern.class_keywords or ()]
    return any(kw in cls.lower() for cls in node.class_names for kw in keywords)


def _context_matches(pattern: RecognitionPattern, context: ElementContext) -> bool:
    requirements = pattern.context_requirements or {}
    return all(getattr(context, key) == value for key, value in requirements.items())


def match_pattern(pattern: RecognitionPattern, data: ElementData) -> int:
    """
    Score how well an element agrees with a pattern.

    A listed tag is a hard gate: any other tag scores 0 whatever the other
    signals say. Every specified dimension counts as one check and the
    score is the base confidence scaled by the fraction of checks passed.

    Args:
        pattern: Pattern to evaluate
        data: Element, its styles and its context

    Returns:
        Confidence between 0 and the pattern's base confidence
    """
    node = data.node
    total_checks = 0
    match_count = 0

    if pattern.tag_names is not None:
        if node.tag_name not in pattern.tag_names:
            return 0
        total_checks += 1
        match_count += 1

    if pattern.class_keywords is not None:
        total_checks += 1
        if _classes_match(pattern, node):
            match_count += 1

    if pattern.css is not None:
        total_checks += 1
        if pattern.css.evaluate(data.styles, node):
            match_count += 1

    if pattern.content is not None:
        total_checks += 1
        if pattern.content.search(data.text):
            match_count += 1

    if pattern.aria_role is not None:
        total_checks += 1
        if node.get("role").strip().lower() == pattern.aria_role.lower():
            match_count += 1

    if pattern.context_requirements is not None:
        total_checks += 1
        if _context_matches(pattern, data.context):
            match_count += 1

    if total_checks == 0:
        return 0
    return _round_half_up(pattern.base_confidence * match_count / total_checks)
