"""
Built-in recognition patterns.

Pattern families are registered in a fixed order: specialized layout and
form structures first, basic elements last. The registry sorts by priority
with a stable sort, so this order only decides ties.
"""

from pagelens.recognizer.patterns.base import (
    CSSPredicate,
    Custom,
    Declarative,
    RecognitionPattern,
    StylePredicate,
    pattern,
)
from pagelens.recognizer.patterns.basic import BASIC_PATTERNS
from pagelens.recognizer.patterns.content import CONTENT_PATTERNS
from pagelens.recognizer.patterns.forms import FORM_COMPONENT_PATTERNS
from pagelens.recognizer.patterns.interactive import INTERACTIVE_PATTERNS
from pagelens.recognizer.patterns.layout import LAYOUT_PATTERNS

ALL_PATTERN_GROUPS: dict[str, list[RecognitionPattern]] = {
    "layout": LAYOUT_PATTERNS,
    "forms": FORM_COMPONENT_PATTERNS,
    "interactive": INTERACTIVE_PATTERNS,
    "content": CONTENT_PATTERNS,
    "basic": BASIC_PATTERNS,
}

__all__ = [
    "ALL_PATTERN_GROUPS",
    "BASIC_PATTERNS",
    "CONTENT_PATTERNS",
    "CSSPredicate",
    "Custom",
    "Declarative",
    "FORM_COMPONENT_PATTERNS",
    "INTERACTIVE_PATTERNS",
    "LAYOUT_PATTERNS",
    "RecognitionPattern",
    "StylePredicate",
    "pattern",
]
