"""
Component recognition module.

Pattern registry, matcher, best-match recognizer, confidence booster and
cross validator. Deterministic and rule-based: every decision is traceable
to a named pattern or rule.
"""

from pagelens.recognizer.booster import BoostRule, ConfidenceBooster, boost_confidence
from pagelens.recognizer.matcher import ElementData, match_pattern
from pagelens.recognizer.models import (
    Adjustment,
    ComponentType,
    ElementContext,
    RecognitionResult,
    Stage,
)
from pagelens.recognizer.recognizer import (
    ComponentRecognizer,
    get_recognizer,
    recognize_component,
)
from pagelens.recognizer.registry import (
    PatternDefinitionError,
    PatternRegistry,
    default_registry,
)
from pagelens.recognizer.validator import (
    CrossValidator,
    Finding,
    ValidationContext,
    ValidationRule,
    build_validation_context,
    validate_with_context,
)

__all__ = [
    # Models
    "Adjustment",
    "ComponentType",
    "ElementContext",
    "RecognitionResult",
    "Stage",
    # Registry & matching
    "ElementData",
    "PatternDefinitionError",
    "PatternRegistry",
    "default_registry",
    "match_pattern",
    # Recognition
    "ComponentRecognizer",
    "get_recognizer",
    "recognize_component",
    # Post-processing
    "BoostRule",
    "ConfidenceBooster",
    "CrossValidator",
    "Finding",
    "ValidationContext",
    "ValidationRule",
    "boost_confidence",
    "build_validation_context",
    "validate_with_context",
]
