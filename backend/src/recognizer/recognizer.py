"""
Component recognizer.

Runs the best-match loop over the pattern registry, then the confidence
booster and the cross validator, and returns a fully adjusted result.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from pagelens.config import RecognizerConfig
from pagelens.dom import DOMNode
from pagelens.recognizer.booster import ConfidenceBooster
from pagelens.recognizer.matcher import ElementData, match_pattern
from pagelens.recognizer.models import (
    ComponentType,
    ElementContext,
    RecognitionResult,
)
from pagelens.recognizer.patterns.base import RecognitionPattern
from pagelens.recognizer.registry import PatternRegistry, default_registry
from pagelens.recognizer.validator import CrossValidator, build_validation_context
from pagelens.styles import ExtractedStyles

logger = structlog.get_logger(__name__)


class ComponentRecognizer:
    """
    Classifies single elements against a pattern registry.

    The recognizer holds only read-only state and may be shared between
    concurrent walks.
    """

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        config: RecognizerConfig | None = None,
        booster: ConfidenceBooster | None = None,
        validator: CrossValidator | None = None,
    ) -> None:
        self.config = config or RecognizerConfig()
        self.registry = registry if registry is not None else default_registry()
        self.booster = booster or ConfidenceBooster(
            review_threshold=self.config.manual_review_threshold,
        )
        self.validator = validator or CrossValidator(
            max_adjustment=self.config.max_validation_adjustment,
            review_threshold=self.config.manual_review_threshold,
        )
        self._log = logger.bind(component="component_recognizer")

    def best_match(self, data: ElementData) -> tuple[RecognitionPattern | None, int]:
        """
        Find the highest scoring pattern.

        Only a strictly greater score replaces the running best, so the
        earlier pattern in registry order wins a tie.

        Returns:
            Winning pattern (or None) and its score
        """
        best: RecognitionPattern | None = None
        best_score = 0
        for candidate in self.registry:
            score = match_pattern(candidate, data)
            if score > best_score:
                best, best_score = candidate, score
        return best, best_score

    def recognize_component(
        self,
        node: DOMNode,
        styles: ExtractedStyles | None = None,
        context: ElementContext | None = None,
        ancestor_types: Sequence[ComponentType] = (),
        prior_siblings: Sequence[tuple[DOMNode, RecognitionResult]] = (),
    ) -> RecognitionResult:
        """
        Classify one element.

        Args:
            node: Element to classify
            styles: Extracted styles (empty when omitted)
            context: Structural context (root context when omitted)
            ancestor_types: Finalized types of ancestors, nearest last
            prior_siblings: Preceding siblings with their finalized results

        Returns:
            Adjusted recognition result; ``unknown`` when nothing matches
        """
        styles = styles if styles is not None else {}
        context = context or ElementContext()

        winner, score = self.best_match(ElementData(node=node, styles=styles, context=context))
        if winner is None:
            return RecognitionResult.unknown()

        result = RecognitionResult.matched(
            winner.component_type,
            score,
            review_threshold=self.config.manual_review_threshold,
        )

        if self.config.enable_boosting:
            result = self.booster.boost(result, node, styles, context)

        if self.config.enable_cross_validation:
            vc = build_validation_context(node, styles, context, ancestor_types, prior_siblings)
            result = self.validator.validate(result, vc)

        if result.confidence == 0:
            self._log.debug(
                "Post-processing reduced match to zero",
                component_type=result.component_type.value,
            )
            return RecognitionResult.unknown(
                fallback_type=result.component_type,
                note=f"{result.component_type.value} match reduced to 0% by post-processing",
            )

        self._log.debug(
            "Recognized component",
            tag=node.tag_name,
            component_type=result.component_type.value,
            pattern=winner.describe(),
            confidence=result.confidence,
        )
        return result


_default_recognizer: ComponentRecognizer | None = None


def get_recognizer() -> ComponentRecognizer:
    """Shared recognizer with default configuration."""
    global _default_recognizer
    if _default_recognizer is None:
        _default_recognizer = ComponentRecognizer()
    return _default_recognizer


def recognize_component(
    node: DOMNode,
    styles: ExtractedStyles | None = None,
    context: ElementContext | None = None,
) -> RecognitionResult:
    """Classify one element with the default recognizer."""
    return get_recognizer().recognize_component(node, styles, context)
