"""
Immutable pattern registry.

The registry is built once, validated, sorted by priority (descending, stable)
and then only read. The default registry is memoized on first use.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache

import structlog

from pagelens.recognizer.models import ComponentType, ElementContext
from pagelens.recognizer.patterns import ALL_PATTERN_GROUPS, RecognitionPattern

logger = structlog.get_logger(__name__)


class PatternDefinitionError(Exception):
    """Raised when a pattern is defined incorrectly."""

    def __init__(
        self,
        message: str,
        component_type: ComponentType | None = None,
        field: str | None = None,
    ) -> None:
        self.component_type = component_type
        self.field = field
        super().__init__(message)


def validate_pattern(pattern: RecognitionPattern) -> None:
    """
    Check a pattern for definition errors.

    Raises:
        PatternDefinitionError: If the pattern cannot be evaluated safely
    """
    kind = pattern.component_type
    if not isinstance(kind, ComponentType) or kind is ComponentType.UNKNOWN:
        raise PatternDefinitionError(
            f"Pattern has invalid component type: {kind!r}", component_type=None
        )
    if not 0 <= pattern.base_confidence <= 100:
        raise PatternDefinitionError(
            f"Base confidence out of range: {pattern.base_confidence}",
            component_type=kind,
            field="base_confidence",
        )
    if not pattern.dimensions():
        raise PatternDefinitionError(
            f"Pattern for '{kind.value}' checks no signal", component_type=kind
        )
    if pattern.tag_names is not None and not pattern.tag_names:
        raise PatternDefinitionError(
            f"Pattern for '{kind.value}' has an empty tag list",
            component_type=kind,
            field="tag_names",
        )
    if pattern.class_keywords is not None and not pattern.class_keywords:
        raise PatternDefinitionError(
            f"Pattern for '{kind.value}' has an empty class keyword list",
            component_type=kind,
            field="class_keywords",
        )

    if pattern.context_requirements:
        known = ElementContext.field_names()
        for key in pattern.context_requirements:
            if key not in known:
                raise PatternDefinitionError(
                    f"Unknown context requirement '{key}' in '{kind.value}' pattern",
                    component_type=kind,
                    field=key,
                )


class PatternRegistry:
    """Priority-sorted, read-only sequence of recognition patterns."""

    __slots__ = ("_patterns",)

    def __init__(self, patterns: tuple[RecognitionPattern, ...]) -> None:
        self._patterns = patterns

    @classmethod
    def build(cls, patterns: Iterable[RecognitionPattern]) -> PatternRegistry:
        """
        Validate patterns and sort them by priority.

        Ties keep registration order.

        Args:
            patterns: Patterns in registration order

        Returns:
            A new registry

        Raises:
            PatternDefinitionError: If any pattern is invalid
        """
        registered = list(patterns)
        for p in registered:
            validate_pattern(p)
        ordered = tuple(sorted(registered, key=lambda p: -p.priority))
        logger.debug("Built pattern registry", patterns=len(ordered))
        return cls(ordered)

    @classmethod
    def from_groups(cls, groups: Mapping[str, Iterable[RecognitionPattern]]) -> PatternRegistry:
        return cls.build(p for group in groups.values() for p in group)

    @property
    def patterns(self) -> tuple[RecognitionPattern, ...]:
        return self._patterns

    def __iter__(self) -> Iterator[RecognitionPattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __getitem__(self, index: int) -> RecognitionPattern:
        return self._patterns[index]

    def for_type(self, component_type: ComponentType) -> list[RecognitionPattern]:
        """Patterns for one type, in priority order."""
        return [p for p in self._patterns if p.component_type is component_type]

    def component_types(self) -> list[ComponentType]:
        """Distinct registered types in order of first appearance."""
        seen: dict[ComponentType, None] = {}
        for p in self._patterns:
            seen.setdefault(p.component_type, None)
        return list(seen)


@lru_cache(maxsize=1)
def default_registry() -> PatternRegistry:
    """Registry of all built-in patterns, built on first use."""
    return PatternRegistry.from_groups(ALL_PATTERN_GROUPS)
