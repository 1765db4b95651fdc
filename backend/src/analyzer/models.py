"""
Analyzed tree models.

The walker produces one ``AnalyzedElement`` per DOM element, with children in
source order, and wraps the roots of a document in a ``DocumentAnalysis``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from pagelens.recognizer.models import ElementContext, RecognitionResult
from pagelens.styles import ExtractedStyles


@dataclass(frozen=True)
class Position:
    """Element box. Zero unless numeric size attributes are present."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for JSON serialization."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal problem recorded while analyzing one element."""

    stage: str
    message: str
    tag: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"stage": self.stage, "message": self.message, "tag": self.tag}


@dataclass
class AnalyzedElement:
    """One classified element and its classified children."""

    tag: str
    recognition: RecognitionResult
    context: ElementContext
    element_id: str | None = None
    classes: list[str] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    text_content: str = ""
    inner_html: str = ""
    styles: ExtractedStyles = field(default_factory=dict)
    children: list[AnalyzedElement] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def iter_tree(self) -> Iterator[AnalyzedElement]:
        """Yield this element and its descendants in pre-order."""
        stack: list[AnalyzedElement] = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def to_dict(self, include_children: bool = True) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "tag": self.tag,
            "id": self.element_id,
            "classes": list(self.classes),
            "attributes": dict(self.attributes),
            "text_content": self.text_content,
            "inner_html": self.inner_html,
            "styles": dict(self.styles),
            "context": self.context.to_dict(),
            "recognition": self.recognition.to_dict(),
            "position": self.position.to_dict(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
        if include_children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class DocumentAnalysis:
    """Analysis of a whole document."""

    roots: list[AnalyzedElement] = field(default_factory=list)
    duration_ms: float = 0.0

    def iter_elements(self) -> Iterator[AnalyzedElement]:
        """All analyzed elements in document pre-order."""
        for root in self.roots:
            yield from root.iter_tree()

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [d for element in self.iter_elements() for d in element.diagnostics]

    @property
    def total_elements(self) -> int:
        return sum(1 for _ in self.iter_elements())

    @property
    def recognized(self) -> int:
        return sum(1 for e in self.iter_elements() if not e.recognition.is_unknown)

    @property
    def unknown(self) -> int:
        return self.total_elements - self.recognized

    @property
    def manual_review(self) -> int:
        return sum(1 for e in self.iter_elements() if e.recognition.manual_review_needed)

    @property
    def average_confidence(self) -> float:
        scores = [e.recognition.confidence for e in self.iter_elements() if not e.recognition.is_unknown]
        if not scores:
            return 0.0
        return round(sum(scores) / len(scores), 2)

    def type_counts(self) -> dict[str, int]:
        counts = Counter(e.recognition.component_type.value for e in self.iter_elements())
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))

    def stats(self) -> dict[str, Any]:
        return {
            "total_elements": self.total_elements,
            "recognized": self.recognized,
            "unknown": self.unknown,
            "manual_review": self.manual_review,
            "average_confidence": self.average_confidence,
            "component_types": self.type_counts(),
            "diagnostics": len(self.diagnostics),
        }

    def to_dict(self, flat: bool = False) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        if flat:
            elements = [e.to_dict(include_children=False) for e in self.iter_elements()]
        else:
            elements = [root.to_dict() for root in self.roots]
        return {
            "elements": elements,
            "stats": self.stats(),
            "duration_ms": round(self.duration_ms, 2),
        }
