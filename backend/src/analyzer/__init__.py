"""
Document analysis module.

Walks a parsed document, computes structural context for every element and
attaches a recognition result, producing an analyzed tree that mirrors the DOM.
"""

from pagelens.analyzer.context import assign_sibling_types, determine_context
from pagelens.analyzer.models import (
    AnalyzedElement,
    Diagnostic,
    DocumentAnalysis,
    Position,
)
from pagelens.analyzer.walker import TreeWalker, analyze_html

__all__ = [
    "AnalyzedElement",
    "Diagnostic",
    "DocumentAnalysis",
    "Position",
    "TreeWalker",
    "analyze_html",
    "assign_sibling_types",
    "determine_context",
]
