"""
PageLens UI component recognition.

Classifies every element of a scraped HTML document as a semantic UI
component with an explainable, rule-based confidence score and a manual
review flag.
"""

__version__ = "1.0.0"

from pagelens.analyzer import (
    AnalyzedElement,
    Diagnostic,
    DocumentAnalysis,
    TreeWalker,
    analyze_html,
    determine_context,
)
from pagelens.config import (
    ConfigError,
    RecognizerConfig,
    RecognizerSettings,
    load_recognizer_config,
)
from pagelens.dom import DOMNode, MalformedDocumentError, SoupNode, parse_document
from pagelens.recognizer import (
    ComponentRecognizer,
    ComponentType,
    ElementContext,
    PatternDefinitionError,
    PatternRegistry,
    RecognitionResult,
    default_registry,
    recognize_component,
)
from pagelens.styles import (
    ExtractedStyles,
    InlineStyleExtractor,
    StyleExtractionError,
    StyleExtractor,
)

__all__ = [
    "__version__",
    # Analysis
    "AnalyzedElement",
    "Diagnostic",
    "DocumentAnalysis",
    "TreeWalker",
    "analyze_html",
    "determine_context",
    # Recognition
    "ComponentRecognizer",
    "ComponentType",
    "ElementContext",
    "PatternDefinitionError",
    "PatternRegistry",
    "RecognitionResult",
    "default_registry",
    "recognize_component",
    # DOM and styles
    "DOMNode",
    "ExtractedStyles",
    "InlineStyleExtractor",
    "MalformedDocumentError",
    "SoupNode",
    "StyleExtractionError",
    "StyleExtractor",
    "parse_document",
    # Configuration
    "ConfigError",
    "RecognizerConfig",
    "RecognizerSettings",
    "load_recognizer_config",
]
