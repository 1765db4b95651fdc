"""
Tree walker.

Builds an analyzed tree mirroring the DOM in two phases:
- Style extraction for every element, run concurrently and bounded by a
  semaphore. A failure on one element yields empty styles and a diagnostic.
- Pre-order classification with an explicit stack. Each element's context
  is computed before its own recognition and before its children, and the
  recognizer sees only ancestor types and already-finalized prior siblings.

Sibling types are recorded on child contexts once all children are done.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from pagelens.analyzer.context import assign_sibling_types, determine_context
from pagelens.analyzer.models import AnalyzedElement, Diagnostic, DocumentAnalysis, Position
from pagelens.config import RecognizerConfig
from pagelens.dom import DOMNode, parse_document
from pagelens.recognizer.models import ComponentType, ElementContext, RecognitionResult
from pagelens.recognizer.recognizer import ComponentRecognizer
from pagelens.styles import ExtractedStyles, InlineStyleExtractor, StyleExtractor, parse_pixels

logger = structlog.get_logger(__name__)

SiblingResults = list[tuple[DOMNode, RecognitionResult]]


@dataclass
class _Frame:
    """Per-element working state shared by both phases."""

    node: DOMNode
    children: list[_Frame] = field(default_factory=list)
    styles: ExtractedStyles = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    element: AnalyzedElement | None = None


def _build_frames(roots: Sequence[DOMNode]) -> tuple[list[_Frame], list[_Frame]]:
    """Mirror the DOM as frames; returns root frames and all frames in pre-order."""
    root_frames = [_Frame(node) for node in roots]
    ordered: list[_Frame] = []
    stack = list(reversed(root_frames))
    while stack:
        frame = stack.pop()
        ordered.append(frame)
        frame.children = [_Frame(child) for child in frame.node.children]
        stack.extend(reversed(frame.children))
    return root_frames, ordered


def _position(node: DOMNode) -> Position:
    return Position(width=parse_pixels(node.get("width")), height=parse_pixels(node.get("height")))


class TreeWalker:
    """
    Classifies every element of a document or subtree.

    The walker holds no per-call state and may run several analyses
    concurrently.
    """

    def __init__(
        self,
        recognizer: ComponentRecognizer | None = None,
        style_extractor: StyleExtractor | None = None,
        config: RecognizerConfig | None = None,
    ) -> None:
        if config is None:
            config = recognizer.config if recognizer is not None else RecognizerConfig()
        self.config = config
        self.recognizer = recognizer or ComponentRecognizer(config=config)
        self.style_extractor = style_extractor or InlineStyleExtractor(parser=config.html_parser)
        self._log = logger.bind(component="tree_walker")

    async def analyze_document(self, html: str | bytes) -> DocumentAnalysis:
        """
        Parse and analyze a whole document.

        Args:
            html: Document markup

        Returns:
            Analysis of the document's top-level elements

        Raises:
            MalformedDocumentError: If the document cannot be parsed
        """
        start_time = time.monotonic()
        roots = parse_document(html, self.config.html_parser)
        elements = await self._analyze(roots, parent_context=None)

        analysis = DocumentAnalysis(
            roots=elements,
            duration_ms=(time.monotonic() - start_time) * 1000,
        )
        self._log.info(
            "Document analyzed",
            elements=analysis.total_elements,
            recognized=analysis.recognized,
            manual_review=analysis.manual_review,
            diagnostics=len(analysis.diagnostics),
            duration_ms=round(analysis.duration_ms, 2),
        )
        return analysis

    async def analyze_element(
        self,
        node: DOMNode,
        parent_context: ElementContext | None = None,
    ) -> AnalyzedElement:
        """
        Analyze one element and its subtree.

        Args:
            node: Subtree root
            parent_context: Context of the node's parent, if known

        Returns:
            Analyzed subtree
        """
        (element,) = await self._analyze([node], parent_context)
        return element

    async def _analyze(
        self,
        roots: Sequence[DOMNode],
        parent_context: ElementContext | None,
    ) -> list[AnalyzedElement]:
        root_frames, frames = _build_frames(roots)
        await self._extract_all(frames)
        self._classify(root_frames, parent_context)
        self._link(root_frames, frames)
        self._log.debug("Walk completed", elements=len(frames))
        return [frame.element for frame in root_frames]

    # ------------------------------------------------------------------
    # Phase 1: styles
    # ------------------------------------------------------------------

    async def _extract_all(self, frames: list[_Frame]) -> None:
        semaphore = asyncio.Semaphore(self.config.style_concurrency)

        async def extract(frame: _Frame) -> None:
            async with semaphore:
                frame.styles = await self._extract_styles(frame)

        await asyncio.gather(*(extract(frame) for frame in frames))

    async def _extract_styles(self, frame: _Frame) -> ExtractedStyles:
        try:
            styles = self.style_extractor.extract(frame.node.outer_html)
            if inspect.isawaitable(styles):
                styles = await styles
            return dict(styles)
        except Exception as e:
            self._log.warning(
                "Style extraction failed",
                tag=frame.node.tag_name,
                error=str(e),
            )
            frame.diagnostics.append(
                Diagnostic(
                    stage="style_extraction",
                    message=f"{type(e).__name__}: {e}",
                    tag=frame.node.tag_name,
                )
            )
            return {}

    # ------------------------------------------------------------------
    # Phase 2: classification
    # ------------------------------------------------------------------

    def _classify(self, root_frames: list[_Frame], parent_context: ElementContext | None) -> None:
        root_siblings: SiblingResults = []
        stack: list[tuple[_Frame, ElementContext | None, tuple[ComponentType, ...], SiblingResults]] = [
            (frame, parent_context, (), root_siblings) for frame in reversed(root_frames)
        ]

        while stack:
            frame, parent_ctx, ancestors, siblings_seen = stack.pop()
            node = frame.node

            context = determine_context(
                node,
                parent_ctx,
                parent_type=ancestors[-1] if ancestors else None,
            )
            result = self.recognizer.recognize_component(
                node,
                frame.styles,
                context,
                ancestor_types=ancestors,
                prior_siblings=tuple(siblings_seen),
            )
            siblings_seen.append((node, result))

            frame.element = AnalyzedElement(
                tag=node.tag_name,
                recognition=result,
                context=context,
                element_id=node.element_id,
                classes=list(node.class_names),
                attributes=dict(node.attributes),
                text_content=node.text,
                inner_html=node.inner_html,
                styles=frame.styles,
                position=_position(node),
                diagnostics=frame.diagnostics,
            )

            child_ancestors = (*ancestors, result.component_type)
            child_siblings: SiblingResults = []
            for child in reversed(frame.children):
                stack.append((child, context, child_ancestors, child_siblings))

    @staticmethod
    def _link(root_frames: list[_Frame], frames: list[_Frame]) -> None:
        """Attach children in source order and record sibling types."""
        for group in [root_frames, *(frame.children for frame in frames)]:
            elements = [frame.element for frame in group]
            contexts = assign_sibling_types(
                [e.context for e in elements],
                [e.recognition.component_type for e in elements],
            )
            for element, context in zip(elements, contexts):
                element.context = context

        for frame in frames:
            frame.element.children = [child.element for child in frame.children]


def analyze_html(
    html: str | bytes,
    recognizer: ComponentRecognizer | None = None,
    style_extractor: StyleExtractor | None = None,
    config: RecognizerConfig | None = None,
) -> DocumentAnalysis:
    """
    Synchronous entry point for analyzing a document.

    Runs the async walk in a new event loop.
    """
    walker = TreeWalker(recognizer=recognizer, style_extractor=style_extractor, config=config)
    return asyncio.run(walker.analyze_document(html))
