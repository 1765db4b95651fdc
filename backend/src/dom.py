"""
DOM adapter for component recognition.

The recognition pipeline only talks to the ``DOMNode`` protocol defined here:
- tag name, id, classes and attributes of an element
- trimmed text content and inner/outer markup
- ordered element children and a parent pointer
- predicate-based descendant search

``SoupNode`` implements the protocol over a BeautifulSoup ``Tag``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from functools import cached_property
from typing import Protocol, runtime_checkable

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)


class MalformedDocumentError(Exception):
    """Raised when an input document cannot be parsed into an element tree."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.detail = detail
        suffix = f": {detail}" if detail else ""
        super().__init__(f"{message}{suffix}")


@runtime_checkable
class DOMNode(Protocol):
    """Read-only view of one element in a parsed document."""

    @property
    def tag_name(self) -> str: ...

    @property
    def element_id(self) -> str | None: ...

    @property
    def class_names(self) -> tuple[str, ...]: ...

    @property
    def attributes(self) -> Mapping[str, str]: ...

    @property
    def text(self) -> str: ...

    @property
    def inner_html(self) -> str: ...

    @property
    def outer_html(self) -> str: ...

    @property
    def children(self) -> tuple[DOMNode, ...]: ...

    @property
    def parent(self) -> DOMNode | None: ...

    def get(self, name: str, default: str = "") -> str: ...

    def find_descendants(self, predicate: NodePredicate) -> list[DOMNode]: ...

    def has_descendant(self, predicate: NodePredicate) -> bool: ...


NodePredicate = Callable[[DOMNode], bool]


class SoupNode:
    """
    ``DOMNode`` backed by a BeautifulSoup tag.

    Nodes of one parsed document share a registry, so each tag is wrapped
    once and the cached text, classes and attributes are computed once per
    tag however many patterns inspect it.
    """

    def __init__(self, tag: Tag, registry: dict[int, SoupNode] | None = None) -> None:
        self._tag = tag
        self._registry = registry if registry is not None else {}
        self._registry.setdefault(id(tag), self)

    def _wrap(self, tag: Tag) -> SoupNode:
        node = self._registry.get(id(tag))
        if node is None:
            node = SoupNode(tag, self._registry)
        return node

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SoupNode):
            return NotImplemented
        return self._tag is other._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        classes = ".".join(self.class_names)
        return f"SoupNode(<{self.tag_name}{'.' + classes if classes else ''}>)"

    @property
    def tag_name(self) -> str:
        return (self._tag.name or "").lower()

    @property
    def element_id(self) -> str | None:
        return self.attributes.get("id") or None

    @cached_property
    def class_names(self) -> tuple[str, ...]:
        value = self._tag.get("class")
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(value.split())
        return tuple(c for c in value if c)

    @cached_property
    def attributes(self) -> Mapping[str, str]:
        attrs: dict[str, str] = {}
        for name, value in self._tag.attrs.items():
            if isinstance(value, (list, tuple)):
                attrs[name.lower()] = " ".join(value)
            else:
                attrs[name.lower()] = "" if value is None else str(value)
        return attrs

    @cached_property
    def text(self) -> str:
        return self._tag.get_text().strip()

    @property
    def inner_html(self) -> str:
        return self._tag.decode_contents()

    @property
    def outer_html(self) -> str:
        return str(self._tag)

    @cached_property
    def children(self) -> tuple[DOMNode, ...]:
        return tuple(self._wrap(c) for c in self._tag.children if isinstance(c, Tag))

    @property
    def parent(self) -> DOMNode | None:
        parent = self._tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return self._wrap(parent)

    def get(self, name: str, default: str = "") -> str:
        return self.attributes.get(name.lower(), default)

    def iter_descendants(self) -> Iterator[DOMNode]:
        """Yield element descendants in document order."""
        for node in self._tag.descendants:
            if isinstance(node, Tag):
                yield self._wrap(node)

    def find_descendants(self, predicate: NodePredicate) -> list[DOMNode]:
        return [node for node in self.iter_descendants() if predicate(node)]

    def has_descendant(self, predicate: NodePredicate) -> bool:
        return any(predicate(node) for node in self.iter_descendants())


def parse_document(html: str | bytes, parser: str = "html.parser") -> list[DOMNode]:
    """
    Parse an HTML document into its top-level content elements.

    Children of ``<body>`` are returned when the document has one, otherwise
    the top-level elements of the fragment.

    Args:
        html: Document markup
        parser: BeautifulSoup tree builder name

    Returns:
        Top-level elements in source order

    Raises:
        MalformedDocumentError: If nothing can be parsed out of the input
    """
    if not isinstance(html, (str, bytes)):
        raise MalformedDocumentError(
            "Document must be str or bytes", detail=type(html).__name__
        )
    if not html.strip():
        raise MalformedDocumentError("Document is empty")

    try:
        soup = BeautifulSoup(html, parser)
    except Exception as e:
        raise MalformedDocumentError("Failed to parse document", detail=str(e)) from e

    container: Tag = soup.body if soup.body is not None else soup
    registry: dict[int, SoupNode] = {}
    roots: list[DOMNode] = [
        SoupNode(child, registry) for child in container.children if isinstance(child, Tag)
    ]
    if not roots:
        raise MalformedDocumentError("Document contains no elements")

    logger.debug("Parsed document", parser=parser, roots=len(roots))
    return roots


def parse_fragment(html: str, parser: str = "html.parser") -> DOMNode:
    """Parse markup and return its first top-level element."""
    return parse_document(html, parser)[0]


# ----------------------------------------------------------------------------
# Node predicates
# ----------------------------------------------------------------------------


def tag_in(*names: str) -> NodePredicate:
    wanted = frozenset(n.lower() for n in names)
    return lambda node: node.tag_name in wanted


def class_contains(*keywords: str) -> NodePredicate:
    """Match nodes with any class containing any keyword, case-insensitively."""
    lowered = tuple(k.lower() for k in keywords)

    def predicate(node: DOMNode) -> bool:
        return any(kw in cls.lower() for cls in node.class_names for kw in lowered)

    return predicate


def has_attr(name: str) -> NodePredicate:
    return lambda node: name.lower() in node.attributes


def attr_equals(name: str, value: str) -> NodePredicate:
    expected = value.lower()
    return lambda node: (
        name.lower() in node.attributes and node.get(name).strip().lower() == expected
    )


def attr_contains(name: str, fragment: str) -> NodePredicate:
    needle = fragment.lower()
    return lambda node: needle in node.get(name).lower()


def role_is(role: str) -> NodePredicate:
    return attr_equals("role", role)


def input_type_is(*types: str) -> NodePredicate:
    """Match ``<input>`` elements by type; a missing type means ``text``."""
    wanted = frozenset(t.lower() for t in types)

    def predicate(node: DOMNode) -> bool:
        return node.tag_name == "input" and input_type(node) in wanted

    return predicate


def input_type(node: DOMNode) -> str:
    return (node.get("type") or "text").strip().lower()


def any_of(*predicates: NodePredicate) -> NodePredicate:
    return lambda node: any(p(node) for p in predicates)


def all_of(*predicates: NodePredicate) -> NodePredicate:
    return lambda node: all(p(node) for p in predicates)


def count_descendants(node: DOMNode, predicate: NodePredicate) -> int:
    return len(node.find_descendants(predicate))
