"""
Structural context computation.

Context flags are inherited top-down and include the element's own
contribution: a ``<form>`` element is itself ``inside_form``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from pagelens.dom import DOMNode
from pagelens.recognizer.models import ComponentType, ElementContext

TAG_FLAGS = {
    "form": "inside_form",
    "nav": "inside_nav",
    "header": "inside_header",
    "footer": "inside_footer",
    "section": "inside_section",
}

CLASS_FLAGS = {
    "inside_hero": ("hero", "banner"),
    "inside_card": ("card", "box"),
}


def own_flags(node: DOMNode) -> set[str]:
    """Context flags a single element contributes by its tag and classes."""
    flags: set[str] = set()
    tag_flag = TAG_FLAGS.get(node.tag_name)
    if tag_flag:
        flags.add(tag_flag)

    classes = [c.lower() for c in node.class_names]
    for flag, keywords in CLASS_FLAGS.items():
        if any(k in c for c in classes for k in keywords):
            flags.add(flag)
    return flags


def _ancestors_and_self(node: DOMNode) -> list[DOMNode]:
    chain: list[DOMNode] = []
    current: DOMNode | None = node
    while current is not None:
        chain.append(current)
        current = current.parent
    return chain


def determine_context(
    node: DOMNode,
    parent_context: ElementContext | None = None,
    parent_type: ComponentType | None = None,
) -> ElementContext:
    """
    Compute an element's structural context.

    With a parent context the parent's flags are inherited and only the
    element itself is inspected. Without one, the element and all of its
    DOM ancestors are scanned.

    Args:
        node: Element to describe
        parent_context: Context of the parent element, if already computed
        parent_type: Finalized classification of the parent element

    Returns:
        Context with depth ``parent.depth + 1`` (0 for a root)
    """
    if parent_context is not None:
        depth = parent_context.depth + 1
        flags = {
            name for name in (*TAG_FLAGS.values(), *CLASS_FLAGS) if getattr(parent_context, name)
        }
        flags |= own_flags(node)
    else:
        depth = 0
        flags = set()
        for element in _ancestors_and_self(node):
            flags |= own_flags(element)

    return ElementContext(
        depth=depth,
        parent_type=parent_type,
        **{name: True for name in flags},
    )


def assign_sibling_types(
    contexts: Sequence[ElementContext],
    types: Sequence[ComponentType],
) -> list[ElementContext]:
    """
    Record sibling classifications on a run of child contexts.

    Each child receives the types of the other children in source order.

    Args:
        contexts: Child contexts in source order
        types: Finalized child types, aligned with ``contexts``

    Returns:
        New contexts carrying ``sibling_types``
    """
    if len(contexts) != len(types):
        raise ValueError(f"Expected {len(contexts)} types, got {len(types)}")
    return [
        replace(ctx, sibling_types=tuple(t for j, t in enumerate(types) if j != i))
        for i, ctx in enumerate(contexts)
    ]
