"""Collapse insignificant whitespace in an HTML tree, the way a browser renders it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .dom import (
    Node,
    NodeType,
    is_block_node,
    is_preformatted_node,
    is_void_node,
    node_name,
)
from .whitespace import replace_any_whitespace_with_space

__all__ = ["DomFuncs", "collapse"]

NodePredicate = Callable[[Node], bool]


@dataclass
class DomFuncs:
    """The predicates that decide how whitespace around a node is treated."""

    is_block_node: Optional[NodePredicate] = None
    is_void_node: Optional[NodePredicate] = None
    is_preformatted_node: Optional[NodePredicate] = None

    def __post_init__(self) -> None:
        if self.is_block_node is None:
            self.is_block_node = is_block_node
        if self.is_void_node is None:
            self.is_void_node = is_void_node
        if self.is_preformatted_node is None:
            self.is_preformatted_node = is_preformatted_node


def _next_node(prev: Optional[Node], current: Node, funcs: DomFuncs) -> Optional[Node]:
    if (prev is not None and prev.parent is current) or funcs.is_preformatted_node(current):
        if current.next_sibling is not None:
            return current.next_sibling
        return current.parent
    if current.first_child is not None:
        return current.first_child
    if current.next_sibling is not None:
        return current.next_sibling
    return current.parent


def _remove_node(node: Node) -> Optional[Node]:
    following = node.next_sibling if node.next_sibling is not None else node.parent
    node.parent.remove_child(node)
    return following


def collapse(element: Node, dom_funcs: Optional[DomFuncs] = None) -> None:
    """Collapse whitespace below ``element`` in place.

    Runs of whitespace become one space, whitespace at block boundaries is
    dropped, empty text nodes and doctype nodes are removed. Preformatted
    content is left untouched.
    """
    funcs = dom_funcs if dom_funcs is not None else DomFuncs()

    if element.first_child is None or funcs.is_preformatted_node(element):
        return

    prev_text: Optional[Node] = None
    keep_leading_ws = False
    prev: Optional[Node] = None
    node = _next_node(prev, element, funcs)

    while node is not element:
        if node.type is NodeType.TEXT:
            text = replace_any_whitespace_with_space(node.data)
            if (
                (prev_text is None or prev_text.data.endswith(" "))
                and not keep_leading_ws
                and text.startswith(" ")
            ):
                text = text[1:]
            if not text:
                node = _remove_node(node)
                continue
            node.data = text
            prev_text = node
        elif node.type is NodeType.ELEMENT:
            name = node_name(node)
            if funcs.is_block_node(node) or name == "br":
                if prev_text is not None:
                    prev_text.data = prev_text.data.removesuffix(" ")
                prev_text = None
                keep_leading_ws = False
            elif funcs.is_void_node(node) or funcs.is_preformatted_node(node) or name == "code":
                # Keep the space around inline void elements and inline code.
                prev_text = None
                keep_leading_ws = True
            elif prev_text is not None:
                keep_leading_ws = False
        elif node.type is NodeType.COMMENT:
            pass
        else:
            node = _remove_node(node)
            continue

        following = _next_node(prev, node, funcs)
        prev = node
        node = following

    if prev_text is not None:
        prev_text.data = prev_text.data.removesuffix(" ")
        if not prev_text.data:
            _remove_node(prev_text)