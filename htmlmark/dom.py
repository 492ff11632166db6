"""A small HTML node tree, the parser that builds it and helpers to inspect it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union
from xml.dom import Node as _DomNode

import html5lib

__all__ = [
    "NodeType",
    "Node",
    "parse_html",
    "node_name",
    "all_nodes",
    "name_is_block_node",
    "name_is_inline_node",
    "is_block_node",
    "is_void_node",
    "is_preformatted_node",
    "render_representation",
]


class NodeType(Enum):
    """The kind of a node in the tree."""

    DOCUMENT = "document"
    DOCTYPE = "doctype"
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"


@dataclass(eq=False)
class Node:
    """A node of an HTML tree with links to its parent and siblings."""

    type: NodeType
    data: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False)
    first_child: Optional[Node] = field(default=None, repr=False)
    last_child: Optional[Node] = field(default=None, repr=False)
    prev_sibling: Optional[Node] = field(default=None, repr=False)
    next_sibling: Optional[Node] = field(default=None, repr=False)

    def append_child(self, child: Node) -> None:
        """Add ``child`` as the last child of this node."""
        if child.parent is not None or child.prev_sibling is not None or child.next_sibling is not None:
            raise ValueError("the node to append is already attached to a tree")
        last = self.last_child
        if last is None:
            self.first_child = child
        else:
            last.next_sibling = child
        child.prev_sibling = last
        child.parent = self
        self.last_child = child

    def remove_child(self, child: Node) -> None:
        """Detach ``child`` from this node."""
        if child.parent is not self:
            raise ValueError("the node to remove is not a child of this node")
        if self.first_child is child:
            self.first_child = child.next_sibling
        if self.last_child is child:
            self.last_child = child.prev_sibling
        if child.prev_sibling is not None:
            child.prev_sibling.next_sibling = child.next_sibling
        if child.next_sibling is not None:
            child.next_sibling.prev_sibling = child.prev_sibling
        child.parent = None
        child.prev_sibling = None
        child.next_sibling = None

    def children(self) -> list[Node]:
        """Return the direct children, in document order."""
        result = []
        child = self.first_child
        while child is not None:
            result.append(child)
            child = child.next_sibling
        return result

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value of attribute ``name`` or ``default``."""
        return self.attrs.get(name, default)


def _convert(dom_node) -> Optional[Node]:
    kind = dom_node.nodeType
    if kind in (_DomNode.TEXT_NODE, _DomNode.CDATA_SECTION_NODE):
        return Node(NodeType.TEXT, dom_node.data)
    if kind == _DomNode.COMMENT_NODE:
        return Node(NodeType.COMMENT, dom_node.data)
    if kind == _DomNode.DOCUMENT_TYPE_NODE:
        return Node(NodeType.DOCTYPE, dom_node.name or "")
    if kind == _DomNode.ELEMENT_NODE:
        attrs = dict(dom_node.attributes.items()) if dom_node.attributes else {}
        return Node(NodeType.ELEMENT, dom_node.tagName, attrs)
    return None


def parse_html(markup: Union[str, bytes]) -> Node:
    """Parse an HTML document into a tree rooted at a document node."""
    dom_doc = html5lib.parse(markup, treebuilder="dom", namespaceHTMLElements=False)
    root = Node(NodeType.DOCUMENT)
    stack = [(child, root) for child in reversed(dom_doc.childNodes)]
    while stack:
        dom_node, parent = stack.pop()
        node = _convert(dom_node)
        if node is None:
            continue
        last = parent.last_child
        if node.type is NodeType.TEXT and last is not None and last.type is NodeType.TEXT:
            last.data += node.data
            continue
        parent.append_child(node)
        stack.extend((child, node) for child in reversed(dom_node.childNodes))
    return root


_SPECIAL_NAMES = {
    NodeType.DOCUMENT: "#document",
    NodeType.DOCTYPE: "#doctype",
    NodeType.TEXT: "#text",
    NodeType.COMMENT: "#comment",
}


def node_name(node: Node) -> str:
    """Return the tag name of an element, or a ``#name`` for other nodes."""
    if node.type is NodeType.ELEMENT:
        return node.data
    return _SPECIAL_NAMES.get(node.type, "")


def all_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all its descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


_BLOCK_NAMES = frozenset({
    "address", "article", "aside", "blockquote", "body", "center", "dd", "details",
    "dialog", "dir", "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer",
    "form", "frameset", "h1", "h2", "h3", "h4", "h5", "h6", "head", "header",
    "hgroup", "hr", "html", "li", "main", "menu", "nav", "noframes", "ol", "p",
    "pre", "section", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})

_INLINE_NAMES = frozenset({
    "a", "abbr", "acronym", "b", "bdi", "bdo", "big", "br", "button", "cite", "code",
    "data", "datalist", "del", "dfn", "em", "embed", "i", "iframe", "img", "input",
    "ins", "kbd", "label", "map", "mark", "meter", "object", "output", "picture",
    "progress", "q", "ruby", "s", "samp", "select", "slot", "small", "span",
    "strike", "strong", "sub", "sup", "svg", "template", "textarea", "time", "tt",
    "u", "var", "wbr",
})


def name_is_block_node(name: str) -> bool:
    """Whether the tag name denotes a block-level element."""
    return name in _BLOCK_NAMES


def name_is_inline_node(name: str) -> bool:
    """Whether the tag name denotes an inline element."""
    return name in _INLINE_NAMES


_COLLAPSE_BLOCK_ELEMENTS = frozenset({
    "address", "article", "aside", "audio", "blockquote", "body", "canvas", "center",
    "dd", "dir", "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer",
    "form", "frameset", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hgroup", "hr",
    "html", "isindex", "li", "main", "menu", "nav", "noframes", "noscript", "ol",
    "output", "p", "pre", "section", "table", "tbody", "td", "tfoot", "th", "thead",
    "tr", "ul",
})

_VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "command", "embed", "hr", "img", "input", "keygen",
    "link", "meta", "param", "track", "wbr",
})


def is_block_node(node: Node) -> bool:
    """Whether whitespace around this node is collapsed as around a block."""
    return node_name(node) in _COLLAPSE_BLOCK_ELEMENTS


def is_void_node(node: Node) -> bool:
    """Whether the node is a void element (one that has no content)."""
    return node_name(node) in _VOID_ELEMENTS


def is_preformatted_node(node: Node) -> bool:
    """Whether the node keeps its whitespace (``pre`` and ``code``)."""
    return node_name(node) in ("pre", "code")


_ESCAPES = {
    "\a": "\\a", "\b": "\\b", "\f": "\\f", "\n": "\\n", "\r": "\\r",
    "\t": "\\t", "\v": "\\v", "\\": "\\\\", '"': '\\"',
}


def _quote(text: str) -> str:
    parts = ['"']
    for char in text:
        if char in _ESCAPES:
            parts.append(_ESCAPES[char])
        elif char.isprintable():
            parts.append(char)
        else:
            code = ord(char)
            if code < 0x80:
                parts.append(f"\\x{code:02x}")
            elif code <= 0xFFFF:
                parts.append(f"\\u{code:04x}")
            else:
                parts.append(f"\\U{code:08x}")
    parts.append('"')
    return "".join(parts)


def _describe(node: Node) -> str:
    name = node_name(node)
    if node.type is NodeType.TEXT:
        return f"{name} {_quote(node.data)}"
    if node.type is NodeType.ELEMENT and node.attrs:
        attrs = " ".join(f"{key}={_quote(value)}" for key, value in node.attrs.items())
        return f"{name} ({attrs})"
    return name


def render_representation(node: Node) -> str:
    """Draw the tree below ``node`` as indented lines, one node per line."""
    lines = []
    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        prefix = "" if depth == 0 else "│ " * (depth - 1) + "├─"
        lines.append(prefix + _describe(current))
        stack.extend((child, depth + 1) for child in reversed(current.children()))
    return "\n".join(lines)