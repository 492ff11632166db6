import io

import pytest

from htmlmark.context import Context, GlobalState
from htmlmark.dom import Node, NodeType


class _RecordingConverter:
    def __init__(self):
        self.rendered = []

    def get_tag_type(self, tag_name):
        return "block" if tag_name == "div" else None

    def render_nodes(self, ctx, writer, nodes):
        for node in nodes:
            self.rendered.append(node)
            writer.write(node.data)

    def escape_content(self, content):
        return content.upper()

    def unescape_content(self, content):
        return content.lower()


def test_state():
    ctx = Context()
    assert ctx.get_state("key", 0) == 0
    ctx.set_state("key", 10)
    ctx.update_state("key", lambda value: value + 5)
    assert ctx.get_state("key", 0) == 15


def test_global_state_update_missing_key():
    state = GlobalState()
    state.update("count", lambda value: (value or 0) + 1)
    assert state.get("count") == 1


def test_with_value():
    ctx = Context()
    ctx1 = ctx.with_value("keyA", "a1")
    assert ctx1.value("keyA") == "a1"
    ctx2 = ctx.with_value("keyA", "a2")
    assert ctx2.value("keyA") == "a2"
    ctx3 = ctx.with_value("keyB", "b1")
    assert ctx3.value("keyA") is None
    assert ctx3.value("keyB") == "b1"


def test_with_value_shares_state():
    ctx = Context()
    child = ctx.with_value("k", 1)
    child.set_state("shared", "yes")
    assert ctx.get_state("shared") == "yes"


def test_assemble_absolute_url_uses_domain():
    ctx = Context(domain="https://example.com")
    assert ctx.assemble_absolute_url("img", "/assets/image.png") == "https://example.com/assets/image.png"
    assert ctx.with_value("x", 1).domain() == "https://example.com"


def test_delegates_to_converter():
    conv = _RecordingConverter()
    ctx = Context(conv)
    parent = Node(NodeType.ELEMENT, "p")
    parent.append_child(Node(NodeType.TEXT, "a"))
    parent.append_child(Node(NodeType.TEXT, "b"))
    out = io.StringIO()
    ctx.render_child_nodes(out, parent)
    assert out.getvalue() == "ab"
    assert ctx.get_tag_type("div") == "block"
    assert ctx.escape_content("x") == "X"
    assert ctx.unescape_content("Y") == "y"


def test_without_converter_raises():
    with pytest.raises(RuntimeError):
        Context().escape_content("x")