"""The converter: a registry of handlers and the pipeline that runs them."""

from __future__ import annotations

import io
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import IO, Callable, Iterable, Optional, TypeVar, Union

from .context import Context, GlobalState
from .dom import Node, name_is_block_node, name_is_inline_node, node_name, parse_html
from .prioritized import Prioritized, RenderStatus, TagType, sort_prioritized

__all__ = [
    "ESCAPE_MARKER",
    "ConversionError",
    "NoRenderHandlersError",
    "BasePluginMissingError",
    "PluginError",
    "EscapeMode",
    "Plugin",
    "Register",
    "Converter",
]

# Placed in front of characters that may need a backslash in markdown.
# After rendering it is either turned into a backslash or dropped.
ESCAPE_MARKER = "\ue000"

PreRenderFunc = Callable[[Context, Node], None]
RenderFunc = Callable[[Context, IO[str], Node], RenderStatus]
PostRenderFunc = Callable[[Context, str], str]
TextTransformFunc = Callable[[Context, str], str]
UnEscapeFunc = Callable[[str, int], int]

V = TypeVar("V")


class ConversionError(Exception):
    """Raised when a document cannot be converted."""


class NoRenderHandlersError(ConversionError):
    """No render handler has been registered."""

    def __init__(self) -> None:
        super().__init__(
            'no render handlers are registered. did you forget to register '
            'the "commonmark" and "base" plugins?'
        )


class BasePluginMissingError(ConversionError):
    """The commonmark plugin was registered without the base plugin."""

    def __init__(self) -> None:
        super().__init__(
            'you registered the "commonmark" plugin but the "base" plugin is also required'
        )


class PluginError(ConversionError):
    """A plugin failed while it was being initialised."""

    def __init__(self, plugin_name: str, cause: BaseException) -> None:
        super().__init__(f'error while initializing "{plugin_name}" plugin: {cause}')
        self.plugin_name = plugin_name
        self.cause = cause
        self.__cause__ = cause


class EscapeMode(str, Enum):
    """How strictly markdown characters in text are escaped."""

    DISABLED = "disabled"
    SMART = "smart"


class Plugin(ABC):
    """Extends a converter with handlers."""

    @abstractmethod
    def name(self) -> str:
        """The public name of the plugin, e.g. ``"strikethrough"``."""

    @abstractmethod
    def init(self, converter: Converter) -> None:
        """Validate the plugin's settings and register its handlers."""


class Register:
    """Adds plugins and handlers to a converter."""

    def __init__(self, converter: Converter) -> None:
        self._conv = converter

    def plugin(self, plugin: Plugin) -> None:
        """Register ``plugin`` and let it initialise itself."""
        conv = self._conv
        plugin_name = plugin.name()
        if not plugin_name:
            conv._set_error(ConversionError("the plugin has no name"))
            return
        with conv._lock:
            conv._registered_plugins.append(plugin_name)
        try:
            plugin.init(conv)
        except Exception as exc:  # any failure of a plugin is reported on convert
            conv._set_error(PluginError(plugin_name, exc))

    def pre_renderer(self, fn: PreRenderFunc, priority: int) -> None:
        """Run ``fn`` on the document before rendering."""
        self._conv._add(self._conv._pre_render_handlers, fn, priority)

    def renderer(self, fn: RenderFunc, priority: int) -> None:
        """Offer every node to ``fn``; the first success wins."""
        self._conv._add(self._conv._render_handlers, fn, priority)

    def renderer_for(
        self, tag_name: str, tag_type: TagType, render_fn: RenderFunc, priority: int
    ) -> None:
        """Register a tag type and a renderer for one tag name."""
        self.tag_type(tag_name, tag_type, priority)

        def render(ctx: Context, writer: IO[str], node: Node) -> RenderStatus:
            if node_name(node) == tag_name:
                return render_fn(ctx, writer, node)
            return RenderStatus.TRY_NEXT

        self.renderer(render, priority)

    def post_renderer(self, fn: PostRenderFunc, priority: int) -> None:
        """Transform the rendered output with ``fn``."""
        self._conv._add(self._conv._post_render_handlers, fn, priority)

    def text_transformer(self, fn: TextTransformFunc, priority: int) -> None:
        """Transform the content of every text node with ``fn``."""
        self._conv._add(self._conv._text_transform_handlers, fn, priority)

    def escaped_char(self, *args: str) -> None:
        """Mark the given characters as possibly needing an escape."""
        with self._conv._lock:
            self._conv._markdown_chars.update(args)

    def unescaper(self, fn: UnEscapeFunc, priority: int) -> None:
        """Decide with ``fn`` whether a marked character needs a backslash.

        ``fn(chars, index)`` returns how many characters it consumed, or -1.
        """
        self._conv._add(self._conv._unescape_handlers, fn, priority)

    def tag_type(self, tag_name: str, tag_type: TagType, priority: int) -> None:
        """Declare how ``tag_name`` is treated."""
        with self._conv._lock:
            self._conv._tag_types.setdefault(tag_name, []).append(
                Prioritized(tag_type, priority)
            )


class Converter:
    """Converts HTML to markdown using the registered handlers."""

    def __init__(
        self,
        plugins: Iterable[Plugin] = (),
        *,
        escape_mode: EscapeMode = EscapeMode.SMART,
    ) -> None:
        self._lock = threading.RLock()
        self._error: Optional[ConversionError] = None
        self._registered_plugins: list[str] = []
        self._pre_render_handlers: list[Prioritized[PreRenderFunc]] = []
        self._render_handlers: list[Prioritized[RenderFunc]] = []
        self._post_render_handlers: list[Prioritized[PostRenderFunc]] = []
        self._text_transform_handlers: list[Prioritized[TextTransformFunc]] = []
        self._unescape_handlers: list[Prioritized[UnEscapeFunc]] = []
        self._markdown_chars: set[str] = set()
        self._tag_types: dict[str, list[Prioritized[TagType]]] = {}
        self.escape_mode = EscapeMode(escape_mode)
        self.register = Register(self)

        for plugin in plugins:
            self.register.plugin(plugin)

    # - - - internals - - - #

    def _set_error(self, error: ConversionError) -> None:
        with self._lock:
            self._error = error

    def _add(self, handlers: list, fn, priority: int) -> None:
        with self._lock:
            handlers.append(Prioritized(fn, priority))

    def _sorted(self, handlers: list[Prioritized[V]]) -> list[V]:
        with self._lock:
            snapshot = list(handlers)
        return [item.value for item in sort_prioritized(snapshot)]

    # - - - converting - - - #

    def convert_node(self, doc: Node, domain: str = "") -> str:
        """Convert an already parsed tree to markdown."""
        with self._lock:
            error = self._error
            plugins = list(self._registered_plugins)
            has_renderers = bool(self._render_handlers)
        if error is not None:
            raise error
        if not has_renderers:
            raise NoRenderHandlersError()
        if "commonmark" in plugins and "base" not in plugins:
            raise BasePluginMissingError()

        ctx = Context(self, domain=domain, state=GlobalState())

        for handler in self._sorted(self._pre_render_handlers):
            handler(ctx, doc)

        buffer = io.StringIO()
        self.render_node(ctx, buffer, doc)

        result = buffer.getvalue()
        for handler in self._sorted(self._post_render_handlers):
            result = handler(ctx, result)
        return result

    def convert_reader(self, reader: IO[Union[str, bytes]], domain: str = "") -> str:
        """Read HTML from a file-like object and convert it."""
        return self.convert_node(parse_html(reader.read()), domain)

    def convert_string(self, html_input: str, domain: str = "") -> str:
        """Convert an HTML string to markdown."""
        return self.convert_node(parse_html(html_input), domain)

    # - - - tag types - - - #

    def get_tag_type(self, tag_name: str) -> Optional[TagType]:
        """The tag type with the lowest priority value, or a built-in default."""
        with self._lock:
            types = list(self._tag_types.get(tag_name, ()))
        if types:
            return sort_prioritized(types)[0].value
        if name_is_block_node(tag_name):
            return TagType.BLOCK
        if name_is_inline_node(tag_name):
            return TagType.INLINE
        return None

    # - - - escaping - - - #

    def escape_content(self, content: str) -> str:
        """Put a marker in front of every registered markdown character."""
        if self.escape_mode is EscapeMode.DISABLED:
            return content
        with self._lock:
            chars = frozenset(self._markdown_chars)
        parts = []
        for char in content:
            if char == "\x00":
                # U+0000 must be replaced with the replacement character.
                parts.append("\ufffd")
            elif char in chars:
                parts.append(ESCAPE_MARKER + char)
            else:
                parts.append(char)
        return "".join(parts)

    def unescape_content(self, content: str) -> str:
        """Turn markers into backslashes where an unescaper asks for one."""
        if self.escape_mode is EscapeMode.DISABLED:
            return content
        handlers = self._sorted(self._unescape_handlers)

        def consumed(index: int) -> int:
            for handler in handlers:
                skip = handler(content, index)
                if skip != -1:
                    return skip
            return -1

        escape_at: set[int] = set()
        length = len(content)
        index = 0
        while index < length:
            if content[index] == ESCAPE_MARKER:
                if index + 1 >= length:
                    break
                skip = consumed(index + 1)
                if skip != -1:
                    escape_at.add(index)
                    index += skip - 1
            index += 1

        return "".join(
            ("\\" if position in escape_at else "") if char == ESCAPE_MARKER else char
            for position, char in enumerate(content)
        )

    # - - - rendering - - - #

    def render_nodes(self, ctx: Context, writer: IO[str], nodes: Iterable[Node]) -> None:
        """Render every node in turn."""
        for node in nodes:
            self.render_node(ctx, writer, node)

    def render_node(self, ctx: Context, writer: IO[str], node: Node) -> RenderStatus:
        """Render one node: text directly, elements through the handlers."""
        if node_name(node) == "#text":
            content = node.data
            for handler in self._sorted(self._text_transform_handlers):
                content = handler(ctx, content)
            writer.write(content)
            return RenderStatus.SUCCESS

        for handler in self._sorted(self._render_handlers):
            if handler(ctx, writer, node) == RenderStatus.SUCCESS:
                return RenderStatus.SUCCESS

        return self._render_fallback(ctx, writer, node)

    def _render_fallback(self, ctx: Context, writer: IO[str], node: Node) -> RenderStatus:
        is_block = ctx.get_tag_type(node_name(node)) is TagType.BLOCK
        if is_block:
            writer.write("\n\n")
        ctx.render_child_nodes(writer, node)
        if is_block:
            writer.write("\n\n")
        return RenderStatus.SUCCESS