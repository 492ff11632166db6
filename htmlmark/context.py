"""The context passed to handlers while a document is converted."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from .dom import Node
from .urls import default_assemble_absolute_url

__all__ = ["GlobalState", "Context"]

AssembleAbsoluteURLFunc = Callable[[str, str, str], str]


class GlobalState:
    """Key/value storage shared by all handlers during one conversion."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key`` or ``default``."""
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""
        self._data[key] = value

    def update(self, key: str, fn: Callable[[Any], Any]) -> None:
        """Replace the value under ``key`` with ``fn(old value)``; missing is None."""
        self._data[key] = fn(self._data.get(key))


class Context:
    """Carries the converter, the domain, shared state and arbitrary values."""

    def __init__(
        self,
        converter: Any = None,
        *,
        domain: str = "",
        state: Optional[GlobalState] = None,
        assemble_url: AssembleAbsoluteURLFunc = default_assemble_absolute_url,
        values: Optional[dict[Any, Any]] = None,
    ) -> None:
        self._converter = converter
        self._domain = domain
        self._state = state if state is not None else GlobalState()
        self._assemble_url = assemble_url
        self._values: dict[Any, Any] = dict(values or {})

    def value(self, key: Any) -> Any:
        """Return the value attached under ``key``, or None."""
        return self._values.get(key)

    def with_value(self, key: Any, value: Any) -> Context:
        """Return a child context that also carries ``key`` -> ``value``."""
        values = dict(self._values)
        values[key] = value
        return Context(
            self._converter,
            domain=self._domain,
            state=self._state,
            assemble_url=self._assemble_url,
            values=values,
        )

    def domain(self) -> str:
        """The base domain given for this conversion."""
        return self._domain

    def assemble_absolute_url(self, tag_name: str, raw_url: str) -> str:
        """Normalise ``raw_url`` and resolve it against the domain."""
        return self._assemble_url(tag_name, raw_url, self._domain)

    def _require_converter(self) -> Any:
        if self._converter is None:
            raise RuntimeError("the context is not bound to a converter")
        return self._converter

    def get_tag_type(self, tag_name: str):
        """The tag type registered for ``tag_name``, or None if unknown."""
        return self._require_converter().get_tag_type(tag_name)

    def render_nodes(self, writer: Any, nodes: Iterable[Node]) -> None:
        """Render each node into ``writer``."""
        self._require_converter().render_nodes(self, writer, nodes)

    def render_child_nodes(self, writer: Any, node: Node) -> None:
        """Render the children of ``node`` into ``writer``."""
        self._require_converter().render_nodes(self, writer, node.children())

    def escape_content(self, content: str) -> str:
        """Mark characters that may need escaping in markdown."""
        return self._require_converter().escape_content(content)

    def unescape_content(self, content: str) -> str:
        """Turn escape markers into backslashes where they are needed."""
        return self._require_converter().unescape_content(content)

    def get_state(self, key: str, default: Any = None) -> Any:
        """Read from the shared state."""
        return self._state.get(key, default)

    def set_state(self, key: str, value: Any) -> None:
        """Write to the shared state."""
        self._state.set(key, value)

    def update_state(self, key: str, fn: Callable[[Any], Any]) -> None:
        """Update a value in the shared state."""
        self._state.update(key, fn)