# htmlmark

`htmlmark` turns HTML into Markdown. The conversion runs as a pipeline
whose stages are registered with a priority, so you can add, replace or
reorder behaviour for any tag without touching the rest:

1. **Pre-render** handlers may rewrite the parsed document tree.
2. **Render** handlers write Markdown for each node. The first handler
   that reports `RenderStatus.SUCCESS` wins. Nodes no handler claims
   fall back to rendering their children, with blank lines around block
   tags.
3. **Post-render** handlers receive the finished output and may adjust it.

Text nodes pass through the registered **text transformers**. Characters
that carry meaning in Markdown can be marked as escapable and are then
escaped only where an **unescaper** decides escaping is actually needed.

## Building blocks

- `htmlmark.dom`: a small document tree (`Node`, `NodeType`).
  `parse_html` builds such a tree from markup.
  `render_representation` draws a tree as text, which helps when
  debugging.
- `htmlmark.whitespace.replace_any_whitespace_with_space`: folds each
  run of spaces, tabs, carriage returns and newlines into one space.
- `htmlmark.collapse.collapse`: collapses insignificant whitespace in a
  tree the way a browser would. Content of `pre` and `code` is left
  alone, and whitespace is trimmed around block elements.
- `htmlmark.urls`: builds absolute URLs for links and images.
  `default_assemble_absolute_url` resolves relative URLs against a
  domain and percent-encodes characters that would break Markdown.
  `parse_and_encode_query` re-encodes a query string and keeps the
  original parameter order.
- `htmlmark.converter`: the `Converter` and its `Register`, together
  with the `Plugin` interface and the error types `ConversionError`,
  `NoRenderHandlersError`, `BasePluginMissingError` and `PluginError`.
- `htmlmark.context.Context`: passed to every handler. It gives access
  to the domain, URL assembly, tag types, per-conversion state and
  rendering of child nodes.
- `htmlmark.prioritized`: `Prioritized`, `RenderStatus` and `TagType`.

## Example

```python
from htmlmark.converter import Converter
from htmlmark.dom import node_name
from htmlmark.prioritized import RenderStatus, TagType

conv = Converter()


def render_text(ctx, writer, node):
    if node_name(node) == "#text":
        writer.write(node.data)
        return RenderStatus.SUCCESS
    return RenderStatus.TRY_NEXT


def render_strong(ctx, writer, node):
    writer.write("**")
    ctx.render_child_nodes(writer, node)
    writer.write("**")
    return RenderStatus.SUCCESS


conv.register.renderer(render_text, 500)
conv.register.renderer_for("strong", TagType.INLINE, render_strong, 500)

print(conv.convert_string("<strong>Bold Text</strong>"))
# **Bold Text**
```

Pass `domain="https://example.com"` to `convert_string`,
`convert_reader` or `convert_node` to turn relative links and image
sources into absolute ones.

## Errors

Conversion raises `NoRenderHandlersError` when no render handler is
registered. It raises `BasePluginMissingError` when a plugin named
`commonmark` is registered without one named `base`. A plugin that
fails while it is initialised is reported as `PluginError` on the next
conversion.

## File helpers

`htmlmark.files` has the helpers for batch conversion. They expand a
glob into input files, choose whether output goes to stdout, a file or
a directory, and give each output file a unique name.
`write_file(filename, data, override)` refuses to replace an existing
file unless `override` is true. `htmlmark.printing` formats errors and
warnings for a terminal.