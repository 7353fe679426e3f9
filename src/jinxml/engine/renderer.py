"""Renderer - converts XML IR to final XML text."""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple, Union

from jinxml.engine.spec import XmlElement, XmlNode, XmlText


class Renderer:
    """Renders XmlElement IR to XML text, compact or indented."""

    def __init__(self, indent: Optional[Union[int, str]] = None):
        """Initialize the renderer.

        Args:
            indent: Indent width in spaces, or a literal indent string such
                as "\\t". None, 0 or "" render compact output.
        """
        if isinstance(indent, int):
            indent = " " * indent
        self.indent = indent or ""

    @property
    def pretty(self) -> bool:
        return bool(self.indent)

    def render(self, node: XmlNode) -> str:
        """Render a node (usually the document root) to a string.

        Indented output puts one element per line. Depth comes from the IR
        tree, so text that happens to contain angle brackets never shifts it.
        """
        if not self.pretty:
            return "".join(self._render_compact(node))
        return "\n".join(self._render_lines(node, 0))

    def render_attributes(self, attributes: List[Tuple[str, str]]) -> str:
        return " ".join(f'{name}="{value}"' for name, value in attributes)

    def open_tag(self, element: XmlElement) -> str:
        if element.attributes:
            return f"<{element.name} {self.render_attributes(element.attributes)}>"
        return f"<{element.name}>"

    def close_tag(self, element: XmlElement) -> str:
        return f"</{element.name}>"

    def _render_compact(self, node: XmlNode) -> Iterator[str]:
        if isinstance(node, XmlText):
            yield node.text
            return

        yield self.open_tag(node)
        for child in node.children:
            yield from self._render_compact(child)
        yield self.close_tag(node)

    def _render_lines(self, node: XmlNode, depth: int) -> Iterator[str]:
        prefix = self.indent * depth

        if isinstance(node, XmlText):
            if node.text:
                yield f"{prefix}{node.text}"
            return

        if not node.has_element_children:
            # Leaf elements stay on one line: <Name>text</Name>
            body = "".join(self._render_compact_children(node))
            yield f"{prefix}{self.open_tag(node)}{body}{self.close_tag(node)}"
            return

        yield f"{prefix}{self.open_tag(node)}"
        for child in node.children:
            yield from self._render_lines(child, depth + 1)
        yield f"{prefix}{self.close_tag(node)}"

    def _render_compact_children(self, node: XmlElement) -> Iterator[str]:
        for child in node.children:
            yield from self._render_compact(child)
