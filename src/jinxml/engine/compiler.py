"""Compiler - walks a classified template against a context, producing XML IR."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from jinxml.ast.spec import (
    Conditional,
    Literal,
    NestedObject,
    NodeSpec,
    RepeatingBlock,
    SpreadArray,
    Template,
    ValueWithAttributes,
    element_name,
    is_no_element_key,
)
from jinxml.engine.expressions import ExpressionEvaluator, to_text
from jinxml.engine.spec import XmlElement, XmlNode, XmlText
from jinxml.exceptions import ContextShapeError

log = logging.getLogger(__name__)


def _require_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ContextShapeError(
            f"Context for '{where}' must be a mapping, got {type(value).__name__}",
            key=where,
        )
    return value


class Compiler:
    """Compiles a Template plus a context into an XmlElement tree."""

    def __init__(self, evaluator: ExpressionEvaluator, suppress_undefined: bool = True):
        """Initialize the compiler.

        Args:
            evaluator: Resolves leaf expressions.
            suppress_undefined: Omit elements whose value is undefined. When
                False, such elements are emitted with an empty body.
        """
        self.evaluator = evaluator
        self.suppress_undefined = suppress_undefined

    def compile(self, template: Template, context: Mapping[str, Any]) -> XmlElement:
        """Compile a whole document.

        Args:
            template: The classified template.
            context: The data record to evaluate expressions against.

        Returns:
            The root XmlElement.
        """
        context = _require_mapping(context, template.root)
        return XmlElement(
            name=template.root, children=self.compile_tree(template.elements, context)
        )

    def compile_tree(
        self, tree: Dict[str, NodeSpec], context: Mapping[str, Any]
    ) -> List[XmlNode]:
        """Compile sibling nodes in declaration order."""
        nodes: List[XmlNode] = []
        for key, spec in tree.items():
            nodes.extend(self.compile_node(key, spec, context))
        return nodes

    def compile_node(
        self, key: str, spec: NodeSpec, context: Mapping[str, Any]
    ) -> List[XmlNode]:
        """Compile one template entry.

        Returns an empty list when the entry is omitted, and several nodes
        when it spreads or splices into the parent.
        """
        name = element_name(key)

        if isinstance(spec, Literal):
            content = self._compile_literal(spec, context)
            if content is None:
                return []
            return [XmlElement(name=name, children=content)]

        if isinstance(spec, ValueWithAttributes):
            if isinstance(spec.value, Literal):
                content = self._compile_literal(spec.value, context)
            else:
                content = self.compile_tree(spec.value.elements, context)
            if content is None:
                return []
            attributes = self.build_attributes(spec.attributes, context)
            return [XmlElement(name=name, children=content, attributes=attributes)]

        if isinstance(spec, Conditional):
            if not self.evaluator.resolve(spec.condition, context):
                return []
            return [XmlElement(name=name, children=self.compile_tree(spec.elements, context))]

        if isinstance(spec, RepeatingBlock):
            items = self._compile_repeating(key, spec, context)
            if is_no_element_key(key):
                return items
            return [XmlElement(name=name, children=items)]

        if isinstance(spec, SpreadArray):
            nodes: List[XmlNode] = []
            for item in spec.items:
                nodes.extend(self.compile_node(key, item, context))
            return nodes

        if isinstance(spec, NestedObject):
            return [XmlElement(name=name, children=self.compile_tree(spec.elements, context))]

        raise TypeError(f"Unknown node spec for '{key}': {spec!r}")

    def build_attributes(
        self, attributes: Dict[str, Any], context: Mapping[str, Any]
    ) -> List[Tuple[str, str]]:
        """Resolve an attribute mapping into ordered (name, value) pairs.

        Values are not escaped unless written as `value(...)` literals.
        """
        pairs: List[Tuple[str, str]] = []
        for attr, expr in attributes.items():
            text = to_text(self.evaluator.resolve(expr, context))
            if text is None:
                if self.suppress_undefined:
                    continue
                text = ""
            pairs.append((attr, text))
        return pairs

    def _compile_literal(
        self, spec: Literal, context: Mapping[str, Any]
    ) -> Optional[List[XmlNode]]:
        """Content of a leaf element, or None when it should be omitted."""
        text = to_text(self.evaluator.resolve(spec.value, context))
        if text is None:
            return None if self.suppress_undefined else []
        return [XmlText(text=text)]

    def _compile_repeating(
        self, key: str, spec: RepeatingBlock, context: Mapping[str, Any]
    ) -> List[XmlNode]:
        source = context.get(spec.from_)
        if source is None:
            raise ContextShapeError(
                f"Array '{key}' reads missing context field '{spec.from_}'",
                key=spec.from_,
            )
        if not isinstance(source, Sequence) or isinstance(source, (str, bytes)):
            raise ContextShapeError(
                f"Array '{key}' expects '{spec.from_}' to be a sequence, "
                f"got {type(source).__name__}",
                key=spec.from_,
            )

        log.debug("Expanding '%s' over %d items of '%s'", key, len(source), spec.from_)
        return [
            XmlElement(
                name=spec.as_,
                children=self.compile_tree(
                    spec.elements, _require_mapping(item, f"{spec.from_}[{index}]")
                ),
            )
            for index, item in enumerate(source)
        ]
