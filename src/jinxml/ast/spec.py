"""Template AST - the classified node tree a converter walks.

Every node in the template is classified exactly once, when the template is
loaded, into one of the variants below. The compiler dispatches on the
variant type and never re-inspects the raw YAML shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

from jinxml.exceptions import TemplateParseError

ARRAY_MARKER = "[]"
NO_ELEMENT_MARKER = "$"

VALUE_KEY = "value"
ATTRIBUTES_KEY = "attributes"
CONDITION_KEY = "condition"
ELEMENTS_KEY = "elements"
AS_KEY = "as"
FROM_KEY = "from"


def element_name(key: str) -> str:
    """Strip the array marker from a template key."""
    return key[: -len(ARRAY_MARKER)] if key.endswith(ARRAY_MARKER) else key


def is_array_key(key: str) -> bool:
    return key.endswith(ARRAY_MARKER)


def is_no_element_key(key: str) -> bool:
    """`$` and `$[]` splice their children into the parent."""
    return element_name(key) == NO_ELEMENT_MARKER


@dataclass(frozen=True)
class Literal:
    """A leaf: an expression string, a `value(...)` literal or a YAML constant."""

    value: Any


@dataclass(frozen=True)
class NestedObject:
    """A mapping whose keys become child elements."""

    elements: Dict[str, "NodeSpec"] = field(default_factory=dict)


@dataclass(frozen=True)
class ValueWithAttributes:
    """An element with content and an attribute mapping."""

    value: Union[Literal, NestedObject]
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Conditional:
    """Child elements included only when `condition` is truthy."""

    condition: Any
    elements: Dict[str, "NodeSpec"] = field(default_factory=dict)


@dataclass(frozen=True)
class RepeatingBlock:
    """One `as` element per item of `context[from]`."""

    as_: str
    from_: str
    elements: Dict[str, "NodeSpec"] = field(default_factory=dict)


@dataclass(frozen=True)
class SpreadArray:
    """Several sibling specs sharing one parent key."""

    items: List["NodeSpec"] = field(default_factory=list)


NodeSpec = Union[
    Literal, ValueWithAttributes, Conditional, RepeatingBlock, SpreadArray, NestedObject
]


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def classify_tree(d: Any, path: str) -> Dict[str, NodeSpec]:
    """Classify every entry of a node tree, keeping declaration order."""
    if not isinstance(d, Mapping):
        raise TemplateParseError("Node tree must be a mapping", path)

    tree: Dict[str, NodeSpec] = {}
    for key, node in d.items():
        if not isinstance(key, str) or not key:
            raise TemplateParseError(
                f"Element key must be a non-empty string, got {key!r}", path
            )
        tree[key] = classify(key, node, _join(path, key))
    return tree


def classify(key: str, node: Any, path: str = "") -> NodeSpec:
    """Decide which node kind `node` is, from its shape and its key.

    Priority order: value+attributes, condition, array key, plain nesting.
    """
    path = path or key

    if isinstance(node, list):
        return SpreadArray(
            items=[
                _classify_spread_item(key, item, f"{path}[{i}]")
                for i, item in enumerate(node)
            ]
        )

    if not isinstance(node, Mapping):
        return Literal(value=node)

    if VALUE_KEY in node and ATTRIBUTES_KEY in node:
        return _classify_attributed(key, node, path)

    if CONDITION_KEY in node:
        return Conditional(
            condition=node[CONDITION_KEY],
            elements=classify_tree(node.get(ELEMENTS_KEY), _join(path, ELEMENTS_KEY)),
        )

    if is_array_key(key) or key == NO_ELEMENT_MARKER:
        return _classify_repeating(node, path)

    return NestedObject(elements=classify_tree(node, path))


def _classify_spread_item(key: str, item: Any, path: str) -> NodeSpec:
    # `- elements: {...}` is a nested object wrapped in the shared key
    if isinstance(item, Mapping) and set(item) == {ELEMENTS_KEY}:
        return NestedObject(
            elements=classify_tree(item[ELEMENTS_KEY], _join(path, ELEMENTS_KEY))
        )
    return classify(key, item, path)


def _classify_attributed(key: str, node: Mapping, path: str) -> ValueWithAttributes:
    attributes = node[ATTRIBUTES_KEY]
    if not isinstance(attributes, Mapping):
        raise TemplateParseError("'attributes' must be a mapping", path)
    for name, expr in attributes.items():
        if not isinstance(name, str) or not name:
            raise TemplateParseError(
                f"Attribute name must be a non-empty string, got {name!r}", path
            )
        if isinstance(expr, (Mapping, list)):
            raise TemplateParseError(f"Attribute '{name}' must be a scalar expression", path)

    value = classify(key, node[VALUE_KEY], _join(path, VALUE_KEY))
    if not isinstance(value, (Literal, NestedObject)):
        raise TemplateParseError("'value' must be an expression or a nested object", path)

    return ValueWithAttributes(value=value, attributes=dict(attributes))


def _classify_repeating(node: Mapping, path: str) -> RepeatingBlock:
    as_ = node.get(AS_KEY)
    from_ = node.get(FROM_KEY)
    if not isinstance(as_, str) or not as_:
        raise TemplateParseError("Array element requires an 'as' element name", path)
    if not isinstance(from_, str) or not from_:
        raise TemplateParseError("Array element requires a 'from' context key", path)

    return RepeatingBlock(
        as_=as_,
        from_=from_,
        elements=classify_tree(node.get(ELEMENTS_KEY), _join(path, ELEMENTS_KEY)),
    )


@dataclass(frozen=True)
class Template:
    """A parsed template: the root element name plus its classified tree."""

    root: str
    elements: Dict[str, NodeSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Any) -> "Template":
        if not isinstance(d, Mapping):
            raise TemplateParseError(
                "Template must be a mapping with 'root' and 'elements'"
            )

        root = d.get("root")
        if not isinstance(root, str) or not root:
            raise TemplateParseError("Template 'root' must be a non-empty string")
        if "elements" not in d:
            raise TemplateParseError("Template is missing 'elements'")

        return cls(root=root, elements=classify_tree(d["elements"], ELEMENTS_KEY))
