"""Template AST - parsing and node classification."""

from jinxml.ast.parser import Parser, load_template, parse_template
from jinxml.ast.spec import (
    Conditional,
    Literal,
    NestedObject,
    NodeSpec,
    RepeatingBlock,
    SpreadArray,
    Template,
    ValueWithAttributes,
    classify,
)

__all__ = [
    "Parser",
    "load_template",
    "parse_template",
    "Template",
    "NodeSpec",
    "Literal",
    "ValueWithAttributes",
    "Conditional",
    "RepeatingBlock",
    "SpreadArray",
    "NestedObject",
    "classify",
]
