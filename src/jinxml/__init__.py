"""jinxml - template-driven XML generation.

YAML templates describe the XML shape; Jinja expressions pull values from
each context record.
"""

from jinxml._version import __version__
from jinxml.ast import Template, load_template, parse_template
from jinxml.config import BinaryOperator, ConverterConfig
from jinxml.converter import Converter
from jinxml.engine import escape_xml
from jinxml.exceptions import (
    ContextShapeError,
    ExpressionError,
    JinxmlError,
    StreamClosedError,
    TemplateParseError,
)
from jinxml.stream import XmlStream

__all__ = [
    "__version__",
    # core
    "Converter",
    "ConverterConfig",
    "BinaryOperator",
    "XmlStream",
    "Template",
    "load_template",
    "parse_template",
    "escape_xml",
    # errors
    "JinxmlError",
    "TemplateParseError",
    "ExpressionError",
    "ContextShapeError",
    "StreamClosedError",
]
