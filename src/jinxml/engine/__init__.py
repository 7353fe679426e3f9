"""jinxml engine - compiles classified templates to XML."""

from jinxml.engine.compiler import Compiler
from jinxml.engine.escape import escape_xml
from jinxml.engine.expressions import ExpressionEvaluator
from jinxml.engine.renderer import Renderer
from jinxml.engine.spec import XmlElement, XmlText

__all__ = [
    "Compiler",
    "Renderer",
    "ExpressionEvaluator",
    "XmlElement",
    "XmlText",
    "escape_xml",
]
