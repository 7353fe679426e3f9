"""Converter - the public entry point: template in, XML out."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from jinxml.ast.parser import Parser
from jinxml.ast.spec import Template
from jinxml.config import ConverterConfig
from jinxml.engine.compiler import Compiler
from jinxml.engine.expressions import ExpressionEvaluator
from jinxml.engine.renderer import Renderer
from jinxml.stream import Fragments, Output, XmlStream

log = logging.getLogger(__name__)


class Converter:
    """Converts context records to XML using a YAML template.

    The template is parsed and classified once, here. The same instance can
    then convert any number of contexts.

    Usage:
        # record.yml:
        #   root: Record
        #   elements:
        #     FirstName: first_name
        #     LastName: last_name
        converter = Converter(template_path="record.yml")
        converter.convert({"first_name": "John", "last_name": "Doe"})
        # '<Record><FirstName>John</FirstName><LastName>Doe</LastName></Record>'
    """

    def __init__(self, config: Optional[ConverterConfig] = None, **options: Any):
        """Initialize the converter.

        Args:
            config: A prepared ConverterConfig.
            **options: ConverterConfig fields, used when `config` is omitted.

        Raises:
            TemplateParseError: If the template cannot be read or parsed.
            pydantic.ValidationError: If the options are invalid.
        """
        if config is None:
            config = ConverterConfig(**options)
        elif options:
            raise TypeError("Pass either a config or keyword options, not both")

        self.config = config

        parser = Parser()
        if config.template_path is not None:
            self._template = parser.parse_file(config.template_path)
        else:
            self._template = parser.parse_yaml(config.template_string or "")

        self.evaluator = ExpressionEvaluator(
            functions=config.functions,
            transforms=config.transforms,
            binary_operators=config.binary_operators,
        )
        self.compiler = Compiler(
            self.evaluator, suppress_undefined=config.suppress_undefined
        )
        self.renderer = Renderer(indent=config.format_spacing)

    @property
    def template(self) -> Template:
        return self._template

    def convert(self, context: Mapping[str, Any]) -> str:
        """Convert one context to a complete XML document string.

        Raises:
            ExpressionError: If an expression cannot be evaluated.
            ContextShapeError: If the context does not fit the template.
        """
        root = self.compiler.compile(self._template, context)
        return self.renderer.render(root)

    def stream(
        self,
        document_open: Fragments = None,
        document_close: Fragments = None,
        output: Output = None,
    ) -> XmlStream:
        """Create a streaming adapter that converts records between envelopes."""
        return XmlStream(
            self,
            document_open=document_open,
            document_close=document_close,
            output=output,
        )
