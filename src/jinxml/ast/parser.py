from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import yaml
from yaml import YAMLError

from jinxml.ast.spec import Template
from jinxml.exceptions import TemplateParseError

log = logging.getLogger(__name__)


class Parser:
    """Turns template YAML into a classified `Template`."""

    _file_loader: Callable[[str], str]

    def __init__(self, file_loader: Callable[[str], str] | None = None):
        self._file_loader = file_loader or read_file

    def parse_file(self, filepath: str | Path) -> Template:
        source = self._file_loader(str(filepath))
        template = self.parse_yaml(source)
        log.debug("Loaded template %s (root=%s)", filepath, template.root)
        return template

    def parse_yaml(self, source: str) -> Template:
        data = parse_yaml(source)
        template = Template.from_dict(data)
        log.debug(
            "Classified template '%s' with %d top-level elements",
            template.root,
            len(template.elements),
        )
        return template


def read_file(filepath: str) -> str:
    try:
        with open(filepath, "r", encoding="utf-8") as file:
            return file.read()
    except OSError as exc:
        raise TemplateParseError(f"Could not read template file: {filepath}") from exc


def parse_yaml(source: str) -> Any:
    if not isinstance(source, str):
        raise TypeError("`source` must be a string containing YAML")

    try:
        return yaml.safe_load(source)
    except YAMLError as exc:
        raise TemplateParseError(f"Failed to parse template YAML: {exc}") from exc


def parse_template(source: str) -> Template:
    """Parse inline template text."""
    return Parser().parse_yaml(source)


def load_template(path: str | Path) -> Template:
    """Load and parse a template file."""
    return Parser().parse_file(path)
