"""Compiler IR spec - XML fragment intermediate representation.

The compiler never writes markup itself. It returns lists of these nodes:
an empty list means "omitted", several nodes mean "spliced into the parent
without a wrapper". Only the renderer turns them into tags.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Union


@dataclass
class XmlText:
    """Character content, already in its final (escaped or raw) form."""

    text: str


@dataclass
class XmlElement:
    """A single element with ordered attributes and children."""

    name: str
    children: List["XmlNode"] = field(default_factory=list)
    attributes: List[Tuple[str, str]] = field(
        default_factory=list
    )  # e.g., [("id", "1")]

    @property
    def has_element_children(self) -> bool:
        return any(isinstance(child, XmlElement) for child in self.children)


XmlNode = Union[XmlElement, XmlText]
