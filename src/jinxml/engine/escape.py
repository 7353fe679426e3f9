"""XML entity escaping for literal values."""

from typing import Any

# Ampersand goes first so later entities are not escaped twice.
XML_ENTITIES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(unsafe: Any) -> str:
    """Replace the five XML special characters with named entities.

    Args:
        unsafe: Text to escape. Non-strings are converted with `str()`.

    Returns:
        Escaped text, or an empty string for `None`.
    """
    if unsafe is None:
        return ""

    text = str(unsafe)
    for char, entity in XML_ENTITIES:
        text = text.replace(char, entity)
    return text
