from jinxml.engine.renderer import Renderer
from jinxml.engine.spec import XmlElement, XmlText


def leaf(name, text, attributes=None):
    return XmlElement(name=name, children=[XmlText(text)], attributes=attributes or [])


def test_compact():
    root = XmlElement("Record", [leaf("A", "1"), XmlElement("B", [leaf("C", "2")])])
    assert Renderer().render(root) == "<Record><A>1</A><B><C>2</C></B></Record>"


def test_attributes():
    element = leaf("A", "x", [("id", "1"), ("kind", "k")])
    assert Renderer().render(element) == '<A id="1" kind="k">x</A>'
    assert Renderer().render_attributes([("id", "1"), ("kind", "k")]) == 'id="1" kind="k"'


def test_empty_element():
    assert Renderer().render(XmlElement("Empty")) == "<Empty></Empty>"
    assert Renderer(indent=2).render(XmlElement("Empty")) == "<Empty></Empty>"


def test_pretty_depth_is_structural():
    """Angle brackets inside text never change indentation."""
    root = XmlElement("Doc", [leaf("Note", "<b>x</b> </i>"), leaf("After", "y")])
    assert Renderer(indent=2).render(root) == "\n".join(
        [
            "<Doc>",
            "  <Note><b>x</b> </i></Note>",
            "  <After>y</After>",
            "</Doc>",
        ]
    )


def test_pretty_mixed_content():
    """Text next to element children gets its own line."""
    root = XmlElement("Doc", [XmlText("hello"), leaf("A", "1")])
    assert Renderer(indent=" ").render(root) == "<Doc>\n hello\n <A>1</A>\n</Doc>"


def test_indent_string_is_verbatim():
    root = XmlElement("Doc", [leaf("A", "1")])
    assert Renderer(indent="--").render(root) == "<Doc>\n--<A>1</A>\n</Doc>"


def test_no_indent_is_compact():
    root = XmlElement("Doc", [leaf("A", "1")])
    for indent in (None, 0, ""):
        renderer = Renderer(indent=indent)
        assert not renderer.pretty
        assert renderer.render(root) == "<Doc><A>1</A></Doc>"
