import pytest

from jinxml.ast.parser import Parser, load_template, parse_template
from jinxml.ast.spec import Literal, RepeatingBlock
from jinxml.exceptions import TemplateParseError


SAMPLE = """root: Person
elements:
  Name: name
  "Friends[]":
    as: Friend
    from: friends
    elements:
      Name: name
"""


def test_parse_template():
    template = parse_template(SAMPLE)

    assert template.root == "Person"
    assert template.elements["Name"] == Literal("name")
    assert isinstance(template.elements["Friends[]"], RepeatingBlock)


def test_load_template(tmp_path):
    path = tmp_path / "person.yml"
    path.write_text(SAMPLE)

    template = load_template(path)
    assert template.root == "Person"
    assert list(template.elements) == ["Name", "Friends[]"]


def test_custom_file_loader():
    """Parser reads files through the injected loader."""
    seen = []

    def loader(path):
        seen.append(path)
        return SAMPLE

    template = Parser(file_loader=loader).parse_file("virtual.yml")
    assert seen == ["virtual.yml"]
    assert template.root == "Person"


def test_missing_file(tmp_path):
    with pytest.raises(TemplateParseError, match="Could not read template file"):
        load_template(tmp_path / "missing.yml")


def test_invalid_yaml():
    with pytest.raises(TemplateParseError, match="Failed to parse template YAML"):
        parse_template("root: [Record\nelements: {")


def test_empty_document():
    with pytest.raises(TemplateParseError):
        parse_template("")
