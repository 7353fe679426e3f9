import pytest
from pydantic import ValidationError

from jinxml.config import BinaryOperator, ConverterConfig


TEMPLATE = "root: Record\nelements:\n  Name: name\n"


def test_defaults():
    config = ConverterConfig(template_string=TEMPLATE)
    assert config.template_path is None
    assert config.format_spacing is None
    assert config.suppress_undefined is True
    assert config.functions == {}
    assert config.transforms == {}
    assert config.binary_operators == {}


def test_template_path_is_coerced(tmp_path):
    config = ConverterConfig(template_path=str(tmp_path / "t.yml"))
    assert config.template_path == tmp_path / "t.yml"


def test_exactly_one_template_source(tmp_path):
    with pytest.raises(ValidationError):
        ConverterConfig()
    with pytest.raises(ValidationError):
        ConverterConfig(template_path=tmp_path / "t.yml", template_string=TEMPLATE)


def test_negative_format_spacing():
    with pytest.raises(ValidationError):
        ConverterConfig(template_string=TEMPLATE, format_spacing=-1)


def test_binary_operator_from_mapping():
    config = ConverterConfig(
        template_string=TEMPLATE,
        binary_operators={"add": {"precedence": 10, "fn": lambda a, b: a + b}},
    )
    op = config.binary_operators["add"]
    assert isinstance(op, BinaryOperator)
    assert op.precedence == 10
    assert op.fn(1, 2) == 3


@pytest.mark.parametrize("name", ["and", "not", "none", "two words", "1st"])
def test_invalid_operator_names(name):
    with pytest.raises(ValidationError):
        ConverterConfig(
            template_string=TEMPLATE,
            binary_operators={name: {"precedence": 10, "fn": max}},
        )


def test_operator_requires_callable():
    with pytest.raises(ValidationError):
        BinaryOperator(precedence=10, fn="not callable")


def test_config_is_frozen():
    config = ConverterConfig(template_string=TEMPLATE)
    with pytest.raises(ValidationError):
        config.suppress_undefined = False
