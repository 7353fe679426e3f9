"""Tests for node classification."""

import pytest

from jinxml.ast.spec import (
    Conditional,
    Literal,
    NestedObject,
    RepeatingBlock,
    SpreadArray,
    Template,
    ValueWithAttributes,
    classify,
    classify_tree,
    element_name,
    is_array_key,
    is_no_element_key,
)
from jinxml.exceptions import TemplateParseError


# =============================================================================
# Keys
# =============================================================================


def test_element_name_strips_array_marker():
    assert element_name("Friends[]") == "Friends"
    assert element_name("Friends") == "Friends"
    assert element_name("$[]") == "$"


def test_array_and_no_element_keys():
    assert is_array_key("Friends[]")
    assert not is_array_key("Friends")
    assert is_no_element_key("$")
    assert is_no_element_key("$[]")
    assert not is_no_element_key("$Friends")


# =============================================================================
# Variants
# =============================================================================


def test_string_is_literal():
    assert classify("Name", "first_name") == Literal("first_name")


def test_non_string_scalars_are_literal_constants():
    """Numbers, booleans and null are kept as constants."""
    assert classify("Count", 3) == Literal(3)
    assert classify("Flag", True) == Literal(True)
    assert classify("Nothing", None) == Literal(None)


def test_value_with_attributes():
    spec = classify("FirstName", {"value": "first_name", "attributes": {"id": "value(1)"}})
    assert spec == ValueWithAttributes(
        value=Literal("first_name"), attributes={"id": "value(1)"}
    )


def test_value_with_attributes_nested_value():
    """The value of an attributed node may itself be a nested object."""
    spec = classify(
        "Address",
        {"value": {"Street": "street"}, "attributes": {"type": "value(home)"}},
    )
    assert isinstance(spec, ValueWithAttributes)
    assert spec.value == NestedObject({"Street": Literal("street")})


def test_conditional():
    spec = classify("Company", {"condition": "employed", "elements": {"Name": "company"}})
    assert spec == Conditional(condition="employed", elements={"Name": Literal("company")})


def test_repeating_block():
    spec = classify(
        "Friends[]", {"as": "Friend", "from": "friends", "elements": {"Name": "name"}}
    )
    assert spec == RepeatingBlock(
        as_="Friend", from_="friends", elements={"Name": Literal("name")}
    )


def test_no_element_key_is_repeating_block():
    spec = classify("$", {"as": "Friend", "from": "friends", "elements": {}})
    assert isinstance(spec, RepeatingBlock)


def test_spread_array():
    """Each item is classified under the shared key."""
    spec = classify(
        "Phone",
        ["home_phone", {"value": "cell", "attributes": {"kind": "value(cell)"}}],
    )
    assert isinstance(spec, SpreadArray)
    assert spec.items[0] == Literal("home_phone")
    assert isinstance(spec.items[1], ValueWithAttributes)


def test_spread_item_with_only_elements_is_nested_object():
    spec = classify("Phone", [{"elements": {"Number": "work_phone"}}])
    assert spec.items == [NestedObject({"Number": Literal("work_phone")})]


def test_plain_mapping_is_nested_object():
    spec = classify("Name", {"First": "first_name", "Last": "last_name"})
    assert spec == NestedObject({"First": Literal("first_name"), "Last": Literal("last_name")})


def test_declaration_order_is_kept():
    tree = classify_tree({"B": "b", "A": "a", "C": "c"}, "elements")
    assert list(tree) == ["B", "A", "C"]


# =============================================================================
# Priority
# =============================================================================


def test_attributes_win_over_condition():
    spec = classify(
        "Name",
        {"value": "name", "attributes": {"id": "id"}, "condition": "false", "elements": {}},
    )
    assert isinstance(spec, ValueWithAttributes)


def test_condition_wins_over_array_key():
    spec = classify(
        "Friends[]",
        {"condition": "has_friends", "as": "Friend", "from": "friends", "elements": {}},
    )
    assert isinstance(spec, Conditional)


def test_as_and_from_without_array_key_nest():
    """`as`/`from` only mean repetition under an array or `$` key."""
    spec = classify("Friends", {"as": "Friend", "from": "friends"})
    assert spec == NestedObject({"as": Literal("Friend"), "from": Literal("friends")})


def test_value_without_attributes_nests():
    spec = classify("Name", {"value": "name"})
    assert spec == NestedObject({"value": Literal("name")})


# =============================================================================
# Malformed shapes
# =============================================================================


def test_repeating_block_requires_as():
    with pytest.raises(TemplateParseError, match="'as'"):
        classify("Friends[]", {"from": "friends", "elements": {}})


def test_repeating_block_requires_from():
    with pytest.raises(TemplateParseError) as exc_info:
        classify_tree({"Person": {"Friends[]": {"as": "Friend"}}}, "elements")
    assert exc_info.value.path == "elements.Person.Friends[]"
    assert "'from'" in str(exc_info.value)


def test_conditional_requires_elements_mapping():
    with pytest.raises(TemplateParseError, match="must be a mapping"):
        classify("Company", {"condition": "employed", "elements": ["a"]})


def test_attributes_must_be_mapping():
    with pytest.raises(TemplateParseError, match="'attributes'"):
        classify("Name", {"value": "name", "attributes": ["id"]})


def test_attribute_values_must_be_scalars():
    with pytest.raises(TemplateParseError):
        classify("Name", {"value": "name", "attributes": {"id": {"nested": "x"}}})


def test_attributed_value_cannot_repeat_or_branch():
    with pytest.raises(TemplateParseError, match="'value'"):
        classify(
            "Name",
            {"value": {"condition": "x", "elements": {}}, "attributes": {}},
        )


def test_non_string_element_key():
    with pytest.raises(TemplateParseError, match="non-empty string"):
        classify_tree({1: "one"}, "elements")


# =============================================================================
# Template
# =============================================================================


def test_template_from_dict():
    template = Template.from_dict({"root": "Record", "elements": {"Name": "name"}})
    assert template.root == "Record"
    assert template.elements == {"Name": Literal("name")}


def test_template_requires_root():
    with pytest.raises(TemplateParseError, match="root"):
        Template.from_dict({"elements": {}})


def test_template_requires_elements():
    with pytest.raises(TemplateParseError, match="elements"):
        Template.from_dict({"root": "Record"})


def test_template_must_be_mapping():
    with pytest.raises(TemplateParseError):
        Template.from_dict(["root", "Record"])
