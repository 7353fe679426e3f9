from jinxml.engine.escape import escape_xml


def test_escapes_the_five_characters():
    assert escape_xml("&<>\"'") == "&amp;&lt;&gt;&quot;&apos;"


def test_ampersand_is_not_escaped_twice():
    assert escape_xml("&lt;") == "&amp;lt;"


def test_other_characters_untouched():
    text = "Tom & Jerry: 100% <fun> é"
    assert escape_xml(text) == "Tom &amp; Jerry: 100% &lt;fun&gt; é"


def test_none_is_empty():
    assert escape_xml(None) == ""


def test_non_string_is_stringified():
    assert escape_xml(42) == "42"
