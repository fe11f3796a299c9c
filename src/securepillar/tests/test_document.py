import pytest

from securepillar import EmptyDocumentError, IncludeDetectedError, ParseError
from securepillar.document import dump, format_buffer, parse, scan_for_includes


def test_parse_returns_mapping():
    assert parse(b"secure_vars:\n  password: hunter2\n") == {
        "secure_vars": {"password": "hunter2"}
    }


def test_parse_empty_input_is_an_empty_document():
    assert parse(b"") == {}
    assert parse(b"# just a comment\n") == {}


def test_parse_keeps_non_string_scalars():
    assert parse(b"a: 1\nb: true\nc: null\n") == {"a": 1, "b": True, "c": None}


def test_include_anywhere_in_the_document_is_rejected():
    data = b"a: 1\nb:\n  c: 2\n  include: foo\n"
    with pytest.raises(IncludeDetectedError) as e:
        parse(data, "x.sls")
    assert e.value.lineno == 4
    assert str(e.value) == "x.sls contains include directives (line 4)"


def test_include_is_detected_before_parsing():
    # The YAML is broken as well, but the include wins.
    with pytest.raises(IncludeDetectedError):
        parse(b"include:\n  - foo\na: [1, 2\n")


def test_include_scan_accepts_str():
    with pytest.raises(IncludeDetectedError):
        scan_for_includes("x: y\n# include: z\n")
    scan_for_includes("x: includes\n")


def test_broken_yaml_raises_parse_error():
    with pytest.raises(ParseError) as e:
        parse(b"a: [1, 2\n", "broken.sls")
    assert str(e.value).startswith("Unable to parse broken.sls: ")


def test_top_level_must_be_a_mapping():
    with pytest.raises(ParseError) as e:
        parse(b"- a\n- b\n")
    assert "expected a mapping at the top level, got list" in str(e.value)


def test_format_buffer_adds_renderer_header():
    assert format_buffer({"a": "b"}) == "#!yaml|gpg\n\na: b\n"


def test_format_buffer_without_header():
    assert format_buffer({"a": "b"}, header=False) == "a: b\n"


def test_format_buffer_refuses_empty_documents():
    with pytest.raises(EmptyDocumentError) as e:
        format_buffer({}, filename="empty.sls")
    assert str(e.value) == "empty.sls has no values to format"


def test_multiline_strings_are_literal_blocks():
    assert dump({"a": "x\ny\n"}) == "a: |\n  x\n  y\n"


def test_dump_round_trips_armored_messages(pki):
    data = {"a": {"b": [pki.encrypt("secret"), "plain"]}}
    assert parse(dump(data)) == data
