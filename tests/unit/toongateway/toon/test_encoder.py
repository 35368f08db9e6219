# -*- coding: utf-8 -*-
"""Location: ./tests/unit/toongateway/toon/test_encoder.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Unit tests for the TOON encoder.
"""

# Standard
import itertools

# Third-Party
import pytest

# First-Party
from toongateway.toon.encoder import DEPTH_SENTINEL, encode, encode_key, encode_number, encode_string, needs_quotes, quote_string, ToonEncoder
from toongateway.toon.options import build_options, EncodingOptions


class TestEncodePrimitives:
    """Test encoding of top-level scalars."""

    def test_null_and_booleans(self):
        """null, true and false encode to their literals."""
        assert encode(None) == "null"
        assert encode(True) == "true"
        assert encode(False) == "false"

    def test_integers(self):
        """Integers keep every digit."""
        assert encode(0) == "0"
        assert encode(-17) == "-17"
        assert encode(2**70) == "1180591620717411303424"

    def test_floats(self):
        """Floats use the shortest fixed-point form."""
        assert encode_number(3.14) == "3.14"
        assert encode_number(-2.5) == "-2.5"
        assert encode_number(1.0) == "1"
        assert encode_number(-0.0) == "0"
        assert encode_number(1e20) == "100000000000000000000"
        assert encode_number(1.5e-7) == "0.00000015"

    def test_non_finite_numbers(self):
        """NaN and infinities encode as null."""
        assert encode_number(float("nan")) == "null"
        assert encode_number(float("inf")) == "null"
        assert encode_number(float("-inf")) == "null"

    def test_unsupported_type(self):
        """Values outside the JSON data model are rejected."""
        with pytest.raises(TypeError):
            encode({"when": object()})


class TestStringQuoting:
    """Test the quoting rules for string values."""

    @pytest.mark.parametrize(
        "value",
        ["", " padded", "padded ", "a,b", "k: v", 'say "hi"', "it's", "back\\slash", "line\nbreak", "tab\there", "true", "False", "NULL", "42", "-3.5", "1e5", "- item", "[x]", "{x}"],
    )
    def test_requires_quotes(self, value):
        """Ambiguous strings are quoted."""
        assert needs_quotes(value)

    @pytest.mark.parametrize("value", ["hello", "hello world", "-item", "a|b", "café", "x-y_z.w", "truthy", "1_000", "\u0661\u0662", "0x1F", "1e", "+nan", "infinit"])
    def test_bare(self, value):
        """Unambiguous strings stay bare."""
        assert not needs_quotes(value)
        assert encode_string(value) == value

    def test_active_delimiter_only(self):
        """Only the active delimiter forces quotes."""
        assert encode_string("a,b", "|") == "a,b"
        assert encode_string("a|b", "|") == '"a|b"'
        assert encode_string("a\tb", "\t") == '"a\\tb"'

    @pytest.mark.parametrize("value", ["0x1p3", "0X1.8P-2", "0x_1p0", ".5", "5.", "+7", "-1E-3", "inf", "-Infinity", "NaN", "1e400"])
    def test_number_spellings_quoted(self, value):
        """Every spelling a number parser accepts is quoted."""
        assert encode_string(value) == f"\"{value}\""

    def test_list_marker_and_literals(self):
        """Dash-space prefixes and literal look-alikes are quoted."""
        assert encode_string("- item") == '"- item"'
        assert encode_string("true") == '"true"'
        assert encode_string("") == '""'

    def test_escapes(self):
        """Backslash, quote and control characters are escaped."""
        assert quote_string('a"b\\c') == '"a\\"b\\\\c"'
        assert quote_string("a\r\nb") == '"a\\r\\nb"'
        assert quote_string("\x1f") == '"\\u001f"'


class TestKeyQuoting:
    """Test key quoting on object lines and in tabular headers."""

    def test_object_keys(self):
        """Keys with separators or number shapes are quoted."""
        assert encode_key("name") == "name"
        assert encode_key("user_id") == "user_id"
        assert encode_key("first name") == '"first name"'
        assert encode_key("a,b") == '"a,b"'
        assert encode_key("a:b") == '"a:b"'
        assert encode_key("[0]") == '"[0]"'
        assert encode_key("-flag") == '"-flag"'
        assert encode_key("3") == '"3"'
        assert encode_key("0x1p3") == '"0x1p3"'
        assert encode_key("1_000") == "1_000"
        assert encode_key("") == '""'

    def test_header_keys_follow_delimiter(self):
        """Header fields are quoted for the active delimiter, not always for commas."""
        assert encode_key("a,b", ",", in_header=True) == '"a,b"'
        assert encode_key("a,b", "|", in_header=True) == "a,b"
        assert encode_key("a\tb", "\t", in_header=True) == '"a\\tb"'

    def test_control_characters_in_keys(self):
        """Keys carrying control characters are quoted and escaped."""
        assert encode_key("a\nb") == '"a\\nb"'


class TestEncodeObjects:
    """Test encoding of objects."""

    def test_flat_object(self):
        """Keys are sorted and written one per line."""
        assert encode({"name": "Alice", "id": 123}) == "id: 123\nname: Alice"

    def test_nested_object(self):
        """Nested objects indent one unit per level."""
        value = {"user": {"profile": {"city": "Paris"}, "id": 1}}
        assert encode(value) == "user:\n  id: 1\n  profile:\n    city: Paris"

    def test_empty_object(self):
        """Empty objects have no body."""
        assert encode({}) == ""
        assert encode({"meta": {}, "x": 1}) == "meta:\nx: 1"

    def test_custom_indent(self):
        """The indent width applies to every level."""
        value = {"a": {"b": {"c": 1}}}
        assert encode(value, EncodingOptions(indent_width=4)) == "a:\n    b:\n        c: 1"

    def test_quoted_keys_and_values(self):
        """Keys and values are quoted independently."""
        assert encode({"first name": "true"}) == '"first name": "true"'


class TestEncodeArrays:
    """Test the three array forms."""

    def test_users_table(self):
        """Same-shaped flat objects become a table."""
        value = {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}
        assert encode(value) == "users[2]{id,name}:\n    1,Alice\n    2,Bob"

    def test_tab_delimited_table(self):
        """Tab tables mark the header with spaces."""
        value = {"items": [{"id": 1, "name": "Widget"}, {"id": 2, "name": "Gadget"}]}
        assert encode(value, build_options(delimiter="\t")) == "items[2 ]{id name}:\n    1\tWidget\n    2\tGadget"

    def test_pipe_delimited_table(self):
        """Pipe tables mark the header with pipes."""
        value = {"items": [{"id": 1, "name": "Widget"}]}
        assert encode(value, build_options(delimiter="|")) == "items[1|]{id|name}:\n    1|Widget"

    def test_length_marker_inline(self):
        """Length markers prefix the count with #."""
        value = {"tags": ["foo", "bar", "baz"]}
        assert encode(value, build_options(length_marker=True)) == "tags[#3]: foo,bar,baz"

    def test_length_marker_everywhere(self):
        """Length markers apply to tabular, list and empty arrays."""
        opts = build_options(length_marker=True)
        assert encode({"t": [{"a": 1}]}, opts) == "t[#1]{a}:\n    1"
        assert encode({"l": [1, [2]]}, opts) == "l[#2]:\n    - 1\n    - [#1]: 2"
        assert encode({"e": []}, opts) == "e[#0]:"

    def test_inline_delimiters(self):
        """Inline arrays mark non-comma delimiters after the count."""
        assert encode({"v": [1, "a b", None]}) == "v[3]: 1,a b,null"
        assert encode({"v": [1, 2]}, build_options(delimiter="|")) == "v[2|]: 1|2"
        assert encode({"v": [1, 2]}, build_options(delimiter="\t")) == "v[2 ]: 1\t2"

    def test_inline_quotes_delimiter(self):
        """Inline values containing the delimiter are quoted."""
        assert encode({"v": ["a,b", "c"]}) == 'v[2]: "a,b",c'

    def test_empty_array(self):
        """Empty arrays are a bare header."""
        assert encode({"items": []}) == "items[0]:"
        assert encode([]) == "[0]:"

    def test_table_requires_same_keys(self):
        """Objects with different key sets fall back to a list."""
        value = {"rows": [{"a": 1}, {"b": 2}]}
        assert encode(value) == "rows[2]:\n    - a: 1\n    - b: 2"

    def test_table_requires_scalar_values(self):
        """Objects with nested values fall back to a list."""
        value = {"rows": [{"a": 1, "b": [1]}, {"a": 2, "b": [2]}]}
        assert encode(value) == "rows[2]:\n    - a: 1\n      b[1]: 1\n    - a: 2\n      b[1]: 2"

    def test_empty_objects_are_not_tabular(self):
        """Empty objects in a list are a dash followed by a space."""
        assert encode({"rows": [{}, {}]}) == "rows[2]:\n    - \n    - "
        assert encode({"rows": [{}, 1]}) == "rows[2]:\n    - \n    - 1"

    def test_mixed_list(self):
        """Mixed content uses dash entries; objects share the dash line."""
        value = {"items": [1, {"b": 2, "a": 1}, "x"]}
        assert encode(value) == "items[3]:\n    - 1\n    - a: 1\n      b: 2\n    - x"

    def test_nested_array_entries(self):
        """Nested arrays share the dash line."""
        assert encode({"m": [[1, 2], [3]]}) == "m[2]:\n    - [2]: 1,2\n    - [1]: 3"

    def test_nested_table_in_list(self):
        """Continuation lines of a nested table sit two spaces past the dash."""
        value = [[{"a": 1}, {"a": 2}], 5]
        assert encode(value) == "[2]:\n  - [2]{a}:\n        1\n        2\n  - 5"

    def test_nested_list_in_list(self):
        """Nested list-form arrays get the same continuation indent."""
        assert encode([[[1], [2]], 5]) == "[2]:\n  - [2]:\n        - [1]: 1\n        - [1]: 2\n  - 5"

    def test_top_level_table(self):
        """Top-level tables indent rows by one unit."""
        assert encode([{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]) == "[2]{a,b}:\n  1,x\n  2,y"

    def test_table_values_quoted(self):
        """Table cells follow the value quoting rules."""
        value = {"t": [{"k": "true", "v": ""}]}
        assert encode(value) == 't[1]{k,v}:\n    "true",""'


class TestCanonicalOutput:
    """Test determinism and key canonicalization."""

    def test_deterministic(self):
        """Repeated calls give identical text."""
        value = {"b": [{"y": 1, "x": 2}], "a": {"z": [1, 2], "c": None}}
        encoder = ToonEncoder()
        assert encoder.encode(value) == encoder.encode(value) == encode(value)

    def test_key_order_invariance(self):
        """Every key-insertion order produces the same text."""
        items = [("gamma", 3), ("alpha", [1, 2]), ("beta", {"y": 1, "x": 2}), ("delta", "d")]
        outputs = {encode(dict(perm)) for perm in itertools.permutations(items)}
        assert len(outputs) == 1

    def test_table_field_order_invariance(self):
        """Table rows are ordered by the sorted header, whatever the input order."""
        first = encode({"t": [{"b": 1, "a": 2}, {"a": 3, "b": 4}]})
        assert first == "t[2]{a,b}:\n    2,1\n    3,4"


class TestDepthLimit:
    """Test the nesting depth cap."""

    def test_deep_arrays(self):
        """A 1000-level array hits the sentinel instead of recursing."""
        value = []
        for _ in range(1000):
            value = [value]
        out = encode(value)
        assert DEPTH_SENTINEL in out

    def test_deep_objects(self):
        """A 1000-level object hits the sentinel on the key line."""
        value = {}
        for _ in range(1000):
            value = {"a": value}
        out = encode(value)
        assert out.splitlines()[-1].endswith(f"a: {DEPTH_SENTINEL}")

    def test_shallow_values_untouched(self):
        """Normal nesting never produces the sentinel."""
        value = {"a": [{"b": [[1]]}]}
        assert DEPTH_SENTINEL not in encode(value)
