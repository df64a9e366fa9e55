"""
Unit tests for struct tag parsing, rendering and wire-name synthesis.
"""
import unittest

from json_snake_generator.domain.models import StructTag, TagEntry
from json_snake_generator.domain.tags import (
    go_tag_literal,
    parse_tag,
    quote_tag_value,
    serialize_tag,
    synthesize_wire_tag,
    unquote_string_literal,
)
from json_snake_generator.exceptions import TagSyntaxError


class TestParseTag(unittest.TestCase):
    """Test parsing of raw tag text into ordered entries."""

    def test_empty_and_missing_tags(self):
        self.assertEqual(len(parse_tag(None)), 0)
        self.assertEqual(len(parse_tag("")), 0)
        self.assertEqual(len(parse_tag("   ")), 0)

    def test_entries_keep_source_order(self):
        tag = parse_tag('db:"user_name" json:",omitempty" xml:"name"')
        self.assertEqual(tag.keys(), ["db", "json", "xml"])
        self.assertIn("xml", tag)
        self.assertNotIn("yaml", tag)
        self.assertEqual(tag.get("json").value, ",omitempty")

    def test_bare_key_is_a_flag(self):
        tag = parse_tag('required json:"id"')
        self.assertTrue(tag.get("required").is_flag)
        self.assertEqual(tag.keys(), ["required", "json"])

    def test_empty_value_is_not_a_flag(self):
        entry = parse_tag('json:""').get("json")
        self.assertEqual(entry.value, "")
        self.assertFalse(entry.is_flag)

    def test_value_characters_beyond_identifiers(self):
        tag = parse_tag('validate:"min=1,max=10|eq=0" doc:"a b.c/d"')
        self.assertEqual(tag.get("validate").value, "min=1,max=10|eq=0")
        self.assertEqual(tag.get("doc").value, "a b.c/d")

    def test_escapes_are_decoded(self):
        tag = parse_tag(r'doc:"say \"hi\"\tnow" hex:"\x41é"')
        self.assertEqual(tag.get("doc").value, 'say "hi"\tnow')
        self.assertEqual(tag.get("hex").value, "Aé")

    def test_space_after_colon_is_accepted(self):
        self.assertEqual(parse_tag('json: "id"').get("json").value, "id")

    def test_duplicate_key_keeps_first_position_and_last_value(self):
        tag = parse_tag('json:"a" db:"x" json:"b"')
        self.assertEqual(tag.keys(), ["json", "db"])
        self.assertEqual(tag.get("json").value, "b")

    def test_unterminated_value(self):
        with self.assertRaises(TagSyntaxError):
            parse_tag('json:"id')

    def test_unquoted_value(self):
        with self.assertRaises(TagSyntaxError) as ctx:
            parse_tag("json:id")
        self.assertEqual(ctx.exception.error_code, "TAG_SYNTAX_ERROR")

    def test_missing_key(self):
        with self.assertRaises(TagSyntaxError):
            parse_tag(':"id"')

    def test_unknown_escape(self):
        with self.assertRaises(TagSyntaxError):
            parse_tag(r'json:"\q"')

    def test_single_quote_escape_is_invalid_in_double_quotes(self):
        with self.assertRaises(TagSyntaxError):
            parse_tag(r'a:"\'"')


class TestSerializeTag(unittest.TestCase):
    """Test rendering of tags back to text and Go literals."""

    def test_round_trip_preserves_order(self):
        raw = 'db:"user_name" json:"user,omitempty" required'
        self.assertEqual(serialize_tag(parse_tag(raw)), raw)

    def test_round_trip_of_escaped_values(self):
        raw = r'doc:"say \"hi\""'
        self.assertEqual(serialize_tag(parse_tag(raw)), raw)

    def test_whitespace_is_normalized(self):
        self.assertEqual(serialize_tag(parse_tag('a:"1"   b:"2"')), 'a:"1" b:"2"')

    def test_quote_tag_value(self):
        self.assertEqual(quote_tag_value('a"b\\c'), '"a\\"b\\\\c"')

    def test_go_tag_literal_prefers_raw_string(self):
        tag = StructTag.from_pairs([("json", "id")])
        self.assertEqual(go_tag_literal(tag), '`json:"id"`')

    def test_go_tag_literal_with_backtick(self):
        tag = StructTag.from_pairs([("doc", "a`b")])
        self.assertEqual(go_tag_literal(tag), '"doc:\\"a`b\\""')

    def test_unquote_string_literal(self):
        self.assertEqual(unquote_string_literal(r'"a\"b"'), 'a"b')
        with self.assertRaises(TagSyntaxError):
            unquote_string_literal('"a" junk')


class TestSynthesizeWireTag(unittest.TestCase):
    """Test the decision of the json entry."""

    def test_missing_entry_is_appended(self):
        tag = synthesize_wire_tag("UserName", parse_tag('db:"name"'), "user_name")
        self.assertEqual(serialize_tag(tag), 'db:"name" json:"user_name"')

    def test_no_tag_at_all(self):
        tag = synthesize_wire_tag("ID", StructTag(), "id")
        self.assertEqual(tag.entries, (TagEntry("json", "id"),))

    def test_options_get_derived_name_prefixed(self):
        tag = synthesize_wire_tag("UserName", parse_tag('json:",omitempty"'), "user_name")
        self.assertEqual(tag.get("json").value, "user_name,omitempty")

    def test_empty_and_flag_values_are_filled_in_place(self):
        tag = synthesize_wire_tag("ID", parse_tag('json:"" db:"id"'), "id")
        self.assertEqual(serialize_tag(tag), 'json:"id" db:"id"')
        tag = synthesize_wire_tag("ID", parse_tag('json db:"id"'), "id")
        self.assertEqual(serialize_tag(tag), 'json:"id" db:"id"')

    def test_explicit_name_is_untouched(self):
        existing = parse_tag('json:"custom_field"')
        tag = synthesize_wire_tag("MyField", existing, "my_field")
        self.assertEqual(tag, existing)
        self.assertEqual(tag.get("json").value, "custom_field")

    def test_dash_is_untouched(self):
        existing = parse_tag('json:"-"')
        self.assertEqual(synthesize_wire_tag("Secret", existing, "secret"), existing)

    def test_idempotent(self):
        for raw in ['', 'json:",string"', 'db:"x"', 'json:"name"']:
            once = synthesize_wire_tag("FieldName", parse_tag(raw), "field_name")
            twice = synthesize_wire_tag("FieldName", once, "field_name")
            self.assertEqual(once, twice)

    def test_input_not_mutated(self):
        existing = parse_tag('json:",omitempty"')
        synthesize_wire_tag("UserName", existing, "user_name")
        self.assertEqual(existing.get("json").value, ",omitempty")
