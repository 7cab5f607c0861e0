"""Tests for the Validator core algorithm."""

import json
import os
import sys
import unittest
from decimal import Decimal

import jsonpointer
import pytest
from jsoncomparison import NO_DIFF, Compare

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsonsval.schemastore import SchemaStore
from jsonsval.validator import Validator, validate_json_against_schema
from jsonsval.validationerrors import (
    AnyOfError, ConstError, ContentEncodingError, DependencyError, DisallowError, DivisibleByError, EnumError,
    ExclusiveMaximumError, FalseSchemaError, FormatError, InvalidTypeError, ListValidationException,
    MaxContainsError, MaximumError, MaxLengthError, MinContainsError, MinimumError, MissingPathError,
    MissingPropertyError, MultipleError, NotError, OneOfError, PatternError, TypeDisallowedError, UniqueItemsError)

DRAFT_3 = 'http://json-schema.org/draft-03/schema#'
DRAFT_4 = 'http://json-schema.org/draft-04/schema#'
DRAFT_7 = 'http://json-schema.org/draft-07/schema#'
DRAFT_2019_09 = 'https://json-schema.org/draft/2019-09/schema'
DRAFT_2020_12 = 'https://json-schema.org/draft/2020-12/schema'

SAMPLE_INSTANCES = [None, True, False, 0, 1, 1.5, -3, "", "text", [], [1, "a"], {}, {"a": {"b": [1, 2]}}]


def errors_for(schema, instance):
    """Build the schema in a fresh store and return every error for the instance."""
    root = SchemaStore().load_schema_json(schema)
    return Validator().validate_all(root, instance)


class TestBooleanSchemas(unittest.TestCase):
    """The true and false schemas."""

    def test_true_schema_accepts_everything(self):
        """The true schema yields no errors for any instance."""
        for instance in SAMPLE_INSTANCES:
            self.assertEqual(errors_for(True, instance), [])

    def test_empty_schema_accepts_everything(self):
        """An empty object schema behaves like true."""
        for instance in SAMPLE_INSTANCES:
            self.assertEqual(errors_for({}, instance), [])

    def test_false_schema_rejects_everything_once(self):
        """The false schema yields exactly one error for any instance."""
        for instance in SAMPLE_INSTANCES:
            errors = errors_for(False, instance)
            self.assertEqual(len(errors), 1)
            self.assertIsInstance(errors[0], FalseSchemaError)
            self.assertEqual(errors[0].pointer, '')

    def test_false_property_schema(self):
        """A false property schema reports the property location."""
        errors = errors_for({"properties": {"a": False}}, {"a": 1, "b": 2})
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].pointer, '/a')


class TestCanonicalEquality(unittest.TestCase):
    """enum, const and uniqueItems compare canonical forms."""

    def test_enum_numbers_compare_by_value(self):
        """1 and 1.0 are the same enum member."""
        self.assertEqual(errors_for({"enum": [1]}, 1.0), [])
        self.assertEqual(errors_for({"enum": [1.0]}, 1), [])

    def test_enum_boolean_is_not_number(self):
        """true is not equal to 1, and false is not equal to 0."""
        errors = errors_for({"enum": [1, 0]}, True)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], EnumError)
        self.assertEqual(len(errors_for({"enum": [0]}, False)), 1)

    def test_const_object_key_order(self):
        """Objects with the same members in a different order are equal."""
        self.assertEqual(errors_for({"const": {"a": 1, "b": [1, 2]}}, {"b": [1, 2], "a": 1}), [])

    def test_const_array_order_matters(self):
        """Arrays differing only in element order are not equal."""
        errors = errors_for({"const": [1, 2]}, [2, 1])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], ConstError)

    def test_const_null(self):
        """const null only accepts null."""
        self.assertEqual(errors_for({"const": None}, None), [])
        self.assertEqual(len(errors_for({"const": None}, 0)), 1)

    def test_unique_items_numeric_equality(self):
        """[1, 1.0] holds a duplicate."""
        errors = errors_for({"uniqueItems": True}, [1, 1.0])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], UniqueItemsError)

    def test_unique_items_different_kinds(self):
        """Values of different JSON kinds are never duplicates."""
        self.assertEqual(errors_for({"uniqueItems": True}, [1, "1"]), [])
        self.assertEqual(errors_for({"uniqueItems": True}, [1, True]), [])
        self.assertEqual(errors_for({"uniqueItems": True}, [[1, 2], [2, 1]]), [])

    def test_unique_items_reports_once(self):
        """Several duplicates still yield a single error."""
        self.assertEqual(len(errors_for({"uniqueItems": True}, [1, 1, 2, 2, {"a": 1}, {"a": 1}])), 1)


class TestComposition(unittest.TestCase):
    """anyOf, oneOf, allOf, not and if/then/else."""

    def test_any_of_one_branch_passes(self):
        """anyOf passes when one branch passes."""
        schema = {"anyOf": [{"type": "string"}, {"type": "number"}]}
        self.assertEqual(errors_for(schema, "x"), [])
        self.assertEqual(errors_for(schema, 3), [])

    def test_any_of_all_fail(self):
        """anyOf reports one composite error with the errors of every branch."""
        errors = errors_for({"anyOf": [{"type": "string"}, {"type": "number"}]}, None)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], AnyOfError)
        self.assertEqual(len(errors[0].all_errors), 2)
        self.assertTrue(all(len(branch) == 1 for branch in errors[0].all_errors))

    def test_any_of_marks_properties_of_passing_branch(self):
        """Properties evaluated by a passing anyOf branch count as evaluated."""
        schema = {
            "anyOf": [{"properties": {"a": True}}, {"required": ["zzz"]}],
            "unevaluatedProperties": False
        }
        self.assertEqual(errors_for(schema, {"a": 1}), [])
        errors = errors_for(schema, {"a": 1, "b": 2})
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].pointer, '/b')

    def test_one_of_two_passing(self):
        """Two passing oneOf branches give one error naming both."""
        errors = errors_for({"oneOf": [{"type": "number"}, {"minimum": 0}]}, 5)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], OneOfError)
        self.assertEqual(len(errors[0].passed), 2)
        self.assertIn('2 oneOf schemas passed', errors[0].message)

    def test_one_of_none_passing(self):
        """No passing oneOf branch gives one error."""
        errors = errors_for({"oneOf": [{"type": "string"}, {"type": "boolean"}]}, 5)
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].passed, [])
        self.assertEqual(errors[0].message, 'No oneOf schema passed')

    def test_one_of_exactly_one(self):
        """Exactly one passing branch is valid."""
        self.assertEqual(errors_for({"oneOf": [{"type": "number"}, {"type": "string"}]}, 5), [])

    def test_all_of_reports_each_failure(self):
        """allOf branch errors surface directly."""
        errors = errors_for({"allOf": [{"minimum": 10}, {"multipleOf": 3}]}, 4)
        self.assertEqual([type(error) for error in errors], [MinimumError, MultipleError])

    def test_not(self):
        """not fails when its schema passes."""
        errors = errors_for({"not": {"type": "string"}}, "x")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], NotError)
        self.assertEqual(errors_for({"not": {"type": "string"}}, 1), [])

    def test_if_then_else(self):
        """then applies when if passes, else applies otherwise."""
        schema = {
            "if": {"properties": {"kind": {"const": "circle"}}},
            "then": {"required": ["radius"]},
            "else": {"required": ["width"]}
        }
        self.assertEqual(errors_for(schema, {"kind": "circle", "radius": 1}), [])
        self.assertEqual(errors_for(schema, {"kind": "square", "width": 1}), [])
        errors = errors_for(schema, {"kind": "circle", "width": 1})
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MissingPropertyError)
        self.assertEqual(errors[0].property, 'radius')

    def test_if_without_then(self):
        """A failing if without else adds nothing."""
        self.assertEqual(errors_for({"if": {"type": "string"}, "then": {"minLength": 3}}, 7), [])


class TestUnevaluated(unittest.TestCase):
    """unevaluatedProperties and unevaluatedItems."""

    def test_unevaluated_properties_only_unmatched(self):
        """Only properties matched by neither properties nor patternProperties are unevaluated."""
        schema = {
            "properties": {"a": True},
            "patternProperties": {"^b": True},
            "unevaluatedProperties": False
        }
        errors = errors_for(schema, {"a": 1, "bx": 2, "c": 3})
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].pointer, '/c')

    def test_unevaluated_properties_sees_all_of(self):
        """Properties evaluated by allOf members are not unevaluated."""
        schema = {
            "allOf": [{"properties": {"a": True}}],
            "properties": {"b": True},
            "unevaluatedProperties": False
        }
        self.assertEqual(errors_for(schema, {"a": 1, "b": 2}), [])
        self.assertEqual(len(errors_for(schema, {"a": 1, "b": 2, "c": 3})), 1)

    def test_unevaluated_properties_through_ref(self):
        """Properties evaluated through $ref are not unevaluated."""
        schema = {
            "$schema": DRAFT_2019_09,
            "$ref": "#/$defs/base",
            "$defs": {"base": {"properties": {"name": {"type": "string"}}}},
            "unevaluatedProperties": False
        }
        self.assertEqual(errors_for(schema, {"name": "x"}), [])
        self.assertEqual(len(errors_for(schema, {"name": "x", "other": 1})), 1)

    def test_unevaluated_properties_schema(self):
        """unevaluatedProperties validates the leftover values."""
        schema = {"properties": {"a": True}, "unevaluatedProperties": {"type": "integer"}}
        self.assertEqual(errors_for(schema, {"a": "s", "b": 1}), [])
        errors = errors_for(schema, {"a": "s", "b": "t"})
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], InvalidTypeError)

    def test_unevaluated_items(self):
        """Items not covered by prefixItems are unevaluated."""
        schema = {"prefixItems": [{"type": "string"}], "unevaluatedItems": False}
        self.assertEqual(errors_for(schema, ["a"]), [])
        errors = errors_for(schema, ["a", 1, 2])
        self.assertEqual([error.pointer for error in errors], ['/1', '/2'])

    def test_unevaluated_items_after_contains(self):
        """Items that matched contains are evaluated."""
        schema = {"contains": {"type": "string"}, "unevaluatedItems": {"type": "integer"}}
        self.assertEqual(errors_for(schema, ["a", 1, "b"]), [])
        self.assertEqual(len(errors_for(schema, ["a", 1.5])), 1)


class TestRecursiveRef(unittest.TestCase):
    """$recursiveRef and $recursiveAnchor."""

    LINKED_LIST = {
        "$schema": DRAFT_2019_09,
        "$recursiveAnchor": True,
        "type": "object",
        "properties": {
            "value": {"type": "integer"},
            "next": {"$recursiveRef": "#"}
        },
        "required": ["value"]
    }

    def test_linked_list(self):
        """A self-referential schema validates a nested instance."""
        instance = {"value": 1, "next": {"value": 2, "next": {"value": 3}}}
        self.assertEqual(errors_for(self.LINKED_LIST, instance), [])

    def test_linked_list_depth_zero(self):
        """An instance without nesting succeeds."""
        self.assertEqual(errors_for(self.LINKED_LIST, {"value": 1}), [])

    def test_linked_list_nested_error(self):
        """Errors deep in the recursion carry the nested pointer."""
        errors = errors_for(self.LINKED_LIST, {"value": 1, "next": {"value": 2, "next": {"value": "x"}}})
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].pointer, '/next/next/value')

    def test_recursive_anchor_extension(self):
        """$recursiveRef targets the outermost anchor, so an extending schema applies at every depth."""
        tree = {
            "$id": "http://example.com/tree",
            "$recursiveAnchor": True,
            "type": "object",
            "properties": {
                "data": True,
                "children": {"type": "array", "items": {"$recursiveRef": "#"}}
            }
        }
        strict_tree = {
            "$schema": DRAFT_2019_09,
            "$id": "http://example.com/strict-tree",
            "$recursiveAnchor": True,
            "$ref": "tree",
            "unevaluatedProperties": False
        }
        store = SchemaStore()
        store.add_document("http://example.com/tree", tree)
        root = store.load_schema_json(strict_tree, "http://example.com/strict-tree")
        validator = Validator()
        self.assertEqual(validator.validate_all(root, {"children": [{"data": 1}]}), [])
        errors = validator.validate_all(root, {"children": [{"daat": 1}]})
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].pointer, '/children/0/daat')


class TestDialects(unittest.TestCase):
    """Dialect dependent behaviour."""

    def test_legacy_integer_rejects_float(self):
        """draft-3 and draft-4 do not treat 1.0 as an integer."""
        for dialect in (DRAFT_3, DRAFT_4):
            errors = errors_for({"$schema": dialect, "type": "integer"}, 1.0)
            self.assertEqual(len(errors), 1)
            self.assertIsInstance(errors[0], InvalidTypeError)
            self.assertEqual(errors_for({"$schema": dialect, "type": "integer"}, 1), [])

    def test_later_integer_accepts_float(self):
        """Later dialects treat 1.0 as an integer, but not 1.5."""
        for dialect in (DRAFT_7, DRAFT_2019_09, DRAFT_2020_12):
            self.assertEqual(errors_for({"$schema": dialect, "type": "integer"}, 1.0), [])
            self.assertEqual(len(errors_for({"$schema": dialect, "type": "integer"}, 1.5)), 1)

    def test_content_checked_in_draft_7(self):
        """contentEncoding and contentMediaType are assertions in draft-7."""
        schema = {"$schema": DRAFT_7, "contentEncoding": "base64", "contentMediaType": "application/json"}
        self.assertEqual(errors_for(schema, "eyJhIjoxfQ=="), [])
        errors = errors_for(schema, "not base64!")
        self.assertTrue(errors)
        self.assertIsInstance(errors[0], ContentEncodingError)
        # valid base64 of 'abc', which is not JSON
        errors = errors_for(schema, "YWJj")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], ContentEncodingError)

    def test_content_annotation_only_in_2020_12(self):
        """contentEncoding is not asserted in 2020-12."""
        schema = {"$schema": DRAFT_2020_12, "contentEncoding": "base64", "contentMediaType": "application/json"}
        self.assertEqual(errors_for(schema, "not base64!"), [])

    def test_draft_4_exclusive_maximum_boolean(self):
        """The boolean exclusiveMaximum of draft-4 makes maximum exclusive."""
        schema = {"$schema": DRAFT_4, "maximum": 10, "exclusiveMaximum": True}
        self.assertEqual(errors_for(schema, 9), [])
        errors = errors_for(schema, 10)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MaximumError)

    def test_numeric_exclusive_maximum(self):
        """The numeric exclusiveMaximum of draft-6 and later."""
        errors = errors_for({"exclusiveMaximum": 10}, 10)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], ExclusiveMaximumError)
        self.assertEqual(errors_for({"exclusiveMaximum": 10}, 9.99), [])

    def test_draft_3_required_flag(self):
        """draft-3 marks required properties on the property schema."""
        schema = {"$schema": DRAFT_3, "properties": {"a": {"required": True}, "b": {}}}
        self.assertEqual(errors_for(schema, {"a": 1}), [])
        errors = errors_for(schema, {"b": 1})
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MissingPropertyError)
        self.assertEqual(errors[0].property, 'a')

    def test_draft_3_disallow(self):
        """disallow rejects the named types and matching schemas."""
        schema = {"$schema": DRAFT_3, "disallow": ["string", {"type": "integer", "minimum": 10}]}
        self.assertEqual(errors_for(schema, 5), [])
        errors = errors_for(schema, "x")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], TypeDisallowedError)
        errors = errors_for(schema, 12)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], DisallowError)

    def test_draft_3_type_schemas(self):
        """A draft-3 type list may mix type names and schemas."""
        schema = {"$schema": DRAFT_3, "type": [{"type": "string", "maxLength": 2}, "integer"]}
        self.assertEqual(errors_for(schema, "ab"), [])
        self.assertEqual(errors_for(schema, 4), [])
        self.assertEqual(len(errors_for(schema, "abc")), 1)
        self.assertEqual(len(errors_for(schema, 1.5)), 1)

    def test_draft_3_extends_and_divisible_by(self):
        """extends behaves like allOf and divisibleBy like multipleOf."""
        schema = {"$schema": DRAFT_3, "extends": {"minimum": 0}, "divisibleBy": 5}
        self.assertEqual(errors_for(schema, 10), [])
        errors = errors_for(schema, -3)
        self.assertEqual([type(error) for error in errors], [MinimumError, DivisibleByError])

    def test_draft_3_type_any(self):
        """The draft-3 any type accepts everything."""
        for instance in SAMPLE_INSTANCES:
            self.assertEqual(errors_for({"$schema": DRAFT_3, "type": "any"}, instance), [])

    def test_draft_4_dependencies(self):
        """dependencies accepts both property lists and schemas."""
        schema = {"$schema": DRAFT_4, "dependencies": {"a": ["b"], "c": {"required": ["d"]}}}
        self.assertEqual(errors_for(schema, {"a": 1, "b": 2}), [])
        errors = errors_for(schema, {"a": 1})
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], DependencyError)
        self.assertEqual(errors[0].dependency, 'b')
        errors = errors_for(schema, {"c": 1})
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MissingPropertyError)


class TestKeywords(unittest.TestCase):
    """Type specific keywords."""

    def test_multiple_of_decimal(self):
        """multipleOf uses exact decimal arithmetic."""
        self.assertEqual(errors_for({"multipleOf": 0.1}, 0.3), [])
        self.assertEqual(errors_for({"multipleOf": 0.01}, 19.99), [])
        errors = errors_for({"multipleOf": 0.1}, 0.35)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MultipleError)

    def test_multiple_of_integer(self):
        """multipleOf with integers."""
        self.assertEqual(errors_for({"multipleOf": 2}, 4), [])
        self.assertEqual(len(errors_for({"multipleOf": 2}, 5)), 1)

    def test_multiple_of_large_magnitude(self):
        """multipleOf stays exact when the quotient has many digits."""
        self.assertEqual(errors_for({"multipleOf": 0.1}, 1e308), [])
        self.assertEqual(errors_for({"multipleOf": 3}, 3 * 10 ** 40), [])
        errors = errors_for({"multipleOf": 3}, 3 * 10 ** 40 + 1)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MultipleError)

    def test_minimum_maximum(self):
        """minimum and maximum are inclusive."""
        schema = {"minimum": 1, "maximum": 3}
        self.assertEqual(errors_for(schema, 1), [])
        self.assertEqual(errors_for(schema, 3), [])
        self.assertIsInstance(errors_for(schema, 0)[0], MinimumError)
        self.assertIsInstance(errors_for(schema, 4)[0], MaximumError)

    def test_string_length_counts_characters(self):
        """Lengths count code points, not bytes or UTF-16 units."""
        self.assertEqual(errors_for({"maxLength": 2}, "éé"), [])
        self.assertEqual(errors_for({"maxLength": 1}, "\U0001F600"), [])
        self.assertEqual(errors_for({"minLength": 2}, "\U0001F600\U0001F601"), [])
        self.assertEqual(len(errors_for({"minLength": 2}, "\U0001F600")), 1)
        errors = errors_for({"maxLength": 2}, "abc")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MaxLengthError)

    def test_pattern_is_not_anchored(self):
        """pattern searches anywhere in the string."""
        self.assertEqual(errors_for({"pattern": "b+"}, "abbc"), [])
        errors = errors_for({"pattern": "^b"}, "abc")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], PatternError)

    def test_invalid_pattern_is_skipped(self):
        """An invalid pattern is logged and the check skipped."""
        with self.assertLogs('jsonsval.validator', level='WARNING') as logs:
            self.assertEqual(errors_for({"pattern": "(unclosed"}, "x"), [])
        self.assertIn('Invalid regex', logs.output[0])

    def test_format(self):
        """format is asserted."""
        self.assertEqual(errors_for({"format": "date"}, "2020-02-29"), [])
        errors = errors_for({"format": "date"}, "2021-02-29")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], FormatError)
        self.assertEqual(errors_for({"format": "no-such-format"}, "anything"), [])

    def test_format_only_applies_to_strings(self):
        """format ignores non-string instances."""
        self.assertEqual(errors_for({"format": "email"}, 12), [])

    def test_items_and_prefix_items(self):
        """2020-12 items applies after prefixItems."""
        schema = {"prefixItems": [{"type": "string"}], "items": {"type": "integer"}}
        self.assertEqual(errors_for(schema, ["a", 1, 2]), [])
        errors = errors_for(schema, [1, 1, "x"])
        self.assertEqual([error.pointer for error in errors], ['/0', '/2'])

    def test_items_tuple_and_additional_items(self):
        """An items list with additionalItems."""
        schema = {"$schema": DRAFT_7, "items": [{"type": "string"}], "additionalItems": False}
        self.assertEqual(errors_for(schema, ["a"]), [])
        errors = errors_for(schema, ["a", 1])
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].pointer, '/1')

    def test_contains_bounds(self):
        """contains with minContains and maxContains."""
        schema = {"contains": {"type": "string"}, "minContains": 2, "maxContains": 3}
        self.assertEqual(errors_for(schema, ["a", "b", 1]), [])
        self.assertIsInstance(errors_for(schema, ["a", 1])[0], MinContainsError)
        self.assertIsInstance(errors_for(schema, ["a", "b", "c", "d"])[0], MaxContainsError)
        self.assertIsInstance(errors_for({"contains": {"type": "string"}}, [])[0], MinContainsError)

    def test_min_contains_zero(self):
        """minContains 0 accepts an array without matches."""
        self.assertEqual(errors_for({"contains": {"type": "string"}, "minContains": 0}, [1]), [])

    def test_required_and_dependent_required(self):
        """required and dependentRequired."""
        schema = {"required": ["a"], "dependentRequired": {"a": ["b", "c"]}}
        self.assertEqual(errors_for(schema, {"a": 1, "b": 1, "c": 1}), [])
        errors = errors_for(schema, {"a": 1})
        self.assertEqual([error.dependency for error in errors], ['b', 'c'])
        errors = errors_for(schema, {})
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].property, 'a')

    def test_additional_properties(self):
        """additionalProperties applies to properties matched by nothing else."""
        schema = {"properties": {"a": True}, "patternProperties": {"^x-": True}, "additionalProperties": False}
        self.assertEqual(errors_for(schema, {"a": 1, "x-b": 2}), [])
        errors = errors_for(schema, {"a": 1, "b": 2})
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].pointer, '/b')

    def test_property_names(self):
        """propertyNames validates the names, located at the object."""
        errors = errors_for({"propertyNames": {"maxLength": 3}}, {"abcd": 1, "ab": 2})
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MaxLengthError)
        self.assertEqual(errors[0].property_name, 'abcd')
        self.assertEqual(errors[0].pointer, '')
        self.assertEqual(errors[0].object, 'abcd')

    def test_type_list(self):
        """A list of types accepts any member."""
        schema = {"type": ["string", "null"]}
        self.assertEqual(errors_for(schema, None), [])
        self.assertEqual(errors_for(schema, "s"), [])
        errors = errors_for(schema, 1)
        self.assertEqual(errors[0].expected, ['null', 'string'])
        self.assertEqual(errors[0].found, ['integer', 'number'])

    def test_number_type_accepts_integer(self):
        """Integers are numbers."""
        self.assertEqual(errors_for({"type": "number"}, 3), [])
        self.assertEqual(len(errors_for({"type": "number"}, True)), 1)


class TestReferences(unittest.TestCase):
    """$ref resolution during validation."""

    def test_definitions_ref(self):
        """A local $ref into definitions."""
        schema = {
            "$schema": DRAFT_7,
            "properties": {"age": {"$ref": "#/definitions/positive"}},
            "definitions": {"positive": {"type": "integer", "minimum": 0}}
        }
        self.assertEqual(errors_for(schema, {"age": 3}), [])
        errors = errors_for(schema, {"age": -1})
        self.assertEqual(len(errors), 1)
        self.assertTrue(errors[0].schema.uri.endswith('#/definitions/positive'))

    def test_ref_with_escaped_pointer(self):
        """Escaped and percent-encoded pointer segments resolve."""
        schema = {
            "properties": {"a": {"$ref": "#/$defs/a~1b"}, "b": {"$ref": "#/$defs/c%25d"}},
            "$defs": {"a/b": {"type": "string"}, "c%d": {"type": "integer"}}
        }
        self.assertEqual(errors_for(schema, {"a": "x", "b": 1}), [])
        self.assertEqual(len(errors_for(schema, {"a": 1, "b": "x"})), 2)

    def test_anchor_ref(self):
        """A $ref to a plain-name $anchor."""
        schema = {
            "$id": "http://example.com/root.json",
            "$ref": "#name",
            "$defs": {"name": {"$anchor": "name", "type": "string"}}
        }
        self.assertEqual(errors_for(schema, "x"), [])
        self.assertEqual(len(errors_for(schema, 1)), 1)

    def test_ref_to_embedded_id(self):
        """A $ref to the $id of an embedded resource."""
        schema = {
            "$id": "http://example.com/root.json",
            "properties": {"item": {"$ref": "item.json"}},
            "$defs": {"item": {"$id": "item.json", "type": "object", "required": ["id"]}}
        }
        self.assertEqual(errors_for(schema, {"item": {"id": 1}}), [])
        self.assertEqual(len(errors_for(schema, {"item": {}})), 1)

    def test_recursive_ref_to_root(self):
        """A $ref to '#' describes a recursive structure."""
        schema = {"type": "object", "additionalProperties": {"$ref": "#"}}
        self.assertEqual(errors_for(schema, {"a": {"b": {}}}), [])
        errors = errors_for(schema, {"a": {"b": 1}})
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].pointer, '/a/b')

    def test_missing_ref_target_is_permissive(self):
        """A missing $ref target is logged and accepts everything."""
        with self.assertLogs('jsonsval.schema', level='WARNING') as logs:
            errors = errors_for({"$ref": "#/definitions/missing"}, 1)
        self.assertEqual(errors, [])
        self.assertIn('No match for', logs.output[0])


class TestRoundTrip(unittest.TestCase):
    """Every error pointer resolves to the reported value."""

    SCHEMA = {
        "type": "object",
        "properties": {
            "name": {"type": "string", "minLength": 2},
            "tags": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
            "owner": {
                "type": "object",
                "properties": {"email": {"format": "email"}, "age": {"minimum": 0}},
                "required": ["email"]
            },
            "a/b": {"type": "integer"},
            "m~n": {"type": "integer"}
        },
        "required": ["name", "id"],
        "additionalProperties": False,
        "propertyNames": {"maxLength": 5}
    }

    DOCUMENT = {
        "name": "x",
        "tags": ["a", 1, "a"],
        "owner": {"age": -1},
        "a/b": "no",
        "m~n": "no",
        "extra": True,
        "longname": 1
    }

    def test_error_pointers_resolve(self):
        """Resolving each error pointer yields the offending value."""
        errors = errors_for(self.SCHEMA, self.DOCUMENT)
        self.assertTrue(len(errors) >= 8)
        for error in errors:
            if error.property_name is not None:
                continue
            self.assertEqual(jsonpointer.resolve_pointer(self.DOCUMENT, error.pointer), error.object)

    def test_escaped_pointers(self):
        """Property names with '/' and '~' are escaped in pointers."""
        pointers = {error.pointer for error in errors_for(self.SCHEMA, self.DOCUMENT)}
        self.assertIn('/a~1b', pointers)
        self.assertIn('/m~0n', pointers)
        self.assertIn('/tags/1', pointers)


class TestValidatorEntryPoints(unittest.TestCase):
    """validate, validate_or_raise, error_filter and the output report."""

    def test_validate_sink(self):
        """validate delivers errors to the sink."""
        root = SchemaStore().load_schema_json({"type": "string"})
        received = []
        Validator().validate(root, 5, '', received.append)
        self.assertEqual(len(received), 1)

    def test_validate_at_pointer(self):
        """validate can start below the document root."""
        root = SchemaStore().load_schema_json({"type": "string"})
        errors = Validator().validate_all(root, {"a": [1, "x"]}, '/a/1')
        self.assertEqual(errors, [])
        errors = Validator().validate_all(root, {"a": [1, "x"]}, '/a/0')
        self.assertEqual(errors[0].pointer, '/a/0')

    def test_missing_path(self):
        """A pointer outside the document is a programming error."""
        root = SchemaStore().load_schema_json(True)
        with self.assertRaises(MissingPathError):
            Validator().validate_all(root, {"a": 1}, '/b')

    def test_validate_or_raise(self):
        """validate_or_raise raises with every error."""
        root = SchemaStore().load_schema_json({"minimum": 5, "multipleOf": 2})
        Validator().validate_or_raise(root, 6)
        with self.assertRaises(ListValidationException) as context:
            Validator().validate_or_raise(root, 3)
        self.assertEqual(len(context.exception.errors), 2)

    def test_validate_without_sink_raises(self):
        """validate without a sink behaves like validate_or_raise."""
        root = SchemaStore().load_schema_json({"type": "null"})
        with self.assertRaises(ListValidationException):
            Validator().validate(root, 1)

    def test_error_filter(self):
        """Errors rejected by the filter are not reported."""
        root = SchemaStore().load_schema_json({"minimum": 5, "maximum": 10})
        validator = Validator(error_filter=lambda error: not isinstance(error, MinimumError))
        self.assertEqual(validator.validate_all(root, 1), [])
        self.assertIsInstance(validator.validate_all(root, 20)[0], MaximumError)

    def test_validate_json_against_schema(self):
        """The module function returns rendered messages."""
        self.assertEqual(validate_json_against_schema("x", {"type": "string"}), [])
        messages = validate_json_against_schema(1, {"type": "string"})
        self.assertEqual(len(messages), 1)
        self.assertIn('Expected: [string] Found: [integer, number]', messages[0])

    def test_decimal_instances_render(self):
        """Documents parsed with Decimal numbers give rendered batch errors."""
        root = SchemaStore().load_schema_json({"properties": {"a": {"type": "integer"}}})
        document = json.loads('{"a": 1.5}', parse_float=Decimal)
        with self.assertRaises(ListValidationException) as context:
            Validator().validate_or_raise(root, document)
        self.assertEqual(len(context.exception.errors), 1)
        self.assertIn('"1.5" at #/a failed', str(context.exception))
        with self.assertRaises(ListValidationException):
            Validator().validate(root, document)

    def test_decimal_enum_and_const_render(self):
        """Decimal values in the schema render in const and enum messages."""
        messages = validate_json_against_schema(
            json.loads('2.5', parse_float=Decimal), json.loads('{"enum": [1.5, 2]}', parse_float=Decimal))
        self.assertEqual(len(messages), 1)
        self.assertIn('Value not in enum [1.5, 2]', messages[0])
        messages = validate_json_against_schema(4, json.loads('{"const": 3.0}', parse_float=Decimal))
        self.assertEqual(len(messages), 1)
        self.assertIn('Expected const 3', messages[0])

    def test_output_valid(self):
        """A valid instance gives a report without errors."""
        store = SchemaStore()
        root = store.load_schema_json({"type": "object"})
        output = Validator().validate_with_output(store, root, {})
        diff = Compare().check(output, {"valid": True})
        assert diff == NO_DIFF

    def test_output_invalid(self):
        """An invalid instance gives one output unit per error."""
        store = SchemaStore()
        root = store.load_schema_json({"type": "object", "properties": {"a": {"type": "string"}}},
                                      "http://example.com/schema.json")
        output = Validator().validate_with_output(store, root, {"a": 1})
        expected = {
            "valid": False,
            "errors": [{
                "error": "Expected: [string] Found: [integer, number]",
                "keywordLocation": "http://example.com/schema.json#/properties/a",
                "absoluteKeywordLocation": "http://example.com/schema.json#/properties/a",
                "instanceLocation": "#/a"
            }]
        }
        diff = Compare().check(output, expected)
        assert diff == NO_DIFF

    def test_output_absolute_location_uses_resource_id(self):
        """absoluteKeywordLocation is relative to the innermost $id."""
        store = SchemaStore()
        root = store.load_schema_json({
            "$id": "http://example.com/root.json",
            "properties": {"item": {"$ref": "item.json"}},
            "$defs": {"item": {"$id": "item.json", "properties": {"id": {"type": "integer"}}}}
        }, "file:///schemas/root.json")
        output = Validator().validate_with_output(store, root, {"item": {"id": "x"}})
        self.assertFalse(output['valid'])
        unit = output['errors'][0]
        self.assertEqual(unit['keywordLocation'], 'file:///schemas/root.json#/$defs/item/properties/id')
        self.assertEqual(unit['absoluteKeywordLocation'], 'http://example.com/item.json#/properties/id')
        self.assertEqual(unit['instanceLocation'], '#/item/id')


@pytest.mark.parametrize("fmt,good,bad", [
    ("date-time", "2024-01-31T10:00:00Z", "2024-01-31 10:00:00"),
    ("ipv4", "192.168.0.1", "256.1.1.1"),
    ("uuid", "123e4567-e89b-12d3-a456-426614174000", "123e4567"),
    ("json-pointer", "/a/~1b", "a/b"),
])
def test_format_in_schema(fmt, good, bad):
    """format values are asserted through the validator."""
    assert errors_for({"format": fmt}, good) == []
    assert len(errors_for({"format": fmt}, bad)) == 1


if __name__ == '__main__':
    unittest.main()
