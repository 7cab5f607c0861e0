"""Validates JSON instances against Schema nodes."""

# pylint: disable=too-many-arguments, too-many-locals, too-many-branches, too-many-statements, line-too-long

import base64
import binascii
import decimal
import json
import logging
import os
from typing import Any, Callable, List, Optional, Set

import jsonpointer
from jsonpointer import JsonPointerException

from jsonsval.common import is_number, join_pointer, make_comparable, to_decimal
from jsonsval.constants import CONTENT_ASSERTION_META_SCHEMAS, LEGACY_INTEGER_META_SCHEMAS, OUTPUT_SCHEMA_URI
from jsonsval.formatchecker import FormatChecker
from jsonsval.regexsupplier import CachedRegexPatternSupplier, InvalidRegexError, RegexPatternSupplier
from jsonsval.validationerrors import (
    AnyOfError, ConstError, ContentEncodingError, DependencyError, DisallowError, DivisibleByError, EnumError,
    ExclusiveMaximumError, ExclusiveMinimumError, FalseSchemaError, FormatError, InvalidTypeError,
    ListValidationException, MaxContainsError, MaximumError, MaxItemsError, MaxLengthError, MaxPropertiesError,
    MinContainsError, MinimumError, MinItemsError, MinLengthError, MinPropertiesError, MissingPathError,
    MissingPropertyError, MultipleError, NotError, OneOfError, PatternError, SchemaConstructionError,
    TypeDisallowedError, UniqueItemsError, UnexpectedTypeError, ValidationError)

logger = logging.getLogger(__name__)

ErrorConsumer = Callable[[ValidationError], None]

OUTPUT_SCHEMA_FILE = os.path.join(os.path.dirname(__file__), 'resources', 'output_schema.json')


def _ignore(_value):
    pass


def _is_multiple(number, divisor) -> bool:
    """Exact multiple test on the decimal representations of both numbers."""
    dividend, modulus = to_decimal(number), to_decimal(divisor)
    if not modulus or not dividend.is_finite() or not modulus.is_finite():
        return False
    dividend_digits, modulus_digits = dividend.as_tuple(), modulus.as_tuple()
    # the integer quotient and the remainder must both fit the working precision
    quotient_digits = max(dividend.adjusted() - modulus.adjusted() + 1, 1)
    scale = abs(dividend_digits.exponent - modulus_digits.exponent)
    with decimal.localcontext() as context:
        context.prec = quotient_digits + scale + len(dividend_digits.digits) + len(modulus_digits.digits)
        return dividend % modulus == 0


class Validator:
    """
    Walks a schema and an instance together and reports every violated rule.

    Args:
        regex_supplier: Compiles `pattern` and `patternProperties` expressions.
        format_checker: Checks the `format` keyword.
        error_filter: Predicate; errors a node emits are only reported when it returns True.
    """

    def __init__(self, regex_supplier: RegexPatternSupplier = None, format_checker: FormatChecker = None,
                 error_filter: Callable[[ValidationError], bool] = None):
        self.regex_supplier = regex_supplier or CachedRegexPatternSupplier()
        self.format_checker = format_checker or FormatChecker(self.regex_supplier)
        self.error_filter = error_filter or (lambda error: True)

    def validate(self, schema, document: Any, pointer: str = '', error_consumer: ErrorConsumer = None,
                 property_consumer: Callable[[str], None] = None, item_consumer: Callable[[int], None] = None,
                 recursive_anchor=None, property_name: str = None):
        """
        Validate the value at `pointer` within `document` against `schema`.

        Args:
            schema: The Schema node.
            document: The whole decoded instance document.
            pointer: JSON Pointer of the value to validate ('' for the root).
            error_consumer: Receives each ValidationError. When omitted, the
                errors are collected and raised as a ListValidationException.
            property_consumer: Receives each property name evaluated at this location.
            item_consumer: Receives each array index evaluated at this location.
            recursive_anchor: The outermost `$recursiveAnchor` node entered so far.
            property_name: Validate this property name instead of the value at `pointer`.

        Raises:
            MissingPathError: If the pointer does not resolve inside the document.
        """
        if error_consumer is None:
            self.validate_or_raise(schema, document, pointer)
            return
        property_consumer = property_consumer or _ignore
        item_consumer = item_consumer or _ignore

        if property_name is not None:
            instance = property_name
        else:
            try:
                instance = jsonpointer.resolve_pointer(document, pointer)
            except JsonPointerException as e:
                raise MissingPathError(f"Cannot resolve {pointer!r} in the document") from e

        def error(validation_error: ValidationError):
            if self.error_filter(validation_error):
                error_consumer(validation_error)

        if schema.is_false:
            error(FalseSchemaError(pointer, document, schema, property_name))
            return

        evaluated_properties: Set[str] = set()
        evaluated_items: Set[int] = set()

        def evaluated_property(name: str):
            property_consumer(name)
            evaluated_properties.add(name)

        def evaluated_item(idx: int):
            item_consumer(idx)
            evaluated_items.add(idx)

        def apply(subschema, consumer: ErrorConsumer = error_consumer, on_property=evaluated_property,
                  on_item=evaluated_item):
            """Validate the same location against another node."""
            self.validate(subschema, document, pointer, consumer, on_property, on_item, recursive_anchor,
                          property_name)

        def collect(subschema, properties: Set[str] = None, items: Set[int] = None) -> List[ValidationError]:
            """Validate the same location in isolation and return the errors."""
            errors: List[ValidationError] = []
            apply(subschema, errors.append,
                  _ignore if properties is None else properties.add,
                  _ignore if items is None else items.add)
            return errors

        if schema.recursive_ref is not None:
            target = schema.recursive_ref
            if recursive_anchor is not None and target.recursive_anchor:
                target = recursive_anchor
            apply(target)
        if recursive_anchor is None and schema.recursive_anchor:
            recursive_anchor = schema

        if schema.if_schema is not None:
            if_properties: Set[str] = set()
            if_items: Set[int] = set()
            if not collect(schema.if_schema, if_properties, if_items):
                for name in if_properties:
                    evaluated_property(name)
                for idx in if_items:
                    evaluated_item(idx)
                branch = schema.then_schema
            else:
                branch = schema.else_schema
            if branch is not None:
                apply(branch)

        if schema.ref is not None:
            apply(schema.ref)

        for member in schema.all_of:
            apply(member)

        if schema.any_of is not None:
            passed = 0
            all_errors = []
            for member in schema.any_of:
                member_properties: Set[str] = set()
                member_items: Set[int] = set()
                errors = collect(member, member_properties, member_items)
                if not errors:
                    passed += 1
                    for name in member_properties:
                        evaluated_property(name)
                    for idx in member_items:
                        evaluated_item(idx)
                all_errors.append(errors)
            if passed == 0:
                error(AnyOfError(pointer, document, all_errors, schema, property_name))

        if schema.one_of is not None:
            passed_schemas = []
            all_errors = []
            for member in schema.one_of:
                errors: List[ValidationError] = []
                apply(member, errors.append)
                if not errors:
                    passed_schemas.append(member)
                all_errors.append(errors)
            if len(passed_schemas) != 1:
                error(OneOfError(pointer, document, passed_schemas, all_errors, schema, property_name))

        if schema.not_schema is not None and not collect(schema.not_schema):
            error(NotError(pointer, document, schema, property_name))

        for disallowed in schema.disallow_schemas:
            if not collect(disallowed):
                error(DisallowError(pointer, document, schema, property_name))

        def type_check(types: Set[str]):
            self._type_check(schema, document, pointer, types, error, property_name)

        def validate_child(subschema, child, consumer: ErrorConsumer = error_consumer):
            self.validate(subschema, document, join_pointer(pointer, child), consumer,
                          recursive_anchor=recursive_anchor)

        if isinstance(instance, bool):
            type_check({'boolean'})
        elif is_number(instance):
            if schema.multiple_of is not None and not _is_multiple(instance, schema.multiple_of):
                error(MultipleError(pointer, document, schema, property_name))
            if schema.maximum is not None and (instance >= schema.maximum if schema.exclusive_maximum_boolean
                                               else instance > schema.maximum):
                error(MaximumError(pointer, document, schema, property_name))
            if schema.exclusive_maximum is not None and instance >= schema.exclusive_maximum:
                error(ExclusiveMaximumError(pointer, document, schema, property_name))
            if schema.minimum is not None and (instance <= schema.minimum if schema.exclusive_minimum_boolean
                                               else instance < schema.minimum):
                error(MinimumError(pointer, document, schema, property_name))
            if schema.exclusive_minimum is not None and instance <= schema.exclusive_minimum:
                error(ExclusiveMinimumError(pointer, document, schema, property_name))
            types = {'number'}
            if self._is_integer(instance, schema.meta_schema):
                types.add('integer')
            type_check(types)
            if schema.divisible_by is not None and not _is_multiple(instance, schema.divisible_by):
                error(DivisibleByError(pointer, document, schema, property_name))
        elif isinstance(instance, str):
            self._validate_string(schema, document, pointer, instance, error, property_name)
            type_check({'string'})
        elif isinstance(instance, list):
            type_check({'array'})
            item_start = 0
            if schema.prefix_items is not None:
                item_start = len(schema.prefix_items)
                for idx in range(min(len(schema.prefix_items), len(instance))):
                    validate_child(schema.prefix_items[idx], idx)
                    evaluated_item(idx)
            elif schema.items_tuple is not None:
                if len(instance) > len(schema.items_tuple) and schema.additional_items is not None:
                    for idx in range(len(schema.items_tuple), len(instance)):
                        validate_child(schema.additional_items, idx)
                        evaluated_item(idx)
                for idx in range(min(len(schema.items_tuple), len(instance))):
                    validate_child(schema.items_tuple[idx], idx)
                    evaluated_item(idx)
            if schema.items is not None:
                for idx in range(item_start, len(instance)):
                    validate_child(schema.items, idx)
                    evaluated_item(idx)
            if schema.contains is not None:
                passed = 0
                for idx in range(len(instance)):
                    errors: List[ValidationError] = []
                    validate_child(schema.contains, idx, errors.append)
                    if not errors:
                        evaluated_item(idx)
                        passed += 1
                if passed < (1 if schema.min_contains is None else schema.min_contains):
                    error(MinContainsError(pointer, document, schema, property_name))
                if schema.max_contains is not None and passed > schema.max_contains:
                    error(MaxContainsError(pointer, document, schema, property_name))
            if schema.unevaluated_items is not None:
                for idx in range(len(instance)):
                    if idx in evaluated_items:
                        continue
                    validate_child(schema.unevaluated_items, idx)
                    evaluated_item(idx)
            if schema.max_items is not None and len(instance) > schema.max_items:
                error(MaxItemsError(pointer, document, schema, property_name))
            if schema.min_items is not None and len(instance) < schema.min_items:
                error(MinItemsError(pointer, document, schema, property_name))
            if schema.unique_items:
                seen = set()
                duplicated = False
                for item in instance:
                    comparable = make_comparable(item)
                    if comparable in seen:
                        duplicated = True
                    seen.add(comparable)
                if duplicated:
                    error(UniqueItemsError(pointer, document, schema, property_name))
        elif isinstance(instance, dict):
            type_check({'object'})
            if schema.max_properties is not None and len(instance) > schema.max_properties:
                error(MaxPropertiesError(pointer, document, schema, property_name))
            if schema.min_properties is not None and len(instance) < schema.min_properties:
                error(MinPropertiesError(pointer, document, schema, property_name))
            for name in schema.required_properties:
                if name not in instance:
                    error(MissingPropertyError(pointer, document, name, schema, property_name))
            for name, property_schema in schema.properties.items():
                if property_schema.required_flag and name not in instance:
                    error(MissingPropertyError(pointer, document, name, schema, property_name))

            matched: Set[str] = set()
            for name in instance:
                if name in schema.properties:
                    validate_child(schema.properties[name], name)
                    matched.add(name)
                    evaluated_property(name)
                for pattern, pattern_schema in schema.pattern_properties:
                    try:
                        if not self.regex_supplier.new_pattern(pattern).matches(name):
                            continue
                    except InvalidRegexError:
                        logger.warning("Invalid regex %s", pattern)
                        continue
                    validate_child(pattern_schema, name)
                    matched.add(name)
                    evaluated_property(name)
                if schema.property_names is not None:
                    self.validate(schema.property_names, document, pointer, error_consumer,
                                  recursive_anchor=recursive_anchor, property_name=name)

            for name, dependent_schema in schema.dependent_schemas.items():
                if name in instance:
                    apply(dependent_schema)

            if schema.additional_properties is not None:
                for name in [name for name in instance if name not in matched]:
                    validate_child(schema.additional_properties, name)
                    evaluated_property(name)

            if schema.unevaluated_properties is not None:
                for name in [name for name in instance if name not in evaluated_properties]:
                    validate_child(schema.unevaluated_properties, name)
                    evaluated_property(name)

            for name, dependencies in schema.dependent_required.items():
                if name not in instance:
                    continue
                for dependency in dependencies:
                    if dependency not in instance:
                        error(DependencyError(pointer, document, name, dependency, schema, property_name))
        elif instance is None:
            type_check({'null'})
        else:
            error(UnexpectedTypeError(pointer, document, schema, property_name))

        if schema.has_const and make_comparable(schema.const) != make_comparable(instance):
            error(ConstError(pointer, document, schema, property_name))

        if schema.enums is not None:
            comparable = make_comparable(instance)
            if not any(comparable == make_comparable(value) for value in schema.enums):
                error(EnumError(pointer, document, schema, property_name))

    @staticmethod
    def _is_integer(number, meta_schema: str) -> bool:
        if meta_schema in LEGACY_INTEGER_META_SCHEMAS:
            return isinstance(number, int)
        if isinstance(number, float):
            return number.is_integer()
        if isinstance(number, decimal.Decimal):
            return number.is_finite() and number == number.to_integral_value()
        return True

    def _validate_string(self, schema, document, pointer: str, string: str, error: ErrorConsumer,
                         property_name: Optional[str]):
        if schema.max_length is not None and len(string) > schema.max_length:
            error(MaxLengthError(pointer, document, schema, property_name))
        if schema.min_length is not None and len(string) < schema.min_length:
            error(MinLengthError(pointer, document, schema, property_name))
        if schema.pattern is not None:
            try:
                if not self.regex_supplier.new_pattern(schema.pattern).matches(string):
                    error(PatternError(pointer, document, schema, property_name))
            except InvalidRegexError:
                logger.warning("Invalid regex %s", schema.pattern)
        if schema.format is not None:
            message = self.format_checker.check(string, schema.format, schema.meta_schema)
            if message:
                error(FormatError(pointer, document, schema, message, property_name))

        if schema.meta_schema not in CONTENT_ASSERTION_META_SCHEMAS:
            return
        content = string
        if schema.content_encoding == 'base64':
            try:
                content = base64.b64decode(string, validate=True).decode('utf-8', errors='replace')
            except (binascii.Error, ValueError) as e:
                error(ContentEncodingError(pointer, document, schema, str(e), property_name))
        if schema.content_media_type == 'application/json':
            try:
                json.loads(content)
            except ValueError as e:
                error(ContentEncodingError(pointer, document, schema, str(e), property_name))

    def _type_check(self, schema, document, pointer: str, types: Set[str], error: ErrorConsumer,
                    property_name: Optional[str]):
        if schema.disallow:
            disallowed = types & schema.disallow
            if disallowed:
                error(TypeDisallowedError(pointer, document, disallowed, schema, property_name))
        explicit_types = schema.explicit_types
        if explicit_types is None:
            return
        for type_schema in schema.type_schemas:
            errors: List[ValidationError] = []
            self.validate(type_schema, document, pointer, errors.append, property_name=property_name)
            if not errors:
                return
        if 'any' in explicit_types:
            return
        if not explicit_types and not schema.type_schemas:
            return
        if types & explicit_types:
            return
        error(InvalidTypeError(pointer, document, explicit_types, types, schema, property_name))

    def validate_all(self, schema, document: Any, pointer: str = '') -> List[ValidationError]:
        """Validate and return every error, in the order found."""
        errors: List[ValidationError] = []
        self.validate(schema, document, pointer, errors.append)
        return errors

    def validate_or_raise(self, schema, document: Any, pointer: str = ''):
        """
        Validate and raise if anything is wrong.

        Raises:
            ListValidationException: With every error found.
        """
        errors = self.validate_all(schema, document, pointer)
        if errors:
            raise ListValidationException(errors)

    def validate_with_output(self, store, schema, document: Any) -> dict:
        """
        Validate and describe the outcome as an output report.

        The report is checked against the bundled output schema before it is
        returned.

        Args:
            store: The SchemaStore that built `schema`.
            schema: The Schema node.
            document: The decoded instance document.

        Returns:
            dict: {"valid": bool, "errors": [...]}; "errors" is only present when invalid.
        """
        output: dict = {'valid': True}

        def report(validation_error: ValidationError):
            output['valid'] = False
            output.setdefault('errors', []).append({
                'error': validation_error.message,
                'keywordLocation': validation_error.schema.uri,
                'absoluteKeywordLocation': store.canonical_uri_to_resource_uri(validation_error.schema.uri),
                'instanceLocation': validation_error.instance_location,
            })

        self.validate(schema, document, '', report)
        try:
            Validator().validate_or_raise(load_output_schema(store), output)
        except ListValidationException as e:
            raise SchemaConstructionError("Output report does not conform to the output schema",
                                          OUTPUT_SCHEMA_URI, e) from e
        return output


def load_output_schema(store):
    """Return the output report schema, registering the bundled copy with the store."""
    if OUTPUT_SCHEMA_URI not in store.documents:
        with open(OUTPUT_SCHEMA_FILE, 'r', encoding='utf-8') as file:
            store.add_document(OUTPUT_SCHEMA_URI, json.load(file))
    return store.load_schema(OUTPUT_SCHEMA_URI + '#')


def validate_json_against_schema(instance: Any, schema: Any) -> List[str]:
    """
    Validate a decoded instance against a decoded schema document.

    Args:
        instance: The instance.
        schema: The schema document (object or boolean).

    Returns:
        List[str]: The rendered errors; empty when the instance is valid.
    """
    from jsonsval.schemastore import SchemaStore  # pylint: disable=import-outside-toplevel
    root = SchemaStore().load_schema_json(schema)
    return [str(error) for error in Validator().validate_all(root, instance)]
