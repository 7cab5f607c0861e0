"""Errors raised while building schemas, and the errors reported by validation.

Validation never raises for invalid instances. Each violated rule becomes a
`ValidationError` value delivered to a sink; `ListValidationException` is the
batch form raised by the convenience entry points.
"""

# pylint: disable=too-few-public-methods

from functools import cached_property
from typing import Any, Collection, List, Optional

import jsonpointer
from jsonpointer import JsonPointerException

from jsonsval.common import json_text
from jsonsval.constants import MAX_EXCERPT_LENGTH


class SchemaConstructionError(Exception):
    """
    Exception raised when a schema node cannot be built.

    Attributes:
        message: Human-readable error description
        context: Optional URI of the schema location being built
        cause: Optional underlying exception that caused this error
    """

    def __init__(self, message: str, context: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class GenerationError(SchemaConstructionError):
    """Exception raised when code cannot be generated for a schema."""


class MissingPathError(RuntimeError):
    """Raised when the validator is pointed at a location the document does not have."""


class ValidationException(Exception):
    """Base class for exceptions signalling that an instance is invalid."""


class ListValidationException(ValidationException):
    """Raised with every error collected from one validation."""

    def __init__(self, errors: List['ValidationError']) -> None:
        self.errors = list(errors)
        super().__init__('\n'.join(str(error) for error in self.errors))


class ValidationError:
    """
    One violated rule.

    Attributes:
        pointer: JSON Pointer of the failing instance location ('' is the root)
        document: The whole instance document
        schema: The schema node the instance failed against
        property_name: Set when a property name (not a value) was validated
    """

    keyword = ''

    def __init__(self, pointer: str, document: Any, schema, property_name: Optional[str] = None) -> None:
        self._pointer = pointer
        self._document = document
        self._schema = schema
        self._property_name = property_name

    @property
    def pointer(self) -> str:
        return self._pointer

    @property
    def document(self) -> Any:
        return self._document

    @property
    def schema(self):
        return self._schema

    @property
    def property_name(self) -> Optional[str]:
        return self._property_name

    @property
    def instance_location(self) -> str:
        """The instance pointer as a URI fragment."""
        return '#' + self._pointer

    @cached_property
    def object(self) -> Any:
        """The offending value, or None when the location no longer resolves."""
        if self._property_name is not None:
            return self._property_name
        try:
            return jsonpointer.resolve_pointer(self._document, self._pointer)
        except JsonPointerException:
            return None

    @property
    def message(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        value = self.object
        text = value if isinstance(value, str) else json_text(value)
        excerpt = f'"{text}" ' if len(text) <= MAX_EXCERPT_LENGTH else ''
        location = f'at {self.instance_location} ' if self._pointer else ''
        schema_uri = self._schema.uri
        against = f'against {schema_uri} ' if schema_uri else ''
        return f'{excerpt}{location}failed {against}with "{self.message}"'

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.instance_location!r}, {self._schema.uri!r})'


class FalseSchemaError(ValidationError):
    keyword = 'false'

    @property
    def message(self) -> str:
        return 'False schema always fails'


class AnyOfError(ValidationError):
    keyword = 'anyOf'

    def __init__(self, pointer, document, all_errors: List[List[ValidationError]], schema, property_name=None):
        super().__init__(pointer, document, schema, property_name)
        self.all_errors = [list(errors) for errors in all_errors]

    @property
    def message(self) -> str:
        branches = '; '.join(
            f'{idx}: ' + ', '.join(error.message for error in errors)
            for idx, errors in enumerate(self.all_errors))
        return f'All anyOf failed: {branches}'


class OneOfError(ValidationError):
    keyword = 'oneOf'

    def __init__(self, pointer, document, passed: list, all_errors: List[List[ValidationError]], schema,
                 property_name=None):
        super().__init__(pointer, document, schema, property_name)
        self.passed = list(passed)
        self.all_errors = [list(errors) for errors in all_errors]

    @property
    def message(self) -> str:
        if not self.passed:
            return 'No oneOf schema passed'
        passed = ', '.join(str(schema.uri) for schema in self.passed)
        return f'{len(self.passed)} oneOf schemas passed where exactly one is allowed: {passed}'


class NotError(ValidationError):
    keyword = 'not'

    @property
    def message(self) -> str:
        return 'Matched the not schema'


class DisallowError(ValidationError):
    keyword = 'disallow'

    @property
    def message(self) -> str:
        return 'Matched a disallowed schema'


class MultipleError(ValidationError):
    keyword = 'multipleOf'

    @property
    def message(self) -> str:
        return f'Not a multiple of {self.schema.multiple_of}'


class DivisibleByError(ValidationError):
    keyword = 'divisibleBy'

    @property
    def message(self) -> str:
        return f'Not divisible by {self.schema.divisible_by}'


class MaximumError(ValidationError):
    keyword = 'maximum'

    @property
    def message(self) -> str:
        if self.schema.exclusive_maximum_boolean:
            return f'Greater than or equal to exclusive maximum {self.schema.maximum}'
        return f'Greater than maximum {self.schema.maximum}'


class ExclusiveMaximumError(ValidationError):
    keyword = 'exclusiveMaximum'

    @property
    def message(self) -> str:
        return f'Greater than or equal to exclusive maximum {self.schema.exclusive_maximum}'


class MinimumError(ValidationError):
    keyword = 'minimum'

    @property
    def message(self) -> str:
        if self.schema.exclusive_minimum_boolean:
            return f'Less than or equal to exclusive minimum {self.schema.minimum}'
        return f'Less than minimum {self.schema.minimum}'


class ExclusiveMinimumError(ValidationError):
    keyword = 'exclusiveMinimum'

    @property
    def message(self) -> str:
        return f'Less than or equal to exclusive minimum {self.schema.exclusive_minimum}'


class MaxLengthError(ValidationError):
    keyword = 'maxLength'

    @property
    def message(self) -> str:
        return f'Longer than maxLength {self.schema.max_length}'


class MinLengthError(ValidationError):
    keyword = 'minLength'

    @property
    def message(self) -> str:
        return f'Shorter than minLength {self.schema.min_length}'


class PatternError(ValidationError):
    keyword = 'pattern'

    @property
    def message(self) -> str:
        return f'Did not match pattern {self.schema.pattern}'


class FormatError(ValidationError):
    keyword = 'format'

    def __init__(self, pointer, document, schema, reason: str, property_name=None):
        super().__init__(pointer, document, schema, property_name)
        self.reason = reason

    @property
    def message(self) -> str:
        return f'Not compliant with format {self.schema.format}: {self.reason}'


class ContentEncodingError(ValidationError):
    keyword = 'contentEncoding'

    def __init__(self, pointer, document, schema, reason: str, property_name=None):
        super().__init__(pointer, document, schema, property_name)
        self.reason = reason

    @property
    def message(self) -> str:
        return f'Content decoding failed: {self.reason}'


class MinContainsError(ValidationError):
    keyword = 'minContains'

    @property
    def message(self) -> str:
        minimum = 1 if self.schema.min_contains is None else self.schema.min_contains
        return f'Fewer than {minimum} item(s) matched contains'


class MaxContainsError(ValidationError):
    keyword = 'maxContains'

    @property
    def message(self) -> str:
        return f'More than {self.schema.max_contains} item(s) matched contains'


class MaxItemsError(ValidationError):
    keyword = 'maxItems'

    @property
    def message(self) -> str:
        return f'More than maxItems {self.schema.max_items}'


class MinItemsError(ValidationError):
    keyword = 'minItems'

    @property
    def message(self) -> str:
        return f'Fewer than minItems {self.schema.min_items}'


class UniqueItemsError(ValidationError):
    keyword = 'uniqueItems'

    @property
    def message(self) -> str:
        return 'Items are not unique'


class MaxPropertiesError(ValidationError):
    keyword = 'maxProperties'

    @property
    def message(self) -> str:
        return f'More than maxProperties {self.schema.max_properties}'


class MinPropertiesError(ValidationError):
    keyword = 'minProperties'

    @property
    def message(self) -> str:
        return f'Fewer than minProperties {self.schema.min_properties}'


class MissingPropertyError(ValidationError):
    keyword = 'required'

    def __init__(self, pointer, document, prop: str, schema, property_name=None):
        super().__init__(pointer, document, schema, property_name)
        self.property = prop

    @property
    def message(self) -> str:
        return f'Missing property {self.property}'


class DependencyError(ValidationError):
    keyword = 'dependentRequired'

    def __init__(self, pointer, document, prop: str, dependency: str, schema, property_name=None):
        super().__init__(pointer, document, schema, property_name)
        self.property = prop
        self.dependency = dependency

    @property
    def message(self) -> str:
        return f'Property {self.property} requires property {self.dependency}'


class UnexpectedTypeError(ValidationError):
    keyword = 'type'

    @property
    def message(self) -> str:
        return f'Unexpected type in data: {type(self.object).__name__}'


class ConstError(ValidationError):
    keyword = 'const'

    @property
    def message(self) -> str:
        return f'Expected const {json_text(self.schema.const)}'


class EnumError(ValidationError):
    keyword = 'enum'

    @property
    def message(self) -> str:
        return f'Value not in enum {json_text(self.schema.enums)}'


class TypeDisallowedError(ValidationError):
    keyword = 'disallow'

    def __init__(self, pointer, document, disallowed: Collection[str], schema, property_name=None):
        super().__init__(pointer, document, schema, property_name)
        self.disallowed = sorted(disallowed)

    @property
    def message(self) -> str:
        return f'Type disallowed: {", ".join(self.disallowed)}'


class InvalidTypeError(ValidationError):
    keyword = 'type'

    def __init__(self, pointer, document, expected: Collection[str], found: Collection[str], schema,
                 property_name=None):
        super().__init__(pointer, document, schema, property_name)
        self.expected = sorted(expected)
        self.found = sorted(found)

    @property
    def message(self) -> str:
        return f'Expected: [{", ".join(self.expected)}] Found: [{", ".join(self.found)}]'
