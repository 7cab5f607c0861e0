"""The in-memory model of one schema location."""

# pylint: disable=too-many-instance-attributes, too-many-statements, too-many-branches, line-too-long

import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from jsonsval.common import MISSING, append_pointer, is_number, resolve_uri, split_uri
from jsonsval.metaschemadetector import normalize_meta_schema_uri
from jsonsval.validationerrors import SchemaConstructionError

logger = logging.getLogger(__name__)


class Schema:
    """
    A schema node, identified by its canonical URI.

    The node reserves its URI in the store before reading any keyword, so a
    cyclic reference resolves to this (possibly still incomplete) instance.
    Every keyword of every supported dialect is read into an attribute;
    absent keywords are None (or an empty collection where absence and
    emptiness mean the same thing).
    """

    def __init__(self, store, uri: str):
        self.store = store
        self.uri = uri
        self._meta_schema: Optional[str] = None

        store.register(uri, self)

        schema_object = store.get_object(uri)
        if schema_object is MISSING or schema_object is None:
            # A missing definition must not stop the rest of the document from validating
            logger.warning("No match for %s", uri)
            schema_object = True
        if not isinstance(schema_object, (dict, bool)):
            raise SchemaConstructionError(
                f"A schema must be an object or a boolean, found {type(schema_object).__name__}", uri)
        self.schema_object = schema_object
        json_object: Dict[str, Any] = schema_object if isinstance(schema_object, dict) else {}
        self._json_object = json_object

        # number checks
        self.multiple_of = self._number('multipleOf')
        self.maximum = self._number('maximum')
        self.minimum = self._number('minimum')
        self.divisible_by = self._number('divisibleBy')
        exclusive_maximum = json_object.get('exclusiveMaximum')
        self.exclusive_maximum_boolean = exclusive_maximum is True
        self.exclusive_maximum = exclusive_maximum if is_number(exclusive_maximum) else None
        exclusive_minimum = json_object.get('exclusiveMinimum')
        self.exclusive_minimum_boolean = exclusive_minimum is True
        self.exclusive_minimum = exclusive_minimum if is_number(exclusive_minimum) else None

        # string checks
        self.max_length = self._number('maxLength')
        self.min_length = self._number('minLength')
        self.pattern: Optional[str] = self._typed('pattern', str)
        self.format: Optional[str] = self._string('format')
        self.content_encoding: Optional[str] = self._string('contentEncoding')
        self.content_media_type: Optional[str] = self._string('contentMediaType')

        # array checks
        self.prefix_items: Optional[List['Schema']] = self._sub_schema_list('prefixItems')
        self.additional_items = self._sub_schema('additionalItems')
        self.unevaluated_items = self._sub_schema('unevaluatedItems')
        if isinstance(json_object.get('items'), list):
            self.items_tuple: Optional[List['Schema']] = self._sub_schema_list('items')
            self.items = None
        else:
            self.items_tuple = None
            self.items = self._sub_schema('items')
        self.max_items = self._number('maxItems')
        self.min_items = self._number('minItems')
        self.unique_items = json_object.get('uniqueItems') is True
        self.contains = self._sub_schema('contains')
        self.min_contains = self._number('minContains')
        self.max_contains = self._number('maxContains')

        # object checks
        self.max_properties = self._number('maxProperties')
        self.min_properties = self._number('minProperties')
        required = json_object.get('required')
        self.required_properties: List[str] = list(required) if isinstance(required, list) else []
        self.required_flag = required is True
        self.additional_properties = self._sub_schema('additionalProperties')
        self.unevaluated_properties = self._sub_schema('unevaluatedProperties')
        self.properties: Dict[str, 'Schema'] = self._sub_schema_map('properties') or {}
        self.pattern_properties: List[Tuple[str, 'Schema']] = list(
            (self._sub_schema_map('patternProperties') or {}).items())
        self.property_names = self._sub_schema('propertyNames')

        # dependencies, dependentRequired and dependentSchemas share two maps
        self.dependent_required: Dict[str, List[str]] = {}
        self.dependent_schemas: Dict[str, 'Schema'] = {}
        dependencies = self._typed('dependencies', dict) or {}
        dependencies_uri = append_pointer(uri, 'dependencies')
        for name, dependency in dependencies.items():
            if isinstance(dependency, list):
                self.dependent_required[name] = list(dependency)
            elif isinstance(dependency, (dict, bool)):
                self.dependent_schemas[name] = self._child(append_pointer(dependencies_uri, name))
            elif isinstance(dependency, str):
                self.dependent_required[name] = [dependency]
        for name, dependency in (self._typed('dependentRequired', dict) or {}).items():
            self.dependent_required[name] = list(dependency)
        self.dependent_schemas.update(self._sub_schema_map('dependentSchemas') or {})

        # all types checks
        self.has_const = 'const' in json_object
        self.const = json_object.get('const')
        enums = self._typed('enum', list)
        self.enums: Optional[List[Any]] = None if enums is None else list(enums)

        self.type_schemas: List['Schema'] = []
        type_object = json_object.get('type')
        if isinstance(type_object, list):
            self.explicit_types: Optional[Set[str]] = set()
            type_uri = append_pointer(uri, 'type')
            for idx, entry in enumerate(type_object):
                if isinstance(entry, (dict, bool)):
                    self.type_schemas.append(self._child(append_pointer(type_uri, idx)))
                else:
                    self.explicit_types.add(str(entry))
        elif isinstance(type_object, str):
            self.explicit_types = {type_object}
        else:
            self.explicit_types = None

        self.disallow: Set[str] = set()
        self.disallow_schemas: List['Schema'] = []
        disallow_object = json_object.get('disallow')
        if isinstance(disallow_object, str):
            self.disallow.add(disallow_object)
        elif isinstance(disallow_object, list):
            disallow_uri = append_pointer(uri, 'disallow')
            for idx, entry in enumerate(disallow_object):
                if isinstance(entry, str):
                    self.disallow.add(entry)
                else:
                    self.disallow_schemas.append(self._child(append_pointer(disallow_uri, idx)))

        # in-place applicators
        self.if_schema = self._sub_schema('if')
        self.then_schema = self._sub_schema('then')
        self.else_schema = self._sub_schema('else')
        self.all_of: List['Schema'] = self._sub_schema_list('allOf') or []
        extends_object = json_object.get('extends')
        if isinstance(extends_object, list):
            self.all_of.extend(self._sub_schema_list('extends'))
        elif isinstance(extends_object, (dict, bool)):
            self.all_of.append(self._sub_schema('extends'))
        self.any_of: Optional[List['Schema']] = self._sub_schema_list('anyOf')
        self.one_of: Optional[List['Schema']] = self._sub_schema_list('oneOf')
        self.not_schema = self._sub_schema('not')

        ref_object = json_object.get('$ref')
        self.ref = self._reference(ref_object) if isinstance(ref_object, str) else None
        recursive_ref_object = json_object.get('$recursiveRef')
        self.recursive_ref = self._reference(recursive_ref_object) if isinstance(recursive_ref_object, str) else None
        self.recursive_anchor = json_object.get('$recursiveAnchor') is True

        # metadata
        self.title: Optional[str] = self._string('title')
        self.description: Optional[str] = self._string('description')
        self.has_default = 'default' in json_object
        self.default = json_object.get('default')
        self.examples: Optional[List[Any]] = self._typed('examples', list)
        if self.examples:
            store.defer_examples(self)

    def _typed(self, name: str, expected: type) -> Any:
        value = self._json_object.get(name)
        if value is None:
            return None
        if not isinstance(value, expected):
            raise SchemaConstructionError(f"Keyword {name} must be of type {expected.__name__}", self.uri)
        return value

    def _number(self, name: str):
        value = self._json_object.get(name)
        if value is None:
            return None
        if not is_number(value):
            raise SchemaConstructionError(f"Keyword {name} must be a number", self.uri)
        return value

    def _string(self, name: str) -> Optional[str]:
        value = self._json_object.get(name)
        return value if isinstance(value, str) else None

    def _child(self, child_uri: str) -> 'Schema':
        child = self.store.build(child_uri)
        self.store.set_parent(child_uri, self)
        return child

    def _sub_schema(self, name: str) -> Optional['Schema']:
        if isinstance(self._json_object.get(name), (dict, bool)):
            return self._child(append_pointer(self.uri, name))
        return None

    def _sub_schema_list(self, name: str) -> Optional[List['Schema']]:
        array = self._json_object.get(name)
        if not isinstance(array, list):
            return None
        array_uri = append_pointer(self.uri, name)
        return [self._child(append_pointer(array_uri, idx)) for idx in range(len(array))]

    def _sub_schema_map(self, name: str) -> Optional[Dict[str, 'Schema']]:
        mapping = self._json_object.get(name)
        if not isinstance(mapping, dict):
            return None
        map_uri = append_pointer(self.uri, name)
        return {key: self._child(append_pointer(map_uri, key)) for key in mapping}

    def _reference(self, reference: str) -> 'Schema':
        try:
            resolved = resolve_uri(self.store.resolution_base(self.uri), reference)
        except ValueError as e:
            raise SchemaConstructionError(f"Invalid reference {reference!r}", self.uri, e) from e
        return self.store.load_schema(resolved)

    @property
    def parent(self) -> Optional['Schema']:
        """The schema that directly contains this one, if any."""
        return self.store.get_parent(self.uri)

    @property
    def meta_schema(self) -> str:
        """The dialect of this node: its own `$schema`, else that of its document."""
        if self._meta_schema is None:
            declared = self._json_object.get('$schema')
            if isinstance(declared, str):
                self._meta_schema = normalize_meta_schema_uri(declared)
            else:
                self._meta_schema = self.store.get_meta_schema(split_uri(self.uri)[0])
        return self._meta_schema

    @property
    def is_false(self) -> bool:
        return self.schema_object is False

    def __str__(self) -> str:
        return f'{self.uri} / {self.schema_object}'

    def __repr__(self) -> str:
        return f'Schema({self.uri!r})'
