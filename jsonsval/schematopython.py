"""Converts JSON schemas to Python data classes"""

# pylint: disable=line-too-long

import os
import re
from typing import Any, Dict, List, Optional, Set

from jsonsval.common import pascal, process_template, render_template, snake, split_uri
from jsonsval.schemastore import SchemaStore
from jsonsval.validationerrors import GenerationError

# Fixed order in which the members of a multi-type schema are emitted
PRIMITIVE_TYPES = ['array', 'boolean', 'integer', 'number', 'object', 'string', 'null']

PRIMITIVE_MAPPING = {
    'boolean': 'bool',
    'integer': 'int',
    'number': 'float',
    'string': 'str',
    'null': 'None',
}


def is_python_reserved_word(word: str) -> bool:
    """Checks if a word is a Python reserved word"""
    reserved_words = [
        'False', 'None', 'True', 'and', 'as', 'assert', 'async', 'await',
        'break', 'class', 'continue', 'def', 'del', 'elif', 'else', 'except',
        'finally', 'for', 'from', 'global', 'if', 'import', 'in', 'is',
        'lambda', 'nonlocal', 'not', 'or', 'pass', 'raise', 'return',
        'try', 'while', 'with', 'yield', 'self', 'cls'
    ]
    return word in reserved_words


def vary_name(name: str) -> str:
    """Increment the trailing number of a name, or append 2 when there is none."""
    match = re.search(r'(\d+)$', name)
    if match:
        return name[:match.start()] + str(int(match.group(1)) + 1)
    return name + '2'


def safe_docstring(text: str) -> str:
    """Make free text safe to embed in a triple-quoted docstring."""
    return text.replace('\\', '\\\\').replace('"""', "'''").strip()


class SchemaToPython:
    """Converts Schema nodes to Python data classes and enums"""

    def __init__(self, package_name: str = '') -> None:
        self.package_name = package_name
        self.generated_types: Dict[str, str] = {}
        self.class_names: Set[str] = set()
        self.definitions: List[str] = []

    def safe_name(self, name: str) -> str:
        """Converts a property name to a safe Python attribute name"""
        name = snake(re.sub(r'[^0-9A-Za-z_]+', '_', name).strip('_')) or 'field'
        if name[0].isdigit():
            name = '_' + name
        if is_python_reserved_word(name):
            return name + "_"
        return name

    def make_class_name(self, name: str, enclosing: List[str]) -> str:
        """
        Choose a class name that collides neither with an enclosing class nor
        with any class generated so far.

        Args:
            name (str): The preferred name.
            enclosing (List[str]): Names of the classes being generated around this one.

        Returns:
            str: The reserved class name.
        """
        class_name = pascal(re.sub(r'[^0-9A-Za-z_\- ]+', ' ', name).strip()) or 'Type'
        if class_name[0].isdigit():
            class_name = '_' + class_name
        while class_name in enclosing:
            class_name = vary_name(class_name)
        while class_name in self.class_names:
            class_name = vary_name(class_name)
        self.class_names.add(class_name)
        return class_name

    @staticmethod
    def union(hints: List[str]) -> str:
        """Combine type hints into one, collapsing duplicates and null."""
        unique: List[str] = []
        for hint in hints:
            if hint not in unique:
                unique.append(hint)
        if 'typing.Any' in unique:
            return 'typing.Any'
        if not unique:
            return 'typing.Any'
        if len(unique) == 1:
            return unique[0]
        non_null = [hint for hint in unique if hint != 'None']
        if len(non_null) == 1:
            return f'typing.Optional[{non_null[0]}]'
        return f"typing.Union[{', '.join(unique)}]"

    @staticmethod
    def schema_types(schema) -> Optional[List[str]]:
        """
        The primitive types a schema admits, in emission order, or None when
        the schema does not constrain the type.

        Raises:
            GenerationError: If an explicit type name is unknown.
        """
        types = schema.explicit_types
        if types is None:
            if schema.properties or schema.additional_properties is not None or schema.required_properties:
                types = {'object'}
            elif schema.items is not None or schema.items_tuple is not None or schema.prefix_items is not None:
                types = {'array'}
            else:
                return None
        if 'any' in types or (not types and not schema.type_schemas):
            return None
        unknown = set(types) - set(PRIMITIVE_TYPES)
        if unknown:
            raise GenerationError(f"Unknown type: {', '.join(sorted(unknown))}", schema.uri)
        return [type_name for type_name in PRIMITIVE_TYPES if type_name in types]

    def convert_schema(self, schema, name_hint: str, enclosing: List[str]) -> str:
        """Converts a schema to a Python type hint, generating classes as needed"""
        if schema.ref is not None:
            _, fragment = split_uri(schema.ref.uri)
            ref_name = fragment.rsplit('/', 1)[-1] if fragment else name_hint
            return self.convert_schema(schema.ref, ref_name or name_hint, enclosing)
        if schema.is_false:
            return 'typing.NoReturn'
        if schema.enums and all(isinstance(value, str) for value in schema.enums):
            return self.generate_enum(schema, name_hint, enclosing)
        members = schema.any_of or schema.one_of
        if members and schema.explicit_types is None:
            return self.union([self.convert_schema(member, name_hint, enclosing) for member in members])
        if len(schema.all_of) == 1 and schema.explicit_types is None and not schema.properties:
            return self.convert_schema(schema.all_of[0], name_hint, enclosing)
        types = self.schema_types(schema)
        hints = [self.convert_schema(type_schema, name_hint, enclosing) for type_schema in schema.type_schemas]
        if types is None and not hints:
            return 'typing.Any'
        hints.extend(self.convert_primitive(schema, type_name, name_hint, enclosing) for type_name in types or [])
        return self.union(hints)

    def convert_primitive(self, schema, type_name: str, name_hint: str, enclosing: List[str]) -> str:
        """Converts one primitive type of a schema to a Python type hint"""
        if type_name in PRIMITIVE_MAPPING:
            return PRIMITIVE_MAPPING[type_name]
        if type_name == 'array':
            if schema.items is not None:
                return f"typing.List[{self.convert_schema(schema.items, name_hint + 'Item', enclosing)}]"
            return 'typing.List[typing.Any]'
        if schema.properties:
            return self.generate_class(schema, name_hint, enclosing)
        if schema.additional_properties is not None and not schema.additional_properties.is_false:
            return f"typing.Dict[str, {self.convert_schema(schema.additional_properties, name_hint + 'Value', enclosing)}]"
        return 'typing.Dict[str, typing.Any]'

    def generate_class(self, schema, name_hint: str, enclosing: List[str]) -> str:
        """
        Generates a Python data class from an object schema

        Args:
            schema (Schema): The object schema.
            name_hint (str): Preferred class name, used when the schema has no title.
            enclosing (List[str]): Names of the classes being generated around this one.

        Returns:
            str: The class name
        """
        if schema.uri in self.generated_types:
            return self.generated_types[schema.uri]
        class_name = self.make_class_name(schema.title or name_hint, enclosing)
        # reserved before the fields are converted, so recursive schemas refer back to it
        self.generated_types[schema.uri] = class_name

        required = set(schema.required_properties)
        required.update(name for name, prop in schema.properties.items() if prop.required_flag)
        inner = enclosing + [class_name]
        field_names: Set[str] = set()
        fields = []
        for name, prop in schema.properties.items():
            field_type = self.convert_schema(prop, name, inner)
            is_required = name in required
            if not is_required and field_type != 'typing.Any' and not field_type.startswith('typing.Optional['):
                field_type = f'typing.Optional[{field_type}]'
            field_name = self.safe_name(name)
            while field_name in field_names:
                field_name = vary_name(field_name)
            field_names.add(field_name)
            fields.append({
                'name': field_name,
                'original_name': name,
                'type': field_type,
                'required': is_required,
                'doc': safe_docstring(prop.description or prop.title or ''),
            })
        fields.sort(key=lambda field: not field['required'])

        class_definition = process_template(
            "schematopython/dataclass_core.jinja",
            class_name=class_name,
            docstring=safe_docstring(schema.description or '') or f'A {class_name} object.',
            fields=fields,
        )
        self.definitions.append(class_definition)
        return class_name

    def generate_enum(self, schema, name_hint: str, enclosing: List[str]) -> str:
        """Generates a Python enum from a schema whose `enum` lists only strings"""
        if schema.uri in self.generated_types:
            return self.generated_types[schema.uri]
        class_name = self.make_class_name(schema.title or name_hint, enclosing)
        self.generated_types[schema.uri] = class_name

        symbols: List[Dict[str, Any]] = []
        symbol_names: Set[str] = set()
        for value in schema.enums:
            symbol = re.sub(r'[^0-9A-Za-z_]+', '_', value).strip('_').upper() or 'EMPTY'
            if symbol[0].isdigit():
                symbol = '_' + symbol
            while symbol in symbol_names:
                symbol = vary_name(symbol)
            symbol_names.add(symbol)
            symbols.append({'name': symbol, 'value': value})

        enum_definition = process_template(
            "schematopython/enum_core.jinja",
            class_name=class_name,
            docstring=safe_docstring(schema.description or '') or f'A {class_name} enum.',
            symbols=symbols,
        )
        self.definitions.append(enum_definition)
        return class_name

    def convert(self, schema, output_path: str, root_name: str):
        """Converts a root schema and writes the generated module"""
        root_hint = self.convert_schema(schema, root_name, [])
        root_alias = None
        if root_hint not in self.generated_types.values():
            root_alias = {'name': self.make_class_name(root_name, []), 'type': root_hint}
        render_template(
            "schematopython/module.jinja",
            output_path,
            docstring=safe_docstring(schema.description or '') or f'Data classes generated from the {root_name} schema.',
            definitions=self.definitions,
            root_alias=root_alias,
        )


def convert_schema_to_python(schema_path: str, py_file_path: str, package_name: str = ''):
    """Converts a JSON schema file to a Python module of data classes"""
    if not package_name:
        package_name = os.path.splitext(os.path.basename(schema_path))[0].split('.')[0].replace('-', '_')
    store = SchemaStore()
    root = store.load_schema_file(schema_path)
    SchemaToPython(package_name).convert(root, py_file_path, root.title or package_name)


def convert_schema_json_to_python(schema: Any, py_file_path: str, package_name: str = 'document'):
    """Converts a decoded JSON schema document to a Python module of data classes"""
    store = SchemaStore()
    root = store.load_schema_json(schema)
    SchemaToPython(package_name).convert(root, py_file_path, root.title or package_name)
