"""
Common utility functions for jsonsval.
"""

# pylint: disable=line-too-long

import json
import os
import re
from decimal import Decimal
from typing import Any, Tuple
from urllib.parse import urljoin, urlparse

import jinja2
from jsonpointer import JsonPointer

# Tags for the canonical form of composite and boolean values. Booleans are
# tagged because Python treats True == 1.
_BOOLEAN_TAG = 'boolean'
_ARRAY_TAG = 'array'
_OBJECT_TAG = 'object'

# Marks a location that does not exist in a document.
MISSING = object()


def make_comparable(value: Any) -> Any:
    """
    Converts a decoded JSON value into a hashable canonical form.

    Numbers compare by value regardless of representation (1 == 1.0), objects
    compare regardless of key order, arrays compare element by element in
    order. Values of different JSON kinds never compare equal.

    Args:
        value (Any): The decoded JSON value.

    Returns:
        Any: A hashable value suitable for equality tests and sets.
    """
    if isinstance(value, bool):
        return (_BOOLEAN_TAG, value)
    if isinstance(value, dict):
        return (_OBJECT_TAG, frozenset((key, make_comparable(item)) for key, item in value.items()))
    if isinstance(value, (list, tuple)):
        return (_ARRAY_TAG, tuple(make_comparable(item) for item in value))
    return value


def is_number(value: Any) -> bool:
    """Check if a decoded JSON value is a number (booleans are not)."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def to_decimal(number) -> Decimal:
    """Convert a number to a Decimal using its shortest decimal representation."""
    if isinstance(number, Decimal):
        return number
    return Decimal(repr(number)) if isinstance(number, float) else Decimal(number)


def _plain_number(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value.is_finite() and value == value.to_integral_value() else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def json_text(value: Any) -> str:
    """Render a decoded JSON value as JSON text. Decimal numbers are written as plain numbers."""
    return json.dumps(value, default=_plain_number)


def split_uri(uri: str) -> Tuple[str, str]:
    """
    Split a URI into the document part and the raw fragment.

    Args:
        uri (str): The URI.

    Returns:
        Tuple[str, str]: The URI without fragment, and the fragment.
    """
    if '#' not in uri:
        return uri, ''
    base, fragment = uri.split('#', 1)
    return base, fragment


def join_pointer(pointer: str, segment: Any) -> str:
    """Append a segment (property name or array index) to a JSON Pointer."""
    return pointer + JsonPointer.from_parts([str(segment)]).path


def append_pointer(uri: str, segment: Any) -> str:
    """
    Append a JSON Pointer segment to the fragment of a canonical URI.

    Args:
        uri (str): A URI whose fragment is a JSON Pointer.
        segment (Any): The property name or array index to append.

    Returns:
        str: The URI addressing the child location.
    """
    if '#' not in uri:
        uri += '#'
    return join_pointer(uri, segment)


def pointer_parts(pointer: str) -> list:
    """Return the unescaped segments of a JSON Pointer."""
    return JsonPointer(pointer).parts


def resolve_uri(base_uri: str, reference: str) -> str:
    """
    Resolve a reference against a base URI.

    Fragment-only references are handled here because urljoin ignores
    schemes it does not know, such as urn.

    Args:
        base_uri (str): The base URI.
        reference (str): The reference to resolve.

    Returns:
        str: The resolved URI.

    Raises:
        ValueError: If the reference is not a parsable URI.
    """
    parsed = urlparse(reference)
    if parsed.scheme:
        return reference
    if reference.startswith('#'):
        return split_uri(base_uri)[0] + reference
    if not base_uri:
        return reference
    return urljoin(base_uri, reference)


def pascal(string):
    """
    Convert a string to PascalCase from snake_case, camelCase, or PascalCase.
    Underscores at the beginning of the string are preserved in the output, but
    underscores in the middle of the string are removed.

    Args:
        string (str): The string to convert.

    Returns:
        str: The string in PascalCase.
    """
    if not string or len(string) == 0:
        return string
    words = []
    startswith_under = string[0] == '_'
    if '_' in string or '-' in string or ' ' in string:
        words = re.split(r'[_\- ]', string)
    elif string[0].isupper():
        words = re.findall(r'[A-Z][a-z0-9_]*\.?', string)
    else:
        words = re.findall(r'[a-z0-9]+\.?|[A-Z][a-z0-9_]*\.?', string)
    result = ''.join(word[:1].upper() + word[1:] for word in words if word)
    if startswith_under:
        result = '_' + result
    return result


def snake(string):
    """
    Convert a string to snake_case from snake_case, camelCase, or PascalCase.

    Args:
        string (str): The string to convert.

    Returns:
        str: The string in snake_case.
    """
    if not string or len(string) == 0:
        return string
    words = []
    if '_' in string or '-' in string or ' ' in string:
        words = re.split(r'[_\- ]', string)
    elif string[0].isupper():
        words = re.findall(r'[A-Z][a-z0-9_]*\.?', string)
    else:
        words = re.findall(r'[a-z0-9]+\.?|[A-Z][a-z0-9_]*\.?', string)
    return '_'.join(word.lower() for word in words if word)


def process_template(file_path: str, **kvargs) -> str:
    """
    Process a file as a Jinja2 template with the given object as input.

    Args:
        file_path (str): The path to the template, relative to the package.

    Returns:
        str: The processed template as a string.
    """
    file_dir = os.path.dirname(__file__)
    template_loader = jinja2.FileSystemLoader(searchpath=file_dir)
    template_env = jinja2.Environment(loader=template_loader, keep_trailing_newline=True)
    template_env.filters['pascal'] = pascal
    template_env.filters['snake'] = snake
    template_env.filters['pyrepr'] = repr

    template = template_env.get_template(file_path)
    return template.render(**kvargs)


def render_template(template: str, output: str, **kvargs):
    """
    Render a template and write it to a file

    Args:
        template (str): The template to render.
        output (str): The output file path.
        **kvargs: The keyword arguments to pass to the template.
    """
    out = process_template(template, **kvargs)
    directory = os.path.dirname(output)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output, 'w', encoding='utf-8') as f:
        f.write(out)
