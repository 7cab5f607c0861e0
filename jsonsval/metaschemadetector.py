"""Detects the dialect (meta-schema) of a root schema document."""

import logging
from typing import Any, Iterator, Set, Tuple
from urllib.parse import urlparse

from jsonsval.common import join_pointer
from jsonsval.constants import (
    DEFAULT_META_SCHEMA, DRAFT_2019_09, DRAFT_2019_09_FINGERPRINTS, DRAFT_2020_12,
    DRAFT_2020_12_FINGERPRINTS, DRAFT_3, DRAFT_3_FINGERPRINTS, DRAFT_4, DRAFT_6,
    DRAFT_6_FINGERPRINTS, DRAFT_7, DRAFT_7_FINGERPRINTS, META_SCHEMA_PATHS)

logger = logging.getLogger(__name__)

# Keywords whose value is a single sub-schema
SCHEMA_KEYWORDS = ('additionalItems', 'additionalProperties', 'unevaluatedItems', 'unevaluatedProperties',
                   'contains', 'propertyNames', 'not', 'if', 'then', 'else', 'items', 'extends')
# Keywords whose value is a list of sub-schemas
SCHEMA_LIST_KEYWORDS = ('items', 'prefixItems', 'allOf', 'anyOf', 'oneOf', 'extends', 'type', 'disallow')
# Keywords whose value is a map of name to sub-schema
SCHEMA_MAP_KEYWORDS = ('properties', 'patternProperties', 'dependencies', 'dependentSchemas',
                       'definitions', '$defs')


def normalize_meta_schema_uri(uri: str) -> str:
    """
    Normalize a `$schema` value to one of the known dialect URIs.

    The http/https variants and an empty trailing fragment are accepted for the
    json-schema.org dialects. Any other URI is returned without its empty fragment.
    """
    stripped = uri[:-1] if uri.endswith('#') else uri
    parsed = urlparse(stripped)
    if parsed.netloc == 'json-schema.org' and not parsed.fragment:
        known = META_SCHEMA_PATHS.get(parsed.path)
        if known:
            return known
    return stripped


def iter_subschemas(schema: Any, pointer: str = '') -> Iterator[Tuple[str, dict]]:
    """
    Yield every object sub-schema of a schema with its JSON Pointer, depth first.

    Only keywords that hold schemas are followed, so property names and the
    contents of `enum`, `const`, `default` and `examples` are never mistaken
    for keywords. The schema itself comes first.
    """
    if not isinstance(schema, dict):
        return
    yield pointer, schema
    for keyword in SCHEMA_KEYWORDS:
        if isinstance(schema.get(keyword), dict):
            yield from iter_subschemas(schema[keyword], join_pointer(pointer, keyword))
    for keyword in SCHEMA_LIST_KEYWORDS:
        if isinstance(schema.get(keyword), list):
            for idx, entry in enumerate(schema[keyword]):
                yield from iter_subschemas(entry, join_pointer(join_pointer(pointer, keyword), idx))
    for keyword in SCHEMA_MAP_KEYWORDS:
        if isinstance(schema.get(keyword), dict):
            for name, entry in schema[keyword].items():
                yield from iter_subschemas(entry, join_pointer(join_pointer(pointer, keyword), name))


def _legacy_shapes(schema: dict) -> Set[str]:
    """Keyword shapes that identify draft-3 and draft-4 documents."""
    shapes = set()
    if isinstance(schema.get('required'), bool):
        shapes.add(DRAFT_3)
    if isinstance(schema.get('type'), list) and any(isinstance(t, dict) for t in schema['type']):
        shapes.add(DRAFT_3)
    if schema.get('type') == 'any':
        shapes.add(DRAFT_3)
    if isinstance(schema.get('dependencies'), dict) and any(
            isinstance(v, str) for v in schema['dependencies'].values()):
        shapes.add(DRAFT_3)
    if isinstance(schema.get('exclusiveMinimum'), bool) or isinstance(schema.get('exclusiveMaximum'), bool):
        shapes.add(DRAFT_4)
    return shapes


def detect_meta_schema(document: Any) -> str:
    """
    Determine the dialect of a root schema document.

    An explicit `$schema` wins. Otherwise the keywords used anywhere in the
    document are compared against the fingerprints of each dialect; the newest
    dialect-specific keyword found decides, and documents without any
    fingerprint get the default dialect.

    Args:
        document: The decoded root schema document.

    Returns:
        str: The normalized dialect URI.
    """
    if isinstance(document, dict) and isinstance(document.get('$schema'), str):
        return normalize_meta_schema_uri(document['$schema'])

    keywords: Set[str] = set()
    shapes: Set[str] = set()
    for _pointer, schema in iter_subschemas(document):
        keywords.update(schema.keys())
        shapes.update(_legacy_shapes(schema))

    if keywords & DRAFT_2020_12_FINGERPRINTS:
        detected = DRAFT_2020_12
    elif keywords & DRAFT_2019_09_FINGERPRINTS:
        detected = DRAFT_2019_09
    elif keywords & DRAFT_3_FINGERPRINTS or DRAFT_3 in shapes:
        detected = DRAFT_3
    elif DRAFT_4 in shapes:
        detected = DRAFT_4
    elif keywords & DRAFT_7_FINGERPRINTS:
        detected = DRAFT_7
    elif keywords & DRAFT_6_FINGERPRINTS:
        detected = DRAFT_6
    else:
        detected = DEFAULT_META_SCHEMA
    logger.debug("Detected meta-schema %s", detected)
    return detected
