"""Constants for the jsonsval package.

Dialect (meta-schema) URIs and the per-dialect behaviour tables. The tables
are data so that adding a dialect does not require touching the validator.
"""

from typing import Dict, FrozenSet, List

# Dialect URIs, normalized (no trailing '#')
DRAFT_3 = 'http://json-schema.org/draft-03/schema'
DRAFT_4 = 'http://json-schema.org/draft-04/schema'
DRAFT_6 = 'http://json-schema.org/draft-06/schema'
DRAFT_7 = 'http://json-schema.org/draft-07/schema'
DRAFT_2019_09 = 'https://json-schema.org/draft/2019-09/schema'
DRAFT_2020_12 = 'https://json-schema.org/draft/2020-12/schema'

# Oldest first
KNOWN_META_SCHEMAS: List[str] = [
    DRAFT_3,
    DRAFT_4,
    DRAFT_6,
    DRAFT_7,
    DRAFT_2019_09,
    DRAFT_2020_12,
]

# Path part of each dialect URI on json-schema.org, used to accept the
# http/https and trailing '#' spellings found in the wild.
META_SCHEMA_PATHS: Dict[str, str] = {
    '/draft-03/schema': DRAFT_3,
    '/draft-04/schema': DRAFT_4,
    '/draft-06/schema': DRAFT_6,
    '/draft-07/schema': DRAFT_7,
    '/draft/2019-09/schema': DRAFT_2019_09,
    '/draft/2020-12/schema': DRAFT_2020_12,
}

DEFAULT_META_SCHEMA = DRAFT_2020_12

# Dialects where "integer" means a number decoded as an int, so 1.0 is not
# an integer.
LEGACY_INTEGER_META_SCHEMAS: FrozenSet[str] = frozenset({DRAFT_3, DRAFT_4})

# Dialects where contentEncoding / contentMediaType are assertions. Later
# dialects treat them as annotations only.
CONTENT_ASSERTION_META_SCHEMAS: FrozenSet[str] = frozenset({DRAFT_3, DRAFT_4, DRAFT_6, DRAFT_7})

# Keywords specific to a dialect: introduced by it, or for draft-3 removed
# after it. See metaschemadetector.detect_meta_schema for the precedence.
DRAFT_3_FINGERPRINTS: FrozenSet[str] = frozenset({'disallow', 'extends', 'divisibleBy'})
DRAFT_6_FINGERPRINTS: FrozenSet[str] = frozenset({'const', 'contains', 'propertyNames', 'examples'})
DRAFT_7_FINGERPRINTS: FrozenSet[str] = frozenset({'if', 'then', 'else', 'contentMediaType', 'contentEncoding'})
DRAFT_2019_09_FINGERPRINTS: FrozenSet[str] = frozenset({
    '$recursiveRef', '$recursiveAnchor', '$defs', '$anchor', 'unevaluatedProperties',
    'unevaluatedItems', 'dependentRequired', 'dependentSchemas', 'minContains', 'maxContains'})
DRAFT_2020_12_FINGERPRINTS: FrozenSet[str] = frozenset({'prefixItems', '$dynamicRef', '$dynamicAnchor'})

# Offending values whose rendering is longer than this are left out of
# error messages.
MAX_EXCERPT_LENGTH = 20

OUTPUT_SCHEMA_URI = 'https://json-schema.org/draft/2019-09/output/schema'

# Scheme used for documents loaded from memory without a base URI.
MEMORY_URI_PREFIX = 'urn:jsonsval:document:'
