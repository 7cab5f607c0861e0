"""Schema registry: document retrieval, identifier bookkeeping and memoized schema construction."""

# pylint: disable=line-too-long

import itertools
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import ParseResult, unquote, urlparse

import jsonpointer
import requests

from jsonsval.common import MISSING, resolve_uri, split_uri
from jsonsval.constants import DRAFT_3, DRAFT_4, MEMORY_URI_PREFIX
from jsonsval.metaschemadetector import detect_meta_schema, iter_subschemas
from jsonsval.schema import Schema
from jsonsval.validationerrors import SchemaConstructionError

logger = logging.getLogger(__name__)


def _enclosing_pointer(known: Dict[str, str], pointer: str) -> Optional[str]:
    """Find the closest ancestor of a pointer that is a key of `known`."""
    while pointer:
        pointer = pointer.rsplit('/', 1)[0]
        if pointer in known:
            return pointer
    return None


class SchemaStore:
    """
    Loads schema documents and builds Schema nodes, one per canonical URI.

    A canonical URI is the URI of the containing document followed by a JSON
    Pointer fragment ('doc.json#/definitions/a'). Resource URIs declared with
    `$id` (or `id` in draft-3/4) and `$anchor` names are indexed so that
    references written against them resolve to canonical locations.
    """

    def __init__(self, document_source: Callable[[str], Any] = None):
        self.document_source = document_source
        self.content_cache: Dict[str, str] = {}
        self.documents: Dict[str, Any] = {}
        self.meta_schemas: Dict[str, str] = {}
        self.schemas: Dict[str, Schema] = {}
        self.parents: Dict[str, Schema] = {}
        self.resource_to_canonical: Dict[str, str] = {}
        self.canonical_to_resource: Dict[str, str] = {}
        self._memory_ids = itertools.count(1)
        self._depth = 0
        self._registered: List[str] = []
        self._pending_examples: List[Schema] = []
        self._lock = threading.RLock()

    def fetch_content(self, url: str | ParseResult) -> str:
        """
        Fetches the content from the specified URL.

        Args:
            url (str or ParseResult): The URL to fetch the content from.

        Returns:
            str: The fetched content.

        Raises:
            requests.RequestException: If there is an error while making the HTTP request.
            OSError: If there is an error while reading the file.
        """
        if isinstance(url, str):
            parsed_url = urlparse(url)
        else:
            parsed_url = url

        if parsed_url.geturl() in self.content_cache:
            return self.content_cache[parsed_url.geturl()]
        scheme = parsed_url.scheme

        if scheme in ['http', 'https']:
            logger.debug("Fetching %s", parsed_url.geturl())
            response = requests.get(parsed_url.geturl(), timeout=30)
            response.raise_for_status()
            self.content_cache[parsed_url.geturl()] = response.text
            return response.text
        elif scheme == 'file':
            file_path = unquote(parsed_url.path)
            if parsed_url.netloc and parsed_url.netloc != 'localhost':
                file_path = '//' + parsed_url.netloc + file_path
            # On Windows, a file URL path starts with '/' before the drive letter
            if os.name == 'nt' and file_path.startswith('/'):
                file_path = file_path[1:]
            logger.debug("Reading %s", file_path)
            with open(file_path, 'r', encoding='utf-8') as file:
                text = file.read()
                self.content_cache[parsed_url.geturl()] = text
                return text
        else:
            raise NotImplementedError(f'Unsupported URL scheme: {scheme}')

    def fetch_document(self, uri: str) -> Any:
        """Fetch and decode the raw JSON document at a URI (without fragment)."""
        try:
            if self.document_source is not None:
                return self.document_source(uri)
            return json.loads(self.fetch_content(uri))
        except (requests.RequestException, OSError, NotImplementedError, json.JSONDecodeError) as e:
            raise SchemaConstructionError(f"Could not load document: {e}", uri, e) from e

    def add_document(self, uri: str, document: Any) -> str:
        """
        Register a decoded root document under a URI and index its identifiers.

        Args:
            uri: The document URI. A fragment, if any, is ignored.
            document: The decoded JSON document.

        Returns:
            str: The dialect of the document.
        """
        with self._lock:
            base = split_uri(uri)[0]
            self.documents[base] = document
            meta_schema = detect_meta_schema(document)
            self.meta_schemas[base] = meta_schema
            self._index_identifiers(base, document, meta_schema)
            return meta_schema

    def _index_identifiers(self, base: str, document: Any, meta_schema: str):
        scopes: Dict[str, str] = {}
        for pointer, schema in iter_subschemas(document):
            enclosing = _enclosing_pointer(scopes, pointer)
            scope = base if enclosing is None else scopes[enclosing]
            canonical = f'{base}#{pointer}'
            identifier = schema.get('$id')
            if identifier is None and meta_schema in (DRAFT_3, DRAFT_4):
                identifier = schema.get('id')
            if isinstance(identifier, str):
                try:
                    resolved = resolve_uri(scope, identifier)
                except ValueError:
                    logger.warning("Ignoring unparsable identifier %s at %s", identifier, canonical)
                    resolved = None
                if resolved is not None:
                    resource, fragment = split_uri(resolved)
                    if fragment:
                        # '#name' style identifier of older dialects
                        self.resource_to_canonical[f'{resource}#{unquote(fragment)}'] = canonical
                    else:
                        self.resource_to_canonical[resource + '#'] = canonical
                        self.canonical_to_resource[canonical] = resource
                        scope = resource
            anchor = schema.get('$anchor')
            if isinstance(anchor, str):
                self.resource_to_canonical[f'{split_uri(scope)[0]}#{anchor}'] = canonical
            scopes[pointer] = scope

    def get_document(self, base_uri: str) -> Any:
        """Return the root document for a URI without fragment, loading it if needed."""
        with self._lock:
            if base_uri not in self.documents:
                self.add_document(base_uri, self.fetch_document(base_uri))
            return self.documents[base_uri]

    def get_meta_schema(self, base_uri: str) -> str:
        """Return the declared or detected dialect of a loaded document."""
        self.get_document(base_uri)
        return self.meta_schemas[base_uri]

    def get_object(self, canonical_uri: str) -> Any:
        """Return the raw JSON value at a canonical URI, or MISSING."""
        base, pointer = split_uri(canonical_uri)
        document = self.get_document(base)
        if pointer and not pointer.startswith('/'):
            return MISSING
        return jsonpointer.resolve_pointer(document, pointer, MISSING)

    def canonicalize(self, uri: str) -> str:
        """
        Convert a (resolved, absolute) reference URI into a canonical URI.

        The fragment is percent-decoded. Plain-name fragments are looked up
        among the indexed anchors; pointer fragments are rebased onto the
        canonical location of the resource they are relative to.
        """
        base, fragment = split_uri(uri)
        fragment = unquote(fragment)
        key = f'{base}#{fragment}'
        if key in self.resource_to_canonical:
            return self.resource_to_canonical[key]
        if fragment.startswith('/'):
            root = self.resource_to_canonical.get(base + '#')
            if root is not None:
                return root + fragment
        return key

    def canonical_uri_to_resource_uri(self, canonical_uri: str) -> str:
        """Express a canonical URI relative to the innermost resource (`$id`) containing it."""
        best = None
        for canonical, resource in self.canonical_to_resource.items():
            if not canonical_uri.startswith(canonical):
                continue
            rest = canonical_uri[len(canonical):]
            if rest and not rest.startswith('/'):
                continue
            if best is None or len(canonical) > len(best):
                best = canonical
        if best is None:
            return canonical_uri
        return f'{self.canonical_to_resource[best]}#{canonical_uri[len(best):]}'

    def resolution_base(self, canonical_uri: str) -> str:
        """The URI that references inside the node at canonical_uri are resolved against."""
        return self.canonical_uri_to_resource_uri(canonical_uri)

    def register(self, uri: str, schema: Schema):
        """Reserve a canonical URI for a node before it is populated."""
        self.schemas[uri] = schema
        self._registered.append(uri)

    def set_parent(self, child_uri: str, parent: Schema):
        """Record the single owner of a node. A second assignment is a programming error."""
        if child_uri in self.parents:
            raise RuntimeError(f"Schema {child_uri} already has a parent: {self.parents[child_uri].uri}")
        self.parents[child_uri] = parent

    def get_parent(self, child_uri: str) -> Optional[Schema]:
        return self.parents.get(child_uri)

    def defer_examples(self, schema: Schema):
        """Queue a node whose `examples` are checked once the outermost load completes."""
        self._pending_examples.append(schema)

    def _check_examples(self):
        from jsonsval.validator import Validator  # pylint: disable=import-outside-toplevel
        validator = Validator()
        while self._pending_examples:
            schema = self._pending_examples.pop(0)
            for idx, example in enumerate(schema.examples):
                errors = validator.validate_all(schema, example)
                if errors:
                    raise SchemaConstructionError(
                        f"Example {idx} does not validate: " + "; ".join(str(error) for error in errors),
                        schema.uri)

    def build(self, canonical_uri: str) -> Schema:
        """
        Return the node at a canonical URI, constructing it on first use.

        Nodes registered during a failed outermost build are evicted, so no
        partially built node remains reachable.
        """
        with self._lock:
            existing = self.schemas.get(canonical_uri)
            if existing is not None:
                return existing
            if self._depth == 0:
                self._registered = []
            self._depth += 1
            try:
                schema = Schema(self, canonical_uri)
                if self._depth == 1:
                    self._check_examples()
            except Exception:
                if self._depth == 1:
                    for uri in self._registered:
                        self.schemas.pop(uri, None)
                        self.parents.pop(uri, None)
                    self._registered = []
                    self._pending_examples = []
                raise
            finally:
                self._depth -= 1
            return schema

    def load_schema(self, uri: str) -> Schema:
        """
        Load the schema at a URI (absolute, optionally with a fragment).

        Args:
            uri: The URI of the schema. The document is fetched if not yet known.

        Returns:
            Schema: The memoized node.
        """
        with self._lock:
            canonical = self.canonicalize(uri)
            base = split_uri(canonical)[0]
            if base not in self.documents:
                self.get_document(base)
                canonical = self.canonicalize(uri)
            return self.build(canonical)

    def load_schema_json(self, document: Any, base_uri: str = None) -> Schema:
        """
        Register an in-memory root document and return its root node.

        Args:
            document: The decoded schema document (object or boolean).
            base_uri: Optional URI for the document. Anonymous documents get a unique URN.

        Returns:
            Schema: The root node.
        """
        with self._lock:
            if base_uri is None:
                base_uri = f'{MEMORY_URI_PREFIX}{next(self._memory_ids)}'
            base = split_uri(base_uri)[0]
            self.add_document(base, document)
            return self.load_schema(base + '#')

    def load_schema_file(self, path: str) -> Schema:
        """Load the schema document stored in a local file."""
        return self.load_schema(Path(path).resolve().as_uri() + '#')
