"""Pluggable regular expression support for `pattern`, `patternProperties` and the `regex` format.

The validator only depends on the `RegexPatternSupplier` contract: turn a
pattern string into an object with a `matches(text)` method, or raise
`InvalidRegexError`. The default implementation is backed by `re`.
"""

import re
from typing import Callable, Dict


class InvalidRegexError(Exception):
    """Raised when a pattern cannot be compiled."""

    def __init__(self, pattern: str, cause: Exception = None):
        self.pattern = pattern
        self.cause = cause
        super().__init__(f"Invalid regex {pattern!r}: {cause}" if cause else f"Invalid regex {pattern!r}")


class RegexPattern:
    """A compiled pattern. JSON Schema patterns are not anchored, so `matches` searches."""

    def matches(self, text: str) -> bool:
        raise NotImplementedError


class PythonRegexPattern(RegexPattern):
    """RegexPattern backed by the standard `re` module."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        try:
            self._compiled = re.compile(pattern)
        except re.error as e:
            raise InvalidRegexError(pattern, e) from e

    def matches(self, text: str) -> bool:
        return self._compiled.search(text) is not None


class RegexPatternSupplier:
    """Creates RegexPattern objects from pattern strings."""

    def new_pattern(self, pattern: str) -> RegexPattern:
        raise NotImplementedError


class CachedRegexPatternSupplier(RegexPatternSupplier):
    """Compiles each distinct pattern once. Invalid patterns are cached too."""

    def __init__(self, factory: Callable[[str], RegexPattern] = PythonRegexPattern):
        self.factory = factory
        self._cache: Dict[str, object] = {}

    def new_pattern(self, pattern: str) -> RegexPattern:
        if pattern not in self._cache:
            try:
                self._cache[pattern] = self.factory(pattern)
            except InvalidRegexError as e:
                self._cache[pattern] = e
        cached = self._cache[pattern]
        if isinstance(cached, InvalidRegexError):
            raise cached
        return cached
