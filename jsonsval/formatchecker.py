"""Checks string instances against the `format` keyword.

A format check returns None when the value conforms, or a short diagnostic
message. Unknown formats always conform. The checker is injected into the
Validator, so callers can replace or extend it.
"""

# pylint: disable=line-too-long

import datetime
import ipaddress
import re
from typing import Callable, Dict, Optional

from jsonsval.constants import DRAFT_3
from jsonsval.regexsupplier import CachedRegexPatternSupplier, InvalidRegexError, RegexPatternSupplier


class FormatChecker:
    """Validates strings against JSON Schema formats."""

    DATE_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$', re.ASCII)
    TIME_PATTERN = re.compile(r'^(\d{2}):(\d{2}):(\d{2})(\.\d+)?([Zz]|[+-](\d{2}):(\d{2}))$', re.ASCII)
    LEGACY_TIME_PATTERN = re.compile(r'^(\d{2}):(\d{2}):(\d{2})$', re.ASCII)
    DURATION_PATTERN = re.compile(
        r'^P(?!$)(\d+W|(\d+Y)?(\d+M)?(\d+D)?(T(?=\d)(\d+H)?(\d+M)?(\d+S)?)?)$', re.ASCII
    )
    UUID_PATTERN = re.compile(
        r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
    )
    HOSTNAME_LABEL_PATTERN = re.compile(r'^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?$', re.ASCII)
    URI_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*:[^\s<>"{}|\\^`]*$')
    URI_REFERENCE_PATTERN = re.compile(r'^[^\s<>"{}|\\^`]*$')
    URI_TEMPLATE_PATTERN = re.compile(r'^([^{}\s]|\{[^{}\s]+\})*$')
    JSON_POINTER_PATTERN = re.compile(r'^(/([^~/]|~[01])*)*$')
    RELATIVE_JSON_POINTER_PATTERN = re.compile(r'^(0|[1-9][0-9]*)(#|(/([^~/]|~[01])*)*)$')
    COLOR_PATTERN = re.compile(r'^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')
    UTC_MILLISEC_PATTERN = re.compile(r'^-?\d+(\.\d+)?$', re.ASCII)
    COLOR_NAMES = {
        'maroon', 'red', 'orange', 'yellow', 'olive', 'purple', 'fuchsia', 'white',
        'lime', 'green', 'navy', 'blue', 'aqua', 'teal', 'black', 'silver', 'gray',
    }

    def __init__(self, regex_supplier: RegexPatternSupplier = None):
        self.regex_supplier = regex_supplier or CachedRegexPatternSupplier()
        self.checks: Dict[str, Callable[[str, str], Optional[str]]] = {
            'date-time': self.check_date_time,
            'date': self.check_date,
            'time': self.check_time,
            'duration': self.check_duration,
            'email': self.check_email,
            'idn-email': self.check_email,
            'hostname': self.check_hostname,
            'host-name': self.check_hostname,
            'idn-hostname': self.check_idn_hostname,
            'ipv4': self.check_ipv4,
            'ip-address': self.check_ipv4,
            'ipv6': self.check_ipv6,
            'uri': self.check_uri,
            'iri': self.check_uri,
            'uri-reference': self.check_uri_reference,
            'iri-reference': self.check_uri_reference,
            'uri-template': self.check_uri_template,
            'json-pointer': self.check_json_pointer,
            'relative-json-pointer': self.check_relative_json_pointer,
            'regex': self.check_regex,
            'uuid': self.check_uuid,
            'color': self.check_color,
            'utc-millisec': self.check_utc_millisec,
        }

    def check(self, value: str, format_name: str, meta_schema: str) -> Optional[str]:
        """
        Check a string against a format.

        Args:
            value: The string instance.
            format_name: The value of the `format` keyword.
            meta_schema: The dialect of the schema declaring the format.

        Returns:
            None if the value conforms or the format is unknown, otherwise a message.
        """
        check = self.checks.get(format_name)
        if check is None:
            return None
        return check(value, meta_schema)

    @staticmethod
    def _valid_date(year: str, month: str, day: str) -> bool:
        try:
            datetime.date(int(year), int(month), int(day))
            return True
        except ValueError:
            return False

    @staticmethod
    def _valid_time(hour: str, minute: str, second: str) -> bool:
        return int(hour) < 24 and int(minute) < 60 and int(second) <= 60

    def check_date_time(self, value: str, meta_schema: str) -> Optional[str]:
        separator = re.search(r'[Tt ]', value) if meta_schema == DRAFT_3 else re.search(r'[Tt]', value)
        if separator is None:
            return 'Invalid date-time: missing time separator'
        date_part, time_part = value[:separator.start()], value[separator.end():]
        if self.check_date(date_part, meta_schema) or self._check_offset_time(time_part):
            return f'Invalid date-time {value!r}'
        return None

    def check_date(self, value: str, meta_schema: str) -> Optional[str]:
        match = self.DATE_PATTERN.match(value)
        if not match or not self._valid_date(*match.groups()):
            return f'Invalid date {value!r}'
        return None

    def _check_offset_time(self, value: str) -> Optional[str]:
        match = self.TIME_PATTERN.match(value)
        if not match:
            return f'Invalid time {value!r}'
        hour, minute, second, _fraction, _zone, offset_hour, offset_minute = match.groups()
        if not self._valid_time(hour, minute, second):
            return f'Invalid time {value!r}'
        if offset_hour is not None and (int(offset_hour) > 23 or int(offset_minute) > 59):
            return f'Invalid time offset in {value!r}'
        return None

    def check_time(self, value: str, meta_schema: str) -> Optional[str]:
        if meta_schema == DRAFT_3:
            match = self.LEGACY_TIME_PATTERN.match(value)
            if not match or not self._valid_time(*match.groups()):
                return f'Invalid time {value!r}'
            return None
        return self._check_offset_time(value)

    def check_duration(self, value: str, meta_schema: str) -> Optional[str]:
        if not self.DURATION_PATTERN.match(value):
            return f'Invalid duration {value!r}'
        return None

    def check_email(self, value: str, meta_schema: str) -> Optional[str]:
        local, at, domain = value.rpartition('@')
        if not at or not local or not domain or re.search(r'\s', value):
            return 'Invalid email address'
        if local.startswith('.') or local.endswith('.') or '..' in local:
            return 'Invalid email address: malformed local part'
        if domain.startswith('[') and domain.endswith(']'):
            literal = domain[1:-1]
            if literal.lower().startswith('ipv6:'):
                return None if self.check_ipv6(literal[5:], meta_schema) is None else 'Invalid email address: bad IPv6 literal'
            return None if self.check_ipv4(literal, meta_schema) is None else 'Invalid email address: bad IPv4 literal'
        return None

    def check_hostname(self, value: str, meta_schema: str) -> Optional[str]:
        if not value or len(value) > 253:
            return 'Invalid hostname length'
        for label in value.split('.'):
            if not self.HOSTNAME_LABEL_PATTERN.match(label):
                return f'Invalid hostname label {label!r}'
        return None

    def check_idn_hostname(self, value: str, meta_schema: str) -> Optional[str]:
        try:
            encoded = value.encode('idna').decode('ascii')
        except UnicodeError as e:
            return f'Invalid IDN hostname: {e}'
        return self.check_hostname(encoded, meta_schema)

    def check_ipv4(self, value: str, meta_schema: str) -> Optional[str]:
        try:
            ipaddress.IPv4Address(value)
        except ValueError as e:
            return str(e)
        return None

    def check_ipv6(self, value: str, meta_schema: str) -> Optional[str]:
        if '%' in value:
            return 'Zone identifiers are not permitted in ipv6'
        try:
            ipaddress.IPv6Address(value)
        except ValueError as e:
            return str(e)
        return None

    def check_uri(self, value: str, meta_schema: str) -> Optional[str]:
        if not self.URI_PATTERN.match(value):
            return f'Invalid URI {value!r}'
        return None

    def check_uri_reference(self, value: str, meta_schema: str) -> Optional[str]:
        if not self.URI_REFERENCE_PATTERN.match(value):
            return f'Invalid URI reference {value!r}'
        return None

    def check_uri_template(self, value: str, meta_schema: str) -> Optional[str]:
        if not self.URI_TEMPLATE_PATTERN.match(value):
            return f'Invalid URI template {value!r}'
        return None

    def check_json_pointer(self, value: str, meta_schema: str) -> Optional[str]:
        if not self.JSON_POINTER_PATTERN.match(value):
            return f'Invalid JSON Pointer {value!r}'
        return None

    def check_relative_json_pointer(self, value: str, meta_schema: str) -> Optional[str]:
        if not self.RELATIVE_JSON_POINTER_PATTERN.match(value):
            return f'Invalid relative JSON Pointer {value!r}'
        return None

    def check_regex(self, value: str, meta_schema: str) -> Optional[str]:
        try:
            self.regex_supplier.new_pattern(value)
        except InvalidRegexError as e:
            return str(e)
        return None

    def check_uuid(self, value: str, meta_schema: str) -> Optional[str]:
        if not self.UUID_PATTERN.match(value):
            return f'Invalid UUID {value!r}'
        return None

    def check_utc_millisec(self, value: str, meta_schema: str) -> Optional[str]:
        if not self.UTC_MILLISEC_PATTERN.match(value):
            return f'Invalid utc-millisec {value!r}'
        return None

    def check_color(self, value: str, meta_schema: str) -> Optional[str]:
        if value.lower() in self.COLOR_NAMES or self.COLOR_PATTERN.match(value):
            return None
        return f'Invalid CSS color {value!r}'


def format_check(value: str, format_name: str, meta_schema: str, regex_supplier: RegexPatternSupplier = None) -> Optional[str]:
    """Checks a string against a format with a default FormatChecker."""
    return FormatChecker(regex_supplier).check(value, format_name, meta_schema)
