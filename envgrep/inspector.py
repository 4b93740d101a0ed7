"""Inspect one process: rebuild its command line, and grep its environment."""
import enum
import re
import typing

from .debug import trace
from .errors import BadPattern
from .errors import InspectError
from .errors import MalformedEnvironment
from .errors import ProcessUnreadable
from .errors import UndecodableText
from .procfs import ProcessHandle


class MatchPattern(typing.NamedTuple):
    regex: re.Pattern
    case_insensitive: bool

    @classmethod
    def compile(cls, text: str, case_insensitive: bool = False) -> 'MatchPattern':
        flags = re.IGNORECASE if case_insensitive else 0
        try:
            # bytes, so that values which aren't UTF-8 can still be matched
            regex = re.compile(text.encode('UTF-8', 'surrogateescape'), flags)
        except re.error as error:
            raise BadPattern('invalid pattern %r: %s' % (text, error))
        return cls(regex, case_insensitive)

    def matches(self, segment: bytes) -> bool:
        return self.regex.search(segment) is not None


class EnvironmentEntry(typing.NamedTuple):
    key: bytes
    value: bytes

    @property
    def segment(self) -> bytes:
        return self.key + b'=' + self.value


class ProcessRecord(typing.NamedTuple):
    cmdline: str
    entries: typing.Tuple[EnvironmentEntry, ...]


class InspectOutcome(enum.Enum):
    MATCHED = enum.auto()
    NO_MATCH = enum.auto()
    FAILED = enum.auto()


class InspectResult(typing.NamedTuple):
    handle: ProcessHandle
    outcome: InspectOutcome
    record: typing.Optional[ProcessRecord] = None
    error: typing.Optional[InspectError] = None


def split_nul(blob: bytes) -> typing.List[bytes]:
    """split on NUL, without the empty segments (a trailing NUL makes one)"""
    return [segment for segment in blob.split(b'\x00') if segment]


def read_pseudofile(path: str) -> bytes:
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as error:
        raise ProcessUnreadable(error)


def decode(text: bytes, strict: bool) -> str:
    if strict:
        try:
            return text.decode('UTF-8')
        except UnicodeDecodeError as error:
            raise UndecodableText('not valid UTF-8: %s' % error)
    else:
        return text.decode('UTF-8', 'backslashreplace')


def load_cmdline(handle: ProcessHandle, strict: bool = False) -> str:
    blob = read_pseudofile(handle.cmdline_path)
    return decode(b' '.join(split_nul(blob)), strict)


def parse_environ(
        blob: bytes,
        pattern: MatchPattern,
        strict: bool = False,
) -> typing.Tuple[EnvironmentEntry, ...]:
    """Return the entries of an environment blob that match, in their original order.

    The pattern sees the whole `KEY=value` segment, so it can match on either side (or both).
    """
    entries = []
    for segment in split_nul(blob):
        if not pattern.matches(segment):
            continue

        key, equals, value = segment.partition(b'=')
        if not equals:
            raise MalformedEnvironment('no "=" in environment segment %r' % segment)
        if strict:
            decode(key, strict)
            decode(value, strict)
        entries.append(EnvironmentEntry(key, value))
    return tuple(entries)


def inspect(handle: ProcessHandle, pattern: MatchPattern, strict: bool = False) -> InspectResult:
    """Inspect one process. Failures are returned, not raised: one process can't stop a scan."""
    try:
        cmdline = load_cmdline(handle, strict)
        entries = parse_environ(read_pseudofile(handle.environ_path), pattern, strict)
    except InspectError as error:
        trace('%s: %s', handle, error)
        return InspectResult(handle, InspectOutcome.FAILED, error=error)

    record = ProcessRecord(cmdline, entries)
    if entries:
        return InspectResult(handle, InspectOutcome.MATCHED, record)
    else:
        return InspectResult(handle, InspectOutcome.NO_MATCH, record)
