"""Turn inspection results into text, and get that text onto the terminal in one piece."""
import sys
import threading

from .inspector import ProcessRecord
from .procfs import ProcessHandle

CHANNEL = '[envgrep]'
ESCAPES = {
    '\\': '\\\\',
    '"': '\\"',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\0': '\\0',
}
CONTROL_ESCAPES = {
    char: escaped
    for char, escaped in ESCAPES.items()
    if char not in '\\"'
}


def _escape(char, escapes=ESCAPES):
    if char in escapes:
        return escapes[char]

    code = ord(char)
    if 0xDC80 <= code <= 0xDCFF:
        # a byte that wasn't UTF-8, smuggled through by surrogateescape
        return '\\x%02x' % (code - 0xDC00)
    elif not char.isprintable():
        return '\\u{%x}' % code
    else:
        return char


def quote(value: bytes) -> str:
    """Show a value so that control characters and non-UTF-8 bytes are visible."""
    text = value.decode('UTF-8', 'surrogateescape')
    return '"%s"' % ''.join(_escape(char) for char in text)


def printable(text: str) -> str:
    """Like quote, without the quotes: a newline in a key or cmdline can't start a fake line."""
    return ''.join(_escape(char, CONTROL_ESCAPES) for char in text)


def format_key(key: bytes) -> str:
    return printable(key.decode('UTF-8', 'surrogateescape'))


def format_record(handle: ProcessHandle, record: ProcessRecord) -> str:
    lines = ['%s (%s):' % (handle, printable(record.cmdline))]
    for entry in record.entries:
        lines.append('%s = %s' % (format_key(entry.key), quote(entry.value)))
    lines.append('')
    return '\n'.join(lines) + '\n'


def format_error(handle: ProcessHandle, error: Exception) -> str:
    return 'Error reading %s - %s\n' % (handle, error)


def unbuf_write(text, file):
    """Write unbuffered in utf8."""
    buff = getattr(file, 'buffer', None)
    if buff is None:
        file.write(text)
        file.flush()
    else:
        buff.write(text.encode('UTF-8', 'backslashreplace'))
        buff.flush()


class RecordPrinter:
    """The one place output goes.

    Each record is a single write, under a lock, so records never interleave.
    """

    def __init__(self, verbose=False, stdout=None, stderr=None):
        self.verbose = verbose
        self.stdout = sys.stdout if stdout is None else stdout
        self.stderr = sys.stderr if stderr is None else stderr
        self._lock = threading.Lock()

    def record(self, handle, record):
        if not record.entries:
            return
        self._write(format_record(handle, record), self.stdout)

    def error(self, handle, error):
        if self.verbose:
            self._write(format_error(handle, error), self.stderr)

    def message(self, *words):
        self._write(' '.join((CHANNEL,) + words) + '\n', self.stderr)

    def _write(self, text, file):
        with self._lock:
            unbuf_write(text, file)
