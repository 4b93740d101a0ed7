import io
import threading

import pytest

from envgrep.errors import ProcessUnreadable
from envgrep.inspector import EnvironmentEntry
from envgrep.inspector import ProcessRecord
from envgrep.procfs import ProcessHandle
from envgrep.render import format_error
from envgrep.render import format_key
from envgrep.render import format_record
from envgrep.render import printable
from envgrep.render import quote
from envgrep.render import RecordPrinter

HANDLE = ProcessHandle(100, '/proc/100/environ')
RECORD = ProcessRecord(
    '/bin/sh -c echo hi',
    (
        EnvironmentEntry(b'PATH', b'/usr/bin:/bin'),
        EnvironmentEntry(b'PS1', b'$ \n'),
    ),
)


@pytest.mark.parametrize(('value', 'expected'), [
    (b'/usr/bin:/bin', '"/usr/bin:/bin"'),
    (b'', '""'),
    (b'two\nlines', r'"two\nlines"'),
    (b'tab\there\r', r'"tab\there\r"'),
    (b'say "hi"', r'"say \"hi\""'),
    (b'back\\slash', r'"back\\slash"'),
    (b'nul\x00', r'"nul\0"'),
    (b'bell\x07', r'"bell\u{7}"'),
    (b'esc\x1b[0m', r'"esc\u{1b}[0m"'),
    ('café ☃'.encode('UTF-8'), '"café ☃"'),
    (b'caf\xe9', r'"caf\xe9"'),
    (b'\xff\xfe', r'"\xff\xfe"'),
])
def test_quote(value, expected):
    assert quote(value) == expected


def test_format_key():
    assert format_key(b'PATH') == 'PATH'
    assert format_key(b'K\xff') == 'K\\xff'


def test_format_key_escapes_control_characters():
    assert format_key(b'K\nFAKE') == 'K\\nFAKE'


@pytest.mark.parametrize(('text', 'expected'), [
    ('/bin/sh -c echo hi', '/bin/sh -c echo hi'),
    ('say "hi" \\o/', 'say "hi" \\o/'),
    ('two\nlines', 'two\\nlines'),
    ('esc\x1b', 'esc\\u{1b}'),
])
def test_printable(text, expected):
    assert printable(text) == expected


def test_format_record_cannot_fake_extra_lines():
    record = ProcessRecord('evil\nFAKE = "x"', (EnvironmentEntry(b'A', b'1'),))
    output = format_record(HANDLE, record)
    assert output == '/proc/100/environ (evil\\nFAKE = "x"):\nA = "1"\n\n'
    assert output.count('\n') == 3


def test_format_record():
    assert format_record(HANDLE, RECORD) == '''\
/proc/100/environ (/bin/sh -c echo hi):
PATH = "/usr/bin:/bin"
PS1 = "$ \\n"

'''


def test_format_error():
    error = ProcessUnreadable(FileNotFoundError(2, 'No such file or directory'))
    assert format_error(HANDLE, error) == (
        'Error reading /proc/100/environ - [Errno 2] No such file or directory\n'
    )


class DescribeRecordPrinter:

    def it_prints_records(self):
        stdout, stderr = io.StringIO(), io.StringIO()
        printer = RecordPrinter(stdout=stdout, stderr=stderr)
        printer.record(HANDLE, RECORD)
        assert stdout.getvalue() == format_record(HANDLE, RECORD)
        assert stderr.getvalue() == ''

    def it_prints_nothing_for_a_record_without_matches(self):
        stdout = io.StringIO()
        printer = RecordPrinter(stdout=stdout, stderr=io.StringIO())
        printer.record(HANDLE, ProcessRecord('sleep', ()))
        assert stdout.getvalue() == ''

    def it_hides_errors_by_default(self):
        stdout, stderr = io.StringIO(), io.StringIO()
        printer = RecordPrinter(stdout=stdout, stderr=stderr)
        printer.error(HANDLE, ProcessUnreadable(PermissionError(13, 'Permission denied')))
        assert stdout.getvalue() == ''
        assert stderr.getvalue() == ''

    def it_shows_errors_when_verbose(self):
        stdout, stderr = io.StringIO(), io.StringIO()
        printer = RecordPrinter(verbose=True, stdout=stdout, stderr=stderr)
        printer.error(HANDLE, ProcessUnreadable(PermissionError(13, 'Permission denied')))
        assert stdout.getvalue() == ''
        assert stderr.getvalue() == 'Error reading /proc/100/environ - [Errno 13] Permission denied\n'

    def it_writes_utf8_to_binary_streams(self):
        stdout = io.TextIOWrapper(io.BytesIO(), encoding='ascii')
        printer = RecordPrinter(stdout=stdout, stderr=io.StringIO())
        record = ProcessRecord('snowman', (EnvironmentEntry(b'S', '☃'.encode('UTF-8')),))
        printer.record(HANDLE, record)
        assert stdout.buffer.getvalue() == format_record(HANDLE, record).encode('UTF-8')

    def it_can_send_messages(self):
        stderr = io.StringIO()
        RecordPrinter(stdout=io.StringIO(), stderr=stderr).message('hello', 'world')
        assert stderr.getvalue() == '[envgrep] hello world\n'

    def it_never_interleaves_records(self):
        stdout = io.StringIO()
        printer = RecordPrinter(stdout=stdout, stderr=io.StringIO())
        records = [
            (
                ProcessHandle(pid, '/proc/%i/environ' % pid),
                ProcessRecord(str(pid), tuple(EnvironmentEntry(b'K%i' % i, b'v') for i in range(20))),
            )
            for pid in range(50)
        ]
        threads = [threading.Thread(target=printer.record, args=args) for args in records]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        output = stdout.getvalue()
        for handle, record in records:
            assert format_record(handle, record) in output
