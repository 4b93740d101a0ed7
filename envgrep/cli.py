"""
Search through the environment variables of all running processes on the
system and report on all variables that match the specified pattern.
"""
import argparse
import os
import sys

from cached_property import cached_property
from frozendict import frozendict

from .config import as_bool
from .config import as_int
from .config import coerce
from .config import Config
from .debug import debug
from .errors import EnvgrepUserMessage
from .inspector import MatchPattern
from .procfs import PROC_ROOT
from .render import CHANNEL
from .render import RecordPrinter
from .scan import report
from .scan import scan
from envgrep import __version__


ENVGREP_DEFAULTS = frozendict({
    # where do the process pseudo-files live?
    'proc_root': PROC_ROOT,
    # compile the pattern with re.IGNORECASE?
    'case_insensitive': False,
    # say why each skipped process was skipped?
    'verbose': False,
    # how many processes to inspect at once? (0: one per cpu)
    'jobs': 1,
    # fail a process whose cmdline or matched variables aren't UTF-8, rather than escape them?
    'strict': False,
    # print counts when the scan is done?
    'summary': False,
})
CONFIG_TYPES = frozendict({
    'case_insensitive': as_bool,
    'verbose': as_bool,
    'jobs': as_int,
    'strict': as_bool,
    'summary': as_bool,
})


class EnvgrepApp:

    def __init__(self, config=ENVGREP_DEFAULTS, stdout=None, stderr=None):
        self.conf = frozendict(config)
        self.printer = RecordPrinter(
            verbose=self.conf['verbose'],
            stdout=stdout,
            stderr=stderr,
        )

    def __call__(self):
        """Run the app."""
        try:
            self.grep()
        except EnvgrepUserMessage as error:
            # we don't need or want a stack trace for user errors
            return CHANNEL + ' ERROR: ' + str(error)

    @cached_property
    def pattern(self):
        return MatchPattern.compile(self.conf['pattern'], self.conf['case_insensitive'])

    def grep(self):
        """Report every matching variable, of every process we can read"""
        results = scan(
            self.pattern,
            proc_root=self.conf['proc_root'],
            jobs=self.conf['jobs'],
            strict=self.conf['strict'],
        )
        summary = report(results, self.printer)
        debug('done: %s', summary)
        if self.conf['summary']:
            self.printer.message(str(summary))
        return summary


def parser():
    parser = argparse.ArgumentParser(prog='envgrep', description=__doc__)
    parser.add_argument('--version', action='version', version=__version__)
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        default=argparse.SUPPRESS,
        help='print all error messages as they occur instead of hiding them',
    )
    parser.add_argument(
        '-i', '--case-insensitive',
        action='store_true',
        default=argparse.SUPPRESS,
        help='perform case-insensitive matching with the specified regex',
    )
    parser.add_argument(
        '-j', '--jobs',
        type=int,
        default=argparse.SUPPRESS,
        help='inspect this many processes at once (0: one per cpu)',
    )
    parser.add_argument(
        '--strict',
        action='store_true',
        default=argparse.SUPPRESS,
        help='treat text that is not UTF-8 as an error, rather than escaping it',
    )
    parser.add_argument(
        '--summary',
        action='store_true',
        default=argparse.SUPPRESS,
        help='print how many processes were scanned, matched and skipped',
    )
    parser.add_argument('--proc-root', help='where the process filesystem lives', default=argparse.SUPPRESS)
    parser.add_argument('--config', help='specify a config file path to load')
    parser.add_argument(
        'pattern',
        metavar='PATTERN',
        help=(
            'regex to search environment variables with. It sees the whole KEY=value string, '
            'so parts of the variable name, value, or both can be used here.'
        ),
    )
    return parser


def main(argv=None):
    p = parser()
    args = p.parse_args(argv)
    try:
        config = Config('envgrep').combined(ENVGREP_DEFAULTS, args)
        config = coerce(config, CONFIG_TYPES)
    except EnvgrepUserMessage as error:
        return CHANNEL + ' ERROR: ' + str(error)

    app = EnvgrepApp(config)
    try:
        return app()
    except BrokenPipeError:
        # our reader went away (`envgrep X | head`); there is no one left to tell
        silence_stdout()
        return 1


def silence_stdout():
    """Point stdout at the void, so the flush at interpreter exit can't fail again."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())
    os.close(devnull)


if __name__ == '__main__':
    exit(main())
