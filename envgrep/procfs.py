"""
Find the processes we can (try to) inspect.

Every process gets a directory under /proc, named by its pid. We only care about two of
the pseudo-files in there: `environ` and its sibling `cmdline`.
"""
import os
import re
import typing

from .debug import debug
from .errors import NoProcfs

PROC_ROOT = '/proc'
NUMBERS_ONLY = re.compile('^[0-9]+$')


class ProcessHandle(typing.NamedTuple):
    pid: int
    environ_path: str

    @property
    def cmdline_path(self) -> str:
        return os.path.join(os.path.dirname(self.environ_path), 'cmdline')

    def __str__(self):
        return self.environ_path


def check_proc_root(proc_root: str) -> None:
    if not os.path.isdir(proc_root):
        raise NoProcfs('no process filesystem found at %s' % proc_root)
    if not os.access(proc_root, os.R_OK | os.X_OK):
        raise NoProcfs('cannot list processes: %s is not readable' % proc_root)


def enumerate_processes(proc_root: str = PROC_ROOT) -> typing.Iterator[ProcessHandle]:
    """Lazily yield a handle for each process visible right now.

    Processes that exit after being listed still get a handle; reading them fails later.
    """
    check_proc_root(proc_root)
    return _enumerate_processes(proc_root)


def _enumerate_processes(proc_root):
    debug('listing %s', proc_root)
    # skips /proc/self and /proc/thread-self, which would duplicate a real pid
    piddirs = sorted((name for name in os.listdir(proc_root) if NUMBERS_ONLY.match(name)), key=int)
    for piddir in piddirs:
        environ_path = os.path.join(proc_root, piddir, 'environ')
        if not os.path.exists(environ_path):
            continue
        yield ProcessHandle(int(piddir), environ_path)
