import os.path

TOP = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def make_process(proc, pid, environ=b'', cmdline=b''):
    """Fake one /proc/<pid> directory. Pass None to leave a pseudo-file out."""
    piddir = proc / str(pid)
    piddir.mkdir()
    if environ is not None:
        (piddir / 'environ').write_bytes(environ)
    if cmdline is not None:
        (piddir / 'cmdline').write_bytes(cmdline)
    return piddir
