"""
set $ENVGREP_DEBUG to see what envgrep is doing (and what it skips)

  1: one line per scan phase
  3: one line per process
"""
import sys
from os import environ


def parse_level(value):
    if not value:
        return 0
    try:
        return float(value)
    except ValueError:
        return 1


LEVEL = parse_level(environ.get('ENVGREP_DEBUG', ''))


def debug(msg, *args, level=1):
    if level <= LEVEL:  # pragma: no cover
        print('[envgrep] DEBUG:', msg % args, file=sys.stderr)
        sys.stderr.flush()


def trace(msg, *args):
    """per-process detail; noisy"""
    debug(msg, *args, level=3)
