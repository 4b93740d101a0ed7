"""One pass over every visible process."""
import collections
import os
import typing
from concurrent.futures import ThreadPoolExecutor

from .debug import debug
from .errors import Impossible
from .inspector import inspect
from .inspector import InspectOutcome
from .inspector import InspectResult
from .inspector import MatchPattern
from .procfs import enumerate_processes
from .procfs import PROC_ROOT


class ScanSummary:

    def __init__(self):
        self.scanned = 0
        self.matched = 0
        self.failed = 0

    def count(self, result: InspectResult) -> None:
        self.scanned += 1
        if result.outcome is InspectOutcome.MATCHED:
            self.matched += 1
        elif result.outcome is InspectOutcome.FAILED:
            self.failed += 1

    def __str__(self):
        return 'scanned {} processes: {} matched, {} failed'.format(
            self.scanned, self.matched, self.failed,
        )


def worker_count(jobs: int) -> int:
    if jobs < 0:
        raise Impossible('negative worker count: %i' % jobs)
    elif jobs == 0:
        return os.cpu_count() or 1
    else:
        return jobs


def scan(
        pattern: MatchPattern,
        proc_root: str = PROC_ROOT,
        jobs: int = 1,
        strict: bool = False,
) -> typing.Iterator[InspectResult]:
    """Inspect every process, yielding results in the order the processes were listed.

    A missing procfs is raised right away, not on the first next().
    """
    handles = enumerate_processes(proc_root)
    jobs = worker_count(jobs)
    debug('scanning %s with %i worker(s)', proc_root, jobs)
    if jobs == 1:
        return (inspect(handle, pattern, strict) for handle in handles)
    else:
        return _scan_parallel(handles, pattern, jobs, strict)


def _scan_parallel(handles, pattern, jobs, strict):
    # a bounded window of futures keeps the listing lazy, and the output in order
    window = jobs * 2
    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix='envgrep') as executor:
        pending = collections.deque()
        for handle in handles:
            pending.append(executor.submit(inspect, handle, pattern, strict))
            if len(pending) >= window:
                yield pending.popleft().result()
        while pending:
            yield pending.popleft().result()


def report(results: typing.Iterable[InspectResult], printer) -> ScanSummary:
    """Print each result as soon as we have it."""
    summary = ScanSummary()
    for result in results:
        summary.count(result)
        if result.outcome is InspectOutcome.MATCHED:
            printer.record(result.handle, result.record)
        elif result.outcome is InspectOutcome.FAILED:
            printer.error(result.handle, result.error)
    return summary
