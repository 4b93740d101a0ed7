class Impossible(AssertionError):
    """raised only in cases that we believe to be impossible"""


class EnvgrepUserMessage(Exception):
    """
    This is the class of user messages, as distinct from programmer errors.
    For some cases, there's nothing better to do than send a message to the user.
    When that happens, we don't need or want a stack trace.
    """


class BadPattern(EnvgrepUserMessage):
    """The search pattern is not a valid regular expression."""


class NoProcfs(EnvgrepUserMessage):
    """The process pseudo-filesystem is missing, so there is nothing to scan."""


class BadConfig(EnvgrepUserMessage):
    """A configuration value could not be understood."""


class InspectError(Exception):
    """
    One process could not be inspected.

    These never abort a scan: the process is skipped (and reported, if we're verbose).
    """


class ProcessUnreadable(InspectError):
    """A pseudo-file could not be opened or read. Usually the process exited, or isn't ours."""

    def __init__(self, error):
        super().__init__(error)
        self.error = error

    def __str__(self):
        return str(self.error)


class MalformedEnvironment(InspectError):
    """An environment segment has no `=` in it."""


class UndecodableText(InspectError):
    """Text we were asked to decode strictly is not valid UTF-8."""
