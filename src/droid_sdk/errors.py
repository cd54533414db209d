"""Error types raised by the Droid SDK.

Every failure the SDK surfaces is a ``DroidError`` subclass tagged with an
``ErrorKind`` and carrying machine-readable fields, so callers can branch on
``exc.kind`` (or the class) instead of matching message strings.
"""

from __future__ import annotations

from enum import Enum

#: Shell one-liner printed in ``CliNotFoundError`` messages.
INSTALL_HINT = "curl -fsSL https://app.factory.ai/cli | sh"


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    CLI_NOT_FOUND = "cli_not_found"
    EXECUTION = "execution"
    PARSE = "parse"
    TIMEOUT = "timeout"
    STREAM = "stream"
    INSTALL = "install"
    GENERIC = "generic"


class DroidError(Exception):
    """Base class for all SDK errors."""

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class CliNotFoundError(DroidError):
    """The ``droid`` binary was not found in any searched location."""

    kind = ErrorKind.CLI_NOT_FOUND

    def __init__(self, searched_paths: list[str]) -> None:
        self.searched_paths = list(searched_paths)
        joined = ", ".join(self.searched_paths)
        super().__init__(
            f"Droid CLI not found. Searched: {joined}. Install with: {INSTALL_HINT}"
        )


class ExecutionError(DroidError):
    """The CLI process failed, or its output could not be used."""

    kind = ErrorKind.EXECUTION

    def __init__(
        self,
        message: str,
        exit_code: int,
        stderr: str,
        session_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
        self.session_id = session_id


class ParseError(DroidError):
    """A record or response could not be parsed.

    ``raw`` holds the full offending text.
    """

    kind = ErrorKind.PARSE

    def __init__(
        self, message: str, raw: str, cause: BaseException | None = None
    ) -> None:
        super().__init__(message, cause=cause)
        self.raw = raw


class UnknownEventError(ParseError):
    """A well-formed record carried an unrecognised ``type`` tag."""

    def __init__(self, event_type: object, raw: str) -> None:
        super().__init__(f"Unknown event type: {event_type!r}", raw)
        self.event_type = event_type


class DroidTimeoutError(DroidError, TimeoutError):
    """A blocking execution exceeded its wall-clock timeout (seconds)."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Operation timed out after {timeout:g}s")
        self.timeout = timeout


class StreamError(DroidError):
    """Reading the underlying byte stream failed."""

    kind = ErrorKind.STREAM

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)


class InstallError(DroidError):
    """Installing the Droid CLI failed."""

    kind = ErrorKind.INSTALL
