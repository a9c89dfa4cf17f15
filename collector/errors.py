"""Exception hierarchy for the experiment engine.

Navigation and validation errors are operator-facing; delivery failures are
contained inside the submission queue's retry loop.
"""

from __future__ import annotations

from collections.abc import Sequence


class CollectorError(Exception):
    """Base exception for all collector errors."""


class CommandSyntaxError(CollectorError):
    """Malformed navigation command embedded in a response set.

    Parameters
    ----------
    message : str
        Description of what is wrong with the command.
    command : str
        The offending command string.

    Examples
    --------
    >>> error = CommandSyntaxError("missing argument", "mod proc index:")
    >>> error.command
    'mod proc index:'
    >>> "mod proc index:" in str(error)
    True
    """

    def __init__(self, message: str, command: str) -> None:
        self.message = message
        self.command = command
        super().__init__(f'{message}\n(received "{command}")')


class ReferentialIntegrityError(CollectorError):
    """Procedure references undefined trial types or stimuli rows.

    Parameters
    ----------
    findings : Sequence[str]
        Human-readable descriptions of every problem found.
    source : str | None
        Name of the procedure document the findings refer to.
    """

    def __init__(self, findings: Sequence[str], source: str | None = None) -> None:
        self.findings = list(findings)
        self.source = source
        header = (
            f'Errors found in the procedure file "{source}":'
            if source
            else "Errors found in the procedure:"
        )
        super().__init__(header + "\n\n" + "\n".join(self.findings))


class DeliveryFailure(CollectorError):
    """A response submission was not acknowledged by the server.

    Parameters
    ----------
    message : str
        Description of the failure.
    status_code : int | None
        HTTP status code, if a response was received.
    body : str | None
        Response body, if a response was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class DataSourceError(CollectorError):
    """A tabular document could not be found or read."""
