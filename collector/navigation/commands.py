"""Navigation commands and position transitions.

A trial can steer navigation by setting the ``Exp_Command`` field of its
first response row. ``mod proc index: <arg>`` jumps to an absolute position
(``"mod proc index: 0"``) or moves relative to the current one
(``"mod proc index: r-1"``). Anything else advances by one trial. The next
position is always clamped to ``[0, length]``, where ``length`` is the
end-of-experiment sentinel.

Examples
--------
>>> advance(3, None, 10)
4
>>> advance(3, "mod proc index: r-1", 10)
2
>>> advance(9, "mod proc index: 999", 10)
10
"""

from __future__ import annotations

import re

from pydantic import ConfigDict, model_validator

from collector.data.base import CollectorBaseModel
from collector.errors import CommandSyntaxError

COMMAND_FIELD = "Exp_Command"
MOD_PROC_INDEX = "mod proc index"

# operator shortcuts (Ctrl+Alt+arrow) and the command each one submits
SHORTCUT_COMMANDS: dict[str, str] = {
    "ArrowRight": "submit trial",
    "ArrowLeft": f"{MOD_PROC_INDEX}: r-1",
}

_SIGNED_INT = re.compile(r"[+-]?\d+")

MISSING_ARGUMENT = (
    "When using Exp_Command 'mod proc index', it must be in the format "
    "'mod proc index: X', where X is the value to use, such as 'r-1'"
)
BAD_ARGUMENT = (
    "The Exp_Command 'mod proc index' was given an invalid input, and was "
    "unable to set the proc index. The input can optionally start with 'r', "
    "but then should only contain a whole number, which may start with a "
    "negative sign. Examples of inputs: '2', '-1', 'r4', 'r-1'"
)


class NavigationResult(CollectorBaseModel):
    """Outcome of resolving the next position.

    Exactly one of ``position`` and ``error`` is set.

    Attributes
    ----------
    position : int | None
        Next position, already clamped.
    error : CommandSyntaxError | None
        Parse failure of the embedded command.

    Examples
    --------
    >>> NavigationResult(position=4).unwrap()
    4
    >>> NavigationResult(position=4).ok
    True
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    position: int | None = None
    error: CommandSyntaxError | None = None

    @model_validator(mode="after")
    def validate_exactly_one(self) -> NavigationResult:
        """Validate that exactly one of position and error is set."""
        if (self.position is None) == (self.error is None):
            raise ValueError("NavigationResult needs exactly one of position or error")
        return self

    @property
    def ok(self) -> bool:
        """Whether the command resolved to a position."""
        return self.error is None

    def unwrap(self) -> int:
        """Return the position, raising the parse failure if there is one.

        Raises
        ------
        CommandSyntaxError
            If the command could not be parsed.
        """
        if self.error is not None:
            raise self.error
        assert self.position is not None
        return self.position


def clamp_position(position: int, length: int) -> int:
    """Clamp a position to ``[0, length]``."""
    return max(0, min(length, position))


def parse_mod_proc_index(command: str) -> tuple[int, bool]:
    """Parse the argument of a ``mod proc index`` command.

    Parameters
    ----------
    command : str
        Full command string, e.g. ``"mod proc index: r-1"``.

    Returns
    -------
    tuple[int, bool]
        The number and whether it is relative to the current position.

    Raises
    ------
    CommandSyntaxError
        If the argument is missing or is not a whole number.

    Examples
    --------
    >>> parse_mod_proc_index("mod proc index: r-1")
    (-1, True)
    >>> parse_mod_proc_index("mod proc index: 5")
    (5, False)
    """
    _, sep, argument = command.partition(":")
    argument = argument.strip()
    if not sep or not argument:
        raise CommandSyntaxError(MISSING_ARGUMENT, command)

    relative = argument.startswith("r")
    number = argument[1:].strip() if relative else argument
    if not _SIGNED_INT.fullmatch(number):
        raise CommandSyntaxError(BAD_ARGUMENT, command)

    return int(number), relative


def resolve_next_position(
    current: int, command: str | None, length: int
) -> NavigationResult:
    """Compute the position that follows ``current``.

    Parameters
    ----------
    current : int
        Position of the trial that was just completed.
    command : str | None
        Command embedded in the trial's responses, if any.
    length : int
        Number of trials in the procedure.

    Returns
    -------
    NavigationResult
        The clamped next position, or the parse failure.
    """
    if not command or not command.startswith(MOD_PROC_INDEX):
        return NavigationResult(position=clamp_position(current + 1, length))

    try:
        number, relative = parse_mod_proc_index(command)
    except CommandSyntaxError as e:
        return NavigationResult(error=e)

    target = current + number if relative else number
    return NavigationResult(position=clamp_position(target, length))


def advance(current: int, command: str | None, length: int) -> int:
    """Compute the next position, raising on malformed commands.

    Parameters
    ----------
    current : int
        Position of the trial that was just completed.
    command : str | None
        Command embedded in the trial's responses, if any.
    length : int
        Number of trials in the procedure.

    Returns
    -------
    int
        Next position in ``[0, length]``.

    Raises
    ------
    CommandSyntaxError
        If a ``mod proc index`` command is malformed.
    """
    return resolve_next_position(current, command, length).unwrap()
