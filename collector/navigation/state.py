"""Navigation state of a running experiment."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from collector.errors import DataSourceError
from collector.navigation.commands import (
    NavigationResult,
    clamp_position,
    resolve_next_position,
)

logger = logging.getLogger(__name__)

TRIAL_NUMBER_FIELD = "Exp_Trial_Number"
NEXT_POSITION_FIELD = "Exp_Next_Proc_Index"


class NavigationState:
    """Current position in a procedure and the number of completed trials.

    The position lives in ``[0, length]``; ``length`` itself means the
    experiment is over. The state changes only through :meth:`commit`,
    once per completed trial.

    Parameters
    ----------
    length : int
        Number of trials in the procedure.
    position : int
        Starting position (clamped into range).
    trial_number : int
        Number of trials already completed.

    Examples
    --------
    >>> state = NavigationState(length=2)
    >>> state.commit(state.next_position(None).unwrap())
    1
    >>> state.trial_number
    1
    >>> state.commit(2)
    2
    >>> state.is_terminal
    True
    """

    def __init__(self, length: int, position: int = 0, trial_number: int = 0) -> None:
        if length < 0:
            raise ValueError(f"length must be >= 0. Got: {length}")
        if trial_number < 0:
            raise ValueError(f"trial_number must be >= 0. Got: {trial_number}")
        self.length = length
        self.position = clamp_position(position, length)
        self.trial_number = trial_number

    @classmethod
    def resume(
        cls, length: int, responses: Sequence[Sequence[Mapping[str, str]]]
    ) -> NavigationState:
        """Rebuild the state from previously recorded response sets.

        Parameters
        ----------
        length : int
            Number of trials in the procedure.
        responses : Sequence[Sequence[Mapping[str, str]]]
            Prior response sets ordered by trial number.

        Returns
        -------
        NavigationState
            State positioned after the last recorded trial, or a fresh state
            if nothing was recorded.

        Raises
        ------
        DataSourceError
            If the last recorded row has no usable trial number or next
            position.
        """
        if not responses or not responses[-1]:
            return cls(length)

        last_row = responses[-1][0]
        try:
            trial_number = int(last_row[TRIAL_NUMBER_FIELD]) + 1
            position = int(last_row[NEXT_POSITION_FIELD])
        except (KeyError, ValueError) as e:
            raise DataSourceError(
                f"Stored responses lack resume information ({e}): {dict(last_row)}"
            ) from e
        logger.info(
            "Resuming at trial %d, procedure position %d", trial_number, position
        )
        return cls(length, position=position, trial_number=trial_number)

    @property
    def is_terminal(self) -> bool:
        """Whether the experiment has reached its end."""
        return self.position >= self.length

    def next_position(self, command: str | None) -> NavigationResult:
        """Resolve the position that follows the current one."""
        return resolve_next_position(self.position, command, self.length)

    def commit(self, next_position: int) -> int:
        """Move to ``next_position`` and count the completed trial.

        Returns
        -------
        int
            The new position.
        """
        self.position = clamp_position(next_position, self.length)
        self.trial_number += 1
        return self.position

    def __repr__(self) -> str:
        return (
            f"NavigationState(position={self.position}, length={self.length}, "
            f"trial_number={self.trial_number})"
        )
