"""Experiment session.

The session hands the trial at the current position to a renderer, turns
the participant's submission into a finalized response set, moves to the
next position and queues the responses for delivery. Navigation never waits
for the server; only :meth:`Experiment.wait_for_submissions` does.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from collector.config.config import CollectorConfig
from collector.config.experiment import ExperimentSettings
from collector.data.ranges import stimulus_indices
from collector.data.tables import Row, TabularSource
from collector.experiment.catalog import TrialType, load_trial_types
from collector.experiment.loader import (
    ExperimentData,
    generate_shuffle_seed,
    load_experiment_data,
    select_condition,
)
from collector.experiment.renderer import TrialRenderer, TrialValues
from collector.navigation.commands import COMMAND_FIELD, SHORTCUT_COMMANDS
from collector.navigation.state import NavigationState
from collector.procedure.compiler import used_trial_types
from collector.procedure.models import TRIAL_TYPE
from collector.responses.builder import finalize_response_set
from collector.responses.models import ParticipantContext, ResponseSet
from collector.submission.queue import SubmissionQueue
from collector.submission.transport import HttpTransport, Transport
from collector.validation.validator import check_procedure

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Experiment:
    """One participant's run through a compiled procedure.

    Parameters
    ----------
    data : ExperimentData
        Session data (condition, stimuli, procedure, prior responses).
    trial_types : Mapping[str, TrialType]
        Registered trial types.
    renderer : TrialRenderer
        Component that shows trials.
    submission : SubmissionQueue
        Queue delivering response sets to the server.
    settings : ExperimentSettings | None
        Runtime settings.
    source : TabularSource | None
        Source for tables trials fetch at runtime (see :meth:`fetch_table`).
    clock : Callable[[], datetime]
        Source of response timestamps.
    """

    def __init__(
        self,
        data: ExperimentData,
        trial_types: Mapping[str, TrialType],
        renderer: TrialRenderer,
        submission: SubmissionQueue,
        settings: ExperimentSettings | None = None,
        source: TabularSource | None = None,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.data = data
        self.trial_types = trial_types
        self.renderer = renderer
        self.submission = submission
        self.settings = settings or ExperimentSettings()
        self.source = source
        self._clock = clock

        self.navigation = NavigationState.resume(
            len(data.procedure), [response_set.rows for response_set in data.responses]
        )
        self.responses: list[ResponseSet] = list(data.responses)
        self.current_trial: TrialValues | None = None

        self.validation_errors = check_procedure(
            data.procedure,
            trial_types,
            data.stimuli,
            source=data.procedure_name or data.condition.procedure,
        )

    @property
    def participant(self) -> ParticipantContext:
        """Participant whose responses this session records."""
        return self.submission.participant

    @property
    def position(self) -> int:
        """Current procedure position."""
        return self.navigation.position

    @property
    def trial_number(self) -> int:
        """Number of trials completed so far."""
        return self.navigation.trial_number

    @property
    def is_finished(self) -> bool:
        """Whether the procedure has been completed."""
        return self.navigation.is_terminal

    def get_stimuli(self, range_str: str | None) -> tuple[Row, ...]:
        """Return the stimulus rows a range expression refers to.

        Indices outside the stimulus table are skipped.
        """
        stimuli = self.data.stimuli
        return tuple(stimuli[i] for i in stimulus_indices(range_str, len(stimuli)))

    def get_trial_values(self, position: int) -> TrialValues:
        """Return the values of the trial at ``position``.

        Positions outside the procedure yield the end-of-experiment trial.

        Parameters
        ----------
        position : int
            Procedure position.

        Returns
        -------
        TrialValues
            Procedure columns and stimuli of the trial.
        """
        procedure = self.data.procedure
        if not 0 <= position < len(procedure):
            return TrialValues(
                procedure={TRIAL_TYPE: self.settings.end_trial_type},
                position=len(procedure),
                trial_number=self.trial_number,
                is_end=True,
            )

        trial = procedure[position]
        return TrialValues(
            procedure=trial.as_row(),
            stimuli=self.get_stimuli(trial.stimuli),
            position=position,
            trial_number=self.trial_number,
        )

    def used_trial_types(self) -> list[str]:
        """Trial types the procedure uses, in order of first use."""
        return used_trial_types(self.data.procedure)

    async def begin_experiment(self) -> None:
        """Prepare the renderer and run the experiment to its end."""
        await self.renderer.prepare(self.used_trial_types())
        await self.run()

    async def start_current_trial(self) -> Sequence[Mapping[str, Any]]:
        """Show the trial at the current position and await its responses."""
        self.current_trial = self.get_trial_values(self.position)
        logger.debug(
            "Starting trial %d (position %d, type %s)",
            self.trial_number,
            self.position,
            self.current_trial.trial_type,
        )
        return await self.renderer.present(self.current_trial)

    async def run(self) -> None:
        """Run trials until the procedure ends, then show the end trial.

        The end-of-experiment trial is shown once every response set has
        been delivered.
        """
        while not self.is_finished:
            raw_responses = await self.start_current_trial()
            self.submit_responses(raw_responses)

        await self.wait_for_submissions()
        await self.start_current_trial()
        self.current_trial = None
        logger.info("Experiment finished after %d trials", self.trial_number)

    def receive_trial_submission(self, raw_json: str) -> ResponseSet:
        """Handle a trial's submission encoded as JSON.

        Parameters
        ----------
        raw_json : str
            JSON array of response rows (a single object is accepted as a
            one-row submission).

        Returns
        -------
        ResponseSet
            The finalized response set.

        Raises
        ------
        ValueError
            If the JSON is not a row or an array of rows.
        CommandSyntaxError
            If the submission carries a malformed navigation command.
        """
        decoded = json.loads(raw_json)
        if isinstance(decoded, dict):
            decoded = [decoded]
        if not isinstance(decoded, list) or not all(
            isinstance(row, dict) for row in decoded
        ):
            raise ValueError(
                "Trial submission must be a JSON object or an array of objects. "
                f"Got: {type(decoded).__name__}."
            )
        return self.submit_responses(decoded)

    def submit_responses(
        self, raw_responses: Sequence[Mapping[str, Any]]
    ) -> ResponseSet:
        """Finalize a trial's responses, navigate, and queue them for delivery.

        Parameters
        ----------
        raw_responses : Sequence[Mapping[str, Any]]
            Raw response rows of the current trial.

        Returns
        -------
        ResponseSet
            The finalized response set.

        Raises
        ------
        CommandSyntaxError
            If the first row carries a malformed navigation command. The
            position is left unchanged and nothing is queued.
        """
        command = raw_responses[0].get(COMMAND_FIELD) if raw_responses else None
        next_position = self.navigation.next_position(
            None if command is None else str(command)
        ).unwrap()

        response_set = finalize_response_set(
            raw_responses,
            current_position=self.position,
            next_position=next_position,
            participant=self.participant,
            trial_number=self.trial_number,
            clock=self._clock,
        )
        self.submission.enqueue(response_set)
        self.responses.append(response_set)
        self.navigation.commit(next_position)
        self.current_trial = None
        return response_set

    def shortcut_command(self, key: str) -> str | None:
        """Return the navigation command an operator shortcut submits.

        Shortcuts only apply while a trial is showing and when the settings
        allow them.

        Parameters
        ----------
        key : str
            Key pressed together with Ctrl+Alt (``ArrowRight``/``ArrowLeft``).

        Returns
        -------
        str | None
            Command to submit, or None if the shortcut does not apply.
        """
        if self.current_trial is None:
            return None
        if not self.settings.allow_keyboard_shortcuts_to_change_trial:
            return None
        return SHORTCUT_COMMANDS.get(key)

    def get_last_response_value(
        self, column: str, first_only: bool = True
    ) -> str | list[str]:
        """Return a column of the most recent response set.

        Parameters
        ----------
        column : str
            Column name.
        first_only : bool
            Return only the first row's value instead of every row's.

        Returns
        -------
        str | list[str]
            The value(s); ``""`` (or an empty list) if there is no previous
            response set or it lacks the column.
        """
        if not self.responses or column not in self.responses[-1].first:
            return "" if first_only else []
        last = self.responses[-1]
        return last.first[column] if first_only else last.column(column)

    def fetch_table(self, name: str, seed_suffix: str = "") -> tuple[Row, ...]:
        """Fetch a table for the current trial with a per-trial shuffle seed.

        Raises
        ------
        RuntimeError
            If the session has no tabular source.
        """
        if self.source is None:
            raise RuntimeError("Experiment was created without a tabular source")
        seed = f"{self.data.shuffle_seed}-{self.trial_number}{seed_suffix}"
        return self.source.fetch(name, seed=seed)

    async def wait_for_submissions(self) -> None:
        """Wait until every response set has been delivered."""
        await self.submission.wait_until_drained()

    async def close(self) -> None:
        """Stop delivering responses; undelivered sets stay pending."""
        await self.submission.close()


def create_experiment(
    config: CollectorConfig,
    source: TabularSource,
    participant: ParticipantContext,
    renderer: TrialRenderer,
    condition_index: int = 0,
    shuffle_seed: str | None = None,
    prior_responses: Sequence[Row] = (),
    transport: Transport | None = None,
) -> Experiment:
    """Assemble a session from configuration.

    Parameters
    ----------
    config : CollectorConfig
        Deployment configuration.
    source : TabularSource
        Source of the experiment's tables.
    participant : ParticipantContext
        Participant taking the experiment. Its experiment name defaults to
        the configured one.
    renderer : TrialRenderer
        Component that shows trials.
    condition_index : int
        Row of the conditions table to use.
    shuffle_seed : str | None
        Participant's shuffle seed; taken from the settings or drawn fresh
        if None.
    prior_responses : Sequence[Row]
        Response rows stored in earlier visits, for resuming.
    transport : Transport | None
        Transport for responses; an :class:`HttpTransport` to the configured
        URL if None.

    Returns
    -------
    Experiment
        Ready-to-run session.
    """
    if not participant.experiment:
        participant = participant.model_copy(
            update={"experiment": config.experiment.name}
        )
    paths = config.paths
    seed = shuffle_seed or config.experiment.shuffle_seed or generate_shuffle_seed()
    condition = select_condition(source, paths, condition_index)
    data = load_experiment_data(source, condition, paths, seed, prior_responses)
    trial_types = load_trial_types(paths.trial_types_path)

    if transport is None:
        transport = HttpTransport(config.submission.url, config.submission.timeout)
    submission = SubmissionQueue(
        transport,
        participant,
        backoff_base=config.submission.backoff_base,
        max_backoff=config.submission.max_backoff,
    )
    return Experiment(
        data,
        trial_types,
        renderer,
        submission,
        settings=config.experiment,
        source=source,
    )
