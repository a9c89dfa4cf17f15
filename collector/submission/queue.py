"""Submission queue.

Finalized response sets are appended to a batch and delivered in the
background. Each delivery sends everything currently in the batch; after an
acknowledgment exactly the sets that were sent are removed. After a failure
the queue waits ``min(max_backoff, base ** failures)`` seconds and then
sends the batch as it is at that moment, including anything enqueued in the
meantime. Any exception the transport raises counts as a failure and is
retried until it succeeds or the queue is closed.

Only one delivery runs at a time and all batch mutation happens on the
event loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_never,
    wait_exponential,
)

from collector.errors import DeliveryFailure
from collector.responses.models import ParticipantContext, ResponseSet
from collector.submission.transport import Transport, encode_batch

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def backoff_wait(base: float = 2.0, max_delay: float = 120.0) -> wait_exponential:
    """Return the wait strategy used between delivery attempts.

    After ``n`` consecutive failures the wait is ``min(max_delay, base ** n)``
    seconds.

    Examples
    --------
    >>> from unittest.mock import Mock
    >>> wait = backoff_wait()
    >>> wait(Mock(attempt_number=3))
    8.0
    >>> wait(Mock(attempt_number=10))
    120.0
    """
    return wait_exponential(multiplier=base, exp_base=base, max=max_delay)


class SubmissionQueue:
    """Batch of response sets awaiting delivery.

    Parameters
    ----------
    transport : Transport
        Transport used to deliver batches.
    participant : ParticipantContext
        Participant the responses belong to.
    backoff_base : float
        Base of the exponential backoff, in seconds.
    max_backoff : float
        Upper bound of a single backoff wait, in seconds.
    sleep : Sleep
        Coroutine function used to wait between attempts.

    Examples
    --------
    >>> queue = SubmissionQueue(transport, participant)  # doctest: +SKIP
    >>> queue.enqueue(response_set)  # doctest: +SKIP
    >>> await queue.wait_until_drained()  # doctest: +SKIP
    """

    def __init__(
        self,
        transport: Transport,
        participant: ParticipantContext,
        backoff_base: float = 2.0,
        max_backoff: float = 120.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.transport = transport
        self.participant = participant
        self.backoff_base = backoff_base
        self.max_backoff = max_backoff
        self._sleep = sleep

        self._batch: list[ResponseSet] = []
        self._in_flight = False
        self._task: asyncio.Task[None] | None = None
        self.failures = 0
        self._drained_callbacks: list[Callable[[], object]] = []
        self._drained_waiters: list[asyncio.Future[None]] = []

    @property
    def pending(self) -> tuple[ResponseSet, ...]:
        """Response sets not yet acknowledged, in batch order."""
        return tuple(self._batch)

    @property
    def is_drained(self) -> bool:
        """Whether every enqueued response set has been acknowledged."""
        return not self._batch

    @property
    def in_flight(self) -> bool:
        """Whether a delivery (or backoff wait) is in progress."""
        return self._in_flight

    def enqueue(self, response_set: ResponseSet) -> None:
        """Add a response set to the batch and start delivery if idle.

        Must be called from a running event loop.

        Parameters
        ----------
        response_set : ResponseSet
            Finalized response set.
        """
        loop = asyncio.get_running_loop()
        self._batch.append(response_set)
        logger.debug("Queued response set (%d pending)", len(self._batch))

        if not self._in_flight:
            self._in_flight = True
            self._task = loop.create_task(self._deliver())
            self._task.add_done_callback(self._log_crash)

    def notify_when_drained(self, callback: Callable[[], object]) -> None:
        """Call ``callback`` once the batch is empty.

        The callback runs immediately if the batch is already empty,
        otherwise exactly once the next time it becomes empty.
        """
        if self.is_drained:
            callback()
        else:
            self._drained_callbacks.append(callback)

    async def wait_until_drained(self) -> None:
        """Wait until every enqueued response set has been acknowledged."""
        if self.is_drained:
            return
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._drained_waiters.append(waiter)
        await waiter

    async def close(self) -> None:
        """Cancel any delivery or backoff wait in progress.

        Unacknowledged sets stay in :attr:`pending`.
        """
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Submission stopped with %d sets pending", len(self._batch))

    async def _deliver(self) -> None:
        try:
            while self._batch:
                pending = await self._send_until_acknowledged()
                self.failures = 0
                self._remove(pending)
                logger.debug(
                    "Delivered %d response sets (%d pending)",
                    len(pending),
                    len(self._batch),
                )
        finally:
            self._in_flight = False

        self._notify_drained()

    async def _send_until_acknowledged(self) -> list[ResponseSet]:
        """Send the current batch until one attempt is acknowledged.

        Each attempt snapshots the batch again, so a retry also carries the
        sets enqueued while waiting.

        Returns
        -------
        list[ResponseSet]
            The sets included in the acknowledged attempt.
        """
        pending: list[ResponseSet] = []
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(DeliveryFailure),
            wait=backoff_wait(self.backoff_base, self.max_backoff),
            stop=stop_never,
            before_sleep=self._before_retry,
            sleep=self._sleep,
        )
        async for attempt in retrying:
            with attempt:
                pending = list(self._batch)
                await self._send(pending)
        return pending

    async def _send(self, pending: list[ResponseSet]) -> None:
        body = encode_batch(pending, self.participant)
        try:
            await self.transport.send(body)
        except DeliveryFailure:
            raise
        except Exception as e:
            raise DeliveryFailure(f"Transport error: {e!r}") from e

    def _before_retry(self, retry_state: RetryCallState) -> None:
        self.failures = retry_state.attempt_number
        error = (
            retry_state.outcome.exception()
            if retry_state.outcome is not None
            else None
        )
        delay = (
            retry_state.next_action.sleep
            if retry_state.next_action is not None
            else 0.0
        )
        logger.warning(
            "Response submission failed (%s); retrying in %.0f seconds",
            error,
            delay,
        )

    def _log_crash(self, task: asyncio.Task[None]) -> None:
        if task.cancelled() or task.exception() is None:
            return
        logger.error(
            "Response submission stopped with %d sets pending",
            len(self._batch),
            exc_info=task.exception(),
        )

    def _remove(self, delivered: list[ResponseSet]) -> None:
        delivered_ids = {id(response_set) for response_set in delivered}
        self._batch = [s for s in self._batch if id(s) not in delivered_ids]

    def _notify_drained(self) -> None:
        callbacks, self._drained_callbacks = self._drained_callbacks, []
        waiters, self._drained_waiters = self._drained_waiters, []
        for callback in callbacks:
            callback()
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
