"""Transport for delivering response batches to the server.

The server acknowledges a batch with status 200 and an empty body. Any other
outcome (an error status, a non-empty body, a connection problem) is a
delivery failure.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Protocol
from urllib.parse import urlencode

import requests

from collector.errors import DeliveryFailure
from collector.responses.models import ParticipantContext, ResponseSet

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """One request/response exchange with the response server."""

    async def send(self, body: str) -> None:
        """Send a URL-encoded body.

        Raises
        ------
        DeliveryFailure
            If the server did not acknowledge the body.
        """
        ...


def encode_batch(
    pending: Sequence[ResponseSet], participant: ParticipantContext
) -> str:
    """Serialize response sets into one URL-encoded request body.

    All rows of all sets are concatenated in batch order.

    Parameters
    ----------
    pending : Sequence[ResponseSet]
        Response sets to deliver.
    participant : ParticipantContext
        Participant the responses belong to.

    Returns
    -------
    str
        Body with ``u`` (username), ``i`` (session id), ``e`` (experiment)
        and ``responses`` (JSON array of rows) fields.
    """
    rows = [dict(row) for response_set in pending for row in response_set.rows]
    return urlencode(
        {
            "u": participant.username,
            "i": participant.session_id,
            "e": participant.experiment,
            "responses": json.dumps(rows),
        }
    )


class HttpTransport:
    """Deliver response batches with HTTP POST requests.

    A single ``requests.Session`` is reused for every request. The blocking
    request runs in a worker thread so the event loop keeps running.

    Parameters
    ----------
    url : str
        Endpoint that stores responses.
    timeout : float
        Request timeout in seconds.

    Examples
    --------
    >>> transport = HttpTransport("https://example.org/ajax-responses.php")
    >>> transport.url
    'https://example.org/ajax-responses.php'
    """

    def __init__(self, url: str, timeout: float = 30.0) -> None:
        self.url = url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {"Content-Type": "application/x-www-form-urlencoded"}
        )

    async def send(self, body: str) -> None:
        """Post ``body`` to the endpoint.

        Raises
        ------
        DeliveryFailure
            If the request fails or is not acknowledged.
        """
        await asyncio.to_thread(self._post, body)

    def _post(self, body: str) -> None:
        try:
            response = self.session.post(self.url, data=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise DeliveryFailure(f"Request to {self.url} failed: {e}") from e

        if response.status_code != 200 or response.text != "":
            raise DeliveryFailure(
                f"Server rejected responses (status {response.status_code})",
                status_code=response.status_code,
                body=response.text,
            )

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
