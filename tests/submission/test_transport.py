"""Tests for the HTTP transport and batch encoding."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import Mock, patch
from urllib.parse import parse_qs

import pytest
import requests

from collector.errors import DeliveryFailure
from collector.responses.models import ParticipantContext, ResponseSet
from collector.submission.transport import HttpTransport, encode_batch

URL = "https://collector.example.org/ajax-responses.php"


def _response(status_code: int = 200, text: str = "") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


def test_encode_batch_fields(participant: ParticipantContext) -> None:
    """Test the body carries participant fields and every row in order."""
    first = ResponseSet(rows=({"Response": "a"}, {"Response": "b"}))
    second = ResponseSet(rows=({"Response": "c"},))

    fields = parse_qs(encode_batch([first, second], participant))

    assert fields["u"] == ["p01"]
    assert fields["i"] == ["a1"]
    assert fields["e"] == ["demo"]
    rows = json.loads(fields["responses"][0])
    assert [row["Response"] for row in rows] == ["a", "b", "c"]


def test_send_acknowledged() -> None:
    """Test an empty 200 response is an acknowledgment."""
    with patch("collector.submission.transport.requests.Session") as mock_session_cls:
        mock_session = mock_session_cls.return_value
        mock_session.post.return_value = _response()

        transport = HttpTransport(URL, timeout=5.0)
        asyncio.run(transport.send("u=p01"))

        mock_session.post.assert_called_once_with(URL, data="u=p01", timeout=5.0)


def test_send_non_empty_body_fails() -> None:
    """Test a 200 response with a body is a failure."""
    with patch("collector.submission.transport.requests.Session") as mock_session_cls:
        mock_session = mock_session_cls.return_value
        mock_session.post.return_value = _response(text="Fatal error")

        transport = HttpTransport(URL)
        with pytest.raises(DeliveryFailure) as exc_info:
            asyncio.run(transport.send("u=p01"))

        assert exc_info.value.status_code == 200
        assert exc_info.value.body == "Fatal error"


def test_send_error_status_fails() -> None:
    """Test a non-200 status is a failure."""
    with patch("collector.submission.transport.requests.Session") as mock_session_cls:
        mock_session = mock_session_cls.return_value
        mock_session.post.return_value = _response(status_code=503)

        transport = HttpTransport(URL)
        with pytest.raises(DeliveryFailure, match="status 503"):
            asyncio.run(transport.send("u=p01"))


def test_send_connection_error_fails() -> None:
    """Test connection errors become delivery failures."""
    with patch("collector.submission.transport.requests.Session") as mock_session_cls:
        mock_session = mock_session_cls.return_value
        mock_session.post.side_effect = requests.ConnectionError("refused")

        transport = HttpTransport(URL)
        with pytest.raises(DeliveryFailure, match="failed"):
            asyncio.run(transport.send("u=p01"))


def test_close_closes_session() -> None:
    """Test closing the transport closes its session."""
    with patch("collector.submission.transport.requests.Session") as mock_session_cls:
        transport = HttpTransport(URL)
        transport.close()
        mock_session_cls.return_value.close.assert_called_once()
