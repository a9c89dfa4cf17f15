"""Response submission: batching, delivery and retry with backoff."""

from __future__ import annotations

from collector.submission.queue import SubmissionQueue, backoff_wait
from collector.submission.transport import HttpTransport, Transport, encode_batch

__all__ = [
    "SubmissionQueue",
    "backoff_wait",
    "Transport",
    "HttpTransport",
    "encode_batch",
]
