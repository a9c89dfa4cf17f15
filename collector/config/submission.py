"""Response submission configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SubmissionConfig(BaseModel):
    """Configuration for delivering responses to the server.

    Parameters
    ----------
    url : str
        Endpoint that stores response batches.
    timeout : float
        Request timeout in seconds.
    backoff_base : float
        Base of the exponential retry backoff, in seconds.
    max_backoff : float
        Longest wait between two attempts, in seconds.

    Examples
    --------
    >>> config = SubmissionConfig()
    >>> config.max_backoff
    120.0
    """

    url: str = Field(
        default="http://localhost:8000/code/php/ajax-responses.php",
        description="Response endpoint",
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout")
    backoff_base: float = Field(default=2.0, gt=1, description="Backoff base")
    max_backoff: float = Field(default=120.0, gt=0, description="Backoff cap")
