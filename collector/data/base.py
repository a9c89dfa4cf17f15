"""Base model for all collector records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CollectorBaseModel(BaseModel):
    """Immutable base model shared by collector records.

    Records are frozen after construction and reject unknown fields, so a
    descriptor or response set cannot be modified once it has been handed
    to another component.

    Examples
    --------
    >>> class Point(CollectorBaseModel):
    ...     x: int
    >>> p = Point(x=1)
    >>> p.x
    1
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        validate_default=True,
    )
