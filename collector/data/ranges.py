"""Stimulus range expressions.

Procedure rows reference stimuli by spreadsheet row number, e.g. ``"2"``,
``"2::5"``, ``"2-5, 8"``. Row 1 of a spreadsheet is the header, so row
number ``n`` maps to table index ``n - 2``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

_SPAN = re.compile(r"^\s*(\d+)\s*(?:::|-)\s*(\d+)\s*$")

HEADER_OFFSET = 2


def _entries(range_str: str | None) -> Iterator[tuple[int, int] | str]:
    """Yield ``(start, end)`` for each span and the stripped text otherwise."""
    if not range_str:
        return
    for part in range_str.split(","):
        part = part.strip()
        if not part:
            continue
        match = _SPAN.match(part)
        if match is None:
            yield part
        else:
            yield int(match.group(1)), int(match.group(2))


def _inclusive(start: int, end: int) -> range:
    step = 1 if end >= start else -1
    return range(start, end + step, step)


def iter_range(range_str: str | None) -> Iterator[str]:
    """Lazily expand a range expression into its individual entries.

    See :func:`parse_range`.
    """
    for entry in _entries(range_str):
        if isinstance(entry, str):
            yield entry
        else:
            yield from (str(n) for n in _inclusive(*entry))


def parse_range(range_str: str | None) -> list[str]:
    """Expand a range expression into its individual entries.

    Entries are separated by commas. An entry of the form ``a::b`` or
    ``a-b`` expands to every integer between ``a`` and ``b`` inclusive
    (descending spans are expanded in descending order). Other entries are
    returned stripped and unchanged.

    Parameters
    ----------
    range_str : str | None
        Range expression.

    Returns
    -------
    list[str]
        Individual entries, in order.

    Examples
    --------
    >>> parse_range("2::4, 7")
    ['2', '3', '4', '7']
    >>> parse_range("5-3")
    ['5', '4', '3']
    >>> parse_range("")
    []
    """
    return list(iter_range(range_str))


def iter_stimulus_indices(
    range_str: str | None, limit: int | None = None
) -> Iterator[int]:
    """Lazily resolve a range expression to 0-based stimulus table indices.

    Non-numeric entries and entries resolving below zero are skipped. With a
    ``limit``, indices at or past it are skipped without being generated, so
    a span reaching far beyond the table costs nothing.

    Parameters
    ----------
    range_str : str | None
        Range expression from a procedure's ``Stimuli`` column.
    limit : int | None
        Length of the stimulus table, if only existing rows are wanted.

    Yields
    ------
    int
        Indices into the stimulus table.
    """
    for entry in _entries(range_str):
        if isinstance(entry, tuple):
            start, end = entry
        else:
            try:
                start = end = int(entry)
            except ValueError:
                continue

        first, last = start - HEADER_OFFSET, end - HEADER_OFFSET
        low, high = max(min(first, last), 0), max(first, last)
        if limit is not None:
            high = min(high, limit - 1)
        if low > high:
            continue
        yield from (_inclusive(low, high) if last >= first else _inclusive(high, low))


def stimulus_indices(range_str: str | None, limit: int | None = None) -> list[int]:
    """Resolve a range expression to 0-based stimulus table indices.

    Parameters
    ----------
    range_str : str | None
        Range expression from a procedure's ``Stimuli`` column.
    limit : int | None
        Length of the stimulus table, if only existing rows are wanted.

    Returns
    -------
    list[int]
        Indices into the stimulus table.

    Examples
    --------
    >>> stimulus_indices("2::4")
    [0, 1, 2]
    >>> stimulus_indices("1, x, 3")
    [1]
    >>> stimulus_indices("2::100000000", limit=2)
    [0, 1]
    """
    return list(iter_stimulus_indices(range_str, limit))
