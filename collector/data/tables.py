"""Tabular documents: CSV sources, nested subfiles and seeded shuffling.

Every table is an ordered tuple of read-only row mappings (column header ->
text). Tables are built once at load time and never mutated afterwards.
"""

from __future__ import annotations

import csv
import logging
import posixpath
import random
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Protocol

from collector.errors import DataSourceError

logger = logging.getLogger(__name__)

Row = Mapping[str, str]

SUBFILE_COLUMN = "Subfile"
SHUFFLE_COLUMN = "Shuffle"
_NO_SHUFFLE = {"", "off"}


class TabularSource(Protocol):
    """Source of tabular documents addressed by logical name."""

    def fetch(self, name: str, seed: str | None = None) -> tuple[Row, ...]:
        """Return the rows of ``name``, shuffled with ``seed`` if given.

        The same document and seed always produce the same row order.
        """
        ...


def freeze_rows(rows: Sequence[Mapping[str, str]]) -> tuple[Row, ...]:
    """Copy rows into an immutable tuple of read-only mappings.

    Parameters
    ----------
    rows : Sequence[Mapping[str, str]]
        Rows to freeze.

    Returns
    -------
    tuple[Row, ...]
        Frozen rows.
    """
    return tuple(MappingProxyType(dict(row)) for row in rows)


def shuffle_rows(
    rows: Sequence[Mapping[str, str]],
    seed: str,
    column: str = SHUFFLE_COLUMN,
) -> list[Mapping[str, str]]:
    """Shuffle rows within their shuffle groups.

    Rows sharing the same non-empty value in ``column`` trade positions with
    each other; rows with an empty value (or ``off``) keep their position.
    Tables without the column are returned in their original order.

    Parameters
    ----------
    rows : Sequence[Mapping[str, str]]
        Rows to shuffle.
    seed : str
        Seed for the random generator.
    column : str
        Column holding the shuffle group labels.

    Returns
    -------
    list[Mapping[str, str]]
        Shuffled rows.

    Examples
    --------
    >>> rows = [{"Shuffle": "a", "v": "1"}, {"Shuffle": "", "v": "2"}]
    >>> [r["v"] for r in shuffle_rows(rows, "seed")]
    ['1', '2']
    """
    result = list(rows)
    groups: dict[str, list[int]] = {}
    for position, row in enumerate(rows):
        label = row.get(column, "").strip()
        if label.lower() in _NO_SHUFFLE:
            continue
        groups.setdefault(label, []).append(position)

    rng = random.Random(seed)
    for label in sorted(groups):
        positions = groups[label]
        members = [rows[p] for p in positions]
        rng.shuffle(members)
        for position, member in zip(positions, members, strict=True):
            result[position] = member
    return result


def build_table(
    read: Callable[[str], list[dict[str, str]]],
    name: str,
    seed: str | None = None,
) -> tuple[Row, ...]:
    """Read a document, expand its subfiles, shuffle and freeze it.

    A row with a non-empty ``Subfile`` value is replaced by the rows of the
    named document, resolved relative to the parent document's directory.
    Expansion is recursive.

    Parameters
    ----------
    read : Callable[[str], list[dict[str, str]]]
        Function reading the raw rows of a document by name.
    name : str
        Logical document name.
    seed : str | None
        Shuffle seed; rows are not shuffled if None.

    Returns
    -------
    tuple[Row, ...]
        Frozen table.

    Raises
    ------
    DataSourceError
        If a document includes itself through its subfiles.
    """
    rows = _expand_subfiles(read, name, ())
    if seed is not None:
        rows = shuffle_rows(rows, seed)
    return freeze_rows(rows)


def _expand_subfiles(
    read: Callable[[str], list[dict[str, str]]],
    name: str,
    ancestors: tuple[str, ...],
) -> list[Mapping[str, str]]:
    if name in ancestors:
        chain = " -> ".join((*ancestors, name))
        raise DataSourceError(f"Subfile cycle detected: {chain}")

    rows = read(name)
    if not rows or SUBFILE_COLUMN not in rows[0]:
        return list(rows)

    expanded: list[Mapping[str, str]] = []
    directory = posixpath.dirname(name)
    for row in rows:
        subfile = row.get(SUBFILE_COLUMN, "").strip()
        if not subfile:
            expanded.append(row)
            continue
        nested = posixpath.join(directory, subfile)
        logger.debug("Expanding subfile %s from %s", nested, name)
        expanded.extend(_expand_subfiles(read, nested, (*ancestors, name)))
    return expanded


class CsvDirectorySource:
    """Tabular source reading CSV documents below a root directory.

    Parameters
    ----------
    root : Path
        Directory that logical document names are resolved against.

    Examples
    --------
    >>> source = CsvDirectorySource(Path("my-study"))
    >>> source.root
    PosixPath('my-study')
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def read(self, name: str) -> list[dict[str, str]]:
        """Read the raw rows of a CSV document.

        Parameters
        ----------
        name : str
            Document path relative to the root.

        Returns
        -------
        list[dict[str, str]]
            Rows keyed by header; short rows are padded with empty strings.

        Raises
        ------
        DataSourceError
            If the document does not exist or cannot be decoded.
        """
        path = self.root / name
        if not path.is_file():
            raise DataSourceError(f"Tabular document not found: {path}")

        try:
            with open(path, encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f, restval="")
                rows = [
                    {
                        header: value
                        for header, value in row.items()
                        if header is not None
                    }
                    for row in reader
                ]
        except (UnicodeDecodeError, csv.Error) as e:
            raise DataSourceError(f"Could not read {path}: {e}") from e

        logger.debug("Read %d rows from %s", len(rows), path)
        return rows

    def fetch(self, name: str, seed: str | None = None) -> tuple[Row, ...]:
        """Return the frozen, optionally shuffled rows of a document."""
        return build_table(self.read, name, seed)
