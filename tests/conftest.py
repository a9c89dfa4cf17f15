"""Root pytest configuration for collector tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from collector.responses.models import ParticipantContext


def write_csv(path: Path, lines: list[str]) -> Path:
    """Write CSV lines to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def participant() -> ParticipantContext:
    """Create a sample participant.

    Returns
    -------
    ParticipantContext
        Participant used across tests.
    """
    return ParticipantContext(username="p01", session_id="a1", experiment="demo")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def experiment_dir(tmp_path: Path) -> Path:
    """Create a sample experiment directory.

    Condition 0 is valid. Condition 1 uses a procedure with an unknown trial
    type and a stimulus row that does not exist.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary path fixture.

    Returns
    -------
    Path
        Experiment root directory.
    """
    root = tmp_path / "study"

    write_csv(
        root / "experiment" / "conditions.csv",
        [
            "Procedure,Stimuli,Description",
            "main.csv,words.csv,valid",
            "broken.csv,words.csv,invalid",
        ],
    )
    write_csv(
        root / "experiment" / "procedures" / "main.csv",
        [
            "Trial Type,Stimuli,Text,Post 1 Trial Type,Post 1 Text",
            "instruct,,Welcome,,",
            "study,2::3,,test,Recall",
        ],
    )
    write_csv(
        root / "experiment" / "procedures" / "broken.csv",
        [
            "Trial Type,Stimuli",
            "instruct,",
            "survey,9",
        ],
    )
    write_csv(
        root / "experiment" / "stimuli" / "words.csv",
        [
            "Cue,Answer",
            "sun,moon",
            "salt,pepper",
        ],
    )

    for name in ("instruct", "study", "test", "end-of-experiment"):
        type_dir = root / "trial-types" / name
        type_dir.mkdir(parents=True)
        (type_dir / "display.html").write_text(f"<p>{name}</p>", encoding="utf-8")
    (root / "trial-types" / "study" / "script.js").write_text(
        "console.log('study');", encoding="utf-8"
    )

    return root


@pytest.fixture
def csv_file():
    """Return a helper that writes CSV lines to a path."""
    return write_csv
