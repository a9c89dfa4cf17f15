"""Tests for experiment loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from collector.config.paths import PathsConfig
from collector.data.tables import CsvDirectorySource
from collector.errors import DataSourceError
from collector.experiment.loader import (
    Condition,
    generate_shuffle_seed,
    load_conditions,
    load_experiment_data,
    select_condition,
)


@pytest.fixture
def paths(experiment_dir: Path) -> PathsConfig:
    """Paths of the sample experiment."""
    return PathsConfig(root=experiment_dir)


@pytest.fixture
def source(experiment_dir: Path) -> CsvDirectorySource:
    """CSV source rooted at the sample experiment."""
    return CsvDirectorySource(experiment_dir)


class TestConditions:
    """Tests for reading and selecting conditions."""

    def test_load_conditions(
        self, source: CsvDirectorySource, paths: PathsConfig
    ) -> None:
        """Test every row of the conditions table becomes a condition."""
        conditions = load_conditions(source, paths)

        assert [c.procedure for c in conditions] == ["main.csv", "broken.csv"]
        assert conditions[0].stimuli == "words.csv"
        assert conditions[0].columns == {"Description": "valid"}
        with pytest.raises(TypeError):
            conditions[0].columns["Description"] = "edited"  # type: ignore[index]

    def test_select_condition(
        self, source: CsvDirectorySource, paths: PathsConfig
    ) -> None:
        """Test a condition is selected by index."""
        assert select_condition(source, paths, 1).procedure == "broken.csv"

    def test_select_out_of_range(
        self, source: CsvDirectorySource, paths: PathsConfig
    ) -> None:
        """Test an index past the table raises DataSourceError."""
        with pytest.raises(DataSourceError, match="out of range"):
            select_condition(source, paths, 2)

    def test_row_missing_stimuli(self) -> None:
        """Test a row without a Stimuli value is rejected."""
        with pytest.raises(DataSourceError, match="Stimuli"):
            Condition.from_row({"Procedure": "main.csv", "Stimuli": ""})


class TestLoadExperimentData:
    """Tests for load_experiment_data."""

    def test_compiles_procedure(
        self, source: CsvDirectorySource, paths: PathsConfig
    ) -> None:
        """Test the procedure is compiled with post trials."""
        condition = select_condition(source, paths, 0)

        data = load_experiment_data(source, condition, paths, "seed")

        assert [t.trial_type for t in data.procedure] == ["instruct", "study", "test"]
        assert data.procedure[2].get("Text") == "Recall"
        assert data.procedure[2].stimuli == "2::3"
        assert data.procedure_name == "experiment/procedures/main.csv"
        assert [row["Cue"] for row in data.stimuli] == ["sun", "salt"]
        assert data.responses == ()

    def test_groups_prior_responses(
        self, source: CsvDirectorySource, paths: PathsConfig
    ) -> None:
        """Test stored rows are regrouped into response sets by trial number."""
        condition = select_condition(source, paths, 0)
        prior = [
            {"Exp_Trial_Number": "1", "Exp_Next_Proc_Index": "2", "Response": "b"},
            {"Exp_Trial_Number": "0", "Exp_Next_Proc_Index": "1", "Response": "a"},
            {"Exp_Trial_Number": "1", "Exp_Next_Proc_Index": "2", "Response": "c"},
        ]

        data = load_experiment_data(source, condition, paths, "seed", prior)

        assert len(data.responses) == 2
        assert data.responses[0].first["Response"] == "a"
        assert data.responses[1].column("Response") == ["b", "c"]

    def test_missing_procedure_file(
        self, source: CsvDirectorySource, paths: PathsConfig
    ) -> None:
        """Test a condition naming a missing file raises DataSourceError."""
        condition = Condition(procedure="absent.csv", stimuli="words.csv")
        with pytest.raises(DataSourceError):
            load_experiment_data(source, condition, paths, "seed")


def test_generate_shuffle_seed() -> None:
    """Test seeds are fresh per call."""
    assert generate_shuffle_seed() != generate_shuffle_seed()
