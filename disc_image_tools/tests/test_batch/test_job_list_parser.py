"""Tests for JobListParser service and create_jobs."""

from pathlib import Path

import pytest

from disc_image_tools.batch.exceptions import InvalidJobListError
from disc_image_tools.batch.models import BatchJob, ConversionDirection, JobStatus
from disc_image_tools.services.job_list_parser import JobListParser, create_jobs


@pytest.fixture
def parser():
    """Fixture providing a JobListParser instance."""
    return JobListParser()


@pytest.fixture
def write_csv(tmp_path):
    """Fixture returning a helper that writes CSV text and returns its path."""

    def write(content: str, name: str = "jobs.csv") -> str:
        csv_path = tmp_path / name
        csv_path.write_text(content)
        return str(csv_path)

    return write


class TestJobListParserParseCSV:
    """Tests for parse_csv method."""

    def test_parse_minimal_csv(self, parser, write_csv, tmp_path):
        """Relative inputs resolve against the CSV directory; outputs are generated."""
        csv_path = write_csv("input_path\ngames/alpha.cue\ngames/beta.cue\n")

        jobs = parser.parse_csv(csv_path, ConversionDirection.CUE_TO_CHD)

        assert len(jobs) == 2
        assert all(isinstance(job, BatchJob) for job in jobs)
        assert all(job.status == JobStatus.PENDING for job in jobs)

        games_dir = tmp_path.resolve() / "games"
        assert jobs[0].job_id == "job_001"
        assert jobs[0].input_path == str(games_dir / "alpha.cue")
        assert jobs[0].output_path == str(games_dir / "alpha.chd")
        assert jobs[1].job_id == "job_002"

    def test_parse_full_csv(self, parser, write_csv, tmp_path):
        csv_path = write_csv(
            "job_id,input_path,output_path\n"
            "first,/abs/alpha.chd,out/alpha.cue\n"
            "second,/abs/beta.chd,\n"
        )

        jobs = parser.parse_csv(csv_path, ConversionDirection.CHD_TO_CUE)

        assert [job.job_id for job in jobs] == ["first", "second"]
        assert jobs[0].input_path == str(Path("/abs/alpha.chd"))
        assert jobs[0].output_path == str(tmp_path.resolve() / "out" / "alpha.cue")
        assert jobs[1].output_path == str(Path("/abs") / "beta.cue")

    def test_output_dir_applies_to_generated_paths(self, parser, write_csv, tmp_path):
        csv_path = write_csv("input_path,output_path\n/abs/a.iso,\n/abs/b.iso,/keep/b.chd\n")
        out_dir = str(tmp_path / "chd")

        jobs = parser.parse_csv(csv_path, ConversionDirection.ISO_TO_CHD, output_dir=out_dir)

        assert jobs[0].output_path == str(Path(out_dir) / "a.chd")
        assert jobs[1].output_path == str(Path("/keep/b.chd"))

    def test_whitespace_is_stripped(self, parser, write_csv):
        csv_path = write_csv("input_path , output_path\n  /abs/a.iso  , /abs/a.chd \n")
        jobs = parser.parse_csv(csv_path, ConversionDirection.ISO_TO_CHD)
        assert jobs[0].input_path == str(Path("/abs/a.iso"))
        assert jobs[0].output_path == str(Path("/abs/a.chd"))

    def test_empty_rows_are_skipped(self, parser, write_csv):
        csv_path = write_csv("input_path,output_path\n/abs/a.iso,\n,\n\n/abs/b.iso,\n")
        jobs = parser.parse_csv(csv_path, ConversionDirection.ISO_TO_CHD)
        assert len(jobs) == 2

    def test_duplicate_inputs_are_ignored(self, parser, write_csv):
        csv_path = write_csv("input_path\n/abs/a.iso\n/abs/a.iso\n/abs/b.iso\n")
        jobs = parser.parse_csv(csv_path, ConversionDirection.ISO_TO_CHD)
        assert [Path(job.input_path).name for job in jobs] == ["a.iso", "b.iso"]

    def test_missing_file(self, parser, tmp_path):
        with pytest.raises(InvalidJobListError, match="does not exist"):
            parser.parse_csv(str(tmp_path / "missing.csv"), ConversionDirection.ISO_TO_CHD)

    def test_directory_instead_of_file(self, parser, tmp_path):
        with pytest.raises(InvalidJobListError, match="not a file"):
            parser.parse_csv(str(tmp_path), ConversionDirection.ISO_TO_CHD)

    def test_empty_file(self, parser, write_csv):
        csv_path = write_csv("")
        with pytest.raises(InvalidJobListError, match="empty"):
            parser.parse_csv(csv_path, ConversionDirection.ISO_TO_CHD)

    def test_header_only(self, parser, write_csv):
        csv_path = write_csv("input_path,output_path\n")
        with pytest.raises(InvalidJobListError, match="no data rows"):
            parser.parse_csv(csv_path, ConversionDirection.ISO_TO_CHD)

    def test_missing_required_column(self, parser, write_csv):
        csv_path = write_csv("path,output_path\n/abs/a.iso,/abs/a.chd\n")
        with pytest.raises(InvalidJobListError, match="missing required columns"):
            parser.parse_csv(csv_path, ConversionDirection.ISO_TO_CHD)

    def test_every_bad_row_is_reported(self, parser, write_csv):
        csv_path = write_csv(
            "input_path,output_path\n"
            "/abs/a.iso,\n"
            ",/abs/b.chd\n"
            ",/abs/c.chd\n"
        )
        with pytest.raises(InvalidJobListError) as excinfo:
            parser.parse_csv(csv_path, ConversionDirection.ISO_TO_CHD)

        message = str(excinfo.value)
        assert "Failed to parse 2 row(s)" in message
        assert "Row 3" in message
        assert "Row 4" in message

    def test_empty_csv_path_rejected(self, parser):
        with pytest.raises(ValueError, match="csv_path cannot be empty"):
            parser.parse_csv("", ConversionDirection.ISO_TO_CHD)


class TestJobListParserInfo:
    """Tests for get_csv_info method."""

    def test_info(self, parser, write_csv):
        csv_path = write_csv("input_path,output_path\n/abs/a.iso,\n/abs/b.iso,\n")
        info = parser.get_csv_info(csv_path)
        assert info["num_rows"] == 2
        assert info["has_required_columns"] is True
        assert info["missing_columns"] == []

    def test_info_missing_columns(self, parser, write_csv):
        csv_path = write_csv("source\n/abs/a.iso\n")
        info = parser.get_csv_info(csv_path)
        assert info["has_required_columns"] is False
        assert info["missing_columns"] == ["input_path"]

    def test_info_unreadable(self, parser, tmp_path):
        with pytest.raises(InvalidJobListError):
            parser.get_csv_info(str(tmp_path / "missing.csv"))


class TestCreateJobs:
    """Tests for create_jobs."""

    def test_one_job_per_input(self):
        jobs = create_jobs(["/g/a.cue", "/g/b.cue"], ConversionDirection.CUE_TO_CHD)
        assert [job.output_path for job in jobs] == [
            str(Path("/g") / "a.chd"),
            str(Path("/g") / "b.chd"),
        ]
        assert len({job.job_id for job in jobs}) == 2

    def test_duplicates_are_ignored_in_order(self):
        jobs = create_jobs(
            ["/g/b.iso", "/g/a.iso", "/g/b.iso"], ConversionDirection.ISO_TO_CHD
        )
        assert [Path(job.input_path).name for job in jobs] == ["b.iso", "a.iso"]

    def test_output_dir(self):
        jobs = create_jobs([Path("/g/a.chd")], ConversionDirection.CHD_TO_ISO, output_dir="/out")
        assert jobs[0].input_path == str(Path("/g/a.chd"))
        assert jobs[0].output_path == str(Path("/out") / "a.iso")

    def test_empty_input(self):
        assert create_jobs([], ConversionDirection.ISO_TO_CHD) == []
