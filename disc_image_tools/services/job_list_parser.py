"""Service for building job lists from files and CSV job lists.

A job list CSV names one conversion per row:

    input_path,output_path
    games/track.cue,chd/track.chd
    games/other.cue,

Rows without an output path get one generated next to the input (or in
the requested output directory).
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from disc_image_tools.batch.exceptions import InvalidJobListError
from disc_image_tools.batch.models import BatchJob, ConversionDirection
from disc_image_tools.chdman_tools import generate_output_path
from disc_image_tools.services.base_service import BaseService


def create_jobs(
    input_paths: Iterable,
    direction: ConversionDirection,
    output_dir: Optional[str] = None,
) -> List[BatchJob]:
    """Create one pending job per unique input file.

    Parameters
    ----------
    input_paths : iterable of str or Path
        Input files in the order they should be converted. Repeated paths
        are ignored after their first occurrence
    direction : ConversionDirection
        Conversion used to derive output file names
    output_dir : str, optional
        Directory for outputs; defaults to each input's directory

    Returns
    -------
    list of BatchJob
    """
    jobs = []
    seen = set()
    for input_path in input_paths:
        input_path = str(input_path)
        if input_path in seen:
            continue
        seen.add(input_path)
        jobs.append(
            BatchJob(
                input_path=input_path,
                output_path=generate_output_path(input_path, direction, output_dir),
            )
        )
    return jobs


class JobListParser(BaseService):
    """Service for parsing job list CSV files into BatchJob objects.

    Required CSV columns:
    - input_path: Path to the source file

    Optional CSV columns:
    - output_path: Path of the converted file (generated when empty)
    - job_id: Identifier for the job (``job_NNN`` by default)

    Relative paths are resolved against the directory holding the CSV.
    """

    REQUIRED_COLUMNS = ["input_path"]

    OPTIONAL_COLUMNS = ["output_path", "job_id"]

    def __init__(self):
        """Initialize the JobListParser service."""
        super().__init__()

    def parse_csv(
        self,
        csv_path: str,
        direction: ConversionDirection,
        output_dir: Optional[str] = None,
    ) -> List[BatchJob]:
        """Parse a job list CSV file and create BatchJob objects.

        Parameters
        ----------
        csv_path : str
            Path to the job list CSV file
        direction : ConversionDirection
            Conversion used for generated output paths
        output_dir : str, optional
            Directory for generated output paths

        Returns
        -------
        list of BatchJob
            One pending job per data row

        Raises
        ------
        InvalidJobListError
            If the file is missing, malformed, lacks the ``input_path``
            column, or has invalid rows. Every bad row is listed

        Notes
        -----
        - Empty rows are skipped
        - Rows repeating an earlier input path are skipped with a warning
        """
        self._validate_not_empty(csv_path, "csv_path")
        self.logger.info(f"Parsing job list CSV: {csv_path}")

        csv_path_obj = Path(csv_path)
        if not csv_path_obj.exists():
            raise InvalidJobListError(f"CSV file does not exist: {csv_path}")

        if not csv_path_obj.is_file():
            raise InvalidJobListError(f"Path is not a file: {csv_path}")

        df = self._read_csv(csv_path)

        missing_columns = [
            col for col in self.REQUIRED_COLUMNS if col not in df.columns
        ]
        if missing_columns:
            raise InvalidJobListError(
                f"CSV file missing required columns: {missing_columns}. "
                f"Required columns are: {self.REQUIRED_COLUMNS}"
            )

        df = df.dropna(how="all")

        if len(df) == 0:
            raise InvalidJobListError(f"CSV file contains no data rows: {csv_path}")

        base_dir = csv_path_obj.resolve().parent
        jobs = []
        errors = []
        seen_inputs = set()

        for idx, row in df.iterrows():
            try:
                job = self._parse_row_to_job(row, idx, base_dir, direction, output_dir)
            except ValueError as e:
                error_msg = f"Row {idx + 2}: {e}"  # +2 for header and 0-indexing
                errors.append(error_msg)
                self.logger.warning(f"Failed to parse row {idx + 2}: {e}")
                continue

            if job.input_path in seen_inputs:
                self.logger.warning(
                    f"Row {idx + 2}: duplicate input ignored: {job.input_path}"
                )
                continue
            seen_inputs.add(job.input_path)
            jobs.append(job)

        if errors:
            error_summary = "\n".join(errors)
            raise InvalidJobListError(
                f"Failed to parse {len(errors)} row(s) in {csv_path}:\n{error_summary}"
            )

        self.logger.info(f"Successfully parsed {len(jobs)} jobs from {csv_path}")

        return jobs

    def _read_csv(self, csv_path: str) -> pd.DataFrame:
        try:
            df = pd.read_csv(csv_path, dtype=str, skipinitialspace=True)
        except pd.errors.EmptyDataError:
            raise InvalidJobListError(f"CSV file is empty: {csv_path}")
        except pd.errors.ParserError as e:
            raise InvalidJobListError(
                f"Failed to parse CSV file: {csv_path}. Error: {e}"
            )
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidJobListError(
                f"Error reading CSV file: {csv_path}. Error: {e}"
            )

        df.columns = [str(col).strip() for col in df.columns]
        self.logger.debug(f"CSV columns: {list(df.columns)}")
        return df

    def _parse_row_to_job(
        self,
        row: pd.Series,
        row_index: int,
        base_dir: Path,
        direction: ConversionDirection,
        output_dir: Optional[str],
    ) -> BatchJob:
        input_value = self._get_string_field(row, "input_path", required=True)
        input_path = self._resolve_path(input_value, base_dir)

        output_value = self._get_string_field(row, "output_path")
        if output_value:
            output_path = self._resolve_path(output_value, base_dir)
        else:
            output_path = generate_output_path(input_path, direction, output_dir)

        job_id = self._get_string_field(row, "job_id") or f"job_{row_index + 1:03d}"

        return BatchJob(input_path=input_path, output_path=output_path, job_id=job_id)

    @staticmethod
    def _resolve_path(value: str, base_dir: Path) -> str:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        return str(path)

    @staticmethod
    def _get_string_field(row: pd.Series, field_name: str, required: bool = False) -> Optional[str]:
        """Extract a stripped string field, None when absent or blank.

        Raises
        ------
        ValueError
            If a required field is missing or empty
        """
        if field_name not in row:
            if required:
                raise ValueError(f"Required field '{field_name}' is missing")
            return None

        value = row[field_name]

        if pd.isna(value) or not str(value).strip():
            if required:
                raise ValueError(f"Required field '{field_name}' is empty")
            return None

        return str(value).strip()

    def get_csv_info(self, csv_path: str) -> Dict[str, Any]:
        """Get basic information about a job list CSV without full parsing.

        Returns
        -------
        dict
            Dictionary containing:
            - num_rows: Number of data rows (excluding header)
            - columns: List of column names
            - has_required_columns: Boolean indicating if required columns present
            - missing_columns: List of missing required columns

        Raises
        ------
        InvalidJobListError
            If CSV file cannot be read
        """
        df = self._read_csv(csv_path).dropna(how="all")

        missing_columns = [
            col for col in self.REQUIRED_COLUMNS if col not in df.columns
        ]

        return {
            "num_rows": len(df),
            "columns": list(df.columns),
            "has_required_columns": len(missing_columns) == 0,
            "missing_columns": missing_columns,
        }
