"""
Unit tests for job input parsing and CSV reports.

Run with: pytest tests/test_report.py
"""

import io

import pytest

from clustersim.algorithm import run_simulation, sweep_policies
from clustersim.errors import InvalidJobDescriptor
from clustersim.report import format_result_row, parse_jobs_csv, write_report
from clustersim.types import Job, SimulationConfig


class TestParseJobs:
    """Test reading jobs from CSV."""

    def test_basic(self):
        """Rows become jobs numbered by position."""
        stream = io.StringIO(
            "arrival_time,cores_required,memory_required,execution_time\n"
            "0,4,4,2\n"
            "3,8,16,1\n"
        )

        jobs = parse_jobs_csv(stream)

        assert jobs == [
            Job(1, arrival_time=0, cores_required=4, memory_required=4, execution_time=2),
            Job(2, arrival_time=3, cores_required=8, memory_required=16, execution_time=1),
        ]

    def test_explicit_job_id_column(self):
        """A job_id column overrides the row number."""
        stream = io.StringIO(
            "job_id,arrival_time,cores_required,memory_required,execution_time\n"
            "17,0,1,1,1\n"
        )

        assert parse_jobs_csv(stream)[0].job_id == 17

    def test_missing_column(self):
        """The header must name every job field."""
        stream = io.StringIO("arrival_time,cores_required,memory_required\n0,1,1\n")

        with pytest.raises(InvalidJobDescriptor) as exc_info:
            parse_jobs_csv(stream)

        assert "execution_time" in str(exc_info.value)

    def test_non_integer_cell(self):
        """Cells must be integers."""
        stream = io.StringIO(
            "arrival_time,cores_required,memory_required,execution_time\n"
            "0,four,4,2\n"
        )

        with pytest.raises(InvalidJobDescriptor) as exc_info:
            parse_jobs_csv(stream)

        assert exc_info.value.field == "cores_required"

    def test_empty_cell(self):
        """Required cells cannot be blank."""
        stream = io.StringIO(
            "arrival_time,cores_required,memory_required,execution_time\n"
            "0,4,,2\n"
        )

        with pytest.raises(InvalidJobDescriptor):
            parse_jobs_csv(stream)

    def test_zero_cores_rejected(self):
        """Range checks still apply to parsed rows."""
        stream = io.StringIO(
            "arrival_time,cores_required,memory_required,execution_time\n"
            "0,0,4,2\n"
        )

        with pytest.raises(InvalidJobDescriptor):
            parse_jobs_csv(stream)


class TestReport:
    """Test CSV result rendering."""

    def test_format_row(self):
        """Percentages are rendered to two decimals."""
        jobs = [Job(1, arrival_time=0, cores_required=4, memory_required=4, execution_time=2)]

        result = run_simulation(jobs, "fcfs", "first_fit")

        assert format_result_row(result) == "fcfs,first_fit,0.13,0.05"

    def test_write_report(self):
        """The report has a header and one row per result."""
        jobs = [Job(1, arrival_time=0, cores_required=12, memory_required=32, execution_time=2)]
        results = sweep_policies(jobs, ["fcfs"], ["first_fit", "best_fit"],
                                 SimulationConfig(node_count=1))
        stream = io.StringIO()

        count = write_report(results, stream)

        assert count == 2
        assert stream.getvalue().splitlines() == [
            "QueuePolicy,AllocationPolicy,CPUUsage(%),MemoryUsage(%)",
            "fcfs,first_fit,50.00,50.00",
            "fcfs,best_fit,50.00,50.00",
        ]

    def test_rows_match_format_row(self):
        """Written rows match format_result_row."""
        jobs = [Job(1, arrival_time=0, cores_required=3, memory_required=7, execution_time=2)]
        results = sweep_policies(jobs)
        stream = io.StringIO()

        write_report(results, stream)

        assert stream.getvalue().splitlines()[1:] == [format_result_row(r) for r in results]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
