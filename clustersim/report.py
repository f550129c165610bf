"""
Job input and result report helpers.

Jobs are read from CSV with the columns
``arrival_time,cores_required,memory_required,execution_time`` (an
optional ``job_id`` column overrides the row-order id). Reports are one
row per policy pair with usage percentages to two decimals.
"""

import csv
import logging
from typing import Iterable, List, TextIO

from .errors import InvalidJobDescriptor
from .types import Job, SimulationResult, jobs_from_records

logger = logging.getLogger(__name__)

JOB_FIELDS = ("arrival_time", "cores_required", "memory_required", "execution_time")

REPORT_HEADER = ("QueuePolicy", "AllocationPolicy", "CPUUsage(%)", "MemoryUsage(%)")


def parse_jobs_csv(stream: TextIO) -> List[Job]:
    """
    Read jobs from a CSV stream with a header row.

    Raises:
        InvalidJobDescriptor: If a row is missing a column or holds a non-integer
    """
    reader = csv.DictReader(stream)
    missing = [name for name in JOB_FIELDS if name not in (reader.fieldnames or [])]
    if missing:
        raise InvalidJobDescriptor(f"Job CSV is missing columns: {', '.join(missing)}")

    records = []
    for row_number, row in enumerate(reader, start=1):
        record = {}
        for name in ("job_id",) + JOB_FIELDS:
            raw = row.get(name)
            if raw is None or raw.strip() == "":
                if name == "job_id":
                    continue
                raise InvalidJobDescriptor(
                    f"Row {row_number} has no {name}", job_id=row_number, field=name
                )
            try:
                record[name] = int(raw)
            except ValueError:
                raise InvalidJobDescriptor(
                    f"Row {row_number} has non-integer {name} {raw!r}",
                    job_id=row_number,
                    field=name,
                ) from None
        record.setdefault("job_id", row_number)
        records.append(record)

    jobs = jobs_from_records(records)
    logger.info(f"Read {len(jobs)} jobs")
    return jobs


def _result_fields(result: SimulationResult) -> List[str]:
    return [
        result.queue_policy,
        result.allocation_policy,
        f"{result.avg_cpu_usage_pct:.2f}",
        f"{result.avg_memory_usage_pct:.2f}",
    ]


def format_result_row(result: SimulationResult) -> str:
    """Render a result as ``queue,allocation,cpu_pct,mem_pct``."""
    return ",".join(_result_fields(result))


def write_report(results: Iterable[SimulationResult], stream: TextIO) -> int:
    """
    Write a header and one row per result.

    Returns:
        Number of result rows written
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(REPORT_HEADER)
    count = 0
    for result in results:
        writer.writerow(_result_fields(result))
        count += 1
    return count
