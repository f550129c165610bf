"""
Queue ordering policies.

Each policy is a sort key over jobs. Sorting is stable, so jobs with
equal keys keep their input (arrival) order.
"""

from typing import Callable, Dict, List, Sequence, Union

from .types import Job, OrderingStrategy


SortKey = Callable[[Job], int]

ORDERING_KEYS: Dict[OrderingStrategy, SortKey] = {
    OrderingStrategy.FCFS: lambda job: job.arrival_time,
    OrderingStrategy.SMALLEST_JOB_FIRST: lambda job: job.value,
    OrderingStrategy.SHORT_DURATION_FIRST: lambda job: job.execution_time,
}


def order_jobs(
    jobs: Sequence[Job],
    strategy: Union[str, OrderingStrategy]
) -> List[Job]:
    """
    Order jobs for placement under the given queue policy.

    - fcfs: ascending arrival time
    - smallest_job_first: ascending value (execution time x cores x memory)
    - short_duration_first: ascending execution time

    Args:
        jobs: Jobs in arrival order
        strategy: Queue policy name or enum member

    Returns:
        New list of jobs; the input is left untouched

    Raises:
        ConfigurationError: If the policy name is unknown
    """
    strategy = OrderingStrategy.from_name(strategy)
    return sorted(jobs, key=ORDERING_KEYS[strategy])
