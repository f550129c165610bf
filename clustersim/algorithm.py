"""
Core simulation algorithm.

This module drains a job list through a queue policy and an allocation
policy against a private pool of worker nodes, and totals what the
placed jobs consumed.

A run is a single ordered pass: jobs never leave a node once placed, and
a job that fits nowhere is dropped without being retried.
"""

import logging
from itertools import product
from typing import Iterable, List, Optional, Sequence, Type, Union

from .errors import ConfigurationError, InvalidJobDescriptor
from .ordering import order_jobs
from .placement import select_node
from .types import (
    Job,
    OrderingStrategy,
    Placement,
    PlacementStrategy,
    ResourcePool,
    SimulationConfig,
    SimulationResult,
)

logger = logging.getLogger(__name__)


def _check_unique_ids(jobs: Sequence[Job]) -> None:
    seen = set()
    for job in jobs:
        if job.job_id in seen:
            raise InvalidJobDescriptor(
                f"Duplicate job ID {job.job_id}",
                job_id=job.job_id,
                field="job_id",
            )
        seen.add(job.job_id)


def _resolve_policies(values, strategy_type: Type, field: str) -> list:
    """
    Turn a sweep's policy selection into enum members.

    None selects every policy; a single name is treated as a one-item list.
    """
    if values is None:
        return list(strategy_type)
    if isinstance(values, (str, strategy_type)):
        values = [values]
    if not isinstance(values, (list, tuple)):
        raise ConfigurationError(
            f"{field} must be a list of policy names, got {type(values).__name__}",
            field=field,
            value=values,
        )
    if not values:
        raise ConfigurationError(f"{field} cannot be empty", field=field, value=values)
    return [strategy_type.from_name(value) for value in values]


def run_simulation(
    jobs: Sequence[Job],
    queue_policy: Union[str, OrderingStrategy],
    allocation_policy: Union[str, PlacementStrategy],
    config: Optional[SimulationConfig] = None
) -> SimulationResult:
    """
    Run one simulation for a queue/allocation policy pair.

    Algorithm:
    1. Resolve both policy names, failing on an unknown one
    2. Build a fresh pool at full capacity
    3. Order the jobs by the queue policy
    4. Offer each job to the allocation policy; on success take its
       resources off the chosen node, otherwise drop it

    Args:
        jobs: Jobs in arrival order
        queue_policy: Ordering strategy name
        allocation_policy: Placement strategy name
        config: Pool dimensions (defaults when omitted)

    Returns:
        The run's SimulationResult

    Raises:
        ConfigurationError: If either policy name is unknown
        InvalidJobDescriptor: If two jobs share a job_id
    """
    ordering = OrderingStrategy.from_name(queue_policy)
    placement = PlacementStrategy.from_name(allocation_policy)
    config = config or SimulationConfig()
    _check_unique_ids(jobs)

    pool = ResourcePool.from_config(config)
    total_cpu = 0
    total_memory = 0
    placements = []

    for job in order_jobs(jobs, ordering):
        node = select_node(pool, job, placement)
        if node is None:
            logger.debug(
                f"Dropped job {job.job_id}: no node with {job.cores_required} cores "
                f"and {job.memory_required} GB free"
            )
            continue

        node.allocate(job)
        total_cpu += job.cores_required
        total_memory += job.memory_required
        placements.append(Placement(
            job_id=job.job_id,
            node_id=node.node_id,
            cores=job.cores_required,
            memory=job.memory_required
        ))
        logger.debug(f"Placed job {job.job_id} on node {node.node_id}")

    result = SimulationResult(
        queue_policy=ordering.value,
        allocation_policy=placement.value,
        total_cpu_usage=total_cpu,
        total_memory_usage=total_memory,
        jobs_placed=len(placements),
        jobs_total=len(jobs),
        node_count=config.node_count,
        cores_per_node=config.cores_per_node,
        memory_per_node=config.memory_per_node,
        placements=tuple(placements),
        residual_capacity=tuple(pool.residual_capacity())
    )

    logger.info(
        f"{result.queue_policy}/{result.allocation_policy}: placed "
        f"{result.jobs_placed}/{result.jobs_total} jobs, "
        f"CPU {result.avg_cpu_usage_pct:.2f}%, memory {result.avg_memory_usage_pct:.2f}%"
    )
    return result


def sweep_policies(
    jobs: Sequence[Job],
    queue_policies: Optional[Iterable[Union[str, OrderingStrategy]]] = None,
    allocation_policies: Optional[Iterable[Union[str, PlacementStrategy]]] = None,
    config: Optional[SimulationConfig] = None
) -> List[SimulationResult]:
    """
    Run every queue/allocation policy combination over the same jobs.

    Each run gets its own pool. Results come back queue-policy major, in
    the order the policies were given (enum order by default).

    Args:
        jobs: Jobs in arrival order
        queue_policies: Queue policy names; None runs all of them
        allocation_policies: Allocation policy names; None runs all of them
        config: Pool dimensions (defaults when omitted)

    Raises:
        ConfigurationError: If a policy name is unknown, or a selection is
            empty or not a list of names
    """
    queues = _resolve_policies(queue_policies, OrderingStrategy, "queue_policies")
    allocations = _resolve_policies(
        allocation_policies, PlacementStrategy, "allocation_policies"
    )

    return [
        run_simulation(jobs, queue, allocation, config)
        for queue, allocation in product(queues, allocations)
    ]


def calculate_simulation_metrics(result: SimulationResult) -> dict:
    """
    Summarize a simulation result.

    Args:
        result: Result of a run

    Returns:
        Dictionary of placement and utilization metrics
    """
    nodes_used = sum(
        1 for _, cores, memory in result.residual_capacity
        if cores < result.cores_per_node or memory < result.memory_per_node
    )
    nodes_full = sum(
        1 for _, cores, memory in result.residual_capacity
        if cores == 0 or memory == 0
    )

    return {
        "jobs_placed": result.jobs_placed,
        "jobs_dropped": result.jobs_dropped,
        "placement_rate": (
            result.jobs_placed / result.jobs_total
            if result.jobs_total else 0
        ),
        "cpu_usage_pct": round(result.avg_cpu_usage_pct, 2),
        "memory_usage_pct": round(result.avg_memory_usage_pct, 2),
        "nodes_used": nodes_used,
        "nodes_full": nodes_full
    }
