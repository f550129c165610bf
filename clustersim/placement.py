"""
Node placement policies.

Nodes are always scanned in ascending node_id order. Best fit and worst
fit only move off the first eligible node when a later one is strictly
smaller (or larger) on both cores and memory; a node that wins on one
dimension alone never replaces the incumbent.
"""

from typing import Callable, Dict, Iterable, Optional, Union

from .types import Job, PlacementStrategy, ResourcePool, WorkerNode


Selector = Callable[[Iterable[WorkerNode], Job], Optional[WorkerNode]]


def first_fit(nodes: Iterable[WorkerNode], job: Job) -> Optional[WorkerNode]:
    """Return the first node the job fits on."""
    for node in nodes:
        if node.fits(job):
            return node
    return None


def best_fit(nodes: Iterable[WorkerNode], job: Job) -> Optional[WorkerNode]:
    """Return the eligible node with the least residual capacity."""
    selected = None
    for node in nodes:
        if not node.fits(job):
            continue
        if selected is None or (node.available_cores < selected.available_cores and
                                node.available_memory < selected.available_memory):
            selected = node
    return selected


def worst_fit(nodes: Iterable[WorkerNode], job: Job) -> Optional[WorkerNode]:
    """Return the eligible node with the most residual capacity."""
    selected = None
    for node in nodes:
        if not node.fits(job):
            continue
        if selected is None or (node.available_cores > selected.available_cores and
                                node.available_memory > selected.available_memory):
            selected = node
    return selected


SELECTORS: Dict[PlacementStrategy, Selector] = {
    PlacementStrategy.FIRST_FIT: first_fit,
    PlacementStrategy.BEST_FIT: best_fit,
    PlacementStrategy.WORST_FIT: worst_fit,
}


def select_node(
    pool: ResourcePool,
    job: Job,
    strategy: Union[str, PlacementStrategy]
) -> Optional[WorkerNode]:
    """
    Pick a node for a job without touching the pool.

    Args:
        pool: Current pool state
        job: Job to place
        strategy: Allocation policy name or enum member

    Returns:
        The selected node, or None if the job fits nowhere

    Raises:
        ConfigurationError: If the policy name is unknown
    """
    strategy = PlacementStrategy.from_name(strategy)
    return SELECTORS[strategy](pool, job)
