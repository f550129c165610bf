"""
Data models for the cluster simulator.

This module defines the core data structures used in a simulation run:
- Jobs offered to the cluster
- Worker nodes and the pool that owns them
- The configuration a pool is built from
- The result a run produces
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError, InvalidJobDescriptor, SimulationError


DEFAULT_NODE_COUNT = 128
DEFAULT_CORES_PER_NODE = 24
DEFAULT_MEMORY_PER_NODE = 64


class OrderingStrategy(Enum):
    """Order in which queued jobs are offered to placement."""
    FCFS = "fcfs"
    SMALLEST_JOB_FIRST = "smallest_job_first"
    SHORT_DURATION_FIRST = "short_duration_first"

    @classmethod
    def from_name(cls, name: Union[str, "OrderingStrategy"]) -> "OrderingStrategy":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            known = ", ".join(s.value for s in cls)
            raise ConfigurationError(
                f"Unknown queue policy {name!r}, expected one of: {known}",
                field="queue_policy",
                value=name,
            ) from None


class PlacementStrategy(Enum):
    """Rule for choosing a node among those a job fits on."""
    FIRST_FIT = "first_fit"
    BEST_FIT = "best_fit"
    WORST_FIT = "worst_fit"

    @classmethod
    def from_name(cls, name: Union[str, "PlacementStrategy"]) -> "PlacementStrategy":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            known = ", ".join(s.value for s in cls)
            raise ConfigurationError(
                f"Unknown allocation policy {name!r}, expected one of: {known}",
                field="allocation_policy",
                value=name,
            ) from None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Job:
    """
    A batch job offered to the cluster.

    Attributes:
        job_id: Unique identifier, 1-based in arrival order
        arrival_time: Hour the job was submitted (>= 0)
        cores_required: Cores the job needs on a single node (> 0)
        memory_required: Memory in GB the job needs on a single node (> 0)
        execution_time: Run time in hours (> 0)
    """
    job_id: int
    arrival_time: int
    cores_required: int
    memory_required: int
    execution_time: int

    def __post_init__(self):
        """Validate job fields."""
        if not _is_int(self.job_id) or self.job_id < 1:
            raise InvalidJobDescriptor(
                f"Job ID must be a positive integer, got {self.job_id!r}",
                job_id=self.job_id,
                field="job_id",
            )
        for name in ("arrival_time", "cores_required", "memory_required", "execution_time"):
            if not _is_int(getattr(self, name)):
                raise InvalidJobDescriptor(
                    f"{name} must be an integer, got {getattr(self, name)!r}",
                    job_id=self.job_id,
                    field=name,
                )
        if self.arrival_time < 0:
            raise InvalidJobDescriptor(
                f"Arrival time cannot be negative, got {self.arrival_time}",
                job_id=self.job_id,
                field="arrival_time",
            )
        for name in ("cores_required", "memory_required", "execution_time"):
            if getattr(self, name) <= 0:
                raise InvalidJobDescriptor(
                    f"{name} must be positive, got {getattr(self, name)}",
                    job_id=self.job_id,
                    field=name,
                )

    @property
    def value(self) -> int:
        """Resource-hours footprint, used only to order jobs."""
        return self.execution_time * self.cores_required * self.memory_required


def jobs_from_records(records: Iterable[Mapping[str, Any]]) -> List[Job]:
    """
    Build jobs from an ordered sequence of mappings.

    Records without a ``job_id`` get their 1-based position.

    Raises:
        InvalidJobDescriptor: If a record is missing a field, holds a bad
            value or repeats another record's job_id
    """
    jobs = []
    seen_ids = set()
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise InvalidJobDescriptor(
                f"Job record must be a mapping, got {type(record).__name__}",
                job_id=index + 1,
            )
        job_id = record.get("job_id", index + 1)
        try:
            jobs.append(Job(
                job_id=job_id,
                arrival_time=record["arrival_time"],
                cores_required=record["cores_required"],
                memory_required=record["memory_required"],
                execution_time=record["execution_time"],
            ))
        except KeyError as e:
            raise InvalidJobDescriptor(
                f"Missing job field {e.args[0]!r}",
                job_id=job_id,
                field=e.args[0],
            ) from None
        if job_id in seen_ids:
            raise InvalidJobDescriptor(
                f"Duplicate job ID {job_id}",
                job_id=job_id,
                field="job_id",
            )
        seen_ids.add(job_id)
    return jobs


@dataclass
class WorkerNode:
    """
    A worker node with fixed capacity and mutable residual capacity.

    Attributes:
        node_id: 0-based position in the pool
        total_cores: Core capacity
        total_memory: Memory capacity in GB
        available_cores: Cores not yet handed to a job
        available_memory: Memory not yet handed to a job
    """
    node_id: int
    total_cores: int
    total_memory: int
    available_cores: Optional[int] = None
    available_memory: Optional[int] = None

    def __post_init__(self):
        if self.available_cores is None:
            self.available_cores = self.total_cores
        if self.available_memory is None:
            self.available_memory = self.total_memory
        if not 0 <= self.available_cores <= self.total_cores:
            raise SimulationError(
                f"Node {self.node_id} available cores out of range",
                {"available_cores": self.available_cores, "total_cores": self.total_cores},
            )
        if not 0 <= self.available_memory <= self.total_memory:
            raise SimulationError(
                f"Node {self.node_id} available memory out of range",
                {"available_memory": self.available_memory, "total_memory": self.total_memory},
            )

    @property
    def used_cores(self) -> int:
        return self.total_cores - self.available_cores

    @property
    def used_memory(self) -> int:
        return self.total_memory - self.available_memory

    def fits(self, job: Job) -> bool:
        return (self.available_cores >= job.cores_required and
                self.available_memory >= job.memory_required)

    def allocate(self, job: Job) -> None:
        """Take the job's cores and memory off this node."""
        if not self.fits(job):
            raise SimulationError(
                f"Job {job.job_id} does not fit on node {self.node_id}",
                {"available_cores": self.available_cores,
                 "available_memory": self.available_memory},
            )
        self.available_cores -= job.cores_required
        self.available_memory -= job.memory_required


@dataclass(frozen=True)
class SimulationConfig:
    """
    Pool dimensions for a simulation run.

    Attributes:
        node_count: Number of worker nodes in the pool
        cores_per_node: Cores on each node
        memory_per_node: Memory in GB on each node
    """
    node_count: int = DEFAULT_NODE_COUNT
    cores_per_node: int = DEFAULT_CORES_PER_NODE
    memory_per_node: int = DEFAULT_MEMORY_PER_NODE

    def __post_init__(self):
        for name in ("node_count", "cores_per_node", "memory_per_node"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a positive integer, got {value!r}",
                    field=name,
                    value=value,
                )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SimulationConfig":
        """Read ``NODE_COUNT``, ``CORES_PER_NODE`` and ``MEMORY_PER_NODE``."""
        return cls(
            node_count=mapping.get("NODE_COUNT", DEFAULT_NODE_COUNT),
            cores_per_node=mapping.get("CORES_PER_NODE", DEFAULT_CORES_PER_NODE),
            memory_per_node=mapping.get("MEMORY_PER_NODE", DEFAULT_MEMORY_PER_NODE),
        )

    @property
    def total_cores(self) -> int:
        return self.node_count * self.cores_per_node

    @property
    def total_memory(self) -> int:
        return self.node_count * self.memory_per_node


@dataclass
class ResourcePool:
    """
    Ordered collection of worker nodes owned by a single run.

    Attributes:
        nodes: Nodes in ascending node_id order
    """
    nodes: List[WorkerNode] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "ResourcePool":
        """Build a pool of identical nodes at full capacity."""
        return cls(nodes=[
            WorkerNode(
                node_id=i,
                total_cores=config.cores_per_node,
                total_memory=config.memory_per_node,
            )
            for i in range(config.node_count)
        ])

    def __iter__(self) -> Iterator[WorkerNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def total_cores(self) -> int:
        return sum(node.total_cores for node in self.nodes)

    @property
    def total_memory(self) -> int:
        return sum(node.total_memory for node in self.nodes)

    def residual_capacity(self) -> List[Tuple[int, int, int]]:
        """(node_id, available_cores, available_memory) for every node."""
        return [(n.node_id, n.available_cores, n.available_memory) for n in self.nodes]


@dataclass(frozen=True)
class Placement:
    """
    Placement of one job on one node.

    Attributes:
        job_id: ID of the placed job
        node_id: ID of the node hosting it
        cores: Cores taken from the node
        memory: Memory taken from the node
    """
    job_id: int
    node_id: int
    cores: int
    memory: int


@dataclass(frozen=True)
class SimulationResult:
    """
    Outcome of one simulation run.

    Attributes:
        queue_policy: Ordering strategy name
        allocation_policy: Placement strategy name
        total_cpu_usage: Cores consumed by placed jobs
        total_memory_usage: Memory consumed by placed jobs
        jobs_placed: Number of jobs that found a node
        jobs_total: Number of jobs offered
        node_count: Nodes in the pool
        cores_per_node: Cores on each node
        memory_per_node: Memory on each node
        placements: Placements in the order they were made
        residual_capacity: Final (node_id, cores, memory) per node
    """
    queue_policy: str
    allocation_policy: str
    total_cpu_usage: int
    total_memory_usage: int
    jobs_placed: int
    jobs_total: int
    node_count: int
    cores_per_node: int
    memory_per_node: int
    placements: Tuple[Placement, ...] = ()
    residual_capacity: Tuple[Tuple[int, int, int], ...] = ()

    @property
    def jobs_dropped(self) -> int:
        return self.jobs_total - self.jobs_placed

    @property
    def avg_cpu_usage_pct(self) -> float:
        return self.total_cpu_usage / (self.node_count * self.cores_per_node) * 100

    @property
    def avg_memory_usage_pct(self) -> float:
        return self.total_memory_usage / (self.node_count * self.memory_per_node) * 100

    def node_for(self, job_id: int) -> Optional[int]:
        """Node a job was placed on, or None if it was dropped."""
        for placement in self.placements:
            if placement.job_id == job_id:
                return placement.node_id
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'queue_policy': self.queue_policy,
            'allocation_policy': self.allocation_policy,
            'total_cpu_usage': self.total_cpu_usage,
            'total_memory_usage': self.total_memory_usage,
            'jobs_placed': self.jobs_placed,
            'jobs_dropped': self.jobs_dropped,
            'jobs_total': self.jobs_total,
            'avg_cpu_usage_pct': self.avg_cpu_usage_pct,
            'avg_memory_usage_pct': self.avg_memory_usage_pct,
            'placements': [
                {
                    'job_id': p.job_id,
                    'node_id': p.node_id,
                    'cores': p.cores,
                    'memory': p.memory
                }
                for p in self.placements
            ],
            'residual_capacity': [
                {'node_id': node_id, 'available_cores': cores, 'available_memory': memory}
                for node_id, cores, memory in self.residual_capacity
            ]
        }
