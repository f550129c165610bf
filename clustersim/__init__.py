"""
Cluster Simulator Package

A deterministic batch-job placement simulator that orders jobs with a
queue policy, packs them onto a fixed pool of worker nodes with an
allocation policy, and reports resource utilization.
"""

__version__ = '0.1.0'

from .errors import (
    SimulationError,
    ConfigurationError,
    InvalidJobDescriptor
)

from .types import (
    Job,
    WorkerNode,
    ResourcePool,
    SimulationConfig,
    Placement,
    SimulationResult,
    OrderingStrategy,
    PlacementStrategy,
    jobs_from_records
)

from .ordering import order_jobs
from .placement import select_node, first_fit, best_fit, worst_fit

from .algorithm import (
    run_simulation,
    sweep_policies,
    calculate_simulation_metrics
)

from .report import parse_jobs_csv, format_result_row, write_report

from .server import create_app, run_server

__all__ = [
    'SimulationError',
    'ConfigurationError',
    'InvalidJobDescriptor',
    'Job',
    'WorkerNode',
    'ResourcePool',
    'SimulationConfig',
    'Placement',
    'SimulationResult',
    'OrderingStrategy',
    'PlacementStrategy',
    'jobs_from_records',
    'order_jobs',
    'select_node',
    'first_fit',
    'best_fit',
    'worst_fit',
    'run_simulation',
    'sweep_policies',
    'calculate_simulation_metrics',
    'parse_jobs_csv',
    'format_result_row',
    'write_report',
    'create_app',
    'run_server',
]
