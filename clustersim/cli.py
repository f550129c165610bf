"""
Cluster Simulator CLI.

Usage:
    clustersim run JOBS_CSV      Run one policy pair (or --sweep all pairs) and write a CSV report
    clustersim serve             Start the HTTP API server
"""

from pathlib import Path

import typer

from .algorithm import run_simulation, sweep_policies
from .errors import SimulationError
from .report import format_result_row, parse_jobs_csv, write_report
from .server import run_server
from .types import (
    DEFAULT_CORES_PER_NODE,
    DEFAULT_MEMORY_PER_NODE,
    DEFAULT_NODE_COUNT,
    OrderingStrategy,
    PlacementStrategy,
    SimulationConfig,
)

cli = typer.Typer(
    name="clustersim",
    help="Batch-job placement simulator: queue policies, bin-packing policies, utilization reports.",
    no_args_is_help=True,
)

QUEUE_HELP = "Queue policy: " + ", ".join(s.value for s in OrderingStrategy)
ALLOCATION_HELP = "Allocation policy: " + ", ".join(s.value for s in PlacementStrategy)


@cli.command()
def run(
    jobs_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True,
        help="CSV with arrival_time,cores_required,memory_required,execution_time"
    ),
    queue_policy: str = typer.Option("fcfs", "--queue-policy", "-q", help=QUEUE_HELP),
    allocation_policy: str = typer.Option(
        "first_fit", "--allocation-policy", "-a", help=ALLOCATION_HELP
    ),
    sweep: bool = typer.Option(False, "--sweep", help="Run every queue/allocation pair"),
    output: Path = typer.Option(Path("output.csv"), "--output", "-o", help="Report file"),
    nodes: int = typer.Option(DEFAULT_NODE_COUNT, "--nodes", help="Worker nodes in the pool"),
    cores: int = typer.Option(DEFAULT_CORES_PER_NODE, "--cores", help="Cores per node"),
    memory: int = typer.Option(DEFAULT_MEMORY_PER_NODE, "--memory", help="Memory (GB) per node"),
):
    """Simulate the jobs in JOBS_FILE and write a utilization report."""
    try:
        config = SimulationConfig(node_count=nodes, cores_per_node=cores, memory_per_node=memory)
        with open(jobs_file, newline="") as f:
            jobs = parse_jobs_csv(f)
        if sweep:
            results = sweep_policies(jobs, config=config)
        else:
            results = [run_simulation(jobs, queue_policy, allocation_policy, config)]
    except SimulationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    with open(output, "w", newline="") as f:
        write_report(results, f)

    for result in results:
        typer.echo(format_result_row(result))
    typer.echo(f"Simulation complete. Results saved to {output}")


@cli.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Host to bind to"),
    port: int = typer.Option(8001, "--port", help="Port to listen on"),
    debug: bool = typer.Option(False, "--debug", help="Enable Flask debug mode"),
):
    """Start the HTTP API server."""
    run_server(host=host, port=port, debug=debug)
