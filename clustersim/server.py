"""
HTTP API server for the cluster simulator.

This module provides a Flask-based REST API that receives job lists and
policy choices and returns simulation results.
"""

import io
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from flask import Flask, Response, jsonify, request

from . import __version__
from .algorithm import calculate_simulation_metrics, run_simulation, sweep_policies
from .errors import SimulationError
from .report import write_report
from .types import (
    DEFAULT_CORES_PER_NODE,
    DEFAULT_MEMORY_PER_NODE,
    DEFAULT_NODE_COUNT,
    Job,
    OrderingStrategy,
    PlacementStrategy,
    SimulationConfig,
    jobs_from_records,
)


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s] %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def _parse_jobs(data: Dict[str, Any]) -> List[Job]:
    records = data.get('jobs', [])
    if not isinstance(records, list):
        raise SimulationError("'jobs' must be a list")
    return jobs_from_records(records)


def create_app(config: Dict[str, Any] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Optional configuration dictionary

    Returns:
        Configured Flask app

    Raises:
        ConfigurationError: If the pool dimensions are invalid
    """
    app = Flask(__name__)

    # Default configuration
    app.config.update({
        'TESTING': False,
        'NODE_COUNT': DEFAULT_NODE_COUNT,
        'CORES_PER_NODE': DEFAULT_CORES_PER_NODE,
        'MEMORY_PER_NODE': DEFAULT_MEMORY_PER_NODE,
    })

    # Apply custom config
    if config:
        app.config.update(config)

    sim_config = SimulationConfig.from_mapping(app.config)

    @app.route('/health', methods=['GET'])
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'service': 'cluster-simulator',
            'version': __version__,
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    @app.route('/policies', methods=['GET'])
    def get_policies():
        """List the available policies and the pool configuration."""
        return jsonify({
            'queue_policies': [s.value for s in OrderingStrategy],
            'allocation_policies': [s.value for s in PlacementStrategy],
            'pool': {
                'node_count': sim_config.node_count,
                'cores_per_node': sim_config.cores_per_node,
                'memory_per_node': sim_config.memory_per_node
            }
        })

    @app.route('/simulate', methods=['POST'])
    def simulate():
        """
        Run one simulation.

        Request body:
        {
            "queue_policy": "fcfs",
            "allocation_policy": "best_fit",
            "jobs": [
                {
                    "arrival_time": 0,
                    "cores_required": 4,
                    "memory_required": 8,
                    "execution_time": 2
                }
            ]
        }

        Response:
        {
            "type": "simulation_result",
            "result": {...},
            "metrics": {...}
        }
        """
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'Empty request body'}), 400
        if not isinstance(data, dict):
            return jsonify({'error': 'Request body must be a JSON object'}), 400

        try:
            jobs = _parse_jobs(data)
            result = run_simulation(
                jobs,
                data.get('queue_policy'),
                data.get('allocation_policy'),
                sim_config
            )
        except SimulationError as e:
            logger.error(f"Rejected simulation request: {e}")
            return jsonify({'error': str(e)}), 400

        metrics = calculate_simulation_metrics(result)
        logger.info(f"Metrics: {metrics}")

        return jsonify({
            'type': 'simulation_result',
            'result': result.to_dict(),
            'metrics': metrics
        }), 200

    @app.route('/sweep', methods=['POST'])
    def sweep():
        """
        Run every requested policy pair over the same jobs.

        Optional body keys ``queue_policies`` and ``allocation_policies``
        narrow the sweep. ``?format=csv`` returns the CSV report instead
        of JSON.
        """
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'Empty request body'}), 400
        if not isinstance(data, dict):
            return jsonify({'error': 'Request body must be a JSON object'}), 400

        try:
            jobs = _parse_jobs(data)
            results = sweep_policies(
                jobs,
                data.get('queue_policies'),
                data.get('allocation_policies'),
                sim_config
            )
        except SimulationError as e:
            logger.error(f"Rejected sweep request: {e}")
            return jsonify({'error': str(e)}), 400

        logger.info(f"Swept {len(results)} policy pairs over {len(jobs)} jobs")

        if request.args.get('format') == 'csv':
            buffer = io.StringIO()
            write_report(results, buffer)
            return Response(buffer.getvalue(), mimetype='text/csv')

        return jsonify({
            'type': 'sweep_result',
            'results': [
                {
                    **result.to_dict(),
                    'metrics': calculate_simulation_metrics(result)
                }
                for result in results
            ]
        }), 200

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


def run_server(host: str = '0.0.0.0', port: int = 8001, debug: bool = False):
    """
    Run the simulator HTTP server.

    Args:
        host: Host to bind to
        port: Port to listen on
        debug: Enable debug mode
    """
    logger.info("=" * 50)
    logger.info("  Cluster Simulator Server (Python)")
    logger.info("=" * 50)
    logger.info("")
    logger.info(f"Starting server on {host}:{port}")
    logger.info("")
    logger.info("Endpoints:")
    logger.info(f"  POST {host}:{port}/simulate - Run one policy pair")
    logger.info(f"  POST {host}:{port}/sweep    - Run all policy pairs")
    logger.info(f"  GET  {host}:{port}/policies - List policies")
    logger.info(f"  GET  {host}:{port}/health   - Health check")
    logger.info("")

    app = create_app()
    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    run_server()
