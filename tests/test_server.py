"""
Tests for the simulator HTTP API.

Run with: pytest tests/test_server.py
"""

import pytest

from clustersim.errors import ConfigurationError
from clustersim.server import create_app


@pytest.fixture
def client():
    app = create_app({'TESTING': True, 'NODE_COUNT': 2})
    return app.test_client()


def job_payload(**overrides):
    job = {
        'arrival_time': 0,
        'cores_required': 4,
        'memory_required': 4,
        'execution_time': 2
    }
    job.update(overrides)
    return job


class TestHealth:
    """Test status endpoints."""

    def test_health(self, client):
        """Health check reports the service."""
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'
        assert response.get_json()['service'] == 'cluster-simulator'

    def test_policies(self, client):
        """Policies and pool configuration are listed."""
        data = client.get('/policies').get_json()

        assert data['queue_policies'] == ['fcfs', 'smallest_job_first', 'short_duration_first']
        assert data['allocation_policies'] == ['first_fit', 'best_fit', 'worst_fit']
        assert data['pool'] == {'node_count': 2, 'cores_per_node': 24, 'memory_per_node': 64}

    def test_not_found(self, client):
        """Unknown routes return a JSON 404."""
        response = client.get('/nope')

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Not found'}

    def test_invalid_pool_config(self):
        """A bad pool size fails app creation."""
        with pytest.raises(ConfigurationError):
            create_app({'NODE_COUNT': 0})


class TestSimulate:
    """Test the single-run endpoint."""

    def test_simulate(self, client):
        """A run returns its result and metrics."""
        response = client.post('/simulate', json={
            'queue_policy': 'fcfs',
            'allocation_policy': 'best_fit',
            'jobs': [job_payload(), job_payload(cores_required=100)]
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['type'] == 'simulation_result'
        assert data['result']['jobs_placed'] == 1
        assert data['result']['jobs_dropped'] == 1
        assert data['result']['placements'] == [
            {'job_id': 1, 'node_id': 0, 'cores': 4, 'memory': 4}
        ]
        assert data['result']['residual_capacity'][0] == {
            'node_id': 0, 'available_cores': 20, 'available_memory': 60
        }
        assert data['metrics']['nodes_used'] == 1

    def test_empty_body(self, client):
        """An empty body is rejected."""
        response = client.post('/simulate', json={})

        assert response.status_code == 400

    def test_non_object_body(self, client):
        """The body must be a JSON object."""
        response = client.post('/simulate', json=[job_payload()])

        assert response.status_code == 400

    def test_unknown_policy(self, client):
        """Unknown policies are a 400, not an empty result."""
        response = client.post('/simulate', json={
            'queue_policy': 'lifo',
            'allocation_policy': 'first_fit',
            'jobs': [job_payload()]
        })

        assert response.status_code == 400
        assert 'lifo' in response.get_json()['error']

    def test_missing_policy(self, client):
        """Both policies are required."""
        response = client.post('/simulate', json={
            'queue_policy': 'fcfs',
            'jobs': [job_payload()]
        })

        assert response.status_code == 400

    def test_invalid_job(self, client):
        """Invalid job descriptors are a 400."""
        response = client.post('/simulate', json={
            'queue_policy': 'fcfs',
            'allocation_policy': 'first_fit',
            'jobs': [job_payload(memory_required=0)]
        })

        assert response.status_code == 400
        assert 'memory_required' in response.get_json()['error']

    def test_jobs_not_a_list(self, client):
        """Jobs must be a list."""
        response = client.post('/simulate', json={
            'queue_policy': 'fcfs',
            'allocation_policy': 'first_fit',
            'jobs': job_payload()
        })

        assert response.status_code == 400


class TestSweep:
    """Test the sweep endpoint."""

    def test_sweep_json(self, client):
        """A sweep returns every policy pair."""
        response = client.post('/sweep', json={'jobs': [job_payload()]})

        assert response.status_code == 200
        results = response.get_json()['results']
        assert len(results) == 9
        assert all(r['jobs_placed'] == 1 for r in results)
        assert all('metrics' in r for r in results)

    def test_sweep_subset(self, client):
        """Policy lists narrow the sweep."""
        response = client.post('/sweep', json={
            'jobs': [job_payload()],
            'queue_policies': ['smallest_job_first'],
            'allocation_policies': ['worst_fit']
        })

        results = response.get_json()['results']
        assert [(r['queue_policy'], r['allocation_policy']) for r in results] == [
            ('smallest_job_first', 'worst_fit')
        ]

    def test_sweep_csv(self, client):
        """format=csv returns the CSV report."""
        response = client.post('/sweep?format=csv', json={
            'jobs': [job_payload(cores_required=12, memory_required=32)],
            'queue_policies': ['fcfs'],
            'allocation_policies': ['first_fit']
        })

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert response.get_data(as_text=True).splitlines() == [
            'QueuePolicy,AllocationPolicy,CPUUsage(%),MemoryUsage(%)',
            'fcfs,first_fit,25.00,25.00',
        ]

    def test_sweep_unknown_policy(self, client):
        """Unknown policies in a sweep are a 400."""
        response = client.post('/sweep', json={
            'jobs': [job_payload()],
            'allocation_policies': ['next_fit']
        })

        assert response.status_code == 400

    @pytest.mark.parametrize("selection", [5, [], {"fcfs": 1}])
    def test_sweep_bad_selection(self, client, selection):
        """Malformed policy selections are a 400."""
        response = client.post('/sweep', json={
            'jobs': [job_payload()],
            'queue_policies': selection
        })

        assert response.status_code == 400
        assert 'queue_policies' in response.get_json()['error']

    def test_sweep_single_name(self, client):
        """A single policy name narrows the sweep to that policy."""
        response = client.post('/sweep', json={
            'jobs': [job_payload()],
            'queue_policies': 'fcfs'
        })

        assert response.status_code == 200
        results = response.get_json()['results']
        assert {r['queue_policy'] for r in results} == {'fcfs'}
        assert len(results) == 3

    def test_duplicate_job_ids(self, client):
        """Repeated job ids are a 400."""
        response = client.post('/sweep', json={
            'jobs': [job_payload(job_id=3), job_payload(job_id=3)]
        })

        assert response.status_code == 400
        assert 'Duplicate job ID 3' in response.get_json()['error']


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
