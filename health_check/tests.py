from unittest.mock import patch

from django.db.utils import OperationalError
from django.test import TestCase


class HealthCheckTests(TestCase):

    def test_healthy(self):
        response = self.client.get('/health/')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['database'], 'connected')
        self.assertIn('model', data)

    @patch('health_check.views.connection')
    def test_database_down(self, mock_connection):
        mock_connection.ensure_connection.side_effect = OperationalError('no db')

        with self.assertLogs('health_check.views', level='ERROR'):
            response = self.client.get('/health/')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['status'], 'unhealthy')

    def test_post_not_allowed(self):
        self.assertEqual(self.client.post('/health/').status_code, 405)
