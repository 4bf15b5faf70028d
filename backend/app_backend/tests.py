from unittest.mock import patch

import redis
from django.test import TestCase
from rest_framework.test import APIClient


class HealthCheckTests(TestCase):
	@patch('app_backend.views.redis.Redis.from_url')
	def test_healthy(self, mock_from_url):
		response = APIClient().get('/health/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['services']['database'], 'healthy')
		self.assertEqual(response.data['services']['redis'], 'healthy')
		mock_from_url.return_value.ping.assert_called_once()

	@patch('app_backend.views.redis.Redis.from_url')
	def test_redis_down(self, mock_from_url):
		mock_from_url.return_value.ping.side_effect = redis.ConnectionError('refused')

		response = APIClient().get('/health/')

		self.assertEqual(response.status_code, 503)
		self.assertEqual(response.data['status'], 'unhealthy')
		self.assertTrue(response.data['services']['redis'].startswith('unhealthy'))
