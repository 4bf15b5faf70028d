from types import SimpleNamespace
from unittest.mock import patch

from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase, TransactionTestCase
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from drivers.models import DriverProfile
from . import notifications
from .consumers.ride_feed import RideFeedConsumer
from .middleware import JWTOrCookieAuthMiddleware
from .routing import websocket_urlpatterns


class RideFeedConsumerTests(SimpleTestCase):
	async def connect(self, user):
		communicator = WebsocketCommunicator(RideFeedConsumer.as_asgi(), '/ws/rides/')
		communicator.scope['user'] = user
		connected, _ = await communicator.connect()
		return communicator, connected

	async def test_anonymous_connection_is_closed(self):
		communicator, connected = await self.connect(AnonymousUser())
		self.assertFalse(connected)

	async def test_ping_pong(self):
		communicator, connected = await self.connect(User(id=7, username='rider'))
		self.assertTrue(connected)

		hello = await communicator.receive_json_from()
		self.assertEqual(hello['type'], 'connection_established')
		self.assertEqual(hello['user_id'], 7)

		await communicator.send_json_to({'type': 'ping'})
		self.assertEqual((await communicator.receive_json_from())['type'], 'pong')
		await communicator.disconnect()

	async def test_personal_group_gets_ride_updates(self):
		communicator, _ = await self.connect(User(id=9, username='customer'))
		await communicator.receive_json_from()

		await get_channel_layer().group_send(notifications.user_group(9), {
			'type': 'ride_updated',
			'ride_id': 'abc',
			'status': 'accepted',
			'ride_data': {},
			'message': 'Driver on the way',
		})
		event = await communicator.receive_json_from()
		self.assertEqual(event['status'], 'accepted')
		self.assertEqual(event['message'], 'Driver on the way')
		await communicator.disconnect()

	async def test_bad_messages(self):
		communicator, _ = await self.connect(User(id=10, username='driver'))
		await communicator.receive_json_from()

		await communicator.send_json_to({'type': 'watch_rides', 'vehicle_type': 'truck'})
		self.assertEqual((await communicator.receive_json_from())['type'], 'error')

		await communicator.send_json_to({'hello': 'world'})
		error = await communicator.receive_json_from()
		self.assertEqual(error['message'], 'Message type is required')
		await communicator.disconnect()


class VehicleFeedAccessTests(TransactionTestCase):
	def setUp(self):
		self.car_driver = User.objects.create_user(username='car_driver', email='car@example.com', password='pass12345')
		self.bike_driver = User.objects.create_user(username='bike_driver', email='bike@example.com', password='pass12345')
		self.customer = User.objects.create_user(username='customer', email='customer@example.com', password='pass12345')
		DriverProfile.objects.create(user=self.car_driver, vehicle_type='car', vehicle_number='KA-01-1001')
		DriverProfile.objects.create(user=self.bike_driver, vehicle_type='bike', vehicle_number='KA-01-2002')

	async def connect(self, user):
		communicator = WebsocketCommunicator(RideFeedConsumer.as_asgi(), '/ws/rides/')
		communicator.scope['user'] = user
		connected, _ = await communicator.connect()
		self.assertTrue(connected)
		await communicator.receive_json_from()
		return communicator

	async def publish_car_ride(self):
		await get_channel_layer().group_send(notifications.vehicle_group('car'), {
			'type': 'ride_created',
			'ride_id': 'abc',
			'ride_data': {'from_location': 'City Center', 'customer': {'phone': '9000000000'}},
		})

	async def test_driver_receives_own_vehicle_feed(self):
		communicator = await self.connect(self.car_driver)

		await communicator.send_json_to({'type': 'watch_rides', 'vehicle_type': 'car'})
		ack = await communicator.receive_json_from()
		self.assertEqual(ack, {'type': 'watching_rides', 'vehicle_type': 'car'})

		await self.publish_car_ride()
		event = await communicator.receive_json_from()
		self.assertEqual(event['type'], 'ride_created')
		self.assertEqual(event['ride']['from_location'], 'City Center')

		await communicator.send_json_to({'type': 'unwatch_rides'})
		self.assertEqual((await communicator.receive_json_from())['type'], 'stopped_watching_rides')

		await get_channel_layer().group_send(notifications.vehicle_group('car'), {
			'type': 'ride_taken',
			'ride_id': 'abc',
		})
		self.assertTrue(await communicator.receive_nothing())
		await communicator.disconnect()

	async def test_vehicle_type_defaults_to_profile(self):
		communicator = await self.connect(self.bike_driver)

		await communicator.send_json_to({'type': 'watch_rides'})
		ack = await communicator.receive_json_from()
		self.assertEqual(ack['vehicle_type'], 'bike')
		await communicator.disconnect()

	async def test_customer_cannot_watch_rides(self):
		communicator = await self.connect(self.customer)

		await communicator.send_json_to({'type': 'watch_rides', 'vehicle_type': 'car'})
		error = await communicator.receive_json_from()
		self.assertEqual(error, {'type': 'error', 'message': 'Driver vehicle profile not found'})

		await self.publish_car_ride()
		self.assertTrue(await communicator.receive_nothing())
		await communicator.disconnect()

	async def test_driver_cannot_watch_another_vehicle_type(self):
		communicator = await self.connect(self.bike_driver)

		await communicator.send_json_to({'type': 'watch_rides', 'vehicle_type': 'car'})
		error = await communicator.receive_json_from()
		self.assertEqual(error['type'], 'error')
		self.assertEqual(error['message'], 'You can only watch bike rides')

		await self.publish_car_ride()
		self.assertTrue(await communicator.receive_nothing())
		await communicator.disconnect()


class NotificationHelperTests(SimpleTestCase):
	@patch('realtime.notifications._group_send', return_value=True)
	def test_ride_taken_goes_to_vehicle_group(self, mock_send):
		ride = SimpleNamespace(id='r1', vehicle_type='auto')
		self.assertTrue(notifications.notify_vehicle_feed('ride_taken', ride))
		mock_send.assert_called_once_with('rides_auto', {
			'type': 'ride_taken',
			'ride_id': 'r1',
			'vehicle_type': 'auto',
		})

	@patch('realtime.notifications._ride_data', return_value={})
	@patch('realtime.notifications._group_send', return_value=True)
	def test_ride_event_skips_missing_users(self, mock_send, mock_data):
		ride = SimpleNamespace(id='r1', status='cancelled')
		sent = notifications.notify_ride_event('ride_updated', ride, [3, None, 3])
		self.assertEqual(sent, 1)
		self.assertEqual(mock_send.call_args[0][0], 'user_3')

	@patch('realtime.notifications.get_channel_layer', return_value=None)
	def test_no_channel_layer(self, mock_layer):
		profile = SimpleNamespace(user_id=4, is_available=False, vehicle_type='bike')
		self.assertFalse(notifications.notify_driver_availability(profile))


class TokenMiddlewareTests(TransactionTestCase):
	def setUp(self):
		self.user = User.objects.create_user(username='meena', email='meena@example.com', password='pass12345')
		self.application = JWTOrCookieAuthMiddleware(URLRouter(websocket_urlpatterns))

	async def test_valid_token_authenticates(self):
		token = str(AccessToken.for_user(self.user))
		communicator = WebsocketCommunicator(self.application, f'/ws/rides/?token={token}')

		connected, _ = await communicator.connect()
		self.assertTrue(connected)
		hello = await communicator.receive_json_from()
		self.assertEqual(hello['user_id'], self.user.id)
		await communicator.disconnect()

	async def test_invalid_token_is_rejected(self):
		communicator = WebsocketCommunicator(self.application, '/ws/rides/?token=not-a-jwt')
		connected, _ = await communicator.connect()
		self.assertFalse(connected)
