from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import Profile, User
from drivers.models import DriverProfile
from .models import Location, Ride, RideNotification


def make_user(username, user_type='customer', full_name=''):
	user = User.objects.create_user(
		username=username,
		email=f'{username}@example.com',
		password='pass12345'
	)
	Profile.objects.create(user=user, full_name=full_name, phone='9000000000', user_type=user_type)
	return user


class RideApiTestBase(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.customer = make_user('customer', full_name='Asha Rao')
		self.driver = make_user('driver', user_type='rider', full_name='Ravi Kumar')
		self.driver_two = make_user('driver_two', user_type='rider', full_name='Meena S')

		DriverProfile.objects.create(
			user=self.driver,
			vehicle_type='car',
			vehicle_number='KA-01-1001',
			is_available=True
		)
		DriverProfile.objects.create(
			user=self.driver_two,
			vehicle_type='car',
			vehicle_number='KA-01-1002',
			is_available=True
		)

		self.booking = {
			'from_location': 'City Center',
			'to_location': 'Airport',
			'pickup_time': (timezone.now() + timedelta(hours=3)).isoformat(),
			'vehicle_type': 'car',
		}

	def as_user(self, user):
		self.client.force_authenticate(user=user)
		return self.client

	def create_ride(self, **overrides):
		response = self.as_user(self.customer).post(
			reverse('rides:rides'), {**self.booking, **overrides}, format='json'
		)
		self.assertEqual(response.status_code, 201, response.data)
		return response.data['ride']


class CreateRideApiTests(RideApiTestBase):
	def test_create_ride_returns_pending_ride(self):
		with self.captureOnCommitCallbacks(execute=True):
			response = self.as_user(self.customer).post(
				reverse('rides:rides'), {**self.booking, 'notes': 'Gate 2'}, format='json'
			)

		self.assertEqual(response.status_code, 201)
		self.assertTrue(response.data['success'])
		ride = response.data['ride']
		self.assertEqual(ride['status'], 'pending')
		self.assertIsNone(ride['driver'])
		self.assertEqual(ride['customer']['full_name'], 'Asha Rao')
		self.assertTrue(80 <= Decimal(ride['estimated_fare']) < 180)

		self.assertEqual(len(mail.outbox), 1)
		self.assertIn('City Center', mail.outbox[0].alternatives[0][0])

	def test_requires_authentication(self):
		response = APIClient().post(reverse('rides:rides'), self.booking, format='json')
		self.assertEqual(response.status_code, 401)
		self.assertIn('error', response.data)
		self.assertFalse(Ride.objects.exists())

	def test_requires_profile(self):
		stranger = User.objects.create_user(username='ghost', email='ghost@example.com', password='pass12345')
		response = self.as_user(stranger).post(reverse('rides:rides'), self.booking, format='json')
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['error'], 'Customer profile not found')

	def test_invalid_vehicle_type(self):
		response = self.as_user(self.customer).post(
			reverse('rides:rides'), {**self.booking, 'vehicle_type': 'truck'}, format='json'
		)
		self.assertEqual(response.status_code, 400)
		self.assertIn('vehicle_type', response.data['details'])
		self.assertFalse(Ride.objects.exists())

	def test_missing_fields(self):
		response = self.as_user(self.customer).post(
			reverse('rides:rides'), {'vehicle_type': 'car'}, format='json'
		)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(
			set(response.data['details']),
			{'from_location', 'to_location', 'pickup_time'}
		)

	@override_settings(RIDE_EMAILS_ASYNC=True)
	@patch('rides.tasks.send_ride_email_task.delay', side_effect=OSError('broker unreachable'))
	def test_broker_failure_is_swallowed(self, mock_delay):
		with self.captureOnCommitCallbacks(execute=True):
			ride = self.create_ride()

		mock_delay.assert_called_once_with('ride_created', ride['id'], self.customer.id)
		self.assertTrue(Ride.objects.filter(id=ride['id']).exists())

	@override_settings(RIDE_EMAILS_ASYNC=True)
	def test_async_email_runs_through_celery_task(self):
		with self.captureOnCommitCallbacks(execute=True):
			self.create_ride()

		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].subject, 'Ride Request Confirmed - LocalRide')

	def test_history_lists_only_own_rides(self):
		mine = self.create_ride()
		other = make_user('other_customer')
		self.as_user(other).post(reverse('rides:rides'), self.booking, format='json')

		response = self.as_user(self.customer).get(reverse('rides:rides'))
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['count'], 1)
		self.assertEqual(response.data['rides'][0]['id'], mine['id'])


class AcceptRideApiTests(RideApiTestBase):
	def test_accept_by_body(self):
		ride = self.create_ride()

		with self.captureOnCommitCallbacks(execute=True):
			response = self.as_user(self.driver).post(
				reverse('rides:accept-ride-body'), {'ride_id': ride['id']}, format='json'
			)

		self.assertEqual(response.status_code, 200)
		self.assertTrue(response.data['success'])
		self.assertEqual(response.data['ride']['status'], 'accepted')
		self.assertEqual(response.data['ride']['driver']['vehicle_number'], 'KA-01-1001')

		accepted = Ride.objects.get(id=ride['id'])
		self.assertEqual(accepted.driver, self.driver)
		self.assertEqual(
			RideNotification.objects.filter(ride=accepted, user__in=[self.customer, self.driver])
			.exclude(message__contains='submitted').count(),
			2
		)

	def test_second_driver_gets_conflict(self):
		ride = self.create_ride()
		url = reverse('rides:accept-ride', kwargs={'ride_id': ride['id']})

		first = self.as_user(self.driver).post(url)
		second = self.as_user(self.driver_two).post(url)

		self.assertEqual(first.status_code, 200)
		self.assertEqual(second.status_code, 409)
		self.assertEqual(second.data['error'], 'Ride not found or already accepted')
		self.assertEqual(Ride.objects.get(id=ride['id']).driver, self.driver)

	def test_driver_without_vehicle_profile(self):
		ride = self.create_ride()
		walker = make_user('walker', user_type='rider')
		response = self.as_user(walker).post(reverse('rides:accept-ride', kwargs={'ride_id': ride['id']}))
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['error'], 'Driver vehicle profile not found')

	def test_malformed_ride_id(self):
		response = self.as_user(self.driver).post(
			reverse('rides:accept-ride-body'), {'ride_id': 'abc'}, format='json'
		)
		self.assertEqual(response.status_code, 400)

	def test_requires_authentication(self):
		ride = self.create_ride()
		response = APIClient().post(reverse('rides:accept-ride-body'), {'ride_id': ride['id']}, format='json')
		self.assertEqual(response.status_code, 401)


class RideFlowApiTests(RideApiTestBase):
	def test_end_to_end_ride(self):
		with self.captureOnCommitCallbacks(execute=True):
			ride = self.create_ride()
		self.assertEqual(ride['status'], 'pending')
		self.assertTrue(80 <= Decimal(ride['estimated_fare']) < 180)

		available = self.as_user(self.driver).get(reverse('driver-available-rides'))
		self.assertEqual([r['id'] for r in available.data['rides']], [ride['id']])

		with self.captureOnCommitCallbacks(execute=True):
			accepted = self.as_user(self.driver).post(
				reverse('rides:accept-ride-body'), {'ride_id': ride['id']}, format='json'
			)
		self.assertEqual(accepted.status_code, 200)
		self.assertEqual(accepted.data['ride']['driver']['id'], self.driver.id)

		started = self.as_user(self.driver).post(reverse('rides:start-ride', kwargs={'ride_id': ride['id']}))
		self.assertEqual(started.data['ride']['status'], 'in_progress')

		completed = self.as_user(self.driver).post(
			reverse('rides:complete-ride', kwargs={'ride_id': ride['id']}),
			{'distance_km': 12.5, 'final_fare': 150},
			format='json'
		)
		self.assertEqual(completed.status_code, 200)

		final = Ride.objects.get(id=ride['id'])
		self.assertEqual(final.status, 'completed')
		self.assertEqual(final.final_fare, Decimal('150'))
		self.assertEqual(final.distance_km, Decimal('12.5'))

		# customer sees the finished ride in history
		history = self.as_user(self.customer).get(reverse('rides:rides'))
		self.assertEqual(history.data['rides'][0]['status'], 'completed')

	def test_complete_without_fare_is_rejected(self):
		ride = self.create_ride()
		self.as_user(self.driver).post(reverse('rides:accept-ride', kwargs={'ride_id': ride['id']}))
		self.as_user(self.driver).post(reverse('rides:start-ride', kwargs={'ride_id': ride['id']}))

		response = self.as_user(self.driver).post(
			reverse('rides:complete-ride', kwargs={'ride_id': ride['id']}),
			{'distance_km': 12.5},
			format='json'
		)
		self.assertEqual(response.status_code, 400)
		self.assertIn('final_fare', response.data['details'])
		self.assertEqual(Ride.objects.get(id=ride['id']).status, 'in_progress')

	def test_complete_with_oversized_amounts_is_rejected(self):
		ride = self.create_ride()
		self.as_user(self.driver).post(reverse('rides:accept-ride', kwargs={'ride_id': ride['id']}))
		self.as_user(self.driver).post(reverse('rides:start-ride', kwargs={'ride_id': ride['id']}))
		url = reverse('rides:complete-ride', kwargs={'ride_id': ride['id']})

		huge_fare = self.as_user(self.driver).post(url, {'distance_km': 12.5, 'final_fare': '1e30'}, format='json')
		self.assertEqual(huge_fare.status_code, 400)
		self.assertIn('final_fare', huge_fare.data['details'])

		long_trip = self.as_user(self.driver).post(url, {'distance_km': 10000000, 'final_fare': 150}, format='json')
		self.assertEqual(long_trip.status_code, 400)
		self.assertIn('distance_km', long_trip.data['details'])

		self.assertEqual(Ride.objects.get(id=ride['id']).status, 'in_progress')

	def test_customer_cannot_start_ride(self):
		ride = self.create_ride()
		self.as_user(self.driver).post(reverse('rides:accept-ride', kwargs={'ride_id': ride['id']}))

		response = self.as_user(self.customer).post(reverse('rides:start-ride', kwargs={'ride_id': ride['id']}))
		self.assertEqual(response.status_code, 404)
		self.assertEqual(Ride.objects.get(id=ride['id']).status, 'accepted')

	def test_cancel_and_detail_visibility(self):
		ride = self.create_ride()
		url = reverse('rides:ride-detail', kwargs={'ride_id': ride['id']})

		outsider = make_user('outsider')
		self.assertEqual(self.as_user(outsider).get(url).status_code, 404)
		self.assertEqual(self.as_user(self.customer).get(url).status_code, 200)

		cancelled = self.as_user(self.customer).post(
			reverse('rides:cancel-ride', kwargs={'ride_id': ride['id']}),
			{'reason': 'Plans changed'},
			format='json'
		)
		self.assertEqual(cancelled.status_code, 200)
		self.assertFalse(cancelled.data['was_assigned'])

		again = self.as_user(self.customer).post(reverse('rides:cancel-ride', kwargs={'ride_id': ride['id']}))
		self.assertEqual(again.status_code, 409)

		accept = self.as_user(self.driver).post(reverse('rides:accept-ride', kwargs={'ride_id': ride['id']}))
		self.assertEqual(accept.status_code, 409)


class NotificationApiTests(RideApiTestBase):
	def test_list_and_mark_read(self):
		self.create_ride()
		self.create_ride()

		listing = self.as_user(self.customer).get(reverse('rides:notifications'))
		self.assertEqual(listing.data['count'], 2)
		self.assertEqual(listing.data['unread'], 2)

		first_id = listing.data['notifications'][0]['id']
		marked = self.as_user(self.customer).post(
			reverse('rides:notification-read', kwargs={'notification_id': first_id})
		)
		self.assertEqual(marked.status_code, 200)

		unread = self.as_user(self.customer).get(reverse('rides:notifications'), {'unread': 'true'})
		self.assertEqual(unread.data['count'], 1)

		all_read = self.as_user(self.customer).post(reverse('rides:notifications-read-all'))
		self.assertEqual(all_read.data['updated'], 1)

	def test_cannot_mark_someone_elses_notification(self):
		self.create_ride()
		notification = RideNotification.objects.get(user=self.customer)

		response = self.as_user(self.driver).post(
			reverse('rides:notification-read', kwargs={'notification_id': notification.id})
		)
		self.assertEqual(response.status_code, 404)
		notification.refresh_from_db()
		self.assertFalse(notification.is_read)


class LocationApiTests(TestCase):
	def test_seeded_locations_are_public(self):
		response = APIClient().get(reverse('rides:locations'))
		self.assertEqual(response.status_code, 200)
		names = {location['name'] for location in response.data}
		self.assertIn('City Center', names)
		self.assertIn('Airport', names)
		self.assertEqual(len(response.data), Location.objects.count())


class CleanupCommandTests(RideApiTestBase):
	def test_cleanup_removes_old_finished_rides(self):
		old = Ride.objects.create(
			customer=self.customer,
			from_location='A',
			to_location='B',
			pickup_time=timezone.now(),
			vehicle_type='car',
			status='completed'
		)
		recent = Ride.objects.create(
			customer=self.customer,
			from_location='A',
			to_location='B',
			pickup_time=timezone.now(),
			vehicle_type='car',
			status='cancelled'
		)
		active = Ride.objects.create(
			customer=self.customer,
			from_location='A',
			to_location='B',
			pickup_time=timezone.now(),
			vehicle_type='car',
			status='pending'
		)
		stale = timezone.now() - timedelta(days=40)
		Ride.objects.filter(id__in=[old.id, active.id]).update(updated_at=stale)

		out = StringIO()
		call_command('cleanup_old_data', '--dry-run', stdout=out)
		self.assertIn('Would delete 1 old rides', out.getvalue())
		self.assertEqual(Ride.objects.count(), 3)

		call_command('cleanup_old_data', days=30, stdout=StringIO())
		self.assertEqual(
			set(Ride.objects.values_list('id', flat=True)),
			{recent.id, active.id}
		)

	def test_zero_days_is_not_the_default(self):
		finished = Ride.objects.create(
			customer=self.customer,
			from_location='A',
			to_location='B',
			pickup_time=timezone.now(),
			vehicle_type='car',
			status='completed'
		)
		Ride.objects.filter(id=finished.id).update(updated_at=timezone.now() - timedelta(minutes=5))

		call_command('cleanup_old_data', stdout=StringIO())
		self.assertTrue(Ride.objects.filter(id=finished.id).exists())

		out = StringIO()
		call_command('cleanup_old_data', '--days', '0', stdout=out)
		self.assertIn('older than 0 days', out.getvalue())
		self.assertFalse(Ride.objects.filter(id=finished.id).exists())
