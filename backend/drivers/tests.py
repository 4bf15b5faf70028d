from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIRequestFactory, force_authenticate

from accounts.models import Profile, User
from rides.models import Ride
from .models import DriverProfile
from .views import AvailableRidesView, DriverAvailabilityView, DriverProfileView, DriverRidesView


def make_user(username, user_type='rider'):
	user = User.objects.create_user(
		username=username,
		email=f'{username}@example.com',
		password='pass12345'
	)
	Profile.objects.create(user=user, full_name=username.title(), user_type=user_type)
	return user


def make_ride(customer, vehicle_type='car', status='pending', driver=None, hours=2):
	return Ride.objects.create(
		customer=customer,
		driver=driver,
		from_location='Railway Station',
		to_location='Mall Road',
		pickup_time=timezone.now() + timedelta(hours=hours),
		vehicle_type=vehicle_type,
		estimated_fare=120,
		status=status
	)


class DriverProfileViewTests(TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.driver = make_user('driver')

	def post_profile(self, data):
		request = self.factory.post(reverse('driver-profile'), data, format='json')
		force_authenticate(request, user=self.driver)
		return DriverProfileView.as_view()(request)

	def test_create_then_update(self):
		created = self.post_profile({'vehicle_type': 'auto', 'vehicle_number': ' ka-05-7788 '})
		self.assertEqual(created.status_code, 201)
		self.assertEqual(created.data['vehicle_number'], 'KA-05-7788')
		self.assertTrue(created.data['is_available'])

		updated = self.post_profile({'vehicle_type': 'car'})
		self.assertEqual(updated.status_code, 200)
		self.assertEqual(updated.data['vehicle_type'], 'car')
		self.assertEqual(updated.data['vehicle_number'], 'KA-05-7788')
		self.assertEqual(DriverProfile.objects.filter(user=self.driver).count(), 1)

	def test_invalid_vehicle_type(self):
		response = self.post_profile({'vehicle_type': 'truck', 'vehicle_number': 'KA-1'})
		self.assertEqual(response.status_code, 400)
		self.assertIn('vehicle_type', response.data['details'])
		self.assertFalse(DriverProfile.objects.exists())

	def test_get_without_profile(self):
		request = self.factory.get(reverse('driver-profile'))
		force_authenticate(request, user=self.driver)
		response = DriverProfileView.as_view()(request)
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['error'], 'Driver vehicle profile not found')


class DriverAvailabilityTests(TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.driver = make_user('driver')
		self.profile = DriverProfile.objects.create(
			user=self.driver,
			vehicle_type='bike',
			vehicle_number='KA-01-2002'
		)

	@patch('drivers.services.notify_driver_availability')
	def test_go_offline(self, mock_notify):
		request = self.factory.put(reverse('driver-availability'), {'is_available': False}, format='json')
		force_authenticate(request, user=self.driver)

		with self.captureOnCommitCallbacks(execute=True):
			response = DriverAvailabilityView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertFalse(response.data['is_available'])
		self.profile.refresh_from_db()
		self.assertFalse(self.profile.is_available)
		mock_notify.assert_called_once()

	def test_missing_flag(self):
		request = self.factory.put(reverse('driver-availability'), {}, format='json')
		force_authenticate(request, user=self.driver)
		response = DriverAvailabilityView.as_view()(request)
		self.assertEqual(response.status_code, 400)


class DriverRideListTests(TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.customer = make_user('customer', user_type='customer')
		self.driver = make_user('driver')
		self.profile = DriverProfile.objects.create(
			user=self.driver,
			vehicle_type='car',
			vehicle_number='KA-01-3003'
		)

	def get(self, view, url, params=None):
		request = self.factory.get(url, params or {})
		force_authenticate(request, user=self.driver)
		return view.as_view()(request)

	def test_available_rides_match_vehicle_type(self):
		later = make_ride(self.customer, hours=5)
		sooner = make_ride(self.customer, hours=1)
		make_ride(self.customer, vehicle_type='bike')
		make_ride(self.customer, status='cancelled')

		response = self.get(AvailableRidesView, reverse('driver-available-rides'))

		self.assertEqual(response.status_code, 200)
		self.assertEqual(
			[ride['id'] for ride in response.data['rides']],
			[str(sooner.id), str(later.id)]
		)

	def test_unavailable_driver_sees_nothing(self):
		make_ride(self.customer)
		self.profile.is_available = False
		self.profile.save()

		response = self.get(AvailableRidesView, reverse('driver-available-rides'))
		self.assertEqual(response.data['count'], 0)
		self.assertIn('message', response.data)

	def test_assigned_rides_and_history(self):
		active = make_ride(self.customer, status='accepted', driver=self.driver)
		make_ride(self.customer, status='completed', driver=self.driver)
		make_ride(self.customer)

		current = self.get(DriverRidesView, reverse('driver-rides'))
		self.assertEqual([ride['id'] for ride in current.data['rides']], [str(active.id)])

		history = self.get(DriverRidesView, reverse('driver-rides'), {'history': 'true'})
		self.assertEqual(history.data['count'], 2)
