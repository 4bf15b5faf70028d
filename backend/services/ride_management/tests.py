import random
import uuid
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.core import mail
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from accounts.models import Profile, User
from drivers.models import DriverProfile
from rides.models import Ride, RideNotification
from services.ride_management import (
	BASE_FARES,
	accept_ride,
	cancel_ride,
	complete_ride,
	create_ride,
	estimate_fare,
	get_ride_for_user,
	list_available_rides,
	list_driver_rides,
	start_ride,
	DriverProfileNotFoundError,
	ProfileNotFoundError,
	RideNotFoundError,
	RideUnavailableError,
	RideValidationError,
)


class FixedRandom:
	def __init__(self, value):
		self.value = value

	def random(self):
		return self.value


class EstimateFareTests(SimpleTestCase):
	def test_fare_stays_within_band_for_every_vehicle_type(self):
		rng = random.Random(1234)
		for vehicle_type, base in BASE_FARES.items():
			for _ in range(200):
				fare = estimate_fare(vehicle_type, rng=rng)
				self.assertIsInstance(fare, int)
				self.assertGreaterEqual(fare, base)
				self.assertLess(fare, base + 100)

	def test_extreme_random_values(self):
		self.assertEqual(estimate_fare('bike', rng=FixedRandom(0.0)), 30)
		self.assertEqual(estimate_fare('car', rng=FixedRandom(0.9999999)), 179)
		self.assertEqual(estimate_fare('auto', rng=FixedRandom(0.5)), 100)

	def test_unknown_vehicle_type_is_rejected(self):
		for bad in ('truck', '', None, 'CAR'):
			with self.assertRaises(RideValidationError):
				estimate_fare(bad)


class LifecycleTestBase(TestCase):
	def setUp(self):
		self.customer = self.make_user('customer', user_type='customer', full_name='Asha Rao')
		self.driver = self.make_user('driver', user_type='rider', full_name='Ravi Kumar')
		self.other_driver = self.make_user('driver2', user_type='rider', full_name='Meena S')
		DriverProfile.objects.create(user=self.driver, vehicle_type='car', vehicle_number='KA-01-1111')
		DriverProfile.objects.create(user=self.other_driver, vehicle_type='car', vehicle_number='KA-01-2222')
		self.pickup_time = timezone.now() + timedelta(hours=2)

	def make_user(self, username, user_type='customer', full_name=''):
		user = User.objects.create_user(
			username=username, email=f'{username}@example.com', password='pass12345'
		)
		Profile.objects.create(user=user, full_name=full_name, phone='9000000000', user_type=user_type)
		return user

	def book(self, vehicle_type='car', **kwargs):
		return create_ride(
			self.customer,
			from_location=kwargs.pop('from_location', 'City Center'),
			to_location=kwargs.pop('to_location', 'Airport'),
			pickup_time=self.pickup_time,
			vehicle_type=vehicle_type,
			rng=FixedRandom(0.25),
			**kwargs,
		).ride


class CreateRideTests(LifecycleTestBase):
	def test_new_ride_is_pending_without_driver(self):
		with self.captureOnCommitCallbacks(execute=True):
			ride = self.book(notes='Two bags')

		ride.refresh_from_db()
		self.assertEqual(ride.status, Ride.STATUS_PENDING)
		self.assertIsNone(ride.driver_id)
		self.assertEqual(ride.estimated_fare, Decimal('105'))
		self.assertEqual(ride.notes, 'Two bags')

		notification = RideNotification.objects.get(ride=ride)
		self.assertEqual(notification.user, self.customer)
		self.assertIn('City Center to Airport', notification.message)

		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].subject, 'Ride Request Confirmed - LocalRide')
		self.assertEqual(mail.outbox[0].to, ['customer@example.com'])

	def test_missing_profile(self):
		stranger = User.objects.create_user(username='ghost', email='ghost@example.com', password='x' * 10)
		with self.assertRaises(ProfileNotFoundError):
			create_ride(stranger, 'A', 'B', self.pickup_time, 'car')
		self.assertFalse(Ride.objects.exists())

	def test_missing_fields_and_bad_vehicle_type(self):
		with self.assertRaises(RideValidationError) as ctx:
			create_ride(self.customer, '', 'Airport', None, 'car')
		self.assertEqual(set(ctx.exception.errors), {'from_location', 'pickup_time'})

		with self.assertRaises(RideValidationError):
			create_ride(self.customer, 'City Center', 'Airport', self.pickup_time, 'truck')
		self.assertFalse(Ride.objects.exists())

	@patch('services.mailer.emails.send_mail', side_effect=ConnectionError('smtp down'))
	def test_email_failure_does_not_fail_creation(self, mock_send):
		with self.captureOnCommitCallbacks(execute=True):
			ride = self.book()

		mock_send.assert_called_once()
		self.assertTrue(Ride.objects.filter(id=ride.id, status='pending').exists())


class AcceptRideTests(LifecycleTestBase):
	def test_accept_assigns_driver_and_notifies_both(self):
		ride = self.book()
		mail.outbox.clear()

		with self.captureOnCommitCallbacks(execute=True):
			result = accept_ride(self.driver, ride.id)

		self.assertTrue(result.success)
		ride.refresh_from_db()
		self.assertEqual(ride.status, Ride.STATUS_ACCEPTED)
		self.assertEqual(ride.driver, self.driver)

		recipients = set(
			RideNotification.objects.filter(ride=ride).exclude(user=self.customer, message__contains='submitted')
			.values_list('user_id', flat=True)
		)
		self.assertEqual(recipients, {self.customer.id, self.driver.id})

		subjects = sorted(message.subject for message in mail.outbox)
		self.assertEqual(subjects, ['Ride Accepted - LocalRide', 'Ride Assignment Confirmed - LocalRide'])

	def test_second_accept_is_rejected_and_keeps_first_driver(self):
		ride = self.book()
		accept_ride(self.driver, ride.id)

		with self.assertRaises(RideUnavailableError):
			accept_ride(self.other_driver, ride.id)

		ride.refresh_from_db()
		self.assertEqual(ride.driver, self.driver)

	def test_claim_is_a_single_conditional_update(self):
		"""A ride taken between listing and accepting is not reassigned."""
		ride = self.book()
		listed = list(list_available_rides(self.other_driver))
		self.assertEqual([r.id for r in listed], [ride.id])

		# another driver wins after the listing was read
		Ride.objects.filter(id=ride.id).update(driver=self.driver, status='accepted')

		with self.assertRaises(RideUnavailableError):
			accept_ride(self.other_driver, listed[0].id)
		ride.refresh_from_db()
		self.assertEqual(ride.driver, self.driver)

	def test_unknown_ride(self):
		with self.assertRaises(RideUnavailableError):
			accept_ride(self.driver, uuid.uuid4())
		with self.assertRaises(RideValidationError):
			accept_ride(self.driver, 'not-a-uuid')

	def test_requires_profiles(self):
		ride = self.book()
		no_vehicle = self.make_user('walker', user_type='rider')
		with self.assertRaises(DriverProfileNotFoundError):
			accept_ride(no_vehicle, ride.id)

		no_profile = User.objects.create_user(username='bare', email='bare@example.com', password='x' * 10)
		with self.assertRaises(ProfileNotFoundError):
			accept_ride(no_profile, ride.id)

	def test_vehicle_type_not_enforced_on_accept(self):
		ride = self.book(vehicle_type='bike')
		accept_ride(self.driver, ride.id)
		ride.refresh_from_db()
		self.assertEqual(ride.status, Ride.STATUS_ACCEPTED)


class ProgressRideTests(LifecycleTestBase):
	def setUp(self):
		super().setUp()
		self.ride = self.book()
		accept_ride(self.driver, self.ride.id)

	def test_start_then_complete(self):
		start_ride(self.driver, self.ride.id)
		self.ride.refresh_from_db()
		self.assertEqual(self.ride.status, Ride.STATUS_IN_PROGRESS)
		self.assertIsNone(self.ride.final_fare)

		complete_ride(self.driver, self.ride.id, distance_km=12.5, final_fare='150')
		self.ride.refresh_from_db()
		self.assertEqual(self.ride.status, Ride.STATUS_COMPLETED)
		self.assertEqual(self.ride.distance_km, Decimal('12.50'))
		self.assertEqual(self.ride.final_fare, Decimal('150.00'))

	def test_only_assigned_driver_can_start(self):
		with self.assertRaises(RideNotFoundError):
			start_ride(self.other_driver, self.ride.id)
		self.ride.refresh_from_db()
		self.assertEqual(self.ride.status, Ride.STATUS_ACCEPTED)

	def test_complete_requires_in_progress(self):
		with self.assertRaises(RideUnavailableError):
			complete_ride(self.driver, self.ride.id, distance_km=3, final_fare=40)
		self.ride.refresh_from_db()
		self.assertEqual(self.ride.status, Ride.STATUS_ACCEPTED)
		self.assertIsNone(self.ride.distance_km)

	def test_complete_validates_amounts_and_leaves_status(self):
		start_ride(self.driver, self.ride.id)

		bad_inputs = [
			{'distance_km': None, 'final_fare': 150},
			{'distance_km': 12.5, 'final_fare': None},
			{'distance_km': 'far', 'final_fare': 150},
			{'distance_km': 12.5, 'final_fare': 'cheap'},
			{'distance_km': -1, 'final_fare': 150},
			{'distance_km': True, 'final_fare': 150},
		]
		for values in bad_inputs:
			with self.assertRaises(RideValidationError):
				complete_ride(self.driver, self.ride.id, **values)

		self.ride.refresh_from_db()
		self.assertEqual(self.ride.status, Ride.STATUS_IN_PROGRESS)
		self.assertIsNone(self.ride.final_fare)
		self.assertIsNone(self.ride.distance_km)

	def test_complete_rejects_amounts_too_large_to_store(self):
		start_ride(self.driver, self.ride.id)

		for values in (
			{'distance_km': 12.5, 'final_fare': '1e30'},
			{'distance_km': 10000000, 'final_fare': 150},
			{'distance_km': '999999.999', 'final_fare': 150},
		):
			with self.assertRaises(RideValidationError) as ctx:
				complete_ride(self.driver, self.ride.id, **values)
			self.assertEqual(len(ctx.exception.errors), 1)

		self.ride.refresh_from_db()
		self.assertEqual(self.ride.status, Ride.STATUS_IN_PROGRESS)
		self.assertIsNone(self.ride.distance_km)

		complete_ride(self.driver, self.ride.id, distance_km='999999.99', final_fare='99999999.99')
		self.ride.refresh_from_db()
		self.assertEqual(self.ride.final_fare, Decimal('99999999.99'))

	def test_status_cannot_go_backwards(self):
		start_ride(self.driver, self.ride.id)
		with self.assertRaises(RideUnavailableError):
			start_ride(self.driver, self.ride.id)


class CancelRideTests(LifecycleTestBase):
	def test_customer_cancels_pending_ride(self):
		ride = self.book()
		result = cancel_ride(self.customer, ride.id, reason='Plans changed')
		self.assertFalse(result.extra['was_assigned'])
		ride.refresh_from_db()
		self.assertEqual(ride.status, Ride.STATUS_CANCELLED)

	def test_driver_cancel_notifies_customer_and_keeps_driver(self):
		ride = self.book()
		accept_ride(self.driver, ride.id)

		cancel_ride(self.driver, ride.id, reason='Vehicle breakdown')
		ride.refresh_from_db()
		self.assertEqual(ride.status, Ride.STATUS_CANCELLED)
		self.assertEqual(ride.driver, self.driver)
		self.assertTrue(
			RideNotification.objects.filter(
				ride=ride, user=self.customer, message__contains='Vehicle breakdown'
			).exists()
		)

	def test_terminal_rides_cannot_be_cancelled(self):
		ride = self.book()
		cancel_ride(self.customer, ride.id)
		with self.assertRaises(RideUnavailableError):
			cancel_ride(self.customer, ride.id)

	def test_strangers_cannot_cancel(self):
		ride = self.book()
		with self.assertRaises(RideNotFoundError):
			cancel_ride(self.other_driver, ride.id)


class RideQueryTests(LifecycleTestBase):
	def test_available_rides_match_vehicle_type(self):
		car_ride = self.book(vehicle_type='car')
		self.book(vehicle_type='bike')
		taken = self.book(vehicle_type='car')
		accept_ride(self.other_driver, taken.id)

		self.assertEqual([r.id for r in list_available_rides(self.driver)], [car_ride.id])

	def test_available_rides_require_vehicle(self):
		with self.assertRaises(DriverProfileNotFoundError):
			list(list_available_rides(self.customer))

	def test_driver_rides_active_and_history(self):
		done = self.book()
		accept_ride(self.driver, done.id)
		start_ride(self.driver, done.id)
		complete_ride(self.driver, done.id, 5, 60)
		active = self.book()
		accept_ride(self.driver, active.id)

		self.assertEqual([r.id for r in list_driver_rides(self.driver)], [active.id])
		self.assertEqual(
			{r.id for r in list_driver_rides(self.driver, active_only=False)},
			{done.id, active.id},
		)

	def test_ride_visibility(self):
		ride = self.book()
		self.assertEqual(get_ride_for_user(self.customer, ride.id), ride)
		# pending ride of the driver's vehicle type is visible for browsing
		self.assertEqual(get_ride_for_user(self.other_driver, ride.id), ride)

		accept_ride(self.driver, ride.id)
		self.assertEqual(get_ride_for_user(self.driver, ride.id), ride)
		with self.assertRaises(RideNotFoundError):
			get_ride_for_user(self.other_driver, ride.id)

		outsider = self.make_user('outsider')
		with self.assertRaises(RideNotFoundError):
			get_ride_for_user(outsider, ride.id)
