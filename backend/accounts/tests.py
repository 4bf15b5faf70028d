from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from .models import Profile, User


class RegisterLoginTests(TestCase):
	def setUp(self):
		self.client = APIClient()

	def register(self, **overrides):
		payload = {
			'username': 'asha',
			'email': 'asha@example.com',
			'password': 'pass12345',
			'full_name': 'Asha Rao',
			'phone': '9000000000',
		}
		payload.update(overrides)
		return self.client.post(reverse('accounts:register'), payload, format='json')

	def test_register_creates_profile_and_tokens(self):
		response = self.register(user_type='rider')

		self.assertEqual(response.status_code, 201)
		self.assertIn('access', response.data['tokens'])
		self.assertIn('refresh', response.data['tokens'])

		profile = Profile.objects.get(user__username='asha')
		self.assertEqual(profile.full_name, 'Asha Rao')
		self.assertTrue(profile.is_driver)

	def test_register_rejects_duplicate_email(self):
		self.register()
		response = self.register(username='asha2', email='ASHA@example.com')
		self.assertEqual(response.status_code, 400)
		self.assertIn('email', response.data['details'])
		self.assertEqual(User.objects.count(), 1)

	def test_login_and_refresh(self):
		self.register()

		login = self.client.post(
			reverse('accounts:login'),
			{'username': 'asha', 'password': 'pass12345'},
			format='json'
		)
		self.assertEqual(login.status_code, 200)
		self.assertEqual(login.data['user']['profile']['user_type'], 'customer')

		refresh = self.client.post(
			reverse('accounts:refresh'),
			{'refresh': login.data['tokens']['refresh']},
			format='json'
		)
		self.assertEqual(refresh.status_code, 200)
		self.assertIn('access', refresh.data)

	def test_login_with_wrong_password(self):
		self.register()
		response = self.client.post(
			reverse('accounts:login'),
			{'username': 'asha', 'password': 'nope'},
			format='json'
		)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'Invalid username or password')

	def test_refresh_with_garbage(self):
		response = self.client.post(reverse('accounts:refresh'), {'refresh': 'abc'}, format='json')
		self.assertEqual(response.status_code, 401)


class ProfileViewTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.user = User.objects.create_user(username='ravi', email='ravi@example.com', password='pass12345')

	def test_profile_missing(self):
		self.client.force_authenticate(user=self.user)
		response = self.client.get(reverse('accounts:profile'))
		self.assertEqual(response.status_code, 404)

	def test_update_contact_details(self):
		Profile.objects.create(user=self.user, full_name='Ravi')
		self.client.force_authenticate(user=self.user)

		response = self.client.patch(
			reverse('accounts:profile'),
			{'phone': '9111111111', 'user_type': 'rider'},
			format='json'
		)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['phone'], '9111111111')
		# user_type is fixed at registration
		self.assertEqual(response.data['user_type'], 'customer')
