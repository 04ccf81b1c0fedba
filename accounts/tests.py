"""Accounts app tests."""

from io import StringIO
from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import CompanyProfile
from accounts.wathq import WathqClient, normalize_company_name


def _fake_response(status_code=200, payload=None, text=''):
	response = mock.Mock()
	response.status_code = status_code
	response.ok = 200 <= status_code < 300
	response.text = text
	response.json.return_value = payload
	return response


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class RegistrationTests(TestCase):
	"""Registration, login and the current-user endpoint."""

	def setUp(self):
		self.client = APIClient()

	def _payload(self, **overrides):
		data = {
			'username': 'new_founder',
			'password': 'StrongPass123',
			'email': 'founder@example.com',
			'name': 'سارة',
			'role': 'entrepreneur',
		}
		data.update(overrides)
		return data

	def test_register_entrepreneur_returns_tokens_and_no_profile(self):
		res = self.client.post('/api/auth/register', data=self._payload(), format='json')
		self.assertEqual(res.status_code, 201)
		self.assertIn('access', res.data)
		self.assertIn('refresh', res.data)
		self.assertNotIn('password', res.data['user'])
		self.assertEqual(res.data['user']['role'], 'entrepreneur')
		self.assertFalse(CompanyProfile.objects.exists())

	def test_register_company_creates_profile(self):
		payload = self._payload(
			username='code_house',
			email='hello@codehouse.sa',
			role='company',
			company_profile={'description': 'Web and mobile studio', 'skills': ['React', 'Django', 'React']},
		)
		res = self.client.post('/api/auth/register', data=payload, format='json')
		self.assertEqual(res.status_code, 201)

		profile = CompanyProfile.objects.get(user__username='code_house')
		self.assertEqual(profile.skills, ['React', 'Django'])

	def test_register_entrepreneur_ignores_company_profile(self):
		payload = self._payload(company_profile={'description': 'ignored'})
		res = self.client.post('/api/auth/register', data=payload, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertFalse(CompanyProfile.objects.exists())

	def test_duplicate_username_and_email_rejected(self):
		self.client.post('/api/auth/register', data=self._payload(), format='json')

		res = self.client.post('/api/auth/register', data=self._payload(email='other@example.com'), format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Username already exists')

		res = self.client.post('/api/auth/register', data=self._payload(username='someone_else'), format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Email already exists')

	def test_admin_role_cannot_be_self_assigned(self):
		res = self.client.post('/api/auth/register', data=self._payload(role='admin'), format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Validation error')
		self.assertIn('role', res.data['errors'])

	def test_phone_number_is_normalized_to_e164(self):
		res = self.client.post('/api/auth/register', data=self._payload(phone_number='0501234567'), format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['user']['phone_number'], '+966501234567')

	def test_invalid_phone_number_rejected(self):
		res = self.client.post('/api/auth/register', data=self._payload(phone_number='12'), format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('phone_number', res.data['errors'])

	def test_login_returns_user_and_current_user_works(self):
		self.client.post('/api/auth/register', data=self._payload(), format='json')

		res = self.client.post('/api/auth/login', data={'username': 'new_founder', 'password': 'StrongPass123'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['user']['username'], 'new_founder')

		api = APIClient()
		api.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['access']}")
		me = api.get('/api/auth/user')
		self.assertEqual(me.status_code, 200)
		self.assertEqual(me.data['user']['email'], 'founder@example.com')

	def test_current_user_anonymous_is_401(self):
		res = APIClient().get('/api/auth/user')
		self.assertEqual(res.status_code, 401)

	def test_logout_blacklists_refresh_token(self):
		reg = self.client.post('/api/auth/register', data=self._payload(), format='json')
		refresh = reg.data['refresh']

		res = self.client.post('/api/auth/logout', data={'refresh': refresh}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.data['success'])

		res = self.client.post('/api/auth/token/refresh', data={'refresh': refresh}, format='json')
		self.assertEqual(res.status_code, 401)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class CompanyProfileApiTests(TestCase):
	"""Company profile CRUD, admin verification and user listings."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()

		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin', name='Admin',
		)
		cls.company_user = User.objects.create_user(
			username='studio', email='studio@example.com', password='12345678', role='company', name='Studio One',
		)
		cls.other_company = User.objects.create_user(
			username='rival', email='rival@example.com', password='12345678', role='company', name='Rival',
		)
		cls.entrepreneur = User.objects.create_user(
			username='founder', email='founder@example.com', password='12345678', role='entrepreneur', name='Founder',
		)
		cls.profile = CompanyProfile.objects.create(user=cls.company_user, description='Apps', skills=['Flutter'])

	def test_list_joins_owner_identity(self):
		res = APIClient().get('/api/companies/')
		self.assertEqual(res.status_code, 200)
		row = res.data['results'][0]
		self.assertEqual(row['username'], 'studio')
		self.assertEqual(row['name'], 'Studio One')
		self.assertEqual(row['email'], 'studio@example.com')

	def test_only_company_role_can_create_profile(self):
		client = APIClient()
		client.force_authenticate(user=self.entrepreneur)
		res = client.post('/api/companies/', data={'description': 'x'}, format='json')
		self.assertEqual(res.status_code, 403)

		client.force_authenticate(user=self.other_company)
		res = client.post('/api/companies/', data={'description': 'Rival studio'}, format='json')
		self.assertEqual(res.status_code, 201)

		res = client.post('/api/companies/', data={'description': 'Again'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Profile already exists')

	def test_only_owner_or_admin_can_update(self):
		client = APIClient()
		client.force_authenticate(user=self.other_company)
		res = client.patch(f'/api/companies/{self.profile.id}/', data={'location': 'Jeddah'}, format='json')
		self.assertEqual(res.status_code, 403)

		client.force_authenticate(user=self.company_user)
		res = client.patch(f'/api/companies/{self.profile.id}/', data={'location': 'Riyadh'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['location'], 'Riyadh')

	def test_verify_is_admin_only(self):
		client = APIClient()
		client.force_authenticate(user=self.company_user)
		res = client.patch(f'/api/companies/{self.profile.id}/verify/', data={'verified': True}, format='json')
		self.assertEqual(res.status_code, 403)

		client.force_authenticate(user=self.admin)
		res = client.patch(f'/api/companies/{self.profile.id}/verify/', data={'verified': True}, format='json')
		self.assertEqual(res.status_code, 200)
		self.profile.refresh_from_db()
		self.assertTrue(self.profile.verified)

	def test_users_all_requires_admin_and_hides_passwords(self):
		client = APIClient()
		client.force_authenticate(user=self.entrepreneur)
		self.assertEqual(client.get('/api/users/all').status_code, 403)

		client.force_authenticate(user=self.admin)
		res = client.get('/api/users/all')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(len(res.data), 4)
		self.assertTrue(all('password' not in row for row in res.data))

	def test_user_detail_404(self):
		res = APIClient().get('/api/users/99999')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.data['message'], 'User not found')

	def test_profile_me_updates_name(self):
		client = APIClient()
		client.force_authenticate(user=self.entrepreneur)
		res = client.patch('/api/profile/me/', data={'name': 'New Name'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['name'], 'New Name')

	@override_settings(WATHQ_API_KEY='test-key')
	def test_verify_cr_stores_number_when_names_match(self):
		payload = {'crNumber': '1010123456', 'name': 'Studio One', 'status': {'name': 'نشط'}}
		client = APIClient()
		client.force_authenticate(user=self.company_user)
		with mock.patch('accounts.wathq.requests.Session.get', return_value=_fake_response(200, payload)):
			res = client.post(f'/api/companies/{self.profile.id}/verify-cr/', data={'crNumber': '1010-123-456'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.profile.refresh_from_db()
		self.assertEqual(self.profile.cr_number, '1010123456')
		self.assertIsNotNone(self.profile.cr_verified_at)

	@override_settings(WATHQ_API_KEY='test-key')
	def test_verify_cr_rejects_name_mismatch(self):
		payload = {'crNumber': '1010123456', 'name': 'شركة أخرى', 'status': {'name': 'نشط'}}
		client = APIClient()
		client.force_authenticate(user=self.company_user)
		with mock.patch('accounts.wathq.requests.Session.get', return_value=_fake_response(200, payload)):
			res = client.post(f'/api/companies/{self.profile.id}/verify-cr/', data={'crNumber': '1010123456'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['registeredName'], 'شركة أخرى')


class WathqClientTests(TestCase):
	"""Wathq result mapping without network access."""

	def setUp(self):
		self.client = WathqClient(base_url='https://wathq.test/cr', api_key='key')

	def test_missing_api_key(self):
		result = WathqClient(base_url='https://wathq.test/cr', api_key='').verify_commercial_registry('1010123456')
		self.assertFalse(result['success'])
		self.assertEqual(result['error'], 'Wathq API key is not configured')

	def test_short_cr_number_rejected_before_request(self):
		with mock.patch.object(self.client.session, 'get') as get:
			result = self.client.verify_commercial_registry('12-34')
		get.assert_not_called()
		self.assertFalse(result['success'])

	def test_not_found_and_auth_errors(self):
		with mock.patch.object(self.client.session, 'get', return_value=_fake_response(404)):
			result = self.client.verify_commercial_registry('1010123456')
		self.assertEqual(result['error'], 'السجل التجاري غير موجود في قاعدة بيانات وثيق')

		with mock.patch.object(self.client.session, 'get', return_value=_fake_response(401)):
			result = self.client.verify_commercial_registry('1010123456')
		self.assertEqual(result['error'], 'خطأ في المصادقة مع وثيق')

		with mock.patch.object(self.client.session, 'get', return_value=_fake_response(500, text='x' * 300)):
			result = self.client.verify_commercial_registry('1010123456')
		self.assertEqual(result['error'], 'خطأ في API: 500')
		self.assertEqual(len(result['message']), 200)

	def test_inactive_company(self):
		payload = {'crNumber': '1010123456', 'name': 'X', 'status': {'name': 'منتهي'}}
		with mock.patch.object(self.client.session, 'get', return_value=_fake_response(200, payload)):
			result = self.client.verify_commercial_registry('1010123456')
		self.assertEqual(result['error'], 'الشركة غير نشطة')

	def test_success_mapping_uses_fallbacks(self):
		payload = {
			'crNumber': '1010123456',
			'name': 'مؤسسة التقنية',
			'status': {'name': 'نشط'},
			'contactInfo': {'phoneNo': '0112345678'},
		}
		with mock.patch.object(self.client.session, 'get', return_value=_fake_response(200, payload)) as get:
			result = self.client.verify_commercial_registry('1010123456')

		self.assertTrue(result['success'])
		data = result['data']
		self.assertEqual(data['companyName'], 'مؤسسة التقنية')
		self.assertEqual(data['city'], 'غير محدد')
		self.assertEqual(data['currency'], 'ريال سعودي')
		self.assertEqual(data['phone'], '0112345678')
		self.assertTrue(data['isActive'])
		self.assertEqual(get.call_args.kwargs['headers'], {'apiKey': 'key'})

	def test_timeout(self):
		with mock.patch.object(self.client.session, 'get', side_effect=requests.Timeout()):
			result = self.client.verify_commercial_registry('1010123456')
		self.assertEqual(result['error'], 'انتهت مهلة الاتصال مع وثيق')

	def test_name_normalization(self):
		self.assertEqual(normalize_company_name('  Code-House   LLC. '), 'codehouse llc')
		self.assertEqual(normalize_company_name('شركة  "التقنية"'), 'شركة التقنية')


class ManagementCommandTests(TestCase):

	def test_create_admin_is_idempotent(self):
		User = get_user_model()
		call_command('create_admin', password='first-pass', stdout=StringIO())
		call_command('create_admin', password='second-pass', stdout=StringIO())

		admin = User.objects.get(username='admin')
		self.assertEqual(User.objects.filter(username='admin').count(), 1)
		self.assertEqual(admin.role, 'admin')
		self.assertTrue(admin.check_password('second-pass'))

	def test_create_admin_requires_password(self):
		with self.assertRaises(CommandError):
			call_command('create_admin', password='', stdout=StringIO())

	def test_seed_data_runs_once(self):
		from cms.models import FeaturedClient, Testimonial
		from projects.models import Project

		call_command('seed_data', entrepreneurs=2, seed=7, stdout=StringIO())
		self.assertEqual(CompanyProfile.objects.count(), 3)
		self.assertEqual(Project.objects.count(), 3)
		self.assertEqual(Testimonial.objects.count(), 2)
		self.assertEqual(FeaturedClient.objects.count(), 6)
		self.assertEqual(
			list(FeaturedClient.objects.values_list('name', flat=True))[0], 'أرامكو السعودية',
		)
		users = get_user_model().objects.count()

		out = StringIO()
		call_command('seed_data', stdout=out)
		self.assertIn('skipping seed', out.getvalue())
		self.assertEqual(get_user_model().objects.count(), users)
		self.assertEqual(FeaturedClient.objects.count(), 6)

	def test_seed_data_force_does_not_duplicate(self):
		from projects.models import Project

		call_command('seed_data', entrepreneurs=0, stdout=StringIO())
		call_command('seed_data', entrepreneurs=0, force=True, stdout=StringIO())
		self.assertEqual(Project.objects.count(), 3)
		self.assertEqual(CompanyProfile.objects.count(), 3)
