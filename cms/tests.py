"""Site content app tests."""

import json

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from cms.models import ContactMessage, FeaturedClient, PremiumClient, SiteSetting


class CmsTestMixin:

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			username='site_admin', email='admin@linktech.app', password='12345678', role='admin', name='Admin',
		)
		cls.company_user = User.objects.create_user(
			username='studio', email='studio@example.com', password='12345678', role='company', name='Studio',
		)

	def client_for(self, user):
		client = APIClient()
		client.force_authenticate(user=user)
		return client


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class SiteSettingTests(CmsTestMixin, TestCase):

	def test_missing_setting_returns_404(self):
		res = APIClient().get('/api/site-settings/about')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.data['message'], 'Setting not found')

	def test_admin_upserts_setting(self):
		client = self.client_for(self.admin)
		res = client.post('/api/site-settings/about', data={'value': 'منصة لينك تك'}, format='json')
		self.assertEqual(res.status_code, 200)
		client.post('/api/site-settings/about', data={'value': 'نسخة ثانية'}, format='json')

		self.assertEqual(SiteSetting.objects.count(), 1)
		res = APIClient().get('/api/site-settings/about')
		self.assertEqual(res.data['value'], 'نسخة ثانية')
		self.assertEqual(len(APIClient().get('/api/site-settings/').data), 1)

	def test_structured_value_round_trips_as_json(self):
		value = {'phone': '+966500000000', 'show': True, 'links': ['x', 'y']}
		res = self.client_for(self.admin).post('/api/site-settings/contact', data={'value': value}, format='json')
		self.assertEqual(res.status_code, 200)

		res = APIClient().get('/api/site-settings/contact')
		self.assertEqual(json.loads(res.content)['value'], value)
		self.assertEqual(SiteSetting.objects.get(key='contact').value, value)

	def test_value_is_required(self):
		res = self.client_for(self.admin).post('/api/site-settings/about', data={}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Value is required')

	def test_non_admin_cannot_write(self):
		res = self.client_for(self.company_user).post('/api/site-settings/about', data={'value': 'x'}, format='json')
		self.assertEqual(res.status_code, 403)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ContactMessageTests(CmsTestMixin, TestCase):

	def _submit(self, **overrides):
		data = {'name': 'خالد', 'email': 'khaled@example.com', 'subject': 'استفسار', 'message': 'أريد معرفة الأسعار'}
		data.update(overrides)
		return APIClient().post('/api/contact-messages/', data=data, format='json')

	def test_public_submission(self):
		res = self._submit()
		self.assertEqual(res.status_code, 201)
		self.assertTrue(res.data['success'])
		self.assertEqual(res.data['contactMessage']['status'], 'new')

	def test_email_must_contain_at(self):
		res = self._submit(email='khaled.example.com')
		self.assertEqual(res.status_code, 400)
		self.assertIn('email', res.data['errors'])

	def test_inbox_is_admin_only(self):
		self._submit()
		self.assertEqual(self.client_for(self.company_user).get('/api/contact-messages/').status_code, 403)
		res = self.client_for(self.admin).get('/api/contact-messages/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 1)

	def test_first_view_marks_read(self):
		contact = ContactMessage.objects.create(name='a', email='a@b.c', message='m')
		res = self.client_for(self.admin).get(f'/api/contact-messages/{contact.id}/')
		self.assertEqual(res.data['status'], 'read')

	def test_status_notes_reply_and_delete(self):
		contact = ContactMessage.objects.create(name='a', email='a@b.c', message='m')
		client = self.client_for(self.admin)
		base = f'/api/contact-messages/{contact.id}'

		self.assertEqual(client.patch(f'{base}/status/', data={'status': 'spam'}, format='json').status_code, 400)
		res = client.patch(f'{base}/status/', data={'status': 'archived'}, format='json')
		self.assertEqual(res.data['status'], 'archived')

		res = client.patch(f'{base}/notes/', data={'notes': 'عميل محتمل'}, format='json')
		self.assertEqual(res.data['notes'], 'عميل محتمل')

		res = client.post(f'{base}/reply/', data={'replyMessage': 'شكراً لتواصلك'}, format='json')
		self.assertEqual(res.data['status'], 'replied')
		self.assertEqual(res.data['reply'], 'شكراً لتواصلك')

		self.assertEqual(client.delete(f'{base}/').status_code, 204)
		self.assertFalse(ContactMessage.objects.exists())


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ClientShowcaseTests(CmsTestMixin, TestCase):

	def test_featured_clients_active_in_order(self):
		FeaturedClient.objects.create(name='B', logo='b.png', order=2)
		FeaturedClient.objects.create(name='A', logo='a.png', order=1)
		FeaturedClient.objects.create(name='Hidden', logo='h.png', order=0, active=False)
		res = APIClient().get('/api/featured-clients/')
		self.assertEqual([c['name'] for c in res.data], ['A', 'B'])

	def test_featured_clients_admin_crud(self):
		payload = {'name': 'أرامكو', 'logo': 'https://example.com/aramco.png', 'order': 1}
		self.assertEqual(
			self.client_for(self.company_user).post('/api/admin/featured-clients/', data=payload, format='json').status_code,
			403,
		)
		res = self.client_for(self.admin).post('/api/admin/featured-clients/', data=payload, format='json')
		self.assertEqual(res.status_code, 201)
		res = self.client_for(self.admin).delete(f"/api/admin/featured-clients/{res.data['id']}/")
		self.assertEqual(res.status_code, 204)

	def test_premium_clients_hide_inactive_from_public(self):
		PremiumClient.objects.create(name='Visible', logo='v.png')
		PremiumClient.objects.create(name='Hidden', logo='h.png', active=False)
		self.assertEqual([c['name'] for c in APIClient().get('/api/premium-clients/').data], ['Visible'])
		self.assertEqual(len(self.client_for(self.admin).get('/api/premium-clients/').data), 2)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class TestimonialTests(CmsTestMixin, TestCase):

	def test_role_is_taken_from_user(self):
		payload = {'content': 'تجربة ممتازة', 'rating': 5, 'role': 'admin', 'company_name': 'Studio'}
		res = self.client_for(self.company_user).post('/api/testimonials/', data=payload, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['role'], 'company')

		res = APIClient().get('/api/testimonials/')
		self.assertEqual(len(res.data), 1)

	def test_anonymous_cannot_post(self):
		res = APIClient().post('/api/testimonials/', data={'content': 'x', 'rating': 5}, format='json')
		self.assertEqual(res.status_code, 401)

	def test_rating_range(self):
		res = self.client_for(self.company_user).post('/api/testimonials/', data={'content': 'x', 'rating': 9}, format='json')
		self.assertEqual(res.status_code, 400)
