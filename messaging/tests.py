"""Messaging app tests: contact filter and message endpoints."""

from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from messaging import content_filter
from messaging.content_filter import check_message, sanitize_message, to_ascii_digits, words_to_digits
from messaging.models import Message
from projects.models import Project


class ContentFilterTests(SimpleTestCase):
	"""Single-message detection."""

	def setUp(self):
		cache.clear()

	def assertViolation(self, text, label):
		result = check_message(text)
		self.assertFalse(result['safe'], text)
		self.assertIn(label, result['violations'])

	def test_clean_text_passes(self):
		for text in ['مرحبا، أود مناقشة تفاصيل المشروع', 'Can we start next week?', '']:
			self.assertEqual(check_message(text), {'safe': True, 'violations': []})

	def test_digit_helpers(self):
		self.assertEqual(to_ascii_digits('٠٥٥١'), '0551')
		self.assertEqual(words_to_digits('صفر خمسة خمسة واحد اثنين ثلاثة اربعة خمسة ستة سبعة'), '0551234567')
		self.assertEqual(words_to_digits('واحد اثنين'), '')

	def test_plain_phone_number(self):
		self.assertViolation('كلمني على 0551234567', 'رقم_هاتف')
		self.assertViolation('+966 55 123 4567', 'رقم_هاتف')

	def test_arabic_indic_phone_number(self):
		self.assertViolation('٠٥٥١٢٣٤٥٦٧', 'رقم_هاتف_عربي')

	def test_phone_spelled_in_arabic_words(self):
		self.assertViolation('صفر خمسة خمسة واحد اثنين ثلاثة اربعة خمسة ستة سبعة', 'رقم_هاتف_مكتوب_نصياً')
		self.assertViolation('خمسة خمسة خمسة خمسة خمسة', 'رقم_محتمل_مكتوب_نصياً')

	def test_email_addresses(self):
		self.assertViolation('ahmed@example.com', 'بريد_إلكتروني')
		self.assertViolation('ahmed [at] example [dot] com', 'بريد_إلكتروني')

	def test_social_handles(self):
		self.assertViolation('تابعني @ahmed_dev', 'حساب_تواصل_اجتماعي')
		self.assertViolation('wa.me/ahmed', 'حساب_تواصل_اجتماعي')
		self.assertViolation('انستا: ahmed.dev', 'حساب_تواصل_اجتماعي')

	def test_external_links(self):
		self.assertViolation('شوف https://mysite.io', 'رابط_خارجي')
		self.assertNotIn('رابط_خارجي', check_message('الكود على https://github.com')['violations'])

	def test_contact_keywords(self):
		self.assertViolation('call me tomorrow', 'محاولة_مشاركة_معلومات_اتصال')
		self.assertViolation('ارسل لي رقم', 'محاولة_مشاركة_معلومات_اتصال')

	def test_sanitize_message(self):
		self.assertEqual(sanitize_message('مرحبا'), 'مرحبا')
		self.assertEqual(
			sanitize_message('call me'),
			'[تم حظر هذه الرسالة لأنها تحتوي على: محاولة_مشاركة_معلومات_اتصال]',
		)


class SequentialDetectionTests(SimpleTestCase):
	"""Numbers split across several messages between the same pair."""

	def setUp(self):
		cache.clear()

	def _send(self, text, sender=1, recipient=2):
		result = check_message(text, sender, recipient)
		if result['safe']:
			content_filter.add_to_history(sender, recipient, text)
		return result

	def test_split_number_is_flagged(self):
		self.assertTrue(self._send('05')['safe'])
		self.assertTrue(self._send('01', sender=2, recipient=1)['safe'])
		result = self._send('23')
		self.assertFalse(result['safe'])
		self.assertEqual(result['violations'], [content_filter.SEQUENTIAL_VIOLATION])

	def test_history_is_per_pair(self):
		self._send('05', sender=1, recipient=2)
		self._send('01', sender=1, recipient=3)
		self.assertTrue(self._send('23', sender=1, recipient=4)['safe'])

	def test_old_messages_are_ignored(self):
		with mock.patch('messaging.content_filter.time.time', return_value=1000.0):
			self._send('05')
			self._send('01')
		with mock.patch('messaging.content_filter.time.time', return_value=1000.0 + 61):
			self.assertTrue(self._send('23')['safe'])

	def test_history_keeps_last_five(self):
		for word in ['a', 'b', 'c', 'd', 'e', 'f']:
			content_filter.add_to_history(1, 2, word)
		history = content_filter.get_history(2, 1)
		self.assertEqual([m['content'] for m in history], ['b', 'c', 'd', 'e', 'f'])


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class MessageApiTests(TestCase):
	"""Message endpoints."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.alice = User.objects.create_user(
			username='alice', email='alice@example.com', password='12345678', role='entrepreneur', name='Alice',
		)
		cls.bob = User.objects.create_user(
			username='bobco', email='bob@example.com', password='12345678', role='company', name='Bob',
		)
		cls.carol = User.objects.create_user(
			username='carol', email='carol@example.com', password='12345678', role='entrepreneur', name='Carol',
		)
		cls.project = Project.objects.create(owner=cls.alice, title='تطبيق', description='d', budget='1', duration='1')

	def setUp(self):
		cache.clear()
		self.client = APIClient()
		self.client.force_authenticate(user=self.alice)

	def test_send_message(self):
		res = self.client.post(
			'/api/messages/', data={'toUserId': self.bob.id, 'content': 'مرحبا', 'projectId': self.project.id}, format='json',
		)
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['from_user'], self.alice.id)
		self.assertEqual(res.data['project'], self.project.id)

	def test_blocked_message_is_not_saved(self):
		res = self.client.post('/api/messages/', data={'toUserId': self.bob.id, 'content': 'ahmed@example.com'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertTrue(res.data['error'])
		self.assertEqual(res.data['message'], 'الرسالة تحتوي على معلومات اتصال محظورة')
		self.assertIn('بريد_إلكتروني', res.data['violations'])
		self.assertFalse(Message.objects.exists())

	def test_split_number_answers_sequential_message(self):
		for part in ['05', '01']:
			self.client.post('/api/messages/', data={'toUserId': self.bob.id, 'content': part}, format='json')
		res = self.client.post('/api/messages/', data={'toUserId': self.bob.id, 'content': '23'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'تم رصد محاولة لتمرير معلومات اتصال عبر عدة رسائل')

	def test_unknown_recipient(self):
		res = self.client.post('/api/messages/', data={'toUserId': 99999, 'content': 'مرحبا'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('toUserId', res.data['errors'])

	def test_list_and_conversation(self):
		Message.objects.create(content='1st', from_user=self.alice, to_user=self.bob)
		Message.objects.create(content='2nd', from_user=self.bob, to_user=self.alice, project=self.project)
		Message.objects.create(content='other', from_user=self.carol, to_user=self.bob)

		res = self.client.get('/api/messages/')
		self.assertEqual([m['content'] for m in res.data], ['2nd', '1st'])

		res = self.client.get(f'/api/messages/conversation/{self.bob.id}/')
		self.assertEqual([m['content'] for m in res.data], ['1st', '2nd'])

		res = self.client.get(f'/api/messages/conversation/{self.bob.id}/?projectId={self.project.id}')
		self.assertEqual([m['content'] for m in res.data], ['2nd'])

	def test_conversation_rejects_non_numeric_project(self):
		res = self.client.get(f'/api/messages/conversation/{self.bob.id}/?projectId=abc')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Invalid project ID')

	def test_mark_read_and_unread_count(self):
		incoming = Message.objects.create(content='hi', from_user=self.bob, to_user=self.alice)
		outgoing = Message.objects.create(content='hey', from_user=self.alice, to_user=self.bob)

		self.assertEqual(self.client.get('/api/messages/unread-count/').data, {'count': 1})

		res = self.client.patch(f'/api/messages/{outgoing.id}/read/')
		self.assertEqual(res.status_code, 404)

		res = self.client.patch(f'/api/messages/{incoming.id}/read/')
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.data['read'])
		self.assertEqual(self.client.get('/api/messages/unread-count/').data, {'count': 0})
