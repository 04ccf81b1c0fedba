"""Finance app tests: Moyasar client and payment endpoints."""

from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import CompanyProfile
from finance.models import PaymentStatus, Transaction
from finance.moyasar import MoyasarClient, MoyasarError, to_halalas
from offers.models import Offer
from projects.models import Project


def _response(status_code, payload=None, text=''):
	resp = mock.Mock()
	resp.status_code = status_code
	resp.ok = 200 <= status_code < 300
	resp.json.return_value = payload or {}
	resp.text = text
	if resp.ok:
		resp.raise_for_status.return_value = None
	else:
		resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
	return resp


@override_settings(FRONTEND_URL='https://linktech.app', DEBUG=False)
class MoyasarClientTests(SimpleTestCase):
	"""Halala conversion, URL validation and error mapping."""

	def setUp(self):
		self.client = MoyasarClient(secret_key='sk_test_123', base_url='https://api.moyasar.com/v1')

	def test_to_halalas_rounds(self):
		self.assertEqual(to_halalas(10), 1000)
		self.assertEqual(to_halalas('12.345'), 1235)
		self.assertEqual(to_halalas(0.1), 10)

	def test_session_uses_basic_auth(self):
		self.assertEqual(self.client.session.auth, ('sk_test_123', ''))

	def test_create_payment_sends_halalas_and_default_callback(self):
		with mock.patch.object(self.client.session, 'request', return_value=_response(201, {'id': 'pay_1'})) as req:
			result = self.client.create_payment(25.5)
		self.assertEqual(result, {'id': 'pay_1'})
		method, url = req.call_args.args
		payload = req.call_args.kwargs['json']
		self.assertEqual((method, url), ('POST', 'https://api.moyasar.com/v1/payments'))
		self.assertEqual(payload['amount'], 2550)
		self.assertEqual(payload['currency'], 'SAR')
		self.assertEqual(payload['callback_url'], 'https://linktech.app/payment/success')
		self.assertEqual(payload['source'], {'type': 'creditcard'})

	def test_confirm_payment_puts_source(self):
		source = {'type': 'creditcard', 'token': 'tok_1'}
		with mock.patch.object(self.client.session, 'request', return_value=_response(200, {'id': 'pay_1', 'status': 'paid'})) as req:
			result = self.client.confirm_payment('pay_1', source)
		self.assertEqual(result['status'], 'paid')
		method, url = req.call_args.args
		self.assertEqual((method, url), ('PUT', 'https://api.moyasar.com/v1/payments/pay_1'))
		self.assertEqual(req.call_args.kwargs['json'], {'source': source})
		self.assertEqual(req.call_args.kwargs['timeout'], 15)

	def test_get_invoice_fetches_by_id(self):
		with mock.patch.object(self.client.session, 'request', return_value=_response(200, {'id': 'inv_1', 'status': 'paid'})) as req:
			result = self.client.get_invoice('inv_1')
		self.assertEqual(result, {'id': 'inv_1', 'status': 'paid'})
		self.assertEqual(req.call_args.args, ('GET', 'https://api.moyasar.com/v1/invoices/inv_1'))

	def test_get_invoice_failure_raises(self):
		with mock.patch.object(self.client.session, 'request', return_value=_response(404, text='not found')):
			with self.assertRaisesMessage(MoyasarError, 'فشل في استرجاع تفاصيل الفاتورة'):
				self.client.get_invoice('inv_missing')

	def test_list_payments_drops_empty_filters(self):
		with mock.patch.object(self.client.session, 'request', return_value=_response(200, {'payments': []})) as req:
			self.client.list_payments(status='paid', page=None)
		self.assertEqual(req.call_args.kwargs['params'], {'status': 'paid'})

	def test_payment_failure_raises(self):
		with mock.patch.object(self.client.session, 'request', return_value=_response(500, text='boom')):
			with self.assertRaises(MoyasarError):
				self.client.get_payment('pay_1')

	def test_create_invoice_payload(self):
		with mock.patch.object(self.client.session, 'post', return_value=_response(201, {'id': 'inv_1', 'url': 'https://pay'})) as post:
			result = self.client.create_invoice(150, description='x' * 300, offer_id=7, project_id=3)
		self.assertEqual(result['id'], 'inv_1')
		payload = post.call_args.kwargs['json']
		self.assertEqual(payload['amount'], 15000)
		self.assertEqual(len(payload['description']), 255)
		self.assertEqual(payload['back_url'], 'https://linktech.app/projects/3')
		self.assertEqual(payload['metadata'], {'offer_id': '7', 'project_id': '3', 'platform': 'linktech'})
		self.assertEqual(post.call_args.kwargs['timeout'], 30)

	def test_create_invoice_back_url_defaults_to_dashboard(self):
		with mock.patch.object(self.client.session, 'post', return_value=_response(201, {'id': 'inv_1'})) as post:
			self.client.create_invoice(10)
		self.assertEqual(post.call_args.kwargs['json']['back_url'], 'https://linktech.app/dashboard')

	def test_create_invoice_validates_amount_and_key(self):
		with self.assertRaisesMessage(MoyasarError, 'Minimum amount is 1 SAR'):
			self.client.create_invoice(0.5)
		with self.assertRaisesMessage(MoyasarError, 'Invalid payment amount'):
			self.client.create_invoice(0)
		with self.assertRaisesMessage(MoyasarError, 'Moyasar API key is not configured'):
			MoyasarClient(secret_key='').create_invoice(10)

	@override_settings(FRONTEND_URL='http://localhost:5173')
	def test_create_invoice_requires_https_outside_debug(self):
		with mock.patch.object(self.client.session, 'post') as post:
			with self.assertRaisesMessage(MoyasarError, 'Moyasar requires HTTPS URLs in production'):
				self.client.create_invoice(10)
		post.assert_not_called()

	@override_settings(FRONTEND_URL='http://localhost:5173', DEBUG=True)
	def test_http_urls_allowed_in_debug(self):
		with mock.patch.object(self.client.session, 'post', return_value=_response(201, {'id': 'inv_1'})):
			self.assertEqual(self.client.create_invoice(10)['id'], 'inv_1')

	def test_create_invoice_error_mapping(self):
		cases = [
			(_response(401), 'Moyasar API key is invalid or expired'),
			(_response(400, {'message': 'amount is invalid'}), 'Moyasar validation error: amount is invalid'),
			(_response(403), 'Moyasar API access forbidden - check account status'),
		]
		for resp, message in cases:
			with mock.patch.object(self.client.session, 'post', return_value=resp):
				with self.assertRaisesMessage(MoyasarError, message):
					self.client.create_invoice(10)

		with mock.patch.object(self.client.session, 'post', side_effect=requests.Timeout()):
			with self.assertRaisesMessage(MoyasarError, 'Moyasar API request timed out'):
				self.client.create_invoice(10)
		with mock.patch.object(self.client.session, 'post', side_effect=requests.ConnectionError()):
			with self.assertRaisesMessage(MoyasarError, 'Cannot connect to Moyasar API'):
				self.client.create_invoice(10)


@override_settings(
	ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'],
	MOYASAR_SECRET_KEY='sk_test_123',
	FRONTEND_URL='https://linktech.app',
)
class PaymentApiTests(TestCase):
	"""Transactions listing and the Moyasar invoice/refund endpoints."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(
			username='owner_one', email='owner@example.com', password='12345678', role='entrepreneur', name='Owner',
		)
		cls.other = User.objects.create_user(
			username='owner_two', email='other@example.com', password='12345678', role='entrepreneur', name='Other',
		)
		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin', name='Admin',
		)
		company_user = User.objects.create_user(
			username='studio', email='studio@example.com', password='12345678', role='company', name='Studio',
		)
		company = CompanyProfile.objects.create(user=company_user, description='studio')
		project = Project.objects.create(
			owner=cls.owner, title='تطبيق', description='d', budget='1', duration='1',
		)
		cls.offer = Offer.objects.create(
			project=project, company=company, amount='20000 ريال', duration='شهر', description='x', status='accepted',
		)

	def client_for(self, user):
		client = APIClient()
		client.force_authenticate(user=user)
		return client

	def test_transactions_are_scoped_to_participants(self):
		res = self.client_for(self.owner).get('/api/transactions/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([t['offer'] for t in res.data], [self.offer.id])
		self.assertEqual(res.data[0]['status'], 'Pending')

		res = self.client_for(self.other).get('/api/transactions/')
		self.assertEqual(res.data, [])

		res = self.client_for(self.admin).get('/api/transactions/')
		self.assertEqual(len(res.data), 1)

	def test_create_offer_invoice_stores_reference(self):
		invoice = {'id': 'inv_42', 'url': 'https://checkout.moyasar.com/invoices/inv_42'}
		with mock.patch('finance.views.MoyasarClient.create_invoice', return_value=invoice) as create:
			res = self.client_for(self.owner).post(f'/api/payments/offers/{self.offer.id}/invoice/')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data, {'invoiceId': 'inv_42', 'url': invoice['url'], 'amount': 2000})
		self.assertEqual(create.call_args.args[0], 2000)

		tx = Transaction.objects.get(offer=self.offer)
		self.assertEqual(tx.moyasar_invoice_id, 'inv_42')
		self.assertEqual(tx.invoice_url, invoice['url'])

	def test_create_offer_invoice_forbidden_for_strangers(self):
		res = self.client_for(self.other).post(f'/api/payments/offers/{self.offer.id}/invoice/')
		self.assertEqual(res.status_code, 403)

	def test_moyasar_failure_answers_502(self):
		with mock.patch('finance.views.MoyasarClient.create_invoice', side_effect=MoyasarError('Moyasar API request timed out')):
			res = self.client_for(self.owner).post(f'/api/payments/offers/{self.offer.id}/invoice/')
		self.assertEqual(res.status_code, 502)
		self.assertEqual(res.data['message'], 'Moyasar API request timed out')

	def test_refund_is_admin_only_and_marks_transaction(self):
		Transaction.objects.filter(offer=self.offer).update(provider_reference='pay_9')

		res = self.client_for(self.owner).post('/api/payments/pay_9/refund/')
		self.assertEqual(res.status_code, 403)

		with mock.patch('finance.views.MoyasarClient.refund_payment', return_value={'id': 'pay_9', 'status': 'refunded'}):
			res = self.client_for(self.admin).post('/api/payments/pay_9/refund/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'refunded')
		tx = Transaction.objects.get(offer=self.offer)
		self.assertEqual(tx.payment_status.status, PaymentStatus.REFUNDED)
