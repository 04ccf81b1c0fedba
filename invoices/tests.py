"""Invoices app tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import CompanyProfile
from finance.models import PaymentStatus, Transaction
from invoices.models import Invoice
from offers.models import Offer
from projects.models import Project


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class InvoiceSignalTests(TestCase):
	"""Invoice issuance on successful deposit transactions."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(
			username='owner_one', email='owner@example.com', password='12345678', role='entrepreneur', name='Owner',
		)
		cls.company_user = User.objects.create_user(
			username='studio', email='studio@example.com', password='12345678', role='company', name='Studio',
		)
		cls.outsider = User.objects.create_user(
			username='outsider', email='out@example.com', password='12345678', role='company', name='Out',
		)
		company = CompanyProfile.objects.create(user=cls.company_user, description='studio')
		project = Project.objects.create(owner=cls.owner, title='تطبيق', description='d', budget='1', duration='1')
		cls.offer = Offer.objects.create(
			project=project, company=company, amount='5000', duration='شهر', description='x', status='accepted',
		)

	def _mark_success(self):
		tx = Transaction.objects.get(offer=self.offer)
		tx.payment_status = PaymentStatus.named(PaymentStatus.SUCCESS)
		tx.save()
		return tx

	def test_no_invoice_while_pending(self):
		self.assertFalse(Invoice.objects.filter(offer=self.offer).exists())

	def test_invoice_created_once_on_success(self):
		tx = self._mark_success()
		tx.save()
		invoices = Invoice.objects.filter(offer=self.offer)
		self.assertEqual(invoices.count(), 1)
		invoice = invoices.get()
		self.assertRegex(invoice.invoice_number, rf'^INV-{self.offer.id}-[0-9A-F]{{4}}$')
		self.assertEqual(invoice.amount, tx.amount)

	def test_invoice_list_is_scoped(self):
		self._mark_success()

		client = APIClient()
		client.force_authenticate(user=self.owner)
		res = client.get('/api/invoices/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(len(res.data), 1)
		self.assertEqual(res.data[0]['company_name'], 'Studio')

		client.force_authenticate(user=self.company_user)
		self.assertEqual(len(client.get('/api/invoices/').data), 1)

		client.force_authenticate(user=self.outsider)
		self.assertEqual(client.get('/api/invoices/').data, [])

	def test_invoice_list_requires_authentication(self):
		res = APIClient().get('/api/invoices/')
		self.assertEqual(res.status_code, 401)
