"""Offers app tests: visibility, submission and the deposit workflow."""

from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import CompanyProfile
from finance.models import PaymentStatus, Transaction
from invoices.models import Invoice
from messaging.models import Message
from offers.models import Offer
from projects.models import Project


class OfferTestMixin:

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(
			username='owner_one', email='owner@example.com', password='12345678', role='entrepreneur', name='Sara',
		)
		cls.stranger = User.objects.create_user(
			username='owner_two', email='other@example.com', password='12345678', role='entrepreneur', name='Other',
		)
		cls.company_user = User.objects.create_user(
			username='studio', email='studio@example.com', password='12345678', role='company', name='Studio',
		)
		cls.rival_user = User.objects.create_user(
			username='rival', email='rival@example.com', password='12345678', role='company', name='Rival',
		)
		cls.bare_company = User.objects.create_user(
			username='bare', email='bare@example.com', password='12345678', role='company', name='Bare',
		)
		cls.company = CompanyProfile.objects.create(user=cls.company_user, description='studio', rating=4, verified=True)
		cls.rival = CompanyProfile.objects.create(user=cls.rival_user, description='rival')

		cls.project = Project.objects.create(
			owner=cls.owner, title='متجر إلكتروني', description='متجر', budget='5000 - 10000 ريال',
			duration='3 أشهر', skills=['React'],
		)

	def client_for(self, user):
		client = APIClient()
		client.force_authenticate(user=user)
		return client

	def make_offer(self, company=None, amount='12,345 ريال', **kwargs):
		return Offer.objects.create(
			project=self.project, company=company or self.company, amount=amount,
			duration='شهرين', description='عرض', **kwargs,
		)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ProjectOffersTests(OfferTestMixin, TestCase):
	"""Listing and submitting offers on a project."""

	def test_unknown_project_returns_404(self):
		res = APIClient().get('/api/projects/99999/offers/')
		self.assertEqual(res.status_code, 404)

	def test_anonymous_sees_only_statistics(self):
		self.make_offer(amount='10000 ريال')
		self.make_offer(company=self.rival, amount='8,000 SAR')
		res = APIClient().get(f'/api/projects/{self.project.id}/offers/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data, {'count': 2, 'minAmount': 8000, 'maxAmount': 10000})

	def test_statistics_without_offers_are_null(self):
		res = APIClient().get(f'/api/projects/{self.project.id}/offers/')
		self.assertEqual(res.data, {'count': 0, 'minAmount': None, 'maxAmount': None})

	def test_owner_sees_masked_company_names(self):
		self.make_offer()
		res = self.client_for(self.owner).get(f'/api/projects/{self.project.id}/offers/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(len(res.data), 1)
		self.assertEqual(res.data[0]['companyName'], 'شركة S****')
		self.assertTrue(res.data[0]['companyVerified'])
		self.assertEqual(res.data[0]['companyRating'], 4)

	def test_owner_sees_real_name_after_contact_revealed(self):
		self.make_offer(contact_revealed=True)
		res = self.client_for(self.owner).get(f'/api/projects/{self.project.id}/offers/')
		self.assertEqual(res.data[0]['companyName'], 'Studio')

	def test_company_sees_only_its_own_offers(self):
		own = self.make_offer()
		self.make_offer(company=self.rival)
		res = self.client_for(self.company_user).get(f'/api/projects/{self.project.id}/offers/')
		self.assertEqual([o['id'] for o in res.data], [own.id])

	def test_company_without_profile_is_forbidden(self):
		res = self.client_for(self.bare_company).get(f'/api/projects/{self.project.id}/offers/')
		self.assertEqual(res.status_code, 403)
		self.assertEqual(res.data['message'], 'Company profile not found')

	def test_company_submits_offer_once(self):
		client = self.client_for(self.company_user)
		payload = {'amount': '15000 ريال', 'duration': 'شهر', 'description': 'نستطيع التنفيذ'}
		res = client.post(f'/api/projects/{self.project.id}/offers/', data=payload, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['status'], 'pending')
		self.assertEqual(res.data['company'], self.company.id)

		res = client.post(f'/api/projects/{self.project.id}/offers/', data=payload, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'You have already submitted an offer for this project')

	def test_entrepreneur_cannot_submit_offer(self):
		payload = {'amount': '1000', 'duration': 'شهر', 'description': 'x'}
		res = self.client_for(self.stranger).post(f'/api/projects/{self.project.id}/offers/', data=payload, format='json')
		self.assertEqual(res.status_code, 403)
		self.assertEqual(res.data['message'], 'Only companies can submit offers')

	def test_closed_project_rejects_offers(self):
		Project.objects.filter(pk=self.project.pk).update(status='in-progress')
		payload = {'amount': '1000', 'duration': 'شهر', 'description': 'x'}
		res = self.client_for(self.company_user).post(f'/api/projects/{self.project.id}/offers/', data=payload, format='json')
		self.assertEqual(res.status_code, 400)

	def test_mine_lists_company_offers(self):
		offer = self.make_offer()
		res = self.client_for(self.company_user).get('/api/offers/mine/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([o['id'] for o in res.data], [offer.id])
		self.assertEqual(res.data[0]['project_title'], self.project.title)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'], MOYASAR_SECRET_KEY='')
class OfferWorkflowTests(OfferTestMixin, TestCase):
	"""Accept, reject, pay-deposit and complete."""

	def test_accept_computes_ten_percent_deposit(self):
		offer = self.make_offer(amount='12,345 ريال')
		res = self.client_for(self.owner).patch(f'/api/offers/{offer.id}/accept/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'accepted')
		self.assertEqual(res.data['depositAmount'], '1235')
		self.assertTrue(res.data['paymentRequired'])

		tx = Transaction.objects.get(offer=offer)
		self.assertEqual(tx.payment_status.status, PaymentStatus.PENDING)
		self.assertEqual(int(tx.amount), 1235)

	def test_only_owner_can_accept(self):
		offer = self.make_offer()
		res = self.client_for(self.company_user).patch(f'/api/offers/{offer.id}/accept/')
		self.assertEqual(res.status_code, 403)
		self.assertEqual(res.data['message'], 'Only the project owner can accept offers')

		res = self.client_for(self.stranger).patch(f'/api/offers/{offer.id}/accept/')
		self.assertEqual(res.status_code, 404)

	def test_reject_cancels_pending_transaction(self):
		offer = self.make_offer()
		client = self.client_for(self.owner)
		client.patch(f'/api/offers/{offer.id}/accept/')
		res = client.patch(f'/api/offers/{offer.id}/reject/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'rejected')
		self.assertEqual(Transaction.objects.get(offer=offer).payment_status.status, PaymentStatus.CANCELLED)

		res = client.patch(f'/api/offers/{offer.id}/accept/')
		self.assertEqual(res.status_code, 400)

	def test_pay_deposit_requires_payment_fields(self):
		offer = self.make_offer(status='accepted')
		res = self.client_for(self.owner).post(f'/api/offers/{offer.id}/pay-deposit/', data={}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Payment ID and deposit amount are required')

	def test_pay_deposit_rejects_pending_offer(self):
		offer = self.make_offer()
		res = self.client_for(self.owner).post(
			f'/api/offers/{offer.id}/pay-deposit/', data={'paymentId': 'pay_1', 'depositAmount': '1234'}, format='json',
		)
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Invalid offer status or deposit already paid')

	def test_pay_deposit_reveals_contact_and_issues_one_invoice(self):
		offer = self.make_offer()
		client = self.client_for(self.owner)
		client.patch(f'/api/offers/{offer.id}/accept/')

		res = client.post(
			f'/api/offers/{offer.id}/pay-deposit/', data={'paymentId': 'pay_1', 'depositAmount': '1234'}, format='json',
		)
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.data['success'])
		self.assertEqual(res.data['companyContact'], {'name': 'Studio', 'email': 'studio@example.com'})
		self.assertEqual(res.data['offer']['companyName'], 'Studio')

		offer.refresh_from_db()
		self.assertTrue(offer.deposit_paid)
		self.assertTrue(offer.contact_revealed)
		# the stored deposit is the computed one, not the client's figure
		self.assertEqual(offer.deposit_amount, '1235')
		self.assertIsNotNone(offer.deposit_date)

		self.project.refresh_from_db()
		self.assertEqual(self.project.status, 'in-progress')

		tx = Transaction.objects.get(offer=offer)
		self.assertEqual(tx.payment_status.status, PaymentStatus.SUCCESS)
		self.assertEqual(tx.provider_reference, 'pay_1')
		self.assertEqual(int(tx.amount), 1235)

		msg = Message.objects.get(to_user=self.company_user)
		self.assertEqual(msg.from_user, self.owner)
		self.assertIn('owner@example.com', msg.content)
		self.assertIn('Sara', msg.content)

		invoice = Invoice.objects.get(offer=offer)
		self.assertTrue(invoice.invoice_number.startswith(f'INV-{offer.id}-'))

		# second submission is refused and nothing is duplicated
		res = client.post(
			f'/api/offers/{offer.id}/pay-deposit/', data={'paymentId': 'pay_2', 'depositAmount': '1234'}, format='json',
		)
		self.assertEqual(res.status_code, 400)
		self.assertEqual(Invoice.objects.filter(offer=offer).count(), 1)
		self.assertEqual(Message.objects.filter(to_user=self.company_user).count(), 1)

	@override_settings(MOYASAR_SECRET_KEY='sk_test_123')
	def test_pay_deposit_checks_moyasar_payment_status(self):
		offer = self.make_offer(status='accepted')
		with mock.patch('offers.views.MoyasarClient.get_payment', return_value={'id': 'pay_1', 'status': 'failed'}):
			res = self.client_for(self.owner).post(
				f'/api/offers/{offer.id}/pay-deposit/', data={'paymentId': 'pay_1', 'depositAmount': '1234'}, format='json',
			)
		self.assertEqual(res.status_code, 400)
		offer.refresh_from_db()
		self.assertFalse(offer.deposit_paid)

	@override_settings(MOYASAR_SECRET_KEY='sk_test_123')
	def test_pay_deposit_rejects_underpaid_moyasar_payment(self):
		offer = self.make_offer(amount='12,345 ريال', status='accepted')
		payment = {'id': 'pay_1', 'status': 'paid', 'amount': 100, 'currency': 'SAR'}
		with mock.patch('offers.views.MoyasarClient.get_payment', return_value=payment):
			res = self.client_for(self.owner).post(
				f'/api/offers/{offer.id}/pay-deposit/', data={'paymentId': 'pay_1', 'depositAmount': '1'}, format='json',
			)
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Payment amount does not cover the required deposit')
		offer.refresh_from_db()
		self.assertFalse(offer.deposit_paid)
		self.assertFalse(offer.contact_revealed)

	@override_settings(MOYASAR_SECRET_KEY='sk_test_123')
	def test_pay_deposit_rejects_foreign_currency(self):
		offer = self.make_offer(amount='12,345 ريال', status='accepted')
		payment = {'id': 'pay_1', 'status': 'paid', 'amount': 123500, 'currency': 'USD'}
		with mock.patch('offers.views.MoyasarClient.get_payment', return_value=payment):
			res = self.client_for(self.owner).post(
				f'/api/offers/{offer.id}/pay-deposit/', data={'paymentId': 'pay_1', 'depositAmount': '1235'}, format='json',
			)
		self.assertEqual(res.status_code, 400)
		offer.refresh_from_db()
		self.assertFalse(offer.deposit_paid)

	@override_settings(MOYASAR_SECRET_KEY='sk_test_123')
	def test_pay_deposit_stores_verified_moyasar_amount(self):
		offer = self.make_offer(amount='12,345 ريال', status='accepted')
		payment = {'id': 'pay_1', 'status': 'paid', 'amount': 123500, 'currency': 'SAR'}
		with mock.patch('offers.views.MoyasarClient.get_payment', return_value=payment):
			res = self.client_for(self.owner).post(
				f'/api/offers/{offer.id}/pay-deposit/', data={'paymentId': 'pay_1', 'depositAmount': '1'}, format='json',
			)
		self.assertEqual(res.status_code, 200)
		offer.refresh_from_db()
		self.assertTrue(offer.contact_revealed)
		self.assertEqual(offer.deposit_amount, '1235')
		self.assertEqual(int(Transaction.objects.get(offer=offer).amount), 1235)

	def test_pay_deposit_rejects_reused_payment_id(self):
		first = self.make_offer()
		second = self.make_offer(company=self.rival)
		client = self.client_for(self.owner)
		client.patch(f'/api/offers/{first.id}/accept/')
		client.patch(f'/api/offers/{second.id}/accept/')

		res = client.post(
			f'/api/offers/{first.id}/pay-deposit/', data={'paymentId': 'pay_1', 'depositAmount': '1235'}, format='json',
		)
		self.assertEqual(res.status_code, 200)

		res = client.post(
			f'/api/offers/{second.id}/pay-deposit/', data={'paymentId': 'pay_1', 'depositAmount': '1235'}, format='json',
		)
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Payment has already been used for another offer')
		second.refresh_from_db()
		self.assertFalse(second.deposit_paid)
		self.assertFalse(second.contact_revealed)
		self.assertEqual(Transaction.objects.filter(provider_reference='pay_1').count(), 1)

	def test_repeat_accept_is_a_no_op(self):
		offer = self.make_offer()
		client = self.client_for(self.owner)
		client.patch(f'/api/offers/{offer.id}/accept/')
		res = client.patch(f'/api/offers/{offer.id}/accept/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'accepted')
		self.assertEqual(Transaction.objects.filter(offer=offer).count(), 1)

	def test_completed_offer_cannot_be_rejected(self):
		offer = self.make_offer(status='completed', deposit_paid=True)
		res = self.client_for(self.owner).patch(f'/api/offers/{offer.id}/reject/')
		self.assertEqual(res.status_code, 400)
		offer.refresh_from_db()
		self.assertEqual(offer.status, 'completed')

	def test_rejected_offer_cannot_be_completed(self):
		offer = self.make_offer(status='rejected', deposit_paid=True)
		res = self.client_for(self.owner).patch(f'/api/offers/{offer.id}/complete/')
		self.assertEqual(res.status_code, 400)
		offer.refresh_from_db()
		self.assertEqual(offer.status, 'rejected')

	def test_complete_requires_paid_deposit(self):
		offer = self.make_offer(status='accepted')
		client = self.client_for(self.owner)
		res = client.patch(f'/api/offers/{offer.id}/complete/')
		self.assertEqual(res.status_code, 400)

		Offer.objects.filter(pk=offer.pk).update(deposit_paid=True)
		res = client.patch(f'/api/offers/{offer.id}/complete/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'completed')
		self.project.refresh_from_db()
		self.assertEqual(self.project.status, 'completed')

	def test_admin_marking_transaction_success_reveals_contact(self):
		offer = self.make_offer()
		self.client_for(self.owner).patch(f'/api/offers/{offer.id}/accept/')

		tx = Transaction.objects.get(offer=offer)
		tx.payment_status = PaymentStatus.named(PaymentStatus.SUCCESS)
		tx.save()

		offer.refresh_from_db()
		self.assertTrue(offer.contact_revealed)
		self.assertEqual(Invoice.objects.filter(offer=offer).count(), 1)
		self.assertEqual(Message.objects.filter(to_user=self.company_user).count(), 1)
