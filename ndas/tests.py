"""NDA app tests: Sadiq client and the two-stage NDA workflow."""

from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import CompanyProfile
from messaging.models import Message
from ndas import sadiq
from ndas.documents import render_nda_pdf
from ndas.models import NdaAgreement
from ndas.sadiq import SadiqClient, SadiqError, format_phone_number
from offers.models import Offer
from projects.models import Project

SADIQ_SETTINGS = dict(
	SADIQ_BASE_URL='https://sandbox-api.sadq-sa.com',
	SADIQ_ACCOUNT_ID='acc',
	SADIQ_ACCOUNT_SECRET='secret',
	SADIQ_CLIENT_AUTH='Y2xpZW50',
	SADIQ_EMAIL='ops@linktech.app',
	SADIQ_PASSWORD='pw',
	SADIQ_WEBHOOK_URL='',
	SADIQ_WEBHOOK_TOKEN='hook-token',
)


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


class PhoneFormatTests(SimpleTestCase):

	def test_format_phone_number(self):
		self.assertEqual(format_phone_number('+96651234567'), '+96651234567')
		self.assertEqual(format_phone_number('+966 51-234 567'), '+96651234567')
		self.assertEqual(format_phone_number('0096651234567'), '+96651234567')
		self.assertEqual(format_phone_number('0551234567'), '+96655123456')
		self.assertEqual(format_phone_number('0111234567'), '+96611123456')
		self.assertEqual(format_phone_number('12345'), '')
		self.assertEqual(format_phone_number(''), '')


@override_settings(**SADIQ_SETTINGS)
class SadiqClientTests(SimpleTestCase):
	"""Token caching, document upload and invitations."""

	def setUp(self):
		sadiq.clear_token_cache()
		self.client = SadiqClient()

	def tearDown(self):
		sadiq.clear_token_cache()

	def test_missing_credentials_raise(self):
		with override_settings(SADIQ_ACCOUNT_ID=''):
			with self.assertRaisesMessage(SadiqError, 'Sadiq credentials are not configured'):
				self.client.authenticate()

	def test_token_is_form_encoded_and_cached(self):
		token = _response(200, {'access_token': 'tok', 'expires_in': 3600})
		with mock.patch.object(self.client.session, 'post', return_value=token) as post:
			self.assertEqual(self.client.get_access_token(), 'tok')
			self.assertEqual(SadiqClient().get_access_token(), 'tok')
		self.assertEqual(post.call_count, 1)
		url = post.call_args.args[0]
		self.assertEqual(url, 'https://sandbox-api.sadq-sa.com/Authentication/Authority/Token')
		self.assertEqual(post.call_args.kwargs['data']['grant_type'], 'integration')
		self.assertEqual(post.call_args.kwargs['headers']['Authorization'], 'Basic Y2xpZW50')

	def test_expired_token_is_refreshed(self):
		token = _response(200, {'access_token': 'tok', 'expires_in': 3600})
		with mock.patch.object(self.client.session, 'post', return_value=token) as post:
			with mock.patch('ndas.sadiq.time.time', return_value=1000.0):
				self.client.get_access_token()
			with mock.patch('ndas.sadiq.time.time', return_value=1000.0 + 3600):
				self.client.get_access_token()
		self.assertEqual(post.call_count, 2)

	def test_token_error_payload_raises(self):
		with mock.patch.object(self.client.session, 'post', return_value=_response(200, {'error': 'invalid_grant'})):
			with self.assertRaises(SadiqError):
				self.client.authenticate()

	def test_upload_document_id_fallbacks(self):
		cases = [
			({'data': {'documentId': 'doc-1'}}, 'doc-1'),
			({'id': 'doc-2'}, 'doc-2'),
			({'data': {'bulkFileResponse': [{'fileId': 'doc-3'}]}}, 'doc-3'),
		]
		for payload, expected in cases:
			with mock.patch.object(SadiqClient, 'get_access_token', return_value='tok'), \
					mock.patch.object(SadiqClient, 'get_or_create_webhook', return_value='hook'), \
					mock.patch.object(self.client.session, 'request', return_value=_response(200, payload)) as req:
				result = self.client.upload_document('UEZE', 'nda.pdf')
			self.assertEqual(result['id'], expected)
			self.assertTrue(result['referenceNumber'].startswith('linktech-nda-project-'))
			body = req.call_args.kwargs['json']
			self.assertEqual(body['webhookId'], 'hook')
			self.assertEqual(body['files'], [{'file': 'UEZE', 'fileName': 'nda.pdf', 'password': ''}])

	def test_upload_document_falls_back_to_reference(self):
		with mock.patch.object(SadiqClient, 'get_access_token', return_value='tok'), \
				mock.patch.object(SadiqClient, 'get_or_create_webhook', return_value='hook'), \
				mock.patch.object(self.client.session, 'request', return_value=_response(200, {})):
			result = self.client.upload_document('UEZE', 'nda.pdf')
		self.assertEqual(result['id'], result['referenceNumber'])

	def test_send_signing_invitations(self):
		signers = [
			{'name': 'Sara', 'email': 'sara@example.com', 'phone': '+96651234567'},
			{'name': 'Ahmed', 'email': 'ahmed@example.com', 'phone': '+96655123456'},
		]
		reply = _response(200, {'errorCode': 0, 'data': {'envelopeId': 'env-1'}})
		with mock.patch.object(SadiqClient, 'get_access_token', return_value='tok'), \
				mock.patch.object(self.client.session, 'request', return_value=reply) as req:
			result = self.client.send_signing_invitations('doc-1', signers, 'متجر')
		self.assertEqual(result, {'envelopeId': 'env-1'})
		body = req.call_args.kwargs['json']
		self.assertEqual(body['documentId'], 'doc-1')
		self.assertEqual([d['signeOrder'] for d in body['destinations']], [0, 1])
		self.assertEqual([d['signatories'][0]['positionX'] for d in body['destinations']], [70, 270])
		self.assertEqual(body['invitationSubject'], 'توقيع اتفاقية عدم الإفصاح - مشروع متجر')
		self.assertEqual(req.call_args.kwargs['headers'], {'Authorization': 'Bearer tok'})

	def test_invitation_error_code_raises(self):
		reply = _response(200, {'errorCode': 5, 'message': 'bad document'})
		with mock.patch.object(SadiqClient, 'get_access_token', return_value='tok'), \
				mock.patch.object(self.client.session, 'request', return_value=reply):
			with self.assertRaisesMessage(SadiqError, 'bad document'):
				self.client.send_signing_invitations('doc-1', [], 'x')

	def test_webhook_falls_back_to_default_id(self):
		with mock.patch.object(SadiqClient, 'get_access_token', return_value='tok'), \
				mock.patch.object(self.client.session, 'request', return_value=_response(500)):
			self.assertEqual(self.client.get_or_create_webhook(), sadiq.FALLBACK_WEBHOOK_ID)

	def test_download_signed_document(self):
		with mock.patch.object(SadiqClient, 'get_access_token', return_value='tok'), \
				mock.patch.object(self.client.session, 'request', return_value=_response(200, {'data': {'file': 'JVBER'}})):
			self.assertEqual(self.client.download_signed_document('doc-1'), 'JVBER')


class NdaDocumentTests(SimpleTestCase):

	def test_render_produces_pdf(self):
		project = Project(id=3, title='Store', description='Online store project ' * 40)
		data = render_nda_pdf(project, {'name': 'Ahmed'}, {'name': 'Sara'})
		self.assertTrue(data.startswith(b'%PDF'))


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'], **SADIQ_SETTINGS)
class NdaWorkflowTests(TestCase):
	"""Initiate, complete, status refresh, webhook and download."""

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
		cls.idle_user = User.objects.create_user(
			username='idle', email='idle@example.com', password='12345678', role='company', name='Idle',
		)
		cls.company = CompanyProfile.objects.create(user=cls.company_user, description='studio')
		CompanyProfile.objects.create(user=cls.idle_user, description='idle')
		cls.project = Project.objects.create(
			owner=cls.owner, title='متجر', description='متجر إلكتروني', budget='1', duration='1',
		)
		cls.offer = Offer.objects.create(
			project=cls.project, company=cls.company, amount='1000', duration='شهر', description='x',
		)

	def client_for(self, user):
		client = APIClient()
		client.force_authenticate(user=user)
		return client

	def initiate(self, phone='+96651234567'):
		return self.client_for(self.company_user).post(
			f'/api/projects/{self.project.id}/nda/initiate/',
			data={'companyRep': {'name': 'Ahmed', 'email': 'ahmed@studio.com', 'phone': phone}},
			format='json',
		)

	def make_nda(self, **kwargs):
		fields = dict(
			project=self.project, company=self.company, offer=self.offer,
			company_signatory_name='Ahmed', company_signatory_email='ahmed@studio.com',
			company_signatory_phone='+96651234567',
		)
		fields.update(kwargs)
		return NdaAgreement.objects.create(**fields)

	def test_company_initiates_and_owner_is_notified(self):
		res = self.initiate()
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['status'], 'awaiting_entrepreneur')
		self.assertEqual(res.data['offer'], self.offer.id)
		self.assertTrue(Message.objects.filter(to_user=self.owner, project=self.project).exists())

		res = self.initiate()
		self.assertEqual(res.status_code, 400)

	def test_local_phone_is_rejected(self):
		res = self.initiate(phone='0551234567')
		self.assertEqual(res.status_code, 400)
		self.assertIn('phone', res.data['errors'])

	def test_company_without_offer_cannot_initiate(self):
		res = self.client_for(self.idle_user).post(
			f'/api/projects/{self.project.id}/nda/initiate/',
			data={'companyRep': {'name': 'x', 'email': 'x@x.com', 'phone': '+96651234567'}},
			format='json',
		)
		self.assertEqual(res.status_code, 403)

	def test_owner_completes_and_invitations_are_sent(self):
		nda = self.make_nda()
		payload = {'entrepreneur': {'name': 'Sara', 'email': 'sara@example.com', 'phone': '0096651234567'}}
		with mock.patch('ndas.views.render_nda_base64', return_value='UEZE'), \
				mock.patch.object(SadiqClient, 'upload_document', return_value={'id': 'doc-1', 'referenceNumber': 'ref-1'}), \
				mock.patch.object(SadiqClient, 'send_signing_invitations', return_value={'envelopeId': 'env-1'}) as invite:
			res = self.client_for(self.owner).post(f'/api/nda/{nda.id}/complete/', data=payload, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'invitation_sent')
		self.assertEqual(res.data['sadiq_envelope_id'], 'env-1')

		signers = invite.call_args.args[1]
		self.assertEqual([s['name'] for s in signers], ['Sara', 'Ahmed'])

	def test_sadiq_failure_keeps_ready_status(self):
		nda = self.make_nda()
		payload = {'entrepreneur': {'name': 'Sara', 'email': 'sara@example.com', 'phone': '+96651234567'}}
		with mock.patch('ndas.views.render_nda_base64', return_value='UEZE'), \
				mock.patch.object(SadiqClient, 'upload_document', side_effect=SadiqError('فشل في رفع المستند إلى صادق')):
			res = self.client_for(self.owner).post(f'/api/nda/{nda.id}/complete/', data=payload, format='json')
		self.assertEqual(res.status_code, 502)
		nda.refresh_from_db()
		self.assertEqual(nda.status, 'ready_for_sadiq')

	def test_only_owner_completes(self):
		nda = self.make_nda()
		res = self.client_for(self.company_user).post(f'/api/nda/{nda.id}/complete/', data={}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_visibility(self):
		nda = self.make_nda()
		self.assertEqual(self.client_for(self.owner).get(f'/api/nda/{nda.id}/').status_code, 200)
		self.assertEqual(self.client_for(self.company_user).get(f'/api/nda/{nda.id}/').status_code, 200)
		self.assertEqual(self.client_for(self.stranger).get(f'/api/nda/{nda.id}/').status_code, 404)
		res = self.client_for(self.idle_user).get(f'/api/projects/{self.project.id}/nda/')
		self.assertEqual(res.data, [])

	def test_status_refresh_marks_signed(self):
		nda = self.make_nda(status='invitation_sent', sadiq_envelope_id='env-1', sadiq_document_id='doc-1')
		with mock.patch.object(SadiqClient, 'get_envelope_status', return_value={'status': 'Completed'}):
			res = self.client_for(self.owner).get(f'/api/nda/{nda.id}/status/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'signed')
		self.assertIsNotNone(res.data['signed_at'])

	def test_webhook_requires_token(self):
		nda = self.make_nda(status='invitation_sent', sadiq_envelope_id='env-1')
		client = APIClient()
		res = client.post('/api/sadiq/webhook', data={'envelopeId': 'env-1', 'status': 'Completed'}, format='json')
		self.assertEqual(res.status_code, 401)

		res = client.post(
			'/api/sadiq/webhook', data={'envelopeId': 'env-1', 'status': 'Completed'}, format='json',
			HTTP_HEADERTOKEN='hook-token',
		)
		self.assertEqual(res.status_code, 200)
		nda.refresh_from_db()
		self.assertEqual(nda.status, 'signed')

	def test_download_only_when_signed(self):
		nda = self.make_nda(status='invitation_sent', sadiq_document_id='doc-1')
		res = self.client_for(self.owner).get(f'/api/nda/{nda.id}/download/')
		self.assertEqual(res.status_code, 400)

		nda.mark_signed()
		with mock.patch.object(SadiqClient, 'download_signed_document', return_value='JVBER') as download:
			res = self.client_for(self.owner).get(f'/api/nda/{nda.id}/download/')
			self.client_for(self.owner).get(f'/api/nda/{nda.id}/download/')
		self.assertEqual(res.data['file'], 'JVBER')
		self.assertEqual(download.call_count, 1)
