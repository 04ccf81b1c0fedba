"""Sadiq e-signature client.

Authenticates with the integration grant, uploads base64 PDFs, sends signing
invitations and reads envelope status. Failures raise ``SadiqError`` which the
API exception handler answers with 502.
"""

from __future__ import annotations

import logging
import random
import string
import time
from datetime import timedelta

import requests
from django.conf import settings
from django.utils import timezone

from core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

FALLBACK_WEBHOOK_ID = '3fa85f64-5717-4562-b3fc-2c963f66afa6'
TOKEN_SAFETY_MARGIN = 60
DEFAULT_TOKEN_LIFETIME = 3600
INVITATION_VALID_DAYS = 30

_token_cache = {'token': None, 'expires_at': 0.0}


class SadiqError(IntegrationError):
    default_detail = 'Sadiq request failed.'
    default_code = 'sadiq_error'


def clear_token_cache() -> None:
    _token_cache['token'] = None
    _token_cache['expires_at'] = 0.0


def format_phone_number(phone: str) -> str:
    """Normalise a Saudi number to ``+966XXXXXXXX``; "" when it cannot be used."""
    clean = ''.join(ch for ch in (phone or '') if ch not in ' -().')
    if clean.startswith('+966') and len(clean) == 12 and clean[4] in '15' and clean[5:].isdigit():
        return clean
    if clean.startswith('00966'):
        return format_phone_number('+' + clean[2:])
    if len(clean) == 10 and clean[:2] in ('05', '01') and clean.isdigit():
        return '+966' + clean[1:9]
    return ''


def make_reference_number() -> str:
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f'linktech-nda-project-{int(time.time() * 1000)}-{suffix}'


def _first(*values):
    for value in values:
        if value:
            return value
    return None


class SadiqClient:
    """Bearer-token JSON client for the Sadiq integration API."""

    def __init__(self, base_url: str | None = None, timeout: int = 30) -> None:
        self.base_url = (base_url or settings.SADIQ_BASE_URL).rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({'accept': 'application/json'})

    # 1. المصادقة
    def authenticate(self) -> dict:
        """Request a fresh token; returns Sadiq's token payload."""
        credentials = {
            'accountId': settings.SADIQ_ACCOUNT_ID,
            'accountSecret': settings.SADIQ_ACCOUNT_SECRET,
            'username': settings.SADIQ_EMAIL,
            'password': settings.SADIQ_PASSWORD,
        }
        if not all(credentials.values()) or not settings.SADIQ_CLIENT_AUTH:
            raise SadiqError('Sadiq credentials are not configured')

        logger.info('Authenticating with Sadiq')
        try:
            response = self.session.post(
                f'{self.base_url}/Authentication/Authority/Token',
                data={'grant_type': 'integration', **credentials},
                headers={'Authorization': f'Basic {settings.SADIQ_CLIENT_AUTH}'},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error('Sadiq authentication failed: %s', exc)
            raise SadiqError('فشل في الاتصال مع واجهة برمجة تطبيقات صادق') from exc

        if not response.ok:
            logger.error('Sadiq authentication returned %s: %s', response.status_code, response.text[:200])
            raise SadiqError(f'Sadiq authentication failed: HTTP {response.status_code}')

        data = response.json()
        if data.get('error'):
            raise SadiqError(f"Sadiq authentication failed: {data.get('error_description') or data['error']}")
        if not data.get('access_token'):
            raise SadiqError('Sadiq authentication returned no access token')
        return data

    def get_access_token(self) -> str:
        now = time.time()
        if _token_cache['token'] and now < _token_cache['expires_at']:
            return _token_cache['token']

        data = self.authenticate()
        lifetime = int(data.get('expires_in') or DEFAULT_TOKEN_LIFETIME)
        _token_cache['token'] = data['access_token']
        _token_cache['expires_at'] = now + max(lifetime - TOKEN_SAFETY_MARGIN, 0)
        return _token_cache['token']

    def _request(self, method: str, path: str, failure_message: str, **kwargs) -> dict:
        headers = {'Authorization': f'Bearer {self.get_access_token()}'}
        kwargs.setdefault('timeout', self.timeout)
        try:
            response = self.session.request(method, f'{self.base_url}{path}', headers=headers, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            body = getattr(getattr(exc, 'response', None), 'text', '')
            logger.error('Sadiq %s %s failed: %s %s', method, path, exc, body[:200])
            raise SadiqError(failure_message) from exc
        return response.json()

    # 2. المستندات
    def upload_document(self, document_base64: str, file_name: str) -> dict:
        """Upload a base64 PDF; returns ``{'id', 'referenceNumber'}``."""
        reference = make_reference_number()
        payload = {
            'webhookId': self.get_or_create_webhook(),
            'referenceNumber': reference,
            'files': [{'file': document_base64, 'fileName': file_name, 'password': ''}],
        }
        logger.info('Uploading %s to Sadiq (%s)', file_name, reference)
        result = self._request(
            'POST', '/IntegrationService/Document/Bulk/Initiate-envelope-Base64',
            'فشل في رفع المستند إلى صادق', json=payload,
        )

        data = result.get('data') or {}
        bulk = (data.get('bulkFileResponse') or result.get('bulkFileResponse') or [{}])[0] or {}
        document_id = _first(
            data.get('documentId'),
            result.get('documentId'),
            data.get('id'),
            result.get('id'),
            bulk.get('documentId'),
            bulk.get('id'),
            bulk.get('fileId'),
            data.get('envelopeId'),
        ) or reference
        return {'id': document_id, 'referenceNumber': reference}

    def send_signing_invitations(self, document_id: str, signatories: list[dict], project_title: str) -> dict:
        """Invite every signatory in order; returns ``{'envelopeId'}``."""
        available_to = (timezone.now() + timedelta(days=INVITATION_VALID_DAYS)).isoformat()
        destinations = []
        for index, signer in enumerate(signatories):
            destinations.append({
                'destinationName': signer['name'],
                'destinationEmail': signer['email'],
                'destinationPhoneNumber': format_phone_number(signer.get('phone', '')),
                'nationalId': signer.get('nationalId', ''),
                'signeOrder': index,
                'ConsentOnly': False,
                'signatories': [{
                    'signatureHigh': 80,
                    'signatureWidth': 160,
                    'pageNumber': 1,
                    'text': '',
                    'type': 'Signature',
                    'positionX': 70 + index * 200,
                    'positionY': 500,
                }],
                'availableTo': available_to,
                'authenticationType': 1,
                'InvitationLanguage': 1,
                'RedirectUrl': '',
                'AllowUserToAddDestination': False,
            })

        payload = {
            'documentId': document_id,
            'destinations': destinations,
            'invitationMessage': (
                f'نرجو منكم توقيع اتفاقية عدم الإفصاح المرفقة للمشروع: {project_title}. '
                'يرجى مراجعة الشروط والتوقيع إلكترونياً.'
            ),
            'invitationSubject': f'توقيع اتفاقية عدم الإفصاح - مشروع {project_title}',
        }
        logger.info('Sending %s Sadiq invitations for document %s', len(destinations), document_id)
        result = self._request(
            'POST', '/IntegrationService/Invitation/Send-Invitation',
            'فشل في إرسال دعوة التوقيع عبر صادق', json=payload,
        )
        if result.get('errorCode') != 0:
            raise SadiqError(f"Sadiq invitation failed: {result.get('message') or result.get('errorCode')}")

        data = result.get('data') or {}
        envelope_id = _first(
            data.get('envelopeId'),
            result.get('envelopeId'),
            data.get('id'),
            result.get('id'),
        ) or document_id
        return {'envelopeId': envelope_id}

    def get_envelope_status(self, envelope_id: str) -> dict:
        result = self._request(
            'GET', f'/IntegrationService/document/envelope-status/{envelope_id}',
            'فشل في استرجاع حالة المستند من صادق',
        )
        if result.get('errorCode') != 0:
            raise SadiqError(f"Sadiq status lookup failed: {result.get('message') or result.get('errorCode')}")
        return result.get('data') or {}

    def download_signed_document(self, document_id: str) -> str:
        result = self._request(
            'GET', f'/IntegrationService/Document/DownloadBase64/{document_id}',
            'فشل في تحميل المستند الموقع من صادق',
        )
        file_data = (result.get('data') or {}).get('file')
        if not file_data:
            raise SadiqError('Sadiq returned no document content')
        return file_data

    # 3. Webhook
    def configure_webhook(self, webhook_url: str | None = None) -> str | None:
        payload = {
            'webhookUrl': webhook_url or settings.SADIQ_WEBHOOK_URL,
            'isDefault': True,
            'HeaderToken': settings.SADIQ_WEBHOOK_TOKEN,
        }
        result = self._request(
            'POST', '/IntegrationService/Configuration/webhook', 'فشل في إعداد webhook صادق', json=payload,
        )
        data = result.get('data') or result
        return _first(data.get('id'), data.get('webhookId'))

    def get_webhooks(self) -> list:
        result = self._request('GET', '/IntegrationService/Configuration/webhook', 'فشل في استرجاع webhooks صادق')
        data = result.get('data', result)
        if isinstance(data, dict):
            return [data]
        return data or []

    def get_or_create_webhook(self) -> str:
        try:
            for hook in self.get_webhooks():
                hook_id = _first(hook.get('id'), hook.get('webhookId'))
                if hook_id:
                    return hook_id
            if settings.SADIQ_WEBHOOK_URL:
                hook_id = self.configure_webhook()
                if hook_id:
                    return hook_id
        except SadiqError as exc:
            logger.warning('Sadiq webhook lookup failed, using fallback id: %s', exc)
        return FALLBACK_WEBHOOK_ID
