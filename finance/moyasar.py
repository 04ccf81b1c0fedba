"""Moyasar payment gateway client.

Amounts are passed in SAR and sent to Moyasar in halalas. Every failure is
raised as ``MoyasarError`` which the API exception handler answers with 502.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

import requests
from django.conf import settings
from django.utils import timezone

from core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = 'عمولة المنصة - Linktech'
MIN_INVOICE_AMOUNT = 1
INVOICE_TIMEOUT = 30

_DEV_URL_RE = re.compile(r'^https?://[^\s/$.?#].[^\s]*$', re.IGNORECASE)
_PROD_URL_RE = re.compile(r'^https://[^\s/$.?#].[^\s]*$', re.IGNORECASE)


class MoyasarError(IntegrationError):
    default_detail = 'Moyasar request failed.'
    default_code = 'moyasar_error'


def to_halalas(amount) -> int:
    """SAR → halalas, rounded to the nearest halala."""
    halalas = Decimal(str(amount)) * 100
    return int(halalas.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def validate_callback_url(url: str, label: str = 'callback') -> None:
    pattern = _DEV_URL_RE if settings.DEBUG else _PROD_URL_RE
    if pattern.match(url or ''):
        return
    if settings.DEBUG:
        raise MoyasarError(f'Invalid {label} URL: {url}. Please check your FRONTEND_URL configuration.')
    raise MoyasarError(
        f'Invalid {label} URL: {url}. Moyasar requires HTTPS URLs in production. '
        'Please set FRONTEND_URL to use HTTPS.'
    )


class MoyasarClient:
    """Basic-auth JSON client for the Moyasar v1 API."""

    def __init__(self, secret_key: str | None = None, base_url: str | None = None, timeout: int = 15) -> None:
        self.secret_key = settings.MOYASAR_SECRET_KEY if secret_key is None else secret_key
        self.base_url = (base_url or settings.MOYASAR_BASE_URL).rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (self.secret_key, '')
        self.session.headers.update({'Content-Type': 'application/json', 'Accept': 'application/json'})

    def _request(self, method: str, path: str, failure_message: str, **kwargs) -> dict:
        url = f'{self.base_url}{path}'
        kwargs.setdefault('timeout', self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            body = getattr(getattr(exc, 'response', None), 'text', '')
            logger.error('Moyasar %s %s failed: %s %s', method, path, exc, body[:200])
            raise MoyasarError(failure_message) from exc
        return response.json()

    # 1. المدفوعات
    def create_payment(self, amount, description: str = DEFAULT_DESCRIPTION, callback_url: str | None = None) -> dict:
        payload = {
            'amount': to_halalas(amount),
            'currency': 'SAR',
            'description': description,
            'callback_url': callback_url or f'{settings.FRONTEND_URL}/payment/success',
            'source': {'type': 'creditcard'},
        }
        logger.info('Creating Moyasar payment for %s halalas', payload['amount'])
        return self._request('POST', '/payments', 'فشل في إنشاء طلب الدفع', json=payload)

    def confirm_payment(self, payment_id: str, source: dict) -> dict:
        logger.info('Confirming Moyasar payment %s', payment_id)
        return self._request('PUT', f'/payments/{payment_id}', 'فشل في تأكيد الدفع', json={'source': source})

    def get_payment(self, payment_id: str) -> dict:
        return self._request('GET', f'/payments/{payment_id}', 'فشل في استرجاع تفاصيل الدفع')

    def list_payments(self, **filters) -> dict:
        params = {k: v for k, v in filters.items() if v is not None}
        return self._request('GET', '/payments', 'فشل في استرجاع قائمة المدفوعات', params=params)

    def refund_payment(self, payment_id: str, amount=None) -> dict:
        payload = {}
        if amount:
            payload['amount'] = to_halalas(amount)
        logger.info('Refunding Moyasar payment %s', payment_id)
        return self._request('POST', f'/payments/{payment_id}/refund', 'فشل في استرداد المبلغ', json=payload)

    # 2. الفواتير
    def create_invoice(
        self,
        amount,
        description: str = DEFAULT_DESCRIPTION,
        callback_url: str | None = None,
        offer_id: int | None = None,
        project_id: int | None = None,
    ) -> dict:
        if not self.secret_key:
            raise MoyasarError('Moyasar API key is not configured')
        if not amount or float(amount) <= 0:
            raise MoyasarError('Invalid payment amount')
        if float(amount) < MIN_INVOICE_AMOUNT:
            raise MoyasarError(f'Minimum amount is {MIN_INVOICE_AMOUNT} SAR')

        frontend = settings.FRONTEND_URL
        payload = {
            'amount': to_halalas(amount),
            'currency': 'SAR',
            'description': (description or DEFAULT_DESCRIPTION)[:255],
            'callback_url': callback_url or f'{frontend}/payment/success',
            'success_url': f'{frontend}/payment/success',
            'back_url': f'{frontend}/projects/{project_id}' if project_id else f'{frontend}/dashboard',
            'expired_at': (timezone.now() + timedelta(hours=24)).isoformat(),
            'metadata': {
                'offer_id': str(offer_id) if offer_id is not None else None,
                'project_id': str(project_id) if project_id is not None else None,
                'platform': 'linktech',
            },
        }
        validate_callback_url(payload['callback_url'], 'callback')
        validate_callback_url(payload['success_url'], 'success')
        validate_callback_url(payload['back_url'], 'back')

        logger.info('Creating Moyasar invoice for offer %s (%s halalas)', offer_id, payload['amount'])
        try:
            response = self.session.post(f'{self.base_url}/invoices', json=payload, timeout=INVOICE_TIMEOUT)
        except requests.Timeout as exc:
            raise MoyasarError('Moyasar API request timed out') from exc
        except requests.ConnectionError as exc:
            raise MoyasarError('Cannot connect to Moyasar API - check network connection') from exc
        except requests.RequestException as exc:
            raise MoyasarError(f'فشل في إنشاء فاتورة الدفع: {exc}') from exc

        if response.ok:
            return response.json()

        logger.error('Moyasar invoice creation returned %s: %s', response.status_code, response.text[:200])
        if response.status_code == 401:
            raise MoyasarError('Moyasar API key is invalid or expired')
        if response.status_code == 400:
            try:
                vendor_message = response.json().get('message') or 'Invalid request parameters'
            except ValueError:
                vendor_message = 'Invalid request parameters'
            raise MoyasarError(f'Moyasar validation error: {vendor_message}')
        if response.status_code == 403:
            raise MoyasarError('Moyasar API access forbidden - check account status')
        raise MoyasarError(f'فشل في إنشاء فاتورة الدفع: HTTP {response.status_code}')

    def get_invoice(self, invoice_id: str) -> dict:
        return self._request('GET', f'/invoices/{invoice_id}', 'فشل في استرجاع تفاصيل الفاتورة')
