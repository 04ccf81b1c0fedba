"""Wathq commercial-registry (CR) lookups.

Failures are reported in the returned dict (``success: False``) rather than
raised, so callers can surface the Arabic message to the company directly.
"""

from __future__ import annotations

import logging
import re

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

NOT_SPECIFIED = 'غير محدد'
ACTIVE_STATUS = 'نشط'

_NAME_STRIP_RE = re.compile(
    r'[^\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFFa-zA-Z0-9\s]'
)


def normalize_company_name(name: str) -> str:
    value = _NAME_STRIP_RE.sub('', (name or '').lower())
    return re.sub(r'\s+', ' ', value).strip()


def _failure(error: str, message: str = '') -> dict:
    result = {'success': False, 'error': error}
    if message:
        result['message'] = message
    return result


class WathqClient:
    """Thin wrapper around the Wathq ``fullinfo`` endpoint."""

    def __init__(self, base_url: str | None = None, api_key: str | None = None, timeout: int = 10) -> None:
        self.base_url = (base_url or settings.WATHQ_API_URL).rstrip('/')
        self.api_key = settings.WATHQ_API_KEY if api_key is None else api_key
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({'accept': 'application/json'})

    def verify_commercial_registry(self, cr_number: str) -> dict:
        if not self.api_key:
            logger.warning('Wathq lookup skipped: WATHQ_API_KEY is not set')
            return _failure('Wathq API key is not configured')

        clean_cr = re.sub(r'[^0-9]', '', str(cr_number or ''))
        if len(clean_cr) < 10:
            return _failure('رقم السجل التجاري غير صالح - يجب أن يكون 10 أرقام على الأقل')

        url = f'{self.base_url}/fullinfo/{clean_cr}'
        logger.info('Wathq lookup for CR %s', clean_cr)

        try:
            response = self.session.get(
                url,
                params={'language': 'ar'},
                headers={'apiKey': self.api_key},
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.warning('Wathq lookup timed out for CR %s', clean_cr)
            return _failure('انتهت مهلة الاتصال مع وثيق', 'يرجى المحاولة مرة أخرى')
        except requests.RequestException as exc:
            logger.warning('Wathq lookup failed for CR %s: %s', clean_cr, exc)
            return _failure(str(exc), 'حدث خطأ أثناء التحقق من السجل التجاري')

        if not response.ok:
            logger.warning('Wathq returned %s for CR %s', response.status_code, clean_cr)
            if response.status_code == 404:
                return _failure(
                    'السجل التجاري غير موجود في قاعدة بيانات وثيق',
                    'يرجى التحقق من صحة رقم السجل التجاري',
                )
            if response.status_code == 401:
                return _failure('خطأ في المصادقة مع وثيق', 'يرجى التحقق من إعدادات API key')
            return _failure(f'خطأ في API: {response.status_code}', (response.text or '')[:200])

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict) or not data.get('crNumber'):
            return _failure('بيانات غير صحيحة من وثيق', 'لم يتم العثور على معلومات صحيحة للشركة')

        status_name = (data.get('status') or {}).get('name')
        if status_name and status_name != ACTIVE_STATUS:
            return _failure(
                'الشركة غير نشطة',
                f'حالة الشركة: {status_name} - يجب أن تكون الشركة نشطة لتوقيع اتفاقيات عدم الإفصاح',
            )

        return {'success': True, 'data': self._company_info(data)}

    def verify_company_name(self, cr_number: str, company_name: str) -> dict:
        verification = self.verify_commercial_registry(cr_number)
        if not verification.get('success'):
            return {'success': False, 'isMatch': False, 'error': verification.get('error')}

        registered_name = verification['data']['companyName']
        return {
            'success': True,
            'isMatch': normalize_company_name(company_name) == normalize_company_name(registered_name),
            'registeredName': registered_name,
        }

    @staticmethod
    def _company_info(data: dict) -> dict:
        status = data.get('status') or {}
        entity_type = data.get('entityType') or {}
        capital = data.get('capital') or {}
        contact = data.get('contactInfo') or {}
        contribution = (capital.get('contributionCapital') or {}).get('contributionValue')

        return {
            'crNumber': data.get('crNumber'),
            'crNationalNumber': data.get('crNationalNumber'),
            'companyName': data.get('name') or NOT_SPECIFIED,
            'status': status.get('name') or NOT_SPECIFIED,
            'entityType': entity_type.get('name') or NOT_SPECIFIED,
            'formType': entity_type.get('formName') or NOT_SPECIFIED,
            'registrationDate': data.get('issueDateGregorian') or NOT_SPECIFIED,
            'capital': data.get('crCapital') or contribution or NOT_SPECIFIED,
            'currency': capital.get('currencyName') or 'ريال سعودي',
            'city': data.get('headquarterCityName') or NOT_SPECIFIED,
            'phone': contact.get('mobileNo') or contact.get('phoneNo'),
            'email': contact.get('email'),
            'website': contact.get('websiteUrl'),
            'activities': data.get('activities') or [],
            'partners': data.get('parties') or [],
            'management': (data.get('management') or {}).get('managers') or [],
            'isActive': status.get('name') == ACTIVE_STATUS,
            'isLiquidation': bool(data.get('inLiquidationProcess')),
            'hasEcommerce': bool(data.get('hasEcommerce')),
        }
