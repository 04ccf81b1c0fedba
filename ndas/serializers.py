"""DRF serializers for NDA APIs."""

import re

from rest_framework import serializers

from .models import NdaAgreement

SADIQ_PHONE_RE = re.compile(r'^(?:\+966|00966)[15][0-9]{7}$')


class SignatorySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20)

    def validate_phone(self, value):
        clean = re.sub(r'[\s\-().]', '', value or '')
        if not SADIQ_PHONE_RE.match(clean):
            raise serializers.ValidationError(
                'رقم الجوال يجب أن يكون بالصيغة الدولية +966 (الأرقام المحلية التي تبدأ بـ 05 أو 01 غير مقبولة)'
            )
        if clean.startswith('00966'):
            clean = '+' + clean[2:]
        return clean


class NdaAgreementSerializer(serializers.ModelSerializer):
    project_title = serializers.ReadOnlyField(source='project.title')
    company_name = serializers.ReadOnlyField(source='company.user.name')

    class Meta:
        model = NdaAgreement
        fields = [
            'id', 'project', 'project_title', 'company', 'company_name', 'offer', 'status',
            'company_signatory_name', 'company_signatory_email', 'company_signatory_phone',
            'entrepreneur_signatory_name', 'entrepreneur_signatory_email', 'entrepreneur_signatory_phone',
            'sadiq_document_id', 'sadiq_reference_number', 'sadiq_envelope_id',
            'signed_at', 'created_at',
        ]
        read_only_fields = fields
