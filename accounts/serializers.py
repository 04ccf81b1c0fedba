"""Serializers for the accounts app.

Includes:
- Registration with strong validation (and optional company profile)
- Public user cards and the authenticated profile
- Company profiles joined with their owner's identity
"""

import re

import phonenumbers
from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers

from .models import CompanyProfile


User = get_user_model()


def _normalize_skills(value):
    if value in (None, ''):
        return []
    if not isinstance(value, list):
        raise serializers.ValidationError("المهارات يجب أن تكون قائمة.")
    skills = []
    for item in value:
        s = str(item or '').strip()
        if s and s not in skills:
            skills.append(s)
    return skills


# 1. بطاقة المستخدم العامة (بدون كلمة المرور)
class UserSerializer(serializers.ModelSerializer):
    """Password-free user representation."""

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'name', 'role', 'avatar', 'phone_number', 'date_joined')
        read_only_fields = fields


# 2. محول بروفايل الشركة
class CompanyProfileSerializer(serializers.ModelSerializer):
    """Company profile with the owner's username, name and email."""

    username = serializers.ReadOnlyField(source='user.username')
    name = serializers.ReadOnlyField(source='user.name')
    email = serializers.ReadOnlyField(source='user.email')

    class Meta:
        model = CompanyProfile
        fields = [
            'id', 'user', 'username', 'name', 'email',
            'description', 'logo', 'cover_photo', 'website', 'location',
            'skills', 'rating', 'review_count', 'verified',
            'cr_number', 'cr_verified_at', 'created_at',
        ]
        read_only_fields = ['user', 'rating', 'review_count', 'verified', 'cr_verified_at', 'created_at']

    def validate_skills(self, value):
        return _normalize_skills(value)


class CompanyProfileInputSerializer(serializers.ModelSerializer):
    """Nested company data accepted at registration."""

    class Meta:
        model = CompanyProfile
        fields = ['description', 'logo', 'cover_photo', 'website', 'location', 'skills']

    def validate_skills(self, value):
        return _normalize_skills(value)


# 3. محول التسجيل
class RegisterSerializer(serializers.ModelSerializer):
    """Create a new entrepreneur or company account.

    Also creates the company profile when ``role`` is company and a
    ``company_profile`` object is supplied.
    """

    password = serializers.CharField(write_only=True, min_length=8)
    role = serializers.ChoiceField(choices=(('entrepreneur', 'Entrepreneur'), ('company', 'Company')))
    phone_number = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    company_profile = CompanyProfileInputSerializer(required=False, write_only=True)

    class Meta:
        model = User
        fields = ('username', 'password', 'email', 'name', 'role', 'avatar', 'phone_number', 'company_profile')
        extra_kwargs = {
            # uniqueness is reported by the view with the legacy messages
            'username': {'validators': []},
            'email': {'validators': []},
        }

    def validate_username(self, value):
        if not re.match(r'^[a-zA-Z0-9._]+$', value):
            raise serializers.ValidationError("اسم المستخدم يجب أن يحتوي على حروف وأرقام ونقطة أو شرطة سفلية فقط.")
        if len(value) < 4:
            raise serializers.ValidationError("اسم المستخدم يجب أن يكون 4 أحرف على الأقل.")
        return value

    def validate_email(self, value):
        email_regex = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_regex, value):
            raise serializers.ValidationError("يرجى إدخال بريد إلكتروني صحيح.")
        return value.lower().strip()

    def validate_name(self, value):
        value = (value or '').strip()
        if len(value) < 2:
            raise serializers.ValidationError("الاسم يجب أن يكون حرفين على الأقل")
        if len(value) > 100:
            raise serializers.ValidationError("الاسم يجب أن يكون أقل من 100 حرف")
        return value

    def validate_phone_number(self, value):
        if not value:
            return None
        return normalize_phone_number(value)

    def validate(self, attrs):
        if attrs.get('role') != 'company':
            attrs.pop('company_profile', None)
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        company_data = validated_data.pop('company_profile', None)
        password = validated_data.pop('password')

        user = User.objects.create_user(password=password, **validated_data)

        if user.role == 'company' and company_data:
            CompanyProfile.objects.create(user=user, **company_data)

        return user


def normalize_phone_number(phone):
    """Parse ``phone`` (default region SA) and return it in E.164 form."""
    phone_input = str(phone).strip()
    # إزالة أي شيء ليس رقماً مع الإبقاء على + في البداية فقط
    clean_phone = re.sub(r'(?<!^)\+|[^\d+]', '', phone_input)
    if clean_phone.startswith('00'):
        clean_phone = '+' + clean_phone[2:]

    try:
        parsed_phone = phonenumbers.parse(clean_phone, 'SA')
        if not phonenumbers.is_valid_number(parsed_phone):
            raise ValueError
    except (phonenumbers.NumberParseException, ValueError):
        raise serializers.ValidationError(
            f"رقم الهاتف {phone_input} غير صحيح. يرجى إدخال رقم صالح مع رمز الدولة (مثلاً +966)."
        )

    return phonenumbers.format_number(parsed_phone, phonenumbers.PhoneNumberFormat.E164)


# 4. محول الملف الشخصي
class UserProfileSerializer(serializers.ModelSerializer):
    """Authenticated user's own profile, including the company profile id."""

    company_profile_id = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'name', 'role', 'avatar', 'phone_number', 'company_profile_id')
        read_only_fields = ('username', 'role')

    def get_company_profile_id(self, obj):
        profile = CompanyProfile.objects.filter(user=obj).only('id').first()
        return profile.id if profile else None

    def validate_email(self, value):
        value = value.lower().strip()
        if User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError("Email already exists")
        return value

    def validate_phone_number(self, value):
        if not value:
            return None
        return normalize_phone_number(value)
