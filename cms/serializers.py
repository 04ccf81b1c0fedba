"""DRF serializers for site content APIs."""

from rest_framework import serializers

from .models import ContactMessage, FeaturedClient, PremiumClient, SiteSetting, Testimonial


class SiteSettingSerializer(serializers.ModelSerializer):

    class Meta:
        model = SiteSetting
        fields = ['id', 'key', 'value', 'updated_at']


class ContactMessageSerializer(serializers.ModelSerializer):

    class Meta:
        model = ContactMessage
        fields = ['id', 'name', 'email', 'phone', 'subject', 'message', 'status', 'notes', 'reply', 'replied_at', 'created_at']
        read_only_fields = ['status', 'notes', 'reply', 'replied_at', 'created_at']

    def validate_email(self, value):
        if '@' not in (value or ''):
            raise serializers.ValidationError('البريد الإلكتروني غير صالح')
        return value.strip()


class FeaturedClientSerializer(serializers.ModelSerializer):

    class Meta:
        model = FeaturedClient
        fields = ['id', 'name', 'logo', 'website', 'description', 'category', 'order', 'active', 'created_at']
        read_only_fields = ['created_at']


class PremiumClientSerializer(serializers.ModelSerializer):

    class Meta:
        model = PremiumClient
        fields = [
            'id', 'name', 'description', 'logo', 'category', 'website',
            'featured', 'active', 'benefits', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']


class TestimonialSerializer(serializers.ModelSerializer):
    user_name = serializers.ReadOnlyField(source='user.name')

    class Meta:
        model = Testimonial
        fields = ['id', 'user', 'user_name', 'content', 'role', 'company_name', 'user_title', 'rating', 'avatar', 'created_at']
        read_only_fields = ['user', 'role', 'created_at']
