"""DRF serializers for offers APIs."""

from rest_framework import serializers

from .models import Offer


def masked_company_name(name):
    name = (name or '').strip()
    return f"شركة {name[:1]}****"


class OfferSerializer(serializers.ModelSerializer):
    """Plain offer as seen by the company that made it."""

    project_title = serializers.ReadOnlyField(source='project.title')

    class Meta:
        model = Offer
        fields = [
            'id', 'project', 'project_title', 'company',
            'amount', 'duration', 'description', 'status',
            'deposit_paid', 'deposit_amount', 'deposit_date', 'contact_revealed', 'created_at',
        ]
        read_only_fields = [
            'project', 'company', 'status',
            'deposit_paid', 'deposit_amount', 'deposit_date', 'contact_revealed', 'created_at',
        ]

    def validate_amount(self, value):
        value = (value or '').strip()
        if not any(ch.isdigit() for ch in value):
            raise serializers.ValidationError("قيمة العرض يجب أن تحتوي على رقم")
        return value


class OwnerOfferSerializer(OfferSerializer):
    """Offer as seen by the project owner; the company name stays masked
    until the deposit reveals the contact details."""

    companyName = serializers.SerializerMethodField()
    companyLogo = serializers.SerializerMethodField()
    companyVerified = serializers.SerializerMethodField()
    companyRating = serializers.SerializerMethodField()

    class Meta(OfferSerializer.Meta):
        fields = OfferSerializer.Meta.fields + ['companyName', 'companyLogo', 'companyVerified', 'companyRating']

    def get_companyName(self, obj):
        user = getattr(obj.company, 'user', None)
        if user is None:
            return None
        if obj.contact_revealed:
            return user.name
        return masked_company_name(user.name)

    def get_companyLogo(self, obj):
        return obj.company.logo or None

    def get_companyVerified(self, obj):
        return bool(obj.company.verified)

    def get_companyRating(self, obj):
        return obj.company.rating
