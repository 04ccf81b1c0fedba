"""DRF serializers for finance APIs."""

from rest_framework import serializers

from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    """Serializer for transactions.

    Exposes a human-readable payment status string.
    """

    status = serializers.ReadOnlyField(source='payment_status.status')
    project = serializers.ReadOnlyField(source='offer.project_id')
    project_title = serializers.ReadOnlyField(source='offer.project.title')

    class Meta:
        model = Transaction
        fields = [
            'id', 'offer', 'project', 'project_title', 'amount', 'transaction_date', 'status',
            'provider', 'provider_reference', 'moyasar_invoice_id', 'invoice_url',
        ]
