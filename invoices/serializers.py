"""DRF serializers for invoices."""

from rest_framework import serializers

from .models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    project = serializers.ReadOnlyField(source='offer.project_id')
    project_title = serializers.ReadOnlyField(source='offer.project.title')
    company_name = serializers.ReadOnlyField(source='offer.company.user.name')

    class Meta:
        model = Invoice
        fields = ['id', 'invoice_number', 'offer', 'project', 'project_title', 'company_name', 'amount', 'issued_at', 'pdf_file']
