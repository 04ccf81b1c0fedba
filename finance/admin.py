"""Django admin configuration for finance models."""

from django.contrib import admin

from .models import PaymentStatus, Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Admin configuration for transactions."""

    list_display = ('id', 'get_offer_id', 'get_project', 'amount', 'transaction_date', 'payment_status', 'provider_reference')
    list_filter = ('payment_status', 'provider', 'transaction_date')

    # البحث برقم العرض أو عنوان المشروع أو مرجع الدفع
    search_fields = ('offer__id', 'offer__project__title', 'provider_reference', 'moyasar_invoice_id')

    readonly_fields = ('transaction_date',)

    def get_offer_id(self, obj):
        """Render offer id in a friendly format."""
        return f"Offer #{obj.offer_id}"
    get_offer_id.short_description = 'رقم العرض'

    def get_project(self, obj):
        return obj.offer.project.title
    get_project.short_description = 'المشروع'


@admin.register(PaymentStatus)
class PaymentStatusAdmin(admin.ModelAdmin):
    """Admin configuration for payment statuses."""

    list_display = ('id', 'status')
