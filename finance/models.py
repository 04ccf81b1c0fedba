"""Database models for transactions and payment statuses."""

from django.db import models


class PaymentStatus(models.Model):
    """Reference model for payment status values (e.g., Pending, Success)."""

    PENDING = 'Pending'
    SUCCESS = 'Success'
    CANCELLED = 'Cancelled'
    REFUNDED = 'Refunded'
    FAILED = 'Failed'

    status = models.CharField(max_length=50, unique=True)

    class Meta:
        verbose_name_plural = "Payment Statuses"

    def __str__(self):
        return self.status

    @classmethod
    def named(cls, name):
        obj, _ = cls.objects.get_or_create(status=name)
        return obj


class Transaction(models.Model):
    """Deposit payment attached to an accepted offer."""

    offer = models.OneToOneField('offers.Offer', on_delete=models.CASCADE, related_name='transaction')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    transaction_date = models.DateTimeField(auto_now_add=True)
    payment_status = models.ForeignKey(PaymentStatus, on_delete=models.PROTECT)

    # بيانات بوابة الدفع
    provider = models.CharField(max_length=50, default='moyasar')
    provider_reference = models.CharField(max_length=100, blank=True, default='')
    moyasar_invoice_id = models.CharField(max_length=100, blank=True, default='')
    invoice_url = models.URLField(max_length=500, blank=True, default='')

    class Meta:
        indexes = [
            models.Index(fields=['provider_reference'], name='tx_provider_ref_idx'),
            models.Index(fields=['moyasar_invoice_id'], name='tx_moyasar_invoice_idx'),
        ]

    def __str__(self):
        return f"TX for Offer #{self.offer_id}"

    @property
    def status_name(self):
        return self.payment_status.status if self.payment_status_id else None
