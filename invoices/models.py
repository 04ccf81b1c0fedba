"""Database models for invoices."""

from django.db import models


class Invoice(models.Model):
    """Invoice issued once an offer's deposit has been paid."""

    # الربط مع العرض باستخدام String عشان نتفادى الـ ImportError
    offer = models.OneToOneField(
        'offers.Offer',
        on_delete=models.CASCADE,
        related_name='invoice'
    )

    # رقم فاتورة فريد
    invoice_number = models.CharField(max_length=100, unique=True)

    amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # تاريخ الإصدار
    issued_at = models.DateTimeField(auto_now_add=True)

    # مكان حفظ ملف الـ PDF (اختياري)
    pdf_file = models.FileField(upload_to='invoices_pdfs/', null=True, blank=True)

    class Meta:
        verbose_name = "Invoice"
        verbose_name_plural = "Invoices"
        ordering = ['-issued_at']

    def __str__(self):
        return f"Invoice {self.invoice_number} for Offer #{self.offer_id}"
