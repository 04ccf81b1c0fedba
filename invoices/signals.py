"""Signals for invoice generation."""

import logging
import uuid

from django.db.models.signals import post_save
from django.dispatch import receiver

from finance.models import PaymentStatus, Transaction

from .models import Invoice

logger = logging.getLogger(__name__)


def invoice_number_for(offer):
    return f"INV-{offer.id}-{uuid.uuid4().hex[:4].upper()}"


@receiver(post_save, sender=Transaction)
def create_invoice_on_payment_success(sender, instance, **kwargs):
    """Create an invoice when a deposit transaction is marked successful.

    Uses a simple uniqueness guard (offer has no existing invoice).
    """
    if instance.payment_status.status != PaymentStatus.SUCCESS:
        return

    offer = instance.offer
    # التأكد إن مفيش فاتورة اتعملت للعرض ده قبل كدة
    if Invoice.objects.filter(offer=offer).exists():
        return

    invoice = Invoice.objects.create(
        offer=offer,
        invoice_number=invoice_number_for(offer),
        amount=instance.amount,
    )
    logger.info('Invoice %s issued for offer %s', invoice.invoice_number, offer.pk)
