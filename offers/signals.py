"""Signals keeping the deposit Transaction in step with the offer status."""

import logging

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from finance.models import PaymentStatus, Transaction

from .models import Offer
from .services import ensure_deposit_transaction

logger = logging.getLogger(__name__)


# 1. حفظ الحالة القديمة للمقارنة
@receiver(pre_save, sender=Offer)
def capture_old_status(sender, instance, **kwargs):
    """Remember the status before saving so post-save effects run once per transition."""
    instance._old_status = None
    if instance.pk:
        instance._old_status = (
            Offer.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
        )


# 2. إنشاء أو إلغاء معاملة العربون حسب الحالة الجديدة
@receiver(post_save, sender=Offer)
def sync_deposit_transaction(sender, instance, created, **kwargs):
    old_status = getattr(instance, '_old_status', None)
    if not created and old_status == instance.status:
        return

    if instance.status == Offer.STATUS_ACCEPTED:
        ensure_deposit_transaction(instance)

    elif instance.status == Offer.STATUS_REJECTED:
        cancelled = PaymentStatus.named(PaymentStatus.CANCELLED)
        updated = Transaction.objects.filter(
            offer=instance, payment_status__status=PaymentStatus.PENDING,
        ).update(payment_status=cancelled)
        if updated:
            logger.info('Pending deposit for offer %s cancelled', instance.pk)
