"""Signals for finance side-effects (deposit confirmation)."""

import logging

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import PaymentStatus, Transaction

logger = logging.getLogger(__name__)


# 1. حفظ الحالة القديمة للمقارنة (مهم جداً لمنع التكرار)
@receiver(pre_save, sender=Transaction)
def capture_old_data(sender, instance, **kwargs):
    """Capture the previous payment status to make post-save actions idempotent."""
    instance._old_pay_status = None
    if instance.pk:
        instance._old_pay_status = (
            Transaction.objects.filter(pk=instance.pk)
            .values_list('payment_status__status', flat=True)
            .first()
        )


# 2. تأكيد العربون عند التحول إلى Success فقط
@receiver(post_save, sender=Transaction)
def confirm_deposit_on_success(sender, instance, **kwargs):
    """Reveal the company contact when a deposit becomes successful outside the API
    (admin edits, gateway reconciliation)."""
    new_pay_status = instance.payment_status.status if instance.payment_status_id else None
    old_pay_status = getattr(instance, '_old_pay_status', None)

    if new_pay_status != PaymentStatus.SUCCESS or old_pay_status == PaymentStatus.SUCCESS:
        return

    from offers.services import reveal_contact

    offer = instance.offer
    if reveal_contact(offer, offer.deposit_amount or instance.amount):
        logger.info('Transaction %s confirmed the deposit of offer %s', instance.pk, offer.pk)
