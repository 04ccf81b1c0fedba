"""Deposit workflow shared by the offers API and the finance signals."""

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from finance.models import PaymentStatus, Transaction
from messaging.models import Message
from projects.models import Project

from .models import Offer

logger = logging.getLogger(__name__)


def deposit_message(project, owner):
    return (
        f'تم قبول عرضك على مشروع "{project.title}" ودفع العربون. '
        f'يمكنك التواصل مع {owner.name} عبر البريد الإلكتروني: {owner.email}'
    )


def ensure_deposit_transaction(offer):
    """Return the offer's Transaction, creating a Pending one for the deposit."""
    tx, created = Transaction.objects.get_or_create(
        offer=offer,
        defaults={
            'amount': Decimal(offer.compute_deposit()),
            'payment_status': PaymentStatus.named(PaymentStatus.PENDING),
        },
    )
    if created:
        logger.info('Pending deposit transaction %s created for offer %s', tx.pk, offer.pk)
    return tx


def reveal_contact(offer, deposit_amount=None):
    """Apply the effects of a paid deposit exactly once.

    Marks the deposit as paid, reveals the company contact, sends the owner's
    contact details to the company and moves the project to in-progress.
    Returns False when the deposit had already been recorded.
    """
    if offer.deposit_paid:
        return False

    project = offer.project
    owner = project.owner
    company_user = offer.company.user

    offer.deposit_paid = True
    offer.deposit_amount = str(deposit_amount if deposit_amount is not None else offer.compute_deposit())
    offer.deposit_date = timezone.now()
    offer.contact_revealed = True
    offer.save(update_fields=['deposit_paid', 'deposit_amount', 'deposit_date', 'contact_revealed'])

    Message.objects.create(
        content=deposit_message(project, owner),
        from_user=owner,
        to_user=company_user,
        project=project,
    )

    if project.status != Project.STATUS_IN_PROGRESS:
        project.status = Project.STATUS_IN_PROGRESS
        project.save(update_fields=['status'])

    logger.info('Deposit recorded for offer %s (project %s)', offer.pk, project.pk)
    return True


def record_deposit_payment(offer_id, payment_id, deposit_amount):
    """Lock the offer and record a confirmed deposit payment.

    ``deposit_amount`` is the server-side amount (computed or verified with
    Moyasar), never the client's figure. Raises ``ValueError`` when the offer
    is not accepted or already paid, or when the payment id already settled
    another offer.
    """
    with transaction.atomic():
        offer = (
            Offer.objects.select_for_update()
            .select_related('project__owner', 'company__user')
            .get(pk=offer_id)
        )
        if offer.status != Offer.STATUS_ACCEPTED or offer.deposit_paid:
            raise ValueError('Invalid offer status or deposit already paid')
        if Transaction.objects.filter(provider_reference=str(payment_id)).exclude(offer=offer).exists():
            raise ValueError('Payment has already been used for another offer')

        reveal_contact(offer, deposit_amount)

        tx = ensure_deposit_transaction(offer)
        tx.provider_reference = str(payment_id)
        tx.amount = Decimal(str(deposit_amount))
        tx.payment_status = PaymentStatus.named(PaymentStatus.SUCCESS)
        tx.save()

    return offer
