"""Finance API views.

Contains:
- Transaction listing scoped to the caller
- Moyasar invoice creation for an accepted offer's deposit
- Moyasar invoice lookup and admin refunds
"""

import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdminRole, is_admin
from offers.models import Offer
from offers.permissions import can_manage_offer
from offers.services import ensure_deposit_transaction

from .models import PaymentStatus, Transaction
from .moyasar import MoyasarClient
from .serializers import TransactionSerializer

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transaction_list(request):
    qs = Transaction.objects.select_related('offer__project', 'payment_status').order_by('-transaction_date')
    if not is_admin(request.user):
        qs = qs.filter(Q(offer__project__owner=request.user) | Q(offer__company__user=request.user))
    return Response(TransactionSerializer(qs, many=True).data)


# 1. إنشاء فاتورة ميسر لعربون العرض
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_offer_invoice(request, offer_id):
    offer = get_object_or_404(Offer.objects.select_related('project__owner'), pk=offer_id)
    if not can_manage_offer(request.user, offer):
        return Response({'message': 'Only the project owner can pay deposits'}, status=status.HTTP_403_FORBIDDEN)
    if offer.status != Offer.STATUS_ACCEPTED or offer.deposit_paid:
        return Response(
            {'message': 'Invalid offer status or deposit already paid'},
            status=status.HTTP_400_BAD_REQUEST,
        )

    amount = offer.compute_deposit()
    description = f'عربون مشروع {offer.project.title}'
    invoice = MoyasarClient().create_invoice(
        amount,
        description=description,
        offer_id=offer.id,
        project_id=offer.project_id,
    )

    tx = ensure_deposit_transaction(offer)
    tx.moyasar_invoice_id = str(invoice.get('id') or '')
    tx.invoice_url = invoice.get('url') or ''
    tx.save(update_fields=['moyasar_invoice_id', 'invoice_url'])
    logger.info('Moyasar invoice %s created for offer %s', tx.moyasar_invoice_id, offer.pk)

    return Response(
        {'invoiceId': invoice.get('id'), 'url': invoice.get('url'), 'amount': amount},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, invoice_id):
    tx = get_object_or_404(
        Transaction.objects.select_related('offer__project'), moyasar_invoice_id=invoice_id,
    )
    if not can_manage_offer(request.user, tx.offer):
        return Response({'message': 'Invoice not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(MoyasarClient().get_invoice(invoice_id))


# 2. استرداد المبلغ (للمسؤول فقط)
@api_view(['POST'])
@permission_classes([IsAdminRole])
def refund_payment(request, payment_id):
    amount = request.data.get('amount')
    result = MoyasarClient().refund_payment(payment_id, amount)

    updated = Transaction.objects.filter(provider_reference=payment_id).update(
        payment_status=PaymentStatus.named(PaymentStatus.REFUNDED),
    )
    logger.info('Payment %s refunded (%s transaction(s) updated)', payment_id, updated)
    return Response(result)
