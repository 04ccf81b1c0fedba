"""Offers API views.

Contains:
- Project offers listing (visibility depends on who is asking) and submission
- Company "my offers" list
- Owner actions: accept, reject, pay-deposit, complete
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import is_admin
from finance.moyasar import MoyasarClient, to_halalas
from projects.models import Project

from .models import Offer
from .permissions import can_manage_offer, company_profile_of
from .serializers import OfferSerializer, OwnerOfferSerializer
from .services import record_deposit_payment

logger = logging.getLogger(__name__)


# 1. حالات العرض والانتقالات المسموحة
_ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    Offer.STATUS_PENDING: {Offer.STATUS_ACCEPTED, Offer.STATUS_REJECTED},
    Offer.STATUS_ACCEPTED: {Offer.STATUS_COMPLETED, Offer.STATUS_REJECTED},
    Offer.STATUS_REJECTED: set(),
    Offer.STATUS_COMPLETED: set(),
}


def _transition_allowed(current: str, nxt: str) -> bool:
    if current == nxt:
        return True
    return nxt in _ALLOWED_TRANSITIONS.get(current, set())


def offer_amount_stats(offers):
    """Count and min/max of the numeric amounts, as shown to visitors."""
    values = [o.amount_value for o in offers]
    values = [v for v in values if v is not None]
    return {
        'count': len(offers),
        'minAmount': min(values) if values else None,
        'maxAmount': max(values) if values else None,
    }


# 2. عروض مشروع معين
@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def project_offers(request, project_id):
    project = Project.objects.select_related('owner').filter(pk=project_id).first()
    if project is None:
        return Response({'message': 'Project not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'POST':
        return _submit_offer(request, project)

    offers = list(project.offers.select_related('company__user', 'project'))
    user = request.user

    if user.is_authenticated:
        if project.owner_id == user.id or is_admin(user):
            return Response(OwnerOfferSerializer(offers, many=True).data)

        if user.role == 'company':
            profile = company_profile_of(user)
            if profile is None:
                return Response({'message': 'Company profile not found'}, status=status.HTTP_403_FORBIDDEN)
            own = [o for o in offers if o.company_id == profile.id]
            return Response(OfferSerializer(own, many=True).data)

    return Response(offer_amount_stats(offers))


def _submit_offer(request, project):
    user = request.user
    if not user.is_authenticated:
        return Response({'message': 'Not authenticated'}, status=status.HTTP_401_UNAUTHORIZED)
    if user.role != 'company':
        return Response({'message': 'Only companies can submit offers'}, status=status.HTTP_403_FORBIDDEN)

    profile = company_profile_of(user)
    if profile is None:
        return Response({'message': 'Company profile not found'}, status=status.HTTP_403_FORBIDDEN)

    if Offer.objects.filter(project=project, company=profile).exists():
        return Response(
            {'message': 'You have already submitted an offer for this project'},
            status=status.HTTP_400_BAD_REQUEST,
        )
    if project.status != Project.STATUS_OPEN:
        return Response({'message': 'Project is not open for offers'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = OfferSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    offer = serializer.save(project=project, company=profile)
    logger.info('Company %s submitted offer %s on project %s', profile.pk, offer.pk, project.pk)
    return Response(OfferSerializer(offer).data, status=status.HTTP_201_CREATED)


# 3. إدارة العروض
class OfferViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Single offers and the owner workflow around them.

    Visible to the submitting company, the project owner and admins.
    """

    serializer_class = OfferSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        qs = Offer.objects.select_related('project__owner', 'company__user')
        if is_admin(user):
            return qs
        return qs.filter(Q(project__owner=user) | Q(company__user=user))

    def retrieve(self, request, *args, **kwargs):
        offer = self.get_object()
        serializer = OwnerOfferSerializer if can_manage_offer(request.user, offer) else OfferSerializer
        return Response(serializer(offer).data)

    def _forbidden(self, message):
        return Response({'message': message}, status=status.HTTP_403_FORBIDDEN)

    def _set_status(self, offer, new_status):
        if not _transition_allowed(offer.status, new_status):
            return False
        if offer.status != new_status:
            offer.status = new_status
            offer.save(update_fields=['status'])
        return True

    @action(detail=False, methods=['get'])
    def mine(self, request):
        profile = company_profile_of(request.user)
        if profile is None:
            return Response({'message': 'Company profile not found'}, status=status.HTTP_403_FORBIDDEN)
        offers = Offer.objects.filter(company=profile).select_related('project')
        return Response(OfferSerializer(offers, many=True).data)

    @action(detail=True, methods=['patch'])
    def accept(self, request, pk=None):
        offer = self.get_object()
        if not can_manage_offer(request.user, offer):
            return self._forbidden('Only the project owner can accept offers')
        if not self._set_status(offer, Offer.STATUS_ACCEPTED):
            return Response(
                {'message': f'Cannot accept an offer that is {offer.status}'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        data = OwnerOfferSerializer(offer).data
        data['depositAmount'] = str(offer.compute_deposit())
        data['paymentRequired'] = True
        return Response(data)

    @action(detail=True, methods=['patch'])
    def reject(self, request, pk=None):
        offer = self.get_object()
        if not can_manage_offer(request.user, offer):
            return self._forbidden('Only the project owner can reject offers')
        if not self._set_status(offer, Offer.STATUS_REJECTED):
            return Response(
                {'message': f'Cannot reject an offer that is {offer.status}'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(OwnerOfferSerializer(offer).data)

    @action(detail=True, methods=['post'], url_path='pay-deposit')
    def pay_deposit(self, request, pk=None):
        payment_id = request.data.get('paymentId')
        deposit_amount = request.data.get('depositAmount')
        if not payment_id or not deposit_amount:
            return Response(
                {'message': 'Payment ID and deposit amount are required'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        offer = self.get_object()
        if not can_manage_offer(request.user, offer):
            return self._forbidden('Only the project owner can pay deposits')
        if offer.status != Offer.STATUS_ACCEPTED or offer.deposit_paid:
            return Response(
                {'message': 'Invalid offer status or deposit already paid'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        # المبلغ المعتمد يُحسب من العرض وليس من الطلب
        verified_amount = offer.compute_deposit()

        # التحقق من الدفع لدى ميسر عند توفر المفتاح
        if settings.MOYASAR_SECRET_KEY:
            payment = MoyasarClient().get_payment(payment_id)
            if payment.get('status') != 'paid':
                logger.warning('Deposit payment %s for offer %s is %s', payment_id, offer.pk, payment.get('status'))
                return Response({'message': 'Payment has not been completed'}, status=status.HTTP_400_BAD_REQUEST)
            paid_halalas = payment.get('amount') or 0
            if payment.get('currency') != 'SAR' or int(paid_halalas) < to_halalas(verified_amount):
                logger.warning(
                    'Deposit payment %s for offer %s is %s %s, expected %s SAR',
                    payment_id, offer.pk, paid_halalas, payment.get('currency'), verified_amount,
                )
                return Response(
                    {'message': 'Payment amount does not cover the required deposit'},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            verified_amount = Decimal(int(paid_halalas)) / 100

        try:
            offer = record_deposit_payment(offer.pk, payment_id, verified_amount)
        except ValueError as exc:
            return Response({'message': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        company_user = offer.company.user
        return Response({
            'success': True,
            'offer': OwnerOfferSerializer(offer).data,
            'companyContact': {'name': company_user.name, 'email': company_user.email},
        })

    @action(detail=True, methods=['patch'])
    def complete(self, request, pk=None):
        offer = self.get_object()
        if not can_manage_offer(request.user, offer):
            return self._forbidden('Only the project owner can complete offers')
        if offer.status != Offer.STATUS_ACCEPTED or not offer.deposit_paid:
            return Response(
                {'message': 'Only accepted offers with a paid deposit can be completed'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        self._set_status(offer, Offer.STATUS_COMPLETED)
        project = offer.project
        project.status = Project.STATUS_COMPLETED
        project.save(update_fields=['status'])
        return Response(OwnerOfferSerializer(offer).data)

