"""NDA API views.

Contains:
- Two-stage NDA: company initiates, project owner completes and Sadiq sends
  the signing invitations
- NDA listing/detail, status refresh and signed document download
- Sadiq webhook
- Admin proxies to the Sadiq API
"""

import logging

import requests

from django.conf import settings
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdminRole, is_admin
from messaging.models import Message
from offers.models import Offer
from offers.permissions import company_profile_of
from projects.models import Project

from .documents import render_nda_base64
from .models import NdaAgreement
from .sadiq import SadiqClient, SadiqError
from .serializers import NdaAgreementSerializer, SignatorySerializer

logger = logging.getLogger(__name__)

SIGNED_STATUSES = {'completed', 'signed'}


def _can_view(user, nda):
    if is_admin(user) or nda.project.owner_id == user.id:
        return True
    return nda.company.user_id == user.id


def _get_nda_for(user, nda_id):
    nda = NdaAgreement.objects.select_related('project', 'company__user').filter(pk=nda_id).first()
    if nda is None or not _can_view(user, nda):
        return None
    return nda


def _not_found():
    return Response({'message': 'NDA not found'}, status=status.HTTP_404_NOT_FOUND)


def _reported_status(payload):
    value = payload.get('status') or payload.get('envelopeStatus') or payload.get('documentStatus') or ''
    return str(value).strip().lower()


# 1. المرحلة الأولى: الشركة تبدأ الاتفاقية
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def initiate_nda(request, project_id):
    project = Project.objects.select_related('owner').filter(pk=project_id).first()
    if project is None:
        return Response({'message': 'Project not found'}, status=status.HTTP_404_NOT_FOUND)

    company = company_profile_of(request.user)
    if company is None:
        return Response({'message': 'Only companies can initiate NDAs'}, status=status.HTTP_403_FORBIDDEN)

    offer = Offer.objects.filter(project=project, company=company).first()
    if offer is None:
        return Response(
            {'message': 'You must submit an offer before requesting an NDA'},
            status=status.HTTP_403_FORBIDDEN,
        )

    active = NdaAgreement.objects.filter(project=project, company=company).exclude(status=NdaAgreement.STATUS_CANCELLED)
    if active.exists():
        return Response({'message': 'An NDA already exists for this project'}, status=status.HTTP_400_BAD_REQUEST)

    rep = SignatorySerializer(data=request.data.get('companyRep') or {})
    rep.is_valid(raise_exception=True)

    nda = NdaAgreement.objects.create(
        project=project,
        company=company,
        offer=offer,
        company_signatory_name=rep.validated_data['name'],
        company_signatory_email=rep.validated_data['email'],
        company_signatory_phone=rep.validated_data['phone'],
    )
    Message.objects.create(
        from_user=request.user,
        to_user=project.owner,
        project=project,
        content=(
            f'طلبت شركة {request.user.name} توقيع اتفاقية عدم إفصاح لمشروع "{project.title}". '
            'يرجى إكمال بياناتك لإرسال دعوات التوقيع عبر صادق.'
        ),
    )
    logger.info('NDA %s initiated by company %s for project %s', nda.id, company.id, project.id)
    return Response(NdaAgreementSerializer(nda).data, status=status.HTTP_201_CREATED)


# 2. المرحلة الثانية: صاحب المشروع يكمل ويرسل الدعوات
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def complete_nda(request, nda_id):
    nda = _get_nda_for(request.user, nda_id)
    if nda is None:
        return _not_found()
    if nda.project.owner_id != request.user.id:
        return Response({'message': 'Only the project owner can complete the NDA'}, status=status.HTTP_403_FORBIDDEN)
    if nda.status not in (NdaAgreement.STATUS_AWAITING_ENTREPRENEUR, NdaAgreement.STATUS_READY_FOR_SADIQ):
        return Response({'message': 'NDA is not awaiting completion'}, status=status.HTTP_400_BAD_REQUEST)

    entrepreneur = SignatorySerializer(data=request.data.get('entrepreneur') or {})
    entrepreneur.is_valid(raise_exception=True)
    signer = entrepreneur.validated_data

    nda.entrepreneur_signatory_name = signer['name']
    nda.entrepreneur_signatory_email = signer['email']
    nda.entrepreneur_signatory_phone = signer['phone']
    nda.status = NdaAgreement.STATUS_READY_FOR_SADIQ
    nda.save()

    company_rep = {
        'name': nda.company_signatory_name,
        'email': nda.company_signatory_email,
        'phone': nda.company_signatory_phone,
    }
    client = SadiqClient()
    try:
        document = render_nda_base64(nda.project, company_rep, dict(signer))
        uploaded = client.upload_document(document, f'nda-project-{nda.project_id}.pdf')
        invited = client.send_signing_invitations(
            uploaded['id'], [dict(signer), company_rep], nda.project.title,
        )
    except SadiqError:
        logger.exception('Sadiq workflow failed for NDA %s', nda.id)
        raise

    nda.sadiq_document_id = uploaded['id']
    nda.sadiq_reference_number = uploaded['referenceNumber']
    nda.sadiq_envelope_id = invited['envelopeId']
    nda.status = NdaAgreement.STATUS_INVITATION_SENT
    nda.save()
    logger.info('NDA %s sent to Sadiq (envelope %s)', nda.id, nda.sadiq_envelope_id)
    return Response(NdaAgreementSerializer(nda).data)


# 3. عرض الاتفاقيات
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def project_ndas(request, project_id):
    project = get_object_or_404(Project, pk=project_id)
    ndas = NdaAgreement.objects.filter(project=project).select_related('project', 'company__user')
    user = request.user
    if not (is_admin(user) or project.owner_id == user.id):
        ndas = ndas.filter(company__user=user)
    return Response(NdaAgreementSerializer(ndas, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def nda_detail(request, nda_id):
    nda = _get_nda_for(request.user, nda_id)
    if nda is None:
        return _not_found()
    return Response(NdaAgreementSerializer(nda).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def nda_status(request, nda_id):
    nda = _get_nda_for(request.user, nda_id)
    if nda is None:
        return _not_found()

    envelope = {}
    if nda.sadiq_envelope_id and nda.status == NdaAgreement.STATUS_INVITATION_SENT:
        envelope = SadiqClient().get_envelope_status(nda.sadiq_envelope_id)
        if _reported_status(envelope) in SIGNED_STATUSES:
            nda.mark_signed()
            logger.info('NDA %s signed (status refresh)', nda.id)

    data = NdaAgreementSerializer(nda).data
    data['sadiqStatus'] = envelope
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def nda_download(request, nda_id):
    nda = _get_nda_for(request.user, nda_id)
    if nda is None:
        return _not_found()
    if nda.status != NdaAgreement.STATUS_SIGNED:
        return Response({'message': 'NDA has not been signed yet'}, status=status.HTTP_400_BAD_REQUEST)

    if not nda.signed_file:
        nda.signed_file = SadiqClient().download_signed_document(nda.sadiq_document_id)
        nda.save(update_fields=['signed_file'])
    return Response({'fileName': f'nda-{nda.id}.pdf', 'file': nda.signed_file})


# 4. Webhook صادق
@api_view(['POST'])
@permission_classes([AllowAny])
def sadiq_webhook(request):
    token = settings.SADIQ_WEBHOOK_TOKEN
    if not token or request.headers.get('HeaderToken') != token:
        logger.warning('Rejected Sadiq webhook with invalid token')
        return Response({'message': 'Invalid webhook token'}, status=status.HTTP_401_UNAUTHORIZED)

    payload = request.data if isinstance(request.data, dict) else {}
    ids = [payload.get(k) for k in ('envelopeId', 'documentId', 'referenceNumber')]
    lookup = Q()
    if ids[0]:
        lookup |= Q(sadiq_envelope_id=ids[0])
    if ids[1]:
        lookup |= Q(sadiq_document_id=ids[1])
    if ids[2]:
        lookup |= Q(sadiq_reference_number=ids[2])
    if not lookup:
        return Response({'message': 'Missing document reference'}, status=status.HTTP_400_BAD_REQUEST)

    nda = NdaAgreement.objects.filter(lookup).first()
    if nda is None:
        return _not_found()

    if _reported_status(payload) in SIGNED_STATUSES and nda.status != NdaAgreement.STATUS_SIGNED:
        nda.mark_signed()
        logger.info('NDA %s signed (webhook)', nda.id)
    return Response({'received': True, 'status': nda.status})


# 5. وكلاء صادق للمشرف
@api_view(['POST'])
@permission_classes([IsAdminRole])
def sadiq_authenticate(request):
    return Response(SadiqClient().authenticate())


@api_view(['POST'])
@permission_classes([IsAdminRole])
def sadiq_send_invitation(request):
    access_token = request.data.get('accessToken')
    if not access_token:
        return Response({'message': 'رمز الوصول مطلوب لإرسال الدعوة'}, status=status.HTTP_400_BAD_REQUEST)

    client = SadiqClient()
    try:
        response = client.session.post(
            f'{client.base_url}/IntegrationService/Invitation/Send-Invitation',
            json=request.data.get('invitationData') or {},
            headers={'Authorization': f'Bearer {access_token}'},
            timeout=client.timeout,
        )
    except requests.RequestException as exc:
        raise SadiqError('فشل في إرسال دعوة التوقيع عبر صادق') from exc
    if not response.ok:
        return Response({'message': 'Invitation failed', 'details': response.text}, status=response.status_code)
    return Response(response.json())


@api_view(['POST'])
@permission_classes([IsAdminRole])
def sadiq_upload_document(request):
    document = request.data.get('documentBase64')
    if not document:
        return Response({'message': 'رمز الوصول والوثيقة مطلوبان'}, status=status.HTTP_400_BAD_REQUEST)
    name = request.data.get('documentName') or 'document.pdf'
    return Response(SadiqClient().upload_document(document, name))
