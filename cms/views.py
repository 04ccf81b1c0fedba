"""Site content API views.

Contains:
- Site settings (public read, admin upsert)
- Contact form and the admin inbox
- Featured and premium clients
- Testimonials
"""

import logging

from django.utils import timezone
from rest_framework import generics, mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from accounts.permissions import IsAdminOrReadOnly, IsAdminRole, is_admin
from projects.views import StandardResultsSetPagination

from .models import ContactMessage, FeaturedClient, PremiumClient, SiteSetting, Testimonial
from .serializers import (
    ContactMessageSerializer,
    FeaturedClientSerializer,
    PremiumClientSerializer,
    SiteSettingSerializer,
    TestimonialSerializer,
)

logger = logging.getLogger(__name__)


# 1. إعدادات الموقع
@api_view(['GET'])
@permission_classes([AllowAny])
def site_settings(request):
    return Response(SiteSettingSerializer(SiteSetting.objects.all(), many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def site_setting_detail(request, key):
    if request.method == 'GET':
        setting = SiteSetting.objects.filter(key=key).first()
        if setting is None:
            return Response({'message': 'Setting not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(SiteSettingSerializer(setting).data)

    if 'value' not in request.data or request.data.get('value') is None:
        return Response({'message': 'Value is required'}, status=status.HTTP_400_BAD_REQUEST)

    setting, _ = SiteSetting.objects.update_or_create(
        key=key,
        defaults={'value': request.data['value'], 'updated_by': request.user},
    )
    logger.info('Site setting %s updated by %s', key, request.user.pk)
    return Response(SiteSettingSerializer(setting).data)


# 2. رسائل التواصل
class ContactMessageViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Public contact form; everything else is the admin inbox."""

    queryset = ContactMessage.objects.all()
    serializer_class = ContactMessageSerializer
    pagination_class = StandardResultsSetPagination

    def get_permissions(self):
        if self.action == 'create':
            return [AllowAny()]
        return [IsAdminRole()]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contact = serializer.save()
        logger.info('Contact message %s received from %s', contact.id, contact.email)
        return Response(
            {
                'success': True,
                'message': 'تم استلام رسالتك بنجاح، سنتواصل معك قريباً',
                'contactMessage': self.get_serializer(contact).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, *args, **kwargs):
        contact = self.get_object()
        if contact.status == ContactMessage.STATUS_NEW:
            contact.status = ContactMessage.STATUS_READ
            contact.save(update_fields=['status'])
        return Response(self.get_serializer(contact).data)

    @action(detail=True, methods=['patch'], url_path='status')
    def set_status(self, request, pk=None):
        contact = self.get_object()
        new_status = request.data.get('status')
        if new_status not in dict(ContactMessage.STATUS_CHOICES):
            return Response({'message': 'Invalid status'}, status=status.HTTP_400_BAD_REQUEST)
        contact.status = new_status
        contact.save(update_fields=['status'])
        return Response(self.get_serializer(contact).data)

    @action(detail=True, methods=['patch'])
    def notes(self, request, pk=None):
        contact = self.get_object()
        contact.notes = request.data.get('notes') or ''
        contact.save(update_fields=['notes'])
        return Response(self.get_serializer(contact).data)

    @action(detail=True, methods=['post'])
    def reply(self, request, pk=None):
        contact = self.get_object()
        text = (request.data.get('replyMessage') or request.data.get('reply') or '').strip()
        if not text:
            return Response({'message': 'Reply message is required'}, status=status.HTTP_400_BAD_REQUEST)
        contact.reply = text
        contact.status = ContactMessage.STATUS_REPLIED
        contact.replied_at = timezone.now()
        contact.save(update_fields=['reply', 'status', 'replied_at'])
        logger.info('Contact message %s replied by %s', contact.id, request.user.pk)
        return Response(self.get_serializer(contact).data)


# 3. العملاء المميزون
@api_view(['GET'])
@permission_classes([AllowAny])
def featured_clients(request):
    clients = FeaturedClient.objects.filter(active=True).order_by('order', 'id')
    return Response(FeaturedClientSerializer(clients, many=True).data)


class FeaturedClientAdminViewSet(viewsets.ModelViewSet):
    queryset = FeaturedClient.objects.all()
    serializer_class = FeaturedClientSerializer
    permission_classes = [IsAdminRole]


class PremiumClientViewSet(viewsets.ModelViewSet):
    """Active premium clients for everyone; admins see and manage all of them."""

    serializer_class = PremiumClientSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        if is_admin(self.request.user):
            return PremiumClient.objects.all()
        return PremiumClient.objects.filter(active=True)


# 4. آراء المستخدمين
class TestimonialListCreateView(generics.ListCreateAPIView):
    queryset = Testimonial.objects.select_related('user')
    serializer_class = TestimonialSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]

    def perform_create(self, serializer):
        # الدور يؤخذ من حساب المستخدم وليس من الطلب
        serializer.save(user=self.request.user, role=self.request.user.role)

