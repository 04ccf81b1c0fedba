"""Messaging API views.

Every message passes the contact-information filter before it is stored.
"""

import logging

from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from . import content_filter
from .models import Message
from .serializers import MessageSerializer, SendMessageSerializer

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = 'الرسالة تحتوي على معلومات اتصال محظورة'
BLOCKED_SEQUENTIAL_MESSAGE = 'تم رصد محاولة لتمرير معلومات اتصال عبر عدة رسائل'


class MessageViewSet(viewsets.GenericViewSet):
    """The caller's messages: inbox/outbox, conversations, send and read receipts."""

    serializer_class = MessageSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return (
            Message.objects.filter(Q(from_user=user) | Q(to_user=user))
            .select_related('from_user', 'to_user')
        )

    def list(self, request):
        return Response(MessageSerializer(self.get_queryset(), many=True).data)

    def create(self, request):
        serializer = SendMessageSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        to_user = serializer.validated_data['toUserId']
        content = serializer.validated_data['content']
        project = serializer.validated_data.get('projectId')

        # 1. فحص المحتوى قبل الحفظ
        result = content_filter.check_message(content, request.user.id, to_user.id)
        if not result['safe']:
            violations = result['violations']
            logger.info('Blocked message from %s to %s: %s', request.user.id, to_user.id, violations)
            message = (
                BLOCKED_SEQUENTIAL_MESSAGE
                if content_filter.SEQUENTIAL_VIOLATION in violations
                else BLOCKED_MESSAGE
            )
            return Response(
                {'message': message, 'violations': violations, 'error': True},
                status=status.HTTP_400_BAD_REQUEST,
            )

        # 2. حفظ الرسالة وتسجيلها في سجل المحادثة
        content_filter.add_to_history(request.user.id, to_user.id, content)
        msg = Message.objects.create(
            content=content, from_user=request.user, to_user=to_user, project=project,
        )
        return Response(MessageSerializer(msg).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path=r'conversation/(?P<user_id>\d+)')
    def conversation(self, request, user_id=None):
        me = request.user
        qs = Message.objects.filter(
            Q(from_user=me, to_user_id=user_id) | Q(from_user_id=user_id, to_user=me)
        ).select_related('from_user', 'to_user')

        project_id = request.query_params.get('projectId')
        if project_id:
            try:
                project_id = int(project_id)
            except ValueError:
                return Response({'message': 'Invalid project ID'}, status=status.HTTP_400_BAD_REQUEST)
            qs = qs.filter(project_id=project_id)

        return Response(MessageSerializer(qs.order_by('created_at', 'id'), many=True).data)

    @action(detail=True, methods=['patch'])
    def read(self, request, pk=None):
        msg = Message.objects.filter(pk=pk, to_user=request.user).first()
        if msg is None:
            return Response({'message': 'Message not found'}, status=status.HTTP_404_NOT_FOUND)
        if not msg.read:
            msg.read = True
            msg.save(update_fields=['read'])
        return Response(MessageSerializer(msg).data)

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        count = Message.objects.filter(to_user=request.user, read=False).count()
        return Response({'count': count})
