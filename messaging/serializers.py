"""DRF serializers for messaging APIs."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from projects.models import Project

from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    from_username = serializers.ReadOnlyField(source='from_user.username')
    from_name = serializers.ReadOnlyField(source='from_user.name')
    to_username = serializers.ReadOnlyField(source='to_user.username')
    to_name = serializers.ReadOnlyField(source='to_user.name')

    class Meta:
        model = Message
        fields = [
            'id', 'content', 'from_user', 'from_username', 'from_name',
            'to_user', 'to_username', 'to_name', 'project', 'read', 'created_at',
        ]
        read_only_fields = fields


class SendMessageSerializer(serializers.Serializer):
    """Input for ``POST /api/messages/`` (camelCase keys as sent by the client)."""

    toUserId = serializers.IntegerField()
    content = serializers.CharField(max_length=5000, trim_whitespace=True)
    projectId = serializers.IntegerField(required=False, allow_null=True)

    def validate_toUserId(self, value):
        user = get_user_model().objects.filter(pk=value).first()
        if user is None:
            raise serializers.ValidationError('Recipient not found')
        request = self.context.get('request')
        if request is not None and request.user.pk == user.pk:
            raise serializers.ValidationError('Cannot send a message to yourself')
        return user

    def validate_projectId(self, value):
        if value is None:
            return None
        project = Project.objects.filter(pk=value).first()
        if project is None:
            raise serializers.ValidationError('Project not found')
        return project
