"""Serializers for project postings."""

from rest_framework import serializers

from .models import Project

ATTACHMENT_KEYS = ('id', 'name', 'url', 'type', 'size', 'uploadedAt')


class ProjectSerializer(serializers.ModelSerializer):
    """Project with its owner's username and display name."""

    username = serializers.ReadOnlyField(source='owner.username')
    name = serializers.ReadOnlyField(source='owner.name')
    attachments = serializers.ListField(child=serializers.DictField(), required=False)

    class Meta:
        model = Project
        fields = [
            'id', 'owner', 'username', 'name',
            'title', 'description', 'budget', 'duration', 'skills',
            'status', 'highlight_status', 'attachments', 'created_at',
        ]
        # status/highlight are managed by the offer workflow and admins
        read_only_fields = ['owner', 'status', 'highlight_status', 'created_at']

    def validate_title(self, value):
        value = (value or '').strip()
        if len(value) < 3:
            raise serializers.ValidationError("عنوان المشروع يجب أن يكون 3 أحرف على الأقل")
        return value

    def validate_skills(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("المهارات يجب أن تكون قائمة.")
        cleaned = []
        for item in value:
            s = str(item or '').strip()
            if s and s not in cleaned:
                cleaned.append(s)
        return cleaned

    def validate_attachments(self, value):
        for item in value:
            missing = [k for k in ATTACHMENT_KEYS if k not in item]
            if missing:
                raise serializers.ValidationError(f"حقول المرفق ناقصة: {', '.join(missing)}")
        return [{k: item[k] for k in ATTACHMENT_KEYS} for item in value]
