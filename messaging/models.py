"""Database models for direct messages between users."""

from django.conf import settings
from django.db import models


class Message(models.Model):
    """A message from one user to another, optionally about a project."""

    content = models.TextField()
    from_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages')
    to_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='received_messages')
    project = models.ForeignKey(
        'projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='messages',
    )
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['to_user', 'read'], name='message_unread_idx'),
            models.Index(fields=['from_user', 'to_user'], name='message_pair_idx'),
        ]

    def __str__(self):
        return f"Message #{self.id} {self.from_user_id} -> {self.to_user_id}"
