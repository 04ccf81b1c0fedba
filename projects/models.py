"""Database models for project postings."""

from django.conf import settings
from django.db import models


class Project(models.Model):
    """A software project posted by an entrepreneur.

    ``budget`` and ``duration`` are free text (e.g. "5000 - 10000 ريال").
    ``skills`` is a list of skill names used by the recommendation engine.
    """

    STATUS_OPEN = 'open'
    STATUS_IN_PROGRESS = 'in-progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_OPEN, 'Open'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    )

    HIGHLIGHT_HIGH_DEMAND = 'عالي الطلب'
    HIGHLIGHT_NEW = 'جديد'

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='projects',
        limit_choices_to={'role': 'entrepreneur'},
    )
    title = models.CharField(max_length=255)
    description = models.TextField()
    budget = models.CharField(max_length=100)
    duration = models.CharField(max_length=100)
    skills = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_OPEN)
    highlight_status = models.CharField(max_length=50, blank=True, default='')
    attachments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status', '-created_at'], name='project_status_created_idx'),
            models.Index(fields=['highlight_status'], name='project_highlight_idx'),
        ]

    def __str__(self):
        return f"{self.title} (Owner: {self.owner.username})"
