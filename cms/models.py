"""Database models for site content managed from the admin dashboard."""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


# 1. إعدادات الموقع
class SiteSetting(models.Model):
    """Free-form key/value settings read by the front end (e.g. ``about``)."""

    key = models.CharField(max_length=100, unique=True)
    value = models.JSONField(null=True, blank=True)
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['key']

    def __str__(self):
        return self.key


# 2. رسائل التواصل
class ContactMessage(models.Model):
    STATUS_NEW = 'new'
    STATUS_READ = 'read'
    STATUS_REPLIED = 'replied'
    STATUS_ARCHIVED = 'archived'
    STATUS_CHOICES = (
        (STATUS_NEW, 'New'),
        (STATUS_READ, 'Read'),
        (STATUS_REPLIED, 'Replied'),
        (STATUS_ARCHIVED, 'Archived'),
    )

    name = models.CharField(max_length=255)
    email = models.CharField(max_length=255)
    phone = models.CharField(max_length=30, blank=True, null=True)
    subject = models.CharField(max_length=255, blank=True)
    message = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW)
    notes = models.TextField(blank=True, null=True)
    reply = models.TextField(blank=True, null=True)
    replied_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f'{self.name} <{self.email}> ({self.status})'


# 3. العملاء المميزون
class FeaturedClient(models.Model):
    name = models.CharField(max_length=255)
    logo = models.CharField(max_length=500)
    website = models.CharField(max_length=500, blank=True)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return self.name


class PremiumClient(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    logo = models.CharField(max_length=500)
    category = models.CharField(max_length=100, blank=True)
    website = models.CharField(max_length=500, blank=True)
    featured = models.BooleanField(default=False)
    active = models.BooleanField(default=True)
    benefits = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-featured', 'name']

    def __str__(self):
        return self.name


# 4. آراء المستخدمين
class Testimonial(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='testimonials')
    content = models.TextField()
    role = models.CharField(max_length=20)
    company_name = models.CharField(max_length=255, blank=True, null=True)
    user_title = models.CharField(max_length=255, blank=True, null=True)
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    avatar = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f'{self.user} ({self.rating}/5)'
