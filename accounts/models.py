"""Database models for users and company profiles."""

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


# 1. الموديل الأساسي للمستخدم
class User(AbstractUser):
    """Custom user model.

    Extends Django's :class:`~django.contrib.auth.models.AbstractUser` with:
    - ``role`` to separate entrepreneur, company and admin flows
    - display ``name`` and ``avatar``
    - optional ``phone_number`` (stored in E.164)
    """

    ROLE_ENTREPRENEUR = 'entrepreneur'
    ROLE_COMPANY = 'company'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = (
        (ROLE_ENTREPRENEUR, 'Entrepreneur'),
        (ROLE_COMPANY, 'Company'),
        (ROLE_ADMIN, 'Admin'),
    )

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_ENTREPRENEUR)
    name = models.CharField(max_length=100)
    avatar = models.URLField(max_length=500, blank=True, default='')
    phone_number = models.CharField(max_length=20, null=True, blank=True)

    @property
    def is_admin_role(self):
        return self.role == self.ROLE_ADMIN or self.is_superuser

    def __str__(self):
        return self.username


# 2. بروفايل الشركة (شركة واحدة لكل مستخدم)
class CompanyProfile(models.Model):
    """Public profile of a software company.

    ``skills`` feeds the recommendation engine; ``verified`` is set by admins
    and ``cr_verified_at`` by a successful commercial-registry lookup.
    """

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='company_profile')
    description = models.TextField()
    logo = models.URLField(max_length=500, blank=True, default='')
    cover_photo = models.URLField(max_length=500, blank=True, default='')
    website = models.URLField(max_length=255, blank=True, default='')
    location = models.CharField(max_length=255, blank=True, default='')
    skills = models.JSONField(default=list, blank=True)
    rating = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    review_count = models.PositiveIntegerField(default=0)
    verified = models.BooleanField(default=False)
    cr_number = models.CharField(max_length=20, blank=True, default='')
    cr_verified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Company Profile"
        verbose_name_plural = "Company Profiles"
        indexes = [
            models.Index(fields=['verified'], name='company_verified_idx'),
        ]

    def __str__(self):
        return self.user.name or self.user.username
