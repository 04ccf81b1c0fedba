"""Database models for offers (company bids on projects)."""

import re
from decimal import ROUND_HALF_UP, Decimal

from django.db import models


def amount_digits(value):
    """Return the integer formed by the digits of a free-text amount, or None."""
    digits = re.sub(r'[^0-9]', '', str(value or ''))
    return int(digits) if digits else None


class Offer(models.Model):
    """A company's bid on a project.

    Contact details stay hidden (``contact_revealed``) until the project
    owner pays the deposit on an accepted offer.
    """

    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_REJECTED = 'rejected'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_COMPLETED, 'Completed'),
    )

    DEPOSIT_RATE = '0.1'

    project = models.ForeignKey('projects.Project', on_delete=models.CASCADE, related_name='offers')
    company = models.ForeignKey('accounts.CompanyProfile', on_delete=models.CASCADE, related_name='offers')
    amount = models.CharField(max_length=100)
    duration = models.CharField(max_length=100)
    description = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    deposit_paid = models.BooleanField(default=False)
    deposit_amount = models.CharField(max_length=50, null=True, blank=True)
    deposit_date = models.DateTimeField(null=True, blank=True)
    contact_revealed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['project', 'company'], name='unique_offer_per_company_project'),
        ]
        indexes = [
            models.Index(fields=['project', 'status'], name='offer_project_status_idx'),
        ]

    def __str__(self):
        return f"Offer #{self.id} on {self.project_id} by company {self.company_id}"

    @property
    def amount_value(self):
        return amount_digits(self.amount)

    def compute_deposit(self):
        """10% of the numeric offer amount, rounded to the nearest riyal."""
        value = Decimal(self.amount_value or 0) * Decimal(self.DEPOSIT_RATE)
        return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
