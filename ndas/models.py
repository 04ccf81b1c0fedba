"""Database models for non-disclosure agreements signed through Sadiq."""

from django.db import models
from django.utils import timezone


class NdaAgreement(models.Model):
    """An NDA between a project owner and a company that bid on the project.

    The company fills in its signatory first (``awaiting_entrepreneur``); the
    owner then completes it, which uploads the document to Sadiq and sends
    the signing invitations (``invitation_sent``).
    """

    STATUS_AWAITING_ENTREPRENEUR = 'awaiting_entrepreneur'
    STATUS_READY_FOR_SADIQ = 'ready_for_sadiq'
    STATUS_INVITATION_SENT = 'invitation_sent'
    STATUS_SIGNED = 'signed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_AWAITING_ENTREPRENEUR, 'Awaiting entrepreneur'),
        (STATUS_READY_FOR_SADIQ, 'Ready for Sadiq'),
        (STATUS_INVITATION_SENT, 'Invitation sent'),
        (STATUS_SIGNED, 'Signed'),
        (STATUS_CANCELLED, 'Cancelled'),
    )

    project = models.ForeignKey('projects.Project', on_delete=models.CASCADE, related_name='ndas')
    company = models.ForeignKey('accounts.CompanyProfile', on_delete=models.CASCADE, related_name='ndas')
    offer = models.ForeignKey('offers.Offer', on_delete=models.SET_NULL, null=True, blank=True, related_name='ndas')
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_AWAITING_ENTREPRENEUR)

    company_signatory_name = models.CharField(max_length=255)
    company_signatory_email = models.EmailField()
    company_signatory_phone = models.CharField(max_length=20)
    entrepreneur_signatory_name = models.CharField(max_length=255, blank=True)
    entrepreneur_signatory_email = models.EmailField(blank=True)
    entrepreneur_signatory_phone = models.CharField(max_length=20, blank=True)

    sadiq_document_id = models.CharField(max_length=255, blank=True)
    sadiq_reference_number = models.CharField(max_length=255, blank=True)
    sadiq_envelope_id = models.CharField(max_length=255, blank=True)

    signed_at = models.DateTimeField(null=True, blank=True)
    signed_file = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['sadiq_envelope_id'], name='nda_envelope_idx'),
            models.Index(fields=['sadiq_document_id'], name='nda_document_idx'),
        ]

    def __str__(self):
        return f'NDA #{self.id} - {self.project_id} ({self.status})'

    def mark_signed(self, signed_at=None):
        self.status = self.STATUS_SIGNED
        self.signed_at = signed_at or timezone.now()
        self.save(update_fields=['status', 'signed_at'])
