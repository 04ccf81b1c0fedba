"""Django admin configuration for NDAs."""

from django.contrib import admin

from .models import NdaAgreement


@admin.register(NdaAgreement)
class NdaAgreementAdmin(admin.ModelAdmin):
    list_display = ('id', 'get_project', 'get_company', 'status', 'sadiq_envelope_id', 'signed_at', 'created_at')
    list_filter = ('status',)
    search_fields = ('project__title', 'company__user__name', 'sadiq_envelope_id', 'sadiq_reference_number')
    readonly_fields = ('sadiq_document_id', 'sadiq_reference_number', 'sadiq_envelope_id', 'signed_at', 'created_at')
    exclude = ('signed_file',)

    def get_project(self, obj):
        return obj.project.title
    get_project.short_description = 'المشروع'

    def get_company(self, obj):
        return obj.company.user.name
    get_company.short_description = 'الشركة'
