"""Django admin configuration for offers."""

from django.contrib import admin

from .models import Offer


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    """Admin configuration for offers."""

    list_display = ('id', 'get_project', 'get_company', 'amount', 'status', 'deposit_paid', 'contact_revealed', 'created_at')
    list_filter = ('status', 'deposit_paid', 'contact_revealed')
    search_fields = ('project__title', 'company__user__name', 'company__user__username')
    readonly_fields = ('deposit_date', 'created_at')

    def get_project(self, obj):
        return obj.project.title
    get_project.short_description = 'المشروع'

    def get_company(self, obj):
        return obj.company.user.name
    get_company.short_description = 'الشركة'
