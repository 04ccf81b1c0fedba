"""Django admin configuration for site content."""

from django.contrib import admin
from django.utils.html import format_html

from .models import ContactMessage, FeaturedClient, PremiumClient, SiteSetting, Testimonial


@admin.register(SiteSetting)
class SiteSettingAdmin(admin.ModelAdmin):
    list_display = ('key', 'updated_by', 'updated_at')
    search_fields = ('key',)


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'subject', 'colored_status', 'created_at')
    list_filter = ('status',)
    search_fields = ('name', 'email', 'subject', 'message')
    readonly_fields = ('created_at', 'replied_at')

    def colored_status(self, obj):
        colors = {'new': 'red', 'read': 'orange', 'replied': 'green', 'archived': 'gray'}
        return format_html('<b style="color: {};">{}</b>', colors.get(obj.status, 'black'), obj.get_status_display())
    colored_status.short_description = 'الحالة'


@admin.register(FeaturedClient)
class FeaturedClientAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'order', 'active')
    list_editable = ('order', 'active')


@admin.register(PremiumClient)
class PremiumClientAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'featured', 'active')
    list_filter = ('featured', 'active')


@admin.register(Testimonial)
class TestimonialAdmin(admin.ModelAdmin):
    list_display = ('user', 'role', 'rating', 'created_at')
    list_filter = ('role', 'rating')
