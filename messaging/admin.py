from django.contrib import admin

from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'from_user', 'to_user', 'project', 'read', 'created_at')
    list_filter = ('read', 'created_at')
    search_fields = ('content', 'from_user__username', 'to_user__username')
    readonly_fields = ('created_at',)
