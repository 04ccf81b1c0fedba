from django.contrib import admin
from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'owner', 'budget', 'status', 'highlight_status', 'created_at')
    list_filter = ('status', 'highlight_status')
    search_fields = ('title', 'description', 'owner__username')
    list_editable = ('status', 'highlight_status')
    ordering = ('-created_at',)
