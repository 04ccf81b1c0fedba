"""Django admin configuration for the blog."""

from django.contrib import admin

from .models import BlogCategory, BlogComment, BlogPost


@admin.register(BlogCategory)
class BlogCategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'parent', 'order')
    prepopulated_fields = {'slug': ('name',)}
    search_fields = ('name', 'slug')


@admin.register(BlogPost)
class BlogPostAdmin(admin.ModelAdmin):
    list_display = ('title', 'status', 'category', 'author', 'views', 'published_at')
    list_filter = ('status', 'category')
    search_fields = ('title', 'excerpt', 'content')
    prepopulated_fields = {'slug': ('title',)}
    readonly_fields = ('views', 'created_at', 'updated_at')


@admin.register(BlogComment)
class BlogCommentAdmin(admin.ModelAdmin):
    list_display = ('id', 'post', 'author_name', 'status', 'created_at')
    list_filter = ('status',)

    # مراجعة التعليقات دفعة واحدة
    actions = ['approve_comments', 'mark_as_spam']

    def approve_comments(self, request, queryset):
        queryset.update(status=BlogComment.STATUS_APPROVED)
    approve_comments.short_description = 'اعتماد التعليقات المحددة'

    def mark_as_spam(self, request, queryset):
        queryset.update(status=BlogComment.STATUS_SPAM)
    mark_as_spam.short_description = 'تصنيف التعليقات المحددة كرسائل مزعجة'
