"""URL routes for the blog (mounted under /api/)."""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import BlogCategoryViewSet, BlogCommentViewSet, BlogPostViewSet

router = DefaultRouter()
router.register(r'blog/categories', BlogCategoryViewSet, basename='blog-category')
router.register(r'blog/posts', BlogPostViewSet, basename='blog-post')
router.register(r'blog/comments', BlogCommentViewSet, basename='blog-comment')

urlpatterns = [
    path('', include(router.urls)),
]
