"""Blog API views.

Public readers see published posts and approved comments; admins manage
categories, posts of every status and comment moderation.
"""

import logging

from django.db.models import F
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.permissions import IsAdminOrReadOnly, IsAdminRole, is_admin
from projects.views import StandardResultsSetPagination

from .models import BlogCategory, BlogComment, BlogPost
from .serializers import (
    BlogCategorySerializer,
    BlogCommentSerializer,
    BlogPostSerializer,
    CommentStatusSerializer,
)

logger = logging.getLogger(__name__)


# 1. التصنيفات
class BlogCategoryViewSet(viewsets.ModelViewSet):
    queryset = BlogCategory.objects.all()
    serializer_class = BlogCategorySerializer
    permission_classes = [IsAdminOrReadOnly]
    lookup_field = 'slug'


# 2. المقالات
class BlogPostViewSet(viewsets.ModelViewSet):
    """Posts by slug.

    - Public users: published posts only; reading a post counts a view.
    - Admins: create/update/delete, and ``all/`` lists every status.
    """

    serializer_class = BlogPostSerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = StandardResultsSetPagination
    lookup_field = 'slug'

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category__slug']
    search_fields = ['title', 'excerpt', 'content']
    ordering_fields = ['published_at', 'views', 'created_at']

    def get_queryset(self):
        qs = BlogPost.objects.select_related('author', 'category')
        if self.action == 'list' or not is_admin(self.request.user):
            qs = qs.filter(status=BlogPost.STATUS_PUBLISHED)
        return qs

    def get_permissions(self):
        if self.action == 'all_posts':
            return [IsAdminRole()]
        if self.action == 'comments':
            return [AllowAny()]
        return super().get_permissions()

    def perform_create(self, serializer):
        post = serializer.save(author=self.request.user)
        logger.info('Blog post %s created by %s', post.slug, self.request.user.pk)

    def retrieve(self, request, *args, **kwargs):
        post = self.get_object()
        BlogPost.objects.filter(pk=post.pk).update(views=F('views') + 1)
        post.refresh_from_db(fields=['views'])
        return Response(self.get_serializer(post).data)

    @action(detail=False, methods=['get'], url_path='all')
    def all_posts(self, request):
        qs = BlogPost.objects.select_related('author', 'category')
        qs = self.filter_queryset(qs)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=True, methods=['get', 'post'])
    def comments(self, request, slug=None):
        post = self.get_object()
        if request.method == 'GET':
            approved = post.comments.filter(status=BlogComment.STATUS_APPROVED)
            return Response(BlogCommentSerializer(approved, many=True).data)

        serializer = BlogCommentSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = request.user if request.user.is_authenticated else None
        extra = {'post': post, 'user': user}
        if user is not None:
            extra['author_name'] = serializer.validated_data.get('author_name') or user.name
            extra['author_email'] = serializer.validated_data.get('author_email') or user.email
        comment = serializer.save(**extra)
        return Response(BlogCommentSerializer(comment).data, status=status.HTTP_201_CREATED)


# 3. إدارة التعليقات
class BlogCommentViewSet(mixins.ListModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """Admin moderation of comments."""

    queryset = BlogComment.objects.select_related('post')
    serializer_class = BlogCommentSerializer
    permission_classes = [IsAdminRole]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['status', 'post']

    def partial_update(self, request, pk=None):
        comment = self.get_object()
        serializer = CommentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment.status = serializer.validated_data['status']
        comment.save(update_fields=['status', 'updated_at'])
        return Response(BlogCommentSerializer(comment).data)
