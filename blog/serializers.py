"""DRF serializers for blog APIs."""

from rest_framework import serializers

from .models import BlogCategory, BlogComment, BlogPost


class BlogCategorySerializer(serializers.ModelSerializer):
    post_count = serializers.SerializerMethodField()

    class Meta:
        model = BlogCategory
        fields = ['id', 'name', 'slug', 'description', 'image', 'parent', 'order', 'post_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_post_count(self, obj):
        return obj.posts.filter(status=BlogPost.STATUS_PUBLISHED).count()


class BlogPostSerializer(serializers.ModelSerializer):
    author_name = serializers.ReadOnlyField(source='author.name')
    category_name = serializers.ReadOnlyField(source='category.name')
    category_slug = serializers.ReadOnlyField(source='category.slug')

    class Meta:
        model = BlogPost
        fields = [
            'id', 'title', 'slug', 'excerpt', 'content', 'status', 'featured_image',
            'author', 'author_name', 'category', 'category_name', 'category_slug',
            'tags', 'meta_title', 'meta_description', 'meta_keywords',
            'views', 'published_at', 'created_at', 'updated_at',
        ]
        read_only_fields = ['author', 'views', 'published_at', 'created_at', 'updated_at']

    def validate_tags(self, value):
        if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
            raise serializers.ValidationError('tags must be a list of strings')
        return value


class BlogCommentSerializer(serializers.ModelSerializer):

    class Meta:
        model = BlogComment
        fields = ['id', 'post', 'user', 'parent', 'author_name', 'author_email', 'content', 'status', 'created_at']
        read_only_fields = ['post', 'user', 'status', 'created_at']

    def validate(self, attrs):
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        if not (user and user.is_authenticated) and not attrs.get('author_name'):
            raise serializers.ValidationError({'author_name': 'الاسم مطلوب'})
        return attrs


class CommentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BlogComment.STATUS_CHOICES)
