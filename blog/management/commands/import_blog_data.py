"""Import a blog export file.

The export is a JSON object with ``authors``, ``categories``, ``posts`` and
``comments`` lists. Authors are matched by email and categories/posts by slug,
so running the import twice creates nothing new.

Usage:
  python manage.py import_blog_data exports/blog-export-2025-10-01.json
"""

from __future__ import annotations

import json
from pathlib import Path

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError, transaction
from django.utils.dateparse import parse_datetime
from django.utils.text import slugify

from blog.models import BlogCategory, BlogComment, BlogPost

SECTIONS = ('authors', 'categories', 'posts', 'comments')


def _new_stats() -> dict[str, dict[str, int]]:
    return {name: {'created': 0, 'skipped': 0, 'errors': 0} for name in SECTIONS}


def _unique_username(User, email: str) -> str:
    base = slugify(email.split('@')[0]) or 'author'
    username = base
    n = 2
    while User.objects.filter(username=username).exists():
        username = f'{base}{n}'
        n += 1
    return username


class Command(BaseCommand):
    help = 'Import blog authors, categories, posts and comments from a JSON export.'

    def add_arguments(self, parser):
        parser.add_argument('export_file', type=str, help='Path to the blog export JSON file.')

    def handle(self, *args, **options):
        path = Path(options['export_file'])
        if not path.exists():
            raise CommandError(f'Export file not found: {path}')
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except json.JSONDecodeError as exc:
            raise CommandError(f'Invalid export file: {exc}') from exc

        stats = _new_stats()
        author_ids = self._import_authors(data.get('authors') or [], stats)
        category_ids = self._import_categories(data.get('categories') or [], stats)
        post_ids = self._import_posts(data.get('posts') or [], author_ids, category_ids, stats)
        self._import_comments(data.get('comments') or [], author_ids, post_ids, stats)

        self.stdout.write(self.style.SUCCESS('Blog data import completed.'))
        for name in SECTIONS:
            s = stats[name]
            self.stdout.write(f"  {name.title()}: {s['created']} created, {s['skipped']} skipped, {s['errors']} errors")

    # 1. الكتّاب
    def _import_authors(self, authors, stats):
        User = get_user_model()
        ids = {}
        for author in authors:
            email = (author.get('email') or '').strip().lower()
            if not email:
                stats['authors']['errors'] += 1
                continue
            existing = User.objects.filter(email__iexact=email).first()
            if existing:
                ids[author.get('id')] = existing.id
                stats['authors']['skipped'] += 1
                continue
            try:
                with transaction.atomic():
                    user = User.objects.create_user(
                        username=_unique_username(User, email),
                        email=email,
                        name=author.get('name') or email,
                        role=author.get('role') or 'admin',
                    )
            except DatabaseError as exc:
                stats['authors']['errors'] += 1
                self.stderr.write(f"Author {email}: {exc}")
                continue
            ids[author.get('id')] = user.id
            stats['authors']['created'] += 1
        return ids

    # 2. التصنيفات
    def _import_categories(self, categories, stats):
        ids = {}
        for category in categories:
            slug = category.get('slug')
            existing = BlogCategory.objects.filter(slug=slug).first() if slug else None
            if existing:
                ids[category.get('id')] = existing.id
                stats['categories']['skipped'] += 1
                continue
            try:
                with transaction.atomic():
                    obj = BlogCategory.objects.create(
                        name=category['name'],
                        slug=slug or '',
                        description=category.get('description') or '',
                        image=category.get('image') or '',
                        parent_id=ids.get(category.get('parentId')),
                        order=category.get('order') or 0,
                    )
            except (KeyError, DatabaseError) as exc:
                stats['categories']['errors'] += 1
                self.stderr.write(f"Category {slug}: {exc}")
                continue
            ids[category.get('id')] = obj.id
            stats['categories']['created'] += 1
        return ids

    # 3. المقالات
    def _import_posts(self, posts, author_ids, category_ids, stats):
        ids = {}
        for post in posts:
            slug = post.get('slug')
            existing = BlogPost.objects.filter(slug=slug).first() if slug else None
            if existing:
                ids[post.get('id')] = existing.id
                stats['posts']['skipped'] += 1
                continue
            status = post.get('status') or (BlogPost.STATUS_PUBLISHED if post.get('published') else BlogPost.STATUS_DRAFT)
            try:
                with transaction.atomic():
                    obj = BlogPost.objects.create(
                        title=post['title'],
                        slug=slug or '',
                        excerpt=post.get('excerpt') or '',
                        content=post.get('content') or '',
                        status=status,
                        featured_image=post.get('featuredImage') or '',
                        author_id=author_ids.get(post.get('authorId')),
                        category_id=category_ids.get(post.get('categoryId')),
                        tags=post.get('tags') or [],
                        meta_title=post.get('metaTitle') or '',
                        meta_description=post.get('metaDescription') or '',
                        meta_keywords=post.get('metaKeywords') or '',
                        views=post.get('views') or 0,
                        published_at=parse_datetime(post['publishedAt']) if post.get('publishedAt') else None,
                    )
            except (KeyError, DatabaseError) as exc:
                stats['posts']['errors'] += 1
                self.stderr.write(f"Post {slug}: {exc}")
                continue
            ids[post.get('id')] = obj.id
            stats['posts']['created'] += 1
        return ids

    # 4. التعليقات
    def _import_comments(self, comments, author_ids, post_ids, stats):
        for comment in comments:
            post_id = post_ids.get(comment.get('postId'))
            if not post_id:
                stats['comments']['errors'] += 1
                continue
            fields = dict(
                post_id=post_id,
                author_name=comment.get('authorName') or '',
                content=comment.get('content') or '',
            )
            if BlogComment.objects.filter(**fields).exists():
                stats['comments']['skipped'] += 1
                continue
            try:
                with transaction.atomic():
                    BlogComment.objects.create(
                        user_id=author_ids.get(comment.get('userId')),
                        author_email=comment.get('authorEmail') or '',
                        status=comment.get('status') or BlogComment.STATUS_PENDING,
                        **fields,
                    )
            except DatabaseError as exc:
                stats['comments']['errors'] += 1
                self.stderr.write(f"Comment {comment.get('id')}: {exc}")
                continue
            stats['comments']['created'] += 1
