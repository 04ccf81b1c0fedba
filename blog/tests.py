"""Blog app tests."""

import json
import tempfile
from io import StringIO
from pathlib import Path

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from blog.models import BlogCategory, BlogComment, BlogPost


class BlogTestMixin:

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			username='editor', email='editor@linktech.app', password='12345678', role='admin', name='Editor',
		)
		cls.reader = User.objects.create_user(
			username='reader', email='reader@example.com', password='12345678', role='entrepreneur', name='Reader',
		)
		cls.category = BlogCategory.objects.create(name='تقنية', slug='tech')
		cls.published = BlogPost.objects.create(
			author=cls.admin, category=cls.category, title='كيف تختار شركة برمجة',
			slug='choose-dev-company', content='...', status=BlogPost.STATUS_PUBLISHED,
		)
		cls.draft = BlogPost.objects.create(
			author=cls.admin, title='مسودة', slug='draft-post', content='...',
		)

	def admin_client(self):
		client = APIClient()
		client.force_authenticate(user=self.admin)
		return client


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class BlogPostTests(BlogTestMixin, TestCase):

	def test_public_list_shows_published_only(self):
		res = APIClient().get('/api/blog/posts/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([p['slug'] for p in res.data['results']], ['choose-dev-company'])

	def test_filter_by_category_slug(self):
		res = APIClient().get('/api/blog/posts/?category__slug=other')
		self.assertEqual(res.data['count'], 0)

	def test_admin_all_lists_every_status(self):
		self.assertEqual(APIClient().get('/api/blog/posts/all/').status_code, 401)
		res = self.admin_client().get('/api/blog/posts/all/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 2)

	def test_retrieve_counts_views(self):
		client = APIClient()
		client.get('/api/blog/posts/choose-dev-company/')
		res = client.get('/api/blog/posts/choose-dev-company/')
		self.assertEqual(res.data['views'], 2)

	def test_draft_hidden_from_public(self):
		self.assertEqual(APIClient().get('/api/blog/posts/draft-post/').status_code, 404)

	def test_create_post_with_valid_slug_is_retrievable(self):
		payload = {
			'title': 'دليل الدفع الإلكتروني', 'slug': 'payments-guide', 'content': 'محتوى',
			'status': 'published', 'category': self.category.id, 'tags': ['دفع', 'Moyasar'],
		}
		res = self.admin_client().post('/api/blog/posts/', data=payload, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['author'], self.admin.id)
		self.assertIsNotNone(res.data['published_at'])

		res = APIClient().get('/api/blog/posts/payments-guide/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['title'], 'دليل الدفع الإلكتروني')

	def test_duplicate_slug_rejected(self):
		payload = {'title': 'x', 'slug': 'choose-dev-company', 'content': 'x'}
		res = self.admin_client().post('/api/blog/posts/', data=payload, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('slug', res.data['errors'])

	def test_slug_derived_from_title(self):
		res = self.admin_client().post('/api/blog/posts/', data={'title': 'Draft Post', 'content': 'x'}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['slug'], 'draft-post-2')

	def test_non_admin_cannot_create(self):
		client = APIClient()
		client.force_authenticate(user=self.reader)
		res = client.post('/api/blog/posts/', data={'title': 'x', 'content': 'x'}, format='json')
		self.assertEqual(res.status_code, 403)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class BlogCategoryAndCommentTests(BlogTestMixin, TestCase):

	def test_categories_public_and_slug_lookup(self):
		res = APIClient().get('/api/blog/categories/tech/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['post_count'], 1)

	def test_category_slug_auto_generated(self):
		res = self.admin_client().post('/api/blog/categories/', data={'name': 'Mobile Apps'}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['slug'], 'mobile-apps')

	def test_comment_moderation_flow(self):
		res = APIClient().post(
			'/api/blog/posts/choose-dev-company/comments/',
			data={'author_name': 'زائر', 'content': 'مقال مفيد'}, format='json',
		)
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['status'], 'pending')
		comment_id = res.data['id']

		self.assertEqual(APIClient().get('/api/blog/posts/choose-dev-company/comments/').data, [])

		res = self.admin_client().patch(f'/api/blog/comments/{comment_id}/', data={'status': 'approved'}, format='json')
		self.assertEqual(res.status_code, 200)

		res = APIClient().get('/api/blog/posts/choose-dev-company/comments/')
		self.assertEqual([c['content'] for c in res.data], ['مقال مفيد'])

	def test_anonymous_comment_needs_name(self):
		res = APIClient().post('/api/blog/posts/choose-dev-company/comments/', data={'content': 'x'}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_invalid_moderation_status(self):
		comment = BlogComment.objects.create(post=self.published, author_name='a', content='b')
		res = self.admin_client().patch(f'/api/blog/comments/{comment.id}/', data={'status': 'weird'}, format='json')
		self.assertEqual(res.status_code, 400)


class ImportBlogDataTests(TestCase):

	def _write_export(self, data):
		tmp = tempfile.NamedTemporaryFile('w', suffix='.json', delete=False, encoding='utf-8')
		with tmp:
			json.dump(data, tmp, ensure_ascii=False)
		self.addCleanup(Path(tmp.name).unlink)
		return tmp.name

	def test_import_is_idempotent(self):
		export = {
			'authors': [{'id': 9, 'name': 'Writer', 'email': 'writer@linktech.app', 'role': 'admin'}],
			'categories': [{'id': 3, 'name': 'تقنية', 'slug': 'tech', 'order': 1}],
			'posts': [{
				'id': 11, 'title': 'Hello', 'slug': 'hello', 'content': 'c', 'status': 'published',
				'authorId': 9, 'categoryId': 3, 'tags': ['a'], 'publishedAt': '2025-09-01T10:00:00Z',
			}],
			'comments': [
				{'id': 1, 'postId': 11, 'authorName': 'Reader', 'content': 'Nice', 'status': 'approved'},
				{'id': 2, 'postId': 999, 'authorName': 'Lost', 'content': 'x'},
			],
		}
		path = self._write_export(export)

		out = StringIO()
		call_command('import_blog_data', path, stdout=out, stderr=StringIO())
		self.assertIn('Posts: 1 created, 0 skipped, 0 errors', out.getvalue())
		self.assertIn('Comments: 1 created, 0 skipped, 1 errors', out.getvalue())

		post = BlogPost.objects.get(slug='hello')
		self.assertEqual(post.author.email, 'writer@linktech.app')
		self.assertEqual(post.category.slug, 'tech')

		out = StringIO()
		call_command('import_blog_data', path, stdout=out, stderr=StringIO())
		self.assertIn('Posts: 0 created, 1 skipped, 0 errors', out.getvalue())
		self.assertEqual(BlogComment.objects.count(), 1)
