"""Projects app tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import CompanyProfile
from projects.models import Project
from projects.recommendations import jaccard_similarity, trending_projects


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ProjectApiTests(TestCase):
	"""Project CRUD permissions and listing."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(
			username='owner_one', email='owner@example.com', password='12345678', role='entrepreneur', name='Owner',
		)
		cls.other = User.objects.create_user(
			username='owner_two', email='other@example.com', password='12345678', role='entrepreneur', name='Other',
		)
		cls.company = User.objects.create_user(
			username='studio', email='studio@example.com', password='12345678', role='company', name='Studio',
		)
		cls.project = Project.objects.create(
			owner=cls.owner, title='متجر إلكتروني', description='متجر', budget='5000 - 10000 ريال',
			duration='3 أشهر', skills=['React', 'Node.js'],
		)

	def _payload(self):
		return {
			'title': 'تطبيق توصيل',
			'description': 'تطبيق لتوصيل الطلبات',
			'budget': '20000 ريال',
			'duration': 'شهرين',
			'skills': ['Flutter', 'Firebase'],
		}

	def test_public_list_includes_owner_fields(self):
		res = APIClient().get('/api/projects/')
		self.assertEqual(res.status_code, 200)
		row = res.data['results'][0]
		self.assertEqual(row['username'], 'owner_one')
		self.assertEqual(row['name'], 'Owner')

	def test_entrepreneur_creates_open_project(self):
		client = APIClient()
		client.force_authenticate(user=self.owner)
		res = client.post('/api/projects/', data=self._payload(), format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['status'], 'open')
		self.assertEqual(res.data['owner'], self.owner.id)

	def test_company_cannot_create_project(self):
		client = APIClient()
		client.force_authenticate(user=self.company)
		res = client.post('/api/projects/', data=self._payload(), format='json')
		self.assertEqual(res.status_code, 403)
		self.assertEqual(res.data['message'], 'Only entrepreneurs can create projects')

	def test_only_owner_can_update(self):
		client = APIClient()
		client.force_authenticate(user=self.other)
		res = client.patch(f'/api/projects/{self.project.id}/', data={'title': 'تعديل'}, format='json')
		self.assertEqual(res.status_code, 403)

		client.force_authenticate(user=self.owner)
		res = client.patch(f'/api/projects/{self.project.id}/', data={'title': 'متجر محدث'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['title'], 'متجر محدث')

	def test_status_cannot_be_set_by_owner_payload(self):
		client = APIClient()
		client.force_authenticate(user=self.owner)
		client.patch(f'/api/projects/{self.project.id}/', data={'status': 'completed'}, format='json')
		self.project.refresh_from_db()
		self.assertEqual(self.project.status, 'open')

	def test_user_projects_endpoint(self):
		res = APIClient().get(f'/api/users/{self.owner.id}/projects')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([p['id'] for p in res.data], [self.project.id])

	def test_attachments_require_all_fields(self):
		client = APIClient()
		client.force_authenticate(user=self.owner)
		payload = self._payload()
		payload['attachments'] = [{'id': 'a1', 'name': 'brief.pdf'}]
		res = client.post('/api/projects/', data=payload, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('attachments', res.data['errors'])


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class RecommendationTests(TestCase):
	"""Skill matching and ordering of recommendations."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		owner = User.objects.create_user(
			username='owner_one', email='owner@example.com', password='12345678', role='entrepreneur', name='Owner',
		)
		cls.web = Project.objects.create(
			owner=owner, title='Web', description='d', budget='1', duration='1',
			skills=['React', 'Django'], highlight_status='جديد',
		)
		cls.mobile = Project.objects.create(
			owner=owner, title='Mobile', description='d', budget='1', duration='1',
			skills=['Flutter'], highlight_status='عالي الطلب',
		)
		cls.mixed = Project.objects.create(
			owner=owner, title='Mixed', description='d', budget='1', duration='1',
			skills=['react', 'Flutter'],
		)

		web_user = User.objects.create_user(
			username='webco', email='webco@example.com', password='12345678', role='company', name='WebCo',
		)
		app_user = User.objects.create_user(
			username='appco', email='appco@example.com', password='12345678', role='company', name='AppCo',
		)
		cls.web_company = CompanyProfile.objects.create(
			user=web_user, description='web', skills=[' React ', 'Django'], rating=3,
		)
		cls.app_company = CompanyProfile.objects.create(
			user=app_user, description='apps', skills=['Flutter'], rating=5,
		)

	def test_jaccard_similarity(self):
		self.assertEqual(jaccard_similarity(['React', 'Django'], ['react ', 'DJANGO']), 1.0)
		self.assertAlmostEqual(jaccard_similarity(['React', 'Vue'], ['React', 'Angular']), 1 / 3)
		self.assertEqual(jaccard_similarity([], []), 0.0)
		self.assertEqual(jaccard_similarity(None, ['React']), 0.0)

	def test_projects_for_company_sorted_by_score(self):
		res = APIClient().get(f'/api/recommendations/companies/{self.web_company.id}/projects')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data[0]['project']['id'], self.web.id)
		self.assertEqual(res.data[0]['matchScore'], 1.0)
		scores = [row['matchScore'] for row in res.data]
		self.assertEqual(scores, sorted(scores, reverse=True))

	def test_unknown_company_returns_empty_list(self):
		res = APIClient().get('/api/recommendations/companies/99999/projects')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data, [])

	def test_companies_for_project_blends_rating(self):
		res = APIClient().get(f'/api/recommendations/projects/{self.mobile.id}/companies')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data[0]['company']['id'], self.app_company.id)
		self.assertAlmostEqual(res.data[0]['matchScore'], 1.0)
		self.assertAlmostEqual(res.data[1]['matchScore'], 0.3 * 3 / 5)

	def test_similar_projects_excludes_self_and_honours_limit(self):
		res = APIClient().get(f'/api/recommendations/projects/{self.mobile.id}/similar?limit=1')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(len(res.data), 1)
		self.assertEqual(res.data[0]['project']['id'], self.mixed.id)
		self.assertEqual(res.data[0]['similarityScore'], 0.5)

	def test_trending_prefers_high_demand_then_new(self):
		trending = trending_projects(limit=3)
		self.assertEqual([p.id for p in trending], [self.mobile.id, self.web.id, self.mixed.id])

		res = APIClient().get('/api/recommendations/trending-projects?limit=2')
		self.assertEqual([p['id'] for p in res.data], [self.mobile.id, self.web.id])
