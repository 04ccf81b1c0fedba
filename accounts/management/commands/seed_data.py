"""Seed demo data for the marketplace.

Creates:
- An admin user
- Entrepreneurs (a fixed pair plus ``--entrepreneurs`` generated ones)
- Companies + CompanyProfile
- Open projects
- Testimonials
- The featured Saudi clients shown on the home page

The command is idempotent: it does nothing when any non-superuser account
already exists, unless ``--force`` is given. Featured clients are only
seeded when the table is empty.

Usage:
  python manage.py seed_data
  python manage.py seed_data --entrepreneurs 5 --seed 42
  python manage.py seed_data --force
"""

from __future__ import annotations

import random
from datetime import timedelta

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from accounts.models import CompanyProfile, User
from cms.models import FeaturedClient, Testimonial
from projects.models import Project

DEMO_PASSWORD = 'Password123!'

ENTREPRENEURS = [
    {'username': 'ahmed_entrepreneur', 'email': 'ahmed@example.com', 'name': 'أحمد السيد',
     'avatar': 'https://randomuser.me/api/portraits/men/1.jpg'},
    {'username': 'sara_entrepreneur', 'email': 'sara@example.com', 'name': 'سارة العمري',
     'avatar': 'https://randomuser.me/api/portraits/women/5.jpg'},
]

COMPANIES = [
    {
        'username': 'tech_solutions', 'email': 'tech@example.com', 'name': 'تك سوليوشنز',
        'avatar': 'https://randomuser.me/api/portraits/men/2.jpg',
        'profile': {
            'description': 'متخصصون في تطوير تطبيقات الجوال والويب للشركات والمؤسسات، مع خبرة تزيد عن 8 سنوات في مجال البرمجة.',
            'cover_photo': 'https://images.unsplash.com/photo-1560179707-f14e90ef3623',
            'website': 'https://techsolutions.example.com',
            'location': 'الرياض، المملكة العربية السعودية',
            'skills': ['تطبيقات الويب', 'تطبيقات الجوال', 'الذكاء الاصطناعي'],
            'rating': 5, 'review_count': 48,
        },
    },
    {
        'username': 'digital_hub', 'email': 'digital@example.com', 'name': 'ديجيتال هب',
        'avatar': 'https://randomuser.me/api/portraits/women/3.jpg',
        'profile': {
            'description': 'شركة رائدة في مجال التحول الرقمي وتطوير الحلول المتكاملة للشركات الناشئة والمؤسسات الكبيرة.',
            'cover_photo': 'https://images.unsplash.com/photo-1522071820081-009f0129c71c',
            'website': 'https://digitalhub.example.com',
            'location': 'جدة، المملكة العربية السعودية',
            'skills': ['التحول الرقمي', 'تجارة إلكترونية', 'برمجة خلفية'],
            'rating': 5, 'review_count': 62,
        },
    },
    {
        'username': 'smart_code', 'email': 'smart@example.com', 'name': 'سمارت كود',
        'avatar': 'https://randomuser.me/api/portraits/men/4.jpg',
        'profile': {
            'description': 'متخصصون في تطوير واجهات المستخدم وتجربة المستخدم، مع تركيز على تصميم تطبيقات سهلة الاستخدام.',
            'cover_photo': 'https://images.unsplash.com/photo-1556761175-4b46a572b786',
            'website': 'https://smartcode.example.com',
            'location': 'الدمام، المملكة العربية السعودية',
            'skills': ['تصميم UI/UX', 'تطوير واجهات', 'مواقع تفاعلية'],
            'rating': 4, 'review_count': 27,
        },
    },
]

# (owner username, days ago, fields)
PROJECTS = [
    ('ahmed_entrepreneur', 5, {
        'title': 'تطبيق توصيل طلبات للمطاعم',
        'description': 'نبحث عن شركة برمجة متخصصة لتطوير تطبيق جوّال لتوصيل الطعام من المطاعم المحلية، مع لوحة تحكم للمطاعم ونظام تتبع للسائقين.',
        'budget': '50,000 - 80,000 ريال', 'duration': '3-6 أشهر',
        'skills': ['تطبيق جوال', 'iOS', 'Android', 'لوحة تحكم'],
        'highlight_status': Project.HIGHLIGHT_HIGH_DEMAND,
    }),
    ('sara_entrepreneur', 2, {
        'title': 'منصة تعليمية تفاعلية',
        'description': 'تطوير منصة تعليمية على الويب تدعم الدورات التفاعلية، والاختبارات، ومنتدى للطلاب. يجب أن تكون متوافقة مع الأجهزة المختلفة.',
        'budget': '70,000 - 120,000 ريال', 'duration': '4-8 أشهر',
        'skills': ['تطوير ويب', 'تصميم UI/UX', 'React', 'Node.js'],
        'highlight_status': Project.HIGHLIGHT_NEW,
    }),
    ('ahmed_entrepreneur', 10, {
        'title': 'نظام إدارة عقارات',
        'description': 'نظام متكامل لإدارة العقارات يشمل إدارة الممتلكات، والإيجارات، والصيانة، والفواتير، مع تطبيق جوال للمستأجرين والملاك.',
        'budget': '100,000 - 150,000 ريال', 'duration': '6-10 أشهر',
        'skills': ['نظام إدارة', 'تطبيق ويب', 'تطبيق جوال', 'API'],
        'highlight_status': '',
    }),
]

TESTIMONIALS = [
    ('ahmed_entrepreneur', {
        'content': 'وجدت الشريك المثالي لتنفيذ مشروعي من خلال المنصة. تواصلت مع عدة شركات مميزة واخترت الأنسب. التطبيق الآن يعمل بكفاءة عالية ولدينا أكثر من 10,000 مستخدم نشط.',
        'user_title': 'مؤسس تطبيق "طلباتي"', 'rating': 5,
    }),
    ('digital_hub', {
        'content': 'المنصة ساعدتنا في الوصول لعملاء جدد وتنفيذ مشاريع متنوعة. نظام التواصل سهل وفعال، والدعم الفني ممتاز.',
        'company_name': 'شركة ديجيتال هب', 'user_title': 'مديرة تطوير الأعمال', 'rating': 5,
    }),
]

FEATURED_CLIENTS = [
    {'name': 'أرامكو السعودية', 'logo': 'https://logos-world.net/wp-content/uploads/2020/12/Aramco-Logo.png',
     'website': 'https://www.aramco.com', 'description': 'أكبر شركة للنفط في العالم', 'category': 'النفط والغاز'},
    {'name': 'البنك الأهلي السعودي',
     'logo': 'https://upload.wikimedia.org/wikipedia/commons/thumb/2/2e/National_Commercial_Bank_%28logo%29.svg/1200px-National_Commercial_Bank_%28logo%29.svg.png',
     'website': 'https://www.alahli.com', 'description': 'أحد أكبر البنوك في المملكة العربية السعودية',
     'category': 'البنوك والمصارف'},
    {'name': 'السعودية للكهرباء',
     'logo': 'https://upload.wikimedia.org/wikipedia/commons/thumb/0/05/Saudi_Electricity_Company_logo.svg/1200px-Saudi_Electricity_Company_logo.svg.png',
     'website': 'https://www.se.com.sa', 'description': 'الشركة الرائدة في مجال الكهرباء في المملكة',
     'category': 'الكهرباء والطاقة'},
    {'name': 'الاتصالات السعودية',
     'logo': 'https://upload.wikimedia.org/wikipedia/commons/thumb/8/84/STC_logo.svg/1200px-STC_logo.svg.png',
     'website': 'https://www.stc.com.sa', 'description': 'الشركة الرائدة في مجال الاتصالات في المملكة',
     'category': 'الاتصالات والتقنية'},
    {'name': 'مجموعة صافولا',
     'logo': 'https://upload.wikimedia.org/wikipedia/commons/thumb/a/a9/Savola_Group_logo.svg/1200px-Savola_Group_logo.svg.png',
     'website': 'https://www.savola.com', 'description': 'مجموعة رائدة في مجال الأغذية والاستثمار',
     'category': 'الأغذية والاستثمار'},
    {'name': 'مجموعة المعجل', 'logo': 'https://almajal.com.sa/wp-content/uploads/2021/03/logo-almajal.png',
     'website': 'https://almajal.com.sa', 'description': 'مجموعة رائدة في مجال التجارة والخدمات',
     'category': 'التجارة والخدمات'},
]


class Command(BaseCommand):
    help = 'Seed the database with demo users, companies, projects and site content.'

    def add_arguments(self, parser):
        parser.add_argument('--entrepreneurs', type=int, default=3, help='Extra generated entrepreneurs.')
        parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible data.')
        parser.add_argument('--force', action='store_true', help='Seed even when users already exist.')

    def handle(self, *args, **options):
        if options['seed'] is not None:
            random.seed(options['seed'])
            Faker.seed(options['seed'])
        fake = Faker('ar_SA')

        if not options['force'] and User.objects.filter(is_superuser=False).exists():
            self.stdout.write(self.style.WARNING('Database already has users, skipping seed (use --force to override).'))
            self._seed_featured_clients()
            return

        self.stdout.write(self.style.NOTICE('--- Seeding database ---'))
        # Precompute once to avoid hashing per user.
        password_hash = make_password(DEMO_PASSWORD)

        with transaction.atomic():
            users = self._seed_users(password_hash)
            users.update(self._seed_generated_entrepreneurs(fake, options['entrepreneurs'], password_hash))
            self._seed_projects(users)
            self._seed_testimonials(users)
        self._seed_featured_clients()

        self.stdout.write(self.style.NOTICE('Seeded login credentials (local-dev):'))
        self.stdout.write(self.style.NOTICE(f'- Demo users: {", ".join(sorted(users))} | password={DEMO_PASSWORD}'))
        self.stdout.write(self.style.SUCCESS('Seeding completed successfully.'))

    # 1. المستخدمون والشركات
    def _seed_users(self, password_hash):
        users = {}
        admin, created = User.objects.get_or_create(
            username='admin',
            defaults={
                'email': 'admin@linktech.app', 'name': 'مسؤول النظام', 'role': User.ROLE_ADMIN,
                'password': password_hash, 'is_staff': True,
            },
        )
        if created:
            users[admin.username] = admin

        for data in ENTREPRENEURS:
            user, created = User.objects.get_or_create(
                username=data['username'],
                defaults={**data, 'role': User.ROLE_ENTREPRENEUR, 'password': password_hash},
            )
            users[user.username] = user

        for data in COMPANIES:
            fields = {k: v for k, v in data.items() if k != 'profile'}
            user, _ = User.objects.get_or_create(
                username=data['username'],
                defaults={**fields, 'role': User.ROLE_COMPANY, 'password': password_hash},
            )
            CompanyProfile.objects.get_or_create(
                user=user,
                defaults={**data['profile'], 'logo': data['avatar'], 'verified': True},
            )
            users[user.username] = user

        self.stdout.write(f'Users ready: {len(users)}')
        return users

    def _seed_generated_entrepreneurs(self, fake, count, password_hash):
        users = {}
        for i in range(1, max(count, 0) + 1):
            username = f'entrepreneur{i}'
            user, _ = User.objects.get_or_create(
                username=username,
                defaults={
                    'email': f'{username}@example.com',
                    'name': fake.name(),
                    'role': User.ROLE_ENTREPRENEUR,
                    'phone_number': f'+9665{random.randint(10000000, 99999999)}',
                    'password': password_hash,
                },
            )
            users[username] = user
        return users

    # 2. المشاريع
    def _seed_projects(self, users):
        now = timezone.now()
        created = 0
        for owner, days_ago, fields in PROJECTS:
            project, was_created = Project.objects.get_or_create(
                owner=users[owner], title=fields['title'], defaults=fields,
            )
            if was_created:
                # created_at is auto_now_add, so backdate with an update
                Project.objects.filter(pk=project.pk).update(created_at=now - timedelta(days=days_ago))
                created += 1
        self.stdout.write(f'Projects created: {created}')

    # 3. آراء المستخدمين
    def _seed_testimonials(self, users):
        created = 0
        for username, fields in TESTIMONIALS:
            user = users[username]
            _, was_created = Testimonial.objects.get_or_create(
                user=user, content=fields['content'],
                defaults={**fields, 'role': user.role, 'avatar': user.avatar or None},
            )
            created += int(was_created)
        self.stdout.write(f'Testimonials created: {created}')

    # 4. العملاء المميزون
    def _seed_featured_clients(self):
        if FeaturedClient.objects.exists():
            self.stdout.write('Featured clients already exist, skipping.')
            return
        FeaturedClient.objects.bulk_create(
            FeaturedClient(order=i, active=True, **client) for i, client in enumerate(FEATURED_CLIENTS, start=1)
        )
        self.stdout.write(f'Featured clients created: {len(FEATURED_CLIENTS)}')
